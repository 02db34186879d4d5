"""
Server-side sessions.

The browser only holds an opaque, signed session token; the session payload lives in
a SessionRepository (in-process memory or Redis). Sessions expire a fixed
SESSION_LIFETIME_SECONDS after they are created and are not extended by activity.
Expired records are swept lazily, at most once per SESSION_SWEEP_INTERVAL_SECONDS.
"""
import json
import logging
import math
import secrets
import threading
import time
from collections import namedtuple
from datetime import datetime, timezone

import redis
from flask.sessions import SessionInterface, SessionMixin
from itsdangerous import BadSignature, Signer
from werkzeug.datastructures import CallbackDict

logger = logging.getLogger(__name__)

SessionRecord = namedtuple('SessionRecord', ['data', 'expires_at'])


class SessionRepository:
    """Storage contract for session payloads keyed by session id."""

    def get(self, sid):
        """Return a SessionRecord or None."""
        raise NotImplementedError

    def save(self, sid, data, expires_at):
        raise NotImplementedError

    def delete(self, sid):
        raise NotImplementedError

    def sweep_expired(self, now):
        """Remove records that expired at or before ``now``; return how many."""
        raise NotImplementedError


class MemorySessionRepository(SessionRepository):

    def __init__(self):
        self._records = {}
        self._lock = threading.Lock()

    def get(self, sid):
        with self._lock:
            record = self._records.get(sid)
        if record is None:
            return None
        return SessionRecord(dict(record.data), record.expires_at)

    def save(self, sid, data, expires_at):
        with self._lock:
            self._records[sid] = SessionRecord(dict(data), expires_at)

    def delete(self, sid):
        with self._lock:
            self._records.pop(sid, None)

    def sweep_expired(self, now):
        with self._lock:
            expired = [sid for sid, record in self._records.items() if record.expires_at <= now]
            for sid in expired:
                del self._records[sid]
        return len(expired)

    def __len__(self):
        with self._lock:
            return len(self._records)


class RedisSessionRepository(SessionRepository):
    """One key per session; Redis drops the key itself when its TTL runs out."""

    def __init__(self, client, key_prefix='session:'):
        self.client = client
        self.key_prefix = key_prefix

    def _key(self, sid):
        return f"{self.key_prefix}{sid}"

    def get(self, sid):
        raw = self.client.get(self._key(sid))
        if raw is None:
            return None
        payload = json.loads(raw)
        return SessionRecord(payload['data'], payload['expires_at'])

    def save(self, sid, data, expires_at):
        ttl = max(1, int(math.ceil(expires_at - time.time())))
        payload = json.dumps({'data': data, 'expires_at': expires_at})
        self.client.setex(self._key(sid), ttl, payload)

    def delete(self, sid):
        self.client.delete(self._key(sid))

    def sweep_expired(self, now):
        return 0


def build_session_repository(app):
    """Pick the repository for this app: an injected instance, Redis, or memory."""
    repository = app.config.get('SESSION_REPOSITORY')
    if repository is not None:
        return repository
    if app.config.get('SESSION_BACKEND') == 'redis':
        app.logger.info("Using Redis session repository")
        return RedisSessionRepository(redis.Redis.from_url(app.config['REDIS_URL']))
    return MemorySessionRepository()


class ServerSideSession(CallbackDict, SessionMixin):

    def __init__(self, initial=None, sid=None, expires_at=None):
        def on_update(self):
            self.modified = True

        CallbackDict.__init__(self, initial, on_update)
        self.sid = sid
        self.expires_at = expires_at
        self.new = sid is None
        self.modified = False
        self.previous_sid = None

    def regenerate(self):
        """Empty the session and have a new id and lifetime issued on save."""
        if self.sid is not None:
            self.previous_sid = self.sid
        self.sid = None
        self.expires_at = None
        self.new = True
        self.clear()
        self.modified = True


class ServerSideSessionInterface(SessionInterface):
    session_class = ServerSideSession
    signer_salt = 'yourbuzzfeed.session'

    def __init__(self, repository):
        self.repository = repository
        self._last_sweep = 0.0
        self._sweep_lock = threading.Lock()
        self.clock = time.time

    def _signer(self, app):
        if not app.secret_key:
            return None
        return Signer(app.secret_key, salt=self.signer_salt)

    def _maybe_sweep(self, app, now):
        interval = app.config.get('SESSION_SWEEP_INTERVAL_SECONDS', 24 * 60 * 60)
        with self._sweep_lock:
            if now - self._last_sweep < interval:
                return
            self._last_sweep = now
        removed = self.repository.sweep_expired(now)
        if removed:
            logger.info(f"Swept {removed} expired sessions")

    def open_session(self, app, request):
        signer = self._signer(app)
        if signer is None:
            return None

        now = self.clock()
        self._maybe_sweep(app, now)

        token = request.cookies.get(self.get_cookie_name(app))
        if not token:
            return self.session_class()
        try:
            sid = signer.unsign(token).decode('utf-8')
        except BadSignature:
            logger.warning("Rejected session cookie with a bad signature")
            return self.session_class()

        record = self.repository.get(sid)
        if record is None:
            return self.session_class()
        if record.expires_at <= now:
            self.repository.delete(sid)
            return self.session_class()
        return self.session_class(record.data, sid=sid, expires_at=record.expires_at)

    def save_session(self, app, session, response):
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)

        if session.accessed:
            response.vary.add('Cookie')

        if session.previous_sid is not None:
            self.repository.delete(session.previous_sid)
            session.previous_sid = None

        if not session:
            # Emptied session (logout): drop the record and the cookie
            if session.sid is not None and session.modified:
                self.repository.delete(session.sid)
                response.delete_cookie(name, domain=domain, path=path,
                                       secure=self.get_cookie_secure(app),
                                       samesite=self.get_cookie_samesite(app),
                                       httponly=self.get_cookie_httponly(app))
            return

        if not session.modified:
            return

        if session.sid is None:
            session.sid = secrets.token_urlsafe(32)
            session.expires_at = self.clock() + app.config.get('SESSION_LIFETIME_SECONDS', 24 * 60 * 60)

        self.repository.save(session.sid, dict(session), session.expires_at)
        token = self._signer(app).sign(session.sid.encode('utf-8')).decode('utf-8')
        response.set_cookie(
            name,
            token,
            expires=datetime.fromtimestamp(session.expires_at, tz=timezone.utc),
            httponly=self.get_cookie_httponly(app),
            domain=domain,
            path=path,
            secure=self.get_cookie_secure(app),
            samesite=self.get_cookie_samesite(app),
        )
