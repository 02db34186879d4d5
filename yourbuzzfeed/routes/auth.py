"""
Authentication endpoints.

- POST /api/login, POST /api/logout, GET /api/user (session based, Flask-Login)
- GET /api/admin-setup and GET /api/emergency-admin: unauthenticated admin recovery,
  only routed when ENABLE_ADMIN_RECOVERY is on; 404 otherwise.
"""
from flask import Blueprint, jsonify, current_app, session
from flask_login import login_user, logout_user, current_user

from yourbuzzfeed import limiter
from yourbuzzfeed.storage import storage
from yourbuzzfeed.utils.auth_utils import verify_password
from yourbuzzfeed.utils.errors import NotFoundError, UnauthorizedError
from yourbuzzfeed.utils.init_db import ensure_admin_user, DEFAULT_ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD
from yourbuzzfeed.utils.validation import get_json_body, raise_for_body, LOGIN_SCHEMA

auth_bp = Blueprint('auth', __name__)

INVALID_CREDENTIALS = "Invalid username or password"


def _login_rate_limit():
    return current_app.config.get('LOGIN_RATE_LIMIT', '10 per minute')


@auth_bp.route('/login', methods=['POST'])
@limiter.limit(_login_rate_limit)
def login():
    body = get_json_body()
    raise_for_body(body, LOGIN_SCHEMA, message="Username and password are required")

    user = storage.get_user_by_username(body['username'])
    # Same answer for unknown user and wrong password
    if user is None or not verify_password(body['password'], user.password):
        current_app.logger.warning(f"Failed login attempt for username '{body['username']}'")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    # Fresh token and lifetime on every login
    session.regenerate()
    login_user(user)
    current_app.logger.info(f"User {user.username} logged in")
    return jsonify(user.to_dict()), 200


@auth_bp.route('/logout', methods=['POST'])
def logout():
    if current_user.is_authenticated:
        current_app.logger.info(f"User {current_user.username} logged out")
    logout_user()
    session.clear()
    return jsonify({'success': True})


@auth_bp.route('/user', methods=['GET'])
def get_current_user():
    if not current_user.is_authenticated:
        raise UnauthorizedError("Not authenticated")
    return jsonify(current_user.to_dict())


def _require_recovery_enabled():
    if not current_app.config.get('ENABLE_ADMIN_RECOVERY'):
        raise NotFoundError()


@auth_bp.route('/admin-setup', methods=['GET'])
def admin_setup():
    _require_recovery_enabled()
    user, created = ensure_admin_user()
    current_app.logger.warning(f"Admin recovery: admin user {'created' if created else 'password reset'} via /api/admin-setup")
    return jsonify({
        'message': "Admin user created successfully" if created else "Admin user password reset successfully",
        'username': user.username,
        'password': DEFAULT_ADMIN_PASSWORD,
    })


@auth_bp.route('/emergency-admin', methods=['GET'])
def emergency_admin():
    _require_recovery_enabled()
    admin = storage.get_user_by_username(DEFAULT_ADMIN_USERNAME)
    if admin is None:
        raise NotFoundError("Admin user not found")
    current_app.logger.warning("Admin recovery: admin profile served via /api/emergency-admin")
    return jsonify({'user': admin.to_dict()})
