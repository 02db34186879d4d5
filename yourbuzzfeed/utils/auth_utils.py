"""
Password hashing helpers.

Hashes are scrypt-derived keys stored as ``hex(key) + "." + salt`` where the salt
is 16 random bytes rendered as hex; the same layout older accounts were stored in.
"""
import binascii
import hashlib
import hmac
import secrets

SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
KEY_LENGTH = 64
SALT_BYTES = 16


def _derive(password, salt):
    return hashlib.scrypt(
        password.encode('utf-8'),
        salt=salt.encode('utf-8'),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=KEY_LENGTH,
    )


def hash_password(password):
    salt = secrets.token_hex(SALT_BYTES)
    return f"{_derive(password, salt).hex()}.{salt}"


def verify_password(supplied, stored):
    """Check ``supplied`` against a stored hash; malformed hashes never verify."""
    if not isinstance(stored, str) or '.' not in stored:
        return False
    hashed, salt = stored.split('.', 1)
    if not hashed or not salt:
        return False
    try:
        expected = binascii.unhexlify(hashed)
    except (binascii.Error, ValueError):
        return False
    if len(expected) != KEY_LENGTH:
        return False
    return hmac.compare_digest(_derive(supplied, salt), expected)
