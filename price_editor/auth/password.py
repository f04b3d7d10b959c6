"""
Admin password hashing.
"""

from passlib.hash import bcrypt


def hash_password(password: str) -> str:
    """Return a bcrypt hash suitable for ADMIN_PASSWORD_HASH."""
    return bcrypt.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a bcrypt hash. Malformed hashes never match."""
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        return False
