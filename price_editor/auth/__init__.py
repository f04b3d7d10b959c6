"""
Authentication module.
"""

from price_editor.auth.password import hash_password, verify_password
from price_editor.auth.session import SessionManager, SESSION_COOKIE_NAME

__all__ = [
    "hash_password",
    "verify_password",
    "SessionManager",
    "SESSION_COOKIE_NAME",
]
