"""
Cookie-based session management for the admin API.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import Request, Response
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired


# Session duration: 8 hours (one working day of editing)
SESSION_MAX_AGE = 8 * 60 * 60  # seconds
SESSION_COOKIE_NAME = "price_editor_session"


class SessionManager:
    """Manages signed cookie-based sessions."""

    def __init__(self, secret_key: str, secure: bool = False):
        """
        Args:
            secret_key: Secret key for signing cookies
            secure: Only send the cookie over HTTPS
        """
        self._serializer = URLSafeTimedSerializer(secret_key, salt="price-editor")
        self._secure = secure

    def create_session(self, response: Response, user_id: str = "admin") -> None:
        """Sign a new session and attach it to the response."""
        token = self._serializer.dumps({
            "user_id": user_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
        })

        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=token,
            max_age=SESSION_MAX_AGE,
            httponly=True,
            samesite="lax",
            secure=self._secure,
        )

    def get_session(self, request: Request) -> Optional[dict]:
        """
        Get session data from request cookie.

        Returns:
            Session data dict or None if missing, tampered or expired
        """
        token = request.cookies.get(SESSION_COOKIE_NAME)
        if not token:
            return None

        try:
            return self._serializer.loads(token, max_age=SESSION_MAX_AGE)
        except (BadSignature, SignatureExpired):
            return None

    def clear_session(self, response: Response) -> None:
        response.delete_cookie(
            key=SESSION_COOKIE_NAME,
            httponly=True,
            samesite="lax",
        )

    def is_authenticated(self, request: Request) -> bool:
        return self.get_session(request) is not None
