"""
Authentication routes - login/logout for the admin API.
"""

import asyncio
import time
from collections import defaultdict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import settings
from ..dependencies import get_session_manager
from ..auth import SessionManager, verify_password

router = APIRouter(prefix="/api")

# Brute force protection: track failed login attempts by IP
failed_attempts = defaultdict(list)
LOCKOUT_THRESHOLD = 5  # Lock after 5 failed attempts
LOCKOUT_DURATION = 300  # 5 minutes in seconds


class LoginRequest(BaseModel):
    password: str


@router.post("/login")
async def login(
    request: Request,
    body: LoginRequest,
    session_manager: SessionManager = Depends(get_session_manager),
):
    """Check the admin password and start a session."""
    client_ip = request.client.host if request.client else "unknown"
    current_time = time.time()

    # Clean up old attempts
    failed_attempts[client_ip] = [
        attempt_time for attempt_time in failed_attempts[client_ip]
        if current_time - attempt_time < LOCKOUT_DURATION
    ]

    if len(failed_attempts[client_ip]) >= LOCKOUT_THRESHOLD:
        remaining = int(LOCKOUT_DURATION - (current_time - failed_attempts[client_ip][0]))
        return JSONResponse(
            {"error": f"Too many failed attempts. Try again in {remaining} seconds."},
            status_code=429
        )

    if settings.admin_password_hash and verify_password(body.password, settings.admin_password_hash):
        failed_attempts[client_ip] = []
        response = JSONResponse({"success": True})
        session_manager.create_session(response)
        return response

    failed_attempts[client_ip].append(current_time)

    # Slow down brute force (increases with each attempt)
    delay = min(len(failed_attempts[client_ip]) * 0.5, 3)
    await asyncio.sleep(delay)

    return JSONResponse({"error": "Invalid password"}, status_code=401)


@router.post("/logout")
async def logout(session_manager: SessionManager = Depends(get_session_manager)):
    """End the current session."""
    response = JSONResponse({"success": True})
    session_manager.clear_session(response)
    return response
