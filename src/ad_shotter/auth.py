"""Cookie session checks for the API.

Sign-in happens in the identity provider; the browser mirrors the resulting
token and email into two plain cookies, and that pair is all the API sees.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from fastapi import HTTPException, Request, status

from .logging import jlog

SESSION_TOKEN_COOKIE = "firebase-auth-token"
USER_EMAIL_COOKIE = "user-email"


@dataclass(frozen=True)
class SessionUser:
    uid: str
    email: str
    display_name: str | None = None
    photo_url: str | None = None


def session_from_cookies(cookies: Mapping[str, str]) -> SessionUser | None:
    token = (cookies.get(SESSION_TOKEN_COOKIE) or "").strip()
    email = (cookies.get(USER_EMAIL_COOKIE) or "").strip()
    if not token or not email:
        return None
    return SessionUser(uid=token, email=email)


def is_allowed_email(email: str, domain: str | None) -> bool:
    if not domain:
        return True
    suffix = domain.lower() if domain.startswith("@") else f"@{domain.lower()}"
    return email.lower().endswith(suffix)


def require_session(request: Request) -> SessionUser:
    """FastAPI dependency: resolve the caller from cookies or reject the request."""

    user = session_from_cookies(request.cookies)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    domain = request.app.state.settings.allowed_email_domain
    if not is_allowed_email(user.email, domain):
        jlog("warning", event="email_domain_rejected", email=user.email, allowed_domain=domain)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Email domain not allowed")
    return user


__all__ = [
    "SESSION_TOKEN_COOKIE",
    "USER_EMAIL_COOKIE",
    "SessionUser",
    "is_allowed_email",
    "require_session",
    "session_from_cookies",
]
