"""Upstream session handshake."""

from .session import Credentials, SessionAcquirer, collect_session_cookies, extract_csrf_token

__all__ = [
    "Credentials",
    "SessionAcquirer",
    "collect_session_cookies",
    "extract_csrf_token",
]
