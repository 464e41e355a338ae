"""
app/services/session_service.py

Purpose: Session management

- Binds an authenticated identity to the request's session
- Reads the bound identity back on later requests
- Backed by the signed session cookie (SessionMiddleware)
"""

from app.core.logging import get_logger
from typing import Any, Dict, MutableMapping, Optional

logger = get_logger(__name__)

SESSION_USER_KEY = "user"
SESSION_EMAIL_KEY = "email"


def start_session(session: MutableMapping[str, Any], user: Dict[str, Any]) -> None:
    """
    Writes {user, email} into the session after login or registration.

    Args:
        session: The request's session mapping
        user: Stored user document
    """
    session[SESSION_USER_KEY] = str(user["_id"])
    session[SESSION_EMAIL_KEY] = user["email"]
    logger.info("Session started", extra={"user_id": str(user["_id"]), "email": user["email"]})


def get_session_email(session: MutableMapping[str, Any]) -> Optional[str]:
    """
    Returns the email bound to the session, or None when nobody is logged in.
    """
    if not session.get(SESSION_USER_KEY):
        return None
    return session.get(SESSION_EMAIL_KEY)
