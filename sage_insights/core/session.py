# sage_insights/core/session.py
import json
import logging
from typing import Optional

from fastapi import Depends, Request
from pydantic import BaseModel, ValidationError

from sage_insights.api.v1.schemas import SessionUser
from sage_insights.core.config import Settings, get_settings

logger = logging.getLogger("session")


class LoginRequired(Exception):
    """No usable session on the request; the app redirects to the login route."""


class Session(BaseModel):
    user: SessionUser

    @property
    def user_id(self) -> str:
        return self.user.id


def read_session(request: Request, settings: Settings) -> Optional[Session]:
    """Build the session from the flag cookie and the serialized user record.

    This is a presence check only; nothing is verified against the backend.
    """
    flag = request.cookies.get(settings.SESSION_FLAG_COOKIE)
    raw_user = request.cookies.get(settings.SESSION_USER_COOKIE)
    if not flag or not raw_user:
        return None

    try:
        user = SessionUser.model_validate(json.loads(raw_user))
    except (ValueError, TypeError, ValidationError) as e:
        logger.error("Error parsing user data: %s", e)
        return None
    return Session(user=user)


def require_session(request: Request, settings: Settings = Depends(get_settings)) -> Session:
    session = read_session(request, settings)
    if session is None:
        raise LoginRequired()
    return session
