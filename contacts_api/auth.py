"""
Session issuing and verification.

A user holds at most one session token, stored on the user row. Issuing a
new token overwrites the previous one and revoking clears it, so a token is
accepted only while it is both cryptographically valid and still the one on
record.
"""

import logging
from typing import Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from contacts_api import crud, models, security
from contacts_api.config import get_settings
from contacts_api.db import get_db
from contacts_api.errors import AuthenticationError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def issue_session(db: Session, user: models.User) -> str:
    """
    Sign a new session token for ``user`` and store it on the user.

    Any token issued earlier stops being accepted.
    """
    token = security.create_session_token(user.id)
    crud.update_user(db, user, token=token)
    return token


def verify_session(db: Session, token: Optional[str]) -> models.User:
    """
    Resolve a session token to its user.

    :raises AuthenticationError: If the token is missing, invalid, expired or
        no longer the one stored on the user.
    """
    if not token:
        raise AuthenticationError()
    user_id = security.decode_session_token(token)
    if user_id is None:
        logger.debug("Rejected token with bad signature or expiry")
        raise AuthenticationError()
    user = crud.get_user(db, user_id)
    if user is None or user.token != token:
        logger.debug("Rejected stale token for user %s", user_id)
        raise AuthenticationError()
    return user


def revoke_session(db: Session, user: models.User) -> None:
    crud.update_user(db, user, token=None)


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_cookie_max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def token_from_request(request: Request, creds: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if creds and creds.credentials:
        return creds.credentials.strip()
    return request.cookies.get(get_settings().session_cookie_name)


def get_current_user(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> models.User:
    """Authenticate the request with a Bearer header, falling back to the session cookie."""
    return verify_session(db, token_from_request(request, creds))
