"""Request authentication against identity-provider access tokens.

Tokens are HS256 JWTs whose ``sub`` is the user id. They arrive either as a
bearer header or in the session cookie set at login.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, Request
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from qa_admin.config import settings
from qa_admin.db import get_db
from qa_admin.errors import ValidationError
from qa_admin.models.user import User
from qa_admin.services.common import coerce_uuid

logger = logging.getLogger(__name__)


def _extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1].strip()
    return None


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"verify_aud": False},
        )
    except JWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc


def _request_token(request: Request, authorization: str | None) -> str | None:
    return _extract_bearer_token(authorization) or request.cookies.get(settings.session_cookie_name)


def _load_user(db: Session, payload: dict) -> User | None:
    subject = payload.get("sub")
    if not subject:
        return None
    try:
        user_id = coerce_uuid(subject)
    except ValidationError:
        return None
    user = db.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


def require_user_auth(
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    token = _request_token(request, authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    user = _load_user(db, decode_access_token(token))
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    request.state.actor_id = str(user.id)
    return user


def get_current_user_or_none(
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User | None:
    token = _request_token(request, authorization)
    if not token:
        return None
    try:
        payload = decode_access_token(token)
    except HTTPException:
        logger.debug("Ignoring invalid session token")
        return None
    return _load_user(db, payload)
