# backend/showdb/security.py

"""
Request authentication.

Sign-in happens at the external authentication provider, which hands the
browser a signed JWT. Every API call sends it as `Authorization: Bearer`;
this module verifies the signature and expiry (plus audience and issuer
when configured), then loads the `User` whose id is in `sub`.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .database import get_db
from showdb.apps.accounts import models as account_models

SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE") or None
JWT_ISSUER = os.getenv("JWT_ISSUER") or None

try:
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
except ValueError:
    ACCESS_TOKEN_EXPIRE_MINUTES = 60

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(*, data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a token the same way the provider does. Used by jobs and tests;
    `data` must carry the subject, e.g. {"sub": user.id}.
    """
    claims = dict(data)
    claims["exp"] = datetime.now(timezone.utc) + (
        expires_delta if expires_delta is not None else timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    if JWT_AUDIENCE and "aud" not in claims:
        claims["aud"] = JWT_AUDIENCE
    if JWT_ISSUER and "iss" not in claims:
        claims["iss"] = JWT_ISSUER
    return jwt.encode(claims, SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """Return the `sub` claim of a valid token, or None."""
    try:
        payload = jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[JWT_ALGORITHM],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
            options={"verify_aud": JWT_AUDIENCE is not None},
        )
    except JWTError:
        return None
    subject = payload.get("sub")
    if subject is None:
        return None
    return str(subject).strip() or None


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise _unauthorized()
    return credentials.credentials


def get_current_user(
    token: str = Depends(bearer_token),
    db: Session = Depends(get_db),
) -> account_models.User:
    user_id = decode_access_token(token)
    if user_id is None:
        raise _unauthorized()
    user = db.get(account_models.User, user_id)
    if user is None:
        raise _unauthorized()
    return user


def get_current_active_user(
    current_user: account_models.User = Depends(get_current_user),
) -> account_models.User:
    if not getattr(current_user, "is_active", False):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user account")
    return current_user


def require_admin(
    current_user: account_models.User = Depends(get_current_active_user),
) -> account_models.User:
    """Back-office writes: ride categories, technical bulletins, the scraper."""
    if not getattr(current_user, "is_admin", False):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient privileges")
    return current_user
