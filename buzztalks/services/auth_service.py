"""Email/password authentication backed by the accounts table."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from uuid import uuid4

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..constants import USERS
from ..database import get_session
from ..models import Account, RevokedToken
from ..schemas import SignUpRequest
from ..security.secrets import MissingSecretError, optional_env, require_secret
from ..store import DocumentStore, StoreError
from .profile_service import new_profile_document

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)
_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = optional_env("JWT_ALGORITHM", "HS256")
DEFAULT_TOKEN_MINUTES = int(optional_env("JWT_EXPIRES_MINUTES", "1440"))

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True, slots=True)
class CurrentUser:
    """The authenticated caller resolved from a bearer token."""

    uid: str
    email: str
    token: str
    jti: str
    expires_at: datetime


@lru_cache(maxsize=1)
def _get_jwt_secret() -> str:
    try:
        return require_secret("JWT_SECRET_KEY")
    except MissingSecretError as exc:
        raise RuntimeError(str(exc)) from exc


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return _pwd_context.verify(password, hashed_password)
    except ValueError:
        logger.exception("Password verification failed for a malformed hash")
        return False


def create_access_token(uid: str, email: str, *, expires_minutes: int | None = None) -> str:
    """Sign a JWT for ``uid`` carrying a unique ``jti`` so it can be revoked."""

    now = datetime.now(timezone.utc)
    payload = {
        "sub": uid,
        "email": email,
        "jti": uuid4().hex,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes or DEFAULT_TOKEN_MINUTES),
    }
    return jwt.encode(payload, _get_jwt_secret(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[ALGORITHM])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    if not payload.get("sub") or not payload.get("jti"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    return payload


def sign_up(db: Session, store: DocumentStore, payload: SignUpRequest) -> tuple[Account, str]:
    """Create the account and its ``users`` profile document, then issue a token."""

    email = str(payload.email).lower()
    if db.scalar(select(Account).where(Account.email == email)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    account = Account(email=email, hashed_password=hash_password(payload.password))
    try:
        db.add(account)
        db.commit()
        db.refresh(account)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to create account")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to sign up") from exc

    username = payload.username.strip()
    try:
        store.set(USERS, account.uid, new_profile_document(username=username, email=email))
    except StoreError as exc:
        logger.warning("Account %s created but profile write failed", account.uid)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to sign up") from exc

    logger.info("Account %s signed up", account.uid)
    return account, create_access_token(account.uid, email)


def sign_in(db: Session, email: str, password: str) -> tuple[Account, str]:
    account = db.scalar(select(Account).where(Account.email == email.lower()))
    if account is None or not verify_password(password, account.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    try:
        account.last_sign_in_at = datetime.now(timezone.utc)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Failed to update last_sign_in_at for account %s", account.uid)

    return account, create_access_token(account.uid, account.email)


def sign_out(db: Session, user: CurrentUser) -> None:
    """Revoke the token's ``jti`` so it can no longer authenticate."""

    if db.get(RevokedToken, user.jti) is not None:
        return
    try:
        db.add(RevokedToken(jti=user.jti, uid=user.uid, expires_at=user.expires_at))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to revoke token for %s", user.uid)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to sign out") from exc


def resolve_token(db: Session, token: str) -> CurrentUser:
    """Validate ``token`` and return the caller, raising 401 when unusable."""

    payload = decode_access_token(token)
    jti = str(payload["jti"])
    if db.get(RevokedToken, jti) is not None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session has ended")

    account = db.get(Account, str(payload["sub"]))
    if account is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    return CurrentUser(
        uid=account.uid,
        email=account.email,
        token=token,
        jti=jti,
        expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
    db: Session = Depends(get_session),
) -> CurrentUser:
    """Resolve the authenticated user from the bearer token."""

    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    return resolve_token(db, credentials.credentials)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
    db: Session = Depends(get_session),
) -> CurrentUser | None:
    if not credentials or credentials.scheme.lower() != "bearer":
        return None
    try:
        return resolve_token(db, credentials.credentials)
    except HTTPException:
        return None


__all__ = [
    "CurrentUser",
    "INVALID_CREDENTIALS",
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_access_token",
    "sign_up",
    "sign_in",
    "sign_out",
    "resolve_token",
    "get_current_user",
    "get_optional_user",
]
