import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from passlib.context import CryptContext

import config
from schemas import Session

logger = logging.getLogger(__name__)

# =====================
# Auth / Security Setup
# =====================

# Use pbkdf2_sha256 to avoid external bcrypt dependency issues
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ADMIN_PASSWORD_HASH = config.ADMIN_PASSWORD_HASH or pwd_context.hash(config.ADMIN_PASSWORD)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def authenticate(email: str, password: str) -> Optional[Session]:
    if email.lower() != config.ADMIN_EMAIL.lower() or not verify_password(password, ADMIN_PASSWORD_HASH):
        logger.warning("failed login for %s", email)
        return None
    return Session(email=config.ADMIN_EMAIL)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def create_session_token(session: Session) -> str:
    return create_access_token({"sub": session.email, "role": session.role})


def decode_session(token: str) -> Optional[Session]:
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        return None
    email = payload.get("sub")
    if email != config.ADMIN_EMAIL or payload.get("role") != "admin":
        return None
    return Session(email=email)


def _token_from_request(request: Request) -> Optional[str]:
    authorization = request.headers.get("authorization")
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1]
    return request.cookies.get(config.SESSION_COOKIE_NAME)


def optional_admin(request: Request) -> Optional[Session]:
    token = _token_from_request(request)
    if not token:
        return None
    return decode_session(token)


def require_admin(session: Optional[Session] = Depends(optional_admin)) -> Session:
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session
