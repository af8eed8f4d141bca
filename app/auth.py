# app/auth.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from app import models, schemas
from app.config import Settings

log = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    user: models.User,
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": user.id, "role": user.role.value, "exp": expire}
    log.debug("Created JWT for sub='%s'", user.id)
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Settings) -> Optional[schemas.TokenData]:
    """Payload of a valid token, or None when it is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        data = schemas.TokenData(**payload)
    except JWTError as e:
        log.warning("JWT decoding/validation error: %s", e)
        return None
    except ValidationError as e:
        log.warning("Token payload structure error: %s", e)
        return None
    if not data.sub:
        log.warning("Token payload missing 'sub'.")
        return None
    return data
