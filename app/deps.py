import logging

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app import auth, crud, models
from app.config import Settings
from app.db import get_db
from app.errors import ApiError
from app.listing_service import FarmlandService

log = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

_farmland_service = FarmlandService()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_farmland_service() -> FarmlandService:
    return _farmland_service


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> models.User | None:
    if not credentials:
        return None
    token = auth.decode_access_token(credentials.credentials, settings)
    if token is None:
        return None
    return crud.get_user(db, token.sub)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> models.User:
    unauthorized = ApiError(
        status.HTTP_401_UNAUTHORIZED,
        "Login required",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not credentials:
        raise unauthorized
    token = auth.decode_access_token(credentials.credentials, settings)
    if token is None:
        raise unauthorized
    user = crud.get_user(db, token.sub)
    if user is None:
        log.warning("User '%s' from token not found.", token.sub)
        raise unauthorized
    return user


def require_provider(user: models.User = Depends(get_current_user)) -> models.User:
    if user.role != models.UserRole.PROVIDER:
        raise ApiError(status.HTTP_403_FORBIDDEN, "Only providers can register farmland")
    return user
