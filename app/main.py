import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app import auth, crud, models, schemas
from app.config import Settings, get_settings
from app.db import Base, get_db, make_engine, make_sessionmaker
from app.deps import get_current_user, get_farmland_service, get_optional_user, require_provider
from app.errors import ApiError, register_error_handlers
from app.listing_service import FarmlandService
from app.search import parse_search_params

log = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", tags=["System"])
def health_check(db: Session = Depends(get_db)):
    db_ok = False
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as e:
        log.error("Health check DB connection error: %s", e)
    return {
        "status": "healthy" if db_ok else "unhealthy",
        "db_connection": "ok" if db_ok else "failed",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ---------- listings ----------

@router.get("/api/farmland", response_model=schemas.ListingPage, tags=["Farmland"])
@router.get("/listings", response_model=schemas.ListingPage, tags=["Farmland"], include_in_schema=False)
def list_farmlands(
    request: Request,
    db: Session = Depends(get_db),
    svc: FarmlandService = Depends(get_farmland_service),
):
    settings: Settings = request.app.state.settings
    try:
        criteria = parse_search_params(
            request.query_params,
            default_limit=settings.default_page_size,
            max_limit=settings.max_page_size,
        )
    except ValueError as e:
        log.warning("Rejected listing query %s: %s", dict(request.query_params), e)
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Invalid search parameters", str(e))

    try:
        return svc.search(db, criteria)
    except Exception as e:
        log.error("Failed to fetch farmland listings: %s", e, exc_info=True)
        raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch farmland listings", str(e))


@router.post(
    "/api/farmland",
    response_model=schemas.FarmlandCreated,
    status_code=status.HTTP_201_CREATED,
    tags=["Farmland"],
)
def register_farmland(
    payload: schemas.FarmlandCreate,
    db: Session = Depends(get_db),
    provider: models.User = Depends(require_provider),
    svc: FarmlandService = Depends(get_farmland_service),
):
    try:
        farmland = svc.register(db, payload, provider)
    except SQLAlchemyError as e:
        db.rollback()
        log.error("Farmland registration failed: %s", e, exc_info=True)
        raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to register farmland")
    return {"message": "Farmland registered", "farmland": svc.to_listing(farmland)}


@router.get("/api/farmland/{farmland_id}", response_model=schemas.ListingOut, tags=["Farmland"])
def get_farmland(
    farmland_id: str,
    db: Session = Depends(get_db),
    svc: FarmlandService = Depends(get_farmland_service),
):
    obj = crud.get_farmland(db, farmland_id)
    if not obj:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Farmland not found")
    if obj.status != models.FarmlandStatus.PUBLIC:
        raise ApiError(status.HTTP_403_FORBIDDEN, "This farmland is not public")
    return svc.to_listing(obj)


# ---------- accounts ----------

@router.post(
    "/api/auth/register",
    status_code=status.HTTP_201_CREATED,
    tags=["Auth"],
)
def register_user(data: schemas.UserCreate, db: Session = Depends(get_db)):
    if crud.get_user_by_email(db, data.email):
        raise ApiError(status.HTTP_409_CONFLICT, "This email address is already registered")
    try:
        user = crud.create_user(
            db,
            email=data.email,
            password_hash=auth.hash_password(data.password),
            role=data.role,
            name=data.name,
            phone=data.phone,
        )
    except IntegrityError:
        db.rollback()
        log.warning("Registration conflict for %s", data.email)
        raise ApiError(status.HTTP_409_CONFLICT, "This email address is already registered")
    log.info("User %s registered as %s", user.id, user.role.value)
    return {"message": "Registration complete", "user": schemas.UserOut.model_validate(user)}


@router.post("/api/auth/login", response_model=schemas.TokenOut, tags=["Auth"])
def login(data: schemas.LoginRequest, request: Request, db: Session = Depends(get_db)):
    user = crud.get_user_by_email(db, data.email)
    if not user or not auth.verify_password(data.password, user.password_hash):
        log.warning("Login failure for %s", data.email)
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "Invalid credentials")
    token = auth.create_access_token(user, request.app.state.settings)
    return schemas.TokenOut(access_token=token, user=schemas.UserOut.model_validate(user))


@router.put("/api/user/profile", tags=["User"])
def update_profile(
    data: schemas.ProfileUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    changes = data.model_dump(exclude_unset=True)
    user = crud.update_user(db, user, **changes)
    return {"success": True, "user": schemas.UserOut.model_validate(user)}


@router.put("/api/user/password", tags=["User"])
def change_password(
    data: schemas.PasswordChange,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    if not auth.verify_password(data.current_password, user.password_hash):
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Current password is incorrect")
    crud.update_user(db, user, password_hash=auth.hash_password(data.new_password))
    log.info("Password changed for user %s", user.id)
    return {"success": True, "message": "Password updated"}


# ---------- favorites ----------

@router.get("/api/favorites", response_model=schemas.FavoriteList, tags=["Favorites"])
def list_favorites(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
    svc: FarmlandService = Depends(get_farmland_service),
):
    items = [
        schemas.FavoriteListingOut(
            **svc.to_listing(fav.farmland).model_dump(),
            favorite_id=fav.id,
            favorited_at=fav.created_at,
        )
        for fav in crud.list_favorites(db, user.id)
    ]
    return {"data": items, "total": len(items)}


@router.post("/api/favorites", status_code=status.HTTP_201_CREATED, tags=["Favorites"])
def add_favorite(
    data: schemas.FavoriteCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    if not crud.get_farmland(db, data.farmland_id):
        raise ApiError(status.HTTP_404_NOT_FOUND, "Farmland not found")
    if crud.get_favorite(db, user.id, data.farmland_id):
        raise ApiError(status.HTTP_409_CONFLICT, "This farmland is already in your favorites")
    try:
        fav = crud.add_favorite(db, user.id, data.farmland_id)
    except IntegrityError:
        db.rollback()
        raise ApiError(status.HTTP_409_CONFLICT, "This farmland is already in your favorites")
    return {
        "message": "Added to favorites",
        "favorite": {"id": fav.id, "farmlandId": fav.farmland_id, "createdAt": fav.created_at},
    }


@router.get("/api/favorites/{farmland_id}", response_model=schemas.FavoriteStatus, tags=["Favorites"])
def favorite_status(
    farmland_id: str,
    db: Session = Depends(get_db),
    user: models.User | None = Depends(get_optional_user),
):
    if user is None:
        return schemas.FavoriteStatus(is_favorite=False)
    fav = crud.get_favorite(db, user.id, farmland_id)
    return schemas.FavoriteStatus(is_favorite=fav is not None, favorite_id=fav.id if fav else None)


@router.delete("/api/favorites/{farmland_id}", tags=["Favorites"])
def remove_favorite(
    farmland_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    fav = crud.get_favorite(db, user.id, farmland_id)
    if not fav:
        raise ApiError(status.HTTP_404_NOT_FOUND, "This farmland is not in your favorites")
    crud.delete_favorite(db, fav)
    return {"message": "Removed from favorites"}


# ---------- app factory ----------

def create_app(settings: Settings | None = None, *, engine: Engine | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    engine = engine or make_engine(settings.database_url)

    # Create tables at startup
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Base.metadata.create_all(bind=engine)
        yield

    app = FastAPI(title="Farmland Match API", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = make_sessionmaker(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(router)
    return app


app = create_app()
