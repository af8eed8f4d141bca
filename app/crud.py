from typing import Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from app import models
from app.search import SearchCriteria, build_listing_predicate, page_window

# ---------- users ----------

def get_user(db: Session, user_id: str) -> Optional[models.User]:
    return db.get(models.User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email).first()


def create_user(
    db: Session,
    *,
    email: str,
    password_hash: str,
    role: models.UserRole,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    user_id: Optional[str] = None,
) -> models.User:
    obj = models.User(
        email=email,
        password_hash=password_hash,
        role=role,
        name=name,
        phone=phone,
    )
    if user_id:
        obj.id = user_id
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def update_user(db: Session, user: models.User, **fields) -> models.User:
    for key, value in fields.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user


# ---------- farmlands ----------

def get_farmland(db: Session, farmland_id: str) -> Optional[models.Farmland]:
    return (
        db.query(models.Farmland)
        .options(joinedload(models.Farmland.provider))
        .filter(models.Farmland.id == farmland_id)
        .first()
    )


def create_farmland(db: Session, farmland: models.Farmland) -> models.Farmland:
    db.add(farmland)
    db.commit()
    db.refresh(farmland)
    return farmland


def search_farmlands(db: Session, criteria: SearchCriteria) -> Tuple[list[models.Farmland], int]:
    """One page of matching rows (newest id first) plus the total match count.

    Both queries use the same predicate; they are not run in a shared snapshot.
    """
    predicate = build_listing_predicate(criteria)
    skip, take = page_window(criteria.page, criteria.limit)

    total = db.scalar(select(func.count()).select_from(models.Farmland).where(predicate)) or 0
    rows = (
        db.execute(
            select(models.Farmland)
            .options(joinedload(models.Farmland.provider))
            .where(predicate)
            .order_by(models.Farmland.id.desc())
            .offset(skip)
            .limit(take)
        )
        .scalars()
        .all()
    )
    return list(rows), int(total)


# ---------- favorites ----------

def get_favorite(db: Session, user_id: str, farmland_id: str) -> Optional[models.Favorite]:
    return (
        db.query(models.Favorite)
        .filter(models.Favorite.user_id == user_id, models.Favorite.farmland_id == farmland_id)
        .first()
    )


def list_favorites(db: Session, user_id: str) -> list[models.Favorite]:
    return (
        db.query(models.Favorite)
        .options(joinedload(models.Favorite.farmland).joinedload(models.Farmland.provider))
        .filter(models.Favorite.user_id == user_id)
        .order_by(models.Favorite.created_at.desc(), models.Favorite.id.desc())
        .all()
    )


def add_favorite(db: Session, user_id: str, farmland_id: str) -> models.Favorite:
    obj = models.Favorite(user_id=user_id, farmland_id=farmland_id)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def delete_favorite(db: Session, favorite: models.Favorite) -> None:
    db.delete(favorite)
    db.commit()
