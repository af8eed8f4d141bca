# app/seed.py
"""Load the bundled demo listings into the configured database.

    python -m app.seed
"""
import logging
import secrets

from sqlalchemy.orm import Session

from app import auth, crud, models
from app.config import get_settings
from app.db import Base, make_engine, make_sessionmaker
from app.sample_data import DEMO_PROVIDER, SAMPLE_RECORDS
from app.utils import to_aware_utc

log = logging.getLogger(__name__)


def ensure_demo_provider(db: Session) -> models.User:
    user = crud.get_user(db, DEMO_PROVIDER["id"])
    if user:
        return user
    return crud.create_user(
        db,
        user_id=DEMO_PROVIDER["id"],
        email=DEMO_PROVIDER["email"],
        name=DEMO_PROVIDER["name"],
        password_hash=auth.hash_password(secrets.token_urlsafe(16)),
        role=models.UserRole.PROVIDER,
    )


def seed_farmlands(db: Session) -> int:
    """Replace any existing rows with the sample ids; returns rows written."""
    provider = ensure_demo_provider(db)
    ids = [r["id"] for r in SAMPLE_RECORDS]
    db.query(models.Favorite).filter(models.Favorite.farmland_id.in_(ids)).delete(synchronize_session="fetch")
    db.query(models.Farmland).filter(models.Farmland.id.in_(ids)).delete(synchronize_session="fetch")

    for record in SAMPLE_RECORDS:
        farmland = models.Farmland(
            **{k: v for k, v in record.items() if k != "facilities"},
            available_from=to_aware_utc("1970-01-01T00:00:00Z"),
            status=models.FarmlandStatus.PUBLIC,
            provider_id=provider.id,
        )
        farmland.facilities = record["facilities"]
        db.add(farmland)
    db.commit()
    log.info("Seeded %d farmlands for provider %s", len(SAMPLE_RECORDS), provider.id)
    return len(SAMPLE_RECORDS)


def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    engine = make_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    with make_sessionmaker(engine)() as db:
        seed_farmlands(db)


if __name__ == "__main__":
    main()
