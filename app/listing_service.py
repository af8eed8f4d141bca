# app/listing_service.py
from __future__ import annotations

import logging
from typing import Callable, Tuple

from sqlalchemy.orm import Session

from app import crud, models, schemas
from app.search import SearchCriteria, page_count
from app.utils import new_id, utcnow

log = logging.getLogger(__name__)

IdFactory = Callable[[], str]
Search = Callable[[Session, SearchCriteria], Tuple[list, int]]


class FarmlandService:
    def __init__(
        self,
        *,
        id_factory: IdFactory | None = None,
        search: Search | None = None,
    ):
        # DI
        self._new_id = id_factory or new_id
        self._search = search or crud.search_farmlands

    @staticmethod
    def to_listing(farmland: models.Farmland) -> schemas.ListingOut:
        return schemas.ListingOut.model_validate(farmland)

    def search(self, db: Session, criteria: SearchCriteria) -> schemas.ListingPage:
        rows, total = self._search(db, criteria)
        return schemas.ListingPage(
            data=[self.to_listing(f) for f in rows],
            pagination=schemas.Pagination(
                total=total,
                page=criteria.page,
                limit=criteria.limit,
                pages=page_count(total, criteria.limit),
            ),
        )

    def register(
        self,
        db: Session,
        payload: schemas.FarmlandCreate,
        provider: models.User,
    ) -> models.Farmland:
        now = utcnow()
        farmland = models.Farmland(
            id=self._new_id(),
            name=payload.name or None,
            prefecture=payload.prefecture,
            city=payload.city,
            address=payload.address,
            area=payload.area,
            price=payload.price,
            available_from=payload.available_from,
            available_to=payload.available_to,
            description=payload.description or None,
            latitude=payload.latitude,
            longitude=payload.longitude,
            images=list(payload.images or []),
            status=models.FarmlandStatus.PUBLIC,
            provider_id=provider.id,
            created_at=now,
            updated_at=now,
        )
        farmland.facilities = payload.facilities.model_dump() if payload.facilities else {}
        crud.create_farmland(db, farmland)
        log.info("Farmland %s registered by provider %s", farmland.id, provider.id)
        return farmland
