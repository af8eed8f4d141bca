"""Listing search: parameter parsing, predicate construction and pagination.

Every criterion is optional and contributes nothing when absent. The general
listing query is always constrained to PUBLIC rows.
"""
from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from app.models import FACILITY_COLUMNS, Farmland, FarmlandStatus
from app.utils import parse_int, parse_number

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# largest row offset a 64-bit SQL integer can hold
MAX_OFFSET = 2 ** 63 - 1


class FacilityKey(str, enum.Enum):
    SHED = "shed"
    TOILET = "toilet"
    WATER = "water"
    ELECTRICITY = "electricity"
    SIGNAL_5G = "signal5g"
    SIGNAL_4G = "signal4g"
    PARKING = "parking"

    @property
    def column(self):
        return getattr(Farmland, FACILITY_COLUMNS[self.value])


@dataclass(frozen=True)
class SearchCriteria:
    prefecture: Optional[str] = None
    city: Optional[str] = None
    min_area: Optional[float] = None
    max_area: Optional[float] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    keyword: Optional[str] = None
    facilities: frozenset[FacilityKey] = field(default_factory=frozenset)
    page: int = 1
    limit: int = DEFAULT_LIMIT


def _text(params: Mapping[str, str], name: str) -> Optional[str]:
    v = params.get(name)
    return v if v else None


def parse_facilities(raw: Optional[str]) -> frozenset[FacilityKey]:
    """Comma-separated facility keys; unknown keys are rejected."""
    if not raw:
        return frozenset()
    keys = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            keys.add(FacilityKey(part))
        except ValueError:
            allowed = ", ".join(k.value for k in FacilityKey)
            raise ValueError(f"Unknown facility '{part}'. Allowed: {allowed}")
    return frozenset(keys)


def clamp_page(page: Optional[int]) -> int:
    return max(1, page if page is not None else 1)


def clamp_limit(limit: Optional[int], *, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    return min(maximum, max(1, limit if limit is not None else default))


def parse_search_params(
    params: Mapping[str, str],
    *,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> SearchCriteria:
    """Turn raw query parameters into SearchCriteria.

    Raises ValueError for malformed numbers, unknown facility keys or a page
    beyond the largest representable row offset.
    """
    criteria = SearchCriteria(
        prefecture=_text(params, "prefecture"),
        city=_text(params, "city"),
        min_area=parse_number(params.get("minArea"), "minArea"),
        max_area=parse_number(params.get("maxArea"), "maxArea"),
        min_price=parse_number(params.get("minPrice"), "minPrice"),
        max_price=parse_number(params.get("maxPrice"), "maxPrice"),
        keyword=_text(params, "keyword"),
        facilities=parse_facilities(params.get("facilities")),
        page=clamp_page(parse_int(params.get("page"), "page")),
        limit=clamp_limit(parse_int(params.get("limit"), "limit"), default=default_limit, maximum=max_limit),
    )
    if page_window(criteria.page, criteria.limit)[0] > MAX_OFFSET:
        raise ValueError(f"'page' is too large, got {criteria.page}")
    return criteria


def build_listing_predicate(criteria: SearchCriteria) -> ColumnElement:
    clauses = [Farmland.status == FarmlandStatus.PUBLIC]

    if criteria.prefecture:
        clauses.append(Farmland.prefecture.contains(criteria.prefecture, autoescape=True))
    if criteria.city:
        clauses.append(Farmland.city.contains(criteria.city, autoescape=True))

    if criteria.min_area is not None:
        clauses.append(Farmland.area >= criteria.min_area)
    if criteria.max_area is not None:
        clauses.append(Farmland.area <= criteria.max_area)

    # NULL price never satisfies a comparison, so unpriced rows drop out
    if criteria.min_price is not None:
        clauses.append(Farmland.price >= criteria.min_price)
    if criteria.max_price is not None:
        clauses.append(Farmland.price <= criteria.max_price)

    if criteria.keyword:
        clauses.append(
            or_(
                Farmland.name.contains(criteria.keyword, autoescape=True),
                Farmland.description.contains(criteria.keyword, autoescape=True),
            )
        )

    for key in sorted(criteria.facilities, key=lambda k: k.value):
        clauses.append(key.column.is_(True))

    return and_(*clauses)


def page_window(page: int, limit: int) -> Tuple[int, int]:
    """(skip, take) for a 1-indexed page."""
    return (page - 1) * limit, limit


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
