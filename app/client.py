"""Search client: owns the current filter state and the listing results.

The filter state round-trips through a URL query string so a shared link
reproduces the same search. Every fetch is numbered; a response that does not
belong to the latest request is dropped.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Union
from urllib.parse import parse_qsl, urlencode

import httpx
from pydantic import ValidationError

from app.sample_data import SAMPLE_LISTINGS
from app.schemas import ListingOut, ListingPage
from app.search import DEFAULT_LIMIT, FacilityKey, clamp_limit, clamp_page
from app.utils import parse_int, parse_number

log = logging.getLogger(__name__)

Params = Dict[str, str]
Fetch = Callable[[Params], Awaitable[ListingPage]]


class FetchError(Exception):
    """The listing endpoint could not produce a page."""


def _fmt(v: float) -> str:
    return str(int(v)) if float(v).is_integer() else str(v)


@dataclass(frozen=True)
class SearchState:
    prefecture: Optional[str] = None
    city: Optional[str] = None
    keyword: Optional[str] = None
    min_area: float = 0
    max_area: float = 5000
    min_price: float = 0
    max_price: float = 100000
    facilities: frozenset = field(default_factory=frozenset)
    page: int = 1
    limit: int = DEFAULT_LIMIT

    # field name -> query parameter
    _PARAMS = {
        "prefecture": "prefecture",
        "city": "city",
        "keyword": "keyword",
        "min_area": "minArea",
        "max_area": "maxArea",
        "min_price": "minPrice",
        "max_price": "maxPrice",
        "page": "page",
        "limit": "limit",
    }

    @classmethod
    def from_query_string(cls, query_string: str) -> "SearchState":
        """Read state from a query string; unreadable values keep their default."""
        raw = dict(parse_qsl(query_string.lstrip("?")))
        defaults = cls()
        values = {}
        for name, param in cls._PARAMS.items():
            if param not in raw:
                continue
            default = getattr(defaults, name)
            if name in ("prefecture", "city", "keyword"):
                values[name] = raw[param] or None
                continue
            try:
                parsed = parse_int(raw[param], param) if name in ("page", "limit") else parse_number(raw[param], param)
            except ValueError:
                log.debug("Ignoring unreadable %s=%r in URL", param, raw[param])
                parsed = None
            values[name] = default if parsed is None else parsed
        keys = set()
        for part in raw.get("facilities", "").split(","):
            try:
                keys.add(FacilityKey(part.strip()))
            except ValueError:
                continue
        values["facilities"] = frozenset(keys)
        if "page" in values:
            values["page"] = clamp_page(values["page"])
        if "limit" in values:
            values["limit"] = clamp_limit(values["limit"])
        return cls(**values)

    def to_query_params(self) -> Params:
        """Only values that differ from the defaults."""
        defaults = SearchState()
        params: Params = {}
        for name, param in self._PARAMS.items():
            value = getattr(self, name)
            if value is None or value == getattr(defaults, name):
                continue
            params[param] = value if isinstance(value, str) else _fmt(value)
        if self.facilities:
            params["facilities"] = ",".join(sorted(FacilityKey(k).value for k in self.facilities))
        return params

    def to_query_string(self) -> str:
        return urlencode(self.to_query_params())


# ---------- result state ----------

@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Loaded:
    page: ListingPage


@dataclass(frozen=True)
class Errored:
    reason: str


@dataclass(frozen=True)
class FallbackShown:
    listings: List[ListingOut]
    reason: str


ResultState = Union[Loading, Loaded, Errored, FallbackShown]


class HttpListingFetcher:
    def __init__(self, client: httpx.AsyncClient, path: str = "/api/farmland"):
        self._client = client
        self._path = path

    async def __call__(self, params: Params) -> ListingPage:
        try:
            resp = await self._client.get(self._path, params=params)
            resp.raise_for_status()
            return ListingPage.model_validate(resp.json())
        except httpx.HTTPStatusError as e:
            raise FetchError(f"Listing endpoint returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"Listing endpoint unreachable: {e}") from e
        except (ValidationError, ValueError) as e:
            raise FetchError(f"Malformed listing response: {e}") from e


class SearchController:
    def __init__(
        self,
        fetch: Fetch,
        *,
        query_string: str = "",
        replace_url: Callable[[str], None] | None = None,
        fallback: List[ListingOut] | None = SAMPLE_LISTINGS,
    ):
        self._fetch = fetch
        self._replace_url = replace_url
        self._fallback = fallback
        self._issued = 0
        self.state = SearchState.from_query_string(query_string)
        self.result: ResultState = Loading()

    @property
    def is_loading(self) -> bool:
        return isinstance(self.result, Loading)

    @property
    def listings(self) -> List[ListingOut]:
        if isinstance(self.result, Loaded):
            return list(self.result.page.data)
        if isinstance(self.result, FallbackShown):
            return list(self.result.listings)
        return []

    async def mount(self) -> ResultState:
        return await self.refresh()

    async def update(self, **changes) -> ResultState:
        if "facilities" in changes:
            changes["facilities"] = frozenset(FacilityKey(k) for k in changes["facilities"])
        if "page" not in changes:
            changes["page"] = 1
        self.state = dataclasses.replace(self.state, **changes)
        if self._replace_url is not None:
            self._replace_url(self.state.to_query_string())
        return await self.refresh()

    async def refresh(self) -> ResultState:
        self._issued += 1
        request_no = self._issued
        self.result = Loading()
        try:
            page = await self._fetch(self.state.to_query_params())
        except Exception as e:
            if request_no != self._issued:
                log.debug("Dropping failure of superseded request %d", request_no)
                return self.result
            log.warning("Listing fetch failed: %s", e)
            self.result = self._on_failure(str(e))
            return self.result
        if request_no != self._issued:
            log.debug("Dropping response of superseded request %d", request_no)
            return self.result
        self.result = Loaded(page)
        return self.result

    def _on_failure(self, reason: str) -> ResultState:
        if self._fallback is None:
            return Errored(reason)
        return FallbackShown(list(self._fallback), reason)
