from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

from app import crud, models
from app.db import Base, make_engine, make_sessionmaker
from app.sample_data import DEMO_PROVIDER, SAMPLE_RECORDS
from app.search import FacilityKey, SearchCriteria
from app.seed import seed_farmlands
from app.utils import new_id


def mk_farmland(
    farmland_id: str,
    *,
    area: float = 1000.0,
    price: float | None = 10000.0,
    name: str | None = "Field",
    description: str | None = None,
    prefecture: str = "Nagano",
    city: str = "Matsumoto",
    status: models.FarmlandStatus = models.FarmlandStatus.PUBLIC,
    facilities: dict | None = None,
    provider_id: str = "p1",
) -> models.Farmland:
    obj = models.Farmland(
        id=farmland_id,
        name=name,
        prefecture=prefecture,
        city=city,
        address="1-2-3",
        area=area,
        price=price,
        description=description,
        available_from=datetime(2025, 4, 1, tzinfo=timezone.utc),
        images=[],
        status=status,
        provider_id=provider_id,
    )
    obj.facilities = facilities or {}
    return obj


@pytest.fixture(scope="function")
def db_session():
    """Fresh in-memory SQLite session per test, with one provider."""
    engine = make_engine("sqlite:///:memory:", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    db = make_sessionmaker(engine)()
    crud.create_user(
        db,
        user_id="p1",
        email="p1@example.com",
        password_hash="x",
        role=models.UserRole.PROVIDER,
    )
    try:
        yield db
    finally:
        db.close()


def add_all(db, *farmlands):
    for f in farmlands:
        crud.create_farmland(db, f)


def ids(rows):
    return [r.id for r in rows]


# ---------- search ----------

def test_search_returns_page_and_total(db_session):
    add_all(db_session, *(mk_farmland(f"f{i:03d}") for i in range(1, 6)))

    rows, total = crud.search_farmlands(db_session, SearchCriteria(page=2, limit=2))

    assert total == 5
    assert ids(rows) == ["f003", "f002"]


def test_search_page_past_end_is_empty(db_session):
    add_all(db_session, mk_farmland("f001"))

    rows, total = crud.search_farmlands(db_session, SearchCriteria(page=9, limit=10))

    assert rows == []
    assert total == 1


def test_search_area_bounds_are_inclusive(db_session):
    add_all(db_session, mk_farmland("f001", area=500), mk_farmland("f002", area=1000), mk_farmland("f003", area=1500))

    rows, total = crud.search_farmlands(db_session, SearchCriteria(min_area=500, max_area=1000))

    assert ids(rows) == ["f002", "f001"]
    assert total == 2


def test_search_min_above_max_matches_nothing(db_session):
    add_all(db_session, mk_farmland("f001", area=800))

    rows, total = crud.search_farmlands(db_session, SearchCriteria(min_area=1000, max_area=500))

    assert rows == []
    assert total == 0


def test_search_excludes_non_public(db_session):
    add_all(
        db_session,
        mk_farmland("f001", status=models.FarmlandStatus.PRIVATE),
        mk_farmland("f002"),
    )

    rows, total = crud.search_farmlands(db_session, SearchCriteria())

    assert ids(rows) == ["f002"]
    assert total == 1


def test_search_facilities_require_every_key(db_session):
    add_all(
        db_session,
        mk_farmland("f001", facilities={"signal5g": True}),
        mk_farmland("f002", facilities={"signal5g": True, "electricity": True}),
    )

    rows, _ = crud.search_farmlands(
        db_session,
        SearchCriteria(facilities=frozenset({FacilityKey.SIGNAL_5G, FacilityKey.ELECTRICITY})),
    )

    assert ids(rows) == ["f002"]


def test_search_keyword_is_literal(db_session):
    """LIKE wildcards in user input match themselves only."""
    add_all(
        db_session,
        mk_farmland("f001", name="100% organic"),
        mk_farmland("f002", name="1000 organic"),
    )

    rows, _ = crud.search_farmlands(db_session, SearchCriteria(keyword="100%"))

    assert ids(rows) == ["f001"]


def test_search_keyword_ignores_null_description(db_session):
    add_all(db_session, mk_farmland("f001", name="Paddy", description=None))

    rows, _ = crud.search_farmlands(db_session, SearchCriteria(keyword="Paddy"))

    assert ids(rows) == ["f001"]


def test_search_loads_provider(db_session):
    add_all(db_session, mk_farmland("f001"))

    rows, _ = crud.search_farmlands(db_session, SearchCriteria())

    assert rows[0].provider.email == "p1@example.com"


# ---------- model ----------

def test_farmland_rejects_non_positive_area():
    with pytest.raises(ValueError):
        mk_farmland("f001", area=0)


def test_facilities_round_trip_through_columns(db_session):
    add_all(db_session, mk_farmland("f001", facilities={"signal4g": True, "toilet": True}))

    obj = crud.get_farmland(db_session, "f001")

    assert obj.signal_4g is True
    assert obj.facilities == {
        "shed": False, "toilet": True, "water": False, "electricity": False,
        "signal5g": False, "signal4g": True, "parking": False,
    }


# ---------- users / favorites ----------

def test_duplicate_email_violates_constraint(db_session):
    with pytest.raises(IntegrityError):
        crud.create_user(db_session, email="p1@example.com", password_hash="y", role=models.UserRole.SEEKER)


def test_update_user_sets_fields(db_session):
    user = crud.get_user(db_session, "p1")

    crud.update_user(db_session, user, name="Hanako", phone="03-0000-0000")

    again = crud.get_user_by_email(db_session, "p1@example.com")
    assert again.name == "Hanako"
    assert again.phone == "03-0000-0000"


def test_favorites_are_unique_per_user_and_farmland(db_session):
    add_all(db_session, mk_farmland("f001"))

    fav = crud.add_favorite(db_session, "p1", "f001")
    assert crud.get_favorite(db_session, "p1", "f001").id == fav.id

    with pytest.raises(IntegrityError):
        crud.add_favorite(db_session, "p1", "f001")
    db_session.rollback()

    crud.delete_favorite(db_session, crud.get_favorite(db_session, "p1", "f001"))
    assert crud.get_favorite(db_session, "p1", "f001") is None


def test_list_favorites_newest_first(db_session):
    add_all(db_session, mk_farmland("f001"), mk_farmland("f002"))
    first = crud.add_favorite(db_session, "p1", "f001")
    second = crud.add_favorite(db_session, "p1", "f002")

    favorites = crud.list_favorites(db_session, "p1")

    assert [f.id for f in favorites] == [second.id, first.id]
    assert favorites[0].farmland.provider.id == "p1"


# ---------- seed ----------

def test_seed_inserts_sample_listings(db_session):
    written = seed_farmlands(db_session)

    rows, total = crud.search_farmlands(db_session, SearchCriteria(limit=100))
    assert written == len(SAMPLE_RECORDS) == 5
    assert total == 5
    assert {r.provider_id for r in rows} == {DEMO_PROVIDER["id"]}


def test_seed_is_repeatable(db_session):
    seed_farmlands(db_session)
    crud.add_favorite(db_session, "p1", SAMPLE_RECORDS[0]["id"])

    seed_farmlands(db_session)

    _, total = crud.search_farmlands(db_session, SearchCriteria(limit=100))
    assert total == 5
    assert crud.list_favorites(db_session, "p1") == []


# ---------- ids ----------

def test_new_ids_sort_with_sample_ids_by_age():
    sample_ids = [r["id"] for r in SAMPLE_RECORDS]

    older = new_id(clock=lambda: 1_700_000_000)  # 2023-11
    newer = new_id(clock=lambda: 1_800_000_000)  # 2027-01

    assert all(older < i < newer for i in sample_ids)


def test_registered_farmland_lists_ahead_of_seeded_rows(db_session):
    seed_farmlands(db_session)
    add_all(db_session, mk_farmland(new_id(clock=lambda: 1_800_000_000)))

    rows, _ = crud.search_farmlands(db_session, SearchCriteria(limit=1))

    assert rows[0].provider_id == "p1"
