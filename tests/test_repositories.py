from datetime import time
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import UUID

import asyncpg
import pytest

from core.exceptions import ConflictError, DatabaseError, ValidationError
from repositories import (
    BookingsRepository,
    GymSearchFilters,
    GymsRepository,
    TrainerBookingsRepository,
    TrainersRepository,
    UsersRepository,
)
from repositories.base import normalize_row


@pytest.fixture
def db():
    return SimpleNamespace(
        fetch=AsyncMock(return_value=[]),
        fetchrow=AsyncMock(return_value={"id": "row-1"}),
        fetchval=AsyncMock(return_value=0),
        execute=AsyncMock(return_value="DELETE 1"),
    )


@pytest.fixture
def gyms(db):
    return GymsRepository(db)


def test_rows_become_json_friendly():
    row = normalize_row({
        "id": UUID("12345678-1234-5678-1234-567812345678"),
        "price": Decimal("499.50"),
        "start_time": time(6, 30),
        "tags": [UUID("12345678-1234-5678-1234-567812345678")],
        "name": "Iron Temple",
    })
    assert row == {
        "id": "12345678-1234-5678-1234-567812345678",
        "price": 499.5,
        "start_time": "06:30",
        "tags": ["12345678-1234-5678-1234-567812345678"],
        "name": "Iron Temple",
    }
    assert normalize_row(None) is None


async def test_insert_builds_placeholders(gyms, db):
    await gyms.insert({"name": "Iron Temple", "city": "Pune"})

    query, *args = db.fetchrow.await_args.args
    assert query == "INSERT INTO gyms (name, city) VALUES ($1, $2) RETURNING *"
    assert args == ["Iron Temple", "Pune"]


async def test_update_skips_none_and_unlisted_columns(gyms, db):
    await gyms.update("gym-1", {"name": "New", "city": None, "owner_id": "x"}, allowed=("name", "city"), touch=True)

    query, *args = db.fetchrow.await_args.args
    assert query == "UPDATE gyms SET name = $2, updated_at = NOW() WHERE id = $1 RETURNING *"
    assert args == ["gym-1", "New"]


async def test_update_with_nothing_to_change_reads_row(gyms, db):
    await gyms.update("gym-1", {"city": None})

    query, *args = db.fetchrow.await_args.args
    assert query == "SELECT * FROM gyms WHERE id = $1"
    assert args == ["gym-1"]


async def test_delete_reports_whether_a_row_went(gyms, db):
    assert await gyms.delete("gym-1") is True
    db.execute.return_value = "DELETE 0"
    assert await gyms.delete("gym-1") is False


@pytest.mark.parametrize("error, expected", [
    (asyncpg.UniqueViolationError("duplicate key"), ConflictError),
    (asyncpg.DataError("invalid input for query argument $1"), ValidationError),
    (ValueError("bad uuid"), ValidationError),
    (asyncpg.PostgresError("connection reset"), DatabaseError),
])
async def test_driver_errors_are_translated(gyms, db, error, expected):
    db.fetchrow.side_effect = error
    with pytest.raises(expected):
        await gyms.get_by_id("gym-1")


async def test_conflict_names_the_entity(gyms, db):
    db.fetchrow.side_effect = asyncpg.UniqueViolationError("duplicate key")
    with pytest.raises(ConflictError, match="Gym already exists"):
        await gyms.insert({"name": "Iron Temple"})


def test_search_filters_are_parameterised(gyms):
    where, params = gyms._search_where(GymSearchFilters(
        search="iron",
        categories=["yoga", "crossfit"],
        min_rating=4.0,
        open_day=1,
        open_time=time(7, 0),
        max_price=1000,
    ))

    assert where.startswith("g.is_approved = true AND g.is_active = true")
    assert "g.name ILIKE $1" in where
    assert "g.categories && $2::text[]" in where
    assert "g.rating >= $3" in where
    assert "ts.day_of_week = $4 AND ts.start_time <= $5 AND ts.end_time > $5" in where
    assert "<= $6" in where
    assert params == ["%iron%", ["yoga", "crossfit"], 4.0, 1, time(7, 0), 1000]


async def test_paged_search_appends_limit_and_offset(gyms, db):
    await gyms.search(GymSearchFilters(city="Pune"), limit=20, offset=40)

    query, *args = db.fetch.await_args.args
    assert query.endswith("LIMIT $2 OFFSET $3")
    assert args == ["%Pune%", 20, 40]


# ============================================================
# Guarded writes
# ============================================================

@pytest.mark.parametrize("repository", [BookingsRepository, TrainerBookingsRepository])
async def test_mark_paid_only_moves_unpaid_bookings(db, repository):
    await repository(db).mark_paid("bk-1", "pay_1")

    query, *args = db.fetchrow.await_args.args
    assert "WHERE id = $1 AND payment_status IS DISTINCT FROM 'completed'" in query
    assert args == ["bk-1", "pay_1"]


@pytest.mark.parametrize("method", ["consume_session", "mark_used"])
async def test_pass_updates_recheck_admission(db, method):
    await getattr(BookingsRepository(db), method)("bk-1", 2)

    query, *args = db.fetchrow.await_args.args
    assert "status NOT IN ('used', 'cancelled') AND payment_status = 'completed'" in query
    assert "COALESCE(remaining_sessions, 1) = $2" in query
    assert args == ["bk-1", 2]


async def test_first_login_insert_tolerates_a_parallel_one(db):
    await UsersRepository(db).create_from_identity("provider|42", "a@example.com", None, "Asha", None)

    query = db.fetchrow.await_args.args[0]
    assert "ON CONFLICT (auth_provider_id) DO UPDATE" in query
    assert "RETURNING" in query


async def test_trainer_lock_runs_on_the_transaction(db):
    conn = SimpleNamespace(fetchval=AsyncMock(return_value="tr-1"))

    await TrainersRepository(db).lock("tr-1", conn)

    query, *args = conn.fetchval.await_args.args
    assert query.endswith("FOR UPDATE")
    assert args == ["tr-1"]
    db.fetchval.assert_not_awaited()
