"""
Tests for the one-time database readiness gate and the open/close lifecycle.
"""
import asyncio

import pytest

from polydoc import PolyDoc
from polydoc.errors import DatabaseBootstrapError

from .conftest import FakeConnection


def test_construction_performs_no_io(connection):
    PolyDoc({"db": "lazy"}, r=connection)

    assert connection.db_create_calls == []


@pytest.mark.asyncio
async def test_creates_the_database_once(odm, connection):
    await odm.db_ready()
    await odm.db_ready()

    assert connection.db_create_calls == ["polydoc_test"]
    assert "polydoc_test" in connection.databases


@pytest.mark.asyncio
async def test_every_call_shares_the_same_operation(odm):
    first = odm.db_ready()

    assert odm.db_ready() is first
    await first


@pytest.mark.asyncio
async def test_concurrent_callers_trigger_one_attempt(odm, connection):
    results = await asyncio.gather(*(odm.db_ready() for _ in range(10)))

    assert results == [None] * 10
    assert len(connection.db_create_calls) == 1


@pytest.mark.asyncio
async def test_existing_database_is_not_an_error():
    connection = FakeConnection(databases={"blog"})
    odm = PolyDoc({"db": "blog"}, r=connection)

    assert await odm.db_ready() is None
    assert connection.db_create_calls == ["blog"]


@pytest.mark.asyncio
async def test_other_failures_propagate():
    boom = RuntimeError("permission denied")
    connection = FakeConnection(db_error=boom)
    odm = PolyDoc({"db": "blog"}, r=connection)

    with pytest.raises(DatabaseBootstrapError) as exc_info:
        await odm.db_ready()

    assert exc_info.value.__cause__ is boom


@pytest.mark.asyncio
async def test_failure_is_memoized_for_every_caller():
    connection = FakeConnection(db_error=RuntimeError("disk full"))
    odm = PolyDoc({"db": "blog"}, r=connection)

    outcomes = await asyncio.gather(odm.db_ready(), odm.db_ready(), return_exceptions=True)
    with pytest.raises(DatabaseBootstrapError):
        await odm.db_ready()

    assert all(isinstance(o, DatabaseBootstrapError) for o in outcomes)
    assert outcomes[0] is outcomes[1]
    assert len(connection.db_create_calls) == 1


@pytest.mark.asyncio
async def test_open_prepares_every_model(odm, connection):
    odm.create_model("users", {"id": str, "email": str})
    posts = odm.create_model("posts", {"id": str, "author": str})
    posts.ensure_index("author")

    assert await odm.open() is odm
    await odm.open()

    assert connection.db_create_calls == ["polydoc_test"]
    assert set(connection.tables) == {("polydoc_test", "users"), ("polydoc_test", "posts")}
    assert connection.indexes == [("posts", "author", [("author", 1)], {})]


@pytest.mark.asyncio
async def test_existing_table_is_tolerated(odm, connection):
    await connection.table_create("polydoc_test", "users")
    users = odm.create_model("users", {"id": str})

    await users.ready()

    assert ("polydoc_test", "users") in connection.tables


@pytest.mark.asyncio
async def test_model_without_init_skips_table_creation(odm, connection):
    cache = odm.create_model("cache", {"id": str}, {"init": False})

    await cache.ready()

    assert ("polydoc_test", "cache") not in connection.tables


@pytest.mark.asyncio
async def test_close_closes_the_handle(odm, connection):
    await odm.close()

    assert connection.closed
