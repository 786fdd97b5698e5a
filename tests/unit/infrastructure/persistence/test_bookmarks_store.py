"""Unit tests for BookmarksStore against a real SQLite database."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from xbs.domain.entities import INITIAL_VERSION
from xbs.domain.exceptions import (
    BookmarksNotFoundError,
    StorageError,
    VersionConflictError,
)
from xbs.domain.services import BookmarksIdGenerator, format_timestamp
from xbs.infrastructure.persistence.bookmarks_store import BookmarksStore
from xbs.infrastructure.persistence.models import BookmarksModel

UNKNOWN_ID = "0" * 32


async def count_rows(store: BookmarksStore) -> int:
    async with store.db.session() as session:
        result = await session.execute(select(func.count()).select_from(BookmarksModel))
        return result.scalar_one()


class TestCreate:
    """Tests for BookmarksStore.create."""

    @pytest.mark.asyncio
    async def test_create_returns_new_id_with_initial_state(self, store):
        result = await store.create()

        assert BookmarksIdGenerator.validate(result.id)
        assert result.version == INITIAL_VERSION

        bookmarks = await store.get_payload(result.id)
        assert bookmarks.payload == ""
        assert bookmarks.version == INITIAL_VERSION
        assert bookmarks.last_updated == result.last_updated

    @pytest.mark.asyncio
    async def test_create_ids_are_distinct(self, store):
        results = await asyncio.gather(*(store.create() for _ in range(20)))

        ids = [result.id for result in results]
        assert len(set(ids)) == len(ids)
        assert await count_rows(store) == 20

    @pytest.mark.asyncio
    async def test_create_retries_on_id_collision(self, db_manager):
        existing = BookmarksStore(db_manager, id_generator=lambda: "a" * 32)
        await existing.create()

        ids = iter(["a" * 32, "b" * 32])
        store = BookmarksStore(db_manager, id_generator=lambda: next(ids))

        result = await store.create()

        assert result.id == "b" * 32
        assert await count_rows(store) == 2

    @pytest.mark.asyncio
    async def test_create_gives_up_after_repeated_collisions(self, db_manager):
        store = BookmarksStore(db_manager, id_generator=lambda: "a" * 32)
        await store.create()

        with pytest.raises(StorageError, match="Could not allocate a bookmarks ID") as exc_info:
            await store.create()

        assert exc_info.value.__cause__ is None
        assert await count_rows(store) == 1


class TestReads:
    """Tests for the BookmarksStore read operations."""

    @pytest.mark.asyncio
    async def test_get_version_after_create(self, store):
        created = await store.create()

        assert await store.get_version(created.id) == INITIAL_VERSION

    @pytest.mark.asyncio
    async def test_get_last_updated_after_create(self, store):
        created = await store.create()

        assert await store.get_last_updated(created.id) == created.last_updated

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["get_payload", "get_version", "get_last_updated"])
    async def test_read_unknown_id(self, store, operation):
        with pytest.raises(BookmarksNotFoundError) as exc_info:
            await getattr(store, operation)(UNKNOWN_ID)

        assert exc_info.value.bookmarks_id == UNKNOWN_ID

    @pytest.mark.asyncio
    async def test_reads_are_idempotent(self, store):
        created = await store.create()
        await store.update(created.id, "payload", expected_version=INITIAL_VERSION)

        first = (
            await store.get_payload(created.id),
            await store.get_version(created.id),
            await store.get_last_updated(created.id),
        )
        second = (
            await store.get_payload(created.id),
            await store.get_version(created.id),
            await store.get_last_updated(created.id),
        )

        assert first == second


class TestUpdate:
    """Tests for BookmarksStore.update."""

    @pytest.mark.asyncio
    async def test_update_with_current_version(self, store):
        created = await store.create()

        result = await store.update(created.id, "X", expected_version=created.version)

        assert result.version > created.version
        assert await store.get_version(created.id) == result.version

    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        created = await store.create()
        before = format_timestamp(datetime.now(timezone.utc))

        result = await store.update(created.id, "X", expected_version=INITIAL_VERSION)

        bookmarks = await store.get_payload(created.id)
        assert (bookmarks.payload, bookmarks.version) == ("X", result.version)
        assert await store.get_last_updated(created.id) >= before
        assert bookmarks.last_updated == result.last_updated

    @pytest.mark.asyncio
    async def test_update_with_stale_version_conflicts(self, store):
        created = await store.create()
        first = await store.update(created.id, "first", expected_version=INITIAL_VERSION)

        with pytest.raises(VersionConflictError) as exc_info:
            await store.update(created.id, "second", expected_version=INITIAL_VERSION)

        assert exc_info.value.current_version == first.version
        assert exc_info.value.expected_version == INITIAL_VERSION

        bookmarks = await store.get_payload(created.id)
        assert bookmarks.payload == "first"
        assert bookmarks.version == first.version
        assert bookmarks.last_updated == first.last_updated

    @pytest.mark.asyncio
    async def test_update_with_future_version_conflicts(self, store):
        created = await store.create()

        with pytest.raises(VersionConflictError):
            await store.update(created.id, "X", expected_version=INITIAL_VERSION + 5)

        assert await store.get_version(created.id) == INITIAL_VERSION

    @pytest.mark.asyncio
    async def test_update_unknown_id_creates_nothing(self, store):
        with pytest.raises(BookmarksNotFoundError):
            await store.update(UNKNOWN_ID, "X", expected_version=INITIAL_VERSION)

        with pytest.raises(BookmarksNotFoundError):
            await store.update(UNKNOWN_ID, "X")

        assert await count_rows(store) == 0

    @pytest.mark.asyncio
    async def test_update_without_expected_version_overwrites(self, store):
        created = await store.create()
        await store.update(created.id, "first")

        result = await store.update(created.id, "second")

        assert result.version == INITIAL_VERSION + 2
        assert (await store.get_payload(created.id)).payload == "second"

    @pytest.mark.asyncio
    async def test_versions_strictly_increase(self, store):
        created = await store.create()
        versions = [created.version]

        for i in range(5):
            result = await store.update(created.id, f"p{i}", expected_version=versions[-1])
            versions.append(result.version)

        assert versions == sorted(set(versions))

    @pytest.mark.asyncio
    async def test_update_accepts_empty_payload(self, store):
        created = await store.create()
        await store.update(created.id, "X")

        await store.update(created.id, "")

        assert (await store.get_payload(created.id)).payload == ""

    @pytest.mark.asyncio
    async def test_last_updated_never_moves_backwards(self, db_manager, fake_clock_factory):
        clock = fake_clock_factory(
            "2026-01-01T00:00:10.000000Z",
            "2026-01-01T00:00:05.000000Z",
        )
        store = BookmarksStore(db_manager, clock=clock)
        created = await store.create()

        result = await store.update(created.id, "X")

        assert result.last_updated == "2026-01-01T00:00:10.000000Z"
        assert result.version == INITIAL_VERSION + 1

    @pytest.mark.asyncio
    async def test_concurrent_updates_with_same_version(self, store):
        created = await store.create()

        outcomes = await asyncio.gather(
            store.update(created.id, "p1", expected_version=INITIAL_VERSION),
            store.update(created.id, "p2", expected_version=INITIAL_VERSION),
            return_exceptions=True,
        )

        winners = [o for o in outcomes if not isinstance(o, Exception)]
        losers = [o for o in outcomes if isinstance(o, Exception)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert isinstance(losers[0], VersionConflictError)
        assert losers[0].current_version == winners[0].version

        bookmarks = await store.get_payload(created.id)
        assert bookmarks.version == winners[0].version
        assert bookmarks.payload in ("p1", "p2")

    @pytest.mark.asyncio
    async def test_many_concurrent_writers_single_winner_per_version(self, store):
        created = await store.create()

        outcomes = await asyncio.gather(
            *(
                store.update(created.id, f"p{i}", expected_version=INITIAL_VERSION)
                for i in range(8)
            ),
            return_exceptions=True,
        )

        winners = [o for o in outcomes if not isinstance(o, Exception)]
        assert len(winners) == 1
        assert all(
            isinstance(o, VersionConflictError) for o in outcomes if o not in winners
        )
        assert await store.get_version(created.id) == INITIAL_VERSION + 1

    @pytest.mark.asyncio
    async def test_updates_on_different_ids_are_independent(self, store):
        first = await store.create()
        second = await store.create()

        results = await asyncio.gather(
            store.update(first.id, "a", expected_version=INITIAL_VERSION),
            store.update(second.id, "b", expected_version=INITIAL_VERSION),
        )

        assert [r.version for r in results] == [INITIAL_VERSION + 1] * 2


class TestStorageErrors:
    """Database failures surface as StorageError."""

    @pytest.mark.asyncio
    async def test_read_failure_raises_storage_error(self, store):
        failure = OperationalError("SELECT", {}, Exception("disk I/O error"))
        with patch(
            "xbs.infrastructure.persistence.bookmarks_store.BookmarksRepository.get_version",
            AsyncMock(side_effect=failure),
        ):
            with pytest.raises(StorageError) as exc_info:
                await store.get_version(UNKNOWN_ID)

        assert exc_info.value.__cause__ is failure

    @pytest.mark.asyncio
    async def test_update_failure_writes_nothing(self, store):
        created = await store.create()
        failure = OperationalError("UPDATE", {}, Exception("database is locked"))

        with patch(
            "xbs.infrastructure.persistence.bookmarks_store.BookmarksRepository.update_payload",
            AsyncMock(side_effect=failure),
        ):
            with pytest.raises(StorageError):
                await store.update(created.id, "X", expected_version=INITIAL_VERSION)

        bookmarks = await store.get_payload(created.id)
        assert bookmarks.payload == ""
        assert bookmarks.version == INITIAL_VERSION
