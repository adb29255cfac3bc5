"""Tests for the SQL event repository, against a throwaway SQLite file."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import async_sessionmaker

from src.config.database import create_engine
from src.errors import ConflictRetryable, DependencyFailure
from src.events.repository import orm_models  # noqa: F401
from src.events.repository.repository import SqlEventRepository, SqlEventUnitOfWork
from src.events.repository.tests.inmemory_models import sample_details
from src.guests.dtos import GuestDraft, GuestStatus
from src.models.base import BaseModel

RESPONDED_AT = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
async def db_session(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'events.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    async with async_sessionmaker(engine, expire_on_commit=False)() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def repository(db_session) -> SqlEventRepository:
    return SqlEventRepository(db_session)


def _draft(**overrides) -> GuestDraft:
    values = {
        "name": "Ann",
        "status": GuestStatus.ATTENDING,
        "responded_at": RESPONDED_AT,
        "plus_ones": 1,
        "email": "a@x.com",
        "manage_token": "token-ann",
    }
    values.update(overrides)
    return GuestDraft(**values)


async def test_insert_and_fetch_event(repository):
    created = await repository.insert_event(
        sample_details(hero_images=["a.jpg"]), share_token="share-1", password_hash="hash"
    )

    by_id = await repository.get_event_by_id(created.id)
    by_share = await repository.get_event_by_share_token("share-1")

    assert by_id == by_share
    assert by_id.details.title == "Summer Party"
    assert by_id.details.hero_images == ["a.jpg"]
    assert by_id.details.theme.primary == "#4f46e5"
    assert by_id.password_protected
    assert by_id.password_version == 0
    assert await repository.get_event_by_share_token("missing") is None


async def test_update_event_replaces_details_and_password(repository):
    created = await repository.insert_event(sample_details(), share_token="share-1")

    updated = await repository.update_event(
        created.id, sample_details(title="Renamed", show_guest_list=False), "new-hash", 1
    )

    assert updated.id == created.id
    assert updated.share_token == "share-1"
    assert updated.details.title == "Renamed"
    assert updated.details.show_guest_list is False
    assert updated.password_hash == "new-hash"
    assert updated.password_version == 1
    assert [e.id for e in await repository.list_password_protected_events()] == [created.id]


async def test_delete_event_cascades_to_guests(repository):
    event = await repository.insert_event(sample_details(), share_token="share-1")
    guest = await repository.upsert_guest(event.id, _draft())

    assert await repository.delete_event(event.id) is True
    assert await repository.get_event_by_id(event.id) is None
    assert await repository.find_guest_by_manage_token(guest.manage_token) is None
    assert await repository.delete_event(event.id) is False


async def test_upsert_guest_insert_then_update(repository):
    event = await repository.insert_event(sample_details(), share_token="share-1")

    created = await repository.upsert_guest(event.id, _draft())
    updated = await repository.upsert_guest(
        event.id,
        _draft(status=GuestStatus.NOT_ATTENDING, plus_ones=0, email=None, manage_token="ignored"),
        guest_id=created.id,
    )

    assert updated.id == created.id
    assert updated.manage_token == "token-ann"
    assert updated.status == GuestStatus.NOT_ATTENDING
    assert updated.email is None
    assert await repository.find_guest_by_email(event.id, "a@x.com") is None


async def test_guests_ordered_by_most_recent_response(repository):
    event = await repository.insert_event(sample_details(), share_token="share-1")
    for offset, name in enumerate(["first", "second", "third"]):
        await repository.upsert_guest(
            event.id,
            _draft(
                name=name,
                email=None,
                manage_token=f"token-{name}",
                responded_at=RESPONDED_AT + timedelta(minutes=offset),
            ),
        )

    guests = await repository.get_guests_for_event(event.id)

    assert [g.name for g in guests] == ["third", "second", "first"]


async def test_duplicate_email_in_event_is_retryable_conflict(repository, db_session):
    event = await repository.insert_event(sample_details(), share_token="share-1")
    other_event = await repository.insert_event(sample_details(), share_token="share-2")
    await repository.upsert_guest(event.id, _draft())

    with pytest.raises(ConflictRetryable):
        await repository.upsert_guest(event.id, _draft(manage_token="token-ann-2"))

    # Savepoint rolled back; the session keeps working
    same_email_elsewhere = await repository.upsert_guest(
        other_event.id, _draft(manage_token="token-ann-3")
    )
    assert same_email_elsewhere.event_id == other_event.id
    assert len(await repository.get_guests_for_event(event.id)) == 1


async def test_duplicate_manage_token_is_retryable_conflict(repository):
    event = await repository.insert_event(sample_details(), share_token="share-1")
    await repository.upsert_guest(event.id, _draft())

    with pytest.raises(ConflictRetryable):
        await repository.upsert_guest(event.id, _draft(email="b@x.com"))


async def test_update_of_deleted_guest_is_retryable_conflict(repository):
    event = await repository.insert_event(sample_details(), share_token="share-1")
    guest = await repository.upsert_guest(event.id, _draft())
    await repository.delete_guest(event.id, guest.id)

    with pytest.raises(ConflictRetryable):
        await repository.upsert_guest(event.id, _draft(), guest_id=guest.id)


async def test_delete_guest_scoped_to_event(repository):
    event = await repository.insert_event(sample_details(), share_token="share-1")
    other_event = await repository.insert_event(sample_details(), share_token="share-2")
    guest = await repository.upsert_guest(event.id, _draft())

    assert await repository.delete_guest(other_event.id, guest.id) is False
    assert await repository.get_guest(event.id, guest.id) is not None
    assert await repository.delete_guest(event.id, guest.id) is True
    assert await repository.get_guest(event.id, guest.id) is None


async def test_unit_of_work_turns_storage_errors_into_dependency_failure(db_session):
    unit_of_work = SqlEventUnitOfWork(session_overwrite=db_session)

    with pytest.raises(DependencyFailure):
        async with unit_of_work.transaction() as repository:
            await repository.session.execute(text("SELECT * FROM no_such_table"))


async def test_unit_of_work_yields_repository_on_session(db_session):
    unit_of_work = SqlEventUnitOfWork(session_overwrite=db_session)

    async with unit_of_work.transaction() as repository:
        event = await repository.insert_event(sample_details(), share_token="share-1")

    assert (await SqlEventRepository(db_session).get_event_by_id(event.id)) is not None
