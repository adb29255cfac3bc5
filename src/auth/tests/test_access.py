from uuid import uuid4

import pytest

from src.auth.access import AccessMethod
from src.errors import Unauthorized
from src.events.dtos import EventDTO, ViewerRole
from src.events.repository.tests.inmemory_models import sample_details


@pytest.fixture
def open_event() -> EventDTO:
    return EventDTO(id=uuid4(), share_token="open-share", details=sample_details())


@pytest.fixture
def protected_event(password_hasher) -> EventDTO:
    return EventDTO(
        id=uuid4(),
        share_token="secret-share",
        details=sample_details(),
        password_hash=password_hasher.hash("letmein"),
        password_version=3,
    )


async def test_admin_token_bypasses_password(access_control, token_service, protected_event):
    grant = await access_control.resolve_event_access(
        protected_event, bearer=token_service.issue_admin_token()
    )

    assert grant.role == ViewerRole.ADMIN
    assert grant.method == AccessMethod.ADMIN_TOKEN


async def test_open_event_is_public(access_control, open_event):
    grant = await access_control.resolve_event_access(open_event)

    assert grant.role == ViewerRole.PUBLIC
    assert grant.method == AccessMethod.OPEN_EVENT
    assert grant.guest_access_token is None


async def test_protected_event_without_proof_is_denied(access_control, protected_event):
    assert await access_control.resolve_event_access(protected_event) is None
    assert await access_control.resolve_event_access(protected_event, bearer="garbage") is None
    with pytest.raises(Unauthorized):
        await access_control.require_event_access(protected_event)


async def test_password_mints_scoped_guest_token(access_control, token_service, protected_event):
    grant = await access_control.resolve_event_access(protected_event, password="letmein")

    assert grant.role == ViewerRole.GUEST
    assert grant.method == AccessMethod.PASSWORD
    token_service.verify_guest_access_token(grant.guest_access_token, protected_event.id, 3)

    again = await access_control.resolve_event_access(protected_event, bearer=grant.guest_access_token)
    assert again.method == AccessMethod.GUEST_TOKEN


async def test_wrong_password_is_denied(access_control, protected_event):
    assert await access_control.resolve_event_access(protected_event, password="nope") is None


async def test_guest_token_for_other_event_is_denied(access_control, token_service, protected_event):
    other_token = token_service.issue_guest_access_token(uuid4(), password_version=3)

    assert await access_control.resolve_event_access(protected_event, bearer=other_token) is None


async def test_guest_token_from_previous_password_is_denied(access_control, token_service, protected_event):
    stale = token_service.issue_guest_access_token(protected_event.id, password_version=2)

    assert await access_control.resolve_event_access(protected_event, bearer=stale) is None


async def test_share_link_only_when_allowed(access_control, password_hasher):
    event = EventDTO(
        id=uuid4(),
        share_token="share-abc",
        details=sample_details(allow_share_link=True),
        password_hash=password_hasher.hash("letmein"),
    )
    locked = EventDTO(
        id=uuid4(),
        share_token="share-abc",
        details=sample_details(allow_share_link=False),
        password_hash=password_hasher.hash("letmein"),
    )

    grant = await access_control.resolve_event_access(event, share_link="share-abc")
    assert grant.method == AccessMethod.SHARE_LINK
    assert grant.guest_access_token is not None

    assert await access_control.resolve_event_access(event, share_link="share-xyz") is None
    assert await access_control.resolve_event_access(locked, share_link="share-abc") is None


def test_require_admin(access_control, token_service):
    assert access_control.require_admin(token_service.issue_admin_token()).role == ViewerRole.ADMIN
    with pytest.raises(Unauthorized):
        access_control.require_admin(token_service.issue_guest_access_token(uuid4()))
    with pytest.raises(Unauthorized):
        access_control.require_admin(None)
