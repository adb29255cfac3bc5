import pytest

from src.email_service.mailer import RsvpMailer
from src.events.repository.tests.inmemory_models import (
    InMemoryEmailService,
    InMemoryEventStore,
    InMemoryEventUnitOfWork,
    sample_details,
)
from src.guests.features.submit_rsvp.service import SubmitRsvpService, get_submit_rsvp_service
from src.guests.urls import SUBMIT_RSVP_URL

RSVP_URL = SUBMIT_RSVP_URL.format(share_token="open")


@pytest.fixture
def store(password_hasher) -> InMemoryEventStore:
    store = InMemoryEventStore()
    store.add_event(sample_details(), share_token="open")
    store.add_event(
        sample_details(),
        share_token="gated",
        password_hash=password_hasher.hash("party-time"),
    )
    return store


@pytest.fixture
def overrides(store, access_control):
    mailer = RsvpMailer(InMemoryEmailService(), "https://party.test")
    service = SubmitRsvpService(InMemoryEventUnitOfWork(store), access_control, mailer)
    return {get_submit_rsvp_service: lambda: service}


@pytest.mark.asyncio
async def test_submit_rsvp(client_factory, overrides):
    async with client_factory(overrides) as client:
        response = await client.post(
            RSVP_URL,
            json={"name": "Ann", "status": "attending", "plus_ones": 1, "email": "ann@x.com"},
        )

    assert response.status_code == 200
    data = response.json()
    assert data["guest"]["name"] == "Ann"
    assert data["guest"]["manage_token"] == data["manage_token"]
    assert data["event"]["attendee_count"] == 2
    assert data["event"]["guests"][0]["manage_token"] is None


@pytest.mark.asyncio
async def test_resubmit_with_manage_token_header(client_factory, overrides, store):
    async with client_factory(overrides) as client:
        first = await client.post(RSVP_URL, json={"name": "Ann", "status": "attending"})
        second = await client.post(
            RSVP_URL,
            json={"name": "Ann", "status": "not-attending"},
            headers={"X-Manage-Token": first.json()["manage_token"]},
        )

    assert second.status_code == 200
    assert second.json()["guest"]["id"] == first.json()["guest"]["id"]
    assert second.json()["guest"]["status"] == "not-attending"
    assert len(store.guests) == 1


@pytest.mark.asyncio
async def test_invalid_status(client_factory, overrides):
    async with client_factory(overrides) as client:
        response = await client.post(RSVP_URL, json={"name": "Ann", "status": "maybe"})

    assert response.status_code == 400
    assert response.json()["field"] == "status"


@pytest.mark.asyncio
async def test_oversized_name_is_a_validation_error(client_factory, overrides, store):
    async with client_factory(overrides) as client:
        response = await client.post(RSVP_URL, json={"name": "A" * 256, "status": "attending"})

    assert response.status_code == 400
    assert response.json()["field"] == "name"
    assert store.guests == {}


@pytest.mark.asyncio
async def test_identity_conflict(client_factory, overrides):
    async with client_factory(overrides) as client:
        await client.post(RSVP_URL, json={"name": "Ann", "status": "attending", "email": "a@x.com"})
        bea = await client.post(RSVP_URL, json={"name": "Bea", "status": "attending"})
        response = await client.post(
            RSVP_URL,
            json={
                "name": "Bea",
                "status": "attending",
                "email": "a@x.com",
                "manage_token": bea.json()["manage_token"],
            },
        )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_gated_event_without_token(client_factory, overrides):
    async with client_factory(overrides) as client:
        response = await client.post(
            SUBMIT_RSVP_URL.format(share_token="gated"), json={"name": "Ann", "status": "attending"}
        )

    assert response.status_code == 401
