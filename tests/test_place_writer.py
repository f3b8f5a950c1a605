"""
PlaceShare Backend: Transactional Writer Tests
==============================================

What:  PlaceWriter against a real SQLite database, with failures injected
       into the repositories to prove both-or-neither behaviour.

What we test:
    ✅ Create inserts the place and the owner's membership together
    ✅ A failure after the place insert leaves neither record
    ✅ A missing owner is NOT_FOUND and opens no transaction
    ✅ The transaction deadline aborts and rolls back
    ✅ Lookups and the update session share the same deadline
    ✅ Delete removes both records; a failure midway removes neither
    ✅ Non-owners get UNAUTHORIZED and nothing changes
    ✅ Update is owner-only and leaves location untouched
"""

import asyncio
from unittest.mock import patch
from uuid import uuid4

import pytest
import pytest_asyncio
import sqlalchemy as sa
from sqlalchemy.exc import OperationalError

from placeshare.models.place import Place
from placeshare.models.user import PlaceMembership
from placeshare.repositories import PlaceRepository, UserRepository
from placeshare.results import ErrorKind
from placeshare.schemas.place import Coordinates, PlaceCreate, PlaceUpdate
from placeshare.services.ownership import OwnershipGuard
from placeshare.services.place_writer import PlaceWriter

LOCATION = Coordinates(latitude=40.7484405, longitude=-73.9878584)
IMAGE_PATH = "uploads/images/0b6f1d7e-1111-4d6c-9a57-3a0c6a1b2c3d.jpg"


def place_data(**overrides) -> PlaceCreate:
    values = dict(
        title="Empire State",
        description="One of the most famous sky scrapers in the world!",
        address="20 W 34th St, New York, NY 10001",
    )
    values.update(overrides)
    return PlaceCreate(**values)


async def count_rows(database, model) -> int:
    async with database.session() as session:
        result = await session.execute(sa.select(sa.func.count()).select_from(model))
        return result.scalar_one()


async def member_place_ids(session, user_id) -> list:
    result = await session.execute(
        sa.select(PlaceMembership.place_id).where(PlaceMembership.user_id == user_id)
    )
    return list(result.scalars().all())


@pytest_asyncio.fixture
async def owner(database):
    async with database.transaction() as session:
        user = await UserRepository(session).add(
            name="Ada", email="ada@mail.com", password_hash="x", image_path="uploads/images/ada.jpg"
        )
    return user


@pytest_asyncio.fixture
async def other_user(database):
    async with database.transaction() as session:
        user = await UserRepository(session).add(
            name="Bob", email="bob@mail.com", password_hash="x", image_path="uploads/images/bob.jpg"
        )
    return user


@pytest_asyncio.fixture
async def existing_place(writer, owner):
    result = await writer.create(place_data(), LOCATION, IMAGE_PATH, owner.id)
    assert result.ok
    return result.value


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_inserts_place_and_membership(self, writer, database, owner):
        result = await writer.create(place_data(), LOCATION, IMAGE_PATH, owner.id)

        assert result.ok
        place = result.value
        assert place.creator_id == owner.id
        assert place.image_path == IMAGE_PATH
        assert place.latitude == pytest.approx(LOCATION.latitude)

        async with database.session() as session:
            assert await PlaceRepository(session).get(place.id) is not None
            assert await member_place_ids(session, owner.id) == [place.id]

    @pytest.mark.asyncio
    async def test_membership_failure_rolls_back_place(self, writer, database, owner):
        with patch.object(
            UserRepository,
            "append_place",
            side_effect=OperationalError("INSERT INTO user_places", {}, Exception("disk I/O error")),
        ):
            result = await writer.create(place_data(), LOCATION, IMAGE_PATH, owner.id)

        assert result.kind is ErrorKind.INTERNAL
        assert result.failure.message == "Creating place failed, please try again."
        assert await count_rows(database, Place) == 0
        assert await count_rows(database, PlaceMembership) == 0

    @pytest.mark.asyncio
    async def test_missing_owner_is_not_found(self, writer, database):
        with patch.object(database, "transaction") as transaction:
            result = await writer.create(place_data(), LOCATION, IMAGE_PATH, uuid4())

        assert result.kind is ErrorKind.NOT_FOUND
        assert result.failure.message == "Could not find user for provided id."
        transaction.assert_not_called()
        assert await count_rows(database, Place) == 0

    @pytest.mark.asyncio
    async def test_deadline_aborts_transaction(self, database, owner):
        writer = PlaceWriter(database, OwnershipGuard(), timeout=0.05)
        original_append = UserRepository.append_place

        async def stalled_append(self, user_id, place_id):
            await original_append(self, user_id, place_id)
            await asyncio.sleep(1)

        with patch.object(UserRepository, "append_place", stalled_append):
            result = await writer.create(place_data(), LOCATION, IMAGE_PATH, owner.id)

        assert result.kind is ErrorKind.INTERNAL
        assert result.failure.context["reason"] == "timeout"
        assert await count_rows(database, Place) == 0
        assert await count_rows(database, PlaceMembership) == 0


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_removes_place_and_membership(self, writer, database, owner, existing_place):
        result = await writer.delete(existing_place.id, owner.id)

        assert result.ok
        assert result.value == IMAGE_PATH
        async with database.session() as session:
            assert await PlaceRepository(session).get(existing_place.id) is None
            assert await member_place_ids(session, owner.id) == []

    @pytest.mark.asyncio
    async def test_membership_failure_keeps_both_records(self, writer, database, owner, existing_place):
        with patch.object(
            UserRepository,
            "remove_place",
            side_effect=OperationalError("DELETE FROM user_places", {}, Exception("database is locked")),
        ):
            result = await writer.delete(existing_place.id, owner.id)

        assert result.kind is ErrorKind.INTERNAL
        assert result.failure.message == "Something went wrong, could not delete place."
        async with database.session() as session:
            assert await PlaceRepository(session).get(existing_place.id) is not None
            assert await member_place_ids(session, owner.id) == [existing_place.id]

    @pytest.mark.asyncio
    async def test_non_owner_is_unauthorized(self, writer, database, owner, other_user, existing_place):
        with patch.object(database, "transaction") as transaction:
            result = await writer.delete(existing_place.id, other_user.id)

        assert result.kind is ErrorKind.UNAUTHORIZED
        assert result.failure.message == "You are not allowed to delete this place."
        transaction.assert_not_called()
        async with database.session() as session:
            assert await PlaceRepository(session).get(existing_place.id) is not None
            assert await member_place_ids(session, owner.id) == [existing_place.id]

    @pytest.mark.asyncio
    async def test_missing_place_is_not_found(self, writer, owner):
        result = await writer.delete(uuid4(), owner.id)
        assert result.kind is ErrorKind.NOT_FOUND


class TestUpdate:
    @pytest.mark.asyncio
    async def test_owner_updates_text_only(self, writer, database, owner, existing_place):
        data = PlaceUpdate(title="Empire State Building", description="Still very tall indeed.")
        result = await writer.update(existing_place.id, owner.id, data)

        assert result.ok
        async with database.session() as session:
            stored = await PlaceRepository(session).get(existing_place.id)
        assert stored.title == "Empire State Building"
        assert stored.description == "Still very tall indeed."
        assert stored.address == existing_place.address
        assert stored.latitude == pytest.approx(existing_place.latitude)

    @pytest.mark.asyncio
    async def test_non_owner_cannot_update(self, writer, database, other_user, existing_place):
        data = PlaceUpdate(title="Mine now", description="Hijacked description")
        result = await writer.update(existing_place.id, other_user.id, data)

        assert result.kind is ErrorKind.UNAUTHORIZED
        assert result.failure.message == "You are not allowed to edit this place."
        async with database.session() as session:
            stored = await PlaceRepository(session).get(existing_place.id)
        assert stored.title == "Empire State"

    @pytest.mark.asyncio
    async def test_missing_place(self, writer, owner):
        data = PlaceUpdate(title="Title", description="Long enough")
        result = await writer.update(uuid4(), owner.id, data)
        assert result.kind is ErrorKind.NOT_FOUND


class TestDeadlines:
    @pytest.fixture
    def short_writer(self, database):
        return PlaceWriter(database, OwnershipGuard(), timeout=0.05)

    @staticmethod
    async def stalled(*args, **kwargs):
        await asyncio.sleep(1)

    @pytest.mark.asyncio
    async def test_owner_lookup_is_bounded(self, short_writer, database, owner):
        with patch.object(UserRepository, "get", self.stalled), patch.object(database, "transaction") as transaction:
            result = await short_writer.create(place_data(), LOCATION, IMAGE_PATH, owner.id)

        assert result.kind is ErrorKind.INTERNAL
        assert result.failure.context["reason"] == "timeout"
        transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_place_lookup_on_delete_is_bounded(self, short_writer, database, owner, existing_place):
        with patch.object(PlaceRepository, "get", self.stalled):
            result = await short_writer.delete(existing_place.id, owner.id)

        assert result.kind is ErrorKind.INTERNAL
        assert result.failure.context["reason"] == "timeout"
        async with database.session() as session:
            assert await PlaceRepository(session).get(existing_place.id) is not None

    @pytest.mark.asyncio
    async def test_update_is_bounded(self, short_writer, database, owner, existing_place):
        data = PlaceUpdate(title="Empire State Building", description="Still very tall indeed.")
        with patch.object(PlaceRepository, "update_text", self.stalled):
            result = await short_writer.update(existing_place.id, owner.id, data)

        assert result.kind is ErrorKind.INTERNAL
        assert result.failure.message == "Something went wrong, could not update place."
        async with database.session() as session:
            stored = await PlaceRepository(session).get(existing_place.id)
        assert stored.title == "Empire State"
