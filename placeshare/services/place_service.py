"""
PlaceShare Backend: Place Service (Business Logic Orchestrator)
===============================================================

What:  Coordinates id parsing, validation, geocoding, image storage, the
       transactional writer and image cleanup for every place operation.
Who:   Called by routes/places.py; the only layer that converts a core
       `Result` into an exception (`unwrap()`).

Orchestration Flow (POST /api/places):
    ┌──────────┐   ┌──────────┐   ┌──────────┐   ┌──────────┐   ┌──────────┐
    │ Validate │──▶│ Validate │──▶│ Geocode  │──▶│  Store   │──▶│  Writer  │
    │  fields  │   │  image   │   │ address  │   │  image   │   │ (atomic) │
    └──────────┘   └──────────┘   └──────────┘   └──────────┘   └──────────┘
    Steps 1-3 have no side effects. If the writer does not succeed, the
    stored image is released through ResourceCleaner.

Delete releases the image only after the transaction committed; the cleanup
outcome never changes the response.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from placeshare.exceptions import BadRequestError, DatabaseError, NotFoundError
from placeshare.models.place import Place
from placeshare.repositories import PlaceRepository, UserRepository
from placeshare.schemas.common import validate_form
from placeshare.schemas.place import PlaceCreate, PlaceUpdate
from placeshare.services.file_service import FileService
from placeshare.services.geocoding import GeocodingResolver
from placeshare.services.place_writer import PLACE_NOT_FOUND, PlaceWriter
from placeshare.services.resource_cleaner import ResourceCleaner

logger = logging.getLogger(__name__)

PLACES_NOT_FOUND = "Could not find places for the provided user id."


def parse_uuid(raw: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(raw.strip())
    except (ValueError, TypeError, AttributeError):
        return None


class PlaceService:
    def __init__(
        self,
        file_service: FileService,
        cleaner: ResourceCleaner,
        geocoder: GeocodingResolver,
        writer: PlaceWriter,
    ):
        self.file_service = file_service
        self.cleaner = cleaner
        self.geocoder = geocoder
        self.writer = writer

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_place(self, db: AsyncSession, raw_place_id: str) -> Place:
        place_id = parse_uuid(raw_place_id)
        if place_id is None:
            raise NotFoundError(message=PLACE_NOT_FOUND, resource="place", resource_id=raw_place_id)

        try:
            place = await PlaceRepository(db).get(place_id)
        except SQLAlchemyError as e:
            raise DatabaseError(
                message="Something went wrong, could not find a place.",
                context={"place_id": raw_place_id, "error": str(e)},
            )

        if place is None:
            raise NotFoundError(message=PLACE_NOT_FOUND, resource="place", resource_id=raw_place_id)
        return place

    async def list_for_user(self, db: AsyncSession, raw_user_id: str) -> List[Place]:
        """Places in the user's membership set; an unknown user or an empty set is a 404."""
        user_id = parse_uuid(raw_user_id)
        if user_id is None:
            raise NotFoundError(message=PLACES_NOT_FOUND, resource="user", resource_id=raw_user_id)

        try:
            user = await UserRepository(db).get(user_id)
            places = await PlaceRepository(db).list_for_user(user_id) if user else []
        except SQLAlchemyError as e:
            raise DatabaseError(
                message="Fetching places failed, please try again later.",
                context={"user_id": raw_user_id, "error": str(e)},
            )

        if not places:
            raise NotFoundError(message=PLACES_NOT_FOUND, resource="user", resource_id=raw_user_id)
        return places

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_place(
        self,
        creator_id: uuid.UUID,
        title: str,
        description: str,
        address: str,
        filename: str,
        content_type: Optional[str],
        content: bytes,
    ) -> Place:
        data = validate_form(PlaceCreate, title=title, description=description, address=address)
        extension = self.file_service.validate(filename, content_type, content)

        # Raises GeocodingError before anything is written
        location = await self.geocoder.resolve(data.address)

        image_path = await self.file_service.store_file(content, extension)

        try:
            result = await self.writer.create(data, location, image_path, creator_id)
        except Exception:
            self.cleaner.release(image_path)
            raise

        if not result.ok:
            logger.warning(
                "Create failed (%s); releasing stored image %s", result.kind.value, image_path
            )
            self.cleaner.release(image_path)
        return result.unwrap()

    async def update_place(
        self,
        raw_place_id: str,
        caller_id: uuid.UUID,
        data: PlaceUpdate,
    ) -> Place:
        place_id = parse_uuid(raw_place_id)
        if place_id is None:
            raise NotFoundError(message=PLACE_NOT_FOUND, resource="place", resource_id=raw_place_id)

        result = await self.writer.update(place_id, caller_id, data)
        return result.unwrap()

    async def delete_place(self, raw_place_id: str, caller_id: uuid.UUID) -> None:
        place_id = parse_uuid(raw_place_id)
        if place_id is None:
            raise BadRequestError(context={"place_id": raw_place_id})

        result = await self.writer.delete(place_id, caller_id)
        image_path = result.unwrap()

        # Committed; file removal runs in the background and is never awaited here
        self.cleaner.release(image_path)
