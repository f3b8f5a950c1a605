"""
PlaceShare Backend: Transactional Place Writer
==============================================

What:  The only code that mutates places. Create and delete touch two
       records (the place row and the owner's membership row) and run as one
       atomic unit; update touches the place row alone.
How:   Each unit is opened through `Database.transaction()` and bounded by
       DB_TRANSACTION_TIMEOUT with `asyncio.timeout`. Any SQLAlchemy error or
       an expired deadline rolls the whole unit back. Outcomes are returned as
       a `Result`; nothing here raises for an expected failure. The lookups
       before a unit and the update session get the same deadline.

Create:
    owner lookup ─▶ (missing) NOT_FOUND, no transaction
         │
         ▼
    BEGIN ─▶ INSERT place ─▶ INSERT membership ─▶ COMMIT
         └──────────── any error / deadline ─▶ ROLLBACK, INTERNAL

Delete:
    load place ─▶ (missing) NOT_FOUND
         │  capture image_path
         ▼
    OwnershipGuard ─▶ (mismatch) UNAUTHORIZED, no transaction
         │
         ▼
    BEGIN ─▶ DELETE place ─▶ DELETE membership ─▶ COMMIT ─▶ Ok(image_path)

The image file is not handled here. The caller releases it according to the
returned outcome.
"""

import asyncio
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError

from placeshare.database import Database
from placeshare.models.place import Place
from placeshare.repositories import PlaceRepository, UserRepository
from placeshare.results import ErrorKind, Result
from placeshare.schemas.place import Coordinates, PlaceCreate, PlaceUpdate
from placeshare.services.ownership import OwnershipGuard

logger = logging.getLogger(__name__)

CREATE_FAILED = "Creating place failed, please try again."
DELETE_FAILED = "Something went wrong, could not delete place."
UPDATE_FAILED = "Something went wrong, could not update place."
PLACE_NOT_FOUND = "Could not find place for the provided id."
USER_NOT_FOUND = "Could not find user for provided id."


class PlaceWriter:
    def __init__(self, database: Database, guard: OwnershipGuard, timeout: float):
        self.database = database
        self.guard = guard
        self.timeout = timeout

    async def create(
        self,
        data: PlaceCreate,
        location: Coordinates,
        image_path: str,
        creator_id: uuid.UUID,
    ) -> Result[Place]:
        """
        Insert the place and its membership row atomically.

        Args:
            data:        validated title / description / address
            location:    geocoder output
            image_path:  public path of the already stored image
            creator_id:  authenticated caller, who becomes the owner

        Returns:
            Ok(place), or NOT_FOUND (owner missing) / INTERNAL (unit aborted).
        """
        try:
            async with asyncio.timeout(self.timeout):
                async with self.database.session() as session:
                    owner = await UserRepository(session).get(creator_id)
        except TimeoutError:
            logger.error("Owner lookup exceeded %.1fs deadline", self.timeout)
            return Result.fail(ErrorKind.INTERNAL, CREATE_FAILED, reason="timeout")
        except SQLAlchemyError as e:
            logger.error("Owner lookup failed for %s: %s", creator_id, str(e))
            return Result.fail(ErrorKind.INTERNAL, CREATE_FAILED, creator_id=str(creator_id))

        if owner is None:
            return Result.fail(ErrorKind.NOT_FOUND, USER_NOT_FOUND, creator_id=str(creator_id))

        try:
            async with asyncio.timeout(self.timeout):
                async with self.database.transaction() as session:
                    place = await PlaceRepository(session).add(
                        title=data.title,
                        description=data.description,
                        address=data.address,
                        latitude=location.latitude,
                        longitude=location.longitude,
                        image_path=image_path,
                        creator_id=owner.id,
                    )
                    await UserRepository(session).append_place(owner.id, place.id)
        except TimeoutError:
            logger.error("Create transaction exceeded %.1fs deadline; rolled back", self.timeout)
            return Result.fail(ErrorKind.INTERNAL, CREATE_FAILED, reason="timeout")
        except SQLAlchemyError as e:
            logger.error("Create transaction rolled back: %s", str(e))
            return Result.fail(ErrorKind.INTERNAL, CREATE_FAILED, error_type=type(e).__name__)

        logger.info("Place %s created by user %s", place.id, owner.id)
        return Result.success(place)

    async def delete(self, place_id: uuid.UUID, caller_id: uuid.UUID) -> Result[str]:
        """
        Delete the place and its membership row atomically.

        Returns:
            Ok(image_path of the deleted place) for the caller to release, or
            NOT_FOUND / UNAUTHORIZED / INTERNAL with nothing changed.
        """
        try:
            async with asyncio.timeout(self.timeout):
                async with self.database.session() as session:
                    place = await PlaceRepository(session).get(place_id)
        except TimeoutError:
            logger.error("Place lookup exceeded %.1fs deadline", self.timeout)
            return Result.fail(ErrorKind.INTERNAL, DELETE_FAILED, reason="timeout")
        except SQLAlchemyError as e:
            logger.error("Place lookup failed for %s: %s", place_id, str(e))
            return Result.fail(ErrorKind.INTERNAL, DELETE_FAILED, place_id=str(place_id))

        if place is None:
            return Result.fail(ErrorKind.NOT_FOUND, PLACE_NOT_FOUND, place_id=str(place_id))

        image_path = place.image_path
        owner_id = place.creator_id

        allowed = self.guard.authorize(
            owner_id, caller_id, "You are not allowed to delete this place."
        )
        if not allowed.ok:
            return allowed.cast()

        try:
            async with asyncio.timeout(self.timeout):
                async with self.database.transaction() as session:
                    deleted = await PlaceRepository(session).delete(place_id)
                    if deleted == 0:
                        # Removed by a concurrent request since the lookup above
                        return Result.fail(
                            ErrorKind.NOT_FOUND, PLACE_NOT_FOUND, place_id=str(place_id)
                        )
                    await UserRepository(session).remove_place(owner_id, place_id)
        except TimeoutError:
            logger.error("Delete transaction exceeded %.1fs deadline; rolled back", self.timeout)
            return Result.fail(ErrorKind.INTERNAL, DELETE_FAILED, reason="timeout")
        except SQLAlchemyError as e:
            logger.error("Delete transaction rolled back: %s", str(e))
            return Result.fail(ErrorKind.INTERNAL, DELETE_FAILED, error_type=type(e).__name__)

        logger.info("Place %s deleted by user %s", place_id, caller_id)
        return Result.success(image_path)

    async def update(
        self,
        place_id: uuid.UUID,
        caller_id: uuid.UUID,
        data: PlaceUpdate,
    ) -> Result[Place]:
        """Owner-only title/description edit; a single-row write."""
        try:
            async with asyncio.timeout(self.timeout):
                async with self.database.session() as session:
                    repo = PlaceRepository(session)
                    place = await repo.get(place_id)
                    if place is None:
                        return Result.fail(ErrorKind.NOT_FOUND, PLACE_NOT_FOUND, place_id=str(place_id))

                    allowed = self.guard.authorize(
                        place.creator_id, caller_id, "You are not allowed to edit this place."
                    )
                    if not allowed.ok:
                        return allowed.cast()

                    await repo.update_text(place, data.title, data.description)
                    await session.commit()
        except TimeoutError:
            logger.error("Update of place %s exceeded %.1fs deadline", place_id, self.timeout)
            return Result.fail(ErrorKind.INTERNAL, UPDATE_FAILED, reason="timeout")
        except SQLAlchemyError as e:
            logger.error("Update of place %s failed: %s", place_id, str(e))
            return Result.fail(ErrorKind.INTERNAL, UPDATE_FAILED, place_id=str(place_id))

        return Result.success(place)
