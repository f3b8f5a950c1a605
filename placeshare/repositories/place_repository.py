import uuid
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from placeshare.models.place import Place
from placeshare.models.user import PlaceMembership


class PlaceRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, place_id: uuid.UUID) -> Optional[Place]:
        result = await self.db.execute(sa.select(Place).where(Place.id == place_id))
        return result.scalars().first()

    async def list_for_user(self, user_id: uuid.UUID) -> List[Place]:
        """Places reachable through the user's membership index."""
        query = (
            sa.select(Place)
            .join(PlaceMembership, PlaceMembership.place_id == Place.id)
            .where(PlaceMembership.user_id == user_id)
            .order_by(Place.created_at)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def add(
        self,
        title: str,
        description: str,
        address: str,
        latitude: float,
        longitude: float,
        image_path: str,
        creator_id: uuid.UUID,
    ) -> Place:
        place = Place(
            title=title,
            description=description,
            address=address,
            latitude=latitude,
            longitude=longitude,
            image_path=image_path,
            creator_id=creator_id,
        )
        self.db.add(place)
        # Flush assigns the row inside the current transaction without committing
        await self.db.flush()
        return place

    async def update_text(self, place: Place, title: str, description: str) -> Place:
        place.title = title
        place.description = description
        await self.db.flush()
        return place

    async def delete(self, place_id: uuid.UUID) -> int:
        result = await self.db.execute(sa.delete(Place).where(Place.id == place_id))
        return result.rowcount
