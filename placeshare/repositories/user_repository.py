import uuid
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from placeshare.models.user import PlaceMembership, User


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: uuid.UUID) -> Optional[User]:
        result = await self.db.execute(sa.select(User).where(User.id == user_id))
        return result.scalars().first()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(sa.select(User).where(User.email == email.lower()))
        return result.scalars().first()

    async def list_all(self) -> List[User]:
        result = await self.db.execute(sa.select(User).order_by(User.created_at))
        return list(result.scalars().all())

    async def add(self, name: str, email: str, password_hash: str, image_path: str) -> User:
        user = User(
            name=name,
            email=email.lower(),
            password_hash=password_hash,
            image_path=image_path,
            memberships=[],
        )
        self.db.add(user)
        await self.db.flush()
        return user

    # ── Membership index ──────────────────────────────────────────────────
    # Only PlaceWriter calls these, always inside the transaction that
    # creates or deletes the place itself.

    async def append_place(self, user_id: uuid.UUID, place_id: uuid.UUID) -> None:
        self.db.add(PlaceMembership(user_id=user_id, place_id=place_id))
        await self.db.flush()

    async def remove_place(self, user_id: uuid.UUID, place_id: uuid.UUID) -> int:
        result = await self.db.execute(
            sa.delete(PlaceMembership).where(
                PlaceMembership.user_id == user_id,
                PlaceMembership.place_id == place_id,
            )
        )
        return result.rowcount
