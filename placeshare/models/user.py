"""
PlaceShare Backend: User and Membership Models
==============================================

What:  ORM models for the `users` table and the `user_places` membership
       index (the set of place ids a user owns).

The membership index is kept in lock-step with place existence: a row is
inserted in the same transaction that inserts the place and deleted in the
same transaction that deletes it. The composite primary key gives the set
its uniqueness; `place_id` carries no foreign key, so the place row and its
membership row can be removed in either order inside one transaction.
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import TIMESTAMP, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from placeshare.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    image_path: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Public path of the avatar image (uploads/images/<name>)",
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    memberships: Mapped[List["PlaceMembership"]] = relationship(
        back_populates="user",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def place_ids(self) -> List[uuid.UUID]:
        return [m.place_id for m in self.memberships]

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"


class PlaceMembership(Base):
    """One entry of a user's places set."""

    __tablename__ = "user_places"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    place_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, index=True)

    user: Mapped[User] = relationship(back_populates="memberships")

    def __repr__(self) -> str:
        return f"<PlaceMembership(user_id={self.user_id}, place_id={self.place_id})>"
