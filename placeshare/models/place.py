"""
PlaceShare Backend: Place Model
===============================

What:  ORM model for the `places` table.

Column notes:
    - latitude / longitude: filled from the geocoder at creation and never
      written again (updates only touch title and description)
    - image_path: public path of the stored image, `uploads/images/<uuid>.<ext>`
    - creator_id: owning user; the same place id is also present in that
      user's membership index (see models/user.py)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from placeshare.database import Base


class Place(Base):
    __tablename__ = "places"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(String(512), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    image_path: Mapped[str] = mapped_column(String(255), nullable=False)
    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Place(id={self.id}, title='{self.title}', creator_id={self.creator_id})>"
