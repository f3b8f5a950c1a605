"""
PlaceShare Backend: Place Schemas
=================================

What:  Pydantic models for place requests and responses.

Wire format of a place (what the frontend consumes):
    {
        "id": "5f0c...",
        "title": "Empire State Building",
        "description": "One of the most famous sky scrapers in the world!",
        "address": "20 W 34th St, New York, NY 10001",
        "location": {"lat": 40.7484405, "lng": -73.9878584},
        "image": "uploads/images/3f1e....jpg",
        "creator": "a81b..."
    }
"""

import uuid
from typing import List

from pydantic import BaseModel, Field, field_validator

DESCRIPTION_MIN_LENGTH = 5


class Coordinates(BaseModel):
    """Geocoder output; serialized as {lat, lng}."""

    latitude: float = Field(serialization_alias="lat", ge=-90, le=90)
    longitude: float = Field(serialization_alias="lng", ge=-180, le=180)


class PlaceCreate(BaseModel):
    """Text fields of the multipart create form, validated before any I/O."""

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=DESCRIPTION_MIN_LENGTH)
    address: str = Field(min_length=1, max_length=512)

    @field_validator("title", "address")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


class PlaceUpdate(BaseModel):
    """PATCH body; location, address and image are immutable."""

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=DESCRIPTION_MIN_LENGTH)

    @field_validator("title")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


class PlaceOut(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    address: str
    location: Coordinates
    image: str
    creator: uuid.UUID

    @classmethod
    def from_model(cls, place) -> "PlaceOut":
        return cls(
            id=place.id,
            title=place.title,
            description=place.description,
            address=place.address,
            location=Coordinates(latitude=place.latitude, longitude=place.longitude),
            image=place.image_path,
            creator=place.creator_id,
        )


class PlaceResponse(BaseModel):
    place: PlaceOut


class PlaceListResponse(BaseModel):
    places: List[PlaceOut]


class MessageResponse(BaseModel):
    message: str
