"""
PlaceShare Backend: Place Routes
================================

What:  /api/places endpoints. Handlers stay thin: read the request, call
       PlaceService, wrap the result in a response model. Errors propagate
       to the global exception handlers in main.py.

    GET     /api/places/{place_id}        public
    GET     /api/places/user/{user_id}    public
    POST    /api/places                   bearer token, multipart
    PATCH   /api/places/{place_id}        bearer token, owner only
    DELETE  /api/places/{place_id}        bearer token, owner only
"""

import logging
import uuid

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from placeshare.database import get_db_session
from placeshare.dependencies import get_place_service
from placeshare.schemas.common import ErrorResponse
from placeshare.schemas.place import (
    MessageResponse,
    PlaceListResponse,
    PlaceOut,
    PlaceResponse,
    PlaceUpdate,
)
from placeshare.security import get_current_user_id
from placeshare.services.place_service import PlaceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/places", tags=["Places"])


@router.get(
    "/{place_id}",
    response_model=PlaceResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a place by id",
)
async def get_place(
    place_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: PlaceService = Depends(get_place_service),
) -> PlaceResponse:
    place = await service.get_place(db, place_id)
    return PlaceResponse(place=PlaceOut.from_model(place))


@router.get(
    "/user/{user_id}",
    response_model=PlaceListResponse,
    responses={404: {"model": ErrorResponse}},
    summary="List the places owned by a user",
)
async def get_places_by_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: PlaceService = Depends(get_place_service),
) -> PlaceListResponse:
    places = await service.list_for_user(db, user_id)
    return PlaceListResponse(places=[PlaceOut.from_model(p) for p in places])


@router.post(
    "",
    status_code=201,
    response_model=PlaceResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Owner does not exist", "model": ErrorResponse},
        422: {"description": "Invalid input or unresolvable address", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Create a place",
    description=(
        "Multipart form with title, description, address and an image "
        "(PNG or JPEG, max 500KB). The address is geocoded before anything is stored."
    ),
)
async def create_place(
    title: str = Form(...),
    description: str = Form(...),
    address: str = Form(...),
    image: UploadFile = File(..., description="PNG or JPEG image"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: PlaceService = Depends(get_place_service),
) -> PlaceResponse:
    content = await image.read()
    try:
        place = await service.create_place(
            creator_id=user_id,
            title=title,
            description=description,
            address=address,
            filename=image.filename or "",
            content_type=image.content_type,
            content=content,
        )
    finally:
        await image.close()
    return PlaceResponse(place=PlaceOut.from_model(place))


@router.patch(
    "/{place_id}",
    response_model=PlaceResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Update title and description of an owned place",
)
async def update_place(
    place_id: str,
    body: PlaceUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: PlaceService = Depends(get_place_service),
) -> PlaceResponse:
    place = await service.update_place(place_id, user_id, body)
    return PlaceResponse(place=PlaceOut.from_model(place))


@router.delete(
    "/{place_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Malformed place id", "model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Delete an owned place",
)
async def delete_place(
    place_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: PlaceService = Depends(get_place_service),
) -> MessageResponse:
    await service.delete_place(place_id, user_id)
    return MessageResponse(message="Deleted place.")
