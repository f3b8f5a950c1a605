"""
FastAPI dependencies that assemble services from the resources `create_app()`
put on `app.state`. Services are cheap and built per request; the resources
they wrap (database, storage, cleaner, geocoder) are process-wide.
"""

from fastapi import Request

from placeshare.services.file_service import FileService
from placeshare.services.place_service import PlaceService
from placeshare.services.user_service import UserService


def get_file_service(request: Request) -> FileService:
    return request.app.state.file_service


def get_place_service(request: Request) -> PlaceService:
    state = request.app.state
    return PlaceService(
        file_service=state.file_service,
        cleaner=state.cleaner,
        geocoder=state.geocoder,
        writer=state.writer,
    )


def get_user_service(request: Request) -> UserService:
    state = request.app.state
    return UserService(
        settings=state.settings,
        file_service=state.file_service,
        cleaner=state.cleaner,
    )
