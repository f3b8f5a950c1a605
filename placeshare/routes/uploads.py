"""
PlaceShare Backend: Uploaded Image Route
========================================

What:  Serves stored images at GET /uploads/images/{filename}, the exact path
       kept in each place's and user's `image` field.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from placeshare.dependencies import get_file_service
from placeshare.exceptions import NotFoundError
from placeshare.services.file_service import ALLOWED_MIME_TYPES, FileService

router = APIRouter(tags=["Uploads"])

_MEDIA_TYPES = {ext: mime for mime, ext in ALLOWED_MIME_TYPES.items() if mime != "image/jpg"}
_MEDIA_TYPES[".jpeg"] = "image/jpeg"


@router.get("/uploads/images/{filename}", summary="Serve an uploaded image")
async def serve_image(
    filename: str,
    file_service: FileService = Depends(get_file_service),
) -> FileResponse:
    # Raises ValidationError for names that escape the storage root
    full_path = file_service.resolve(filename)

    if not full_path.is_file():
        raise NotFoundError(message="Could not find this image.", resource="image", resource_id=filename)

    return FileResponse(
        path=str(full_path),
        media_type=_MEDIA_TYPES.get(full_path.suffix.lower(), "application/octet-stream"),
        headers={"Cache-Control": "public, max-age=86400"},
    )
