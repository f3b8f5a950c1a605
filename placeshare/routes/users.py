"""
PlaceShare Backend: User Routes
===============================

    GET   /api/users          public listing (no password hashes)
    POST  /api/users/signup   multipart: name, email, password, image
    POST  /api/users/login    JSON: email, password
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from placeshare.database import get_db_session
from placeshare.dependencies import get_user_service
from placeshare.schemas.common import ErrorResponse
from placeshare.schemas.user import AuthResponse, UserListResponse, UserLogin, UserOut
from placeshare.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=UserListResponse, summary="List users")
async def list_users(
    db: AsyncSession = Depends(get_db_session),
    service: UserService = Depends(get_user_service),
) -> UserListResponse:
    users = await service.list_users(db)
    return UserListResponse(users=[UserOut.from_model(u) for u in users])


@router.post(
    "/signup",
    status_code=201,
    response_model=AuthResponse,
    responses={422: {"description": "Invalid input or email taken", "model": ErrorResponse}},
    summary="Create an account",
)
async def signup(
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    image: UploadFile = File(..., description="Avatar, PNG or JPEG"),
    db: AsyncSession = Depends(get_db_session),
    service: UserService = Depends(get_user_service),
) -> AuthResponse:
    content = await image.read()
    try:
        return await service.signup(
            db,
            name=name,
            email=email,
            password=password,
            filename=image.filename or "",
            content_type=image.content_type,
            content=content,
        )
    finally:
        await image.close()


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in and receive a bearer token",
)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db_session),
    service: UserService = Depends(get_user_service),
) -> AuthResponse:
    return await service.login(db, credentials)
