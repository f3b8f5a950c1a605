"""
PlaceShare Backend: User Service
================================

What:  Signup, login and the public user listing.
How:   Signup validates the form, stores the avatar, then inserts the user;
       if the insert cannot happen the avatar is released again. Login
       compares the password against the stored pbkdf2 hash. Both return a
       signed access token.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from placeshare.config import Settings
from placeshare.exceptions import DatabaseError, UnauthorizedError, ValidationError
from placeshare.models.user import User
from placeshare.repositories import UserRepository
from placeshare.schemas.common import validate_form
from placeshare.schemas.user import AuthResponse, UserLogin, UserSignup
from placeshare.security import create_access_token, hash_password, verify_password
from placeshare.services.file_service import FileService
from placeshare.services.resource_cleaner import ResourceCleaner

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User exists already, please login instead."
INVALID_CREDENTIALS = "Invalid credentials, could not log you in."


class UserService:
    def __init__(self, settings: Settings, file_service: FileService, cleaner: ResourceCleaner):
        self.settings = settings
        self.file_service = file_service
        self.cleaner = cleaner

    async def list_users(self, db: AsyncSession) -> List[User]:
        try:
            return await UserRepository(db).list_all()
        except SQLAlchemyError as e:
            raise DatabaseError(
                message="Fetching users failed, please try again later.",
                context={"error": str(e)},
            )

    async def signup(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
        filename: str,
        content_type: Optional[str],
        content: bytes,
    ) -> AuthResponse:
        data = validate_form(UserSignup, name=name, email=email, password=password)
        repo = UserRepository(db)

        try:
            existing = await repo.get_by_email(data.email)
        except SQLAlchemyError as e:
            raise DatabaseError(
                message="Signing up failed, please try again later.",
                context={"error": str(e)},
            )
        if existing is not None:
            raise ValidationError(message=EMAIL_TAKEN, field="email")

        image_path = await self.file_service.validate_and_store(filename, content_type, content)

        try:
            user = await repo.add(
                name=data.name,
                email=data.email,
                password_hash=hash_password(data.password),
                image_path=image_path,
            )
            await db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            await db.rollback()
            self.cleaner.release(image_path)
            raise ValidationError(message=EMAIL_TAKEN, field="email")
        except SQLAlchemyError as e:
            await db.rollback()
            self.cleaner.release(image_path)
            raise DatabaseError(
                message="Signing up failed, please try again later.",
                context={"error": str(e)},
            )

        logger.info("User %s signed up", user.id)
        return AuthResponse(
            userId=user.id,
            email=user.email,
            token=create_access_token(user.id, user.email, self.settings),
        )

    async def login(self, db: AsyncSession, credentials: UserLogin) -> AuthResponse:
        try:
            user = await UserRepository(db).get_by_email(credentials.email)
        except SQLAlchemyError as e:
            raise DatabaseError(
                message="Logging in failed, please try again later.",
                context={"error": str(e)},
            )

        if user is None or not verify_password(credentials.password, user.password_hash):
            raise UnauthorizedError(message=INVALID_CREDENTIALS)

        return AuthResponse(
            userId=user.id,
            email=user.email,
            token=create_access_token(user.id, user.email, self.settings),
        )
