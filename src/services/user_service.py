"""Service layer for account registration and credential checks."""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import hash_password, verify_password
from models.user import User
from schemas.user import UserRegister
from services.exceptions import EmailAlreadyRegisteredError, InvalidCredentialsError

logger = logging.getLogger(__name__)


class UserService:
    """Registers users and verifies their credentials."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        """Look up a user by (case-insensitive) email."""
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def register(self, data: UserRegister) -> User:
        """
        Create an account.

        Raises:
            EmailAlreadyRegisteredError: If the email is already in use.
        """
        email = data.email.lower()
        if await self.get_by_email(email) is not None:
            raise EmailAlreadyRegisteredError(email)

        user = User(email=email, password_hash=hash_password(data.password), name=data.name)
        try:
            async with self.db.begin_nested():
                self.db.add(user)
                await self.db.flush()
        except IntegrityError as e:
            raise EmailAlreadyRegisteredError(email) from e

        await self.db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """
        Return the user for a valid email/password pair.

        Raises:
            InvalidCredentialsError: For an unknown email or a wrong password.
        """
        user = await self.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError
        return user
