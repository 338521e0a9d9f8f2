"""User service for business logic."""

from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.api_keys import generate_api_key
from ..models.user import User
from ..schemas.user import UserCreate


class EmailAlreadyRegisteredError(Exception):
    """Raised when a user with the same email already exists."""

    pass


class UserService:
    """Service for portal user operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_user(self, data: UserCreate) -> tuple[User, str]:
        """
        Create a new portal user.

        Returns:
            Tuple of (user, api_key). The API key is only returned once.

        Raises:
            EmailAlreadyRegisteredError: If the email is taken
        """
        if await self.email_exists(data.email):
            raise EmailAlreadyRegisteredError(data.email)

        api_key, key_hash = generate_api_key()

        user = User(
            name=data.name,
            email=data.email.lower(),
            role=data.role,
            api_key_hash=key_hash,
            school=data.school,
            region=data.region,
            county=data.county,
            sub_county=data.sub_county,
            zone=data.zone,
            coordinated_category=data.coordinated_category,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        return user, api_key

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID."""
        return await self.db.get(User, user_id)

    async def email_exists(self, email: str) -> bool:
        """Check if a user with this email already exists."""
        result = await self.db.execute(
            select(func.count(User.id)).where(User.email == email.lower())
        )
        return (result.scalar() or 0) > 0

    async def count_users(self) -> int:
        """Total number of users (zero until the first admin is bootstrapped)."""
        result = await self.db.execute(select(func.count(User.id)))
        return result.scalar() or 0
