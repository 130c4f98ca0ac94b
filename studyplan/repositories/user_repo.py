"""
User Repository

Data access layer for User model.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from studyplan.repositories.base import BaseRepository
from studyplan.models import User


class UserRepository(BaseRepository[User]):
    """Repository for User model. Emails are stored lower-cased."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> Optional[User]:
        users = await self.list_where(self.model.email == email.strip().lower())
        return users[0] if users else None

    async def email_taken(self, email: str) -> bool:
        return await self.count_where(self.model.email == email.strip().lower()) > 0
