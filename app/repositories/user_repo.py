from typing import List, Optional
import uuid
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.user_model import User, UserRole


class UserRepository:
    """Repository layer for staff lookups."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_doctor_by_id(self, doctor_id: uuid.UUID) -> Optional[User]:
        """Active doctor with this ID, or None."""
        result = await self.db.execute(
            select(User).where(
                User.id == doctor_id,
                User.role == UserRole.DOCTOR,
                User.is_active == True,
            )
        )
        return result.scalars().first()

    async def get_doctors(self) -> List[User]:
        """Active doctors sorted by name."""
        result = await self.db.execute(
            select(User)
            .where(User.role == UserRole.DOCTOR, User.is_active == True)
            .order_by(User.name)
        )
        return list(result.scalars().all())

    async def create_user(self, user: User) -> User:
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user
