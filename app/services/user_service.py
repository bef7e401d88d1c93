from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.user_repo import UserRepository
from app.schemas.patient_schemas import DoctorInfoSchema


class UserService:
    """Service layer for the doctor directory."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = UserRepository(self.db)

    async def list_doctors(self) -> List[DoctorInfoSchema]:
        """``{id, name}`` of every active doctor, for the registration form."""
        doctors = await self.repo.get_doctors()
        return [DoctorInfoSchema.model_validate(doctor) for doctor in doctors]
