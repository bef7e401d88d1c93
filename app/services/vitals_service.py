from datetime import date
from typing import List, Optional
import uuid
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.config import settings
from app.core.exceptions import NotFoundError
from app.core.utils import LoggerMixin, local_day_bounds, utcnow
from app.models.patient_model import PatientDetail
from app.repositories.patient_repo import PatientRepository
from app.repositories.vitals_repo import VitalsRepository
from app.schemas.patient_schemas import PatientDetailCreateSchema


class VitalsService(LoggerMixin):
    """Service layer for vital signs recorded at the nursing station."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = VitalsRepository(self.db)
        self.patients = PatientRepository(self.db)

    async def _ensure_patient(self, patient_id: uuid.UUID) -> None:
        if not await self.patients.get_patient_by_id(patient_id):
            raise NotFoundError("Patient not found")

    async def record_details(
        self, patient_id: uuid.UUID, details: PatientDetailCreateSchema
    ) -> PatientDetail:
        await self._ensure_patient(patient_id)

        detail = PatientDetail(
            patient_id=patient_id,
            recorded_at=utcnow(),
            **details.model_dump(),
        )
        await self.repo.create_detail(detail)
        await self.db.commit()

        self.log_info({"event": "vitals_recorded", "patient_id": str(patient_id)})
        return detail

    async def list_details(
        self, patient_id: uuid.UUID, on_date: Optional[date] = None
    ) -> List[PatientDetail]:
        """
        Vitals for a patient, newest first.

        Args:
            patient_id: Patient UUID
            on_date: Only records taken on this local calendar day
        """
        await self._ensure_patient(patient_id)

        recorded_from = recorded_to = None
        if on_date:
            recorded_from, recorded_to = local_day_bounds(on_date, settings.TOKEN_TIMEZONE)

        return await self.repo.get_patient_details(patient_id, recorded_from, recorded_to)
