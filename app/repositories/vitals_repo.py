from datetime import datetime
from typing import List, Optional
import uuid
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.patient_model import PatientDetail


class VitalsRepository:
    """Repository layer for nurse-recorded vital signs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_detail(self, detail: PatientDetail) -> PatientDetail:
        self.db.add(detail)
        await self.db.flush()
        return detail

    async def get_patient_details(
        self,
        patient_id: uuid.UUID,
        recorded_from: Optional[datetime] = None,
        recorded_to: Optional[datetime] = None,
    ) -> List[PatientDetail]:
        """
        Vitals for one patient, newest first.

        Args:
            patient_id: Patient UUID
            recorded_from: Inclusive lower bound (naive UTC)
            recorded_to: Exclusive upper bound (naive UTC)
        """
        query = select(PatientDetail).where(PatientDetail.patient_id == patient_id)

        if recorded_from:
            query = query.where(PatientDetail.recorded_at >= recorded_from)
        if recorded_to:
            query = query.where(PatientDetail.recorded_at < recorded_to)

        query = query.order_by(PatientDetail.recorded_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())
