from typing import List
import uuid
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.core.utils import LoggerMixin, utcnow
from app.models.patient_model import Visit
from app.repositories.patient_repo import PatientRepository
from app.repositories.visit_repo import VisitRepository
from app.schemas.patient_schemas import VisitListItemSchema


class VisitService(LoggerMixin):
    """Service layer for the append-only visit log."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = VisitRepository(self.db)
        self.patients = PatientRepository(self.db)

    async def add_visit(self, patient_id: uuid.UUID) -> Visit:
        """
        Log a visit for an existing patient under the patient's current token.

        Raises:
            NotFoundError: If the patient does not exist; nothing is written
        """
        patient = await self.patients.get_patient_by_id(patient_id)
        if not patient:
            raise NotFoundError("Patient not found")

        visit = Visit(
            patient_id=patient.id,
            token_number=patient.token_number,
            visited_at=utcnow(),
        )
        await self.repo.create_visit(visit)
        await self.db.commit()

        self.log_info(
            {
                "event": "visit_added",
                "patient_id": str(patient.id),
                "token_number": visit.token_number,
            }
        )
        return visit

    async def list_visits(self) -> List[VisitListItemSchema]:
        """Every visit, most recent first, with patient and doctor name."""
        visits = await self.repo.get_visits()
        return [
            VisitListItemSchema.model_validate(visit).model_copy(
                update={
                    "doctor_name": visit.patient.doctor.name
                    if visit.patient.doctor
                    else None
                }
            )
            for visit in visits
        ]
