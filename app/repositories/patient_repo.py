from typing import Optional, List
import uuid
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.models.patient_model import Patient


class PatientRepository:
    """
    Repository layer for patient data access.

    Writes are flushed, not committed: the service owns the transaction so a
    registration (token, patient, relations, visit) commits as one unit.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_patient_by_id(self, patient_id: uuid.UUID) -> Optional[Patient]:
        """Get patient by ID with relations and doctor loaded."""
        result = await self.db.execute(
            select(Patient)
            .where(Patient.id == patient_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def get_relationless_patient_by_cnic(
        self, cnic: str, exclude_id: Optional[uuid.UUID] = None
    ) -> Optional[Patient]:
        """
        Find a patient registered under their own CNIC (no relation rows).

        Args:
            cnic: Exact CNIC to match
            exclude_id: Patient to ignore, used when re-checking on update
        """
        query = select(Patient).where(Patient.cnic == cnic, ~Patient.relations.any())
        if exclude_id:
            query = query.where(Patient.id != exclude_id)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def get_patients(self) -> List[Patient]:
        """All patients, newest first."""
        result = await self.db.execute(
            select(Patient).order_by(Patient.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_patient(self, patient: Patient) -> Patient:
        """Stage a new patient (and its relations) in the current transaction."""
        self.db.add(patient)
        await self.db.flush()
        return patient

    async def update_patient(self, patient: Patient) -> Patient:
        self.db.add(patient)
        await self.db.flush()
        return patient
