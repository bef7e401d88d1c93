from typing import List, Optional
import uuid
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, RecordValidationError
from app.core.settings_service import TokenCounterService
from app.core.utils import LoggerMixin, utcnow
from app.models.patient_model import Patient, Relation, Visit
from app.repositories.patient_repo import PatientRepository
from app.repositories.user_repo import UserRepository
from app.repositories.visit_repo import VisitRepository
from app.schemas.patient_schemas import (
    PatientBaseSchema,
    PatientCreateSchema,
    PatientDetailResponseSchema,
    PatientUpdateSchema,
)

DUPLICATE_CNIC_MESSAGE = "A patient with the same CNIC already exists."


class PatientService(LoggerMixin):
    """Service layer for patient registration and the patient registry."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = PatientRepository(self.db)
        self.visits = VisitRepository(self.db)
        self.users = UserRepository(self.db)
        self.tokens = TokenCounterService(self.db)

    async def _check_unique_cnic(
        self, data: PatientBaseSchema, exclude_id: Optional[uuid.UUID] = None
    ) -> None:
        """CNICs must be unique among patients registered without a relation."""
        if data.has_relation or not data.cnic:
            return
        existing = await self.repo.get_relationless_patient_by_cnic(
            data.cnic, exclude_id=exclude_id
        )
        if existing:
            raise ConflictError(DUPLICATE_CNIC_MESSAGE)

    async def _check_doctor(self, doctor_id: Optional[uuid.UUID]) -> None:
        if doctor_id and not await self.users.get_doctor_by_id(doctor_id):
            raise NotFoundError("Doctor not found")

    async def _get_or_404(self, patient_id: uuid.UUID) -> Patient:
        patient = await self.repo.get_patient_by_id(patient_id)
        if not patient:
            raise NotFoundError("Patient not found")
        return patient

    # ============= Registration =============
    async def create_patient(
        self, patient_data: PatientCreateSchema, add_visit: bool = False
    ) -> Patient:
        """
        Register a patient and issue today's token.

        The token, the patient row, its relations and the optional visit are
        committed together; any failure leaves nothing behind.

        Args:
            patient_data: Validated registration form
            add_visit: Also log a visit for the new patient

        Returns:
            The persisted patient with relations loaded
        """
        await self._check_doctor(patient_data.attended_by_doctor_id)

        # The counter UPDATE locks its row until commit, so concurrent
        # registrations run the CNIC check one at a time
        now = utcnow()
        token = await self.tokens.issue_token(now)
        await self._check_unique_cnic(patient_data)

        patient_dict = patient_data.model_dump(exclude={"relation"})
        patient = Patient(**patient_dict, token_number=token, created_at=now)
        patient.relations = [
            Relation(
                relation=entry.relation,
                relation_name=entry.relation_name,
                relation_cnic=entry.relation_cnic,
                created_at=now,
            )
            for entry in patient_data.real_relations
        ]
        await self.repo.create_patient(patient)

        if add_visit:
            await self.visits.create_visit(
                Visit(patient_id=patient.id, token_number=token, visited_at=now)
            )

        await self.db.commit()

        self.log_info(
            {
                "event": "patient_registered",
                "patient_id": str(patient.id),
                "token_number": token,
                "relations": len(patient.relations),
                "visit_logged": add_visit,
            }
        )
        return await self._get_or_404(patient.id)

    # ============= Registry =============
    async def get_patient_profile(
        self, patient_id: uuid.UUID
    ) -> PatientDetailResponseSchema:
        """Patient with relations, last visit time and attending doctor."""
        patient = await self._get_or_404(patient_id)
        last_visit = await self.visits.get_last_visit_at(patient_id)

        # ``doctor`` comes from the loaded relationship; last_visit is computed
        profile = PatientDetailResponseSchema.model_validate(patient)
        return profile.model_copy(update={"last_visit": last_visit})

    async def list_patients(self) -> List[Patient]:
        return await self.repo.get_patients()

    async def update_patient(
        self, patient_id: uuid.UUID, update_data: PatientUpdateSchema
    ) -> Patient:
        """
        Replace a patient's demographic fields and reconcile relations.

        Relations are matched by ``id``. The token number, amount paid and
        visit history are left untouched.
        """
        patient = await self._get_or_404(patient_id)

        await self._check_unique_cnic(update_data, exclude_id=patient.id)
        await self._check_doctor(update_data.attended_by_doctor_id)

        current = {relation.id: relation for relation in patient.relations}
        ids = [entry.id for entry in update_data.real_relations if entry.id]
        unknown = [str(relation_id) for relation_id in ids if relation_id not in current]
        if unknown:
            raise RecordValidationError(
                {"relation": [f"Unknown relation id: {', '.join(unknown)}"]}
            )
        repeated = sorted({str(relation_id) for relation_id in ids if ids.count(relation_id) > 1})
        if repeated:
            raise RecordValidationError(
                {"relation": [f"Relation id given more than once: {', '.join(repeated)}"]}
            )

        update_dict = update_data.model_dump(exclude={"relation"})
        for field, value in update_dict.items():
            setattr(patient, field, value)

        now = utcnow()
        relations = []
        for entry in update_data.real_relations:
            relation = current.get(entry.id) if entry.id else None
            if relation is None:
                relation = Relation(created_at=now)
            relation.relation = entry.relation
            relation.relation_name = entry.relation_name
            relation.relation_cnic = entry.relation_cnic
            relations.append(relation)
        # Relations left out are deleted via delete-orphan
        patient.relations = relations

        await self.repo.update_patient(patient)
        await self.db.commit()

        self.log_info(
            {
                "event": "patient_updated",
                "patient_id": str(patient.id),
                "relations": len(relations),
            }
        )
        return await self._get_or_404(patient.id)
