from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.utils import LoggerMixin
from app.models.patient_model import Patient
from app.repositories.search_repo import SearchRepository
from app.schemas.search_schemas import VisitSearchResultSchema


class SearchService(LoggerMixin):
    """Service layer for CNIC search over patients and visits."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = SearchRepository(self.db)

    async def search_patients(self, term: str) -> List[Patient]:
        """
        Patients whose CNIC, or any relation's CNIC, contains ``term``.

        The full result set is returned; an empty term matches everyone.
        """
        patients = await self.repo.search_patients_by_cnic(term)
        self.log_debug({"event": "patient_search", "term": term, "hits": len(patients)})
        return patients

    async def search_visits(self, term: str) -> List[VisitSearchResultSchema]:
        """Matching patients flattened with their latest visit and doctor."""
        rows = await self.repo.search_visits_by_cnic(term)
        results = [
            self._to_visit_search_result(patient, last_visit)
            for patient, last_visit in rows
        ]
        self.log_debug({"event": "visit_search", "term": term, "hits": len(results)})
        return results

    @staticmethod
    def _to_visit_search_result(
        patient: Patient, last_visit
    ) -> VisitSearchResultSchema:
        relation_cnic: Optional[str] = (
            patient.relations[0].relation_cnic if patient.relations else None
        )
        return VisitSearchResultSchema(
            patient_id=patient.id,
            name=patient.name,
            father_name=patient.father_name,
            cnic=patient.cnic,
            relation_cnic=relation_cnic,
            contact_number=patient.contact_number,
            token_number=patient.token_number,
            last_visit=last_visit,
            doctor_id=patient.doctor.id if patient.doctor else None,
            doctor_name=patient.doctor.name if patient.doctor else None,
        )
