from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.patient_model import Patient, Relation, Visit


class SearchRepository:
    """
    Repository layer for CNIC search.

    Matching is a substring test against the patient's own CNIC or the CNIC
    of any of its relations. The search term is bound as a parameter with
    LIKE wildcards escaped, and no result limit is applied.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _cnic_matches(term: str):
        return or_(
            Patient.cnic.contains(term, autoescape=True),
            Patient.relations.any(
                Relation.relation_cnic.contains(term, autoescape=True)
            ),
        )

    async def search_patients_by_cnic(self, term: str) -> List[Patient]:
        result = await self.db.execute(
            select(Patient)
            .where(self._cnic_matches(term))
            .order_by(Patient.created_at.desc())
        )
        return list(result.scalars().all())

    async def search_visits_by_cnic(
        self, term: str
    ) -> List[Tuple[Patient, Optional[datetime]]]:
        """
        Matching patients paired with their most recent visit time.

        Patients that never visited are included with ``None``.
        """
        last_visits = (
            select(
                Visit.patient_id.label("patient_id"),
                func.max(Visit.visited_at).label("last_visit"),
            )
            .group_by(Visit.patient_id)
            .subquery()
        )

        result = await self.db.execute(
            select(Patient, last_visits.c.last_visit)
            .outerjoin(last_visits, last_visits.c.patient_id == Patient.id)
            .where(self._cnic_matches(term))
            .order_by(
                last_visits.c.last_visit.desc().nulls_last(),
                Patient.created_at.desc(),
            )
        )
        return [(patient, last_visit) for patient, last_visit in result.all()]
