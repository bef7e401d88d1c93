from datetime import datetime
from typing import List, Optional
import uuid
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.patient_model import Visit


class VisitRepository:
    """Repository layer for the append-only visit log."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_visit(self, visit: Visit) -> Visit:
        self.db.add(visit)
        await self.db.flush()
        return visit

    async def get_last_visit_at(self, patient_id: uuid.UUID) -> Optional[datetime]:
        """Timestamp of the patient's most recent visit, if any."""
        result = await self.db.execute(
            select(func.max(Visit.visited_at)).where(Visit.patient_id == patient_id)
        )
        return result.scalar()

    async def get_visits(self) -> List[Visit]:
        """
        All visits, most recent first.

        The patient (with its relations and doctor) is loaded alongside each
        visit through the selectin relationships.
        """
        result = await self.db.execute(
            select(Visit).order_by(Visit.visited_at.desc(), Visit.token_number.desc())
        )
        return list(result.scalars().all())
