from datetime import datetime
from typing import Optional
import uuid
from pydantic import BaseModel, field_validator, Field

from app.schemas.patient_schemas import CNIC_PATTERN, normalize_cnic


# ============= CNIC Search Schemas =============
class CnicSearchQuery(BaseModel):
    """Search term typed into the CNIC search box."""

    cnic: str = Field("", max_length=15)

    @field_validator("cnic")
    @classmethod
    def validate_cnic(cls, v: str) -> str:
        """Only digits and dashes can appear in a CNIC."""
        v = (v or "").strip()
        if v and not all(c.isdigit() or c == "-" for c in v):
            raise ValueError("CNIC search may only contain digits and dashes")
        # A complete CNIC is matched in its stored dashed form
        if CNIC_PATTERN.match(v):
            return normalize_cnic(v)
        return v


class VisitSearchResultSchema(BaseModel):
    """A matching patient flattened with their latest visit and doctor."""

    patient_id: uuid.UUID
    name: str
    father_name: str
    cnic: Optional[str] = None
    relation_cnic: Optional[str] = None
    contact_number: str
    token_number: int
    last_visit: Optional[datetime] = None
    doctor_id: Optional[uuid.UUID] = None
    doctor_name: Optional[str] = None
