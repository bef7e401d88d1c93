from datetime import datetime
from decimal import Decimal
from enum import Enum
import re
from typing import List, Optional
import uuid
from sqlalchemy import Enum as SQLEnum
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


class Identity(str, Enum):
    """Nationality of the identity document"""

    PAKISTANI = "PAKISTANI"
    OTHER = "OTHER"


class CrcStatus(str, Enum):
    """Registration card status"""

    OLD = "OLD"
    NEW = "NEW"


class CatchmentArea(str, Enum):
    """Residential zone of the patient"""

    URBAN = "URBAN"
    RURAL = "RURAL"
    SLUM = "SLUM"


class RelationKind(str, Enum):
    """How the relation is related to the patient"""

    NONE = "NONE"
    PARENT = "PARENT"
    SIBLING = "SIBLING"
    CHILD = "CHILD"
    SPOUSE = "SPOUSE"


# ============= Column ENUM Types (Reusable) =============
identity_enum_type = SQLEnum(Identity, name="identity", native_enum=False)

crc_enum_type = SQLEnum(CrcStatus, name="crcstatus", native_enum=False)

catchment_area_enum_type = SQLEnum(
    CatchmentArea, name="catchmentarea", native_enum=False
)

relation_kind_enum_type = SQLEnum(
    RelationKind, name="relationkind", native_enum=False
)


CNIC_PATTERN = re.compile(r"^\d{5}-?\d{7}-?\d$")


def _required_text(value: str, label: str, max_length: int) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{label} is required")
    if len(value) > max_length:
        raise ValueError(f"{label} cannot be longer than {max_length} characters")
    return value


def normalize_cnic(value: Optional[str], label: str = "CNIC") -> Optional[str]:
    """
    Check a CNIC is 13 digits, optionally dash separated, and return it in
    the dashed ``12345-1234567-1`` form it is stored and compared in.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if len(value) > 15 or not CNIC_PATTERN.match(value):
        raise ValueError(
            f"{label} must be 13 digits, optionally formatted as 12345-1234567-1"
        )
    digits = value.replace("-", "")
    return f"{digits[:5]}-{digits[5:12]}-{digits[12:]}"


# ============= Helper Schemas =============
class DoctorInfoSchema(BaseModel):
    """Public fields of the attending doctor"""
    id: uuid.UUID
    name: str
    model_config = {"from_attributes": True}


# ============= Relation Schemas =============
class RelationSchema(BaseModel):
    """
    One relation entry of a registration form.

    ``NONE`` marks a patient registered under their own CNIC and must not carry
    a name or CNIC. Any other kind requires both. ``id`` is only sent on update
    to address an existing relation.
    """

    id: Optional[uuid.UUID] = None
    relation: RelationKind = RelationKind.NONE
    relation_name: Optional[str] = None
    relation_cnic: Optional[str] = None

    @field_validator("relation_name")
    @classmethod
    def validate_relation_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return _required_text(v, "Relation's name", 100)

    @field_validator("relation_cnic")
    @classmethod
    def validate_relation_cnic(cls, v: Optional[str]) -> Optional[str]:
        return normalize_cnic(v, "Relation's CNIC")

    @model_validator(mode="after")
    def check_kind_fields(self) -> "RelationSchema":
        if self.relation == RelationKind.NONE:
            if self.relation_name or self.relation_cnic:
                raise ValueError("Relation name and CNIC must be empty when relation is NONE")
        else:
            if not self.relation_name:
                raise ValueError("Relation's name is required")
            if not self.relation_cnic:
                raise ValueError("Relation's CNIC is required")
        return self


class RelationResponseSchema(BaseModel):
    id: uuid.UUID
    relation: RelationKind
    relation_name: str
    relation_cnic: str
    model_config = {"from_attributes": True}


# ============= Patient Schemas =============
class PatientBaseSchema(BaseModel):
    """Demographic fields shared by registration and update."""

    # Declared first so the cnic validator can see the validated relations
    relation: List[RelationSchema] = Field(default_factory=list)
    name: str
    father_name: str
    email: EmailStr
    identity: Identity
    cnic: Optional[str] = Field(default=None, validate_default=True)
    crc: CrcStatus
    crc_number: str
    contact_number: str
    education: str
    age: int
    marriage_years: int
    occupation: str
    address: str
    catchment_area: CatchmentArea
    attended_by_doctor_id: Optional[uuid.UUID] = None

    @field_validator("name", "father_name", "education", "occupation")
    @classmethod
    def validate_short_text(cls, v: str, info) -> str:
        label = info.field_name.replace("_", " ").capitalize()
        return _required_text(v, label, 100)

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str) -> str:
        if len(v) > 100:
            raise ValueError("Email cannot be longer than 100 characters")
        return v

    @field_validator("cnic")
    @classmethod
    def validate_cnic(cls, v: Optional[str], info) -> Optional[str]:
        v = normalize_cnic(v)
        relations = info.data.get("relation")
        # Skip the requirement when the relation list itself was invalid
        if v is None and relations is not None:
            if not any(r.relation != RelationKind.NONE for r in relations):
                raise ValueError("CNIC is required when relation is NONE")
        return v

    @field_validator("crc_number")
    @classmethod
    def validate_crc_number(cls, v: str) -> str:
        return _required_text(v, "CRC number", 15)

    @field_validator("contact_number")
    @classmethod
    def validate_contact_number(cls, v: str) -> str:
        v = (v or "").strip()
        if not re.match(r"^\d{11}$", v):
            raise ValueError("Contact number must be exactly 11 digits")
        return v

    @field_validator("age", "marriage_years")
    @classmethod
    def validate_years(cls, v: int, info) -> int:
        if v < 0 or v > 150:
            label = info.field_name.replace("_", " ").capitalize()
            raise ValueError(f"{label} must be between 0 and 150")
        return v

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _required_text(v, "Address", 200)

    @property
    def real_relations(self) -> List[RelationSchema]:
        """Relation entries that describe an actual person."""
        return [r for r in self.relation if r.relation != RelationKind.NONE]

    @property
    def has_relation(self) -> bool:
        return bool(self.real_relations)


class PatientCreateSchema(PatientBaseSchema):
    """Registration form submitted by the front desk."""

    amount_paid: Decimal = Field(ge=0, max_digits=12, decimal_places=2)


class PatientUpdateSchema(PatientBaseSchema):
    """
    Full replacement of a patient's demographic fields.

    ``amount_paid`` and the token number are not editable; relation entries
    carrying an ``id`` update that relation, entries without one are added, and
    relations left out are removed.
    """


class PatientResponseSchema(BaseModel):
    id: uuid.UUID
    name: str
    father_name: str
    email: str
    identity: Identity
    cnic: Optional[str] = None
    crc: CrcStatus
    crc_number: str
    contact_number: str
    education: str
    age: int
    marriage_years: int
    occupation: str
    address: str
    catchment_area: CatchmentArea
    amount_paid: Decimal
    token_number: int
    attended_by_doctor_id: Optional[uuid.UUID] = None
    created_at: datetime
    relations: List[RelationResponseSchema] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class PatientDetailResponseSchema(PatientResponseSchema):
    """Patient as shown on the profile page."""

    last_visit: Optional[datetime] = None
    doctor: Optional[DoctorInfoSchema] = None


# ============= Visit Schemas =============
class VisitCreateSchema(BaseModel):
    patient_id: uuid.UUID


class VisitResponseSchema(BaseModel):
    id: uuid.UUID
    patient_id: uuid.UUID
    token_number: int
    visited_at: datetime
    model_config = {"from_attributes": True}


class VisitListItemSchema(VisitResponseSchema):
    """Visit with the patient it belongs to and the attending doctor's name."""

    patient: PatientResponseSchema
    doctor_name: Optional[str] = None


# ============= Vitals Schemas =============
class PatientDetailCreateSchema(BaseModel):
    """Vital signs recorded by a nurse."""

    weight: Optional[float] = None
    sugar_level: Optional[float] = None
    temperature: Optional[float] = None
    height: Optional[float] = None
    blood_pressure: Optional[str] = Field(default=None, max_length=20)

    @field_validator("weight", "sugar_level", "temperature", "height")
    @classmethod
    def validate_non_negative(cls, v: Optional[float], info) -> Optional[float]:
        if v is not None and v < 0:
            label = info.field_name.replace("_", " ").capitalize()
            raise ValueError(f"{label} must be a non-negative number")
        return v

    @field_validator("blood_pressure")
    @classmethod
    def validate_blood_pressure(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class PatientDetailRecordSchema(PatientDetailCreateSchema):
    id: uuid.UUID
    patient_id: uuid.UUID
    recorded_at: datetime
    model_config = {"from_attributes": True}
