import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, TYPE_CHECKING
from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Numeric,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from app.core.utils import utcnow
from app.db.base import Base
from app.schemas.patient_schemas import (
    CatchmentArea,
    CrcStatus,
    Identity,
    RelationKind,
    # Import the pre-configured ENUM types
    catchment_area_enum_type,
    crc_enum_type,
    identity_enum_type,
    relation_kind_enum_type,
)

if TYPE_CHECKING:
    from app.models.user_model import User


class Patient(Base):
    """A registered patient and the token issued at registration."""

    __tablename__ = "patients"

    id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        index=True,
    )

    # Identity
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    father_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    identity: Mapped[Identity] = mapped_column(identity_enum_type, nullable=False)
    cnic: Mapped[Optional[str]] = mapped_column(String(15), nullable=True, index=True)
    crc: Mapped[CrcStatus] = mapped_column(crc_enum_type, nullable=False)
    crc_number: Mapped[str] = mapped_column(String(15), nullable=False)

    # Demographics
    contact_number: Mapped[str] = mapped_column(String(11), nullable=False)
    education: Mapped[str] = mapped_column(String(100), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    marriage_years: Mapped[int] = mapped_column(Integer, nullable=False)
    occupation: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str] = mapped_column(String(200), nullable=False)
    catchment_area: Mapped[CatchmentArea] = mapped_column(
        catchment_area_enum_type, nullable=False
    )

    amount_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    token_number: Mapped[int] = mapped_column(Integer, nullable=False)

    attended_by_doctor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False, index=True
    )

    # Relationships
    doctor: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[attended_by_doctor_id], lazy="selectin"
    )

    relations: Mapped[List["Relation"]] = relationship(
        "Relation",
        back_populates="patient",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Relation.created_at",
    )

    visits: Mapped[List["Visit"]] = relationship(
        "Visit",
        back_populates="patient",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    details: Mapped[List["PatientDetail"]] = relationship(
        "PatientDetail",
        back_populates="patient",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Patient id={self.id} name={self.name} token={self.token_number}>"


class Relation(Base):
    """
    Alternate identity holder (parent, spouse, ...) for a patient registered
    without a CNIC of their own. Addressed by its surrogate ``id`` on update.
    """

    __tablename__ = "relations"

    id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        index=True,
    )

    patient_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    relation: Mapped[RelationKind] = mapped_column(
        relation_kind_enum_type, nullable=False
    )
    relation_name: Mapped[str] = mapped_column(String(100), nullable=False)
    relation_cnic: Mapped[str] = mapped_column(String(15), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    patient: Mapped["Patient"] = relationship("Patient", back_populates="relations")

    def __repr__(self) -> str:
        return f"<Relation id={self.id} kind={self.relation} patient_id={self.patient_id}>"


class Visit(Base):
    """One clinic attendance. Rows are never updated after insert."""

    __tablename__ = "visits"

    id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        index=True,
    )

    patient_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Snapshot of the patient's token when the visit was logged
    token_number: Mapped[int] = mapped_column(Integer, nullable=False)

    visited_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False, index=True
    )

    patient: Mapped["Patient"] = relationship(
        "Patient", back_populates="visits", lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Visit id={self.id} patient_id={self.patient_id} token={self.token_number}>"


class PatientDetail(Base):
    """Vital signs recorded by a nurse"""

    __tablename__ = "patient_details"

    id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        index=True,
    )

    patient_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    sugar_level: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    temperature: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    height: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    blood_pressure: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False, index=True
    )

    patient: Mapped["Patient"] = relationship("Patient", back_populates="details")

    def __repr__(self) -> str:
        return f"<PatientDetail id={self.id} patient_id={self.patient_id}>"
