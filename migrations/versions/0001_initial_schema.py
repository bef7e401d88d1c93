"""initial schema and token counter row

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00

"""
from datetime import datetime, timezone
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column(
            "role",
            _enum("userrole", "ADMIN", "DOCTOR", "NURSE", "FRONTDESK", "PHARMACIST"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "patients",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("father_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("identity", _enum("identity", "PAKISTANI", "OTHER"), nullable=False),
        sa.Column("cnic", sa.String(15), nullable=True),
        sa.Column("crc", _enum("crcstatus", "OLD", "NEW"), nullable=False),
        sa.Column("crc_number", sa.String(15), nullable=False),
        sa.Column("contact_number", sa.String(11), nullable=False),
        sa.Column("education", sa.String(100), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("marriage_years", sa.Integer(), nullable=False),
        sa.Column("occupation", sa.String(100), nullable=False),
        sa.Column("address", sa.String(200), nullable=False),
        sa.Column(
            "catchment_area",
            _enum("catchmentarea", "URBAN", "RURAL", "SLUM"),
            nullable=False,
        ),
        sa.Column("amount_paid", sa.Numeric(12, 2), nullable=False),
        sa.Column("token_number", sa.Integer(), nullable=False),
        sa.Column(
            "attended_by_doctor_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_patients_id", "patients", ["id"], unique=True)
    op.create_index("ix_patients_name", "patients", ["name"])
    op.create_index("ix_patients_cnic", "patients", ["cnic"])
    op.create_index(
        "ix_patients_attended_by_doctor_id", "patients", ["attended_by_doctor_id"]
    )
    op.create_index("ix_patients_created_at", "patients", ["created_at"])

    op.create_table(
        "relations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "patient_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("patients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "relation",
            _enum("relationkind", "NONE", "PARENT", "SIBLING", "CHILD", "SPOUSE"),
            nullable=False,
        ),
        sa.Column("relation_name", sa.String(100), nullable=False),
        sa.Column("relation_cnic", sa.String(15), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_relations_id", "relations", ["id"], unique=True)
    op.create_index("ix_relations_patient_id", "relations", ["patient_id"])
    op.create_index("ix_relations_relation_cnic", "relations", ["relation_cnic"])

    op.create_table(
        "visits",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "patient_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("patients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("token_number", sa.Integer(), nullable=False),
        sa.Column("visited_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_visits_id", "visits", ["id"], unique=True)
    op.create_index("ix_visits_patient_id", "visits", ["patient_id"])
    op.create_index("ix_visits_visited_at", "visits", ["visited_at"])

    op.create_table(
        "patient_details",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "patient_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("patients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("sugar_level", sa.Float(), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column("height", sa.Float(), nullable=True),
        sa.Column("blood_pressure", sa.String(20), nullable=True),
        sa.Column("recorded_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_patient_details_id", "patient_details", ["id"], unique=True)
    op.create_index("ix_patient_details_patient_id", "patient_details", ["patient_id"])
    op.create_index("ix_patient_details_recorded_at", "patient_details", ["recorded_at"])

    global_settings = op.create_table(
        "global_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("last_token", sa.Integer(), nullable=False),
        sa.Column("last_token_date", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("id = 1", name="single_global_settings_row"),
        sa.CheckConstraint("last_token >= 0", name="non_negative_last_token"),
    )

    # The counter row must exist before the first registration
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    op.bulk_insert(
        global_settings,
        [
            {
                "id": 1,
                "last_token": 0,
                "last_token_date": datetime(1970, 1, 1),
                "created_at": now,
                "updated_at": now,
            }
        ],
    )


def downgrade() -> None:
    op.drop_table("global_settings")
    op.drop_table("patient_details")
    op.drop_table("visits")
    op.drop_table("relations")
    op.drop_table("patients")
    op.drop_table("users")
