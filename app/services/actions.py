"""
Front desk and nursing actions.

Each action takes plain input, runs one service call and always returns an
``ActionResult``. Expected failures (validation, duplicate CNIC, missing
records) come back as structured errors; anything unexpected is rolled back,
logged with its traceback and reported as a generic failure.
"""
import traceback
import uuid
from datetime import date
from typing import Any, Awaitable, Callable, Mapping, Optional

from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import WHOLE_OBJECT, ClinicError
from app.core.utils import logger
from app.core.validation import validate_payload, validate_registration
from app.schemas.patient_schemas import (
    PatientDetailCreateSchema,
    PatientDetailRecordSchema,
    PatientResponseSchema,
    PatientUpdateSchema,
    VisitResponseSchema,
)
from app.schemas.result_schemas import ActionResult
from app.schemas.search_schemas import CnicSearchQuery
from app.services.patient_service import PatientService
from app.services.search_service import SearchService
from app.services.user_service import UserService
from app.services.visit_service import VisitService
from app.services.vitals_service import VitalsService

GENERIC_ERROR = "Something went wrong"


async def _run(
    db: AsyncSession,
    event: str,
    operation: Callable[[], Awaitable[Any]],
    success_status: int = status.HTTP_200_OK,
    context: Optional[Mapping[str, Any]] = None,
) -> ActionResult:
    context = dict(context or {})
    try:
        data = await operation()
        return ActionResult.ok(data, status_code=success_status)

    except ClinicError as e:
        await db.rollback()
        logger.log_warning(
            {
                "event": f"{event}_rejected",
                "reason": type(e).__name__,
                "error": e.message,
                **context,
            }
        )
        return ActionResult.fail(e.errors, e.status_code)

    except Exception as e:
        await db.rollback()
        logger.log_error(
            {
                "event": f"{event}_error",
                "error": str(e),
                "error_type": type(e).__name__,
                "traceback": traceback.format_exc(),
                **context,
            }
        )
        return ActionResult.fail(
            {WHOLE_OBJECT: [GENERIC_ERROR]}, status.HTTP_500_INTERNAL_SERVER_ERROR
        )


def _invalid(errors) -> ActionResult:
    return ActionResult.fail(errors, status.HTTP_400_BAD_REQUEST)


# ============= Patients =============
async def add_patient(
    db: AsyncSession, payload: Any, add_visit: bool = False
) -> ActionResult:
    """Validate and register a patient, optionally logging a visit now."""
    record, errors = validate_registration(payload)
    if errors:
        return _invalid(errors)

    async def operation():
        patient = await PatientService(db).create_patient(record, add_visit)
        return PatientResponseSchema.model_validate(patient)

    return await _run(
        db, "patient_registration", operation, status.HTTP_201_CREATED
    )


async def update_patient(
    db: AsyncSession, patient_id: uuid.UUID, payload: Any
) -> ActionResult:
    record, errors = validate_payload(PatientUpdateSchema, payload)
    if errors:
        return _invalid(errors)

    async def operation():
        patient = await PatientService(db).update_patient(patient_id, record)
        return PatientResponseSchema.model_validate(patient)

    return await _run(
        db, "patient_update", operation, context={"patient_id": str(patient_id)}
    )


async def get_patient_by_id(db: AsyncSession, patient_id: uuid.UUID) -> ActionResult:
    return await _run(
        db,
        "get_patient",
        lambda: PatientService(db).get_patient_profile(patient_id),
        context={"patient_id": str(patient_id)},
    )


async def search_patients(db: AsyncSession, cnic: Optional[str]) -> ActionResult:
    """
    CNIC substring search. An empty term lists every patient, which is what
    the search page shows before anything is typed.
    """
    query, errors = validate_payload(CnicSearchQuery, {"cnic": cnic or ""})
    if errors:
        return _invalid(errors)

    async def operation():
        if not query.cnic:
            patients = await PatientService(db).list_patients()
        else:
            patients = await SearchService(db).search_patients(query.cnic)
        return [PatientResponseSchema.model_validate(p) for p in patients]

    return await _run(db, "patient_search", operation)


# ============= Visits =============
async def add_visit(db: AsyncSession, patient_id: uuid.UUID) -> ActionResult:
    async def operation():
        visit = await VisitService(db).add_visit(patient_id)
        return VisitResponseSchema.model_validate(visit)

    return await _run(
        db,
        "add_visit",
        operation,
        status.HTTP_201_CREATED,
        context={"patient_id": str(patient_id)},
    )


async def get_visits(db: AsyncSession) -> ActionResult:
    return await _run(db, "list_visits", lambda: VisitService(db).list_visits())


async def search_visits(db: AsyncSession, cnic: Optional[str]) -> ActionResult:
    query, errors = validate_payload(CnicSearchQuery, {"cnic": cnic or ""})
    if errors:
        return _invalid(errors)
    return await _run(
        db, "visit_search", lambda: SearchService(db).search_visits(query.cnic)
    )


# ============= Vitals =============
async def add_patient_details(
    db: AsyncSession, patient_id: uuid.UUID, payload: Any
) -> ActionResult:
    record, errors = validate_payload(PatientDetailCreateSchema, payload)
    if errors:
        return _invalid(errors)

    async def operation():
        detail = await VitalsService(db).record_details(patient_id, record)
        return PatientDetailRecordSchema.model_validate(detail)

    return await _run(
        db,
        "record_vitals",
        operation,
        status.HTTP_201_CREATED,
        context={"patient_id": str(patient_id)},
    )


async def get_patient_details(
    db: AsyncSession, patient_id: uuid.UUID, on_date: Optional[date] = None
) -> ActionResult:
    async def operation():
        details = await VitalsService(db).list_details(patient_id, on_date)
        return [PatientDetailRecordSchema.model_validate(d) for d in details]

    return await _run(
        db, "list_vitals", operation, context={"patient_id": str(patient_id)}
    )


# ============= Doctors =============
async def list_doctors(db: AsyncSession) -> ActionResult:
    return await _run(db, "list_doctors", lambda: UserService(db).list_doctors())
