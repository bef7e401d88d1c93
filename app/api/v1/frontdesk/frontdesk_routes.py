import uuid
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_db
from app.api.v1.responses import to_response
from app.schemas.patient_schemas import VisitCreateSchema
from app.schemas.result_schemas import ActionResult
from app.services import actions


router = APIRouter(prefix="/frontdesk", tags=["frontdesk"])


@router.get("/doctors", response_model=ActionResult)
async def list_doctors(db: AsyncSession = Depends(get_db)):
    """Doctors selectable as the attending doctor."""
    return to_response(await actions.list_doctors(db))


# ============= Patient Routes =============
@router.post("/patients", response_model=ActionResult)
async def create_patient(
    payload: Dict[str, Any] = Body(...),
    add_visit: bool = Query(False, description="Also log a visit for today"),
    db: AsyncSession = Depends(get_db),
):
    """
    Register a patient and issue today's token.

    Validation errors come back per field in ``error`` with status 400; a
    duplicate CNIC gives 409.
    """
    return to_response(await actions.add_patient(db, payload, add_visit))


@router.get("/patients", response_model=ActionResult)
async def search_patients(
    cnic: Optional[str] = Query(None, description="Part of a patient or relation CNIC"),
    db: AsyncSession = Depends(get_db),
):
    return to_response(await actions.search_patients(db, cnic))


@router.get("/patients/{patient_id}", response_model=ActionResult)
async def get_patient(patient_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return to_response(await actions.get_patient_by_id(db, patient_id))


@router.put("/patients/{patient_id}", response_model=ActionResult)
async def update_patient(
    patient_id: uuid.UUID,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
):
    return to_response(await actions.update_patient(db, patient_id, payload))


# ============= Visit Routes =============
@router.post("/visits", response_model=ActionResult)
async def add_visit(visit: VisitCreateSchema, db: AsyncSession = Depends(get_db)):
    return to_response(await actions.add_visit(db, visit.patient_id))


@router.get("/all-visits", response_model=ActionResult)
async def list_visits(db: AsyncSession = Depends(get_db)):
    return to_response(await actions.get_visits(db))


@router.get("/visits", response_model=ActionResult)
async def search_visits(
    cnic: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return to_response(await actions.search_visits(db, cnic))
