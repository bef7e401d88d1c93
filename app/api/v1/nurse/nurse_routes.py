import uuid
from datetime import date
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_db
from app.api.v1.responses import to_response
from app.schemas.result_schemas import ActionResult
from app.services import actions


router = APIRouter(prefix="/nurse", tags=["nurse"])


@router.get("/details", response_model=ActionResult)
async def search_patients(
    cnic: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Find the patient to take vitals for."""
    return to_response(await actions.search_patients(db, cnic))


@router.post("/{patient_id}/details", response_model=ActionResult)
async def record_details(
    patient_id: uuid.UUID,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
):
    return to_response(await actions.add_patient_details(db, patient_id, payload))


@router.get("/{patient_id}/data", response_model=ActionResult)
async def list_details(
    patient_id: uuid.UUID,
    on: Optional[date] = Query(None, description="Only records from this day"),
    db: AsyncSession = Depends(get_db),
):
    return to_response(await actions.get_patient_details(db, patient_id, on))
