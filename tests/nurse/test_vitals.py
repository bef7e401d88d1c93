"""
Vitals Tests

Tests for recording and listing vital signs at the nursing station.
"""

import uuid
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.config import settings
from app.core.exceptions import NotFoundError
from app.models.patient_model import Patient, PatientDetail
from app.repositories.vitals_repo import VitalsRepository
from app.schemas.patient_schemas import PatientCreateSchema, PatientDetailCreateSchema
from app.services.patient_service import PatientService
from app.services.vitals_service import VitalsService
from conftest import assert_failure


def _local_today() -> date:
    return datetime.now(ZoneInfo(settings.TOKEN_TIMEZONE)).date()


@pytest.fixture
async def patient(db_session: AsyncSession, registration_payload) -> Patient:
    return await PatientService(db_session).create_patient(
        PatientCreateSchema.model_validate(registration_payload())
    )


@pytest.mark.asyncio
@pytest.mark.unit
class TestVitalsService:
    """Test VitalsService."""

    async def test_record_details(self, db_session: AsyncSession, patient: Patient):
        details = PatientDetailCreateSchema(
            weight=62.5, temperature=98.4, blood_pressure=" 120/80 "
        )

        detail = await VitalsService(db_session).record_details(patient.id, details)

        assert detail.patient_id == patient.id
        assert detail.weight == 62.5
        assert detail.blood_pressure == "120/80"
        assert detail.height is None

    async def test_record_for_unknown_patient(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await VitalsService(db_session).record_details(
                uuid.uuid4(), PatientDetailCreateSchema(weight=60)
            )

    async def test_list_newest_first(self, db_session: AsyncSession, patient: Patient):
        service = VitalsService(db_session)
        first = await service.record_details(patient.id, PatientDetailCreateSchema(weight=60))
        second = await service.record_details(patient.id, PatientDetailCreateSchema(weight=61))

        details = await service.list_details(patient.id)

        assert [d.id for d in details] == [second.id, first.id]

    async def test_list_by_local_day(self, db_session: AsyncSession, patient: Patient):
        service = VitalsService(db_session)
        today = await service.record_details(patient.id, PatientDetailCreateSchema(weight=60))

        assert [d.id for d in await service.list_details(patient.id, _local_today())] == [
            today.id
        ]
        assert await service.list_details(patient.id, _local_today() - timedelta(days=1)) == []

    async def test_repository_bounds(self, db_session: AsyncSession, patient: Patient):
        repo = VitalsRepository(db_session)
        await repo.create_detail(
            PatientDetail(
                patient_id=patient.id, weight=59.0, recorded_at=datetime(2026, 3, 10, 8, 0)
            )
        )
        await repo.create_detail(
            PatientDetail(
                patient_id=patient.id, weight=60.0, recorded_at=datetime(2026, 3, 11, 8, 0)
            )
        )

        details = await repo.get_patient_details(
            patient.id,
            recorded_from=datetime(2026, 3, 11),
            recorded_to=datetime(2026, 3, 12),
        )

        assert [d.weight for d in details] == [60.0]


@pytest.mark.asyncio
@pytest.mark.api
class TestNurseRoutes:
    """Test the nursing station routes."""

    async def test_record_and_list(self, client: AsyncClient, patient: Patient):
        created = await client.post(
            f"/nurse/{patient.id}/details",
            json={"weight": 62.5, "sugar_level": 110, "blood_pressure": "120/80"},
        )

        assert created.status_code == 201
        assert created.json()["data"]["sugar_level"] == 110

        response = await client.get(
            f"/nurse/{patient.id}/data", params={"on": _local_today().isoformat()}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["id"] == created.json()["data"]["id"]

    async def test_record_invalid(self, client: AsyncClient, patient: Patient):
        response = await client.post(
            f"/nurse/{patient.id}/details", json={"temperature": -1}
        )

        assert response.status_code == 400
        assert_failure(response.json(), "temperature")

    async def test_record_unknown_patient(self, client: AsyncClient):
        response = await client.post(f"/nurse/{uuid.uuid4()}/details", json={"weight": 60})

        assert response.status_code == 404

    async def test_list_unknown_patient(self, client: AsyncClient):
        response = await client.get(f"/nurse/{uuid.uuid4()}/data")

        assert response.status_code == 404

    async def test_find_patient_by_cnic(self, client: AsyncClient, patient: Patient):
        response = await client.get("/nurse/details", params={"cnic": "1234567"})

        assert response.status_code == 200
        assert [p["id"] for p in response.json()["data"]] == [str(patient.id)]

    async def test_non_uuid_patient_id(self, client: AsyncClient):
        response = await client.post("/nurse/abc/details", json={"weight": 60})

        assert response.status_code == 400
        assert_failure(response.json(), "patient_id")

    async def test_bad_date_filter(self, client: AsyncClient, patient: Patient):
        response = await client.get(f"/nurse/{patient.id}/data", params={"on": "yesterday"})

        assert response.status_code == 400
        assert_failure(response.json(), "on")
