"""
CNIC Search Tests

Tests for substring search over patient and relation CNICs.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user_model import User
from app.schemas.patient_schemas import PatientCreateSchema
from app.services import actions
from app.services.patient_service import PatientService
from app.services.search_service import SearchService
from app.services.visit_service import VisitService


@pytest.fixture
async def registered(db_session: AsyncSession, registration_payload, relation_entry, doctor: User):
    """
    Two patients: one under her own CNIC with a doctor, one (a child)
    registered through a parent's CNIC.
    """
    service = PatientService(db_session)
    own = await service.create_patient(
        PatientCreateSchema.model_validate(
            registration_payload(attended_by_doctor_id=str(doctor.id))
        )
    )
    child = await service.create_patient(
        PatientCreateSchema.model_validate(
            registration_payload(
                name="Zara Khan",
                cnic=None,
                age=4,
                marriage_years=0,
                relation=[relation_entry()],
            )
        )
    )
    return own, child


@pytest.mark.asyncio
@pytest.mark.unit
class TestPatientSearch:
    """Test SearchService.search_patients."""

    async def test_matches_own_cnic_substring(self, db_session: AsyncSession, registered):
        own, _ = registered

        patients = await SearchService(db_session).search_patients("1234567")

        assert [p.id for p in patients] == [own.id]

    async def test_matches_relation_cnic(self, db_session: AsyncSession, registered):
        _, child = registered

        patients = await SearchService(db_session).search_patients("7654321")

        assert [p.id for p in patients] == [child.id]

    async def test_common_prefix_matches_both(self, db_session: AsyncSession, registered):
        own, child = registered

        patients = await SearchService(db_session).search_patients("35202-")

        assert {p.id for p in patients} == {own.id, child.id}

    async def test_no_match(self, db_session: AsyncSession, registered):
        assert await SearchService(db_session).search_patients("99999") == []

    async def test_relations_loaded(self, db_session: AsyncSession, registered):
        patients = await SearchService(db_session).search_patients("7654321")

        assert patients[0].relations[0].relation_name == "Shazia Bibi"


@pytest.mark.asyncio
@pytest.mark.unit
class TestVisitSearch:
    """Test SearchService.search_visits projection."""

    async def test_projection(self, db_session: AsyncSession, registered, doctor: User):
        own, _ = registered
        visit = await VisitService(db_session).add_visit(own.id)

        results = await SearchService(db_session).search_visits("1234567")

        assert len(results) == 1
        result = results[0]
        assert result.patient_id == own.id
        assert result.name == "Ayesha Khan"
        assert result.cnic == "35202-1234567-1"
        assert result.relation_cnic is None
        assert result.token_number == own.token_number
        assert result.last_visit == visit.visited_at
        assert result.doctor_id == doctor.id
        assert result.doctor_name == "Dr. Sana Malik"

    async def test_patient_without_visits(self, db_session: AsyncSession, registered):
        _, child = registered

        results = await SearchService(db_session).search_visits("7654321")

        assert len(results) == 1
        assert results[0].patient_id == child.id
        assert results[0].cnic is None
        assert results[0].relation_cnic == "35202-7654321-2"
        assert results[0].last_visit is None
        assert results[0].doctor_name is None

    async def test_visited_patients_first(self, db_session: AsyncSession, registered):
        own, child = registered
        await VisitService(db_session).add_visit(child.id)

        results = await SearchService(db_session).search_visits("35202")

        assert [r.patient_id for r in results] == [child.id, own.id]


@pytest.mark.asyncio
@pytest.mark.unit
class TestSearchActions:
    """Test the search actions that wrap the service."""

    async def test_empty_term_lists_everyone(self, db_session: AsyncSession, registered):
        result = await actions.search_patients(db_session, "")

        assert result.success is True
        assert len(result.data) == 2

    async def test_invalid_term(self, db_session: AsyncSession):
        result = await actions.search_patients(db_session, "35202%")

        assert result.success is False
        assert result.status_code == 400
        assert "cnic" in result.error

    async def test_visit_search_action(self, db_session: AsyncSession, registered):
        result = await actions.search_visits(db_session, "7654321")

        assert result.success is True
        assert result.data[0].relation_cnic == "35202-7654321-2"

    async def test_full_cnic_without_dashes(self, db_session: AsyncSession, registered):
        own, child = registered

        by_patient = await actions.search_patients(db_session, "3520212345671")
        by_relation = await actions.search_patients(db_session, "3520276543212")

        assert [p.id for p in by_patient.data] == [own.id]
        assert [p.id for p in by_relation.data] == [child.id]
