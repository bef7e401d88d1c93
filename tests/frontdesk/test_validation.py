"""
Registration Validation Tests

Tests for turning raw registration payloads into typed records or per-field
error maps.
"""

import pytest

from app.core.exceptions import WHOLE_OBJECT
from app.core.validation import validate_payload, validate_registration
from app.schemas.patient_schemas import (
    PatientDetailCreateSchema,
    RelationKind,
)
from app.schemas.search_schemas import CnicSearchQuery


@pytest.mark.unit
class TestRegistrationValidation:
    """Test validate_registration error maps."""

    def test_valid_payload(self, registration_payload):
        record, errors = validate_registration(registration_payload())

        assert errors is None
        assert record.name == "Ayesha Khan"
        assert record.cnic == "35202-1234567-1"
        assert record.has_relation is False
        assert record.real_relations == []

    def test_missing_field_is_reported_by_name(self, registration_payload):
        payload = registration_payload()
        del payload["name"]

        record, errors = validate_registration(payload)

        assert record is None
        assert errors == {"name": ["Name is required"]}

    def test_blank_text_is_required(self, registration_payload):
        record, errors = validate_registration(registration_payload(father_name="   "))

        assert record is None
        assert errors["father_name"] == ["Father name is required"]

    def test_errors_are_collected_for_every_field(self, registration_payload):
        payload = registration_payload(contact_number="0300123", age=-1)
        del payload["address"]

        record, errors = validate_registration(payload)

        assert record is None
        assert set(errors) == {"contact_number", "age", "address"}
        assert errors["contact_number"] == ["Contact number must be exactly 11 digits"]

    def test_cnic_required_without_relation(self, registration_payload):
        record, errors = validate_registration(registration_payload(cnic=None))

        assert record is None
        assert errors == {"cnic": ["CNIC is required when relation is NONE"]}

    def test_cnic_required_with_empty_relation_list(self, registration_payload):
        record, errors = validate_registration(
            registration_payload(cnic="", relation=[])
        )

        assert record is None
        assert "cnic" in errors

    def test_relation_replaces_cnic(self, registration_payload, relation_entry):
        record, errors = validate_registration(
            registration_payload(cnic=None, relation=[relation_entry()])
        )

        assert errors is None
        assert record.cnic is None
        assert record.has_relation is True
        assert record.real_relations[0].relation == RelationKind.PARENT

    def test_relation_requires_cnic(self, registration_payload, relation_entry):
        record, errors = validate_registration(
            registration_payload(
                cnic=None, relation=[relation_entry(relation_cnic=None)]
            )
        )

        assert record is None
        assert errors["relation.0"] == ["Relation's CNIC is required"]
        # The relation itself is the problem; the CNIC rule is not evaluated
        assert "cnic" not in errors

    def test_relation_none_rejects_details(self, registration_payload):
        record, errors = validate_registration(
            registration_payload(
                relation=[{"relation": "NONE", "relation_name": "Shazia Bibi"}]
            )
        )

        assert record is None
        assert "relation.0" in errors

    def test_relation_cnic_format_has_nested_path(
        self, registration_payload, relation_entry
    ):
        record, errors = validate_registration(
            registration_payload(
                cnic=None,
                relation=[relation_entry(), relation_entry(relation_cnic="12-34")],
            )
        )

        assert record is None
        assert list(errors) == ["relation.1.relation_cnic"]

    @pytest.mark.parametrize(
        "cnic", ["3520212345671", "35202-1234567-1", " 35202-12345671 "]
    )
    def test_cnic_formats_stored_dashed(self, registration_payload, cnic):
        record, errors = validate_registration(registration_payload(cnic=cnic))

        assert errors is None
        assert record.cnic == "35202-1234567-1"

    def test_relation_cnic_stored_dashed(self, registration_payload, relation_entry):
        record, errors = validate_registration(
            registration_payload(
                cnic=None, relation=[relation_entry(relation_cnic="3520276543212")]
            )
        )

        assert errors is None
        assert record.relation[0].relation_cnic == "35202-7654321-2"

    @pytest.mark.parametrize("cnic", ["35202", "35202-1234567-12", "abcde-fghijkl-m"])
    def test_cnic_formats_rejected(self, registration_payload, cnic):
        record, errors = validate_registration(registration_payload(cnic=cnic))

        assert record is None
        assert "cnic" in errors

    def test_invalid_email(self, registration_payload):
        record, errors = validate_registration(registration_payload(email="not-an-email"))

        assert record is None
        assert "email" in errors

    def test_enum_values(self, registration_payload):
        record, errors = validate_registration(
            registration_payload(catchment_area="SUBURB")
        )

        assert record is None
        assert "catchment_area" in errors

    def test_negative_amount_paid(self, registration_payload):
        record, errors = validate_registration(registration_payload(amount_paid="-1"))

        assert record is None
        assert "amount_paid" in errors

    def test_marriage_years_range(self, registration_payload):
        record, errors = validate_registration(registration_payload(marriage_years=151))

        assert record is None
        assert errors["marriage_years"] == ["Marriage years must be between 0 and 150"]

    def test_non_object_payload(self):
        record, errors = validate_registration(["not", "a", "form"])

        assert record is None
        assert list(errors) == [WHOLE_OBJECT]


@pytest.mark.unit
class TestOtherPayloads:
    """Test validation of the smaller forms."""

    def test_vitals_must_be_non_negative(self):
        record, errors = validate_payload(
            PatientDetailCreateSchema, {"weight": -3, "temperature": 98.6}
        )

        assert record is None
        assert errors == {"weight": ["Weight must be a non-negative number"]}

    def test_vitals_all_optional(self):
        record, errors = validate_payload(PatientDetailCreateSchema, {})

        assert errors is None
        assert record.blood_pressure is None

    def test_search_term_only_digits_and_dashes(self):
        record, errors = validate_payload(CnicSearchQuery, {"cnic": "35%"})

        assert record is None
        assert "cnic" in errors

    def test_search_term_trimmed(self):
        record, errors = validate_payload(CnicSearchQuery, {"cnic": " 35202- "})

        assert errors is None
        assert record.cnic == "35202-"
