"""Tests for payload parsing and date helpers."""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import ClassVar

import pytest

from coc_verifier.models import (
    Coverage,
    CoverageType,
    Deficiency,
    DocumentMetadata,
    ExtractedPolicyData,
    InsuranceRequirement,
    MissingEndorsement,
    PriorSubmission,
    Severity,
    format_coverage_type,
)
from coc_verifier.utils.dates import parse_date, parse_datetime, parse_pdf_date, try_parse_date
from coc_verifier.utils.errors import ErrorType, InvalidInputError


EXTRACTION_RESULT = {
    "insuredName": "",
    "insuredABN": "51 824 753 556",
    "insurerName": "Allianz Australia Insurance Limited",
    "insurerABN": "15 000 122 850",
    "policyNumber": "ALZ0012345678",
    "startDate": "2024-07-01",
    "endDate": "2025-06-30",
    "coverages": {
        "publicLiability": {"limit": 20_000_000, "excess": "$2,500"},
        "workersCompensation": {"limit": 0, "state": "QLD"},
        "professionalIndemnity": {"limit": 5_000_000, "retroactiveDate": "2019-07-01"},
        "contractWorks": {"limit": 1_500_000},
    },
    "endorsements": {"principalIndemnity": True, "crossLiability": False},
    "fieldConfidence": {"insuredABN": 0.98, "policyNumber": 0.92, "endDate": 0.5, "junk": "n/a"},
}


def test_extraction_result_conversion():
    data = ExtractedPolicyData.from_extraction_result(
        EXTRACTION_RESULT,
        subcontractor_name="Harbour Line Constructions Pty Ltd",
        extraction_model="extractor-v2",
    )

    assert data.insured_party_name == "Harbour Line Constructions Pty Ltd"
    assert data.insured_party_abn == "51824753556"
    assert data.insurer_abn == "15000122850"
    assert [c.type for c in data.coverages] == [
        "public_liability", "workers_comp", "professional_indemnity", "contract_works",
    ]

    public = data.find_coverage(CoverageType.PUBLIC_LIABILITY)
    assert public.excess == 2500
    assert public.principal_indemnity is True
    assert public.cross_liability is False

    workers = data.find_coverage("workers_comp")
    assert workers.state == "QLD"
    assert workers.limit == 0
    assert workers.limit_type == "statutory"

    assert data.find_coverage("professional_indemnity").retroactive_date == "2019-07-01"
    assert data.find_coverage("motor_vehicle") is None
    assert data.extraction_confidence == pytest.approx((0.98 + 0.92 + 0.5) / 3)
    assert data.extraction_model == "extractor-v2"


def test_extraction_result_without_confidences():
    payload = {**EXTRACTION_RESULT, "fieldConfidence": {}}
    assert ExtractedPolicyData.from_extraction_result(payload).extraction_confidence == 0.5


def test_from_dict_coerces_numbers():
    data = ExtractedPolicyData.from_dict({
        "insured_party_name": "Harbour Line",
        "insured_party_abn": "51824753556",
        "insurer_name": "QBE",
        "policy_number": "QBEPL12345678",
        "period_of_insurance_start": "2024-07-01",
        "period_of_insurance_end": "2025-06-30",
        "coverages": [
            {"type": "public_liability", "limit": "$20,000,000", "excess": "1,000"},
            {"type": "products_liability", "limit": "twenty million"},
        ],
        "extraction_confidence": "0.9",
    })
    assert data.coverages[0].limit == 20_000_000
    assert data.coverages[0].excess == 1_000
    assert data.coverages[1].limit is None
    assert data.extraction_confidence == pytest.approx(0.9)
    assert data.currency == "AUD"


@pytest.mark.parametrize(
    "payload, field_name",
    [
        ("not an object", "extracted_data"),
        ({"coverages": {"type": "public_liability"}}, "coverages"),
        ({"coverages": [{"limit": 1}]}, "coverages"),
    ],
)
def test_from_dict_rejects_malformed_payloads(payload, field_name):
    with pytest.raises(InvalidInputError) as exc_info:
        ExtractedPolicyData.from_dict(payload)
    assert exc_info.value.context.error_type == ErrorType.INVALID_PAYLOAD
    assert field_name in exc_info.value.context.message


def test_coverage_to_dict_drops_unset_fields():
    assert Coverage(type="workers_comp", limit=2_000_000, state="NSW").to_dict() == {
        "type": "workers_comp",
        "limit": 2_000_000,
        "limit_type": "per_occurrence",
        "excess": 0.0,
        "state": "NSW",
    }


def test_requirement_from_camel_case():
    requirement = InsuranceRequirement.from_dict({
        "coverageType": "public_liability",
        "minimumLimit": "20000000",
        "maximumExcess": 5000,
        "principalIndemnityRequired": True,
    })
    assert requirement.coverage_type == CoverageType.PUBLIC_LIABILITY
    assert requirement.minimum_limit == 20_000_000
    assert requirement.maximum_excess == 5_000
    assert requirement.principal_indemnity_required is True
    assert requirement.cross_liability_required is False


@pytest.mark.parametrize(
    "record, field_name",
    [
        ({"coverage_type": "public_liability", "minimum_limit": "twenty million"}, "minimum_limit"),
        ({"coverageType": "public_liability", "maximumExcess": "NaN"}, "maximum_excess"),
        ({"coverage_type": "public_liability", "minimum_limit": True}, "minimum_limit"),
    ],
)
def test_requirement_rejects_non_numeric_thresholds(record, field_name):
    with pytest.raises(InvalidInputError) as exc_info:
        InsuranceRequirement.from_dict(record)
    assert exc_info.value.context.error_type == ErrorType.INVALID_PAYLOAD
    assert exc_info.value.context.details == {"field": field_name}


def test_requirement_blank_thresholds_mean_no_threshold():
    requirement = InsuranceRequirement.from_dict({
        "coverage_type": "workers_comp", "minimum_limit": "", "maximum_excess": None,
    })
    assert requirement.minimum_limit is None
    assert requirement.maximum_excess is None


@pytest.mark.parametrize("value", ["NaN", "inf", "-Infinity", float("nan"), float("inf")])
def test_non_finite_amounts_are_not_numbers(value):
    assert Coverage.from_dict({"type": "public_liability", "limit": value}).limit is None


def test_deficiency_kinds_must_name_their_check():
    @dataclass(frozen=True)
    class Incomplete(Deficiency):
        type: ClassVar[str] = "incomplete"
        severity: ClassVar[Severity] = Severity.MINOR

        @property
        def description(self) -> str:
            return "Incomplete"

    with pytest.raises(TypeError):
        Incomplete()


def test_requirement_list_may_be_empty_but_not_missing():
    assert InsuranceRequirement.list_from_dicts([]) == []
    with pytest.raises(InvalidInputError) as exc_info:
        InsuranceRequirement.list_from_dicts(None)
    assert exc_info.value.context.error_type == ErrorType.MISSING_REQUIREMENTS


def test_deficiency_serialisation():
    deficiency = MissingEndorsement(coverage_type="public_liability", endorsement="cross_liability")
    assert deficiency.check_type == "cross_liability_public_liability"
    assert deficiency.to_dict() == {
        "type": "missing_endorsement",
        "severity": "major",
        "description": "Cross liability extension required for Public Liability",
        "required_value": "Yes",
        "actual_value": "No",
    }


def test_format_coverage_type():
    assert format_coverage_type("workers_comp") == "Workers' Compensation"
    assert format_coverage_type(CoverageType.MOTOR_VEHICLE) == "Motor Vehicle"
    assert format_coverage_type("marine_transit") == "Marine Transit"


def test_metadata_accepts_both_key_styles():
    camel = DocumentMetadata.from_dict({"creationDate": "2025-01-01", "producer": "Microsoft Word"})
    snake = DocumentMetadata.from_dict({"creation_date": "2025-01-01", "producer": "Microsoft Word"})
    assert camel == snake
    assert camel.software == "Microsoft Word"
    assert DocumentMetadata.from_dict(None) is None
    assert DocumentMetadata(creator="Crystal Reports").software == "Crystal Reports"


def test_prior_submission_parsing():
    submissions = PriorSubmission.list_from_dicts([{
        "hash": "ab" * 32,
        "fileName": "coc_2024.pdf",
        "uploadDate": "2024-07-02T09:00:00Z",
        "extractedData": {"policyNumber": "QBEPL12345678", "expiryDate": "2025-06-30"},
    }])
    assert submissions[0].policy_number == "QBEPL12345678"
    assert submissions[0].expiry_date == "2025-06-30"
    assert PriorSubmission.from_dict(submissions[0].to_dict()) == submissions[0]
    assert PriorSubmission.list_from_dicts(None) is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2025-06-30", date(2025, 6, 30)),
        ("30/06/2025", date(2025, 6, 30)),
        ("2025-06-30T23:00:00Z", date(2025, 6, 30)),
        (date(2025, 6, 30), date(2025, 6, 30)),
        (1751241600000, date(2025, 6, 30)),
    ],
)
def test_parse_date(value, expected):
    assert parse_date(value) == expected


@pytest.mark.parametrize("value", [None, "", "next tuesday", True])
def test_try_parse_date_rejects_garbage(value):
    assert try_parse_date(value) is None


def test_parse_pdf_date_with_offset():
    assert parse_pdf_date("D:20240115093000+10'00'") == datetime(2024, 1, 14, 23, 30, tzinfo=timezone.utc)
    assert parse_pdf_date("D:20240115093000Z") == datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)
    assert parse_pdf_date("D:2024") == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_parse_datetime_is_timezone_aware():
    assert parse_datetime("2025:01:15 10:30:00").tzinfo is not None
    assert parse_datetime("D:20250115103000-05'00'") == datetime(2025, 1, 15, 15, 30, tzinfo=timezone.utc)
    with pytest.raises(ValueError):
        parse_pdf_date("20240115")
