"""Extracted certificate data models."""

import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..utils.errors import InvalidInputError


class CoverageType(str, Enum):
    """Coverage classes a project can require."""
    PUBLIC_LIABILITY = "public_liability"
    PRODUCTS_LIABILITY = "products_liability"
    WORKERS_COMP = "workers_comp"
    PROFESSIONAL_INDEMNITY = "professional_indemnity"
    MOTOR_VEHICLE = "motor_vehicle"
    CONTRACT_WORKS = "contract_works"


COVERAGE_DISPLAY_NAMES = {
    CoverageType.PUBLIC_LIABILITY.value: "Public Liability",
    CoverageType.PRODUCTS_LIABILITY.value: "Products Liability",
    CoverageType.WORKERS_COMP.value: "Workers' Compensation",
    CoverageType.PROFESSIONAL_INDEMNITY.value: "Professional Indemnity",
    CoverageType.MOTOR_VEHICLE.value: "Motor Vehicle",
    CoverageType.CONTRACT_WORKS.value: "Contract Works",
}

AUSTRALIAN_STATES = ("ACT", "NSW", "NT", "QLD", "SA", "TAS", "VIC", "WA")


def format_coverage_type(coverage_type: str) -> str:
    """Human-readable coverage name, title-casing unknown keys."""
    key = coverage_type.value if isinstance(coverage_type, Enum) else str(coverage_type)
    if key in COVERAGE_DISPLAY_NAMES:
        return COVERAGE_DISPLAY_NAMES[key]
    return key.replace("_", " ").title()


def coerce_number(value: Any) -> Optional[float]:
    """Convert a numeric-looking value to a finite float, or None when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        try:
            result = float(str(value).replace(",", "").replace("$", "").strip())
        except ValueError:
            return None
    # NaN and infinities are not amounts
    return result if math.isfinite(result) else None


def _optional_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    return bool(value)


@dataclass(frozen=True)
class Coverage:
    """
    A single coverage section of a certificate.

    Attributes:
        type: Coverage class key (see CoverageType)
        limit: Limit of liability; None when the extracted value was not numeric
        limit_type: per_occurrence, aggregate, statutory, per_claim or per_project
        excess: Deductible; None when the extracted value was not numeric
        principal_indemnity: Principal indemnity extension, when the section reports one
        cross_liability: Cross liability clause, when the section reports one
        state: Workers' compensation scheme state
        employer_indemnity: Employer indemnity extension (workers' compensation)
        retroactive_date: Retroactive date (professional indemnity)
        waiver_of_subrogation: Waiver of subrogation endorsement
    """
    type: str
    limit: Optional[float]
    limit_type: str = "per_occurrence"
    excess: Optional[float] = 0.0
    principal_indemnity: Optional[bool] = None
    cross_liability: Optional[bool] = None
    state: Optional[str] = None
    employer_indemnity: Optional[bool] = None
    retroactive_date: Optional[str] = None
    waiver_of_subrogation: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Coverage":
        if not isinstance(data, Mapping):
            raise InvalidInputError.invalid_payload("coverages", "each coverage must be an object")
        coverage_type = data.get("type") or data.get("coverage_type")
        if not coverage_type:
            raise InvalidInputError.invalid_payload("coverages", "coverage is missing its 'type'")

        return cls(
            type=str(coverage_type),
            limit=coerce_number(data.get("limit")),
            limit_type=str(data.get("limit_type") or "per_occurrence"),
            excess=coerce_number(data.get("excess", 0)),
            principal_indemnity=_optional_bool(data.get("principal_indemnity")),
            cross_liability=_optional_bool(data.get("cross_liability")),
            state=data.get("state") or None,
            employer_indemnity=_optional_bool(data.get("employer_indemnity")),
            retroactive_date=data.get("retroactive_date"),
            waiver_of_subrogation=_optional_bool(data.get("waiver_of_subrogation")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass(frozen=True)
class ExtractedPolicyData:
    """
    Structured fields produced by the extraction service for one certificate.

    Field names match the JSON contract with the extraction collaborator.
    """
    insured_party_name: str
    insured_party_abn: str
    insurer_name: str
    policy_number: str
    period_of_insurance_start: str
    period_of_insurance_end: str
    coverages: Tuple[Coverage, ...] = ()
    insured_party_address: str = ""
    insurer_abn: str = ""
    broker_name: str = ""
    broker_contact: str = ""
    broker_phone: str = ""
    broker_email: str = ""
    currency: str = "AUD"
    territory: str = ""
    extraction_confidence: float = 1.0
    field_confidences: Dict[str, float] = field(default_factory=dict, compare=False)
    extraction_model: Optional[str] = None
    extraction_timestamp: Optional[str] = None

    def find_coverage(self, coverage_type: str) -> Optional[Coverage]:
        """Return the first coverage of the given type, if any."""
        key = coverage_type.value if isinstance(coverage_type, Enum) else coverage_type
        for coverage in self.coverages:
            if coverage.type == key:
                return coverage
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExtractedPolicyData":
        """
        Build from the snake_case JSON produced by the extraction collaborator.

        Raises:
            InvalidInputError: If data is missing or not an object
        """
        if data is None:
            raise InvalidInputError.missing_extracted_data()
        if not isinstance(data, Mapping):
            raise InvalidInputError.invalid_payload("extracted_data", "must be an object")

        raw_coverages = data.get("coverages") or []
        if not isinstance(raw_coverages, list):
            raise InvalidInputError.invalid_payload("coverages", "must be a list")

        confidence = coerce_number(data.get("extraction_confidence"))

        return cls(
            insured_party_name=str(data.get("insured_party_name") or ""),
            insured_party_abn=str(data.get("insured_party_abn") or ""),
            insured_party_address=str(data.get("insured_party_address") or ""),
            insurer_name=str(data.get("insurer_name") or ""),
            insurer_abn=str(data.get("insurer_abn") or ""),
            policy_number=str(data.get("policy_number") or ""),
            period_of_insurance_start=str(data.get("period_of_insurance_start") or ""),
            period_of_insurance_end=str(data.get("period_of_insurance_end") or ""),
            coverages=tuple(Coverage.from_dict(c) for c in raw_coverages),
            broker_name=str(data.get("broker_name") or ""),
            broker_contact=str(data.get("broker_contact") or ""),
            broker_phone=str(data.get("broker_phone") or ""),
            broker_email=str(data.get("broker_email") or ""),
            currency=str(data.get("currency") or "AUD"),
            territory=str(data.get("territory") or ""),
            extraction_confidence=confidence if confidence is not None else 0.0,
            field_confidences=dict(data.get("field_confidences") or {}),
            extraction_model=data.get("extraction_model"),
            extraction_timestamp=data.get("extraction_timestamp"),
        )

    @classmethod
    def from_extraction_result(
        cls,
        payload: Mapping[str, Any],
        subcontractor_name: str = "",
        subcontractor_abn: str = "",
        extraction_model: Optional[str] = None,
    ) -> "ExtractedPolicyData":
        """
        Convert a camelCase extraction result into the verification model.

        Endorsements reported once for the whole certificate are copied onto
        the liability sections; the insured name and ABN fall back to the
        subcontractor record when the extractor could not read them.

        Args:
            payload: Extraction result (insuredName, insuredABN, coverages.publicLiability, ...)
            subcontractor_name: Name on the subcontractor record
            subcontractor_abn: ABN on the subcontractor record
            extraction_model: Model identifier recorded alongside the data

        Returns:
            ExtractedPolicyData instance
        """
        if payload is None:
            raise InvalidInputError.missing_extracted_data()
        if not isinstance(payload, Mapping):
            raise InvalidInputError.invalid_payload("extraction_result", "must be an object")

        sections = payload.get("coverages") or {}
        endorsements = payload.get("endorsements") or {}
        principal = bool(endorsements.get("principalIndemnity"))
        cross = bool(endorsements.get("crossLiability"))
        waiver = bool(endorsements.get("waiverOfSubrogation"))

        coverages: List[Coverage] = []
        for section_key, coverage_type, limit_type in _EXTRACTION_SECTIONS:
            section = sections.get(section_key)
            if not section:
                continue
            limit = coerce_number(section.get("limit")) or 0.0
            excess = coerce_number(section.get("excess")) or 0.0
            if coverage_type in (CoverageType.PUBLIC_LIABILITY.value, CoverageType.PRODUCTS_LIABILITY.value):
                coverages.append(Coverage(
                    type=coverage_type, limit=limit, limit_type=limit_type, excess=excess,
                    principal_indemnity=principal, cross_liability=cross,
                    waiver_of_subrogation=waiver,
                ))
            elif coverage_type == CoverageType.WORKERS_COMP.value:
                coverages.append(Coverage(
                    type=coverage_type, limit=limit, limit_type=limit_type, excess=excess,
                    state=str(section.get("state") or "") or None,
                    employer_indemnity=True, waiver_of_subrogation=waiver,
                ))
            elif coverage_type == CoverageType.PROFESSIONAL_INDEMNITY.value:
                coverages.append(Coverage(
                    type=coverage_type, limit=limit, limit_type=limit_type, excess=excess,
                    retroactive_date=section.get("retroactiveDate"),
                    waiver_of_subrogation=waiver,
                ))
            else:
                coverages.append(Coverage(
                    type=coverage_type, limit=limit, limit_type=limit_type, excess=excess,
                ))

        field_confidence = {
            str(k): float(v) for k, v in (payload.get("fieldConfidence") or {}).items()
            if coerce_number(v) is not None
        }

        return cls(
            insured_party_name=str(payload.get("insuredName") or subcontractor_name),
            insured_party_abn=_strip_spaces(payload.get("insuredABN")) or _strip_spaces(subcontractor_abn),
            insured_party_address=str(payload.get("insuredAddress") or ""),
            insurer_name=str(payload.get("insurerName") or ""),
            insurer_abn=_strip_spaces(payload.get("insurerABN")),
            policy_number=str(payload.get("policyNumber") or ""),
            period_of_insurance_start=str(payload.get("startDate") or ""),
            period_of_insurance_end=str(payload.get("endDate") or ""),
            coverages=tuple(coverages),
            broker_name=str(payload.get("brokerName") or ""),
            broker_contact=str(payload.get("brokerContact") or ""),
            currency="AUD",
            territory="Australia and New Zealand",
            extraction_confidence=overall_confidence(field_confidence),
            field_confidences=field_confidence,
            extraction_model=extraction_model,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["coverages"] = [c.to_dict() for c in self.coverages]
        return data


# (extraction section key, coverage type, limit type)
_EXTRACTION_SECTIONS = (
    ("publicLiability", CoverageType.PUBLIC_LIABILITY.value, "per_occurrence"),
    ("productsLiability", CoverageType.PRODUCTS_LIABILITY.value, "aggregate"),
    ("workersCompensation", CoverageType.WORKERS_COMP.value, "statutory"),
    ("professionalIndemnity", CoverageType.PROFESSIONAL_INDEMNITY.value, "per_claim"),
    ("motorVehicle", CoverageType.MOTOR_VEHICLE.value, "per_occurrence"),
    ("contractWorks", CoverageType.CONTRACT_WORKS.value, "per_project"),
)


def _strip_spaces(value: Any) -> str:
    return "".join(str(value or "").split())


def overall_confidence(field_confidence: Mapping[str, float]) -> float:
    """Mean of the per-field confidences; 0.5 when none were reported."""
    values = list(field_confidence.values())
    if not values:
        return 0.5
    return sum(values) / len(values)
