"""
Deterministic test data for certificate verification.

Scenario keywords are matched against a file name, the way sample uploads
are named (e.g. ``coc_no_pi.pdf``, ``certificate_vic_wc.pdf``). This is
test and demo tooling only; the engines never look at file names.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import FrozenSet, List, Optional

from ..models.fraud import DocumentMetadata, PriorSubmission
from ..models.policy import Coverage, CoverageType, ExtractedPolicyData
from ..models.requirement import InsuranceRequirement

VALID_ABN = "51824753556"
INVALID_ABN = "51824753557"
KNOWN_INSURER = "QBE Insurance (Australia) Limited"
UNKNOWN_INSURER = "Southern Cross Underwriting Agency"
KNOWN_POLICY_NUMBER = "QBEPL12345678"

SCENARIO_KEYWORDS = {
    "compliant": ("compliant", "full_compliance", "pass"),
    "expiring_soon": ("expiring_soon", "expires_soon"),
    "expired": ("expired",),
    "early_expiry": ("expiring_early", "early_expiry"),
    "no_principal_indemnity": ("no_pi", "no_principal"),
    "no_cross_liability": ("no_cl", "no_cross"),
    "vic_workers_comp": ("vic_wc", "wc_vic"),
    "low_confidence": ("poor_quality", "low_confidence", "blurry"),
    "unknown_insurer": ("unknown_insurer", "forged", "fake_template"),
    "invalid_abn": ("fake_abn", "invalid_abn"),
    "modified": ("modified", "edited"),
    "duplicate": ("duplicate", "resubmit"),
}


def scenarios_for(file_name: str) -> FrozenSet[str]:
    """Scenario names whose keywords appear in the file name."""
    lowered = (file_name or "").lower()
    found = set()
    for scenario, keywords in SCENARIO_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            found.add(scenario)
    return frozenset(found)


def policy_period(today: date, scenarios: FrozenSet[str]):
    """Start and end dates for a scenario, relative to today."""
    if "expired" in scenarios:
        end = today - timedelta(days=1)
    elif "expiring_soon" in scenarios:
        end = today + timedelta(days=10)
    elif "early_expiry" in scenarios:
        end = today + timedelta(days=45)
    else:
        end = today + timedelta(days=275)
    return end - timedelta(days=365), end


def build_policy_data(
    today: date,
    file_name: str = "compliant.pdf",
    insured_name: str = "Harbour Line Constructions Pty Ltd",
    insured_abn: Optional[str] = None,
) -> ExtractedPolicyData:
    """
    Build certificate data for the scenarios named in file_name.

    Without any scenario keyword the certificate is fully compliant with
    standard_requirements().
    """
    scenarios = scenarios_for(file_name)
    start, end = policy_period(today, scenarios)

    principal = "no_principal_indemnity" not in scenarios
    cross = "no_cross_liability" not in scenarios
    unknown = "unknown_insurer" in scenarios

    if insured_abn is None:
        insured_abn = INVALID_ABN if "invalid_abn" in scenarios else VALID_ABN

    coverages = (
        Coverage(
            type=CoverageType.PUBLIC_LIABILITY.value, limit=20_000_000,
            limit_type="per_occurrence", excess=1_000,
            principal_indemnity=principal, cross_liability=cross,
        ),
        Coverage(
            type=CoverageType.PRODUCTS_LIABILITY.value, limit=20_000_000,
            limit_type="aggregate", excess=1_000,
            principal_indemnity=principal, cross_liability=cross,
        ),
        Coverage(
            type=CoverageType.WORKERS_COMP.value, limit=2_000_000,
            limit_type="statutory", excess=0,
            state="VIC" if "vic_workers_comp" in scenarios else "NSW",
            employer_indemnity=True,
        ),
        Coverage(
            type=CoverageType.PROFESSIONAL_INDEMNITY.value, limit=5_000_000,
            limit_type="per_claim", excess=5_000,
            retroactive_date="2020-01-01",
        ),
    )

    return ExtractedPolicyData(
        insured_party_name=insured_name,
        insured_party_abn=insured_abn,
        insured_party_address="123 Construction Way, Sydney NSW 2000",
        insurer_name=UNKNOWN_INSURER if unknown else KNOWN_INSURER,
        insurer_abn="78003191035",
        policy_number="SCU-778812" if unknown else KNOWN_POLICY_NUMBER,
        period_of_insurance_start=start.isoformat(),
        period_of_insurance_end=end.isoformat(),
        coverages=coverages,
        broker_name="Coastal Insurance Brokers",
        broker_contact="Jordan Lee",
        broker_phone="02 9000 0000",
        broker_email="certificates@coastalbrokers.example",
        currency="AUD",
        territory="Australia and New Zealand",
        extraction_confidence=0.55 if "low_confidence" in scenarios else 0.95,
    )


def standard_requirements() -> List[InsuranceRequirement]:
    """Typical head-contractor requirements for a commercial build."""
    return [
        InsuranceRequirement(
            coverage_type=CoverageType.PUBLIC_LIABILITY,
            minimum_limit=20_000_000,
            maximum_excess=10_000,
            principal_indemnity_required=True,
            cross_liability_required=True,
            limit_type="per_occurrence",
        ),
        InsuranceRequirement(
            coverage_type=CoverageType.PRODUCTS_LIABILITY,
            minimum_limit=20_000_000,
            limit_type="aggregate",
        ),
        InsuranceRequirement(
            coverage_type=CoverageType.WORKERS_COMP,
            limit_type="statutory",
        ),
        InsuranceRequirement(
            coverage_type=CoverageType.PROFESSIONAL_INDEMNITY,
            minimum_limit=5_000_000,
            limit_type="per_claim",
        ),
    ]


def build_metadata(today: date, file_name: str = "authentic.pdf") -> DocumentMetadata:
    """Document metadata for a scenario; edited files carry a late modification and editor software."""
    created = datetime.combine(today - timedelta(days=60), time(9, 0), tzinfo=timezone.utc)
    if "modified" in scenarios_for(file_name):
        return DocumentMetadata(
            creation_date=created.isoformat(),
            modification_date=(created + timedelta(days=20)).isoformat(),
            producer="Adobe Photoshop 25.0",
        )
    return DocumentMetadata(
        creation_date=created.isoformat(),
        modification_date=created.isoformat(),
        producer="Guidewire PolicyCenter",
    )


def build_prior_submissions(
    data: ExtractedPolicyData,
    file_name: str = "duplicate.pdf",
) -> List[PriorSubmission]:
    """
    Upload history for a certificate.

    Duplicate scenarios get two earlier uploads of the same policy with a
    different expiry date; anything else gets an unrelated policy.
    """
    if "duplicate" in scenarios_for(file_name):
        earlier_end = date.fromisoformat(data.period_of_insurance_end) - timedelta(days=180)
        return [
            PriorSubmission(
                hash="a1" * 32,
                file_name="coc_original.pdf",
                upload_date="2024-03-01T10:00:00Z",
                policy_number=data.policy_number,
                expiry_date=earlier_end.isoformat(),
            ),
            PriorSubmission(
                hash="b2" * 32,
                file_name="coc_reissued.pdf",
                upload_date="2024-06-01T10:00:00Z",
                policy_number=data.policy_number,
                expiry_date=(earlier_end + timedelta(days=30)).isoformat(),
            ),
        ]
    return [
        PriorSubmission(
            hash="c3" * 32,
            file_name="coc_last_year.pdf",
            upload_date="2023-07-01T10:00:00Z",
            policy_number="QBEPL00000001",
            expiry_date="2024-06-30",
        ),
    ]
