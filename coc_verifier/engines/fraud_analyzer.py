"""Fraud risk scoring for uploaded certificates."""

import hashlib
import logging
from typing import Iterable, List, Optional, Sequence

from ..models.fraud import (
    DocumentMetadata,
    FraudAnalysisResult,
    FraudCheckResult,
    FraudCheckStatus,
    PriorSubmission,
    RiskLevel,
)
from ..models.policy import CoverageType, ExtractedPolicyData, coerce_number
from ..utils.dates import parse_datetime, try_parse_date
from .abn_validator import validate_abn
from .insurer_catalog import (
    DEFAULT_INSURER_CATALOG,
    DEFAULT_SOFTWARE_CATALOG,
    InsurerTemplateCatalog,
    SoftwareCatalog,
)

logger = logging.getLogger(__name__)

MAX_RISK_SCORE = 100
LOW_LIABILITY_LIMIT = 100_000
MIN_POLICY_DAYS = 30
MAX_POLICY_DAYS = 400

RECOMMENDATION_BLOCK = (
    "BLOCK: Document flagged for possible fraud. Requires manual investigation "
    "before acceptance. Contact insurer directly to verify authenticity."
)
RECOMMENDATION_REVIEW = (
    "REVIEW: Multiple warning signs detected. Recommend manual verification "
    "with issuing broker or insurer."
)
RECOMMENDATION_CAUTION = (
    "CAUTION: Some irregularities detected. Standard verification process recommended."
)
RECOMMENDATION_ACCEPT = (
    "ACCEPT: No significant fraud indicators detected. Document appears authentic."
)


def compute_document_hash(content: bytes) -> str:
    """SHA-256 hex digest of the uploaded file bytes."""
    return hashlib.sha256(content).hexdigest()


def _same_expiry(previous: str, current: str) -> bool:
    """Compare expiry dates by calendar day; unparsable values compare as text."""
    previous_date = try_parse_date(previous)
    current_date = try_parse_date(current)
    if previous_date is None or current_date is None:
        return previous == current
    return previous_date == current_date


def risk_level_for(score: float) -> RiskLevel:
    if score >= 80:
        return RiskLevel.CRITICAL
    if score >= 60:
        return RiskLevel.HIGH
    if score >= 40:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def recommendation_for(is_blocked: bool, risk_level: RiskLevel) -> str:
    if is_blocked:
        return RECOMMENDATION_BLOCK
    if risk_level == RiskLevel.HIGH:
        return RECOMMENDATION_REVIEW
    if risk_level == RiskLevel.MEDIUM:
        return RECOMMENDATION_CAUTION
    return RECOMMENDATION_ACCEPT


def aggregate_checks(checks: Sequence[FraudCheckResult]) -> FraudAnalysisResult:
    """
    Combine individual fraud checks into one verdict.

    The overall score is the highest single check score, raised by 10 for
    each warning beyond the second and capped at 100. A document is blocked
    when the level is critical or at least two checks failed.
    """
    failed = [c for c in checks if c.status == FraudCheckStatus.FAIL]
    warnings = [c for c in checks if c.status == FraudCheckStatus.WARNING]

    score = max((c.risk_score for c in checks), default=0)
    if len(warnings) > 2:
        score = min(score + (len(warnings) - 2) * 10, MAX_RISK_SCORE)

    level = risk_level_for(score)
    is_blocked = level == RiskLevel.CRITICAL or len(failed) >= 2

    return FraudAnalysisResult(
        overall_risk_score=score,
        risk_level=level,
        is_blocked=is_blocked,
        checks=tuple(checks),
        recommendation=recommendation_for(is_blocked, level),
        evidence_summary=tuple(
            f"{c.check_name}: {c.details}" for c in checks if c.status != FraudCheckStatus.PASS
        ),
    )


class FraudRiskAnalyzer:
    """
    Runs independent fraud checks on one certificate and aggregates them.

    Check groups:
    - Metadata tampering (modification gap, creation software)
    - Insurer template matching (policy number format, certificate elements)
    - Data logic (ABN checksum, policy dates, coverage limits)
    - Duplicate / manipulation detection against prior submissions
    """

    def __init__(
        self,
        templates: InsurerTemplateCatalog = DEFAULT_INSURER_CATALOG,
        software: SoftwareCatalog = DEFAULT_SOFTWARE_CATALOG,
    ):
        self.templates = templates
        self.software = software

    def analyze(
        self,
        data: ExtractedPolicyData,
        metadata: Optional[DocumentMetadata] = None,
        file_name: Optional[str] = None,
        prior_submissions: Optional[Sequence[PriorSubmission]] = None,
        document_hash: Optional[str] = None,
        extracted_elements: Optional[Iterable[str]] = None,
    ) -> FraudAnalysisResult:
        """
        Score a certificate for signs of fraud.

        Args:
            data: Extracted certificate data
            metadata: File metadata, when it could be read
            file_name: Uploaded file name (evidence and fallback hash only)
            prior_submissions: Earlier uploads for the same subcontractor; None skips
                duplicate detection
            document_hash: Content hash of the upload; defaults to
                "{policy_number}-{file_name}"
            extracted_elements: Certificate labels seen by extraction; derived from
                the populated fields when omitted

        Returns:
            FraudAnalysisResult
        """
        checks: List[FraudCheckResult] = []

        if metadata is not None:
            checks.extend(self.check_metadata(metadata))

        elements = (
            list(extracted_elements) if extracted_elements is not None
            else self.derive_elements(data)
        )
        checks.extend(self.check_template(data.insurer_name, data.policy_number, elements))

        checks.extend(self.check_data_logic(data))

        if prior_submissions is not None:
            content_hash = document_hash or f"{data.policy_number}-{file_name or ''}"
            checks.extend(self.check_duplicates(
                content_hash, prior_submissions, data.policy_number, data.period_of_insurance_end,
            ))

        result = aggregate_checks(checks)
        logger.info(
            f"Fraud analysis for {file_name or data.policy_number or '<unnamed>'}: "
            f"score={result.overall_risk_score}, level={result.risk_level.value}, "
            f"blocked={result.is_blocked}"
        )
        return result

    def check_metadata(self, metadata: DocumentMetadata) -> List[FraudCheckResult]:
        """Flag late modification and editing software in file metadata."""
        results: List[FraudCheckResult] = []

        if metadata.creation_date and metadata.modification_date:
            try:
                created = parse_datetime(metadata.creation_date)
                modified = parse_datetime(metadata.modification_date)
            except ValueError as e:
                logger.warning(f"Skipping modification check, unparsable metadata date: {e}")
            else:
                days_difference = (modified - created).total_seconds() / 86400
                if days_difference > 1:
                    results.append(FraudCheckResult(
                        check_type="metadata_modification",
                        check_name="Document Modification Detection",
                        status=FraudCheckStatus.WARNING,
                        risk_score=min(int(round(days_difference * 5)), 60),
                        details=f"Document was modified {round(days_difference)} days after creation",
                        evidence=(
                            f"Creation date: {created.isoformat()}",
                            f"Modification date: {modified.isoformat()}",
                        ),
                    ))
                else:
                    results.append(FraudCheckResult(
                        check_type="metadata_modification",
                        check_name="Document Modification Detection",
                        status=FraudCheckStatus.PASS,
                        risk_score=0,
                        details="No significant modification detected after creation",
                    ))

        software = metadata.software
        if self.software.is_suspicious(software):
            results.append(FraudCheckResult(
                check_type="metadata_software",
                check_name="Creation Software Analysis",
                status=FraudCheckStatus.FAIL,
                risk_score=70,
                details="Document created with image editing/PDF manipulation software",
                evidence=(f"Software detected: {software}",),
            ))
        elif self.software.is_legitimate(software):
            results.append(FraudCheckResult(
                check_type="metadata_software",
                check_name="Creation Software Analysis",
                status=FraudCheckStatus.PASS,
                risk_score=0,
                details="Document created with legitimate software",
            ))
        elif software:
            results.append(FraudCheckResult(
                check_type="metadata_software",
                check_name="Creation Software Analysis",
                status=FraudCheckStatus.WARNING,
                risk_score=30,
                details="Document created with unrecognized software",
                evidence=(f"Software detected: {software}",),
            ))
        else:
            results.append(FraudCheckResult(
                check_type="metadata_software",
                check_name="Creation Software Analysis",
                status=FraudCheckStatus.PASS,
                risk_score=0,
                details="No creation software declared",
            ))

        return results

    def check_template(
        self,
        insurer_name: str,
        policy_number: str,
        extracted_elements: Sequence[str],
    ) -> List[FraudCheckResult]:
        """Compare the certificate against the declared insurer's known template."""
        template = self.templates.find(insurer_name)
        if template is None:
            return [FraudCheckResult(
                check_type="template_match",
                check_name="Insurer Template Verification",
                status=FraudCheckStatus.WARNING,
                risk_score=20,
                details="Insurer not in known template database",
                evidence=(f"Insurer: {insurer_name}",),
            )]

        results: List[FraudCheckResult] = []

        if template.policy_number_pattern.fullmatch(policy_number or ""):
            results.append(FraudCheckResult(
                check_type="policy_number_format",
                check_name="Policy Number Format Validation",
                status=FraudCheckStatus.PASS,
                risk_score=0,
                details="Policy number matches insurer format",
            ))
        else:
            results.append(FraudCheckResult(
                check_type="policy_number_format",
                check_name="Policy Number Format Validation",
                status=FraudCheckStatus.FAIL,
                risk_score=65,
                details=f"Policy number doesn't match {template.name} standard format",
                evidence=(
                    f"Policy number: {policy_number}",
                    f"Expected pattern: {template.policy_number_pattern.pattern}",
                ),
            ))

        seen = [e.lower() for e in extracted_elements]
        missing = [
            element for element in template.expected_elements
            if not any(element.lower() in e for e in seen)
        ]
        if missing:
            results.append(FraudCheckResult(
                check_type="template_elements",
                check_name="Certificate Element Check",
                status=FraudCheckStatus.WARNING,
                risk_score=min(15 * len(missing), MAX_RISK_SCORE),
                details="Missing expected certificate elements",
                evidence=tuple(f"Missing: {element}" for element in missing),
            ))
        else:
            results.append(FraudCheckResult(
                check_type="template_elements",
                check_name="Certificate Element Check",
                status=FraudCheckStatus.PASS,
                risk_score=0,
                details="All expected certificate elements present",
            ))

        return results

    def check_data_logic(self, data: ExtractedPolicyData) -> List[FraudCheckResult]:
        """Validate ABN checksum, policy period and coverage limits."""
        results: List[FraudCheckResult] = []

        abn = validate_abn(data.insured_party_abn)
        if abn.valid:
            results.append(FraudCheckResult(
                check_type="abn_checksum",
                check_name="ABN Checksum Validation",
                status=FraudCheckStatus.PASS,
                risk_score=0,
                details="ABN checksum valid",
            ))
        else:
            results.append(FraudCheckResult(
                check_type="abn_checksum",
                check_name="ABN Checksum Validation",
                status=FraudCheckStatus.FAIL,
                risk_score=80,
                details=abn.error or "Invalid ABN checksum",
                evidence=(f"ABN: {data.insured_party_abn}",),
            ))

        results.append(self._check_policy_dates(data))

        for coverage in data.coverages:
            amount = coerce_number(coverage.limit) or 0
            if amount <= 0:
                results.append(FraudCheckResult(
                    check_type="limit_validation",
                    check_name=f"{coverage.type} Limit Validation",
                    status=FraudCheckStatus.FAIL,
                    risk_score=70,
                    details=f"Invalid or zero coverage limit for {coverage.type}",
                    evidence=(f"Amount: {coverage.limit}",),
                ))
            elif amount < LOW_LIABILITY_LIMIT and coverage.type in (
                CoverageType.PUBLIC_LIABILITY.value,
                CoverageType.PRODUCTS_LIABILITY.value,
            ):
                results.append(FraudCheckResult(
                    check_type="limit_validation",
                    check_name=f"{coverage.type} Limit Validation",
                    status=FraudCheckStatus.WARNING,
                    risk_score=40,
                    details=f"Unusually low coverage limit for {coverage.type}",
                    evidence=(f"Amount: ${amount:,.0f}",),
                ))

        return results

    def _check_policy_dates(self, data: ExtractedPolicyData) -> FraudCheckResult:
        evidence = (
            f"Start: {data.period_of_insurance_start}",
            f"End: {data.period_of_insurance_end}",
        )
        try:
            start = parse_datetime(data.period_of_insurance_start)
            end = parse_datetime(data.period_of_insurance_end)
        except ValueError:
            return FraudCheckResult(
                check_type="date_logic",
                check_name="Policy Date Logic",
                status=FraudCheckStatus.WARNING,
                risk_score=25,
                details="Policy dates could not be parsed",
                evidence=evidence,
            )

        if end <= start:
            return FraudCheckResult(
                check_type="date_logic",
                check_name="Policy Date Logic",
                status=FraudCheckStatus.FAIL,
                risk_score=90,
                details="Policy end date is before or same as start date",
                evidence=evidence,
            )

        days_length = (end - start).total_seconds() / 86400
        if days_length < MIN_POLICY_DAYS or days_length > MAX_POLICY_DAYS:
            return FraudCheckResult(
                check_type="date_logic",
                check_name="Policy Date Logic",
                status=FraudCheckStatus.WARNING,
                risk_score=25,
                details=f"Unusual policy length: {round(days_length)} days",
                evidence=evidence,
            )

        return FraudCheckResult(
            check_type="date_logic",
            check_name="Policy Date Logic",
            status=FraudCheckStatus.PASS,
            risk_score=0,
            details="Policy dates are logical and valid",
        )

    def check_duplicates(
        self,
        document_hash: str,
        prior_submissions: Sequence[PriorSubmission],
        policy_number: str,
        expiry_date: str,
    ) -> List[FraudCheckResult]:
        """Look for resubmission of the same file or the same policy with a different expiry."""
        exact = next((s for s in prior_submissions if s.hash == document_hash), None)
        if exact is not None:
            return [FraudCheckResult(
                check_type="duplicate_detection",
                check_name="Duplicate Document Detection",
                status=FraudCheckStatus.INFO,
                risk_score=10,
                details="This exact document was previously submitted",
                evidence=(
                    f"Previous upload: {exact.upload_date}",
                    f"File name: {exact.file_name}",
                ),
            )]

        altered = next(
            (
                s for s in prior_submissions
                if s.policy_number == policy_number and not _same_expiry(s.expiry_date, expiry_date)
            ),
            None,
        )
        if altered is not None:
            return [FraudCheckResult(
                check_type="date_manipulation",
                check_name="Date Manipulation Detection",
                status=FraudCheckStatus.FAIL,
                risk_score=95,
                details=(
                    "Same policy number submitted with different expiry date "
                    "- possible document tampering"
                ),
                evidence=(
                    f"Previous expiry: {altered.expiry_date}",
                    f"Current expiry: {expiry_date}",
                    f"Policy: {policy_number}",
                ),
            )]

        return [FraudCheckResult(
            check_type="date_manipulation",
            check_name="Date Manipulation Detection",
            status=FraudCheckStatus.PASS,
            risk_score=0,
            details="No date manipulation detected",
        )]

    @staticmethod
    def derive_elements(data: ExtractedPolicyData) -> List[str]:
        """Certificate labels implied by the fields extraction managed to populate."""
        elements = []
        if data.insured_party_abn:
            elements.append("ABN")
        if data.policy_number:
            elements.append("Policy Number")
        if data.period_of_insurance_start and data.period_of_insurance_end:
            elements.append("Period of Insurance")
        if data.insured_party_name:
            elements.append("Insured")
        return elements
