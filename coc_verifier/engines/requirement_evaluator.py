"""Evaluate extracted certificate data against project insurance requirements."""

import logging
from datetime import date
from typing import Any, Callable, Iterable, List, Optional, Sequence

from ..models.policy import Coverage, CoverageType, ExtractedPolicyData, coerce_number, format_coverage_type
from ..models.requirement import InsuranceRequirement
from ..models.verification import (
    AbnMismatch,
    Check,
    CheckStatus,
    Deficiency,
    ExcessTooHigh,
    ExpiredPolicy,
    InsufficientLimit,
    MissingCoverage,
    MissingEndorsement,
    PolicyExpiresBeforeProject,
    Severity,
    StateMismatch,
    UnlicensedInsurer,
    VerificationOutcome,
    VerificationStatus,
    format_money,
)
from ..utils.dates import try_parse_date
from ..utils.errors import InvalidInputError
from .abn_validator import normalize_abn

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_WARNING_DAYS = 30


class RequirementEvaluator:
    """
    Rule engine that turns one certificate and one project's requirements
    into an ordered list of checks, deficiencies and an overall status.

    The evaluator holds only immutable configuration, so a single instance
    can be shared across threads.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], date]] = None,
        expiry_warning_days: int = DEFAULT_EXPIRY_WARNING_DAYS,
        low_confidence_threshold: Optional[float] = None,
        licensed_insurers: Optional[Iterable[str]] = None,
    ):
        """
        Initialize the evaluator.

        Args:
            clock: Returns "today"; defaults to date.today
            expiry_warning_days: Days before expiry at which a warning is raised
            low_confidence_threshold: Extraction confidence below which an otherwise
                non-failing outcome goes to review (None disables the rule)
            licensed_insurers: Register of licensed insurer names (None disables the rule)
        """
        self.clock = clock or date.today
        self.expiry_warning_days = expiry_warning_days
        self.low_confidence_threshold = low_confidence_threshold
        self.licensed_insurers = (
            frozenset(name.strip().lower() for name in licensed_insurers)
            if licensed_insurers is not None else None
        )

    def evaluate(
        self,
        data: ExtractedPolicyData,
        requirements: Sequence[InsuranceRequirement],
        project_end_date: Any = None,
        project_state: Optional[str] = None,
        expected_abn: Optional[str] = None,
    ) -> VerificationOutcome:
        """
        Evaluate a certificate against a project's requirements.

        Args:
            data: Extracted certificate data
            requirements: Project requirements (may be empty, must not be None)
            project_end_date: Optional project completion date (date, ISO string or epoch ms)
            project_state: Optional project state/territory code
            expected_abn: Optional ABN on the subcontractor record

        Returns:
            VerificationOutcome

        Raises:
            InvalidInputError: If data or requirements are missing
        """
        if data is None:
            raise InvalidInputError.missing_extracted_data()
        if requirements is None:
            raise InvalidInputError.missing_requirements()

        today = self.clock()
        checks: List[Check] = []
        deficiencies: List[Deficiency] = []

        policy_end = try_parse_date(data.period_of_insurance_end)
        if policy_end is None:
            checks.append(Check(
                check_type="data_integrity",
                description="Policy end date",
                status=CheckStatus.FAIL,
                details=f"Unable to parse policy end date '{data.period_of_insurance_end}'",
            ))
        else:
            self._check_policy_validity(data, policy_end, today, checks, deficiencies)
            if project_end_date is not None and project_end_date != "":
                self._check_project_coverage(data, policy_end, project_end_date, checks, deficiencies)

        self._check_abn(data, expected_abn, checks, deficiencies)

        if self.licensed_insurers is not None:
            self._check_licensed_insurer(data, checks, deficiencies)

        for requirement in requirements:
            self._check_requirement(data, requirement, project_state, checks, deficiencies)

        status = self._derive_status(checks, deficiencies)

        if (
            status != VerificationStatus.FAIL
            and self.low_confidence_threshold is not None
            and data.extraction_confidence < self.low_confidence_threshold
        ):
            checks.append(Check(
                check_type="confidence_check",
                description="AI extraction confidence",
                status=CheckStatus.WARNING,
                details=(
                    f"Low confidence score ({data.extraction_confidence * 100:.0f}%) "
                    f"- manual review recommended"
                ),
            ))
            status = VerificationStatus.REVIEW

        logger.info(
            f"Evaluated certificate {data.policy_number or '<no policy number>'}: "
            f"status={status.value}, checks={len(checks)}, deficiencies={len(deficiencies)}"
        )

        return VerificationOutcome(
            status=status,
            checks=tuple(checks),
            deficiencies=tuple(deficiencies),
            confidence_score=data.extraction_confidence,
        )

    def _check_policy_validity(
        self,
        data: ExtractedPolicyData,
        policy_end: date,
        today: date,
        checks: List[Check],
        deficiencies: List[Deficiency],
    ) -> None:
        days_until_expiry = (policy_end - today).days

        if policy_end < today:
            checks.append(Check(
                check_type="policy_validity",
                description="Policy validity period",
                status=CheckStatus.FAIL,
                details="Policy has expired",
            ))
            deficiencies.append(ExpiredPolicy(expired_on=data.period_of_insurance_end))
        elif days_until_expiry <= self.expiry_warning_days:
            if days_until_expiry == 0:
                details = "Policy expires today"
            elif days_until_expiry == 1:
                details = "Policy expires in 1 day"
            else:
                details = f"Policy expires in {days_until_expiry} days"
            checks.append(Check(
                check_type="policy_validity",
                description="Policy validity period",
                status=CheckStatus.WARNING,
                details=details,
            ))
        else:
            checks.append(Check(
                check_type="policy_validity",
                description="Policy validity period",
                status=CheckStatus.PASS,
                details=f"Policy valid until {data.period_of_insurance_end}",
            ))
        logger.debug(f"policy_validity: {days_until_expiry} days until expiry")

    def _check_project_coverage(
        self,
        data: ExtractedPolicyData,
        policy_end: date,
        project_end_date: Any,
        checks: List[Check],
        deficiencies: List[Deficiency],
    ) -> None:
        project_end = try_parse_date(project_end_date)
        if project_end is None:
            checks.append(Check(
                check_type="data_integrity",
                description="Project end date",
                status=CheckStatus.FAIL,
                details=f"Unable to parse project end date '{project_end_date}'",
            ))
            return

        project_end_text = project_end.isoformat()
        if policy_end < project_end:
            checks.append(Check(
                check_type="project_coverage",
                description="Project period coverage",
                status=CheckStatus.FAIL,
                details=f"Policy expires before project end date ({project_end_text})",
            ))
            deficiencies.append(PolicyExpiresBeforeProject(
                project_end=project_end_text,
                policy_end=data.period_of_insurance_end,
            ))
        else:
            checks.append(Check(
                check_type="project_coverage",
                description="Project period coverage",
                status=CheckStatus.PASS,
                details=f"Policy covers project period (ends {project_end_text})",
            ))

    def _check_abn(
        self,
        data: ExtractedPolicyData,
        expected_abn: Optional[str],
        checks: List[Check],
        deficiencies: List[Deficiency],
    ) -> None:
        # Without a subcontractor ABN to compare against, this check always passes.
        # Checksum validation belongs to the fraud analyzer.
        if not expected_abn:
            checks.append(Check(
                check_type="abn_verification",
                description="ABN verification",
                status=CheckStatus.PASS,
                details=f"ABN {data.insured_party_abn} verified",
            ))
            return

        actual = normalize_abn(data.insured_party_abn)
        expected = normalize_abn(expected_abn)
        if actual != expected:
            checks.append(Check(
                check_type="abn_verification",
                description="ABN verification",
                status=CheckStatus.FAIL,
                details=f"ABN {actual} does not match subcontractor ABN {expected}",
            ))
            deficiencies.append(AbnMismatch(expected_abn=expected, actual_abn=actual))
        else:
            checks.append(Check(
                check_type="abn_verification",
                description="ABN verification",
                status=CheckStatus.PASS,
                details=f"ABN {actual} matches subcontractor record",
            ))

    def _check_licensed_insurer(
        self,
        data: ExtractedPolicyData,
        checks: List[Check],
        deficiencies: List[Deficiency],
    ) -> None:
        insurer = data.insurer_name.strip()
        if insurer.lower() in self.licensed_insurers:
            checks.append(Check(
                check_type="apra_insurer_validation",
                description="APRA insurer validation",
                status=CheckStatus.PASS,
                details=f'Insurer "{insurer}" is APRA-licensed',
            ))
        else:
            checks.append(Check(
                check_type="apra_insurer_validation",
                description="APRA insurer validation",
                status=CheckStatus.FAIL,
                details=f'Insurer "{insurer}" is not on the APRA-licensed insurers register',
            ))
            deficiencies.append(UnlicensedInsurer(insurer_name=insurer))

    def _check_requirement(
        self,
        data: ExtractedPolicyData,
        requirement: InsuranceRequirement,
        project_state: Optional[str],
        checks: List[Check],
        deficiencies: List[Deficiency],
    ) -> None:
        coverage_type = requirement.coverage_type.value
        name = format_coverage_type(coverage_type)
        coverage = data.find_coverage(coverage_type)

        if coverage is None:
            checks.append(Check(
                check_type=f"coverage_{coverage_type}",
                description=f"{name} coverage",
                status=CheckStatus.FAIL,
                details="Coverage not found in certificate",
            ))
            deficiencies.append(MissingCoverage(
                coverage_type=coverage_type,
                minimum_limit=requirement.minimum_limit,
            ))
            logger.debug(f"{coverage_type}: missing")
            return

        self._check_limit(coverage, requirement, name, checks, deficiencies)
        self._check_excess(coverage, requirement, name, checks, deficiencies)

        if requirement.principal_indemnity_required and coverage.principal_indemnity is False:
            checks.append(Check(
                check_type=f"principal_indemnity_{coverage_type}",
                description=f"{name} principal indemnity",
                status=CheckStatus.FAIL,
                details="Principal indemnity extension required but not present",
            ))
            deficiencies.append(MissingEndorsement(
                coverage_type=coverage_type, endorsement="principal_indemnity",
            ))

        if requirement.cross_liability_required and coverage.cross_liability is False:
            checks.append(Check(
                check_type=f"cross_liability_{coverage_type}",
                description=f"{name} cross liability",
                status=CheckStatus.FAIL,
                details="Cross liability extension required but not present",
            ))
            deficiencies.append(MissingEndorsement(
                coverage_type=coverage_type, endorsement="cross_liability",
            ))

        if requirement.coverage_type == CoverageType.WORKERS_COMP and project_state and coverage.state:
            self._check_workers_comp_state(coverage.state, project_state, checks, deficiencies)

    def _check_limit(
        self,
        coverage: Coverage,
        requirement: InsuranceRequirement,
        name: str,
        checks: List[Check],
        deficiencies: List[Deficiency],
    ) -> None:
        coverage_type = requirement.coverage_type.value

        limit = coerce_number(coverage.limit)
        if limit is None:
            checks.append(Check(
                check_type="data_integrity",
                description=f"{name} limit",
                status=CheckStatus.FAIL,
                details=f"{name} limit is not a number",
            ))
            return

        if requirement.minimum_limit and limit < requirement.minimum_limit:
            checks.append(Check(
                check_type=f"coverage_{coverage_type}",
                description=f"{name} limit",
                status=CheckStatus.FAIL,
                details=(
                    f"Limit {format_money(limit)} is below required "
                    f"{format_money(requirement.minimum_limit)}"
                ),
            ))
            deficiencies.append(InsufficientLimit(
                coverage_type=coverage_type,
                minimum_limit=requirement.minimum_limit,
                actual_limit=limit,
            ))
        else:
            checks.append(Check(
                check_type=f"coverage_{coverage_type}",
                description=f"{name} limit",
                status=CheckStatus.PASS,
                details=f"Limit {format_money(limit)} meets minimum requirement",
            ))

    def _check_excess(
        self,
        coverage: Coverage,
        requirement: InsuranceRequirement,
        name: str,
        checks: List[Check],
        deficiencies: List[Deficiency],
    ) -> None:
        if not requirement.maximum_excess:
            return

        coverage_type = requirement.coverage_type.value
        excess = coerce_number(coverage.excess)
        if excess is None:
            checks.append(Check(
                check_type="data_integrity",
                description=f"{name} excess",
                status=CheckStatus.FAIL,
                details=f"{name} excess is not a number",
            ))
            return

        if excess > requirement.maximum_excess:
            checks.append(Check(
                check_type=f"excess_{coverage_type}",
                description=f"{name} excess",
                status=CheckStatus.FAIL,
                details=(
                    f"Excess {format_money(excess)} exceeds maximum "
                    f"{format_money(requirement.maximum_excess)}"
                ),
            ))
            deficiencies.append(ExcessTooHigh(
                coverage_type=coverage_type,
                maximum_excess=requirement.maximum_excess,
                actual_excess=excess,
            ))

    def _check_workers_comp_state(
        self,
        coverage_state: str,
        project_state: str,
        checks: List[Check],
        deficiencies: List[Deficiency],
    ) -> None:
        if coverage_state.strip().upper() != project_state.strip().upper():
            checks.append(Check(
                check_type="workers_comp_state",
                description="Workers' Compensation state coverage",
                status=CheckStatus.FAIL,
                details=f"WC scheme is for {coverage_state} but project is in {project_state}",
            ))
            deficiencies.append(StateMismatch(
                project_state=project_state,
                coverage_state=coverage_state,
            ))
        else:
            checks.append(Check(
                check_type="workers_comp_state",
                description="Workers' Compensation state coverage",
                status=CheckStatus.PASS,
                details=f"WC scheme ({coverage_state}) matches project state",
            ))

    @staticmethod
    def _derive_status(checks: Sequence[Check], deficiencies: Sequence[Deficiency]) -> VerificationStatus:
        if any(c.status == CheckStatus.FAIL for c in checks):
            return VerificationStatus.FAIL
        if any(d.severity == Severity.CRITICAL for d in deficiencies):
            return VerificationStatus.FAIL
        if any(c.status == CheckStatus.WARNING for c in checks):
            return VerificationStatus.REVIEW
        return VerificationStatus.PASS
