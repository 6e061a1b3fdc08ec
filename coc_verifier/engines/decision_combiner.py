"""Merge requirement and fraud verdicts into the outcome handed to collaborators."""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from ..models.fraud import FraudAnalysisResult, RiskLevel
from ..models.verification import (
    Check,
    CheckStatus,
    FraudDetected,
    VerificationOutcome,
    VerificationStatus,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CertificateVerification:
    """
    Final verdict for one certificate.

    Attributes:
        outcome: Requirement outcome after fraud overrides were applied
        fraud_analysis: Fraud verdict, or None when fraud analysis was skipped
    """
    outcome: VerificationOutcome
    fraud_analysis: Optional[FraudAnalysisResult] = None

    @property
    def status(self) -> VerificationStatus:
        return self.outcome.status

    def to_dict(self) -> Dict[str, Any]:
        data = self.outcome.to_dict()
        data["fraud_analysis"] = self.fraud_analysis.to_dict() if self.fraud_analysis else None
        return data


def combine(
    outcome: VerificationOutcome,
    fraud: Optional[FraudAnalysisResult],
) -> CertificateVerification:
    """
    Apply the fraud verdict to a requirement outcome.

    - Blocked documents fail, gain a critical fraud_detected deficiency and
      carry each failing fraud check as a failing check.
    - A high-risk document that would otherwise pass goes to review.

    Neither input is modified; a new outcome is returned.
    """
    if fraud is None:
        return CertificateVerification(outcome=outcome)

    if fraud.is_blocked:
        blocked_checks = [Check(
            check_type="fraud_detected",
            description="Fraud Risk Assessment",
            status=CheckStatus.FAIL,
            details=f"{fraud.recommendation} (Risk score: {fraud.overall_risk_score:g})",
        )]
        blocked_checks.extend(
            Check(
                check_type=c.check_type,
                description=c.check_name,
                status=CheckStatus.FAIL,
                details=c.details,
            )
            for c in fraud.failed_checks
        )
        deficiency = FraudDetected(
            recommendation=fraud.recommendation,
            risk_level=fraud.risk_level.value,
            risk_score=fraud.overall_risk_score,
        )
        combined = replace(
            outcome,
            status=VerificationStatus.FAIL,
            checks=outcome.checks + tuple(blocked_checks),
            deficiencies=outcome.deficiencies + (deficiency,),
        )
        logger.warning(
            f"Document blocked by fraud analysis (score={fraud.overall_risk_score}, "
            f"level={fraud.risk_level.value})"
        )
        return CertificateVerification(outcome=combined, fraud_analysis=fraud)

    if fraud.risk_level == RiskLevel.HIGH and outcome.status == VerificationStatus.PASS:
        warning = Check(
            check_type="fraud_risk_warning",
            description="Fraud Risk Assessment",
            status=CheckStatus.WARNING,
            details=f"{fraud.recommendation} (Risk score: {fraud.overall_risk_score:g})",
        )
        combined = replace(
            outcome,
            status=VerificationStatus.REVIEW,
            checks=outcome.checks + (warning,),
        )
        return CertificateVerification(outcome=combined, fraud_analysis=fraud)

    return CertificateVerification(outcome=outcome, fraud_analysis=fraud)
