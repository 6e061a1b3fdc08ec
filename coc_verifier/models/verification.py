"""Requirement evaluation result models."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple

from .policy import format_coverage_type


class CheckStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARNING = "warning"


class Severity(str, Enum):
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


class VerificationStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    REVIEW = "review"


def format_money(amount: Optional[float]) -> str:
    """Format an amount the way certificates print it, e.g. $20,000,000."""
    if amount is None:
        return "unknown"
    if float(amount).is_integer():
        return f"${int(amount):,}"
    return f"${amount:,.2f}"


@dataclass(frozen=True)
class Check:
    """
    One verdict from a single rule instance.

    Attributes:
        check_type: Rule key, e.g. "policy_validity" or "coverage_public_liability"
        description: Short human-readable label
        status: pass, fail or warning
        details: Explanation shown to reviewers
    """
    check_type: str
    description: str
    status: CheckStatus
    details: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "check_type": self.check_type,
            "description": self.description,
            "status": self.status.value,
            "details": self.details,
        }


@dataclass(frozen=True)
class Deficiency(ABC):
    """
    A compliance gap found during evaluation.

    Subclasses are the closed set of deficiency kinds. Each one fixes its
    ``type`` and ``severity`` and renders the description and the
    required/actual values from the fields it carries.
    """
    type: ClassVar[str]
    severity: ClassVar[Severity]

    @property
    @abstractmethod
    def check_type(self) -> str:
        """check_type of the failing Check this deficiency accompanies."""

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @property
    def required_value(self) -> Optional[str]:
        return None

    @property
    def actual_value(self) -> Optional[str]:
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity.value,
            "description": self.description,
            "required_value": self.required_value,
            "actual_value": self.actual_value,
        }


@dataclass(frozen=True)
class ExpiredPolicy(Deficiency):
    expired_on: str

    type: ClassVar[str] = "expired_policy"
    severity: ClassVar[Severity] = Severity.CRITICAL

    @property
    def check_type(self) -> str:
        return "policy_validity"

    @property
    def description(self) -> str:
        return "Certificate of Currency has expired"

    @property
    def required_value(self) -> str:
        return "Valid policy"

    @property
    def actual_value(self) -> str:
        return f"Expired on {self.expired_on}"


@dataclass(frozen=True)
class PolicyExpiresBeforeProject(Deficiency):
    project_end: str
    policy_end: str

    type: ClassVar[str] = "policy_expires_before_project"
    severity: ClassVar[Severity] = Severity.CRITICAL

    @property
    def check_type(self) -> str:
        return "project_coverage"

    @property
    def description(self) -> str:
        return "Policy expires before project completion date"

    @property
    def required_value(self) -> str:
        return f"Valid until {self.project_end}"

    @property
    def actual_value(self) -> str:
        return f"Expires {self.policy_end}"


@dataclass(frozen=True)
class MissingCoverage(Deficiency):
    coverage_type: str
    minimum_limit: Optional[float] = None

    type: ClassVar[str] = "missing_coverage"
    severity: ClassVar[Severity] = Severity.CRITICAL

    @property
    def check_type(self) -> str:
        return f"coverage_{self.coverage_type}"

    @property
    def description(self) -> str:
        return f"{format_coverage_type(self.coverage_type)} coverage is required but not present"

    @property
    def required_value(self) -> str:
        return format_money(self.minimum_limit) if self.minimum_limit else "Required"

    @property
    def actual_value(self) -> str:
        return "Not found"


@dataclass(frozen=True)
class InsufficientLimit(Deficiency):
    coverage_type: str
    minimum_limit: float
    actual_limit: float

    type: ClassVar[str] = "insufficient_limit"
    severity: ClassVar[Severity] = Severity.MAJOR

    @property
    def check_type(self) -> str:
        return f"coverage_{self.coverage_type}"

    @property
    def description(self) -> str:
        return f"{format_coverage_type(self.coverage_type)} limit is below minimum requirement"

    @property
    def required_value(self) -> str:
        return format_money(self.minimum_limit)

    @property
    def actual_value(self) -> str:
        return format_money(self.actual_limit)


@dataclass(frozen=True)
class ExcessTooHigh(Deficiency):
    coverage_type: str
    maximum_excess: float
    actual_excess: float

    type: ClassVar[str] = "excess_too_high"
    severity: ClassVar[Severity] = Severity.MINOR

    @property
    def check_type(self) -> str:
        return f"excess_{self.coverage_type}"

    @property
    def description(self) -> str:
        return f"{format_coverage_type(self.coverage_type)} excess exceeds maximum allowed"

    @property
    def required_value(self) -> str:
        return f"Max {format_money(self.maximum_excess)}"

    @property
    def actual_value(self) -> str:
        return format_money(self.actual_excess)


@dataclass(frozen=True)
class MissingEndorsement(Deficiency):
    coverage_type: str
    endorsement: str  # "principal_indemnity" | "cross_liability"

    type: ClassVar[str] = "missing_endorsement"
    severity: ClassVar[Severity] = Severity.MAJOR

    @property
    def check_type(self) -> str:
        return f"{self.endorsement}_{self.coverage_type}"

    @property
    def description(self) -> str:
        label = self.endorsement.replace("_", " ").capitalize()
        return f"{label} extension required for {format_coverage_type(self.coverage_type)}"

    @property
    def required_value(self) -> str:
        return "Yes"

    @property
    def actual_value(self) -> str:
        return "No"


@dataclass(frozen=True)
class StateMismatch(Deficiency):
    project_state: str
    coverage_state: str

    type: ClassVar[str] = "state_mismatch"
    severity: ClassVar[Severity] = Severity.CRITICAL

    @property
    def check_type(self) -> str:
        return "workers_comp_state"

    @property
    def description(self) -> str:
        return "Workers' Compensation scheme does not cover project state"

    @property
    def required_value(self) -> str:
        return f"{self.project_state} scheme"

    @property
    def actual_value(self) -> str:
        return f"{self.coverage_state} scheme"


@dataclass(frozen=True)
class AbnMismatch(Deficiency):
    expected_abn: str
    actual_abn: str

    type: ClassVar[str] = "abn_mismatch"
    severity: ClassVar[Severity] = Severity.CRITICAL

    @property
    def check_type(self) -> str:
        return "abn_verification"

    @property
    def description(self) -> str:
        return "Certificate ABN does not match subcontractor ABN"

    @property
    def required_value(self) -> str:
        return self.expected_abn

    @property
    def actual_value(self) -> str:
        return self.actual_abn


@dataclass(frozen=True)
class UnlicensedInsurer(Deficiency):
    insurer_name: str

    type: ClassVar[str] = "unlicensed_insurer"
    severity: ClassVar[Severity] = Severity.CRITICAL

    @property
    def check_type(self) -> str:
        return "apra_insurer_validation"

    @property
    def description(self) -> str:
        return "Insurer is not APRA-licensed in Australia"

    @property
    def required_value(self) -> str:
        return "APRA-licensed insurer"

    @property
    def actual_value(self) -> str:
        return self.insurer_name or "Unknown"


@dataclass(frozen=True)
class FraudDetected(Deficiency):
    recommendation: str
    risk_level: str
    risk_score: float

    type: ClassVar[str] = "fraud_detected"
    severity: ClassVar[Severity] = Severity.CRITICAL

    @property
    def check_type(self) -> str:
        return "fraud_detected"

    @property
    def description(self) -> str:
        return f"Document flagged for potential fraud: {self.recommendation}"

    @property
    def required_value(self) -> str:
        return "Authentic document"

    @property
    def actual_value(self) -> str:
        return f"Risk level: {self.risk_level} (score: {self.risk_score:g})"


@dataclass(frozen=True)
class VerificationOutcome:
    """
    Result of evaluating one certificate against one project's requirements.

    Attributes:
        status: pass, fail or review
        checks: Every check in presentation order
        deficiencies: Every deficiency in presentation order
        confidence_score: Extraction confidence copied from the input
    """
    status: VerificationStatus
    checks: Tuple[Check, ...]
    deficiencies: Tuple[Deficiency, ...]
    confidence_score: float

    @property
    def critical_deficiencies(self) -> Tuple[Deficiency, ...]:
        return tuple(d for d in self.deficiencies if d.severity == Severity.CRITICAL)

    def checks_of_type(self, check_type: str) -> Tuple[Check, ...]:
        return tuple(c for c in self.checks if c.check_type == check_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "checks": [c.to_dict() for c in self.checks],
            "deficiencies": [d.to_dict() for d in self.deficiencies],
            "confidence_score": self.confidence_score,
        }
