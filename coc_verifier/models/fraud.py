"""Fraud analysis data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..utils.errors import InvalidInputError


class FraudCheckStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARNING = "warning"
    INFO = "info"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class DocumentMetadata:
    """
    Metadata read from the uploaded file.

    Attributes:
        creation_date: Creation timestamp as reported by the file
        modification_date: Last modification timestamp as reported by the file
        producer: Producing software (PDF /Producer, EXIF Software)
        creator: Authoring application (PDF /Creator)
        author: Document author
    """
    creation_date: Optional[str] = None
    modification_date: Optional[str] = None
    producer: Optional[str] = None
    creator: Optional[str] = None
    author: Optional[str] = None

    @property
    def software(self) -> str:
        return self.producer or self.creator or ""

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["DocumentMetadata"]:
        """Accepts camelCase (creationDate) or snake_case (creation_date) keys."""
        if data is None:
            return None
        if not isinstance(data, Mapping):
            raise InvalidInputError.invalid_payload("metadata", "must be an object")

        def pick(snake: str, camel: str) -> Optional[str]:
            value = data.get(snake, data.get(camel))
            return str(value) if value not in (None, "") else None

        return cls(
            creation_date=pick("creation_date", "creationDate"),
            modification_date=pick("modification_date", "modificationDate"),
            producer=pick("producer", "producer"),
            creator=pick("creator", "creator"),
            author=pick("author", "author"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "creationDate": self.creation_date,
            "modificationDate": self.modification_date,
            "producer": self.producer,
            "creator": self.creator,
            "author": self.author,
        }


@dataclass(frozen=True)
class PriorSubmission:
    """A previously uploaded certificate for the same subcontractor."""
    hash: str
    file_name: str
    upload_date: str
    policy_number: str
    expiry_date: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PriorSubmission":
        """Parse ``{hash, fileName, uploadDate, extractedData: {policyNumber, expiryDate}}``."""
        if not isinstance(data, Mapping):
            raise InvalidInputError.invalid_payload("prior_submissions", "each submission must be an object")
        extracted = data.get("extractedData", data.get("extracted_data")) or {}
        return cls(
            hash=str(data.get("hash") or ""),
            file_name=str(data.get("fileName", data.get("file_name")) or ""),
            upload_date=str(data.get("uploadDate", data.get("upload_date")) or ""),
            policy_number=str(extracted.get("policyNumber", extracted.get("policy_number")) or ""),
            expiry_date=str(extracted.get("expiryDate", extracted.get("expiry_date")) or ""),
        )

    @classmethod
    def list_from_dicts(cls, records: Optional[List[Mapping[str, Any]]]) -> Optional[List["PriorSubmission"]]:
        if records is None:
            return None
        if not isinstance(records, (list, tuple)):
            raise InvalidInputError.invalid_payload("prior_submissions", "must be a list")
        return [cls.from_dict(record) for record in records]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.hash,
            "fileName": self.file_name,
            "uploadDate": self.upload_date,
            "extractedData": {
                "policyNumber": self.policy_number,
                "expiryDate": self.expiry_date,
            },
        }


@dataclass(frozen=True)
class FraudCheckResult:
    """
    Outcome of one fraud check.

    A failing result always carries a positive risk score and a passing
    result always carries zero.
    """
    check_type: str
    check_name: str
    status: FraudCheckStatus
    risk_score: float
    details: str
    evidence: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not 0 <= self.risk_score <= 100:
            raise ValueError(f"risk_score out of range: {self.risk_score}")
        if self.status == FraudCheckStatus.PASS and self.risk_score != 0:
            raise ValueError("passing fraud checks must have a zero risk score")
        if self.status == FraudCheckStatus.FAIL and self.risk_score <= 0:
            raise ValueError("failing fraud checks must have a positive risk score")

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "check_type": self.check_type,
            "check_name": self.check_name,
            "status": self.status.value,
            "risk_score": self.risk_score,
            "details": self.details,
        }
        if self.evidence:
            data["evidence"] = list(self.evidence)
        return data


@dataclass(frozen=True)
class FraudAnalysisResult:
    """Aggregated fraud verdict for one document."""
    overall_risk_score: float
    risk_level: RiskLevel
    is_blocked: bool
    checks: Tuple[FraudCheckResult, ...]
    recommendation: str
    evidence_summary: Tuple[str, ...]

    def checks_of_type(self, check_type: str) -> Tuple[FraudCheckResult, ...]:
        return tuple(c for c in self.checks if c.check_type == check_type)

    @property
    def failed_checks(self) -> Tuple[FraudCheckResult, ...]:
        return tuple(c for c in self.checks if c.status == FraudCheckStatus.FAIL)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_risk_score": self.overall_risk_score,
            "risk_level": self.risk_level.value,
            "is_blocked": self.is_blocked,
            "checks": [c.to_dict() for c in self.checks],
            "recommendation": self.recommendation,
            "evidence_summary": list(self.evidence_summary),
        }
