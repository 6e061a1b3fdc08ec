"""Project insurance requirement models."""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..utils.errors import InvalidInputError
from .policy import CoverageType, coerce_number


def _threshold(data: Mapping[str, Any], key: str, camel_key: str) -> Optional[float]:
    """Read an optional numeric threshold; a value that is present but not a number is rejected."""
    raw = data.get(key, data.get(camel_key))
    if raw is None or raw == "":
        return None
    value = coerce_number(raw)
    if value is None:
        raise InvalidInputError.invalid_payload(key, "must be a number")
    return value


@dataclass(frozen=True)
class InsuranceRequirement:
    """
    One coverage rule a project imposes on its subcontractors.

    Attributes:
        coverage_type: Coverage class that must be present
        minimum_limit: Minimum limit of liability (None or 0 means no minimum)
        maximum_excess: Maximum acceptable excess (None or 0 means no maximum)
        principal_indemnity_required: Principal indemnity extension required
        cross_liability_required: Cross liability clause required
        limit_type: Informational limit basis recorded against the rule
    """
    coverage_type: CoverageType
    minimum_limit: Optional[float] = None
    maximum_excess: Optional[float] = None
    principal_indemnity_required: bool = False
    cross_liability_required: bool = False
    limit_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InsuranceRequirement":
        """
        Build from either the snake_case or camelCase requirement record.

        Raises:
            InvalidInputError: If the record is not an object or names an unknown coverage type
        """
        if not isinstance(data, Mapping):
            raise InvalidInputError.invalid_payload("requirements", "each requirement must be an object")

        raw_type = data.get("coverage_type", data.get("coverageType"))
        try:
            coverage_type = CoverageType(raw_type)
        except ValueError as e:
            raise InvalidInputError.invalid_payload(
                "coverage_type", f"unknown coverage type {raw_type!r}", e
            ) from e

        return cls(
            coverage_type=coverage_type,
            minimum_limit=_threshold(data, "minimum_limit", "minimumLimit"),
            maximum_excess=_threshold(data, "maximum_excess", "maximumExcess"),
            principal_indemnity_required=bool(
                data.get("principal_indemnity_required", data.get("principalIndemnityRequired", False))
            ),
            cross_liability_required=bool(
                data.get("cross_liability_required", data.get("crossLiabilityRequired", False))
            ),
            limit_type=data.get("limit_type", data.get("limitType")),
        )

    @classmethod
    def list_from_dicts(cls, records: Optional[Sequence[Mapping[str, Any]]]) -> List["InsuranceRequirement"]:
        """Parse a requirement list. A missing list is a contract violation; an empty one is not."""
        if records is None:
            raise InvalidInputError.missing_requirements()
        if not isinstance(records, (list, tuple)):
            raise InvalidInputError.invalid_payload("requirements", "must be a list")
        return [cls.from_dict(record) for record in records]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coverage_type": self.coverage_type.value,
            "minimum_limit": self.minimum_limit,
            "maximum_excess": self.maximum_excess,
            "principal_indemnity_required": self.principal_indemnity_required,
            "cross_liability_required": self.cross_liability_required,
            "limit_type": self.limit_type,
        }
