"""Australian Business Number checksum validation."""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

ABN_WEIGHTS = (10, 1, 3, 5, 7, 9, 11, 13, 15, 17, 19)
ABN_MODULUS = 89

LENGTH_ERROR = "ABN must be exactly 11 digits"
CHECKSUM_ERROR = "ABN checksum validation failed"

_ELEVEN_DIGITS = re.compile(r"^[0-9]{11}$")


@dataclass(frozen=True)
class ABNValidation:
    valid: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"valid": self.valid}
        if self.error:
            data["error"] = self.error
        return data


def normalize_abn(abn: str) -> str:
    """Strip all whitespace from an ABN."""
    return "".join(str(abn or "").split())


def validate_abn(abn: str) -> ABNValidation:
    """
    Validate an ABN with the ATO weighted-digit checksum.

    Subtract 1 from the first digit, multiply each digit by its weight and
    require the sum to be divisible by 89.

    Args:
        abn: ABN, with or without spaces

    Returns:
        ABNValidation with valid flag and error message when invalid
    """
    clean = normalize_abn(abn)
    if not _ELEVEN_DIGITS.match(clean):
        return ABNValidation(valid=False, error=LENGTH_ERROR)

    digits = [int(ch) for ch in clean]
    digits[0] -= 1
    total = sum(digit * weight for digit, weight in zip(digits, ABN_WEIGHTS))

    if total % ABN_MODULUS != 0:
        return ABNValidation(valid=False, error=CHECKSUM_ERROR)
    return ABNValidation(valid=True)


def format_abn(abn: str) -> str:
    """Format an 11-digit ABN as ``XX XXX XXX XXX``; other input is returned stripped."""
    clean = normalize_abn(abn)
    if not _ELEVEN_DIGITS.match(clean):
        return clean
    return f"{clean[:2]} {clean[2:5]} {clean[5:8]} {clean[8:]}"
