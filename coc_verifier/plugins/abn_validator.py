"""ABN checksum plugin for Semantic Kernel."""

import logging
from typing import Any, Dict

from semantic_kernel.functions import kernel_function

from ..engines.abn_validator import format_abn, validate_abn

logger = logging.getLogger(__name__)


class ABNValidatorPlugin:
    """Semantic Kernel plugin exposing Australian Business Number validation."""

    def __init__(self):
        logger.info("Initialized ABNValidatorPlugin")

    @kernel_function(
        name="validate_abn",
        description=(
            "Validate an 11-digit Australian Business Number with the ATO "
            "weighted checksum. Spaces are ignored."
        )
    )
    def validate(self, abn: str) -> Dict[str, Any]:
        """
        Validate an ABN.

        Returns:
            Dictionary with valid, abn (formatted) and error when invalid
        """
        result = validate_abn(abn)
        response = result.to_dict()
        response['abn'] = format_abn(abn)
        logger.debug(f"ABN {response['abn']} valid={result.valid}")
        return response
