"""Requirement compliance plugin for Semantic Kernel."""

import logging
from typing import Any, Dict, List, Optional

from semantic_kernel.functions import kernel_function

from ..engines.requirement_evaluator import RequirementEvaluator
from ..models.policy import ExtractedPolicyData
from ..models.requirement import InsuranceRequirement
from ..verifier import CertificateVerifier, parse_project_state, run_verification

logger = logging.getLogger(__name__)


class ComplianceCheckerPlugin:
    """
    Semantic Kernel plugin for checking a certificate against project requirements.

    Provides functions for:
    - Requirement evaluation (policy validity, project coverage, limits, excess,
      endorsements, workers' compensation state)
    - Full verification including fraud scoring
    """

    def __init__(
        self,
        evaluator: Optional[RequirementEvaluator] = None,
        verifier: Optional[CertificateVerifier] = None,
    ):
        """
        Initialize compliance checker plugin.

        Args:
            evaluator: Evaluator used by evaluate_requirements (default settings if omitted)
            verifier: Verifier used by verify_certificate (shared verifier if omitted)
        """
        self.evaluator = evaluator or RequirementEvaluator()
        self.verifier = verifier
        logger.info("Initialized ComplianceCheckerPlugin")

    @kernel_function(
        name="evaluate_requirements",
        description=(
            "Check extracted Certificate of Currency data against a project's "
            "insurance requirements. Returns status (pass/fail/review), the list "
            "of checks and any deficiencies with severity."
        )
    )
    def evaluate_requirements(
        self,
        extracted_data: Dict[str, Any],
        requirements: List[Dict[str, Any]],
        project_end_date: str = None,
        project_state: str = None,
        expected_abn: str = None
    ) -> Dict[str, Any]:
        """
        Evaluate requirements only.

        Args:
            extracted_data: Certificate data in the snake_case extraction contract
            requirements: Requirement records
            project_end_date: Optional project completion date (ISO)
            project_state: Optional project state code
            expected_abn: Optional subcontractor ABN

        Returns:
            VerificationOutcome as a dictionary

        Raises:
            InvalidInputError: If extracted data or requirements are missing
        """
        data = ExtractedPolicyData.from_dict(extracted_data)
        outcome = self.evaluator.evaluate(
            data,
            InsuranceRequirement.list_from_dicts(requirements),
            project_end_date=project_end_date,
            project_state=parse_project_state(project_state),
            expected_abn=expected_abn,
        )
        return outcome.to_dict()

    @kernel_function(
        name="verify_certificate",
        description=(
            "Run full certificate verification: requirement evaluation plus fraud "
            "risk analysis, with fraud overrides applied to the final status."
        )
    )
    def verify_certificate(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Verify a certificate end to end.

        Args:
            payload: Verification payload (see coc_verifier.verifier.run_verification)

        Returns:
            Combined verification dictionary including fraud_analysis
        """
        return run_verification(payload, verifier=self.verifier)
