"""Fraud detection plugin for Semantic Kernel."""

import logging
from typing import Any, Dict, List, Optional

from semantic_kernel.functions import kernel_function

from ..engines.fraud_analyzer import FraudRiskAnalyzer
from ..models.fraud import DocumentMetadata, PriorSubmission
from ..models.policy import ExtractedPolicyData

logger = logging.getLogger(__name__)


class FraudDetectorPlugin:
    """
    Semantic Kernel plugin for scoring certificates for tampering and fraud.

    Runs metadata, insurer-template, data-logic and duplicate checks and
    aggregates them into a risk score, level and block decision.
    """

    def __init__(self, analyzer: Optional[FraudRiskAnalyzer] = None):
        self.analyzer = analyzer or FraudRiskAnalyzer()
        logger.info("Initialized FraudDetectorPlugin")

    @kernel_function(
        name="analyze_fraud",
        description=(
            "Score a Certificate of Currency for signs of fraud using document "
            "metadata, known insurer templates, ABN checksum, policy date logic "
            "and prior submissions. Returns risk score, level, block decision "
            "and a recommendation."
        )
    )
    def analyze_fraud(
        self,
        extracted_data: Dict[str, Any],
        metadata: Dict[str, Any] = None,
        file_name: str = None,
        prior_submissions: List[Dict[str, Any]] = None,
        document_hash: str = None
    ) -> Dict[str, Any]:
        """
        Analyze a certificate for fraud.

        Args:
            extracted_data: Certificate data in the snake_case extraction contract
            metadata: Optional {creationDate, modificationDate, producer, creator}
            file_name: Optional uploaded file name
            prior_submissions: Optional earlier uploads for the same subcontractor
            document_hash: Optional content hash of the upload

        Returns:
            FraudAnalysisResult as a dictionary
        """
        result = self.analyzer.analyze(
            ExtractedPolicyData.from_dict(extracted_data),
            metadata=DocumentMetadata.from_dict(metadata),
            file_name=file_name,
            prior_submissions=PriorSubmission.list_from_dicts(prior_submissions),
            document_hash=document_hash,
        )
        return result.to_dict()
