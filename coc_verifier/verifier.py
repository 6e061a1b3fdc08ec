"""
Main verification entry point.

This module provides the single caller-facing contract: evaluate one
certificate against a project's requirements, score it for fraud and merge
both verdicts. The HTTP server, the Semantic Kernel plugins and scripts all
go through here.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from dotenv import load_dotenv

from .engines.decision_combiner import CertificateVerification, combine
from .engines.fraud_analyzer import FraudRiskAnalyzer
from .engines.insurer_catalog import (
    DEFAULT_INSURER_CATALOG,
    DEFAULT_LICENSED_INSURERS,
    InsurerTemplateCatalog,
)
from .engines.requirement_evaluator import RequirementEvaluator
from .models.fraud import DocumentMetadata, PriorSubmission
from .models.policy import AUSTRALIAN_STATES, ExtractedPolicyData
from .models.requirement import InsuranceRequirement
from .utils.config import Config
from .utils.errors import InvalidInputError
from .utils.logging import verification_context

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Global instances (initialized on first use)
_config: Optional[Config] = None
_verifier: Optional["CertificateVerifier"] = None


class CertificateVerifier:
    """
    Runs the requirement evaluator and the fraud analyzer on one certificate
    and combines their verdicts.
    """

    def __init__(
        self,
        evaluator: Optional[RequirementEvaluator] = None,
        analyzer: Optional[FraudRiskAnalyzer] = None,
        run_fraud_analysis: bool = True,
    ):
        self.evaluator = evaluator or RequirementEvaluator()
        self.analyzer = analyzer or FraudRiskAnalyzer()
        self.run_fraud_analysis = run_fraud_analysis

    @classmethod
    def from_config(cls, config: Config) -> "CertificateVerifier":
        """Build engines from configuration, loading the insurer catalog if one is configured."""
        templates: InsurerTemplateCatalog = DEFAULT_INSURER_CATALOG
        if config.catalog.insurer_templates:
            templates = InsurerTemplateCatalog.from_yaml(config.catalog.insurer_templates)

        evaluator = RequirementEvaluator(
            expiry_warning_days=config.verification.expiry_warning_days,
            low_confidence_threshold=config.verification.low_confidence_threshold,
            licensed_insurers=(
                DEFAULT_LICENSED_INSURERS if config.verification.check_licensed_insurer else None
            ),
        )
        analyzer = FraudRiskAnalyzer(templates=templates)
        return cls(evaluator, analyzer, run_fraud_analysis=config.fraud.enabled)

    def verify(
        self,
        data: ExtractedPolicyData,
        requirements: Sequence[InsuranceRequirement],
        project_end_date: Any = None,
        project_state: Optional[str] = None,
        expected_abn: Optional[str] = None,
        metadata: Optional[DocumentMetadata] = None,
        file_name: Optional[str] = None,
        prior_submissions: Optional[Sequence[PriorSubmission]] = None,
        document_hash: Optional[str] = None,
        extracted_elements: Optional[Iterable[str]] = None,
        run_fraud_analysis: Optional[bool] = None,
    ) -> CertificateVerification:
        """
        Verify one certificate synchronously.

        Raises:
            InvalidInputError: If data or requirements are missing
        """
        outcome = self.evaluator.evaluate(
            data, requirements,
            project_end_date=project_end_date,
            project_state=project_state,
            expected_abn=expected_abn,
        )

        fraud = None
        if self._fraud_enabled(run_fraud_analysis):
            fraud = self.analyzer.analyze(
                data,
                metadata=metadata,
                file_name=file_name,
                prior_submissions=prior_submissions,
                document_hash=document_hash,
                extracted_elements=extracted_elements,
            )
        return combine(outcome, fraud)

    async def averify(
        self,
        data: ExtractedPolicyData,
        requirements: Sequence[InsuranceRequirement],
        project_end_date: Any = None,
        project_state: Optional[str] = None,
        expected_abn: Optional[str] = None,
        metadata: Optional[DocumentMetadata] = None,
        file_name: Optional[str] = None,
        prior_submissions: Optional[Sequence[PriorSubmission]] = None,
        document_hash: Optional[str] = None,
        extracted_elements: Optional[Iterable[str]] = None,
        run_fraud_analysis: Optional[bool] = None,
    ) -> CertificateVerification:
        """Verify one certificate, running both engines concurrently in worker threads."""
        if data is None:
            raise InvalidInputError.missing_extracted_data()
        if requirements is None:
            raise InvalidInputError.missing_requirements()

        evaluation = asyncio.to_thread(
            self.evaluator.evaluate,
            data, requirements,
            project_end_date=project_end_date,
            project_state=project_state,
            expected_abn=expected_abn,
        )

        if not self._fraud_enabled(run_fraud_analysis):
            return combine(await evaluation, None)

        analysis = asyncio.to_thread(
            self.analyzer.analyze,
            data,
            metadata=metadata,
            file_name=file_name,
            prior_submissions=prior_submissions,
            document_hash=document_hash,
            extracted_elements=extracted_elements,
        )
        outcome, fraud = await asyncio.gather(evaluation, analysis)
        return combine(outcome, fraud)

    def _fraud_enabled(self, run_fraud_analysis: Optional[bool]) -> bool:
        return self.run_fraud_analysis if run_fraud_analysis is None else run_fraud_analysis


def _initialize_system() -> None:
    """
    Load configuration and build the shared verifier.

    Called lazily on first use to avoid reading configuration at import time.
    """
    global _config, _verifier

    if _verifier is not None:
        return

    logger.info("Initializing certificate verifier")
    _config = Config.load()
    _verifier = CertificateVerifier.from_config(_config)
    logger.info(
        f"Certificate verifier initialized: "
        f"fraud_analysis={'on' if _config.fraud.enabled else 'off'}, "
        f"expiry_warning_days={_config.verification.expiry_warning_days}"
    )


def get_verifier() -> CertificateVerifier:
    """Return the shared verifier, initializing it on first use."""
    _initialize_system()
    return _verifier


def verify_certificate(
    data: ExtractedPolicyData,
    requirements: Sequence[InsuranceRequirement],
    **kwargs: Any,
) -> CertificateVerification:
    """Verify one certificate with the shared verifier. See CertificateVerifier.verify."""
    return get_verifier().verify(data, requirements, **kwargs)


async def averify_certificate(
    data: ExtractedPolicyData,
    requirements: Sequence[InsuranceRequirement],
    **kwargs: Any,
) -> CertificateVerification:
    """Async counterpart of verify_certificate."""
    return await get_verifier().averify(data, requirements, **kwargs)


def _pick(payload: Mapping[str, Any], snake: str, camel: str) -> Any:
    return payload.get(snake, payload.get(camel))


def parse_project_state(value: Any) -> Optional[str]:
    """Normalise a state/territory code; None when absent."""
    if value in (None, ""):
        return None
    state = str(value).strip().upper()
    if state not in AUSTRALIAN_STATES:
        raise InvalidInputError.invalid_payload(
            "project_state", f"must be one of {', '.join(AUSTRALIAN_STATES)}"
        )
    return state


def parse_extracted_data(payload: Mapping[str, Any]) -> ExtractedPolicyData:
    """
    Read extracted data from a request payload.

    Accepts either ``extracted_data`` (snake_case model) or ``extraction_result``
    (camelCase extraction output, converted with subcontractor fallbacks).
    """
    extraction_result = _pick(payload, "extraction_result", "extractionResult")
    if extraction_result is not None:
        subcontractor = payload.get("subcontractor") or {}
        return ExtractedPolicyData.from_extraction_result(
            extraction_result,
            subcontractor_name=str(subcontractor.get("name") or ""),
            subcontractor_abn=str(subcontractor.get("abn") or ""),
        )
    return ExtractedPolicyData.from_dict(_pick(payload, "extracted_data", "extractedData"))


def run_verification(
    payload: Mapping[str, Any],
    verifier: Optional[CertificateVerifier] = None,
) -> Dict[str, Any]:
    """
    Verify a certificate described by a JSON-shaped payload.

    Args:
        payload: Dictionary with keys:
            - extracted_data or extraction_result: certificate data
            - requirements: list of requirement records
            - project_end_date, project_state, expected_abn: optional project context
            - metadata, file_name, prior_submissions, document_hash: optional fraud inputs
            - run_fraud_analysis: optional override
        verifier: Verifier to use; defaults to the shared one

    Returns:
        Combined verification as a dictionary

    Raises:
        InvalidInputError: If the payload violates the input contract
    """
    if not isinstance(payload, Mapping):
        raise InvalidInputError.invalid_payload("payload", "must be an object")

    verifier = verifier or get_verifier()
    data = parse_extracted_data(payload)
    requirements = InsuranceRequirement.list_from_dicts(payload.get("requirements"))

    file_name = _pick(payload, "file_name", "fileName")
    with verification_context(policy_number=data.policy_number, file_name=file_name):
        result = verifier.verify(
            data,
            requirements,
            project_end_date=_pick(payload, "project_end_date", "projectEndDate"),
            project_state=parse_project_state(_pick(payload, "project_state", "projectState")),
            expected_abn=_pick(payload, "expected_abn", "expectedAbn"),
            metadata=DocumentMetadata.from_dict(payload.get("metadata")),
            file_name=file_name,
            prior_submissions=PriorSubmission.list_from_dicts(
                _pick(payload, "prior_submissions", "priorSubmissions")
            ),
            document_hash=_pick(payload, "document_hash", "documentHash"),
            extracted_elements=_pick(payload, "extracted_elements", "extractedElements"),
            run_fraud_analysis=_pick(payload, "run_fraud_analysis", "runFraudAnalysis"),
        )

    return result.to_dict()
