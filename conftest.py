"""Shared pytest fixtures: a frozen evaluation clock, engines built on it and request payloads."""

from datetime import date, timedelta

import pytest

from coc_verifier.engines import FraudRiskAnalyzer, RequirementEvaluator
from coc_verifier.fixtures import (
    build_metadata,
    build_policy_data,
    build_prior_submissions,
    standard_requirements,
)
from coc_verifier.verifier import CertificateVerifier

TODAY = date(2025, 3, 1)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def evaluator() -> RequirementEvaluator:
    return RequirementEvaluator(clock=lambda: TODAY)


@pytest.fixture
def analyzer() -> FraudRiskAnalyzer:
    return FraudRiskAnalyzer()


@pytest.fixture
def verifier(evaluator, analyzer) -> CertificateVerifier:
    return CertificateVerifier(evaluator, analyzer)


@pytest.fixture
def make_payload():
    """Factory for JSON verification payloads built from the scenario fixtures."""
    def factory(file_name: str = "coc_compliant.pdf") -> dict:
        data = build_policy_data(TODAY, file_name)
        return {
            "extracted_data": data.to_dict(),
            "requirements": [r.to_dict() for r in standard_requirements()],
            "project_end_date": (TODAY + timedelta(days=100)).isoformat(),
            "project_state": "nsw",
            "metadata": build_metadata(TODAY, file_name).to_dict(),
            "file_name": file_name,
            "prior_submissions": [s.to_dict() for s in build_prior_submissions(data, file_name)],
        }
    return factory
