"""Scenario-driven test data and sample certificate rendering."""

from .builder import (
    INVALID_ABN,
    KNOWN_INSURER,
    KNOWN_POLICY_NUMBER,
    SCENARIO_KEYWORDS,
    UNKNOWN_INSURER,
    VALID_ABN,
    build_metadata,
    build_policy_data,
    build_prior_submissions,
    scenarios_for,
    standard_requirements,
)
from .certificates import render_certificate_pdf

__all__ = [
    'INVALID_ABN',
    'KNOWN_INSURER',
    'KNOWN_POLICY_NUMBER',
    'SCENARIO_KEYWORDS',
    'UNKNOWN_INSURER',
    'VALID_ABN',
    'build_metadata',
    'build_policy_data',
    'build_prior_submissions',
    'scenarios_for',
    'standard_requirements',
    'render_certificate_pdf',
]
