"""Decision engines: ABN validation, requirement evaluation, fraud scoring."""

from .abn_validator import ABNValidation, format_abn, normalize_abn, validate_abn
from .insurer_catalog import (
    DEFAULT_INSURER_CATALOG,
    DEFAULT_LICENSED_INSURERS,
    DEFAULT_SOFTWARE_CATALOG,
    InsurerTemplate,
    InsurerTemplateCatalog,
    SoftwareCatalog,
)
from .requirement_evaluator import RequirementEvaluator
from .fraud_analyzer import FraudRiskAnalyzer, aggregate_checks, compute_document_hash
from .decision_combiner import CertificateVerification, combine

__all__ = [
    'ABNValidation',
    'format_abn',
    'normalize_abn',
    'validate_abn',
    'DEFAULT_INSURER_CATALOG',
    'DEFAULT_LICENSED_INSURERS',
    'DEFAULT_SOFTWARE_CATALOG',
    'InsurerTemplate',
    'InsurerTemplateCatalog',
    'SoftwareCatalog',
    'RequirementEvaluator',
    'FraudRiskAnalyzer',
    'aggregate_checks',
    'compute_document_hash',
    'CertificateVerification',
    'combine',
]
