"""Data models for certificate verification."""

from .policy import (
    AUSTRALIAN_STATES,
    Coverage,
    CoverageType,
    ExtractedPolicyData,
    format_coverage_type,
)
from .requirement import InsuranceRequirement
from .verification import (
    AbnMismatch,
    Check,
    CheckStatus,
    Deficiency,
    ExcessTooHigh,
    ExpiredPolicy,
    FraudDetected,
    InsufficientLimit,
    MissingCoverage,
    MissingEndorsement,
    PolicyExpiresBeforeProject,
    Severity,
    StateMismatch,
    UnlicensedInsurer,
    VerificationOutcome,
    VerificationStatus,
)
from .fraud import (
    DocumentMetadata,
    FraudAnalysisResult,
    FraudCheckResult,
    FraudCheckStatus,
    PriorSubmission,
    RiskLevel,
)

__all__ = [
    'AUSTRALIAN_STATES',
    'Coverage',
    'CoverageType',
    'ExtractedPolicyData',
    'format_coverage_type',
    'InsuranceRequirement',
    'AbnMismatch',
    'Check',
    'CheckStatus',
    'Deficiency',
    'ExcessTooHigh',
    'ExpiredPolicy',
    'FraudDetected',
    'InsufficientLimit',
    'MissingCoverage',
    'MissingEndorsement',
    'PolicyExpiresBeforeProject',
    'Severity',
    'StateMismatch',
    'UnlicensedInsurer',
    'VerificationOutcome',
    'VerificationStatus',
    'DocumentMetadata',
    'FraudAnalysisResult',
    'FraudCheckResult',
    'FraudCheckStatus',
    'PriorSubmission',
    'RiskLevel',
]
