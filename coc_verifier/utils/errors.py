"""Error handling utilities for certificate verification."""

from dataclasses import dataclass
from typing import Optional, Dict, Any
from enum import Enum


class ErrorType(Enum):
    """Enumeration of error types in the certificate verification core."""

    # Caller contract violations
    MISSING_EXTRACTED_DATA = "MISSING_EXTRACTED_DATA"
    MISSING_REQUIREMENTS = "MISSING_REQUIREMENTS"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"

    # Document Processing Errors
    PDF_METADATA_FAILED = "PDF_METADATA_FAILED"
    IMAGE_METADATA_FAILED = "IMAGE_METADATA_FAILED"

    # Configuration Errors
    CONFIG_MISSING = "CONFIG_MISSING"
    CONFIG_INVALID = "CONFIG_INVALID"
    CATALOG_INVALID = "CATALOG_INVALID"

    # General Errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass
class ErrorContext:
    """
    Context information for errors raised by the verification core.

    Attributes:
        error_type: Type of error from ErrorType enum
        message: Human-readable error message
        recoverable: Whether the caller can retry with corrected input
        fallback_action: Optional description of what the caller should do
        details: Optional additional error details
        original_exception: Optional original exception that caused this error
    """

    error_type: ErrorType
    message: str
    recoverable: bool
    fallback_action: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    original_exception: Optional[Exception] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error context to dictionary for logging/serialization.

        Returns:
            Dictionary representation of error context
        """
        return {
            "error_type": self.error_type.value,
            "message": self.message,
            "recoverable": self.recoverable,
            "fallback_action": self.fallback_action,
            "details": self.details or {},
            "original_exception": str(self.original_exception) if self.original_exception else None
        }


class VerificationError(Exception):
    """
    Base exception for all certificate verification errors.

    A VerificationError always means the core could not produce a verdict.
    A certificate that fails its requirements is reported through the
    outcome's checks and deficiencies, never through this hierarchy.

    Attributes:
        context: ErrorContext with detailed error information
    """

    def __init__(self, context: ErrorContext):
        self.context = context
        super().__init__(context.message)

    def __str__(self) -> str:
        base = f"{self.context.error_type.value}: {self.context.message}"
        if self.context.fallback_action:
            base += f" (Fallback: {self.context.fallback_action})"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return self.context.to_dict()


class InvalidInputError(VerificationError):
    """Exception for caller contract violations (bad input, not a fail verdict)."""

    @classmethod
    def missing_extracted_data(cls) -> "InvalidInputError":
        """Create error for a call made without extracted policy data."""
        context = ErrorContext(
            error_type=ErrorType.MISSING_EXTRACTED_DATA,
            message="Extracted policy data is required",
            recoverable=True,
            fallback_action="Re-run extraction before verification"
        )
        return cls(context)

    @classmethod
    def missing_requirements(cls) -> "InvalidInputError":
        """Create error for a call made without a requirement list."""
        context = ErrorContext(
            error_type=ErrorType.MISSING_REQUIREMENTS,
            message="A list of insurance requirements is required (it may be empty)",
            recoverable=True,
            fallback_action="Load project requirements before verification"
        )
        return cls(context)

    @classmethod
    def invalid_payload(
        cls,
        field_name: str,
        reason: str,
        error: Optional[Exception] = None
    ) -> "InvalidInputError":
        """
        Create error for a payload whose shape does not match the contract.

        Args:
            field_name: Name of the offending field
            reason: Why the field was rejected
            error: Optional original exception

        Returns:
            InvalidInputError instance
        """
        context = ErrorContext(
            error_type=ErrorType.INVALID_PAYLOAD,
            message=f"Invalid '{field_name}': {reason}",
            recoverable=True,
            details={"field": field_name},
            original_exception=error
        )
        return cls(context)


class DocumentProcessingError(VerificationError):
    """Exception for document metadata reading errors."""

    @classmethod
    def pdf_metadata_failed(
        cls,
        filename: str,
        error: Exception,
        fallback_action: Optional[str] = None
    ) -> "DocumentProcessingError":
        """
        Create error for PDF metadata extraction failure.

        Args:
            filename: Name of PDF file
            error: Original exception
            fallback_action: Optional fallback action

        Returns:
            DocumentProcessingError instance
        """
        context = ErrorContext(
            error_type=ErrorType.PDF_METADATA_FAILED,
            message=f"Failed to read metadata from PDF '{filename}': {str(error)}",
            recoverable=True,
            fallback_action=fallback_action or "Run fraud analysis without document metadata",
            details={"filename": filename},
            original_exception=error
        )
        return cls(context)

    @classmethod
    def image_metadata_failed(
        cls,
        filename: str,
        error: Exception,
        fallback_action: Optional[str] = None
    ) -> "DocumentProcessingError":
        """
        Create error for image EXIF metadata extraction failure.

        Args:
            filename: Name of image file
            error: Original exception
            fallback_action: Optional fallback action

        Returns:
            DocumentProcessingError instance
        """
        context = ErrorContext(
            error_type=ErrorType.IMAGE_METADATA_FAILED,
            message=f"Failed to read EXIF metadata from image '{filename}': {str(error)}",
            recoverable=True,
            fallback_action=fallback_action or "Run fraud analysis without document metadata",
            details={"filename": filename},
            original_exception=error
        )
        return cls(context)


class ConfigurationError(VerificationError):
    """Exception for configuration and catalog loading errors."""

    @classmethod
    def config_missing(cls, path: str) -> "ConfigurationError":
        """Create error for a configuration file that does not exist."""
        context = ErrorContext(
            error_type=ErrorType.CONFIG_MISSING,
            message=f"Configuration file not found at '{path}'",
            recoverable=True,
            fallback_action="Use built-in defaults",
            details={"path": path}
        )
        return cls(context)

    @classmethod
    def config_invalid(cls, path: str, error: Exception) -> "ConfigurationError":
        """Create error for a configuration file that cannot be parsed."""
        context = ErrorContext(
            error_type=ErrorType.CONFIG_INVALID,
            message=f"Invalid configuration in '{path}': {str(error)}",
            recoverable=False,
            details={"path": path},
            original_exception=error
        )
        return cls(context)

    @classmethod
    def catalog_invalid(cls, source: str, reason: str) -> "ConfigurationError":
        """Create error for an insurer template catalog that cannot be used."""
        context = ErrorContext(
            error_type=ErrorType.CATALOG_INVALID,
            message=f"Invalid insurer template catalog '{source}': {reason}",
            recoverable=False,
            details={"source": source}
        )
        return cls(context)


def handle_document_processing_error(
    error: Exception,
    filename: str,
    doc_type: str,
    logger,
    fallback_action: Optional[str] = None
) -> None:
    """
    Handle metadata reading errors with logging.

    Args:
        error: Original exception from document processing
        filename: Name of file being processed
        doc_type: Type of document ('pdf', 'image')
        logger: Logger instance for error logging
        fallback_action: Optional fallback action description

    Raises:
        DocumentProcessingError: Wrapped error with context
    """
    if doc_type == 'pdf':
        doc_error = DocumentProcessingError.pdf_metadata_failed(
            filename=filename,
            error=error,
            fallback_action=fallback_action
        )
    elif doc_type == 'image':
        doc_error = DocumentProcessingError.image_metadata_failed(
            filename=filename,
            error=error,
            fallback_action=fallback_action
        )
    else:
        context = ErrorContext(
            error_type=ErrorType.UNKNOWN_ERROR,
            message=f"Failed to process document '{filename}': {str(error)}",
            recoverable=True,
            fallback_action=fallback_action or "Run fraud analysis without document metadata",
            details={"filename": filename, "doc_type": doc_type},
            original_exception=error
        )
        doc_error = DocumentProcessingError(context)

    logger.warning(f"Document processing error: {doc_error}")
    raise doc_error
