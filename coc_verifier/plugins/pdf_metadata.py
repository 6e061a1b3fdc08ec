"""PDF document-information reader plugin for Semantic Kernel."""

import io
import logging
from typing import Any, Dict, Optional

import PyPDF2
from semantic_kernel.functions import kernel_function

from ..models.fraud import DocumentMetadata
from ..utils.dates import parse_pdf_date
from ..utils.errors import handle_document_processing_error

logger = logging.getLogger(__name__)


def _pdf_date_to_iso(value: Any) -> Optional[str]:
    if not value:
        return None
    text = str(value)
    try:
        return parse_pdf_date(text).isoformat()
    except ValueError:
        logger.warning(f"Unrecognised PDF date '{text}', keeping raw value")
        return text


def _text(value: Any) -> Optional[str]:
    return str(value) if value else None


def read_pdf_metadata(pdf_bytes: bytes, filename: str = "document.pdf") -> DocumentMetadata:
    """
    Read the document information dictionary of a PDF.

    Args:
        pdf_bytes: Raw PDF bytes
        filename: Name used in error messages

    Returns:
        DocumentMetadata with ISO creation/modification dates

    Raises:
        DocumentProcessingError: If the PDF cannot be read
    """
    try:
        reader = PyPDF2.PdfReader(io.BytesIO(pdf_bytes))
        info = reader.metadata or {}
        metadata = DocumentMetadata(
            creation_date=_pdf_date_to_iso(info.get('/CreationDate')),
            modification_date=_pdf_date_to_iso(info.get('/ModDate')),
            producer=_text(info.get('/Producer')),
            creator=_text(info.get('/Creator')),
            author=_text(info.get('/Author')),
        )
    except Exception as e:
        handle_document_processing_error(e, filename, 'pdf', logger)

    logger.debug(f"Read PDF metadata from {filename}: {metadata}")
    return metadata


class PDFMetadataPlugin:
    """
    Semantic Kernel plugin for reading PDF metadata used in fraud analysis.

    Reads /CreationDate, /ModDate, /Producer, /Creator and /Author.
    """

    def __init__(self):
        """Initialize PDF metadata plugin."""
        logger.info("Initialized PDFMetadataPlugin")

    @kernel_function(
        name="read_pdf_metadata",
        description=(
            "Read creation/modification dates and producing software from a "
            "certificate PDF. The result can be passed to fraud analysis."
        )
    )
    def read_metadata(
        self,
        pdf_bytes: bytes = None,
        pdf_path: str = None
    ) -> Dict[str, Any]:
        """
        Read PDF metadata.

        Args:
            pdf_bytes: Raw PDF bytes (optional if pdf_path provided)
            pdf_path: Path to PDF file (optional if pdf_bytes provided)

        Returns:
            Dictionary with creationDate, modificationDate, producer, creator, author

        Raises:
            ValueError: If neither pdf_bytes nor pdf_path provided
            DocumentProcessingError: If the PDF cannot be read
        """
        if pdf_bytes is None and pdf_path is None:
            raise ValueError("Either pdf_bytes or pdf_path must be provided")

        if pdf_bytes is None:
            with open(pdf_path, 'rb') as f:
                pdf_bytes = f.read()

        return read_pdf_metadata(pdf_bytes, filename=pdf_path or "document.pdf").to_dict()
