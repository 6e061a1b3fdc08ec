"""EXIF metadata reader plugin for photographed or scanned certificates."""

import logging
from io import BytesIO
from typing import Any, Dict, Optional

from PIL import Image
from semantic_kernel.functions import kernel_function

from ..models.fraud import DocumentMetadata
from ..utils.dates import parse_datetime
from ..utils.errors import handle_document_processing_error

logger = logging.getLogger(__name__)

# EXIF tag ids
TAG_SOFTWARE = 0x0131
TAG_DATETIME = 0x0132
TAG_ARTIST = 0x013B
TAG_EXIF_IFD = 0x8769
TAG_DATETIME_ORIGINAL = 0x9003


def _exif_date_to_iso(value: Any) -> Optional[str]:
    if not value:
        return None
    text = str(value).strip()
    try:
        return parse_datetime(text).isoformat()
    except ValueError:
        logger.warning(f"Failed to parse EXIF datetime: {text}")
        return text


def read_image_metadata(image_bytes: bytes, filename: str = "image") -> DocumentMetadata:
    """
    Read EXIF dates and software from an image certificate.

    DateTimeOriginal (falling back to DateTime) becomes the creation date and
    DateTime the modification date.

    Raises:
        DocumentProcessingError: If the image cannot be opened
    """
    try:
        with Image.open(BytesIO(image_bytes)) as image:
            exif = image.getexif()
            exif_ifd = exif.get_ifd(TAG_EXIF_IFD) if exif else {}

            modified = exif.get(TAG_DATETIME)
            original = exif_ifd.get(TAG_DATETIME_ORIGINAL) or modified
            metadata = DocumentMetadata(
                creation_date=_exif_date_to_iso(original),
                modification_date=_exif_date_to_iso(modified),
                producer=str(exif.get(TAG_SOFTWARE)).strip() if exif.get(TAG_SOFTWARE) else None,
                author=str(exif.get(TAG_ARTIST)).strip() if exif.get(TAG_ARTIST) else None,
            )
    except Exception as e:
        handle_document_processing_error(e, filename, 'image', logger)

    if metadata == DocumentMetadata():
        logger.info(f"No EXIF data found in {filename}")
    return metadata


class EXIFReaderPlugin:
    """
    Semantic Kernel plugin for extracting EXIF metadata from certificate images.
    """

    def __init__(self):
        """Initialize EXIF reader plugin."""
        logger.info("Initialized EXIFReaderPlugin")

    @kernel_function(
        name="read_image_metadata",
        description=(
            "Read EXIF capture/modification timestamps and editing software from "
            "a photographed or scanned certificate. The result can be passed to "
            "fraud analysis."
        )
    )
    def read_metadata(
        self,
        image_bytes: bytes = None,
        image_path: str = None
    ) -> Dict[str, Any]:
        """
        Read EXIF metadata.

        Args:
            image_bytes: Raw image bytes (optional if image_path provided)
            image_path: Path to image file (optional if image_bytes provided)

        Returns:
            Dictionary with creationDate, modificationDate, producer, creator, author

        Raises:
            ValueError: If neither image_bytes nor image_path provided
            DocumentProcessingError: If the image cannot be read
        """
        if image_bytes is None and image_path is None:
            raise ValueError("Either image_bytes or image_path must be provided")

        if image_bytes is None:
            with open(image_path, 'rb') as f:
                image_bytes = f.read()

        return read_image_metadata(image_bytes, filename=image_path or "image").to_dict()
