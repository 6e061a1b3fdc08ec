"""Semantic Kernel plugins exposing the verification engines as agent tools."""

from .abn_validator import ABNValidatorPlugin
from .compliance_checker import ComplianceCheckerPlugin
from .fraud_detector import FraudDetectorPlugin
from .pdf_metadata import PDFMetadataPlugin
from .exif_reader import EXIFReaderPlugin

__all__ = [
    'ABNValidatorPlugin',
    'ComplianceCheckerPlugin',
    'FraudDetectorPlugin',
    'PDFMetadataPlugin',
    'EXIFReaderPlugin'
]
