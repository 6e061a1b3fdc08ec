"""Certificate of Currency verification: requirement compliance and fraud risk scoring."""

__version__ = "0.1.0"
