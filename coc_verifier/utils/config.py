"""Configuration management for the certificate verifier."""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"


@dataclass
class VerificationConfig:
    """Requirement evaluator settings."""
    expiry_warning_days: int = 30
    low_confidence_threshold: Optional[float] = None
    check_licensed_insurer: bool = False


@dataclass
class FraudConfig:
    """Fraud risk analyzer settings."""
    enabled: bool = True


@dataclass
class CatalogConfig:
    """Locations of the static catalogs injected into the engines."""
    insurer_templates: Optional[str] = None


@dataclass
class ServerConfig:
    """HTTP surface configuration."""
    title: str = "Certificate of Currency Verifier"
    max_file_size_mb: int = 10


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s%(context)s"
    file: Optional[str] = None


@dataclass
class Config:
    """Main configuration class."""
    verification: VerificationConfig = field(default_factory=VerificationConfig)
    fraud: FraudConfig = field(default_factory=FraudConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def default(cls) -> "Config":
        """Built-in defaults, with environment overrides applied."""
        return cls.from_dict({})

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """
        Load configuration from file and environment variables.

        Environment variables override config file values:
        - COC_CONFIG_PATH (when config_path is not given)
        - EXPIRY_WARNING_DAYS
        - LOW_CONFIDENCE_THRESHOLD
        - INSURER_TEMPLATES_PATH
        - MAX_FILE_SIZE_MB
        - LOG_LEVEL

        A missing file is not fatal: the built-in defaults are used instead.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Config instance with loaded settings

        Raises:
            ConfigurationError: If the file exists but cannot be parsed
        """
        path = config_path or os.getenv("COC_CONFIG_PATH", DEFAULT_CONFIG_PATH)

        if not os.path.exists(path):
            logger.warning(f"{ConfigurationError.config_missing(path)}")
            return cls.default()

        try:
            with open(path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError.config_invalid(path, e) from e

        if not isinstance(config_data, dict):
            raise ConfigurationError.config_invalid(
                path, ValueError("top-level YAML value must be a mapping")
            )

        try:
            return cls.from_dict(config_data)
        except (TypeError, ValueError) as e:
            raise ConfigurationError.config_invalid(path, e) from e

    @classmethod
    def from_dict(cls, config_data: dict) -> "Config":
        """Build a Config from parsed YAML data plus environment overrides."""
        ver = config_data.get("verification", {}) or {}
        threshold = os.getenv("LOW_CONFIDENCE_THRESHOLD", ver.get("low_confidence_threshold"))
        verification_config = VerificationConfig(
            expiry_warning_days=int(os.getenv(
                "EXPIRY_WARNING_DAYS", ver.get("expiry_warning_days", 30)
            )),
            low_confidence_threshold=float(threshold) if threshold not in (None, "") else None,
            check_licensed_insurer=bool(ver.get("check_licensed_insurer", False)),
        )

        fr = config_data.get("fraud", {}) or {}
        fraud_config = FraudConfig(enabled=bool(fr.get("enabled", True)))

        cat = config_data.get("catalog", {}) or {}
        catalog_config = CatalogConfig(
            insurer_templates=os.getenv("INSURER_TEMPLATES_PATH", cat.get("insurer_templates"))
        )

        srv = config_data.get("server", {}) or {}
        server_config = ServerConfig(
            title=srv.get("title", ServerConfig.title),
            max_file_size_mb=int(os.getenv(
                "MAX_FILE_SIZE_MB", srv.get("max_file_size_mb", ServerConfig.max_file_size_mb)
            )),
        )

        lg = config_data.get("logging", {}) or {}
        logging_config = LoggingConfig(
            level=os.getenv("LOG_LEVEL", lg.get("level", LoggingConfig.level)),
            format=lg.get("format", LoggingConfig.format),
            file=lg.get("file"),
        )

        return cls(
            verification=verification_config,
            fraud=fraud_config,
            catalog=catalog_config,
            server=server_config,
            logging=logging_config,
        )
