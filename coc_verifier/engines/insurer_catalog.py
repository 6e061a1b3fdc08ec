"""Static catalogs of known insurers and document-producing software."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Pattern, Tuple

import yaml

from ..utils.errors import ConfigurationError

logger = logging.getLogger(__name__)

STANDARD_ELEMENTS = ("ABN", "Policy Number", "Period of Insurance", "Insured")


@dataclass(frozen=True)
class InsurerTemplate:
    """
    Known certificate characteristics of one insurer.

    Attributes:
        key: Short lookup key matched against the declared insurer name
        name: Registered insurer name
        policy_number_pattern: Compiled regex every genuine policy number matches
        header_format: Expected certificate heading
        expected_elements: Labels every genuine certificate carries
        color_scheme: Brand colours (informational)
    """
    key: str
    name: str
    policy_number_pattern: Pattern
    header_format: str = ""
    expected_elements: Tuple[str, ...] = STANDARD_ELEMENTS
    color_scheme: Tuple[str, ...] = ()

    def matches(self, insurer_name: str) -> bool:
        """Case-insensitive substring match in either direction."""
        declared = (insurer_name or "").strip().lower()
        if not declared:
            return False
        return self.key.lower() in declared or declared in self.name.lower()

    @classmethod
    def from_dict(cls, key: str, data: Mapping[str, Any]) -> "InsurerTemplate":
        try:
            pattern = re.compile(data["policy_number_pattern"])
        except KeyError as e:
            raise ConfigurationError.catalog_invalid(key, "missing policy_number_pattern") from e
        except re.error as e:
            raise ConfigurationError.catalog_invalid(key, f"bad policy_number_pattern: {e}") from e
        if not data.get("name"):
            raise ConfigurationError.catalog_invalid(key, "missing name")

        return cls(
            key=key,
            name=str(data["name"]),
            policy_number_pattern=pattern,
            header_format=str(data.get("header_format", "")),
            expected_elements=tuple(data.get("expected_elements") or STANDARD_ELEMENTS),
            color_scheme=tuple(data.get("color_scheme") or ()),
        )


class InsurerTemplateCatalog:
    """Immutable, ordered lookup of insurer templates."""

    def __init__(self, templates: Iterable[InsurerTemplate]):
        self._templates: Tuple[InsurerTemplate, ...] = tuple(templates)

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self):
        return iter(self._templates)

    @property
    def templates(self) -> Tuple[InsurerTemplate, ...]:
        return self._templates

    def find(self, insurer_name: str) -> Optional[InsurerTemplate]:
        """Return the first template matching the declared insurer name."""
        for template in self._templates:
            if template.matches(insurer_name):
                return template
        return None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], source: str = "<mapping>") -> "InsurerTemplateCatalog":
        insurers = data.get("insurers") if isinstance(data, Mapping) else None
        if not isinstance(insurers, Mapping) or not insurers:
            raise ConfigurationError.catalog_invalid(source, "expected a non-empty 'insurers' mapping")
        return cls(InsurerTemplate.from_dict(str(key), value) for key, value in insurers.items())

    @classmethod
    def from_yaml(cls, path: str) -> "InsurerTemplateCatalog":
        """
        Load a catalog from a YAML file of the form ``insurers: {key: {...}}``.

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        catalog_path = Path(path)
        if not catalog_path.exists():
            raise ConfigurationError.catalog_invalid(path, "file not found")
        with open(catalog_path, 'r') as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError.catalog_invalid(path, str(e)) from e

        catalog = cls.from_mapping(data, source=path)
        logger.info(f"Loaded {len(catalog)} insurer templates from {path}")
        return catalog


@dataclass(frozen=True)
class SoftwareCatalog:
    """Producer/creator strings that indicate editing tools or genuine issuing systems."""
    suspicious: Tuple[str, ...]
    legitimate: Tuple[str, ...]

    def is_suspicious(self, software: str) -> bool:
        lowered = (software or "").lower()
        return bool(lowered) and any(s.lower() in lowered for s in self.suspicious)

    def is_legitimate(self, software: str) -> bool:
        lowered = (software or "").lower()
        return bool(lowered) and any(s.lower() in lowered for s in self.legitimate)


def _template(key, name, pattern, header, colors) -> InsurerTemplate:
    return InsurerTemplate(
        key=key,
        name=name,
        policy_number_pattern=re.compile(pattern),
        header_format=header,
        expected_elements=STANDARD_ELEMENTS,
        color_scheme=colors,
    )


DEFAULT_INSURER_CATALOG = InsurerTemplateCatalog([
    _template('qbe', 'QBE Insurance (Australia) Limited', r'^QBE[A-Z]{2}\d{8}$',
              'QBE Insurance Certificate of Currency', ('#0066B3', '#FFFFFF', '#000000')),
    _template('allianz', 'Allianz Australia Insurance Limited', r'^ALZ\d{10}$',
              'Allianz Certificate of Currency', ('#003781', '#FFFFFF', '#000000')),
    _template('cgu', 'CGU Insurance Limited', r'^CGU\d{9}$',
              'CGU Certificate of Currency', ('#005B99', '#FFFFFF', '#000000')),
    _template('suncorp', 'Suncorp Group Limited', r'^SUN\d{9}$',
              'Suncorp Certificate of Currency', ('#00A5BD', '#FFFFFF', '#000000')),
    _template('zurich', 'Zurich Australian Insurance Limited', r'^ZUR[A-Z]\d{8}$',
              'Zurich Certificate of Currency', ('#003366', '#FFFFFF', '#000000')),
    _template('vero', 'Vero Insurance', r'^VER\d{9}$',
              'Vero Certificate of Currency', ('#E4002B', '#FFFFFF', '#000000')),
    _template('aig', 'AIG Australia Limited', r'^AIG\d{10}$',
              'AIG Certificate of Currency', ('#1A3668', '#FFFFFF', '#000000')),
    _template('chubb', 'Chubb Insurance Australia Limited', r'^CHB\d{10}$',
              'Chubb Certificate of Currency', ('#FF6600', '#FFFFFF', '#000000')),
])

DEFAULT_SOFTWARE_CATALOG = SoftwareCatalog(
    suspicious=(
        'Adobe Photoshop',
        'GIMP',
        'Paint.NET',
        'Foxit PhantomPDF',
        'PDFelement',
        'Nitro Pro',
        'PDF Editor',
        'iLovePDF',
        'SmallPDF',
        'PDF Escape',
    ),
    legitimate=(
        'Adobe Acrobat',
        'Microsoft Word',
        'Microsoft Excel',
        'Crystal Reports',
        'SAP',
        'Oracle',
        'IBM Cognos',
        'Guidewire',
        'Duck Creek',
    ),
)

# APRA-licensed general insurers
DEFAULT_LICENSED_INSURERS: Tuple[str, ...] = (
    'QBE Insurance (Australia) Limited',
    'Allianz Australia Insurance Limited',
    'Suncorp Group Limited',
    'CGU Insurance Limited',
    'Zurich Australian Insurance Limited',
    'AIG Australia Limited',
    'Vero Insurance',
    'GIO General Limited',
    'Insurance Australia Limited',
    'AAI Limited',
    'Chubb Insurance Australia Limited',
    'HDI Global Specialty SE - Australia',
    'Liberty Mutual Insurance Company',
    'Tokio Marine & Nichido Fire Insurance Co., Ltd',
    'XL Insurance Company SE',
    'AXA Corporate Solutions Assurance',
    'Swiss Re International SE',
    'Munich Holdings of Australasia Pty Limited',
)
