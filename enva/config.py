"""Configuration models using Pydantic.

All settings are optional; an empty or missing config file yields the
built-in static tables and thresholds.

Example YAML::

    thresholds:
      many_packages: 20
      many_outdated: 5
      subprocess_timeout: 30
    large_packages:
      - tensorflow
      - torch
    latest_versions:
      django: "5.0.1"
    known_vulnerabilities:
      - package: jinja2
        version: "3.1.2"
        id: CVE-2024-22195
        description: XSS via the xmlattr filter
    online: false
"""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_LATEST_VERSIONS: dict[str, str] = {
    "django": "4.2.0",
    "requests": "2.31.0",
    "flask": "2.3.3",
    "numpy": "1.24.3",
    "pandas": "2.0.3",
    "tensorflow": "2.13.0",
    "cryptography": "41.0.0",
    "urllib3": "2.0.7",
}

DEFAULT_LARGE_PACKAGES: list[str] = ["tensorflow", "torch", "pytorch", "opencv-python"]

CONFIG_FILENAMES = ("enva.yaml", ".enva.yaml", "enva.yml")


class KnownVulnerability(BaseModel):
    """One row of the static known-vulnerable-version table."""

    package: str
    version: str
    id: str = "CVE-2023-XXXXX"
    description: str = ""
    fixed_in: str | None = None

    @field_validator("package", mode="before")
    @classmethod
    def _normalize_package(cls, v: Any) -> str:
        return str(v or "").strip().lower()

    @field_validator("version", mode="before")
    @classmethod
    def _strip_pin(cls, v: Any) -> str:
        return str(v or "").strip().removeprefix("==")


DEFAULT_KNOWN_VULNERABILITIES: list[KnownVulnerability] = [
    KnownVulnerability(
        package="requests",
        version="2.28.2",
        id="CVE-2023-32681",
        description="Security vulnerability in requests",
    ),
    KnownVulnerability(
        package="urllib3",
        version="1.26.0",
        id="CVE-2021-33503",
        description="Security vulnerability in urllib3",
    ),
]


class ThresholdsConfig(BaseModel):
    """Heuristic limits and timeouts.

    Attributes:
        many_packages: Dependency count above which the environment is
            considered bloated.
        many_outdated: Outdated count above which an update optimization
            is recommended.
        subprocess_timeout: Seconds before an interpreter or pip call is
            abandoned.
        http_timeout: Seconds for each PyPI request in online mode.
    """

    many_packages: int = Field(default=20, ge=0)
    many_outdated: int = Field(default=5, ge=0)
    subprocess_timeout: float = Field(default=30.0, gt=0)
    http_timeout: float = Field(default=10.0, gt=0)


class EnvaConfig(BaseModel):
    """Validated enva configuration.

    ``latest_versions`` and ``known_vulnerabilities`` are merged over the
    built-in tables rather than replacing them.
    """

    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    large_packages: list[str] = Field(default_factory=lambda: list(DEFAULT_LARGE_PACKAGES))
    latest_versions: dict[str, str] = Field(default_factory=dict)
    known_vulnerabilities: list[KnownVulnerability] = Field(default_factory=list)
    online: bool = False

    @field_validator("latest_versions", mode="before")
    @classmethod
    def _normalize_versions(cls, v: Any) -> dict[str, str]:
        if not isinstance(v, dict):
            return {}
        return {str(k).strip().lower(): str(val).strip() for k, val in v.items() if k and val}

    def merged_latest_versions(self) -> dict[str, str]:
        return {**DEFAULT_LATEST_VERSIONS, **self.latest_versions}

    def merged_vulnerabilities(self) -> list[KnownVulnerability]:
        return DEFAULT_KNOWN_VULNERABILITIES + self.known_vulnerabilities


def load_config(path: Path) -> EnvaConfig:
    """Load configuration from a YAML or JSON file.

    Args:
        path: Path to the config file.

    Returns:
        Validated ``EnvaConfig`` instance.

    Raises:
        FileNotFoundError: if the file doesn't exist.
        pydantic.ValidationError: if content fails validation.
    """
    content = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        raw = json.loads(content)
    else:
        raw = yaml.safe_load(content) or {}
    return EnvaConfig.model_validate(raw)


def find_config(directory: Path | None = None) -> Path | None:
    """Find a config file in ``directory`` (default: the cwd).

    Returns:
        Path of the first existing candidate, or ``None``.
    """
    base = directory or Path.cwd()
    for name in CONFIG_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None
