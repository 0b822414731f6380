"""Result models using Pydantic.

Every model here is frozen: each pipeline stage builds fresh instances
and nothing is mutated after the run completes.  Field names match the
JSON report keys.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Status = Literal["success", "warning", "error"]
Activation = Literal["activated", "not_activated"]
Integrity = Literal["valid", "invalid"]
DependencyStatus = Literal["uptodate", "outdated", "vulnerable", "missing"]
Severity = Literal["critical", "high", "medium", "low"]
Priority = Literal["high", "medium", "low"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class EnvironmentInfo(_Frozen):
    """Structure and interpreter details of a virtual environment.

    Attributes:
        path: Environment directory as given (not resolved).
        python_version: Interpreter version, or ``error: ...`` if the
            interpreter could not be queried.
        pip_version: Package manager version, or ``error: ...``.
        activated: ``activated`` when ``VIRTUAL_ENV`` points here.
        integrity: ``valid`` when at least one marker file exists.
        status: Component status.  Always ``error`` for an invalid
            environment.
    """

    path: str
    python_version: str = ""
    pip_version: str = ""
    activated: Activation = "not_activated"
    integrity: Integrity = "valid"
    status: Status = "success"

    @model_validator(mode="after")
    def _invalid_means_error(self) -> "EnvironmentInfo":
        if self.integrity == "invalid" and self.status != "error":
            raise ValueError("an environment with invalid integrity must have status 'error'")
        return self


class Dependency(_Frozen):
    """An installed package.

    Names are not guaranteed unique across a result; the enumerator keys
    its mapping by name so a repeated name overwrites the earlier entry.
    """

    name: str
    version: str
    latest: str | None = None
    status: DependencyStatus = "uptodate"
    required_by: str | None = None


class Vulnerability(_Frozen):
    """A known-vulnerable package version, referenced by name and version."""

    id: str
    package: str
    version: str
    severity: Severity
    description: str
    fixed_in: str | None = None


class SecurityScan(_Frozen):
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    vulnerabilities: list[Vulnerability] = Field(default_factory=list)
    status: Status = "success"


class PackageSize(_Frozen):
    name: str
    size: str  # estimate such as "450MB+", not a measurement


class Optimization(_Frozen):
    type: str
    description: str
    impact: Priority


class Performance(_Frozen):
    unused_packages: list[str] = Field(default_factory=list)
    large_packages: list[PackageSize] = Field(default_factory=list)
    optimizations: list[Optimization] = Field(default_factory=list)
    status: Status = "success"


class Issue(_Frozen):
    """A diagnostic found during validation.

    Attributes:
        type: ``venv``, ``dependency``, ``security`` or ``performance``.
        severity: ``error``, ``warning`` or ``info``; drives the score.
        message: Human-readable description.
        component: Optional name of the package or file concerned.
        line: Optional line number within ``component``.
    """

    type: Literal["venv", "dependency", "security", "performance"]
    severity: Literal["error", "warning", "info"]
    message: str
    component: str | None = None
    line: int | None = None


class Suggestion(_Frozen):
    """A remediation step, optionally with a literal shell command."""

    type: Literal["update", "remove", "add", "fix", "config", "security"]
    description: str
    command: str | None = None
    auto_fixable: bool = False
    priority: Priority = "medium"


class ValidationResult(_Frozen):
    """Aggregate result of one validation run.

    Attributes:
        overall_status: Verdict derived from ``score`` alone.
        score: Health score in ``[0, 100]``.
        duration: Wall-clock seconds spent validating.
        issues: Non-fatal problems collected along the way.
        suggestions: Ordered remediation steps.
        venv_info: Structure validator output.
        dependencies: Installed packages.
        security: Security scanner output.
        performance: Performance analyzer output.
    """

    overall_status: Status = "success"
    score: int = Field(default=100, ge=0, le=100)
    duration: float = 0.0
    issues: list[Issue] = Field(default_factory=list)
    suggestions: list[Suggestion] = Field(default_factory=list)
    venv_info: EnvironmentInfo | None = None
    dependencies: list[Dependency] = Field(default_factory=list)
    security: SecurityScan | None = None
    performance: Performance | None = None
