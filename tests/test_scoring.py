"""Unit tests for enva.scoring — score calculation and suggestions."""

import pytest

from enva.models import (
    Dependency,
    EnvironmentInfo,
    Issue,
    Performance,
    SecurityScan,
    ValidationResult,
    Vulnerability,
)
from enva.scoring import calculate_score, generate_suggestions, status_for_score

# ── Helpers ──────────────────────────────────────────────────────────────────


def _info(status: str = "success", activated: str = "activated") -> EnvironmentInfo:
    return EnvironmentInfo(
        path="/work/venv",
        python_version="3.11.4",
        pip_version="23.2.1",
        activated=activated,
        integrity="valid",
        status=status,
    )


def _vuln(package: str = "requests", fixed_in: str = "2.31.0") -> Vulnerability:
    return Vulnerability(
        id="CVE-2023-32681",
        package=package,
        version="2.28.2",
        severity="medium",
        description="leak",
        fixed_in=fixed_in,
    )


# ── status_for_score ─────────────────────────────────────────────────────────


class TestStatusForScore:
    @pytest.mark.parametrize(
        "score,expected",
        [(100, "success"), (80, "success"), (79, "warning"), (50, "warning"), (49, "error"), (0, "error")],
    )
    def test_boundaries(self, score, expected):
        assert status_for_score(score) == expected


# ── calculate_score ──────────────────────────────────────────────────────────


class TestCalculateScore:
    def test_perfect(self):
        assert calculate_score(ValidationResult(venv_info=_info())) == (100, "success")

    def test_no_sections(self):
        assert calculate_score(ValidationResult()) == (100, "success")

    def test_not_activated(self):
        score, status = calculate_score(ValidationResult(venv_info=_info("warning", "not_activated")))
        assert score == 80
        assert status == "success"

    def test_env_error(self):
        score, _ = calculate_score(ValidationResult(venv_info=_info("error")))
        assert score == 70

    def test_outdated(self):
        deps = [Dependency(name=f"p{i}", version="1", status="outdated") for i in range(4)]
        score, _ = calculate_score(ValidationResult(venv_info=_info(), dependencies=deps))
        assert score == 88

    def test_vulnerable_not_counted_as_outdated(self):
        deps = [Dependency(name="requests", version="2.28.2", status="vulnerable")]
        score, _ = calculate_score(ValidationResult(venv_info=_info(), dependencies=deps))
        assert score == 100

    def test_severity_weights(self):
        security = SecurityScan(critical=1, high=1, medium=1, low=1, status="error")
        score, status = calculate_score(ValidationResult(venv_info=_info(), security=security))
        assert score == 100 - 25 - 15 - 5 - 2
        assert status == "warning"

    def test_performance_warning(self):
        score, _ = calculate_score(ValidationResult(performance=Performance(status="warning")))
        assert score == 90

    def test_issue_weights(self):
        issues = [
            Issue(type="venv", severity="error", message="a"),
            Issue(type="dependency", severity="warning", message="b"),
            Issue(type="performance", severity="info", message="c"),
        ]
        score, _ = calculate_score(ValidationResult(issues=issues))
        assert score == 65

    def test_clamped_at_zero(self):
        security = SecurityScan(critical=10, status="error")
        assert calculate_score(ValidationResult(security=security)) == (0, "error")

    @pytest.mark.parametrize("medium", [0, 1, 3, 7, 10, 19, 20, 40])
    def test_always_in_range_and_consistent(self, medium):
        deps = [Dependency(name=f"p{i}", version="1", status="outdated") for i in range(medium)]
        result = ValidationResult(
            venv_info=_info("warning", "not_activated"),
            dependencies=deps,
            security=SecurityScan(medium=medium, status="warning" if medium else "success"),
            performance=Performance(status="warning"),
        )
        score, status = calculate_score(result)
        assert 0 <= score <= 100
        assert status == status_for_score(score)

    def test_component_status_does_not_drive_verdict(self):
        # a security scan marked error with no counts costs nothing
        score, status = calculate_score(ValidationResult(security=SecurityScan(status="error")))
        assert (score, status) == (100, "success")


# ── generate_suggestions ─────────────────────────────────────────────────────


class TestGenerateSuggestions:
    def test_nothing_to_suggest(self):
        assert generate_suggestions(ValidationResult(venv_info=_info())) == []

    def test_activation(self):
        (s,) = generate_suggestions(ValidationResult(venv_info=_info("warning", "not_activated")))
        assert s.type == "config"
        assert s.priority == "medium"
        assert s.auto_fixable is False
        assert s.command == "source /work/venv/bin/activate"

    def test_update_requires_latest(self):
        deps = [
            Dependency(name="django", version="3.2.0", latest="4.2.0", status="outdated"),
            Dependency(name="mystery", version="0.1", status="outdated"),
        ]
        (s,) = generate_suggestions(ValidationResult(venv_info=_info(), dependencies=deps))
        assert s.type == "update"
        assert s.priority == "high"
        assert s.auto_fixable is True
        assert s.command == "pip install django==4.2.0"

    def test_security(self):
        security = SecurityScan(medium=1, vulnerabilities=[_vuln()], status="warning")
        (s,) = generate_suggestions(ValidationResult(venv_info=_info(), security=security))
        assert s.type == "security"
        assert s.command == "pip install requests==2.31.0"
        assert "CVE-2023-32681" in s.description

    def test_order(self):
        deps = [Dependency(name="django", version="3.2.0", latest="4.2.0", status="outdated")]
        security = SecurityScan(medium=1, vulnerabilities=[_vuln()], status="warning")
        result = ValidationResult(
            venv_info=_info("warning", "not_activated"),
            dependencies=deps,
            security=security,
        )
        assert [s.type for s in generate_suggestions(result)] == ["config", "update", "security"]
