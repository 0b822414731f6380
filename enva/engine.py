"""Validation pipeline.

Runs each stage once, in order, and assembles the final
``ValidationResult``.  Only an invalid environment aborts the run;
every other failure is recorded as an issue.
"""

import logging
import time
from pathlib import Path
from typing import Mapping

from .config import EnvaConfig
from .errors import ExecutableNotFound, InvocationError, ManifestReadError
from .models import Issue, ValidationResult
from .probe import Probe, VersionProbe
from .requirements import detect_drift, find_manifest, parse_requirements
from .scanners import analyze_performance, build_dependencies, mark_vulnerable, scan_security
from .scoring import calculate_score, generate_suggestions
from .sources import StaticVersionOracle, StaticVulnerabilityFeed, VersionOracle, VulnerabilityFeed
from .venv import list_installed_packages, validate_structure

logger = logging.getLogger(__name__)


def build_sources(config: EnvaConfig) -> tuple[VersionOracle, VulnerabilityFeed]:
    """Pick the version oracle and vulnerability feed for a config.

    Online mode queries PyPI; otherwise the static tables (merged with
    any overrides from the config) are used.
    """
    if config.online:
        from .pypi import PyPIVersionOracle, PyPIVulnerabilityFeed, requests_session

        session = requests_session()
        timeout = config.thresholds.http_timeout
        return (
            PyPIVersionOracle(session=session, timeout=timeout),
            PyPIVulnerabilityFeed(session=session, timeout=timeout),
        )
    return (
        StaticVersionOracle(config.merged_latest_versions()),
        StaticVulnerabilityFeed(config.merged_vulnerabilities()),
    )


def check_requirements(venv_path: Path | str, installed: dict[str, str]) -> list[Issue]:
    """Parse the project's manifest, if any, and run the drift hook.

    A manifest that exists but can't be read is reported as a warning
    issue; the rest of the run continues without manifest data.
    """
    manifest_path = find_manifest(venv_path)
    if manifest_path is None:
        logger.debug("no requirements manifest found for %s", venv_path)
        return []
    try:
        manifest = parse_requirements(manifest_path)
    except ManifestReadError as e:
        logger.warning("%s", e)
        return [
            Issue(
                type="dependency",
                severity="warning",
                message=f"Failed to read requirements: {e}",
                component=str(manifest_path),
            )
        ]
    logger.debug("parsed %d requirements from %s", len(manifest), manifest_path)
    return detect_drift(installed, manifest)


def validate_environment(
    venv_path: Path | str,
    config: EnvaConfig | None = None,
    *,
    probe: Probe | None = None,
    oracle: VersionOracle | None = None,
    feed: VulnerabilityFeed | None = None,
    environ: Mapping[str, str] | None = None,
) -> ValidationResult:
    """Validate a virtual environment end to end.

    Args:
        venv_path: Environment directory.
        config: Settings; defaults to ``EnvaConfig()``.
        probe: Subprocess runner; defaults to a ``VersionProbe`` with the
            configured timeout.
        oracle: Latest-version source; defaults per ``build_sources``.
        feed: Vulnerability source; defaults per ``build_sources``.
        environ: Environment mapping used for activation detection.

    Returns:
        The finished ``ValidationResult``.

    Raises:
        InvalidEnvironment: if ``venv_path`` is not a virtual environment.
    """
    start = time.perf_counter()
    config = config or EnvaConfig()
    probe = probe or VersionProbe(timeout=config.thresholds.subprocess_timeout)
    if oracle is None or feed is None:
        default_oracle, default_feed = build_sources(config)
        oracle = oracle or default_oracle
        feed = feed or default_feed

    venv_info = validate_structure(venv_path, probe, environ)
    issues: list[Issue] = []

    try:
        packages = list_installed_packages(venv_path, probe)
    except (ExecutableNotFound, InvocationError) as e:
        logger.warning("package enumeration failed: %s", e)
        issues.append(Issue(type="dependency", severity="warning", message=f"Failed to get packages: {e}"))
        packages = {}
    dependencies = build_dependencies(packages, oracle)

    issues.extend(check_requirements(venv_path, packages))

    security = scan_security(dependencies, feed, oracle)
    dependencies = mark_vulnerable(dependencies, security)

    performance = analyze_performance(
        dependencies,
        large_packages=config.large_packages,
        many_packages=config.thresholds.many_packages,
        many_outdated=config.thresholds.many_outdated,
    )

    partial = ValidationResult(
        issues=issues,
        venv_info=venv_info,
        dependencies=dependencies,
        security=security,
        performance=performance,
    )
    suggestions = generate_suggestions(partial)
    score, status = calculate_score(partial)

    return ValidationResult(
        overall_status=status,
        score=score,
        duration=time.perf_counter() - start,
        issues=issues,
        suggestions=suggestions,
        venv_info=venv_info,
        dependencies=dependencies,
        security=security,
        performance=performance,
    )
