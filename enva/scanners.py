"""Dependency, security and performance checks.

Pure functions over in-memory data: every call returns a fresh result
and none of them keep state between calls.
"""

from typing import Iterable, Sequence

from packaging.version import InvalidVersion, Version

from .config import DEFAULT_LARGE_PACKAGES
from .models import Dependency, Optimization, PackageSize, Performance, SecurityScan, Vulnerability
from .sources import VersionOracle, VulnerabilityFeed, normalize_name

DEFAULT_FIXED_IN = "1.0.0"
LARGE_PACKAGE_SIZE = "450MB+"
UNUSED_PLACEHOLDER = "example-unused-package"


def is_older(installed: str, latest: str) -> bool:
    """Return True if ``installed`` predates ``latest``.

    Falls back to plain inequality for versions PEP 440 can't parse.
    """
    try:
        return Version(installed) < Version(latest)
    except InvalidVersion:
        return installed != latest


def build_dependencies(packages: dict[str, str], oracle: VersionOracle) -> list[Dependency]:
    """Turn an installed-package mapping into ``Dependency`` records.

    Args:
        packages: Name → installed version, as listed by pip.
        oracle: Source of latest-version information.

    Returns:
        One ``Dependency`` per package, ``outdated`` when the oracle
        knows a newer release.
    """
    deps: list[Dependency] = []
    for name, version in packages.items():
        latest = oracle.latest(name)
        status = "outdated" if latest and is_older(version.removeprefix("=="), latest) else "uptodate"
        deps.append(Dependency(name=name, version=version, latest=latest, status=status))
    return deps


def scan_security(
    dependencies: Sequence[Dependency],
    feed: VulnerabilityFeed,
    oracle: VersionOracle,
) -> SecurityScan:
    """Flag dependencies with known-vulnerable versions.

    Every match is counted as medium severity.  The status escalates to
    ``error`` only on critical/high counts, which this scanner never
    produces.

    Args:
        dependencies: Installed dependencies; versions may carry an
            ``==`` prefix.
        feed: Source of advisories.
        oracle: Used to resolve a fix version when the advisory has none.

    Returns:
        A new ``SecurityScan``.
    """
    vulnerabilities: list[Vulnerability] = []
    for dep in dependencies:
        for advisory in feed.advisories(dep.name, dep.version.removeprefix("==")):
            vulnerabilities.append(
                Vulnerability(
                    id=advisory.id,
                    package=dep.name,
                    version=dep.version,
                    severity="medium",
                    description=advisory.description,
                    fixed_in=advisory.fixed_in or oracle.latest(dep.name) or DEFAULT_FIXED_IN,
                )
            )

    critical = high = low = 0
    medium = len(vulnerabilities)

    status = "success"
    if vulnerabilities:
        status = "warning"
        if critical > 0 or high > 0:
            status = "error"

    return SecurityScan(
        critical=critical,
        high=high,
        medium=medium,
        low=low,
        vulnerabilities=vulnerabilities,
        status=status,
    )


def mark_vulnerable(dependencies: Iterable[Dependency], scan: SecurityScan) -> list[Dependency]:
    """Return copies of ``dependencies`` with vulnerable ones re-labelled.

    A vulnerable dependency is no longer reported as ``outdated``; its
    remediation comes from the security suggestion instead.
    """
    flagged = {(v.package, v.version) for v in scan.vulnerabilities}
    return [
        dep.model_copy(update={"status": "vulnerable"}) if (dep.name, dep.version) in flagged else dep
        for dep in dependencies
    ]


def analyze_performance(
    dependencies: Sequence[Dependency],
    large_packages: Sequence[str] = DEFAULT_LARGE_PACKAGES,
    many_packages: int = 20,
    many_outdated: int = 5,
) -> Performance:
    """Apply the size, quantity and staleness heuristics.

    Args:
        dependencies: Installed dependencies.
        large_packages: Names known to be large.
        many_packages: Dependency count above which the environment is
            flagged.
        many_outdated: Outdated count above which updates are recommended.

    Returns:
        A new ``Performance``; status is ``warning`` if any check fired.
    """
    installed = {normalize_name(d.name) for d in dependencies}
    large = [PackageSize(name=pkg, size=LARGE_PACKAGE_SIZE) for pkg in large_packages if normalize_name(pkg) in installed]

    unused: list[str] = []
    optimizations: list[Optimization] = []
    warning = False

    if large:
        warning = True
        optimizations.append(
            Optimization(type="size", description="Large packages may slow down environment", impact="medium")
        )

    if len(dependencies) > many_packages:
        warning = True
        # import analysis isn't implemented; this is a placeholder entry
        unused.append(UNUSED_PLACEHOLDER)
        optimizations.append(
            Optimization(
                type="cleanup",
                description="Remove unused packages to reduce environment size",
                impact="medium",
            )
        )
        optimizations.append(
            Optimization(
                type="quantity",
                description=f"Many packages ({len(dependencies)}), consider streamlining",
                impact="low",
            )
        )

    outdated = sum(1 for d in dependencies if d.status == "outdated")
    if outdated > many_outdated:
        warning = True
        optimizations.append(
            Optimization(
                type="update",
                description=f"Update {outdated} outdated packages for performance improvements",
                impact="high",
            )
        )

    return Performance(
        unused_packages=unused,
        large_packages=large,
        optimizations=optimizations,
        status="warning" if warning else "success",
    )
