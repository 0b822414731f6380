"""Scoring and remediation suggestions.

The score is the single source of truth for the overall verdict.  It is
computed in one pass over a finished result and never feeds back into
the component statuses it reads.
"""

from .models import Status, Suggestion, ValidationResult

BASELINE = 100

ENV_STATUS_PENALTY = {"error": 30, "warning": 15}
NOT_ACTIVATED_PENALTY = 5
OUTDATED_PENALTY = 3
SEVERITY_PENALTY = {"critical": 25, "high": 15, "medium": 5, "low": 2}
PERFORMANCE_WARNING_PENALTY = 10
ISSUE_PENALTY = {"error": 20, "warning": 10, "info": 5}

SUCCESS_THRESHOLD = 80
WARNING_THRESHOLD = 50


def status_for_score(score: int) -> Status:
    """Map a score to the tri-state verdict."""
    if score >= SUCCESS_THRESHOLD:
        return "success"
    if score >= WARNING_THRESHOLD:
        return "warning"
    return "error"


def calculate_score(result: ValidationResult) -> tuple[int, Status]:
    """Compute the health score and verdict for a result.

    Args:
        result: A result with all component sections filled in.

    Returns:
        ``(score, status)`` with ``score`` clamped to ``[0, 100]``.
    """
    score = BASELINE

    info = result.venv_info
    if info is not None:
        score -= ENV_STATUS_PENALTY.get(info.status, 0)
        if info.activated == "not_activated":
            score -= NOT_ACTIVATED_PENALTY

    score -= OUTDATED_PENALTY * sum(1 for d in result.dependencies if d.status == "outdated")

    security = result.security
    if security is not None:
        score -= SEVERITY_PENALTY["critical"] * security.critical
        score -= SEVERITY_PENALTY["high"] * security.high
        score -= SEVERITY_PENALTY["medium"] * security.medium
        score -= SEVERITY_PENALTY["low"] * security.low

    if result.performance is not None and result.performance.status == "warning":
        score -= PERFORMANCE_WARNING_PENALTY

    for issue in result.issues:
        score -= ISSUE_PENALTY.get(issue.severity, 0)

    score = max(0, min(BASELINE, score))
    return score, status_for_score(score)


def generate_suggestions(result: ValidationResult) -> list[Suggestion]:
    """Derive remediation steps from a result.

    Order is fixed: activation first, then one update per outdated
    dependency, then one fix per vulnerability.
    """
    suggestions: list[Suggestion] = []

    info = result.venv_info
    if info is not None and info.activated == "not_activated":
        suggestions.append(
            Suggestion(
                type="config",
                description="Activate virtual environment for development",
                command=f"source {info.path}/bin/activate",
                auto_fixable=False,
                priority="medium",
            )
        )

    for dep in result.dependencies:
        if dep.status == "outdated" and dep.latest:
            suggestions.append(
                Suggestion(
                    type="update",
                    description=f"Update {dep.name} to version {dep.latest}",
                    command=f"pip install {dep.name}=={dep.latest}",
                    auto_fixable=True,
                    priority="high",
                )
            )

    if result.security is not None:
        for vuln in result.security.vulnerabilities:
            suggestions.append(
                Suggestion(
                    type="security",
                    description=f"Fix vulnerability {vuln.id} in {vuln.package}",
                    command=f"pip install {vuln.package}=={vuln.fixed_in}",
                    auto_fixable=True,
                    priority="high",
                )
            )

    return suggestions
