"""Report rendering: a Jinja2 text template and a JSON serializer.

The default template lives at ``enva/templates/report.txt.j2``.
"""

import datetime as dt
import json
import logging
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .errors import SerializationError
from .models import Dependency, ValidationResult
from .scanners import is_older

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = Path(__file__).parent / "templates"

STATUS_ICONS = {
    "uptodate": "✅",
    "outdated": "⚠️",
    "vulnerable": "❌",
    "missing": "❌",
    "success": "✅",
    "warning": "⚠️",
    "error": "❌",
    "info": "ℹ️",
}

# List fields dropped from the JSON payload when empty.
_OMIT_WHEN_EMPTY = {"dependencies", "vulnerabilities", "unused_packages", "large_packages", "optimizations"}

JSON_ERROR_PAYLOAD = '{"error": "failed to marshal result"}'


def status_icon(status: str) -> str:
    return STATUS_ICONS.get(status, "❓")


def version_status(value: str) -> str:
    """Status of a version string reported by ``validate_structure``."""
    return "error" if value.startswith("error:") else "success"


def dependency_section_status(deps: list[Dependency]) -> str:
    """Roll dependency statuses up into one section status.

    Any vulnerable package makes the section an error; any outdated one
    makes it a warning.
    """
    status = "success"
    for dep in deps:
        if dep.status == "vulnerable":
            return "error"
        if dep.status == "outdated":
            status = "warning"
    return status


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(default_for_string=False, default=False),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["icon"] = status_icon
    env.filters["version_status"] = version_status
    env.tests["older_than"] = is_older
    return env


def render_text(result: ValidationResult, now: dt.datetime | None = None) -> str:
    """Render the human-readable report.

    Args:
        result: Finished validation result.
        now: Timestamp for the header; defaults to local time.

    Returns:
        The report text.
    """
    template = _environment().get_template("report.txt.j2")
    return template.render(
        result=result,
        timestamp=(now or dt.datetime.now()).strftime("%H:%M:%S"),
        dependency_status=dependency_section_status(result.dependencies),
    )


def _prune(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _prune(v) for k, v in value.items() if not (k in _OMIT_WHEN_EMPTY and v == [])}
    if isinstance(value, list):
        return [_prune(v) for v in value]
    return value


def to_json(result: ValidationResult) -> str:
    """Serialize a result with 2-space indentation.

    ``None`` fields and empty optional lists are omitted.

    Raises:
        SerializationError: if the result can't be serialized.
    """
    try:
        payload = _prune(result.model_dump(mode="json", exclude_none=True))
        return json.dumps(payload, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"failed to serialize result: {e}") from e


def render_json(result: ValidationResult) -> str:
    """Render the machine-readable report.

    Never raises: on failure a fixed single-line error object is
    returned instead.
    """
    try:
        return to_json(result)
    except SerializationError as e:
        logger.error("%s", e)
        return JSON_ERROR_PAYLOAD


def write_report(path: Path, text: str) -> None:
    """Write a rendered report atomically (write-then-rename).

    Args:
        path: Destination file; parent directories are created.
        text: Rendered report.

    Raises:
        OSError: if the file can't be written; the temporary file is
            removed first.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as f:
            f.write(text)
        tmp.replace(path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
