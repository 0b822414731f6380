"""Requirements manifest parsing.

Deliberately separate from the installed-package enumerator: the two
mappings are never cross-referenced here.
"""

from pathlib import Path

from .errors import ManifestReadError
from .models import Issue

MANIFEST_NAME = "requirements.txt"

PROJECT_MARKERS = ("requirements.txt", "pyproject.toml", "setup.py", "Pipfile", ".git")


def parse_requirement_line(line: str) -> tuple[str, str] | None:
    """Parse one manifest line into ``(name, constraint)``.

    Only ``==`` and ``>=`` are understood; anything else is taken as a
    bare package name with an empty constraint.

    Args:
        line: Raw line from the manifest.

    Returns:
        ``(name, constraint)``, or None for blank and comment lines.
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    for op in ("==", ">="):
        if op in line:
            name, version = line.split(op, 1)
            return name.strip(), op + version.strip()
    return line, ""


def parse_requirements(path: Path) -> dict[str, str]:
    """Parse a requirements file into a name → constraint mapping.

    Args:
        path: Path to the manifest.

    Returns:
        Dict such as ``{"requests": "==2.31.0", "flask": ">=2.0", "rich": ""}``.

    Raises:
        ManifestReadError: if the file cannot be read or decoded.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestReadError(f"failed to read {path}: {e}") from e

    result: dict[str, str] = {}
    for line in content.splitlines():
        parsed = parse_requirement_line(line)
        if parsed is not None:
            name, constraint = parsed
            result[name] = constraint
    return result


def find_project_root(venv_path: Path | str) -> Path:
    """Locate the project that owns a virtual environment.

    Walks upward from the environment's parent directory looking for a
    project marker file or directory.

    Returns:
        The first directory holding a marker, or the venv's parent.
    """
    start = Path(venv_path).absolute().parent
    for directory in (start, *start.parents):
        if any((directory / marker).exists() for marker in PROJECT_MARKERS):
            return directory
    return start


def find_manifest(venv_path: Path | str) -> Path | None:
    manifest = find_project_root(venv_path) / MANIFEST_NAME
    return manifest if manifest.is_file() else None


def detect_drift(installed: dict[str, str], manifest: dict[str, str]) -> list[Issue]:
    """Compare the manifest against the installed set.

    Reconciliation is not implemented yet; this stage exists so that it
    can be filled in without touching either parser.
    """
    return []
