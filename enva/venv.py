"""Virtual environment discovery, structure validation and package listing.

All process invocation goes through a ``Probe`` (see ``enva.probe``);
everything else here is filesystem inspection.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Sequence

from .errors import EnvironmentNotFound, ExecutableNotFound, InvalidEnvironment, InvocationError
from .models import EnvironmentInfo
from .probe import Probe

logger = logging.getLogger(__name__)

VENV_DIR_NAMES = ("venv", ".venv", "env", ".env")

MARKER_FILES = (
    ("bin", "python"),
    ("bin", "activate"),
    ("pyvenv.cfg",),
    ("Scripts", "python.exe"),
    ("Scripts", "activate.bat"),
)

PYTHON_CANDIDATES = (
    ("bin", "python"),
    ("bin", "python3"),
    ("Scripts", "python.exe"),
    ("Scripts", "python3.exe"),
)

PIP_CANDIDATES = (
    ("bin", "pip"),
    ("bin", "pip3"),
    ("Scripts", "pip.exe"),
    ("Scripts", "pip3.exe"),
)

WINDOWS_EXECUTABLE_SUFFIXES = (".exe", ".bat", ".cmd")


def is_valid(path: Path | str) -> bool:
    """Check whether ``path`` looks like a virtual environment.

    Args:
        path: Candidate directory.

    Returns:
        True if it exists and holds at least one marker file.
    """
    if not path:
        return False
    root = Path(path)
    if not root.exists():
        return False
    return any(root.joinpath(*parts).exists() for parts in MARKER_FILES)


def detect(start: Path | None = None, environ: Mapping[str, str] | None = None) -> Path:
    """Auto-detect a virtual environment.

    Checks ``start`` (default: cwd) and each ancestor for one of the
    conventional directory names, then falls back to ``VIRTUAL_ENV``.

    Args:
        start: Directory to begin the upward search from.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        Path of the first directory that passes ``is_valid``.

    Raises:
        EnvironmentNotFound: if no candidate validates.
    """
    env = os.environ if environ is None else environ
    directory = (start or Path.cwd()).absolute()

    for candidate_dir in (directory, *directory.parents):
        for name in VENV_DIR_NAMES:
            candidate = candidate_dir / name
            if is_valid(candidate):
                logger.debug("detected virtual environment at %s", candidate)
                return candidate

    active = env.get("VIRTUAL_ENV")
    if active and is_valid(active):
        logger.debug("using active virtual environment %s", active)
        return Path(active)

    raise EnvironmentNotFound("no virtual environment found")


def is_executable(path: Path) -> bool:
    """Check that ``path`` is a file the OS would run.

    On Windows that means an executable extension; elsewhere an
    executable permission bit.
    """
    try:
        mode = path.stat().st_mode
    except OSError:
        return False
    if os.name == "nt":
        return path.suffix.lower() in WINDOWS_EXECUTABLE_SUFFIXES
    return bool(mode & 0o111)


def _first_executable(venv_path: Path, candidates: Sequence[tuple[str, ...]]) -> Path | None:
    for parts in candidates:
        candidate = venv_path.joinpath(*parts)
        if is_executable(candidate):
            return candidate
    return None


def find_python(venv_path: Path | str) -> Path | None:
    return _first_executable(Path(venv_path), PYTHON_CANDIDATES)


def find_pip(venv_path: Path | str) -> Path | None:
    return _first_executable(Path(venv_path), PIP_CANDIDATES)


def pip_command(venv_path: Path | str) -> list[str]:
    """Build the argv prefix for invoking the environment's pip.

    Prefers a pip binary; falls back to ``python -m pip``.

    Raises:
        ExecutableNotFound: if neither pip nor python is present.
    """
    pip = find_pip(venv_path)
    if pip is not None:
        return [str(pip)]
    python = find_python(venv_path)
    if python is not None:
        return [str(python), "-m", "pip"]
    raise ExecutableNotFound(f"pip executable not found in {venv_path}")


def get_python_version(venv_path: Path | str, probe: Probe) -> str:
    """Return the interpreter version, e.g. ``3.11.4``.

    Raises:
        ExecutableNotFound: if no interpreter is present.
        InvocationError: if the interpreter could not be run.
    """
    python = find_python(venv_path)
    if python is None:
        raise ExecutableNotFound("Python executable not found in venv")
    version = probe.run([str(python), "--version"]).strip()
    return version.removeprefix("Python ")


def get_pip_version(venv_path: Path | str, probe: Probe) -> str:
    """Return the pip version from ``pip X.Y from ... (python A.B)``.

    Raises:
        ExecutableNotFound: if neither pip nor python is present.
        InvocationError: if pip could not be run.
    """
    output = probe.run([*pip_command(venv_path), "--version"]).strip()
    parts = output.split()
    if len(parts) >= 2:
        return parts[1]
    return "unknown"


def is_activated(venv_path: Path | str, environ: Mapping[str, str] | None = None) -> bool:
    """Check whether ``VIRTUAL_ENV`` points at ``venv_path``."""
    env = os.environ if environ is None else environ
    current = env.get("VIRTUAL_ENV")
    if not current:
        return False
    return os.path.abspath(venv_path) == os.path.abspath(current)


def validate_structure(
    venv_path: Path | str,
    probe: Probe,
    environ: Mapping[str, str] | None = None,
) -> EnvironmentInfo:
    """Validate a virtual environment's layout and query its tool versions.

    Version lookups that fail downgrade the status to ``warning`` and
    record the error text in place of the version; they never abort.

    Args:
        venv_path: Environment directory.
        probe: Subprocess runner used for version queries.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        Populated ``EnvironmentInfo``.

    Raises:
        InvalidEnvironment: if the directory is missing or has no markers.
    """
    path = str(venv_path)
    if not is_valid(venv_path):
        info = EnvironmentInfo(path=path, integrity="invalid", status="error")
        raise InvalidEnvironment(path, info)

    status = "success"

    try:
        python_version = get_python_version(venv_path, probe)
    except (ExecutableNotFound, InvocationError) as e:
        logger.warning("could not query Python version: %s", e)
        status = "warning"
        python_version = f"error: {e}"

    try:
        pip_version = get_pip_version(venv_path, probe)
    except (ExecutableNotFound, InvocationError) as e:
        logger.warning("could not query pip version: %s", e)
        status = "warning"
        pip_version = f"error: {e}"

    if is_activated(venv_path, environ):
        activated = "activated"
    else:
        activated = "not_activated"
        status = "warning"

    return EnvironmentInfo(
        path=path,
        python_version=python_version,
        pip_version=pip_version,
        activated=activated,
        integrity="valid",
        status=status,
    )


def parse_freeze_output(text: str) -> dict[str, str]:
    """Parse ``name==version`` lines into a mapping.

    Lines without ``==`` (editable installs, ``@ file://`` references,
    warnings) are dropped.  A repeated name overwrites the earlier entry.

    Args:
        text: Output of ``pip list --format=freeze``.

    Returns:
        Dict of package name to version string.
    """
    packages: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or "==" not in line:
            continue
        name, version = line.split("==", 1)
        packages[name.strip()] = version.strip()
    return packages


def list_installed_packages(venv_path: Path | str, probe: Probe) -> dict[str, str]:
    """List the packages installed in a virtual environment.

    Raises:
        ExecutableNotFound: if no pip (or python) binary is present.
        InvocationError: if pip exits non-zero.
    """
    output = probe.run([*pip_command(venv_path), "list", "--format=freeze"])
    packages = parse_freeze_output(output)
    logger.debug("found %d installed packages", len(packages))
    return packages
