"""Command-line entry point for enva."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

import yaml
from pydantic import ValidationError

from . import __version__
from .config import EnvaConfig, find_config, load_config
from .engine import validate_environment
from .errors import EnvaError, EnvironmentNotFound
from .report import render_json, render_text, write_report
from .venv import detect

logger = logging.getLogger(__name__)

FALLBACK_VENV = Path("venv")

EPILOG = """\
Examples:
  enva                         # Validate current environment
  enva --venv ./venv           # Validate specific venv
  enva --json                  # JSON output for automation

Currently supports:
  • Python virtual environments
  • Basic dependency checking
  • Security vulnerability scanning
  • Performance optimization suggestions
"""


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="enva",
        description="🌿 enva - Environment Validator",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--venv", default="", metavar="PATH", help="Path to virtual environment")
    parser.add_argument("--json", action="store_true", help="Output in JSON format (for CI/CD)")
    parser.add_argument("--version", action="version", version=f"enva v{__version__}", help="Show version")
    parser.add_argument("--config", type=Path, default=None, metavar="PATH", help="YAML configuration file")
    parser.add_argument("--online", action="store_true", help="Query PyPI instead of the built-in tables")
    parser.add_argument("--output", type=Path, default=None, metavar="PATH", help="Also write the report to PATH")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        stream=sys.stderr,
    )


def _load_settings(path: Path | None, online: bool) -> EnvaConfig:
    """Load the config file (explicit or discovered) and apply CLI overrides."""
    path = path or find_config()
    config = load_config(path) if path is not None else EnvaConfig()
    if path is not None:
        logger.debug("loaded configuration from %s", path)
    if online:
        config = config.model_copy(update={"online": True})
    return config


def _resolve_venv(explicit: str) -> Path:
    """Return the explicit path, else an auto-detected one, else ``./venv``."""
    if explicit:
        return Path(explicit)
    logger.info("No venv specified, trying auto-detection...")
    try:
        return detect()
    except EnvironmentNotFound as e:
        logger.info("%s; falling back to %s", e, FALLBACK_VENV)
        return FALLBACK_VENV


def main(argv: Sequence[str] | None = None) -> int:
    """Run enva.

    Returns:
        0 for a success or warning verdict, 1 for an error verdict or a
        fatal validation error.
    """
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = _load_settings(args.config, args.online)
    except (OSError, ValidationError, yaml.YAMLError, ValueError) as e:
        print(f"[❌ ERROR] invalid configuration: {e}")
        return 1

    venv_path = _resolve_venv(args.venv)

    try:
        result = validate_environment(venv_path, config)
    except EnvaError as e:
        print(f"[❌ ERROR] {e}")
        return 1

    output = render_json(result) if args.json else render_text(result)
    print(output, end="" if output.endswith("\n") else "\n")

    if args.output is not None:
        try:
            write_report(args.output, output)
        except OSError as e:
            print(f"[❌ ERROR] failed to write report: {e}")
            return 1
        logger.info("report written to %s", args.output)

    return 1 if result.overall_status == "error" else 0


if __name__ == "__main__":
    raise SystemExit(main())
