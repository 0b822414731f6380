"""Subprocess invocation behind a narrow, mockable interface.

The structure validator and the package enumerator never call
``subprocess`` directly; they go through a ``VersionProbe`` so tests can
substitute canned output without spawning processes.
"""

import logging
import subprocess
from typing import Protocol, Sequence

from .errors import InvocationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class Probe(Protocol):
    def run(self, args: Sequence[str]) -> str:
        """Run ``args`` and return its standard output.

        Raises:
            InvocationError: if the process fails for any reason.
        """
        ...


class VersionProbe:
    """Run a command with a timeout and return its standard output.

    Standard error is kept out of the result so warnings can't be mistaken
    for data; it only appears in ``InvocationError`` messages and debug logs.

    Attributes:
        timeout: Seconds before the child process is killed.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def run(self, args: Sequence[str]) -> str:
        logger.debug("running %s", " ".join(args))
        try:
            proc = subprocess.run(
                list(args),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise InvocationError(f"{args[0]} timed out after {self.timeout:g}s") from e
        except OSError as e:
            raise InvocationError(f"failed to run {args[0]}: {e}") from e

        stderr = (proc.stderr or "").strip()
        if proc.returncode != 0:
            detail = stderr or (proc.stdout or "").strip()
            raise InvocationError(f"{args[0]} exited with status {proc.returncode}: {detail}")
        if stderr:
            logger.debug("%s stderr: %s", args[0], stderr)
        return proc.stdout
