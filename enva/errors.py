"""Exception hierarchy for enva.

Fatal errors abort the run and are printed by the CLI with an error
marker.  Everything else is caught by the pipeline and folded into the
result's issue list.
"""

from typing import Any


class EnvaError(Exception):
    """Base class for every error raised by enva."""


class EnvironmentNotFound(EnvaError):
    """No candidate directory validated as a virtual environment."""


class InvalidEnvironment(EnvaError):
    """The target path is missing or has none of the venv marker files.

    Attributes:
        path: The path that failed validation.
        info: The ``EnvironmentInfo`` describing the failure
            (integrity ``invalid``, status ``error``), if one was built.
    """

    def __init__(self, path: Any, info: Any = None):
        super().__init__(f"invalid virtual environment at {path}")
        self.path = path
        self.info = info


class ExecutableNotFound(EnvaError):
    """Neither an interpreter nor a package manager binary could be located."""


class InvocationError(EnvaError):
    """A subprocess could not be started, timed out, or exited non-zero."""


class ManifestReadError(EnvaError):
    """The requirements manifest exists but could not be read."""


class SerializationError(EnvaError):
    """A result could not be rendered as JSON."""
