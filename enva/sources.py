"""Version and vulnerability data sources.

The scanners only see the ``VersionOracle`` and ``VulnerabilityFeed``
interfaces.  The static implementations here are backed by in-memory
tables; ``enva.pypi`` provides network-backed ones.
"""

from dataclasses import dataclass
from typing import Iterable, Protocol

from .config import DEFAULT_KNOWN_VULNERABILITIES, DEFAULT_LATEST_VERSIONS, KnownVulnerability


@dataclass(frozen=True)
class Advisory:
    """A single advisory affecting one package version.

    Attributes:
        id: Advisory identifier (CVE, GHSA, PYSEC...).
        description: Short description.
        fixed_in: First fixed version when the source knows it.
    """

    id: str
    description: str
    fixed_in: str | None = None


class VersionOracle(Protocol):
    def latest(self, name: str) -> str | None:
        """Return the latest known version of ``name``, or None if unknown."""
        ...


class VulnerabilityFeed(Protocol):
    def advisories(self, name: str, version: str) -> list[Advisory]:
        """Return advisories affecting ``name`` at exactly ``version``."""
        ...


def normalize_name(name: str) -> str:
    return name.strip().lower()


class StaticVersionOracle:
    """Latest-version lookups from a fixed name → version table."""

    def __init__(self, table: dict[str, str] | None = None):
        source = DEFAULT_LATEST_VERSIONS if table is None else table
        self._table = {normalize_name(k): v for k, v in source.items()}

    def latest(self, name: str) -> str | None:
        return self._table.get(normalize_name(name))


class StaticVulnerabilityFeed:
    """Exact-version matches against a fixed known-vulnerable table."""

    def __init__(self, entries: Iterable[KnownVulnerability] | None = None):
        self._entries = list(DEFAULT_KNOWN_VULNERABILITIES if entries is None else entries)

    def advisories(self, name: str, version: str) -> list[Advisory]:
        key = normalize_name(name)
        return [
            Advisory(id=e.id, description=e.description or f"Security vulnerability in {name}", fixed_in=e.fixed_in)
            for e in self._entries
            if e.package == key and e.version == version
        ]
