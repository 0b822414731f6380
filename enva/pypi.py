"""PyPI-backed version oracle and vulnerability feed.

Used in online mode in place of the static tables.  All network I/O is
isolated here; lookups that fail are logged and treated as "unknown" so
a flaky index never aborts a validation run.
"""

import logging
from typing import Any

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from . import __version__
from .sources import Advisory, normalize_name

logger = logging.getLogger(__name__)

PYPI_BASE_URL = "https://pypi.org/pypi"

DEFAULT_HTTP_TIMEOUT = 10.0


def requests_session() -> requests.Session:
    """Create a requests session with enva's headers.

    Returns:
        Configured ``requests.Session``.
    """
    s = requests.Session()
    s.headers.update(
        {
            "User-Agent": f"enva/{__version__}",
            "Accept": "application/json",
        }
    )
    return s


@retry(
    retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
    reraise=True,
)
def get_json(session: requests.Session, url: str, timeout: float = DEFAULT_HTTP_TIMEOUT) -> Any | None:
    """Fetch JSON from a URL, retrying connection failures.

    Args:
        session: Requests session.
        url: URL to fetch.
        timeout: Per-request timeout in seconds.

    Returns:
        Parsed JSON data, or None if the resource does not exist.
    """
    r = session.get(url, timeout=timeout)
    if r.status_code == 404:
        return None
    r.raise_for_status()
    return r.json()


class PyPIVersionOracle:
    """Latest release lookups against the PyPI JSON API.

    Attributes:
        session: Requests session shared by all lookups.
        timeout: Per-request timeout in seconds.
    """

    def __init__(self, session: requests.Session | None = None, timeout: float = DEFAULT_HTTP_TIMEOUT):
        self.session = session or requests_session()
        self.timeout = timeout
        self._cache: dict[str, str | None] = {}

    def latest(self, name: str) -> str | None:
        key = normalize_name(name)
        if key not in self._cache:
            self._cache[key] = self._fetch(key)
        return self._cache[key]

    def _fetch(self, name: str) -> str | None:
        try:
            data = get_json(self.session, f"{PYPI_BASE_URL}/{name}/json", self.timeout)
        except (requests.RequestException, ValueError) as e:
            logger.warning("PyPI lookup for %s failed: %s", name, e)
            return None
        if not isinstance(data, dict):
            return None
        version = (data.get("info") or {}).get("version")
        return str(version) if version else None


class PyPIVulnerabilityFeed:
    """Advisories from the ``vulnerabilities`` list of a PyPI release.

    Attributes:
        session: Requests session shared by all lookups.
        timeout: Per-request timeout in seconds.
    """

    def __init__(self, session: requests.Session | None = None, timeout: float = DEFAULT_HTTP_TIMEOUT):
        self.session = session or requests_session()
        self.timeout = timeout
        self._cache: dict[tuple[str, str], list[Advisory]] = {}

    def advisories(self, name: str, version: str) -> list[Advisory]:
        key = (normalize_name(name), version)
        if key not in self._cache:
            self._cache[key] = self._fetch(*key)
        return list(self._cache[key])

    def _fetch(self, name: str, version: str) -> list[Advisory]:
        try:
            data = get_json(self.session, f"{PYPI_BASE_URL}/{name}/{version}/json", self.timeout)
        except (requests.RequestException, ValueError) as e:
            logger.warning("PyPI advisory lookup for %s==%s failed: %s", name, version, e)
            return []
        if not isinstance(data, dict):
            return []

        results: list[Advisory] = []
        for vuln in data.get("vulnerabilities") or []:
            if not isinstance(vuln, dict) or vuln.get("withdrawn"):
                continue
            aliases = [a for a in vuln.get("aliases") or [] if str(a).startswith("CVE-")]
            advisory_id = aliases[0] if aliases else str(vuln.get("id") or "UNKNOWN")
            fixed = vuln.get("fixed_in") or []
            results.append(
                Advisory(
                    id=advisory_id,
                    description=str(vuln.get("summary") or vuln.get("details") or f"Security vulnerability in {name}"),
                    fixed_in=str(fixed[0]) if fixed else None,
                )
            )
        return results
