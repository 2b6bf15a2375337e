"""Health probing for individual etcd members.

etcd serves ``GET /health`` on every client URL. Depending on the server
version the body is either ``{"health": "true"}`` or ``{"health": true}``;
``decode_health`` hides that difference and only ever returns a bool.
"""

import json
import re

import requests

from pulse.logging_config import get_logger
from pulse.models.nodes import ProbeResult, ProbeStatus

logger = get_logger(__name__)

HEALTH_PATH = "/health"

_IPV4_PATTERN = re.compile(r"([0-9]{1,3}[.]){3}[0-9]{1,3}")


class HealthDecodeError(ValueError):
    """Raised when a /health body matches neither known response shape."""

    pass


def extract_ipv4(url: str) -> str | None:
    """Return the first IPv4 dotted quad found in ``url``, if any."""
    match = _IPV4_PATTERN.search(url)
    return match.group(0) if match else None


def decode_health(body: bytes | str) -> bool:
    """Decode a /health response body into a bool.

    The string form is tried first, then the boolean form.

    Raises:
        HealthDecodeError: If the body matches neither shape
    """
    try:
        data = json.loads(body)
    except (TypeError, ValueError, RecursionError) as e:
        raise HealthDecodeError(f"invalid JSON: {e}")

    # A null body, a missing or null flag, or any string other than "true" is unhealthy
    if data is None:
        return False
    if not isinstance(data, dict):
        raise HealthDecodeError(f"unexpected health response: {body[:64]!r}")

    # Field names match case-insensitively; the last matching key wins
    value = None
    for key, item in data.items():
        if key.lower() == "health":
            value = item
    if value is None:
        return False
    if isinstance(value, str):
        return value == "true"
    if isinstance(value, bool):
        return value
    raise HealthDecodeError(f"unexpected health value: {value!r}")


class MemberHealthProber:
    """Probes one etcd member over its advertised client URLs."""

    def __init__(self, session: requests.Session, timeout: float = 30.0):
        """Initialize the prober.

        Args:
            session: HTTP session already configured with the etcd TLS material
            timeout: Connect and read timeout for each request, in seconds
        """
        self.session = session
        self.timeout = timeout

    def probe(self, member_id: str, client_urls: list[str]) -> ProbeResult:
        """Check one member's health.

        URLs are tried in order and the first one that answers with a
        decodable body decides the result; the rest are skipped.

        Args:
            member_id: Member identifier used in log lines
            client_urls: The member's advertised client URLs

        Returns:
            ProbeResult with status healthy, unhealthy or unreachable
        """
        if not client_urls:
            logger.warning(f"member {member_id} is unreachable: no available published client urls")
            return ProbeResult(status=ProbeStatus.UNREACHABLE)

        for url in client_urls:
            try:
                healthy = self._check(url)
            except (requests.RequestException, HealthDecodeError) as e:
                logger.warning(f"failed to check the health of member {member_id} on {url}: {e}")
                continue

            if healthy:
                logger.info(f"member {member_id} is healthy: got healthy result from {url}")
                return ProbeResult(status=ProbeStatus.HEALTHY, ip=extract_ipv4(url), endpoint=url)

            logger.warning(f"member {member_id} is unhealthy: got unhealthy result from {url}")
            return ProbeResult(status=ProbeStatus.UNHEALTHY, endpoint=url)

        logger.warning(f"member {member_id} is unreachable: {client_urls} are all unreachable")
        return ProbeResult(status=ProbeStatus.UNREACHABLE)

    def _check(self, url: str) -> bool:
        # Status codes are ignored: an unhealthy etcd answers 503 with a valid body
        response = self.session.get(url.rstrip("/") + HEALTH_PATH, timeout=self.timeout)
        try:
            body = response.content
        finally:
            response.close()
        return decode_health(body)

    def close(self) -> None:
        self.session.close()


def build_session(ca_cert_path: str, cert_path: str, key_path: str) -> requests.Session:
    """Create an HTTP session that authenticates to etcd with mutual TLS."""
    session = requests.Session()
    session.verify = ca_cert_path
    session.cert = (cert_path, key_path)
    return session
