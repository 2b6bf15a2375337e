"""Etcd cluster membership and health inspection."""

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from pulse.etcd.prober import MemberHealthProber, extract_ipv4
from pulse.exceptions import ConnectivityError
from pulse.logging_config import get_logger
from pulse.models.nodes import (
    ClusterHealth,
    EtcdInspection,
    EtcdNode,
    ProbeResult,
    ProbeStatus,
)

logger = get_logger(__name__)


def classify_cluster_health(healthy: int, total: int) -> ClusterHealth:
    """Derive the cluster verdict from member counts.

    Args:
        healthy: Number of members that probed healthy
        total: Number of listed members

    Returns:
        HEALTHY when every member is healthy, UNAVAILABLE when none is,
        DEGRADED otherwise
    """
    if healthy == total:
        return ClusterHealth.HEALTHY
    if healthy == 0:
        return ClusterHealth.UNAVAILABLE
    return ClusterHealth.DEGRADED


def _member_id(member) -> str:
    return f"{member.id:x}" if isinstance(member.id, int) else str(member.id)


class EtcdClusterInspector:
    """Lists etcd members and probes each one independently."""

    def __init__(
        self,
        etcd_client,
        prober_factory: Callable[[], MemberHealthProber],
        max_workers: int = 8,
    ):
        """Initialize the inspector.

        Args:
            etcd_client: Client exposing ``members`` (e.g. ``etcd3.Etcd3Client``)
            prober_factory: Returns a fresh prober, one per member
            max_workers: Upper bound on concurrent member probes
        """
        self.etcd_client = etcd_client
        self.prober_factory = prober_factory
        self.max_workers = max_workers

    def list_members(self) -> list:
        """List cluster members.

        Raises:
            ConnectivityError: If the member list cannot be fetched
        """
        logger.info("Getting Etcd Cluster Info")
        try:
            members = list(self.etcd_client.members)
        except Exception as e:
            logger.error(f"Failed to list etcd members: {e}")
            raise ConnectivityError(
                "cluster may be unhealthy: failed to list members",
                f"{e}\nCheck that etcd is running and the TLS material is valid",
            )
        logger.debug(f"etcd reports {len(members)} member(s)")
        return members

    def inspect(self) -> EtcdInspection:
        """Probe every member and aggregate the cluster verdict.

        Returns:
            EtcdInspection with one EtcdNode per member name

        Raises:
            ConnectivityError: If the member list cannot be fetched
        """
        members = self.list_members()
        if not members:
            return EtcdInspection(nodes={}, health=classify_cluster_health(0, 0))

        workers = max(1, min(self.max_workers, len(members)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(self._probe_member, members))

        nodes = {}
        for member, result in zip(members, results):
            if member.name in nodes:
                logger.warning(f"duplicate etcd member name {member.name!r}, keeping the last one")
            nodes[member.name] = self._to_node(member, result)

        healthy = sum(1 for result in results if result.healthy)
        health = classify_cluster_health(healthy, len(members))
        logger.info(f"cluster is {health.value} ({healthy}/{len(members)} members healthy)")
        return EtcdInspection(nodes=nodes, health=health)

    def _probe_member(self, member) -> ProbeResult:
        prober = self.prober_factory()
        try:
            return prober.probe(_member_id(member), list(member.client_urls or []))
        except Exception as e:
            # One member's failure never aborts the inspection of the others
            logger.warning(f"member {_member_id(member)} is unreachable: probe failed: {e}")
            return ProbeResult(status=ProbeStatus.UNREACHABLE)
        finally:
            prober.close()

    @staticmethod
    def _to_node(member, result: ProbeResult) -> EtcdNode:
        if not result.healthy:
            return EtcdNode(name=member.name, ip="", healthy=False)

        ip = result.ip
        if ip is None:
            # Hostname-based client URL; identify the member by its peer URL instead
            ip = next(
                (found for found in map(extract_ipv4, member.peer_urls or []) if found), ""
            )
            if not ip:
                logger.warning(f"member {member.name} advertises no IPv4 address")
        return EtcdNode(name=member.name, ip=ip, healthy=True)
