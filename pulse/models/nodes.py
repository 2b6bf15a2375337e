"""Data models for etcd members, Kubernetes nodes and check results."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ClusterHealth(str, Enum):
    """Overall verdict for the etcd member set."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"


class ProbeStatus(str, Enum):
    """Outcome of probing a single etcd member."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    UNREACHABLE = "unreachable"


class ProbeResult(BaseModel):
    """Result of a member health probe.

    ``ip`` is only populated for healthy members; ``endpoint`` is the client
    URL whose response decided the outcome, if any responded.
    """

    model_config = ConfigDict(frozen=True)

    status: ProbeStatus
    ip: str | None = None
    endpoint: str | None = None

    @property
    def healthy(self) -> bool:
        return self.status is ProbeStatus.HEALTHY


class EtcdNode(BaseModel):
    """An etcd cluster member as seen by the health probe."""

    model_config = ConfigDict(frozen=True)

    name: str
    ip: str = ""  # empty for unhealthy or unreachable members
    healthy: bool


class KubeNode(BaseModel):
    """A Kubernetes control-plane node."""

    model_config = ConfigDict(frozen=True)

    name: str
    ip: str
    ready: bool


class EtcdInspection(BaseModel):
    """Members discovered in one etcd inspection pass plus the cluster verdict."""

    model_config = ConfigDict(frozen=True)

    nodes: dict[str, EtcdNode] = Field(default_factory=dict)
    health: ClusterHealth

    @property
    def healthy_count(self) -> int:
        return sum(1 for node in self.nodes.values() if node.healthy)


class ClusterNodeSet(BaseModel):
    """Both views of the control plane, keyed by node name."""

    model_config = ConfigDict(frozen=True)

    etcd_nodes: dict[str, EtcdNode] = Field(default_factory=dict)
    kube_nodes: dict[str, KubeNode] = Field(default_factory=dict)

    def names(self) -> list[str]:
        """Return the union of node names from both views, sorted."""
        return sorted(set(self.etcd_nodes) | set(self.kube_nodes))


class HealthCheckReport(BaseModel):
    """Outcome of a successful health check run."""

    model_config = ConfigDict(frozen=True)

    node_set: ClusterNodeSet
    etcd_health: ClusterHealth
