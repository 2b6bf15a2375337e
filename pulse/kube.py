"""Kubernetes control-plane node discovery."""

from collections import defaultdict
from collections.abc import Callable

from pulse.exceptions import ConnectivityError, HostIPUnknownError
from pulse.logging_config import get_logger
from pulse.models.nodes import KubeNode

logger = get_logger(__name__)

CONTROL_PLANE_LABELS = (
    "node-role.kubernetes.io/control-plane",
    "node-role.kubernetes.io/master",
)

NodePredicate = Callable[[object], bool]


def name_contains(fragment: str) -> NodePredicate:
    """Match nodes whose name contains ``fragment`` (e.g. "master")."""

    def predicate(node) -> bool:
        return fragment in (node.metadata.name or "")

    return predicate


def has_control_plane_label(node) -> bool:
    """Match nodes carrying a control-plane or master role label."""
    labels = node.metadata.labels or {}
    return any(label in labels for label in CONTROL_PLANE_LABELS)


def any_of(*predicates: NodePredicate) -> NodePredicate:
    """Combine predicates; a node matches if any of them matches."""

    def predicate(node) -> bool:
        return any(p(node) for p in predicates)

    return predicate


def get_node_host_ip(node) -> str:
    """Return the node's first InternalIP address.

    Raises:
        HostIPUnknownError: If the node reports no InternalIP address
    """
    addresses = node.status.addresses or []
    by_type = defaultdict(list)
    for address in addresses:
        by_type[address.type].append(address.address)

    if by_type.get("InternalIP"):
        return by_type["InternalIP"][0]

    raise HostIPUnknownError(
        node.metadata.name, [(address.type, address.address) for address in addresses]
    )


def is_ready(node) -> bool:
    """Return False only if a Ready condition reports a status other than "True"."""
    for condition in node.status.conditions or []:
        if condition.type == "Ready" and condition.status != "True":
            return False
    return True


class KubeNodeInspector:
    """Collects control-plane nodes from the Kubernetes API."""

    def __init__(self, core_v1, is_control_plane: NodePredicate):
        """Initialize the inspector.

        Args:
            core_v1: ``kubernetes.client.CoreV1Api`` or an equivalent
            is_control_plane: Predicate selecting control-plane nodes
        """
        self.core_v1 = core_v1
        self.is_control_plane = is_control_plane

    def inspect(self) -> dict[str, KubeNode]:
        """List control-plane nodes with their internal IP and readiness.

        Raises:
            ConnectivityError: If nodes cannot be listed
            HostIPUnknownError: If a control-plane node has no internal IP
        """
        logger.info("Getting Kubernetes node info")
        try:
            response = self.core_v1.list_node()
        except Exception as e:
            logger.error(f"Failed to list Kubernetes nodes: {e}")
            raise ConnectivityError(
                "Failed to list Kubernetes nodes",
                f"{e}\nCheck the kubeconfig and that the API server is reachable",
            )

        nodes = {}
        for node in response.items or []:
            if not self.is_control_plane(node):
                continue
            name = node.metadata.name
            nodes[name] = KubeNode(name=name, ip=get_node_host_ip(node), ready=is_ready(node))
            logger.debug(f"control-plane node {name}: {nodes[name].ip} ready={nodes[name].ready}")

        logger.info(f"Found {len(nodes)} control-plane node(s)")
        return nodes
