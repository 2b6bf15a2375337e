"""Cross-checks the etcd and Kubernetes views of the control plane."""

from concurrent.futures import ThreadPoolExecutor

from pulse.etcd.inspector import EtcdClusterInspector
from pulse.exceptions import (
    CountMismatchError,
    IPMismatchError,
    NodeNotReadyError,
    NodeUnhealthyError,
)
from pulse.kube import KubeNodeInspector
from pulse.logging_config import get_logger
from pulse.models.nodes import ClusterNodeSet, EtcdNode, HealthCheckReport, KubeNode

logger = get_logger(__name__)


def reconcile(
    etcd_nodes: dict[str, EtcdNode],
    kube_nodes: dict[str, KubeNode],
    require_health: bool = True,
) -> None:
    """Verify that both views describe the same set of machines.

    The first mismatch found is raised; when several exist, which one is
    reported depends on iteration order.

    Args:
        etcd_nodes: etcd members keyed by name
        kube_nodes: Kubernetes control-plane nodes keyed by name
        require_health: Also require healthy members and Ready nodes

    Raises:
        CountMismatchError: If the two views have different sizes
        IPMismatchError: If a name is missing on one side or the IPs differ
        NodeUnhealthyError: If an etcd member is unhealthy (require_health only)
        NodeNotReadyError: If a Kubernetes node is not Ready (require_health only)
    """
    if len(etcd_nodes) != len(kube_nodes):
        logger.warning(
            f"Etcd and Kube nodes count does not match: {len(etcd_nodes)} != {len(kube_nodes)}"
        )
        raise CountMismatchError(len(etcd_nodes), len(kube_nodes))

    for name, etcd_node in etcd_nodes.items():
        kube_node = kube_nodes.get(name)
        if kube_node is None or kube_node.ip != etcd_node.ip:
            kube_ip = kube_node.ip if kube_node else None
            logger.warning(f"IP mismatch for node {name}: etcd={etcd_node.ip} kube={kube_ip}")
            raise IPMismatchError(name, etcd_node.ip, kube_ip)

    for name, kube_node in kube_nodes.items():
        if name not in etcd_nodes:
            logger.warning(f"IP mismatch for node {name}: missing from etcd")
            raise IPMismatchError(name, None, kube_node.ip)

    if not require_health:
        return

    for name, etcd_node in etcd_nodes.items():
        if not etcd_node.healthy:
            logger.warning(f"etcd member {name} is not healthy")
            raise NodeUnhealthyError(name)
        if not kube_nodes[name].ready:
            logger.warning(f"Kubernetes node {name} is not ready")
            raise NodeNotReadyError(name)


def run_health_check(
    etcd_inspector: EtcdClusterInspector,
    kube_inspector: KubeNodeInspector,
    require_health: bool = True,
) -> HealthCheckReport:
    """Inspect etcd and Kubernetes concurrently, then reconcile.

    Either inspection failing fails the whole run before any reconciliation.

    Returns:
        HealthCheckReport with both node views and the etcd verdict
    """
    with ThreadPoolExecutor(max_workers=2) as executor:
        etcd_future = executor.submit(etcd_inspector.inspect)
        kube_future = executor.submit(kube_inspector.inspect)
        etcd_inspection = etcd_future.result()
        kube_nodes = kube_future.result()

    node_set = ClusterNodeSet(etcd_nodes=etcd_inspection.nodes, kube_nodes=kube_nodes)
    logger.info(
        f"etcd cluster is {etcd_inspection.health.value}; "
        f"{len(node_set.etcd_nodes)} etcd member(s), {len(node_set.kube_nodes)} control-plane node(s)"
    )

    reconcile(node_set.etcd_nodes, node_set.kube_nodes, require_health=require_health)
    logger.info("Etcd and Kube master node IP matched")
    return HealthCheckReport(node_set=node_set, etcd_health=etcd_inspection.health)
