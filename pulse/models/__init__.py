"""Data models for etcd and Kubernetes node views."""

from pulse.models.nodes import (
    ClusterHealth,
    ClusterNodeSet,
    EtcdInspection,
    EtcdNode,
    HealthCheckReport,
    KubeNode,
    ProbeResult,
    ProbeStatus,
)

__all__ = [
    "ClusterHealth",
    "ClusterNodeSet",
    "EtcdInspection",
    "EtcdNode",
    "HealthCheckReport",
    "KubeNode",
    "ProbeResult",
    "ProbeStatus",
]
