"""Etcd member probing and cluster inspection."""

from pulse.etcd.inspector import EtcdClusterInspector, classify_cluster_health
from pulse.etcd.prober import MemberHealthProber, decode_health, extract_ipv4

__all__ = [
    "EtcdClusterInspector",
    "MemberHealthProber",
    "classify_cluster_health",
    "decode_health",
    "extract_ipv4",
]
