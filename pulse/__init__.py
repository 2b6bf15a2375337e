"""Pulse - etcd and Kubernetes control-plane consistency checks."""

__version__ = "0.1.0"
