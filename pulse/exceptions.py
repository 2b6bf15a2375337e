"""Custom exceptions for pulse."""


class PulseError(Exception):
    """Base exception for all pulse errors."""

    def __init__(self, message: str, details: str = None):
        """Initialize the exception.

        Args:
            message: Main error message
            details: Additional details or suggestions
        """
        self.message = message
        self.details = details
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message.

        Returns:
            Formatted error message with details
        """
        if self.details:
            return f"{self.message}\n\nDetails: {self.details}"
        return self.message


class ConfigurationError(PulseError):
    """Exception raised for configuration and TLS material errors."""

    pass


class ConnectivityError(PulseError):
    """Exception raised when the etcd or Kubernetes API cannot be queried."""

    pass


class HostIPUnknownError(PulseError):
    """Exception raised when a control-plane node reports no internal IP."""

    def __init__(self, node_name: str, addresses: list[tuple[str, str]]):
        self.node_name = node_name
        self.addresses = addresses
        known = ", ".join(f"{kind}={address}" for kind, address in addresses) or "none"
        super().__init__(
            f"Host IP unknown for node {node_name}",
            f"Known addresses: {known}",
        )


class ReconciliationError(PulseError):
    """Base exception for etcd/Kubernetes membership mismatches."""

    pass


class CountMismatchError(ReconciliationError):
    """Exception raised when etcd and Kubernetes report different node counts."""

    def __init__(self, etcd_count: int, kube_count: int):
        self.etcd_count = etcd_count
        self.kube_count = kube_count
        super().__init__(
            "Etcd and Kube nodes count does not match",
            f"etcd reports {etcd_count} member(s), Kubernetes reports "
            f"{kube_count} control-plane node(s)",
        )


class IPMismatchError(ReconciliationError):
    """Exception raised when a node's etcd and Kubernetes IPs disagree."""

    def __init__(self, node_name: str, etcd_ip: str | None, kube_ip: str | None):
        self.node_name = node_name
        self.etcd_ip = etcd_ip
        self.kube_ip = kube_ip
        super().__init__(
            f"IP mismatch for node {node_name}",
            f"etcd: {etcd_ip or 'missing'}, Kubernetes: {kube_ip or 'missing'}",
        )


class NodeUnhealthyError(ReconciliationError):
    """Exception raised when an etcd member failed its health probe."""

    def __init__(self, node_name: str):
        self.node_name = node_name
        super().__init__(f"Etcd member {node_name} is not healthy")


class NodeNotReadyError(ReconciliationError):
    """Exception raised when a control-plane node is not Ready."""

    def __init__(self, node_name: str):
        self.node_name = node_name
        super().__init__(f"Kubernetes node {node_name} is not ready")
