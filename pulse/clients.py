"""Construction of authenticated etcd, HTTP and Kubernetes clients."""

from pathlib import Path

import etcd3
from kubernetes import client, config

from pulse.config import HealthCheckConfig
from pulse.etcd.prober import MemberHealthProber, build_session
from pulse.exceptions import ConfigurationError, ConnectivityError
from pulse.logging_config import get_logger

logger = get_logger(__name__)


def create_etcd_client(settings: HealthCheckConfig) -> etcd3.Etcd3Client:
    """Create an etcd client bound to the configured endpoint over mutual TLS.

    Raises:
        ConnectivityError: If the client cannot be constructed
    """
    host, port = settings.etcd_host_port()
    logger.debug(f"Connecting to etcd at {host}:{port}")
    try:
        return etcd3.client(
            host=host,
            port=port,
            ca_cert=settings.ca_cert_path,
            cert_cert=settings.cert_path,
            cert_key=settings.key_path,
            timeout=settings.probe_timeout,
        )
    except Exception as e:
        raise ConnectivityError(f"Failed to create etcd client for {settings.etcd_endpoint}", str(e))


def prober_factory(settings: HealthCheckConfig):
    """Return a callable building a fresh prober with its own TLS session."""

    def factory() -> MemberHealthProber:
        session = build_session(*settings.tls_files())
        return MemberHealthProber(session, timeout=settings.probe_timeout)

    return factory


def create_core_v1_api(settings: HealthCheckConfig) -> client.CoreV1Api:
    """Create a Kubernetes CoreV1Api from kubeconfig or in-cluster credentials.

    An explicit ``kubeconfig`` must exist. Without one, default kubeconfig
    discovery is tried first and in-cluster configuration second.

    Raises:
        ConfigurationError: If an explicit kubeconfig path does not exist
        ConnectivityError: If no usable Kubernetes configuration is found
    """
    if settings.kubeconfig:
        kubeconfig_path = Path(settings.kubeconfig).expanduser()
        if not kubeconfig_path.exists():
            raise ConfigurationError(f"Kubeconfig not found: {kubeconfig_path}")
        try:
            config.load_kube_config(config_file=str(kubeconfig_path))
        except Exception as e:
            raise ConnectivityError(f"Failed to load kubeconfig {kubeconfig_path}", str(e))
        return client.CoreV1Api()

    try:
        config.load_kube_config()
    except Exception as kube_error:
        logger.debug(f"Default kubeconfig unavailable ({kube_error}), trying in-cluster config")
        try:
            config.load_incluster_config()
        except config.ConfigException as e:
            raise ConnectivityError(
                "Failed to load Kubernetes configuration",
                f"kubeconfig: {kube_error}\nin-cluster: {e}\n"
                "Set KUBECONFIG or pass --kubeconfig",
            )
    return client.CoreV1Api()
