"""Pytest configuration and shared fixtures."""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest
import requests
from hypothesis import Verbosity, settings
from kubernetes.client import (
    V1Node,
    V1NodeAddress,
    V1NodeCondition,
    V1NodeList,
    V1NodeStatus,
    V1ObjectMeta,
)

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load the default profile
settings.load_profile("default")


def _make_member(name, client_urls=None, peer_urls=None, member_id=1):
    """Build an object shaped like an etcd3 Member."""
    return SimpleNamespace(
        id=member_id,
        name=name,
        client_urls=list(client_urls or []),
        peer_urls=list(peer_urls or []),
    )


def _make_kube_node(name, addresses=None, ready="True", labels=None):
    """Build a V1Node with the given addresses and Ready condition status.

    ``ready=None`` leaves out the Ready condition entirely.
    """
    conditions = []
    if ready is not None:
        conditions.append(V1NodeCondition(type="Ready", status=ready))
    return V1Node(
        metadata=V1ObjectMeta(name=name, labels=labels),
        status=V1NodeStatus(
            addresses=[
                V1NodeAddress(type=kind, address=address) for kind, address in addresses or []
            ],
            conditions=conditions,
        ),
    )


def _health_response(body):
    """Build a mock HTTP response carrying ``body``."""
    response = Mock()
    response.content = body.encode() if isinstance(body, str) else body
    return response


def _fake_session(responses):
    """Build a mock session whose GETs answer from ``responses``, keyed by URL.

    A value that is an exception instance is raised instead of returned.
    """
    session = Mock(spec=requests.Session)

    def get(url, timeout=None):
        outcome = responses[url]
        if isinstance(outcome, Exception):
            raise outcome
        return _health_response(outcome)

    session.get.side_effect = get
    return session


@pytest.fixture
def core_v1():
    """Mock CoreV1Api returning the nodes assigned to ``core_v1.nodes``."""
    api = Mock()
    api.nodes = []
    api.list_node.side_effect = lambda: V1NodeList(items=api.nodes)
    return api


@pytest.fixture
def tls_files(tmp_path):
    """Write placeholder CA, certificate and key files and return their paths."""
    paths = {}
    files = {"ca_cert_path": "ca.crt", "cert_path": "server.crt", "key_path": "server.key"}
    for option, filename in files.items():
        path = tmp_path / filename
        path.write_text("placeholder\n")
        paths[option] = str(path)
    return paths


@pytest.fixture
def make_member():
    return _make_member


@pytest.fixture
def make_kube_node():
    return _make_kube_node


@pytest.fixture
def fake_session():
    return _fake_session
