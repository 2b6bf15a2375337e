"""Tests for the etcd member health prober."""

from unittest.mock import Mock

import pytest
import requests

from pulse.etcd.prober import (
    HealthDecodeError,
    MemberHealthProber,
    build_session,
    decode_health,
    extract_ipv4,
)
from pulse.models.nodes import ProbeStatus


@pytest.mark.parametrize(
    "body,expected",
    [
        ('{"health": "true"}', True),
        ('{"health": "false"}', False),
        ('{"health": true}', True),
        ('{"health": false}', False),
        ('{"health": "true", "reason": ""}', True),
        (b'{"health":"true"}', True),
        ("{}", False),
        ("null", False),
        ('{"health": null}', False),
        ('{"Health": "true"}', True),
        ('{"HEALTH": true}', True),
        ('{"health": "false", "Health": "true"}', True),
    ],
)
def test_decode_health_known_shapes(body, expected):
    """Both the string and boolean response shapes decode to a bool."""
    assert decode_health(body) is expected


@pytest.mark.parametrize("body", ["", "not json", "[]", '"true"', '{"health": 1}', b"\xff\xfe"])
def test_decode_health_rejects_unknown_shapes(body):
    """Bodies matching neither shape are decode failures."""
    with pytest.raises(HealthDecodeError):
        decode_health(body)


def test_decode_health_rejects_deeply_nested_body():
    """Nesting deep enough to exhaust the JSON decoder is a decode failure."""
    with pytest.raises(HealthDecodeError):
        decode_health(b"[" * 200000)


def test_deeply_nested_body_falls_through_to_next(fake_session):
    session = fake_session(
        {
            "https://10.0.0.1:2379/health": b"[" * 200000,
            "https://10.0.0.2:2379/health": '{"health":"true"}',
        }
    )
    result = MemberHealthProber(session).probe(
        "1", ["https://10.0.0.1:2379", "https://10.0.0.2:2379"]
    )

    assert result.status is ProbeStatus.HEALTHY
    assert result.ip == "10.0.0.2"


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://10.0.0.1:2379", "10.0.0.1"),
        ("https://192.168.100.25:2379/", "192.168.100.25"),
        ("http://etcd-0.example.com:2379", None),
        ("https://[fd00::1]:2379", None),
    ],
)
def test_extract_ipv4(url, expected):
    """The first dotted quad in the URL identifies the member."""
    assert extract_ipv4(url) == expected


def test_no_client_urls_is_unreachable_without_network_call():
    """A member without client URLs is never contacted."""
    session = Mock(spec=requests.Session)
    prober = MemberHealthProber(session)

    result = prober.probe("8e9e05c52164694d", [])

    assert result.status is ProbeStatus.UNREACHABLE
    assert result.ip is None
    session.get.assert_not_called()


def test_healthy_string_response(fake_session):
    """A {"health":"true"} body yields HEALTHY with the endpoint's IP."""
    session = fake_session({"https://10.0.0.1:2379/health": '{"health":"true"}'})
    result = MemberHealthProber(session).probe("1", ["https://10.0.0.1:2379"])

    assert result.status is ProbeStatus.HEALTHY
    assert result.ip == "10.0.0.1"
    assert result.endpoint == "https://10.0.0.1:2379"


def test_unhealthy_boolean_response(fake_session):
    """A {"health":false} body yields UNHEALTHY and no IP."""
    session = fake_session({"https://10.0.0.1:2379/health": '{"health":false}'})
    result = MemberHealthProber(session).probe("1", ["https://10.0.0.1:2379"])

    assert result.status is ProbeStatus.UNHEALTHY
    assert result.ip is None


def test_undecodable_last_endpoint_is_unreachable(fake_session):
    session = fake_session({"https://10.0.0.1:2379/health": "<html>bad gateway</html>"})
    result = MemberHealthProber(session).probe("1", ["https://10.0.0.1:2379"])

    assert result.status is ProbeStatus.UNREACHABLE


def test_undecodable_endpoint_falls_through_to_next(fake_session):
    """A malformed body on one URL moves on to the next URL."""
    session = fake_session(
        {
            "https://10.0.0.1:2379/health": "garbage",
            "https://10.0.0.2:2379/health": '{"health":"true"}',
        }
    )
    result = MemberHealthProber(session).probe(
        "1", ["https://10.0.0.1:2379", "https://10.0.0.2:2379"]
    )

    assert result.status is ProbeStatus.HEALTHY
    assert result.ip == "10.0.0.2"


def test_connection_error_falls_through_to_next(fake_session):
    session = fake_session(
        {
            "https://10.0.0.1:2379/health": requests.ConnectionError("connection refused"),
            "https://10.0.0.1:4001/health": '{"health":"true"}',
        }
    )
    result = MemberHealthProber(session).probe(
        "1", ["https://10.0.0.1:2379", "https://10.0.0.1:4001"]
    )

    assert result.status is ProbeStatus.HEALTHY
    assert result.endpoint == "https://10.0.0.1:4001"


def test_all_endpoints_failing_is_unreachable(fake_session):
    session = fake_session(
        {
            "https://10.0.0.1:2379/health": requests.Timeout("timed out"),
            "https://10.0.0.1:4001/health": requests.exceptions.SSLError("bad certificate"),
        }
    )
    result = MemberHealthProber(session).probe(
        "1", ["https://10.0.0.1:2379", "https://10.0.0.1:4001"]
    )

    assert result.status is ProbeStatus.UNREACHABLE
    assert session.get.call_count == 2


def test_first_responsive_endpoint_wins(fake_session):
    """An unhealthy answer stops the probe even if later URLs would be healthy."""
    session = fake_session(
        {
            "https://10.0.0.1:2379/health": '{"health":"false"}',
            "https://10.0.0.2:2379/health": '{"health":"true"}',
        }
    )
    result = MemberHealthProber(session).probe(
        "1", ["https://10.0.0.1:2379", "https://10.0.0.2:2379"]
    )

    assert result.status is ProbeStatus.UNHEALTHY
    assert session.get.call_count == 1


def test_probe_uses_timeout_and_strips_trailing_slash(fake_session):
    session = fake_session({"https://10.0.0.1:2379/health": '{"health":true}'})
    MemberHealthProber(session, timeout=5.0).probe("1", ["https://10.0.0.1:2379/"])

    session.get.assert_called_once_with("https://10.0.0.1:2379/health", timeout=5.0)


def test_build_session_carries_tls_material():
    session = build_session("/pki/ca.crt", "/pki/server.crt", "/pki/server.key")

    assert session.verify == "/pki/ca.crt"
    assert session.cert == ("/pki/server.crt", "/pki/server.key")
    session.close()
