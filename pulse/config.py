"""Configuration for the etcd health check."""

import re
from pathlib import Path
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from pulse.exceptions import ConfigurationError
from pulse.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CA_CERT_PATH = "/etc/kubernetes/pki/etcd/ca.crt"
DEFAULT_CERT_PATH = "/etc/kubernetes/pki/etcd/server.crt"
DEFAULT_KEY_PATH = "/etc/kubernetes/pki/etcd/server.key"
DEFAULT_ETCD_ENDPOINT = "https://127.0.0.1:2379"
DEFAULT_PROBE_TIMEOUT = 30.0


class HealthCheckConfig(BaseModel):
    """Settings for one health check run.

    TLS paths point at the etcd CA certificate, client certificate and key.
    ``kubeconfig`` of ``None`` means default kubeconfig discovery, falling
    back to in-cluster credentials.
    """

    ca_cert_path: str = DEFAULT_CA_CERT_PATH
    cert_path: str = DEFAULT_CERT_PATH
    key_path: str = DEFAULT_KEY_PATH
    kubeconfig: str | None = None
    etcd_endpoint: str = DEFAULT_ETCD_ENDPOINT
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    require_health: bool = True
    control_plane_pattern: str = "master"

    @field_validator("ca_cert_path", "cert_path", "key_path")
    @classmethod
    def validate_tls_path(cls, v: str) -> str:
        """Validate TLS paths are not empty."""
        if not v or not v.strip():
            raise ValueError("TLS file paths cannot be empty")
        return v

    @field_validator("etcd_endpoint")
    @classmethod
    def validate_etcd_endpoint(cls, v: str) -> str:
        """Validate the endpoint is an http(s) URL with host and port."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"etcd_endpoint '{v}' must look like https://127.0.0.1:2379")
        try:
            port = parsed.port
        except ValueError:
            raise ValueError(f"etcd_endpoint '{v}' has an invalid port")
        if port is None:
            raise ValueError(f"etcd_endpoint '{v}' must include a port")
        return v.rstrip("/")

    @field_validator("probe_timeout")
    @classmethod
    def validate_probe_timeout(cls, v: float) -> float:
        """Validate the probe timeout is positive."""
        if v <= 0:
            raise ValueError("probe_timeout must be greater than zero")
        return v

    @field_validator("control_plane_pattern")
    @classmethod
    def validate_control_plane_pattern(cls, v: str) -> str:
        if not v or re.search(r"\s", v):
            raise ValueError("control_plane_pattern must be a non-empty name fragment")
        return v

    def etcd_host_port(self) -> tuple[str, int]:
        """Split the etcd endpoint into host and port."""
        parsed = urlparse(self.etcd_endpoint)
        return parsed.hostname, parsed.port

    def tls_files(self) -> tuple[str, str, str]:
        """Return the (CA, certificate, key) paths."""
        return self.ca_cert_path, self.cert_path, self.key_path

    def validate_tls_files(self) -> None:
        """Check that every TLS file exists.

        Raises:
            ConfigurationError: If any of the files is missing
        """
        missing = [path for path in self.tls_files() if not Path(path).is_file()]
        if missing:
            logger.error(f"Missing TLS material: {missing}")
            raise ConfigurationError(
                "etcd TLS material not found",
                "Missing files: "
                + ", ".join(missing)
                + "\nRun on a control-plane node or pass --ca-cert, --cert and --key",
            )

    def save(self, path: str) -> None:
        """Save configuration to YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)

    @classmethod
    def load(cls, path: str) -> "HealthCheckConfig":
        """Load configuration from YAML file.

        Raises:
            ConfigurationError: If the file is missing, unparsable or invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse config file: {config_path}", str(e))

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a mapping of settings"
            )

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid config file: {config_path}", _format_validation_error(e)
            )

    def merged(self, **overrides) -> "HealthCheckConfig":
        """Return a copy with every non-None override applied and validated."""
        values = self.model_dump()
        values.update({key: value for key, value in overrides.items() if value is not None})
        try:
            return HealthCheckConfig(**values)
        except ValidationError as e:
            raise ConfigurationError("Invalid option", _format_validation_error(e))


def _format_validation_error(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(x) for x in item['loc'])}: {item['msg']}" for item in error.errors()
    )
