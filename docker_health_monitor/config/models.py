"""Pydantic configuration models for the Docker health monitor."""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional


class PrometheusConfig(BaseModel):
    """Listen address of the metrics endpoint."""
    host: str = "0.0.0.0"
    port: int = Field(default=9092, ge=1, le=65535)

    @classmethod
    def from_address(cls, address: str) -> "PrometheusConfig":
        """
        Parse a HOST:PORT socket address.

        Args:
            address: e.g. "0.0.0.0:9092" or "[::]:9092"

        Returns:
            PrometheusConfig: Parsed listen address

        Raises:
            ValueError: If the address has no port
        """
        host, sep, port = address.rpartition(':')
        if not sep or not host or not port.isdigit():
            raise ValueError(f'Invalid socket address: {address}')
        if host.startswith('[') and host.endswith(']'):
            host = host[1:-1]
        return cls(host=host, port=int(port))


class DockerConnectionConfig(BaseModel):
    """How to reach the Docker daemon; unset means local defaults."""
    unix_socket: Optional[str] = None
    http_url: Optional[str] = None
    timeout: int = Field(default=3, ge=1)  # Seconds per API request

    @field_validator('http_url')
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate Docker endpoint URL scheme."""
        if v is not None and not v.startswith(('http://', 'https://', 'tcp://')):
            raise ValueError('URL must start with http://, https:// or tcp://')
        return v

    @model_validator(mode='after')
    def single_connection(self) -> "DockerConnectionConfig":
        """Unix socket and HTTP URL are mutually exclusive."""
        if self.unix_socket and self.http_url:
            raise ValueError('unix_socket and http_url cannot be used together')
        return self


class MonitorConfig(BaseModel):
    """Remediation settings."""
    restart_interval_ms: Optional[int] = Field(default=None, ge=1)

    @property
    def restart_interval(self) -> Optional[float]:
        """Restart interval in seconds, None disables remediation."""
        if self.restart_interval_ms is None:
            return None
        return self.restart_interval_ms / 1000


class DockerHealthMonitorConfig(BaseModel):
    """Root configuration model."""
    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)
    docker: DockerConnectionConfig = Field(default_factory=DockerConnectionConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    log_level: str = "INFO"

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept standard logging level names."""
        level = v.upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f'Invalid log level: {v}')
        return level
