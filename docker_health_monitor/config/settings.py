"""Environment settings and validation."""

import os
from typing import Optional


class Settings:
    """Application settings from environment variables."""

    PROMETHEUS_ADDRESS = "DHM_PROMETHEUS_ADDRESS"
    RESTART_INTERVAL = "DHM_RESTART_INTERVAL"
    DOCKER_UNIX_SOCKET = "DHM_DOCKER_UNIX_SOCKET"
    DOCKER_HTTP_URL = "DHM_DOCKER_HTTP_URL"
    LOG_LEVEL = "LOG_LEVEL"

    @staticmethod
    def get(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
        """
        Get environment variable value.

        Args:
            key: Environment variable name
            default: Default value if not set
            required: Whether the variable is required

        Returns:
            Optional[str]: Environment variable value, default if unset or empty

        Raises:
            ValueError: If required variable is not set
        """
        value = os.getenv(key) or default
        if required and not value:
            raise ValueError(f"Required environment variable not set: {key}")
        return value

