"""Async wrapper around the Docker SDK low-level API client."""

import asyncio
import logging
from functools import partial
from typing import Any, Callable, Dict, List, Optional

import docker
import requests
from docker.constants import DEFAULT_DOCKER_API_VERSION
from docker.errors import APIError, DockerException
from docker.utils import kwargs_from_env

from ..config.models import DockerConnectionConfig
from ..utils.errors import ConnectionFailure, MalformedRecordError, OperationFailure
from ..utils.metrics import ContainerRecord


class DockerRuntimeClient:
    """
    Container runtime capability used by the collector and remediation loop.

    Holds no local state besides the SDK client, so one instance is shared
    by the scrape path and the background loop.
    """

    def __init__(self, api: docker.APIClient, logger: logging.Logger):
        """
        Initialize runtime client.

        Args:
            api: Docker SDK low-level client
            logger: Logger instance
        """
        self.api = api
        self.logger = logger.getChild(self.__class__.__name__)

    @classmethod
    def connect(
        cls,
        config: DockerConnectionConfig,
        logger: logging.Logger
    ) -> "DockerRuntimeClient":
        """
        Create a client for the configured Docker endpoint.

        A pinned API version is used so that no request is sent to the
        daemon before the first list/inspect/restart call.

        Args:
            config: Docker connection configuration
            logger: Logger instance

        Returns:
            DockerRuntimeClient: Client bound to the unix socket, the HTTP
            URL, or the local defaults (DOCKER_HOST, DOCKER_TLS_VERIFY, ...)

        Raises:
            ConnectionFailure: If the SDK client cannot be constructed
        """
        try:
            if config.unix_socket:
                path = config.unix_socket
                base_url = path if path.startswith("unix://") else f"unix://{path}"
                logger.info(f"Connecting to Docker via unix socket {base_url}")
                api = docker.APIClient(
                    base_url=base_url,
                    version=DEFAULT_DOCKER_API_VERSION,
                    timeout=config.timeout
                )
            elif config.http_url:
                logger.info(f"Connecting to Docker via {config.http_url}")
                api = docker.APIClient(
                    base_url=config.http_url,
                    version=DEFAULT_DOCKER_API_VERSION,
                    timeout=config.timeout
                )
            else:
                logger.info("Connecting to Docker using local defaults")
                api = docker.APIClient(
                    version=DEFAULT_DOCKER_API_VERSION,
                    timeout=config.timeout,
                    **kwargs_from_env()
                )
        except DockerException as e:
            raise ConnectionFailure(f"Failed to create Docker client: {e}") from e

        return cls(api, logger)

    async def _call(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Run a blocking SDK call in the default executor.

        Args:
            func: SDK method to call
            *args: Positional arguments
            **kwargs: Keyword arguments

        Returns:
            Result of the SDK call

        Raises:
            OperationFailure: If the daemon returned an error response
            ConnectionFailure: If the daemon could not be reached
            MalformedRecordError: If the response body could not be decoded
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, partial(func, *args, **kwargs))
        except APIError as e:
            raise OperationFailure(str(e)) from e
        except (requests.exceptions.RequestException, DockerException) as e:
            raise ConnectionFailure(str(e)) from e
        except ValueError as e:
            raise MalformedRecordError(f"Invalid response from Docker: {e}") from e

    async def list_containers(
        self,
        all: bool = True,
        filters: Optional[Dict[str, Any]] = None
    ) -> List[ContainerRecord]:
        """
        List containers.

        Args:
            all: Include stopped containers
            filters: Server-side filters, e.g. {"health": ["unhealthy"]}

        Returns:
            List[ContainerRecord]: Containers in daemon order

        Raises:
            MalformedRecordError: If the response or one of its entries is not a container summary
        """
        summaries = await self._call(self.api.containers, all=all, filters=filters)
        if not isinstance(summaries, list):
            raise MalformedRecordError("Container list response is not a list")

        self.logger.debug(f"Listed {len(summaries)} container(s) (filters={filters})")
        records = []
        for summary in summaries:
            if not isinstance(summary, dict):
                raise MalformedRecordError(
                    f"Container list entry is not an object: {type(summary).__name__}"
                )
            try:
                records.append(ContainerRecord.from_summary(summary))
            except (TypeError, ValueError) as e:
                raise MalformedRecordError(f"Invalid container list entry: {e}") from e
        return records

    async def inspect_health(self, container_id: str) -> Optional[Dict[str, Any]]:
        """
        Read the health block of a container.

        Args:
            container_id: Container ID

        Returns:
            Optional[dict]: State.Health of the container, None if absent

        Raises:
            MalformedRecordError: If the inspect response has no State
        """
        details = await self._call(self.api.inspect_container, container_id)
        state = details.get("State") if isinstance(details, dict) else None
        if not isinstance(state, dict):
            raise MalformedRecordError(f"Failed to get state from container {container_id}")

        return state.get("Health")

    async def restart(self, container_id: str) -> None:
        """
        Restart a container.

        Args:
            container_id: Container ID
        """
        await self._call(self.api.restart, container_id)

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.api.close()
