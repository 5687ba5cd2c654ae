"""Tests for the Docker runtime client wrapper."""

import pytest
from unittest.mock import MagicMock, patch

import requests
from docker.errors import APIError, DockerException, NotFound

from docker_health_monitor.config.models import DockerConnectionConfig
from docker_health_monitor.services.docker_client import DockerRuntimeClient
from docker_health_monitor.utils.errors import (
    ConnectionFailure,
    MalformedRecordError,
    OperationFailure,
)


@pytest.fixture
def mock_api():
    """Mocked docker.APIClient."""
    api = MagicMock()
    api.containers.return_value = [
        {
            "Id": "abc123def456",
            "Names": ["/web-server"],
            "Image": "nginx:latest",
            "Labels": {"maintainer": "NGINX Docker Maintainers"},
            "State": "running",
            "Status": "Up 2 days (healthy)",
        },
        {
            "Id": "def456ghi789",
            "Names": ["/api-server"],
            "Image": "python:3.11",
            "Labels": {},
            "State": "exited",
            "Status": "Exited (1) 2 hours ago",
        },
    ]
    api.inspect_container.return_value = {
        "Id": "abc123def456",
        "State": {
            "Status": "running",
            "Running": True,
            "Health": {"Status": "healthy", "FailingStreak": 0, "Log": []},
        },
    }
    return api


@pytest.fixture
def client(mock_api, logger):
    return DockerRuntimeClient(mock_api, logger)


class TestConnect:
    """Test suite for DockerRuntimeClient.connect."""

    @patch('docker_health_monitor.services.docker_client.docker')
    def test_unix_socket(self, mock_docker, logger):
        DockerRuntimeClient.connect(DockerConnectionConfig(unix_socket="/var/run/docker.sock"), logger)

        kwargs = mock_docker.APIClient.call_args[1]
        assert kwargs["base_url"] == "unix:///var/run/docker.sock"
        assert kwargs["timeout"] == 3

    @patch('docker_health_monitor.services.docker_client.docker')
    def test_unix_socket_with_scheme(self, mock_docker, logger):
        DockerRuntimeClient.connect(DockerConnectionConfig(unix_socket="unix:///tmp/d.sock"), logger)

        assert mock_docker.APIClient.call_args[1]["base_url"] == "unix:///tmp/d.sock"

    @patch('docker_health_monitor.services.docker_client.docker')
    def test_http_url(self, mock_docker, logger):
        DockerRuntimeClient.connect(
            DockerConnectionConfig(http_url="http://docker-host:2375", timeout=10),
            logger
        )

        kwargs = mock_docker.APIClient.call_args[1]
        assert kwargs["base_url"] == "http://docker-host:2375"
        assert kwargs["timeout"] == 10

    @patch('docker_health_monitor.services.docker_client.kwargs_from_env')
    @patch('docker_health_monitor.services.docker_client.docker')
    def test_local_defaults(self, mock_docker, mock_kwargs_from_env, logger):
        mock_kwargs_from_env.return_value = {"base_url": "tcp://10.0.0.5:2376", "tls": False}

        DockerRuntimeClient.connect(DockerConnectionConfig(), logger)

        kwargs = mock_docker.APIClient.call_args[1]
        assert kwargs["base_url"] == "tcp://10.0.0.5:2376"
        assert kwargs["tls"] is False

    @patch('docker_health_monitor.services.docker_client.docker')
    def test_pinned_api_version(self, mock_docker, logger):
        from docker.constants import DEFAULT_DOCKER_API_VERSION

        DockerRuntimeClient.connect(DockerConnectionConfig(unix_socket="/var/run/docker.sock"), logger)

        assert mock_docker.APIClient.call_args[1]["version"] == DEFAULT_DOCKER_API_VERSION

    @patch('docker_health_monitor.services.docker_client.docker')
    def test_construction_failure(self, mock_docker, logger):
        mock_docker.APIClient.side_effect = DockerException("Invalid bind address format")

        with pytest.raises(ConnectionFailure):
            DockerRuntimeClient.connect(DockerConnectionConfig(http_url="tcp://bad"), logger)


class TestDockerRuntimeClient:
    """Test suite for DockerRuntimeClient calls."""

    @pytest.mark.asyncio
    async def test_list_containers(self, client, mock_api):
        containers = await client.list_containers()

        mock_api.containers.assert_called_once_with(all=True, filters=None)
        assert [c.id for c in containers] == ["abc123def456", "def456ghi789"]
        assert containers[0].display_name == "web-server"
        assert containers[1].image == "python:3.11"

    @pytest.mark.asyncio
    async def test_list_containers_with_filters(self, client, mock_api):
        await client.list_containers(all=True, filters={"health": ["unhealthy"]})

        mock_api.containers.assert_called_once_with(all=True, filters={"health": ["unhealthy"]})

    @pytest.mark.asyncio
    async def test_list_connection_error(self, client, mock_api):
        mock_api.containers.side_effect = requests.exceptions.ConnectionError("Connection refused")

        with pytest.raises(ConnectionFailure):
            await client.list_containers()

    @pytest.mark.asyncio
    async def test_list_timeout(self, client, mock_api):
        mock_api.containers.side_effect = requests.exceptions.ReadTimeout("Read timed out")

        with pytest.raises(ConnectionFailure):
            await client.list_containers()

    @pytest.mark.asyncio
    async def test_list_malformed_response(self, client, mock_api):
        mock_api.containers.return_value = {"message": "unexpected"}

        with pytest.raises(MalformedRecordError):
            await client.list_containers()

    @pytest.mark.asyncio
    async def test_list_undecodable_response(self, client, mock_api):
        mock_api.containers.side_effect = ValueError("Expecting value: line 1 column 1")

        with pytest.raises(MalformedRecordError):
            await client.list_containers()

    @pytest.mark.asyncio
    async def test_list_entry_not_an_object(self, client, mock_api):
        mock_api.containers.return_value = [None]

        with pytest.raises(MalformedRecordError):
            await client.list_containers()

    @pytest.mark.asyncio
    async def test_list_entry_with_invalid_names(self, client, mock_api):
        mock_api.containers.return_value = [{"Id": "abc123def456", "Names": 5}]

        with pytest.raises(MalformedRecordError):
            await client.list_containers()

    @pytest.mark.asyncio
    async def test_inspect_health(self, client, mock_api):
        health = await client.inspect_health("abc123def456")

        mock_api.inspect_container.assert_called_once_with("abc123def456")
        assert health == {"Status": "healthy", "FailingStreak": 0, "Log": []}

    @pytest.mark.asyncio
    async def test_inspect_without_health_block(self, client, mock_api):
        mock_api.inspect_container.return_value = {"State": {"Status": "running"}}

        assert await client.inspect_health("abc123def456") is None

    @pytest.mark.asyncio
    async def test_inspect_without_state(self, client, mock_api):
        mock_api.inspect_container.return_value = {"Id": "abc123def456"}

        with pytest.raises(MalformedRecordError, match="Failed to get state"):
            await client.inspect_health("abc123def456")

    @pytest.mark.asyncio
    async def test_inspect_not_found(self, client, mock_api):
        mock_api.inspect_container.side_effect = NotFound("No such container: abc123def456")

        with pytest.raises(OperationFailure):
            await client.inspect_health("abc123def456")

    @pytest.mark.asyncio
    async def test_restart(self, client, mock_api):
        await client.restart("abc123def456")

        mock_api.restart.assert_called_once_with("abc123def456")

    @pytest.mark.asyncio
    async def test_restart_api_error(self, client, mock_api):
        mock_api.restart.side_effect = APIError("500 Server Error: cannot restart container")

        with pytest.raises(OperationFailure):
            await client.restart("abc123def456")

    def test_close(self, client, mock_api):
        client.close()

        mock_api.close.assert_called_once()
