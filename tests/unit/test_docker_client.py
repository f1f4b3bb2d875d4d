"""Unit tests for core/docker_client.py."""

from unittest.mock import MagicMock, patch

import pytest
from docker.errors import APIError, DockerException

from core.docker_client import DockerManager
from core.exceptions import EngineConnectionException, EngineNotInitializedException


@pytest.fixture
def manager():
    """Fresh DockerManager singleton."""
    DockerManager.reset_instance()
    instance = DockerManager()
    yield instance
    DockerManager.reset_instance()


@pytest.fixture
def from_env():
    with patch("core.docker_client.docker.from_env") as mock_from_env:
        yield mock_from_env


class TestDockerManager:
    """Tests for DockerManager."""

    def test_singleton(self, manager) -> None:
        """Every call returns the same manager."""
        assert DockerManager() is manager

    def test_get_client_before_init(self, manager) -> None:
        """Using the client before init() is an error."""
        assert manager.is_initialized() is False
        with pytest.raises(EngineNotInitializedException):
            manager.get_client()

    def test_init_uses_timeout(self, manager, from_env) -> None:
        """init() builds the client from the environment with the request timeout."""
        manager.init(timeout=30)

        from_env.assert_called_once_with(timeout=30)
        assert manager.get_client() is from_env.return_value
        assert manager.is_initialized() is True

    def test_init_twice_keeps_client(self, manager, from_env, log_messages) -> None:
        """Second init() is ignored with a warning."""
        manager.init(timeout=30)
        manager.init(timeout=5)

        from_env.assert_called_once()
        assert any(level == "WARNING" for level, _ in log_messages)

    def test_init_failure(self, manager, from_env) -> None:
        """SDK errors become EngineConnectionException."""
        from_env.side_effect = DockerException("Error while fetching server API version")

        with pytest.raises(EngineConnectionException, match="fetching server API version"):
            manager.init(timeout=30)

        assert manager.is_initialized() is False

    def test_ping(self, manager, from_env) -> None:
        """ping() reflects the engine answer and never raises."""
        assert manager.ping() is False

        manager.init(timeout=30)
        from_env.return_value.ping.return_value = True
        assert manager.ping() is True

        from_env.return_value.ping.side_effect = APIError("engine down")
        assert manager.ping() is False

    def test_server_version(self, manager, from_env) -> None:
        """Engine version is read from the version endpoint."""
        assert manager.server_version() is None

        manager.init(timeout=30)
        from_env.return_value.version.return_value = {"Version": "27.3.1"}
        assert manager.server_version() == "27.3.1"

        from_env.return_value.version.side_effect = APIError("nope")
        assert manager.server_version() is None

    def test_close(self, manager, from_env) -> None:
        """close() releases the client and is idempotent."""
        client = MagicMock()
        from_env.return_value = client
        manager.init(timeout=30)

        manager.close()
        manager.close()

        client.close.assert_called_once()
        assert manager.is_initialized() is False
