"""Pytest configuration and shared fixtures.

The Docker engine is never contacted: FakeDockerClient exposes the four
prune collections of docker.DockerClient and records every call.
"""

import threading
from typing import Any, Dict, List, Optional

import pytest
from loguru import logger

from scheduler.config import SchedulerConfig, set_scheduler_config


# Engine reports for a typical staging host:
# 5 containers (1000 bytes), 2 images (2000 bytes), 1 network, 3 volumes (500 bytes)
CONTAINERS_REPORT = {
    "ContainersDeleted": ["c1", "c2", "c3", "c4", "c5"],
    "SpaceReclaimed": 1000,
}
IMAGES_REPORT = {
    "ImagesDeleted": [{"Deleted": "sha256:a"}, {"Untagged": "busybox:old"}],
    "SpaceReclaimed": 2000,
}
NETWORKS_REPORT = {"NetworksDeleted": ["stale_net"]}
VOLUMES_REPORT = {
    "VolumesDeleted": ["v1", "v2", "v3"],
    "SpaceReclaimed": 500,
}


class FakePruneCollection:
    """Stands in for client.containers / images / networks / volumes."""

    def __init__(
        self,
        name: str,
        report: Optional[dict],
        call_log: List[str],
    ) -> None:
        self.name = name
        self.report = report
        self.error: Optional[BaseException] = None
        self.side_effect = None
        self.calls: List[Dict[str, Any]] = []
        self._call_log = call_log

    def prune(self, filters=None):
        self.calls.append(filters)
        self._call_log.append(self.name)
        if self.side_effect is not None:
            self.side_effect()
        if self.error is not None:
            raise self.error
        return self.report


class FakeDockerClient:
    """Minimal docker.DockerClient replacement for prune tests."""

    def __init__(self) -> None:
        self.call_log: List[str] = []
        self.containers = FakePruneCollection("containers", dict(CONTAINERS_REPORT), self.call_log)
        self.images = FakePruneCollection("images", dict(IMAGES_REPORT), self.call_log)
        self.networks = FakePruneCollection("networks", dict(NETWORKS_REPORT), self.call_log)
        self.volumes = FakePruneCollection("volumes", dict(VOLUMES_REPORT), self.call_log)


class ControlledExecutor:
    """CleanupExecutor replacement whose cycles block until released."""

    def __init__(self, report=None, error: Optional[BaseException] = None) -> None:
        self.report = report
        self.error = error
        self.release = threading.Event()
        self.started = threading.Event()
        self.contexts = []
        self._lock = threading.Lock()

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self.contexts)

    def run_cycle(self, context, filters, prune_all=False):
        with self._lock:
            self.contexts.append(context)
        self.started.set()
        self.release.wait(5)
        if self.error is not None:
            raise self.error
        return self.report


@pytest.fixture
def fake_client() -> FakeDockerClient:
    """Fresh fake Docker client."""
    return FakeDockerClient()


@pytest.fixture
def log_messages():
    """Capture loguru records as (level, message) tuples."""
    messages = []
    handler_id = logger.add(
        lambda msg: messages.append((msg.record["level"].name, msg.record["message"])),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def fast_scheduler_config():
    """Short coordinator poll interval so daemon tests finish quickly."""
    config = SchedulerConfig(
        COORDINATOR_POLL_INTERVAL=0.02,
        DAEMON_THREAD_JOIN_TIMEOUT=2.0,
    )
    set_scheduler_config(config)
    yield config
    set_scheduler_config(SchedulerConfig())
