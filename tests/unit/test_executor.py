"""Unit tests for scheduler/prune_strategies/executor.py.

Tests cycle ordering, aggregation, fail-fast error handling and observers.
"""

from unittest.mock import MagicMock

import pytest
from docker.errors import APIError

from core.exceptions import CycleCancelledError, PruneOperationError
from core.filters import FilterSet
from scheduler.context import CycleContext
from scheduler.prune_strategies import (
    CleanupExecutor,
    LoggingObserver,
    MetricsObserver,
    PruneObserver,
    create_default_executor,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _context(cycle_id: int = 1) -> CycleContext:
    return CycleContext(cycle_id=cycle_id, timeout=60.0)


@pytest.fixture
def filters() -> FilterSet:
    return FilterSet.from_args(["label=env=staging"])


@pytest.fixture
def metrics() -> MetricsObserver:
    return MetricsObserver()


@pytest.fixture
def executor(fake_client, metrics) -> CleanupExecutor:
    return create_default_executor(fake_client, observers=[LoggingObserver(), metrics])


# ---------------------------------------------------------------------------
# Successful cycles
# ---------------------------------------------------------------------------


class TestRunCycle:
    """Tests for CleanupExecutor.run_cycle on success."""

    def test_fixed_order(self, executor, fake_client, filters) -> None:
        """Operations run containers, images, networks, volumes."""
        executor.run_cycle(_context(), filters, False)

        assert fake_client.call_log == ["containers", "images", "networks", "volumes"]

    def test_total_reclaimed(self, executor, filters) -> None:
        """Total is containers + images + volumes (networks report 0)."""
        report = executor.run_cycle(_context(3), filters, False)

        assert report.cycle_id == 3
        assert report.total_reclaimed == 3500
        assert report.summaries == [
            "Deleted Containers: 5, Reclaimed Space: 1000",
            "Deleted Images: 2, Reclaimed Space: 2000",
            "Deleted Networks: 1",
            "Deleted Volumes: 3, Reclaimed Space: 500",
        ]
        assert report.execution_time >= 0

    def test_filters_per_operation(self, executor, fake_client, filters) -> None:
        """Only the image prune sees the dangling criterion."""
        executor.run_cycle(_context(), filters, False)

        user_filters = {"label": ["env=staging"]}
        assert fake_client.containers.calls == [user_filters]
        assert fake_client.images.calls == [
            {"dangling": ["true"], "label": ["env=staging"]}
        ]
        assert fake_client.networks.calls == [user_filters]
        assert fake_client.volumes.calls == [user_filters]
        assert filters.to_docker() == user_filters

    def test_filter_dicts_are_not_shared(self, executor, fake_client, filters) -> None:
        """Each call gets its own dict; mutating one does not affect the next cycle."""
        executor.run_cycle(_context(1), filters, False)
        fake_client.containers.calls[0]["label"].append("tampered")
        fake_client.images.calls[0]["dangling"] = ["false"]

        executor.run_cycle(_context(2), filters, False)

        assert fake_client.containers.calls[1] == {"label": ["env=staging"]}
        assert fake_client.networks.calls[1] == {"label": ["env=staging"]}
        assert fake_client.images.calls[1]["dangling"] == ["true"]
        assert fake_client.networks.calls[0] is not fake_client.volumes.calls[0]

    def test_all_flag(self, executor, fake_client, filters) -> None:
        """all=True prunes every unused image."""
        executor.run_cycle(_context(), filters, True)

        assert fake_client.images.calls == [
            {"dangling": ["false"], "label": ["env=staging"]}
        ]

    def test_logs_summaries_and_total(self, executor, filters, log_messages) -> None:
        """Every summary and the total reach the log sink."""
        executor.run_cycle(_context(), filters, False)

        info = [msg for level, msg in log_messages if level == "INFO"]
        assert "Deleted Containers: 5, Reclaimed Space: 1000" in info
        assert "Deleted Networks: 1" in info
        assert info[-1] == "Total reclaimed space: 3500"

    def test_metrics(self, executor, metrics, filters) -> None:
        """MetricsObserver accumulates across cycles."""
        executor.run_cycle(_context(1), filters, False)
        executor.run_cycle(_context(2), filters, False)

        assert metrics.get_metrics() == {
            "total_operations": 8,
            "total_failures": 0,
            "total_cycles": 2,
            "total_items_deleted": 22,
            "total_space_reclaimed": 7000,
        }


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestRunCycleFailures:
    """Tests for fail-fast behavior."""

    def test_container_failure_skips_rest(self, executor, fake_client, filters, metrics) -> None:
        """First failure aborts the cycle; later operations are not called."""
        error = APIError("engine exploded")
        fake_client.containers.error = error

        with pytest.raises(PruneOperationError) as exc_info:
            executor.run_cycle(_context(), filters, False)

        assert exc_info.value.cause is error
        assert fake_client.call_log == ["containers"]
        assert metrics.get_metrics()["total_failures"] == 1
        assert metrics.get_metrics()["total_cycles"] == 0

    def test_failure_mid_cycle(self, executor, fake_client, filters, log_messages) -> None:
        """A network failure keeps earlier results out of the total log."""
        fake_client.networks.error = APIError("network in use")

        with pytest.raises(PruneOperationError, match="networks prune failed"):
            executor.run_cycle(_context(), filters, False)

        assert fake_client.call_log == ["containers", "images", "networks"]
        assert not any("Total reclaimed space" in msg for _, msg in log_messages)

    def test_cancelled_between_operations(self, executor, fake_client, filters) -> None:
        """Cancellation stops the pipeline before the next engine call."""
        context = _context()
        fake_client.images.side_effect = lambda: context.cancel("exceeded its deadline")

        with pytest.raises(CycleCancelledError):
            executor.run_cycle(context, filters, False)

        assert fake_client.call_log == ["containers", "images"]

    def test_cancellation_is_not_reported_as_failure(self, executor, fake_client, filters, metrics) -> None:
        """Observers only see engine failures."""
        context = _context()
        context.cancel("cancelled by shutdown")

        with pytest.raises(CycleCancelledError):
            executor.run_cycle(context, filters, False)

        assert metrics.get_metrics()["total_failures"] == 0


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestRegistration:
    """Tests for strategy registration and observers."""

    def test_default_executor_has_four_strategies(self, fake_client) -> None:
        """create_default_executor registers all engine operations."""
        executor = create_default_executor(fake_client)

        assert [s.name for s in executor.list_strategies()] == [
            "containers",
            "images",
            "networks",
            "volumes",
        ]
        assert len(executor.observers) == 1
        assert isinstance(executor.observers[0], LoggingObserver)

    def test_register_replaces_same_name(self, fake_client, filters) -> None:
        """Registering a strategy twice keeps a single entry per operation."""
        executor = create_default_executor(fake_client)
        executor.auto_register_all()

        executor.run_cycle(_context(), filters, False)

        assert len(executor.list_strategies()) == 4
        assert fake_client.call_log == ["containers", "images", "networks", "volumes"]

    def test_list_strategies_returns_copy(self, executor) -> None:
        """Callers cannot reorder the executor's pipeline."""
        executor.list_strategies().reverse()

        assert executor.list_strategies()[0].name == "containers"

    def test_every_observer_is_notified(self, fake_client, filters) -> None:
        """Observers passed at construction receive every event."""
        observer = MagicMock(spec=PruneObserver)
        executor = create_default_executor(fake_client, observers=[observer])

        executor.run_cycle(_context(), filters, False)

        assert observer.on_prune_executed.call_count == 4
        observer.on_cycle_completed.assert_called_once()
        observer.on_prune_failed.assert_not_called()
