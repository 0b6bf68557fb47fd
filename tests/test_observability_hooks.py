"""Tests for promptslot.observability.hooks module."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pytest

from promptslot import CancellationToken
from promptslot.observability import (
    METRIC_DISPLAY_CANCELED,
    METRIC_DISPLAY_PREEMPTED,
    METRIC_DISPLAY_STARTED,
    METRIC_DISPLAY_UPDATES,
    METRIC_PROMPT_CANCELED,
    METRIC_PROMPT_RESOLVED,
    METRIC_PROMPT_SUBMITTED,
    METRIC_PROMPT_WAIT,
    METRIC_QUEUE_LENGTH,
    InMemoryMetricHook,
    LoggingMetricHook,
    MetricHook,
    MetricType,
    ObservabilityHooks,
)


@pytest.fixture(autouse=True)
def reset_observability_hooks():
    """Reset the global ObservabilityHooks instance before each test."""
    ObservabilityHooks.reset_instance()
    yield
    ObservabilityHooks.reset_instance()


# =============================================================================
# MetricHook Protocol Tests
# =============================================================================


class TestMetricHookProtocol:
    """Tests for MetricHook protocol."""

    def test_metric_types(self):
        """Test the metric types the manager emits."""
        assert [t.value for t in MetricType] == ["counter", "gauge", "timing"]

    def test_protocol_detection(self):
        """Test that an incomplete hook is not a MetricHook."""

        class IncompleteHook:
            def increment(self, name: str, value: float = 1.0, tags: dict | None = None) -> None:
                pass

        assert not isinstance(IncompleteHook(), MetricHook)

    def test_builtin_hooks_satisfy_protocol(self):
        """Test that built-in hooks satisfy the protocol."""
        assert isinstance(LoggingMetricHook(), MetricHook)
        assert isinstance(InMemoryMetricHook(), MetricHook)


# =============================================================================
# LoggingMetricHook Tests
# =============================================================================


class TestLoggingMetricHook:
    """Tests for LoggingMetricHook."""

    def test_default_logger(self):
        """Test hook creates default logger."""
        hook = LoggingMetricHook()
        assert hook.logger.name == "promptslot.metrics"

    def test_increment_logs(self):
        """Test increment logs correctly."""
        hook = LoggingMetricHook()
        with patch.object(hook.logger, "log") as mock_log:
            hook.increment("prompts", 1.0, {"kind": "text"})
            mock_log.assert_called_once_with(
                logging.DEBUG, "COUNTER prompts=1.0 tags={'kind': 'text'}"
            )

    def test_gauge_logs(self):
        """Test gauge logs correctly."""
        hook = LoggingMetricHook(level=logging.INFO)
        with patch.object(hook.logger, "log") as mock_log:
            hook.gauge("queue", 3.0)
            mock_log.assert_called_once_with(logging.INFO, "GAUGE queue=3.0 tags=None")

    def test_timing_logs(self):
        """Test timing logs correctly."""
        hook = LoggingMetricHook()
        with patch.object(hook.logger, "log") as mock_log:
            hook.timing("wait", 12.5, {"outcome": "resolved"})
            mock_log.assert_called_once_with(
                logging.DEBUG, "TIMING wait=12.5ms tags={'outcome': 'resolved'}"
            )


# =============================================================================
# InMemoryMetricHook Tests
# =============================================================================


class TestInMemoryMetricHook:
    """Tests for InMemoryMetricHook."""

    def test_counter_with_tags(self):
        """Test counters are keyed by tags."""
        hook = InMemoryMetricHook()
        hook.increment("canceled", tags={"reason": "timeout"})
        hook.increment("canceled", tags={"reason": "timeout"})
        hook.increment("canceled", tags={"reason": "abort"})

        assert hook.get_counter("canceled", {"reason": "timeout"}) == 2.0
        assert hook.get_counter("canceled", {"reason": "abort"}) == 1.0
        assert hook.get_counter("canceled") == 0.0

    def test_gauge_overwrites(self):
        """Test gauges keep the latest value."""
        hook = InMemoryMetricHook()
        hook.gauge("queue", 3)
        hook.gauge("queue", 1)

        assert hook.get_gauge("queue") == 1
        assert hook.get_gauge("missing") is None

    def test_timing_stats(self):
        """Test timing summaries."""
        hook = InMemoryMetricHook()
        for value in (10.0, 20.0, 30.0):
            hook.timing("wait", value)

        stats = hook.get_timing_stats("wait")
        assert stats.count == 3
        assert stats.min == 10.0
        assert stats.max == 30.0
        assert stats.avg == 20.0
        assert stats.to_dict()["total"] == 60.0
        assert hook.get_timing_stats("missing") is None

    def test_reset(self):
        """Test reset clears everything."""
        hook = InMemoryMetricHook()
        hook.increment("a")
        hook.gauge("b", 1)
        hook.timing("c", 1)
        hook.reset()

        assert hook.get_counter("a") == 0.0
        assert hook.get_gauge("b") is None
        assert hook.get_timing_stats("c") is None


# =============================================================================
# ObservabilityHooks Tests
# =============================================================================


class TestObservabilityHooks:
    """Tests for the hook registry."""

    def test_singleton(self):
        """Test get_instance returns one shared registry."""
        assert ObservabilityHooks.get_instance() is ObservabilityHooks.get_instance()

    def test_reset_instance(self):
        """Test reset_instance drops the shared registry."""
        first = ObservabilityHooks.get_instance()
        ObservabilityHooks.reset_instance()
        assert ObservabilityHooks.get_instance() is not first

    def test_add_and_remove(self):
        """Test hook registration."""
        hooks = ObservabilityHooks()
        hook = InMemoryMetricHook()
        hooks.add_metric_hook(hook)

        assert hooks.metric_hooks == [hook]
        assert hooks.remove_metric_hook(hook)
        assert not hooks.remove_metric_hook(hook)

    def test_emit_to_all_hooks(self):
        """Test every hook receives each metric."""
        hooks = ObservabilityHooks()
        first, second = InMemoryMetricHook(), InMemoryMetricHook()
        hooks.add_metric_hook(first)
        hooks.add_metric_hook(second)

        hooks.emit_counter("x")
        hooks.emit_gauge("y", 2)
        hooks.emit_timing("z", 5)

        for hook in (first, second):
            assert hook.get_counter("x") == 1.0
            assert hook.get_gauge("y") == 2
            assert hook.get_timing_stats("z").count == 1

    def test_failing_hook_is_skipped(self):
        """Test a raising hook does not stop the others."""
        hooks = ObservabilityHooks()
        broken = MagicMock()
        broken.increment.side_effect = RuntimeError("backend down")
        healthy = InMemoryMetricHook()
        hooks.add_metric_hook(broken)
        hooks.add_metric_hook(healthy)

        hooks.emit_counter("x")

        assert healthy.get_counter("x") == 1.0

    def test_clear(self):
        """Test clearing hooks."""
        hooks = ObservabilityHooks()
        hooks.add_metric_hook(InMemoryMetricHook())
        hooks.clear_metric_hooks()
        assert hooks.metric_hooks == []


# =============================================================================
# Manager Metrics Tests
# =============================================================================


class TestManagerMetrics:
    """Tests for the metrics the InputManager emits."""

    def test_prompt_lifecycle_metrics(self, manager, memory_hook):
        """Test submit, resolve and cancel counters."""
        manager.submit(message="a", kind="text")
        second = manager.submit(message="b")
        manager.resolve(manager.get_active().id, "x")
        manager.cancel(manager.get_active().id)

        assert memory_hook.get_counter(METRIC_PROMPT_SUBMITTED, {"kind": "text"}) == 1.0
        assert memory_hook.get_counter(METRIC_PROMPT_SUBMITTED, {"kind": None}) == 1.0
        assert memory_hook.get_counter(METRIC_PROMPT_RESOLVED, {"kind": "text"}) == 1.0
        assert memory_hook.get_counter(METRIC_PROMPT_CANCELED, {"reason": "manual"}) == 1.0
        assert memory_hook.get_timing_stats(METRIC_PROMPT_WAIT, {"outcome": "resolved"}).count == 1
        assert memory_hook.get_timing_stats(METRIC_PROMPT_WAIT, {"outcome": "canceled"}).count == 1
        assert second.result(timeout=0) is None

    def test_cancel_reasons_tagged(self, manager, memory_hook, timers):
        """Test cancellation counters carry the reason."""
        token = CancellationToken()
        manager.submit(message="a", cancel_token=token)
        manager.submit(message="b", timeout=1.0)
        token.cancel()
        timers.advance(1.0)

        assert memory_hook.get_counter(METRIC_PROMPT_CANCELED, {"reason": "abort"}) == 1.0
        assert memory_hook.get_counter(METRIC_PROMPT_CANCELED, {"reason": "timeout"}) == 1.0

    def test_queue_length_gauge(self, manager, memory_hook):
        """Test the queue gauge tracks waiting prompts."""
        manager.submit(message="a")
        manager.submit(message="b")
        manager.submit(message="c")
        assert memory_hook.get_gauge(METRIC_QUEUE_LENGTH) == 2

        manager.resolve(manager.get_active().id, None)
        assert memory_hook.get_gauge(METRIC_QUEUE_LENGTH) == 1

    def test_display_metrics(self, preemptive_manager, memory_hook):
        """Test display counters, including preemption."""
        handle = preemptive_manager.display(kind="progress")
        handle.update(1)
        handle.update(2)
        preemptive_manager.submit(message="urgent")
        handle.cancel()

        assert memory_hook.get_counter(METRIC_DISPLAY_STARTED, {"kind": "progress"}) == 1.0
        assert memory_hook.get_counter(METRIC_DISPLAY_UPDATES) == 2.0
        assert memory_hook.get_counter(METRIC_DISPLAY_PREEMPTED) == 1.0
        assert memory_hook.get_counter(METRIC_DISPLAY_CANCELED) == 1.0
