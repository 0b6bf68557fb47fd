"""
Pytest fixtures for promptslot tests.

Provides common fixtures used across all test modules.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest

from promptslot import (
    CancellationToken,
    InMemoryMetricHook,
    InputConfig,
    InputEvent,
    InputManager,
    ManualTimerFactory,
    ObservabilityHooks,
)

# ============================================================================
# Renderer Fixtures
# ============================================================================


class FakeRenderer:
    """Stand-in for a presentation handler."""

    def __init__(self, kind: str) -> None:
        self.kind = kind

    def __repr__(self) -> str:
        return f"FakeRenderer({self.kind!r})"


@pytest.fixture
def renderers() -> dict[str, FakeRenderer]:
    """Renderers for the common kinds."""
    return {kind: FakeRenderer(kind) for kind in ("text", "number", "select", "confirm", "progress")}


@pytest.fixture
def config(renderers) -> InputConfig:
    """Config with text as the default kind."""
    return InputConfig(renderers=renderers, default_renderer="text")


# ============================================================================
# Timer and Metrics Fixtures
# ============================================================================


@pytest.fixture
def timers() -> ManualTimerFactory:
    """Deterministic timer factory."""
    return ManualTimerFactory()


@pytest.fixture
def memory_hook() -> InMemoryMetricHook:
    """In-memory metric hook."""
    return InMemoryMetricHook()


@pytest.fixture
def hooks(memory_hook) -> ObservabilityHooks:
    """Hooks registry reporting to the in-memory hook."""
    registry = ObservabilityHooks()
    registry.add_metric_hook(memory_hook)
    return registry


# ============================================================================
# Manager Fixtures
# ============================================================================


@pytest.fixture
def manager(config, timers, hooks) -> Generator[InputManager, None, None]:
    """Initialized manager with preemption disabled."""
    instance = InputManager(config, timer_factory=timers, hooks=hooks)
    yield instance
    instance.close()


@pytest.fixture
def preemptive_manager(renderers, timers, hooks) -> Generator[InputManager, None, None]:
    """Initialized manager with preemption enabled."""
    instance = InputManager(
        InputConfig(renderers=renderers, default_renderer="text", prioritize_awaiting_inputs=True),
        timer_factory=timers,
        hooks=hooks,
    )
    yield instance
    instance.close()


@pytest.fixture
def events(manager) -> list[InputEvent]:
    """Every lifecycle event emitted by ``manager``."""
    received: list[InputEvent] = []
    manager.subscribe_events(received.append)
    return received


# ============================================================================
# Cancellation Fixtures
# ============================================================================


class CountingToken(CancellationToken):
    """Token that counts listener registrations and removals."""

    def __init__(self) -> None:
        super().__init__()
        self.added = 0
        self.removed = 0

    def add_listener(self, listener) -> bool:
        self.added += 1
        return super().add_listener(listener)

    def remove_listener(self, listener) -> bool:
        removed = super().remove_listener(listener)
        if removed:
            self.removed += 1
        return removed


@pytest.fixture
def counting_token() -> CountingToken:
    """Token that records listener bookkeeping."""
    return CountingToken()
