"""
Observability components for promptslot.

Example:
    >>> from promptslot.observability import ObservabilityHooks, LoggingMetricHook
    >>>
    >>> hooks = ObservabilityHooks()
    >>> hooks.add_metric_hook(LoggingMetricHook())
    >>> manager = InputManager(config, hooks=hooks)

Standard Metrics:
    - promptslot.prompt.submitted: Prompts submitted
    - promptslot.prompt.resolved: Prompts resolved with a value
    - promptslot.prompt.canceled: Prompts cancelled (tag: reason)
    - promptslot.prompt.wait_ms: Submission-to-settlement time (tag: outcome)
    - promptslot.queue.length: Prompts waiting behind the active one
    - promptslot.display.started / updates / canceled / preempted
"""

from promptslot.observability.hooks import (
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
    TimingStats,
)

__all__ = [
    "MetricType",
    "MetricHook",
    "LoggingMetricHook",
    "InMemoryMetricHook",
    "TimingStats",
    "ObservabilityHooks",
    "METRIC_PROMPT_SUBMITTED",
    "METRIC_PROMPT_RESOLVED",
    "METRIC_PROMPT_CANCELED",
    "METRIC_PROMPT_WAIT",
    "METRIC_QUEUE_LENGTH",
    "METRIC_DISPLAY_STARTED",
    "METRIC_DISPLAY_UPDATES",
    "METRIC_DISPLAY_CANCELED",
    "METRIC_DISPLAY_PREEMPTED",
]
