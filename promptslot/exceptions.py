"""
Custom exceptions for promptslot.

This module defines the exception hierarchy for the library. Cancellation
and timeouts are never reported through exceptions: a cancelled prompt
settles with ``None``. The types below cover misuse of the manager and the
diagnostics it surfaces to logs and error handlers.
"""

from __future__ import annotations

from typing import Any


class PromptSlotError(Exception):
    """
    Base exception for all promptslot errors.

    Attributes:
        message: Human-readable error description.
        details: Additional context about the error.

    Example:
        >>> try:
        ...     manager.submit(message="Name?")
        ... except PromptSlotError as e:
        ...     logger.error(f"promptslot error: {e}")
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class NotInitializedError(PromptSlotError):
    """
    Raised when an operation is invoked on a manager without a config.

    Fatal to the call that raised it, never to the manager: calling
    ``init()`` afterwards makes the same operation succeed.

    Example:
        >>> manager = InputManager()
        >>> manager.submit(message="Name?")
        Traceback (most recent call last):
        ...
        NotInitializedError: InputManager.init() must be called first
    """

    def __init__(self, operation: str | None = None) -> None:
        self.operation = operation
        details = {"operation": operation} if operation else None
        super().__init__("InputManager.init() must be called first", details)


class ConfigurationError(PromptSlotError):
    """
    Raised when the manager configuration is invalid.

    Attributes:
        config_key: The configuration key that is invalid.
        expected: What was expected.
        received: What was actually received.
    """

    def __init__(
        self,
        config_key: str,
        expected: str | None = None,
        received: Any = None,
        message: str | None = None,
    ) -> None:
        self.config_key = config_key
        self.expected = expected
        self.received = received

        if message is None:
            message = f"Invalid configuration for '{config_key}'"
            if expected:
                message += f": expected {expected}"

        details = {
            "config_key": config_key,
            "expected": expected,
            "received": repr(received) if received is not None else None,
        }
        super().__init__(message, details)


class MissingRendererError(PromptSlotError):
    """
    Diagnostic for a prompt whose kind has no registered renderer.

    Built by ``handle_missing_renderer()`` under the ``throw`` policy and
    handed to the configured error handler. The manager never raises it:
    the prompt is always cancelled so the queue keeps moving.

    Attributes:
        prompt_id: ID of the prompt that could not be rendered.
        kind: The kind that had no renderer.
    """

    def __init__(self, prompt_id: str, kind: str | None) -> None:
        self.prompt_id = prompt_id
        self.kind = kind
        super().__init__(
            f"No renderer for kind: {kind}",
            {"prompt_id": prompt_id, "kind": kind},
        )


class StreamClosedError(PromptSlotError):
    """Raised when pulling from a display channel that has been cancelled."""

    def __init__(self, display_id: str) -> None:
        self.display_id = display_id
        super().__init__(f"Display stream {display_id} is closed", {"display_id": display_id})
