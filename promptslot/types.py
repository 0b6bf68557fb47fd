"""
Core type definitions for promptslot.

This module defines the data structures shared by the scheduler, the
display channels and the presentation layer: the options callers pass in,
the prompts the manager tracks, and the enums naming cancellation reasons
and missing-renderer policies.
"""

from __future__ import annotations

import uuid
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from promptslot.cancellation import CancellationSource

# Priority defaults. Interactive prompts outrank passive displays so that,
# with preemption enabled, an input suspends a visible display.
DEFAULT_INPUT_PRIORITY = 10
DEFAULT_DISPLAY_PRIORITY = 0


def generate_id() -> str:
    """Generate a unique prompt or display identifier."""
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


class CancelReason(str, Enum):
    """Why a prompt was cancelled instead of resolved."""

    ABORT = "abort"
    TIMEOUT = "timeout"
    MISSING_RENDERER = "missing-renderer"
    MANUAL = "manual"
    SHUTDOWN = "shutdown"


class MissingRendererPolicy(str, Enum):
    """
    What to surface when the active prompt has no renderer.

    Every policy cancels the prompt; they differ only in the diagnostic.

    Attributes:
        RESOLVE_NULL: Settle with None quietly (debug log only).
        REJECT: Settle with None and log a warning.
        THROW: Settle with None, log an error and pass a
            MissingRendererError to the configured error handler.
    """

    RESOLVE_NULL = "resolve-null"
    REJECT = "reject"
    THROW = "throw"


@dataclass
class InputOptions:
    """
    Options for an awaited input prompt.

    Attributes:
        message: Text shown to the user.
        placeholder: Optional placeholder for the input widget.
        default_value: Value the renderer may pre-fill.
        kind: Renderer category; the default renderer is used when None.
        required: Whether the renderer should refuse an empty answer.
        meta: Free-form renderer configuration.
        priority: Queue priority; the manager default applies when None.
        cancel_token: Optional external cancellation source.
        timeout: Seconds before the prompt is cancelled; None or <= 0
            disables the timer.

    Example:
        >>> options = InputOptions(
        ...     message="Deploy to production?",
        ...     kind="confirm",
        ...     timeout=30.0,
        ... )
    """

    message: str = ""
    placeholder: str | None = None
    default_value: Any = None
    kind: str | None = None
    required: bool = False
    meta: dict[str, Any] = field(default_factory=dict)
    priority: int | None = None
    cancel_token: CancellationSource | None = None
    timeout: float | None = None


@dataclass
class DisplayOptions:
    """
    Options for a passive, streaming display.

    Attributes:
        message: Text shown alongside the streamed values.
        kind: Renderer category; the default renderer is used when None.
        priority: Preemption priority; the manager default applies when None.
        initial_value: First value on the stream, when not None.
        meta: Free-form renderer configuration.
    """

    message: str = ""
    kind: str | None = None
    priority: int | None = None
    initial_value: Any = None
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass
class InputPrompt:
    """
    A pending or active input request.

    Created by ``InputManager.submit()``. The ``future`` belongs to the
    manager until the prompt is settled, which happens exactly once.

    Attributes:
        id: Unique identifier.
        message: Text shown to the user.
        kind: Renderer category.
        priority: Effective queue priority.
        placeholder: Optional placeholder text.
        default_value: Value the renderer may pre-fill.
        required: Whether an empty answer is allowed.
        meta: Free-form renderer configuration.
        timeout: Effective timeout in seconds, if any.
        created_at: When the prompt was submitted.
        future: Settles with the answer, or None when cancelled.
    """

    id: str
    message: str
    kind: str | None
    priority: int
    placeholder: str | None = None
    default_value: Any = None
    required: bool = False
    meta: dict[str, Any] = field(default_factory=dict)
    timeout: float | None = None
    created_at: datetime = field(default_factory=_utc_now)
    future: Future = field(default_factory=Future, repr=False, compare=False)
    settled: bool = field(default=False, repr=False, compare=False)

    @classmethod
    def from_options(
        cls,
        options: InputOptions,
        priority: int,
        timeout: float | None,
    ) -> InputPrompt:
        """Build a prompt from caller options and resolved defaults."""
        return cls(
            id=generate_id(),
            message=options.message,
            kind=options.kind,
            priority=priority,
            placeholder=options.placeholder,
            default_value=options.default_value,
            required=options.required,
            meta=dict(options.meta),
            timeout=timeout,
        )

    def age_seconds(self) -> float:
        """Get the age of this prompt in seconds."""
        return (_utc_now() - self.created_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "type": "input",
            "message": self.message,
            "kind": self.kind,
            "priority": self.priority,
            "required": self.required,
            "timeout": self.timeout,
            "created_at": self.created_at.isoformat(),
            "settled": self.settled,
            "meta": self.meta,
        }


@dataclass
class DisplayPrompt:
    """
    Presentation view of an active display channel.

    Attributes:
        id: Unique identifier, shared with the channel.
        message: Text shown alongside the values.
        kind: Renderer category.
        priority: Effective preemption priority.
        meta: Free-form renderer configuration.
        current_value: Last value passed to ``update``.
        suspended: True while the display is not in the foreground.
    """

    id: str
    message: str
    kind: str | None
    priority: int
    meta: dict[str, Any] = field(default_factory=dict)
    current_value: Any = None
    suspended: bool = False
    created_at: datetime = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "type": "display",
            "message": self.message,
            "kind": self.kind,
            "priority": self.priority,
            "suspended": self.suspended,
            "created_at": self.created_at.isoformat(),
            "meta": self.meta,
        }
