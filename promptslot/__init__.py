"""
promptslot: a single foreground slot shared by many callers.

Independent callers ask the user for input, or stream values to a passive
display, without coordinating with each other. promptslot queues the
requests by priority, shows one at a time, and settles every request
exactly once, including on abort, timeout and shutdown.

Basic Usage:
    >>> from promptslot import InputManager, InputConfig, CancellationToken
    >>>
    >>> manager = InputManager(InputConfig(
    ...     renderers={"text": TextRenderer, "confirm": ConfirmRenderer},
    ...     default_renderer="text",
    ... ))
    >>>
    >>> # Callers submit and get a future back
    >>> token = CancellationToken()
    >>> future = manager.submit(message="Deploy?", kind="confirm", cancel_token=token)
    >>>
    >>> # The presentation layer renders the active prompt and answers it
    >>> prompt = manager.get_active()
    >>> manager.resolve(prompt.id, True)
    >>> future.result()
    True
    >>>
    >>> # Displays stream values while no prompt needs the slot
    >>> handle = manager.display(message="Building", kind="progress")
    >>> handle.update(40)
"""

__version__ = "0.1.0"

# Cancellation
from promptslot.cancellation import (
    CancellationBridge,
    CancellationSource,
    CancellationToken,
    ManualTimerFactory,
    TimerFactory,
    default_timer_factory,
)

# Displays
from promptslot.display import DisplayChannel, DisplayHandle, DisplayRegistry

# Events
from promptslot.events import EventType, InputEvent, ListenerSet

# Exceptions
from promptslot.exceptions import (
    ConfigurationError,
    MissingRendererError,
    NotInitializedError,
    PromptSlotError,
    StreamClosedError,
)

# Module-level convenience API
from promptslot.helpers import (
    InputHelpers,
    get_input_manager,
    init_input,
    request_input,
    set_input_manager,
    show_display,
)

# Core
from promptslot.manager import InputConfig, InputManager

# Observability
from promptslot.observability import InMemoryMetricHook, LoggingMetricHook, ObservabilityHooks
from promptslot.renderers import RendererRegistry
from promptslot.scheduling import PromptQueue

# Types
from promptslot.types import (
    DEFAULT_DISPLAY_PRIORITY,
    DEFAULT_INPUT_PRIORITY,
    CancelReason,
    DisplayOptions,
    DisplayPrompt,
    InputOptions,
    InputPrompt,
    MissingRendererPolicy,
    generate_id,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "InputManager",
    "InputConfig",
    "RendererRegistry",
    "PromptQueue",
    # Types
    "InputOptions",
    "InputPrompt",
    "DisplayOptions",
    "DisplayPrompt",
    "CancelReason",
    "MissingRendererPolicy",
    "DEFAULT_INPUT_PRIORITY",
    "DEFAULT_DISPLAY_PRIORITY",
    "generate_id",
    # Cancellation
    "CancellationToken",
    "CancellationSource",
    "CancellationBridge",
    "TimerFactory",
    "ManualTimerFactory",
    "default_timer_factory",
    # Displays
    "DisplayChannel",
    "DisplayHandle",
    "DisplayRegistry",
    # Events
    "EventType",
    "InputEvent",
    "ListenerSet",
    # Exceptions
    "PromptSlotError",
    "NotInitializedError",
    "ConfigurationError",
    "MissingRendererError",
    "StreamClosedError",
    # Observability
    "ObservabilityHooks",
    "LoggingMetricHook",
    "InMemoryMetricHook",
    # Convenience
    "InputHelpers",
    "get_input_manager",
    "set_input_manager",
    "init_input",
    "request_input",
    "show_display",
]
