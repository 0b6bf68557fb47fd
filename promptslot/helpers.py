"""
Typed prompt helpers and the process-wide default manager.

Applications that have a single foreground slot can skip passing an
InputManager around and use the module-level functions, which all share
one default instance.

Example:
    >>> from promptslot import InputConfig
    >>> from promptslot.helpers import init_input, text, confirm
    >>>
    >>> init_input(InputConfig(renderers=RENDERERS, default_renderer="text"))
    >>> name = text(message="Project name?", validate=is_slug)
    >>> ok = confirm(message="Create it?")
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future
from typing import Any

from promptslot.display import DisplayHandle
from promptslot.manager import InputConfig, InputManager
from promptslot.observability.hooks import ObservabilityHooks
from promptslot.types import DisplayOptions, InputOptions

_default_manager: InputManager | None = None
_manager_lock = threading.Lock()


def get_input_manager() -> InputManager:
    """
    Get the default input manager.

    Creates an uninitialised one, reporting to the process-wide
    ObservabilityHooks, if none exists.

    Returns:
        Default InputManager instance.
    """
    global _default_manager
    with _manager_lock:
        if _default_manager is None:
            _default_manager = InputManager(hooks=ObservabilityHooks.get_instance())
        return _default_manager


def set_input_manager(manager: InputManager | None) -> None:
    """
    Set the default input manager.

    Args:
        manager: InputManager to use as default; None drops the current one.
    """
    global _default_manager
    with _manager_lock:
        _default_manager = manager


def init_input(config: InputConfig) -> InputManager:
    """Initialize the default manager with a config and return it."""
    manager = get_input_manager()
    manager.init(config)
    return manager


def request_input(options: InputOptions | None = None, **kwargs: Any) -> Future:
    """Submit a prompt to the default manager."""
    return get_input_manager().submit(options, **kwargs)


def show_display(options: DisplayOptions | None = None, **kwargs: Any) -> DisplayHandle:
    """Start a display on the default manager."""
    return get_input_manager().display(options, **kwargs)


def _with_meta(kwargs: dict[str, Any], **extras: Any) -> dict[str, Any]:
    meta = dict(kwargs.pop("meta", None) or {})
    meta.update({key: value for key, value in extras.items() if value is not None})
    kwargs["meta"] = meta
    return kwargs


class InputHelpers:
    """
    Prompt shortcuts for the common renderer kinds.

    Each helper sets ``kind`` and packs its extra arguments into ``meta``
    for the renderer; every other keyword is passed to ``submit()``.

    Example:
        >>> helpers = InputHelpers(manager)
        >>> future = helpers.number(message="Replicas?", min=1, max=9)
        >>> manager.get_active().meta
        {'min': 1, 'max': 9}
    """

    def __init__(self, manager: InputManager | None = None) -> None:
        """
        Args:
            manager: Manager to submit to; the default manager when None.
        """
        self._manager = manager

    @property
    def manager(self) -> InputManager:
        return self._manager if self._manager is not None else get_input_manager()

    def text(
        self,
        validate: Callable[[str], bool | str] | None = None,
        multiline: bool | None = None,
        **kwargs: Any,
    ) -> Future:
        """
        Ask for free text.

        Args:
            validate: Returns True, or an error message to show.
            multiline: Whether the renderer should allow newlines.
        """
        kwargs = _with_meta(kwargs, validate=validate, multiline=multiline)
        return self.manager.submit(kind="text", **kwargs)

    def number(
        self,
        min: float | None = None,
        max: float | None = None,
        step: float | None = None,
        **kwargs: Any,
    ) -> Future:
        """Ask for a number within optional bounds."""
        kwargs = _with_meta(kwargs, min=min, max=max, step=step)
        return self.manager.submit(kind="number", **kwargs)

    def select(self, options: Sequence[Any], **kwargs: Any) -> Future:
        """
        Ask the user to pick one option.

        Args:
            options: ``{"label": ..., "value": ...}`` dicts or
                ``(label, value)`` pairs. The answer is the chosen value.
        """
        choices = [
            option if isinstance(option, dict) else {"label": option[0], "value": option[1]}
            for option in options
        ]
        kwargs = _with_meta(kwargs, options=choices)
        return self.manager.submit(kind="select", **kwargs)

    def confirm(self, **kwargs: Any) -> Future:
        """Ask a yes/no question."""
        return self.manager.submit(kind="confirm", **kwargs)


_helpers = InputHelpers()


def text(validate=None, multiline=None, **kwargs: Any) -> Future:
    """Ask for free text on the default manager."""
    return _helpers.text(validate=validate, multiline=multiline, **kwargs)


def number(min=None, max=None, step=None, **kwargs: Any) -> Future:
    """Ask for a number on the default manager."""
    return _helpers.number(min=min, max=max, step=step, **kwargs)


def select(options: Sequence[Any], **kwargs: Any) -> Future:
    """Ask for a choice on the default manager."""
    return _helpers.select(options, **kwargs)


def confirm(**kwargs: Any) -> Future:
    """Ask a yes/no question on the default manager."""
    return _helpers.confirm(**kwargs)
