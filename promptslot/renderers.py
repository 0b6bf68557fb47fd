"""
Renderer registry.

Maps a prompt kind to an opaque presentation handler. The manager never
calls a handler itself; it only answers "which handler draws this kind",
so any UI toolkit can supply its own handler type.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class RendererRegistry:
    """
    Capability-keyed mapping from kind to renderer.

    Example:
        >>> registry = RendererRegistry({"text": TextRenderer}, default="text")
        >>> registry.resolve("confirm") is None
        True
        >>> registry.resolve(None) is TextRenderer
        True
    """

    def __init__(
        self,
        renderers: dict[str, Any] | None = None,
        default: str | None = None,
    ) -> None:
        """
        Initialize the registry.

        Args:
            renderers: Initial kind-to-handler mapping.
            default: Kind used when a prompt has no kind of its own.
        """
        self._renderers: dict[str, Any] = dict(renderers or {})
        self.default = default

    def register(self, kind: str, renderer: Any) -> None:
        """Register or replace the handler for a kind."""
        if kind in self._renderers:
            logger.debug(f"Replacing renderer for kind '{kind}'")
        self._renderers[kind] = renderer

    def unregister(self, kind: str) -> bool:
        """Remove the handler for a kind. Returns True if one existed."""
        return self._renderers.pop(kind, None) is not None

    def get(self, kind: str) -> Any | None:
        """Get the handler registered for exactly this kind."""
        return self._renderers.get(kind)

    def resolve(self, kind: str | None) -> Any | None:
        """
        Get the handler for a prompt kind.

        Args:
            kind: The prompt kind; None selects the default kind.

        Returns:
            The handler, or None if nothing is registered for the kind.
        """
        key = kind if kind is not None else self.default
        if key is None:
            return None
        return self._renderers.get(key)

    def kinds(self) -> list[str]:
        """Registered kinds, in registration order."""
        return list(self._renderers)

    def to_dict(self) -> dict[str, Any]:
        """Copy of the kind-to-handler mapping."""
        return dict(self._renderers)

    def __contains__(self, kind: str) -> bool:
        return kind in self._renderers

    def __len__(self) -> int:
        return len(self._renderers)
