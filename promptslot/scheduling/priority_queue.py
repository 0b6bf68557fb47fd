"""
Priority queue for pending input prompts.

Orders prompts by descending priority. Prompts of equal priority keep
their submission order: ties are broken by a monotonically increasing
sequence number rather than a timestamp.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any

from promptslot.types import InputPrompt

logger = logging.getLogger(__name__)


@dataclass(order=True)
class _QueueEntry:
    # Sort key: (-priority, sequence) - higher priority and earlier arrival win
    sort_key: tuple[int, int]
    prompt: InputPrompt = field(compare=False)


class PromptQueue:
    """
    Priority queue of prompts waiting for the foreground slot.

    Not thread-safe on its own; the owning InputManager serialises every
    call under its lock.

    Example:
        >>> queue = PromptQueue()
        >>> queue.enqueue(low_prompt)      # priority 1
        >>> queue.enqueue(high_prompt)     # priority 10
        >>> queue.dequeue() is high_prompt
        True
    """

    def __init__(self) -> None:
        self._heap: list[_QueueEntry] = []
        self._sequence = itertools.count()

        # Track entries by ID for fast lookup
        self._entries: dict[str, _QueueEntry] = {}

        # Statistics
        self._total_enqueued = 0
        self._total_dequeued = 0
        self._total_removed = 0

    def enqueue(self, prompt: InputPrompt) -> None:
        """
        Add a prompt to the queue.

        Args:
            prompt: The prompt to enqueue.

        Raises:
            ValueError: If a prompt with the same ID is already queued.
        """
        if prompt.id in self._entries:
            raise ValueError(f"Prompt with ID {prompt.id} already in queue")

        entry = _QueueEntry(sort_key=(-prompt.priority, next(self._sequence)), prompt=prompt)
        heapq.heappush(self._heap, entry)
        self._entries[prompt.id] = entry
        self._total_enqueued += 1

    def dequeue(self) -> InputPrompt | None:
        """
        Remove and return the highest priority prompt.

        Returns:
            The head prompt, or None if the queue is empty.
        """
        if not self._heap:
            return None

        entry = heapq.heappop(self._heap)
        self._entries.pop(entry.prompt.id, None)
        self._total_dequeued += 1
        return entry.prompt

    def peek(self) -> InputPrompt | None:
        """View the head prompt without removing it."""
        if not self._heap:
            return None
        return self._heap[0].prompt

    def get_prompt(self, prompt_id: str) -> InputPrompt | None:
        """Get a queued prompt by ID without removing it."""
        entry = self._entries.get(prompt_id)
        return entry.prompt if entry else None

    def remove(self, prompt_id: str) -> InputPrompt | None:
        """
        Remove a specific prompt from the queue.

        Args:
            prompt_id: The prompt ID to remove.

        Returns:
            The removed prompt, or None if it was not queued.
        """
        entry = self._entries.pop(prompt_id, None)
        if entry is None:
            return None

        self._heap.remove(entry)
        heapq.heapify(self._heap)
        self._total_removed += 1
        return entry.prompt

    def snapshot(self) -> list[InputPrompt]:
        """Get the queued prompts in the order they will be shown."""
        return [entry.prompt for entry in sorted(self._heap)]

    def clear(self) -> list[InputPrompt]:
        """
        Remove every prompt from the queue.

        Returns:
            The removed prompts, in queue order.
        """
        prompts = self.snapshot()
        self._heap.clear()
        self._entries.clear()
        self._total_removed += len(prompts)
        if prompts:
            logger.debug(f"Cleared {len(prompts)} queued prompts")
        return prompts

    def size(self) -> int:
        """Get the current queue size."""
        return len(self._heap)

    def is_empty(self) -> bool:
        """Check if the queue is empty."""
        return not self._heap

    def size_by_priority(self) -> dict[int, int]:
        """
        Get queue size breakdown by priority.

        Returns:
            Dictionary mapping priority values to counts, highest first.
        """
        counts: dict[int, int] = {}
        for entry in sorted(self._heap):
            counts[entry.prompt.priority] = counts.get(entry.prompt.priority, 0) + 1
        return counts

    def get_stats(self) -> dict[str, Any]:
        """Get queue statistics."""
        return {
            "current_size": len(self._heap),
            "total_enqueued": self._total_enqueued,
            "total_dequeued": self._total_dequeued,
            "total_removed": self._total_removed,
            "size_by_priority": self.size_by_priority(),
        }

    def __len__(self) -> int:
        """Get queue size."""
        return self.size()

    def __contains__(self, prompt_id: str) -> bool:
        """Check if a prompt ID is in the queue."""
        return prompt_id in self._entries
