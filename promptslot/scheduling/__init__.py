"""
Prompt queuing for promptslot.

Example:
    >>> from promptslot.scheduling import PromptQueue
    >>>
    >>> queue = PromptQueue()
    >>> queue.enqueue(prompt)
    >>> queue.snapshot()
    [InputPrompt(id='...', ...)]
"""

from promptslot.scheduling.priority_queue import PromptQueue

__all__ = [
    "PromptQueue",
]
