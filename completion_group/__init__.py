"""
Completion groups for fan-out/fan-in coordination.

Track a batch of concurrent units of work and get notified once, when the
last one finishes.

Example:
    ```python
    from concurrent.futures import ThreadPoolExecutor

    from completion_group import CompletionGroup

    group = CompletionGroup()
    with ThreadPoolExecutor() as pool:
        futures = [group.submit(pool, fetch, url) for url in urls]
        group.notify(lambda: print("all done"))
        group.wait()
    ```
"""

from completion_group.aio import AsyncCompletionGroup
from completion_group.config import CompletionGroupConfig
from completion_group.dispatch import Action, Dispatcher, inline, on_executor, on_loop
from completion_group.exceptions import (
    CompletionGroupError,
    NotificationError,
    UnbalancedLeaveError,
)
from completion_group.group import CompletionGroup
from completion_group.models import WaitStatus

__version__ = "0.1.0"

__all__ = [
    # Groups
    "CompletionGroup",
    "AsyncCompletionGroup",
    "CompletionGroupConfig",
    "WaitStatus",
    # Dispatchers
    "Action",
    "Dispatcher",
    "inline",
    "on_executor",
    "on_loop",
    # Exceptions
    "CompletionGroupError",
    "UnbalancedLeaveError",
    "NotificationError",
]
