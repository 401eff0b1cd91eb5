"""
asyncio completion group.

Same contract as CompletionGroup for code confined to a single event loop.
No locking: every call must come from the loop's thread.
"""

import asyncio
from collections.abc import Coroutine, Iterator
from contextlib import contextmanager
from typing import Any, Self, TypeVar

import structlog

from completion_group.config import CompletionGroupConfig
from completion_group.dispatch import Action, Dispatcher, dispatch_all, inline
from completion_group.exceptions import UnbalancedLeaveError
from completion_group.group import check_count, resolve_timeout
from completion_group.models import WaitStatus

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class AsyncCompletionGroup:
    """
    asyncio completion group (similar to sync.WaitGroup in go).

    Example:
        ```python
        group = AsyncCompletionGroup()
        tasks = [group.spawn(fetch(url)) for url in urls]

        if await group.wait(timeout=5.0):
            results = [task.result() for task in tasks]
        ```
    """

    def __init__(self, config: CompletionGroupConfig | None = None) -> None:
        self._config = config or CompletionGroupConfig()
        self._pending = 0
        self._zero_event = asyncio.Event()
        self._zero_event.set()
        self._registrations: list[tuple[Action, Dispatcher]] = []

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def pending(self) -> int:
        return self._pending

    def enter(self, n: int = 1) -> None:
        """
        Register pending units of work.

        Raises:
            ValueError: If n is not a strictly positive integer.
        """
        check_count(n)
        if self._pending == 0:
            logger.debug("Round started", group=self.name)
        self._pending += n
        self._zero_event.clear()

    def leave(self) -> None:
        """
        Mark one unit of work as finished.

        Raises:
            UnbalancedLeaveError: If nothing is pending.
            NotificationError: If an inline notify action raised.
        """
        if self._pending == 0:
            logger.error("Unbalanced leave", group=self.name)
            raise UnbalancedLeaveError(group=self.name)
        self._pending -= 1
        if self._pending:
            return

        # Waiters already blocked are released even if a new round
        # clears the event before they get to run.
        self._zero_event.set()
        due, self._registrations = self._registrations, []
        logger.debug("Round completed", group=self.name, actions=len(due))
        dispatch_all(due, group=self.name)

    def notify(self, action: Action, dispatcher: Dispatcher = inline) -> None:
        """
        Run an action when the pending count next reaches zero.

        Registrations made during a round queue up and fire in order at its
        end. If the group is idle the action is dispatched right away.

        Raises:
            TypeError: If action is not callable.
        """
        if not callable(action):
            msg = "'action' must be callable."
            raise TypeError(msg)
        if self._pending:
            self._registrations.append((action, dispatcher))
            return
        dispatch_all([(action, dispatcher)], group=self.name)

    async def wait(self, timeout: float | None = None) -> WaitStatus:
        """
        Wait until the pending count reaches zero.

        Args:
            timeout: Seconds to wait. None uses the configured default.

        Returns:
            COMPLETED if the group reached zero, TIMED_OUT otherwise.
        """
        timeout = resolve_timeout(timeout, self._config)
        if self._pending == 0:
            return WaitStatus.COMPLETED
        try:
            await asyncio.wait_for(self._zero_event.wait(), timeout)
        except TimeoutError:
            logger.debug("Wait timed out", group=self.name, timeout=timeout, pending=self._pending)
            return WaitStatus.TIMED_OUT
        return WaitStatus.COMPLETED

    @contextmanager
    def track(self) -> Iterator[Self]:
        """Enter for the duration of a block, leaving even if it raises."""
        self.enter()
        try:
            yield self
        finally:
            self.leave()

    def spawn(self, coro: Coroutine[Any, Any, T]) -> asyncio.Task[T]:
        """
        Schedule a coroutine as one unit of this group.

        The group is entered before the task is created and left when the
        task finishes, including on error or cancellation.

        Returns:
            The created task.
        """
        self.enter()
        try:
            task = asyncio.create_task(coro)
        except BaseException:
            coro.close()
            self.leave()
            raise
        task.add_done_callback(lambda _: self.leave())
        return task

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r}, pending={self._pending})"
