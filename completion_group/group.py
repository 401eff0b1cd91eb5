"""
Thread-safe completion group.

Counts outstanding units of work and fires the registered notify actions
exactly once each time the count drops back to zero, based on Go's
sync.WaitGroup and GCD's dispatch groups.
"""

import asyncio
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import Executor, Future
from contextlib import contextmanager
from functools import total_ordering
from numbers import Number
from typing import Any, Self

import structlog

from completion_group.config import CompletionGroupConfig
from completion_group.dispatch import Action, Dispatcher, dispatch_all, inline
from completion_group.exceptions import UnbalancedLeaveError
from completion_group.models import WaitStatus

logger = structlog.get_logger(__name__)


def check_count(n: int) -> None:
    """Reject anything but a strictly positive int (bools included)."""
    if not isinstance(n, int) or isinstance(n, bool) or n <= 0:
        msg = "'n' must be a strictly positive integer."
        raise ValueError(msg)


def resolve_timeout(timeout: float | None, config: CompletionGroupConfig) -> float | None:
    """Fall back to the configured default and reject negative timeouts."""
    if timeout is None:
        timeout = config.default_wait_timeout
    if timeout is not None and timeout < 0:
        msg = "'timeout' must be non-negative."
        raise ValueError(msg)
    return timeout


@total_ordering
class CompletionGroup:
    """
    Counting join barrier for fan-out/fan-in over threads.

    Every ``enter()`` must be matched by exactly one ``leave()``. When the
    count returns to zero, every action registered with ``notify()`` during
    that round runs once, in registration order, and all ``wait()`` callers
    wake up. The group is then idle and can be reused.

    Issue all ``enter()`` calls for a batch before dispatching any work,
    otherwise a fast unit may bring the count to zero before its siblings
    are registered.

    Example:
        ```python
        group = CompletionGroup()
        group.enter(len(urls))
        for url in urls:
            pool.submit(fetch, url).add_done_callback(lambda _: group.leave())

        group.notify(render, on_loop(loop))
        if not group.wait(timeout=5.0):
            ...  # still running
        ```
    """

    def __init__(self, config: CompletionGroupConfig | None = None) -> None:
        """
        Args:
            config: Group configuration. Defaults are used when omitted.
        """
        self._config = config or CompletionGroupConfig()
        self._cond = threading.Condition()
        self._pending = 0
        # Bumped on every zero-crossing so waiters from a finished round
        # are not fooled by a new round starting before they wake.
        self._rounds = 0
        self._registrations: list[tuple[Action, Dispatcher]] = []

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def pending(self) -> int:
        """Number of units entered but not yet left."""
        with self._cond:
            return self._pending

    def enter(self, n: int = 1) -> None:
        """
        Register pending units of work.

        Args:
            n: Number of units (default 1).

        Raises:
            ValueError: If n is not a strictly positive integer.
        """
        check_count(n)
        with self._cond:
            if self._pending == 0:
                logger.debug("Round started", group=self.name)
            self._pending += n

    def leave(self) -> None:
        """
        Mark one unit of work as finished.

        Raises:
            UnbalancedLeaveError: If nothing is pending.
            NotificationError: If an inline notify action raised.
        """
        with self._cond:
            if self._pending == 0:
                logger.error("Unbalanced leave", group=self.name)
                raise UnbalancedLeaveError(group=self.name)
            self._pending -= 1
            if self._pending:
                return
            due, self._registrations = self._registrations, []
            self._rounds += 1
            self._cond.notify_all()

        logger.debug("Round completed", group=self.name, actions=len(due))
        # Outside the lock so actions may use the group again.
        dispatch_all(due, group=self.name)

    def notify(self, action: Action, dispatcher: Dispatcher = inline) -> None:
        """
        Run an action when the pending count next reaches zero.

        Registrations queue up: each one made during a round fires once at
        the end of that round. If the group is idle the action is dispatched
        right away.

        Args:
            action: Zero-argument callable.
            dispatcher: Execution context for the action (default: inline on
                whichever thread performs the final ``leave()``).

        Raises:
            TypeError: If action is not callable.
            NotificationError: If the group is idle and the inline action raised.
        """
        if not callable(action):
            msg = "'action' must be callable."
            raise TypeError(msg)
        with self._cond:
            if self._pending:
                self._registrations.append((action, dispatcher))
                return
        dispatch_all([(action, dispatcher)], group=self.name)

    def wait(self, timeout: float | None = None) -> WaitStatus:
        """
        Block until the pending count reaches zero.

        Never changes the count and never cancels outstanding work.

        Args:
            timeout: Seconds to wait. None uses the configured default.

        Returns:
            COMPLETED if the group reached zero, TIMED_OUT otherwise.

        Raises:
            ValueError: If timeout is negative.
        """
        timeout = resolve_timeout(timeout, self._config)
        with self._cond:
            if self._pending == 0:
                return WaitStatus.COMPLETED
            started = self._rounds
            if self._cond.wait_for(lambda: self._rounds != started, timeout):
                return WaitStatus.COMPLETED
            pending = self._pending

        logger.debug("Wait timed out", group=self.name, timeout=timeout, pending=pending)
        return WaitStatus.TIMED_OUT

    @contextmanager
    def track(self) -> Iterator[Self]:
        """Enter for the duration of a block, leaving even if it raises."""
        self.enter()
        try:
            yield self
        finally:
            self.leave()

    def submit(self, executor: Executor, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """
        Run ``fn`` on an executor as one unit of this group.

        The group is entered before submission and left when the future is
        done, whatever its outcome.

        Args:
            executor: Executor to run on.
            fn: Callable to submit.
            *args: Positional arguments for fn.
            **kwargs: Keyword arguments for fn.

        Returns:
            The executor's future.
        """
        self.enter()
        try:
            future = executor.submit(fn, *args, **kwargs)
        except BaseException:
            self.leave()
            raise
        future.add_done_callback(lambda _: self.leave())
        return future

    def notify_future(self, loop: asyncio.AbstractEventLoop | None = None) -> asyncio.Future[None]:
        """
        Awaitable signal for the next zero-crossing.

        Args:
            loop: Loop owning the future. Defaults to the running loop.

        Returns:
            Future resolved with None once the count reaches zero (on the
            loop's next iteration if the group is already idle).
        """
        loop = loop or asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()

        def _resolve() -> None:
            if not future.done():
                future.set_result(None)

        def _dispatch(action: Action) -> None:
            try:
                loop.call_soon_threadsafe(action)
            except RuntimeError:
                # The waiter gave up and its loop is gone.
                logger.debug("Loop closed before zero-crossing", group=self.name)

        def _forget(fut: asyncio.Future[None]) -> None:
            if fut.cancelled():
                self._discard(registration)

        registration = (_resolve, _dispatch)
        with self._cond:
            if self._pending:
                self._registrations.append(registration)
                future.add_done_callback(_forget)
                return future
        dispatch_all([registration], group=self.name)
        return future

    def _discard(self, registration: tuple[Action, Dispatcher]) -> None:
        """Drop a registration nobody is waiting on any more."""
        with self._cond:
            if registration in self._registrations:
                self._registrations.remove(registration)

    async def wait_async(self, timeout: float | None = None) -> WaitStatus:
        """
        Suspend the current coroutine until the pending count reaches zero.

        Args:
            timeout: Seconds to wait. None uses the configured default.

        Returns:
            COMPLETED if the group reached zero, TIMED_OUT otherwise.
        """
        timeout = resolve_timeout(timeout, self._config)
        try:
            await asyncio.wait_for(self.notify_future(), timeout)
        except TimeoutError:
            logger.debug("Wait timed out", group=self.name, timeout=timeout)
            return WaitStatus.TIMED_OUT
        return WaitStatus.COMPLETED

    def __eq__(self, other: Number) -> bool:
        return self.pending == other

    def __lt__(self, other: Number) -> bool:
        return self.pending < other

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r}, pending={self.pending})"
