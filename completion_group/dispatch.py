"""
Execution contexts for notify actions.

A dispatcher receives a zero-argument action and either runs it or schedules
it somewhere else. The group never cares which.

Example:
    ```python
    loop = asyncio.get_running_loop()
    group.notify(on_done, on_loop(loop))  # run on the event loop thread

    with ThreadPoolExecutor() as pool:
        group.notify(on_done, on_executor(pool))
    ```
"""

import asyncio
from collections.abc import Callable
from concurrent.futures import Executor
from typing import Any

import structlog

from completion_group.exceptions import NotificationError

logger = structlog.get_logger(__name__)

Action = Callable[[], Any]
Dispatcher = Callable[[Action], Any]


def inline(action: Action) -> None:
    """Run the action immediately on the current thread."""
    action()


def on_loop(loop: asyncio.AbstractEventLoop) -> Dispatcher:
    """
    Schedule actions on an event loop, from any thread.

    Args:
        loop: Target event loop.

    Returns:
        Dispatcher using ``loop.call_soon_threadsafe``.
    """

    def _dispatch(action: Action) -> asyncio.Handle:
        return loop.call_soon_threadsafe(action)

    return _dispatch


def on_executor(executor: Executor) -> Dispatcher:
    """
    Submit actions to an executor.

    Errors raised by the action end up on the returned future.

    Args:
        executor: Target executor (thread or process pool).

    Returns:
        Dispatcher using ``executor.submit``.
    """

    def _dispatch(action: Action) -> Any:
        return executor.submit(action)

    return _dispatch


def dispatch_all(registrations: list[tuple[Action, Dispatcher]], *, group: str) -> None:
    """
    Hand every due action to its dispatcher.

    All registrations are attempted even if some fail.

    Args:
        registrations: (action, dispatcher) pairs, in registration order.
        group: Group name for logs and error context.

    Raises:
        NotificationError: If any dispatcher raised, chained from the first error.
    """
    errors: list[Exception] = []
    for action, dispatcher in registrations:
        try:
            dispatcher(action)
        except Exception as e:
            logger.error("Notify action failed", group=group, error_type=type(e).__name__, exc_info=e)
            errors.append(e)

    if errors:
        msg = f"{len(errors)} notify action(s) failed"
        raise NotificationError(msg, group=group, failures=len(errors)) from errors[0]
