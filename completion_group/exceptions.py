"""
Completion group exception hierarchy.

All exceptions inherit from CompletionGroupError for easy catching.
"""

from typing import Any


class CompletionGroupError(Exception):
    """Base exception for all completion_group errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class UnbalancedLeaveError(CompletionGroupError):
    """leave() was called without a matching enter()."""

    def __init__(
        self, message: str = "leave() called more times than enter()", *, group: str
    ) -> None:
        super().__init__(message, group=group)
        self.group = group


class NotificationError(CompletionGroupError):
    """One or more notify actions raised while being run inline."""

    def __init__(self, message: str, *, group: str, failures: int) -> None:
        super().__init__(message, group=group, failures=failures)
        self.group = group
        self.failures = failures
