from completion_group.exceptions import (
    CompletionGroupError,
    NotificationError,
    UnbalancedLeaveError,
)


def test_completion_group_error_str_without_context() -> None:
    error = CompletionGroupError("Something failed")

    assert str(error) == "Something failed"


def test_completion_group_error_str_with_context() -> None:
    error = CompletionGroupError("Failed", group="fetch", pending=3)

    assert "Failed" in str(error)
    assert "group='fetch'" in str(error)
    assert "pending=3" in str(error)


def test_unbalanced_leave_error_has_default_message() -> None:
    error = UnbalancedLeaveError(group="fetch")

    assert error.group == "fetch"
    assert str(error) == "leave() called more times than enter() (group='fetch')"


def test_notification_error_is_completion_group_error() -> None:
    error = NotificationError("2 notify action(s) failed", group="fetch", failures=2)

    assert isinstance(error, CompletionGroupError)
    assert error.failures == 2
