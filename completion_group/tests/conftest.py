from collections.abc import Callable
from unittest.mock import Mock

import pytest

from completion_group.config import CompletionGroupConfig
from completion_group.group import CompletionGroup


@pytest.fixture
def group() -> CompletionGroup:
    return CompletionGroup(CompletionGroupConfig(name="test-group"))


@pytest.fixture
def make_action() -> Callable[..., Mock]:
    """Factory for notify actions that record the order they ran in."""
    calls: list[str] = []

    def _make(label: str = "action", *, side_effect: BaseException | None = None) -> Mock:
        def _record() -> None:
            calls.append(label)
            if side_effect is not None:
                raise side_effect

        action = Mock(side_effect=_record)
        action.calls = calls
        return action

    return _make
