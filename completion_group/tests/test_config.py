import pytest

from completion_group.config import CompletionGroupConfig


def test_config_defaults() -> None:
    config = CompletionGroupConfig()

    assert config.name == "completion-group"
    assert config.default_wait_timeout is None


def test_config_rejects_empty_name() -> None:
    with pytest.raises(ValueError, match="name"):
        CompletionGroupConfig(name="")


def test_config_rejects_negative_default_timeout() -> None:
    with pytest.raises(ValueError, match="default_wait_timeout"):
        CompletionGroupConfig(default_wait_timeout=-1.0)


def test_config_accepts_zero_default_timeout() -> None:
    config = CompletionGroupConfig(default_wait_timeout=0)

    assert config.default_wait_timeout == 0
