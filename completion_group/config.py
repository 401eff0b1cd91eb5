"""
Completion group configuration.
"""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class CompletionGroupConfig:
    """
    Attributes:
        name: Label used in logs, repr and error context.
        default_wait_timeout: Timeout in seconds used by wait() when none is given.
            None waits forever.
    """

    name: str = "completion-group"
    default_wait_timeout: float | None = None

    def __post_init__(self) -> None:
        if not self.name:
            msg = "name must not be empty"
            raise ValueError(msg)
        if self.default_wait_timeout is not None and self.default_wait_timeout < 0:
            msg = "default_wait_timeout must be non-negative"
            raise ValueError(msg)
