"""
Result types shared by the completion groups.
"""

from enum import IntEnum


class WaitStatus(IntEnum):
    """Outcome of waiting on a group."""

    TIMED_OUT = 0
    COMPLETED = 1
