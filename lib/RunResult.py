"""
Run Result Module

Ephemeral result of a single command invocation, produced by
ProcessRunner and consumed right away by IntervalScheduler.
"""

## version related
__author__ = "Kyle"
__version__ = "0.1.0"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
from typing import Optional
from dataclasses import dataclass

@dataclass
class RunResult(object):
    """
    Outcome of one invocation.

    Attributes:
        started_at (float): Wall-clock start time (epoch seconds)
        elapsed (float): Run duration in seconds
        exit_status (int): Process exit status, None if it never started
        failure (Exception): Launch or stream failure, None on success
        pid (int): Process id, None if it never started
    """

    started_at: float
    elapsed: float = 0.0
    exit_status: Optional[int] = None
    failure: Optional[BaseException] = None
    pid: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.exit_status == 0
