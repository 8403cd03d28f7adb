"""
Command Definition Module

This module defines the CommandSpec data structure used by the
exec runner. A CommandSpec describes a single periodically executed
command: the command string itself, the interval between runs and
how its output streams are handled.
"""

## version related
__author__ = "Kyle"
__version__ = "0.1.0"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
from numbers import Real
from dataclasses import dataclass

@dataclass(frozen = True)
class CommandSpec(object):
    """
    Periodic command definition.

    Attributes:
        command (str):
            Command to be executed on every interval tick.

        interval (float):
            Target time in seconds between the start of two runs.

        log_stderr (bool):
            Surface stderr lines as info log entries. Defaults to True.

        legacy_execute (bool):
            Read the whole stdout at once and decode it as a single
            chunk instead of line by line. Defaults to False.
    """

    command: str
    interval: float
    log_stderr: bool = True
    legacy_execute: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.command, str) or not self.command.strip():
            raise ValueError('command must be a non-empty string')

        ## bool is a subclass of int, reject it explicitly
        if isinstance(self.interval, bool) or not isinstance(self.interval, Real) or self.interval <= 0:
            raise ValueError('interval must be a positive number, got %r' % (self.interval, ))
