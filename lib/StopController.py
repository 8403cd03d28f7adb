"""
Stop Controller Module

Cooperative cancellation flag shared between an IntervalScheduler
and whoever shuts it down.
"""

## version related
__author__ = "Kyle"
__version__ = "0.1.0"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
from threading import Event

class StopController(object):
    """
    Stop signal with an interruptible wait.

    signal_stop() may be called any number of times from any
    thread; waiters wake up as soon as it is called.
    """

    def __init__(self) -> None:
        self._event = Event()

    def signal_stop(self) -> None:
        """
        Set the stop flag and wake every waiter.

        Returns:
            None
        """

        self._event.set()

    def is_stopped(self) -> bool:
        """
        Check the stop flag.

        Returns:
            bool: True once signal_stop() has been called
        """

        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """
        Sleep up to timeout seconds, returning early on stop.

        Args:
            timeout (float): Maximum sleep in seconds

        Returns:
            bool: True if stop has been signaled
        """

        return self._event.wait(timeout)
