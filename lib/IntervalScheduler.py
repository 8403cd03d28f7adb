"""
Interval Scheduler Module

This module drives repeated invocations of a ProcessRunner at a
target cadence. The delay before the next run is the configured
interval minus the duration of the previous run; when a run
overruns its interval the next one starts immediately and a warning
is logged.

Cancellation is cooperative: the stop signal is checked at the top
of every iteration and interrupts the inter-run sleep, while a run
already in flight is allowed to complete.
"""

## version related
__author__ = "Kyle"
__version__ = "0.1.0"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import time
import enum
import traceback

class SchedulerState(enum.Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    SLEEPING = 'sleeping'
    STOPPED = 'stopped'

class IntervalScheduler(object):
    """
    Drift-compensated periodic loop.
    """

    def __init__(self, logger: object, runner: object, clock = time.monotonic) -> None:
        """
        Initialize the scheduler.

        Args:
            logger (object): Application logger
            runner (ProcessRunner): Executes one invocation per tick
            clock (callable): Monotonic time source in seconds

        Returns:
            None
        """

        self.logger = logger
        self.runner = runner
        self.clock = clock

        ## runtime state
        self.state = SchedulerState.IDLE
        self.iterations = 0
        self.last_result = None

    def run(self, command_spec: object, sink: object, stop_controller: object) -> None:
        """
        Run the command every interval until stopped.

        Blocks until stop_controller reports stopped. No exception
        raised by a single run escapes this loop.

        Args:
            command_spec (CommandSpec): Command definition
            sink (object): Destination exposing append(record)
            stop_controller (StopController): Shared stop signal

        Returns:
            None
        """

        while not stop_controller.is_stopped():
            self.state = SchedulerState.RUNNING
            duration = self._run_once(command_spec, sink)
            self.iterations += 1

            self.state = SchedulerState.SLEEPING
            self.wait_until_end_of_interval(command_spec, duration, stop_controller)
            self.state = SchedulerState.IDLE

        self.state = SchedulerState.STOPPED
        self.logger.info({'status': 'stopped', 'command': command_spec.command, 'iterations': self.iterations})

    def _run_once(self, command_spec: object, sink: object) -> float:
        """
        Run one invocation and measure its duration.

        Args:
            command_spec (CommandSpec): Command definition
            sink (object): Destination exposing append(record)

        Returns:
            float: Run duration in seconds
        """

        start = self.clock()
        try:
            self.last_result = self.runner.run_once(command_spec, sink)

        except Exception as e:
            ## runners report failures in RunResult, this is a last resort
            self.last_result = None
            self.logger.error({'status': 'Exception while running command', 'command': command_spec.command, 'error': repr(e), 'traceback': traceback.format_exc()})

        duration = self.clock() - start
        self.logger.info({'status': 'Command completed', 'command': command_spec.command, 'duration': duration})
        return duration

    def wait_until_end_of_interval(self, command_spec: object, duration: float, stop_controller: object) -> None:
        """
        Sleep for the rest of the interval, or warn on overrun.

        Args:
            command_spec (CommandSpec): Command definition
            duration (float): Duration of the run that just finished
            stop_controller (StopController): Interrupts the sleep

        Returns:
            None
        """

        remaining = max(0, command_spec.interval - duration)
        if remaining > 0:
            stop_controller.wait(remaining)

        else:
            self.logger.warning({'status': 'Execution ran longer than the interval. Skipping sleep.', 'command': command_spec.command, 'duration': duration, 'interval': command_spec.interval})
