"""Tests for IntervalScheduler: cadence, overrun and cooperative stop."""

import logging
import threading
import time

from conftest import messages
from CommandSpec import CommandSpec
from IntervalScheduler import IntervalScheduler, SchedulerState
from Record import Record
from RunResult import RunResult
from StopController import StopController


class FakeRunner:
    """Runner sleeping for a fixed duration and stopping after max_runs."""

    def __init__(self, stop_controller, duration=0.0, max_runs=3, stop_during_run=False):
        self.stop_controller = stop_controller
        self.duration = duration
        self.max_runs = max_runs
        self.stop_during_run = stop_during_run
        self.starts = []

    def run_once(self, command_spec, sink):
        self.starts.append(time.monotonic())
        if self.stop_during_run:
            self.stop_controller.signal_stop()
        time.sleep(self.duration)
        sink.append(Record(message='run-%d' % len(self.starts)))
        if len(self.starts) >= self.max_runs:
            self.stop_controller.signal_stop()
        return RunResult(started_at=time.time(), elapsed=self.duration, exit_status=0)


def gaps(starts):
    return [b - a for a, b in zip(starts, starts[1:])]


class TestCadence:
    def test_sleeps_remaining_interval(self, logger):
        stop = StopController()
        runner = FakeRunner(stop, duration=0.05, max_runs=3)
        scheduler = IntervalScheduler(logger, runner)

        scheduler.run(CommandSpec('cmd', 0.3), [], stop)

        assert len(runner.starts) == 3
        for gap in gaps(runner.starts):
            assert 0.28 <= gap < 0.5

    def test_overrun_skips_sleep_and_warns(self, logger, caplog):
        stop = StopController()
        runner = FakeRunner(stop, duration=0.25, max_runs=3)
        scheduler = IntervalScheduler(logger, runner)

        scheduler.run(CommandSpec('cmd', 0.1), [], stop)

        for gap in gaps(runner.starts):
            assert 0.24 <= gap < 0.4

        warnings = messages(caplog, logging.WARNING)
        assert len(warnings) == 3
        assert warnings[0]['status'] == 'Execution ran longer than the interval. Skipping sleep.'
        assert warnings[0]['command'] == 'cmd'
        assert warnings[0]['interval'] == 0.1
        assert warnings[0]['duration'] >= 0.25

    def test_completion_logged(self, logger, caplog):
        stop = StopController()
        scheduler = IntervalScheduler(logger, FakeRunner(stop, max_runs=1))
        scheduler.run(CommandSpec('cmd', 0.1), [], stop)

        completed = [m for m in messages(caplog, logging.INFO) if m.get('status') == 'Command completed']
        assert len(completed) == 1
        assert completed[0]['command'] == 'cmd'

    def test_uses_injected_clock(self, logger, caplog):
        ## each run appears to take 10 seconds
        ticks = iter(range(0, 1000, 10))
        stop = StopController()
        scheduler = IntervalScheduler(logger, FakeRunner(stop, max_runs=2), clock=lambda: next(ticks))

        start = time.monotonic()
        scheduler.run(CommandSpec('cmd', 5), [], stop)

        assert time.monotonic() - start < 2
        assert len(messages(caplog, logging.WARNING)) == 2


class TestStop:
    def test_stopped_before_first_run(self, logger):
        stop = StopController()
        stop.signal_stop()
        runner = FakeRunner(stop)
        scheduler = IntervalScheduler(logger, runner)

        scheduler.run(CommandSpec('cmd', 1), [], stop)

        assert runner.starts == []
        assert scheduler.state is SchedulerState.STOPPED

    def test_stop_interrupts_sleep(self, logger):
        stop = StopController()
        runner = FakeRunner(stop, max_runs=100)
        scheduler = IntervalScheduler(logger, runner)

        threading.Timer(0.2, stop.signal_stop).start()
        start = time.monotonic()
        scheduler.run(CommandSpec('cmd', 60), [], stop)

        assert time.monotonic() - start < 5
        assert len(runner.starts) == 1
        assert scheduler.state is SchedulerState.STOPPED

    def test_run_in_flight_completes(self, logger):
        stop = StopController()
        runner = FakeRunner(stop, duration=0.2, max_runs=100, stop_during_run=True)
        scheduler = IntervalScheduler(logger, runner)
        sink = []

        scheduler.run(CommandSpec('cmd', 0.1), sink, stop)

        assert [r['message'] for r in sink] == ['run-1']
        assert scheduler.iterations == 1

    def test_state_while_sleeping(self, logger):
        stop = StopController()
        scheduler = IntervalScheduler(logger, FakeRunner(stop, max_runs=100))
        thread = threading.Thread(target=scheduler.run, args=(CommandSpec('cmd', 60), [], stop))
        thread.start()
        try:
            deadline = time.monotonic() + 5
            while scheduler.state is not SchedulerState.SLEEPING and time.monotonic() < deadline:
                time.sleep(0.01)
            assert scheduler.state is SchedulerState.SLEEPING
        finally:
            stop.signal_stop()
            thread.join(5)
        assert not thread.is_alive()


class TestRunnerErrors:
    def test_runner_exception_does_not_escape(self, logger, caplog):
        stop = StopController()
        calls = []

        class BrokenRunner:
            def run_once(self, command_spec, sink):
                calls.append(1)
                if len(calls) >= 3:
                    stop.signal_stop()
                raise RuntimeError('boom')

        scheduler = IntervalScheduler(logger, BrokenRunner())
        scheduler.run(CommandSpec('cmd', 0.01), [], stop)

        assert len(calls) == 3
        assert scheduler.iterations == 3
        assert scheduler.last_result is None
        errors = messages(caplog, logging.ERROR)
        assert len(errors) == 3
        assert errors[0]['command'] == 'cmd'
