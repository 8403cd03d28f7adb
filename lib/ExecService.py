"""
Exec Runner Service

This module implements the runtime service hosting one or more
ExecInputs. Each input's scheduling loop is a long-running job on an
APScheduler thread pool; the service owns the shared record sink and
shuts everything down gracefully on SIGTERM/SIGINT.

Responsibilities:
- Register every input and submit its loop to APScheduler
- Forward APScheduler logs into the application logger
- Stop all inputs and wait for in-flight runs on shutdown
"""

## version related
__author__ = "Kyle"
__version__ = "0.1.0"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import time
import signal
import logging
from threading import Lock
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.executors.pool import ThreadPoolExecutor

class APSchedulerForwardHandler(logging.Handler):
    """
    Logging bridge handler for APScheduler.

    Forwards APScheduler log records to the application logger,
    keeping their level.
    """

    def __init__(self, my_logger: object) -> None:
        super().__init__()
        self.my_logger = my_logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.my_logger.log(record.levelno, {'apscheduler': self.format(record)})

        except Exception:
            self.handleError(record)

class ExecService(object):
    """
    Exec inputs host service.
    """

    def __init__(self, logger: object, inputs: list, sink: object, timezone: str = 'UTC', poll_interval: float = 1.0) -> None:
        """
        Initialize the service.

        Args:
            logger (object): Application logger
            inputs (list): ExecInput instances to host
            sink (object): Record sink shared by every input
            timezone (str): Scheduler timezone
            poll_interval (float): Main loop wake-up period in seconds

        Returns:
            None
        """

        self.logger = logger
        self.logger.info({'status': 'start'})

        if not inputs:
            raise ValueError('at least one input is required')

        self.inputs = list(inputs)
        self.sink = sink
        self.timezone = timezone
        self.poll_interval = poll_interval

        ## internal runtime state
        self._scheduler = None
        self._running = False
        self._stop_lock = Lock()

        self._setup_apscheduler_logging()
        self.init()
        self.logger.info({'status': 'end'})

    def init(self) -> None:
        """
        Create the APScheduler instance and submit one job per input.

        Returns:
            None
        """

        self._scheduler = BackgroundScheduler(
            executors = {
                ## one worker per input loop
                'default': ThreadPoolExecutor(max_workers = len(self.inputs)),

            },
            job_defaults = {
                'coalesce': True,
                'max_instances': 1,

                ## input loops must start however late the scheduler is
                'misfire_grace_time': None,

            },
            timezone = self.timezone,
        )

        for index, exec_input in enumerate(self.inputs):
            exec_input.register()

            ## no trigger: run once, as soon as the scheduler starts
            self._scheduler.add_job(
                func = exec_input.run,
                args = [self.sink],
                id = 'exec-%d' % (index),
                name = exec_input.name,
            )

    def _setup_apscheduler_logging(self) -> None:
        aps_logger = logging.getLogger('apscheduler')
        aps_logger.setLevel(logging.INFO)

        handler = APSchedulerForwardHandler(self.logger)
        handler.setFormatter(logging.Formatter('%(levelname)s %(name)s %(message)s'))

        ## avoid duplicate lines through the root logger
        aps_logger.addHandler(handler)
        aps_logger.propagate = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        self.logger.info({'status': 'start'})
        self._scheduler.start()
        self._running = True
        self.logger.info({'status': 'end'})

    def request_stop(self) -> None:
        """
        Signal every input to stop without waiting.

        Safe to call from a signal handler.

        Returns:
            None
        """

        for exec_input in self.inputs:
            exec_input.stop()

        self._running = False

    def stop(self) -> None:
        """
        Stop the service.

        Signals every input, waits for in-flight runs to complete,
        then closes the sink. Calling it again is a no-op.

        Returns:
            None
        """

        self.logger.info({'status': 'start'})
        with self._stop_lock:
            self.request_stop()
            try:
                if self._scheduler and self._scheduler.running:
                    self._scheduler.shutdown(wait = True)

                    ## sink is closed once, after the last record
                    self.sink.close()

            finally:
                self._running = False

        self.logger.info({'status': 'end'})

    def serve_forever(self) -> None:
        """
        Run the service until SIGTERM or SIGINT.

        Returns:
            None
        """

        self.start()

        ## register signal handlers for graceful shutdown
        signal.signal(signal.SIGTERM, self._handle_exit)
        signal.signal(signal.SIGINT, self._handle_exit)

        while self._running:
            time.sleep(self.poll_interval)

        self.stop()

    def _handle_exit(self, signum, frame) -> None:
        self.logger.info({'status': 'Received signal %s, exiting...' % (signum)})
        self.request_stop()
