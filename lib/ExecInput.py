"""
Exec Input Module

This module exposes one periodically executed command as a
pipeline input with three lifecycle hooks:

- register(): one-time setup, resolves the host name
- run(sink):  enters the scheduling loop, returns after stop()
- stop():     signals the loop to stop after the current run
"""

## version related
__author__ = "Kyle"
__version__ = "0.1.0"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import socket

## import private pkgs
from Decoder import PlainDecoder
from ProcessRunner import ProcessRunner
from StopController import StopController
from IntervalScheduler import IntervalScheduler

class ExecInput(object):
    """
    Periodic command input.

    Every dependency (logger, decoder, host name) is held by the
    instance and handed down to the runner explicitly, so several
    inputs can live in one process without sharing state.
    """

    def __init__(self, logger: object, command_spec: object, decoder: object = None, type: str = None, tags: list = None, add_field: dict = None, name: str = None) -> None:
        """
        Initialize the exec input.

        Args:
            logger (object): Application logger
            command_spec (CommandSpec): Command definition
            decoder (object): Decoder, plain text by default
            type (str): Value set as 'type' on records lacking one
            tags (list): Tags added to every record
            add_field (dict): Fields set on records lacking them
            name (str): Input name used in log entries and job ids

        Returns:
            None
        """

        self.logger = logger
        self.command_spec = command_spec
        self.decoder = decoder or PlainDecoder()
        self.type = type
        self.tags = list(tags or [])
        self.add_field = dict(add_field or {})
        self.name = name or command_spec.command

        ## runtime state
        self.host = None
        self.runner = None
        self.scheduler = None
        self.stop_controller = StopController()

    def register(self) -> None:
        self.logger.info({'status': 'Registering Exec Input', 'type': self.type, 'command': self.command_spec.command, 'interval': self.command_spec.interval})

        ## resolved once for the lifetime of the input
        self.host = socket.gethostname()
        self.runner = ProcessRunner(self.logger, self.host, self.decoder, decorator = self.decorate)
        self.scheduler = IntervalScheduler(self.logger, self.runner)

    def decorate(self, record: object) -> None:
        """
        Apply configured type, tags and extra fields to a record.

        Fields already present on the record are left untouched.

        Args:
            record (Record): Record to decorate

        Returns:
            None
        """

        if self.type is not None and 'type' not in record:
            record.set('type', self.type)

        for tag in self.tags:
            record.tag(tag)

        for key, value in self.add_field.items():
            if key not in record:
                record.set(key, value)

    def run(self, sink: object) -> None:
        """
        Enter the scheduling loop.

        Args:
            sink (object): Destination exposing append(record)

        Returns:
            None

        Raises:
            RuntimeError: If register() has not been called
        """

        if self.scheduler is None:
            raise RuntimeError('register() must be called before run()')

        self.logger.info({'status': 'start', 'name': self.name})
        self.scheduler.run(self.command_spec, sink, self.stop_controller)
        self.logger.info({'status': 'end', 'name': self.name})

    def stop(self) -> None:
        self.logger.info({'status': 'stop requested', 'name': self.name})
        self.stop_controller.signal_stop()

    def is_stopped(self) -> bool:
        return self.stop_controller.is_stopped()
