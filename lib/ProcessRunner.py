"""
Process Runner Module

This module owns the lifecycle of a single command invocation:
launching the subprocess, draining its stdout and stderr streams
concurrently, decoding stdout into Records, handing them to a sink,
waiting for the process to exit and releasing every stream handle.

Responsibilities:
- Launch the command, through the shell only when it needs one
- Drain stdout and stderr on two scoped threads joined before return
- Decode, enrich and emit records in stdout read order
- Convert launch and stream failures into RunResult.failure
"""

## version related
__author__ = "Kyle"
__version__ = "0.1.0"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import re
import time
import shlex
import traceback
import subprocess
from threading import Thread

## import private pkgs
from RunResult import RunResult

## characters that require a shell to interpret the command
SHELL_META = re.compile(r'[*?{}\[\]<>()~&|\\$;\'`"\n#]')

class ProcessRunner(object):
    """
    Single invocation executor.

    The runner holds no per-invocation state: every handle it opens
    in run_once() is owned by that call and released before it
    returns, so one runner can be reused for every interval tick.
    """

    def __init__(self, logger: object, host: str, decoder: object, decorator = None) -> None:
        """
        Initialize the process runner.

        Args:
            logger (object): Application logger
            host (str): Host name stamped on every record
            decoder (object): Decoder turning output chunks into records
            decorator (callable): Optional hook applied to each record before enrichment

        Returns:
            None
        """

        self.logger = logger
        self.host = host
        self.decoder = decoder
        self.decorator = decorator

    @staticmethod
    def build_args(command: str) -> tuple:
        """
        Decide how to launch a command string.

        Commands containing shell metacharacters are handed to the
        system shell as is; anything else is split into an argument
        vector and executed directly.

        Args:
            command (str): Command string

        Returns:
            tuple: (args, shell) suitable for subprocess.Popen
        """

        if SHELL_META.search(command):
            return command, True

        return shlex.split(command), False

    def run_once(self, command_spec: object, sink: object) -> RunResult:
        """
        Run the command once and emit its records.

        This method never raises: launch and stream failures are
        logged and reported through RunResult.failure.

        Args:
            command_spec (CommandSpec): Command definition
            sink (object): Destination exposing append(record)

        Returns:
            RunResult: Outcome of this invocation
        """

        command = command_spec.command
        result = RunResult(started_at = time.time())
        start = time.monotonic()

        try:
            if command_spec.legacy_execute:
                self._legacy_execute(command_spec, sink, result)

            else:
                self._execute(command_spec, sink, result)

        except Exception as e:
            ## launch failures end up here, as does anything unexpected
            self.logger.error({'status': 'Exception while running command', 'command': command, 'error': repr(e), 'traceback': traceback.format_exc()})
            if result.failure is None:
                result.failure = e

        result.elapsed = time.monotonic() - start

        if result.exit_status not in (None, 0):
            self.logger.warning({'command': command, 'exit_status': result.exit_status})

        return result

    def _execute(self, command_spec: object, sink: object, result: RunResult) -> None:
        """
        Run the command with stdout and stderr drained on two threads.

        Both drain threads are joined before the stream handles are
        released. Exit status, pid and the first drain failure are
        written into result.

        Args:
            command_spec (CommandSpec): Command definition
            sink (object): Destination exposing append(record)
            result (RunResult): Result filled in place

        Returns:
            None
        """

        command = command_spec.command
        args, shell = self.build_args(command)
        failures = []

        with subprocess.Popen(args, shell = shell, stdin = subprocess.PIPE, stdout = subprocess.PIPE, stderr = subprocess.PIPE) as proc:
            ## the command gets no input
            proc.stdin.close()
            result.pid = proc.pid
            self.logger.info({'status': 'Running exec', 'command': command, 'pid': proc.pid})

            if command_spec.log_stderr:
                on_stderr = lambda line: self.logger.info({'command': command, 'stderr': line.decode('utf-8', errors = 'replace').rstrip('\r\n')})

            else:
                on_stderr = None

            threads = [
                Thread(target = self._drain, args = ('stdout', proc.stdout, lambda chunk: self._decode(chunk, command, sink), command, failures), name = 'exec-stdout-%s' % (proc.pid), daemon = True),
                Thread(target = self._drain, args = ('stderr', proc.stderr, on_stderr, command, failures), name = 'exec-stderr-%s' % (proc.pid), daemon = True),
            ]

            try:
                for thread in threads:
                    thread.start()

                result.exit_status = proc.wait()

            finally:
                ## both pipes must reach EOF before the handles are closed
                for thread in threads:
                    if thread.ident is not None:
                        thread.join()

        if failures:
            result.failure = failures[0]

    def _legacy_execute(self, command_spec: object, sink: object, result: RunResult) -> None:
        """
        Run the command and decode its whole stdout as one chunk.

        stderr is inherited from this process.

        Args:
            command_spec (CommandSpec): Command definition
            sink (object): Destination exposing append(record)
            result (RunResult): Result filled in place

        Returns:
            None
        """

        command = command_spec.command
        args, shell = self.build_args(command)

        with subprocess.Popen(args, shell = shell, stdin = subprocess.DEVNULL, stdout = subprocess.PIPE) as proc:
            result.pid = proc.pid
            self.logger.debug({'status': 'Running exec', 'command': command, 'pid': proc.pid})

            ## whole output in one chunk
            output = proc.stdout.read()
            result.exit_status = proc.wait()

        self._decode(output, command, sink)

    def _drain(self, name: str, stream: object, handler, command: str, failures: list) -> None:
        """
        Read a stream to end-of-stream, feeding every line to handler.

        After a handler failure the stream is still read to EOF with
        its output discarded, so the subprocess never blocks on a
        full pipe.

        Args:
            name (str): Stream name used in log entries
            stream (object): Binary stream
            handler (callable): Called with each line, None to discard
            command (str): Command string used in log entries
            failures (list): Collects exceptions raised while draining

        Returns:
            None
        """

        try:
            for line in iter(stream.readline, b''):
                if handler is None:
                    continue

                try:
                    handler(line)

                except Exception as e:
                    failures.append(e)
                    self.logger.error({'status': 'Exception while handling %s' % (name), 'command': command, 'error': repr(e), 'traceback': traceback.format_exc()})
                    handler = None

        except Exception as e:
            failures.append(e)
            self.logger.error({'status': 'Exception while reading %s' % (name), 'command': command, 'error': repr(e), 'traceback': traceback.format_exc()})

    def _decode(self, chunk: bytes, command: str, sink: object) -> None:
        """
        Decode one output chunk and emit the resulting records.

        Args:
            chunk (bytes): Raw output chunk
            command (str): Command string that produced it
            sink (object): Destination exposing append(record)

        Returns:
            None
        """

        for record in self.decoder.decode(chunk):
            self.emit(record, command, sink)

    def emit(self, record: object, command: str, sink: object) -> None:
        """
        Enrich a record and append it to the sink.

        Args:
            record (Record): Decoded record
            command (str): Command string that produced it
            sink (object): Destination exposing append(record)

        Returns:
            None
        """

        if self.decorator is not None:
            self.decorator(record)

        record.set('host', self.host)
        record.set('command', command)
        sink.append(record)
