"""Shared fixtures for the exec runner tests."""

import os
import sys
import shlex
import logging

import pytest

## same lookup path as the bin/ entry scripts
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'lib'))

from Decoder import PlainDecoder
from ProcessRunner import ProcessRunner


def python_command(code: str) -> str:
    """Command string running a Python snippet with the current interpreter."""
    return '%s -c %s' % (shlex.quote(sys.executable), shlex.quote(code))


def messages(caplog, level=None) -> list:
    """Dict payloads of captured log records, optionally filtered by level."""
    return [
        r.msg for r in caplog.records
        if isinstance(r.msg, dict) and (level is None or r.levelno == level)
    ]


@pytest.fixture
def logger(caplog):
    caplog.set_level(logging.DEBUG, logger='exec-test')
    log = logging.getLogger('exec-test')
    log.propagate = True
    return log


@pytest.fixture
def runner(logger):
    return ProcessRunner(logger, 'test-host', PlainDecoder())
