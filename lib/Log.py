"""
Logging Module

Builds the application logger from the 'log' configuration
section: a console handler and, when a path is configured, a
rotating file handler named after the running program.
"""

## version related
__author__ = "Kyle"
__version__ = "0.1.0"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import os
import sys
import logging
from logging.handlers import RotatingFileHandler

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(module)s.%(funcName)s %(message)s'

class Log(object):
    """
    Application logger factory.
    """

    def __init__(self, config: dict) -> None:
        """
        Initialize the logger.

        Args:
            config (dict): Full configuration; uses 'name' and the 'log' section

        Returns:
            None
        """

        log_config = config.get('log') or {}
        self.name = config.get('name', 'ExecRunner')
        self.level = logging.getLevelName(str(log_config.get('level', 'INFO')).upper())
        if not isinstance(self.level, int):
            raise ValueError('unknown log level %r' % (log_config.get('level')))

        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(self.level)

        ## replace handlers left from a previous init
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        formatter = logging.Formatter(LOG_FORMAT)

        if log_config.get('stdout', True):
            stream_handler = logging.StreamHandler(sys.stderr)
            stream_handler.setFormatter(formatter)
            self.logger.addHandler(stream_handler)

        path = log_config.get('path')
        if path:
            ## relative paths live under the project root
            if not os.path.isabs(path) and config.get('workpath'):
                path = os.path.join(config['workpath'], path)

            os.makedirs(path, exist_ok = True)
            file_handler = RotatingFileHandler(
                os.path.join(path, '%s.log' % (self.name)),
                maxBytes = int(log_config.get('max_bytes', 10 * 1024 * 1024)),
                backupCount = int(log_config.get('backup_count', 5)),
                encoding = 'utf-8',
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        self.logger.propagate = False
