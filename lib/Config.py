"""
Configuration Module

Loads the exec runner JSON configuration and validates it, filling
in defaults for optional keys.
"""

## version related
__author__ = "Kyle"
__version__ = "0.1.0"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import os
import json
import codecs
from numbers import Real

## import private pkgs
from Decoder import DECODERS

SINK_TYPES = ('stdout', 'mysql', 'sql')

INPUT_DEFAULTS = {
    'log_stderr': True,
    'legacy_execute': False,
    'codec': 'plain',
    'charset': 'utf-8',
    'type': None,
    'tags': [],
    'add_field': {},
}

LOG_DEFAULTS = {
    'level': 'INFO',
    'path': None,
    'stdout': True,
}

class ConfigError(Exception):
    pass

class Config(object):
    """
    Validated configuration.

    The parsed document is available as the 'config' attribute.
    """

    def __init__(self, workpath: str, path: str = None) -> None:
        """
        Load and validate a configuration file.

        Args:
            workpath (str): Project root directory
            path (str): Configuration file, <workpath>/conf/config.json by default

        Returns:
            None

        Raises:
            ConfigError: If the file is unreadable or invalid
        """

        self.workpath = workpath
        self.path = path or os.path.join(workpath, 'conf', 'config.json')

        try:
            with open(self.path, encoding = 'utf-8') as fp:
                raw = json.load(fp)

        except (OSError, ValueError) as e:
            raise ConfigError('cannot load %s: %s' % (self.path, e)) from e

        self.config = self.validate(raw)

    @classmethod
    def validate(cls, raw: dict) -> dict:
        if not isinstance(raw, dict):
            raise ConfigError('configuration must be a JSON object')

        config = dict(raw)
        config['log'] = dict(LOG_DEFAULTS, **(raw.get('log') or {}))
        config['sink'] = cls._validate_sink(raw.get('sink') or {'type': 'stdout'})

        inputs = raw.get('inputs')
        if not isinstance(inputs, list) or not inputs:
            raise ConfigError('inputs: at least one input is required')

        config['inputs'] = [cls._validate_input(index, item) for index, item in enumerate(inputs)]

        if config['sink']['type'] == 'mysql':
            db = raw.get('db')
            if not isinstance(db, dict):
                raise ConfigError('db: required for the mysql sink')

            for key in ('host', 'port', 'username', 'password', 'database'):
                if key not in db:
                    raise ConfigError('db.%s: required' % (key))

            config['db'] = dict({'charset': 'utf8mb4', 'table': 'exec_records'}, **db)

        return config

    @staticmethod
    def _validate_sink(sink: dict) -> dict:
        if not isinstance(sink, dict) or sink.get('type') not in SINK_TYPES:
            raise ConfigError('sink.type: expected one of %s' % (', '.join(SINK_TYPES)))

        if sink['type'] == 'sql' and not sink.get('url'):
            raise ConfigError('sink.url: required for the sql sink')

        return dict(sink)

    @staticmethod
    def _validate_input(index: int, item: dict) -> dict:
        prefix = 'inputs[%d]' % (index)
        if not isinstance(item, dict):
            raise ConfigError('%s: expected an object' % (prefix))

        command = item.get('command')
        if not isinstance(command, str) or not command.strip():
            raise ConfigError('%s.command: required non-empty string' % (prefix))

        interval = item.get('interval')
        if isinstance(interval, bool) or not isinstance(interval, Real) or interval <= 0:
            raise ConfigError('%s.interval: required positive number' % (prefix))

        result = dict(INPUT_DEFAULTS, **item)

        for key in ('log_stderr', 'legacy_execute'):
            if not isinstance(result[key], bool):
                raise ConfigError('%s.%s: expected a boolean' % (prefix, key))

        if result['codec'] not in DECODERS:
            raise ConfigError('%s.codec: expected one of %s' % (prefix, ', '.join(sorted(DECODERS))))

        try:
            codecs.lookup(result['charset'])

        except (LookupError, TypeError):
            raise ConfigError('%s.charset: unknown charset %r' % (prefix, result['charset'])) from None

        if not isinstance(result['tags'], list):
            raise ConfigError('%s.tags: expected a list' % (prefix))

        if not isinstance(result['add_field'], dict):
            raise ConfigError('%s.add_field: expected an object' % (prefix))

        return result
