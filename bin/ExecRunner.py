"""
Exec Runner Entry Point

This module provides the main entry point for running the exec
runner service. It is responsible for:

- Loading configuration
- Initializing logging
- Building the record sink and exec inputs
- Starting the ExecService runtime
"""

## version related
__author__ = "Kyle"
__version__ = "0.1.0"
__email__ = "kyle@hacking-linux.com"

## import build in pkgs
import re
import os
import sys
import argparse

## Resolve project root directory
workpath = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))

## Extend Python module search path for project libraries
sys.path.append("%s/lib" % (workpath))

## import private pkgs
from Log import Log
from Config import Config, ConfigError
from Decoder import get_decoder
from CommandSpec import CommandSpec
from ExecInput import ExecInput
from ExecService import ExecService
from RecordSink import StdoutSink, SQLSink

class ExecRunner(object):
    """
    Exec runner controller.

    Lifecycle:
        1. Load configuration
        2. Initialize logging
        3. Build the record sink
        4. Build one ExecInput per configured command
        5. Start ExecService
    """

    def __init__(self, config_path: str = None) -> None:
        """
        Initialize the exec runner runtime environment.

        Args:
            config_path (str): Configuration file, conf/config.json by default
        """

        ## set private values
        self.config = Config(workpath, config_path).config
        self.config['pid'] = os.getpid()
        self.config['pname'] = os.path.basename(__file__)
        self.config['name'] = re.sub(r'\..*$', '', self.config['pname'])
        self.config['workpath'] = workpath

        ## logger init
        self.loggerObj = Log(self.config)
        self.logger = self.loggerObj.logger

        ## debug prt
        self.logger.debug({'sink': self.config['sink']})
        self.logger.debug({'inputs': len(self.config['inputs'])})

    def build_sink(self) -> object:
        sink_config = self.config['sink']
        if sink_config['type'] == 'mysql':
            db = self.config['db']
            return SQLSink.from_mysql(self.logger, db['host'], db['port'], db['username'], db['password'], db['database'], db['charset'], db['table'])

        if sink_config['type'] == 'sql':
            return SQLSink(self.logger, sink_config['url'], sink_config.get('table', 'exec_records'))

        return StdoutSink()

    def build_inputs(self) -> list:
        inputs = []
        for item in self.config['inputs']:
            command_spec = CommandSpec(
                command = item['command'],
                interval = item['interval'],
                log_stderr = item['log_stderr'],
                legacy_execute = item['legacy_execute'],
            )
            inputs.append(ExecInput(
                self.logger,
                command_spec,
                decoder = get_decoder(item['codec'], charset = item['charset']),
                type = item['type'],
                tags = item['tags'],
                add_field = item['add_field'],
                name = item.get('name'),
            ))

        return inputs

    def run(self) -> bool:
        """
        Start the exec runner service in blocking mode.

        Returns:
            bool: True once the service has stopped
        """

        self.logger.debug({'status': 'start'})

        ## gen service object
        svcObj = ExecService(self.logger,
                             self.build_inputs(),
                             self.build_sink(),
                             self.config.get('timezone', 'UTC'),
                             )
        svcObj.serve_forever()

        self.logger.debug({'status': 'end'})
        return True

def main() -> None:
    """
    Application entry point.
    """

    parser = argparse.ArgumentParser(description = 'Periodically run commands and emit their output as records.')
    parser.add_argument('-c', '--config', default = None, help = 'configuration file (default: conf/config.json)')
    args = parser.parse_args()

    try:
        runnerObj = ExecRunner(args.config)

    except ConfigError as e:
        ## no configured logger yet, report through a console-only one
        logger = Log({'name': 'ExecRunner', 'log': {'level': 'ERROR'}}).logger
        logger.error({'status': 'config error', 'error': str(e)})
        sys.exit(1)

    runnerObj.run()

if __name__ == "__main__":
    main()
