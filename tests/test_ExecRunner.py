"""Tests for the bin/ExecRunner.py entry script."""

import importlib.util
import json
import logging
import os
import sys

import pytest

from Decoder import JSONDecoder


SCRIPT = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'bin', 'ExecRunner.py')


@pytest.fixture
def entry():
    spec = importlib.util.spec_from_file_location('ExecRunnerEntry', SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    yield module
    logger = logging.getLogger('ExecRunner')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def write(tmp_path, document):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps(document), encoding='utf-8')
    return str(path)


class TestMain:
    def test_config_error_is_logged_and_exits(self, entry, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(sys, 'argv', ['ExecRunner.py', '-c', str(tmp_path / 'missing.json')])

        with pytest.raises(SystemExit) as excinfo:
            entry.main()

        assert excinfo.value.code == 1
        err = capsys.readouterr().err
        assert 'ERROR' in err
        assert 'config error' in err
        assert 'cannot load' in err


class TestBuildInputs:
    def test_codec_and_charset_passed_to_decoder(self, entry, tmp_path):
        path = write(tmp_path, {
            'log': {'stdout': False},
            'inputs': [{'command': 'uptime', 'interval': 5, 'codec': 'json', 'charset': 'latin-1', 'tags': ['a']}],
        })
        inputs = entry.ExecRunner(path).build_inputs()

        assert len(inputs) == 1
        assert isinstance(inputs[0].decoder, JSONDecoder)
        assert inputs[0].decoder.charset == 'latin-1'
        assert inputs[0].tags == ['a']

    def test_default_charset(self, entry, tmp_path):
        path = write(tmp_path, {'log': {'stdout': False}, 'inputs': [{'command': 'uptime', 'interval': 5}]})
        assert entry.ExecRunner(path).build_inputs()[0].decoder.charset == 'utf-8'
