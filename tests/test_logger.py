"""
Tests for the logging helpers.
"""

import logging

import nnplayground.utils.logger as log_module
from nnplayground.utils.logger import (
    LogLevel,
    get_log_path,
    get_logger,
    log_network_event,
    log_training_metrics,
    setup_logging,
)


class TestGetLogger:
    """Logger naming."""

    def test_namespace(self):
        assert get_logger('network').name == 'nnplayground.network'

    def test_package_prefix_stripped(self):
        assert get_logger('nnplayground.ai.trainer').name == 'nnplayground.ai.trainer'


class TestSetupLogging:
    """Handler configuration."""

    def test_file_output(self, tmp_path):
        setup_logging(log_dir=str(tmp_path), file_output=True, console_output=False,
                      log_filename='test.log', force=True)
        try:
            get_logger('test').info("hello file")
            path = get_log_path()
            assert path == tmp_path / 'test.log'
            for handler in logging.getLogger(log_module.ROOT_LOGGER_NAME).handlers:
                handler.flush()
            assert "hello file" in path.read_text()
        finally:
            setup_logging(file_output=False, force=True)

    def test_no_file_output(self):
        setup_logging(file_output=False, force=True)
        assert get_log_path() is None

    def test_level(self):
        setup_logging(level=LogLevel.WARNING, file_output=False, force=True)
        try:
            assert logging.getLogger(log_module.ROOT_LOGGER_NAME).level == logging.WARNING
        finally:
            setup_logging(file_output=False, force=True)


class TestFormattedHelpers:
    """Structured message helpers."""

    def test_training_metrics(self, caplog):
        with caplog.at_level(logging.INFO, logger='nnplayground'):
            log_training_metrics(50, 0.123456, 0.75, dataset='xor')
        assert "step=50 | loss=0.123456 | acc=0.750 | dataset=xor" in caplog.text

    def test_network_event(self, caplog):
        with caplog.at_level(logging.INFO, logger='nnplayground'):
            log_network_event('configure', layers='2:linear,1:sigmoid')
            log_network_event('dispose')
        assert "CONFIGURE | layers=2:linear,1:sigmoid" in caplog.text
        assert "DISPOSE" in caplog.text
