"""
Тесты настройки loguru.
"""

from loguru import logger

from marches_publics import logger as logger_module
from marches_publics.config.settings import LoggingConfig


def test_file_logging_adds_console_and_file_sinks(tmp_path):
    log_dir = tmp_path / "logs"

    logger_module.configure_logging(LoggingConfig(level="warning", log_dir=log_dir))
    try:
        assert log_dir.is_dir()
        assert len(logger_module._handler_ids) == 3
    finally:
        logger.remove()


def test_reconfiguration_replaces_handlers(tmp_path):
    settings = LoggingConfig(level="INFO", log_dir=tmp_path, file_logging=False)

    logger_module.configure_logging(settings)
    logger_module.configure_logging(settings)
    try:
        assert len(logger_module._handler_ids) == 1
    finally:
        logger.remove()


def test_module_exports_configured_loguru_logger():
    assert logger_module.logger is logger
    assert set(logger_module.__all__) == {"logger", "configure_logging"}
