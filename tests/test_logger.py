"""
Tests for logging setup.
"""

import pytest
from loguru import logger

from core.utils.logger import normalize_level, setup_logger


@pytest.fixture
def restore_sinks():
    yield
    logger.remove()
    setup_logger("ERROR")


@pytest.mark.unit
class TestNormalizeLevel:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("debug", "DEBUG"),
            ("Info", "INFO"),
            ("warn", "WARNING"),
            ("warning", "WARNING"),
            ("fatal", "CRITICAL"),
            ("panic", "CRITICAL"),
            (" trace ", "TRACE"),
        ],
    )
    def test_accepts_level_names_and_aliases(self, name, expected):
        assert normalize_level(name) == expected

    def test_rejects_unknown_level(self):
        with pytest.raises(ValueError, match="unknown log level 'loud'"):
            normalize_level("loud")


@pytest.mark.unit
class TestSetupLogger:
    def test_file_sink_filters_by_level(self, tmp_path, restore_sinks):
        log_file = tmp_path / "logs" / "mf.log"

        setup_logger("warn", str(log_file))
        logger.info("check passed")
        logger.warning("check failing")
        logger.complete()
        logger.remove()

        content = log_file.read_text()
        assert "check failing" in content
        assert "WARNING" in content
        assert "check passed" not in content

    def test_unknown_level_is_rejected(self, restore_sinks):
        with pytest.raises(ValueError):
            setup_logger("chatty")
