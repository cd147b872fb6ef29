"""Tests for logging setup."""

import logging

import pytest

from fantasy_points.logging_config import LOGGER_NAME, setup_logging


@pytest.fixture
def reset_logger():
    """Close and drop handlers added during the test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
    logger.setLevel(logging.NOTSET)


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_log_file_named_for_gameweek(self, tmp_path, reset_logger):
        """Test the log file name carries the gameweek id."""
        setup_logging(log_dir=tmp_path, gameweek_id='gw7', log_to_console=False)
        (log_file,) = tmp_path.glob('*.log')
        assert log_file.name.startswith('fantasy_points_gw7_')

    def test_quiet_console_keeps_debug_in_file(self, tmp_path, capsys, reset_logger):
        """Test a WARNING console still leaves DEBUG lines in the log file."""
        logger = setup_logging(log_dir=tmp_path, level=logging.WARNING, gameweek_id='gw1')
        logging.getLogger('fantasy_points.aggregator').debug('p_gk breakdown')
        logger.warning('No stats for match m3')

        out = capsys.readouterr().out
        assert 'WARNING: No stats for match m3' in out
        assert 'p_gk breakdown' not in out

        for handler in logger.handlers:
            handler.flush()
        (log_file,) = tmp_path.glob('*.log')
        text = log_file.read_text()
        assert 'p_gk breakdown' in text
        assert 'No stats for match m3' in text

    def test_repeated_setup_replaces_handlers(self, tmp_path, reset_logger):
        """Test calling setup twice does not stack handlers."""
        setup_logging(log_dir=tmp_path, log_to_file=False)
        logger = setup_logging(log_dir=tmp_path, log_to_file=False)
        assert len(logger.handlers) == 1

    def test_console_only_level(self, reset_logger):
        """Test without a file the logger follows the console level."""
        logger = setup_logging(level=logging.WARNING, log_to_file=False)
        assert logger.level == logging.WARNING
