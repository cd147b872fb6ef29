"""Logging for scoring runs: a per-gameweek log file plus console output."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

LOGGER_NAME = 'fantasy_points'

DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
SIMPLE_FORMAT = '%(levelname)s: %(message)s'


def log_file_path(log_dir: Path, gameweek_id: Optional[str] = None) -> Path:
    """fantasy_points[_<gameweek>]_<timestamp>.log inside log_dir."""
    stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    prefix = f'{LOGGER_NAME}_{gameweek_id}' if gameweek_id else LOGGER_NAME
    return log_dir / f'{prefix}_{stamp}.log'


def setup_logging(
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
    gameweek_id: Optional[str] = None,
    file_level: int = logging.DEBUG,
    log_to_file: bool = True,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Configure the 'fantasy_points' logger for a scoring run.

    The console shows `level` and above. The log file records from
    `file_level` (DEBUG by default), so per-player breakdowns of a quiet
    run are still on disk.

    Args:
        log_dir: Directory for log files (default: ./logs)
        level: Console logging level (default: INFO)
        gameweek_id: Gameweek being scored, used in the log file name
        file_level: Log file level (default: DEBUG)
        log_to_file: Whether to log to a timestamped file (default: True)
        log_to_console: Whether to log to stdout (default: True)

    Returns:
        The configured logger

    Example:
        from fantasy_points.logging_config import setup_logging
        logger = setup_logging(gameweek_id='gw7', level=logging.WARNING)
        logger.warning("No stats for match 1035037")
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(min(level, file_level) if log_to_file else level)

    for handler in logger.handlers:
        handler.close()
    logger.handlers = []

    if log_to_file:
        log_dir = Path(log_dir) if log_dir is not None else Path('logs')
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file_path(log_dir, gameweek_id))
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
        logger.addHandler(console_handler)

    return logger
