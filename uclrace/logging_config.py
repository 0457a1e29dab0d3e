"""Logging setup shared by the sync CLI and the jobs."""

import logging
import sys
import warnings
from datetime import datetime
from pathlib import Path
from typing import Optional

from .errors import PartialCoverageWarning

# requests/urllib3 loggers that echo every connection at DEBUG
_HTTP_LOGGERS = ('urllib3', 'requests')


def setup_logging(
    job: str = 'sync',
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Configure the 'uclrace' logger tree for one CLI run.

    Each run gets its own log file named after the job, e.g.
    ``logs/standings_20260226_101500.log``. Connection-level HTTP
    logging is only shown when ``level`` is DEBUG.

    Args:
        job: Job name used in the log file name
        log_dir: Directory for log files (default: ./logs)
        level: Logging level (default: INFO)
        log_to_file: Whether to log to file (default: True)
        log_to_console: Whether to log to console (default: True)

    Returns:
        Configured 'uclrace' logger

    Example:
        from uclrace.logging_config import setup_logging
        logger = setup_logging('standings', log_to_file=False)
        logger.info("Syncing standings")
    """
    logger = logging.getLogger('uclrace')
    logger.setLevel(level)
    logger.handlers = []

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    console_formatter = logging.Formatter('%(levelname)s [%(name)s]: %(message)s')

    if log_to_file:
        log_dir = Path(log_dir) if log_dir is not None else Path('logs')
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f'{job}_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)

    # Coverage gaps are already logged by warn_partial_coverage
    warnings.filterwarnings('ignore', category=PartialCoverageWarning)

    return logger


def get_logger(name: str = 'uclrace') -> logging.Logger:
    """Return a logger inside the 'uclrace' tree, e.g. get_logger('jobs')."""
    if name != 'uclrace' and not name.startswith('uclrace.'):
        name = f'uclrace.{name}'
    return logging.getLogger(name)
