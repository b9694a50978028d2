"""Logging setup shared by the CLI and the interactive menu"""
import logging
from rich.console import Console
from rich.logging import RichHandler
from realty.config import get_log_level, get_log_file


def configure_logging(level=None, log_file=None):
    """
    Configure the root 'realty' logger.

    Logs go to stderr through Rich unless a log file is configured, in which
    case the terminal menu is left alone and records are written to the file.
    """
    level = level or get_log_level()
    log_file = log_file or get_log_file()

    logger = logging.getLogger('realty')
    logger.setLevel(level)
    logger.handlers.clear()

    if log_file:
        handler = logging.FileHandler(log_file, encoding='utf-8')
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s: %(message)s'
        ))
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter('%(message)s'))

    logger.addHandler(handler)
    logger.propagate = False
    return logger
