"""
Logging utilities for gffmap.
"""

import sys
import logging

DEBUG_FORMAT = '%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
VERBOSE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
PLAIN_FORMAT = '%(message)s'


def setup_logging(debug=False, log_file=None, verbose=False):
    """Configure the root logger for console output and an optional log file."""
    if debug:
        log_level = logging.DEBUG
        log_format = DEBUG_FORMAT
    elif verbose:
        log_level = logging.INFO
        log_format = VERBOSE_FORMAT
    else:
        # Only warnings and errors unless asked for more
        log_level = logging.WARNING
        log_format = PLAIN_FORMAT

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Replace handlers from earlier calls
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if debug else logging.INFO)
        file_handler.setFormatter(logging.Formatter(DEBUG_FORMAT))
        logger.addHandler(file_handler)
        # The file gets INFO even when the console only shows warnings
        logger.setLevel(min(log_level, file_handler.level))

    # matplotlib is chatty at debug level
    logging.getLogger('matplotlib').setLevel(logging.WARNING)

    return logger
