"""
Logging setup shared by the mbucket commands.

Log records always go to stderr (and optionally a file) so that they never
interleave with response bodies written to stdout.
"""

import logging
import sys
import time
from functools import wraps
from typing import Optional

CONSOLE_FORMAT = '[%(levelname)s] %(message)s'
FILE_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'


def timing_decorator(func):
    """Decorator to measure function execution time"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        try:
            return func(*args, **kwargs)
        finally:
            end_time = time.time()
            logging.getLogger(func.__module__).debug(
                "%s took %.3f seconds", func.__qualname__, end_time - start_time)
    return wrapper


def setup_logging(debug: bool = False, log_file: Optional[str] = None, stream=None) -> None:
    """
    Configure logging:
    - Console (stderr) uses INFO, or DEBUG with --debug.
    - With --logFile, the file captures everything at DEBUG level.
    """
    console_level = logging.DEBUG if debug else logging.INFO
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if log_file else console_level)

    # Remove existing handlers
    for h in list(logger.handlers):
        logger.removeHandler(h)

    ch = logging.StreamHandler(stream if stream is not None else sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(ch)

    if log_file:
        fh = logging.FileHandler(log_file, mode='w')
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(fh)

    # urllib3 is chatty at DEBUG; keep it to the file
    logging.getLogger('urllib3').setLevel(logging.DEBUG if log_file else logging.WARNING)
