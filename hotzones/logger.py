# hotzones/logger.py
# Root logging setup
# - one stream handler with a file:function:line format
# - level names map onto stdlib logging levels

import logging

LOG_FORMAT = "[{asctime}|{filename}:{funcName}:{lineno:d}]{levelname}  {message}"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
}


def setup_logging(level: str = "info") -> logging.Logger:
    """Configure the root logger with a single console handler."""
    logger = logging.getLogger()
    logger.setLevel(_LEVELS.get(level.lower(), logging.INFO))

    formatter = logging.Formatter(LOG_FORMAT, style="{", datefmt="%H:%M:%S")
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    # Replace whatever handlers a previous call or basicConfig installed
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.addHandler(console_handler)

    return logger
