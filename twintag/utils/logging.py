"""
Logging utilities for the Twintag SDK.

The SDK only attaches a ``NullHandler``; applications and the CLI opt in to
console or file output with the helpers below. Transport traffic is logged
at INFO on ``twintag.network.client`` once the environment's log level is
raised above ``none``.
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
DEFAULT_LEVEL = logging.INFO
DEFAULT_LOG_DIR = Path.home() / ".twintag" / "logs"

SDK_LOGGER = "twintag"
TRANSPORT_LOGGER = "twintag.network.client"

LOG_COLORS = {
    "DEBUG": "\033[94m",
    "INFO": "\033[92m",
    "WARNING": "\033[93m",
    "ERROR": "\033[91m",
    "CRITICAL": "\033[95m",
}
RESET_COLOR = "\033[0m"


class ColoredFormatter(logging.Formatter):
    """Formatter that colors whole records by level on a terminal."""

    def __init__(self, fmt: str = DEFAULT_FORMAT, datefmt: str = DEFAULT_DATE_FORMAT,
                 use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = LOG_COLORS.get(record.levelname)
        return f"{color}{text}{RESET_COLOR}" if self.use_colors and color else text


def _file_handler(path: Path, fmt: str) -> logging.FileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path)
    handler.setFormatter(logging.Formatter(fmt, DEFAULT_DATE_FORMAT))
    return handler


def _drop_handlers(logger: logging.Logger, kind: type = logging.Handler) -> None:
    for handler in list(logger.handlers):
        if isinstance(handler, kind):
            logger.removeHandler(handler)
            handler.close()


def setup_logger(name: str = SDK_LOGGER,
                 level: int = DEFAULT_LEVEL,
                 file_path: Optional[Union[str, Path]] = None,
                 format_string: Optional[str] = None,
                 use_colors: bool = True,
                 propagate: bool = False) -> logging.Logger:
    """
    Replace the handlers of a logger with a console handler and, optionally,
    a file handler.

    Args:
        name: Logger name
        level: Logging level
        file_path: Log file, created with its directory if missing
        format_string: Record format (defaults to ``DEFAULT_FORMAT``)
        use_colors: Color console records by level
        propagate: Also pass records to parent loggers

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    _drop_handlers(logger)
    logger.setLevel(level)
    logger.propagate = propagate

    fmt = format_string or DEFAULT_FORMAT
    console = logging.StreamHandler()
    console.setFormatter(ColoredFormatter(fmt, use_colors=use_colors))
    logger.addHandler(console)
    if file_path:
        logger.addHandler(_file_handler(Path(file_path), fmt))

    logger.debug(f"Logger '{name}' configured at {logging.getLevelName(level)}")
    return logger


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Return a logger, configuring top-level loggers that have no handler yet.

    Dotted names are left to propagate to their parent.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        if level is not None:
            logger.setLevel(level)
        return logger

    if '.' not in name:
        return setup_logger(name, level or DEFAULT_LEVEL)

    logger.propagate = True
    if level is not None:
        logger.setLevel(level)
    return logger


def enable_transport_logging(level: int = DEFAULT_LEVEL) -> logging.Logger:
    """
    Send SDK records, including request and response traffic, to the console.

    The environment's log level still decides which traffic lines are built.
    """
    logger = setup_logger(SDK_LOGGER, level)
    logging.getLogger(TRANSPORT_LOGGER).setLevel(logging.NOTSET)
    return logger


def enable_file_logging(logger_name: str = SDK_LOGGER,
                        log_dir: Optional[Union[str, Path]] = None,
                        filename: Optional[str] = None) -> str:
    """
    Write a logger's records to a file, replacing any previous file handler.

    Args:
        logger_name: Logger name
        log_dir: Directory for the logs (defaults to ``~/.twintag/logs``)
        filename: File name (defaults to ``<logger>_<timestamp>.log``)

    Returns:
        Path of the log file
    """
    logger = logging.getLogger(logger_name)
    if not filename:
        filename = f"{logger_name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    file_path = (Path(log_dir) if log_dir else DEFAULT_LOG_DIR) / filename

    _drop_handlers(logger, logging.FileHandler)
    logger.addHandler(_file_handler(file_path, DEFAULT_FORMAT))

    logger.info(f"File logging enabled: {file_path}")
    return str(file_path)


def set_log_level(level: Union[int, str],
                  logger_name: Optional[str] = None) -> None:
    """
    Set the Python logging level of one logger or of every SDK logger.

    This is independent of the transport log level of an ``Environment``,
    which decides what traffic is logged at all.

    Args:
        level: Level name or number
        logger_name: Logger to change (defaults to all ``twintag`` loggers)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = DEFAULT_LEVEL

    if logger_name:
        logging.getLogger(logger_name).setLevel(level)
        return

    logging.getLogger(SDK_LOGGER).setLevel(level)
    for name in list(logging.root.manager.loggerDict):
        if name.startswith(SDK_LOGGER + "."):
            logging.getLogger(name).setLevel(level)
