"""
Logging setup based on loguru.

- Colorized console output
- Optional rotating log file plus a separate error log
- Module loggers via get_logger(__name__)
"""

import sys
from pathlib import Path
from typing import Any

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

LOG_FORMAT_FILE = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
    "{level: <8} | "
    "{extra[name]}:{function}:{line} | "
    "{message}"
)

# Records logged through the bare loguru logger have no bound name
logger.configure(extra={"name": "corvid"})

_handler_ids: list[int] = []


def setup_logging(
    level: str | None = None,
    log_dir: Path | str | None = None,
    console: bool = True,
) -> None:
    """
    Configure log handlers.

    Values not given are read from the [log] configuration section. Calling
    this again replaces the handlers installed by the previous call.

    Args:
        level: Minimum level (loguru level name)
        log_dir: Directory for corvid.log and errors.log; empty for none
        console: Whether to log to stderr
    """
    if level is None or log_dir is None:
        import corvid.config

        cfg = corvid.config.get("log")
        level = level or cfg.level
        log_dir = cfg.dir if log_dir is None else log_dir

    logger.remove()
    _handler_ids.clear()

    if console:
        _handler_ids.append(
            logger.add(sys.stderr, format=LOG_FORMAT, level=level, colorize=True)
        )

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        _handler_ids.append(
            logger.add(
                log_path / "corvid.log",
                format=LOG_FORMAT_FILE,
                level=level,
                rotation="10 MB",
                retention="14 days",
                encoding="utf-8",
            )
        )
        _handler_ids.append(
            logger.add(
                log_path / "errors.log",
                format=LOG_FORMAT_FILE,
                level="ERROR",
                rotation="10 MB",
                retention="30 days",
                encoding="utf-8",
            )
        )

    logger.debug(f"Logging initialized (level={level}, dir={log_dir or '-'})")


def get_logger(name: str = __name__) -> Any:
    """Return the loguru logger bound to a module name."""
    return logger.bind(name=name)
