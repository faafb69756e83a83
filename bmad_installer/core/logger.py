"""Installer logging: rich console output plus an optional log file."""
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

console = Console()

ROOT_LOGGER = "bmad_installer"

LOG_DIR = Path.home() / ".bmad-installer"
LOG_FILE = LOG_DIR / "installer.log"
FALLBACK_LOG_FILE = Path("/tmp/bmad-installer.log")

_file_handler = None
_console_level = logging.INFO

logging.getLogger(ROOT_LOGGER).setLevel(logging.INFO)


def set_verbosity(verbose: bool) -> None:
    """Switch the installer loggers and their console output between INFO and DEBUG."""
    global _console_level

    _console_level = logging.DEBUG if verbose else logging.INFO
    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(_console_level)
    for name, candidate in logging.Logger.manager.loggerDict.items():
        if not isinstance(candidate, logging.Logger) or not name.startswith(ROOT_LOGGER):
            continue
        for handler in candidate.handlers:
            if isinstance(handler, RichHandler):
                handler.setLevel(_console_level)


def setup_file_logging(log_file: str = None, verbose: bool = False):
    """Attach a file handler to the installer loggers and apply verbosity.

    A later call with a different log file replaces the earlier handler.
    Falls back to /tmp when the log directory cannot be created.

    Returns:
        Path of the log file in use
    """
    global _file_handler

    set_verbosity(verbose)
    target = Path(log_file) if log_file else LOG_FILE
    root_logger = logging.getLogger(ROOT_LOGGER)

    if _file_handler is not None:
        if Path(_file_handler.baseFilename) == target.resolve():
            _file_handler.setLevel(_console_level)
            return target
        root_logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        target = FALLBACK_LOG_FILE

    handler = logging.FileHandler(target)
    handler.setLevel(_console_level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root_logger.addHandler(handler)
    _file_handler = handler

    root_logger.info(f"Installer logging initialized: {target}")
    return target


def get_logger(name: str) -> logging.Logger:
    """Logger with a rich console handler; its level follows the installer root."""
    logger = logging.getLogger(name)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler.setLevel(_console_level)
        logger.addHandler(handler)

    return logger
