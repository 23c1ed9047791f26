"""Console output and the best-effort transcript file."""

import getpass
import logging
import os
import socket
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from .errors import LoggingSetupError

LOGGER_NAME = "lnksweep"
FILE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"

logger = logging.getLogger(__name__)


def _banner(title: str) -> str:
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "?"
    stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return (
        f"{'*' * 22} {title} {stamp} "
        f"user={user} host={socket.gethostname()} pid={os.getpid()}"
    )


@contextmanager
def console(verbose: bool = False) -> Iterator[logging.Handler]:
    """Attach a stderr handler to the package logger for the duration."""
    root = logging.getLogger(LOGGER_NAME)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    old_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)
    try:
        yield handler
    finally:
        root.removeHandler(handler)
        root.setLevel(old_level)


def _open_handler(log_file: Path) -> logging.FileHandler:
    try:
        return logging.FileHandler(log_file, mode="a", encoding="utf-8")
    except OSError as exc:
        raise LoggingSetupError(str(exc)) from exc


@contextmanager
def transcript(
    log_file: Path | None, level: int = logging.INFO
) -> Iterator[logging.FileHandler | None]:
    """Mirror package log records into *log_file* while the block runs.

    The file is opened in append mode.  If it cannot be opened the failure
    is logged as a warning and the block runs with no file sink (yields
    ``None``).  An opened sink is always flushed and closed on exit.
    """
    if log_file is None:
        yield None
        return

    handler = None
    try:
        handler = _open_handler(log_file)
    except LoggingSetupError as exc:
        logger.warning(
            "Unable to start transcript at %s, continuing without file logging: %s",
            log_file,
            exc,
        )
    if handler is None:
        yield None
        return

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    root = logging.getLogger(LOGGER_NAME)
    old_level = root.level
    if root.getEffectiveLevel() > level:
        root.setLevel(level)
    root.addHandler(handler)
    handler.stream.write(_banner("Transcript started") + "\n")
    logger.info("Transcript started, output file is %s", log_file)
    try:
        yield handler
    finally:
        logger.info("Transcript stopped, output file is %s", log_file)
        root.removeHandler(handler)
        root.setLevel(old_level)
        handler.stream.write(_banner("Transcript stopped") + "\n")
        handler.close()
