"""Ask the running Self-Service Plugin to regenerate its shortcuts."""

import enum
import logging
import subprocess
from pathlib import Path

import psutil

from ._constants import LAUNCHER_EXECUTABLE, LAUNCHER_PROCESS, POLL_ARGUMENT
from .errors import RefreshError

logger = logging.getLogger(__name__)


class RefreshOutcome(enum.Enum):
    SKIPPED = "skipped"
    NOT_RUNNING = "not-running"
    POLLED = "polled"
    WOULD_POLL = "would-poll"
    MISSING_EXECUTABLE = "missing-executable"
    LAUNCH_FAILED = "launch-failed"


def _matches(name: str | None, process_name: str) -> bool:
    if not name:
        return False
    name = name.lower()
    wanted = process_name.lower()
    return name == wanted or name == wanted + ".exe"


def find_launcher(process_name: str = LAUNCHER_PROCESS) -> psutil.Process | None:
    """Return the first running process called *process_name*, if any."""
    for proc in psutil.process_iter(["pid", "name", "exe"]):
        if _matches(proc.info["name"], process_name):
            return proc
    return None


def _launch(command: list[str]) -> subprocess.Popen:
    try:
        return subprocess.Popen(command)
    except OSError as exc:
        raise RefreshError(f"{command[0]}: {exc}") from exc


def refresh_launcher(
    process_name: str = LAUNCHER_PROCESS,
    executable_name: str = LAUNCHER_EXECUTABLE,
    poll_argument: str = POLL_ARGUMENT,
    dry_run: bool = False,
) -> RefreshOutcome:
    """Start ``<launcher dir>/<executable_name> <poll_argument>``.

    The launcher directory is taken from the running *process_name*.  The
    new process is not waited on.  Failures are logged and returned as an
    outcome; none of them raise.
    """
    proc = find_launcher(process_name)
    if proc is None:
        logger.debug("%s is not running, skipping refresh", process_name)
        return RefreshOutcome.NOT_RUNNING

    exe = proc.info.get("exe")
    if not exe:
        logger.warning(
            "Could not determine the executable of %s (pid %s), skipping refresh",
            process_name,
            proc.pid,
        )
        return RefreshOutcome.LAUNCH_FAILED

    poller = Path(exe).parent / executable_name
    if not poller.is_file():
        logger.warning(
            "%s not found next to %s, the installation may be corrupted",
            executable_name,
            exe,
        )
        return RefreshOutcome.MISSING_EXECUTABLE

    command = [str(poller), poll_argument]
    if dry_run:
        logger.info("What if: would run %s", " ".join(command))
        return RefreshOutcome.WOULD_POLL

    try:
        _launch(command)
    except RefreshError as exc:
        logger.warning("Failed to refresh Self-Service shortcuts: %s", exc)
        return RefreshOutcome.LAUNCH_FAILED

    logger.info("Requested shortcut refresh: %s", " ".join(command))
    return RefreshOutcome.POLLED
