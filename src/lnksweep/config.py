"""Run configuration and environment-specific defaults."""

import os
import re
from dataclasses import dataclass
from pathlib import Path

from ._constants import (
    DEFAULT_LOG_FILE,
    DEFAULT_PATTERN,
    DEFAULT_PROFILE_DIRS,
    LAUNCHER_EXECUTABLE,
    LAUNCHER_PROCESS,
    POLL_ARGUMENT,
)
from ._types import PathLike


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Parsed parameters of one cleanup run.  Immutable once built."""

    pattern: re.Pattern[str]
    search_paths: tuple[Path, ...]
    log_file: Path | None = None
    skip_refresh: bool = False
    dry_run: bool = False
    confirm: bool = False
    verbose: bool = False
    process_name: str = LAUNCHER_PROCESS
    executable_name: str = LAUNCHER_EXECUTABLE
    poll_argument: str = POLL_ARGUMENT


def compile_pattern(pattern: str, case_sensitive: bool = False) -> re.Pattern[str]:
    """Compile *pattern*; matching is case-insensitive unless asked otherwise."""
    return re.compile(pattern, 0 if case_sensitive else re.IGNORECASE)


def default_search_paths(profile: PathLike | None = None) -> tuple[Path, ...]:
    """Desktop and start-menu folders under *profile* (default: the user's home)."""
    root = Path(profile) if profile is not None else Path.home()
    return tuple(root.joinpath(*parts) for parts in DEFAULT_PROFILE_DIRS)


def default_log_file() -> Path | None:
    """The transcript location used on Windows; no default elsewhere."""
    return Path(DEFAULT_LOG_FILE) if os.name == "nt" else None


def make_config(
    pattern: str = DEFAULT_PATTERN,
    search_paths: list[PathLike] | None = None,
    log_file: PathLike | None = None,
    *,
    case_sensitive: bool = False,
    **options: bool,
) -> RunConfig:
    """Build a :class:`RunConfig` from plain values.

    ``options`` accepts the boolean switches of :class:`RunConfig`
    (``skip_refresh``, ``dry_run``, ``confirm``, ``verbose``).
    """
    if search_paths is None:
        paths = default_search_paths()
    else:
        paths = tuple(Path(p) for p in search_paths)
    return RunConfig(
        pattern=compile_pattern(pattern, case_sensitive),
        search_paths=paths,
        log_file=Path(log_file) if log_file is not None else None,
        **options,
    )
