"""Find and remove stale Self-Service Plugin shortcuts."""

import enum
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ._constants import SHORTCUT_SUFFIX
from ._types import Prompt, Resolver
from .config import RunConfig
from .errors import (
    ConfigurationError,
    DeletionError,
    EnumerationError,
    ShortcutResolutionError,
)
from .parser import resolve_target
from .refresh import RefreshOutcome, refresh_launcher

logger = logging.getLogger(__name__)


class ShortcutOutcome(enum.Enum):
    NO_MATCH = "no-match"
    DELETED = "deleted"
    WOULD_DELETE = "would-delete"
    DECLINED = "declined"
    RESOLVE_FAILED = "resolve-failed"
    DELETE_FAILED = "delete-failed"


@dataclass(slots=True)
class ShortcutRecord:
    """What happened to one shortcut file."""

    path: Path
    target: str = ""
    outcome: ShortcutOutcome = ShortcutOutcome.NO_MATCH
    error: str = ""


@dataclass(slots=True)
class RunResult:
    """Counters and per-file records of one run."""

    records: list[ShortcutRecord] = field(default_factory=list)
    refresh: RefreshOutcome = RefreshOutcome.SKIPPED
    elapsed_ms: int = 0
    exit_code: int = 0

    def count(self, outcome: ShortcutOutcome) -> int:
        return sum(1 for r in self.records if r.outcome is outcome)

    @property
    def found(self) -> int:
        return len(self.records)

    @property
    def deleted(self) -> int:
        return self.count(ShortcutOutcome.DELETED)

    @property
    def would_delete(self) -> int:
        return self.count(ShortcutOutcome.WOULD_DELETE)

    @property
    def declined(self) -> int:
        return self.count(ShortcutOutcome.DECLINED)

    @property
    def skipped(self) -> int:
        return self.count(ShortcutOutcome.RESOLVE_FAILED)

    @property
    def failed(self) -> int:
        return self.count(ShortcutOutcome.DELETE_FAILED)


# ---------------------------------------------------------------------------
# Confirmation
# ---------------------------------------------------------------------------
class Confirmer:
    """Interactive yes/no gate in front of each delete.

    Answers: ``y`` yes, ``a`` yes to all, ``n`` no, ``l`` no to all.
    Anything else (including an empty line) counts as no.
    """

    CHOICES = "[Y] Yes  [A] Yes to All  [N] No  [L] No to All"

    def __init__(self, prompt: Prompt = input):
        self._prompt = prompt
        self._sticky: bool | None = None

    def __call__(self, path: Path) -> bool:
        if self._sticky is not None:
            return self._sticky
        try:
            answer = self._prompt(f"Remove shortcut {path}?\n{self.CHOICES} (default N): ")
        except EOFError:
            answer = ""
        answer = answer.strip().lower()[:1]
        if answer == "a":
            self._sticky = True
        elif answer == "l":
            self._sticky = False
        return answer in ("y", "a")


# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------
def validate_paths(paths: tuple[Path, ...] | list[Path]) -> list[Path]:
    """Return the entries of *paths* that are existing directories.

    Raises :class:`ConfigurationError` when none are left.
    """
    valid = []
    for path in paths:
        if path.is_dir():
            valid.append(path)
        else:
            logger.warning("Search path does not exist, skipping: %s", path)
    if not valid:
        raise ConfigurationError("None of the search paths exist, nothing to do")
    return valid


def find_shortcuts(paths: list[Path]) -> list[Path]:
    """List the shortcut files directly inside each of *paths*, in order."""
    found = []
    for path in paths:
        try:
            entries = list(path.iterdir())
        except OSError as exc:
            raise EnumerationError(f"Cannot list {path}: {exc}") from exc
        shortcuts = [
            e for e in entries if e.suffix.lower() == SHORTCUT_SUFFIX and e.is_file()
        ]
        logger.debug("Found %d shortcut(s) in %s", len(shortcuts), path)
        found.extend(shortcuts)
    return found


def _remove(path: Path) -> None:
    try:
        path.unlink()
    except OSError as exc:
        raise DeletionError(str(exc)) from exc


def process_shortcut(
    path: Path,
    config: RunConfig,
    resolver: Resolver = resolve_target,
    confirm: Callable[[Path], bool] | None = None,
) -> ShortcutRecord:
    """Resolve, match and (maybe) delete one shortcut.  Never raises."""
    record = ShortcutRecord(path=path)
    try:
        record.target = resolver(path)
    except ShortcutResolutionError as exc:
        logger.error("%s: %s (%s)", path, exc, type(exc).__name__)
        record.outcome = ShortcutOutcome.RESOLVE_FAILED
        record.error = str(exc)
        return record

    logger.debug("%s -> %s", path.name, record.target)
    if not config.pattern.search(record.target):
        return record

    if config.dry_run:
        logger.info("What if: SSP Shortcut would be removed: %s", path)
        record.outcome = ShortcutOutcome.WOULD_DELETE
        return record

    if confirm is not None and not confirm(path):
        logger.info("Kept shortcut (not confirmed): %s", path)
        record.outcome = ShortcutOutcome.DECLINED
        return record

    try:
        _remove(path)
    except DeletionError as exc:
        logger.warning("Failed to remove %s: %s", path, exc)
        record.outcome = ShortcutOutcome.DELETE_FAILED
        record.error = str(exc)
        return record

    logger.info("SSP Shortcut Removed: %s", path)
    record.outcome = ShortcutOutcome.DELETED
    return record


def run(
    config: RunConfig,
    resolver: Resolver = resolve_target,
    prompt: Prompt = input,
    started: float | None = None,
) -> RunResult:
    """Run the cleanup pipeline described by *config*.

    Raises :class:`ConfigurationError` or :class:`EnumerationError`; every
    other failure is logged and recorded on the returned :class:`RunResult`.
    """
    if started is None:
        started = time.perf_counter()
    result = RunResult()

    paths = validate_paths(config.search_paths)
    shortcuts = find_shortcuts(paths)
    if not shortcuts:
        logger.info("No shortcuts found in %d search path(s), nothing to do", len(paths))
    else:
        confirm = Confirmer(prompt) if config.confirm and not config.dry_run else None
        for path in shortcuts:
            result.records.append(process_shortcut(path, config, resolver, confirm))

        if config.skip_refresh:
            logger.debug("Shortcut refresh disabled")
        else:
            result.refresh = refresh_launcher(
                config.process_name,
                config.executable_name,
                config.poll_argument,
                dry_run=config.dry_run,
            )

        if config.dry_run:
            logger.info(
                "Shortcuts found: %d, would remove: %d, unreadable: %d",
                result.found,
                result.would_delete,
                result.skipped,
            )
        else:
            logger.info(
                "Shortcuts found: %d, removed: %d, failed: %d, unreadable: %d",
                result.found,
                result.deleted,
                result.failed,
                result.skipped,
            )

    result.elapsed_ms = round((time.perf_counter() - started) * 1000)
    logger.info("Completed in %d ms", result.elapsed_ms)
    return result
