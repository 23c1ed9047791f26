"""lnksweep -- remove stale Citrix Self-Service Plugin shortcuts (.lnk)."""

__version__ = "0.1.0"

from .cleanup import RunResult, ShortcutOutcome, ShortcutRecord, run
from .config import RunConfig, make_config
from .errors import (
    ConfigurationError,
    DeletionError,
    EnumerationError,
    LnkSweepError,
    LoggingSetupError,
    RefreshError,
    ShortcutResolutionError,
)
from .parser import FormatError, LinkTarget, MissingFieldError, parse_lnk, resolve_target
from .refresh import RefreshOutcome, refresh_launcher

__all__ = [
    "run",
    "make_config",
    "parse_lnk",
    "resolve_target",
    "refresh_launcher",
    "RunConfig",
    "RunResult",
    "ShortcutRecord",
    "ShortcutOutcome",
    "RefreshOutcome",
    "LinkTarget",
    "LnkSweepError",
    "ConfigurationError",
    "EnumerationError",
    "ShortcutResolutionError",
    "DeletionError",
    "RefreshError",
    "LoggingSetupError",
    "FormatError",
    "MissingFieldError",
    "__version__",
]
