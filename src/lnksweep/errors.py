"""Error taxonomy for a cleanup run.

Only the classes listed in :data:`FATAL_ERRORS` stop the pipeline.  Every
other error is caught where it happens, logged, and recorded as an outcome
on the run result.
"""


class LnkSweepError(Exception):
    """Base class for all lnksweep errors."""


class ConfigurationError(LnkSweepError):
    """None of the configured search paths exist."""


class EnumerationError(LnkSweepError):
    """An existing search path could not be listed."""


class ShortcutResolutionError(LnkSweepError):
    """A shortcut's stored target could not be read."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class DeletionError(LnkSweepError):
    """A matching shortcut could not be removed."""


class RefreshError(LnkSweepError):
    """The launcher could not be asked to poll."""


class LoggingSetupError(LnkSweepError):
    """The transcript file could not be opened."""


FATAL_ERRORS = (ConfigurationError, EnumerationError)
