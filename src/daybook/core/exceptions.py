"""
Daybook exception hierarchy.

All daybook exceptions inherit from DaybookError, so callers can catch
library-level errors while still distinguishing specific failure modes.
"""


class DaybookError(Exception):
    """Base exception class for all daybook errors."""


class ConfigurationError(DaybookError):
    """Raised for configuration errors (missing keys, invalid values)."""


class StorageUnavailable(DaybookError):
    """Raised when the entry store cannot be opened, read, or written."""


class InvalidAttachmentEncoding(DaybookError, ValueError):
    """Raised when an encoded attachment string cannot be decoded."""


class InvalidBackupFormat(DaybookError):
    """Raised when a backup document is not parseable or not shaped as expected.

    The message is deliberately generic; the underlying cause is logged.
    """

    def __init__(self, message: str = "Invalid backup file"):
        super().__init__(message)


class MigrationFailure(DaybookError):
    """Raised inside the legacy migrator; never escapes ``migrate()``."""
