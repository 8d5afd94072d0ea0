"""Exception types raised by AutoGenre collaborators."""


class AutoGenreError(Exception):
    """Base class for all AutoGenre errors."""


class ProviderError(AutoGenreError):
    """A metadata provider could not answer a query."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class ScanError(AutoGenreError):
    """The folder to scan is missing or unreadable."""


class TagWriteError(AutoGenreError):
    """Tags could not be written (or backed up) for a file."""


class FileOperationError(AutoGenreError):
    """A rename or move on disk failed."""


class SettingsError(AutoGenreError):
    """Settings could not be loaded or saved."""


class PassInProgressError(AutoGenreError):
    """A resolution or apply pass is already running on the inventory."""
