from typing import Any


class FlamefoldError(Exception):
    """Exceptions raised in this package."""


class FlamefoldCommandError(FlamefoldError):
    """Exceptions raised from this package's CLI commands."""

    def __init__(self, *args: Any, exit_code: int) -> None:
        super().__init__(*args)
        self.exit_code = exit_code


class RecordingError(FlamefoldError):
    """The recording could not be read or is corrupt."""


class WeightExtractionError(FlamefoldError):
    """An event category cannot extract a weight from the events it matches."""
