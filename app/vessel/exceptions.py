"""Custom exceptions used by the upload manager."""

from __future__ import annotations

from typing import Any


class InvalidFileError(ValueError):
    """Raised when a file is rejected by the slot acceptance rules."""

    FILE_TOO_LARGE = "file_too_large"
    UNSUPPORTED_TYPE = "unsupported_type"

    def __init__(self, slot: str, reason: str, message: str) -> None:
        super().__init__(message)
        self.slot = slot
        self.reason = reason


class UnknownSlotError(KeyError):
    """Raised when a slot identifier is not one of the three fixed slots."""

    def __init__(self, slot: Any) -> None:
        super().__init__(slot)
        self.slot = str(slot)

    def __str__(self) -> str:
        return f"unknown slot '{self.slot}'"


class InvalidSettingsError(ValueError):
    """Raised when the upload configuration object fails validation."""

    def __init__(self, errors: Any) -> None:
        super().__init__(f"invalid upload settings: {errors}")
        self.errors = errors


class ResourceReleaseWarning(RuntimeWarning):
    """Emitted when a preview handle could not be released."""
