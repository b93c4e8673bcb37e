from __future__ import annotations


class PulseError(Exception):
    """Base class for errors raised by the pulse core."""


class UploadError(PulseError):
    reason = "upload_error"

    def __init__(self, message: str, *, reason: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if reason is not None:
            self.reason = reason


class UploadRejected(UploadError):
    """Structural rejection: nothing from the file may be committed."""

    reason = "rejected"


class NoRecognizedProducts(UploadError):
    reason = "no_products"


class CalendarLocked(PulseError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Working days for {key} are finalized. Enable admin override to edit.")
        self.key = key


class PersistenceError(PulseError):
    pass
