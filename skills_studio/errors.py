"""
Errors - exception taxonomy shared by the client, session and UI
"""


class StudioError(Exception):
    """Base class for every Skills Studio error."""


class NetworkError(StudioError):
    """A request failed, timed out or returned a non-success status."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class StaleResponse(StudioError):
    """A load result superseded by a newer navigation. Never shown to the user."""

    def __init__(self, seq: int, current: int):
        super().__init__(f"Response #{seq} superseded by #{current}")
        self.seq     = seq
        self.current = current


class ConfirmationDeclined(StudioError):
    """The user refused to discard unsaved changes; the action was aborted."""


class SaveInProgress(StudioError):
    """A save was requested while the previous save of the same tab is in flight."""
