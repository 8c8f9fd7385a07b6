"""
Exception hierarchy shared by the station backend and the player.
"""


class IndigoError(Exception):
    """Base error. `status` is the HTTP status the API answers with."""
    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(IndigoError):
    """Request data failed validation."""
    status = 400


class NotFoundError(IndigoError):
    status = 404


class DatabaseUnavailable(IndigoError):
    """No database DSN has been configured."""
    status = 500


class PlaybackError(IndigoError):
    """Playback backend failed; message is safe to show to listeners."""
