"""
Error kinds raised by PinDiary collaborators.

None of these is fatal: each is absorbed by the component that calls the
collaborator which raised it.
"""


class PinDiaryError(Exception):
    """Base class for PinDiary errors."""


class DetailFetchFailed(PinDiaryError):
    """Place details could not be fetched, or the payload was malformed."""


class GeolocationUnavailable(PinDiaryError):
    """The current position could not be determined."""


class StorageReadFailed(PinDiaryError):
    """Durable storage could not be read."""


class StorageWriteFailed(PinDiaryError):
    """Durable storage rejected a write."""
