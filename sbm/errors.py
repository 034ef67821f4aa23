from __future__ import annotations


class SbmError(Exception):
    """Base class for every failure the CLI reports to the user."""


class ValidationError(SbmError):
    pass


class NotFound(SbmError):
    pass


class CapacityExceeded(SbmError):
    pass


class AlreadyTagged(SbmError):
    pass


class DecodeError(SbmError):
    pass


class StoreIOError(SbmError):
    pass


class TitleFetchError(SbmError):
    pass


class OpenFailed(SbmError):
    pass


class Aborted(SbmError):
    """The user declined a confirmation. Not an error: nothing is saved and the exit code is 0."""
