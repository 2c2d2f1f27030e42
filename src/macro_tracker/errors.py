"""Errors raised by tracker commands."""


class TrackerError(Exception):
    """Base class for errors surfaced to the user as a message."""


class ValidationError(TrackerError):
    """Malformed user input; the command was aborted without state changes."""


class ProfileMissingError(TrackerError):
    """The command needs a profile and none has been created yet."""


class NotConfiguredError(TrackerError):
    """The estimation gateway was used without an API key."""


class EstimationFailedError(TrackerError):
    """The estimation call errored or returned unparsable content."""
