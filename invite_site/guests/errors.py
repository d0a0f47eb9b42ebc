class GuestError(Exception):
    """Base class for errors raised by the guest list."""


class ValidationError(GuestError):
    """Raised when a request carries an empty name or phone, or an unknown RSVP choice."""


class BackendError(GuestError):
    """Raised when the backing store cannot be read or written."""


class ConfigurationError(BackendError):
    """Raised when the spreadsheet backend is selected but no usable credentials are configured."""
