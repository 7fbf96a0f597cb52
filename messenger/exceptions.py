class MessengerError(Exception):
    """Base class for errors raised by a single requested action."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MessengerError):
    """Length limits or malformed input."""

    status_code = 422


class SelfReferenceError(MessengerError):
    """A user tried to put themselves on their own contact or block list."""

    status_code = 400


class NotFoundError(MessengerError):
    status_code = 404


class ForbiddenError(MessengerError):
    status_code = 403


class ConflictError(MessengerError):
    """Duplicate insert of a unique key or edge."""

    status_code = 409


class StoreError(MessengerError):
    """Underlying storage or connectivity failure."""

    status_code = 503
