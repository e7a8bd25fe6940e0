class ClassbookError(Exception):
    """Base error. `message` is safe to show to the user."""

    default_message = "Request failed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthorizationError(ClassbookError):
    default_message = "Login is required."


class ValidationError(ClassbookError):
    default_message = "Invalid request."


class InvalidIntervalError(ValidationError):
    default_message = "End time must be later than start time."


class QuotaExceededError(ValidationError):
    default_message = "You can hold at most 3 upcoming reservations."


class CapacityExceededError(ValidationError):
    default_message = "Participants exceed the room capacity."


class ConflictError(ClassbookError):
    """The slot is already taken; the waitlist is the recovery path."""

    default_message = "Room is already booked for this time slot."


class NotFoundError(ClassbookError):
    default_message = "Not found."


class SubmissionInProgressError(ClassbookError):
    default_message = "A request is already in progress."


class BackendError(ClassbookError):
    def __init__(self, message=None, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class TransportError(ClassbookError):
    default_message = "Could not reach the reservation service."
