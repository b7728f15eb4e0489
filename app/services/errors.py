class ServiceError(RuntimeError):
    """Recoverable service error; every subclass returns the user to an interactive page."""

    status_code = 500
    code = "server_error"
    public_message = "Something went wrong. Please try again."


class ValidationError(ServiceError):
    """Bad or incomplete input. Raised before any store call."""

    status_code = 400
    code = "validation_error"

    @property
    def public_message(self) -> str:
        return str(self) or "Please check your input."


class BackendError(ServiceError):
    """A read or write against the store failed. Local state is left untouched."""

    status_code = 503
    code = "backend_unavailable"
    public_message = "We couldn't reach the database. Please try again."


class NotFound(ServiceError):
    """No question (or user) available where one was expected."""

    status_code = 404
    code = "not_found"
    public_message = "No more questions right now."


class InvalidState(ServiceError):
    """Caller broke a precondition (e.g. rotating over zero questions)."""

    status_code = 409
    code = "invalid_state"
    public_message = "No questions are configured yet."
