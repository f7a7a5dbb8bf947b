"""Exceptions raised by the booking API and rendered as ``{"error": message}``."""


class BookingApiError(Exception):
    status_code = 500
    default_message = 'Internal Server Error'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingApiError):
    """Missing or malformed request parameters."""
    status_code = 400
    default_message = 'Invalid request'


class AuthenticationError(BookingApiError):
    status_code = 401
    default_message = 'Unauthorized'


class PermissionDeniedError(BookingApiError):
    status_code = 403
    default_message = 'Forbidden'


class NotFoundError(BookingApiError):
    status_code = 404
    default_message = 'Not found'


class ConflictError(BookingApiError):
    status_code = 409
    default_message = 'Time slot not available'


class UpstreamDataError(BookingApiError):
    """The data store failed. The message never carries the underlying cause."""
    status_code = 500

    def __init__(self):
        super().__init__(self.default_message)
