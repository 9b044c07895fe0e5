class AppError(Exception):
    """Base error surfaced to the client as a transient JSON message."""
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class AuthorizationError(AppError):
    status_code = 403


class NotFound(AppError):
    status_code = 404


class StoreError(AppError):
    status_code = 500


class StatusUpdateError(AppError):
    status_code = 400


class InvalidStatusError(ValidationError):
    pass


class OrderNotFound(NotFound):
    pass
