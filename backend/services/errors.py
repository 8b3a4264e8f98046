# services/errors.py — Failure kinds raised by the service layer
# Each kind carries the HTTP status the boundary renders it with.


class ServiceError(Exception):
    """Base class for classified service failures"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(ServiceError):
    status_code = 404


class AccessDenied(ServiceError):
    status_code = 403


class InvalidInput(ServiceError):
    status_code = 400


class DuplicateEmail(ServiceError):
    status_code = 400


class InvalidCredentials(ServiceError):
    status_code = 401
