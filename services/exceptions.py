class ServiceError(Exception):
    """Base error raised by the services; carries the HTTP status it maps to"""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidRequestError(ServiceError):
    status_code = 400


class UnauthorizedError(ServiceError):
    status_code = 401


class ForbiddenError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class MongoDBUnavailableError(ServiceError):
    """Raised when MongoDB cannot be reached"""

    status_code = 503
