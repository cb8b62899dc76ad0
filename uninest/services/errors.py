class ServiceError(Exception):
    """Base for errors surfaced to API callers with a stable code."""

    status_code = 400

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


class ServiceValidationError(ServiceError):

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__("VALIDATION_ERROR", message)


class PreconditionError(ServiceError):

    status_code = 400


class ConflictError(ServiceError):

    status_code = 409


class NotFoundError(ServiceError):

    status_code = 404

    def __init__(self, message: str):
        super().__init__("NOT_FOUND", message)


class ForbiddenError(ServiceError):

    status_code = 403
