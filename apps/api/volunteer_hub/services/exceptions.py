class ServiceError(Exception):
    def __init__(self, code: str, message: str | None = None) -> None:
        self.code = code
        self.message = message or code
        super().__init__(self.message)


class NotFoundError(ServiceError):
    pass


class PermissionDeniedError(ServiceError):
    pass


class ConflictError(ServiceError):
    pass


class AlreadyRegisteredError(ConflictError):
    pass


class EventFullError(ConflictError):
    pass


class RegistrationClosedError(ConflictError):
    pass


class InvalidStateError(ServiceError):
    pass


class ValidationError(ServiceError):
    pass


class StoreError(ServiceError):
    """The database failed underneath an operation (connectivity, constraint drift)."""
