class NotFoundError(Exception):
    message = 'Not found'

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class ConflictError(Exception):
    message = 'Conflict'

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class InvalidTransitionError(ConflictError):
    message = 'Invalid state transition'


class UnauthorizedError(Exception):
    ...


class ForbiddenError(Exception):
    ...
