"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ResourceNotFoundError(ApplicationError):
    """Raised when the target record of an operation does not exist."""


class ConflictError(ApplicationError):
    """Raised when an operation would violate a uniqueness or single-active rule."""
