"""Domain-specific exceptions. Pure domain layer, no infrastructure."""


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when domain validation rules are violated."""


class EntityNotFoundError(DomainError):
    """Raised when a nested entity (contract, task) does not exist on its parent."""


class AssetRetiredError(DomainError):
    """Raised when an operation needs a usable asset but the asset is retired."""


class OnboardingClosedError(DomainError):
    """Raised when an onboarding instance is no longer active."""
