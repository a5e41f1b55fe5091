"""Domain layer: models, schemas, exceptions. Pure business logic only."""

from opsconsole.domain.exceptions import (
    AssetRetiredError,
    DomainError,
    DomainValidationError,
    EntityNotFoundError,
    OnboardingClosedError,
)

__all__ = [
    "AssetRetiredError",
    "DomainError",
    "DomainValidationError",
    "EntityNotFoundError",
    "OnboardingClosedError",
]
