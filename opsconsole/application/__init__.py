# Application layer: services that orchestrate domain, access control and persistence.

from opsconsole.application.access import AccessControl
from opsconsole.application.asset_service import AssetService
from opsconsole.application.exceptions import (
    ApplicationError,
    ConflictError,
    ResourceNotFoundError,
)
from opsconsole.application.onboarding_service import OnboardingService
from opsconsole.application.user_service import UserService
from opsconsole.application.vendor_service import VendorService

__all__ = [
    "AccessControl",
    "ApplicationError",
    "AssetService",
    "ConflictError",
    "OnboardingService",
    "ResourceNotFoundError",
    "UserService",
    "VendorService",
]
