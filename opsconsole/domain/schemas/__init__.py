from opsconsole.domain.schemas.asset import (
    AssetCreateRequest,
    AssetResponse,
    AssetStats,
    AssetUpdateRequest,
    AssignRequest,
    MaintenanceRequest,
)
from opsconsole.domain.schemas.common import Page
from opsconsole.domain.schemas.onboarding import (
    InstanceCreateRequest,
    InstanceResponse,
    OnboardingStats,
    TaskUpdateRequest,
    TemplateCreateRequest,
    TemplateResponse,
    TemplateUpdateRequest,
)
from opsconsole.domain.schemas.user import (
    RoleChangeRequest,
    UserCreateRequest,
    UserResponse,
    UserStats,
    UserUpdateRequest,
)
from opsconsole.domain.schemas.vendor import (
    ContractRequest,
    ContractResponse,
    ContractUpdateRequest,
    VendorCreateRequest,
    VendorResponse,
    VendorStats,
    VendorUpdateRequest,
)

__all__ = [
    "AssetCreateRequest",
    "AssetResponse",
    "AssetStats",
    "AssetUpdateRequest",
    "AssignRequest",
    "ContractRequest",
    "ContractResponse",
    "ContractUpdateRequest",
    "InstanceCreateRequest",
    "InstanceResponse",
    "MaintenanceRequest",
    "OnboardingStats",
    "Page",
    "RoleChangeRequest",
    "TaskUpdateRequest",
    "TemplateCreateRequest",
    "TemplateResponse",
    "TemplateUpdateRequest",
    "UserCreateRequest",
    "UserResponse",
    "UserStats",
    "UserUpdateRequest",
    "VendorCreateRequest",
    "VendorResponse",
    "VendorStats",
    "VendorUpdateRequest",
]
