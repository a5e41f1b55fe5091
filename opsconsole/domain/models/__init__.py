from opsconsole.domain.models.asset import (
    Asset,
    AssetCategory,
    AssetStatus,
    MaintenanceRecord,
    depreciated_value,
)
from opsconsole.domain.models.onboarding import (
    OnboardingInstance,
    OnboardingStatus,
    OnboardingTask,
    OnboardingTemplate,
    TaskAssigneeRole,
    TaskStatus,
    TemplateTask,
    instantiate,
)
from opsconsole.domain.models.user import User
from opsconsole.domain.models.vendor import Contract, Vendor, VendorContact

__all__ = [
    "Asset",
    "AssetCategory",
    "AssetStatus",
    "Contract",
    "MaintenanceRecord",
    "OnboardingInstance",
    "OnboardingStatus",
    "OnboardingTask",
    "OnboardingTemplate",
    "TaskAssigneeRole",
    "TaskStatus",
    "TemplateTask",
    "User",
    "Vendor",
    "VendorContact",
    "depreciated_value",
    "instantiate",
]
