# opsconsole/infrastructure/database/models.py

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String
from sqlalchemy.sql import func

from opsconsole.infrastructure.database.session import Base


class BaseModel(Base):
    __abstract__ = True

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class UserRow(BaseModel):
    """Console principals. Soft-deleted via is_active, never removed."""

    __tablename__ = "users"

    email = Column(String(320), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False, default="employee", index=True)
    department = Column(String(100), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    avatar = Column(String(500), nullable=True)


class AssetRow(BaseModel):
    __tablename__ = "assets"

    name = Column(String(200), nullable=False)
    category = Column(String(20), nullable=False)
    serial_number = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default="available", index=True)
    location = Column(String(200), nullable=True)
    assigned_to = Column(String(36), nullable=True, index=True)
    assigned_date = Column(DateTime(timezone=True), nullable=True)
    purchase_date = Column(DateTime(timezone=True), nullable=True)
    purchase_price = Column(Float, nullable=True)
    vendor_id = Column(String(36), nullable=True)
    warranty_expiry = Column(DateTime(timezone=True), nullable=True)
    depreciation_rate = Column(Float, nullable=False, default=0.0)
    current_value = Column(Float, nullable=True)
    maintenance_history = Column(JSON, nullable=False, default=list)
    notes = Column(String, nullable=True)
    created_by = Column(String(36), nullable=False, index=True)


class VendorRow(BaseModel):
    __tablename__ = "vendors"

    name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=True)
    contacts = Column(JSON, nullable=False, default=list)
    address = Column(String(500), nullable=True)
    website = Column(String(500), nullable=True)
    contracts = Column(JSON, nullable=False, default=list)
    rating = Column(Integer, nullable=True)
    notes = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(String(36), nullable=False, index=True)


class OnboardingTemplateRow(BaseModel):
    __tablename__ = "onboarding_templates"

    name = Column(String(200), nullable=False)
    department = Column(String(100), nullable=True)
    role = Column(String(100), nullable=True)
    tasks = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(String(36), nullable=False, index=True)


class OnboardingInstanceRow(BaseModel):
    __tablename__ = "onboarding_instances"

    employee = Column(String(36), nullable=False, index=True)
    template_id = Column(String(36), nullable=False, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    tasks = Column(JSON, nullable=False, default=list)
    progress = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active", index=True)
    created_by = Column(String(36), nullable=False)
