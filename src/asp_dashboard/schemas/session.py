"""Pydantic models for dashboard session and tenant information."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionInfo(BaseModel):
    """Response of GET /auth/session/me."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    authenticated: bool = False
    email: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")
    tenant_id: Optional[str] = Field(None, alias="tenantId")


class TenantInfo(BaseModel):
    """Response of GET /internal/tenant/me."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    name: str
    slug: Optional[str] = None
    status: Optional[str] = None
    plan: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")
