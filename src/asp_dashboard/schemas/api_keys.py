"""Pydantic models for API key management and the local key cache."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_SCOPES = ["ingestions:write", "accounts:read"]


class InternalApiKey(BaseModel):
    """API key metadata as returned by GET /internal/api-keys (no secret)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    display_name: Optional[str] = Field(None, alias="displayName")
    prefix: str
    scopes: list[str] = Field(default_factory=list)
    sandbox: bool = False
    created_at: datetime = Field(..., alias="createdAt")
    last_used_at: Optional[datetime] = Field(None, alias="lastUsedAt")


class CreateApiKeyRequest(BaseModel):
    """Request payload for creating a tenant API key."""

    model_config = ConfigDict(populate_by_name=True)

    display_name: Optional[str] = Field(
        None, alias="displayName", description="Human-readable key name"
    )
    scopes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SCOPES),
        description="Permission scopes granted to the key",
    )
    sandbox: bool = Field(False, description="Create a sandbox key")


class CreateApiKeyResponse(BaseModel):
    """Creation response; the only time the full key is revealed."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    prefix: str
    api_key: str = Field(..., alias="apiKey", description="Full key (shown once)")


class StoreApiKeyRequest(BaseModel):
    """Body of POST /api/internal/store-api-key.

    Fields are optional so missing values produce the 400 envelope rather
    than a validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    prefix: Optional[str] = None
    api_key: Optional[str] = Field(None, alias="apiKey")


class RemoveApiKeyRequest(BaseModel):
    """Body of DELETE /api/internal/store-api-key."""

    id: Optional[str] = None
    prefix: Optional[str] = None


class CachedApiKey(BaseModel):
    """One persisted cache entry."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    prefix: str
    full_key: str = Field(..., alias="fullKey")


class LatestApiKey(BaseModel):
    """The tenant's most recent key, with the secret when it is cached."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    prefix: str
    api_key: Optional[str] = Field(
        None, alias="apiKey", description="Full key from cache, null if not cached"
    )
    display_name: Optional[str] = Field(None, alias="displayName")
    created_at: datetime = Field(..., alias="createdAt")
