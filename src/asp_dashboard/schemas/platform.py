"""Pydantic models for ASP Platform resources.

Upstream responses are passed through to the browser untouched; these
models cover only the payloads this service reads or validates itself.
"""
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class IngestionStatus(str, Enum):
    """Ingestion lifecycle: PENDING -> PROCESSING -> PARSED -> SAVING -> PROCESSED|FAILED."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    PARSED = "PARSED"
    SAVING = "SAVING"
    PROCESSED = "PROCESSED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in {IngestionStatus.PROCESSED, IngestionStatus.FAILED}


class ConnectBankRequest(BaseModel):
    """Body of POST /api/public/bank-connections/connect."""

    model_config = ConfigDict(populate_by_name=True)

    bank_id: Optional[str] = Field(None, alias="bankId")
    user_ref: Optional[str] = Field(None, alias="userRef")


class EnrichedTransaction(BaseModel):
    """Transaction augmented with merchant/category/recurring metadata."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[Union[str, int]] = None
    date: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    merchant_name: Optional[str] = Field(None, alias="merchantName")
    description_clean: Optional[str] = Field(None, alias="descriptionClean")
    description_raw: Optional[str] = Field(None, alias="descriptionRaw")
    category: Optional[str] = None
    subcategory: Optional[str] = None
    direction: Optional[str] = None
    salary: Optional[bool] = None
    recurring: Optional[bool] = None
