"""
Schemas for Ton.Place purchases.
"""
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_PURCHASE_TITLE_LENGTH = 150


class Purchase(BaseModel):
    """A purchase (transaction) as returned by Ton.Place."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Purchase identifier")
    amount: int = Field(..., description="Amount in minor units (cents for EUR, nanotons for TON)")
    currency: str = Field(default="eur", description="Currency code, e.g. 'eur' or 'ton'")
    user_id: int = Field(default=0, description="Ton.Place user identifier")
    created_at: int = Field(default=0, description="Creation time (unix seconds)")
    status: str = Field(default="pending", description="Payment status, e.g. 'pending' or 'paid'")
    title: str = Field(default="", description="Title shown in the payment dialog")


class PurchaseListResponse(BaseModel):
    """Response body of GET /apps/purchases and GET /api/transactions."""

    model_config = ConfigDict(extra="ignore")

    transactions: List[Purchase] = Field(default_factory=list)

    @field_validator("transactions", mode="before")
    @classmethod
    def null_to_empty(cls, v):
        return v if v is not None else []


class CreatePurchaseRequest(BaseModel):
    """Body of POST /api/create-purchase sent by the page script."""

    user_id: int = Field(..., description="Ton.Place user identifier")
    amount: int = Field(..., description="Amount in cents")
    title: str = Field(..., description="Purchase title")

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Amount must be greater than 0")
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v:
            raise ValueError("Title is required")
        if len(v) > MAX_PURCHASE_TITLE_LENGTH:
            raise ValueError(f"Title must be {MAX_PURCHASE_TITLE_LENGTH} characters or less")
        return v


class CreatePurchaseResponse(BaseModel):
    """Response body of POST /apps/purchase/create and POST /api/create-purchase."""

    model_config = ConfigDict(extra="ignore")

    purchase_id: int = Field(..., description="Identifier to pass to TonPlace.purchase()")
