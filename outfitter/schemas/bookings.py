"""Booking and hunt workflow request/response schemas."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from outfitter.schemas.contracts import ContractResponse, HuntSummary

Quantity = int | float | str | None


class CompleteBookingRequest(BaseModel):
    hunt_id: int = Field(ge=1)
    pricing_item_id: int = Field(ge=1)
    client_start_date: date
    client_end_date: date
    extra_days: Quantity = None
    extra_non_hunters: Quantity = None
    extra_spotters: Quantity = None
    rifle_rental: Quantity = None

    def addon_payload(self) -> dict[str, Any]:
        return {
            "extra_days": self.extra_days,
            "extra_non_hunters": self.extra_non_hunters,
            "extra_spotters": self.extra_spotters,
            "rifle_rental": self.rifle_rental,
        }


class PricingItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    category: str | None = None
    addon_type: str | None = None
    amount_usd: float
    included_days: int | None = None


class BookingOptionsResponse(BaseModel):
    hunt: HuntSummary
    window_start: date | None = None
    window_end: date | None = None
    plans: list[PricingItemResponse]
    addon_items: list[PricingItemResponse]
    addon_rates: dict[str, float]
    contract_id: int | None = None


class CompleteBookingResponse(BaseModel):
    success: bool = True
    message: str
    contract_created: bool
    hunt: HuntSummary
    contract: ContractResponse


class TagStatusUpdateRequest(BaseModel):
    tag_status: str = Field(min_length=2, max_length=40)


class WorkflowStateResponse(BaseModel):
    step: int | None = None
    label: str
    description: str
    next_action: str | None = None


class TagStatusResponse(BaseModel):
    hunt: HuntSummary
    contract_id: int | None = None
    contract_status: str | None = None
    contract_created: bool = False
    workflow: WorkflowStateResponse


class TagPurchaseRequest(BaseModel):
    outfitter_id: int = Field(ge=1)
    species: str = Field(min_length=1, max_length=120)
    unit: str | None = Field(default=None, max_length=120)
    hunt_code: str | None = Field(default=None, max_length=60)
    private_land_tag_id: int | None = Field(default=None, ge=1)
    client_start_date: date | None = None
    client_end_date: date | None = None
    client_name: str | None = Field(default=None, max_length=255)


class TagPurchaseResponse(BaseModel):
    hunt: HuntSummary
    contract_id: int
    contract_status: str
