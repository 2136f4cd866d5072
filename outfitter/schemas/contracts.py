"""Contract request/response schemas for API contracts."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from outfitter.services.contract_service import ContractView
from outfitter.utils.validators import as_utc

# Quantities are coerced by the bill calculator; junk input becomes zero.
Quantity = int | float | str | None


class CompletionPayloadRequest(BaseModel):
    acknowledged: bool = False
    client_start_date: date | None = None
    client_end_date: date | None = None
    selected_pricing_item_id: int | None = Field(default=None, ge=1)
    extra_days: Quantity = None
    extra_non_hunters: Quantity = None
    extra_spotters: Quantity = None
    rifle_rental: Quantity = None
    additional_days: Quantity = None
    non_hunters: Quantity = None
    client_name: str | None = Field(default=None, max_length=255)
    client_phone: str | None = Field(default=None, max_length=60)
    notes: str | None = Field(default=None, max_length=2000)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ReviewRequest(BaseModel):
    action: Literal["approve", "reject"]
    notes: str | None = Field(default=None, max_length=5000)


class SendToSignatureRequest(BaseModel):
    envelope_id: str | None = Field(default=None, min_length=1, max_length=120)


class CancelRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=5000)


class RepairRequest(BaseModel):
    contract_ids: list[int] | None = None


class HuntSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    species: str | None = None
    unit: str | None = None
    weapon: str | None = None
    hunt_code: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    hunt_window_start: date | None = None
    hunt_window_end: date | None = None
    tag_status: str
    hunt_type: str


class BillLineResponse(BaseModel):
    key: str
    text: str
    amount: float
    quantity: int | None = None
    unit_rate: float | None = None


class BillResponse(BaseModel):
    line_items: list[BillLineResponse]
    total: float
    bill_text: str


class ContractResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    outfitter_id: int
    hunt_id: int | None = None
    client_email: str
    client_name: str | None = None
    status: str
    content: str
    needs_complete_booking: bool
    selected_pricing_item_id: int | None = None
    client_selected_start_date: date | None = None
    client_selected_end_date: date | None = None
    calculated_guide_fee_cents: int | None = None
    calculated_addons_cents: int | None = None
    contract_total_cents: int | None = None
    client_completion_data: dict[str, Any] | None = None
    client_completed_at: datetime | None = None
    admin_reviewed_at: datetime | None = None
    admin_reviewed_by: str | None = None
    admin_review_notes: str | None = None
    docusign_status: str
    docusign_envelope_id: str | None = None
    client_signed_at: datetime | None = None
    admin_signed_at: datetime | None = None
    hunt: HuntSummary | None = None
    addon_rates: dict[str, float] = Field(default_factory=dict)
    bill: BillResponse | None = None

    @classmethod
    def from_view(cls, view: ContractView) -> "ContractResponse":
        contract = view.contract
        data = {name: getattr(contract, name) for name in cls.model_fields if hasattr(contract, name)}
        for name in ("client_completed_at", "admin_reviewed_at", "client_signed_at", "admin_signed_at"):
            data[name] = as_utc(data.get(name))
        data.update(
            needs_complete_booking=view.needs_complete_booking,
            hunt=HuntSummary.model_validate(view.hunt) if view.hunt is not None else None,
            addon_rates=view.addon_rates.as_dict(),
            bill=BillResponse(**view.bill.to_dict()) if view.bill is not None else None,
        )
        return cls(**data)


class ContractListResponse(BaseModel):
    contracts: list[ContractResponse]
