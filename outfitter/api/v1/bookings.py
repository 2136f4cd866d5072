"""Client complete-booking endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from outfitter.api.v1._authz import authorize
from outfitter.core.dependencies import get_db_session
from outfitter.schemas.bookings import (
    BookingOptionsResponse,
    CompleteBookingRequest,
    CompleteBookingResponse,
    PricingItemResponse,
)
from outfitter.schemas.contracts import ContractResponse, HuntSummary
from outfitter.services.booking_service import BookingService
from outfitter.services.contract_service import ContractService

router = APIRouter(prefix="/client", tags=["bookings"])


@router.get("/complete-booking", response_model=BookingOptionsResponse)
def booking_options(
    hunt_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> BookingOptionsResponse:
    user = authorize(authorization=authorization, scopes=["client.booking"])
    options = BookingService(db=db).booking_options(user.email, hunt_id)
    return BookingOptionsResponse(
        hunt=HuntSummary.model_validate(options.hunt),
        window_start=options.window.start if options.window else None,
        window_end=options.window.end if options.window else None,
        plans=[PricingItemResponse.model_validate(item) for item in options.plans],
        addon_items=[PricingItemResponse.model_validate(item) for item in options.addon_items],
        addon_rates=options.addon_rates.as_dict(),
        contract_id=options.contract.id if options.contract else None,
    )


@router.post("/complete-booking", response_model=CompleteBookingResponse)
def complete_booking(
    payload: CompleteBookingRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> CompleteBookingResponse:
    user = authorize(authorization=authorization, scopes=["client.booking"])
    result = BookingService(db=db).complete_booking(
        client_email=user.email,
        hunt_id=payload.hunt_id,
        pricing_item_id=payload.pricing_item_id,
        client_start_date=payload.client_start_date,
        client_end_date=payload.client_end_date,
        addon_quantities=payload.addon_payload(),
    )
    view = ContractService(db=db).build_view(result.contract)
    action = "created" if result.contract_created else "updated"
    return CompleteBookingResponse(
        message=f"Booking completed. Your contract has been {action}.",
        contract_created=result.contract_created,
        hunt=HuntSummary.model_validate(result.hunt),
        contract=ContractResponse.from_view(view),
    )
