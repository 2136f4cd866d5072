"""Hunt tag status endpoints feeding contract auto-creation."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.orm import Session

from outfitter.api.v1._authz import authorize, authorize_outfitter
from outfitter.core.dependencies import get_db_session
from outfitter.schemas.bookings import (
    TagPurchaseRequest,
    TagPurchaseResponse,
    TagStatusResponse,
    TagStatusUpdateRequest,
    WorkflowStateResponse,
)
from outfitter.schemas.contracts import HuntSummary
from outfitter.services.hunt_service import HuntService, workflow_state

router = APIRouter(tags=["hunts"])


@router.get("/hunts/{hunt_id}/tag-status", response_model=TagStatusResponse)
def get_tag_status(
    hunt_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> TagStatusResponse:
    user = authorize_outfitter(authorization=authorization, scopes=["hunts.read"])
    hunt, contract, state = HuntService(db=db).get_workflow(hunt_id, outfitter_id=user.outfitter_id)
    return TagStatusResponse(
        hunt=HuntSummary.model_validate(hunt),
        contract_id=contract.id if contract else None,
        contract_status=contract.status if contract else None,
        workflow=WorkflowStateResponse(**state.to_dict()),
    )


@router.patch("/hunts/{hunt_id}/tag-status", response_model=TagStatusResponse)
def update_tag_status(
    hunt_id: int,
    payload: TagStatusUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> TagStatusResponse:
    user = authorize_outfitter(authorization=authorization, scopes=["hunts.tag_status"])
    hunt, contract, created = HuntService(db=db).update_tag_status(
        hunt_id,
        payload.tag_status,
        outfitter_id=user.outfitter_id,
    )
    return TagStatusResponse(
        hunt=HuntSummary.model_validate(hunt),
        contract_id=contract.id if contract else None,
        contract_status=contract.status if contract else None,
        contract_created=created,
        workflow=WorkflowStateResponse(**workflow_state(hunt, contract).to_dict()),
    )


@router.post("/client/purchase-tag", response_model=TagPurchaseResponse, status_code=status.HTTP_201_CREATED)
def purchase_tag(
    payload: TagPurchaseRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> TagPurchaseResponse:
    user = authorize(authorization=authorization, scopes=["client.tags.purchase"])
    hunt, contract = HuntService(db=db).record_tag_purchase(
        outfitter_id=payload.outfitter_id,
        client_email=user.email,
        species=payload.species,
        unit=payload.unit,
        hunt_code=payload.hunt_code,
        private_land_tag_id=payload.private_land_tag_id,
        client_start_date=payload.client_start_date,
        client_end_date=payload.client_end_date,
        client_name=payload.client_name,
    )
    return TagPurchaseResponse(
        hunt=HuntSummary.model_validate(hunt),
        contract_id=contract.id,
        contract_status=contract.status,
    )
