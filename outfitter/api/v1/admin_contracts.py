"""Outfitter staff endpoints for reviewing, signing and repairing contracts."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.orm import Session

from outfitter.api.v1._authz import authorize_outfitter
from outfitter.core.dependencies import get_db_session
from outfitter.models import UserRole
from outfitter.schemas.common import RepairReportResponse
from outfitter.schemas.contracts import (
    CancelRequest,
    ContractListResponse,
    ContractResponse,
    RepairRequest,
    ReviewRequest,
    SendToSignatureRequest,
)
from outfitter.services.contract_service import ContractService

router = APIRouter(prefix="/hunt-contracts", tags=["hunt-contracts"])


@router.get("", response_model=ContractListResponse)
def list_contracts(
    status_filter: str | None = Query(default=None, alias="status"),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ContractListResponse:
    user = authorize_outfitter(authorization=authorization, scopes=["contracts.read"])
    service = ContractService(db=db)
    contracts = service.list_contracts(user.outfitter_id, status=status_filter)
    return ContractListResponse(contracts=[ContractResponse.from_view(service.build_view(c)) for c in contracts])


@router.get("/{contract_id}", response_model=ContractResponse)
def get_contract(
    contract_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ContractResponse:
    user = authorize_outfitter(authorization=authorization, scopes=["contracts.read"])
    service = ContractService(db=db)
    contract = service.require_contract(contract_id, user.outfitter_id)
    return ContractResponse.from_view(service.build_view(contract))


@router.post("/{contract_id}/release", response_model=ContractResponse)
def release_to_client(
    contract_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ContractResponse:
    user = authorize_outfitter(authorization=authorization, scopes=["contracts.review"])
    service = ContractService(db=db)
    contract = service.release_to_client(contract_id, outfitter_id=user.outfitter_id)
    return ContractResponse.from_view(service.build_view(contract))


@router.post("/{contract_id}/review", response_model=ContractResponse)
def review_contract(
    contract_id: int,
    payload: ReviewRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ContractResponse:
    user = authorize_outfitter(authorization=authorization, scopes=["contracts.review"])
    service = ContractService(db=db)
    decide = service.approve if payload.action == "approve" else service.reject
    contract = decide(contract_id, reviewer=user.email, notes=payload.notes, outfitter_id=user.outfitter_id)
    return ContractResponse.from_view(service.build_view(contract))


@router.post("/{contract_id}/send-to-signature", response_model=ContractResponse)
def send_to_signature(
    contract_id: int,
    payload: SendToSignatureRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ContractResponse:
    user = authorize_outfitter(authorization=authorization, scopes=["contracts.send"])
    service = ContractService(db=db)
    contract = service.send_to_signature(contract_id, envelope_id=payload.envelope_id, outfitter_id=user.outfitter_id)
    return ContractResponse.from_view(service.build_view(contract))


@router.post("/{contract_id}/admin-sign", response_model=ContractResponse)
def admin_sign(
    contract_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ContractResponse:
    user = authorize_outfitter(authorization=authorization, scopes=["contracts.sign"])
    service = ContractService(db=db)
    contract = service.sign(
        contract_id,
        signer_role=UserRole.ADMIN.value,
        signer_email=user.email,
        outfitter_id=user.outfitter_id,
    )
    return ContractResponse.from_view(service.build_view(contract))


@router.post("/{contract_id}/cancel", response_model=ContractResponse)
def cancel_contract(
    contract_id: int,
    payload: CancelRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ContractResponse:
    user = authorize_outfitter(authorization=authorization, scopes=["contracts.cancel"])
    service = ContractService(db=db)
    contract = service.cancel(contract_id, reason=payload.reason, outfitter_id=user.outfitter_id)
    return ContractResponse.from_view(service.build_view(contract))


@router.post("/repair", response_model=RepairReportResponse, status_code=status.HTTP_200_OK)
def repair_contracts(
    payload: RepairRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> RepairReportResponse:
    user = authorize_outfitter(authorization=authorization, scopes=["contracts.repair"])
    report = ContractService(db=db).repair_bills(payload.contract_ids, outfitter_id=user.outfitter_id)
    return RepairReportResponse(**report.to_dict())
