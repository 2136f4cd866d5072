"""Client-facing hunt contract endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from outfitter.api.v1._authz import authorize
from outfitter.core.dependencies import get_db_session
from outfitter.models import UserRole
from outfitter.schemas.contracts import CompletionPayloadRequest, ContractListResponse, ContractResponse
from outfitter.services.contract_service import ContractService

router = APIRouter(prefix="/client", tags=["client-contracts"])


@router.get("/hunt-contracts", response_model=ContractListResponse)
def list_my_contracts(
    repair: bool = False,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ContractListResponse:
    user = authorize(authorization=authorization, scopes=["client.contracts.read"])
    views = ContractService(db=db).get_contracts_for_client(user.email, repair=repair)
    return ContractListResponse(contracts=[ContractResponse.from_view(view) for view in views])


@router.get("/hunt-contracts/{contract_id}", response_model=ContractResponse)
def get_my_contract(
    contract_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ContractResponse:
    user = authorize(authorization=authorization, scopes=["client.contracts.read"])
    service = ContractService(db=db)
    contract = service.get_client_contract(contract_id, user.email)
    return ContractResponse.from_view(service.build_view(contract))


@router.post("/hunt-contracts/{contract_id}/complete", response_model=ContractResponse)
def submit_completion(
    contract_id: int,
    payload: CompletionPayloadRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ContractResponse:
    user = authorize(authorization=authorization, scopes=["client.contracts.submit"])
    service = ContractService(db=db)
    contract = service.submit_completion(contract_id, user.email, payload.to_payload())
    return ContractResponse.from_view(service.build_view(contract))


@router.post("/hunt-contracts/{contract_id}/sign", response_model=ContractResponse)
def sign_my_contract(
    contract_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ContractResponse:
    user = authorize(authorization=authorization, scopes=["client.contracts.sign"])
    service = ContractService(db=db)
    contract = service.sign(contract_id, signer_role=UserRole.CLIENT.value, signer_email=user.email)
    return ContractResponse.from_view(service.build_view(contract))
