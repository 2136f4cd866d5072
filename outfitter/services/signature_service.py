"""Intake of e-signature envelope events (JSON or XML connect payloads)."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from outfitter.core.exceptions import ConflictError, ValidationError
from outfitter.models import ContractStatus, DocuSignStatus, HuntContract
from outfitter.services.base_service import BaseService
from outfitter.services.contract_service import ContractService
from outfitter.utils.validators import as_utc, emails_match

logger = logging.getLogger(__name__)

_CANCELLING_STATUSES = {DocuSignStatus.DECLINED.value, DocuSignStatus.VOIDED.value}


@dataclass(frozen=True)
class SignerStatus:
    email: str
    status: str
    signed_at: datetime | None = None


@dataclass(frozen=True)
class EnvelopeEvent:
    envelope_id: str
    status: str
    signers: list[SignerStatus] = field(default_factory=list)


@dataclass(frozen=True)
class SignatureEventResult:
    processed: bool
    reason: str | None = None
    contract_id: int | None = None
    contract_status: str | None = None
    docusign_status: str | None = None


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return as_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))
    except ValueError:
        return None


def parse_json_event(body: Mapping[str, Any]) -> EnvelopeEvent:
    data = body.get("data") or {}
    summary = data.get("envelopeSummary") or {}
    envelope_id = body.get("envelopeId") or data.get("envelopeId")
    status = body.get("status") or summary.get("status")
    if not envelope_id:
        raise ValidationError("No envelope ID in signature event.")
    signers = [
        SignerStatus(
            email=str(signer.get("email") or ""),
            status=str(signer.get("status") or ""),
            signed_at=_parse_timestamp(signer.get("signedDateTime")),
        )
        for signer in (summary.get("recipients") or {}).get("signers") or []
    ]
    return EnvelopeEvent(envelope_id=str(envelope_id), status=str(status or "").lower(), signers=signers)


def parse_xml_event(payload: str | bytes) -> EnvelopeEvent:
    try:
        root = ET.fromstring(payload)
    except ET.ParseError as exc:
        raise ValidationError("Malformed signature event XML.") from exc

    envelope_id = status = None
    for element in root.iter():
        tag = element.tag.rsplit("}", 1)[-1]
        if tag == "EnvelopeID" and envelope_id is None:
            envelope_id = (element.text or "").strip()
        elif tag == "Status" and status is None:
            status = (element.text or "").strip()
    if not envelope_id:
        raise ValidationError("No envelope ID in signature event.")
    return EnvelopeEvent(envelope_id=envelope_id, status=(status or "").lower())


class SignatureService(BaseService):
    """Apply envelope status changes to the matching contract."""

    def __init__(self, db: Session | None = None, contracts: ContractService | None = None) -> None:
        super().__init__(db=db)
        self.contracts = contracts or ContractService(db=self.db)

    def _find_contract(self, envelope_id: str) -> HuntContract | None:
        return self.db.query(HuntContract).filter(HuntContract.docusign_envelope_id == envelope_id).first()

    def record_envelope_event(self, event: EnvelopeEvent) -> SignatureEventResult:
        """Unknown envelopes and statuses are reported as unprocessed, never raised."""
        contract = self._find_contract(event.envelope_id)
        if contract is None:
            logger.info(
                "signature.event.unknown_envelope",
                extra={"event": "signature.event.unknown_envelope", "envelope_id": event.envelope_id},
            )
            return SignatureEventResult(processed=False, reason="Contract not found")

        try:
            docusign_status = DocuSignStatus(event.status).value
        except ValueError:
            return SignatureEventResult(
                processed=False,
                reason=f"Unknown status: {event.status}",
                contract_id=contract.id,
            )

        now = self._utcnow()
        client_signer = next((s for s in event.signers if emails_match(s.email, contract.client_email)), None)
        client_signed_at = (client_signer.signed_at if client_signer else None) or now

        try:
            contract.docusign_status = docusign_status
            if docusign_status == DocuSignStatus.SIGNED.value:
                self.contracts.apply_signatures(contract, client_signed_at=client_signed_at)
            elif docusign_status == DocuSignStatus.COMPLETED.value:
                self.contracts.apply_signatures(contract, client_signed_at=client_signed_at, admin_signed_at=now)
            elif docusign_status in _CANCELLING_STATUSES and contract.status != ContractStatus.CANCELLED.value:
                self.contracts.transition(contract, ContractStatus.CANCELLED.value)
            self.commit()
        except ConflictError as exc:
            self.rollback()
            logger.warning(
                "signature.event.rejected",
                extra={
                    "event": "signature.event.rejected",
                    "contract_id": contract.id,
                    "envelope_status": docusign_status,
                    "error": exc.message,
                },
            )
            return SignatureEventResult(processed=False, reason=exc.message, contract_id=contract.id)

        self.db.refresh(contract)
        logger.info(
            "signature.event.applied",
            extra={
                "event": "signature.event.applied",
                "contract_id": contract.id,
                "envelope_status": docusign_status,
                "status": contract.status,
            },
        )
        return SignatureEventResult(
            processed=True,
            contract_id=contract.id,
            contract_status=contract.status,
            docusign_status=contract.docusign_status,
        )
