"""E-signature provider webhook."""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from outfitter.core.dependencies import get_db_session
from outfitter.core.exceptions import ValidationError
from outfitter.services.signature_service import SignatureService, parse_json_event, parse_xml_event

router = APIRouter(tags=["signature"])


@router.post("/signature/webhook")
async def signature_webhook(request: Request, db: Session = Depends(get_db_session)) -> dict:
    """Accepts JSON or XML envelope notifications; always acknowledges receipt."""
    body = await request.body()
    content_type = request.headers.get("content-type", "").lower()
    if "xml" in content_type:
        event = parse_xml_event(body)
    else:
        try:
            payload = json.loads(body or b"{}")
        except ValueError as exc:
            raise ValidationError("Malformed signature event JSON.") from exc
        if not isinstance(payload, dict):
            raise ValidationError("Signature event must be a JSON object.")
        event = parse_json_event(payload)

    result = SignatureService(db=db).record_envelope_event(event)
    return {
        "received": True,
        "processed": result.processed,
        "reason": result.reason,
        "contract_id": result.contract_id,
        "contract_status": result.contract_status,
    }
