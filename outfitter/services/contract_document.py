"""Contract body model: prose preamble plus a rendered BILL block.

Contracts created by this service store their preamble separately, so the
final text is always ``preamble + bill``. Content written before that column
existed is split once with a tolerant locator for the BILL heading.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from outfitter.models import Hunt

NOT_SPECIFIED = "Not specified"
DATE_TBD = "TBD"

# Ordered by specificity; the first pattern that matches wins.
_BILL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?:\r?\n)?-{3,}[ \t]*\r?\n(?:[ \t]*\r?\n)*[ \t]*BILL\b", re.IGNORECASE),
    re.compile(r"(?:\r?\n)?-{3,}[ \t]*BILL\b", re.IGNORECASE),
    re.compile(r"(?:^|\r?\n)[ \t]*BILL[ \t]*(?=\r?\n|$)", re.IGNORECASE),
)

_PLACEHOLDER = re.compile(r"\{\{\s*([a-z_]+)\s*\}\}")


def locate_bill(content: str | None) -> int | None:
    """Index where the BILL section (including its separator) starts, or None."""
    if not content:
        return None
    for pattern in _BILL_PATTERNS:
        match = pattern.search(content)
        if match:
            return match.start()
    return None


@dataclass(frozen=True)
class ContractDocument:
    preamble: str
    bill_text: str | None = None

    @classmethod
    def parse(cls, content: str | None) -> "ContractDocument":
        text = content or ""
        index = locate_bill(text)
        if index is None:
            return cls(preamble=text.rstrip())
        return cls(preamble=text[:index].rstrip(), bill_text=text[index:].strip())

    def with_bill(self, bill_text: str) -> "ContractDocument":
        return ContractDocument(preamble=self.preamble, bill_text=bill_text)

    def render(self) -> str:
        preamble = self.preamble.rstrip()
        if not self.bill_text:
            return preamble
        if not preamble:
            return self.bill_text
        return f"{preamble}\n\n{self.bill_text}"


def document_for(content: str | None, stored_preamble: str | None) -> ContractDocument:
    """Prefer the stored preamble; fall back to splitting legacy content."""
    if stored_preamble is not None:
        existing = ContractDocument.parse(content)
        return ContractDocument(preamble=stored_preamble.rstrip(), bill_text=existing.bill_text)
    return ContractDocument.parse(content)


def _iso_date(value: date | datetime | None) -> str:
    if value is None:
        return DATE_TBD
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    return value.isoformat()


def _or_default(value: Any) -> str:
    text = str(value).strip() if value is not None else ""
    return text or NOT_SPECIFIED


def build_template_context(hunt: Hunt, client_name: str | None = None, outfitter_name: str | None = None) -> dict[str, str]:
    client_email = (hunt.client_email or "").strip()
    return {
        "client_name": (client_name or "").strip() or client_email,
        "client_email": client_email,
        "hunt_title": (hunt.title or "").strip() or f"{hunt.species or 'Hunt'} Hunt",
        "hunt_code": _or_default(hunt.hunt_code),
        "species": _or_default(hunt.species),
        "unit": _or_default(hunt.unit),
        "weapon": _or_default(hunt.weapon),
        "camp_name": _or_default(hunt.camp_name),
        "start_date": _iso_date(hunt.start_time),
        "end_date": _iso_date(hunt.end_time),
        "outfitter_name": (outfitter_name or "").strip() or "Outfitter",
        "outfitter_phone": "",
        "outfitter_email": "",
    }


def render_template(template: str, context: dict[str, str]) -> str:
    """Replace ``{{name}}`` tokens; unknown tokens are left untouched."""
    return _PLACEHOLDER.sub(lambda m: context.get(m.group(1), m.group(0)), template)


def default_contract_text(context: dict[str, str], generated_on: date | None = None) -> str:
    generated_on = generated_on or datetime.now(timezone.utc).date()
    return "\n".join(
        [
            "HUNT CONTRACT",
            "",
            f"Client: {context['client_name']}",
            f"Email: {context['client_email']}",
            "",
            "Hunt Details:",
            f"- Hunt: {context['hunt_title']}",
            f"- Hunt Code: {context['hunt_code']}",
            f"- Species: {context['species']}",
            f"- Unit: {context['unit']}",
            f"- Weapon: {context['weapon']}",
            f"- Start Date: {context['start_date']}",
            f"- End Date: {context['end_date']}",
            "",
            "This contract confirms your hunt booking.",
            "",
            f"Generated: {generated_on.isoformat()}",
        ]
    )
