"""Hunt-code season window lookup (CSV file and HTTP sources).

Every failure mode (missing file, malformed rows, network error, timeout,
unknown code) resolves to ``None``: the window is unknown and callers skip
window validation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Protocol

import pandas as pd
import requests

from outfitter.core.config import Config, get_config
from outfitter.models import Hunt
from outfitter.utils.validators import parse_date

logger = logging.getLogger(__name__)

_CODE_COLUMNS = ("hunt_code", "huntcode", "code")
_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "species": ("species",),
    "unit_description": ("unit_description", "unitdescription", "unit"),
    "season_text": ("season_text", "seasontext", "season"),
    "start_date": ("start_date", "startdate"),
    "end_date": ("end_date", "enddate"),
}


@dataclass(frozen=True)
class SeasonWindow:
    start: date
    end: date

    def contains(self, start: date, end: date) -> bool:
        return self.start <= start and end <= self.end

    def label(self) -> str:
        return f"{self.start.isoformat()} – {self.end.isoformat()}"


@dataclass(frozen=True)
class HuntCodeRecord:
    code: str
    species: str = ""
    unit_description: str = ""
    season_text: str = ""
    start_date: date | None = None
    end_date: date | None = None

    @property
    def window(self) -> SeasonWindow | None:
        if self.start_date is None or self.end_date is None:
            return None
        return SeasonWindow(start=self.start_date, end=self.end_date)


class SeasonWindowLookup(Protocol):
    def lookup(self, hunt_code: str) -> SeasonWindow | None:
        ...


class CsvSeasonWindowLookup:
    """Hunt codes loaded once from a CSV export; codes match case-insensitively."""

    def __init__(self, csv_path: str | Path) -> None:
        self.csv_path = Path(csv_path)
        self._records: dict[str, HuntCodeRecord] | None = None

    def _load(self) -> dict[str, HuntCodeRecord]:
        if not self.csv_path.exists():
            logger.warning(
                "season_window.csv_missing",
                extra={"event": "season_window.csv_missing", "path": str(self.csv_path)},
            )
            return {}
        try:
            frame = pd.read_csv(self.csv_path, dtype=str, keep_default_na=False)
        except (OSError, UnicodeDecodeError, pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
            logger.warning(
                "season_window.csv_unreadable",
                extra={"event": "season_window.csv_unreadable", "path": str(self.csv_path), "error": str(exc)},
            )
            return {}

        frame.columns = [str(col).strip().lower() for col in frame.columns]
        code_column = next((col for col in _CODE_COLUMNS if col in frame.columns), None)
        if code_column is None:
            return {}

        columns = {
            field: next((alias for alias in aliases if alias in frame.columns), None)
            for field, aliases in _COLUMN_ALIASES.items()
        }
        records: dict[str, HuntCodeRecord] = {}
        for row in frame.to_dict(orient="records"):
            code = str(row.get(code_column, "")).strip()
            if not code:
                continue

            def _text(field: str) -> str:
                column = columns[field]
                return str(row.get(column, "")).strip() if column else ""

            records.setdefault(
                code.upper(),
                HuntCodeRecord(
                    code=code,
                    species=_text("species"),
                    unit_description=_text("unit_description"),
                    season_text=_text("season_text"),
                    start_date=parse_date(_text("start_date")),
                    end_date=parse_date(_text("end_date")),
                ),
            )
        return records

    def find(self, hunt_code: str) -> HuntCodeRecord | None:
        if not hunt_code or not hunt_code.strip():
            return None
        if self._records is None:
            self._records = self._load()
        return self._records.get(hunt_code.strip().upper())

    def lookup(self, hunt_code: str) -> SeasonWindow | None:
        record = self.find(hunt_code)
        return record.window if record else None


class HttpSeasonWindowLookup:
    """Season lookup against a JSON endpoint: ``GET <url>?code=<hunt_code>``.

    The response body is either the record itself or ``{"hunt_code": {...}}``
    carrying ``start_date`` and ``end_date``.
    """

    def __init__(self, url: str, timeout_seconds: float, session: requests.Session | None = None) -> None:
        self.url = url
        self.timeout = (min(2.0, timeout_seconds), timeout_seconds)
        self.session = session or requests.Session()

    def lookup(self, hunt_code: str) -> SeasonWindow | None:
        if not hunt_code or not hunt_code.strip():
            return None
        try:
            response = self.session.get(self.url, params={"code": hunt_code.strip()}, timeout=self.timeout)
            if response.status_code == 404:
                return None
            response.raise_for_status()
            body = response.json()
        except (requests.exceptions.RequestException, ValueError) as exc:
            logger.warning(
                "season_window.lookup_failed",
                extra={"event": "season_window.lookup_failed", "hunt_code": hunt_code, "error": str(exc)},
            )
            return None

        if isinstance(body, dict) and isinstance(body.get("hunt_code"), dict):
            body = body["hunt_code"]
        if not isinstance(body, dict):
            return None
        start, end = parse_date(body.get("start_date")), parse_date(body.get("end_date"))
        if start is None or end is None:
            return None
        return SeasonWindow(start=start, end=end)


class ChainedSeasonWindowLookup:
    """First source that knows the code wins."""

    def __init__(self, lookups: list[SeasonWindowLookup]) -> None:
        self.lookups = lookups

    def lookup(self, hunt_code: str) -> SeasonWindow | None:
        for source in self.lookups:
            window = source.lookup(hunt_code)
            if window is not None:
                return window
        return None


def build_season_lookup(config: Config | None = None) -> ChainedSeasonWindowLookup:
    cfg = config or get_config()
    lookups: list[SeasonWindowLookup] = []
    if cfg.HUNT_CODES_CSV_PATH:
        lookups.append(CsvSeasonWindowLookup(cfg.HUNT_CODES_CSV_PATH))
    if cfg.SEASON_LOOKUP_URL:
        lookups.append(HttpSeasonWindowLookup(cfg.SEASON_LOOKUP_URL, cfg.SEASON_LOOKUP_TIMEOUT_SECONDS))
    return ChainedSeasonWindowLookup(lookups)


@lru_cache(maxsize=1)
def get_season_lookup() -> ChainedSeasonWindowLookup:
    """Process-wide lookup so the hunt-code CSV is parsed once."""
    return build_season_lookup()


def stored_window(hunt: Hunt) -> SeasonWindow | None:
    if hunt.hunt_window_start is None or hunt.hunt_window_end is None:
        return None
    return SeasonWindow(start=hunt.hunt_window_start, end=hunt.hunt_window_end)


def resolve_hunt_window(hunt: Hunt, lookup: SeasonWindowLookup | None) -> SeasonWindow | None:
    """Stored window fields first, then the hunt-code lookup."""
    window = stored_window(hunt)
    if window is not None:
        return window
    if lookup is None or not hunt.hunt_code:
        return None
    return lookup.lookup(hunt.hunt_code)
