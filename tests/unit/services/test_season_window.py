from __future__ import annotations

from datetime import date

import requests

from outfitter.models import Hunt
from outfitter.services.season_window_service import (
    ChainedSeasonWindowLookup,
    CsvSeasonWindowLookup,
    HttpSeasonWindowLookup,
    SeasonWindow,
    resolve_hunt_window,
)


class _FakeResponse:
    def __init__(self, status_code=200, body=None, error=None):
        self.status_code = status_code
        self._body = body
        self._error = error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._error is not None:
            raise self._error
        return self._body


class _FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append({"url": url, "params": params, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response


def test_csv_lookup_matches_codes_case_insensitively(tmp_path):
    csv_path = tmp_path / "hunt_codes.csv"
    csv_path.write_text(
        "HuntCode,Species,Unit,StartDate,EndDate\n"
        "EE-1-061-O1-R,Elk,Unit 61,2025-10-01,2025-10-14\n"
        "DE-2-012-O1-A,Deer,Unit 12,,\n"
    )
    lookup = CsvSeasonWindowLookup(csv_path)

    assert lookup.lookup("ee-1-061-o1-r ") == SeasonWindow(date(2025, 10, 1), date(2025, 10, 14))
    assert lookup.find("EE-1-061-O1-R").unit_description == "Unit 61"
    assert lookup.lookup("DE-2-012-O1-A") is None
    assert lookup.lookup("XX-9-999") is None


def test_csv_lookup_missing_file_is_unknown(tmp_path):
    assert CsvSeasonWindowLookup(tmp_path / "absent.csv").lookup("EE-1-061-O1-R") is None


def test_http_lookup_reads_nested_record_with_split_timeout():
    session = _FakeSession(
        _FakeResponse(body={"hunt_code": {"code": "EE-1-061-O1-R", "start_date": "2025-10-01", "end_date": "2025-10-14"}})
    )
    lookup = HttpSeasonWindowLookup("https://seasons.example.com/lookup", timeout_seconds=5, session=session)

    assert lookup.lookup("EE-1-061-O1-R") == SeasonWindow(date(2025, 10, 1), date(2025, 10, 14))
    assert session.requests[0]["params"] == {"code": "EE-1-061-O1-R"}
    assert session.requests[0]["timeout"] == (2.0, 5)


def test_http_lookup_failures_resolve_to_unknown():
    url = "https://seasons.example.com/lookup"
    failures = [
        _FakeSession(exc=requests.exceptions.Timeout("slow")),
        _FakeSession(_FakeResponse(status_code=404)),
        _FakeSession(_FakeResponse(status_code=503)),
        _FakeSession(_FakeResponse(error=ValueError("not json"))),
        _FakeSession(_FakeResponse(body={"start_date": "2025-10-01"})),
    ]
    for session in failures:
        assert HttpSeasonWindowLookup(url, timeout_seconds=1, session=session).lookup("EE-1-061-O1-R") is None


def test_chained_lookup_returns_first_known_window(season_lookup):
    window = SeasonWindow(date(2025, 11, 1), date(2025, 11, 9))
    empty = type(season_lookup)()
    season_lookup.windows["EE-1-061-O1-R"] = window

    chained = ChainedSeasonWindowLookup([empty, season_lookup])

    assert chained.lookup("EE-1-061-O1-R") == window
    assert empty.calls == ["EE-1-061-O1-R"]
    assert ChainedSeasonWindowLookup([]).lookup("EE-1-061-O1-R") is None


def test_resolve_hunt_window_prefers_stored_fields(season_lookup):
    season_lookup.windows["EE-1-061-O1-R"] = SeasonWindow(date(2025, 11, 1), date(2025, 11, 9))
    stored = Hunt(
        hunt_code="EE-1-061-O1-R",
        hunt_window_start=date(2025, 9, 1),
        hunt_window_end=date(2025, 9, 20),
    )
    looked_up = Hunt(hunt_code="EE-1-061-O1-R")

    assert resolve_hunt_window(stored, season_lookup) == SeasonWindow(date(2025, 9, 1), date(2025, 9, 20))
    assert resolve_hunt_window(looked_up, season_lookup) == SeasonWindow(date(2025, 11, 1), date(2025, 11, 9))
    assert resolve_hunt_window(Hunt(hunt_code=None), season_lookup) is None
    assert season_lookup.calls == ["EE-1-061-O1-R"]
