# MAL watchlist parser tests
from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
import requests

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


def anime_details(mal_id: int, title: str, en: str = "", medium: str = "") -> dict:
    return {
        "id": mal_id,
        "title": title,
        "main_picture": {"medium": medium, "large": medium.replace("/r/", "/l/")},
        "alternative_titles": {"en": en, "ja": ""},
    }


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200, text: str | None = None) -> None:
        self.payload = payload
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self.payload is None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeSession:
    """Stands in for requests.Session. `script` maps MAL ID -> list of outcomes,
    consumed one per request; an outcome is a dict (200 body), an exception, or a
    FakeResponse. The last outcome repeats once the list is exhausted."""

    def __init__(self, script: dict | None = None) -> None:
        self.script = {key: list(value) for key, value in (script or {}).items()}
        self.headers: dict[str, str] = {}
        self.calls: list[str] = []
        self.timeouts: list[object] = []
        self.closed = False

    def get(self, url: str, timeout=None):
        self.calls.append(url)
        self.timeouts.append(timeout)
        mal_id = int(url.split("/anime/")[1].split("?")[0])
        outcomes = self.script.get(mal_id)
        if not outcomes:
            return FakeResponse({"error": "not_found"}, status_code=404)
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, FakeResponse):
            return outcome
        return FakeResponse(outcome)

    def close(self) -> None:
        self.closed = True

    def requested_ids(self) -> list[int]:
        return [int(url.split("/anime/")[1].split("?")[0]) for url in self.calls]


@pytest.fixture()
def credentials_file(tmp_path: Path) -> Path:
    path = tmp_path / "Credentials.json"
    path.write_text(json.dumps({"MALClientId": "test-client-id"}), encoding="utf-8")
    return path


@pytest.fixture()
def write_json(tmp_path: Path):
    def _write(name: str, data) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
