"""Tests for batched lookups and the ORCID public search client."""

import sys
from pathlib import Path

import pytest
import requests

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from curation import http
from curation.http import LookupFailed, fetch_json, process_in_batches
from curation.orcid import build_query, is_valid_orcid, search_orcid, unique_match


class FakeResponse:
    def __init__(self, status_code=200, payload=None, bad_json=False):
        self.status_code = status_code
        self._payload = payload
        self._bad_json = bad_json

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value")
        return self._payload


# ---------------------------------------------------------------------------
# process_in_batches
# ---------------------------------------------------------------------------

class TestProcessInBatches:
    def test_failure_does_not_stop_batch(self):
        def fn(item):
            if item == 2:
                raise LookupFailed("HTTP 500")
            return item * 10

        results, failed = process_in_batches([1, 2, 3], fn, batch_size=10, sleep=lambda s: None)
        assert results == {1: 10, 2: None, 3: 30}
        assert failed == [2]

    def test_pause_between_batches_only(self):
        pauses = []
        process_in_batches(list(range(25)), lambda i: i, batch_size=10, delay=5.0,
                           sleep=pauses.append)
        assert pauses == [5.0, 5.0]

    def test_progress_callback(self):
        calls = []
        process_in_batches(list(range(5)), lambda i: i, batch_size=2, delay=0,
                           on_batch_done=lambda b, n: calls.append((b, n)))
        assert calls == [(0, 3), (1, 3), (2, 3)]

    def test_custom_default(self):
        def boom(item):
            raise RuntimeError("nope")

        results, failed = process_in_batches(["a"], boom, default="?", sleep=lambda s: None)
        assert results == {"a": "?"}
        assert failed == ["a"]

    def test_empty(self):
        assert process_in_batches([], lambda i: i) == ({}, [])


# ---------------------------------------------------------------------------
# fetch_json
# ---------------------------------------------------------------------------

class TestFetchJson:
    def test_ok(self, monkeypatch):
        seen = {}

        def fake_get(url, params=None, headers=None, timeout=None):
            seen.update(url=url, params=params, headers=headers)
            return FakeResponse(payload={"ok": True})

        monkeypatch.setattr(http.requests, "get", fake_get)
        assert fetch_json("https://api.example.org/x", params={"q": "1"}) == {"ok": True}
        assert seen["headers"]["User-Agent"] == http.USER_AGENT
        assert seen["params"] == {"q": "1"}

    def test_error_status(self, monkeypatch):
        monkeypatch.setattr(http.requests, "get", lambda *a, **k: FakeResponse(status_code=503))
        with pytest.raises(LookupFailed, match="HTTP 503"):
            fetch_json("https://api.example.org/x")

    def test_connection_error(self, monkeypatch):
        def fake_get(*args, **kwargs):
            raise requests.exceptions.ConnectionError("refused")

        monkeypatch.setattr(http.requests, "get", fake_get)
        with pytest.raises(LookupFailed):
            fetch_json("https://api.example.org/x")

    def test_bad_json(self, monkeypatch):
        monkeypatch.setattr(http.requests, "get", lambda *a, **k: FakeResponse(bad_json=True))
        with pytest.raises(LookupFailed, match="Invalid JSON"):
            fetch_json("https://api.example.org/x")


# ---------------------------------------------------------------------------
# ORCID
# ---------------------------------------------------------------------------

class TestOrcidChecksum:
    def test_valid(self):
        assert is_valid_orcid("0000-0002-1825-0097")
        assert is_valid_orcid("0000-0002-1694-233X")

    def test_bad_checksum(self):
        assert not is_valid_orcid("0000-0002-1825-0098")

    def test_bad_format(self):
        assert not is_valid_orcid("https://orcid.org/0000-0002-1825-0097")
        assert not is_valid_orcid("0000000218250097")
        assert not is_valid_orcid("")


class TestOrcidSearch:
    def test_query(self):
        assert build_query("Erin", "Molloy") == "given-names:Erin AND family-name:Molloy"
        assert build_query("Mary Ann", "Van Dyke", "University of Maryland") == (
            'given-names:"Mary Ann" AND family-name:"Van Dyke"'
            ' AND affiliation-org-name:"University of Maryland"'
        )

    def test_candidates(self, monkeypatch):
        payload = {
            "num-found": 1,
            "expanded-result": [{
                "orcid-id": "0000-0002-1825-0097",
                "given-names": "Erin",
                "family-names": "Molloy",
                "institution-name": ["University of Maryland"],
            }],
        }
        monkeypatch.setattr(http.requests, "get", lambda *a, **k: FakeResponse(payload=payload))
        candidates = search_orcid("Erin", "Molloy")
        assert candidates == [{
            "orcid": "0000-0002-1825-0097",
            "givenNames": "Erin",
            "familyNames": "Molloy",
            "institutions": ["University of Maryland"],
        }]
        assert unique_match(candidates) == "0000-0002-1825-0097"

    def test_no_results(self, monkeypatch):
        payload = {"num-found": 0, "expanded-result": None}
        monkeypatch.setattr(http.requests, "get", lambda *a, **k: FakeResponse(payload=payload))
        assert search_orcid("Nobody", "Here") == []

    def test_ambiguous_match(self):
        candidates = [{"orcid": "0000-0002-1825-0097"}, {"orcid": "0000-0002-1694-233X"}]
        assert unique_match(candidates) is None

    def test_invalid_candidates_ignored(self):
        candidates = [{"orcid": "0000-0002-1825-0097"}, {"orcid": "bogus"}]
        assert unique_match(candidates) == "0000-0002-1825-0097"
