"""ORCID public API lookups.

Uses the expanded-search endpoint, which needs no authentication:

- Endpoint: GET https://pub.orcid.org/v3.0/expanded-search/
- Query:    q=given-names:Erin AND family-name:Molloy
- Response: {"num-found": 1, "expanded-result": [{"orcid-id": ...,
             "given-names": ..., "family-names": ...,
             "institution-name": [...]}]}

Usage::

    from curation.orcid import search_orcid, unique_match

    candidates = search_orcid("Erin", "Molloy", affiliation="University of Maryland")
    orcid = unique_match(candidates)
"""

import logging
import re
from typing import Optional

import requests

from .http import fetch_json

logger = logging.getLogger(__name__)

_ORCID_SEARCH = "https://pub.orcid.org/v3.0/expanded-search/"

ORCID_RE = re.compile(r"^\d{4}-\d{4}-\d{4}-\d{3}[\dX]$")

LOOKUP_SOURCE = "ORCID public search"


def is_valid_orcid(value: str) -> bool:
    """Format check plus the ISO 7064 11-2 checksum used by ORCID."""
    if not value or not ORCID_RE.match(value):
        return False
    digits = value.replace("-", "")
    total = 0
    for ch in digits[:-1]:
        total = (total + int(ch)) * 2
    check = (12 - total % 11) % 11
    expected = "X" if check == 10 else str(check)
    return digits[-1] == expected


def _quote(term: str) -> str:
    term = term.replace('"', "")
    return f'"{term}"' if " " in term else term


def build_query(first_name: str, last_name: str, affiliation: Optional[str] = None) -> str:
    query = f"given-names:{_quote(first_name)} AND family-name:{_quote(last_name)}"
    if affiliation:
        query += f" AND affiliation-org-name:{_quote(affiliation)}"
    return query


def search_orcid(
    first_name: str,
    last_name: str,
    affiliation: Optional[str] = None,
    *,
    rows: int = 10,
    session: Optional[requests.Session] = None,
) -> list[dict]:
    """Search ORCID for a person; returns candidate dicts.

    Each candidate has ``orcid``, ``givenNames``, ``familyNames`` and
    ``institutions``.  Raises :class:`curation.http.LookupFailed` when the
    request fails.
    """
    data = fetch_json(
        _ORCID_SEARCH,
        params={"q": build_query(first_name, last_name, affiliation), "rows": rows},
        session=session,
    )
    candidates = []
    for item in (data or {}).get("expanded-result") or []:
        candidates.append({
            "orcid": item.get("orcid-id", ""),
            "givenNames": item.get("given-names", ""),
            "familyNames": item.get("family-names", ""),
            "institutions": item.get("institution-name") or [],
        })
    logger.debug(f"ORCID search {first_name} {last_name}: {len(candidates)} candidate(s)")
    return candidates


def unique_match(candidates: list[dict]) -> Optional[str]:
    """The ORCID id when exactly one valid candidate was found, else None."""
    valid = [c["orcid"] for c in candidates if is_valid_orcid(c.get("orcid", ""))]
    return valid[0] if len(valid) == 1 else None
