#!/usr/bin/env python3
"""Data validation: crawl faculty data and flag anomalies.

Loads facultyData.json, facultyEnriched.json and the workshop catalog
and runs heuristic checks for unusual or suspicious records.  Prints a
report grouped by check, with per-record detail.

Usage:
    python -m scripts.validate_data              # full report
    python -m scripts.validate_data --summary    # counts only
"""

from __future__ import annotations

import argparse
import re
import sys
from collections import Counter, defaultdict
from difflib import SequenceMatcher
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from curation.attendance import MAX_YEAR, MIN_YEAR, derive_faculty_id
from curation.common import normalize_text
from curation.enrichment import CONFIDENCE_LEVELS, has_data
from curation.orcid import is_valid_orcid
from scripts.utils import ENRICHED_PATH, FACULTY_DATA_PATH, WORKSHOPS_PATH, config, read_json

# ── checks ───────────────────────────────────────────────────────────

_ID_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

REQUIRED_FACULTY_FIELDS = ["id", "firstName", "lastName"]
REQUIRED_PARTICIPATION_FIELDS = ["facultyId", "workshopId", "year", "role"]

# name similarity above which two faculty are flagged as a possible duplicate
DUPLICATE_NAME_RATIO = 0.9


class Finding:
    """A single data quality issue."""

    __slots__ = ("check", "source", "record", "detail")

    def __init__(self, check: str, source: str, record: str, detail: str):
        self.check = check
        self.source = source
        self.record = record
        self.detail = detail

    def __repr__(self) -> str:
        return f"  [{self.source}] {self.record}: {self.detail}"


def _name_key(person: dict) -> str:
    return normalize_text(f"{person.get('lastName', '')} {person.get('firstName', '')}").lower()


def validate(
    faculty_data: dict,
    enriched: dict,
    known_workshops: set[str],
) -> list[Finding]:
    """Run all checks and return a list of findings."""
    findings: list[Finding] = []

    def flag(check: str, src: str, key: str, detail: str) -> None:
        findings.append(Finding(check, src, key, detail))

    faculty = faculty_data.get("faculty", [])
    participations = faculty_data.get("participations", [])
    ids: Counter[str] = Counter()

    # ── faculty ──────────────────────────────────────────────────
    for i, person in enumerate(faculty):
        key = person.get("id") or f"faculty[{i}]"
        for field in REQUIRED_FACULTY_FIELDS:
            if not person.get(field):
                flag("missing_faculty_field", "faculty", key, f"missing '{field}'")
        fid = person.get("id")
        if not fid:
            continue
        ids[fid] += 1
        if not _ID_RE.match(fid):
            flag("faculty_id_bad_chars", "faculty", fid, f"id contains unexpected characters: {fid!r}")
        if person.get("firstName") and person.get("lastName"):
            derived = derive_faculty_id(person["lastName"], person["firstName"])
            if derived != fid:
                flag("faculty_id_differs_from_name", "faculty", fid,
                     f"name derives {derived!r} (corrected name or merged identity?)")

    for fid, count in ids.items():
        if count > 1:
            flag("duplicate_faculty_id", "faculty", fid, f"id appears {count} times")

    # Possible duplicate people: same first name, near-identical last name
    by_first: dict[str, list[dict]] = defaultdict(list)
    for person in faculty:
        if person.get("id") and person.get("firstName"):
            by_first[normalize_text(person["firstName"]).lower()].append(person)
    for group in by_first.values():
        for a_idx in range(len(group)):
            for b_idx in range(a_idx + 1, len(group)):
                a, b = group[a_idx], group[b_idx]
                if a["id"] == b["id"]:
                    continue
                ratio = SequenceMatcher(None, _name_key(a), _name_key(b), autojunk=False).ratio()
                if ratio >= DUPLICATE_NAME_RATIO:
                    flag("possible_duplicate_faculty", "faculty", a["id"],
                         f"looks like {b['id']} (similarity {ratio:.2f})")

    # ── participations ───────────────────────────────────────────
    known_ids = set(ids)
    triples: Counter[tuple] = Counter()
    previous_key = None
    for i, p in enumerate(participations):
        key = f"participations[{i}]"
        missing = [f for f in REQUIRED_PARTICIPATION_FIELDS if f not in p]
        if missing:
            flag("missing_participation_field", "participations", key,
                 f"missing {', '.join(missing)}")
            continue
        if p["facultyId"] not in known_ids:
            flag("unknown_faculty_reference", "participations", key,
                 f"facultyId {p['facultyId']!r} has no faculty record")
        if known_workshops and p["workshopId"] not in known_workshops:
            flag("unknown_workshop", "participations", key,
                 f"workshopId {p['workshopId']!r} not in workshop catalog")
        if not isinstance(p["year"], int):
            flag("invalid_year", "participations", key, f"year is not an integer: {p['year']!r}")
        elif not MIN_YEAR <= p["year"] < MAX_YEAR:
            flag("year_out_of_range", "participations", key, f"year {p['year']}")
        triples[(p["facultyId"], p["workshopId"], p["year"])] += 1

        sort_key = (p["facultyId"], p["year"] if isinstance(p["year"], int) else 0)
        if previous_key is not None and sort_key < previous_key:
            flag("participations_unsorted", "participations", key,
                 f"{p['facultyId']}/{p['year']} follows {previous_key[0]}/{previous_key[1]}")
        previous_key = sort_key

    for (fid, wid, year), count in triples.items():
        if count > 1:
            flag("duplicate_participation", "participations", fid,
                 f"{wid} {year} recorded {count} times")

    # ── enrichment ───────────────────────────────────────────────
    for fid, entry in enriched.items():
        if fid not in known_ids:
            flag("enrichment_without_faculty", "enriched", fid, "no matching faculty record")
        if entry.get("id") and entry["id"] != fid:
            flag("enrichment_id_mismatch", "enriched", fid, f"entry id is {entry['id']!r}")
        enrichment = entry.get("enrichment")
        if not isinstance(enrichment, dict):
            flag("missing_enrichment", "enriched", fid, "no enrichment block")
            continue

        confidence = enrichment.get("confidence")
        if confidence not in CONFIDENCE_LEVELS:
            flag("invalid_confidence", "enriched", fid, f"confidence {confidence!r}")
        elif confidence == "pending" and has_data(entry):
            flag("pending_with_data", "enriched", fid, "has data but is still pending")

        academic = enrichment.get("academic") or {}
        orcid = academic.get("orcid")
        if orcid and not is_valid_orcid(orcid):
            flag("bad_orcid", "enriched", fid, f"malformed ORCID: {orcid!r}")

        areas = academic.get("researchAreas") or []
        if any(a != a.lower().strip() for a in areas):
            flag("research_area_case", "enriched", fid, "research areas not lower-case/trimmed")
        dupes = [a for a, c in Counter(areas).items() if c > 1]
        if dupes:
            flag("duplicate_research_area", "enriched", fid, f"repeated: {', '.join(dupes)}")

        url = (enrichment.get("professional") or {}).get("labWebsite") or ""
        if url:
            if not url.startswith("http://") and not url.startswith("https://"):
                flag("bad_url", "enriched", fid, f"labWebsite doesn't start with http: {url[:80]}")
            if " " in url:
                flag("space_in_url", "enriched", fid, f"labWebsite contains spaces: {url[:80]}")
            if url.endswith("/") and len(url) > 8:
                flag("trailing_slash_url", "enriched", fid, f"labWebsite ends with '/': {url[:80]}")

    return findings


# ── reporting ────────────────────────────────────────────────────────

_ERRORS = frozenset({
    "missing_faculty_field", "duplicate_faculty_id", "faculty_id_bad_chars",
    "missing_participation_field", "unknown_faculty_reference",
    "invalid_year", "invalid_confidence", "missing_enrichment",
})
_WARNINGS = frozenset({
    "unknown_workshop", "year_out_of_range", "duplicate_participation",
    "participations_unsorted", "enrichment_without_faculty",
    "enrichment_id_mismatch", "bad_orcid", "bad_url", "space_in_url",
    "possible_duplicate_faculty", "pending_with_data",
})


def _severity(check: str) -> str:
    if check in _ERRORS:
        return "ERROR"
    if check in _WARNINGS:
        return " WARN"
    return " INFO"


def print_report(
    findings: list[Finding],
    *,
    summary_only: bool = False,
    total_faculty: int = 0,
) -> None:
    """Print findings grouped by check type."""
    by_check: dict[str, list[Finding]] = defaultdict(list)
    for f in findings:
        by_check[f.check].append(f)

    total_checks = len(by_check)
    total_issues = len(findings)

    print(f"\n{'='*70}")
    print("DATA VALIDATION REPORT")
    print(f"{'='*70}")
    print(f"  Scanned {total_faculty:,} faculty")

    if total_issues == 0:
        print("  All checks passed, no issues found.")
        return

    errors = sum(1 for f in findings if _severity(f.check) == "ERROR")
    warnings = sum(1 for f in findings if _severity(f.check) == " WARN")
    infos = total_issues - errors - warnings
    print(f"  Found {total_issues:,} issues across {total_checks} check types")
    print(f"  ({errors} errors, {warnings} warnings, {infos} info)\n")

    severity_order = {"ERROR": 0, " WARN": 1, " INFO": 2}
    for check, items in sorted(
        by_check.items(),
        key=lambda x: (severity_order.get(_severity(x[0]), 9), -len(x[1])),
    ):
        print(f"[{_severity(check)}] {check}: {len(items)}")
        if not summary_only:
            for item in items[:5]:
                print(repr(item))
            if len(items) > 5:
                print(f"  ... and {len(items) - 5} more")
        print()


# ── main ─────────────────────────────────────────────────────────────


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Validate faculty directory data for anomalies."
    )
    parser.add_argument(
        "--summary", action="store_true",
        help="Print counts only, no per-issue detail.",
    )
    args = parser.parse_args()

    faculty_data = read_json(FACULTY_DATA_PATH)
    enriched = read_json(ENRICHED_PATH) if ENRICHED_PATH.exists() else {}
    if WORKSHOPS_PATH.exists():
        known_workshops = set(read_json(WORKSHOPS_PATH))
    else:
        known_workshops = set(config().get("workshops") or {})
    print(f"Loaded {len(known_workshops)} workshops, "
          f"{len(faculty_data.get('faculty', []))} faculty, "
          f"{len(faculty_data.get('participations', []))} participations, "
          f"{len(enriched)} enrichment entries")

    findings = validate(faculty_data, enriched, known_workshops)
    print_report(findings, summary_only=args.summary,
                 total_faculty=len(faculty_data.get("faculty", [])))

    has_errors = any(_severity(f.check) == "ERROR" for f in findings)
    sys.exit(1 if has_errors else 0)


if __name__ == "__main__":
    main()
