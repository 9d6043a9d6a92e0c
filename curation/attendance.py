"""Attendance roster ingestion.

A roster is a CSV table with one row per person: the first two columns
hold last and first name, any column whose header is a year holds an
``x`` when that person taught at the workshop that year.  Other columns
(notes, e-mail, affiliation) are ignored.

Parsing is best effort: rows without both name fields are skipped
without comment.  Known misspellings are corrected through an explicit
``raw -> corrected`` table before the faculty id is derived, so the
corrections live in configuration rather than in the parser.
"""

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from .common import ROLE_FACULTY, full_name, name_sort_key, participation_sort_key

logger = logging.getLogger(__name__)

# year headers are accepted in [MIN_YEAR, MAX_YEAR)
MIN_YEAR = 2001
MAX_YEAR = 2099

PRESENT_MARK = "x"

_WS_RE = re.compile(r"\s+")
_ID_STRIP_RE = re.compile(r"[^a-z0-9-]")
_LEADING_INT_RE = re.compile(r"^(\d+)")


@dataclass
class RosterResult:
    """Faculty and participation records parsed from one roster."""

    workshop_id: str
    faculty: list[dict] = field(default_factory=list)
    participations: list[dict] = field(default_factory=list)


def derive_faculty_id(last_name: str, first_name: str) -> str:
    """Build the faculty identity key, e.g. ``("Van Dyke", "Mary Ann")`` ->
    ``van-dyke-mary-ann``.

    Characters outside ``[a-z0-9-]`` are dropped rather than transliterated,
    so ``Fernández`` yields ``fernndez``.  Such pairs are reconciled by the
    identity-merge step, not here.
    """
    raw = f"{last_name.lower()}-{first_name.lower()}"
    return _ID_STRIP_RE.sub("", _WS_RE.sub("-", raw))


def correct_name(name: str, corrections: Mapping[str, str] | None) -> str:
    """Return the corrected spelling for *name* (exact match), else *name*."""
    if not corrections:
        return name
    return corrections.get(name, name)


def _parse_year(header: str) -> int | None:
    # "2020 (cancelled)" still counts as 2020
    m = _LEADING_INT_RE.match(header.strip().strip('"'))
    if not m:
        return None
    year = int(m.group(1))
    if MIN_YEAR <= year < MAX_YEAR:
        return year
    return None


def find_year_columns(headers: list[str]) -> list[tuple[int, int]]:
    """Return ``(column_index, year)`` for every year-labelled header."""
    columns = []
    for idx, header in enumerate(headers):
        year = _parse_year(header)
        if year is not None:
            columns.append((idx, year))
    return columns


def _clean_cell(value: str | None) -> str:
    return (value or "").replace('"', "").strip()


def parse_roster(
    source: str | Iterable[list[str]],
    workshop_id: str,
    corrections: Mapping[str, str] | None = None,
) -> RosterResult:
    """Parse one roster into faculty and participation records.

    *source* is either the CSV text or an iterable of already-split rows
    (header first).  Repeated rows for the same person collapse to a
    single faculty entry; participations are emitted per marked year.
    """
    rows = csv.reader(io.StringIO(source)) if isinstance(source, str) else iter(source)
    result = RosterResult(workshop_id=workshop_id)

    headers = next(rows, None)
    if headers is None:
        return result
    year_columns = find_year_columns(headers)

    faculty_by_id: dict[str, dict] = {}
    for parts in rows:
        last_name = _clean_cell(parts[0] if len(parts) > 0 else None)
        first_name = _clean_cell(parts[1] if len(parts) > 1 else None)
        if not last_name or not first_name:
            continue

        last_name = correct_name(last_name, corrections)
        faculty_id = derive_faculty_id(last_name, first_name)

        faculty_by_id[faculty_id] = {
            "id": faculty_id,
            "firstName": first_name,
            "lastName": last_name,
        }

        for idx, year in year_columns:
            value = _clean_cell(parts[idx] if idx < len(parts) else None)
            if value.lower() == PRESENT_MARK:
                result.participations.append({
                    "facultyId": faculty_id,
                    "workshopId": workshop_id,
                    "year": year,
                    "role": ROLE_FACULTY,
                })

    result.faculty = list(faculty_by_id.values())
    return result


def dedupe_participations(participations: Iterable[dict]) -> list[dict]:
    """Drop repeated ``(facultyId, workshopId, year)`` triples, keeping the first."""
    seen: set[tuple[str, str, int]] = set()
    unique = []
    for p in participations:
        key = (p["facultyId"], p["workshopId"], p["year"])
        if key in seen:
            continue
        seen.add(key)
        unique.append(p)
    return unique


def merge_rosters(results: Iterable[RosterResult]) -> dict:
    """Combine several parsed rosters into one ``facultyData`` document.

    Faculty are unioned by id.  When two rosters disagree on a person's
    display name the roster processed later wins; the disagreement is
    logged because nothing here can tell which spelling is right.
    """
    faculty_by_id: dict[str, dict] = {}
    participations: list[dict] = []

    for result in results:
        for person in result.faculty:
            previous = faculty_by_id.get(person["id"])
            if previous and (
                previous["firstName"] != person["firstName"]
                or previous["lastName"] != person["lastName"]
            ):
                logger.warning(
                    f"Name conflict for {person['id']}: "
                    f"{full_name(previous)!r} vs {full_name(person)!r} "
                    f"({result.workshop_id}); keeping the later one"
                )
            faculty_by_id[person["id"]] = dict(person)
        participations.extend(result.participations)

    return {
        "faculty": sorted(faculty_by_id.values(), key=name_sort_key),
        "participations": sorted(
            dedupe_participations(participations), key=participation_sort_key
        ),
    }


CATALOG_FIELDS = ("name", "shortName", "description", "active", "startYear", "endYear", "location")


def workshop_catalog(workshops: Mapping[str, Mapping]) -> dict[str, dict]:
    """Build the ``workshops.json`` document from configured workshops.

    Only catalog fields are kept; roster file names and other
    ingestion settings stay out of the published file.
    """
    catalog = {}
    for workshop_id, spec in workshops.items():
        entry = {"id": workshop_id}
        for key in CATALOG_FIELDS:
            if key in spec:
                entry[key] = spec[key]
        catalog[workshop_id] = entry
    return catalog
