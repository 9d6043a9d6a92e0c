"""Faculty enrichment records and hand-authored update batches.

The enrichment table maps faculty id -> entry::

    {"id": "molloy-erin", "name": "Erin Molloy",
     "enrichment": {"lastUpdated": "2024-05-01T12:00:00.000Z",
                    "confidence": "high",
                    "professional": {"title": ..., "affiliation": ...,
                                     "department": ..., "labWebsite": ...},
                    "academic": {"orcid": ..., "researchAreas": [...]},
                    "profile": {"shortBio": ..., "source": ...}}}

Updates never lower an entry's confidence, and an update aimed at an id
that is not in the table is reported and skipped rather than raised.
"""

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Iterable, Mapping

from .common import full_name, now_iso

logger = logging.getLogger(__name__)

CONFIDENCE_LEVELS = ("pending", "low", "medium", "high")
_RANK = {level: i for i, level in enumerate(CONFIDENCE_LEVELS)}

SECTIONS = ("professional", "academic", "profile")

SELF_SUBMISSION_SOURCE = "Faculty self-submission"

# CSV header -> (section, field) for self-submitted updates
SUBMISSION_COLUMNS = {
    "Current Affiliation": ("professional", "affiliation"),
    "Professional Title": ("professional", "title"),
    "Department": ("professional", "department"),
    "Lab/Personal Website": ("professional", "labWebsite"),
    "ORCID ID": ("academic", "orcid"),
    "Short Bio": ("profile", "shortBio"),
}

SENIOR_TITLE_WORDS = ("professor", "director", "chair")

# Outcome statuses
UPDATED = "updated"
UNCHANGED = "unchanged"
MISSING = "missing"


@dataclass
class UpdateOutcome:
    faculty_id: str
    status: str
    message: str = ""


def confidence_rank(level: str | None) -> int:
    """Rank of a confidence level; unknown values rank below ``pending``."""
    return _RANK.get(level or "", -1)


def raise_confidence(current: str | None, proposed: str | None) -> str | None:
    """Return whichever of *current* and *proposed* is higher."""
    if proposed is None:
        return current
    return proposed if confidence_rank(proposed) > confidence_rank(current) else current


def new_enrichment_entry(
    faculty: dict,
    *,
    confidence: str = "pending",
    now: str | None = None,
) -> dict:
    """Empty enrichment entry for a ``{id, firstName, lastName}`` record."""
    return {
        "id": faculty["id"],
        "name": full_name(faculty),
        "enrichment": {
            "lastUpdated": now or now_iso(),
            "confidence": confidence,
            "professional": {},
            "academic": {},
            "profile": {},
        },
    }


def _is_blank(value) -> bool:
    return value is None or value == "" or value == []


def apply_update(
    entry: dict,
    update: Mapping,
    *,
    now: str | None = None,
    only_missing: bool = False,
) -> bool:
    """Merge one update into *entry*; return True if anything changed.

    *update* may hold ``professional``/``academic``/``profile`` dicts and a
    ``confidence`` level.  With *only_missing*, fields that already hold a
    value are left alone.
    """
    enrichment = entry.setdefault("enrichment", {})
    changed = False

    for section in SECTIONS:
        fields = update.get(section)
        if not fields:
            continue
        target = enrichment.get(section)
        if target is None:
            target = enrichment[section] = {}
        for key, value in fields.items():
            if only_missing and not _is_blank(target.get(key)):
                continue
            if target.get(key) != value:
                target[key] = value
                changed = True

    confidence = raise_confidence(enrichment.get("confidence"), update.get("confidence"))
    if confidence != enrichment.get("confidence"):
        enrichment["confidence"] = confidence
        changed = True

    if changed:
        enrichment["lastUpdated"] = now or now_iso()
    return changed


def apply_updates(
    enriched: dict,
    updates: Mapping[str, Mapping],
    *,
    now: str | None = None,
    only_missing: bool = False,
) -> list[UpdateOutcome]:
    """Apply ``{faculty_id: update}`` to the enrichment table in place."""
    now = now or now_iso()
    outcomes = []
    for faculty_id, update in updates.items():
        entry = enriched.get(faculty_id)
        if entry is None:
            logger.warning(f"{faculty_id} not found in enriched data, skipping")
            outcomes.append(UpdateOutcome(faculty_id, MISSING, "not found in enriched data"))
            continue
        if apply_update(entry, update, now=now, only_missing=only_missing):
            outcomes.append(UpdateOutcome(faculty_id, UPDATED))
        else:
            outcomes.append(UpdateOutcome(faculty_id, UNCHANGED, "already up to date"))
    return outcomes


def orcid_batch_to_updates(batch: Mapping[str, Mapping]) -> dict[str, dict]:
    """Convert ``{id: {orcid, confidence, source}}`` into update dicts.

    ``source`` only documents where the id was found; it is not stored.
    """
    updates = {}
    for faculty_id, item in batch.items():
        update: dict = {"academic": {"orcid": item["orcid"]}}
        if item.get("confidence"):
            update["confidence"] = item["confidence"]
        updates[faculty_id] = update
    return updates


# ── coverage ─────────────────────────────────────────────────────────


def _section(entry: dict, name: str) -> dict:
    return (entry.get("enrichment") or {}).get(name) or {}


def has_orcid(entry: dict) -> bool:
    return bool(_section(entry, "academic").get("orcid"))


def coverage_stats(enriched: dict) -> dict:
    """Field coverage counts across the enrichment table."""
    stats = Counter()
    for entry in enriched.values():
        professional = _section(entry, "professional")
        academic = _section(entry, "academic")
        profile = _section(entry, "profile")
        stats["orcid"] += bool(academic.get("orcid"))
        stats["researchAreas"] += bool(academic.get("researchAreas"))
        stats["title"] += bool(professional.get("title"))
        stats["affiliation"] += bool(professional.get("affiliation"))
        stats["department"] += bool(professional.get("department"))
        stats["labWebsite"] += bool(professional.get("labWebsite"))
        stats["shortBio"] += bool(profile.get("shortBio"))
        stats[f"confidence:{(entry.get('enrichment') or {}).get('confidence')}"] += 1
    return {"total": len(enriched), **stats}


def format_coverage(stats: dict) -> str:
    total = stats.get("total", 0)

    def pct(n: int) -> str:
        return f"{n / total * 100:.1f}%" if total else "n/a"

    lines = [f"Enrichment coverage ({total} faculty):"]
    for key, label in [
        ("orcid", "ORCID"),
        ("title", "Title"),
        ("affiliation", "Affiliation"),
        ("department", "Department"),
        ("labWebsite", "Website"),
        ("shortBio", "Bio"),
        ("researchAreas", "Research areas"),
    ]:
        n = stats.get(key, 0)
        lines.append(f"  {label:15s} {n:4d}/{total} ({pct(n)})")
    levels = ", ".join(f"{level} {stats.get(f'confidence:{level}', 0)}" for level in CONFIDENCE_LEVELS)
    lines.append(f"  Confidence      {levels}")
    return "\n".join(lines)


# ── cleanup helpers ──────────────────────────────────────────────────


def has_data(entry: dict) -> bool:
    return any(_section(entry, name) for name in SECTIONS)


def find_pending(enriched: dict) -> tuple[list[str], list[str]]:
    """Split ``pending`` entries into (no data at all, already carrying data)."""
    empty, with_data = [], []
    for faculty_id, entry in enriched.items():
        if (entry.get("enrichment") or {}).get("confidence") != "pending":
            continue
        (with_data if has_data(entry) else empty).append(faculty_id)
    return empty, with_data


def strip_trailing_slashes(enriched: dict, *, now: str | None = None) -> list[tuple[str, str, str]]:
    """Remove a trailing ``/`` from lab websites; returns ``(id, old, new)``."""
    fixed = []
    for faculty_id, entry in enriched.items():
        professional = _section(entry, "professional")
        url = professional.get("labWebsite") or ""
        if url.endswith("/") and len(url) > 8:
            professional["labWebsite"] = url[:-1]
            entry["enrichment"]["lastUpdated"] = now or now_iso()
            fixed.append((faculty_id, url, url[:-1]))
    return fixed


# ── self-submitted updates ───────────────────────────────────────────


def _submission_name(row: Mapping[str, str]) -> str:
    return f"{(row.get('First Name') or '').strip()} {(row.get('Last Name') or '').strip()}".strip()


def submission_to_update(row: Mapping[str, str]) -> dict:
    """Translate one self-submission CSV row into an update dict."""
    update: dict = defaultdict(dict)
    for column, (section, key) in SUBMISSION_COLUMNS.items():
        value = (row.get(column) or "").strip()
        if value:
            update[section][key] = value
    areas = row.get("Research Areas") or ""
    if areas.strip():
        update["academic"]["researchAreas"] = [
            a.strip().lower() for a in areas.split(",") if a.strip()
        ]
    update["profile"]["source"] = SELF_SUBMISSION_SOURCE
    update["confidence"] = "high"
    return dict(update)


def apply_self_submissions(
    faculty_data: dict,
    enriched: dict,
    rows: Iterable[Mapping[str, str]],
    *,
    now: str | None = None,
) -> list[UpdateOutcome]:
    """Apply faculty self-submitted updates, matched by full name.

    Matching is case-insensitive on ``"First Last"``.  A matched person
    without an enrichment entry gets a fresh one.  Unmatched rows are
    reported with status ``missing``.
    """
    now = now or now_iso()
    by_name = {full_name(f).lower(): f for f in faculty_data.get("faculty", [])}
    outcomes = []
    for row in rows:
        name = _submission_name(row)
        faculty = by_name.get(name.lower())
        if faculty is None:
            logger.warning(f"{name}: faculty not found in database")
            outcomes.append(UpdateOutcome(name, MISSING, "Faculty not found in database"))
            continue
        entry = enriched.get(faculty["id"])
        if entry is None:
            entry = enriched[faculty["id"]] = new_enrichment_entry(
                faculty, confidence="high", now=now
            )
        apply_update(entry, submission_to_update(row), now=now)
        entry["enrichment"]["lastUpdated"] = now
        outcomes.append(UpdateOutcome(faculty["id"], UPDATED, f"{full_name(faculty)}: successfully updated"))
    return outcomes


# ── targeting ────────────────────────────────────────────────────────


def participation_counts(participations: Iterable[dict]) -> Counter:
    return Counter(p["facultyId"] for p in participations)


def orcid_targets(enriched: dict, participations: Iterable[dict]) -> dict[str, list[dict]]:
    """Faculty without an ORCID id, grouped by how often they taught.

    ``high`` is three or more participations, ``medium`` two, ``low`` one
    or none.  Each group is sorted by participation count, descending.
    """
    counts = participation_counts(participations)
    groups: dict[str, list[dict]] = {"high": [], "medium": [], "low": []}
    for faculty_id, entry in enriched.items():
        if has_orcid(entry):
            continue
        n = counts.get(faculty_id, 0)
        target = {
            "id": faculty_id,
            "name": entry.get("name", faculty_id),
            "affiliation": _section(entry, "professional").get("affiliation") or "Unknown",
            "participations": n,
            "hasWebsite": bool(_section(entry, "professional").get("labWebsite")),
        }
        if n >= 3:
            groups["high"].append(target)
        elif n == 2:
            groups["medium"].append(target)
        else:
            groups["low"].append(target)
    for items in groups.values():
        items.sort(key=lambda t: (-t["participations"], t["id"]))
    return groups


def senior_without_orcid(enriched: dict) -> list[dict]:
    """Professors, directors and chairs that still lack an ORCID id."""
    found = []
    for faculty_id, entry in enriched.items():
        if has_orcid(entry):
            continue
        professional = _section(entry, "professional")
        title = (professional.get("title") or "").lower()
        if any(word in title for word in SENIOR_TITLE_WORDS):
            found.append({
                "id": faculty_id,
                "name": entry.get("name", faculty_id),
                "title": professional.get("title"),
                "affiliation": professional.get("affiliation"),
            })
    return found
