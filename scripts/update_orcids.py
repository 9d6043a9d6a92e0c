#!/usr/bin/env python3
"""Apply a hand-authored batch of ORCID ids to facultyEnriched.json.

The batch file maps faculty id to what was found::

    {"molloy-erin": {"orcid": "0000-0001-5553-3312",
                     "confidence": "high", "source": "ORCID website"}}

Confidence is raised when the batch is more certain than the entry, never
lowered.  Ids missing from the enrichment table are reported and skipped.
Coverage statistics are printed afterwards.

Usage:
    python -m scripts.update_orcids                       # data/updates/orcidUpdates.json
    python -m scripts.update_orcids --batch FILE.json
"""

import argparse
import logging

from scripts.utils import ENRICHED_PATH, UPDATES_DIR, read_json, read_snapshot, write_if_unchanged

from curation.enrichment import (
    MISSING,
    UPDATED,
    UpdateOutcome,
    apply_updates,
    coverage_stats,
    format_coverage,
    orcid_batch_to_updates,
)
from curation.orcid import is_valid_orcid

logger = logging.getLogger(__name__)

DEFAULT_BATCH = UPDATES_DIR / "orcidUpdates.json"

_ICONS = {UPDATED: "✓", MISSING: "✗"}


def report_outcomes(outcomes: list[UpdateOutcome], detail: dict[str, str] | None = None) -> int:
    """Print one line per outcome; returns the number of updated entries."""
    for o in outcomes:
        icon = _ICONS.get(o.status, "-")
        extra = f" {detail[o.faculty_id]}" if detail and o.faculty_id in detail else ""
        note = f" ({o.message})" if o.message else ""
        print(f"{icon} {o.faculty_id}:{extra} {o.status}{note}")
    return sum(1 for o in outcomes if o.status == UPDATED)


def main() -> None:
    parser = argparse.ArgumentParser(description="Add ORCID ids to enriched faculty data")
    parser.add_argument("--batch", type=str, default=str(DEFAULT_BATCH),
                        help="JSON batch of {id: {orcid, confidence, source}}")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    batch = read_json(args.batch)
    for faculty_id, item in batch.items():
        if not is_valid_orcid(item.get("orcid", "")):
            logger.warning(f"{faculty_id}: {item.get('orcid')!r} fails the ORCID checksum")

    enriched, mtime = read_snapshot(ENRICHED_PATH)
    print("Adding ORCID IDs to faculty profiles...\n")
    outcomes = apply_updates(enriched, orcid_batch_to_updates(batch))
    detail = {fid: f"{item['orcid']} (source: {item.get('source', 'n/a')})" for fid, item in batch.items()}
    updated = report_outcomes(outcomes, detail)

    if updated:
        write_if_unchanged(ENRICHED_PATH, enriched, mtime)
        print(f"\n✓ Updated {updated} faculty profiles with ORCID IDs")
    else:
        print("\nNo updates needed.")

    print()
    print(format_coverage(coverage_stats(enriched)))


if __name__ == "__main__":
    main()
