#!/usr/bin/env python3
"""One-time fixes for known data quality issues.

1. Trailing slashes are removed from lab website URLs.
2. Display names in facultyData.json are corrected from ``name_fixes`` in
   data/curation.yaml (ids are left alone).
3. Optionally, blank enrichment fields (titles, departments, ...) are
   filled from a hand-authored batch; fields that already hold a value
   are not touched::

       {"catchen-julian": {"professional": {"title": "Associate Professor"}}}

Both data files are backed up before being rewritten.

Usage:
    python -m scripts.fix_data_quality
    python -m scripts.fix_data_quality --fill data/updates/missingFields.json
"""

import argparse
import logging

from scripts.utils import (
    ENRICHED_PATH,
    FACULTY_DATA_PATH,
    config,
    read_json,
    read_snapshot,
    write_if_unchanged,
)
from scripts.update_orcids import report_outcomes

from curation.common import now_iso
from curation.enrichment import apply_updates, coverage_stats, format_coverage, strip_trailing_slashes
from curation.identity import apply_name_fixes

logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Fix known data quality issues")
    parser.add_argument("--fill", type=str, default=None,
                        help="JSON batch of {id: update} used to fill blank fields")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    enriched, enriched_mtime = read_snapshot(ENRICHED_PATH)
    faculty_data, faculty_mtime = read_snapshot(FACULTY_DATA_PATH)
    now = now_iso()
    fix_count = 0

    print("Fixing Data Quality Issues...\n")

    print("1. Removing trailing slashes from URLs:")
    for faculty_id, old, new in strip_trailing_slashes(enriched, now=now):
        print(f"   ✓ {faculty_id}: {old} → {new}")
        fix_count += 1

    print("\n2. Fixing name inconsistencies:")
    renamed = apply_name_fixes(faculty_data, config().get("name_fixes") or {})
    for faculty_id, old, new in renamed:
        print(f'   ✓ {faculty_id}: "{old}" → "{new}"')
    fix_count += len(renamed)

    if args.fill:
        print("\n3. Filling missing fields:")
        outcomes = apply_updates(enriched, read_json(args.fill), now=now, only_missing=True)
        fix_count += report_outcomes(outcomes)

    if not fix_count:
        print("\nNo issues to fix.")
        return

    write_if_unchanged(ENRICHED_PATH, enriched, enriched_mtime)
    if renamed:
        write_if_unchanged(FACULTY_DATA_PATH, faculty_data, faculty_mtime)

    print(f"\n✅ Fixed {fix_count} data quality issues")
    print()
    print(format_coverage(coverage_stats(enriched)))


if __name__ == "__main__":
    main()
