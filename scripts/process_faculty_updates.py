#!/usr/bin/env python3
"""Apply faculty self-submitted profile updates from a CSV export.

Expected columns: First Name, Last Name, Current Affiliation,
Professional Title, Department, Lab/Personal Website, ORCID ID,
Research Areas (comma separated), Short Bio.

Rows are matched to faculty by case-insensitive full name.  Matched
entries are marked ``high`` confidence with source "Faculty
self-submission"; unmatched rows are listed as errors.

Usage:
    python -m scripts.process_faculty_updates path/to/updates.csv
"""

import argparse
import csv
import logging
import sys

from scripts.utils import ENRICHED_PATH, FACULTY_DATA_PATH, read_json, read_snapshot, write_if_unchanged

from curation.enrichment import UPDATED, apply_self_submissions, coverage_stats, format_coverage

logger = logging.getLogger(__name__)


def read_submissions(path: str) -> list[dict]:
    """Read the CSV into header-keyed rows, skipping blank lines."""
    with open(path, encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f, strict=True)
        return [row for row in reader if any((v or "").strip() for v in row.values() if isinstance(v, str))]


def main() -> None:
    parser = argparse.ArgumentParser(description="Process faculty self-submitted updates")
    parser.add_argument("csv_path", help="CSV file with faculty updates")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        rows = read_submissions(args.csv_path)
    except (OSError, csv.Error, UnicodeDecodeError) as e:
        logger.error(f"Could not read {args.csv_path}: {e}")
        sys.exit(1)

    faculty_data = read_json(FACULTY_DATA_PATH)
    enriched, mtime = read_snapshot(ENRICHED_PATH)

    print(f"Processing {len(rows)} faculty updates...\n")
    outcomes = apply_self_submissions(faculty_data, enriched, rows)
    updated = sum(1 for o in outcomes if o.status == UPDATED)

    if updated:
        write_if_unchanged(ENRICHED_PATH, enriched, mtime)

    print("Update Summary:")
    print(f"- Total submissions: {len(rows)}")
    print(f"- Successful updates: {updated}")
    print(f"- Errors: {len(rows) - updated}\n")
    for o in outcomes:
        icon = "✅" if o.status == UPDATED else "❌"
        print(f"{icon} {o.faculty_id}: {o.message}")

    print()
    print(format_coverage(coverage_stats(enriched)))


if __name__ == "__main__":
    main()
