#!/usr/bin/env python3
"""Enrichment coverage analysis.

Compares facultyData.json, facultyEnriched.json and enriched_faculty.txt
and prints:
  - field coverage of the enrichment table
  - ids listed in one place but not the other
  - unenriched faculty, most active first
  - ORCID targets grouped by participation count
  - professors, directors and chairs still missing an ORCID id

Usage:
    python -m scripts.analyze_enrichment_coverage
    python -m scripts.analyze_enrichment_coverage --top 50
"""

import argparse
import logging

from scripts.utils import ENRICHED_LIST_PATH, ENRICHED_PATH, FACULTY_DATA_PATH, read_id_list, read_json

from curation.common import full_name
from curation.enrichment import (
    coverage_stats,
    format_coverage,
    orcid_targets,
    participation_counts,
    senior_without_orcid,
)

logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Analyze faculty enrichment coverage")
    parser.add_argument("--top", type=int, default=20,
                        help="How many entries to show per list")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    faculty_data = read_json(FACULTY_DATA_PATH)
    enriched = read_json(ENRICHED_PATH)
    listed = read_id_list(ENRICHED_LIST_PATH)

    print("Faculty Enrichment Coverage Analysis")
    print("=" * 60)
    all_ids = [f["id"] for f in faculty_data["faculty"]]
    print(f"\nTotal faculty in system: {len(all_ids)}")
    print(f"Faculty in {ENRICHED_PATH.name}: {len(enriched)}")
    print(f"Faculty in {ENRICHED_LIST_PATH.name}: {len(listed)}")
    print()
    print(format_coverage(coverage_stats(enriched)))

    listed_set = set(listed)
    in_json_not_list = [fid for fid in enriched if fid not in listed_set]
    in_list_not_json = [fid for fid in listed if fid not in enriched]
    orphaned = [fid for fid in enriched if fid not in set(all_ids)]
    print("\nDiscrepancies:")
    print(f"- In JSON but not in list: {len(in_json_not_list)}")
    print(f"- In list but not in JSON: {len(in_list_not_json)}")
    print(f"- Enriched but not in faculty data: {len(orphaned)}")
    for fid in orphaned[: args.top]:
        print(f"    {fid}")

    counts = participation_counts(faculty_data["participations"])
    unenriched = sorted(
        (f for f in faculty_data["faculty"] if f["id"] not in enriched),
        key=lambda f: (-counts.get(f["id"], 0), f["id"]),
    )
    print(f"\n\nUnenriched Faculty ({len(unenriched)} total):")
    print("=" * 60)
    print(f"\nTop {args.top} by participation count:")
    for i, f in enumerate(unenriched[: args.top], 1):
        print(f"{i:2d}. {full_name(f):30s} - {counts.get(f['id'], 0)} participations ({f['id']})")

    targets = orcid_targets(enriched, faculty_data["participations"])
    with_orcid = len(enriched) - sum(len(v) for v in targets.values())
    pct = with_orcid / len(enriched) * 100 if enriched else 0.0
    print("\n\nORCID Expansion Targets")
    print("=" * 60)
    print(f"Current status: {with_orcid}/{len(enriched)} faculty have ORCID IDs ({pct:.1f}%)")
    for label, rule in [("high", "3+"), ("medium", "2"), ("low", "0-1")]:
        print(f"- {label.capitalize()} ({rule} participations): {len(targets[label])} faculty")
    if targets["high"]:
        print("\nHIGH PRIORITY TARGETS (3+ participations):")
        for t in targets["high"][: args.top]:
            site = " [website]" if t["hasWebsite"] else ""
            print(f"  {t['name']:30s} {t['participations']:2d}  {t['affiliation']}{site}")

    senior = senior_without_orcid(enriched)
    print(f"\n\nProfessors/Directors/Chairs without ORCID ({len(senior)}):")
    print("=" * 60)
    for i, s in enumerate(senior, 1):
        print(f"{i:2d}. {s['name']:30s} - {s['title']}")
        print(f"    {s['affiliation']}")
        print(f"    ID: {s['id']}")


if __name__ == "__main__":
    main()
