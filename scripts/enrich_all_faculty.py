#!/usr/bin/env python3
"""Create enrichment entries for every faculty member not yet enriched.

Faculty in facultyData.json without an entry in facultyEnriched.json get a
``pending`` template, processed in batches of ten with a pause between
batches; progress is saved after every batch so an interrupted run
loses at most one batch.  A review list of the targeted faculty is
written to data/faculty-to-enrich.txt.

With ``--lookup-orcid`` each person is also searched on the ORCID public
API.  A single unambiguous hit is recorded and the entry raised to
``low`` confidence; everything else is left for manual research.  A
failed lookup is logged and the batch carries on.

Usage:
    python -m scripts.enrich_all_faculty
    python -m scripts.enrich_all_faculty --lookup-orcid --delay 5
"""

import argparse
import logging

import requests

from scripts.utils import (
    DATA_DIR,
    ENRICHED_PATH,
    FACULTY_DATA_PATH,
    read_json,
    read_snapshot,
    write_if_unchanged,
)

from curation.common import full_name
from curation.enrichment import apply_update, new_enrichment_entry
from curation.http import process_in_batches
from curation.orcid import LOOKUP_SOURCE, search_orcid, unique_match

logger = logging.getLogger(__name__)

BATCH_SIZE = 10
BATCH_DELAY = 5.0

REVIEW_LIST_PATH = DATA_DIR / "faculty-to-enrich.txt"


def enrich_one(
    faculty: dict,
    enriched: dict,
    *,
    lookup_orcid: bool = False,
    session: requests.Session | None = None,
) -> str | None:
    """Add a template entry for *faculty*; optionally look up its ORCID id.

    The template is stored before the lookup so a failed lookup still
    leaves a pending entry behind.  Returns the ORCID id when one was
    recorded.
    """
    entry = enriched.setdefault(faculty["id"], new_enrichment_entry(faculty))
    if not lookup_orcid:
        return None
    orcid = unique_match(search_orcid(faculty["firstName"], faculty["lastName"], session=session))
    if orcid:
        apply_update(entry, {
            "academic": {"orcid": orcid},
            "profile": {"source": LOOKUP_SOURCE},
            "confidence": "low",
        })
    return orcid


def write_review_list(faculty: list[dict]) -> None:
    with open(REVIEW_LIST_PATH, "w", encoding="utf-8") as f:
        for i, person in enumerate(faculty, 1):
            f.write(f"{i}. {full_name(person)} ({person['id']})\n")
    print(f"Review list saved to: {REVIEW_LIST_PATH}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Create enrichment entries for all faculty")
    parser.add_argument("--lookup-orcid", action="store_true",
                        help="Search the ORCID public API for each person")
    parser.add_argument("--batch-size", type=int, default=BATCH_SIZE)
    parser.add_argument("--delay", type=float, default=BATCH_DELAY,
                        help="Seconds to pause between batches")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    all_faculty = read_json(FACULTY_DATA_PATH)["faculty"]
    if ENRICHED_PATH.exists():
        enriched, mtime = read_snapshot(ENRICHED_PATH)
    else:
        enriched, mtime = {}, None
    to_enrich = [f for f in all_faculty if f["id"] not in enriched]
    by_id = {f["id"]: f for f in to_enrich}

    print("Faculty Enrichment Status")
    print("=" * 50)
    print(f"Total faculty: {len(all_faculty)}")
    print(f"Already enriched: {len(enriched)}")
    print(f"To be enriched: {len(to_enrich)}")
    if not to_enrich:
        return
    write_review_list(to_enrich)

    session = requests.Session() if args.lookup_orcid else None

    def save_progress(batch_index: int, batch_count: int) -> None:
        nonlocal mtime
        write_if_unchanged(ENRICHED_PATH, enriched, mtime, backup=batch_index == 0)
        mtime = ENRICHED_PATH.stat().st_mtime_ns
        logger.info(f"Progress saved after batch {batch_index + 1}/{batch_count}: "
                    f"{len(enriched)}/{len(all_faculty)} faculty have entries")

    results, failed = process_in_batches(
        list(by_id),
        lambda fid: enrich_one(by_id[fid], enriched, lookup_orcid=args.lookup_orcid, session=session),
        batch_size=args.batch_size,
        delay=args.delay,
        on_batch_done=save_progress,
    )

    found = sum(1 for orcid in results.values() if orcid)
    print("\n" + "=" * 50)
    print("Enrichment complete!")
    print(f"Total faculty with entries: {len(enriched)}")
    if args.lookup_orcid:
        print(f"ORCID ids recorded: {found}")
        print(f"Failed lookups: {len(failed)}")
    print(f"Output saved to: {ENRICHED_PATH}")


if __name__ == "__main__":
    main()
