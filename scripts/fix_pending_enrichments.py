#!/usr/bin/env python3
"""Find ``pending`` enrichment entries and clean them up.

Entries created as templates by enrich_all_faculty stay ``pending`` until
someone researches them.  This script lists pending entries that carry
no data at all, and those that already have data but were never
re-graded, then performs one action:

  cleanup  remove the empty pending entries from facultyEnriched.json
           and enriched_faculty.txt (both backed up / rewritten)
  export   write their ids to data/needs_enrichment.txt
  abort    exit without changes

Usage:
    python -m scripts.fix_pending_enrichments --action export
    python -m scripts.fix_pending_enrichments        # numbered menu prompt
"""

import argparse
import enum
import logging
from pathlib import Path

from scripts.utils import (
    ENRICHED_LIST_PATH,
    ENRICHED_PATH,
    NEEDS_ENRICHMENT_PATH,
    read_id_list,
    read_snapshot,
    write_id_list,
    write_if_unchanged,
)

from curation.enrichment import find_pending

logger = logging.getLogger(__name__)


class PendingAction(enum.Enum):
    CLEANUP = "cleanup"
    EXPORT = "export"
    ABORT = "abort"


MENU = {
    "1": PendingAction.CLEANUP,
    "2": PendingAction.EXPORT,
    "3": PendingAction.ABORT,
}


def remove_entries(enriched: dict, ids: list[str]) -> dict:
    drop = set(ids)
    return {fid: entry for fid, entry in enriched.items() if fid not in drop}


def run_action(
    action: PendingAction,
    enriched: dict,
    pending: list[str],
    *,
    enriched_path: Path = ENRICHED_PATH,
    enriched_mtime: int | None = None,
    enriched_list_path: Path = ENRICHED_LIST_PATH,
    needs_path: Path = NEEDS_ENRICHMENT_PATH,
) -> None:
    """Carry out *action* for the empty *pending* ids."""
    if action is PendingAction.CLEANUP:
        cleaned = remove_entries(enriched, pending)
        write_if_unchanged(
            enriched_path,
            cleaned,
            enriched_mtime if enriched_mtime is not None else enriched_path.stat().st_mtime_ns,
        )
        print(f"\nRemoved {len(pending)} pending entries from {enriched_path.name}")

        listed = read_id_list(enriched_list_path)
        if listed:
            dropped = set(pending)
            kept = [fid for fid in listed if fid not in dropped]
            write_id_list(enriched_list_path, kept)
            print(f"Updated {enriched_list_path.name} (removed {len(listed) - len(kept)} entries)")
    elif action is PendingAction.EXPORT:
        write_id_list(needs_path, pending)
        print(f"\nSaved list of {len(pending)} faculty needing enrichment to {needs_path.name}")
    else:
        print("\nExiting without changes.")


def prompt_action() -> PendingAction:
    print("\n\nOptions:")
    print("1. Remove all pending entries with no data from facultyEnriched.json")
    print("2. List faculty IDs that need enrichment")
    print("3. Exit without changes")
    choice = input("\nEnter option (1, 2, or 3): ").strip()
    if choice not in MENU:
        print("\nInvalid option.")
        return PendingAction.ABORT
    return MENU[choice]


def main() -> None:
    parser = argparse.ArgumentParser(description="Clean up pending enrichment entries")
    parser.add_argument("--action", choices=[a.value for a in PendingAction], default=None,
                        help="What to do with empty pending entries (prompts when omitted)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    enriched, mtime = read_snapshot(ENRICHED_PATH)
    empty, with_data = find_pending(enriched)

    print(f"\nFound {len(empty)} faculty with pending status and no data:")
    print("═" * 60)
    for fid in empty:
        print(f"- {fid}")

    if with_data:
        print(f"\n\nFound {len(with_data)} faculty with data but marked as pending:")
        print("═" * 60)
        for fid in with_data:
            print(f"- {fid}: Has data but marked as pending")

    action = PendingAction(args.action) if args.action else prompt_action()
    run_action(action, enriched, empty, enriched_mtime=mtime)


if __name__ == "__main__":
    main()
