#!/usr/bin/env python3
"""Merge batches of additional term mappings into termMappings.json.

Every ``data/taxonomy/additionalMappings*.json`` file (sorted by name) is
merged into the canonical table.  Terms already mapped keep their
existing value and are listed as conflicts instead of being overwritten.
Before the canonical file is replaced, the current version is saved as
``termMappings.v<version>.json`` next to it.

Usage:
    python -m scripts.merge_mappings                      # all batch files
    python -m scripts.merge_mappings --batch FILE [...]   # specific files
    python -m scripts.merge_mappings --dry-run            # report only
"""

import argparse
import logging
from pathlib import Path

from scripts.utils import (
    MAPPINGS_PATH,
    TAXONOMY_DIR,
    backup_file,
    read_json,
    read_snapshot,
    write_if_unchanged,
)

from curation.taxonomy import merge_mapping_tables

logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Merge additional term mappings")
    parser.add_argument("--batch", type=Path, nargs="+", default=None,
                        help="Batch files to merge (default: additionalMappings*.json)")
    parser.add_argument("--version", type=str, default=None,
                        help="Version for the merged table (default: bump minor)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Report what would change without writing")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    batch_paths = args.batch or sorted(TAXONOMY_DIR.glob("additionalMappings*.json"))
    if not batch_paths:
        logger.warning(f"No additional mapping files found in {TAXONOMY_DIR}")
        return

    current, mtime = read_snapshot(MAPPINGS_PATH)
    batches = [read_json(p) for p in batch_paths]

    print("MERGING TERM MAPPINGS")
    print("=" * 80)

    merged, conflicts, added = merge_mapping_tables(current, batches, version=args.version)

    if conflicts:
        print("WARNING: Found conflicts with existing mappings:")
        for term in conflicts:
            print(f"  - {term}")
        print("\nThese were skipped in the merge.")

    meta = merged["metadata"]
    print(f"\nCurrent mappings: {len(current.get('mappings', {}))}")
    for path, batch in zip(batch_paths, batches):
        print(f"Additional mappings ({path.name}): {len(batch.get('mappings', {}))}")
    print(f"Conflicts skipped: {len(conflicts)}")
    print(f"New mappings added: {added}")
    print(f"Total merged mappings: {meta['totalMappings']}")
    print("\nConfidence levels:")
    for level, count in meta["confidence"].items():
        print(f"  {level.capitalize()}: {count}")

    if args.dry_run:
        print("\nDry run, nothing written.")
        return

    old_version = current.get("metadata", {}).get("version", "unversioned")
    backup_path = backup_file(MAPPINGS_PATH, tag=f"v{old_version}", backup_dir=MAPPINGS_PATH.parent)
    print(f"\nBackup created: {backup_path}")

    write_if_unchanged(MAPPINGS_PATH, merged, mtime, backup=False)
    print(f"Merged mappings (v{meta['version']}) written to: {MAPPINGS_PATH}")
    print("\n" + "=" * 80)
    print("Merge complete!")


if __name__ == "__main__":
    main()
