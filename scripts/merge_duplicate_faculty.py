#!/usr/bin/env python3
"""One-shot repair script: fold duplicate faculty identities together.

Id derivation drops accented characters, so one person can end up with
two ids (``fernandez-rosa`` from "Fernandez", ``fernndez-rosa`` from
"Fernández").  Every pair listed under ``identity_merges`` in
data/curation.yaml is merged:

- the kept entry gets the corrected display name
- participations pointing at the obsolete id are repointed (repeats of an
  existing faculty/workshop/year triple are dropped)
- the obsolete entry is removed from facultyData.json and all_faculty.txt

Writes files back only when something changed; facultyData.json is
backed up first.  Run from the repository root:

    python -m scripts.merge_duplicate_faculty
"""

import logging
import sys

from scripts.utils import (
    ALL_FACULTY_PATH,
    FACULTY_DATA_PATH,
    config,
    read_id_list,
    read_snapshot,
    write_id_list,
    write_if_unchanged,
)

from curation.identity import FacultyNotFoundError, merge_duplicate_faculty

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    if not FACULTY_DATA_PATH.exists():
        logger.error(f"Faculty data not found: {FACULTY_DATA_PATH}")
        sys.exit(1)

    merges = config().get("identity_merges") or []
    if not merges:
        logger.info("No identity merges configured.")
        return

    data, mtime = read_snapshot(FACULTY_DATA_PATH)
    dropped: set[str] = set()
    for item in merges:
        keep_id, drop_id = item["keep"], item["drop"]
        try:
            result = merge_duplicate_faculty(
                data,
                keep_id,
                drop_id,
                first_name=item.get("firstName"),
                last_name=item.get("lastName"),
            )
        except FacultyNotFoundError as e:
            logger.warning(f"  {keep_id} <- {drop_id}: id {e} not present, skipping")
            continue
        except ValueError as e:
            logger.warning(f"  {keep_id} <- {drop_id}: {e}, skipping")
            continue
        dropped.add(drop_id)
        logger.info(
            f"  {keep_id} <- {drop_id}: repointed {result.repointed} participation(s), "
            f"dropped {result.removed_duplicates} duplicate(s)"
        )

    if not dropped:
        logger.info("Nothing merged; facultyData.json unchanged.")
        return

    write_if_unchanged(FACULTY_DATA_PATH, data, mtime)
    logger.info(f"Updated {FACULTY_DATA_PATH.name}")

    ids = read_id_list(ALL_FACULTY_PATH)
    if ids:
        write_id_list(ALL_FACULTY_PATH, [i for i in ids if i not in dropped])
        logger.info(f"Updated {ALL_FACULTY_PATH.name}")

    print(f"\nMerge complete: {len(dropped)} duplicate(s) removed, "
          f"{len(data['faculty'])} faculty, {len(data['participations'])} participations")


if __name__ == "__main__":
    main()
