#!/usr/bin/env python3
"""Convert workshop attendance rosters into facultyData.json.

Reads every roster listed under ``workshops`` in data/curation.yaml from
data/rosters/, derives faculty ids (after the configured name
corrections), merges faculty across workshops and writes:

  - data/facultyData.json   {faculty: [...], participations: [...]}
  - data/workshops.json     workshop catalog
  - data/all_faculty.txt    one faculty id per line

Run from the repository root:

    python -m scripts.convert_workshops
"""

import logging
import sys

from scripts.utils import (
    ALL_FACULTY_PATH,
    FACULTY_DATA_PATH,
    ROSTERS_DIR,
    WORKSHOPS_PATH,
    config,
    write_id_list,
    write_json,
)

from curation.attendance import merge_rosters, parse_roster, workshop_catalog

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    cfg = config()
    workshops = cfg.get("workshops") or {}
    corrections = cfg.get("name_corrections") or {}
    if not workshops:
        logger.error("No workshops configured in data/curation.yaml")
        sys.exit(1)

    results = []
    for workshop_id, spec in workshops.items():
        roster = spec.get("roster")
        if not roster:
            logger.info(f"{workshop_id}: no roster configured, skipping")
            continue
        path = ROSTERS_DIR / roster
        if not path.exists():
            logger.warning(f"{workshop_id}: roster {path} not found, skipping")
            continue
        with open(path, encoding="utf-8", newline="") as f:
            results.append(parse_roster(f.read(), workshop_id, corrections))

    data = merge_rosters(results)
    write_json(FACULTY_DATA_PATH, data, backup=True)
    write_json(WORKSHOPS_PATH, workshop_catalog(workshops))
    write_id_list(ALL_FACULTY_PATH, [f["id"] for f in data["faculty"]])

    print(f"Total unique faculty: {len(data['faculty'])}")
    print(f"Total participation records: {len(data['participations'])}")
    for result in results:
        print(f"{result.workshop_id:10s} {len(result.participations):5d} participations"
              f"  ({len(result.faculty)} faculty)")
    print("\nData conversion complete!")


if __name__ == "__main__":
    main()
