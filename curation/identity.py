"""Faculty identity repair.

Id derivation is lossy: ``Fernández`` and ``Fernandez`` produce two ids for
one person.  These helpers apply fixups a human has already identified;
they do not look for duplicates on their own.
"""

import logging
from dataclasses import dataclass
from typing import Mapping

from .attendance import dedupe_participations
from .common import full_name, name_sort_key, participation_sort_key

logger = logging.getLogger(__name__)


class FacultyNotFoundError(KeyError):
    """A configured faculty id does not exist in the faculty list."""


@dataclass
class MergeResult:
    keep_id: str
    drop_id: str
    repointed: int
    removed_duplicates: int


def _find(data: dict, faculty_id: str) -> dict:
    for person in data["faculty"]:
        if person["id"] == faculty_id:
            return person
    raise FacultyNotFoundError(faculty_id)


def merge_duplicate_faculty(
    data: dict,
    keep_id: str,
    drop_id: str,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
) -> MergeResult:
    """Fold faculty *drop_id* into *keep_id* in a ``facultyData`` document.

    The kept entry optionally gets corrected display names, every
    participation pointing at *drop_id* is repointed, the obsolete entry is
    removed and participations that now repeat a
    ``(facultyId, workshopId, year)`` triple are dropped.  Both lists are
    re-sorted.  *data* is modified in place.

    Raises ValueError when *keep_id* and *drop_id* are the same id.
    """
    if keep_id == drop_id:
        raise ValueError(f"cannot merge {keep_id} into itself")
    keep = _find(data, keep_id)
    drop = _find(data, drop_id)
    logger.info(f"Merging {full_name(drop)} ({drop_id}) into {full_name(keep)} ({keep_id})")

    if first_name:
        keep["firstName"] = first_name
    if last_name:
        keep["lastName"] = last_name

    data["faculty"] = [f for f in data["faculty"] if f["id"] != drop_id]

    repointed = 0
    for p in data["participations"]:
        if p["facultyId"] == drop_id:
            p["facultyId"] = keep_id
            repointed += 1

    before = len(data["participations"])
    data["participations"] = sorted(
        dedupe_participations(data["participations"]), key=participation_sort_key
    )
    data["faculty"].sort(key=name_sort_key)

    return MergeResult(
        keep_id=keep_id,
        drop_id=drop_id,
        repointed=repointed,
        removed_duplicates=before - len(data["participations"]),
    )


def apply_name_fixes(
    data: dict,
    fixes: Mapping[str, Mapping[str, str]],
) -> list[tuple[str, str, str]]:
    """Overwrite display names for the listed ids; ids themselves stay put.

    Returns ``(id, old_name, new_name)`` for every entry that changed.
    Ids absent from *data* are skipped.
    """
    by_id = {f["id"]: f for f in data["faculty"]}
    changed = []
    for faculty_id, update in fixes.items():
        person = by_id.get(faculty_id)
        if person is None:
            logger.warning(f"Name fix for unknown faculty id {faculty_id}, skipping")
            continue
        old = full_name(person)
        person["firstName"] = update.get("firstName", person["firstName"])
        person["lastName"] = update.get("lastName", person["lastName"])
        new = full_name(person)
        if new != old:
            changed.append((faculty_id, old, new))
    if changed:
        data["faculty"].sort(key=name_sort_key)
    return changed
