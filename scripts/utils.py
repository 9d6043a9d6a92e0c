"""Shared utilities for scripts.

Common I/O helpers (pretty-printed JSON read/write with backups, plain-text
id lists), optimistic snapshot writes, configuration loading, and
project-root bootstrapping.
"""

import json
import os
import shutil
import sys
from datetime import datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent

# Ensure project root is importable (idempotent).
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from curation.common import load_config

# Standard locations
DATA_DIR = ROOT / "data"
CONFIG_PATH = DATA_DIR / "curation.yaml"
ROSTERS_DIR = DATA_DIR / "rosters"
TAXONOMY_DIR = DATA_DIR / "taxonomy"
UPDATES_DIR = DATA_DIR / "updates"
BACKUP_DIR = DATA_DIR / "backups"

FACULTY_DATA_PATH = DATA_DIR / "facultyData.json"
WORKSHOPS_PATH = DATA_DIR / "workshops.json"
ENRICHED_PATH = DATA_DIR / "facultyEnriched.json"
ALL_FACULTY_PATH = DATA_DIR / "all_faculty.txt"
ENRICHED_LIST_PATH = DATA_DIR / "enriched_faculty.txt"
NEEDS_ENRICHMENT_PATH = DATA_DIR / "needs_enrichment.txt"
TAXONOMY_PATH = TAXONOMY_DIR / "scientificTopics.json"
MAPPINGS_PATH = TAXONOMY_DIR / "termMappings.json"
UNMAPPED_PATH = TAXONOMY_DIR / "unmappedTerms.json"


class StaleSnapshotError(RuntimeError):
    """Raised when a file changed on disk between read and write."""


def config() -> dict:
    """Load ``data/curation.yaml`` (empty dict when absent)."""
    return load_config(CONFIG_PATH)


def read_json(path: Path):
    """Read a UTF-8 JSON file.  Parse errors propagate to the caller."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(
    path: Path,
    data,
    *,
    backup: bool = False,
    atomic: bool = True,
) -> Path | None:
    """Write *data* as pretty-printed JSON.

    When *backup* is True and *path* already exists, a timestamped copy is
    made first (see :func:`backup_file`); its path is returned.

    When *atomic* is True the file is written to a temporary neighbour
    first, then renamed into place so a crash mid-write never leaves a
    half-written file.
    """
    backup_path = backup_file(path) if backup and path.exists() else None
    path.parent.mkdir(parents=True, exist_ok=True)
    target = path.with_suffix(path.suffix + ".tmp") if atomic else path
    with open(target, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
        f.write("\n")
    if atomic:
        target.replace(path)
    return backup_path


def backup_file(path: Path, *, tag: str | None = None, backup_dir: Path | None = None) -> Path:
    """Copy *path* aside before it is overwritten.

    The copy lands in ``data/backups/`` (or *backup_dir*) as
    ``<stem>.<tag><suffix>``; *tag* defaults to a ``YYYYmmdd-HHMMSS``
    timestamp.
    """
    tag = tag or datetime.now().strftime("%Y%m%d-%H%M%S")
    directory = backup_dir or BACKUP_DIR
    directory.mkdir(parents=True, exist_ok=True)
    dest = directory / f"{path.stem}.{tag}{path.suffix}"
    shutil.copy2(path, dest)
    return dest


def read_id_list(path: Path) -> list[str]:
    """Read a plain-text list with one id per line (blank lines dropped)."""
    if not path.exists():
        return []
    with open(path, encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


def write_id_list(path: Path, ids: list[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for fid in ids:
            f.write(fid + "\n")


def read_snapshot(path: Path) -> tuple[object, int]:
    """Read JSON together with the file's mtime (ns) for a later
    :func:`write_if_unchanged`."""
    mtime = os.stat(path).st_mtime_ns
    return read_json(path), mtime


def write_if_unchanged(path: Path, data, mtime_ns: int | None, *, backup: bool = True) -> Path | None:
    """Write *data* only if *path* was not modified since it was read.

    *mtime_ns* is None when the file did not exist at read time; it must
    still be absent.

    On a mismatch nothing is written and
    :class:`StaleSnapshotError` is raised; re-run the script.
    """
    if path.exists() and os.stat(path).st_mtime_ns != mtime_ns:
        raise StaleSnapshotError(f"{path} changed on disk since it was read; re-run")
    return write_json(path, data, backup=backup)
