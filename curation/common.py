"""Common utilities shared across curation modules."""

import logging
import unicodedata
from datetime import datetime, timezone
from pathlib import Path

import yaml

# prefer C-accelerated YAML loader when available
try:
    _yaml_Loader = yaml.CSafeLoader
except AttributeError:
    _yaml_Loader = yaml.SafeLoader

logger = logging.getLogger(__name__)

ROLE_FACULTY = "faculty"


def load_config(path: Path) -> dict:
    """Load a YAML configuration file.  A missing file yields ``{}``."""
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.load(f, Loader=_yaml_Loader) or {}
    except FileNotFoundError:
        logger.warning(f"Config file {path} not found, using empty config")
        return {}


def normalize_text(text: str) -> str:
    """Fold accented Latin characters to ASCII (``Fernández`` -> ``Fernandez``)."""
    nfkd = unicodedata.normalize("NFKD", text)
    return nfkd.encode("ascii", "ignore").decode("ascii")


def name_sort_key(person: dict) -> tuple[str, str, str, str]:
    """Sort key for faculty lists: last name, then first name.

    Accents and case are ignored for the primary comparison so that
    ``Ahrén`` sorts next to ``Ahren``; the raw strings break ties.
    """
    last = person.get("lastName", "")
    first = person.get("firstName", "")
    return (
        normalize_text(last).casefold(),
        normalize_text(first).casefold(),
        last,
        first,
    )


def participation_sort_key(p: dict) -> tuple[str, int]:
    return (p["facultyId"], p["year"])


def full_name(person: dict) -> str:
    return f"{person.get('firstName', '')} {person.get('lastName', '')}".strip()


def now_iso() -> str:
    """UTC timestamp in the ``2024-05-01T12:00:00.000Z`` form used on disk."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def today_iso() -> str:
    return datetime.now().date().isoformat()
