"""Term-mapping tables and the research-topic taxonomy.

A term-mapping table associates free-text research-area phrases with
standardized topic ids::

    {"metadata": {"version": "1.1.0", "lastUpdated": "2024-03-01",
                  "totalMappings": 2,
                  "confidence": {"high": 1, "medium": 1, "low": 0}},
     "mappings": {"population genomics": {"standardizedId": "population-genomics",
                                          "confidence": "high", "notes": ""}}}

New mappings are authored in separate batch tables and merged into the
canonical one.  Merging never overwrites: a term already present keeps
its existing value and is reported as a conflict.
"""

from collections import Counter, defaultdict
from typing import Iterable

from .common import today_iso

MAPPING_CONFIDENCE = ("high", "medium", "low")

TAXONOMY_LEVELS = ("topics", "level2", "level3")

# Ordered (branch, substrings, exact ids).  First match wins.
BRANCH_RULES: list[tuple[str, tuple[str, ...], tuple[str, ...]]] = [
    ("genomics-omics", ("genom",), ()),
    ("evolutionary-biology", ("evolution",), ("speciation", "adaptation")),
    ("population-quantitative", ("genetic",), ()),
    ("technology-methods", ("sequenc", "analysis", "annotation"), ("genome-assembly",)),
    ("medical-clinical", ("cancer", "clinical"), ()),
    ("ecology-environmental", ("ecology",), ("biodiversity",)),
    ("microbiology-microbiome", ("microb",), ()),
    ("computational-sciences", ("data", "algorithm"), ()),
    ("molecular-cellular", (), ("systems-biology", "developmental-biology")),
    ("mathematical-statistical", ("statistic", "bayes", "inference"), ()),
]
UNKNOWN_BRANCH = "unknown"


# ── mapping tables ───────────────────────────────────────────────────


def confidence_counts(mappings: dict) -> dict[str, int]:
    counts = Counter(m.get("confidence") for m in mappings.values())
    return {level: counts.get(level, 0) for level in MAPPING_CONFIDENCE}


def recount_metadata(table: dict) -> dict:
    """Recompute ``totalMappings`` and confidence totals from ``mappings``."""
    metadata = table.setdefault("metadata", {})
    mappings = table.get("mappings", {})
    metadata["totalMappings"] = len(mappings)
    metadata["confidence"] = confidence_counts(mappings)
    return table


def bump_minor_version(version: str | None) -> str:
    """``1.1.0`` -> ``1.2.0``; anything unparseable restarts at ``1.0.0``."""
    parts = (version or "").split(".")
    try:
        major, minor = int(parts[0]), int(parts[1])
    except (ValueError, IndexError):
        return "1.0.0"
    return f"{major}.{minor + 1}.0"


def merge_mapping_tables(
    base: dict,
    additions: Iterable[dict],
    *,
    version: str | None = None,
    today: str | None = None,
) -> tuple[dict, list[str], int]:
    """Merge *additions* into a copy of *base*.

    Tables are applied in order; the first table to define a term owns it.
    A term defined again by a later table is left untouched and listed in
    the returned conflicts.  Aggregate counts in ``metadata`` are rebuilt
    from the merged mappings, never summed from the inputs.

    Returns ``(merged_table, conflicts, added_count)``.
    """
    base_meta = base.get("metadata", {})
    merged = {
        "metadata": {
            "version": version or bump_minor_version(base_meta.get("version")),
            "lastUpdated": today or today_iso(),
            "totalMappings": 0,
            "confidence": {level: 0 for level in MAPPING_CONFIDENCE},
        },
        "mappings": dict(base.get("mappings", {})),
    }

    conflicts: list[str] = []
    added = 0
    for table in additions:
        for term, mapping in table.get("mappings", {}).items():
            if term in merged["mappings"]:
                conflicts.append(term)
                continue
            merged["mappings"][term] = mapping
            added += 1

    recount_metadata(merged)
    return merged, conflicts, added


# ── taxonomy validation ──────────────────────────────────────────────


def defined_topic_ids(taxonomy: dict) -> set[str]:
    ids: set[str] = set()
    for level in TAXONOMY_LEVELS:
        ids.update((taxonomy.get(level) or {}).keys())
    return ids


def referenced_topic_ids(table: dict) -> set[str]:
    return {m.get("standardizedId") for m in table.get("mappings", {}).values()}


def find_missing_topics(table: dict, taxonomy: dict) -> list[dict]:
    """Mappings whose ``standardizedId`` is not defined in *taxonomy*."""
    existing = defined_topic_ids(taxonomy)
    missing = []
    for term, mapping in table.get("mappings", {}).items():
        topic_id = mapping.get("standardizedId")
        if topic_id not in existing:
            missing.append({
                "term": term,
                "mappedTo": topic_id,
                "confidence": mapping.get("confidence"),
                "notes": mapping.get("notes", ""),
            })
    return missing


def guess_parent_branch(topic_id: str) -> str:
    """Best guess at the level-1 branch an undefined topic id belongs to."""
    for branch, substrings, exact in BRANCH_RULES:
        if topic_id in exact or any(s in topic_id for s in substrings):
            return branch
    return UNKNOWN_BRANCH


def group_missing_by_branch(missing: list[dict]) -> dict[str, list[dict]]:
    groups: dict[str, list[dict]] = defaultdict(list)
    for item in missing:
        groups[guess_parent_branch(item["mappedTo"] or "")].append(item)
    return dict(groups)


def terms_by_topic(missing: list[dict]) -> list[tuple[str | None, list[str]]]:
    """``(topic_id, terms)`` pairs sorted by id; mappings with no id come first."""
    topics: dict[str | None, list[str]] = defaultdict(list)
    for item in missing:
        topics[item["mappedTo"]].append(item["term"])
    return sorted(topics.items(), key=lambda kv: (kv[0] is not None, kv[0] or ""))


def validate_taxonomy_structure(taxonomy: dict) -> list[str]:
    """Structural errors: incomplete level-1 topics, orphaned level-2 topics."""
    errors = []
    topics = taxonomy.get("topics") or {}
    for topic_id, topic in topics.items():
        if not topic.get("id") or not topic.get("label") or not topic.get("level"):
            errors.append(f"Level 1 topic {topic_id} missing required fields")
        if topic.get("level") != 1:
            errors.append(
                f"Topic {topic_id} in topics section has level {topic.get('level')}, expected 1"
            )
    for topic_id, topic in (taxonomy.get("level2") or {}).items():
        parent = topic.get("parentId")
        if not parent:
            errors.append(f"Level 2 topic {topic_id} missing parent")
        elif parent not in topics:
            errors.append(f"Level 2 topic {topic_id} has invalid parent: {parent}")
    return errors


def term_coverage(enriched: dict, table: dict) -> dict:
    """How many distinct faculty research-area terms have a mapping."""
    terms: set[str] = set()
    for entry in enriched.values():
        academic = (entry.get("enrichment") or {}).get("academic") or {}
        for term in academic.get("researchAreas") or []:
            terms.add(term.lower().strip())

    mapped = set(table.get("mappings", {}))
    unmapped = sorted(t for t in terms if t not in mapped)
    mapped_count = len(terms) - len(unmapped)
    coverage = f"{mapped_count / len(terms) * 100:.1f}" if terms else "0.0"
    return {
        "totalTerms": len(terms),
        "mappedTerms": mapped_count,
        "unmappedTerms": unmapped,
        "coverage": coverage,
    }
