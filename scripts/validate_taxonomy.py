#!/usr/bin/env python3
"""Validate the topic taxonomy and the term mappings that point into it.

Reports:
  - structural problems in scientificTopics.json (level-1 fields, level-2
    parents)
  - mappings whose standardizedId is not defined in the taxonomy, grouped
    by a guessed parent branch (advisory; the taxonomy is never modified)
  - mapping confidence distribution
  - how many faculty research-area terms have a mapping; the unmapped
    ones are written to data/taxonomy/unmappedTerms.json

Usage:
    python -m scripts.validate_taxonomy
    python -m scripts.validate_taxonomy --summary
"""

import argparse
import logging

from scripts.utils import (
    ENRICHED_PATH,
    MAPPINGS_PATH,
    TAXONOMY_PATH,
    UNMAPPED_PATH,
    read_json,
    write_json,
)

from curation.taxonomy import (
    confidence_counts,
    defined_topic_ids,
    find_missing_topics,
    group_missing_by_branch,
    referenced_topic_ids,
    term_coverage,
    terms_by_topic,
    validate_taxonomy_structure,
)

logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate taxonomy and term mappings.")
    parser.add_argument("--summary", action="store_true",
                        help="Counts only, no per-term detail.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    taxonomy = read_json(TAXONOMY_PATH)
    table = read_json(MAPPINGS_PATH)
    mappings = table.get("mappings", {})

    print("TAXONOMY VALIDATION")
    print("=" * 80)
    errors = validate_taxonomy_structure(taxonomy)

    topics = taxonomy.get("topics") or {}
    print(f"\nLevel 1 topics: {len(topics)}")
    if not args.summary:
        for topic in topics.values():
            print(f"  - {topic.get('label')} ({len(topic.get('children') or [])} children)")
    print(f"Level 2 topics: {len(taxonomy.get('level2') or {})}")
    print(f"Level 3 topics: {len(taxonomy.get('level3') or {})}")

    print("\n\nMAPPING VALIDATION")
    print("-" * 80)
    defined = defined_topic_ids(taxonomy)
    referenced = referenced_topic_ids(table)
    missing = find_missing_topics(table, taxonomy)
    print(f"Total mappings: {len(mappings)}")
    print(f"Valid mappings: {len(mappings) - len(missing)}")
    print(f"Invalid mappings: {len(missing)}")
    print(f"Topic ids referenced: {len(referenced)} ({len(referenced - defined)} undefined)")
    for item in missing:
        errors.append(f"Mapping for {item['term']!r} points to non-existent topic: {item['mappedTo']}")

    if missing:
        print("\nUndefined topics grouped by probable parent:")
        for branch, items in sorted(group_missing_by_branch(missing).items()):
            topic_terms = terms_by_topic(items)
            print(f"\n{branch}: {len(topic_terms)} topic(s)")
            if not args.summary:
                for topic_id, terms in topic_terms:
                    label = topic_id or "(no standardizedId)"
                    print(f"  - {label}  <- {', '.join(repr(t) for t in terms)}")

    print("\nMapping confidence:")
    for level, count in confidence_counts(mappings).items():
        print(f"  {level.capitalize()}: {count}")

    if ENRICHED_PATH.exists():
        print("\n\nFACULTY TERM COVERAGE")
        print("-" * 80)
        coverage = term_coverage(read_json(ENRICHED_PATH), table)
        print(f"Total unique faculty terms: {coverage['totalTerms']}")
        print(f"Mapped terms: {coverage['mappedTerms']}")
        print(f"Unmapped terms: {len(coverage['unmappedTerms'])}")
        print(f"Coverage: {coverage['coverage']}%")
        if not args.summary and coverage["unmappedTerms"]:
            print("\nTop 20 unmapped terms:")
            for term in coverage["unmappedTerms"][:20]:
                print(f"  - {term}")
        write_json(UNMAPPED_PATH, coverage)
        print(f"\nUnmapped terms written to: {UNMAPPED_PATH}")
    else:
        logger.warning(f"{ENRICHED_PATH} not found, skipping term coverage")

    print("\n\nVALIDATION SUMMARY")
    print("=" * 80)
    if not errors:
        print("No critical errors found.")
    else:
        print(f"{len(errors)} errors found:")
        for error in errors[:5]:
            print(f"   - {error}")
        if len(errors) > 5:
            print(f"   ... and {len(errors) - 5} more")


if __name__ == "__main__":
    main()
