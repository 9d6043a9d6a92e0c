"""Tests for term-mapping merges and taxonomy validation."""

import sys
from pathlib import Path

# Ensure project root is on sys.path for imports
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from curation.taxonomy import (
    UNKNOWN_BRANCH,
    bump_minor_version,
    find_missing_topics,
    group_missing_by_branch,
    guess_parent_branch,
    merge_mapping_tables,
    term_coverage,
    terms_by_topic,
    validate_taxonomy_structure,
)


def _mapping(topic, confidence="high", notes=""):
    return {"standardizedId": topic, "confidence": confidence, "notes": notes}


BASE = {
    "metadata": {"version": "1.1.0", "lastUpdated": "2024-01-01", "totalMappings": 99},
    "mappings": {
        "population genomics": _mapping("population-genomics"),
        "phylogenetics": _mapping("phylogenetics", "medium"),
    },
}


# ---------------------------------------------------------------------------
# merge_mapping_tables
# ---------------------------------------------------------------------------

class TestMergeMappingTables:
    def test_existing_term_wins(self):
        additions = [{"mappings": {"phylogenetics": _mapping("phylogenomics", "low")}}]
        merged, conflicts, added = merge_mapping_tables(BASE, additions, today="2024-06-01")
        assert merged["mappings"]["phylogenetics"]["standardizedId"] == "phylogenetics"
        assert conflicts == ["phylogenetics"]
        assert added == 0

    def test_first_batch_owns_new_term(self):
        additions = [
            {"mappings": {"metagenomics": _mapping("metagenomics")}},
            {"mappings": {"metagenomics": _mapping("microbiome", "low")}},
        ]
        merged, conflicts, added = merge_mapping_tables(BASE, additions, today="2024-06-01")
        assert merged["mappings"]["metagenomics"]["standardizedId"] == "metagenomics"
        assert conflicts == ["metagenomics"]
        assert added == 1

    def test_counts_rebuilt(self):
        additions = [{"mappings": {
            "metagenomics": _mapping("metagenomics", "low"),
            "phylogenetics": _mapping("x"),
        }}]
        merged, _, _ = merge_mapping_tables(BASE, additions, today="2024-06-01")
        meta = merged["metadata"]
        assert meta["totalMappings"] == len(merged["mappings"]) == 3
        assert meta["confidence"] == {"high": 1, "medium": 1, "low": 1}
        assert sum(meta["confidence"].values()) == meta["totalMappings"]

    def test_version_and_date(self):
        merged, _, _ = merge_mapping_tables(BASE, [], today="2024-06-01")
        assert merged["metadata"]["version"] == "1.2.0"
        assert merged["metadata"]["lastUpdated"] == "2024-06-01"

    def test_explicit_version(self):
        merged, _, _ = merge_mapping_tables(BASE, [], version="2.0.0", today="2024-06-01")
        assert merged["metadata"]["version"] == "2.0.0"

    def test_base_not_modified(self):
        additions = [{"mappings": {"metagenomics": _mapping("metagenomics")}}]
        merge_mapping_tables(BASE, additions, today="2024-06-01")
        assert "metagenomics" not in BASE["mappings"]


class TestBumpMinorVersion:
    def test_bump(self):
        assert bump_minor_version("1.1.0") == "1.2.0"
        assert bump_minor_version("2.9") == "2.10.0"

    def test_unparseable(self):
        assert bump_minor_version(None) == "1.0.0"
        assert bump_minor_version("v1") == "1.0.0"


# ---------------------------------------------------------------------------
# taxonomy validation
# ---------------------------------------------------------------------------

TAXONOMY = {
    "topics": {
        "genomics-omics": {"id": "genomics-omics", "label": "Genomics", "level": 1},
    },
    "level2": {
        "population-genomics": {"id": "population-genomics", "parentId": "genomics-omics"},
    },
    "level3": {
        "phylogenetics": {"id": "phylogenetics", "parentId": "population-genomics"},
    },
}


class TestFindMissingTopics:
    def test_all_defined(self):
        assert find_missing_topics(BASE, TAXONOMY) == []

    def test_missing_reported(self):
        table = {"mappings": {"rna-seq": _mapping("rna-sequencing", "medium", "check")}}
        missing = find_missing_topics(table, TAXONOMY)
        assert missing == [{
            "term": "rna-seq",
            "mappedTo": "rna-sequencing",
            "confidence": "medium",
            "notes": "check",
        }]


class TestGuessParentBranch:
    def test_substring_rules(self):
        assert guess_parent_branch("comparative-genomics") == "genomics-omics"
        assert guess_parent_branch("molecular-evolution") == "evolutionary-biology"
        assert guess_parent_branch("rna-sequencing") == "technology-methods"
        assert guess_parent_branch("cancer-biology") == "medical-clinical"
        assert guess_parent_branch("bayesian-statistics") == "mathematical-statistical"

    def test_exact_rules(self):
        assert guess_parent_branch("speciation") == "evolutionary-biology"
        assert guess_parent_branch("biodiversity") == "ecology-environmental"
        assert guess_parent_branch("systems-biology") == "molecular-cellular"

    def test_rule_order(self):
        # contains both "genom" and "sequenc"; the earlier rule wins
        assert guess_parent_branch("genome-sequencing") == "genomics-omics"

    def test_unknown(self):
        assert guess_parent_branch("immunology") == UNKNOWN_BRANCH

    def test_terms_by_topic_without_id(self):
        missing = [
            {"term": "immunogenetics", "mappedTo": "immunology"},
            {"term": "misc", "mappedTo": None},
            {"term": "host immunity", "mappedTo": "immunology"},
            {"term": "other", "mappedTo": "allergy"},
        ]
        assert terms_by_topic(missing) == [
            (None, ["misc"]),
            ("allergy", ["other"]),
            ("immunology", ["immunogenetics", "host immunity"]),
        ]

    def test_grouping(self):
        groups = group_missing_by_branch([
            {"mappedTo": "speciation"}, {"mappedTo": "immunology"}, {"mappedTo": None},
        ])
        assert len(groups["evolutionary-biology"]) == 1
        assert len(groups[UNKNOWN_BRANCH]) == 2


class TestValidateTaxonomyStructure:
    def test_valid(self):
        assert validate_taxonomy_structure(TAXONOMY) == []

    def test_missing_fields_and_wrong_level(self):
        errors = validate_taxonomy_structure({"topics": {"x": {"id": "x", "level": 2}}})
        assert "Level 1 topic x missing required fields" in errors
        assert "Topic x in topics section has level 2, expected 1" in errors

    def test_orphaned_level2(self):
        errors = validate_taxonomy_structure({
            "topics": {},
            "level2": {"a": {"id": "a"}, "b": {"id": "b", "parentId": "nope"}},
        })
        assert errors == [
            "Level 2 topic a missing parent",
            "Level 2 topic b has invalid parent: nope",
        ]


class TestTermCoverage:
    def test_coverage(self):
        enriched = {
            "a": {"enrichment": {"academic": {"researchAreas": ["Phylogenetics", "ecology"]}}},
            "b": {"enrichment": {"academic": {"researchAreas": [" phylogenetics "]}}},
            "c": {"enrichment": {"academic": {}}},
        }
        result = term_coverage(enriched, BASE)
        assert result["totalTerms"] == 2
        assert result["mappedTerms"] == 1
        assert result["unmappedTerms"] == ["ecology"]
        assert result["coverage"] == "50.0"

    def test_no_terms(self):
        assert term_coverage({}, BASE)["coverage"] == "0.0"
