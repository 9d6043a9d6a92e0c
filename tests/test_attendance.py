"""Tests for roster parsing and cross-workshop merging."""

import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path for imports
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from curation.attendance import (
    RosterResult,
    correct_name,
    derive_faculty_id,
    find_year_columns,
    merge_rosters,
    parse_roster,
    workshop_catalog,
)

HEADER = "Last Name,First Name,Notes,2018,2019,2020,2021\n"
CORRECTIONS = {"Handely": "Handley"}


# ---------------------------------------------------------------------------
# derive_faculty_id
# ---------------------------------------------------------------------------

class TestDeriveFacultyId:
    def test_simple(self):
        assert derive_faculty_id("Handley", "Jane") == "handley-jane"

    def test_whitespace_becomes_hyphen(self):
        assert derive_faculty_id("Van Dyke", "Mary Ann") == "van-dyke-mary-ann"

    def test_accents_dropped(self):
        assert derive_faculty_id("Fernández", "Rosa") == "fernndez-rosa"

    def test_punctuation_dropped(self):
        assert derive_faculty_id("O'Brien", "Julia M.I.") == "obrien-julia-mi"

    def test_hyphenated_name_kept(self):
        assert derive_faculty_id("Marcet-Houben", "Marina") == "marcet-houben-marina"


class TestCorrectName:
    def test_known_typo(self):
        assert correct_name("Handely", CORRECTIONS) == "Handley"

    def test_exact_match_only(self):
        assert correct_name("handely", CORRECTIONS) == "handely"

    def test_no_table(self):
        assert correct_name("Handely", None) == "Handely"


class TestFindYearColumns:
    def test_year_columns(self):
        headers = ["Last", "First", "2001", "2050", "2098"]
        assert find_year_columns(headers) == [(2, 2001), (3, 2050), (4, 2098)]

    def test_out_of_range_rejected(self):
        assert find_year_columns(["2000", "2099", "1999", "2100"]) == []

    def test_annotated_year_header(self):
        headers = ["Last", "First", "2019", "2020 (cancelled)", '"2021"']
        assert find_year_columns(headers) == [(2, 2019), (3, 2020), (4, 2021)]

    def test_annotated_header_keeps_participations(self):
        text = "Last Name,First Name,2019,2020 (cancelled)\nSmith,John,,x\n"
        result = parse_roster(text, "wog")
        assert [p["year"] for p in result.participations] == [2020]

    def test_non_numeric_rejected(self):
        assert find_year_columns(["Last", "First", "Year 2019", ""]) == []


# ---------------------------------------------------------------------------
# parse_roster
# ---------------------------------------------------------------------------

class TestParseRoster:
    def test_corrected_row(self):
        text = HEADER + '"Handely","Jane",,,"x",,"x"\n'
        result = parse_roster(text, "wog", CORRECTIONS)
        assert result.faculty == [
            {"id": "handley-jane", "firstName": "Jane", "lastName": "Handley"},
        ]
        assert result.participations == [
            {"facultyId": "handley-jane", "workshopId": "wog", "year": 2019, "role": "faculty"},
            {"facultyId": "handley-jane", "workshopId": "wog", "year": 2021, "role": "faculty"},
        ]

    def test_rows_missing_names_skipped(self):
        text = HEADER + ',Jane,,x,x,x,x\nSmith,,,x,x,x,x\n,,,,,,\n'
        result = parse_roster(text, "wog")
        assert result.faculty == []
        assert result.participations == []

    def test_marker_case_and_whitespace(self):
        text = HEADER + "Smith,John,, X ,x,,\n"
        result = parse_roster(text, "wpsg")
        assert [p["year"] for p in result.participations] == [2018, 2019]

    def test_other_markers_ignored(self):
        text = HEADER + "Smith,John,x,yes,1,TRUE,\n"
        result = parse_roster(text, "wpsg")
        assert result.participations == []

    def test_short_row(self):
        text = HEADER + "Smith,John,,x\n"
        result = parse_roster(text, "wog")
        assert [p["year"] for p in result.participations] == [2018]

    def test_repeated_person_collapses(self):
        text = HEADER + "Smith,John,,x,,,\nSmith,John,,,,x,\n"
        result = parse_roster(text, "wog")
        assert len(result.faculty) == 1
        assert [p["year"] for p in result.participations] == [2018, 2020]

    def test_names_trimmed(self):
        text = HEADER + '  Smith  , " John " ,,x,,,\n'
        result = parse_roster(text, "wog")
        assert result.faculty[0] == {"id": "smith-john", "firstName": "John", "lastName": "Smith"}

    def test_accepts_row_lists(self):
        rows = [["Last", "First", "2019"], ["Smith", "John", "x"]]
        result = parse_roster(rows, "wog")
        assert result.participations[0]["year"] == 2019

    def test_empty_input(self):
        result = parse_roster("", "wog")
        assert result.faculty == [] and result.participations == []


# ---------------------------------------------------------------------------
# merge_rosters
# ---------------------------------------------------------------------------

class TestMergeRosters:
    def _roster(self, workshop_id, text):
        return parse_roster(HEADER + text, workshop_id, CORRECTIONS)

    def test_same_id_merged_once(self):
        wog = self._roster("wog", "Smith,John,,x,,,\n")
        wpsg = self._roster("wpsg", "Smith,John,,,x,,\n")
        data = merge_rosters([wog, wpsg])
        assert [f["id"] for f in data["faculty"]] == ["smith-john"]
        assert len(data["participations"]) == 2

    def test_participations_sorted_by_id_then_year(self):
        wog = self._roster("wog", "Zhu,Li,,,,,x\nAdams,Amy,,,,x,\n")
        wpsg = self._roster("wpsg", "Zhu,Li,,x,,,\n")
        data = merge_rosters([wog, wpsg])
        keys = [(p["facultyId"], p["year"]) for p in data["participations"]]
        assert keys == [("adams-amy", 2020), ("zhu-li", 2018), ("zhu-li", 2021)]

    def test_faculty_sorted_by_name(self):
        wog = self._roster("wog", "Zhu,Li,,x,,,\nAhrén,Dag,,x,,,\nAdams,Amy,,x,,,\n")
        data = merge_rosters([wog])
        assert [f["lastName"] for f in data["faculty"]] == ["Adams", "Ahrén", "Zhu"]

    def test_duplicate_triples_dropped(self):
        a = self._roster("wog", "Smith,John,,x,,,\n")
        b = self._roster("wog", "Smith,John,,x,,,\n")
        data = merge_rosters([a, b])
        assert len(data["participations"]) == 1

    def test_later_source_wins_and_is_logged(self, caplog):
        a = RosterResult("wog", faculty=[{"id": "smith-john", "firstName": "John", "lastName": "Smith"}])
        b = RosterResult("wpsg", faculty=[{"id": "smith-john", "firstName": "JOHN", "lastName": "Smith"}])
        with caplog.at_level(logging.WARNING):
            data = merge_rosters([a, b])
        assert data["faculty"][0]["firstName"] == "JOHN"
        assert "Name conflict for smith-john" in caplog.text

    def test_merge_is_idempotent(self):
        wog = self._roster("wog", "Smith,John,,x,,,\n")
        once = merge_rosters([wog])
        twice = merge_rosters([wog, wog])
        assert once == twice


class TestWorkshopCatalog:
    def test_roster_field_not_published(self):
        catalog = workshop_catalog({
            "wog": {"name": "Workshop on Genomics", "active": True, "roster": "wog.csv"},
        })
        assert catalog == {"wog": {"id": "wog", "name": "Workshop on Genomics", "active": True}}
