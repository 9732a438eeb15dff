# course_engine/tests/test_workbook_reader.py
"""
Tests for decoding the authoring workbook
"""
import io
import re
import zipfile
from datetime import date, datetime, time

import pytest

from course_engine.errors import WorkbookReadError
from course_engine.tests.conftest import (
    OPEN_RESPONSE_HEADER,
    PROBLEM_HEADER,
    STRUCTURE_HEADER,
    problem_row,
)
from course_engine.utils import format_edx_date
from course_engine.workbook_reader import cell_value, normalize_header, parse_options, read_workbook


class TestValidWorkbook:
    """Tests against a workbook with no errors"""

    def test_no_errors(self, workbook_bytes):
        """A complete workbook should decode without errors"""
        result = read_workbook(workbook_bytes)
        assert result.errors == []
        assert result.is_valid

    def test_reads_from_path(self, workbook_file):
        """Should accept a file path as well as bytes"""
        result = read_workbook(workbook_file)
        assert result.is_valid
        assert len(result.data.structure) == 4

    def test_course_info(self, workbook_bytes):
        info = read_workbook(workbook_bytes).data.info
        assert info.course_name == "Sample Course"
        assert info.organization == "SampleX"
        assert info.course_id == "S101"
        assert info.run == "2026_T1"
        assert info.language == "en"
        assert info.start_date == "2026-01-15"
        assert info.self_paced is True

    def test_structure_rows_in_order(self, workbook_bytes):
        """Should keep structure rows in sheet order"""
        structure = read_workbook(workbook_bytes).data.structure
        assert [(r.block_type, r.block_id) for r in structure] == [
            ("text", "intro"), ("video", "vid1"), ("problem", "p1"), ("openresponse", "ora1"),
        ]

    def test_block_defaults(self, workbook_bytes):
        """Blank optional cells should take their defaults"""
        data = read_workbook(workbook_bytes).data
        video = data.video_blocks["vid1"]
        assert video.start_time == "00:00:00"
        assert video.end_time == "00:00:00"
        assert data.problem_blocks["p1"].title == "p1"
        assert data.problem_blocks["p1"].show_answer == "attempted"
        assert data.text_blocks["intro"].content == "Hello\n\nWorld"

    def test_problem_hints_follow_choices(self, workbook_bytes):
        problem = read_workbook(workbook_bytes).data.problem_blocks["p1"]
        assert [(c.text, c.correct, c.hint) for c in problem.choices] == [
            ("A", False, "no"), ("B", True, "yes"), ("C", False, "no"),
        ]

    def test_sheet_names_case_insensitive(self, sheets, make_workbook):
        """Sheet names should match ignoring case and padding"""
        renamed = {f"  {name.upper()} ": rows for name, rows in sheets.items()}
        assert read_workbook(make_workbook(renamed)).is_valid

    def test_blank_rows_ignored(self, sheets, make_workbook):
        """Fully blank rows should be skipped"""
        sheets["Structure"].insert(2, ["", None, "", "", ""])
        result = read_workbook(make_workbook(sheets))
        assert result.is_valid
        assert len(result.data.structure) == 4

    def test_summary(self, workbook_bytes):
        assert "valid" in read_workbook(workbook_bytes).summary()


class TestErrors:
    """Tests for accumulated validation errors"""

    def test_missing_required_sheets(self, make_workbook):
        """Should report both required sheets"""
        result = read_workbook(make_workbook({"Other": [["x"]]}))
        assert result.errors == ['Missing sheet: "Course Info"', 'Missing sheet: "Structure"']
        assert not result.is_valid

    def test_missing_course_info_keys(self, sheets, make_workbook):
        """Should report each missing Course Info key"""
        sheets["Course Info"] = [["Field", "Value"], ["Course Name", "Only Name"]]
        errors = read_workbook(make_workbook(sheets)).errors
        assert errors == [
            'Course Info: "Organization" is required.',
            'Course Info: "Course ID" is required.',
            'Course Info: "Run" is required.',
        ]

    def test_undefined_block_reference(self, sheets, make_workbook):
        """One error for the dangling reference and no block added"""
        sheets["Structure"].append(["Chapter 1", "Lesson 1", "Unit A", "text", "ghost"])
        result = read_workbook(make_workbook(sheets))
        matching = [e for e in result.errors if '"ghost"' in e]
        assert matching == [
            'Structure references text block "ghost" but it\'s not defined in "Text Blocks" sheet.'
        ]
        assert "ghost" not in result.data.text_blocks

    def test_open_response_reference_label(self, sheets, make_workbook):
        sheets["Open Response"] = [OPEN_RESPONSE_HEADER]
        errors = read_workbook(make_workbook(sheets)).errors
        assert errors == [
            'Structure references open response block "ora1" but it\'s not defined in "Open Response" sheet.'
        ]

    def test_invalid_block_type(self, sheets, make_workbook):
        """Should name the bad type and the allowed ones"""
        sheets["Structure"].append(["Ch", "Seq", "V", "Quiz", "q"])
        errors = read_workbook(make_workbook(sheets)).errors
        assert errors == [
            'Structure row 6: Invalid block_type "quiz". Must be one of: text, video, problem, openresponse'
        ]

    def test_missing_structure_field(self, sheets, make_workbook):
        """Should report the first empty structure field"""
        sheets["Structure"].append(["Ch", "", "V", "text", "intro"])
        errors = read_workbook(make_workbook(sheets)).errors
        assert errors == ['Structure row 6: "sequential" is required.']

    def test_block_type_is_lowercased(self, sheets, make_workbook):
        sheets["Structure"][1][3] = "TEXT"
        result = read_workbook(make_workbook(sheets))
        assert result.is_valid
        assert result.data.structure[0].block_type == "text"

    def test_content_row_without_block_id(self, sheets, make_workbook):
        """Content rows need a block_id"""
        sheets["Videos"].append(["", "Untitled", "xyz", "", "", ""])
        errors = read_workbook(make_workbook(sheets)).errors
        assert errors == ['Videos row 3: "block_id" is required.']

    def test_unopenable_workbook_raises(self):
        """Non-xlsx input should raise WorkbookReadError"""
        with pytest.raises(WorkbookReadError):
            read_workbook(b"not an xlsx file")


class TestProblems:
    """Tests for the Problems sheet"""

    def test_correct_letters_b_and_d(self, sheets, make_workbook):
        """Should mark every listed letter correct"""
        sheets["Problems"][1] = problem_row("p1", "Pick two", ["1", "2", "3", "4", "5", "6"], "B,D")
        choices = read_workbook(make_workbook(sheets)).data.problem_blocks["p1"].choices
        assert [c.correct for c in choices] == [False, True, False, True, False, False]

    def test_correct_separators_and_case(self, sheets, make_workbook):
        sheets["Problems"][1] = problem_row("p1", "Q", ["1", "2", "3"], "a; c")
        choices = read_workbook(make_workbook(sheets)).data.problem_blocks["p1"].choices
        assert [c.correct for c in choices] == [True, False, True]

    def test_empty_choice_columns_skipped(self, sheets, make_workbook):
        """Letters refer to columns, so a gap shifts nothing"""
        sheets["Problems"][1] = problem_row("p1", "Q", ["1", "", "3"], "C")
        choices = read_workbook(make_workbook(sheets)).data.problem_blocks["p1"].choices
        assert [(c.text, c.correct) for c in choices] == [("1", False), ("3", True)]

    def test_too_few_choices(self, sheets, make_workbook):
        """Problems need at least two choices"""
        sheets["Problems"][1] = problem_row("p1", "Q", ["only"], "A")
        result = read_workbook(make_workbook(sheets))
        assert "Problems row 2: At least 2 choices are required." in result.errors
        assert "p1" not in result.data.problem_blocks

    def test_no_correct_answer(self, sheets, make_workbook):
        """Problems need a correct answer"""
        sheets["Problems"][1] = problem_row("p1", "Q", ["x", "y"], "")
        result = read_workbook(make_workbook(sheets))
        assert "Problems row 2: No correct answer specified." in result.errors
        assert "p1" not in result.data.problem_blocks

    def test_numeric_cells(self, sheets, make_workbook):
        """Integral floats and ints read back as plain integer text"""
        sheets["Problems"][1] = problem_row("p1", "2 + 2?", [3, 4.0, 5.5], "B")
        choices = read_workbook(make_workbook(sheets)).data.problem_blocks["p1"].choices
        assert [c.text for c in choices] == ["3", "4", "5.5"]


class TestOpenResponse:
    """Tests for the Open Response sheet"""

    def test_criteria_parsed_in_order(self, workbook_bytes):
        block = read_workbook(workbook_bytes).data.open_response_blocks["ora1"]
        assert len(block.criteria) == 1
        assert block.criteria[0].name == "Depth"
        assert [(o.label, o.points) for o in block.criteria[0].options] == [
            ("Superficial", 0), ("Adequate", 1),
        ]

    def test_criteria_stop_at_incomplete_pair(self, sheets, make_workbook):
        sheets["Open Response"][1] = [
            "ora1", "R", "P", "Depth", "Low=0;High=1", "Clarity", "", "self",
        ]
        block = read_workbook(make_workbook(sheets)).data.open_response_blocks["ora1"]
        assert [c.name for c in block.criteria] == ["Depth"]

    def test_assessment_type_lowercased(self, sheets, make_workbook):
        sheets["Open Response"][1][-1] = "PEER"
        block = read_workbook(make_workbook(sheets)).data.open_response_blocks["ora1"]
        assert block.assessment_type == "peer"

    def test_assessment_type_default(self, sheets, make_workbook):
        sheets["Open Response"][1][-1] = ""
        block = read_workbook(make_workbook(sheets)).data.open_response_blocks["ora1"]
        assert block.assessment_type == "self"

    def test_invalid_assessment_type(self, sheets, make_workbook):
        """Should reject the row and name the allowed types"""
        sheets["Open Response"][1][-1] = "robot"
        result = read_workbook(make_workbook(sheets))
        assert result.errors[0] == (
            'Open Response row 2: Invalid assessment_type "robot". Must be one of: self, peer, staff'
        )
        assert "ora1" not in result.data.open_response_blocks


class TestHelpers:
    """Tests for cell and option helpers"""

    def test_cell_value_conversions(self):
        assert cell_value(None) == ""
        assert cell_value("  padded ") == "padded"
        assert cell_value(7.0) == "7"
        assert cell_value(7.25) == "7.25"
        assert cell_value(True) == "true"
        assert cell_value(datetime(2026, 1, 15, 9, 30)) == "2026-01-15T09:30:00"
        assert cell_value(datetime(2026, 1, 15)) == "2026-01-15"
        assert cell_value(date(2026, 1, 15)) == "2026-01-15"
        assert cell_value(time(0, 5, 0)) == "00:05:00"

    def test_normalize_header(self):
        assert normalize_header(" Block  ID ") == "block_id"
        assert normalize_header("Question Text") == "question_text"

    def test_parse_options(self):
        options = parse_options("Poor=0; Fair=1 ;;Good=2pts;Bare")
        assert [(o.label, o.points) for o in options] == [
            ("Poor", 0), ("Fair", 1), ("Good", 2), ("Bare", 0),
        ]

    def test_parse_options_label_with_equals(self):
        """The label is everything before the last '='"""
        options = parse_options("a=b=3")
        assert [(o.label, o.points) for o in options] == [("a=b", 3)]

    def test_duplicate_block_id_last_wins(self, sheets, make_workbook, capsys):
        """The later row should replace the earlier one with a warning"""
        sheets["Text Blocks"].append(["intro", "Second", "Replaced"])
        result = read_workbook(make_workbook(sheets))
        assert result.is_valid
        assert result.data.text_blocks["intro"].title == "Second"
        assert "[workbook:warn]" in capsys.readouterr().out


class TestCellSources:
    """Tests for workbooks written by other tools"""

    def test_start_time_kept_from_date_cell(self, sheets, make_workbook):
        """A datetime cell with a time of day should keep that time"""
        sheets["Course Info"][6] = ["Start Date", datetime(2026, 1, 15, 9, 30)]
        result = read_workbook(make_workbook(sheets))
        assert result.data.info.start_date == "2026-01-15T09:30:00"
        assert format_edx_date(result.data.info.start_date) == "2026-01-15T09:30:00Z"

    def test_understated_dimension(self, workbook_bytes):
        """Columns beyond a wrong stored <dimension> should still be read"""
        clipped = io.BytesIO()
        with zipfile.ZipFile(io.BytesIO(workbook_bytes)) as src, \
                zipfile.ZipFile(clipped, "w") as dst:
            for item in src.infolist():
                data = src.read(item.filename)
                if item.filename.startswith("xl/worksheets/"):
                    data = re.sub(rb'<dimension ref="[^"]*"', b'<dimension ref="A1:B2"', data)
                dst.writestr(item, data)

        result = read_workbook(clipped.getvalue())
        assert result.is_valid
        assert result.data == read_workbook(workbook_bytes).data
