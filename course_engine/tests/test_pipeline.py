# course_engine/tests/test_pipeline.py
"""
Tests for the build/import pipeline and its reporting helpers
"""
import gzip
import io
import tarfile

import pytest

from course_engine import icons
from course_engine.errors import ArchiveReadError, ExportBlockedError
from course_engine.model import CourseInfo, StructureRow
from course_engine.pipeline import (
    ARCHIVE_SUFFIX,
    WORKBOOK_SUFFIX,
    build_archive,
    build_from_workbook,
    course_stats,
    export_filename,
    import_archive,
    render_outline,
)
from course_engine.tests.conftest import CountingRandom


class TestBuildArchive:
    """Tests for build_archive"""

    def test_blocked_by_errors(self, sample_course):
        """Should refuse to export while errors are outstanding"""
        with pytest.raises(ExportBlockedError) as exc_info:
            build_archive(sample_course, errors=["first problem", "second problem"])
        assert exc_info.value.errors == ["first problem", "second problem"]
        assert "Export blocked by 2 validation error(s)" in str(exc_info.value)
        assert "  - first problem" in str(exc_info.value)

    def test_entries_and_hierarchy(self, sample_course, fixed_random):
        built = build_archive(sample_course, random_bytes=fixed_random)
        assert "course.xml" in built.entries
        assert [ch.name for ch in built.hierarchy] == ["Week 1", "Week 2"]
        assert built.hierarchy[0].id == "week_1_01010101"

    def test_custom_root(self, sample_course, fixed_random):
        """Should nest every entry under the requested root directory"""
        built = build_archive(sample_course, root="export", random_bytes=fixed_random)
        with tarfile.open(fileobj=io.BytesIO(built.archive), mode="r:gz") as tar:
            names = tar.getnames()
        assert "export/course.xml" in names
        assert all(name == "export" or name.startswith("export/") for name in names)

    def test_deterministic_with_fixed_inputs(self, sample_course):
        first = build_archive(sample_course, random_bytes=CountingRandom(), mtime=1700000000)
        second = build_archive(sample_course, random_bytes=CountingRandom(), mtime=1700000000)
        assert first.archive == second.archive

    def test_prints_summary(self, sample_course, fixed_random, capsys):
        built = build_archive(sample_course, random_bytes=fixed_random)
        out = capsys.readouterr().out
        assert f"[archive] Packed {len(built.entries)} files ({len(built.archive)} bytes)" in out


class TestBuildFromWorkbook:
    """Tests for build_from_workbook"""

    def test_valid_workbook(self, workbook_bytes, fixed_random):
        result, built = build_from_workbook(workbook_bytes, random_bytes=fixed_random)
        assert result.is_valid
        assert built is not None
        assert "problem/p1.xml" in built.entries

    def test_invalid_workbook_builds_nothing(self, sheets, make_workbook):
        """Should return the errors and no archive"""
        sheets["Videos"] = sheets["Videos"][:1]
        result, built = build_from_workbook(make_workbook(sheets))
        assert built is None
        assert len(result.errors) == 1


class TestImportArchive:
    """Tests for import_archive"""

    def test_not_gzip(self):
        with pytest.raises(ArchiveReadError):
            import_archive(b"definitely not gzip")

    def test_empty_archive_warns(self):
        """Should warn about the missing course.xml rather than fail"""
        result, hierarchy = import_archive(gzip.compress(b"\0" * 1024))
        assert result.warnings == ["Missing course.xml - cannot determine course structure."]
        assert hierarchy == ()


class TestReporting:
    """Tests for stats, outline and file names"""

    def test_course_stats(self, sample_course):
        assert course_stats(sample_course) == {
            "chapters": 2,
            "sequentials": 3,
            "verticals": 3,
            "text": 1,
            "video": 1,
            "problem": 1,
            "openresponse": 1,
        }

    def test_stats_count_repeated_names_per_parent(self, sample_course):
        """Should treat a vertical name reused in another sequential as a new vertical"""
        sample_course.structure.append(StructureRow("Week 2", "Wrap Up", "Welcome", "text", "welcome"))
        stats = course_stats(sample_course)
        assert stats["sequentials"] == 4
        assert stats["verticals"] == 4

    def test_render_outline(self, sample_course, fixed_random):
        built = build_archive(sample_course, random_bytes=fixed_random)
        lines = render_outline(built.hierarchy, sample_course).splitlines()
        assert lines[0] == f"{icons.CHAPTER} Week 1"
        assert lines[1] == f"  {icons.SEQUENTIAL} Getting Started"
        assert lines[2] == f"    {icons.VERTICAL} Welcome"
        assert lines[3] == f"      {icons.TEXT} welcome (Welcome & Overview)"
        assert f"      {icons.PROBLEM} q1 (Q1)" in lines

    def test_outline_omits_title_equal_to_id(self, sample_course, fixed_random):
        sample_course.problem_blocks["q1"].title = "q1"
        built = build_archive(sample_course, random_bytes=fixed_random)
        assert f"      {icons.PROBLEM} q1" in render_outline(built.hierarchy, sample_course).splitlines()

    @pytest.mark.parametrize("name, suffix, expected", [
        ("Intro to <Data> & Stats", ARCHIVE_SUFFIX, "intro_to_data_stats_export.tar.gz"),
        ("Biology 101", WORKBOOK_SUFFIX, "biology_101_edx_manifest.xlsx"),
        ("", ARCHIVE_SUFFIX, "course_export.tar.gz"),
        ("???", ARCHIVE_SUFFIX, "course_export.tar.gz"),
    ])
    def test_export_filename(self, name, suffix, expected):
        assert export_filename(CourseInfo(course_name=name), suffix) == expected
