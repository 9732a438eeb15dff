# course_engine/tests/conftest.py
"""
Pytest configuration and shared fixtures for Course Engine tests
"""
import dataclasses
import io
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Generator, List, Sequence

import openpyxl
import pytest

from course_engine import icons
from course_engine.model import (
    Choice,
    CourseData,
    CourseInfo,
    Criterion,
    CriterionOption,
    OpenResponseBlock,
    ProblemBlock,
    StructureRow,
    TextBlock,
    VideoBlock,
)


class CountingRandom:
    """Deterministic stand-in for secrets.token_bytes"""

    def __init__(self):
        self.calls = 0

    def __call__(self, n: int) -> bytes:
        self.calls += 1
        return bytes([self.calls % 256]) * n


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary working directory"""
    tmpdir = Path(tempfile.mkdtemp())
    yield tmpdir
    shutil.rmtree(tmpdir)


@pytest.fixture
def fixed_random() -> CountingRandom:
    return CountingRandom()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep the user's global config and env vars out of every test"""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for name in ("COURSE_ENGINE_ARCHIVE_ROOT", "COURSE_ENGINE_EXPORTS_DIR", "COURSE_ENGINE_ASCII_ICONS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_icons():
    """Undo use_ascii_icons() so one test cannot change another's output"""
    names = ["icons"] + [f.name for f in dataclasses.fields(icons.Icons)]
    saved = {name: getattr(icons, name) for name in names}
    yield
    for name, value in saved.items():
        setattr(icons, name, value)


# ============================================================================
# Model fixtures
# ============================================================================

@pytest.fixture
def sample_course() -> CourseData:
    """A small course using every block type, with XML-hostile text"""
    data = CourseData(info=CourseInfo(
        course_name="Intro to <Data> & Stats",
        organization="TestOrgX",
        course_id="DS101",
        run="2026_T1",
        language="en",
        start_date="2026-01-15",
        end_date="2026-06-30",
        self_paced=True,
    ))

    data.structure = [
        StructureRow("Week 1", "Getting Started", "Welcome", "text", "welcome"),
        StructureRow("Week 1", "Getting Started", "Welcome", "video", "intro_video"),
        StructureRow("Week 1", "Practice", "Quiz", "problem", "q1"),
        StructureRow("Week 2", "Reflection", "Essay", "openresponse", "essay_1"),
    ]
    data.text_blocks["welcome"] = TextBlock(
        "welcome", "Welcome & Overview", "<h1>Welcome</h1><p>Tom &amp; Jerry say hi.</p>"
    )
    data.video_blocks["intro_video"] = VideoBlock(
        "intro_video", "Intro \"Video\"", youtube_id="dQw4w9WgXcQ",
        html5_url="https://example.com/v.mp4?a=1&b=2",
        start_time="00:00:05", end_time="00:02:00",
    )
    data.problem_blocks["q1"] = ProblemBlock(
        "q1", "Q1", "Is 3 < 4 & 5 > 2?",
        choices=[
            Choice("Yes", correct=True, hint="Both hold"),
            Choice("No", hint="Check again"),
            Choice("It's <unclear>"),
        ],
        explanation="3 < 4 and 5 > 2 are both true.",
        show_answer="always",
    )
    data.open_response_blocks["essay_1"] = OpenResponseBlock(
        "essay_1", "Essay 1", "Describe \"your\" goals & plans.",
        criteria=[
            Criterion("Depth", [CriterionOption("Superficial", 0), CriterionOption("Adequate", 1)]),
            Criterion("Clarity", [CriterionOption("Poor", 0), CriterionOption("Good", 2)]),
        ],
        assessment_type="peer",
    )
    return data


# ============================================================================
# Workbook fixtures
# ============================================================================

def build_xlsx(sheets: Dict[str, Sequence[Sequence]]) -> bytes:
    """Write {sheet name: rows} to .xlsx bytes with openpyxl"""
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for title, rows in sheets.items():
        ws = wb.create_sheet(title)
        for row in rows:
            ws.append(list(row))
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


COURSE_INFO_ROWS: List[list] = [
    ["Field", "Value"],
    ["Course Name", "Sample Course"],
    ["Organization", "SampleX"],
    ["Course ID", "S101"],
    ["Run", "2026_T1"],
    ["Language", "en"],
    ["Start Date", "2026-01-15"],
    ["End Date", "2026-06-30"],
    ["Self-Paced", "Yes"],
]

STRUCTURE_HEADER = ["chapter", "sequential", "vertical", "block_type", "block_id"]
TEXT_HEADER = ["block_id", "title", "content"]
VIDEO_HEADER = ["block_id", "title", "youtube_id", "html5_url", "start_time", "end_time"]
PROBLEM_HEADER = (
    ["block_id", "title", "question_text"]
    + [f"choice_{l}" for l in "abcdef"]
    + ["correct"]
    + [f"hint_{l}" for l in "abcdef"]
    + ["explanation", "show_answer"]
)
OPEN_RESPONSE_HEADER = [
    "block_id", "title", "prompt",
    "criterion_1_name", "criterion_1_options",
    "criterion_2_name", "criterion_2_options",
    "assessment_type",
]


def problem_row(block_id, question, choices, correct, hints=(), explanation="", show_answer=""):
    choices = list(choices) + [""] * (6 - len(choices))
    hints = list(hints) + [""] * (6 - len(hints))
    return [block_id, "", question] + choices + [correct] + hints + [explanation, show_answer]


def valid_sheets() -> Dict[str, List[list]]:
    """Sheets for a workbook that decodes without errors"""
    return {
        "Course Info": [list(r) for r in COURSE_INFO_ROWS],
        "Structure": [
            STRUCTURE_HEADER,
            ["Chapter 1", "Lesson 1", "Unit A", "text", "intro"],
            ["Chapter 1", "Lesson 1", "Unit A", "video", "vid1"],
            ["Chapter 1", "Lesson 2", "Unit B", "problem", "p1"],
            ["Chapter 2", "Lesson 3", "Unit C", "openresponse", "ora1"],
        ],
        "Text Blocks": [TEXT_HEADER, ["intro", "Introduction", "Hello\n\nWorld"]],
        "Videos": [VIDEO_HEADER, ["vid1", "First Video", "abc123", "", "", ""]],
        "Problems": [
            PROBLEM_HEADER,
            problem_row("p1", "Pick B", ["A", "B", "C"], "B", hints=["no", "yes", "no"],
                        explanation="B is right"),
        ],
        "Open Response": [
            OPEN_RESPONSE_HEADER,
            ["ora1", "Reflection", "Reflect.", "Depth", "Superficial=0;Adequate=1", "", "", "self"],
        ],
    }


@pytest.fixture
def make_workbook():
    """Factory: build xlsx bytes from {sheet: rows}"""
    return build_xlsx


@pytest.fixture
def sheets() -> Dict[str, List[list]]:
    return valid_sheets()


@pytest.fixture
def workbook_bytes(sheets) -> bytes:
    return build_xlsx(sheets)


@pytest.fixture
def workbook_file(temp_dir: Path, workbook_bytes: bytes) -> Path:
    path = temp_dir / "course.xlsx"
    path.write_bytes(workbook_bytes)
    return path
