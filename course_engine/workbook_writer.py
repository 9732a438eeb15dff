#!/usr/bin/env python3
"""
# Course Engine
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

workbook_writer.py - Encode CourseData as the six-sheet authoring workbook

write_workbook() is the inverse of workbook_reader.read_workbook(): the
sheets, header names and cell formats it produces are exactly what the
reader expects, so an imported course can be edited and rebuilt.
write_template() renders a small sample course through the same encoder.
"""

from __future__ import annotations

import io
from typing import Iterable, List, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

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
from course_engine.workbook_reader import CHOICE_LETTERS

TEMPLATE_FILENAME = "edx_manifest_template.xlsx"

Column = Tuple[str, int]

COURSE_INFO_COLUMNS: List[Column] = [("Field", 20), ("Value", 50)]
STRUCTURE_COLUMNS: List[Column] = [
    ("chapter", 35), ("sequential", 30), ("vertical", 35), ("block_type", 15), ("block_id", 35),
]
TEXT_COLUMNS: List[Column] = [("block_id", 35), ("title", 25), ("content", 80)]
VIDEO_COLUMNS: List[Column] = [
    ("block_id", 35), ("title", 25), ("youtube_id", 20),
    ("html5_url", 40), ("start_time", 12), ("end_time", 12),
]
PROBLEM_COLUMNS: List[Column] = (
    [("block_id", 35), ("title", 15), ("question_text", 50)]
    + [(f"choice_{letter}", 20) for letter in CHOICE_LETTERS]
    + [("correct", 10)]
    + [(f"hint_{letter}", 25) for letter in CHOICE_LETTERS]
    + [("explanation", 50), ("show_answer", 12)]
)

HEADER_FONT = Font(bold=True)


def _add_sheet(workbook: Workbook, title: str, columns: Sequence[Column]):
    ws = workbook.create_sheet(title)
    ws.append([name for name, _ in columns])
    for cell in ws[1]:
        cell.font = HEADER_FONT
    for index, (_, width) in enumerate(columns, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width
    return ws


def _clean(ws, value):
    if value is None:
        return ""
    if isinstance(value, str) and ILLEGAL_CHARACTERS_RE.search(value):
        print(f"[workbook:warn] {ws.title} row {ws.max_row + 1}: "
              f"removed control characters that worksheets cannot store")
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def _append(ws, values: Iterable):
    ws.append([_clean(ws, v) for v in values])
    # Text that starts with "=" would otherwise be stored as a formula
    for cell in ws[ws.max_row]:
        if isinstance(cell.value, str) and cell.value.startswith("="):
            cell.data_type = "s"


def _correct_letters(choices: Sequence[Choice]) -> str:
    return ",".join(
        CHOICE_LETTERS[i].upper()
        for i, choice in enumerate(choices[:len(CHOICE_LETTERS)])
        if choice.correct
    )


def _options_text(criterion: Criterion) -> str:
    return ";".join(f"{opt.label}={opt.points}" for opt in criterion.options)


# ============================================================================
# Sheets
# ============================================================================

def _write_course_info(workbook: Workbook, info: CourseInfo):
    ws = _add_sheet(workbook, "Course Info", COURSE_INFO_COLUMNS)
    for field, value in [
        ("Course Name", info.course_name),
        ("Organization", info.organization),
        ("Course ID", info.course_id),
        ("Run", info.run),
        ("Language", info.language or "en"),
        ("Start Date", info.start_date),
        ("End Date", info.end_date),
        ("Self-Paced", "Yes" if info.self_paced else "No"),
    ]:
        _append(ws, [field, value])


def _write_structure(workbook: Workbook, rows: Sequence[StructureRow]):
    ws = _add_sheet(workbook, "Structure", STRUCTURE_COLUMNS)
    for row in rows:
        _append(ws, [row.chapter, row.sequential, row.vertical, row.block_type, row.block_id])


def _write_text_blocks(workbook: Workbook, data: CourseData):
    ws = _add_sheet(workbook, "Text Blocks", TEXT_COLUMNS)
    for block in data.text_blocks.values():
        _append(ws, [block.block_id, block.title, block.content])


def _write_videos(workbook: Workbook, data: CourseData):
    ws = _add_sheet(workbook, "Videos", VIDEO_COLUMNS)
    for block in data.video_blocks.values():
        _append(ws, [
            block.block_id, block.title, block.youtube_id,
            block.html5_url, block.start_time, block.end_time,
        ])


def _write_problems(workbook: Workbook, data: CourseData):
    ws = _add_sheet(workbook, "Problems", PROBLEM_COLUMNS)
    for block in data.problem_blocks.values():
        slots = list(block.choices[:len(CHOICE_LETTERS)])
        slots += [None] * (len(CHOICE_LETTERS) - len(slots))
        _append(ws,
            [block.block_id, block.title, block.question_text]
            + [c.text if c else "" for c in slots]
            + [_correct_letters(block.choices)]
            + [c.hint if c else "" for c in slots]
            + [block.explanation, block.show_answer]
        )


def _write_open_response(workbook: Workbook, data: CourseData):
    max_criteria = max([1] + [len(b.criteria) for b in data.open_response_blocks.values()])

    columns: List[Column] = [("block_id", 35), ("title", 25), ("prompt", 60)]
    for n in range(1, max_criteria + 1):
        columns += [(f"criterion_{n}_name", 25), (f"criterion_{n}_options", 50)]
    columns.append(("assessment_type", 15))
    ws = _add_sheet(workbook, "Open Response", columns)

    for block in data.open_response_blocks.values():
        values = [block.block_id, block.title, block.prompt]
        for i in range(max_criteria):
            if i < len(block.criteria):
                values += [block.criteria[i].name, _options_text(block.criteria[i])]
            else:
                values += ["", ""]
        values.append(block.assessment_type)
        _append(ws, values)


# ============================================================================
# Public API
# ============================================================================

def build_workbook(data: CourseData) -> Workbook:
    """Build the six-sheet openpyxl Workbook for a course."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    workbook.properties.creator = "Course Engine"

    _write_course_info(workbook, data.info)
    _write_structure(workbook, data.structure)
    _write_text_blocks(workbook, data)
    _write_videos(workbook, data)
    _write_problems(workbook, data)
    _write_open_response(workbook, data)
    return workbook


def write_workbook(data: CourseData) -> bytes:
    """Encode a course as .xlsx bytes."""
    buffer = io.BytesIO()
    build_workbook(data).save(buffer)
    return buffer.getvalue()


def template_course() -> CourseData:
    """Sample course shown to new authors."""
    data = CourseData(info=CourseInfo(
        course_name="My Course Title",
        organization="MyOrgX",
        course_id="COURSE101",
        run="2024_T1",
        language="en",
        start_date="2024-01-15",
        end_date="2024-12-31",
        self_paced=True,
    ))

    chapter = "Chapter 1: Introduction"
    for sequential, vertical, block_type, block_id in [
        ("1.1 Welcome", "Unit 1.1.1 Overview", "text", "welcome_text"),
        ("1.1 Welcome", "Unit 1.1.1 Overview", "video", "welcome_video"),
        ("1.2 Core Concepts", "Unit 1.2.1 Lecture", "video", "lecture_1"),
        ("1.2 Core Concepts", "Unit 1.2.1 Lecture", "text", "reading_1"),
        ("1.2 Core Concepts", "Unit 1.2.2 Quiz", "problem", "quiz_q1"),
        ("1.2 Core Concepts", "Unit 1.2.2 Quiz", "problem", "quiz_q2"),
        ("1.2 Core Concepts", "Unit 1.2.3 Reflection", "openresponse", "reflection_1"),
    ]:
        data.structure.append(StructureRow(chapter, sequential, vertical, block_type, block_id))

    for block in [
        TextBlock("welcome_text", "Welcome",
                  "<h1>Welcome to the Course</h1><p>This course introduces you to key concepts.</p>"),
        TextBlock("reading_1", "Reading List",
                  "<h1>Reading List</h1><p>1. Smith, J. (2024). Intro to the Subject.</p>"),
    ]:
        data.text_blocks[block.block_id] = block

    for block in [
        VideoBlock("welcome_video", "Welcome Video", youtube_id="dQw4w9WgXcQ"),
        VideoBlock("lecture_1", "Lecture 1", youtube_id="cH5tV9gFgHk"),
    ]:
        data.video_blocks[block.block_id] = block

    for block in [
        ProblemBlock(
            "quiz_q1", "Q1", "What is 2 + 2?",
            choices=[
                Choice("3", hint="Too low"),
                Choice("4", correct=True, hint="Correct!"),
                Choice("5", hint="Too high"),
                Choice("22", hint="Not quite"),
            ],
            explanation="Basic addition: 2 + 2 = 4",
        ),
        ProblemBlock(
            "quiz_q2", "Q2", "Which color is the sky on a clear day?",
            choices=[
                Choice("Red", hint="Not red"),
                Choice("Green", hint="Not green"),
                Choice("Blue", correct=True, hint="That's right!"),
                Choice("Yellow", hint="Not yellow"),
            ],
            explanation="The sky appears blue due to Rayleigh scattering.",
        ),
    ]:
        data.problem_blocks[block.block_id] = block

    data.open_response_blocks["reflection_1"] = OpenResponseBlock(
        "reflection_1", "Chapter Reflection",
        "Reflect on what you learned in this chapter. What was the most surprising concept?",
        criteria=[
            Criterion("Depth of Reflection", [
                CriterionOption("Superficial", 0), CriterionOption("Adequate", 1),
                CriterionOption("Thoughtful", 2), CriterionOption("Exceptional", 3),
            ]),
            Criterion("Writing Quality", [
                CriterionOption("Poor", 0), CriterionOption("Fair", 1),
                CriterionOption("Good", 2), CriterionOption("Excellent", 3),
            ]),
        ],
        assessment_type="self",
    )
    return data


def write_template() -> bytes:
    """Encode the sample authoring workbook as .xlsx bytes."""
    return write_workbook(template_course())
