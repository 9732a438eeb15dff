#!/usr/bin/env python3
"""
# Course Engine
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

workbook_reader.py - Decode the six-sheet authoring workbook into CourseData

Sheets (matched case-insensitively):
    Course Info    Field / Value pairs
    Structure      chapter, sequential, vertical, block_type, block_id
    Text Blocks    block_id, title, content
    Videos         block_id, title, youtube_id, html5_url, start_time, end_time
    Problems       block_id, title, question_text, choice_a..f, correct,
                   hint_a..f, explanation, show_answer
    Open Response  block_id, title, prompt, criterion_N_name,
                   criterion_N_options, assessment_type

Row problems never raise. They are collected as readable strings on the
returned WorkbookResult so the author can fix everything in one pass. Only
a file that openpyxl cannot open at all raises WorkbookReadError.
"""

from __future__ import annotations

import io
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

import openpyxl

from course_engine import icons
from course_engine.errors import unreadable_workbook_error
from course_engine.model import (
    ASSESSMENT_TYPES,
    BLOCK_TYPES,
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

WorkbookSource = Union[str, Path, bytes, bytearray]

CHOICE_LETTERS = ("a", "b", "c", "d", "e", "f")
MAX_CRITERIA = 10
TRUE_WORDS = {"yes", "true", "y", "1"}

# Sheet that must define each block type referenced from Structure
SHEET_FOR_TYPE = {
    "text": "Text Blocks",
    "video": "Videos",
    "problem": "Problems",
    "openresponse": "Open Response",
}
TYPE_LABELS = {
    "text": "text",
    "video": "video",
    "problem": "problem",
    "openresponse": "open response",
}

REQUIRED_INFO_KEYS = [
    ("course name", "Course Name"),
    ("organization", "Organization"),
    ("course id", "Course ID"),
    ("run", "Run"),
]

STRUCTURE_FIELDS = ("chapter", "sequential", "vertical", "block_type", "block_id")

CORRECT_SPLIT_RE = re.compile(r"[,;\s]+")
LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
HEADER_SPACE_RE = re.compile(r"\s+")


@dataclass
class WorkbookResult:
    """Decoded course plus every validation error found along the way"""
    data: CourseData = field(default_factory=CourseData)
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add(self, message: str):
        self.errors.append(message)

    def summary(self) -> str:
        e = len(self.errors)
        if e == 0:
            return f"{icons.SUCCESS} Workbook is valid ({len(self.data.structure)} structure rows)"
        return f"Found {e} error{'s' if e != 1 else ''} in workbook."


# ============================================================================
# Cell Helpers
# ============================================================================

def cell_value(value) -> str:
    """Render an openpyxl cell value as trimmed text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.strftime("%Y-%m-%d")
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def normalize_header(value) -> str:
    return HEADER_SPACE_RE.sub("_", cell_value(value).lower())


def find_sheet(workbook, name: str):
    """Worksheet whose trimmed, lowercased title matches name, or None."""
    target = name.strip().lower()
    for ws in workbook.worksheets:
        if ws.title.strip().lower() == target:
            return ws
    return None


def iter_records(sheet) -> Iterator[Tuple[int, Dict[str, str]]]:
    """
    Yield (row_number, {header: text}) for each non-blank data row.

    Row numbers are 1-based sheet rows, so the first data row is 2.
    """
    # Read-only sheets trust the stored <dimension>, which some writers get wrong
    sheet.reset_dimensions()
    rows = sheet.iter_rows(values_only=True)
    header_row = next(rows, None)
    if header_row is None:
        return
    headers = [normalize_header(h) for h in header_row]

    for row_number, row in enumerate(rows, start=2):
        values = [cell_value(v) for v in row]
        if not any(values):
            continue
        record = {}
        for i, header in enumerate(headers):
            if header:
                record[header] = values[i] if i < len(values) else ""
        yield row_number, record


def parse_options(text: str) -> List[CriterionOption]:
    """Parse "Poor=0;Fair=1;Good=2" into rubric options."""
    options = []
    for segment in text.split(";"):
        segment = segment.strip()
        if not segment:
            continue
        label, sep, points_text = segment.rpartition("=")
        if not sep:
            label, points_text = segment, ""
        match = LEADING_INT_RE.match(points_text)
        options.append(CriterionOption(label=label.strip(), points=int(match.group(1)) if match else 0))
    return options


# ============================================================================
# Workbook Reader
# ============================================================================

class WorkbookReader:
    """Walks each sheet of an opened workbook into a WorkbookResult"""

    def __init__(self, workbook, default_language: str = "en"):
        self.workbook = workbook
        self.default_language = default_language
        self.result = WorkbookResult()

    @property
    def data(self) -> CourseData:
        return self.result.data

    def read(self) -> WorkbookResult:
        self._read_course_info()
        self._read_structure()
        self._read_text_blocks()
        self._read_videos()
        self._read_problems()
        self._read_open_response()
        self._cross_validate()
        return self.result

    def _store(self, sheet_name: str, row_number: int, blocks: dict, block):
        if block.block_id in blocks:
            print(f"[workbook:warn] {sheet_name} row {row_number}: "
                  f'duplicate block_id "{block.block_id}" replaces the earlier row')
        blocks[block.block_id] = block

    # ------------------------------------------------------------------
    # Course Info
    # ------------------------------------------------------------------

    def _read_course_info(self):
        sheet = find_sheet(self.workbook, "Course Info")
        if sheet is None:
            self.result.add('Missing sheet: "Course Info"')
            return

        values: Dict[str, str] = {}
        for row in sheet.iter_rows(values_only=True):
            if len(row) < 2:
                continue
            key, value = cell_value(row[0]), cell_value(row[1])
            if key and value:
                values[key.lower()] = value

        self.data.info = CourseInfo(
            course_name=values.get("course name", ""),
            organization=values.get("organization", ""),
            course_id=values.get("course id", ""),
            run=values.get("run", ""),
            language=values.get("language", self.default_language),
            start_date=values.get("start date", ""),
            end_date=values.get("end date", ""),
            self_paced=values.get("self-paced", "yes").lower() in TRUE_WORDS,
        )

        for key, label in REQUIRED_INFO_KEYS:
            if not values.get(key):
                self.result.add(f'Course Info: "{label}" is required.')

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def _read_structure(self):
        sheet = find_sheet(self.workbook, "Structure")
        if sheet is None:
            self.result.add('Missing sheet: "Structure"')
            return

        for row_number, record in iter_records(sheet):
            missing = next((f for f in STRUCTURE_FIELDS if not record.get(f)), None)
            if missing:
                self.result.add(f'Structure row {row_number}: "{missing}" is required.')
                continue

            block_type = record["block_type"].lower()
            if block_type not in BLOCK_TYPES:
                self.result.add(
                    f'Structure row {row_number}: Invalid block_type "{block_type}". '
                    f"Must be one of: {', '.join(BLOCK_TYPES)}"
                )
                continue

            self.data.structure.append(StructureRow(
                chapter=record["chapter"],
                sequential=record["sequential"],
                vertical=record["vertical"],
                block_type=block_type,
                block_id=record["block_id"],
            ))

    # ------------------------------------------------------------------
    # Content sheets
    # ------------------------------------------------------------------

    def _content_records(self, sheet_name: str) -> Iterator[Tuple[int, Dict[str, str], str]]:
        """Yield rows of an optional content sheet that carry a block_id."""
        sheet = find_sheet(self.workbook, sheet_name)
        if sheet is None:
            return
        for row_number, record in iter_records(sheet):
            block_id = record.get("block_id", "")
            if not block_id:
                self.result.add(f'{sheet_name} row {row_number}: "block_id" is required.')
                continue
            yield row_number, record, block_id

    def _read_text_blocks(self):
        for row_number, r, block_id in self._content_records("Text Blocks"):
            block = TextBlock(
                block_id=block_id,
                title=r.get("title") or "Text",
                content=r.get("content", ""),
            )
            self._store("Text Blocks", row_number, self.data.text_blocks, block)

    def _read_videos(self):
        for row_number, r, block_id in self._content_records("Videos"):
            block = VideoBlock(
                block_id=block_id,
                title=r.get("title") or "Video",
                youtube_id=r.get("youtube_id", ""),
                html5_url=r.get("html5_url", ""),
                start_time=r.get("start_time") or "00:00:00",
                end_time=r.get("end_time") or "00:00:00",
            )
            self._store("Videos", row_number, self.data.video_blocks, block)

    def _read_problems(self):
        for row_number, r, block_id in self._content_records("Problems"):
            correct = {
                token.upper()
                for token in CORRECT_SPLIT_RE.split(r.get("correct", ""))
                if token
            }

            choices = []
            for letter in CHOICE_LETTERS:
                text = r.get(f"choice_{letter}", "")
                if not text:
                    continue
                choices.append(Choice(
                    text=text,
                    correct=letter.upper() in correct,
                    hint=r.get(f"hint_{letter}", ""),
                ))

            if len(choices) < 2:
                self.result.add(f"Problems row {row_number}: At least 2 choices are required.")
                continue
            if not any(c.correct for c in choices):
                self.result.add(f"Problems row {row_number}: No correct answer specified.")
                continue

            block = ProblemBlock(
                block_id=block_id,
                title=r.get("title") or block_id,
                question_text=r.get("question_text", ""),
                choices=choices,
                explanation=r.get("explanation", ""),
                show_answer=r.get("show_answer") or "attempted",
            )
            self._store("Problems", row_number, self.data.problem_blocks, block)

    def _read_open_response(self):
        for row_number, r, block_id in self._content_records("Open Response"):
            criteria = []
            for n in range(1, MAX_CRITERIA + 1):
                name = r.get(f"criterion_{n}_name", "")
                options_text = r.get(f"criterion_{n}_options", "")
                if not name or not options_text:
                    break
                criteria.append(Criterion(name=name, options=parse_options(options_text)))

            assessment_type = (r.get("assessment_type") or "self").lower()
            if assessment_type not in ASSESSMENT_TYPES:
                self.result.add(
                    f'Open Response row {row_number}: Invalid assessment_type "{assessment_type}". '
                    f"Must be one of: {', '.join(ASSESSMENT_TYPES)}"
                )
                continue

            block = OpenResponseBlock(
                block_id=block_id,
                title=r.get("title") or block_id,
                prompt=r.get("prompt", ""),
                criteria=criteria,
                assessment_type=assessment_type,
            )
            self._store("Open Response", row_number, self.data.open_response_blocks, block)

    # ------------------------------------------------------------------
    # Cross-validation
    # ------------------------------------------------------------------

    def _cross_validate(self):
        for row in self.data.unresolved_rows():
            self.result.add(
                f'Structure references {TYPE_LABELS[row.block_type]} block "{row.block_id}" '
                f"but it's not defined in \"{SHEET_FOR_TYPE[row.block_type]}\" sheet."
            )


# ============================================================================
# Public API
# ============================================================================

def open_workbook(source: WorkbookSource):
    """Open an xlsx path or byte buffer with cached formula values."""
    try:
        if isinstance(source, (bytes, bytearray)):
            return openpyxl.load_workbook(io.BytesIO(bytes(source)), data_only=True, read_only=True)
        return openpyxl.load_workbook(str(source), data_only=True, read_only=True)
    except Exception as e:
        raise unreadable_workbook_error(source, cause=e)


def read_workbook(source: WorkbookSource, default_language: str = "en") -> WorkbookResult:
    """
    Decode an authoring workbook.

    Args:
        source: Path to an .xlsx file, or its raw bytes
        default_language: Used when Course Info has no Language row

    Returns:
        WorkbookResult with the CourseData and ordered error strings

    Raises:
        WorkbookReadError: the file is not a readable xlsx workbook
    """
    workbook = open_workbook(source)
    try:
        return WorkbookReader(workbook, default_language).read()
    finally:
        workbook.close()
