#!/usr/bin/env python3
"""
# Course Engine
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

olx_parser.py - Rebuild CourseData from an extracted OLX archive

Walks course.xml -> course/{run}.xml -> chapters -> sequentials ->
verticals and parses each referenced content block once. Anything missing
or unrecognized is reported as a warning and skipped; an import never
fails because an export is incomplete.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from course_engine import icons
from course_engine.model import (
    Choice,
    CourseData,
    Criterion,
    CriterionOption,
    OpenResponseBlock,
    ProblemBlock,
    StructureRow,
    TextBlock,
    VideoBlock,
)
from course_engine.olx import (
    child_url_names,
    element_inner,
    element_text,
    iter_elements,
    root_attributes,
    scan_tags,
    text_content,
)

# Vertical children that carry no content this tool can represent
SILENT_SKIP_TAGS = {"library_content", "discussion", "lti", "lti_consumer"}

# OLX tag -> workbook block_type
TAG_BLOCK_TYPES = {
    "html": "text",
    "video": "video",
    "problem": "problem",
    "openassessment": "openresponse",
}

YOUTUBE_RE = re.compile(r"1\.00:(\S+)")
EXPLANATION_LABEL_RE = re.compile(r"^\s*Explanation\s*", re.IGNORECASE)
LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class ImportResult:
    """Decoded course plus every gap found while reading the archive"""
    data: CourseData = field(default_factory=CourseData)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True when the archive imported without any gaps."""
        return len(self.warnings) == 0

    def summary(self) -> str:
        blocks = len(self.data.structure)
        w = len(self.warnings)
        if w == 0:
            return f"{icons.SUCCESS} Imported {blocks} block placement{'s' if blocks != 1 else ''}"
        return f"Imported {blocks} block placement{'s' if blocks != 1 else ''} with {w} warning{'s' if w != 1 else ''}."


def _int_prefix(value: str) -> int:
    match = LEADING_INT_RE.match(value or "")
    return int(match.group(1)) if match else 0


class OlxParser:
    """Single-use reader for one extracted archive"""

    def __init__(self, files: Mapping[str, str]):
        self.files = files
        self.result = ImportResult()

    @property
    def data(self) -> CourseData:
        return self.result.data

    def warn(self, message: str):
        print(f"[olx:warn] {message}")
        self.result.warnings.append(message)

    # ------------------------------------------------------------------
    # Course
    # ------------------------------------------------------------------

    def parse(self) -> ImportResult:
        course_xml = self.files.get("course.xml")
        if not course_xml:
            self.warn("Missing course.xml - cannot determine course structure.")
            return self.result

        attrs = root_attributes(course_xml)
        run = attrs.get("url_name", "")
        info = self.data.info
        info.run = run
        info.organization = attrs.get("org", "")
        info.course_id = attrs.get("course", "")

        run_xml = self.files.get(f"course/{run}.xml")
        supplied = set()
        if run_xml is None:
            self.warn(f"Course run file not found: course/{run}.xml")
        else:
            supplied = self._read_run_file(run_xml)

        self._read_policy(run, supplied)

        for chapter_id in child_url_names(run_xml or "", "chapter"):
            self._walk_chapter(chapter_id)

        return self.result

    def _read_run_file(self, run_xml: str) -> set:
        """Copy course metadata from the run file; return the keys it supplied."""
        attrs = root_attributes(run_xml)
        info = self.data.info
        info.course_name = attrs.get("display_name", "")
        info.language = attrs.get("language") or "en"
        info.self_paced = attrs.get("self_paced", "").lower() == "true"
        info.start_date = attrs.get("start", "")
        info.end_date = attrs.get("end", "")
        return {key for key in ("display_name", "language", "self_paced") if attrs.get(key)}

    def _read_policy(self, run: str, supplied: set):
        path = f"policies/{run}/policy.json"
        text = self.files.get(path)
        if text is None:
            return

        try:
            policy = json.loads(text)
        except ValueError:
            self.warn(f"Could not parse {path}")
            return
        if not isinstance(policy, dict):
            self.warn(f"Could not parse {path}: expected a JSON object")
            return

        key = f"course/{run}"
        settings = policy.get(key)
        if settings is None:
            fallback = next((k for k, v in policy.items() if isinstance(v, dict)), None)
            if fallback is None:
                return
            self.warn(f'{path} has no "{key}" entry; using "{fallback}" instead')
            settings = policy[fallback]
        if not isinstance(settings, dict):
            return

        info = self.data.info
        if "display_name" not in supplied and settings.get("display_name"):
            info.course_name = str(settings["display_name"])
        if "language" not in supplied and settings.get("language"):
            info.language = str(settings["language"])
        if "self_paced" not in supplied and "self_paced" in settings:
            value = settings["self_paced"]
            info.self_paced = value if isinstance(value, bool) else str(value).lower() == "true"

    # ------------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------------

    def _load(self, kind: str, node_id: str) -> Optional[str]:
        path = f"{kind}/{node_id}.xml"
        xml = self.files.get(path)
        if xml is None:
            self.warn(f"{kind.capitalize()} file not found: {path}")
        return xml

    def _walk_chapter(self, chapter_id: str):
        xml = self._load("chapter", chapter_id)
        if xml is None:
            return
        chapter_name = root_attributes(xml).get("display_name") or chapter_id

        for seq_id in child_url_names(xml, "sequential"):
            seq_xml = self._load("sequential", seq_id)
            if seq_xml is None:
                continue
            seq_name = root_attributes(seq_xml).get("display_name") or seq_id

            for vert_id in child_url_names(seq_xml, "vertical"):
                vert_xml = self._load("vertical", vert_id)
                if vert_xml is None:
                    continue
                vert_name = root_attributes(vert_xml).get("display_name") or vert_id
                self._walk_vertical(vert_id, vert_xml, (chapter_name, seq_name, vert_name))

    def _walk_vertical(self, vert_id: str, xml: str, names: Tuple[str, str, str]):
        for tag in scan_tags(xml):
            if not tag.opens or tag.name == "vertical" or "url_name" not in tag.attrs:
                continue
            if tag.name in SILENT_SKIP_TAGS:
                continue
            block_type = TAG_BLOCK_TYPES.get(tag.name)
            if block_type is None:
                self.warn(f'Unknown block type "{tag.name}" in vertical {vert_id}, skipping.')
                continue

            block_id = tag.attrs["url_name"]
            if not block_id:
                continue
            if self._parse_block(block_type, block_id, tag.attrs):
                chapter, sequential, vertical = names
                self.data.structure.append(StructureRow(
                    chapter=chapter,
                    sequential=sequential,
                    vertical=vertical,
                    block_type=block_type,
                    block_id=block_id,
                ))

    def _parse_block(self, block_type: str, block_id: str, inline_attrs: Dict[str, str]) -> bool:
        """Parse a block on first sight; True when it is (now) in the model."""
        if self.data.has_block(block_type, block_id):
            return True
        if block_type == "text":
            self.data.text_blocks[block_id] = self._parse_html(block_id)
        elif block_type == "video":
            self.data.video_blocks[block_id] = self._parse_video(block_id, inline_attrs)
        elif block_type == "problem":
            block = self._parse_problem(block_id)
            if block is None:
                return False
            self.data.problem_blocks[block_id] = block
        elif block_type == "openresponse":
            block = self._parse_open_response(block_id)
            if block is None:
                return False
            self.data.open_response_blocks[block_id] = block
        return True

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _parse_html(self, block_id: str) -> TextBlock:
        pointer = self.files.get(f"html/{block_id}.xml")
        attrs = root_attributes(pointer) if pointer else {}
        filename = attrs.get("filename") or block_id
        content = self.files.get(f"html/{filename}.html", "")
        return TextBlock(
            block_id=block_id,
            title=attrs.get("display_name") or block_id,
            content=content.strip(),
        )

    def _parse_video(self, block_id: str, inline_attrs: Dict[str, str]) -> VideoBlock:
        xml = self.files.get(f"video/{block_id}.xml")
        attrs = root_attributes(xml) if xml else dict(inline_attrs)

        youtube_id = attrs.get("youtube_id_1_0", "")
        if not youtube_id and attrs.get("youtube"):
            match = YOUTUBE_RE.search(attrs["youtube"])
            if match:
                youtube_id = match.group(1)

        html5_url = ""
        sources = attrs.get("html5_sources", "")
        if sources:
            try:
                parsed = json.loads(sources.replace("&quot;", '"'))
                if isinstance(parsed, list):
                    html5_url = str(parsed[0]) if parsed else ""
                else:
                    html5_url = sources
            except ValueError:
                html5_url = sources

        return VideoBlock(
            block_id=block_id,
            title=attrs.get("display_name") or block_id,
            youtube_id=youtube_id,
            html5_url=html5_url,
            start_time=attrs.get("start_time") or "00:00:00",
            end_time=attrs.get("end_time") or "00:00:00",
        )

    def _parse_problem(self, block_id: str) -> Optional[ProblemBlock]:
        path = f"problem/{block_id}.xml"
        xml = self.files.get(path)
        if xml is None:
            self.warn(f"Problem file not found: {path}")
            return None

        attrs = root_attributes(xml)
        choices = []
        for choice_attrs, inner in iter_elements(xml, "choice"):
            hint_at = inner.find("<choicehint")
            text = inner if hint_at < 0 else inner[:hint_at]
            choices.append(Choice(
                text=text_content(text),
                correct=choice_attrs.get("correct", "").lower() == "true",
                hint=element_text(inner, "choicehint"),
            ))

        solution = element_inner(xml, "solution")
        explanation = ""
        if solution is not None:
            explanation = EXPLANATION_LABEL_RE.sub("", text_content(solution), count=1).strip()

        return ProblemBlock(
            block_id=block_id,
            title=attrs.get("display_name") or block_id,
            question_text=element_text(xml, "label"),
            choices=choices,
            explanation=explanation,
            show_answer=attrs.get("showanswer") or "attempted",
        )

    def _parse_open_response(self, block_id: str) -> Optional[OpenResponseBlock]:
        path = f"openassessment/{block_id}.xml"
        xml = self.files.get(path)
        if xml is None:
            self.warn(f"Open response file not found: {path}")
            return None

        attrs = root_attributes(xml)
        criteria = []
        for _, criterion_xml in iter_elements(xml, "criterion"):
            name = element_text(criterion_xml, "name")
            if not name:
                continue
            options = [
                CriterionOption(
                    label=element_text(option_xml, "label"),
                    points=_int_prefix(option_attrs.get("points", "")),
                )
                for option_attrs, option_xml in iter_elements(criterion_xml, "option")
            ]
            criteria.append(Criterion(name=name, options=options))

        assessment_type = "self"
        if 'name="staff-assessment"' in xml:
            assessment_type = "staff"
        elif 'name="peer-assessment"' in xml:
            assessment_type = "peer"

        return OpenResponseBlock(
            block_id=block_id,
            title=attrs.get("display_name") or block_id,
            prompt=element_text(xml, "description"),
            criteria=criteria,
            assessment_type=assessment_type,
        )


def parse_olx(files: Mapping[str, str]) -> ImportResult:
    """
    Decode an extracted archive entry map into CourseData.

    Args:
        files: Relative path -> text, as returned by unpack_entries()

    Returns:
        ImportResult with the course model and ordered warnings
    """
    return OlxParser(files).parse()
