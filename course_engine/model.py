#!/usr/bin/env python3
"""
# Course Engine
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

model.py - In-memory course model and hierarchy builder

The workbook reader and the OLX parser both produce a CourseData; the
generators and the workbook writer both consume one. The chapter ->
sequential -> vertical tree is never stored: build_hierarchy() derives it
from the flat structure rows whenever it is needed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from course_engine.utils import RandomBytes, generate_id, sanitize_url_name


BLOCK_TYPES = ("text", "video", "problem", "openresponse")
ASSESSMENT_TYPES = ("self", "peer", "staff")

# Length of the random suffix appended to sanitized names
ID_SUFFIX_LENGTH = 8

# Id lookup keys: the level name followed by the full name path
IdKey = Tuple[str, ...]


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class CourseInfo:
    """Course-level metadata from the Course Info sheet or course.xml"""
    course_name: str = ""
    organization: str = ""
    course_id: str = ""
    run: str = ""
    language: str = "en"
    start_date: str = ""
    end_date: str = ""
    self_paced: bool = True


@dataclass
class StructureRow:
    """One row of the Structure sheet: a block placed in a vertical"""
    chapter: str
    sequential: str
    vertical: str
    block_type: str
    block_id: str


@dataclass
class TextBlock:
    block_id: str
    title: str = "Text"
    content: str = ""


@dataclass
class VideoBlock:
    block_id: str
    title: str = "Video"
    youtube_id: str = ""
    html5_url: str = ""
    start_time: str = "00:00:00"
    end_time: str = "00:00:00"


@dataclass
class Choice:
    text: str
    correct: bool = False
    hint: str = ""


@dataclass
class ProblemBlock:
    """A single multiple-choice question"""
    block_id: str
    title: str = ""
    question_text: str = ""
    choices: List[Choice] = field(default_factory=list)
    explanation: str = ""
    show_answer: str = "attempted"


@dataclass
class CriterionOption:
    label: str
    points: int = 0


@dataclass
class Criterion:
    name: str
    options: List[CriterionOption] = field(default_factory=list)


@dataclass
class OpenResponseBlock:
    """An open response assessment with its rubric"""
    block_id: str
    title: str = ""
    prompt: str = ""
    criteria: List[Criterion] = field(default_factory=list)
    assessment_type: str = "self"


@dataclass
class CourseData:
    """Container for everything a course export needs"""
    info: CourseInfo = field(default_factory=CourseInfo)
    structure: List[StructureRow] = field(default_factory=list)
    text_blocks: Dict[str, TextBlock] = field(default_factory=dict)
    video_blocks: Dict[str, VideoBlock] = field(default_factory=dict)
    problem_blocks: Dict[str, ProblemBlock] = field(default_factory=dict)
    open_response_blocks: Dict[str, OpenResponseBlock] = field(default_factory=dict)

    def blocks_for(self, block_type: str) -> Dict[str, object]:
        """Return the block map that holds blocks of block_type."""
        maps = {
            "text": self.text_blocks,
            "video": self.video_blocks,
            "problem": self.problem_blocks,
            "openresponse": self.open_response_blocks,
        }
        if block_type not in maps:
            raise KeyError(f"Unknown block type: {block_type}")
        return maps[block_type]

    def has_block(self, block_type: str, block_id: str) -> bool:
        return block_type in BLOCK_TYPES and block_id in self.blocks_for(block_type)

    def unresolved_rows(self) -> List[StructureRow]:
        """Structure rows whose block is missing from its map."""
        return [row for row in self.structure if not self.has_block(row.block_type, row.block_id)]


# ============================================================================
# Hierarchy
# ============================================================================

@dataclass(frozen=True)
class BlockRef:
    type: str
    block_id: str


@dataclass(frozen=True)
class Vertical:
    name: str
    id: str
    blocks: Tuple[BlockRef, ...] = ()


@dataclass(frozen=True)
class Sequential:
    name: str
    id: str
    verticals: Tuple[Vertical, ...] = ()


@dataclass(frozen=True)
class Chapter:
    name: str
    id: str
    sequentials: Tuple[Sequential, ...] = ()


def chapter_key(row: StructureRow) -> IdKey:
    return ("chapter", row.chapter)


def sequential_key(row: StructureRow) -> IdKey:
    return ("sequential", row.chapter, row.sequential)


def vertical_key(row: StructureRow) -> IdKey:
    return ("vertical", row.chapter, row.sequential, row.vertical)


class IdAssigner:
    """
    Hands out one url_name per chapter/sequential/vertical name tuple.

    The random source is injectable so tests can pin the generated ids;
    production code draws from the secrets module. Use a fresh assigner
    for every build or import.
    """

    def __init__(self, random_bytes: Optional[RandomBytes] = None):
        self.random_bytes = random_bytes
        self.ids: Dict[IdKey, str] = {}

    def _new_id(self, name: str) -> str:
        suffix = generate_id(self.random_bytes)[:ID_SUFFIX_LENGTH]
        return f"{sanitize_url_name(name)}_{suffix}"

    def assign(self, rows: Sequence[StructureRow]) -> Dict[IdKey, str]:
        for row in rows:
            for key, name in (
                (chapter_key(row), row.chapter),
                (sequential_key(row), row.sequential),
                (vertical_key(row), row.vertical),
            ):
                if key not in self.ids:
                    self.ids[key] = self._new_id(name)
        return self.ids


def assign_ids(
    rows: Sequence[StructureRow],
    random_bytes: Optional[RandomBytes] = None,
) -> Dict[IdKey, str]:
    """Build a fresh id lookup for rows."""
    return dict(IdAssigner(random_bytes).assign(rows))


@dataclass
class _VerticalIndex:
    name: str
    id: str
    blocks: List[BlockRef] = field(default_factory=list)


@dataclass
class _SequentialIndex:
    name: str
    id: str
    verticals: Dict[str, _VerticalIndex] = field(default_factory=dict)


@dataclass
class _ChapterIndex:
    name: str
    id: str
    sequentials: Dict[str, _SequentialIndex] = field(default_factory=dict)


def build_hierarchy(
    rows: Sequence[StructureRow],
    id_lookup: Mapping[IdKey, str],
) -> Tuple[Chapter, ...]:
    """
    Fold flat structure rows into an ordered chapter tree.

    The first row naming a (chapter), (chapter, sequential) or
    (chapter, sequential, vertical) tuple creates that node; later rows
    with the same tuple append to it. Ids come from id_lookup, falling
    back to the node name for keys it does not contain.
    """
    # Phase 1: index by name tuple (dicts keep first-seen order)
    chapters: Dict[str, _ChapterIndex] = {}
    for row in rows:
        chapter = chapters.get(row.chapter)
        if chapter is None:
            chapter = _ChapterIndex(row.chapter, id_lookup.get(chapter_key(row), row.chapter))
            chapters[row.chapter] = chapter

        sequential = chapter.sequentials.get(row.sequential)
        if sequential is None:
            sequential = _SequentialIndex(
                row.sequential, id_lookup.get(sequential_key(row), row.sequential)
            )
            chapter.sequentials[row.sequential] = sequential

        vertical = sequential.verticals.get(row.vertical)
        if vertical is None:
            vertical = _VerticalIndex(row.vertical, id_lookup.get(vertical_key(row), row.vertical))
            sequential.verticals[row.vertical] = vertical

        vertical.blocks.append(BlockRef(row.block_type, row.block_id))

    # Phase 2: materialize the immutable tree
    return tuple(
        Chapter(
            name=ch.name,
            id=ch.id,
            sequentials=tuple(
                Sequential(
                    name=seq.name,
                    id=seq.id,
                    verticals=tuple(
                        Vertical(name=vert.name, id=vert.id, blocks=tuple(vert.blocks))
                        for vert in seq.verticals.values()
                    ),
                )
                for seq in ch.sequentials.values()
            ),
        )
        for ch in chapters.values()
    )
