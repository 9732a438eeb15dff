#!/usr/bin/env python3
"""
# Course Engine
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

pipeline.py - Build and import flows tying the codecs together

Build:   workbook -> CourseData -> ids + hierarchy -> OLX entries -> .tar.gz
Import:  .tar.gz -> entries -> CourseData -> ids + hierarchy (for display)

Nothing here touches the filesystem; the CLI reads and writes the bytes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from course_engine import icons
from course_engine.errors import export_blocked_error
from course_engine.generators import generate_olx
from course_engine.model import Chapter, CourseData, CourseInfo, assign_ids, build_hierarchy
from course_engine.olx_parser import ImportResult, parse_olx
from course_engine.tar_archive import pack_entries, unpack_entries
from course_engine.utils import RandomBytes, sanitize_url_name
from course_engine.workbook_reader import WorkbookResult, WorkbookSource, read_workbook

ARCHIVE_SUFFIX = "_export.tar.gz"
WORKBOOK_SUFFIX = "_edx_manifest.xlsx"

Hierarchy = Tuple[Chapter, ...]

__all__ = [
    "BuildResult",
    "build_archive",
    "build_from_workbook",
    "import_archive",
    "course_stats",
    "render_outline",
    "export_filename",
]


@dataclass
class BuildResult:
    archive: bytes
    hierarchy: Hierarchy
    entries: Dict[str, str] = field(default_factory=dict)


# ============================================================================
# Build / Import
# ============================================================================

def build_archive(
    data: CourseData,
    errors: Sequence[str] = (),
    root: str = "course",
    random_bytes: Optional[RandomBytes] = None,
    mtime: Optional[int] = None,
) -> BuildResult:
    """
    Turn a validated course into an importable .tar.gz.

    Raises:
        ExportBlockedError: errors is non-empty
    """
    if errors:
        raise export_blocked_error(list(errors))

    ids = assign_ids(data.structure, random_bytes=random_bytes)
    hierarchy = build_hierarchy(data.structure, ids)
    entries = generate_olx(data, hierarchy)
    archive = pack_entries(entries, root=root, mtime=mtime)
    print(f"[archive] Packed {len(entries)} files ({len(archive)} bytes)")
    return BuildResult(archive=archive, hierarchy=hierarchy, entries=entries)


def build_from_workbook(
    source: WorkbookSource,
    root: str = "course",
    random_bytes: Optional[RandomBytes] = None,
    mtime: Optional[int] = None,
) -> Tuple[WorkbookResult, Optional[BuildResult]]:
    """Decode a workbook and, when it has no errors, build its archive."""
    result = read_workbook(source)
    if not result.is_valid:
        return result, None
    build = build_archive(result.data, root=root, random_bytes=random_bytes, mtime=mtime)
    return result, build


def import_archive(
    data: bytes,
    random_bytes: Optional[RandomBytes] = None,
) -> Tuple[ImportResult, Hierarchy]:
    """Decode a .tar.gz course export; the hierarchy is for display only."""
    entries = unpack_entries(data)
    result = parse_olx(entries)
    ids = assign_ids(result.data.structure, random_bytes=random_bytes)
    return result, build_hierarchy(result.data.structure, ids)


# ============================================================================
# Reporting
# ============================================================================

def course_stats(data: CourseData) -> Dict[str, int]:
    """Counts of structural nodes and content blocks."""
    chapters = {row.chapter for row in data.structure}
    sequentials = {(row.chapter, row.sequential) for row in data.structure}
    verticals = {(row.chapter, row.sequential, row.vertical) for row in data.structure}
    return {
        "chapters": len(chapters),
        "sequentials": len(sequentials),
        "verticals": len(verticals),
        "text": len(data.text_blocks),
        "video": len(data.video_blocks),
        "problem": len(data.problem_blocks),
        "openresponse": len(data.open_response_blocks),
    }


def _block_title(data: CourseData, block_type: str, block_id: str) -> str:
    try:
        block = data.blocks_for(block_type).get(block_id)
    except KeyError:
        return block_id
    title = getattr(block, "title", "") if block else ""
    return title if title and title != block_id else ""


def render_outline(hierarchy: Sequence[Chapter], data: CourseData) -> str:
    """Plain-text course tree for the console."""
    lines: List[str] = []
    for ch in hierarchy:
        lines.append(f"{icons.CHAPTER} {ch.name}")
        for seq in ch.sequentials:
            lines.append(f"  {icons.SEQUENTIAL} {seq.name}")
            for vert in seq.verticals:
                lines.append(f"    {icons.VERTICAL} {vert.name}")
                for block in vert.blocks:
                    title = _block_title(data, block.type, block.block_id)
                    label = f"{block.block_id} ({title})" if title else block.block_id
                    lines.append(f"      {icons.block_type_icon(block.type)} {label}")
    return "\n".join(lines)


def export_filename(info: CourseInfo, suffix: str) -> str:
    """File name for an export: sanitized course name (or "course") + suffix."""
    base = sanitize_url_name(info.course_name) if info.course_name else ""
    return f"{base or 'course'}{suffix}"
