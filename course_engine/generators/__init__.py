"""
# Course Engine
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

OLX generators. Each module turns part of a CourseData (or its hierarchy)
into a {relative path: file text} fragment; generate_olx() merges them into
the complete archive entry map.
"""

from typing import Dict, Sequence

from course_engine.generators.chapter import generate_chapters
from course_engine.generators.course import generate_course
from course_engine.generators.openresponse import generate_open_response_blocks
from course_engine.generators.problem import generate_problem_blocks
from course_engine.generators.sequential import generate_sequentials
from course_engine.generators.text import generate_html_blocks
from course_engine.generators.vertical import generate_verticals
from course_engine.generators.video import generate_video_blocks
from course_engine.model import Chapter, CourseData


def generate_olx(data: CourseData, hierarchy: Sequence[Chapter]) -> Dict[str, str]:
    """Render every OLX file for a course, in archive order."""
    files: Dict[str, str] = {}
    files.update(generate_course(data.info, hierarchy))
    files.update(generate_chapters(hierarchy))
    files.update(generate_sequentials(hierarchy))
    files.update(generate_verticals(hierarchy))
    files.update(generate_html_blocks(data.text_blocks))
    files.update(generate_video_blocks(data.video_blocks))
    files.update(generate_problem_blocks(data.problem_blocks))
    files.update(generate_open_response_blocks(data.open_response_blocks))
    return files


__all__ = [
    "generate_olx",
    "generate_course",
    "generate_chapters",
    "generate_sequentials",
    "generate_verticals",
    "generate_html_blocks",
    "generate_video_blocks",
    "generate_problem_blocks",
    "generate_open_response_blocks",
]
