"""
Course-level OLX.

Produces:
    course.xml                          entry point naming the run
    course/{run}.xml                    metadata and chapter references
    policies/{run}/policy.json          display settings and tabs
    policies/{run}/grading_policy.json  default two-bucket grader
"""

import json
from typing import Dict, Sequence
from xml.etree import ElementTree as ET

from course_engine.model import Chapter, CourseInfo
from course_engine.olx import prettify_xml
from course_engine.utils import format_edx_date

DEFAULT_RUN = "course_run"

TABS = [
    {"course_staff_only": False, "name": "Course", "type": "courseware"},
    {"course_staff_only": False, "name": "Progress", "type": "progress"},
    {"course_staff_only": False, "name": "Dates", "type": "dates"},
    {"course_staff_only": False, "name": "Discussion", "type": "discussion"},
]

GRADING_POLICY = {
    "GRADER": [
        {"drop_count": 0, "min_count": 1, "short_label": "HW", "type": "Homework", "weight": 0.5},
        {"drop_count": 0, "min_count": 1, "short_label": "Final", "type": "Final Exam", "weight": 0.5},
    ],
    "GRADE_CUTOFFS": {"Pass": 0.5},
}


def _json(value) -> str:
    return json.dumps(value, indent=4) + "\n"


def generate_course(info: CourseInfo, hierarchy: Sequence[Chapter]) -> Dict[str, str]:
    run = info.run or DEFAULT_RUN
    start = format_edx_date(info.start_date)
    end = format_edx_date(info.end_date)
    files = {}

    files["course.xml"] = prettify_xml(
        ET.Element("course", url_name=run, org=info.organization, course=info.course_id)
    )

    course = ET.Element("course", display_name=info.course_name, language=info.language)
    if info.self_paced:
        course.set("self_paced", "true")
    if start:
        course.set("start", start)
    if end:
        course.set("end", end)
    for ch in hierarchy:
        ET.SubElement(course, "chapter", url_name=ch.id)
    files[f"course/{run}.xml"] = prettify_xml(course)

    settings = {
        "display_name": info.course_name,
        "language": info.language,
        "self_paced": info.self_paced,
    }
    if start:
        settings["start"] = start
    if end:
        settings["end"] = end
    settings["tabs"] = [dict(tab) for tab in TABS]
    files[f"policies/{run}/policy.json"] = _json({f"course/{run}": settings})
    files[f"policies/{run}/grading_policy.json"] = _json(GRADING_POLICY)

    return files
