"""
Open response assessment OLX: openassessment/{id}.xml with prompt, rubric
and the assessment steps for the block's assessment type.
"""

from typing import Dict, Mapping
from xml.etree import ElementTree as ET

from course_engine.model import OpenResponseBlock
from course_engine.olx import add_text_element, prettify_xml

# Open submission window so the block is usable as soon as it is imported
SUBMISSION_START = "2000-01-01T00:00:00Z"
SUBMISSION_DUE = "2099-01-01T00:00:00Z"


def build_assessments(assessment_type: str) -> ET.Element:
    assessments = ET.Element("assessments")
    if assessment_type == "peer":
        ET.SubElement(assessments, "assessment", name="peer-assessment", must_grade="5", must_be_graded_by="3")
    if assessment_type in ("self", "peer"):
        ET.SubElement(assessments, "assessment", name="self-assessment")
    if assessment_type == "staff":
        ET.SubElement(assessments, "assessment", name="staff-assessment", required="true")
    return assessments


def build_open_response(block_id: str, block: OpenResponseBlock) -> ET.Element:
    ora = ET.Element(
        "openassessment",
        url_name=block_id,
        display_name=block.title,
        submission_due=SUBMISSION_DUE,
        submission_start=SUBMISSION_START,
    )
    add_text_element(ora, "title", block.title)
    prompt = ET.SubElement(ora, "prompt")
    add_text_element(prompt, "description", block.prompt)

    rubric = ET.SubElement(ora, "rubric")
    for criterion in block.criteria:
        node = ET.SubElement(rubric, "criterion")
        add_text_element(node, "name", criterion.name)
        add_text_element(node, "label", criterion.name)
        add_text_element(node, "prompt", criterion.name)
        for option in criterion.options:
            opt = ET.SubElement(node, "option", points=str(option.points))
            add_text_element(opt, "name", option.label)
            add_text_element(opt, "label", option.label)
            add_text_element(opt, "explanation", f"{option.label} level performance")

    ora.append(build_assessments(block.assessment_type))
    return ora


def generate_open_response_blocks(blocks: Mapping[str, OpenResponseBlock]) -> Dict[str, str]:
    return {
        f"openassessment/{block_id}.xml": prettify_xml(build_open_response(block_id, block))
        for block_id, block in blocks.items()
    }
