"""
Vertical OLX: vertical/{id}.xml referencing each content block in the unit.
"""

from typing import Dict, Sequence
from xml.etree import ElementTree as ET

from course_engine.model import Chapter
from course_engine.olx import prettify_xml

# OLX tag used for each workbook block_type
BLOCK_TYPE_TAGS = {
    "text": "html",
    "video": "video",
    "problem": "problem",
    "openresponse": "openassessment",
}


def generate_verticals(hierarchy: Sequence[Chapter]) -> Dict[str, str]:
    files = {}
    for ch in hierarchy:
        for seq in ch.sequentials:
            for vert in seq.verticals:
                root = ET.Element("vertical", display_name=vert.name)
                for block in vert.blocks:
                    tag = BLOCK_TYPE_TAGS.get(block.type, block.type)
                    ET.SubElement(root, tag, url_name=block.block_id)
                files[f"vertical/{vert.id}.xml"] = prettify_xml(root)
    return files
