"""Sequential OLX: sequential/{id}.xml listing the subsection's verticals."""

from typing import Dict, Sequence
from xml.etree import ElementTree as ET

from course_engine.model import Chapter
from course_engine.olx import prettify_xml


def generate_sequentials(hierarchy: Sequence[Chapter]) -> Dict[str, str]:
    files = {}
    for ch in hierarchy:
        for seq in ch.sequentials:
            root = ET.Element("sequential", display_name=seq.name)
            for vert in seq.verticals:
                ET.SubElement(root, "vertical", url_name=vert.id)
            files[f"sequential/{seq.id}.xml"] = prettify_xml(root)
    return files
