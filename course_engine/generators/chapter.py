"""Chapter OLX: chapter/{id}.xml listing the chapter's sequentials."""

from typing import Dict, Sequence
from xml.etree import ElementTree as ET

from course_engine.model import Chapter
from course_engine.olx import prettify_xml


def generate_chapters(hierarchy: Sequence[Chapter]) -> Dict[str, str]:
    files = {}
    for ch in hierarchy:
        root = ET.Element("chapter", display_name=ch.name)
        for seq in ch.sequentials:
            ET.SubElement(root, "sequential", url_name=seq.id)
        files[f"chapter/{ch.id}.xml"] = prettify_xml(root)
    return files
