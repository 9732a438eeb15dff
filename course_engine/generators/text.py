"""
HTML block OLX.

Each text block becomes a pair of files:
    html/{id}.xml   pointer carrying display_name and filename
    html/{id}.html  the body, written verbatim when it already holds markup
"""

from typing import Dict, Mapping
from xml.etree import ElementTree as ET

from course_engine.model import TextBlock
from course_engine.olx import prettify_xml
from course_engine.utils import text_to_html


def generate_html_blocks(text_blocks: Mapping[str, TextBlock]) -> Dict[str, str]:
    files = {}
    for block_id, block in text_blocks.items():
        pointer = ET.Element("html", filename=block_id, display_name=block.title)
        files[f"html/{block_id}.xml"] = prettify_xml(pointer)
        files[f"html/{block_id}.html"] = text_to_html(block.content) + "\n"
    return files
