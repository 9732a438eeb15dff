#!/usr/bin/env python3
"""
# Course Engine
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

olx.py - XML helpers and tag scanner for the OLX dialect

Writing: generators build xml.etree.ElementTree trees and call
prettify_xml(). ElementTree escapes & < > in text and attributes; the
quote characters it leaves alone are escaped afterwards, so every file
carries all five entities and callers never escape by hand.

Reading: scan_tags() walks an XML string once and yields start, end and
self-closing tags with their decoded attributes. It is deliberately not a
full XML parser: it only needs to understand the files this package writes
and the common shapes of an Open edX export, and it skips anything it does
not recognize (comments, processing instructions, malformed tags).
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple
from xml.etree import ElementTree as ET

TAG_RE = re.compile(
    r"<!--.*?-->"
    r"|<!\[CDATA\[.*?\]\]>"
    r"|<\?.*?\?>"
    r"|<!.*?>"
    r"|<(?P<close>/)?(?P<name>[A-Za-z_][\w.:-]*)"
    r"(?P<attrs>(?:\s+[^\s=/>]+\s*=\s*(?:\"[^\"]*\"|'[^']*'))*)"
    r"\s*(?P<empty>/)?>",
    re.DOTALL,
)
ATTR_RE = re.compile(r"([^\s=/>]+)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")
STRIP_TAGS_RE = re.compile(r"<[^>]*>")
WHITESPACE_RE = re.compile(r"\s+")

# ElementTree output: < and > only occur as markup
MARKUP_SPLIT_RE = re.compile(r"(<[^>]*>)")


def unescape_xml(value: str) -> str:
    """Decode named and numeric character references."""
    return html.unescape(value or "")


# ============================================================================
# XML Helpers
# ============================================================================

def add_text_element(parent: ET.Element, tag: str, text: Optional[str] = None, **attribs) -> ET.Element:
    """Add a child element to parent, optionally holding text."""
    elem = ET.SubElement(parent, tag, **attribs)
    if text is not None:
        elem.text = str(text)
    return elem


def escape_quotes(markup: str) -> str:
    """Escape the ' and " characters ElementTree leaves in its output."""
    parts = MARKUP_SPLIT_RE.split(markup)
    for i, part in enumerate(parts):
        # Even indexes are text between tags
        if i % 2 == 0:
            part = part.replace('"', "&quot;")
        parts[i] = part.replace("'", "&apos;")
    return "".join(parts)


def _tostring(elem: ET.Element) -> str:
    short = elem.text is None and len(elem) == 0
    text = ET.tostring(elem, encoding="unicode", short_empty_elements=short)
    return escape_quotes(text.replace(" />", "/>"))


def _start_tag(elem: ET.Element) -> str:
    shell = _tostring(ET.Element(elem.tag, elem.attrib))
    return shell[:-2] + ">"


def _pretty_lines(elem: ET.Element, level: int, indent: str) -> List[str]:
    pad = indent * level
    # Text or mixed content stays on one line so whitespace is not invented
    if len(elem) == 0 or elem.text or any(child.tail for child in elem):
        return [pad + _tostring(elem)]

    lines = [pad + _start_tag(elem)]
    for child in elem:
        lines.extend(_pretty_lines(child, level + 1, indent))
    lines.append(f"{pad}</{elem.tag}>")
    return lines


def prettify_xml(elem: ET.Element, indent: str = "  ") -> str:
    """Return a pretty-printed XML document string ending in a newline."""
    return "\n".join(_pretty_lines(elem, 0, indent)) + "\n"


# ============================================================================
# Tag Scanner
# ============================================================================

@dataclass(frozen=True)
class Tag:
    """A tag found by scan_tags(). kind is 'start', 'end' or 'empty'."""
    name: str
    attrs: Dict[str, str]
    kind: str
    start: int
    end: int

    @property
    def opens(self) -> bool:
        return self.kind != "end"


def parse_attributes(text: str) -> Dict[str, str]:
    """Pull name="value" pairs out of a tag's attribute text."""
    attrs = {}
    for m in ATTR_RE.finditer(text or ""):
        raw = m.group(2) if m.group(2) is not None else m.group(3)
        attrs[m.group(1)] = unescape_xml(raw)
    return attrs


def scan_tags(xml: str) -> Iterator[Tag]:
    """Yield every element tag in document order, skipping non-element markup."""
    for m in TAG_RE.finditer(xml or ""):
        name = m.group("name")
        if name is None:
            continue
        if m.group("close"):
            kind = "end"
        elif m.group("empty"):
            kind = "empty"
        else:
            kind = "start"
        attrs = parse_attributes(m.group("attrs")) if kind != "end" else {}
        yield Tag(name, attrs, kind, m.start(), m.end())


def root_tag(xml: str) -> Optional[Tag]:
    """Return the first opening tag of a document."""
    for tag in scan_tags(xml):
        if tag.opens:
            return tag
    return None


def root_attributes(xml: str) -> Dict[str, str]:
    """Attributes of the first opening tag, or an empty dict."""
    tag = root_tag(xml)
    return dict(tag.attrs) if tag else {}


def child_url_names(xml: str, tag_name: str) -> List[str]:
    """url_name of every <tag_name url_name="..."> reference in document order."""
    return [
        tag.attrs["url_name"]
        for tag in scan_tags(xml)
        if tag.name == tag_name and tag.opens and "url_name" in tag.attrs
    ]


def iter_elements(xml: str, tag_name: str) -> Iterator[Tuple[Dict[str, str], str]]:
    """
    Yield (attributes, raw inner markup) for each <tag_name> element.

    Matches are non-overlapping: a same-named element nested inside a match
    is part of that match's inner markup. An element that is never closed
    runs to the end of the document.
    """
    xml = xml or ""
    tags = list(scan_tags(xml))
    i = 0
    while i < len(tags):
        tag = tags[i]
        if tag.name != tag_name or not tag.opens:
            i += 1
            continue
        if tag.kind == "empty":
            yield dict(tag.attrs), ""
            i += 1
            continue

        depth = 1
        j = i + 1
        while j < len(tags):
            other = tags[j]
            if other.name == tag_name:
                if other.kind == "start":
                    depth += 1
                elif other.kind == "end":
                    depth -= 1
                    if depth == 0:
                        break
            j += 1

        if j < len(tags):
            yield dict(tag.attrs), xml[tag.end:tags[j].start]
        else:
            yield dict(tag.attrs), xml[tag.end:]
        i = j + 1


def element_inner(xml: str, tag_name: str) -> Optional[str]:
    """Raw inner markup of the first <tag_name> element, or None."""
    for _, inner in iter_elements(xml, tag_name):
        return inner
    return None


def strip_tags(fragment: str) -> str:
    """Replace tags with spaces and collapse whitespace."""
    return WHITESPACE_RE.sub(" ", STRIP_TAGS_RE.sub(" ", fragment or "")).strip()


def text_content(fragment: str) -> str:
    """Plain text of a markup fragment: tags stripped, entities decoded."""
    return WHITESPACE_RE.sub(" ", unescape_xml(strip_tags(fragment))).strip()


def element_text(xml: str, tag_name: str) -> str:
    """Plain text of the first <tag_name> element, or "" when absent."""
    inner = element_inner(xml, tag_name)
    return text_content(inner) if inner is not None else ""
