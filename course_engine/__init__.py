"""
Course Engine - Spreadsheet authoring for Open edX courses

Converts a six-sheet authoring workbook into an Open edX OLX course
archive (.tar.gz), and converts an existing archive back into a workbook
so it can be edited and rebuilt.

Core Concept: the workbook is the human-editable source; the archive is
what Studio imports.
"""

__version__ = "1.0.0"
__author__ = "Dale Chapman"
__license__ = "MIT"

# Make key entry points easily importable
from .errors import CourseEngineError, ConfigurationError
from .workbook_reader import read_workbook
from .olx_parser import parse_olx
from .pipeline import build_archive, import_archive

__all__ = [
    "__version__",
    "CourseEngineError",
    "ConfigurationError",
    "read_workbook",
    "parse_olx",
    "build_archive",
    "import_archive",
]
