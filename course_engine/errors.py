# errors.py
"""
Custom exception classes with improved error messages for Course Engine

These are reserved for fatal failures (an archive that cannot be
decompressed, a workbook that cannot be opened). Row-level validation
problems are accumulated as plain strings on the result objects instead.

All exceptions include:
- Clear error description
- Actionable suggestions
- Relevant context
"""
from pathlib import Path
from typing import Optional, Dict, Any, Sequence, Union


class CourseEngineError(Exception):
    """Base exception for all Course Engine errors"""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        self.cause = cause
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error with all details"""
        lines = [
            "",
            "=" * 70,
            f"❌ {self.__class__.__name__}",
            "=" * 70,
            "",
            self.message,
        ]

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestion:
            lines.append("")
            lines.append("💡 Suggestion:")
            lines.append(f"  {self.suggestion}")

        if self.cause:
            lines.append("")
            lines.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")

        lines.append("")
        lines.append("=" * 70)
        lines.append("")

        return "\n".join(lines)


class ConfigurationError(CourseEngineError):
    """Configuration is missing or invalid"""
    pass


class WorkbookReadError(CourseEngineError):
    """Workbook could not be opened at all"""
    pass


class ArchiveReadError(CourseEngineError):
    """Archive container could not be decompressed"""
    pass


class ArchiveWriteError(CourseEngineError):
    """An entry could not be represented in a ustar header"""
    pass


class ExportBlockedError(CourseEngineError):
    """Export was requested while validation errors are outstanding"""

    def __init__(self, message: str, errors: Sequence[str] = (), **kwargs):
        self.errors = list(errors)
        super().__init__(message, **kwargs)


# Specific error factory functions

def _describe_source(source: Union[str, Path, bytes, None]) -> str:
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    return str(source)


def unreadable_workbook_error(
    source: Union[str, Path, bytes, None],
    cause: Optional[Exception] = None
) -> WorkbookReadError:
    """Create error for a workbook that cannot be opened"""
    return WorkbookReadError(
        message="Could not open the course workbook",
        suggestion=(
            "Make sure the file is an .xlsx workbook saved by Excel, "
            "LibreOffice or Google Sheets.\n\n"
            "Generate a fresh starting point with:\n"
            "  course-engine template"
        ),
        context={"source": _describe_source(source)},
        cause=cause,
    )


def unreadable_archive_error(
    source: Union[str, Path, bytes, None],
    cause: Optional[Exception] = None
) -> ArchiveReadError:
    """Create error for an archive that cannot be decompressed"""
    return ArchiveReadError(
        message="Could not read the course archive",
        suggestion=(
            "The import expects a gzip-compressed tar archive (.tar.gz) "
            "exported from Open edX Studio."
        ),
        context={"source": _describe_source(source)},
        cause=cause,
    )


def export_blocked_error(errors: Sequence[str]) -> ExportBlockedError:
    """Create error when export is attempted with validation errors"""
    shown = list(errors)[:10]
    more = len(errors) - len(shown)
    listing = "\n".join(f"  - {e}" for e in shown)
    if more > 0:
        listing += f"\n  ... and {more} more"
    return ExportBlockedError(
        message=f"Export blocked by {len(errors)} validation error(s)",
        errors=errors,
        suggestion=(
            "Fix the following issues in the workbook:\n" + listing +
            "\n\nThen run: course-engine validate <workbook>"
        ),
        context={"error_count": len(errors)},
    )


def path_too_long_error(path: str) -> ArchiveWriteError:
    """Create error for a path that does not fit a ustar header"""
    return ArchiveWriteError(
        message=f"Archive path too long for a ustar header: {path}",
        suggestion=(
            "Shorten the block id or structure names so that each path "
            "component stays under 100 characters."
        ),
        context={"path": path, "length": len(path.encode('utf-8'))},
    )


def invalid_archive_root_error(root: str, source: str) -> ConfigurationError:
    """Create error for an archive_root that is not a single directory name"""
    return ConfigurationError(
        message=f"archive_root must be a single directory name, got: {root}",
        suggestion=(
            "Set archive_root to a plain name such as \"course\" in "
            "course_engine.yaml or COURSE_ENGINE_ARCHIVE_ROOT."
        ),
        context={"archive_root": root, "source": source},
    )
