#!/usr/bin/env python3
"""
icons.py - Centralized icon definitions for Course Engine console output

Usage:
    from course_engine.icons import log_success, log_warning
    print(log_success("Archive written", prefix="build"))

Or import individual icons:
    from course_engine.icons import SUCCESS, WARNING
    print(f"{SUCCESS} Done!")

All unicode characters are defined here once. Never edit unicode
characters in other files - import from this module instead.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Icons:
    """
    Centralized icon definitions.

    Categories:
    - Status: SUCCESS, ERROR, WARNING, INFO
    - Course levels: CHAPTER, SEQUENTIAL, VERTICAL
    - Blocks: TEXT, VIDEO, PROBLEM, OPENRESPONSE
    - Files: PACKAGE, SPREADSHEET, FILE
    """

    # =========================================================================
    # Status Icons
    # =========================================================================
    SUCCESS: str = "✅"
    ERROR: str = "❌"
    WARNING: str = "⚠️"
    INFO: str = "ℹ️"

    # =========================================================================
    # Course Level Icons
    # =========================================================================
    CHAPTER: str = "📚"
    SEQUENTIAL: str = "📖"
    VERTICAL: str = "📄"

    # =========================================================================
    # Block Icons
    # =========================================================================
    TEXT: str = "📝"
    VIDEO: str = "🎬"
    PROBLEM: str = "❓"
    OPENRESPONSE: str = "✍️"

    # =========================================================================
    # File Icons
    # =========================================================================
    PACKAGE: str = "📦"
    SPREADSHEET: str = "📊"
    FILE: str = "📄"


# Global singleton instance
icons = Icons()

SUCCESS = icons.SUCCESS
ERROR = icons.ERROR
WARNING = icons.WARNING
INFO = icons.INFO
CHAPTER = icons.CHAPTER
SEQUENTIAL = icons.SEQUENTIAL
VERTICAL = icons.VERTICAL
TEXT = icons.TEXT
VIDEO = icons.VIDEO
PROBLEM = icons.PROBLEM
OPENRESPONSE = icons.OPENRESPONSE
PACKAGE = icons.PACKAGE
SPREADSHEET = icons.SPREADSHEET
FILE = icons.FILE


# =========================================================================
# Helper Functions
# =========================================================================

def block_type_icon(block_type: str) -> str:
    """Return icon for a block type string."""
    type_map = {
        "text": TEXT,
        "video": VIDEO,
        "problem": PROBLEM,
        "openresponse": OPENRESPONSE,
    }
    return type_map.get(block_type.lower(), FILE)


# =========================================================================
# Fallback Mode (for terminals that don't support unicode)
# =========================================================================

class AsciiIcons:
    """ASCII-only fallback icons for limited terminals."""

    SUCCESS = "[OK]"
    ERROR = "[X]"
    WARNING = "[!]"
    INFO = "[i]"
    CHAPTER = "[C]"
    SEQUENTIAL = "[S]"
    VERTICAL = "[U]"
    TEXT = "[T]"
    VIDEO = "[V]"
    PROBLEM = "[Q]"
    OPENRESPONSE = "[O]"
    PACKAGE = "[Z]"
    SPREADSHEET = "[X]"
    FILE = "[F]"


def use_ascii_icons():
    """
    Switch to ASCII-only icons globally.

    Call this if unicode icons cause problems:
        from course_engine.icons import use_ascii_icons
        use_ascii_icons()
    """
    global icons, SUCCESS, ERROR, WARNING, INFO
    global CHAPTER, SEQUENTIAL, VERTICAL
    global TEXT, VIDEO, PROBLEM, OPENRESPONSE
    global PACKAGE, SPREADSHEET, FILE

    ascii_icons = AsciiIcons()
    icons = ascii_icons

    SUCCESS = ascii_icons.SUCCESS
    ERROR = ascii_icons.ERROR
    WARNING = ascii_icons.WARNING
    INFO = ascii_icons.INFO
    CHAPTER = ascii_icons.CHAPTER
    SEQUENTIAL = ascii_icons.SEQUENTIAL
    VERTICAL = ascii_icons.VERTICAL
    TEXT = ascii_icons.TEXT
    VIDEO = ascii_icons.VIDEO
    PROBLEM = ascii_icons.PROBLEM
    OPENRESPONSE = ascii_icons.OPENRESPONSE
    PACKAGE = ascii_icons.PACKAGE
    SPREADSHEET = ascii_icons.SPREADSHEET
    FILE = ascii_icons.FILE


# =========================================================================
# Output Helper Functions
# =========================================================================

def log(icon: str, message: str, prefix: str = "") -> str:
    """
    Format a log message with icon.

    Args:
        icon: Icon to display (use constants from this module)
        message: Message text
        prefix: Optional prefix tag like "build" or "import"

    Returns:
        Formatted string like "✅ Done!" or "[build] ✅ Done!"
    """
    if prefix:
        return f"[{prefix}] {icon} {message}"
    return f"{icon} {message}"


def log_success(message: str, prefix: str = "") -> str:
    """Format a success message."""
    return log(SUCCESS, message, prefix)


def log_error(message: str, prefix: str = "") -> str:
    """Format an error message."""
    return log(ERROR, message, prefix)


def log_warning(message: str, prefix: str = "") -> str:
    """Format a warning message."""
    return log(WARNING, message, prefix)


def log_info(message: str, prefix: str = "") -> str:
    """Format an info message."""
    return log(INFO, message, prefix)
