# config_utils.py - YAML Configuration System for Course Engine
"""
Course Engine configuration utilities with YAML file support.

Configuration Resolution Order (highest to lowest priority):
1. Environment variables (COURSE_ENGINE_ARCHIVE_ROOT, etc.)
2. course_engine.yaml in the working directory
3. ~/.course_engine/config.yaml (global defaults)

Usage:
    from course_engine.config_utils import get_config

    config = get_config()
    print(config.archive_root)
    print(config.exports_dir)
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

import yaml

from course_engine.errors import invalid_archive_root_error


CONFIG_FILENAME = "course_engine.yaml"
DEFAULT_ARCHIVE_ROOT = "course"
DEFAULT_EXPORTS_DIR = "exports"

TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class EngineConfig:
    """Complete Course Engine configuration"""
    # Top-level directory inside generated archives
    archive_root: str = DEFAULT_ARCHIVE_ROOT

    # Where build/import write their output when -o is not given
    exports_dir: Path = Path(DEFAULT_EXPORTS_DIR)

    # Language used when a workbook leaves it blank
    default_language: str = "en"

    # Console output
    ascii_icons: bool = False

    # Paths (resolved at load time)
    working_dir: Optional[Path] = None

    # Extra settings from config file
    extra: Dict[str, Any] = field(default_factory=dict)

    # Track where values came from (for debugging)
    _sources: Dict[str, str] = field(default_factory=dict)


class ConfigLoader:
    """Load configuration from multiple sources"""

    KNOWN_KEYS = {"archive_root", "exports_dir", "default_language", "ascii_icons"}

    def __init__(self, working_dir: Optional[Path] = None):
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self.config = EngineConfig(working_dir=self.working_dir)

    def load(self) -> EngineConfig:
        """Load configuration from all sources in priority order"""
        # Load in reverse priority (lowest first, higher overwrites)
        self._load_global_config()
        self._load_yaml_config()
        self._load_env_vars()

        if not self.config.exports_dir.is_absolute():
            self.config.exports_dir = self.working_dir / self.config.exports_dir

        return self.config

    def _load_global_config(self):
        """Load ~/.course_engine/config.yaml if it exists"""
        global_config = Path.home() / ".course_engine" / "config.yaml"
        if global_config.exists():
            self._load_yaml_file(global_config, "global")

    def _load_yaml_config(self):
        """Load course_engine.yaml from the working directory"""
        yaml_path = self.working_dir / CONFIG_FILENAME
        if yaml_path.exists():
            self._load_yaml_file(yaml_path, CONFIG_FILENAME)

    def _load_yaml_file(self, path: Path, source_name: str):
        """Load settings from a YAML file"""
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            print(f"[config:warn] Failed to parse {path}: {e}")
            return

        if not isinstance(data, dict):
            print(f"[config:warn] Ignoring {path}: expected a mapping at the top level")
            return

        if "archive_root" in data:
            self._set_archive_root(str(data["archive_root"]), source_name)

        if "exports_dir" in data:
            self.config.exports_dir = Path(str(data["exports_dir"])).expanduser()
            self.config._sources["exports_dir"] = source_name

        if "default_language" in data:
            self.config.default_language = str(data["default_language"]).strip() or "en"
            self.config._sources["default_language"] = source_name

        if "ascii_icons" in data:
            self.config.ascii_icons = bool(data["ascii_icons"])
            self.config._sources["ascii_icons"] = source_name

        # Store any extra settings
        for key, value in data.items():
            if key not in self.KNOWN_KEYS:
                self.config.extra[key] = value

    def _set_archive_root(self, value: str, source_name: str):
        """Accept one directory name; blank values keep the current root"""
        root = value.strip().strip("/")
        if not root:
            return
        if "/" in root or "\\" in root or root in (".", ".."):
            raise invalid_archive_root_error(root, source_name)
        self.config.archive_root = root
        self.config._sources["archive_root"] = source_name

    def _load_env_vars(self):
        """Load from environment variables (highest priority)"""
        self._set_archive_root(
            os.environ.get("COURSE_ENGINE_ARCHIVE_ROOT", ""), "env:COURSE_ENGINE_ARCHIVE_ROOT"
        )

        if os.environ.get("COURSE_ENGINE_EXPORTS_DIR"):
            self.config.exports_dir = Path(os.environ["COURSE_ENGINE_EXPORTS_DIR"]).expanduser()
            self.config._sources["exports_dir"] = "env:COURSE_ENGINE_EXPORTS_DIR"

        ascii_icons = os.environ.get("COURSE_ENGINE_ASCII_ICONS")
        if ascii_icons is not None:
            self.config.ascii_icons = ascii_icons.lower() in TRUTHY
            self.config._sources["ascii_icons"] = "env:COURSE_ENGINE_ASCII_ICONS"


# ============================================================================
# Public API
# ============================================================================

def get_config(working_dir: Optional[Path] = None) -> EngineConfig:
    """
    Get complete Course Engine configuration.

    Args:
        working_dir: Directory holding course_engine.yaml (defaults to cwd)

    Returns:
        EngineConfig with all settings resolved
    """
    loader = ConfigLoader(working_dir)
    return loader.load()


def create_config_template(include_comments: bool = True) -> str:
    """
    Generate a course_engine.yaml template.

    Args:
        include_comments: Whether to include explanatory comments

    Returns:
        YAML string ready to write to file
    """
    if include_comments:
        return '''# Course Engine Configuration File

# Top-level directory name inside generated .tar.gz archives.
# Open edX Studio expects "course".
archive_root: course

# Where build and import write their output when --output is not given
exports_dir: exports

# Language used when the Course Info sheet leaves it blank
default_language: en

# Use plain ASCII status markers instead of emoji
ascii_icons: false
'''
    else:
        return '''archive_root: course
exports_dir: exports
default_language: en
ascii_icons: false
'''
