# cli.py - Command line interface for Course Engine
"""
Course Engine CLI - Convert between authoring workbooks and Open edX archives

COMMANDS:
    Conversion:
        course-engine build WORKBOOK [-o OUT]      Workbook -> .tar.gz course export
        course-engine import ARCHIVE [-o OUT]      .tar.gz course export -> workbook

    Checking:
        course-engine validate WORKBOOK [-v]       Report workbook errors without building
        course-engine info FILE [--tree]           Show course statistics

    Setup:
        course-engine template [-o OUT]            Write a sample authoring workbook
        course-engine init [--force]               Write course_engine.yaml

    Other:
        course-engine version                      Show version information

EXAMPLES:
    # Start from the sample workbook
    course-engine template

    # Check a workbook, then build it
    course-engine validate my_course.xlsx
    course-engine build my_course.xlsx -o exports/

    # Turn an existing Studio export into an editable workbook
    course-engine import course.abc123.tar.gz
"""

import sys
from pathlib import Path
from typing import Optional

import click

from course_engine import __version__
from course_engine import icons
from course_engine.config_utils import CONFIG_FILENAME, EngineConfig, create_config_template, get_config
from course_engine.errors import CourseEngineError
from course_engine.icons import log_error, log_info, log_success, log_warning
from course_engine.model import assign_ids, build_hierarchy
from course_engine.pipeline import (
    ARCHIVE_SUFFIX,
    WORKBOOK_SUFFIX,
    build_archive,
    course_stats,
    export_filename,
    import_archive,
    render_outline,
)
from course_engine.workbook_reader import read_workbook
from course_engine.workbook_writer import TEMPLATE_FILENAME, write_template, write_workbook


# ============================================================================
# Configuration & Utilities
# ============================================================================

class EngineContext:
    """Shared context for CLI commands"""

    def __init__(self, working_dir: Optional[Path] = None):
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self.config: EngineConfig = get_config(self.working_dir)
        if self.config.ascii_icons:
            icons.use_ascii_icons()

    def output_path(self, output: Optional[str], default_name: str) -> Path:
        """
        Resolve where to write a result.

        No -o: the configured exports directory. An existing directory or a
        path ending in a separator: that directory. Anything else: the file.
        """
        if not output:
            target = self.config.exports_dir / default_name
        else:
            path = Path(output)
            if not path.is_absolute():
                path = self.working_dir / path
            if path.is_dir() or output.endswith(("/", "\\")):
                target = path / default_name
            else:
                target = path
        target.parent.mkdir(parents=True, exist_ok=True)
        return target


def _fail(error: CourseEngineError):
    click.echo(str(error), err=True)
    sys.exit(1)


def _echo_stats(stats: dict):
    click.echo(f"{icons.CHAPTER} Chapters:      {stats['chapters']}")
    click.echo(f"{icons.SEQUENTIAL} Sequentials:   {stats['sequentials']}")
    click.echo(f"{icons.VERTICAL} Verticals:     {stats['verticals']}")
    click.echo(f"{icons.TEXT} Text blocks:   {stats['text']}")
    click.echo(f"{icons.VIDEO} Videos:        {stats['video']}")
    click.echo(f"{icons.PROBLEM} Problems:      {stats['problem']}")
    click.echo(f"{icons.OPENRESPONSE} Open response: {stats['openresponse']}")


def _echo_errors(errors):
    for message in errors:
        click.echo(f"  {icons.ERROR} {message}")


# ============================================================================
# Click Group Setup
# ============================================================================

@click.group()
@click.pass_context
def cli(ctx):
    """
    Course Engine - Spreadsheet authoring for Open edX courses

    Build OLX course archives from a six-sheet workbook, or turn an
    existing archive back into a workbook.
    """
    try:
        ctx.obj = EngineContext()
    except CourseEngineError as e:
        _fail(e)


# ============================================================================
# Conversion
# ============================================================================

@cli.command()
@click.argument('workbook', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(), help='Output file or directory (default: exports dir)')
@click.pass_obj
def build(ctx: EngineContext, workbook: str, output: Optional[str]):
    """
    Build an Open edX course archive from a workbook

    Every workbook error is listed and nothing is written when any exist.

    Examples:
        course-engine build my_course.xlsx
        course-engine build my_course.xlsx -o dist/course.tar.gz
    """
    click.echo(f"{icons.SPREADSHEET} Reading workbook: {workbook}")
    try:
        result = read_workbook(workbook, ctx.config.default_language)
        if not result.is_valid:
            click.echo(log_error(result.summary()), err=True)
            _echo_errors(result.errors)
            sys.exit(1)

        built = build_archive(result.data, root=ctx.config.archive_root)
    except CourseEngineError as e:
        _fail(e)

    target = ctx.output_path(output, export_filename(result.data.info, ARCHIVE_SUFFIX))
    target.write_bytes(built.archive)

    click.echo()
    _echo_stats(course_stats(result.data))
    click.echo()
    click.echo(log_success(f"Archive written: {target}", prefix="build"))


@cli.command('import')  # 'import' is a keyword, so the function is import_course
@click.argument('archive', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(), help='Output file or directory (default: exports dir)')
@click.pass_obj
def import_course(ctx: EngineContext, archive: str, output: Optional[str]):
    """
    Convert an Open edX course archive into an editable workbook

    Missing files and unsupported blocks are reported as warnings; the
    workbook is still written with everything that could be read.

    Examples:
        course-engine import course.tar.gz
        course-engine import course.tar.gz -o my_course.xlsx
    """
    click.echo(f"{icons.PACKAGE} Reading archive: {archive}")
    try:
        result, _ = import_archive(Path(archive).read_bytes())
    except CourseEngineError as e:
        _fail(e)

    if result.warnings:
        click.echo(log_warning(f"{len(result.warnings)} warning(s) during import:"))
        for message in result.warnings:
            click.echo(f"  {icons.WARNING} {message}")
    else:
        click.echo(log_info("Archive read without warnings"))

    target = ctx.output_path(output, export_filename(result.data.info, WORKBOOK_SUFFIX))
    target.write_bytes(write_workbook(result.data))

    click.echo()
    _echo_stats(course_stats(result.data))
    click.echo()
    click.echo(log_success(f"Workbook written: {target}", prefix="import"))


# ============================================================================
# Checking
# ============================================================================

@cli.command()
@click.argument('workbook', type=click.Path(exists=True, dir_okay=False))
@click.option('--verbose', '-v', is_flag=True, help='Also print the course outline')
@click.pass_obj
def validate(ctx: EngineContext, workbook: str, verbose: bool):
    """
    Check a workbook for errors without building

    Examples:
        course-engine validate my_course.xlsx
        course-engine validate my_course.xlsx -v
    """
    click.echo(f"[*] Validating workbook: {workbook}\n")
    try:
        result = read_workbook(workbook, ctx.config.default_language)
    except CourseEngineError as e:
        _fail(e)

    _echo_errors(result.errors)
    if result.errors:
        click.echo()
    _echo_stats(course_stats(result.data))

    if verbose and result.data.structure:
        hierarchy = build_hierarchy(result.data.structure, assign_ids(result.data.structure))
        click.echo()
        click.echo(render_outline(hierarchy, result.data))

    click.echo()
    click.echo(result.summary())
    if not result.is_valid:
        sys.exit(1)


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--tree', is_flag=True, help='Print the course outline')
@click.pass_obj
def info(ctx: EngineContext, path: str, tree: bool):
    """
    Show statistics for a workbook or a .tar.gz archive

    Examples:
        course-engine info my_course.xlsx
        course-engine info course.tar.gz --tree
    """
    try:
        if path.lower().endswith((".tar.gz", ".tgz")):
            result, hierarchy = import_archive(Path(path).read_bytes())
            problems = result.warnings
        else:
            result = read_workbook(path, ctx.config.default_language)
            hierarchy = build_hierarchy(result.data.structure, assign_ids(result.data.structure))
            problems = result.errors
    except CourseEngineError as e:
        _fail(e)

    course = result.data.info
    click.echo("[list] Course Information\n")
    click.echo("=" * 60)
    click.echo(f"Course Name:  {course.course_name or '(not set)'}")
    click.echo(f"Organization: {course.organization or '(not set)'}")
    click.echo(f"Course ID:    {course.course_id or '(not set)'}")
    click.echo(f"Run:          {course.run or '(not set)'}")
    click.echo(f"Language:     {course.language}")
    click.echo(f"Self-Paced:   {'Yes' if course.self_paced else 'No'}")

    click.echo("\n[books] Content Statistics")
    click.echo("-" * 60)
    _echo_stats(course_stats(result.data))

    if problems:
        click.echo(f"\n{icons.WARNING} {len(problems)} issue(s); run validate or import for details")

    if tree and hierarchy:
        click.echo("\n[tree] Outline")
        click.echo("-" * 60)
        click.echo(render_outline(hierarchy, result.data))


# ============================================================================
# Setup
# ============================================================================

@cli.command()
@click.option('--output', '-o', type=click.Path(), help='Output file or directory (default: current directory)')
@click.pass_obj
def template(ctx: EngineContext, output: Optional[str]):
    """
    Write a sample authoring workbook

    Examples:
        course-engine template
        course-engine template -o starter.xlsx
    """
    if output:
        target = ctx.output_path(output, TEMPLATE_FILENAME)
    else:
        target = ctx.working_dir / TEMPLATE_FILENAME
    target.write_bytes(write_template())
    click.echo(log_success(f"Template written: {target}", prefix="template"))


@cli.command()
@click.option('--force', is_flag=True, help='Overwrite an existing config file')
@click.pass_obj
def init(ctx: EngineContext, force: bool):
    """
    Create course_engine.yaml in the current directory

    Examples:
        course-engine init
        course-engine init --force
    """
    config_path = ctx.working_dir / CONFIG_FILENAME
    if config_path.exists() and not force:
        click.echo(log_warning(f"{CONFIG_FILENAME} already exists (use --force to overwrite)"))
        return

    config_path.write_text(create_config_template(), encoding="utf-8")
    click.echo(log_success(f"Created {config_path}", prefix="init"))
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Run: course-engine template")
    click.echo("  2. Fill in the workbook")
    click.echo("  3. Run: course-engine build edx_manifest_template.xlsx")


# ============================================================================
# Version
# ============================================================================

@cli.command()
def version():
    """Show Course Engine version"""
    click.echo(f"Course Engine CLI v{__version__}")
    click.echo("Workbook <-> Open edX OLX course converter")


# ============================================================================
# Entry Point
# ============================================================================

if __name__ == '__main__':
    cli()
