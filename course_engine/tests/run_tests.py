#!/usr/bin/env python3
# course_engine/tests/run_tests.py
"""
Test runner script for Course Engine tests

Usage:
    # From the project root:
    python -m pytest course_engine/tests/ -v

    # Or run this script:
    python course_engine/tests/run_tests.py

    # With coverage:
    python course_engine/tests/run_tests.py --cov
"""
import sys
from pathlib import Path

TESTS_DIR = Path(__file__).parent
PACKAGE_DIR = TESTS_DIR.parent
PROJECT_ROOT = PACKAGE_DIR.parent

# Add project root to path so 'course_engine' package is importable
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def main():
    """Run all tests with optional coverage"""
    import pytest

    args = [
        str(TESTS_DIR),
        '-v',
        '--tb=short',
        '-W', 'ignore::DeprecationWarning',
    ]

    if '--cov' in sys.argv:
        args.extend([
            '--cov=course_engine',
            '--cov-report=term-missing',
            '--cov-report=html',
        ])
        sys.argv.remove('--cov')

    args.extend(sys.argv[1:])

    return pytest.main(args)


if __name__ == '__main__':
    sys.exit(main())
