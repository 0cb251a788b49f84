#!/usr/bin/env python3
"""Run import sorting, formatting and the test suite.

Usage:
    python scripts/lint_all.py [--check] [--skip-tests]

Options:
    --check: Report formatting problems instead of fixing them
    --skip-tests: Skip running pytest
"""

import argparse
import subprocess
import sys
from pathlib import Path
from typing import List, Tuple

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

SOURCE_DIRS = ["products4u", "tests", "scripts"]


def build_checks(check_only: bool, skip_tests: bool) -> List[Tuple[str, List[str]]]:
    """Return (description, command) pairs in the order they should run."""
    isort_cmd = ["isort", *SOURCE_DIRS]
    black_cmd = ["black", *SOURCE_DIRS]
    if check_only:
        isort_cmd += ["--check-only", "--diff"]
        black_cmd += ["--check"]

    checks = [("isort", isort_cmd), ("black", black_cmd)]
    if not skip_tests:
        checks.append(("pytest", ["pytest", "tests/", "-v"]))
    return checks


def run_command(cmd: List[str], description: str) -> bool:
    """Run a command from the project root. Returns True on exit code 0."""
    print(f"\n==> {description}: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, cwd=PROJECT_ROOT, check=False)
    except FileNotFoundError as e:
        print(f"    {description} is not installed: {e}")
        return False

    passed = result.returncode == 0
    print(f"    {description} {'passed' if passed else f'failed ({result.returncode})'}")
    return passed


def main() -> int:
    parser = argparse.ArgumentParser(description="Run code quality checks")
    parser.add_argument("--check", action="store_true", help="Only report problems")
    parser.add_argument("--skip-tests", action="store_true", help="Skip pytest")
    args = parser.parse_args()

    results = [
        run_command(cmd, description)
        for description, cmd in build_checks(args.check, args.skip_tests)
    ]

    if all(results):
        print("\nAll checks passed.")
        return 0
    print("\nSome checks failed.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
