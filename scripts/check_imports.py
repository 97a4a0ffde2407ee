#!/usr/bin/env python3
"""Check for forbidden imports in the codebase.

This script enforces architectural boundaries by checking that:
1. Domain models import nothing but the standard library and each other
2. Infrastructure does not reach up into services, app or interfaces
3. Services do not import the app or interface layers
4. CLI commands reach the HTTP client only through the context adapter
5. The feed package is imported as a package, never through its submodules

Usage:
    python scripts/check_imports.py
    python scripts/check_imports.py --verbose
    python scripts/check_imports.py --fix-suggestions
"""

from __future__ import annotations

import argparse
import ast
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass
class ImportViolation:
    """Represents a forbidden import."""

    file_path: Path
    line_number: int
    import_statement: str
    forbidden_module: str
    reason: str


@dataclass
class ImportRule:
    """Defines forbidden imports for a directory."""

    directory: str
    forbidden_patterns: List[str]
    exceptions: List[str] = field(default_factory=list)
    reason: str = ""


# Define architectural rules
IMPORT_RULES: List[ImportRule] = [
    ImportRule(
        directory="openmarket/domain",
        forbidden_patterns=[
            "openmarket.infrastructure",
            "openmarket.services",
            "openmarket.app",
            "openmarket.interfaces",
        ],
        reason="Domain layer must be independent of every other layer",
    ),
    ImportRule(
        directory="openmarket/infrastructure",
        forbidden_patterns=[
            "openmarket.services",
            "openmarket.app",
            "openmarket.interfaces",
        ],
        reason="Infrastructure must not depend on the layers built on top of it",
    ),
    ImportRule(
        directory="openmarket/services",
        forbidden_patterns=[
            "openmarket.app",
            "openmarket.interfaces",
        ],
        reason="Services must not depend on the app or interface layers",
    ),
    ImportRule(
        directory="openmarket/interfaces/cli",
        forbidden_patterns=[
            "openmarket.infrastructure.http",
        ],
        exceptions=[
            # Builds the API client from resolved settings
            "openmarket/interfaces/cli/context.py",
        ],
        reason="CLI commands should get their API client from the command context",
    ),
]


# Feed package boundary: import from openmarket.services.feed only
FEED_FORBIDDEN_PATTERNS = [
    "openmarket.services.feed.browser",
    "openmarket.services.feed.collection",
    "openmarket.services.feed.gate",
    "openmarket.services.feed.store",
    "openmarket.services.feed.streams",
]


def check_feed_imports(base_path: Path) -> List[ImportViolation]:
    """Check that feed imports go through openmarket.services.feed, not submodules."""
    violations = []

    for search_dir in ["openmarket", "tests"]:
        dir_path = base_path / search_dir
        if not dir_path.exists():
            continue

        for py_file in dir_path.rglob("*.py"):
            if "__pycache__" in str(py_file):
                continue

            for line_no, module in extract_imports(py_file):
                for forbidden in FEED_FORBIDDEN_PATTERNS:
                    if module == forbidden or module.startswith(forbidden + "."):
                        violations.append(
                            ImportViolation(
                                file_path=py_file,
                                line_number=line_no,
                                import_statement=module,
                                forbidden_module=forbidden,
                                reason="Import the feed from openmarket.services.feed, not submodules",
                            )
                        )

    return violations


def extract_imports(file_path: Path) -> List[tuple[int, str]]:
    """
    Extract all absolute import statements from a Python file.

    Relative imports stay inside their own package and are skipped.

    Args:
        file_path (Path): Path to the Python file.

    Returns:
        List[tuple[int, str]]: List of (line number, module name) tuples.
    """
    try:
        content = file_path.read_text(encoding="utf-8")
        tree = ast.parse(content)
    except (SyntaxError, UnicodeDecodeError):
        return []

    imports = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module and not node.level:
                imports.append((node.lineno, node.module))
    return imports


def check_file(file_path: Path, rule: ImportRule, base_path: Path) -> List[ImportViolation]:
    """
    Check a single file against an import rule.

    Args:
        file_path (Path): Path to the Python file.
        rule (ImportRule): Import rule to check against.
        base_path (Path): Project root the rule exceptions are relative to.

    Returns:
        List[ImportViolation]: List of violations found in the file.
    """
    violations = []

    rel_path = file_path.relative_to(base_path).as_posix()
    if rel_path in rule.exceptions:
        return violations

    for line_no, module in extract_imports(file_path):
        for forbidden in rule.forbidden_patterns:
            if module == forbidden or module.startswith(forbidden + "."):
                violations.append(
                    ImportViolation(
                        file_path=file_path,
                        line_number=line_no,
                        import_statement=module,
                        forbidden_module=forbidden,
                        reason=rule.reason,
                    )
                )
    return violations


def check_directory(base_path: Path, rule: ImportRule) -> List[ImportViolation]:
    """Check all Python files in a directory against an import rule."""
    violations = []
    dir_path = base_path / rule.directory

    if not dir_path.exists():
        return violations

    for py_file in dir_path.rglob("*.py"):
        if "__pycache__" in str(py_file):
            continue
        violations.extend(check_file(py_file, rule, base_path))

    return violations


def collect_violations(base_path: Path) -> List[ImportViolation]:
    all_violations: List[ImportViolation] = []
    for rule in IMPORT_RULES:
        all_violations.extend(check_directory(base_path, rule))
    all_violations.extend(check_feed_imports(base_path))
    return all_violations


def main() -> int:
    """Check the project for forbidden imports; returns the exit code."""
    parser = argparse.ArgumentParser(description="Check for forbidden imports")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="List the rules being checked"
    )
    parser.add_argument(
        "--fix-suggestions", action="store_true", help="Show fix suggestions"
    )
    args = parser.parse_args()

    base_path = Path(__file__).parent.parent
    if args.verbose:
        for rule in IMPORT_RULES:
            print(f"Checking {rule.directory}: {', '.join(rule.forbidden_patterns)}")

    all_violations = collect_violations(base_path)

    if not all_violations:
        print("✅ No import violations found!")
        return 0

    print(f"❌ Found {len(all_violations)} import violation(s):\n")

    for v in all_violations:
        print(f"  {v.file_path}:{v.line_number}")
        print(f"    Import: {v.import_statement}")
        print(f"    Reason: {v.reason}")
        if args.fix_suggestions:
            print("    Suggestion: Import through the package facade or move to an adapter file")
        print()

    return 1


if __name__ == "__main__":
    sys.exit(main())
