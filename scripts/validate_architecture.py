#!/usr/bin/env python3
"""
Validate three-layer architecture dependencies.

Rules:
- c1 imports NOTHING from c2/c3 (only stdlib + external + other c1)
- c2 imports from c1 (and other c2) only
- c3 imports from c2 and c1 only
- sdk (client side) imports from c1 only

No circular dependencies allowed.
"""

import ast
import sys
from pathlib import Path
from typing import List, Optional, Tuple

PACKAGE = "tasksync"
PACKAGE_DIR = Path(__file__).resolve().parent.parent / PACKAGE

FORBIDDEN = {
    "c1": {"c2", "c3", "sdk", "api"},
    "c2": {"c3", "sdk", "api"},
    "c3": {"sdk", "api"},
    "sdk": {"c2", "c3", "api"},
}


def extract_imports(file_path: Path) -> List[str]:
    """Extract all package-internal imports from a Python file."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            tree = ast.parse(f.read(), filename=str(file_path))
    except SyntaxError as e:
        print(f"Syntax error in {file_path}: {e}")
        return []

    imports = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.name.startswith(f'{PACKAGE}.'):
                    imports.append(alias.name)
        elif isinstance(node, ast.ImportFrom):
            if node.module and node.module.startswith(f'{PACKAGE}.'):
                imports.append(node.module)

    return imports


def get_layer(package_name: str) -> Optional[str]:
    """Get layer from a top-level subpackage name, None for shared modules."""
    for prefix in ('c1', 'c2', 'c3'):
        if package_name.startswith(f'{prefix}_'):
            return prefix
    if package_name in ('sdk', 'api'):
        return package_name
    return None


def validate_layer_dependencies(package_dir: Path = PACKAGE_DIR) -> Tuple[bool, List[str]]:
    """Validate that layer dependencies follow the rules."""
    violations = []

    if not package_dir.exists():
        return False, [f"Package directory not found: {package_dir}"]

    for py_file in sorted(package_dir.rglob("*.py")):
        package_parts = py_file.relative_to(package_dir).parts
        if len(package_parts) < 2:
            continue

        file_layer = get_layer(package_parts[0])
        if file_layer is None:
            continue

        for imported_module in extract_imports(py_file):
            parts = imported_module.split('.')
            if len(parts) < 2:
                continue
            imported_layer = get_layer(parts[1])
            if imported_layer in FORBIDDEN.get(file_layer, ()):
                violations.append(
                    f"{py_file.relative_to(package_dir)}: {file_layer} cannot import from {imported_layer} ({imported_module})"
                )

    return len(violations) == 0, violations


def main():
    """Run architecture validation."""
    print("=" * 70)
    print("Three-Layer Architecture Validator")
    print("=" * 70)
    print()

    success, violations = validate_layer_dependencies()

    if success:
        print("All layer dependencies are valid!")
        print()
        print("Layer rules:")
        print("  - c1 imports: stdlib + external packages + c1")
        print("  - c2 imports: c1 + c2 + stdlib + external packages")
        print("  - c3 imports: c1 + c2 + c3 + stdlib + external packages")
        print("  - sdk imports: c1 + stdlib + external packages")
        return 0
    else:
        print(f"Found {len(violations)} layer dependency violations:")
        print()
        for violation in violations:
            print(f"  - {violation}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
