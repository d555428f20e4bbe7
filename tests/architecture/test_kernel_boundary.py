"""
Kernel Boundary & Invariants Contract.

Tests that enforce the package layering:

1. nfr_kernel/** may NOT import nfr_engines, nfr_services or nfr_config.
   The kernel never depends upward.

2. nfr_engines/** may NOT import nfr_services or nfr_config. Engines are
   pure and receive everything as arguments.

3. The kernel invariants declaration is complete and non-empty.

These tests read source code via AST; they cannot break anything.
"""

import ast
from pathlib import Path

from nfr_kernel.invariants import (
    ALL_KERNEL_INVARIANTS,
    FORBIDDEN_KERNEL_IMPORTS,
    KernelInvariant,
)

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[Path]:
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Extract (line_number, module_string) for all imports in a file."""
    tree = ast.parse(filepath.read_text(), filename=str(filepath))
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for filepath in _python_files(package):
        for lineno, module in _extract_imports(filepath):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {filepath.relative_to(ROOT)}:{lineno} imports '{module}'")
    return found


class TestKernelNoUpwardDependencies:
    def test_kernel_files_found(self):
        """Test the kernel source files are discovered."""
        assert _python_files("nfr_kernel")

    def test_kernel_does_not_import_forbidden_packages(self):
        """Test the kernel never imports the engines, services or config packages."""
        violations = _violations("nfr_kernel", FORBIDDEN_KERNEL_IMPORTS)
        assert not violations, (
            "Kernel boundary violation: nfr_kernel/** must not import "
            "upward packages:\n" + "\n".join(violations)
        )


class TestEnginePurity:
    def test_engines_do_not_import_shell(self):
        """Test engines never import the services or config packages."""
        violations = _violations("nfr_engines", ("nfr_services", "nfr_config"))
        assert not violations, (
            "Engine purity violation: nfr_engines/** must not import "
            "services or config:\n" + "\n".join(violations)
        )

    def test_no_float_literals_in_arithmetic_layers(self):
        """Test no float literal appears in the arithmetic layers."""
        floats: list[str] = []
        for package in ("nfr_kernel", "nfr_engines"):
            for filepath in _python_files(package):
                tree = ast.parse(filepath.read_text())
                for node in ast.walk(tree):
                    if isinstance(node, ast.Constant) and isinstance(node.value, float):
                        floats.append(f"  {filepath.relative_to(ROOT)}:{node.lineno}")
        assert not floats, "Float literals found:\n" + "\n".join(floats)


class TestInvariantDeclaration:
    def test_invariants_non_empty(self):
        """Test the invariant registry is populated."""
        assert len(ALL_KERNEL_INVARIANTS) == len(KernelInvariant) > 0

    def test_invariant_values_unique_snake_case(self):
        """Test invariant values are unique snake_case names."""
        values = [inv.value for inv in KernelInvariant]
        assert len(values) == len(set(values))
        assert all(v == v.lower() for v in values)
