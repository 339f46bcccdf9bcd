"""Packaging correctness verification for xml-structural-diff.

Tests validate:
- The top-level import exposes the public API
- The py.typed marker ships with the package
- The built wheel contains every source module and correct metadata

Wheel tests build with ``poetry build`` and are skipped when poetry is not
available.
"""

from __future__ import annotations

import shutil
import subprocess
import zipfile
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent.parent

_MODULES = [
    "xml_structural_diff/__init__.py",
    "xml_structural_diff/api.py",
    "xml_structural_diff/cache.py",
    "xml_structural_diff/comparator.py",
    "xml_structural_diff/errors.py",
    "xml_structural_diff/formatter.py",
    "xml_structural_diff/placeholders.py",
    "xml_structural_diff/protocols.py",
    "xml_structural_diff/result.py",
    "xml_structural_diff/engine/__init__.py",
    "xml_structural_diff/engine/comparison.py",
    "xml_structural_diff/engine/config.py",
    "xml_structural_diff/engine/controllers.py",
    "xml_structural_diff/engine/element_selectors.py",
    "xml_structural_diff/engine/evaluators.py",
    "xml_structural_diff/engine/filters.py",
    "xml_structural_diff/engine/listeners.py",
    "xml_structural_diff/engine/matcher.py",
    "xml_structural_diff/engine/xpath.py",
    "xml_structural_diff/tree/__init__.py",
    "xml_structural_diff/tree/builder.py",
    "xml_structural_diff/tree/nodes.py",
]


class TestBaseInstall:
    def test_import_xml_structural_diff(self) -> None:
        import xml_structural_diff

        assert hasattr(xml_structural_diff, "compare")
        assert hasattr(xml_structural_diff, "is_identical")
        assert hasattr(xml_structural_diff, "is_similar")
        assert xml_structural_diff.__version__ == "0.1.0"

    def test_all_names_resolve(self) -> None:
        import xml_structural_diff

        for name in xml_structural_diff.__all__:
            assert hasattr(xml_structural_diff, name), name

    def test_py_typed_marker_present(self) -> None:
        import xml_structural_diff

        package_dir = Path(xml_structural_diff.__file__).parent
        assert (package_dir / "py.typed").is_file()


class TestWheelContents:
    @pytest.fixture(scope="class")
    def wheel_path(self) -> Path:
        """Build a fresh wheel and return its path."""
        if shutil.which("poetry") is None:
            pytest.skip("poetry is not installed")
        dist_dir = PROJECT_ROOT / "dist"
        result = subprocess.run(
            ["poetry", "build", "-f", "wheel"],
            cwd=str(PROJECT_ROOT),
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            pytest.skip(f"poetry build failed: {result.stderr}")

        wheels = sorted(dist_dir.glob("*.whl"), key=lambda p: p.stat().st_mtime)
        if not wheels:
            pytest.skip("No wheel found in dist/")
        return wheels[-1]

    def test_py_typed_in_wheel(self, wheel_path: Path) -> None:
        with zipfile.ZipFile(wheel_path) as zf:
            names = zf.namelist()
            assert any(n.endswith("py.typed") for n in names), f"py.typed not found in wheel. Contents: {names}"

    def test_no_pycache_in_wheel(self, wheel_path: Path) -> None:
        with zipfile.ZipFile(wheel_path) as zf:
            pycache_files = [n for n in zf.namelist() if "__pycache__" in n]
            assert not pycache_files, f"__pycache__ found in wheel: {pycache_files}"

    def test_all_source_modules_in_wheel(self, wheel_path: Path) -> None:
        with zipfile.ZipFile(wheel_path) as zf:
            names = zf.namelist()
            for module in _MODULES:
                assert any(module in n for n in names), f"Module {module} not found in wheel"

    def test_metadata_in_wheel(self, wheel_path: Path) -> None:
        with zipfile.ZipFile(wheel_path) as zf:
            metadata_files = [n for n in zf.namelist() if n.endswith("METADATA")]
            assert metadata_files, "No METADATA found in wheel"
            metadata = zf.read(metadata_files[0]).decode()
            assert "xml-structural-diff" in metadata.lower() or "xml_structural_diff" in metadata.lower()
            assert "0.1.0" in metadata
