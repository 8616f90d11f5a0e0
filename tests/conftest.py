"""
Pytest configuration and fixtures for skeleton tests.
"""

import pytest
from pathlib import Path
import tempfile
import shutil
from typing import Generator

from code_skeleton.core.models import SkeletonOptions


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    temp_path = Path(tempfile.mkdtemp())

    yield temp_path

    # Cleanup after test
    shutil.rmtree(temp_path)


@pytest.fixture
def default_options() -> SkeletonOptions:
    return SkeletonOptions()


@pytest.fixture
def sample_project(temp_dir: Path) -> Path:
    """Create a small mixed-language project tree with ignorable noise."""
    (temp_dir / "src").mkdir()
    (temp_dir / "src" / "app.py").write_text(
        "import os\n\n\ndef main():\n    return os.getcwd()\n"
    )
    (temp_dir / "src" / "lib.rs").write_text("pub fn add(a: i32, b: i32) -> i32 {\n    a + b\n}\n")
    (temp_dir / "src" / "logo.png").write_bytes(b"\x89PNG\r\n")
    (temp_dir / "node_modules" / "react").mkdir(parents=True)
    (temp_dir / "node_modules" / "react" / "index.js").write_text("module.exports = {};\n")
    (temp_dir / "empty_dir").mkdir()
    (temp_dir / "README.md").write_text("# Sample\n\nSome text.\n")
    return temp_dir
