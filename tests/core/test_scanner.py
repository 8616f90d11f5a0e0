"""
Tests for directory scanning and file reads.
"""

from pathlib import Path

import pytest

from code_skeleton.core.config import SkeletonConfig
from code_skeleton.core.errors import FileReadError, ScanError
from code_skeleton.core.scanner import (
    count_lines,
    is_ignored_dir,
    is_ignored_file,
    iter_watch_directories,
    read_file_content,
    scan_directory,
)


class TestIgnoreRules:
    """Test the name-based ignore rules."""

    def test_ignored_files(self):
        assert is_ignored_file("logo.PNG")
        assert is_ignored_file("bundle.min.js")
        assert is_ignored_file(".DS_Store")
        assert not is_ignored_file("main.py")

    def test_ignored_dirs(self):
        names = {"node_modules", "target"}
        assert is_ignored_dir("Node_Modules", Path("x/Node_Modules"), names)
        assert is_ignored_dir("icons", Path("app/src-tauri/icons"), names)
        assert not is_ignored_dir("icons", Path("app/public/icons"), names)
        assert not is_ignored_dir("src", Path("src"), names)


class TestScanDirectory:
    """Test scan results on a small project tree."""

    def test_entries(self, sample_project: Path):
        entries = scan_directory(sample_project)

        assert [entry.relative_path for entry in entries] == ["README.md", "src", "src/app.py", "src/lib.rs"]
        src = entries[1]
        assert src.is_dir
        assert src.line_count is None

    def test_file_metadata(self, sample_project: Path):
        entries = {entry.relative_path: entry for entry in scan_directory(sample_project)}
        app = entries["src/app.py"]

        assert not app.is_dir
        assert app.line_count == 6
        assert app.size == len("import os\n\n\ndef main():\n    return os.getcwd()\n")
        assert app.to_dict()["relative_path"] == "src/app.py"

    def test_configured_globs(self, sample_project: Path):
        config = SkeletonConfig(ignored_patterns=["*.md"])
        paths = [entry.relative_path for entry in scan_directory(sample_project, config)]

        assert "README.md" not in paths
        assert "src/app.py" in paths

    def test_gitignore(self, sample_project: Path):
        (sample_project / ".gitignore").write_text("# build output\n*.rs\n")
        paths = [entry.relative_path for entry in scan_directory(sample_project)]

        assert "src/lib.rs" not in paths
        assert "src/app.py" in paths

    def test_gitignore_negation(self, sample_project: Path):
        (sample_project / "src" / "extra.rs").write_text("fn extra() {}\n")
        (sample_project / ".gitignore").write_text("*.rs\n!lib.rs\n")
        paths = [entry.relative_path for entry in scan_directory(sample_project)]

        assert "src/lib.rs" in paths
        assert "src/extra.rs" not in paths

    def test_gitignore_can_be_disabled(self, sample_project: Path):
        (sample_project / ".gitignore").write_text("*.rs\n")
        config = SkeletonConfig(respect_gitignore=False)
        paths = [entry.relative_path for entry in scan_directory(sample_project, config)]

        assert "src/lib.rs" in paths

    def test_size_ceiling_skips_line_count(self, sample_project: Path):
        config = SkeletonConfig(max_line_count_bytes=4)
        entries = {entry.relative_path: entry for entry in scan_directory(sample_project, config)}

        assert entries["src/app.py"].line_count is None

    def test_missing_root(self, temp_dir: Path):
        with pytest.raises(ScanError, match="Path does not exist"):
            scan_directory(temp_dir / "missing")

    def test_watch_directories_skip_ignored(self, sample_project: Path):
        directories = iter_watch_directories(sample_project)

        assert sample_project in directories
        assert sample_project / "src" in directories
        assert not any("node_modules" in d.parts for d in directories)


class TestFileReads:
    """Test raw file reads and line counting."""

    def test_read_file_content(self, temp_dir: Path):
        path = temp_dir / "a.txt"
        path.write_text("hello\nworld")

        assert read_file_content(path) == "hello\nworld"
        assert count_lines(path) == 2

    def test_read_missing_file(self, temp_dir: Path):
        with pytest.raises(FileReadError) as excinfo:
            read_file_content(temp_dir / "missing.txt")

        assert excinfo.value.path.endswith("missing.txt")
        assert excinfo.value.reason

    def test_read_binary_file(self, temp_dir: Path):
        path = temp_dir / "blob.dat"
        path.write_bytes(b"\xff\xfe\x00\x81")

        with pytest.raises(FileReadError):
            read_file_content(path)

    def test_count_lines_missing(self, temp_dir: Path):
        assert count_lines(temp_dir / "missing.txt") is None
