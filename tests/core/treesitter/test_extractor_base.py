"""
Tests for file and directory extraction with performance metrics.
"""

from pathlib import Path

import pytest

from code_skeleton.core.errors import FileReadError
from code_skeleton.core.models import Language
from code_skeleton.core.treesitter.extractor_base import SkeletonExtractor


class TestSkeletonExtractor:
    """Test SkeletonExtractor functionality."""

    def test_extract_from_file(self, temp_dir: Path):
        path = temp_dir / "util.py"
        path.write_text("def double(x):\n    return x * 2\n")
        extractor = SkeletonExtractor()

        result = extractor.extract_from_file(path)

        assert result.language == Language.PYTHON
        assert result.skeleton == "def double(x):\n    return x * 2"
        metrics = extractor.get_performance_metrics()
        assert metrics['total_files'] == 1
        assert metrics['original_lines'] == 2
        assert metrics['skeleton_lines'] == 2

    def test_fallback_files_are_counted(self, temp_dir: Path):
        path = temp_dir / "notes.xyz"
        path.write_text("class Foo:\n    pass\n")
        extractor = SkeletonExtractor()

        result = extractor.extract_from_file(path)

        assert result.language is None
        assert extractor.get_performance_metrics()['fallback_files'] == 1

    def test_unreadable_file_raises(self, temp_dir: Path):
        extractor = SkeletonExtractor()

        with pytest.raises(FileReadError):
            extractor.extract_from_file(temp_dir / "missing.py")
        assert extractor.get_performance_metrics()['failed_reads'] == 1

    def test_extract_from_directory(self, sample_project: Path):
        extractor = SkeletonExtractor()
        seen = []

        def progress(entries):
            seen.extend(entries)
            return entries

        results = extractor.extract_from_directory(sample_project, progress=progress)

        assert [path for path, _ in results] == ["src/app.py", "src/lib.rs"]
        assert len(seen) == 2
        assert results[1][1].skeleton == "pub fn add(a: i32, b: i32) -> i32"
        assert extractor.get_performance_metrics()['total_files'] == 2

    def test_directory_skips_unreadable_files(self, sample_project: Path):
        (sample_project / "src" / "broken.py").write_bytes(b"\xff\xfe\x81")
        results = SkeletonExtractor().extract_from_directory(sample_project)

        assert "src/broken.py" not in [path for path, _ in results]

    def test_reset_metrics(self, temp_dir: Path):
        path = temp_dir / "a.py"
        path.write_text("x = 1\n")
        extractor = SkeletonExtractor()
        extractor.extract_from_file(path)

        extractor.reset_performance_metrics()

        assert extractor.get_performance_metrics()['total_files'] == 0

    def test_monitoring_disabled(self, temp_dir: Path):
        path = temp_dir / "a.py"
        path.write_text("x = 1\n")
        extractor = SkeletonExtractor(enable_performance_monitoring=False)
        extractor.extract_from_file(path)

        assert extractor.get_performance_metrics()['total_files'] == 0
