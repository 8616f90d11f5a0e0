"""
Tests for the code-skeleton command line interface.
"""

import json
import sys
from pathlib import Path

import pytest

from code_skeleton.cli.code_skeleton import build_parser, main


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["code-skeleton", *argv])
    with pytest.raises(SystemExit) as excinfo:
        main()
    return excinfo.value.code


class TestParser:
    """Test argument parsing."""

    def test_scan_defaults(self):
        args = build_parser().parse_args(["scan"])

        assert args.directory == "."
        assert args.output is None
        assert args.import_summary_only is None

    def test_file_flags(self):
        args = build_parser().parse_args(["file", "a.ts", "--import-summary", "--format", "json"])

        assert args.paths == ["a.ts"]
        assert args.import_summary_only is True
        assert args.output_format == "json"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestFileCommand:
    """Test the file subcommand."""

    def test_prints_skeleton(self, temp_dir: Path, monkeypatch, capsys):
        monkeypatch.chdir(temp_dir)
        path = temp_dir / "app.py"
        path.write_text("def f(): return 1\n")

        assert _run(monkeypatch, "file", str(path)) == 0

        out = capsys.readouterr().out
        assert "[python] 1 -> 2 lines" in out
        assert "def f():\n    return 1" in out

    def test_json_format(self, temp_dir: Path, monkeypatch, capsys):
        monkeypatch.chdir(temp_dir)
        path = temp_dir / "data.json"
        path.write_text('{"name": "app"}\n')

        assert _run(monkeypatch, "file", str(path), "--format", "json") == 0

        record = json.loads(capsys.readouterr().out)
        assert record["language"] == "json"
        assert record["skeleton"] == "name: app"
        assert record["path"] == str(path)

    def test_missing_file(self, temp_dir: Path, monkeypatch, capsys):
        monkeypatch.chdir(temp_dir)

        assert _run(monkeypatch, "file", str(temp_dir / "missing.py")) == 1
        assert "cannot read" in capsys.readouterr().err


class TestScanCommand:
    """Test the scan subcommand."""

    def test_json_report(self, sample_project: Path, monkeypatch, capsys):
        monkeypatch.chdir(sample_project)
        report_path = sample_project / "report.json"

        assert _run(monkeypatch, "scan", str(sample_project), "--output", str(report_path), "-q") == 0

        report = json.loads(report_path.read_text())
        assert report["summary"]["files"] == 2
        assert report["summary"]["languages"] == {"python": 1, "rust": 1}
        assert [entry["path"] for entry in report["files"]] == ["src/app.py", "src/lib.rs"]
        assert "2 files" in capsys.readouterr().err

    def test_invalid_directory(self, temp_dir: Path, monkeypatch, capsys):
        monkeypatch.chdir(temp_dir)

        assert _run(monkeypatch, "scan", str(temp_dir / "missing")) == 1
        assert "not a valid directory" in capsys.readouterr().err
