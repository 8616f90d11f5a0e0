"""
End-to-end tests for the skeleton orchestrator.
"""

import pytest

from code_skeleton.core import skeletonizer
from code_skeleton.core.models import Language, SkeletonOptions
from code_skeleton.core.skeletonizer import IMPORT_SUMMARY_ENV, options_from_env, skeletonize


class TestLanguageDispatch:
    """Test extension resolution and fallback selection."""

    def test_python_one_line_body_kept(self):
        result = skeletonize("def f(): return 1", "py")

        assert result.language == Language.PYTHON
        assert result.skeleton == "def f():\n    return 1"
        assert "# Calls" not in result.skeleton

    def test_extension_with_dot_and_case(self):
        assert skeletonize("fn main() {}", ".RS").language == Language.RUST

    def test_unknown_extension_uses_fallback(self):
        result = skeletonize("class Foo:\n    x = 1\n", "xyz")

        assert result.language is None
        assert "class Foo:" in result.skeleton
        assert "x = 1" not in result.skeleton

    def test_empty_content(self):
        result = skeletonize("", "py")

        assert result.skeleton == ""
        assert result.original_lines == 0
        assert result.compression_ratio == 0.0

    def test_adapter_failure_falls_back(self, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("adapter crashed")

        monkeypatch.setitem(skeletonizer.EXTRACTORS, Language.RUST, boom)
        result = skeletonize("pub fn run() {}\nlet x = 1;\n", "rs")

        assert result.language is None
        assert result.skeleton == "pub fn run() {}\nlet x = 1;"


class TestResultMetrics:
    """Test line accounting on the result record."""

    def test_compression_ratio(self):
        code = "def long():\n" + "".join(f"    step_{i} = {i}\n" for i in range(9))
        result = skeletonize(code, "py")

        assert result.original_lines == 10
        assert result.skeleton_lines == 2
        assert result.compression_ratio == pytest.approx(0.8)
        assert result.to_dict()["language"] == "python"

    def test_output_is_capped(self):
        code = "\n".join(f"import mod_{i}" for i in range(400))
        result = skeletonize(code, "py")

        assert result.skeleton_lines == 200
        assert result.skeleton.endswith("# ...")


class TestCallEdgeLimits:
    """Test call-edge truncation across languages."""

    def test_python_calls_truncated_after_six(self):
        code = "def pipeline():\n" + "".join(f"    {name}()\n" for name in "abcdefg")
        result = skeletonize(code, "py")

        assert result.skeleton == "def pipeline():\n    # Calls: a, b, c, d, e, f, ...\n    ..."

    def test_go_calls_truncated_after_six(self):
        code = "package main\n\nfunc run() {\n" + "".join(f"\t{name}()\n" for name in "abcdefg") + "}\n"
        result = skeletonize(code, "go")

        assert "// Calls: a, b, c, d, e, f, ..." in result.skeleton


class TestOptions:
    """Test option resolution from the environment."""

    def test_env_truthy(self):
        assert options_from_env({IMPORT_SUMMARY_ENV: "1"}).import_summary_only
        assert options_from_env({IMPORT_SUMMARY_ENV: " TRUE "}).import_summary_only

    def test_env_falsy(self):
        assert not options_from_env({}).import_summary_only
        assert not options_from_env({IMPORT_SUMMARY_ENV: "0"}).import_summary_only

    def test_explicit_options_win(self, monkeypatch):
        monkeypatch.setenv(IMPORT_SUMMARY_ENV, "1")
        code = "import React from 'react';\nexport const x = 1;\n"
        result = skeletonize(code, "ts", options=SkeletonOptions(import_summary_only=False))

        assert "import React from 'react';" in result.skeleton
        assert "// Imports (summary)" not in result.skeleton

    def test_env_read_when_options_omitted(self, monkeypatch):
        monkeypatch.setenv(IMPORT_SUMMARY_ENV, "yes")
        code = "import React from 'react';\nexport const x = 1;\n"
        result = skeletonize(code, "ts")

        assert "// Import: react -> React" in result.skeleton


class TestDeterminism:
    """Test that identical inputs give identical skeletons."""

    @pytest.mark.parametrize("extension, code", [
        ("py", "import os\n\ndef load(path):\n    data = read(path)\n    parse(data)\n    validate(data)\n    save(data)\n    log(data)\n    notify(data)\n    return os.path.join(path, 'out.json')\n"),
        ("tsx", "import { useState } from 'react';\nexport default function App() {\n  const [count, setCount] = useState(0);\n  return <Layout><Row onClick={() => setCount(count + 1)} /></Layout>;\n}\n"),
        ("go", "package main\n\ntype C struct{}\n\nfunc (c *C) Get() int { return 0 }\nfunc (c *C) GetA() int { return 0 }\nfunc (c *C) GetB() int { return 0 }\nfunc (c *C) GetC() int { return 0 }\n"),
        ("json", '{"name": "app", "dependencies": {"react": "^18.2.0", "vite": "^5.0.0"}}'),
        ("xyz", "class Foo:\n    x = 1\n"),
    ])
    def test_repeated_runs_match(self, extension, code):
        first = skeletonize(code, extension, path=f"src/app.{extension}")
        second = skeletonize(code, extension, path=f"src/app.{extension}")

        assert first.skeleton == second.skeleton
        assert first.to_dict() == second.to_dict()
