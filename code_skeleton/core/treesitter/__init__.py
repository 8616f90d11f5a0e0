"""
Tree-sitter integration for code_skeleton.

Provides language loading, parsing and the dispatch table mapping each
supported language to its skeleton adapter.
"""

from typing import Callable, Dict

from ..models import Language
from . import (
    c_adapter,
    css_adapter,
    go_adapter,
    html_adapter,
    json_adapter,
    python_adapter,
    rust_adapter,
    typescript_adapter,
)
from .languages import get_py_language, get_ts_language, get_tsx_language
from .parser import get_parser, parse_bytes, parse_source

EXTRACTORS: Dict[Language, Callable[..., str]] = {
    Language.PYTHON: python_adapter.extract_skeleton,
    Language.TYPESCRIPT: typescript_adapter.extract_skeleton,
    Language.TSX: typescript_adapter.extract_skeleton,
    Language.JAVASCRIPT: typescript_adapter.extract_skeleton,
    Language.JSX: typescript_adapter.extract_skeleton,
    Language.RUST: rust_adapter.extract_skeleton,
    Language.GO: go_adapter.extract_skeleton,
    Language.C: c_adapter.extract_skeleton,
    Language.JSON: json_adapter.extract_skeleton,
    Language.CSS: css_adapter.extract_skeleton,
    Language.HTML: html_adapter.extract_skeleton,
}

__all__ = [
    "EXTRACTORS",
    "parse_source",
    "parse_bytes",
    "get_parser",
    "get_py_language",
    "get_ts_language",
    "get_tsx_language",
]
