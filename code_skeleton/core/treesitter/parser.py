"""
Tree-sitter parser facade with cached parser instances.
"""

from functools import lru_cache
from typing import Callable, Dict

from tree_sitter import Language, Parser, Tree

from ..errors import UnsupportedLanguageError
from .languages import (
    get_c_language,
    get_css_language,
    get_go_language,
    get_html_language,
    get_js_language,
    get_json_language,
    get_py_language,
    get_rust_language,
    get_ts_language,
    get_tsx_language,
)

# JSX files are parsed with the JavaScript grammar, which accepts JSX.
LANGUAGE_LOADERS: Dict[str, Callable[[], Language]] = {
    "python": get_py_language,
    "typescript": get_ts_language,
    "tsx": get_tsx_language,
    "javascript": get_js_language,
    "jsx": get_js_language,
    "rust": get_rust_language,
    "go": get_go_language,
    "c": get_c_language,
    "json": get_json_language,
    "css": get_css_language,
    "html": get_html_language,
}


@lru_cache(maxsize=len(LANGUAGE_LOADERS))
def get_parser(language_id: str) -> Parser:
    loader = LANGUAGE_LOADERS.get(language_id)
    if loader is None:
        raise UnsupportedLanguageError(f"Unsupported language: {language_id}")
    parser = Parser()
    parser.language = loader()
    return parser


def parse_source(source: str, language_id: str) -> Tree:
    return parse_bytes(bytes(source, "utf-8"), language_id)


def parse_bytes(source: bytes, language_id: str) -> Tree:
    parser = get_parser(language_id)
    return parser.parse(source)
