"""
Tree-sitter language loaders.

These helpers return Tree-sitter Language objects for every grammar the
skeleton adapters understand.
"""

from functools import lru_cache

from tree_sitter import Language

from tree_sitter_python import language as py_language
from tree_sitter_typescript import language_typescript, language_tsx
from tree_sitter_javascript import language as js_language
from tree_sitter_rust import language as rust_language
from tree_sitter_go import language as go_language
from tree_sitter_c import language as c_language
from tree_sitter_json import language as json_language
from tree_sitter_css import language as css_language
from tree_sitter_html import language as html_language


@lru_cache(maxsize=1)
def get_py_language() -> Language:
    return Language(py_language())


@lru_cache(maxsize=1)
def get_ts_language() -> Language:
    return Language(language_typescript())


@lru_cache(maxsize=1)
def get_tsx_language() -> Language:
    return Language(language_tsx())


@lru_cache(maxsize=1)
def get_js_language() -> Language:
    return Language(js_language())


@lru_cache(maxsize=1)
def get_rust_language() -> Language:
    return Language(rust_language())


@lru_cache(maxsize=1)
def get_go_language() -> Language:
    return Language(go_language())


@lru_cache(maxsize=1)
def get_c_language() -> Language:
    return Language(c_language())


@lru_cache(maxsize=1)
def get_json_language() -> Language:
    return Language(json_language())


@lru_cache(maxsize=1)
def get_css_language() -> Language:
    return Language(css_language())


@lru_cache(maxsize=1)
def get_html_language() -> Language:
    return Language(html_language())
