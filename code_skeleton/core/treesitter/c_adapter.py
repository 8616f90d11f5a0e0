"""
Tree-sitter adapter for C source and headers.

Includes collapse into a counted summary, preprocessor conditionals keep
their directive lines around the nested skeleton, composite types render as
member counts and function definitions keep their signature with a short
body annotation.
"""

from __future__ import annotations

import re
from typing import List, Optional

from tree_sitter import Node, Tree

from ..collectors import collect_bounded
from ..models import Language, SkeletonOptions
from ..utils import (
    MAX_CALL_EDGE_NAMES,
    MAX_CALL_EDGE_NAME_LEN,
    MAX_CALL_EDGE_NODES,
    MAX_DEF_LINE_LEN,
    collect_summary_phrases,
    looks_like_disabled_code,
    node_text,
    truncate_line,
)

INDENT = "    "
MAX_INCLUDE_LINES = 12
MIN_KEPT_COMMENT_LEN = 20
COMPOSITE_TYPES = frozenset({"struct_specifier", "union_specifier", "enum_specifier"})
CONDITIONAL_TYPES = frozenset({"preproc_ifdef", "preproc_if", "preproc_elif", "preproc_else", "preproc_elifdef"})
CONDITIONAL_SKIP_CHILDREN = frozenset({"identifier", "preproc_arg", "#endif", "#ifdef", "#ifndef", "#if", "#else", "#elif"})


def extract_skeleton(
    tree: Tree,
    source: bytes,
    options: Optional[SkeletonOptions] = None,
    path: Optional[str] = None,
    language: Optional[Language] = None,
) -> str:
    root = tree.root_node
    lines: List[str] = []
    _emit_include_summary(root, source, lines)
    for child in root.children:
        if child.type == "preproc_include":
            continue
        _walk(child, source, 0, lines)
    return "\n".join(lines).strip("\n")


def _walk(node: Node, source: bytes, depth: int, lines: List[str]) -> None:
    indent = INDENT * depth
    kind = node.type

    if kind in ("preproc_include", "preproc_def", "preproc_function_def", "preproc_call"):
        lines.append(indent + truncate_line(node_text(source, node), MAX_DEF_LINE_LEN))
    elif kind in CONDITIONAL_TYPES:
        _emit_conditional(node, source, depth, lines, close=kind in ("preproc_ifdef", "preproc_if"))
    elif kind == "function_definition":
        _emit_function(node, source, indent, lines)
    elif kind == "declaration":
        _emit_declaration(node, source, indent, lines)
    elif kind == "type_definition":
        lines.append(indent + summarize_typedef(node, source))
    elif kind in COMPOSITE_TYPES:
        lines.append(indent + summarize_composite_type(node, source) + ";")
    elif kind == "comment":
        text = node_text(source, node)
        if should_keep_c_comment(text):
            lines.append(indent + truncate_line(text.strip(), MAX_DEF_LINE_LEN))
    elif kind == "linkage_specification" or kind == "declaration_list":
        for child in node.children:
            _walk(child, source, depth, lines)
    elif kind == "expression_statement" and node.parent is not None and node.parent.type == "translation_unit":
        # Macro invocations at file scope, e.g. DEFINE_HANDLER(x);
        lines.append(indent + truncate_line(node_text(source, node), MAX_DEF_LINE_LEN))


def _emit_conditional(node: Node, source: bytes, depth: int, lines: List[str], close: bool) -> None:
    indent = INDENT * depth
    first_line = node_text(source, node).splitlines()[0] if node_text(source, node) else ""
    lines.append(indent + truncate_line(first_line.strip(), MAX_DEF_LINE_LEN))
    alternative = node.child_by_field_name("alternative")
    for child in node.children:
        if child.type in CONDITIONAL_SKIP_CHILDREN or not child.is_named:
            continue
        if alternative is not None and child == alternative:
            continue
        _walk(child, source, depth, lines)
    if alternative is not None:
        _emit_conditional(alternative, source, depth, lines, close=False)
    if close:
        lines.append(indent + "#endif")


# --- Includes ---

def _emit_include_summary(root: Node, source: bytes, lines: List[str]) -> None:
    includes = [
        truncate_line(node_text(source, child), MAX_DEF_LINE_LEN)
        for child in root.children
        if child.type == "preproc_include"
    ]
    if not includes:
        return

    local = [inc for inc in includes if '"' in inc and "<" not in inc]
    system = [inc for inc in includes if inc not in local]
    lines.append(f"// Includes: total={len(includes)} system={len(system)} local={len(local)}")

    shown = (system + local)[:MAX_INCLUDE_LINES]
    lines.extend(shown)
    if len(includes) > len(shown):
        lines.append(f"// ... +{len(includes) - len(shown)} more includes")


# --- Functions ---

def _emit_function(node: Node, source: bytes, indent: str, lines: List[str]) -> None:
    parts = []
    for child in node.children:
        if child.type in ("storage_class_specifier", "type_qualifier", "function_specifier"):
            parts.append(node_text(source, child))
    type_node = node.child_by_field_name("type")
    if type_node is not None:
        parts.append(node_text(source, type_node))
    declarator = node.child_by_field_name("declarator")
    if declarator is not None:
        parts.append(" ".join(node_text(source, declarator).split()))
    lines.append(indent + truncate_line(" ".join(parts), MAX_DEF_LINE_LEN))

    body = node.child_by_field_name("body")
    if body is None:
        return
    calls = collect_bounded(
        body,
        lambda n: _c_call_name(n, source),
        limit=MAX_CALL_EDGE_NAMES,
        node_budget=MAX_CALL_EDGE_NODES,
    )
    phrases = collect_summary_phrases(node_text(source, body))

    lines.append(indent + "{")
    if not calls.is_empty():
        lines.append(f"{indent}{INDENT}// Calls: {calls.render()}")
    if phrases:
        lines.append(f"{indent}{INDENT}// {', '.join(phrases)}")
    if calls.is_empty() and not phrases:
        lines.append(f"{indent}{INDENT}// ...")
    lines.append(indent + "}")
    lines.append("")


def _c_call_name(node: Node, source: bytes) -> Optional[str]:
    if node.type != "call_expression":
        return None
    func = node.child_by_field_name("function")
    if func is None:
        return None
    if func.type == "identifier":
        name = node_text(source, func)
    elif func.type == "field_expression":
        name = node_text(source, func.child_by_field_name("field"))
    else:
        return None
    if not name:
        return None
    return truncate_line(name, MAX_CALL_EDGE_NAME_LEN)


# --- Declarations ---

def _emit_declaration(node: Node, source: bytes, indent: str, lines: List[str]) -> None:
    text = node_text(source, node)
    type_node = node.child_by_field_name("type")

    if type_node is not None and type_node.type in COMPOSITE_TYPES and type_node.child_by_field_name("body") is not None:
        summary = summarize_composite_type(type_node, source)
        declarators = [node_text(source, d) for d in node.children_by_field_name("declarator")]
        if declarators:
            summary += " " + ", ".join(declarators)
        lines.append(indent + truncate_line(summary + ";", MAX_DEF_LINE_LEN))
        return

    declarator = node.child_by_field_name("declarator")
    if declarator is not None and _is_function_declarator(declarator) and "=" not in text:
        lines.append(indent + truncate_line(" ".join(text.split()), MAX_DEF_LINE_LEN))
        return

    # File-scope constants and externs
    if node.parent is not None and node.parent.type == "translation_unit":
        if text.startswith(("extern ", "static const ", "const ")) and len(text) <= MAX_DEF_LINE_LEN:
            lines.append(indent + text)


def _is_function_declarator(node: Node) -> bool:
    current: Optional[Node] = node
    while current is not None:
        if current.type == "function_declarator":
            return True
        if current.type in ("pointer_declarator", "parenthesized_declarator", "attributed_declarator"):
            current = current.child_by_field_name("declarator") or (current.named_children[0] if current.named_children else None)
            continue
        return False
    return False


def summarize_typedef(node: Node, source: bytes) -> str:
    text = node_text(source, node)
    if "\n" not in text:
        return truncate_line(text, MAX_DEF_LINE_LEN)

    type_node = node.child_by_field_name("type")
    if type_node is not None and type_node.type in COMPOSITE_TYPES:
        summary = summarize_composite_type(type_node, source)
        names = [node_text(source, d) for d in node.children_by_field_name("declarator")]
        if names:
            return truncate_line(f"typedef {summary} {', '.join(names)};", MAX_DEF_LINE_LEN)
        return truncate_line(f"typedef {summary};", MAX_DEF_LINE_LEN)

    text_lines = [line.strip() for line in text.splitlines()]
    if len(text_lines) > 2:
        return truncate_line(f"{text_lines[0]} ... {text_lines[-1]}", MAX_DEF_LINE_LEN)
    return truncate_line(" ".join(text_lines), MAX_DEF_LINE_LEN)


def summarize_composite_type(node: Node, source: bytes) -> str:
    name = node_text(source, node.child_by_field_name("name"))
    body = node.child_by_field_name("body")
    label = name + " " if name else ""

    if node.type == "struct_specifier":
        fields = _count_children(body, "field_declaration")
        if fields:
            return f"struct {label}{{ /* {fields} fields */ }}"
        return f"struct {name}" if name else "struct { }"
    if node.type == "union_specifier":
        members = _count_children(body, "field_declaration")
        return f"union {label}{{ /* {members} members */ }}"
    if node.type == "enum_specifier":
        values = _count_children(body, "enumerator")
        return f"enum {label}{{ /* {values} values */ }}"
    return node_text(source, node)


def _count_children(node: Optional[Node], kind: str) -> int:
    if node is None:
        return 0
    return sum(1 for child in node.children if child.type == kind)


# --- Comments ---

_COMMENT_MARKER_RE = re.compile(r"\b(TODO|FIXME|NOTE|HACK|XXX|BUG)\b")


def should_keep_c_comment(text: str) -> bool:
    if text.startswith(("/**", "/*!", "///")):
        return True
    if "====" in text or "----" in text or "****" in text:
        return True
    content = text.lstrip("/").lstrip("*").strip()
    if content.endswith("*/"):
        content = content[:-2].rstrip()
    if _COMMENT_MARKER_RE.search(content.upper()):
        return True
    if looks_like_disabled_code(content):
        return False
    return len(content) >= MIN_KEPT_COMMENT_LEN
