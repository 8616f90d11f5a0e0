"""
Tree-sitter adapter for Rust source.

Keeps use/mod declarations, attributes, macro headers and item signatures;
structs and enums collapse to their member names, traits and impls keep only
member signatures, and function bodies become a `// Calls:` line.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from tree_sitter import Node, Tree

from ..collectors import collect_call_edges
from ..models import Language, SkeletonOptions
from ..utils import (
    MAX_DEF_LINE_LEN,
    MAX_MEMBER_NAMES,
    header_before,
    node_text,
    summarize_assignment,
    trim_doc_comment,
    truncate_line,
)

INDENT = "    "
SCOPE_BOUNDARY_TYPES = frozenset({"function_item", "closure_expression"})


def extract_skeleton(
    tree: Tree,
    source: bytes,
    options: Optional[SkeletonOptions] = None,
    path: Optional[str] = None,
    language: Optional[Language] = None,
) -> str:
    lines: List[str] = []
    _walk_root(tree.root_node, source, 0, lines)
    return "\n".join(lines)


def _walk_root(node: Node, source: bytes, depth: int, lines: List[str]) -> None:
    indent = INDENT * depth
    for child in node.children:
        kind = child.type
        if kind in ("use_declaration", "attribute_item", "inner_attribute_item", "extern_crate_declaration"):
            lines.append(indent + truncate_line(node_text(source, child), MAX_DEF_LINE_LEN))
        elif kind == "mod_item":
            _emit_mod(child, source, depth, lines)
        elif kind == "struct_item":
            lines.append(indent + summarize_struct(child, source))
        elif kind == "enum_item":
            lines.append(indent + summarize_enum(child, source))
        elif kind == "union_item":
            lines.append(indent + summarize_struct(child, source))
        elif kind in ("type_item", "const_item", "static_item"):
            lines.append(indent + summarize_assignment(node_text(source, child)))
        elif kind == "trait_item":
            _emit_trait(child, source, depth, lines)
        elif kind == "impl_item":
            _emit_impl(child, source, depth, lines)
        elif kind in ("function_item", "function_signature_item"):
            _emit_function(child, source, indent, lines)
        elif kind == "macro_definition":
            text = node_text(source, child)
            lines.append(indent + truncate_line(header_before(text) or text, MAX_DEF_LINE_LEN))
        elif kind in ("line_comment", "block_comment"):
            summary = trim_doc_comment(node_text(source, child))
            if summary:
                lines.append(indent + summary)
        elif kind == "foreign_mod_item":
            _walk_root(child, source, depth, lines)
        elif kind == "declaration_list":
            _walk_root(child, source, depth, lines)


def _emit_mod(node: Node, source: bytes, depth: int, lines: List[str]) -> None:
    indent = INDENT * depth
    body = node.child_by_field_name("body")
    if body is None:
        lines.append(indent + node_text(source, node))
        return
    header = header_before(node_text(source, node)) or "mod"
    lines.append(indent + truncate_line(header, MAX_DEF_LINE_LEN))
    _walk_root(body, source, depth + 1, lines)


def _emit_function(node: Node, source: bytes, indent: str, lines: List[str]) -> None:
    text = node_text(source, node)
    signature = header_before(text)
    if signature is None:
        signature = text.rstrip(";").strip()
    lines.append(indent + truncate_line(signature, MAX_DEF_LINE_LEN))
    _emit_call_edges(node, source, indent, lines)


def _emit_call_edges(node: Node, source: bytes, indent: str, lines: List[str]) -> None:
    body = node.child_by_field_name("body")
    if body is None:
        return
    calls = collect_call_edges(body, source, SCOPE_BOUNDARY_TYPES)
    if calls.is_empty():
        return
    lines.append(f"{indent}// Calls: {calls.render()}")


def _emit_trait(node: Node, source: bytes, depth: int, lines: List[str]) -> None:
    indent = INDENT * depth
    member_indent = INDENT * (depth + 1)
    text = node_text(source, node)
    lines.append(indent + truncate_line(header_before(text) or text, MAX_DEF_LINE_LEN))

    body = node.child_by_field_name("body")
    if body is None:
        return
    for item in body.named_children:
        if item.type in ("function_signature_item", "function_item"):
            item_text = node_text(source, item)
            signature = header_before(item_text) or item_text
            lines.append(member_indent + truncate_line(signature, MAX_DEF_LINE_LEN))
        elif item.type in ("associated_type", "const_item"):
            lines.append(member_indent + truncate_line(node_text(source, item), MAX_DEF_LINE_LEN))


def _emit_impl(node: Node, source: bytes, depth: int, lines: List[str]) -> None:
    indent = INDENT * depth
    member_indent = INDENT * (depth + 1)
    header = header_before(node_text(source, node))
    if header is None:
        return
    lines.append(indent + truncate_line(header, MAX_DEF_LINE_LEN))

    body = node.child_by_field_name("body")
    if body is None:
        return
    for item in body.named_children:
        if item.type == "function_item":
            signature = header_before(node_text(source, item))
            if signature is not None:
                lines.append(member_indent + truncate_line(signature, MAX_DEF_LINE_LEN))
                _emit_call_edges(item, source, member_indent, lines)
        elif item.type in ("const_item", "type_item"):
            lines.append(member_indent + summarize_assignment(node_text(source, item)))
        elif item.type == "attribute_item":
            lines.append(member_indent + truncate_line(node_text(source, item), MAX_DEF_LINE_LEN))
        elif item.type == "line_comment":
            summary = trim_doc_comment(node_text(source, item))
            if summary:
                lines.append(member_indent + summary)


# --- Struct / Enum Summaries ---

def summarize_struct(node: Node, source: bytes) -> str:
    text = node_text(source, node)
    header = header_before(text)
    if header is not None:
        names, total = _collect_member_names(node, source, "field_declaration_list", "field_declaration")
        return truncate_line(f"{header} {{ {_member_body(names, total)} }}", MAX_DEF_LINE_LEN)
    paren = header_before(text, "(")
    if paren is not None:
        return truncate_line(f"{paren} (...)", MAX_DEF_LINE_LEN)
    return truncate_line(text, MAX_DEF_LINE_LEN)


def summarize_enum(node: Node, source: bytes) -> str:
    text = node_text(source, node)
    header = header_before(text)
    if header is None:
        return truncate_line(text, MAX_DEF_LINE_LEN)
    names, total = _collect_member_names(node, source, "enum_variant_list", "enum_variant")
    return truncate_line(f"{header} {{ {_member_body(names, total)} }}", MAX_DEF_LINE_LEN)


def _member_body(names: List[str], total: int) -> str:
    if not names:
        return "..."
    body = ", ".join(names)
    if total > len(names):
        body += f", ..., +{total - len(names)} more"
    return body


def _collect_member_names(node: Node, source: bytes, list_type: str, member_type: str) -> Tuple[List[str], int]:
    names: List[str] = []
    total = 0
    body = node.child_by_field_name("body")
    if body is None or body.type != list_type:
        return names, total
    for member in body.named_children:
        if member.type != member_type:
            continue
        total += 1
        if len(names) >= MAX_MEMBER_NAMES:
            continue
        name = member.child_by_field_name("name")
        if name is not None:
            names.append(node_text(source, name))
    return names, total
