"""
Tree-sitter adapter for HTML documents.

Only the document frame (html, head, body) is expanded; every other element
collapses to its tag with a child count or an ellipsis for text content.
"""

from __future__ import annotations

from typing import List, Optional

from tree_sitter import Node, Tree

from ..models import Language, SkeletonOptions
from ..utils import node_text

FRAME_TAGS = frozenset({"html", "head", "body"})


def extract_skeleton(
    tree: Tree,
    source: bytes,
    options: Optional[SkeletonOptions] = None,
    path: Optional[str] = None,
    language: Optional[Language] = None,
) -> str:
    lines: List[str] = []
    _walk(tree.root_node, source, 0, lines)
    return "\n".join(lines).strip()


def _walk(node: Node, source: bytes, depth: int, lines: List[str]) -> None:
    if node.type in ("document", "fragment"):
        for child in node.children:
            _walk(child, source, depth, lines)
    elif node.type == "doctype":
        lines.append(node_text(source, node))
    elif node.type == "element":
        _emit_element(node, source, depth, lines)


def _emit_element(node: Node, source: bytes, depth: int, lines: List[str]) -> None:
    indent = "  " * depth
    tag = element_tag_name(node, source)
    children = [child for child in node.children if child.type == "element"]

    if tag in FRAME_TAGS:
        lines.append(f"{indent}<{tag}>")
        for child in children:
            _walk(child, source, depth + 1, lines)
        lines.append(f"{indent}</{tag}>")
        return

    if children:
        lines.append(f"{indent}<{tag}> <!-- {len(children)} children --></{tag}>")
    elif any(child.type == "text" and node_text(source, child).strip() for child in node.children):
        lines.append(f"{indent}<{tag}>...</{tag}>")
    else:
        lines.append(f"{indent}<{tag}></{tag}>")


def element_tag_name(node: Node, source: bytes) -> str:
    for child in node.children:
        if child.type in ("start_tag", "self_closing_tag"):
            for part in child.children:
                if part.type == "tag_name":
                    return node_text(source, part)
    return ""
