"""
Tree-sitter adapter for CSS stylesheets.
"""

from __future__ import annotations

from typing import List, Optional

from tree_sitter import Node, Tree

from ..models import Language, SkeletonOptions
from ..utils import MAX_DEF_LINE_LEN, header_before, node_text, truncate_line

VERBATIM_AT_RULE_TYPES = frozenset({"media_statement", "keyframes_statement", "import_statement"})


def extract_skeleton(
    tree: Tree,
    source: bytes,
    options: Optional[SkeletonOptions] = None,
    path: Optional[str] = None,
    language: Optional[Language] = None,
) -> str:
    """
    Each rule becomes `selector props=N`; media, keyframes and import rules
    stay verbatim. Other at-rules keep their header as `@rule prelude {...}`.
    """
    lines: List[str] = []
    for child in tree.root_node.children:
        if child.type == "rule_set":
            lines.append(summarize_rule_set(child, source))
        elif child.type in VERBATIM_AT_RULE_TYPES:
            lines.append(truncate_line(node_text(source, child), MAX_DEF_LINE_LEN))
        elif child.type == "at_rule" or child.type.endswith("_statement"):
            lines.append(summarize_at_rule(child, source))
    return "\n".join(lines).strip()


def summarize_rule_set(node: Node, source: bytes) -> str:
    selector = ""
    prop_count = 0
    for part in node.children:
        if part.type == "selectors":
            selector = node_text(source, part)
        elif part.type == "block":
            prop_count += sum(1 for item in part.children if item.type == "declaration")
    return f"{truncate_line(selector, MAX_DEF_LINE_LEN)} props={prop_count}"


def summarize_at_rule(node: Node, source: bytes) -> str:
    text = node_text(source, node)
    header = header_before(text)
    if header is None:
        return truncate_line(" ".join(text.split()), MAX_DEF_LINE_LEN)
    return truncate_line(f"{' '.join(header.split())} {{...}}", MAX_DEF_LINE_LEN)
