"""
Bounded tree collectors.

Every "find all X inside this scope" query used by the adapters goes through
`collect_bounded`: a pre-order walk over an explicit stack that stops
descending at nested scopes, de-duplicates matches, and gives up once either
the entry cap or the node-visit budget is exhausted.
"""

from __future__ import annotations

from typing import Callable, Collection, Iterable, Optional

from tree_sitter import Node

from .models import CallEdgeList
from .utils import (
    MAX_CALL_EDGE_NAMES,
    MAX_CALL_EDGE_NAME_LEN,
    MAX_CALL_EDGE_NODES,
    compact_text_prefix,
    node_text,
    truncate_line,
)

Matcher = Callable[[Node], Optional[str]]


def collect_bounded(
    root: Node,
    matcher: Matcher,
    limit: int,
    node_budget: int,
    boundary_types: Collection[str] = (),
    into: Optional[CallEdgeList] = None,
) -> CallEdgeList:
    """
    Collect unique strings produced by `matcher` for nodes under `root`.

    Args:
        root: Node to start from. It is never treated as a boundary itself.
        matcher: Returns the entry for a node, or None when the node does not match
        limit: Maximum number of unique entries
        node_budget: Maximum number of visited nodes
        boundary_types: Node types whose children are not visited
        into: Existing list to extend, sharing its budget counters

    Returns:
        The populated CallEdgeList; `truncated` is set when a bound was hit
    """
    result = into if into is not None else CallEdgeList()
    stack = [root]
    while stack and not result.truncated:
        node = stack.pop()
        result.visited += 1
        if result.visited > node_budget:
            result.truncated = True
            break

        entry = matcher(node)
        if entry and entry not in result.entries:
            if len(result.entries) >= limit:
                result.truncated = True
                break
            result.entries.append(entry)

        if node is not root and node.type in boundary_types:
            continue
        stack.extend(reversed(node.children))
    return result


def call_name_matcher(source: bytes, call_types: Iterable[str] = ("call_expression",), field: str = "function") -> Matcher:
    """Build a matcher returning the compacted callee text of call nodes."""
    call_types = frozenset(call_types)

    def _match(node: Node) -> Optional[str]:
        if node.type not in call_types:
            return None
        func = node.child_by_field_name(field)
        if func is None:
            return None
        compact, _ = compact_text_prefix(node_text(source, func), MAX_CALL_EDGE_NAME_LEN)
        name = " ".join(compact.split())
        if not name:
            return None
        return truncate_line(name, MAX_CALL_EDGE_NAME_LEN)

    return _match


def collect_call_edges(
    body: Node,
    source: bytes,
    boundary_types: Collection[str],
    call_types: Iterable[str] = ("call_expression",),
    limit: int = MAX_CALL_EDGE_NAMES,
) -> CallEdgeList:
    return collect_bounded(
        body,
        call_name_matcher(source, call_types),
        limit=limit,
        node_budget=MAX_CALL_EDGE_NODES,
        boundary_types=boundary_types,
    )
