"""
Tree-sitter adapter for Python source.

Produces the skeleton text of a Python module: imports, decorators, class and
function signatures with first-line docstrings, filtered assignments and kept
comments. Function bodies are replaced by call-edge, file read/write and
intent annotations unless they are small enough to keep verbatim.
"""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass, replace
from typing import FrozenSet, List, Optional, Set

from tree_sitter import Node, Tree

from ..collectors import call_name_matcher, collect_bounded
from ..models import Language, SkeletonOptions, StateContract
from ..utils import (
    MAX_CALL_EDGE_NAMES,
    MAX_CALL_EDGE_NODES,
    MAX_CLASS_ATTR_LEN,
    MAX_DEF_LINE_LEN,
    MAX_SIMPLE_ASSIGNMENT_LEN,
    classify_comment,
    classify_read_write,
    collect_summary_phrases,
    format_list,
    looks_like_path,
    node_text,
    should_keep_comment,
    should_keep_full_body,
    summarize_assignment,
    trim_docstring,
    truncate_line,
)

INDENT = "    "
SCOPE_BOUNDARY_TYPES = frozenset({"function_definition", "class_definition", "lambda"})
DEFINITION_TYPES = frozenset({"function_definition", "class_definition", "decorated_definition"})
ASSIGNMENT_TYPES = frozenset({"assignment", "augmented_assignment"})

HEAVY_VALUE_MARKERS = ("dataframe", "tensor", "model", "tokenizer", "dataset")
CONFIG_NAME_PREFIXES = ("config", "params", "settings")
MAX_STATE_PATHS = 6

_CONSTANT_NAME = re.compile(r"^_*[A-Z][A-Z0-9_]*$")
_STRING_PREFIX = re.compile(r"^[rRbBuUfF]{0,2}")


@dataclass(frozen=True)
class PythonContext:
    external_bindings: FrozenSet[str]
    is_nested: bool = False

    def nested(self) -> "PythonContext":
        return replace(self, is_nested=True)


def extract_skeleton(
    tree: Tree,
    source: bytes,
    options: Optional[SkeletonOptions] = None,
    path: Optional[str] = None,
    language: Optional[Language] = None,
) -> str:
    root = tree.root_node
    ctx = PythonContext(external_bindings=frozenset(collect_imports(root, source)))
    lines: List[str] = []
    _walk_module(root, source, 0, ctx, lines)
    return "\n".join(lines)


def _walk_module(node: Node, source: bytes, depth: int, ctx: PythonContext, lines: List[str]) -> None:
    indent = INDENT * depth
    kind = node.type

    if kind == "module":
        for child in node.children:
            _walk_module(child, source, depth, ctx, lines)
    elif kind in ("import_statement", "import_from_statement", "future_import_statement"):
        if not ctx.is_nested:
            lines.append(indent + truncate_line(node_text(source, node), MAX_DEF_LINE_LEN))
    elif kind == "function_definition":
        _emit_function(node, source, depth, ctx, lines)
    elif kind == "class_definition":
        _emit_class(node, source, depth, ctx, lines)
    elif kind == "decorated_definition":
        _emit_decorated(node, source, depth, ctx, lines)
    elif kind == "expression_statement":
        _emit_statement(node, source, indent, MAX_SIMPLE_ASSIGNMENT_LEN, lines)
    elif kind == "type_alias_statement":
        if not ctx.is_nested:
            lines.append(indent + truncate_line(node_text(source, node), MAX_DEF_LINE_LEN))
    elif kind == "comment":
        _emit_comment(node, source, indent, lines)
    elif kind == "if_statement" and depth == 0 and _is_main_guard(node, source):
        _emit_main_guard(node, source, ctx, lines)


def _emit_decorated(node: Node, source: bytes, depth: int, ctx: PythonContext, lines: List[str]) -> None:
    indent = INDENT * depth
    for child in node.children:
        if child.type == "decorator":
            lines.append(indent + truncate_line(node_text(source, child), MAX_DEF_LINE_LEN))
        elif child.type == "function_definition":
            _emit_function(child, source, depth, ctx, lines)
        elif child.type == "class_definition":
            _emit_class(child, source, depth, ctx, lines)


def _emit_statement(node: Node, source: bytes, indent: str, max_len: int, lines: List[str]) -> None:
    text = node_text(source, node)
    docstring = trim_docstring(text)
    if docstring is not None:
        lines.append(indent + docstring)
        return

    assignment = node.named_children[0] if node.named_children else None
    if assignment is None or assignment.type not in ASSIGNMENT_TYPES:
        return
    if _keep_assignment(assignment, source, max_len):
        summary = summarize_assignment(text)
        lines.append(indent + summary)


def _emit_comment(node: Node, source: bytes, indent: str, lines: List[str]) -> None:
    text = node_text(source, node)
    if should_keep_comment(classify_comment(text, "#")):
        lines.append(indent + truncate_line(text, MAX_DEF_LINE_LEN))


# --- Functions ---

def _function_signature(node: Node, source: bytes) -> str:
    parts = []
    if node.children and node.children[0].type == "async":
        parts.append("async ")
    parts.append("def ")
    parts.append(node_text(source, node.child_by_field_name("name")))
    type_params = node.child_by_field_name("type_parameters")
    if type_params is not None:
        parts.append(node_text(source, type_params))
    parts.append(node_text(source, node.child_by_field_name("parameters")))
    return_type = node.child_by_field_name("return_type")
    if return_type is not None:
        parts.append(" -> " + node_text(source, return_type))
    return "".join(parts)


def _emit_function(node: Node, source: bytes, depth: int, ctx: PythonContext, lines: List[str]) -> None:
    indent = INDENT * depth
    body_indent = INDENT * (depth + 1)
    signature = truncate_line(_function_signature(node, source), MAX_DEF_LINE_LEN)
    lines.append(f"{indent}{signature}:")

    body = node.child_by_field_name("body")
    if body is None:
        return

    body_text = node_text(source, body)
    if should_keep_full_body(body_text):
        lines.extend(_reindent_block(body, body_text, body_indent))
        return

    docstring = _leading_docstring(body, source)
    if docstring:
        lines.append(body_indent + docstring)

    calls_line = _call_edges_line(body, source, ctx.external_bindings)
    if calls_line:
        lines.append(body_indent + calls_line)

    contract = build_state_contract(body, source)
    if contract.reads:
        lines.append(body_indent + "# reads: " + format_list(contract.reads, MAX_STATE_PATHS))
    if contract.writes:
        lines.append(body_indent + "# writes: " + format_list(contract.writes, MAX_STATE_PATHS))

    phrases = collect_summary_phrases(body_text)
    if phrases:
        lines.append(body_indent + "# summary: " + ", ".join(phrases))

    nested_ctx = ctx.nested()
    for child in body.children:
        if child.type in DEFINITION_TYPES:
            _walk_module(child, source, depth + 1, nested_ctx, lines)

    lines.append(body_indent + "...")


def _reindent_block(body: Node, body_text: str, body_indent: str) -> List[str]:
    # The first line of a node's text starts at its column, later lines keep absolute indentation.
    dedented = textwrap.dedent(" " * body.start_point[1] + body_text)
    return [body_indent + line if line.strip() else "" for line in dedented.splitlines()]


def _leading_docstring(body: Node, source: bytes) -> Optional[str]:
    first = body.named_children[0] if body.named_children else None
    if first is None or first.type != "expression_statement":
        return None
    expr = first.named_children[0] if first.named_children else None
    if expr is None or expr.type != "string":
        return None
    return trim_docstring(node_text(source, expr))


def _call_edges_line(body: Node, source: bytes, external_bindings: FrozenSet[str]) -> Optional[str]:
    calls = collect_bounded(
        body,
        call_name_matcher(source, ("call",)),
        limit=MAX_CALL_EDGE_NAMES * 2,
        node_budget=MAX_CALL_EDGE_NODES,
        boundary_types=SCOPE_BOUNDARY_TYPES,
    )
    if calls.is_empty():
        return None

    external = [name for name in calls.entries if name.split(".")[0] in external_bindings]
    local = [name for name in calls.entries if name.split(".")[0] not in external_bindings]
    prioritized = (external + local)[:MAX_CALL_EDGE_NAMES]

    line = "# Calls: " + ", ".join(prioritized)
    if calls.truncated or len(calls.entries) > len(prioritized):
        line += ", ..."
    return line


# --- State Contract ---

def build_state_contract(body: Node, source: bytes) -> StateContract:
    """
    Collect path-like string literals of a function body and classify each one
    as read or written from the source line it appears on.
    """
    contract = StateContract()
    source_lines = source.decode("utf-8", errors="replace").splitlines()

    def _match(node: Node) -> Optional[str]:
        if node.type != "string" or node.parent is None or node.parent.type == "expression_statement":
            return None
        value = _string_value(node_text(source, node))
        if value is None or not looks_like_path(value):
            return None
        row = node.start_point[0]
        context = source_lines[row] if row < len(source_lines) else ""
        contract.add(value, classify_read_write(context))
        return value

    collect_bounded(
        body,
        _match,
        limit=MAX_STATE_PATHS * 2,
        node_budget=MAX_CALL_EDGE_NODES,
        boundary_types=SCOPE_BOUNDARY_TYPES,
    )
    return contract


def _string_value(text: str) -> Optional[str]:
    stripped = _STRING_PREFIX.sub("", text, count=1)
    for quote in ('"""', "'''", '"', "'"):
        if len(stripped) >= 2 * len(quote) and stripped.startswith(quote) and stripped.endswith(quote):
            return stripped[len(quote):len(stripped) - len(quote)]
    return None


# --- Classes ---

def _emit_class(node: Node, source: bytes, depth: int, ctx: PythonContext, lines: List[str]) -> None:
    indent = INDENT * depth
    member_indent = INDENT * (depth + 1)

    header = "class " + node_text(source, node.child_by_field_name("name"))
    type_params = node.child_by_field_name("type_parameters")
    if type_params is not None:
        header += node_text(source, type_params)
    superclasses = node.child_by_field_name("superclasses")
    if superclasses is not None:
        header += node_text(source, superclasses)
    lines.append(indent + truncate_line(header, MAX_DEF_LINE_LEN) + ":")

    body = node.child_by_field_name("body")
    if body is None:
        return
    for member in body.children:
        if member.type == "function_definition":
            _emit_function(member, source, depth + 1, ctx, lines)
        elif member.type == "decorated_definition":
            _emit_decorated(member, source, depth + 1, ctx, lines)
        elif member.type == "class_definition":
            _emit_class(member, source, depth + 1, ctx, lines)
        elif member.type == "expression_statement":
            _emit_statement(member, source, member_indent, MAX_CLASS_ATTR_LEN, lines)
        elif member.type == "comment":
            _emit_comment(member, source, member_indent, lines)


# --- Assignment Policy ---

def _keep_assignment(node: Node, source: bytes, max_len: int) -> bool:
    """
    Decide whether an assignment belongs in the skeleton.

    Constants, path literals and config-like names are always kept; values
    constructing heavyweight objects are always dropped; anything else is kept
    when it is annotated or short and call-free.
    """
    left = node_text(source, node.child_by_field_name("left")).strip()
    right_node = node.child_by_field_name("right")
    right = node_text(source, right_node)

    names = [part.strip() for part in left.split(",") if part.strip()]
    if names and all(_CONSTANT_NAME.match(name) for name in names):
        return True
    if right_node is not None and right_node.type == "string":
        value = _string_value(right)
        if value is not None and looks_like_path(value):
            return True
    if left.lower().lstrip("_").startswith(CONFIG_NAME_PREFIXES):
        return True

    lowered = right.lower()
    if any(marker in lowered for marker in HEAVY_VALUE_MARKERS):
        return False

    text = node_text(source, node)
    if node.child_by_field_name("type") is not None:
        return True
    return ":" in text or ("(" not in text and len(text) < max_len)


# --- Main Guard ---

def _is_main_guard(node: Node, source: bytes) -> bool:
    condition = node_text(source, node.child_by_field_name("condition"))
    return "__name__" in condition and "__main__" in condition


def _emit_main_guard(node: Node, source: bytes, ctx: PythonContext, lines: List[str]) -> None:
    condition = node_text(source, node.child_by_field_name("condition"))
    lines.append(truncate_line(f"if {condition}:", MAX_DEF_LINE_LEN))
    body = node.child_by_field_name("consequence")
    if body is not None:
        calls_line = _call_edges_line(body, source, ctx.external_bindings)
        if calls_line:
            lines.append(INDENT + calls_line)
    lines.append(INDENT + "...")


# --- Import Collection ---

def collect_imports(root: Node, source: bytes) -> Set[str]:
    """Collect the local names bound by module-level imports."""
    names: Set[str] = set()
    for child in root.children:
        if child.type == "import_statement":
            for item in child.named_children:
                _add_import_name(item, source, names, root_only=True)
        elif child.type == "import_from_statement":
            module = child.child_by_field_name("module_name")
            for item in child.named_children:
                if module is not None and item == module:
                    continue
                if item.type == "wildcard_import":
                    continue
                _add_import_name(item, source, names, root_only=False)
    return names


def _add_import_name(node: Node, source: bytes, names: Set[str], root_only: bool) -> None:
    if node.type == "aliased_import":
        alias = node.child_by_field_name("alias")
        if alias is not None:
            names.add(node_text(source, alias))
            return
        node = node.child_by_field_name("name") or node
    if node.type in ("dotted_name", "identifier"):
        text = node_text(source, node)
        names.add(text.split(".")[0] if root_only else text)
