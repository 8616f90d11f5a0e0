"""
Tree-sitter adapter for JSON configuration files.

Top-level keys are kept with scalar values; dependency maps and script
tables render as name lists, nested objects and long arrays collapse to a
type marker. Documents over 2 MiB never reach the parser; the orchestrator
summarizes them with `summarize_large_json`, a single scan of depth-1 keys.
"""

from __future__ import annotations

from typing import List, Optional

from tree_sitter import Node, Tree

from ..models import Language, SkeletonOptions
from ..utils import MAX_DEF_LINE_LEN, node_text, truncate_line

LARGE_JSON_BYTES = 2 * 1024 * 1024
MAX_LARGE_JSON_KEYS = 12
MAX_LISTED_ENTRIES = 12
MAX_ENTRY_LEN = 60
MAX_INLINE_ARRAY_ITEMS = 4

DEPENDENCY_KEYS = frozenset({"dependencies", "devDependencies", "peerDependencies", "optionalDependencies"})
PRIMITIVE_TYPES = frozenset({"string", "number", "true", "false", "null"})


def extract_skeleton(
    tree: Tree,
    source: bytes,
    options: Optional[SkeletonOptions] = None,
    path: Optional[str] = None,
    language: Optional[Language] = None,
) -> str:
    lines: List[str] = []
    root = tree.root_node
    for child in root.named_children:
        if child.type == "object":
            _emit_object(child, source, 0, lines)
        elif child.type == "array":
            lines.append(_summarize_array(child, source))
        elif child.type in PRIMITIVE_TYPES:
            lines.append(truncate_line(node_text(source, child), MAX_DEF_LINE_LEN))
    return "\n".join(lines).strip()


def _emit_object(node: Node, source: bytes, depth: int, lines: List[str]) -> None:
    indent = "  " * depth
    for pair in node.named_children:
        if pair.type != "pair":
            continue
        key = _unquote(node_text(source, pair.child_by_field_name("key")))
        value = pair.child_by_field_name("value")
        rendered = _render_value(key, value, source)
        lines.append(truncate_line(f"{indent}{key}: {rendered}", MAX_DEF_LINE_LEN))


def _render_value(key: str, value: Optional[Node], source: bytes) -> str:
    if value is None:
        return "value"
    if value.type == "object":
        if key in DEPENDENCY_KEYS:
            return _render_name_list(value, source, with_versions=True)
        if key == "scripts":
            return _render_name_list(value, source, with_versions=False)
        return "object"
    if value.type == "string":
        return _unquote(node_text(source, value))
    if value.type in PRIMITIVE_TYPES:
        return node_text(source, value)
    if value.type == "array":
        return _summarize_array(value, source)
    return "value"


def _render_name_list(node: Node, source: bytes, with_versions: bool) -> str:
    entries: List[str] = []
    for pair in node.named_children:
        if pair.type != "pair":
            continue
        name = _unquote(node_text(source, pair.child_by_field_name("key")))
        if with_versions:
            value = pair.child_by_field_name("value")
            version = _dependency_version(value, source)
            entry = f"{name}@{version}" if version else name
        else:
            entry = name
        entries.append(truncate_line(entry, MAX_ENTRY_LEN))

    if not entries:
        return "{}"
    shown = entries[:MAX_LISTED_ENTRIES]
    rendered = ", ".join(shown)
    if len(entries) > len(shown):
        rendered += f", ... (+{len(entries) - len(shown)})"
    return rendered


def _dependency_version(value: Optional[Node], source: bytes) -> str:
    if value is None:
        return ""
    if value.type in PRIMITIVE_TYPES:
        return _unquote(node_text(source, value))
    return value.type


def _summarize_array(node: Node, source: bytes) -> str:
    items = node.named_children
    items = [item for item in items if item.type != "comment"]
    if not items:
        return "[]"
    if len(items) > MAX_INLINE_ARRAY_ITEMS:
        return f"array[{len(items)}]"

    if all(item.type == "object" for item in items):
        paths = [_object_path(item, source) for item in items]
        if all(p is not None for p in paths):
            return "[" + ", ".join(f'"{p}"' for p in paths) + "]"
        return f"array[{len(items)}]"

    rendered: List[str] = []
    for item in items:
        if item.type == "string":
            rendered.append('"' + truncate_line(_unquote(node_text(source, item)), MAX_ENTRY_LEN) + '"')
        elif item.type in PRIMITIVE_TYPES:
            rendered.append(truncate_line(node_text(source, item), MAX_ENTRY_LEN))
        else:
            return f"array[{len(items)}]"
    return "[" + ", ".join(rendered) + "]"


def _object_path(node: Node, source: bytes) -> Optional[str]:
    # tsconfig-style references: [{"path": "./packages/core"}]
    for pair in node.named_children:
        if pair.type != "pair":
            continue
        if _unquote(node_text(source, pair.child_by_field_name("key"))) == "path":
            value = pair.child_by_field_name("value")
            return _unquote(node_text(source, value)) if value is not None else ""
    return None


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return text[1:-1]
    return text


# --- Large Documents ---

def summarize_large_json(content: str) -> str:
    """
    Summarize an oversized document without building a syntax tree.

    Arrays report only their kind. Objects are scanned once, tracking string
    and nesting state, and every depth-1 key is listed with the kind of its
    value. Only the first twelve keys are listed.
    """
    stripped = content.lstrip()
    if stripped.startswith("["):
        return "array[...]"

    keys: List[str] = []
    depth = 0
    in_string = False
    escaped = False
    string_start = -1
    i = 0
    length = len(content)

    while i < length and len(keys) < MAX_LARGE_JSON_KEYS:
        ch = content[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
                if depth == 1:
                    # a string at depth 1 is a key only when a colon follows
                    j = i + 1
                    while j < length and content[j].isspace():
                        j += 1
                    if j < length and content[j] == ":":
                        key = truncate_line(content[string_start + 1:i], MAX_ENTRY_LEN)
                        keys.append(f"{key}: {_value_kind(content, j + 1)}")
                        i = j
            i += 1
            continue

        if ch == '"':
            in_string = True
            string_start = i
        elif ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
        i += 1

    output = "\n".join(keys)
    if len(keys) >= MAX_LARGE_JSON_KEYS:
        output += "\n..."
    return output


def _value_kind(content: str, start: int) -> str:
    i = start
    while i < len(content) and content[i].isspace():
        i += 1
    if i >= len(content):
        return "value"
    ch = content[i]
    if ch == "{":
        return "object"
    if ch == "[":
        return "array"
    if ch == '"':
        return "string"
    if ch == "-" or ch.isdigit():
        return "number"
    if content.startswith("true", i) or content.startswith("false", i):
        return "boolean"
    if content.startswith("null", i):
        return "null"
    return "value"
