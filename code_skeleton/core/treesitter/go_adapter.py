"""
Tree-sitter adapter for Go source.

Keeps package/import/type/const/var declarations and function signatures
with call edges. Methods of one receiver type that form a family around a
common accessor prefix (GetString, GetInt, ...) collapse into a single
summary line under the family's base method.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from tree_sitter import Node, Tree

from ..collectors import collect_call_edges
from ..models import Language, SkeletonOptions
from ..utils import (
    MAX_DEF_LINE_LEN,
    MAX_MEMBER_NAMES,
    classify_comment,
    header_before,
    node_text,
    should_keep_comment,
    truncate_line,
)

SCOPE_BOUNDARY_TYPES = frozenset({"func_literal"})
FAMILY_PREFIXES = ("Get", "Set", "Is", "Has", "With", "Must")
MIN_FAMILY_SIZE = 4


@dataclass
class MethodFamily:
    """Methods of one receiver sharing an accessor prefix."""
    receiver: str
    prefix: str
    base: Node
    variants: List[str] = field(default_factory=list)

    def summary_line(self) -> str:
        shown = self.variants[:MAX_MEMBER_NAMES]
        names = ", ".join(shown)
        hidden = len(self.variants) - len(shown)
        if hidden:
            return f"// {self.prefix} variants: {names}, ... (+{hidden} methods)"
        return f"// {self.prefix} variants: {names} ({len(self.variants)} methods)"


@dataclass
class FamilyIndex:
    families_by_base: Dict[int, MethodFamily] = field(default_factory=dict)  # keyed by base start_byte
    suppressed: Set[int] = field(default_factory=set)


def extract_skeleton(
    tree: Tree,
    source: bytes,
    options: Optional[SkeletonOptions] = None,
    path: Optional[str] = None,
    language: Optional[Language] = None,
) -> str:
    root = tree.root_node
    families = cluster_method_families(root, source)
    lines: List[str] = []
    for child in root.children:
        _emit_top_level(child, source, families, lines)
    return "\n".join(lines)


def _emit_top_level(node: Node, source: bytes, families: FamilyIndex, lines: List[str]) -> None:
    kind = node.type
    if kind in ("package_clause", "import_declaration", "const_declaration", "var_declaration"):
        lines.append(truncate_line(node_text(source, node), MAX_DEF_LINE_LEN))
    elif kind == "type_declaration":
        lines.extend(_summarize_type_declaration(node, source))
    elif kind == "function_declaration":
        _emit_function(node, source, lines)
    elif kind == "method_declaration":
        if node.start_byte in families.suppressed:
            return
        family = families.families_by_base.get(node.start_byte)
        _emit_function(node, source, lines, family)
    elif kind == "comment":
        text = node_text(source, node)
        if should_keep_comment(classify_comment(text, "//")):
            lines.append(truncate_line(text, MAX_DEF_LINE_LEN))


def _emit_function(node: Node, source: bytes, lines: List[str], family: Optional[MethodFamily] = None) -> None:
    body = node.child_by_field_name("body")
    if body is None:
        signature = node_text(source, node)
    else:
        # slice at the body so `interface{}` in the result type survives
        signature = source[node.start_byte:body.start_byte].decode("utf-8", errors="replace").strip()
    lines.append(truncate_line(" ".join(signature.split()), MAX_DEF_LINE_LEN))
    if family is not None:
        lines.append(family.summary_line())

    if body is None:
        return
    calls = collect_call_edges(body, source, SCOPE_BOUNDARY_TYPES)
    if not calls.is_empty():
        lines.append(f"// Calls: {calls.render()}")


# --- Type Declarations ---

def _summarize_type_declaration(node: Node, source: bytes) -> List[str]:
    text = node_text(source, node)
    if len(text) <= MAX_DEF_LINE_LEN:
        return [text]

    lines: List[str] = []
    for spec in node.named_children:
        if spec.type not in ("type_spec", "type_alias"):
            continue
        spec_text = node_text(source, spec)
        type_node = spec.child_by_field_name("type")
        header = header_before(spec_text)
        if header is None or type_node is None:
            lines.append(truncate_line(f"type {spec_text}", MAX_DEF_LINE_LEN))
        elif type_node.type == "struct_type":
            names, total = _struct_field_names(type_node, source)
            body = ", ".join(names) if names else "..."
            if total > len(names):
                body += f", ..., +{total - len(names)} more"
            lines.append(truncate_line(f"type {header} {{ {body} }}", MAX_DEF_LINE_LEN))
        elif type_node.type == "interface_type":
            lines.append(truncate_line(f"type {header} {{", MAX_DEF_LINE_LEN))
            for member in type_node.named_children:
                if member.type != "comment":
                    lines.append("\t" + truncate_line(node_text(source, member), MAX_DEF_LINE_LEN))
            lines.append("}")
        else:
            lines.append(truncate_line(f"type {header} {{...}}", MAX_DEF_LINE_LEN))
    return lines


def _struct_field_names(struct_type: Node, source: bytes):
    names: List[str] = []
    total = 0
    for field_list in struct_type.named_children:
        if field_list.type != "field_declaration_list":
            continue
        for declaration in field_list.named_children:
            if declaration.type != "field_declaration":
                continue
            declared = [node_text(source, n) for n in declaration.children_by_field_name("name")]
            if not declared:
                # embedded field
                declared = [node_text(source, declaration.child_by_field_name("type"))]
            for name in declared:
                total += 1
                if len(names) < MAX_MEMBER_NAMES:
                    names.append(name)
    return names, total


# --- Method Families ---

def cluster_method_families(root: Node, source: bytes) -> FamilyIndex:
    """
    Group methods per receiver type by accessor prefix.

    A prefix forms a family once at least four methods of the same receiver
    share it. The method named exactly like the prefix stays as the family's
    base; without one, the shortest variant is promoted. All other members
    are suppressed and listed on the base's summary line.
    """
    grouped: Dict[tuple, List[Node]] = {}
    for child in root.children:
        if child.type != "method_declaration":
            continue
        receiver = _receiver_type(child, source)
        name = node_text(source, child.child_by_field_name("name"))
        prefix = _family_prefix(name)
        if receiver and prefix:
            grouped.setdefault((receiver, prefix), []).append(child)

    index = FamilyIndex()
    for (receiver, prefix), methods in grouped.items():
        if len(methods) < MIN_FAMILY_SIZE:
            continue
        names = [node_text(source, m.child_by_field_name("name")) for m in methods]
        if prefix in names:
            base_pos = names.index(prefix)
        else:
            base_pos = min(range(len(names)), key=lambda i: (len(names[i]), i))
        base = methods[base_pos]
        family = MethodFamily(receiver=receiver, prefix=prefix, base=base)
        for pos, method in enumerate(methods):
            if pos == base_pos:
                continue
            family.variants.append(names[pos])
            index.suppressed.add(method.start_byte)
        index.families_by_base[base.start_byte] = family
    return index


def _family_prefix(name: str) -> Optional[str]:
    for prefix in FAMILY_PREFIXES:
        if name == prefix:
            return prefix
        if name.startswith(prefix) and len(name) > len(prefix):
            following = name[len(prefix)]
            if following.isupper() or following.isdigit() or following == "_":
                return prefix
    return None


def _receiver_type(method: Node, source: bytes) -> Optional[str]:
    receiver = method.child_by_field_name("receiver")
    if receiver is None:
        return None
    for param in receiver.named_children:
        if param.type != "parameter_declaration":
            continue
        type_text = node_text(source, param.child_by_field_name("type"))
        base = type_text.lstrip("*").strip()
        bracket = base.find("[")
        if bracket != -1:
            base = base[:bracket]
        return base or None
    return None
