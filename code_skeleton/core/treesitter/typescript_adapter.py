"""
Tree-sitter adapter for TypeScript, TSX, JavaScript and JSX.

The walk keeps imports (or a per-module summary), exports, type
declarations, synthesized function signatures and class member signatures.
Function bodies are replaced by annotation lines from
`typescript_insights`: the render outline for components, hooks/effects/
handlers for entrypoint components, and flow/call/boundary facts otherwise.

When a module exports anything, top-level declarations that are not
exported are omitted, unless the module is an application entrypoint.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional

from tree_sitter import Node, Tree

from ..collectors import collect_call_edges
from ..models import Language, ModuleIndex, SkeletonOptions
from ..utils import (
    MAX_DEF_LINE_LEN,
    MAX_SIMPLE_CONST_LEN,
    compact_text_prefix,
    node_text,
    summarize_assignment,
    trim_doc_comment,
    truncate_line,
)
from . import typescript_insights as insights

INDENT = "  "
MAX_CALL_SEARCH_NODES = 200
IIFE_MIN_LINES = 30
IIFE_MAX_AVG_LINE_LEN = 120
IIFE_MAX_LINE_LEN = 400

EXPORTABLE_TYPES = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
    "abstract_class_declaration",
    "interface_declaration",
    "enum_declaration",
    "type_alias_declaration",
    "lexical_declaration",
    "variable_declaration",
    "arrow_function",
    "function",
    "function_expression",
})
VARIABLE_TYPES = frozenset({"lexical_declaration", "variable_declaration"})
FIELD_TYPES = frozenset({"public_field_definition", "property_definition", "field_definition"})
RECURSE_TYPES = frozenset({"program", "statement_block", "if_statement", "else_clause"})
METHOD_MODIFIERS = frozenset({
    "accessibility_modifier", "static", "readonly", "async", "override", "abstract", "get", "set", "*",
})


@dataclass(frozen=True)
class ScriptContext:
    index: ModuleIndex = field(default_factory=ModuleIndex)
    entrypoint: bool = False
    import_summary_only: bool = False
    unwrap_iife: bool = False
    in_export: bool = False

    def exporting(self) -> "ScriptContext":
        return replace(self, in_export=True)

    def skips_non_export(self, depth: int) -> bool:
        return (
            self.index.has_exports
            and bool(self.index.exported_names)
            and not self.in_export
            and depth == 0
            and not self.entrypoint
        )

    def is_exported(self, name: Optional[str]) -> bool:
        return name is not None and name in self.index.exported_names


def extract_skeleton(
    tree: Tree,
    source: bytes,
    options: Optional[SkeletonOptions] = None,
    path: Optional[str] = None,
    language: Optional[Language] = None,
) -> str:
    options = options or SkeletonOptions()
    root = tree.root_node
    ctx = ScriptContext(
        index=insights.build_module_index(root, source),
        entrypoint=insights.is_entrypoint(root, source, path),
        import_summary_only=options.import_summary_only,
        unwrap_iife=should_unwrap_iife(source.decode("utf-8", errors="replace")),
    )

    lines: List[str] = []
    if ctx.import_summary_only:
        lines.extend(insights.render_import_summary(root, source))
    else:
        lines.extend(f"// External: {module}" for module in ctx.index.external_modules)

    _walk(root, source, 0, ctx, lines)
    return "\n".join(lines).strip()


def should_unwrap_iife(content: str) -> bool:
    """Hand-written wrappers are unwrapped; bundled or minified output is not."""
    lengths = [len(line) for line in content.splitlines() if line.strip()]
    if len(lengths) < IIFE_MIN_LINES:
        return False
    if max(lengths) > IIFE_MAX_LINE_LEN:
        return False
    return sum(lengths) / len(lengths) <= IIFE_MAX_AVG_LINE_LEN


# --- Walk ---

def _walk(node: Node, source: bytes, depth: int, ctx: ScriptContext, lines: List[str]) -> None:
    indent = INDENT * depth
    skip = ctx.skips_non_export(depth)
    kind = node.type

    if kind in insights.IMPORT_TYPES:
        if not ctx.import_summary_only:
            lines.append(truncate_line(node_text(source, node), MAX_DEF_LINE_LEN))

    elif kind in ("export_statement", "export_declaration", "export_default_declaration"):
        _emit_export(node, source, depth, ctx, lines)

    elif kind == "export_assignment":
        lines.append(truncate_line(node_text(source, node), MAX_DEF_LINE_LEN))

    elif kind in ("type_alias_declaration", "interface_declaration", "enum_declaration"):
        if skip and not ctx.is_exported(insights.declared_name(node, source)):
            return
        lines.append(indent + summarize_ts_declaration(node, source))

    elif kind in ("function_declaration", "generator_function_declaration", "function_signature"):
        if skip and not ctx.is_exported(insights.declared_name(node, source)):
            return
        signature = function_signature(node, source)
        if signature:
            lines.append(indent + signature)
        _emit_function_details(node, source, indent, ctx, lines)

    elif kind in ("arrow_function", "function_expression", "function"):
        if skip:
            return
        signature = arrow_signature(node, source) if kind == "arrow_function" else function_signature(node, source)
        if signature:
            lines.append(indent + signature)
            _emit_function_details(node, source, indent, ctx, lines)

    elif kind in VARIABLE_TYPES:
        _emit_variables(node, source, indent, skip, ctx, lines)

    elif kind in ("class_declaration", "abstract_class_declaration"):
        if skip and not ctx.is_exported(insights.declared_name(node, source)):
            return
        _emit_class(node, source, depth, lines)

    elif kind == "comment":
        if skip:
            return
        summary = trim_doc_comment(node_text(source, node))
        if summary:
            lines.append(indent + summary)

    elif kind in ("module", "internal_module", "namespace_declaration", "ambient_declaration"):
        if skip and not ctx.is_exported(insights.declared_name(node, source)):
            return
        lines.append(indent + summarize_block_declaration(node_text(source, node)))

    elif kind in RECURSE_TYPES:
        # declarations behind guards such as `if (!window.loaded) { function init() {} }`
        for child in node.children:
            _walk(child, source, depth, ctx, lines)

    elif kind == "expression_statement":
        _emit_expression_statement(node, source, depth, ctx, skip, lines)

    else:
        for child in node.children:
            _walk(child, source, depth, ctx, lines)


def _emit_export(node: Node, source: bytes, depth: int, ctx: ScriptContext, lines: List[str]) -> None:
    is_default = node.type == "export_default_declaration" or any(c.type == "default" for c in node.children)
    declaration = next((c for c in node.children if c.type in EXPORTABLE_TYPES), None)
    if declaration is None:
        lines.append(truncate_line(node_text(source, node), MAX_DEF_LINE_LEN))
        return

    export_ctx = ctx.exporting()
    if declaration.type in VARIABLE_TYPES:
        _walk(declaration, source, depth, export_ctx, lines)
        return

    emitted: List[str] = []
    _walk(declaration, source, depth, export_ctx, emitted)
    if not emitted:
        return
    prefix = "export default " if is_default else "export "
    first = emitted[0]
    stripped = first.lstrip(" ")
    emitted[0] = first[:len(first) - len(stripped)] + prefix + stripped
    lines.extend(emitted)


def _emit_expression_statement(
    node: Node, source: bytes, depth: int, ctx: ScriptContext, skip: bool, lines: List[str]
) -> None:
    text = node_text(source, node)
    if text.startswith(("module.exports", "exports.")):
        lines.append(truncate_line(text, MAX_DEF_LINE_LEN))
        return

    namespace = next((c for c in node.named_children if c.type == "internal_module"), None)
    if namespace is not None:
        _walk(namespace, source, depth, ctx, lines)
        return

    if depth != 0 or skip:
        return
    call = _find_call_expression(node)
    if call is None:
        return
    callee = call.child_by_field_name("function")
    func = _find_iife_function(callee) if callee is not None else None

    if ctx.unwrap_iife and func is not None and _emit_iife_body(func, source, depth, ctx, lines):
        return
    summary = summarize_top_level_call(node, call, func, source)
    if summary:
        lines.append(INDENT * depth + summary)


# --- Top-Level Calls and IIFEs ---

def _find_call_expression(node: Node) -> Optional[Node]:
    for current in insights.iter_scope(node, MAX_CALL_SEARCH_NODES, boundary_types=()):
        if current.type == "call_expression":
            return current
    return None


def _find_iife_function(node: Node) -> Optional[Node]:
    current: Optional[Node] = node
    while current is not None:
        if current.type in insights.FUNCTION_VALUE_TYPES:
            return current
        if current.type not in ("parenthesized_expression", "unary_expression", "await_expression"):
            return None
        current = current.named_children[0] if current.named_children else None
    return None


def _iife_label(func: Node) -> str:
    return "async IIFE" if insights.function_is_async(func) else "IIFE"


def _emit_iife_body(func: Node, source: bytes, depth: int, ctx: ScriptContext, lines: List[str]) -> bool:
    body = func.child_by_field_name("body")
    if body is None or body.type != "statement_block":
        return False
    indent = INDENT * depth
    lines.append(f"{indent}{_iife_label(func)} {{")
    for child in body.named_children:
        _walk(child, source, depth + 1, ctx, lines)
    lines.append(indent + "}")
    return True


def summarize_top_level_call(statement: Node, call: Node, func: Optional[Node], source: bytes) -> Optional[str]:
    """`callee(...)` for a file-scope call statement, `IIFE(...)` for wrapped functions."""
    if func is not None:
        label = _iife_label(func)
    else:
        callee = call.child_by_field_name("function")
        compact, _ = compact_text_prefix(node_text(source, callee), MAX_DEF_LINE_LEN)
        label = compact.strip()
        if not label:
            return None
    first = statement.named_children[0] if statement.named_children else None
    prefix = "await " if first is not None and first.type == "await_expression" else ""
    return truncate_line(f"{prefix}{label}(...)", MAX_DEF_LINE_LEN)


# --- Signatures ---

def function_signature(node: Node, source: bytes) -> Optional[str]:
    keywords: List[str] = []
    name = ""
    tail: List[str] = []
    for child in node.children:
        kind = child.type
        if kind in ("async", "function"):
            keywords.append(kind)
        elif kind == "*":
            if keywords:
                keywords[-1] += "*"
            else:
                keywords.append("*")
        elif kind in ("identifier", "property_identifier"):
            name = node_text(source, child)
        elif kind in ("type_parameters", "formal_parameters", "call_signature", "type_annotation"):
            tail.append(node_text(source, child))
    if not keywords and not name and not tail:
        return None
    head = " ".join(keywords + [name] if name else keywords)
    return truncate_line(head + "".join(tail), MAX_DEF_LINE_LEN)


def arrow_signature(node: Node, source: bytes) -> str:
    signature = "async " if insights.function_is_async(node) else ""
    signature += insights.function_parameters(node, source) or "()"
    return_type = node.child_by_field_name("return_type")
    if return_type is not None:
        signature += node_text(source, return_type)
    return truncate_line(signature + " =>", MAX_DEF_LINE_LEN)


def method_signature(node: Node, source: bytes) -> Optional[str]:
    modifiers: List[str] = []
    name = type_params = params = return_type = ""
    for child in node.children:
        kind = child.type
        if kind in METHOD_MODIFIERS:
            modifiers.append(node_text(source, child))
        elif kind in ("property_identifier", "identifier", "private_property_identifier", "computed_property_name"):
            name = node_text(source, child)
        elif kind in ("formal_parameters", "call_signature"):
            params = node_text(source, child)
        elif kind == "type_annotation":
            return_type = node_text(source, child)
        elif kind == "type_parameters":
            type_params = node_text(source, child)
    if not name:
        return None
    if name == "constructor":
        return constructor_signature(node, source)
    signature = "".join(f"{m} " for m in modifiers) + name + type_params + (params or "()") + return_type
    return truncate_line(signature, MAX_DEF_LINE_LEN)


def constructor_signature(node: Node, source: bytes) -> str:
    prefix = ""
    params = "()"
    for child in node.children:
        if child.type == "accessibility_modifier":
            prefix = node_text(source, child) + " "
        elif child.type == "formal_parameters":
            params = node_text(source, child)
    return truncate_line(f"{prefix}constructor{params}", MAX_DEF_LINE_LEN)


def summarize_ts_declaration(node: Node, source: bytes) -> str:
    text = node_text(source, node)
    if node.type == "type_alias_declaration":
        return summarize_assignment(text)
    return summarize_block_declaration(text)


def summarize_block_declaration(text: str) -> str:
    """Keep short blocks verbatim and collapse long ones to `header {...}`."""
    compact, truncated = compact_text_prefix(text, MAX_SIMPLE_CONST_LEN + 1)
    trimmed = compact.rstrip()
    if not truncated and len(trimmed) <= MAX_SIMPLE_CONST_LEN:
        return truncate_line(trimmed, MAX_DEF_LINE_LEN)
    brace = trimmed.find("{")
    if brace != -1:
        return truncate_line(f"{trimmed[:brace].rstrip()} {{...}}", MAX_DEF_LINE_LEN)
    if truncated:
        return truncate_line(f"{trimmed}...", MAX_DEF_LINE_LEN)
    return truncate_line(trimmed, MAX_DEF_LINE_LEN)


# --- Variables ---

def _declaration_keyword(node: Node) -> str:
    for child in node.children:
        if child.type in ("const", "let", "var"):
            return child.type
    return "var" if node.type == "variable_declaration" else "const"


def _emit_variables(node: Node, source: bytes, indent: str, skip: bool, ctx: ScriptContext, lines: List[str]) -> None:
    keyword = _declaration_keyword(node)
    prefix = "export " if ctx.in_export else ""
    emitted = False

    for declarator in node.children:
        if declarator.type != "variable_declarator":
            continue
        names = insights.declarator_binding_names(declarator, source)
        if skip and not any(ctx.is_exported(name) for name in names):
            continue

        func = insights.declarator_function(declarator)
        if func is not None:
            name = insights.declared_name(declarator, source)
            if not name:
                continue
            if func.type == "arrow_function":
                func_signature = arrow_signature(func, source)
            else:
                func_signature = function_signature(func, source) or "function"
            lines.append(indent + prefix + truncate_line(f"{keyword} {name} = {func_signature}", MAX_DEF_LINE_LEN))
            _emit_function_details(func, source, indent, ctx, lines)
            emitted = True
            continue

        text = node_text(source, declarator)
        if not text.strip():
            continue
        summary = truncate_line(f"{keyword} {summarize_assignment(text)}", MAX_DEF_LINE_LEN)
        lines.append(indent + prefix + summary)
        lines.extend(indent + line for line in insights.render_insight_lines(declarator, source, ctx.index, True))
        emitted = True

    if not emitted and not skip:
        summary = summarize_assignment(node_text(source, node))
        if summary:
            lines.append(indent + prefix + summary)


# --- Classes ---

def _is_private_member(member: Node, source: bytes) -> bool:
    for child in member.children:
        if child.type == "private_property_identifier":
            return True
        if child.type == "accessibility_modifier" and node_text(source, child) == "private":
            return True
    return False


def _property_class_value(member: Node) -> Optional[Node]:
    value = member.child_by_field_name("value")
    if value is not None and value.type == "class":
        return value
    return None


def _class_body(node: Node) -> Optional[Node]:
    body = node.child_by_field_name("body")
    if body is not None:
        return body
    return next((c for c in node.children if c.type == "class_body"), None)


def _emit_class(node: Node, source: bytes, depth: int, lines: List[str]) -> None:
    indent = INDENT * depth
    member_indent = INDENT * (depth + 1)

    header: List[str] = []
    for child in node.children:
        kind = child.type
        if kind in ("abstract", "class"):
            header.append(kind)
        elif kind in ("type_identifier", "identifier") and "class" in header:
            header.append(node_text(source, child))
        elif kind in ("type_parameters", "class_heritage", "extends_clause", "implements_clause"):
            header.append(node_text(source, child))
    lines.append(indent + truncate_line(" ".join(header), MAX_DEF_LINE_LEN))

    body = _class_body(node)
    if body is None:
        return
    for member in body.children:
        if _is_private_member(member, source):
            continue
        kind = member.type
        if kind in FIELD_TYPES:
            nested = _property_class_value(member)
            if nested is None:
                lines.append(member_indent + summarize_assignment(node_text(source, member)))
                continue
            name = insights.declared_name(member, source)
            if name:
                lines.append(f"{member_indent}static {name} = class")
                _emit_nested_class_members(nested, source, INDENT * (depth + 2), lines)
        elif kind in ("method_definition", "method_signature"):
            signature = method_signature(member, source)
            if signature:
                lines.append(member_indent + signature)
        elif kind == "abstract_method_signature":
            lines.append(member_indent + truncate_line(node_text(source, member), MAX_DEF_LINE_LEN))
        elif kind in ("class_declaration", "abstract_class_declaration"):
            _emit_class(member, source, depth + 1, lines)
        elif kind == "comment":
            summary = trim_doc_comment(node_text(source, member))
            if summary:
                lines.append(member_indent + summary)


def _emit_nested_class_members(class_node: Node, source: bytes, indent: str, lines: List[str]) -> None:
    body = _class_body(class_node)
    if body is None:
        return
    for member in body.children:
        if member.type in ("method_definition", "method_signature"):
            signature = method_signature(member, source)
            if signature:
                lines.append(indent + signature)


# --- Function Details ---

def _emit_function_details(func: Node, source: bytes, indent: str, ctx: ScriptContext, lines: List[str]) -> None:
    jsx = insights.find_jsx_return(func)
    if jsx is not None:
        _emit_component_details(func, jsx, source, indent, ctx, lines)
        return

    body = func.child_by_field_name("body")
    if body is not None and body.type == "statement_block":
        calls = collect_call_edges(body, source, insights.FUNCTION_BOUNDARY_TYPES)
        if not calls.is_empty():
            lines.append(f"{indent}// Calls: {calls.render()}")

    for step in insights.collect_flow_steps(func, source):
        lines.append(f"{indent}// Flow: {step}")
    strings = insights.collect_protocol_strings(func, source)
    if not strings.is_empty():
        lines.append(f"{indent}// Strings: {strings.render()}")
    lines.extend(indent + line for line in insights.render_insight_lines(func, source, ctx.index, True))


def _emit_component_details(
    func: Node, jsx: Node, source: bytes, indent: str, ctx: ScriptContext, lines: List[str]
) -> None:
    index = ctx.index
    if ctx.entrypoint:
        bindings, truncated = insights.collect_hook_bindings(func, source)
        lines.extend(indent + line for line in insights.render_hook_lines(bindings, truncated))
        for effect in insights.collect_effects(func, source, index.external_bindings):
            lines.append(indent + insights.render_effect_line(effect))
        for handler in insights.collect_handlers(func, source, jsx, index.external_bindings):
            lines.append(indent + insights.render_handler_line(handler))

    outline = insights.summarize_render_outline(jsx, source, index.external_components)
    lines.append(f"{indent}// Render: {truncate_line(outline, MAX_DEF_LINE_LEN)}")
