"""
Whole-file and per-function facts for JavaScript/TypeScript skeletons.

The module index (exports, external imports) and the entrypoint flag are
computed once per file. The per-function collectors produce the annotation
lines the adapter writes under a signature: hook bindings, effects, event
handlers, the JSX render outline, control flow steps, protocol strings and
boundary calls (invokes, listeners, dialogs, clipboard writes).

Every walk here is bounded by a node budget; none of them recurse.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from tree_sitter import Node

from ..collectors import collect_bounded
from ..models import CallEdgeList, EffectRegistration, HandlerBinding, HookBinding, ModuleIndex
from ..utils import MAX_DEF_LINE_LEN, compact_text_prefix, node_text, truncate_line

MAX_INSIGHT_NODES = 4000
MAX_INSIGHT_ENTRIES = 8
MAX_INSIGHT_NAME_LEN = 40
MAX_JSX_RETURN_NODES = 2000
MAX_JSX_COMPONENTS = 10
MAX_JSX_PROP_NAMES = 6
MAX_HOOK_ENTRIES = 12
MAX_HOOK_INIT_LEN = 28
MAX_EFFECTS = 6
MAX_FLOW_STEPS = 6
MAX_TIMER_CALLS = 6
MAX_PROTOCOL_STRINGS = 8
MAX_PROTOCOL_STRING_LEN = 30
MAX_EXPRESSION_SEARCH_NODES = 200
MAX_IMPORT_SUMMARY_MODULES = 20
MAX_IMPORT_SUMMARY_NAMES = 12

FUNCTION_BOUNDARY_TYPES = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "function",
    "function_expression",
    "generator_function",
    "arrow_function",
    "method_definition",
    "class_declaration",
    "class_body",
})
FUNCTION_VALUE_TYPES = frozenset({"arrow_function", "function", "function_expression"})
JSX_ELEMENT_TYPES = frozenset({"jsx_element", "jsx_self_closing_element", "jsx_fragment"})
IMPORT_TYPES = frozenset({"import_statement", "import_declaration"})
EXPORT_TYPES = frozenset({"export_statement", "export_declaration", "export_default_declaration", "export_assignment"})
DECLARATION_TYPES = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
    "abstract_class_declaration",
    "interface_declaration",
    "enum_declaration",
    "type_alias_declaration",
})

ENTRYPOINT_STEMS = frozenset({"app", "main", "index"})
ENTRYPOINT_EXTENSIONS = frozenset({".tsx", ".jsx", ".js", ".ts"})
MOUNT_CALLS = frozenset({"createRoot", "hydrateRoot"})
LEGACY_MOUNT_OBJECT = "ReactDOM"
STATE_HOOKS = ("useState", "useRef", "useReducer")
EFFECT_HOOKS = frozenset({"useEffect", "useLayoutEffect"})
SKIPPED_PROP_NAMES = frozenset({"key", "className", "style"})
INVOKE_GLOBALS = frozenset({"window", "globalThis", "tauri"})
DIRECT_INVOKE_NAMES = frozenset({"alert", "fetch", "invoke"})
TIMER_NAMES = frozenset({"setTimeout", "setInterval", "clearTimeout", "clearInterval"})


# --- Node Helpers ---

def iter_scope(root: Node, budget: int = MAX_INSIGHT_NODES, boundary_types=FUNCTION_BOUNDARY_TYPES) -> Iterator[Node]:
    """Pre-order walk of named nodes under `root`. Nested functions are yielded but not entered."""
    stack = [root]
    visited = 0
    while stack:
        node = stack.pop()
        visited += 1
        if visited > budget:
            return
        yield node
        if node is not root and node.type in boundary_types:
            continue
        stack.extend(reversed(node.named_children))


def string_literal(node: Optional[Node], source: bytes) -> Optional[str]:
    """Unquoted value of a string or template literal without substitutions."""
    if node is None:
        return None
    raw = node_text(source, node).strip()
    if "${" in raw or len(raw) < 2:
        return None
    if raw[0] == raw[-1] and raw[0] in "\"'`":
        return raw[1:-1]
    return None


def member_property_name(node: Node, source: bytes) -> Optional[str]:
    prop = node.child_by_field_name("property")
    if prop is not None and prop.type in ("property_identifier", "identifier", "private_property_identifier"):
        return node_text(source, prop)
    return None


def member_root_identifier(node: Node, source: bytes) -> Optional[str]:
    current = node.child_by_field_name("object")
    while current is not None:
        if current.type == "identifier":
            return node_text(source, current)
        if current.type != "member_expression":
            return None
        current = current.child_by_field_name("object")
    return None


def call_argument(node: Node, index: int) -> Optional[Node]:
    args = node.child_by_field_name("arguments")
    if args is None:
        return None
    named = [child for child in args.named_children if child.type != "comment"]
    return named[index] if index < len(named) else None


def callee_name(call: Node, source: bytes) -> Optional[str]:
    """Bare function name of a call: `foo` for `foo()` and `bar` for `a.b.bar()`."""
    callee = call.child_by_field_name("function")
    if callee is None:
        return None
    if callee.type == "identifier":
        return node_text(source, callee)
    if callee.type == "member_expression":
        return member_property_name(callee, source)
    return None


def function_is_async(node: Node) -> bool:
    return any(child.type == "async" for child in node.children)


def function_parameters(node: Node, source: bytes) -> Optional[str]:
    params = node.child_by_field_name("parameters") or node.child_by_field_name("parameter")
    if params is None:
        for child in node.children:
            if child.type in ("formal_parameters", "identifier", "object_pattern", "array_pattern"):
                params = child
                break
    return node_text(source, params) if params is not None else None


def declared_name(node: Node, source: bytes) -> Optional[str]:
    name = node.child_by_field_name("name")
    if name is not None:
        return node_text(source, name)
    for child in node.children:
        if child.type in ("identifier", "property_identifier", "type_identifier"):
            return node_text(source, child)
    return None


def declarator_function(declarator: Node) -> Optional[Node]:
    value = declarator.child_by_field_name("value")
    if value is not None and value.type in FUNCTION_VALUE_TYPES:
        return value
    return None


def pattern_binding_names(node: Optional[Node], source: bytes) -> List[str]:
    """Names bound by an identifier or a destructuring pattern, in source order."""
    names: List[str] = []
    stack = [node] if node is not None else []
    while stack:
        current = stack.pop()
        kind = current.type
        if kind in ("identifier", "property_identifier", "type_identifier",
                    "shorthand_property_identifier_pattern", "shorthand_property_identifier"):
            names.append(node_text(source, current))
            continue
        if kind == "pair_pattern":
            target = current.child_by_field_name("value")
        elif kind in ("assignment_pattern", "object_assignment_pattern"):
            target = current.child_by_field_name("left")
        else:
            target = None
        if target is not None:
            stack.append(target)
            continue
        if kind == "rest_pattern":
            stack.extend(reversed(current.named_children))
            continue
        if kind in ("object_pattern", "array_pattern"):
            stack.extend(reversed(current.named_children))
    return names


def declarator_binding_names(declarator: Node, source: bytes) -> List[str]:
    return pattern_binding_names(declarator.child_by_field_name("name"), source)


def is_component_name(name: str) -> bool:
    """`Button`, `UI.Button` and `svg:Circle` are components; `div` is layout."""
    for part in name.strip().replace(":", ".").split("."):
        if part and part[0].isupper():
            return True
    return False


def _bound_or_unscoped(name: Optional[str], bindings: Set[str]) -> bool:
    # Without any external imports there is nothing to check against.
    return not bindings or (name is not None and name in bindings)


# --- Module Index ---

def build_module_index(root: Node, source: bytes) -> ModuleIndex:
    """Collect exported names and external (non-relative) imports of one module."""
    index = ModuleIndex()
    modules: Set[str] = set()
    for child in root.children:
        if child.type in EXPORT_TYPES:
            index.has_exports = True
            _collect_export_names(child, source, index.exported_names)
        elif child.type in IMPORT_TYPES:
            specifier = string_literal(child.child_by_field_name("source"), source)
            if specifier is None or specifier.startswith(("./", "../")):
                continue
            modules.add(specifier)
            for binding in import_bindings(child, source):
                local = binding[5:] if binding.startswith("* as ") else binding
                index.external_bindings.add(local)
                if is_component_name(local):
                    index.external_components.add(local)
    index.external_modules = sorted(modules)
    return index


def _collect_export_names(node: Node, source: bytes, names: Set[str]) -> None:
    has_source = node.child_by_field_name("source") is not None
    for child in node.children:
        if child.type in DECLARATION_TYPES:
            name = declared_name(child, source)
            if name:
                names.add(name)
        elif child.type in ("lexical_declaration", "variable_declaration"):
            for declarator in child.named_children:
                if declarator.type == "variable_declarator":
                    names.update(declarator_binding_names(declarator, source))
        elif child.type == "export_clause" and not has_source:
            for specifier in child.named_children:
                if specifier.type == "export_specifier":
                    local = specifier.child_by_field_name("name")
                    if local is not None:
                        names.add(node_text(source, local))
        elif child.type == "identifier" and any(c.type == "default" for c in node.children):
            # export default SomeComponent;
            names.add(node_text(source, child))


def import_bindings(node: Node, source: bytes) -> List[str]:
    """Local names an import statement binds, namespace imports as `* as name`."""
    bindings: List[str] = []
    stack = list(reversed(node.children))
    while stack:
        child = stack.pop()
        if child.type == "import_specifier":
            local = child.child_by_field_name("alias") or child.child_by_field_name("name")
            name = node_text(source, local)
        elif child.type == "namespace_import":
            ident = next((c for c in child.named_children if c.type == "identifier"), None)
            name = f"* as {node_text(source, ident)}" if ident is not None else ""
        elif child.type in ("import_clause", "named_imports"):
            stack.extend(reversed(child.children))
            continue
        elif child.type == "identifier":
            name = node_text(source, child)
        else:
            continue
        if name and name not in bindings:
            bindings.append(name)
    return bindings


# --- Import Summary ---

@dataclass
class ImportSummary:
    module: str
    bindings: List[str] = field(default_factory=list)
    type_only: bool = False

    @property
    def side_effect(self) -> bool:
        return not self.bindings

    def merge(self, other: "ImportSummary") -> None:
        for binding in other.bindings:
            if binding not in self.bindings:
                self.bindings.append(binding)
        self.type_only = self.type_only and other.type_only

    def render(self) -> str:
        label = "// Import (type): " if self.type_only else "// Import: "
        if self.side_effect:
            return truncate_line(f"{label}{self.module} (side-effect)", MAX_DEF_LINE_LEN)
        names = ", ".join(self.bindings[:MAX_IMPORT_SUMMARY_NAMES])
        if len(self.bindings) > MAX_IMPORT_SUMMARY_NAMES:
            names += ", ..."
        return truncate_line(f"{label}{self.module} -> {names}", MAX_DEF_LINE_LEN)


def collect_import_summaries(root: Node, source: bytes) -> List[ImportSummary]:
    """One summary per module specifier, merged across repeated imports."""
    summaries: Dict[str, ImportSummary] = {}
    for child in root.children:
        if child.type not in IMPORT_TYPES:
            continue
        specifier = string_literal(child.child_by_field_name("source"), source)
        if specifier is None:
            continue
        entry = ImportSummary(
            module=specifier,
            bindings=import_bindings(child, source),
            type_only=node_text(source, child).lstrip().startswith("import type"),
        )
        if specifier in summaries:
            summaries[specifier].merge(entry)
        else:
            summaries[specifier] = entry
    return list(summaries.values())


def render_import_summary(root: Node, source: bytes) -> List[str]:
    summaries = collect_import_summaries(root, source)
    if not summaries:
        return []
    lines = ["// Imports (summary)"]
    lines.extend(summary.render() for summary in summaries[:MAX_IMPORT_SUMMARY_MODULES])
    if len(summaries) > MAX_IMPORT_SUMMARY_MODULES:
        lines.append(f"// ... +{len(summaries) - MAX_IMPORT_SUMMARY_MODULES} more imports")
    return lines


# --- Entrypoint Detection ---

def is_entrypoint(root: Node, source: bytes, path: Optional[str]) -> bool:
    """
    Decide whether a module is an application entrypoint.

    True for conventional entry file names (app/main/index), for modules
    that mount an app (createRoot, hydrateRoot, ReactDOM.render), and for
    modules whose default export is a component returning JSX.
    """
    if path:
        name = path.replace("\\", "/").rsplit("/", 1)[-1].lower()
        stem, ext = os.path.splitext(name)
        if stem in ENTRYPOINT_STEMS and ext in ENTRYPOINT_EXTENSIONS:
            return True
    if _contains_mount_call(root, source):
        return True
    return _has_default_exported_component(root, source)


def _contains_mount_call(root: Node, source: bytes) -> bool:
    for node in iter_scope(root, MAX_INSIGHT_NODES, boundary_types=()):
        if node.type == "call_expression" and _is_mount_call(node, source):
            return True
    return False


def _is_mount_call(call: Node, source: bytes) -> bool:
    name = callee_name(call, source)
    if name in MOUNT_CALLS:
        return True
    if name != "render":
        return False
    # legacy ReactDOM.render(...)
    callee = call.child_by_field_name("function")
    if callee is None or callee.type != "member_expression":
        return False
    target = callee.child_by_field_name("object")
    return target is not None and node_text(source, target) == LEGACY_MOUNT_OBJECT


def _has_default_exported_component(root: Node, source: bytes) -> bool:
    has_default_export = False
    has_component = False
    for child in root.children:
        if child.type in ("export_statement", "export_default_declaration"):
            is_default = child.type == "export_default_declaration" or any(c.type == "default" for c in child.children)
            has_default_export = has_default_export or is_default
            for part in child.named_children:
                if part.type in FUNCTION_VALUE_TYPES or part.type == "function_declaration":
                    if find_jsx_return(part) is not None and is_default:
                        return True
        elif child.type == "function_declaration":
            has_component = has_component or find_jsx_return(child) is not None
        elif child.type in ("lexical_declaration", "variable_declaration"):
            for declarator in child.named_children:
                if declarator.type != "variable_declarator":
                    continue
                func = declarator_function(declarator)
                if func is not None and find_jsx_return(func) is not None:
                    has_component = True
    return has_default_export and has_component


# --- JSX ---

def _jsx_from_expression(node: Node) -> Optional[Node]:
    if node.type in JSX_ELEMENT_TYPES:
        return node
    if node.type == "parenthesized_expression":
        for child in node.named_children:
            if child.type in JSX_ELEMENT_TYPES:
                return child
    return None


def find_jsx_return(func: Node) -> Optional[Node]:
    """The JSX element a function returns, from an expression body or a return statement."""
    body = func.child_by_field_name("body")
    if body is None:
        return None
    direct = _jsx_from_expression(body)
    if direct is not None:
        return direct
    if body.type != "statement_block":
        return None
    for node in iter_scope(body, MAX_JSX_RETURN_NODES):
        if node.type == "return_statement":
            for child in node.named_children:
                jsx = _jsx_from_expression(child)
                if jsx is not None:
                    return jsx
    return None


def _opening_element(node: Node) -> Optional[Node]:
    if node.type == "jsx_element":
        return node.child_by_field_name("open_tag") or next(
            (c for c in node.children if c.type == "jsx_opening_element"), None
        )
    if node.type in ("jsx_self_closing_element", "jsx_opening_element"):
        return node
    return None


def jsx_tag_name(node: Node, source: bytes) -> Optional[str]:
    opening = _opening_element(node)
    if opening is None:
        return None
    name = opening.child_by_field_name("name")
    if name is None:
        name = next(
            (c for c in opening.named_children
             if c.type in ("identifier", "jsx_identifier", "member_expression", "nested_identifier", "jsx_namespace_name")),
            None,
        )
    if name is None:
        return None
    return truncate_line(node_text(source, name), MAX_INSIGHT_NAME_LEN)


def _jsx_attribute_parts(attribute: Node, source: bytes) -> Tuple[Optional[str], Optional[Node]]:
    named = attribute.named_children
    if not named:
        return None, None
    name = node_text(source, named[0])
    value = named[1] if len(named) > 1 else None
    return name, value


def _jsx_prop_names(element: Node, source: bytes) -> Tuple[List[str], bool]:
    opening = _opening_element(element)
    props: List[str] = []
    if opening is None:
        return props, False
    for child in opening.named_children:
        if child.type != "jsx_attribute":
            continue
        name, _ = _jsx_attribute_parts(child, source)
        if not name or name in SKIPPED_PROP_NAMES:
            continue
        props.append(name)
        if len(props) >= MAX_JSX_PROP_NAMES:
            return props, True
    return props, False


def _root_label(jsx: Node, source: bytes) -> str:
    if jsx.type == "jsx_fragment":
        return "Fragment"
    name = jsx_tag_name(jsx, source)
    if name and is_component_name(name):
        return name
    return "Layout"


def _contains_map_call(node: Node, source: bytes) -> bool:
    for current in iter_scope(node, MAX_EXPRESSION_SEARCH_NODES, boundary_types=()):
        if current.type == "call_expression":
            callee = current.child_by_field_name("function")
            if callee is not None and callee.type == "member_expression" and member_property_name(callee, source) == "map":
                return True
    return False


def summarize_render_outline(jsx: Node, source: bytes, external_components: Set[str]) -> str:
    """
    Outline the components a JSX tree renders.

    Produces `Root -> Child[prop1, prop2], Row*, Modal?` where `*` marks
    elements produced inside a `.map(...)` and `?` elements under a
    conditional or logical expression. Lowercase layout elements and
    components imported from external packages are left out.
    """
    root_label = _root_label(jsx, source)
    entries: List[str] = []
    truncated = False
    visited = 0
    stack: List[Tuple[Node, bool, bool]] = [(jsx, False, False)]

    while stack:
        node, conditional, repeated = stack.pop()
        visited += 1
        if visited > MAX_INSIGHT_NODES:
            truncated = True
            break

        if node is not jsx and node.type in ("jsx_element", "jsx_self_closing_element"):
            entry = _outline_entry(node, source, external_components, conditional, repeated)
            if entry and entry not in entries:
                if len(entries) >= MAX_JSX_COMPONENTS:
                    truncated = True
                    break
                entries.append(entry)

        if node.type == "jsx_expression" and node.named_children:
            expr = node.named_children[0]
            if expr.type in ("ternary_expression", "conditional_expression", "binary_expression", "logical_expression"):
                conditional = True
            if _contains_map_call(expr, source):
                repeated = True

        for child in reversed(node.named_children):
            stack.append((child, conditional, repeated))

    if not entries:
        return root_label
    outline = f"{root_label} -> {', '.join(entries)}"
    if truncated:
        outline += ", ..."
    return outline


def _outline_entry(node: Node, source: bytes, external_components: Set[str], conditional: bool, repeated: bool) -> Optional[str]:
    name = jsx_tag_name(node, source)
    if not name or not is_component_name(name) or name in external_components:
        return None
    label = name
    if repeated:
        label += "*"
    if conditional:
        label += "?"
    props, more = _jsx_prop_names(node, source)
    if props:
        label += "[" + ", ".join(props) + (", ..." if more else "") + "]"
    return label


def collect_rendered_components(node: Node, source: bytes, external_components: Set[str]) -> CallEdgeList:
    """Component names used anywhere under `node` (for functions that do not return JSX)."""
    def _match(current: Node) -> Optional[str]:
        if current.type not in ("jsx_opening_element", "jsx_self_closing_element"):
            return None
        name = jsx_tag_name(current, source)
        if name and is_component_name(name) and name not in external_components:
            return name
        return None

    return collect_bounded(node, _match, limit=MAX_JSX_COMPONENTS, node_budget=MAX_INSIGHT_NODES)


# --- Hooks and Effects ---

def summarize_value(node: Node, source: bytes) -> str:
    """Compact rendering of a hook initializer."""
    kind = node.type
    if kind in ("object", "object_pattern"):
        return "{...}"
    if kind in ("array", "array_pattern"):
        return "[]"
    if kind in ("string", "template_string"):
        text = string_literal(node, source)
        if text is None:
            return '"..."'
        return f'"{truncate_line(text, MAX_HOOK_INIT_LEN)}"'
    return truncate_line(" ".join(node_text(source, node).split()), MAX_HOOK_INIT_LEN)


def collect_hook_bindings(func: Node, source: bytes) -> Tuple[List[HookBinding], Set[str]]:
    """
    State-like hook bindings declared directly in a component body.

    Returns the bindings in source order and the set of hook names whose
    entry cap was exceeded.
    """
    body = func.child_by_field_name("body")
    bindings: List[HookBinding] = []
    truncated: Set[str] = set()
    if body is None:
        return bindings, truncated

    counts = {hook: 0 for hook in STATE_HOOKS}
    for node in iter_scope(body):
        if node.type != "variable_declarator":
            continue
        value = node.child_by_field_name("value")
        if value is None or value.type != "call_expression":
            continue
        hook = callee_name(value, source)
        if hook not in counts:
            continue
        names = declarator_binding_names(node, source)
        if not names:
            continue
        if counts[hook] >= MAX_HOOK_ENTRIES:
            truncated.add(hook)
            continue
        counts[hook] += 1
        arg = call_argument(value, 0)
        initializer = truncate_line(summarize_value(arg, source), MAX_HOOK_INIT_LEN) if arg is not None else ""
        bindings.append(HookBinding(hook=hook, name=names[0], initializer=initializer))
    return bindings, truncated


def render_hook_lines(bindings: List[HookBinding], truncated: Set[str]) -> List[str]:
    lines: List[str] = []
    for hook in STATE_HOOKS:
        entries = [
            f"{b.name}={b.initializer}" if b.initializer else b.name
            for b in bindings
            if b.hook == hook
        ]
        if not entries:
            continue
        text = ", ".join(entries)
        if hook in truncated:
            text += ", ..."
        lines.append(f"// {hook}: {truncate_line(text, MAX_DEF_LINE_LEN)}")
    return lines


def collect_effects(func: Node, source: bytes, external_bindings: Set[str]) -> List[EffectRegistration]:
    body = func.child_by_field_name("body")
    effects: List[EffectRegistration] = []
    if body is None:
        return effects
    for node in iter_scope(body):
        if node.type != "call_expression":
            continue
        hook = callee_name(node, source)
        if hook not in EFFECT_HOOKS:
            continue
        deps_node = call_argument(node, 1)
        deps = truncate_line(node_text(source, deps_node).strip(), MAX_DEF_LINE_LEN) if deps_node is not None else None
        calls = collect_boundary_calls(node, source, external_bindings, skip_nested=False)
        effects.append(EffectRegistration(hook=hook, dependencies=deps or None, calls=calls))
        if len(effects) >= MAX_EFFECTS:
            break
    return effects


def render_effect_line(effect: EffectRegistration) -> str:
    line = f"// Effect: {effect.hook}({effect.dependencies or ''})"
    if not effect.calls.is_empty():
        line += f" -> {effect.calls.render()}"
    return line


# --- Boundary Calls ---

def _is_invoke_call(callee: Node, source: bytes, bindings: Set[str]) -> bool:
    if callee.type == "identifier":
        return node_text(source, callee) == "invoke"
    if callee.type == "member_expression" and member_property_name(callee, source) == "invoke":
        root = member_root_identifier(callee, source)
        return root in ("window", "globalThis") or (root is not None and root in bindings)
    return False


def _is_listen_call(callee: Node, source: bytes, bindings: Set[str]) -> bool:
    if callee.type == "identifier":
        name = node_text(source, callee)
        return name == "listen" and _bound_or_unscoped(name, bindings)
    if callee.type == "member_expression" and member_property_name(callee, source) == "listen":
        root = member_root_identifier(callee, source)
        return root in ("window", "globalThis", "event") or (root is not None and root in bindings)
    return False


def _is_open_call(callee: Node, source: bytes, bindings: Set[str]) -> bool:
    if callee.type == "identifier":
        name = node_text(source, callee)
        return name == "open" and _bound_or_unscoped(name, bindings)
    if callee.type == "member_expression" and member_property_name(callee, source) == "open":
        root = member_root_identifier(callee, source)
        return root in ("window", "globalThis", "dialog") or (root is not None and root in bindings)
    return False


def _looks_like_clipboard_name(name: str) -> bool:
    lower = name.lower()
    return "clipboard" in lower or lower == "writetext"


def _is_clipboard_call(callee: Node, source: bytes, bindings: Set[str]) -> bool:
    if callee.type == "identifier":
        name = node_text(source, callee)
        return _looks_like_clipboard_name(name) and _bound_or_unscoped(name, bindings)
    if callee.type == "member_expression" and member_property_name(callee, source) == "writeText":
        root = member_root_identifier(callee, source)
        return root in ("navigator", "clipboard") or (root is not None and root in bindings)
    return False


def _clipboard_label(callee: Node, source: bytes) -> str:
    if callee.type == "member_expression" and member_root_identifier(callee, source) in ("navigator", "clipboard"):
        return "clipboard.writeText"
    return truncate_line(node_text(source, callee), MAX_INSIGHT_NAME_LEN)


def _labelled_call(name: str, call: Node, source: bytes) -> str:
    literal = string_literal(call_argument(call, 0), source)
    if literal is None:
        return name
    return truncate_line(f"{name}({literal})", MAX_INSIGHT_NAME_LEN)


def collect_boundary_calls(node: Node, source: bytes, external_bindings: Set[str], skip_nested: bool = True) -> CallEdgeList:
    """Calls that leave the component: invoke, listen, open and clipboard writes."""
    def _match(current: Node) -> Optional[str]:
        if current.type != "call_expression":
            return None
        callee = current.child_by_field_name("function")
        if callee is None:
            return None
        if _is_invoke_call(callee, source, external_bindings):
            return _labelled_call("invoke", current, source)
        if _is_listen_call(callee, source, external_bindings):
            return _labelled_call("listen", current, source)
        if _is_open_call(callee, source, external_bindings):
            return "open"
        if _is_clipboard_call(callee, source, external_bindings):
            return _clipboard_label(callee, source)
        return None

    return collect_bounded(
        node,
        _match,
        limit=MAX_INSIGHT_ENTRIES,
        node_budget=MAX_INSIGHT_NODES,
        boundary_types=FUNCTION_BOUNDARY_TYPES if skip_nested else (),
    )


def collect_timer_calls(node: Node, source: bytes) -> CallEdgeList:
    def _match(current: Node) -> Optional[str]:
        if current.type != "call_expression":
            return None
        name = callee_name(current, source)
        if name not in TIMER_NAMES:
            return None
        if name in ("setTimeout", "setInterval"):
            delay = call_argument(current, 1)
            delay_text = node_text(source, delay).strip() if delay is not None else ""
            if delay_text and all(ch.isdigit() or ch == "." for ch in delay_text):
                return f"{name}({delay_text})"
        return name

    return collect_bounded(
        node, _match, limit=MAX_TIMER_CALLS, node_budget=MAX_INSIGHT_NODES, boundary_types=FUNCTION_BOUNDARY_TYPES
    )


# --- Event Handlers ---

def _handler_name_from_expression(node: Node, source: bytes) -> Optional[str]:
    """Follow identifiers, member properties, call callees and arrow bodies to a handler name."""
    stack = [node]
    budget = MAX_EXPRESSION_SEARCH_NODES
    while stack and budget > 0:
        budget -= 1
        current = stack.pop()
        kind = current.type
        if kind == "identifier":
            return node_text(source, current)
        if kind == "member_expression":
            return member_property_name(current, source) or node_text(source, current)
        if kind == "call_expression":
            callee = current.child_by_field_name("function")
            if callee is not None and callee.type in ("identifier", "member_expression"):
                stack.append(callee)
                continue
        if kind in FUNCTION_VALUE_TYPES:
            body = current.child_by_field_name("body")
            if body is not None:
                call = next(
                    (n for n in iter_scope(body, MAX_EXPRESSION_SEARCH_NODES, boundary_types=()) if n.type == "call_expression"),
                    None,
                )
                if call is not None:
                    stack.append(call)
            continue
        stack.extend(reversed(current.named_children))
    return None


def collect_jsx_event_handlers(jsx: Node, source: bytes) -> List[str]:
    """Handler names referenced from `on*` attributes in a JSX tree."""
    def _match(node: Node) -> Optional[str]:
        if node.type != "jsx_attribute":
            return None
        name, value = _jsx_attribute_parts(node, source)
        if not name or not name.startswith("on") or value is None:
            return None
        expr = value.named_children[0] if value.type == "jsx_expression" and value.named_children else value
        return _handler_name_from_expression(expr, source)

    return collect_bounded(jsx, _match, limit=MAX_HOOK_ENTRIES, node_budget=MAX_INSIGHT_NODES).entries


def collect_handlers(func: Node, source: bytes, jsx: Node, external_bindings: Set[str]) -> List[HandlerBinding]:
    """
    Local functions of a component that are wired to JSX events or do boundary work.
    """
    body = func.child_by_field_name("body")
    if body is None:
        return []
    handler_names = set(collect_jsx_event_handlers(jsx, source))
    handlers: List[HandlerBinding] = []
    seen: Set[str] = set()

    for node in iter_scope(body):
        if node.type == "function_declaration":
            name, target = declared_name(node, source), node
        elif node.type == "variable_declarator":
            target = declarator_function(node)
            name = declared_name(node, source) if target is not None else None
        else:
            continue
        if not name or target is None or name in seen:
            continue
        calls = collect_boundary_calls(target, source, external_bindings)
        timers = collect_timer_calls(target, source)
        if name in handler_names or not calls.is_empty() or not timers.is_empty():
            seen.add(name)
            handlers.append(HandlerBinding(
                name=name,
                params=function_parameters(target, source) or "()",
                is_async=function_is_async(target),
                boundary_calls=list(calls.entries),
                timers=list(timers.entries),
            ))
        if len(handlers) >= MAX_HOOK_ENTRIES:
            break
    return handlers


def render_handler_line(handler: HandlerBinding) -> str:
    signature = ("async " if handler.is_async else "") + handler.name + handler.params
    line = f"// Handler: {truncate_line(signature, MAX_DEF_LINE_LEN)}"
    details = handler.boundary_calls + handler.timers
    if details:
        line += " -> " + ", ".join(details)
    return line


# --- Flow and Strings ---

def _field_text(node: Node, source: bytes, *names: str, default: str = "...") -> str:
    for name in names:
        child = node.child_by_field_name(name)
        if child is not None:
            return node_text(source, child)
    return default


def summarize_flow_node(node: Node, source: bytes) -> Optional[str]:
    kind = node.type
    if kind == "if_statement":
        summary = f"if {_field_text(node, source, 'condition')}"
    elif kind == "for_statement":
        init = _field_text(node, source, "initializer", default="").rstrip(";")
        test = _field_text(node, source, "condition", default="").rstrip(";")
        update = _field_text(node, source, "increment", "update", default="")
        summary = f"for ({init}; {test}; {update})"
    elif kind == "for_in_statement":
        operator = "of" if any(c.type == "of" for c in node.children) else "in"
        summary = f"for ({_field_text(node, source, 'left')} {operator} {_field_text(node, source, 'right')})"
    elif kind == "while_statement":
        summary = f"while {_field_text(node, source, 'condition')}"
    elif kind == "do_statement":
        summary = f"do/while {_field_text(node, source, 'condition')}"
    elif kind == "switch_statement":
        summary = f"switch {_field_text(node, source, 'value')}"
    elif kind == "try_statement":
        return "try/catch"
    else:
        return None
    compact, _ = compact_text_prefix(" ".join(summary.split()), MAX_DEF_LINE_LEN)
    return truncate_line(compact, MAX_DEF_LINE_LEN)


def collect_flow_steps(func: Node, source: bytes) -> List[str]:
    body = func.child_by_field_name("body")
    steps: List[str] = []
    if body is None:
        return steps
    for node in iter_scope(body):
        summary = summarize_flow_node(node, source)
        if summary:
            steps.append(summary)
            if len(steps) >= MAX_FLOW_STEPS:
                break
    return steps


def looks_like_protocol_string(value: str) -> bool:
    """Short message names such as `SAVE_FILE`, `READY` or `file_changed`."""
    trimmed = value.strip()
    if not trimmed or len(trimmed) > MAX_PROTOCOL_STRING_LEN:
        return False
    if all(ch.isupper() or ch in "_- " for ch in trimmed) and any(ch.isupper() for ch in trimmed):
        return True
    return "_" in trimmed


def collect_protocol_strings(func: Node, source: bytes) -> CallEdgeList:
    body = func.child_by_field_name("body")
    if body is None:
        return CallEdgeList()

    def _match(node: Node) -> Optional[str]:
        if node.type not in ("string", "template_string"):
            return None
        value = string_literal(node, source)
        return value if value is not None and looks_like_protocol_string(value) else None

    return collect_bounded(
        body, _match, limit=MAX_PROTOCOL_STRINGS, node_budget=MAX_INSIGHT_NODES, boundary_types=FUNCTION_BOUNDARY_TYPES
    )


# --- Module-Level Insights ---

def _invoke_entry(node: Node, source: bytes, bindings: Set[str]) -> Optional[str]:
    if node.type != "call_expression":
        return None
    callee = node.child_by_field_name("function")
    if callee is None:
        return None
    text = node_text(source, callee)
    if text in DIRECT_INVOKE_NAMES:
        matched = True
    elif callee.type == "identifier":
        matched = text in bindings
    elif callee.type == "member_expression":
        root = member_root_identifier(callee, source)
        prop = member_property_name(callee, source)
        matched = (root in INVOKE_GLOBALS and prop in DIRECT_INVOKE_NAMES) or (root is not None and root in bindings)
    else:
        matched = False
    if not matched:
        return None

    if text == "invoke":
        command = string_literal(call_argument(node, 0), source)
        if command is not None:
            return truncate_line(command, MAX_INSIGHT_NAME_LEN)
    entry = truncate_line(" ".join(text.split()), MAX_INSIGHT_NAME_LEN)
    lower = entry.lower()
    # listeners, dialogs and clipboard writes get their own lines
    if lower in ("listen", "open", "writetext") or "clipboard" in lower:
        return None
    return entry


def collect_invokes(node: Node, source: bytes, external_bindings: Set[str]) -> CallEdgeList:
    return collect_bounded(
        node, lambda n: _invoke_entry(n, source, external_bindings),
        limit=MAX_INSIGHT_ENTRIES, node_budget=MAX_INSIGHT_NODES,
    )


def collect_listens(node: Node, source: bytes, external_bindings: Set[str]) -> CallEdgeList:
    def _match(current: Node) -> Optional[str]:
        if current.type != "call_expression":
            return None
        callee = current.child_by_field_name("function")
        if callee is None or not _is_listen_call(callee, source, external_bindings):
            return None
        event = string_literal(call_argument(current, 0), source)
        return truncate_line(event, MAX_INSIGHT_NAME_LEN) if event is not None else "listen"

    return collect_bounded(node, _match, limit=MAX_INSIGHT_ENTRIES, node_budget=MAX_INSIGHT_NODES)


def collect_opens(node: Node, source: bytes, external_bindings: Set[str]) -> CallEdgeList:
    def _match(current: Node) -> Optional[str]:
        if current.type != "call_expression":
            return None
        callee = current.child_by_field_name("function")
        if callee is not None and _is_open_call(callee, source, external_bindings):
            return "open"
        return None

    return collect_bounded(node, _match, limit=MAX_INSIGHT_ENTRIES, node_budget=MAX_INSIGHT_NODES)


def collect_clipboard_writes(node: Node, source: bytes, external_bindings: Set[str]) -> CallEdgeList:
    def _match(current: Node) -> Optional[str]:
        if current.type != "call_expression":
            return None
        callee = current.child_by_field_name("function")
        if callee is not None and _is_clipboard_call(callee, source, external_bindings):
            return _clipboard_label(callee, source)
        return None

    return collect_bounded(node, _match, limit=MAX_INSIGHT_ENTRIES, node_budget=MAX_INSIGHT_NODES)


def render_insight_lines(node: Node, source: bytes, index: ModuleIndex, include_renders: bool) -> List[str]:
    """`// Invokes:`, `// Listens:`, `// Opens:`, `// Clipboard:` and `// Renders:` lines for one scope."""
    bindings = index.external_bindings
    sections = [
        ("Invokes", collect_invokes(node, source, bindings)),
        ("Listens", collect_listens(node, source, bindings)),
        ("Opens", collect_opens(node, source, bindings)),
        ("Clipboard", collect_clipboard_writes(node, source, bindings)),
    ]
    if include_renders:
        sections.append(("Renders", collect_rendered_components(node, source, index.external_components)))
    return [f"// {label}: {found.render()}" for label, found in sections if not found.is_empty()]
