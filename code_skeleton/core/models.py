"""
Core data models for skeleton extraction.

This module contains the plain data structures shared by the orchestrator,
the per-language adapters and the file-system collaborators.
"""

from enum import Enum
from typing import List, Dict, Any, Optional, Set
from dataclasses import dataclass, field


class Language(Enum):
    """Languages with a dedicated tree-sitter adapter."""
    PYTHON = "python"
    TYPESCRIPT = "typescript"
    TSX = "tsx"
    JAVASCRIPT = "javascript"
    JSX = "jsx"
    RUST = "rust"
    GO = "go"
    C = "c"
    JSON = "json"
    CSS = "css"
    HTML = "html"

    @classmethod
    def from_extension(cls, extension: str) -> Optional["Language"]:
        """Resolve a file extension (with or without the leading dot) to a language."""
        if not extension:
            return None
        return EXTENSION_LANGUAGES.get(extension.lower().lstrip("."))

    @property
    def comment_prefix(self) -> str:
        if self is Language.PYTHON:
            return "#"
        if self is Language.HTML:
            return "<!--"
        if self is Language.CSS:
            return "/*"
        return "//"

    @property
    def is_js_family(self) -> bool:
        return self in (Language.TYPESCRIPT, Language.TSX, Language.JAVASCRIPT, Language.JSX)


EXTENSION_LANGUAGES: Dict[str, Language] = {
    "py": Language.PYTHON,
    "pyw": Language.PYTHON,
    "pyi": Language.PYTHON,
    "ts": Language.TYPESCRIPT,
    "mts": Language.TYPESCRIPT,
    "cts": Language.TYPESCRIPT,
    "tsx": Language.TSX,
    "js": Language.JAVASCRIPT,
    "mjs": Language.JAVASCRIPT,
    "cjs": Language.JAVASCRIPT,
    "jsx": Language.JSX,
    "rs": Language.RUST,
    "go": Language.GO,
    "c": Language.C,
    "h": Language.C,
    "json": Language.JSON,
    "jsonc": Language.JSON,
    "css": Language.CSS,
    "scss": Language.CSS,
    "less": Language.CSS,
    "html": Language.HTML,
    "htm": Language.HTML,
}


class CommentType(Enum):
    """Classification of a source comment."""
    STRUCTURAL = "structural"  # section dividers, markdown-style headings
    EXPLANATORY = "explanatory"
    TODO = "todo"
    TRIVIAL = "trivial"
    DISABLED_CODE = "disabled_code"


class ReadWriteIntent(Enum):
    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class SkeletonOptions:
    """Per-invocation switches resolved once by the orchestrator."""
    import_summary_only: bool = False


@dataclass
class SkeletonResult:
    """Result record returned by `skeletonize`."""
    skeleton: str
    language: Optional[Language]
    original_lines: int
    skeleton_lines: int

    @property
    def compression_ratio(self) -> float:
        if self.original_lines == 0:
            return 0.0
        ratio = (self.original_lines - self.skeleton_lines) / self.original_lines
        return max(0.0, ratio)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skeleton": self.skeleton,
            "language": self.language.value if self.language else None,
            "original_lines": self.original_lines,
            "skeleton_lines": self.skeleton_lines,
            "compression_ratio": round(self.compression_ratio, 4),
        }


@dataclass
class CallEdgeList:
    """Ordered, de-duplicated names collected from one scope."""
    entries: List[str] = field(default_factory=list)
    truncated: bool = False
    visited: int = 0

    def is_empty(self) -> bool:
        return not self.entries

    def render(self) -> str:
        joined = ", ".join(self.entries)
        if self.truncated:
            joined += ", ..."
        return joined


@dataclass
class StateContract:
    """Path-like literals a function body reads or writes."""
    reads: List[str] = field(default_factory=list)
    writes: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.reads and not self.writes

    def add(self, value: str, intent: ReadWriteIntent) -> None:
        target = self.writes if intent is ReadWriteIntent.WRITE else self.reads
        if value not in target:
            target.append(value)


@dataclass
class ModuleIndex:
    """Per-file export/import facts for JavaScript and TypeScript modules."""
    has_exports: bool = False
    exported_names: Set[str] = field(default_factory=set)
    external_modules: List[str] = field(default_factory=list)  # sorted, non-relative specifiers
    external_bindings: Set[str] = field(default_factory=set)
    external_components: Set[str] = field(default_factory=set)  # capitalized imported names


@dataclass
class HookBinding:
    """A state hook binding such as `const [count, setCount] = useState(0)`."""
    hook: str
    name: str
    initializer: str


@dataclass
class EffectRegistration:
    hook: str
    dependencies: Optional[str]
    calls: CallEdgeList = field(default_factory=CallEdgeList)


@dataclass
class HandlerBinding:
    """A local function reachable from an `on*` JSX attribute or doing boundary work."""
    name: str
    params: str
    is_async: bool = False
    boundary_calls: List[str] = field(default_factory=list)
    timers: List[str] = field(default_factory=list)


@dataclass
class FileEntry:
    """One row of a directory scan."""
    path: str
    relative_path: str
    is_dir: bool
    size: int
    line_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "relative_path": self.relative_path,
            "is_dir": self.is_dir,
            "size": self.size,
            "line_count": self.line_count,
        }
