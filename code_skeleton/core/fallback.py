"""
Line-oriented fallback compressor.

Used for files without a tree-sitter adapter and whenever parsing fails. It
keeps lines that look structural (imports, definitions, attributes, doc
comments) and drops everything else, independent of any grammar.
"""

from typing import List

from .utils import MAX_FALLBACK_LINE_LEN, truncate_line

CONFIG_EXTENSIONS = frozenset({"toml", "ini", "cfg", "conf", "env", "properties"})
MARKDOWN_EXTENSIONS = frozenset({"md", "markdown"})
SKIPPED_EXTENSIONS = frozenset({"lock"})

STRUCTURAL_PREFIXES = (
    # imports and modules
    "import ", "from ", "export ", "require(", "use ", "mod ", "package ", "#include", "using ",
    # definitions
    "class ", "struct ", "enum ", "interface ", "trait ", "type ", "typedef ",
    # functions
    "fn ", "func ", "function ", "def ", "pub fn ", "async fn ", "pub async fn ",
    # variables
    "const ", "let ", "var ", "static ", "final ",
    # visibility
    "pub ", "public ", "private ", "protected ",
    # decorators and attributes
    "@", "#[",
    # doc comments
    "///", "//!", "/**", "* ",
)


def fallback_compress(content: str, extension: str) -> str:
    """
    Compress arbitrary text by keeping only structural-looking lines.

    Runs of blank lines collapse to one, and leading blank lines are dropped.

    Args:
        content: File text
        extension: File extension without the dot, any case

    Returns:
        The kept lines joined by newlines, possibly empty
    """
    ext = extension.lower().lstrip(".")
    if ext in SKIPPED_EXTENSIONS:
        return ""

    is_config = ext in CONFIG_EXTENSIONS
    is_markdown = ext in MARKDOWN_EXTENSIONS

    output: List[str] = []
    prev_empty = False
    has_output = False
    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed:
            if has_output and not prev_empty:
                output.append("")
                prev_empty = True
            continue
        prev_empty = False

        if is_structural_line(trimmed, is_config, is_markdown):
            output.append(truncate_line(line, MAX_FALLBACK_LINE_LEN))
            has_output = True

    return "\n".join(output)


def is_structural_line(trimmed: str, is_config: bool = False, is_markdown: bool = False) -> bool:
    if trimmed.startswith(STRUCTURAL_PREFIXES) or "fn " in trimmed:
        return True
    if trimmed == "end":
        return True
    if trimmed.startswith("#") and not trimmed.startswith("# "):
        return True
    if is_config and is_config_line(trimmed):
        return True
    return is_markdown and is_markdown_structural(trimmed)


def is_config_line(trimmed: str) -> bool:
    if trimmed.startswith(("#", ";")):
        return False
    if trimmed.startswith("[") and trimmed.endswith("]"):
        return True
    return "=" in trimmed


def is_markdown_structural(trimmed: str) -> bool:
    return trimmed.startswith(("#", "```", "- ", "* "))
