"""
Shared utility functions for skeleton extraction.

This module contains pure helpers used by every language adapter for common
operations like line truncation, docstring trimming, comment classification,
path detection and read/write intent inference, plus the .gitignore matching
used by the directory scanner.
"""

import fnmatch
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from tree_sitter import Node

from .models import CommentType, ReadWriteIntent

# --- Threshold Constants ---

MAX_SIMPLE_CONST_LEN = 200
MAX_SIMPLE_ASSIGNMENT_LEN = 150
MAX_CLASS_ATTR_LEN = 100
MAX_DOC_LINE_LEN = 120
MAX_DEF_LINE_LEN = 180
MAX_MEMBER_NAMES = 8
MAX_FALLBACK_LINE_LEN = 200
MAX_CALL_EDGE_NAMES = 6
MAX_CALL_EDGE_NAME_LEN = 40
MAX_CALL_EDGE_NODES = 3000

# Bodies with at most this many non-blank lines are kept verbatim.
SMALL_BODY_THRESHOLD = 6


# --- Tree-sitter Node Helpers ---

def node_text(source: bytes, node: Optional[Node]) -> str:
    """
    Return the source text covered by a node, without trailing newlines.

    Args:
        source: The UTF-8 encoded file contents the tree was parsed from
        node: Tree-sitter node, may be None

    Returns:
        Decoded text, empty string for a missing node
    """
    if node is None:
        return ""
    text = source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
    return text.rstrip("\r\n")


# --- Text Helpers ---

def truncate_line(line: str, max_len: int) -> str:
    """Cut a line to `max_len` characters, appending '...' when anything was dropped."""
    if len(line) <= max_len:
        return line
    return line[:max_len] + "..."


def compact_text_prefix(text: str, max_chars: int) -> Tuple[str, bool]:
    trimmed = text.strip()
    if len(trimmed) <= max_chars:
        return trimmed, False
    return trimmed[:max_chars], True


def strip_prefix_repeated(text: str, prefix: str) -> str:
    if not prefix:
        return text
    while text.startswith(prefix):
        text = text[len(prefix):]
    return text


def count_non_empty_lines(text: str) -> int:
    return sum(1 for line in text.splitlines() if line.strip())


def should_keep_full_body(body_text: str) -> bool:
    return count_non_empty_lines(body_text) <= SMALL_BODY_THRESHOLD


def format_list(items: List[str], limit: int) -> str:
    if not items:
        return "(none)"
    result = ", ".join(items[:limit])
    if len(items) > limit:
        result += ", ..."
    return result


def summarize_assignment(text: str, max_len: int = MAX_SIMPLE_CONST_LEN) -> str:
    """
    Keep short assignments verbatim and rewrite long ones as `header = ...`.

    Args:
        text: Full text of the assignment or declaration
        max_len: Longest text kept verbatim

    Returns:
        A single summarized line
    """
    compact, truncated = compact_text_prefix(text, max_len + 1)
    trimmed = compact.rstrip()
    if not truncated and len(trimmed) <= max_len:
        return truncate_line(trimmed, MAX_DEF_LINE_LEN)
    eq_pos = trimmed.find("=")
    if eq_pos != -1:
        header = trimmed[:eq_pos].rstrip()
        return truncate_line(f"{header} = ...", MAX_DEF_LINE_LEN)
    if truncated:
        return truncate_line(f"{trimmed}...", MAX_DEF_LINE_LEN)
    return truncate_line(trimmed, MAX_DEF_LINE_LEN)


def header_before(text: str, delimiter: str = "{") -> Optional[str]:
    """Return the trimmed text before the first `delimiter`, or None when absent."""
    pos = text.find(delimiter)
    if pos == -1:
        return None
    return text[:pos].strip()


# --- Docstrings and Doc Comments ---

def trim_docstring(text: str) -> Optional[str]:
    """
    Reduce a Python docstring to its first non-blank line, keeping the original quotes.

    Returns None when the text is not a quoted string.
    """
    trimmed = text.strip()
    quote = None
    for candidate in ('"""', "'''"):
        if len(trimmed) >= 6 and trimmed.startswith(candidate) and trimmed.endswith(candidate):
            quote = candidate
            break
    if quote is None:
        for candidate in ('"', "'"):
            if len(trimmed) > 2 and trimmed.startswith(candidate) and trimmed.endswith(candidate):
                quote = candidate
                break
    if quote is None:
        return None

    inner = trimmed[len(quote):len(trimmed) - len(quote)]
    for line in inner.splitlines():
        cleaned = line.strip()
        if cleaned:
            return f"{quote}{truncate_line(cleaned, MAX_DOC_LINE_LEN)}{quote}"
    return None


def trim_doc_comment(text: str) -> Optional[str]:
    """Keep `///` and `//!` lines as-is and reduce `/** ... */` blocks to their first line."""
    trimmed = text.strip()
    if trimmed.startswith(("///", "//!")):
        return truncate_line(trimmed, MAX_DOC_LINE_LEN)
    if trimmed.startswith(("/**", "/*!")):
        inner = trimmed[3:]
        if inner.endswith("*/"):
            inner = inner[:-2]
        for line in inner.splitlines():
            cleaned = line.strip().lstrip("*").strip()
            if cleaned:
                return f"/** {truncate_line(cleaned, MAX_DOC_LINE_LEN)} */"
    return None


# --- Comment Classification ---

_TODO_MARKERS = ("TODO", "FIXME", "NOTE", "HACK", "XXX", "BUG", "WARNING")
_DIVIDERS = ("---", "===", "***")
_CODE_STARTS = (
    "import ", "from ", "require(", "use ",
    "if ", "for ", "while ", "return ",
    "def ", "class ", "fn ", "func ", "function ",
)


def classify_comment(text: str, comment_prefix: str) -> CommentType:
    """
    Classify a comment by its content.

    Args:
        text: The raw comment text including its prefix
        comment_prefix: The language's line comment prefix ('#', '//', ...)

    Returns:
        The comment's CommentType
    """
    trimmed = text.strip()

    if trimmed.startswith("##") and len(trimmed) > 2 and trimmed[2] in "# ":
        return CommentType.STRUCTURAL

    content = strip_prefix_repeated(trimmed, comment_prefix).lstrip("#/*").strip()

    if content.startswith(_DIVIDERS) or content.endswith(_DIVIDERS):
        return CommentType.STRUCTURAL

    if content.upper().startswith(_TODO_MARKERS):
        return CommentType.TODO

    if looks_like_disabled_code(content):
        return CommentType.DISABLED_CODE

    if len(content) < 15 and not content.endswith(":"):
        return CommentType.TRIVIAL

    return CommentType.EXPLANATORY


def looks_like_disabled_code(content: str) -> bool:
    c = content.strip()
    if not c:
        return False

    # call without spaces: func() or obj.method(x)
    if "(" in c and ")" in c and " " not in c:
        return True

    eq_pos = c.find("=")
    if 0 < eq_pos < len(c) - 1:
        before = c[eq_pos - 1]
        after = c[eq_pos + 1]
        if before not in "=!<>" and after != "=":
            left = c[:eq_pos].strip()
            if all(ch.isalnum() or ch in "_." for ch in left):
                return True

    return c.startswith(_CODE_STARTS)


def should_keep_comment(comment_type: CommentType) -> bool:
    return comment_type in (CommentType.STRUCTURAL, CommentType.EXPLANATORY, CommentType.TODO)


# --- Path Detection ---

KNOWN_FILE_EXTENSIONS = (
    ".json", ".npy", ".pt", ".pth", ".ckpt", ".csv", ".parquet",
    ".txt", ".pkl", ".npz", ".tsv", ".jsonl", ".yaml", ".yml",
    ".toml", ".xml", ".html", ".md", ".py", ".js", ".ts", ".rs",
)
_REGEX_ESCAPES = ("\\s", "\\d", "\\w", "\\b", "\\n", "\\t", "\\r")


def looks_like_path(value: str) -> bool:
    """
    Decide whether a string literal looks like a file path.

    Regex patterns, format templates and glob-like strings are rejected.
    """
    if len(value) < 4:
        return False
    if value.startswith(("^", "$")):
        return False
    if any(escape in value for escape in _REGEX_ESCAPES):
        return False
    if "{" in value and "}" in value:
        return False
    if any(ch in value for ch in "*+?|[]"):
        return False
    if "(" in value and ")" in value and "/" not in value:
        return False

    if "/" in value:
        if value.startswith((".", "/", "~")):
            return True
        return value.endswith(KNOWN_FILE_EXTENSIONS)

    return value.endswith(KNOWN_FILE_EXTENSIONS)


_WRITE_MARKERS = (
    "save", "dump", "write", "to_csv", "to_json", "to_parquet",
    "torch.save", "np.save", "pickle.dump",
)


def classify_read_write(text: str) -> ReadWriteIntent:
    """Infer whether the code around a path literal reads or writes it."""
    lower = text.lower()
    if any(marker in lower for marker in _WRITE_MARKERS):
        return ReadWriteIntent.WRITE
    if ("open(" in lower and '"w' in lower) or 'mode="w' in lower or "mode='w" in lower:
        return ReadWriteIntent.WRITE
    return ReadWriteIntent.READ


# --- Summary Phrases ---

SUMMARY_PATTERNS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("torch.load", "load_state_dict", ".load("), "loads checkpoint"),
    (("torch.save", "np.save", "save_pretrained", ".to_json", ".to_csv", "pickle.dump"), "writes artifacts"),
    (("pd.read", "np.load", "json.load", "open("), "reads data files"),
    (("tokenizer.", ".tokenize", ".encode(", ".decode("), "tokenizes text"),
    (("augment", "shuffle(", ".sample("), "applies augmentation"),
    ((".train(", ".fit(", "optimizer.", ".backward(", "loss."), "runs training"),
    ((".eval(", "accuracy", "top_k", "topk", "metric", "precision", "recall"), "evaluates metrics"),
    (("plt.", ".plot(", "seaborn", "sns."), "plots figures"),
    ((".cuda(", ".to(device", '.to("cuda', ".to('cuda"), "moves to device"),
    (("dataloader", ".batch(", "collate_fn"), "builds dataloaders"),
    ((".logits", "softmax(", ".argmax("), "computes logits"),
    (("!pip", "pip install", "requirements.txt"), "installs dependencies"),
    (("!git clone", "!wget", "!curl", "gdown"), "downloads resources"),
    (("pad_sequence", ".pad(", "max_length=", "attention_mask"), "prepares inputs/masks"),
    (("gsutil", "kaggle"), "downloads external data"),
)


def collect_summary_phrases(text: str) -> List[str]:
    """Map well-known library idioms in a body to short intent phrases."""
    lower = text.lower()
    phrases: List[str] = []
    for keywords, phrase in SUMMARY_PATTERNS:
        if phrase not in phrases and any(keyword in lower for keyword in keywords):
            phrases.append(phrase)
    intent = extract_print_intent(text)
    if intent and intent not in phrases:
        phrases.append(intent)
    return phrases


def extract_print_intent(text: str) -> Optional[str]:
    lower = text.lower()
    if "print(" not in lower:
        return None
    if "build" in lower or "creat" in lower or "generat" in lower:
        return "building/generating"
    if "load" in lower or "read" in lower:
        return "loading"
    if "sav" in lower or "writ" in lower:
        return "saving"
    if "train" in lower or "epoch" in lower:
        return "training progress"
    if "process" in lower:
        return "processing"
    if "done" in lower or "finish" in lower or "complete" in lower:
        return "completion"
    return None


# --- Gitignore Matching ---

@dataclass(frozen=True)
class GitignoreRule:
    """One .gitignore line, anchored at the directory holding its file."""
    pattern: str
    base_dir: Path
    negated: bool = False
    anchored: bool = False
    dir_only: bool = False

    def matches(self, path: Path, is_dir: bool) -> bool:
        if self.dir_only and not is_dir:
            return False
        try:
            relative = _to_posix(path.relative_to(self.base_dir))
        except ValueError:
            return False
        if self.anchored or "/" in self.pattern:
            return fnmatch.fnmatch(relative, self.pattern)
        return fnmatch.fnmatch(relative.rsplit("/", 1)[-1], self.pattern)


def parse_gitignore_line(line: str, base_dir: Path) -> Optional[GitignoreRule]:
    """
    Turn a .gitignore line into a rule, or None for blanks and comments.

    Leading `!` negates, a leading `/` anchors the pattern at `base_dir` and a
    trailing `/` restricts it to directories. `\\#` and `\\!` escape the first
    character.
    """
    text = line.rstrip("\r\n").rstrip()
    if not text or text.startswith("#"):
        return None
    negated = text.startswith("!")
    if negated:
        text = text[1:]
    elif text.startswith(("\\#", "\\!")):
        text = text[1:]
    dir_only = text.endswith("/")
    text = text.rstrip("/")
    anchored = text.startswith("/")
    text = text.lstrip("/")
    if not text:
        return None
    return GitignoreRule(pattern=text, base_dir=base_dir, negated=negated, anchored=anchored, dir_only=dir_only)


def load_gitignore_rules(directory: Path) -> List[GitignoreRule]:
    """
    Read the .gitignore files of `directory` and its parents.

    Rules come back outermost file first, so rules from files closer to
    `directory` are evaluated later and win.
    """
    chain = [directory, *directory.parents]
    rules: List[GitignoreRule] = []
    for current_dir in reversed(chain):
        gitignore_path = current_dir / ".gitignore"
        if not gitignore_path.is_file():
            continue
        with open(gitignore_path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                rule = parse_gitignore_line(line, current_dir)
                if rule is not None:
                    rules.append(rule)
    return rules


def is_gitignored(path: Path, rules: List[GitignoreRule], is_dir: bool = False) -> bool:
    """Apply rules in order; the last matching rule decides, negations re-include."""
    ignored = False
    for rule in rules:
        if rule.matches(path, is_dir):
            ignored = not rule.negated
    return ignored


def _to_posix(path: Path) -> str:
    normalized = str(path).replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized
