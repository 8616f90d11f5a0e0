"""
Output capping applied to every skeleton after extraction.
"""

from typing import Optional

from .models import Language

MAX_SKELETON_LINES = 200
MAX_SKELETON_CHARS = 8000


def truncation_comment(language: Optional[Language]) -> str:
    if language is Language.PYTHON:
        return "# ..."
    if language is Language.HTML:
        return "<!-- ... -->"
    if language is Language.CSS:
        return "/* ... */"
    return "// ..."


def cap_output(skeleton: str, language: Optional[Language] = None) -> str:
    """
    Enforce the line and character ceilings on a skeleton.

    When anything is cut, a language-appropriate marker line is appended. The
    marker is counted inside both ceilings, so capping an already capped
    skeleton returns it unchanged.
    """
    if not skeleton:
        return ""

    marker = truncation_comment(language)
    lines = skeleton.splitlines()
    truncated = False

    if len(lines) > MAX_SKELETON_LINES:
        lines = lines[:MAX_SKELETON_LINES - 1]
        truncated = True

    result = "\n".join(lines)
    char_budget = MAX_SKELETON_CHARS - (len(marker) + 1) if truncated else MAX_SKELETON_CHARS
    if len(result) > char_budget:
        result = _truncate_to_char_limit(result, MAX_SKELETON_CHARS - (len(marker) + 1))
        truncated = True

    if truncated:
        result = f"{result}\n{marker}" if result else marker
    return result


def _truncate_to_char_limit(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    cut = text[:max_chars]
    newline = cut.rfind("\n")
    if newline != -1:
        cut = cut[:newline]
    return cut
