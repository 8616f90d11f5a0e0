"""
Skeleton orchestrator.

`skeletonize` picks the language for an extension, runs its tree-sitter
adapter (or the fallback compressor), caps the output and measures it.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from .capper import cap_output
from .fallback import fallback_compress
from .models import Language, SkeletonOptions, SkeletonResult
from .treesitter import EXTRACTORS
from .treesitter.json_adapter import LARGE_JSON_BYTES, summarize_large_json
from .treesitter.parser import parse_bytes

IMPORT_SUMMARY_ENV = "CODE_SKELETON_IMPORT_SUMMARY_ONLY"
_TRUTHY = frozenset({"1", "true", "yes", "on"})


def options_from_env(environ: Optional[dict] = None) -> SkeletonOptions:
    """Read the process-wide toggles once and freeze them into options."""
    env = os.environ if environ is None else environ
    value = env.get(IMPORT_SUMMARY_ENV, "")
    return SkeletonOptions(import_summary_only=value.strip().lower() in _TRUTHY)


def skeletonize(
    content: str,
    extension: str,
    path: Optional[str] = None,
    options: Optional[SkeletonOptions] = None,
) -> SkeletonResult:
    """
    Produce the skeleton of one file.

    Args:
        content: File text
        extension: File extension, with or without the leading dot
        path: Optional path hint, used for entrypoint detection in JS/TS
        options: Resolved toggles; read from the environment when omitted

    Returns:
        SkeletonResult whose `language` is None when the fallback compressor ran
    """
    if options is None:
        options = options_from_env()

    original_lines = len(content.splitlines())
    language = Language.from_extension(extension)

    skeleton: Optional[str] = None
    if language is not None:
        skeleton = _extract(content, language, path, options)
        if skeleton is None:
            language = None

    if skeleton is None:
        skeleton = fallback_compress(content, extension.lstrip(".") if extension else "")

    capped = cap_output(skeleton, language)
    return SkeletonResult(
        skeleton=capped,
        language=language,
        original_lines=original_lines,
        skeleton_lines=len(capped.splitlines()),
    )


def _extract(content: str, language: Language, path: Optional[str], options: SkeletonOptions) -> Optional[str]:
    extractor = EXTRACTORS.get(language)
    if extractor is None:
        return None
    try:
        source = content.encode("utf-8", errors="replace")
        if language is Language.JSON and len(source) > LARGE_JSON_BYTES:
            return summarize_large_json(content)
        tree = parse_bytes(source, language.value)
        return extractor(tree, source, options=options, path=path, language=language)
    except Exception as e:
        logging.debug(f"Falling back to line heuristics for {path or language.value}: {e}")
        return None
