"""
Exception types raised by code_skeleton.
"""


class SkeletonError(Exception):
    """Base class for all code_skeleton errors."""


class UnsupportedLanguageError(SkeletonError, ValueError):
    """Raised when no tree-sitter grammar is registered for a language id."""


class ScanError(SkeletonError):
    """Raised when a directory scan cannot start."""


class FileReadError(SkeletonError):
    """Raised when a file cannot be read as text."""

    def __init__(self, path: str, reason: str):
        super().__init__(reason)
        self.path = path
        self.reason = reason
