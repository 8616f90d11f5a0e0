"""
Unified interface for skeleton extraction across languages.

This module re-exports the orchestrator, the result and option models and
the file-system collaborators so callers can import everything from one
place.
"""

from .config import SkeletonConfig, load_config
from .errors import FileReadError, ScanError, SkeletonError, UnsupportedLanguageError
from .models import CallEdgeList, FileEntry, Language, SkeletonOptions, SkeletonResult
from .scanner import read_file_content, scan_directory
from .skeletonizer import options_from_env, skeletonize
from .watcher import ProjectWatcher

__all__ = [
    # Orchestrator
    'skeletonize',
    'options_from_env',

    # Models
    'Language',
    'SkeletonOptions',
    'SkeletonResult',
    'CallEdgeList',
    'FileEntry',

    # Collaborators
    'scan_directory',
    'read_file_content',
    'ProjectWatcher',

    # Configuration
    'SkeletonConfig',
    'load_config',

    # Errors
    'SkeletonError',
    'UnsupportedLanguageError',
    'ScanError',
    'FileReadError',
]
