"""
Directory scanning and raw file reads.

These are the file-system collaborators around the skeleton engine: the
engine itself only ever receives text. The scan mirrors what an editor file
tree shows: build output, VCS metadata, dependency folders and binary assets
are left out, as is anything matched by a .gitignore.
"""

import fnmatch
import logging
import os
from pathlib import Path
from typing import List, Optional, Set

from .config import SkeletonConfig
from .errors import FileReadError, ScanError
from .models import FileEntry
from .utils import GitignoreRule, is_gitignored, load_gitignore_rules

IGNORED_FILE_NAMES = frozenset({".ds_store", "thumbs.db", "desktop.ini"})
IGNORED_FILE_SUFFIXES = (
    # images
    ".png", ".jpg", ".jpeg", ".gif", ".webp", ".ico", ".bmp", ".tiff", ".svg", ".psd", ".ai", ".heic", ".avif",
    # fonts
    ".woff", ".woff2", ".ttf", ".eot", ".otf",
    # binaries
    ".exe", ".dll", ".so", ".dylib", ".bin", ".obj", ".o", ".a", ".lib", ".class", ".jar", ".war", ".ear",
    ".pdb", ".wasm", ".node",
    # archives and documents
    ".pdf", ".zip", ".tar", ".gz", ".tgz", ".bz2", ".xz", ".7z", ".rar", ".iso", ".dmg", ".pkg", ".deb", ".rpm",
    # media
    ".mp4", ".mov", ".mkv", ".avi", ".webm", ".wmv", ".mpg", ".mpeg",
    ".mp3", ".wav", ".flac", ".aac", ".m4a", ".ogg",
    # data
    ".csv", ".tsv", ".parquet", ".arrow", ".db", ".sqlite", ".sqlite3", ".duckdb", ".rdb", ".pkl", ".pickle",
    ".doc", ".docx", ".ppt", ".pptx", ".xls", ".xlsx", ".key", ".pages", ".numbers",
    # generated
    ".log", ".map", ".cache", ".min.js", ".min.css", ".bak", ".lock", ".icns",
)
LINE_COUNT_CHUNK = 32 * 1024


def is_ignored_dir(name: str, path: Path, ignored_dir_names: Set[str]) -> bool:
    name_lower = name.lower()
    if name_lower in ignored_dir_names:
        return True
    # generated app icons of Tauri projects
    if name_lower == "icons" and any(part.lower() == "src-tauri" for part in path.parts):
        return True
    return False


def is_ignored_file(name: str) -> bool:
    name_lower = name.lower()
    if name_lower in IGNORED_FILE_NAMES:
        return True
    return name_lower.endswith(IGNORED_FILE_SUFFIXES)


def count_lines(path: Path) -> Optional[int]:
    """Number of newline bytes plus one, or None when the file cannot be read."""
    count = 0
    try:
        with open(path, "rb") as f:
            while True:
                chunk = f.read(LINE_COUNT_CHUNK)
                if not chunk:
                    break
                count += chunk.count(b"\n")
    except OSError as e:
        logging.debug(f"Could not count lines of {path}: {e}")
        return None
    return count + 1


def normalize_relative_path(relative: Path) -> str:
    return str(relative).replace("\\", "/")


class _IgnoreRules:
    """Combined directory-name, suffix, .gitignore and configured-glob filtering."""

    def __init__(self, root: Path, config: SkeletonConfig):
        self.root = root
        self.dir_names = {name.lower() for name in config.ignored_dir_names}
        self.globs = list(config.ignored_patterns)
        self.gitignore: List[GitignoreRule] = load_gitignore_rules(root) if config.respect_gitignore else []

    def _matches_patterns(self, path: Path, is_dir: bool) -> bool:
        if is_gitignored(path, self.gitignore, is_dir):
            return True
        if self.globs:
            relative = normalize_relative_path(path.relative_to(self.root))
            return any(fnmatch.fnmatch(relative, glob) for glob in self.globs)
        return False

    def skip_dir(self, path: Path) -> bool:
        return is_ignored_dir(path.name, path, self.dir_names) or self._matches_patterns(path, True)

    def skip_file(self, path: Path) -> bool:
        if is_ignored_file(path.name) or is_ignored_dir(path.name, path, self.dir_names):
            return True
        return self._matches_patterns(path, False)


def iter_watch_directories(root: Path, config: Optional[SkeletonConfig] = None) -> List[Path]:
    """The root plus every non-ignored directory below it."""
    config = config or SkeletonConfig()
    rules = _IgnoreRules(root, config)
    directories: List[Path] = []
    for dirpath, dirnames, _ in os.walk(root):
        current = Path(dirpath)
        directories.append(current)
        dirnames[:] = sorted(d for d in dirnames if not rules.skip_dir(current / d))
    return directories


def scan_directory(root, config: Optional[SkeletonConfig] = None) -> List[FileEntry]:
    """
    List the files and directories under `root` that a user would want to see.

    Args:
        root: Directory to scan
        config: Ignore rules and the line-count size ceiling; defaults apply when omitted

    Returns:
        FileEntry rows sorted by relative path. Directories are included only
        when they contain at least one kept file.

    Raises:
        ScanError: If `root` does not exist
    """
    root_path = Path(root)
    if not root_path.exists():
        raise ScanError("Path does not exist")
    config = config or SkeletonConfig()
    rules = _IgnoreRules(root_path, config)

    entries: List[FileEntry] = []
    for dirpath, dirnames, filenames in os.walk(root_path):
        current = Path(dirpath)
        dirnames[:] = [d for d in dirnames if not rules.skip_dir(current / d)]

        for name in dirnames:
            path = current / name
            entries.append(_make_entry(root_path, path, is_dir=True, config=config))
        for name in filenames:
            path = current / name
            if rules.skip_file(path):
                continue
            entries.append(_make_entry(root_path, path, is_dir=False, config=config))

    keep_dirs: Set[str] = set()
    for entry in entries:
        if entry.is_dir:
            continue
        parent = Path(entry.path).parent
        while parent != root_path and root_path in parent.parents:
            keep_dirs.add(str(parent))
            parent = parent.parent

    entries = [entry for entry in entries if not entry.is_dir or entry.path in keep_dirs]
    entries.sort(key=lambda entry: entry.relative_path)
    logging.debug(f"Scanned {root_path}: {len(entries)} entries")
    return entries


def _make_entry(root: Path, path: Path, is_dir: bool, config: SkeletonConfig) -> FileEntry:
    try:
        size = path.stat().st_size
    except OSError:
        size = 0
    line_count = None
    if not is_dir and size < config.max_line_count_bytes:
        line_count = count_lines(path)
    return FileEntry(
        path=str(path),
        relative_path=normalize_relative_path(path.relative_to(root)),
        is_dir=is_dir,
        size=size,
        line_count=line_count,
    )


def read_file_content(path) -> str:
    """
    Read a file as UTF-8 text.

    Raises:
        FileReadError: With the operating system's message when the file cannot be read
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(str(path), str(e)) from e
