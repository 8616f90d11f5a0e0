"""
File-level skeleton extraction with performance metrics.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..config import SkeletonConfig
from ..errors import FileReadError
from ..models import Language, SkeletonOptions, SkeletonResult
from ..scanner import read_file_content, scan_directory
from ..skeletonizer import skeletonize


def _empty_metrics() -> Dict[str, float]:
    return {
        'total_files': 0,
        'failed_reads': 0,
        'fallback_files': 0,
        'original_lines': 0,
        'skeleton_lines': 0,
        'processing_time': 0.0,
        'io_time': 0.0,
    }


@dataclass
class SkeletonExtractor:
    options: SkeletonOptions = field(default_factory=SkeletonOptions)
    config: SkeletonConfig = field(default_factory=SkeletonConfig)
    enable_performance_monitoring: bool = True
    performance_metrics: dict = field(default_factory=_empty_metrics)

    def extract_from_file(self, file_path: Path) -> SkeletonResult:
        """
        Read one file and skeletonize it.

        Raises:
            FileReadError: If the file cannot be read as text
        """
        start_time = time.time()
        io_time = 0.0
        try:
            io_start = time.time()
            content = read_file_content(file_path)
            io_time = time.time() - io_start
        except FileReadError:
            if self.enable_performance_monitoring:
                self.performance_metrics['failed_reads'] += 1
            raise

        result = skeletonize(content, Path(file_path).suffix, path=str(file_path), options=self.options)

        if self.enable_performance_monitoring:
            metrics = self.performance_metrics
            metrics['total_files'] += 1
            metrics['original_lines'] += result.original_lines
            metrics['skeleton_lines'] += result.skeleton_lines
            metrics['processing_time'] += time.time() - start_time
            metrics['io_time'] += io_time
            if result.language is None:
                metrics['fallback_files'] += 1
        return result

    def extract_from_directory(
        self,
        directory: Path,
        progress: Optional[Callable[[Iterable], Iterable]] = None,
    ) -> List[Tuple[str, SkeletonResult]]:
        """
        Skeletonize every supported file under a directory.

        Args:
            directory: Directory to analyze
            progress: Optional iterator wrapper, e.g. `tqdm`

        Returns:
            (relative_path, result) pairs in scan order; unreadable files are skipped
        """
        entries = [
            entry for entry in scan_directory(directory, self.config)
            if not entry.is_dir and Language.from_extension(Path(entry.path).suffix) is not None
        ]
        logging.info(f"Found {len(entries)} supported files to skeletonize (after filtering).")

        start_time = time.time()
        results: List[Tuple[str, SkeletonResult]] = []
        iterable = progress(entries) if progress else entries
        for entry in iterable:
            try:
                results.append((entry.relative_path, self.extract_from_file(Path(entry.path))))
            except FileReadError as e:
                logging.warning(f"Skipping {entry.relative_path}: {e.reason}")
        total_time = time.time() - start_time

        if self.enable_performance_monitoring:
            self._log_performance_summary(total_time)
        return results

    def _log_performance_summary(self, total_time: float):
        metrics = self.performance_metrics
        logging.info("Skeleton Extraction Summary:")
        logging.info(f"  Files processed: {metrics['total_files']}")
        logging.info(f"  Fallback files: {metrics['fallback_files']}")
        logging.info(f"  Unreadable files: {metrics['failed_reads']}")
        logging.info(f"  Lines: {metrics['original_lines']} -> {metrics['skeleton_lines']}")
        logging.info(f"  Total time: {total_time:.3f}s")
        logging.info(f"  I/O time: {metrics['io_time']:.3f}s")
        if metrics['total_files'] > 0:
            logging.info(f"  Avg time per file: {total_time / metrics['total_files']:.3f}s")

    def get_performance_metrics(self) -> Dict[str, float]:
        """Get current performance metrics."""
        return self.performance_metrics.copy()

    def reset_performance_metrics(self):
        """Reset performance metrics for new analysis."""
        self.performance_metrics = _empty_metrics()
