"""
Command line entry point for skeleton extraction.
"""

from tqdm import tqdm
import sys
import json
import logging
import argparse
import threading
from pathlib import Path
from typing import Any, Dict, List, Tuple

from code_skeleton.core.config import SkeletonConfig, load_config
from code_skeleton.core.errors import FileReadError, ScanError
from code_skeleton.core.models import SkeletonOptions, SkeletonResult
from code_skeleton.core.scanner import scan_directory
from code_skeleton.core.skeletonizer import options_from_env
from code_skeleton.core.treesitter.extractor_base import SkeletonExtractor
from code_skeleton.core.watcher import ProjectWatcher


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to configuration YAML file (default: codeskeleton.config.yaml)")
    parser.add_argument("--import-summary", dest="import_summary_only", action="store_true", default=None,
                        help="Render JS/TS imports as a per-module summary block")
    parser.add_argument("--format", dest="output_format", choices=["text", "json"],
                        help="Output format (overrides config)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")


def _resolve_config(args: argparse.Namespace) -> SkeletonConfig:
    cli_overrides: Dict[str, Any] = {
        'import_summary_only': getattr(args, "import_summary_only", None),
        'output_format': getattr(args, "output_format", None),
    }
    if getattr(args, "verbose", False):
        cli_overrides['log_level'] = "DEBUG"
    config = load_config(config_path=getattr(args, "config", None), cli_args=cli_overrides)
    logging.getLogger().setLevel(config.log_level.upper())
    return config


def _resolve_options(config: SkeletonConfig) -> SkeletonOptions:
    env_options = options_from_env()
    return SkeletonOptions(import_summary_only=config.import_summary_only or env_options.import_summary_only)


def _format_result(path: str, result: SkeletonResult, output_format: str) -> str:
    if output_format == "json":
        record = result.to_dict()
        record["path"] = path
        return json.dumps(record, indent=2, ensure_ascii=False)
    language = result.language.value if result.language else "fallback"
    header = (f"// {path} [{language}] {result.original_lines} -> {result.skeleton_lines} lines "
              f"({result.compression_ratio:.0%} smaller)")
    return f"{header}\n{result.skeleton}"


def _summarize(results: List[Tuple[str, SkeletonResult]]) -> Dict[str, Any]:
    original = sum(r.original_lines for _, r in results)
    skeleton = sum(r.skeleton_lines for _, r in results)
    by_language: Dict[str, int] = {}
    for _, result in results:
        key = result.language.value if result.language else "fallback"
        by_language[key] = by_language.get(key, 0) + 1
    return {
        "files": len(results),
        "original_lines": original,
        "skeleton_lines": skeleton,
        "compression_ratio": round(max(0.0, (original - skeleton) / original), 4) if original else 0.0,
        "languages": dict(sorted(by_language.items())),
    }


def _run_file(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    extractor = SkeletonExtractor(options=_resolve_options(config), config=config,
                                  enable_performance_monitoring=False)
    for raw_path in args.paths:
        path = Path(raw_path)
        try:
            result = extractor.extract_from_file(path)
        except FileReadError as e:
            print(f"❌ Error: cannot read {e.path}: {e.reason}", file=sys.stderr)
            return 1
        print(_format_result(str(path), result, config.output_format))
    return 0


def _run_scan(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    root_dir = Path(args.directory).resolve()
    if not root_dir.is_dir():
        print(f"❌ Error: {root_dir} is not a valid directory.", file=sys.stderr)
        return 1

    extractor = SkeletonExtractor(options=_resolve_options(config), config=config)
    results = extractor.extract_from_directory(
        root_dir,
        progress=lambda entries: tqdm(entries, desc="Skeletonizing", disable=args.quiet),
    )

    if args.output:
        report = {
            "root": str(root_dir),
            "summary": _summarize(results),
            "files": [dict(result.to_dict(), path=path) for path, result in results],
        }
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, ensure_ascii=False)
        print(f"📄 Skeleton report exported to {args.output}")
    elif not args.quiet:
        for path, result in results:
            print(_format_result(path, result, config.output_format))
            print()

    summary = _summarize(results)
    print(f"✅ {summary['files']} files: {summary['original_lines']} -> {summary['skeleton_lines']} lines "
          f"({summary['compression_ratio']:.0%} smaller)", file=sys.stderr)
    return 0


def _run_watch(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    root_dir = Path(args.directory).resolve()
    changed = threading.Event()

    def _report() -> None:
        entries = scan_directory(root_dir, config)
        files = sum(1 for entry in entries if not entry.is_dir)
        print(f"🔄 {root_dir}: {files} files", flush=True)

    try:
        _report()
        with ProjectWatcher(root_dir, changed.set, debounce_seconds=config.watch_debounce_seconds, config=config):
            while True:
                if changed.wait(timeout=1.0):
                    changed.clear()
                    _report()
    except ScanError as e:
        print(f"❌ Error: {root_dir}: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logging.info("Watch stopped by user")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="code-skeleton",
        description="Compress source files into declaration skeletons.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    file_cmd = subparsers.add_parser("file", help="Print the skeleton of one or more files")
    file_cmd.add_argument("paths", nargs="+", help="Files to skeletonize")
    _add_common_flags(file_cmd)
    file_cmd.set_defaults(func=_run_file)

    scan = subparsers.add_parser("scan", help="Skeletonize every supported file under a directory")
    scan.add_argument("directory", nargs="?", default=".", help="Directory to scan (default: current directory)")
    scan.add_argument("--output", help="Write a JSON report instead of printing skeletons")
    scan.add_argument("-q", "--quiet", action="store_true", help="Only print the summary line")
    _add_common_flags(scan)
    scan.set_defaults(func=_run_scan)

    watch = subparsers.add_parser("watch", help="Re-scan a directory whenever it changes")
    watch.add_argument("directory", nargs="?", default=".", help="Directory to watch (default: current directory)")
    _add_common_flags(watch)
    watch.set_defaults(func=_run_watch)

    return parser


def main():
    """Main entry point for the skeleton CLI."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    parser = build_parser()
    args = parser.parse_args()

    try:
        exit_code = args.func(args)
        sys.exit(exit_code)
    except Exception as e:
        print(f"\n❌ An unexpected error occurred: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc(file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
