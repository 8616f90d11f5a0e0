import yaml
import logging
from typing import List, Optional, Dict, Any
from pathlib import Path
from pydantic import BaseModel, Field

# Default configuration values
DEFAULT_CONFIG_PATH = "codeskeleton.config.yaml"
DEFAULT_IGNORED_DIR_NAMES = [
    "node_modules", "target", "dist", "build", "out",
    ".git", ".hg", ".svn", ".vscode", ".idea", ".cache", ".parcel-cache",
    ".turbo", ".next", ".nuxt", ".svelte-kit", ".astro", ".vite", ".vercel",
    ".netlify", ".expo", ".gradle", ".cxx",
    ".pytest_cache", ".mypy_cache", ".ruff_cache", ".tox", ".nyc_output",
    "__pycache__", "__pypackages__", "coverage", "tmp", "temp", "logs", "log",
    "vendor", "venv", ".venv", "bower_components", "jspm_packages",
    ".pnpm-store", ".yarn", "pods", "deriveddata",
]
DEFAULT_MAX_LINE_COUNT_BYTES = 10 * 1024 * 1024
DEFAULT_WATCH_DEBOUNCE_SECONDS = 0.5
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_OUTPUT_FORMAT = "text"


class SkeletonConfig(BaseModel):
    """
    Central configuration model for code-skeleton.
    """
    import_summary_only: bool = False
    ignored_dir_names: List[str] = Field(default_factory=lambda: list(DEFAULT_IGNORED_DIR_NAMES))
    # Extra glob patterns on top of .gitignore, matched against relative paths
    ignored_patterns: List[str] = Field(default_factory=list)
    respect_gitignore: bool = True
    max_line_count_bytes: int = Field(default=DEFAULT_MAX_LINE_COUNT_BYTES)
    watch_debounce_seconds: float = Field(default=DEFAULT_WATCH_DEBOUNCE_SECONDS)
    log_level: str = Field(default=DEFAULT_LOG_LEVEL)
    output_format: str = Field(default=DEFAULT_OUTPUT_FORMAT)

    # Allow extra fields for flexibility
    class Config:
        extra = "allow"


def load_config(
    config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None
) -> SkeletonConfig:
    """
    Load configuration from file and overrides.

    Priority:
    1. CLI Arguments (if provided and not None)
    2. Config File (if provided or found at default path)
    3. Default Values

    Args:
        config_path: Path to the YAML config file. If None, tries 'codeskeleton.config.yaml'.
        cli_args: Dictionary of CLI arguments to override config values.

    Returns:
        SkeletonConfig: The resolved configuration object.
    """
    config_data: Dict[str, Any] = {}

    target_path = config_path if config_path else DEFAULT_CONFIG_PATH
    path_obj = Path(target_path)

    if path_obj.exists() and path_obj.is_file():
        try:
            with open(path_obj, 'r', encoding='utf-8') as f:
                file_data = yaml.safe_load(f)
                if file_data:
                    config_data.update(file_data)
            logging.info(f"Loaded configuration from {target_path}")
        except (OSError, yaml.YAMLError) as e:
            logging.warning(f"Failed to load config file {target_path}: {e}")
    elif config_path:
        logging.warning(f"Config file not found at explicit path: {config_path}")
    else:
        logging.debug(f"No config file found at {DEFAULT_CONFIG_PATH}, using defaults.")

    if cli_args:
        for key, value in cli_args.items():
            if value is not None:
                config_data[key] = value

    return SkeletonConfig(**config_data)
