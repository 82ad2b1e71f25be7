"""
Configuration Loader

Loads YAML configuration files for the catalog export: document titles,
footer strings and image fetching limits.
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .constants import IMAGE_FETCH_TIMEOUT, IMAGE_FETCH_WORKERS, IMAGE_MAX_BYTES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportSettings:
    """Document text and fetch limits for a PDF export."""
    title: str = "OLIVOS 2025 PRODUCT LIST"
    subtitle: str = "SOAP & SKINCARE"
    source: str = "olivos.com"
    reference: str = "export@olivos.com"
    image_timeout: float = IMAGE_FETCH_TIMEOUT
    image_max_bytes: int = IMAGE_MAX_BYTES
    fetch_workers: int = IMAGE_FETCH_WORKERS


def _get_config_dir() -> Path:
    """Get the config directory path."""
    # Try relative to this file first
    module_dir = Path(__file__).parent.parent.parent
    config_dir = module_dir / 'config'

    if config_dir.exists():
        return config_dir

    # Try current working directory
    cwd_config = Path.cwd() / 'config'
    if cwd_config.exists():
        return cwd_config

    raise FileNotFoundError(
        f"Config directory not found. Tried: {config_dir}, {cwd_config}"
    )


def load_config(filename: str, config_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of the config file (e.g., 'export.yaml')
        config_dir: Directory to look in (default: project config/ directory)

    Returns:
        Parsed YAML content as dictionary (empty dict for an empty file)

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    config_path = Path(config_dir or _get_config_dir()) / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def load_export_settings(
    filename: str = 'export.yaml',
    config_dir: Optional[Path] = None,
) -> ExportSettings:
    """
    Load export settings, falling back to built-in defaults.

    Keys under the top-level ``export`` mapping override the matching
    ExportSettings fields; unknown keys are ignored with a warning.

    Returns:
        ExportSettings instance

    Example (config/export.yaml):
        export:
          title: OLIVOS 2025 PRODUCT LIST
          image_timeout: 10
    """
    try:
        config = load_config(filename, config_dir)
    except FileNotFoundError as e:
        logger.debug("Using default export settings: %s", e)
        return ExportSettings()

    overrides = config.get('export', {}) or {}
    known = {f.name for f in fields(ExportSettings)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        logger.warning("Ignoring unknown export settings: %s", ", ".join(unknown))

    return replace(ExportSettings(), **{k: v for k, v in overrides.items() if k in known})
