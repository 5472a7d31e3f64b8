"""Configuration management for ssdl."""
from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional, Union

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".ssdl"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
CONFIG_ENV = "SSDL_CONFIG"

OUTPUT_FORMATS = ("text", "json")


@dataclass
class SSDLConfig:
    """ssdl command line defaults."""

    recursive_interfaces: bool = False  # include subsystem interfaces in interface analyses
    log_level: str = "WARNING"
    output_format: str = "text"  # text|json
    render_layout: str = "spring"
    render_figsize: str = "16x12"

    def to_dict(self) -> dict:
        return asdict(self)


def config_path(path: Optional[Union[str, Path]] = None) -> Path:
    """Explicit path, else $SSDL_CONFIG, else ~/.ssdl/config.yaml."""
    if path is not None:
        return Path(path)
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env)
    return CONFIG_FILE


def load_config(path: Optional[Union[str, Path]] = None) -> SSDLConfig:
    """Load config from YAML if it exists; unknown keys are ignored."""
    path = config_path(path)
    if not path.exists():
        return SSDLConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError("top level must be a mapping")
        filtered = {k: v for k, v in data.items() if k in SSDLConfig.__dataclass_fields__}
        config = SSDLConfig(**filtered)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return SSDLConfig()

    if config.output_format not in OUTPUT_FORMATS:
        logger.warning("Unknown output_format %r in %s, using text", config.output_format, path)
        config.output_format = "text"
    return config


def save_config(config: SSDLConfig, path: Optional[Union[str, Path]] = None) -> Path:
    """Save config as YAML, creating the directory if needed."""
    path = config_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(config.to_dict(), default_flow_style=False), encoding="utf-8")
    return path
