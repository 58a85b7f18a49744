import logging
from pathlib import Path
from typing import Optional
import yaml
from hevcify.config.models import AppConfig

logger = logging.getLogger(__name__)

def load_config(config_path: Optional[Path]) -> AppConfig:
    """Loads the YAML config; a missing file means built-in defaults."""
    if config_path is None or not config_path.exists():
        logger.debug(f"No config file at {config_path}, using defaults")
        return AppConfig()

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")

    logger.debug(f"Loaded config from {config_path}")
    return AppConfig(**data)
