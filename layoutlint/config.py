# config.py
import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .constants import (
    CONFIG_FILE, DEFAULT_LOCALES, EXCLUDED_TAGS, OUTPUT_DIR, TIMEOUT, VIEWPORT_WIDTH,
    VIEWPORT_HEIGHT, SETTLE_DELAY, WATCH_INTERVAL, PROVIDER_API_KEY_ENV,
    NEO4J_URI, NEO4J_USER, NEO4J_PASSWORD,
)
from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    'project': '.',
    'locales': DEFAULT_LOCALES,
    'format': 'table',
    'output': OUTPUT_DIR,
    'fail_on_error': False,
    'width': VIEWPORT_WIDTH,
    'height': VIEWPORT_HEIGHT,
    'timeout': TIMEOUT,
    'settle_delay': SETTLE_DELAY,
    'headful': False,
    'use_provider': True,
    'attribution': True,
    'dedupe': False,
    'stop_on_failure': False,
    'excluded_tags': EXCLUDED_TAGS,
    'interval': WATCH_INTERVAL,
    'iterations': None,
    'neo4j': False,
    'neo4j_uri': NEO4J_URI,
    'neo4j_user': NEO4J_USER,
    'neo4j_password': NEO4J_PASSWORD,
}


def load_config_file(path: Optional[str], project: str = '.') -> Dict[str, Any]:
    """Read a YAML config file.

    An explicit ``path`` must exist. Without one, ``layoutlint.yaml`` in the
    project directory is used when present.
    """
    if path:
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {path}")
    else:
        config_path = Path(project) / CONFIG_FILE
        if not config_path.is_file():
            return {}

    try:
        data = yaml.safe_load(config_path.read_text(encoding='utf-8'))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read config file {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    unknown = set(data) - set(DEFAULTS)
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")
    logger.debug(f"Loaded config from {config_path}")
    return {key: value for key, value in data.items() if key in DEFAULTS}


def build_config(overrides: Dict[str, Any], file_config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Defaults, then the config file, then every override that is not None."""
    config = dict(DEFAULTS)
    config.update(file_config or {})
    config.update({key: value for key, value in overrides.items() if value is not None})
    if isinstance(config['locales'], str):
        config['locales'] = [config['locales']]
    config['api_key'] = os.environ.get(PROVIDER_API_KEY_ENV)
    return config
