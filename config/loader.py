"""Configuration loader for the token response pipeline

Loads configuration from multiple sources with the following priority:
1. Environment variables (highest priority)
2. .env file
3. Hardcoded defaults (lowest priority)
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional
from dotenv import load_dotenv

# Set up logger for config loader
logger = logging.getLogger(__name__)


class ConfigLoader:
    """Handles loading configuration from various sources"""

    def __init__(self, env_path: Optional[str] = None):
        """Initialize the config loader

        Args:
            env_path: Optional path to .env file.
                     Defaults to '.env' in the current directory.
        """
        self.env_path = Path(env_path) if env_path else Path(".env")
        self._load_env_file()

    def _load_env_file(self):
        """Load environment variables from .env file if it exists"""
        if self.env_path.exists():
            load_dotenv(dotenv_path=self.env_path)
            logger.debug(f"Loaded environment variables from {self.env_path}")
        else:
            logger.debug(f".env file not found at {self.env_path}, using environment variables and defaults only")

    def get(self, env_var: str, default: str) -> str:
        """Get a configuration value with priority: env > default

        Args:
            env_var: Environment variable name to check
            default: Default value if not found in environment

        Returns:
            The configuration value from environment or default, with a
            leading ``~/`` expanded to the home directory
        """
        value = os.getenv(env_var)
        if value is None:
            value = default

        if isinstance(value, str) and value.startswith("~/"):
            return str(Path(value).expanduser())
        return value


_config_loader = None

def get_config_loader() -> ConfigLoader:
    """Get or create the global ConfigLoader instance"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def load_error_code_overrides(codes_path: Optional[str] = None) -> Dict[str, List[str]]:
    """Load extra interaction-required error codes from a JSON file

    The file has the shape ``{"error_codes": [...], "suberrors": [...]}``.
    Entries extend the built-in allow-lists, they never replace them.

    Args:
        codes_path: Path to the JSON file. Nothing is loaded when empty.

    Returns:
        Dict with "error_codes" and "suberrors" lists. Both lists are empty
        if the file is missing or cannot be parsed.
    """
    overrides: Dict[str, List[str]] = {"error_codes": [], "suberrors": []}
    if not codes_path:
        return overrides

    path = Path(codes_path).expanduser().resolve()
    if not path.exists():
        logger.debug(f"Error code overrides file not found: {path}")
        return overrides

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse {path}: {e}")
        return overrides
    except IOError as e:
        logger.error(f"Failed to read {path}: {e}")
        return overrides

    if not isinstance(data, dict):
        logger.warning(f"Invalid error code overrides in {path}: expected object, got {type(data)}")
        return overrides

    for field in ("error_codes", "suberrors"):
        values = data.get(field, [])
        if not isinstance(values, list):
            logger.warning(f"Skipping '{field}' in {path}: expected list, got {type(values)}")
            continue
        overrides[field] = [v for v in values if isinstance(v, str) and v]

    logger.info(
        f"Loaded {len(overrides['error_codes'])} error code(s) and "
        f"{len(overrides['suberrors'])} suberror(s) from {path}"
    )
    return overrides
