"""Configuration management package for the token response pipeline"""

from .loader import ConfigLoader, get_config_loader, load_error_code_overrides

__all__ = [
    "ConfigLoader",
    "get_config_loader",
    "load_error_code_overrides",
]
