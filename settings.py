from pathlib import Path
from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Logging
LOG_LEVEL = config.get("LOG_LEVEL", "info")

# Client application registration
CLIENT_ID = config.get("CLIENT_ID", "")
AUTHORITY = config.get("AUTHORITY", "https://login.microsoftonline.com/common")

# Token cache
TOKEN_CACHE_FILE = config.get("TOKEN_CACHE_FILE", str(Path.home() / ".token-response" / "cache.json"))

# Extra interaction-required error codes (JSON file, extends the built-in lists)
INTERACTION_REQUIRED_CODES_FILE = config.get("INTERACTION_REQUIRED_CODES_FILE", "")
