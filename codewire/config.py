"""
Configuration management for CodeWire.
"""
import copy
import os
import json
import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = 'CODEWIRE_'
API_KEY_ENV = 'ANTHROPIC_API_KEY'

# Default configuration
DEFAULT_CONFIG = {
    "sources": {
        "hn_top_url": "https://hacker-news.firebaseio.com/v0/topstories.json",
        "hn_item_url": "https://hacker-news.firebaseio.com/v0/item/{id}.json",
        "hn_limit": 30,
        "devto_url": "https://dev.to/api/articles",
        "devto_top_days": 7,
        "devto_per_page": 20,
        "proxy_url": "https://api.allorigins.win/get",
        "rss_items": 8,
        "rss_description_length": 140,
        "trending_url": "https://github.com/trending",
        "trending_limit": 5,
        "trending_enabled": True
    },
    "rss_feeds": [
        {"name": "TechCrunch", "badge": "TC", "url": "https://techcrunch.com/feed/"},
        {"name": "Ars Technica", "badge": "ARS", "url": "https://feeds.arstechnica.com/arstechnica/technology-lab"},
        {"name": "The Verge", "badge": "VERGE", "url": "https://www.theverge.com/rss/index.xml"}
    ],
    "feed": {
        "page_size": 15,
        "ticker_size": 20
    },
    "fetch": {
        "timeout_seconds": 30,
        "max_tries": 1,
        "user_agent": "CodeWire/0.1 (+https://github.com/codewire)"
    },
    "llm": {
        "base_url": None,
        "max_retries": 2,
        "model": "claude-sonnet-4-6",
        "translate_max_tokens": 400,
        "answer_max_tokens": 800,
        "target_language": "Japanese"
    },
    "storage": {
        "path": "codewire.db"
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8080
    }
}

class Config:
    """
    Configuration manager for CodeWire.
    """
    def __init__(self, config_path: Optional[str] = None, env_prefix: str = ENV_PREFIX):
        """
        Initialize the Config.

        Args:
            config_path: Path to a YAML or JSON configuration file
            env_prefix: Prefix for environment variable overrides
        """
        self.config_path = config_path
        self.env_prefix = env_prefix
        self.config = self._load_config()

    def _load_config(self) -> Dict:
        """
        Load configuration from file or use defaults.

        Returns:
            Configuration dictionary
        """
        config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path:
            try:
                self._merge_file(config)
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.error(f"Error loading config from {self.config_path}: {e}")
                logger.error("Using default configuration")

        self._override_from_env(config)

        return config

    def _merge_file(self, config: Dict) -> None:
        """
        Merge the configuration file, if any, into ``config``.

        Sections are merged key by key, so a file only needs the values it
        changes. Unreadable or non-mapping files leave the defaults in place.
        """
        path = Path(self.config_path)
        if not path.exists():
            logger.warning(f"Config file {self.config_path} not found, using defaults")
            return

        suffix = path.suffix.lower()
        with open(path, 'r') as f:
            if suffix in ('.yaml', '.yml'):
                user_config = yaml.safe_load(f) or {}
            elif suffix == '.json':
                user_config = json.load(f)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")

        if not isinstance(user_config, dict):
            raise ValueError(f"{self.config_path} must contain a mapping of sections")

        for section, values in user_config.items():
            if isinstance(values, dict) and isinstance(config.get(section), dict):
                config[section].update(values)
            else:
                config[section] = values

    def _override_from_env(self, config: Dict) -> None:
        """
        Override configuration with environment variables.

        ``CODEWIRE_FETCH_TIMEOUT_SECONDS=10`` sets ``fetch.timeout_seconds``.
        The first segment after the prefix names the section, the rest is the key.

        Args:
            config: Configuration dictionary to update
        """
        for key, value in os.environ.items():
            if not key.startswith(self.env_prefix) or key == f"{self.env_prefix}CONFIG_PATH":
                continue

            parts = key[len(self.env_prefix):].lower().split('_', 1)
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError:
                parsed = value

            if len(parts) == 1:
                config[parts[0]] = parsed
                continue

            section, name = parts
            if not isinstance(config.get(section), dict):
                config[section] = {}
            config[section][name] = parsed

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Dot-separated key path (e.g., 'fetch.timeout_seconds')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        current = self.config

        for part in key.split('.'):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        return current


def get_api_key() -> Optional[str]:
    """
    Get the language-model credential from the environment.

    Returns:
        The API key, or None if it is unset or blank
    """
    key = os.getenv(API_KEY_ENV, '').strip()
    return key or None


# Global configuration instance
config = Config(os.getenv('CODEWIRE_CONFIG_PATH'))

def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        key: Dot-separated key path (e.g., 'feed.page_size')
        default: Default value if key not found

    Returns:
        Configuration value
    """
    return config.get(key, default)
