"""
Configuration management for newsseo.
"""
import copy
import os
import json
import logging
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv

from newsseo.core.exceptions import ConfigError

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = 'NEWSSEO_'

# Default configuration
DEFAULT_CONFIG = {
    "site": {
        "base_url": "https://news.example.com",
        "name": "Example News",
        "language": "en"
    },
    "publisher": {
        "name": "Example News",
        "logo_url": "https://news.example.com/images/logo.png"
    },
    "sitemap": {
        "static_pages": [
            {"path": "/", "priority": 1.0, "changefreq": "daily"},
            {"path": "/about", "priority": 0.8, "changefreq": "monthly"},
            {"path": "/categories", "priority": 0.8, "changefreq": "weekly"}
        ],
        "article_priority": 0.9,
        "article_changefreq": "daily"
    },
    "amp": {
        "image_width": 1200,
        "image_height": 675
    },
    "store": {
        "path": "articles.db"
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8080
    },
    "ping": {
        "endpoints": [],
        "timeout_seconds": 10
    },
    "logging": {
        "level": "INFO",
        "file": None
    }
}


class Config:
    """
    Configuration manager for newsseo.

    Defaults are overlaid by an optional YAML/JSON file, then by
    ``NEWSSEO_`` environment variables.
    """
    def __init__(self, config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """
        Initialize the Config.

        Args:
            config_path: Path to the configuration file
            environ: Environment to read overrides from, defaults to os.environ
        """
        self.config_path = config_path
        self.environ = os.environ if environ is None else environ
        self.config = self._load_config()

    def _load_config(self) -> Dict:
        """
        Load configuration from file or use defaults.

        Returns:
            Configuration dictionary
        """
        config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path:
            path = Path(self.config_path)
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}", context={'path': str(path)})
            user_config = self._read_file(path)
            if user_config:
                if not isinstance(user_config, dict):
                    raise ConfigError(f"Config file must contain a mapping: {path}", context={'path': str(path)})
                self._update_dict(config, user_config)
            logger.debug(f"Loaded configuration from {path}")

        # Override with environment variables
        self._override_from_env(config)

        return config

    @staticmethod
    def _read_file(path: Path) -> Any:
        try:
            if path.suffix.lower() in ['.yaml', '.yml']:
                with open(path, 'r', encoding='utf-8') as f:
                    return yaml.safe_load(f)
            elif path.suffix.lower() == '.json':
                with open(path, 'r', encoding='utf-8') as f:
                    return json.load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Error loading config from {path}: {e}", context={'path': str(path)}) from e
        raise ConfigError(f"Unsupported config file format: {path.suffix}", context={'path': str(path)})

    def _update_dict(self, target: Dict, source: Dict) -> None:
        """
        Recursively update a dictionary.

        Args:
            target: Target dictionary to update
            source: Source dictionary with new values
        """
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._update_dict(target[key], value)
            else:
                target[key] = value

    def _override_from_env(self, config: Dict, prefix: str = ENV_PREFIX) -> None:
        """
        Override configuration with environment variables.

        A double underscore separates nesting levels, so
        ``NEWSSEO_SITE__BASE_URL`` sets ``site.base_url``.

        Args:
            config: Configuration dictionary to update
            prefix: Prefix for environment variables
        """
        for key, value in self.environ.items():
            if not key.startswith(prefix) or '__' not in key:
                continue

            parts = key[len(prefix):].lower().split('__')

            # Navigate to the right place in the config
            current = config
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]

            try:
                current[parts[-1]] = json.loads(value)
            except json.JSONDecodeError:
                # If not valid JSON, use as string
                current[parts[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Dot-separated key path (e.g., 'site.base_url')
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


@dataclass(frozen=True)
class StaticPage:
    path: str
    priority: float
    changefreq: Optional[str] = None


@dataclass(frozen=True)
class SiteSettings:
    """
    Typed view of the configuration used by the renderers.
    """
    base_url: str
    site_name: str
    publisher_name: str
    publisher_logo_url: str
    language: str = "en"
    static_pages: List[StaticPage] = field(default_factory=list)
    article_priority: float = 0.9
    article_changefreq: str = "daily"
    amp_image_width: int = 1200
    amp_image_height: int = 675

    def absolute_url(self, path: str) -> str:
        """Join a site-relative path onto the base URL."""
        if not path.startswith('/'):
            path = '/' + path
        return self.base_url.rstrip('/') + path

    @property
    def sitemap_url(self) -> str:
        return self.absolute_url('/sitemap.xml')

    @classmethod
    def from_config(cls, cfg: Config) -> "SiteSettings":
        pages = []
        for page in cfg.get('sitemap.static_pages') or []:
            if not isinstance(page, dict) or not page.get('path'):
                raise ConfigError(f"Sitemap static page needs a mapping with a path: {page!r}")
            try:
                priority = float(page.get('priority', 0.8))
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Sitemap priority is not a number: {page}") from e
            if not 0.0 <= priority <= 1.0:
                raise ConfigError(f"Sitemap priority must be between 0.0 and 1.0: {page}")
            pages.append(StaticPage(path=page['path'], priority=priority, changefreq=page.get('changefreq')))

        return cls(
            base_url=str(cfg.get('site.base_url')).rstrip('/'),
            site_name=cfg.get('site.name'),
            publisher_name=cfg.get('publisher.name'),
            publisher_logo_url=cfg.get('publisher.logo_url'),
            language=cfg.get('site.language', 'en'),
            static_pages=pages,
            article_priority=float(cfg.get('sitemap.article_priority', 0.9)),
            article_changefreq=cfg.get('sitemap.article_changefreq', 'daily'),
            amp_image_width=int(cfg.get('amp.image_width', 1200)),
            amp_image_height=int(cfg.get('amp.image_height', 675)),
        )

