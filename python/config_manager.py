"""
Configuration Management Module
Loads and validates configuration from config.yaml

Sections:
- sources: per-list fetch settings (http, fixture or local file)
- sync: batch size for the replace transaction, fan-out worker count
- logging: level, file, console output and format
- database: connection parameters (DATABASE_URL / DB_* env still take precedence)
"""

from dataclasses import dataclass, field

import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

FETCH_MODES = ("http", "fixture", "file")


@dataclass
class DatabaseConfig:
    """Database configuration"""
    host: str = "localhost"
    port: int = 5432
    user: str = "sdn_user"
    password: str = "sdn_password"
    name: str = "sdn_database"
    url: Optional[str] = None


@dataclass
class SourceConfig:
    """Fetch settings for one sanctions list"""
    mode: str = "http"
    url: Optional[str] = None
    path: Optional[str] = None
    timeout_seconds: float = 120
    token_env: Optional[str] = None


def default_sources() -> Dict[str, SourceConfig]:
    return {
        "ofac": SourceConfig(
            mode="http",
            url="https://www.treasury.gov/ofac/downloads/sdn.xml",
        ),
        "un": SourceConfig(
            mode="http",
            url="https://scsanctions.un.org/resources/xml/en/consolidated.xml",
        ),
        "eu": SourceConfig(
            mode="fixture",
            url="https://webgate.ec.europa.eu/fsd/fsf/public/files/xmlFullSanctionsList_1_1/content",
            token_env="EU_FSD_TOKEN",
        ),
        "interpol": SourceConfig(
            mode="fixture",
            url="https://ws-public.interpol.int/notices/v1/red",
            timeout_seconds=60,
            token_env="INTERPOL_API_TOKEN",
        ),
    }


@dataclass
class SyncConfig:
    """Sync pipeline tuning"""
    batch_size: int = 1000
    max_workers: int = 4


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    file: Optional[str] = "logs/watchlist_sync.log"
    console: bool = True
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ConfigurationError(Exception):
    """Raised when configuration is invalid"""
    pass


class ConfigManager:
    """Manages system configuration"""

    _instance: Optional['ConfigManager'] = None

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager

        Args:
            config_path: Path to config.yaml file
        """
        self.config_path = Path(config_path) if config_path else self._find_config()
        self._raw_config: Dict[str, Any] = {}
        self.sources: Dict[str, SourceConfig] = default_sources()
        self.sync: SyncConfig = SyncConfig()
        self.logging: LoggingConfig = LoggingConfig()
        self.database: DatabaseConfig = DatabaseConfig()

        if self.config_path and self.config_path.exists():
            self.load()
        else:
            logger.warning(f"Config file not found at {self.config_path}, using defaults")

    def _find_config(self) -> Path:
        """Find config.yaml in common locations"""
        search_paths = [
            Path(__file__).parent / "config.yaml",
            Path.cwd() / "config.yaml",
            Path.cwd() / "python" / "config.yaml",
        ]

        for path in search_paths:
            if path.exists():
                return path

        return search_paths[0]

    def load(self) -> None:
        """Load configuration from YAML file"""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._raw_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")
        except FileNotFoundError:
            raise ConfigurationError(f"Config file not found: {self.config_path}")

        if not isinstance(self._raw_config, dict):
            raise ConfigurationError("Config file must contain a mapping at the top level")

        self._parse_sources()
        self._parse_sync()
        self._parse_logging()
        self._parse_database()
        self._validate()

    def _parse_sources(self) -> None:
        """Parse per-source fetch configuration"""
        cfg = self._raw_config.get('sources', {}) or {}
        defaults = default_sources()
        for key, default in defaults.items():
            src = cfg.get(key, {}) or {}
            self.sources[key] = SourceConfig(
                mode=str(src.get('mode', default.mode)).lower(),
                url=src.get('url', default.url),
                path=src.get('path', default.path),
                timeout_seconds=src.get('timeout_seconds', default.timeout_seconds),
                token_env=src.get('token_env', default.token_env)
            )

        unknown = set(cfg) - set(defaults)
        if unknown:
            logger.warning(f"Ignoring unknown source sections: {sorted(unknown)}")

    def _parse_sync(self) -> None:
        """Parse sync configuration"""
        cfg = self._raw_config.get('sync', {}) or {}
        self.sync = SyncConfig(
            batch_size=cfg.get('batch_size', 1000),
            max_workers=cfg.get('max_workers', 4)
        )

    def _parse_logging(self) -> None:
        """Parse logging configuration"""
        cfg = self._raw_config.get('logging', {}) or {}
        self.logging = LoggingConfig(
            level=str(cfg.get('level', 'INFO')).upper(),
            file=cfg.get('file', self.logging.file),
            console=cfg.get('console', True),
            format=cfg.get('format', self.logging.format)
        )

    def _parse_database(self) -> None:
        """Parse database configuration"""
        cfg = self._raw_config.get('database', {}) or {}
        self.database = DatabaseConfig(
            host=cfg.get('host', self.database.host),
            port=cfg.get('port', self.database.port),
            user=cfg.get('user', self.database.user),
            password=cfg.get('password', self.database.password),
            name=cfg.get('name', self.database.name),
            url=cfg.get('url', self.database.url)
        )

    def _validate(self) -> None:
        """Validate configuration values

        Raises:
            ConfigurationError: On the first invalid value found
        """
        for key, src in self.sources.items():
            if src.mode not in FETCH_MODES:
                raise ConfigurationError(
                    f"sources.{key}.mode must be one of {FETCH_MODES}, got '{src.mode}'"
                )
            if src.mode == "http" and not src.url:
                raise ConfigurationError(f"sources.{key}.url is required in http mode")
            if src.mode == "file" and not src.path:
                raise ConfigurationError(f"sources.{key}.path is required in file mode")
            if not isinstance(src.timeout_seconds, (int, float)) or src.timeout_seconds <= 0:
                raise ConfigurationError(f"sources.{key}.timeout_seconds must be positive")

        if not isinstance(self.sync.batch_size, int) or self.sync.batch_size < 1:
            raise ConfigurationError("sync.batch_size must be an integer >= 1")
        if not isinstance(self.sync.max_workers, int) or self.sync.max_workers < 1:
            raise ConfigurationError("sync.max_workers must be an integer >= 1")

        if logging.getLevelName(self.logging.level) == f"Level {self.logging.level}":
            raise ConfigurationError(f"logging.level '{self.logging.level}' is not a valid level")

    def get_source(self, key: str) -> SourceConfig:
        """Get fetch settings for a source (case-insensitive key)"""
        try:
            return self.sources[key.lower()]
        except KeyError:
            raise ConfigurationError(f"No configuration for source '{key}'")

    @classmethod
    def get_instance(cls, config_path: Optional[str] = None) -> 'ConfigManager':
        """Get singleton instance of ConfigManager"""
        if cls._instance is None:
            cls._instance = ConfigManager(config_path)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset singleton instance (useful for testing)"""
        cls._instance = None

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary (password masked)"""
        return {
            'sources': {
                key: {
                    'mode': src.mode,
                    'url': src.url,
                    'path': src.path,
                    'timeout_seconds': src.timeout_seconds,
                    'token_env': src.token_env,
                }
                for key, src in self.sources.items()
            },
            'sync': {
                'batch_size': self.sync.batch_size,
                'max_workers': self.sync.max_workers,
            },
            'logging': {
                'level': self.logging.level,
                'file': self.logging.file,
                'console': self.logging.console,
            },
            'database': {
                'host': self.database.host,
                'port': self.database.port,
                'user': self.database.user,
                'password': '***',
                'name': self.database.name,
            }
        }


def get_config(config_path: Optional[str] = None) -> ConfigManager:
    """Convenience function to get configuration instance"""
    return ConfigManager.get_instance(config_path)
