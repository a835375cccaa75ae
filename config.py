"""
Configuration management for the search engine.
"""

import os
import threading
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict
from pathlib import Path
import json
import logging
import jsonschema
from jsonschema import validate

from search_engine.utils.errors import ConfigurationError


@dataclass
class ConcurrencyConfig:
    """Worker pool settings."""
    threads: int = 5


@dataclass
class CrawlerConfig:
    """Crawler settings."""
    max_pages: int = 1
    redirect_limit: int = 3
    request_timeout: float = 10.0
    retry_attempts: int = 2
    user_agent: str = "search-engine-crawler/1.0"


@dataclass
class OutputConfig:
    """Default output file names."""
    index_path: str = "index.json"
    counts_path: str = "counts.json"
    results_path: str = "results.json"


@dataclass
class SystemConfig:
    """Main system configuration."""
    concurrency: ConcurrencyConfig = field(default_factory=ConcurrencyConfig)
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None


# Environment variable -> (section, attribute, converter); an empty section means SystemConfig itself
ENV_OVERRIDES = {
    "SEARCH_ENGINE_THREADS": ("concurrency", "threads", int),
    "SEARCH_ENGINE_MAX_PAGES": ("crawler", "max_pages", int),
    "SEARCH_ENGINE_LOG_LEVEL": ("", "log_level", str.upper),
}

SECTION_TYPES = {
    "concurrency": ConcurrencyConfig,
    "crawler": CrawlerConfig,
    "output": OutputConfig,
}


# Configuration schema for validation
CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "concurrency": {
            "type": "object",
            "properties": {
                "threads": {"type": "integer", "minimum": 1, "maximum": 256}
            },
            "additionalProperties": False
        },
        "crawler": {
            "type": "object",
            "properties": {
                "max_pages": {"type": "integer", "minimum": 1},
                "redirect_limit": {"type": "integer", "minimum": 0, "maximum": 20},
                "request_timeout": {"type": "number", "exclusiveMinimum": 0, "maximum": 300},
                "retry_attempts": {"type": "integer", "minimum": 0, "maximum": 10},
                "user_agent": {"type": "string", "minLength": 1}
            },
            "additionalProperties": False
        },
        "output": {
            "type": "object",
            "properties": {
                "index_path": {"type": "string", "minLength": 1},
                "counts_path": {"type": "string", "minLength": 1},
                "results_path": {"type": "string", "minLength": 1}
            },
            "additionalProperties": False
        },
        "log_level": {
            "type": "string",
            "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        },
        "log_file": {"type": ["string", "null"]}
    },
    "additionalProperties": False
}


class ConfigManager:
    """Configuration manager with schema validation and environment overrides."""
    
    def __init__(self, config_path: str = "search_engine.json"):
        self.config_path = Path(config_path)
        self._config: Optional[SystemConfig] = None
        self._last_modified: Optional[float] = None
        self._lock = threading.RLock()
    
    def validate_config(self, config_data: Dict[str, Any]) -> None:
        """Validate configuration data against schema."""
        try:
            validate(instance=config_data, schema=CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e.message}")
    
    def load_config(self) -> SystemConfig:
        """Load configuration from file or environment variables."""
        with self._lock:
            if self.config_path.exists():
                current_modified = self.config_path.stat().st_mtime
                if self._config is None or current_modified != self._last_modified:
                    self._load_from_file()
                    self._last_modified = current_modified
            elif self._config is None:
                self._load_from_env()
            
            return self._config or SystemConfig()
    
    def _load_from_file(self) -> None:
        """Load configuration from JSON file with validation."""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logging.error(f"Failed to load config from file: {e}")
            if self._config is None:
                self._config = SystemConfig()
            return
        
        self.validate_config(config_data)
        self._config = self._dict_to_config(config_data)
        self._override_with_env_vars(self._config)
        
        logging.info(f"Configuration loaded and validated from {self.config_path}")
    
    def _load_from_env(self) -> None:
        """Load defaults and apply environment variables."""
        config = SystemConfig()
        self._override_with_env_vars(config)
        self._config = config
        logging.debug("Configuration loaded from environment variables")
    
    def _override_with_env_vars(self, config: SystemConfig) -> None:
        """Apply every SEARCH_ENGINE_* variable that is set."""
        for name, (section, attribute, convert) in ENV_OVERRIDES.items():
            raw = os.getenv(name)
            if not raw:
                continue
            
            try:
                value = convert(raw)
            except ValueError:
                raise ConfigurationError(f"Invalid value for {name}: {raw!r}")
            
            target = getattr(config, section) if section else config
            setattr(target, attribute, value)
    
    def _dict_to_config(self, data: Dict[str, Any]) -> SystemConfig:
        """Build a SystemConfig from validated file contents; missing sections keep their defaults."""
        sections = {
            name: section_type(**data[name])
            for name, section_type in SECTION_TYPES.items()
            if name in data
        }
        scalars = {key: data[key] for key in ("log_level", "log_file") if key in data}
        return SystemConfig(**sections, **scalars)
    
    def reload_if_changed(self) -> bool:
        """Check if config file has changed and reload if necessary."""
        with self._lock:
            if not self.config_path.exists():
                return False
            
            current_modified = self.config_path.stat().st_mtime
            if current_modified != self._last_modified:
                self.load_config()
                return True
            return False
    
    def export_config(self) -> Dict[str, Any]:
        """Export current configuration as dictionary."""
        with self._lock:
            if not self._config:
                return {}
            return asdict(self._config)

