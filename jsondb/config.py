"""
Configuration management for jsondb
"""

import os
import yaml
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class StorageConfig:
    """Snapshot storage configuration"""
    data_dir: str = "./data"
    create_missing: bool = False  # create an empty database on first reference
    max_workers: int = 4  # snapshot writer threads


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    log_file: Optional[str] = None


@dataclass
class JsonDBConfig:
    """Main jsondb configuration"""
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, config_path: str) -> 'JsonDBConfig':
        """Load configuration from YAML file"""
        config_path = Path(config_path)
        if not config_path.exists():
            return cls()

        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'JsonDBConfig':
        """Create config from dictionary"""
        config = cls()

        for key, value in data.items():
            if hasattr(config, key):
                attr = getattr(config, key)
                if hasattr(attr, '__dict__'):  # It's a dataclass
                    if isinstance(value, dict):
                        for sub_key, sub_value in value.items():
                            if hasattr(attr, sub_key):
                                setattr(attr, sub_key, sub_value)
                else:
                    setattr(config, key, value)

        return config

    @classmethod
    def from_env(cls) -> 'JsonDBConfig':
        """Load configuration from environment variables"""
        config = cls()

        # Storage settings
        config.storage.data_dir = os.getenv('JSONDB_DATA_DIR', config.storage.data_dir)
        config.storage.create_missing = os.getenv('JSONDB_CREATE_MISSING', 'false').lower() == 'true'
        config.storage.max_workers = int(os.getenv('JSONDB_MAX_WORKERS', config.storage.max_workers))

        # Logging settings
        config.logging.level = os.getenv('JSONDB_LOG_LEVEL', config.logging.level)
        config.logging.log_file = os.getenv('JSONDB_LOG_FILE', config.logging.log_file)

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        result = {}
        for key, value in self.__dict__.items():
            if hasattr(value, '__dict__'):  # It's a dataclass
                result[key] = {k: v for k, v in value.__dict__.items()}
            else:
                result[key] = value
        return result

    def save_to_file(self, config_path: str):
        """Save configuration to YAML file"""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, indent=2)

    def validate(self) -> List[str]:
        """Validate configuration and return any errors"""
        errors = []

        if not self.storage.data_dir:
            errors.append("storage.data_dir must not be empty")

        if not isinstance(self.storage.max_workers, int) or self.storage.max_workers < 1:
            errors.append(f"Invalid storage.max_workers: {self.storage.max_workers}")

        if str(self.logging.level).upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            errors.append(f"Invalid log level: {self.logging.level}")

        return errors
