from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from dashscope_boot.config.paths import get_app_dir
from dashscope_boot.config.properties import DashScopeProperties
from dashscope_boot.config.yaml import load_yaml


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default='INFO', description='Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)')
    console_enabled: bool = Field(default=True, description='Enable console logging')
    file_enabled: bool = Field(default=False, description='Enable rotating JSON file logging')
    log_file_dir: str = Field(default=str(get_app_dir() / 'logs'), description='Log directory (defaults to ~/.dashscope-boot/logs)')
    max_file_size: str = Field(default='10MB', description='Maximum log file size before rotation')
    backup_count: int = Field(default=4, description='Number of backup files to keep')


class AppConfig(BaseModel):
    """Application configuration with validation."""

    model_config = ConfigDict(extra='allow')

    version: str = Field(default='1', description='Config version')
    host: str = Field(default='127.0.0.1')
    port: int = Field(default=8000, ge=1, le=65535)
    dev: bool = Field(default=False)
    cors_allow_origins: List[str] = Field(default_factory=list)
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description='Logging configuration')
    dashscope: DashScopeProperties = Field(default_factory=DashScopeProperties, description='DashScope connection and feature properties')

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> 'AppConfig':
        """Load configuration from YAML file.

        Tries multiple locations in order:
        1. Explicit config_path if provided
        2. ~/.dashscope-boot/config.yaml in user home directory
        3. ./config.yaml in current directory (overrides the home file)
        """
        config_paths = []
        if config_path:
            config_paths.append(config_path)
        else:
            home_config = get_app_dir() / 'config.yaml'
            if home_config.exists():
                config_paths.append(str(home_config))
            config_paths.append('config.yaml')

        data = {}
        for path in config_paths:
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    file_data = load_yaml(f) or {}
            except FileNotFoundError:
                continue
            except yaml.YAMLError as e:
                raise ValueError(f'Invalid YAML in config file {path}: {e}')
            except OSError as e:
                raise ValueError(f'Error reading config file {path}: {e}')

            if not isinstance(file_data, dict):
                raise ValueError(f'Config file {path} must contain a mapping at the top level')
            # Later files override earlier ones
            data.update(file_data)

        return cls(**data)

    def save(self, config_path: str) -> None:
        """Save configuration to YAML file, writing property keys in their kebab-case form."""
        Path(config_path).parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.model_dump(mode='json', by_alias=True), f, default_flow_style=False, sort_keys=False, indent=2)
