"""
Server Configuration Module

This module handles server configuration loading, validation and export for
the traffic scenario service. Configuration can come from JSON or YAML files
and from environment variables, and is validated with pydantic before any
component is built from it.
"""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5 MiB

DEFAULT_ALLOWED_MIMETYPES = [
    'application/json',
    'text/csv',
    'application/vnd.ms-excel',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'text/plain',
]

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class ServerConfig(BaseModel):
    """Traffic scenario server configuration"""
    host: str = Field("127.0.0.1", description="Interface the server binds to")
    port: int = Field(3001, ge=1, le=65535, description="TCP port")
    debug: bool = Field(False, description="Run Flask in debug mode")
    api_prefix: str = Field("/api", description="URL prefix of the REST routes")
    # Storage
    data_file: Path = Field(Path("data/scenarios.json"), description="Scenario JSON file")
    upload_dir: Path = Field(Path("uploads"), description="Directory holding uploaded files")
    # Upload policy
    max_upload_bytes: int = Field(MAX_UPLOAD_BYTES, gt=0, description="Maximum upload size in bytes")
    allowed_mimetypes: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_MIMETYPES),
        description="MIME types accepted by the upload endpoints"
    )
    # Cross-origin and logging
    cors_origins: Union[str, List[str]] = Field("*", description="Origins allowed by CORS")
    log_level: str = Field("INFO", description="Logging level")

    @field_validator('api_prefix')
    @classmethod
    def validate_api_prefix(cls, v):
        v = v.strip()
        if not v or v == '/':
            return ''
        if not v.startswith('/'):
            v = '/' + v
        return v.rstrip('/')

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"Unknown log level: {v}")
        return level


def load_config(filepath: Union[str, Path]) -> ServerConfig:
    """
    Load configuration from file

    Args:
        filepath: Path to a .json, .yaml or .yml configuration file

    Returns:
        Validated server configuration
    """
    path = Path(filepath)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() in ['.yaml', '.yml']:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        return ServerConfig(**(data or {}))

    except Exception as e:
        raise ValueError(f"Error loading configuration: {e}")


def save_config(config: ServerConfig, filepath: Union[str, Path], format: str = "json"):
    """
    Save configuration to file

    Args:
        config: Configuration to save
        filepath: Output file path
        format: Output format ("json" or "yaml")
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode='json')

    try:
        with open(path, 'w', encoding='utf-8') as f:
            if format.lower() in ['yaml', 'yml']:
                yaml.safe_dump(data, f, default_flow_style=False, indent=2)
            else:
                json.dump(data, f, indent=2)

    except Exception as e:
        raise ValueError(f"Error saving configuration: {e}")


def config_from_env(base: Optional[ServerConfig] = None) -> ServerConfig:
    """
    Build configuration from environment variables

    TRAFFICSIM_CONFIG names a config file loaded before the individual
    overrides (PORT, TRAFFICSIM_HOST, TRAFFICSIM_DATA_FILE,
    TRAFFICSIM_UPLOAD_DIR, TRAFFICSIM_LOG_LEVEL) are applied.
    """
    if base is None:
        config_path = os.environ.get('TRAFFICSIM_CONFIG')
        base = load_config(config_path) if config_path else ServerConfig()

    overrides = {}
    env_map = {
        'PORT': 'port',
        'TRAFFICSIM_HOST': 'host',
        'TRAFFICSIM_DATA_FILE': 'data_file',
        'TRAFFICSIM_UPLOAD_DIR': 'upload_dir',
        'TRAFFICSIM_LOG_LEVEL': 'log_level',
    }
    for env_name, field_name in env_map.items():
        value = os.environ.get(env_name)
        if value:
            overrides[field_name] = value

    if not overrides:
        return base

    data = base.model_dump()
    data.update(overrides)
    return ServerConfig(**data)


def configure_logging(level: str = "INFO"):
    """Set up root logging for the server process"""
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT)
    logging.getLogger().setLevel(getattr(logging, level.upper()))
