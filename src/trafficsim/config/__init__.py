"""
Configuration Module

This module provides server configuration loading, validation
and logging setup.
"""

from .settings import ServerConfig, load_config, save_config, config_from_env, configure_logging

__all__ = ["ServerConfig", "load_config", "save_config", "config_from_env", "configure_logging"]
