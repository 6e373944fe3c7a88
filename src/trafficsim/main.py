"""
Traffic Scenario Service - Command Line Interface

Usage:
    trafficsim-api --config server.yaml --port 3001
"""

import argparse
from typing import List, Optional

from .api.server import run_server
from .config.settings import ServerConfig, config_from_env, configure_logging, load_config


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Combine config file, environment and command line flags"""
    base = load_config(args.config) if args.config else None
    config = config_from_env(base)

    overrides = {
        'host': args.host,
        'port': args.port,
        'data_file': args.data_file,
        'upload_dir': args.upload_dir,
        'log_level': args.log_level,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if args.debug:
        overrides['debug'] = True

    if not overrides:
        return config

    data = config.model_dump()
    data.update(overrides)
    return ServerConfig(**data)


def main(argv: Optional[List[str]] = None):
    """Command line interface for the traffic scenario server"""
    parser = argparse.ArgumentParser(description="Traffic Scenario Service")
    parser.add_argument("--config", "-c", help="Configuration file path (.json/.yaml)")
    parser.add_argument("--host", help="Interface to bind")
    parser.add_argument("--port", "-p", type=int, help="Port to listen on")
    parser.add_argument("--data-file", help="Scenario JSON file")
    parser.add_argument("--upload-dir", help="Directory for uploaded files")
    parser.add_argument("--log-level", help="Logging level")
    parser.add_argument("--debug", action="store_true", help="Run Flask in debug mode")

    args = parser.parse_args(argv)
    config = build_config(args)
    configure_logging(config.log_level)

    run_server(config=config)


if __name__ == "__main__":
    main()
