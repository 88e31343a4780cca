#!/usr/bin/env python3
"""
Memorystore Cluster Autoscaler Scaler - Main Entry Point
Processes per-cluster scaling requests in batch from a file, or serves them over HTTP
"""

import os
import sys
from typing import Any, Dict, List, Optional

import yaml

from memorystore_autoscaler.api.handlers import scale_cluster_local
from memorystore_autoscaler.api.server import APIServer
from memorystore_autoscaler.config import Settings
from memorystore_autoscaler.core.logging_config import setup_logging, get_logger
from memorystore_autoscaler.core.scaler import Scaler
from memorystore_autoscaler.exceptions import ConfigurationError


def load_cluster_payloads(config_path: str) -> List[Dict[str, Any]]:
    """
    Read cluster payloads from a YAML or JSON file.

    The file holds either a list of cluster objects, a single cluster object,
    or a mapping with a "clusters" list.
    """
    if not os.path.exists(config_path):
        raise ConfigurationError(f"Cluster configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        content = yaml.safe_load(f)

    if isinstance(content, dict) and "clusters" in content:
        content = content["clusters"]
    if isinstance(content, dict):
        content = [content]
    if not isinstance(content, list) or not all(isinstance(item, dict) for item in content):
        raise ConfigurationError(f"Cluster configuration in {config_path} must be a list of objects")
    return content


class ScalerService:
    """Main scaler service that wires settings, logging and the scaler together"""

    def __init__(self, settings_path: Optional[str] = None):
        """Initialize the scaler service"""
        if settings_path and os.path.exists(settings_path):
            self.settings = Settings.load_from_yaml_with_env_override(settings_path)
        else:
            self.settings = Settings()

        setup_logging(
            level=self.settings.logging.level,
            log_file=self.settings.logging.file,
            log_format=self.settings.logging.format,
            enable_colors=self.settings.logging.enable_colors
        )
        self.logger = get_logger(__name__)
        self.scaler = Scaler(self.settings)

        self.logger.info("Scaler service initialized")
        if self.settings.debug:
            self.logger.debug(f"Configuration: {self.settings.get_config_dict()}")

    def run_batch(self, config_path: str) -> int:
        """
        Process every cluster in the configuration file once.

        Returns:
            Number of clusters whose request failed
        """
        payloads = load_cluster_payloads(config_path)
        self.logger.info(f"Processing {len(payloads)} cluster(s) from {config_path}")

        counters = self.scaler.counters
        counters.set_flush_enabled(False)
        failures = 0
        try:
            for payload in payloads:
                if scale_cluster_local(payload, self.scaler) is None:
                    failures += 1
        finally:
            counters.set_flush_enabled(True)
            counters.try_flush()

        self.logger.info(f"Batch complete: {len(payloads) - failures} succeeded, {failures} failed")
        return failures

    def serve(self, host: Optional[str] = None, port: Optional[int] = None):
        """Run the HTTP adapter until interrupted"""
        server = APIServer(self.scaler)
        server.run(host=host or self.settings.api.host, port=port or self.settings.api.port)

    def cleanup(self):
        """Release cached clients"""
        self.scaler.client_cache.clear()
        self.logger.info("Scaler service stopped")


def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(description='Memorystore Cluster Autoscaler Scaler')
    parser.add_argument(
        '--settings',
        default=os.getenv('SCALER_SETTINGS_PATH'),
        help='Path to scaler settings YAML file'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    run_parser = subparsers.add_parser('run', help='Process the clusters in a configuration file once')
    run_parser.add_argument(
        '--config',
        default=None,
        help='Path to the cluster configuration file (YAML or JSON); defaults to AUTOSCALER_CONFIG'
    )

    serve_parser = subparsers.add_parser('serve', help='Serve scaling requests over HTTP')
    serve_parser.add_argument('--host', default=None, help='Bind address')
    serve_parser.add_argument('--port', type=int, default=None, help='Bind port')

    args = parser.parse_args(argv)

    service = ScalerService(args.settings)
    exit_code = 0
    try:
        if args.command == 'run':
            if service.run_batch(args.config or service.settings.config_location):
                exit_code = 1
        else:
            service.serve(args.host, args.port)
    except KeyboardInterrupt:
        service.logger.info("Received keyboard interrupt")
    except Exception as e:
        service.logger.error(f"Fatal error: {e}")
        exit_code = 1
    finally:
        service.cleanup()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
