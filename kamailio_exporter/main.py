"""Main application entry point for the Kamailio Prometheus exporter."""

import argparse
import logging
import signal
import sys
from typing import Any, Dict, List, Optional

import yaml
from prometheus_client import generate_latest
from pydantic import ValidationError

from .collectors.registry import CollectorRegistry, default_registry
from .config.loader import ConfigLoader
from .config.models import ExporterConfig
from .config.settings import VERSION
from .exporter import create_app, create_collector, create_registry, create_rtp_proxy, create_server
from .utils.logger import LOG_FORMATS, setup_logger


class ExporterApp:
    """
    Main exporter application.

    Builds the enabled collectors once, then serves one poll cycle per HTTP
    scrape until SIGTERM/SIGINT.
    """

    def __init__(self, config: ExporterConfig, registry: Optional[CollectorRegistry] = None):
        """
        Initialize exporter application.

        Args:
            config: Validated configuration
            registry: Collector registry (defaults to every shipped collector)

        Raises:
            ValueError: If the configuration enables or disables an unknown collector
        """
        self.config = config
        self.logger = setup_logger("kamailio_exporter", config.log_level, config.log_format)
        self.server = None

        self.logger.info(f"Starting kamailio_exporter {VERSION}")

        self.collector_registry = registry or default_registry()
        collectors = self.collector_registry.build(config.kamailio, self.logger, config.collectors)
        self.kamailio_collector = create_collector(config, collectors, self.logger)
        self.metrics_registry = create_registry(self.kamailio_collector)
        self.rtp_proxy = create_rtp_proxy(config, self.logger)

    def _signal_handler(self, signum, frame):
        """
        Handle shutdown signals.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received {signal_name}, shutting down")
        sys.exit(0)

    def run_once(self) -> int:
        """
        Run a single poll cycle and print the exposition to stdout.

        Returns:
            int: 0 if Kamailio was reachable, 1 otherwise
        """
        output = generate_latest(self.metrics_registry)
        sys.stdout.write(output.decode("utf-8"))
        return 0 if self.kamailio_collector.last_result is not None else 1

    def serve(self) -> None:
        """Serve metrics until interrupted."""
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        web = self.config.web
        app = create_app(self.metrics_registry, web.metrics_path, web.rtp_metrics_path, self.rtp_proxy)
        self.server = create_server(app, web.listen_address, web.listen_port)
        self.logger.info(
            f"Listening on {web.listen_address}:{web.listen_port}, "
            f"metrics at {web.metrics_path}, kamailio at {self.config.kamailio.rpc_uri}"
        )
        try:
            self.server.serve_forever()
        finally:
            self.server.server_close()
            self.logger.info("Server stopped")


def parse_collector_flags(enabled: List[str], disabled: List[str]) -> Dict[str, bool]:
    """Collector overrides from --collector / --no-collector (disable wins)."""
    overrides = {name: True for name in enabled}
    overrides.update({name: False for name in disabled})
    return overrides


def build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Configuration overrides from parsed command-line arguments."""
    kamailio: Dict[str, Any] = {}
    web: Dict[str, Any] = {}

    if args.rpc_uri:
        kamailio["rpc_uri"] = args.rpc_uri
    if args.timeout is not None:
        kamailio["timeout_seconds"] = args.timeout
    if args.dispatcher_map:
        kamailio["dispatcher_map"] = args.dispatcher_map
    if args.dialog_profile:
        kamailio["dialog_profiles"] = args.dialog_profile
    if args.listen_address:
        web["listen_address"] = args.listen_address
    if args.listen_port is not None:
        web["listen_port"] = args.listen_port
    if args.metrics_path:
        web["metrics_path"] = args.metrics_path
    if args.custom_metrics_url:
        web["custom_metrics_url"] = args.custom_metrics_url
    if args.rtp_metrics_path is not None:
        web["rtp_metrics_path"] = args.rtp_metrics_path
    if args.rtpengine_metrics_url:
        web["rtpengine_metrics_url"] = args.rtpengine_metrics_url

    overrides: Dict[str, Any] = {}
    if kamailio:
        overrides["kamailio"] = kamailio
    if web:
        overrides["web"] = web
    collectors = parse_collector_flags(args.collector, args.no_collector)
    if collectors:
        overrides["collectors"] = collectors
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_format:
        overrides["log_format"] = args.log_format
    return overrides


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Prometheus exporter for Kamailio servers (BINRPC)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve metrics for a local Kamailio control socket
  kamailio-exporter --rpc-uri unix:///var/run/kamailio/kamailio_ctl

  # Poll over TCP once and print the exposition
  kamailio-exporter --rpc-uri tcp://127.0.0.1:2049 --once

  # Name dispatcher sets and skip the rtpengine collector
  kamailio-exporter --dispatcher-map 1:carriers --no-collector rtpengine.show
        """
    )

    parser.add_argument('--config', help='Path to YAML configuration file')
    parser.add_argument('--rpc-uri', help='Kamailio BINRPC endpoint (tcp://host:port or unix:///path)')
    parser.add_argument('--timeout', type=float, help='Deadline in seconds for one poll cycle')
    parser.add_argument('--listen-address', help='Address to listen on (default: 0.0.0.0)')
    parser.add_argument('--listen-port', type=int, help='Port to listen on (default: 9494)')
    parser.add_argument('--metrics-path', help='Path under which to expose metrics (default: /metrics)')
    parser.add_argument('--custom-metrics-url', help='URL to request user defined metrics from Kamailio')
    parser.add_argument(
        '--rtp-metrics-path',
        help='Path under which to expose rtpengine metrics (default: disabled, empty string disables)'
    )
    parser.add_argument('--rtpengine-metrics-url', help='rtpengine metrics URL to proxy (default: http://127.0.0.1:9901/metrics)')
    parser.add_argument(
        '--collector', action='append', default=[], metavar='NAME',
        help='Enable a collector (repeatable)'
    )
    parser.add_argument(
        '--no-collector', action='append', default=[], metavar='NAME',
        help='Disable a collector (repeatable)'
    )
    parser.add_argument(
        '--dispatcher-map', action='append', default=[], metavar='ID:NAME',
        help='Name a dispatcher set (repeatable)'
    )
    parser.add_argument(
        '--dialog-profile', action='append', default=[], metavar='NAME',
        help='Dialog profile to report the size of (repeatable)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO or LOG_LEVEL env var)'
    )
    parser.add_argument('--log-format', choices=list(LOG_FORMATS), help='Log output format (default: json)')
    parser.add_argument('--once', action='store_true', help='Run one poll cycle, print the metrics and exit')
    parser.add_argument('--version', action='version', version=f'kamailio_exporter {VERSION}')
    return parser


def main():
    """
    CLI entry point.

    Parses command-line arguments and starts the exporter.
    """
    args = build_parser().parse_args()

    try:
        config = ConfigLoader.load(args.config, build_overrides(args))
    except (FileNotFoundError, yaml.YAMLError, ValidationError) as e:
        logging.basicConfig()
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    try:
        app = ExporterApp(config)
    except ValueError as e:
        logging.basicConfig()
        logging.error(f"Application startup failed: {e}")
        sys.exit(1)

    if args.once:
        sys.exit(app.run_once())
    app.serve()


if __name__ == '__main__':
    main()
