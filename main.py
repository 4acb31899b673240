#!/usr/bin/env python3
"""Main entry point for the HPA exporter"""
import sys
import uvicorn
from config import Config
from app.server import ExporterServer
from collectors.hpa import HpaCollector
from metrics.exporters.base import ExporterFactory
from metrics.registry import HpaMetricsRegistry
from logging_config import setup_structured_logging, get_logger, log_server_startup, log_error


def build_server(config: Config) -> ExporterServer:
    """Compose the exporter; any failure here is fatal"""
    collector = HpaCollector.from_config(config)

    sink = None
    if config.condition_logging:
        sink = ExporterFactory.create_condition_sink(config)
        sink.prepare()

    return ExporterServer(config, collector, registry=HpaMetricsRegistry(), sink=sink)


def main():
    """Main application entry point"""
    try:
        config = Config()

        setup_structured_logging(config)
        logger = get_logger(__name__)

        log_server_startup(logger, config)

        server = build_server(config)
        app = server.get_app()

        uvicorn.run(
            app,
            host=config.metrics_host,
            port=config.metrics_port,
            log_config=None  # We handle logging ourselves
        )

    except Exception as e:
        logger = get_logger(__name__)
        log_error(logger, e, {"component": "main", "phase": "startup"})
        sys.exit(1)


if __name__ == '__main__':
    main()
