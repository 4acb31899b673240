"""FastAPI server setup and routes"""
import asyncio
import os
import time
from typing import List, Optional
from fastapi import FastAPI, Response, HTTPException
from fastapi.responses import HTMLResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from config import Config
from collectors.hpa import HpaCollector
from metrics.exporters.base import ConditionSink
from metrics.registry import HpaMetricsRegistry
from app.poller import ConditionLogLoop, MetricsPoller, PeriodicTask
from logging_config import get_logger


logger = get_logger(__name__)


ROOT_DOC = """<html>
<head><title>HPA Exporter</title></head>
<body>
<h1>HPA Exporter</h1>
<p><a href="/metrics">Metrics</a></p>
</body>
</html>
"""


class ExporterServer:
    """FastAPI server exposing HPA status gauges"""

    def __init__(self, config: Config, collector: HpaCollector,
                 registry: Optional[HpaMetricsRegistry] = None,
                 sink: Optional[ConditionSink] = None):
        self.config = config
        self.collector = collector
        self.app = FastAPI(
            title="HPA Exporter",
            version=config.service_version,
            docs_url=None,
            redoc_url=None,
            openapi_url=None
        )
        self.registry = registry or HpaMetricsRegistry()
        self.poller = MetricsPoller(collector, self.registry)

        self.condition_loop = None
        if config.condition_logging and sink is not None:
            self.condition_loop = ConditionLogLoop(collector, sink)

        self.start_time = time.time()
        self.tasks: List[asyncio.Task] = []
        self._stop_event: Optional[asyncio.Event] = None

        self._setup_routes()
        self._setup_events()

    def _setup_routes(self):
        """Setup FastAPI routes"""

        @self.app.get('/metrics', response_class=Response)
        def get_metrics():
            """Serve the gauge registry in Prometheus text format"""
            content = generate_latest(self.registry.collector_registry)
            return Response(content, media_type=CONTENT_TYPE_LATEST)

        @self.app.get('/health')
        def health_check():
            """Healthy while the last successful poll is recent"""
            last = self.poller.last_success_time
            age = time.time() - last if last > 0 else float('inf')
            is_healthy = age < self.config.metrics_interval * 2

            health_data = {
                "status": "healthy" if is_healthy else "unhealthy",
                "last_poll_seconds_ago": round(age, 1) if age != float('inf') else None,
                "metrics_interval": self.config.metrics_interval,
                "total_polls": self.poller.poll_count,
                "poll_errors": self.poller.poll_errors,
            }

            if not is_healthy:
                raise HTTPException(status_code=503, detail=health_data)

            return health_data

        @self.app.get('/status')
        def get_status():
            """Detailed status information"""
            last = self.poller.last_success_time
            age = time.time() - last if last > 0 else float('inf')

            condition_logging = {
                "enabled": self.condition_loop is not None,
                "logging_to": self.config.logging_to,
                "interval_seconds": self.config.logging_interval,
            }
            if self.condition_loop is not None:
                condition_logging.update({
                    "sink": self.condition_loop.sink.name,
                    "total_cycles": self.condition_loop.cycle_count,
                    "cycle_errors": self.condition_loop.cycle_errors,
                    "records_shipped": self.condition_loop.records_shipped,
                })

            return {
                "service": {
                    "name": self.config.service_name,
                    "version": self.config.service_version,
                    "uptime_seconds": round(time.time() - self.start_time, 1),
                    "hostname": os.uname().nodename
                },
                "polling": {
                    "interval_seconds": self.config.metrics_interval,
                    "last_poll_seconds_ago": round(age, 1) if age != float('inf') else None,
                    "total_polls": self.poller.poll_count,
                    "poll_errors": self.poller.poll_errors,
                    "autoscalers": self.poller.autoscaler_count,
                    "success_rate": round((self.poller.poll_count - self.poller.poll_errors) / max(self.poller.poll_count, 1) * 100, 1)
                },
                "condition_logging": condition_logging,
                "gauges": self.registry.names(),
            }

        @self.app.get('/', response_class=HTMLResponse)
        def index():
            """Landing page"""
            return ROOT_DOC

    def _setup_events(self):
        """Setup FastAPI startup/shutdown events"""

        @self.app.on_event("startup")
        async def startup_event():
            await self.start_background_tasks()

        @self.app.on_event("shutdown")
        async def shutdown_event():
            await self.stop_background_tasks()

    async def start_background_tasks(self):
        """Start the metrics poller and, if enabled, the condition log loop"""
        self.start_time = time.time()
        self._stop_event = asyncio.Event()

        metrics_task = PeriodicTask("metrics_poller", self.config.metrics_interval, self.poller.poll_once)
        self.tasks.append(asyncio.create_task(metrics_task.run(self._stop_event)))

        if self.condition_loop is not None:
            condition_task = PeriodicTask("condition_logging", self.config.logging_interval, self.condition_loop.ship_once)
            self.tasks.append(asyncio.create_task(condition_task.run(self._stop_event)))

        logger.info(
            "Background tasks started",
            metrics_interval=self.config.metrics_interval,
            condition_logging=self.condition_loop is not None,
            event_type="server_startup"
        )

    async def stop_background_tasks(self):
        """Signal the loops to stop and wait for them"""
        logger.info("Shutting down HPA exporter", event_type="server_shutdown")
        if self._stop_event is not None:
            self._stop_event.set()
        if self.tasks:
            await asyncio.gather(*self.tasks, return_exceptions=True)
            self.tasks = []
        self.collector.cleanup()

    def get_app(self) -> FastAPI:
        """Get the FastAPI application"""
        return self.app
