"""Periodic HPA polling and condition logging loops"""
import asyncio
import time
from typing import Any, Awaitable, Callable, Optional
from collectors.hpa import HpaCollector
from metrics.exporters.base import ConditionSink
from metrics.projector import project_all
from metrics.registry import HpaMetricsRegistry
from logging_config import get_logger, log_error, log_poll_cycle


logger = get_logger(__name__)


class PeriodicTask:
    """Run an async action, then wait ``interval`` seconds, until stopped.

    Iterations never overlap: the wait starts only after the action returns,
    so a slow action stretches the cadence. Errors raised by the action are
    logged and the loop carries on with the next iteration.
    """

    def __init__(self, name: str, interval: float, action: Callable[[], Awaitable[Any]]):
        self.name = name
        self.interval = interval
        self.action = action
        self.iterations = 0

    async def run(self, stop_event: asyncio.Event, max_iterations: Optional[int] = None) -> int:
        logger.info("Periodic task started", task=self.name, interval=self.interval, event_type="task_start")
        while not stop_event.is_set():
            try:
                await self.action()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log_error(logger, e, {"component": self.name, "iteration": self.iterations})

            self.iterations += 1
            if max_iterations is not None and self.iterations >= max_iterations:
                break

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass

        logger.info("Periodic task stopped", task=self.name, iterations=self.iterations, event_type="task_stop")
        return self.iterations


class MetricsPoller:
    """Fetch autoscaler statuses and repopulate the gauge registry"""

    def __init__(self, collector: HpaCollector, registry: HpaMetricsRegistry):
        self.collector = collector
        self.registry = registry

        self.last_success_time = 0.0
        self.poll_count = 0
        self.poll_errors = 0
        self.autoscaler_count = 0

    async def poll_once(self) -> Optional[int]:
        """Run one poll cycle.

        Returns the number of autoscalers projected, or None when the fetch
        failed. A failed fetch leaves the registry untouched so scrapes keep
        serving the last good values.
        """
        start_time = time.time()
        self.poll_count += 1

        try:
            snapshots = await self.collector.list_statuses_async()
        except Exception as e:
            self.poll_errors += 1
            log_error(logger, e, {"component": "metrics_poller", "phase": "fetch", "poll_count": self.poll_count})
            return None

        # project before clearing to keep the empty window short
        observations = project_all(snapshots)
        self.registry.reset()
        self.registry.observe_all(observations)

        self.autoscaler_count = len(snapshots)
        self.last_success_time = time.time()
        log_poll_cycle(logger, len(snapshots), len(observations), self.last_success_time - start_time)
        return len(snapshots)


class ConditionLogLoop:
    """Fetch autoscaler statuses on its own cadence and hand them to a sink"""

    def __init__(self, collector: HpaCollector, sink: ConditionSink):
        self.collector = collector
        self.sink = sink

        self.last_success_time = 0.0
        self.cycle_count = 0
        self.cycle_errors = 0
        self.records_shipped = 0

    async def ship_once(self) -> Optional[int]:
        """Run one shipment cycle; returns records written or None on error"""
        self.cycle_count += 1

        try:
            snapshots = await self.collector.list_statuses_async()
        except Exception as e:
            self.cycle_errors += 1
            log_error(logger, e, {"component": "condition_logging", "phase": "fetch"})
            return None

        loop = asyncio.get_running_loop()
        try:
            shipped = await loop.run_in_executor(None, self.sink.ship, snapshots)
        except Exception as e:
            self.cycle_errors += 1
            log_error(logger, e, {"component": "condition_logging", "phase": "ship", "sink": self.sink.name})
            return None

        self.records_shipped += shipped
        self.last_success_time = time.time()
        return shipped
