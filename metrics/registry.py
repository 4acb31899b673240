"""Gauge registry holding the exported HPA series between polls"""
import threading
from typing import Dict, Iterable, List, Tuple
from prometheus_client import CollectorRegistry, Gauge
from .models import BASE_LABELS, METRIC_LABELS, CONDITION_LABELS, Observation


HPA_CURRENT_PODS_NUM = "hpa_current_pods_num"
HPA_DESIRED_PODS_NUM = "hpa_desired_pods_num"
HPA_MIN_PODS_NUM = "hpa_min_pods_num"
HPA_MAX_PODS_NUM = "hpa_max_pods_num"
HPA_LAST_SCALE_SECOND = "hpa_last_scale_second"
HPA_CURRENT_METRICS_VALUE = "hpa_current_metrics_value"
HPA_TARGET_METRICS_VALUE = "hpa_target_metrics_value"
HPA_ABLE_TO_SCALE = "hpa_able_to_scale"
HPA_SCALING_ACTIVE = "hpa_scaling_active"
HPA_SCALING_LIMITED = "hpa_scaling_limited"

# name, help text, label schema
GAUGE_DEFINITIONS: List[Tuple[str, str, Tuple[str, ...]]] = [
    (HPA_CURRENT_PODS_NUM, "Number of current pods by status.", BASE_LABELS),
    (HPA_DESIRED_PODS_NUM, "Number of desired pods by status.", BASE_LABELS),
    (HPA_MIN_PODS_NUM, "Number of min pods by spec.", BASE_LABELS),
    (HPA_MAX_PODS_NUM, "Number of max pods by spec.", BASE_LABELS),
    (HPA_LAST_SCALE_SECOND, "Time the scale was last executed.", BASE_LABELS),
    (HPA_CURRENT_METRICS_VALUE, "Current Metrics Value.", BASE_LABELS + METRIC_LABELS),
    (HPA_TARGET_METRICS_VALUE, "Target Metrics Value.", BASE_LABELS + METRIC_LABELS),
    (HPA_ABLE_TO_SCALE, "status able to scale from annotation.", BASE_LABELS + CONDITION_LABELS),
    (HPA_SCALING_ACTIVE, "status scaling active from annotation.", BASE_LABELS + CONDITION_LABELS),
    (HPA_SCALING_LIMITED, "status scaling limited from annotation.", BASE_LABELS + CONDITION_LABELS),
]


class HpaMetricsRegistry:
    """Named gauge collections keyed by fixed label schemas.

    Wraps its own ``CollectorRegistry`` rather than the process-wide default
    one, so several instances can coexist (tests, multiple servers). The only
    mutation entry points are ``reset`` and ``observe``; a single poller is
    expected to be the writer while exposition requests read concurrently.
    """

    def __init__(self):
        self.collector_registry = CollectorRegistry(auto_describe=True)
        self.gauges: Dict[str, Gauge] = {}
        self.schemas: Dict[str, Tuple[str, ...]] = {}
        self._write_lock = threading.Lock()

        for name, help_text, label_names in GAUGE_DEFINITIONS:
            self.gauges[name] = Gauge(
                name,
                help_text,
                labelnames=label_names,
                registry=self.collector_registry,
            )
            self.schemas[name] = label_names

    def reset(self) -> None:
        """Drop every label combination from every gauge"""
        with self._write_lock:
            for gauge in self.gauges.values():
                gauge.clear()

    def observe(self, gauge_name: str, labels: Dict[str, str], value: float) -> None:
        """Set or overwrite the value for one exact label combination.

        Unknown gauge names and label sets that do not match the gauge's
        schema raise, since they can only come from a programming error.
        """
        gauge = self.gauges.get(gauge_name)
        if gauge is None:
            raise KeyError(f"Unknown gauge: {gauge_name}")
        expected = set(self.schemas[gauge_name])
        if set(labels) != expected:
            raise ValueError(
                f"Label mismatch for {gauge_name}: expected {sorted(expected)}, got {sorted(labels)}"
            )
        with self._write_lock:
            gauge.labels(**labels).set(value)

    def observe_all(self, observations: Iterable[Observation]) -> int:
        """Apply a batch of observations, returning how many were set"""
        count = 0
        for observation in observations:
            self.observe(observation.gauge, observation.labels, observation.value)
            count += 1
        return count

    def samples(self, gauge_name: str) -> Dict[Tuple[Tuple[str, str], ...], float]:
        """Current label combinations and values of one gauge"""
        result = {}
        for metric in self.gauges[gauge_name].collect():
            for sample in metric.samples:
                result[tuple(sorted(sample.labels.items()))] = sample.value
        return result

    def names(self) -> List[str]:
        return list(self.gauges.keys())
