"""Tests for the gauge registry"""
import pytest
from prometheus_client import generate_latest
from prometheus_client.parser import text_string_to_metric_families

from metrics.models import Condition, MetricSource, ResourceMetricSource
from metrics.projector import project_all
from metrics.registry import (
    GAUGE_DEFINITIONS,
    HPA_ABLE_TO_SCALE,
    HPA_CURRENT_METRICS_VALUE,
    HPA_CURRENT_PODS_NUM,
    HPA_DESIRED_PODS_NUM,
    HPA_MAX_PODS_NUM,
    HPA_MIN_PODS_NUM,
    HpaMetricsRegistry,
)


BASE = {
    "hpa_name": "web",
    "hpa_namespace": "prod",
    "ref_kind": "Deployment",
    "ref_name": "web",
    "ref_apiversion": "apps/v1",
}


class TestHpaMetricsRegistry:
    """Test gauge registry behaviour"""

    def test_declares_every_gauge(self, registry):
        assert registry.names() == [name for name, _, _ in GAUGE_DEFINITIONS]

    def test_registries_are_independent(self):
        first = HpaMetricsRegistry()
        second = HpaMetricsRegistry()

        first.observe(HPA_CURRENT_PODS_NUM, BASE, 3)

        assert second.samples(HPA_CURRENT_PODS_NUM) == {}

    def test_observe_sets_and_overwrites(self, registry):
        registry.observe(HPA_CURRENT_PODS_NUM, BASE, 3)
        registry.observe(HPA_CURRENT_PODS_NUM, BASE, 5)

        samples = registry.samples(HPA_CURRENT_PODS_NUM)

        assert list(samples.values()) == [5.0]

    def test_observe_rejects_missing_labels(self, registry):
        labels = dict(BASE)
        del labels["ref_kind"]

        with pytest.raises(ValueError):
            registry.observe(HPA_CURRENT_PODS_NUM, labels, 1)

    def test_observe_rejects_extra_labels(self, registry):
        labels = dict(BASE, metric_kind="Pod")

        with pytest.raises(ValueError):
            registry.observe(HPA_CURRENT_PODS_NUM, labels, 1)

    def test_observe_rejects_unknown_gauge(self, registry):
        with pytest.raises(KeyError):
            registry.observe("hpa_unknown", BASE, 1)

    def test_reset_clears_every_gauge(self, registry, make_snapshot):
        snapshot = make_snapshot(
            conditions=(Condition(type="AbleToScale", status="True"),),
            current_metrics=(MetricSource(type="Resource", resource=ResourceMetricSource(name="cpu", average_utilization=50)),),
        )
        registry.observe_all(project_all([snapshot]))

        registry.reset()

        for name in registry.names():
            assert registry.samples(name) == {}

    def test_reset_is_idempotent(self, registry):
        registry.reset()
        registry.reset()

        for name in registry.names():
            assert registry.samples(name) == {}

    def test_vanished_objects_stop_reporting(self, registry, make_snapshot):
        registry.observe_all(project_all([make_snapshot(name="web"), make_snapshot(name="api")]))

        registry.reset()
        registry.observe_all(project_all([make_snapshot(name="web")]))

        names = {dict(key)["hpa_name"] for key in registry.samples(HPA_CURRENT_PODS_NUM)}
        assert names == {"web"}

    def test_single_autoscaler_scenario(self, registry, make_snapshot):
        snapshot = make_snapshot(min_replicas=2, max_replicas=10, current_replicas=3, desired_replicas=3)

        registry.reset()
        count = registry.observe_all(project_all([snapshot]))

        assert count == 4
        key = tuple(sorted(BASE.items()))
        assert registry.samples(HPA_CURRENT_PODS_NUM) == {key: 3.0}
        assert registry.samples(HPA_DESIRED_PODS_NUM) == {key: 3.0}
        assert registry.samples(HPA_MIN_PODS_NUM) == {key: 2.0}
        assert registry.samples(HPA_MAX_PODS_NUM) == {key: 10.0}
        assert registry.samples(HPA_CURRENT_METRICS_VALUE) == {}
        assert registry.samples(HPA_ABLE_TO_SCALE) == {}

    def test_exposition_format(self, registry):
        registry.observe(HPA_MAX_PODS_NUM, BASE, 10)

        output = generate_latest(registry.collector_registry).decode("utf-8")

        assert "# HELP hpa_max_pods_num Number of max pods by spec." in output
        assert "# TYPE hpa_max_pods_num gauge" in output
        families = {family.name: family for family in text_string_to_metric_families(output)}
        (sample,) = families[HPA_MAX_PODS_NUM].samples
        assert sample.labels == BASE
        assert sample.value == 10.0
