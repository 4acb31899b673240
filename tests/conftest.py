"""Shared fixtures for HPA exporter tests"""
from datetime import datetime, timezone
import pytest

from metrics.models import (
    AutoscalerStatusSnapshot,
    Condition,
    ObjectReference,
)
from metrics.registry import HpaMetricsRegistry


def build_snapshot(name="web", namespace="prod", **overrides) -> AutoscalerStatusSnapshot:
    fields = dict(
        name=name,
        namespace=namespace,
        scale_target_ref=ObjectReference(kind="Deployment", name=name, api_version="apps/v1"),
        current_replicas=3,
        desired_replicas=3,
        max_replicas=10,
        min_replicas=2,
    )
    fields.update(overrides)
    return AutoscalerStatusSnapshot(**fields)


@pytest.fixture
def make_snapshot():
    """Factory for autoscaler snapshots with sensible defaults"""
    return build_snapshot


@pytest.fixture
def registry():
    return HpaMetricsRegistry()


@pytest.fixture
def able_to_scale():
    return Condition(
        type="AbleToScale",
        status="True",
        reason="ReadyForNewScale",
        message="recommended size matches current size",
        last_transition_time=datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc),
    )
