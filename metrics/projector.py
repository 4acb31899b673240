"""Projection of autoscaler status snapshots onto labeled gauge observations.

Everything here is pure: a snapshot goes in, a list of observations comes
out, and the caller decides which registry receives them.
"""
from typing import Callable, Dict, Iterable, List, Optional, Tuple
from .models import (
    AutoscalerStatusSnapshot,
    Condition,
    ConditionStatus,
    ConditionType,
    ExternalMetricSource,
    MetricRecord,
    MetricSource,
    MetricSourceType,
    NO_NAME,
    ObjectMetricSource,
    Observation,
    PodsMetricSource,
    Projection,
    ResourceMetricSource,
)
from .registry import (
    HPA_ABLE_TO_SCALE,
    HPA_CURRENT_METRICS_VALUE,
    HPA_CURRENT_PODS_NUM,
    HPA_DESIRED_PODS_NUM,
    HPA_LAST_SCALE_SECOND,
    HPA_MAX_PODS_NUM,
    HPA_MIN_PODS_NUM,
    HPA_SCALING_ACTIVE,
    HPA_SCALING_LIMITED,
    HPA_TARGET_METRICS_VALUE,
)
from utils.quantity import milli_scaled


CONDITION_GAUGES = {
    ConditionType.ABLE_TO_SCALE.value: HPA_ABLE_TO_SCALE,
    ConditionType.SCALING_ACTIVE.value: HPA_SCALING_ACTIVE,
    ConditionType.SCALING_LIMITED.value: HPA_SCALING_LIMITED,
}


def extract_object(source: ObjectMetricSource) -> MetricRecord:
    quantity = source.value if source.value is not None else source.average_value
    return MetricRecord(
        kind=source.target.kind,
        name=source.target.name,
        metric_name=source.metric_name,
        value=milli_scaled(quantity),
    )


def extract_pods(source: PodsMetricSource) -> MetricRecord:
    return MetricRecord(
        kind="Pod",
        name=NO_NAME,
        metric_name=source.metric_name,
        value=milli_scaled(source.average_value),
    )


def extract_resource(source: ResourceMetricSource) -> MetricRecord:
    # utilization is a plain percentage, not a quantity
    if source.average_utilization is None:
        value = milli_scaled(source.average_value)
    else:
        value = float(source.average_utilization)
    return MetricRecord(
        kind="Resource",
        name=str(source.name),
        metric_name=NO_NAME,
        value=value,
    )


def extract_external(source: ExternalMetricSource) -> MetricRecord:
    if source.average_value is None:
        value = milli_scaled(source.value)
    else:
        value = milli_scaled(source.average_value)
    return MetricRecord(
        kind="External",
        name=NO_NAME,
        metric_name=source.metric_name,
        value=value,
    )


# kind -> (variant attribute on MetricSource, extractor)
EXTRACTORS: Dict[str, Tuple[str, Callable[..., MetricRecord]]] = {
    MetricSourceType.OBJECT.value: ("object", extract_object),
    MetricSourceType.PODS.value: ("pods", extract_pods),
    MetricSourceType.RESOURCE.value: ("resource", extract_resource),
    MetricSourceType.EXTERNAL.value: ("external", extract_external),
}


def extract_metric(metric: MetricSource) -> Optional[MetricRecord]:
    """Normalize one metric source; unknown kinds and empty variants yield None"""
    entry = EXTRACTORS.get(metric.type)
    if entry is None:
        return None
    attribute, extractor = entry
    source = getattr(metric, attribute)
    if source is None:
        return None
    return extractor(source)


def condition_labels(condition: Condition) -> Tuple[Dict[str, str], Dict[str, str]]:
    """Build the forward and reverse condition label sets.

    The forward set carries the condition as reported. The reverse set carries
    the opposite boolean status with reason and message cleared. Anything
    other than "True" reverses to "True".
    """
    forward = {
        "cond_status": str(condition.status),
        "cond_reason": condition.reason or "",
        "cond_message": condition.message or "",
    }
    if condition.status == ConditionStatus.TRUE.value:
        reverse_status = ConditionStatus.FALSE.value
    else:
        reverse_status = ConditionStatus.TRUE.value
    reverse = {
        "cond_status": reverse_status,
        "cond_reason": "",
        "cond_message": "",
    }
    return forward, reverse


def _metric_observations(gauge: str, base: Dict[str, str], metrics: Iterable[MetricSource]) -> List[Observation]:
    observations = []
    for metric in metrics:
        record = extract_metric(metric)
        if record is None:
            continue
        observations.append(Observation(gauge, {**base, **record.labels()}, record.value))
    return observations


def _condition_observations(base: Dict[str, str], conditions: Iterable[Condition]) -> List[Observation]:
    observations = []
    for condition in conditions:
        gauge = CONDITION_GAUGES.get(condition.type)
        if gauge is None:
            continue
        forward, reverse = condition_labels(condition)
        observations.append(Observation(gauge, {**base, **forward}, 1.0))
        observations.append(Observation(gauge, {**base, **reverse}, 0.0))
    return observations


def project(snapshot: AutoscalerStatusSnapshot) -> Projection:
    """Project one autoscaler snapshot onto gauge observations"""
    base = snapshot.base_labels()
    observations = [
        Observation(HPA_CURRENT_PODS_NUM, dict(base), float(snapshot.current_replicas)),
        Observation(HPA_DESIRED_PODS_NUM, dict(base), float(snapshot.desired_replicas)),
    ]
    if snapshot.min_replicas is not None:
        observations.append(Observation(HPA_MIN_PODS_NUM, dict(base), float(snapshot.min_replicas)))
    observations.append(Observation(HPA_MAX_PODS_NUM, dict(base), float(snapshot.max_replicas)))
    if snapshot.last_scale_time is not None:
        observations.append(
            Observation(HPA_LAST_SCALE_SECOND, dict(base), float(int(snapshot.last_scale_time.timestamp())))
        )

    observations.extend(_metric_observations(HPA_TARGET_METRICS_VALUE, base, snapshot.metrics))
    observations.extend(_metric_observations(HPA_CURRENT_METRICS_VALUE, base, snapshot.current_metrics))
    observations.extend(_condition_observations(base, snapshot.conditions))

    return Projection(base_labels=base, observations=observations)


def project_all(snapshots: Iterable[AutoscalerStatusSnapshot]) -> List[Observation]:
    """Flatten the projections of a whole poll into one observation list"""
    observations = []
    for snapshot in snapshots:
        observations.extend(project(snapshot).observations)
    return observations
