"""Autoscaler status models and label schemas"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple


# Sentinel for label values the metric source has no natural name for
NO_NAME = "-"

BASE_LABELS = (
    "hpa_name",
    "hpa_namespace",
    "ref_kind",
    "ref_name",
    "ref_apiversion",
)

METRIC_LABELS = (
    "metric_kind",
    "metric_name",
    "metric_metricname",
)

CONDITION_LABELS = (
    "cond_status",
    "cond_reason",
    "cond_message",
)


class MetricSourceType(Enum):
    """Metric source kinds understood by the projector"""
    OBJECT = "Object"
    PODS = "Pods"
    RESOURCE = "Resource"
    EXTERNAL = "External"


class ConditionType(Enum):
    """Autoscaler condition types exported as gauges"""
    ABLE_TO_SCALE = "AbleToScale"
    SCALING_ACTIVE = "ScalingActive"
    SCALING_LIMITED = "ScalingLimited"


class ConditionStatus(Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ObjectReference:
    """Reference to a Kubernetes object (scale target or described object)"""
    kind: str
    name: str
    api_version: str = ""


@dataclass(frozen=True)
class ObjectMetricSource:
    target: ObjectReference
    metric_name: str
    value: Optional[str] = None
    average_value: Optional[str] = None


@dataclass(frozen=True)
class PodsMetricSource:
    metric_name: str
    average_value: Optional[str] = None


@dataclass(frozen=True)
class ResourceMetricSource:
    name: str
    average_utilization: Optional[int] = None
    average_value: Optional[str] = None


@dataclass(frozen=True)
class ExternalMetricSource:
    metric_name: str
    value: Optional[str] = None
    average_value: Optional[str] = None


@dataclass(frozen=True)
class MetricSource:
    """One entry of the target or current metric list.

    ``type`` is the raw kind string from the API; exactly one of the variant
    fields is populated for a known kind. The same shape carries target
    readings (spec) and current readings (status), the quantities being the
    target or the observed value respectively.
    """
    type: str
    object: Optional[ObjectMetricSource] = None
    pods: Optional[PodsMetricSource] = None
    resource: Optional[ResourceMetricSource] = None
    external: Optional[ExternalMetricSource] = None


@dataclass(frozen=True)
class Condition:
    type: str
    status: str
    reason: str = ""
    message: str = ""
    last_transition_time: Optional[datetime] = None


@dataclass(frozen=True)
class AutoscalerStatusSnapshot:
    """A fetched autoscaler: identity, replica bounds, metrics and conditions"""
    name: str
    namespace: str
    scale_target_ref: ObjectReference
    current_replicas: int
    desired_replicas: int
    max_replicas: int
    min_replicas: Optional[int] = None
    last_scale_time: Optional[datetime] = None
    metrics: Tuple[MetricSource, ...] = ()
    current_metrics: Tuple[MetricSource, ...] = ()
    conditions: Tuple[Condition, ...] = ()

    def base_labels(self) -> Dict[str, str]:
        """Labels identifying the scaled object"""
        return {
            "hpa_name": self.name,
            "hpa_namespace": self.namespace,
            "ref_kind": self.scale_target_ref.kind,
            "ref_name": self.scale_target_ref.name,
            "ref_apiversion": self.scale_target_ref.api_version,
        }


@dataclass
class MetricRecord:
    """Normalized reading extracted from one metric source"""
    kind: str
    name: str
    metric_name: str
    value: float

    def labels(self) -> Dict[str, str]:
        return {
            "metric_kind": self.kind,
            "metric_name": self.name,
            "metric_metricname": self.metric_name,
        }


class Observation(NamedTuple):
    """A value to set on a gauge for one label combination"""
    gauge: str
    labels: Dict[str, str]
    value: float


@dataclass
class Projection:
    """Everything projected from one snapshot"""
    base_labels: Dict[str, str]
    observations: List[Observation] = field(default_factory=list)
