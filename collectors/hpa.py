"""HorizontalPodAutoscaler status collector backed by the Kubernetes API"""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import List, Optional
from kubernetes import client as k8s_client, config as k8s_config
from kubernetes.config.config_exception import ConfigException
from metrics.models import (
    AutoscalerStatusSnapshot,
    Condition,
    ExternalMetricSource,
    MetricSource,
    ObjectMetricSource,
    ObjectReference,
    PodsMetricSource,
    ResourceMetricSource,
)
from logging_config import get_logger


logger = get_logger(__name__)


class HpaClientError(Exception):
    """The Kubernetes client could not be constructed"""


def _reference(ref) -> ObjectReference:
    if ref is None:
        return ObjectReference(kind="", name="", api_version="")
    return ObjectReference(
        kind=ref.kind or "",
        name=ref.name or "",
        api_version=getattr(ref, "api_version", None) or "",
    )


def _metric_name(source) -> str:
    metric = getattr(source, "metric", None)
    if metric is None:
        return ""
    return metric.name or ""


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _metric_source(entry, reading: str) -> MetricSource:
    """Convert a V2MetricSpec or V2MetricStatus.

    ``reading`` names the quantity block: ``target`` for specs and
    ``current`` for statuses.
    """
    obj = pods = resource = external = None

    if entry.object is not None:
        quantities = getattr(entry.object, reading, None)
        obj = ObjectMetricSource(
            target=_reference(entry.object.described_object),
            metric_name=_metric_name(entry.object),
            value=getattr(quantities, "value", None),
            average_value=getattr(quantities, "average_value", None),
        )
    if entry.pods is not None:
        quantities = getattr(entry.pods, reading, None)
        pods = PodsMetricSource(
            metric_name=_metric_name(entry.pods),
            average_value=getattr(quantities, "average_value", None),
        )
    if entry.resource is not None:
        quantities = getattr(entry.resource, reading, None)
        resource = ResourceMetricSource(
            name=entry.resource.name or "",
            average_utilization=getattr(quantities, "average_utilization", None),
            average_value=getattr(quantities, "average_value", None),
        )
    if entry.external is not None:
        quantities = getattr(entry.external, reading, None)
        external = ExternalMetricSource(
            metric_name=_metric_name(entry.external),
            value=getattr(quantities, "value", None),
            average_value=getattr(quantities, "average_value", None),
        )

    return MetricSource(type=entry.type or "", object=obj, pods=pods, resource=resource, external=external)


def snapshot_from_api(hpa) -> AutoscalerStatusSnapshot:
    """Convert a V2HorizontalPodAutoscaler into an immutable snapshot"""
    spec = hpa.spec
    status = hpa.status

    conditions = tuple(
        Condition(
            type=cond.type,
            status=cond.status,
            reason=cond.reason or "",
            message=cond.message or "",
            last_transition_time=_aware(cond.last_transition_time),
        )
        for cond in (status.conditions or [])
    )

    return AutoscalerStatusSnapshot(
        name=hpa.metadata.name,
        namespace=hpa.metadata.namespace,
        scale_target_ref=_reference(spec.scale_target_ref),
        current_replicas=status.current_replicas or 0,
        desired_replicas=status.desired_replicas or 0,
        max_replicas=spec.max_replicas,
        min_replicas=spec.min_replicas,
        last_scale_time=_aware(status.last_scale_time),
        metrics=tuple(_metric_source(m, "target") for m in (spec.metrics or [])),
        current_metrics=tuple(_metric_source(m, "current") for m in (status.current_metrics or [])),
        conditions=conditions,
    )


class HpaCollector:
    """Lists autoscaler statuses across all namespaces"""

    def __init__(self, autoscaling_api, max_workers: int = 2):
        self.autoscaling_api = autoscaling_api
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hpa_collector")

    @classmethod
    def from_config(cls, config) -> "HpaCollector":
        """Build a collector from settings, raising HpaClientError on failure"""
        try:
            if config.run_mode == "in_cluster":
                configuration = k8s_client.Configuration()
                k8s_config.load_incluster_config(client_configuration=configuration)
                api_client = k8s_client.ApiClient(configuration)
            else:
                config_file = str(config.kubeconfig) if config.kubeconfig else None
                api_client = k8s_config.new_client_from_config(config_file=config_file)
        except (ConfigException, OSError, TypeError) as e:
            raise HpaClientError(f"Failed to create Kubernetes client ({config.run_mode}): {e}") from e

        logger.info("Kubernetes client created", run_mode=config.run_mode, event_type="client_startup")
        return cls(k8s_client.AutoscalingV2Api(api_client))

    def list_statuses(self) -> List[AutoscalerStatusSnapshot]:
        """Fetch every autoscaler; API errors propagate to the caller"""
        response = self.autoscaling_api.list_horizontal_pod_autoscaler_for_all_namespaces()
        snapshots = [snapshot_from_api(item) for item in (response.items or [])]
        logger.debug("Fetched HPA statuses", count=len(snapshots), event_type="hpa_fetch")
        return snapshots

    async def list_statuses_async(self) -> List[AutoscalerStatusSnapshot]:
        """Async version of list_statuses"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.list_statuses)

    def cleanup(self):
        """Cleanup resources"""
        self._executor.shutdown(wait=False)
