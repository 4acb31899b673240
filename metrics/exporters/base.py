"""Condition sink interface, record serialization and factory"""
import abc
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from config import Config, LOGGING_TO_CWLOGS, LOGGING_TO_STDOUT
from metrics.models import AutoscalerStatusSnapshot, Condition
from logging_config import get_logger


logger = get_logger(__name__)

EMPTY_RECORD = "{}"


def _rfc3339(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _condition_dict(condition: Condition) -> Dict[str, Any]:
    data = {
        "type": condition.type,
        "status": condition.status,
        "lastTransitionTime": _rfc3339(condition.last_transition_time),
    }
    # reason and message are omitted when empty, as in the API encoding
    if condition.reason:
        data["reason"] = condition.reason
    if condition.message:
        data["message"] = condition.message
    return data


def condition_record(snapshot: AutoscalerStatusSnapshot) -> str:
    """Serialize an autoscaler to a compact ``{name, conditions}`` JSON record.

    A snapshot that cannot be serialized degrades to ``{}`` so one bad
    object never drops the rest of a batch.
    """
    try:
        return json.dumps(
            {
                "name": snapshot.name,
                "conditions": [_condition_dict(c) for c in snapshot.conditions],
            },
            separators=(",", ":"),
            ensure_ascii=False,
        )
    except (TypeError, ValueError, AttributeError) as e:
        logger.error("Condition record serialization failed", error=str(e), event_type="serialization_error")
        return EMPTY_RECORD


class ConditionSink(abc.ABC):
    """Destination for per-cycle autoscaler condition records"""

    def __init__(self, config: Config):
        self.config = config

    def prepare(self) -> None:
        """One-time startup check; raising here is fatal"""

    @abc.abstractmethod
    def ship(self, snapshots: Sequence[AutoscalerStatusSnapshot]) -> int:
        """Write one record per snapshot, returning the number written"""

    @property
    def name(self) -> str:
        return self.__class__.__name__


class ExporterFactory:
    """Factory for creating condition sinks based on configuration"""

    @staticmethod
    def create_condition_sink(config: Config, logs_client=None) -> ConditionSink:
        """Create a sink for the configured log destination"""
        if config.logging_to == LOGGING_TO_STDOUT:
            from .stdout import StdoutConditionLogger
            return StdoutConditionLogger(config)
        elif config.logging_to == LOGGING_TO_CWLOGS:
            from .cloudwatch import CloudWatchLogShipper
            return CloudWatchLogShipper(config, logs_client=logs_client)
        else:
            raise ValueError(f"invalid value `{config.logging_to}` of `logging_to`, specify either `stdout` or `cwlogs`")


def records_for(snapshots: Sequence[AutoscalerStatusSnapshot]) -> List[str]:
    return [condition_record(snapshot) for snapshot in snapshots]
