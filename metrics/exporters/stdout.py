"""Condition records written to the process log"""
from typing import Sequence
from .base import ConditionSink, records_for
from metrics.models import AutoscalerStatusSnapshot
from logging_config import get_logger


class StdoutConditionLogger(ConditionSink):
    """Log one JSON condition record per autoscaler"""

    def __init__(self, config, logger=None):
        super().__init__(config)
        self.logger = logger or get_logger("hpa_exporter.conditions")

    def ship(self, snapshots: Sequence[AutoscalerStatusSnapshot]) -> int:
        records = records_for(snapshots)
        for record in records:
            self.logger.info(record, event_type="hpa_condition")
        return len(records)
