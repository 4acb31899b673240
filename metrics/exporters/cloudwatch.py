"""CloudWatch Logs shipper for autoscaler condition records.

CloudWatch Logs owns append continuity for a stream: every append may need
the stream's current upload sequence token, and the store rejects a stale
one. The token is therefore looked up before every batch instead of being
cached, since other writers may advance the stream between cycles. Missing
streams are created on demand; a missing log group is created once at
startup by ``prepare`` and is fatal if that fails.
"""
import time
from typing import Callable, Optional, Sequence
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from .base import ConditionSink, records_for
from metrics.models import AutoscalerStatusSnapshot
from logging_config import get_logger


logger = get_logger(__name__)

ALREADY_EXISTS = "ResourceAlreadyExistsException"


class LogGroupError(Exception):
    """The configured log group is missing and could not be created"""


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def create_logs_client(config):
    """Create a CloudWatch Logs client using the boto3 default credential chain"""
    return boto3.client("logs", region_name=config.aws_region)


class CloudWatchLogShipper(ConditionSink):
    """Append condition records to a CloudWatch Logs stream, one batch per cycle"""

    def __init__(self, config, logs_client=None, clock: Callable[[], float] = time.time):
        super().__init__(config)
        self.log_group = config.cw_log_group
        self.log_stream = config.cw_log_stream
        self.client = logs_client if logs_client is not None else create_logs_client(config)
        self._clock = clock
        self.batches_sent = 0

    def prepare(self) -> None:
        """Ensure the log group exists, creating it when absent"""
        self.ensure_log_group()

    def ensure_log_group(self) -> None:
        try:
            response = self.client.describe_log_groups(logGroupNamePrefix=self.log_group)
            # listings are name ordered, so an exact match sorts first
            names = [group.get("logGroupName") for group in response.get("logGroups", [])]
            if self.log_group in names:
                logger.info("Log group found", log_group=self.log_group, event_type="log_group_check")
                return

            logger.info("Creating log group", log_group=self.log_group, event_type="log_group_create")
            try:
                self.client.create_log_group(logGroupName=self.log_group)
            except ClientError as e:
                if _error_code(e) != ALREADY_EXISTS:
                    raise
        except (ClientError, BotoCoreError) as e:
            raise LogGroupError(f"Log group {self.log_group} unavailable: {e}") from e

    def _find_stream(self) -> Optional[dict]:
        response = self.client.describe_log_streams(
            logGroupName=self.log_group,
            logStreamNamePrefix=self.log_stream,
        )
        for stream in response.get("logStreams", []):
            if stream.get("logStreamName") == self.log_stream:
                return stream
        return None

    def _create_stream(self) -> None:
        logger.info(
            "Creating log stream",
            log_group=self.log_group,
            log_stream=self.log_stream,
            event_type="log_stream_create"
        )
        self.client.create_log_stream(logGroupName=self.log_group, logStreamName=self.log_stream)

    def resolve_sequence_token(self) -> Optional[str]:
        """Return the stream's next upload token, creating the stream if absent.

        A new or empty stream has no token and accepts an append without one.
        """
        stream = self._find_stream()
        if stream is not None:
            return stream.get("uploadSequenceToken")

        try:
            self._create_stream()
        except ClientError as e:
            if _error_code(e) != ALREADY_EXISTS:
                raise
            # another writer created it in the meantime
            stream = self._find_stream()
            return stream.get("uploadSequenceToken") if stream else None
        return None

    def ship(self, snapshots: Sequence[AutoscalerStatusSnapshot]) -> int:
        """Append one batch holding a record per snapshot.

        Store errors (including a sequence token conflict) propagate; no local
        token state is kept, so the next cycle simply resolves a fresh token.
        """
        if not snapshots:
            return 0

        # every event in a batch shares the batch start time
        timestamp = int(self._clock() * 1000)
        token = self.resolve_sequence_token()

        events = [{"timestamp": timestamp, "message": record} for record in records_for(snapshots)]
        request = {
            "logGroupName": self.log_group,
            "logStreamName": self.log_stream,
            "logEvents": events,
        }
        if token:
            request["sequenceToken"] = token

        response = self.client.put_log_events(**request)
        rejected = response.get("rejectedLogEventsInfo") if response else None
        if rejected:
            logger.warning("CloudWatch rejected log events", rejected=rejected, event_type="log_events_rejected")

        self.batches_sent += 1
        logger.debug(
            "Shipped condition records",
            log_group=self.log_group,
            log_stream=self.log_stream,
            records=len(events),
            event_type="log_shipment"
        )
        return len(events)
