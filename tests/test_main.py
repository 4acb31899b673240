"""Tests for startup composition"""
import os
from unittest.mock import Mock, patch
import pytest
from botocore.exceptions import ClientError

import main
from collectors.hpa import HpaClientError
from config import Config
from metrics.exporters.cloudwatch import CloudWatchLogShipper
from metrics.exporters.stdout import StdoutConditionLogger


class TestBuildServer:
    """Test composition of the exporter"""

    def test_without_condition_logging(self):
        with patch.dict(os.environ, {}, clear=True):
            config = Config()

        with patch("main.HpaCollector.from_config") as mock_from_config:
            server = main.build_server(config)

        mock_from_config.assert_called_once_with(config)
        assert server.condition_loop is None

    def test_stdout_condition_logging(self):
        with patch.dict(os.environ, {"CONDITION_LOGGING": "true"}, clear=True):
            config = Config()

        with patch("main.HpaCollector.from_config"):
            server = main.build_server(config)

        assert isinstance(server.condition_loop.sink, StdoutConditionLogger)

    def test_cloudwatch_checks_log_group(self):
        with patch.dict(os.environ, {"CONDITION_LOGGING": "true", "LOGGING_TO": "cwlogs"}, clear=True):
            config = Config()
        logs_client = Mock()
        logs_client.describe_log_groups.return_value = {"logGroups": [{"logGroupName": "hpa-exporter"}]}

        with patch("main.HpaCollector.from_config"):
            with patch("metrics.exporters.cloudwatch.create_logs_client", return_value=logs_client):
                server = main.build_server(config)

        assert isinstance(server.condition_loop.sink, CloudWatchLogShipper)
        logs_client.describe_log_groups.assert_called_once_with(logGroupNamePrefix="hpa-exporter")


class TestMain:
    """Test that startup failures terminate the process"""

    def test_client_failure_exits(self):
        with patch.dict(os.environ, {}, clear=True):
            with patch("main.HpaCollector.from_config", side_effect=HpaClientError("no kubeconfig")):
                with patch("main.uvicorn.run") as mock_run:
                    with pytest.raises(SystemExit) as exc_info:
                        main.main()

        assert exc_info.value.code == 1
        mock_run.assert_not_called()

    def test_invalid_logging_to_exits(self):
        with patch.dict(os.environ, {"LOGGING_TO": "syslog"}, clear=True):
            with patch("main.uvicorn.run") as mock_run:
                with pytest.raises(SystemExit) as exc_info:
                    main.main()

        assert exc_info.value.code == 1
        mock_run.assert_not_called()

    def test_log_group_failure_exits(self):
        logs_client = Mock()
        logs_client.describe_log_groups.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "denied"}}, "DescribeLogGroups"
        )
        env = {"CONDITION_LOGGING": "true", "LOGGING_TO": "cwlogs"}

        with patch.dict(os.environ, env, clear=True):
            with patch("main.HpaCollector.from_config"):
                with patch("metrics.exporters.cloudwatch.create_logs_client", return_value=logs_client):
                    with patch("main.uvicorn.run") as mock_run:
                        with pytest.raises(SystemExit) as exc_info:
                            main.main()

        assert exc_info.value.code == 1
        mock_run.assert_not_called()

    def test_runs_uvicorn(self):
        with patch.dict(os.environ, {"METRICS_PORT": "9999"}, clear=True):
            with patch("main.HpaCollector.from_config"):
                with patch("main.uvicorn.run") as mock_run:
                    main.main()

        assert mock_run.call_args.kwargs["port"] == 9999
        assert mock_run.call_args.kwargs["host"] == "0.0.0.0"
