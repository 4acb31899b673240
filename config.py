"""Configuration management for the HPA exporter"""
from pathlib import Path
from typing import Literal, Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings


LOGGING_TO_STDOUT = "stdout"
LOGGING_TO_CWLOGS = "cwlogs"


class Config(BaseSettings):
    """Configuration class with Pydantic validation and environment-based settings"""

    # Polling
    metrics_interval: int = Field(default=30, ge=1, description="Interval to scrape HPA status in seconds")
    logging_interval: int = Field(default=60, ge=1, description="Interval to log HPA conditions in seconds")

    # Condition logging
    condition_logging: bool = Field(default=False, description="Log HPA conditions")
    logging_to: Literal["stdout", "cwlogs"] = Field(default=LOGGING_TO_STDOUT, description="Where to log conditions (stdout or cwlogs)")
    cw_log_group: str = Field(default="hpa-exporter", min_length=1, description="Name of CloudWatch Logs group")
    cw_log_stream: str = Field(default="condition-log", min_length=1, description="Name of CloudWatch Logs stream")
    aws_region: Optional[str] = Field(default=None, description="AWS region for CloudWatch Logs (boto3 default chain if unset)")

    # Kubernetes client
    run_mode: Literal["in_cluster", "out_cluster"] = Field(default="out_cluster", description="Load in-cluster config or a kubeconfig file")
    kubeconfig: Optional[Path] = Field(default=None, description="Path to the kubeconfig file (client default if unset)")

    # Server settings
    metrics_port: int = Field(default=9296, ge=1, le=65535, description="Metrics server port")
    metrics_host: str = Field(default="0.0.0.0", description="Metrics server host")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Log file path (console only if unset)")

    # Service settings
    service_name: str = Field(default="hpa-exporter", description="Service name")
    service_version: str = Field(default="1.0.0", description="Service version")

    class Config:
        env_prefix = ""
        case_sensitive = False

    @validator('logging_to', pre=True)
    def normalize_logging_to(cls, v):
        """Accept the destination selector regardless of case"""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @validator('log_level', pre=True)
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @validator('log_file')
    def ensure_parent_directories(cls, v):
        """Ensure parent directories exist for file paths"""
        if isinstance(v, Path):
            v.parent.mkdir(parents=True, exist_ok=True)
        return v
