"""Collectors fetching autoscaler state from the cluster"""
from .hpa import HpaCollector, HpaClientError, snapshot_from_api

__all__ = [
    'HpaCollector',
    'HpaClientError',
    'snapshot_from_api'
]
