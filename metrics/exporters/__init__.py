"""Condition record sinks"""
from .base import ConditionSink, ExporterFactory, condition_record

__all__ = [
    'ConditionSink',
    'ExporterFactory',
    'condition_record'
]
