# -*- coding: utf-8 -*-
"""
领域模型模块

功能：
- 定义指标、维度、资源、标签等数据结构
- 供 CloudWatch 客户端、Tagging 客户端和采集器共用
"""

from .model import (
    CloudwatchData,
    Datapoint,
    Dimension,
    GetMetricDataProcessingParams,
    Job,
    Metric,
    MetricConfig,
    MetricDataResult,
    SearchTag,
    StaticJob,
    Tag,
    TaggedResource,
)

__all__ = [
    'CloudwatchData',
    'Datapoint',
    'Dimension',
    'GetMetricDataProcessingParams',
    'Job',
    'Metric',
    'MetricConfig',
    'MetricDataResult',
    'SearchTag',
    'StaticJob',
    'Tag',
    'TaggedResource',
]
