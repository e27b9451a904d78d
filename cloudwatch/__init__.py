# -*- coding: utf-8 -*-
"""
CloudWatch 客户端模块

功能：
- 发现指标描述（ListMetrics）
- 批量获取指标数据（GetMetricData）和单指标统计（GetMetricStatistics）
- 并发限制装饰器
"""

from .client import CloudWatchClient
from .concurrency import ConcurrencyConfig, LimitedConcurrencyClient

__all__ = ['CloudWatchClient', 'ConcurrencyConfig', 'LimitedConcurrencyClient']
