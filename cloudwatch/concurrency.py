# -*- coding: utf-8 -*-
"""
CloudWatch 客户端并发限制

功能：
- 限制同时进行中的 CloudWatch API 调用数量
- 支持所有 API 共用一个上限，或每个 API 单独设置上限
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import List

from cloudwatch.client import CloudWatchClient, PageHandler
from model.model import CloudwatchData, Datapoint, Dimension, MetricConfig, MetricDataResult


@dataclass
class ConcurrencyConfig:
    """CloudWatch API 并发配置"""
    single_limit: int = 5                   # 所有 API 共用的上限
    per_api_limit_enabled: bool = False     # 是否按 API 分别限制
    list_metrics: int = 5
    get_metric_data: int = 5
    get_metric_statistics: int = 5

    def new_limiter(self) -> 'ConcurrencyLimiter':
        if self.per_api_limit_enabled:
            return ConcurrencyLimiter(
                list_metrics=self.list_metrics,
                get_metric_data=self.get_metric_data,
                get_metric_statistics=self.get_metric_statistics
            )
        shared = threading.Semaphore(self.single_limit)
        return ConcurrencyLimiter(semaphores={
            'ListMetrics': shared,
            'GetMetricData': shared,
            'GetMetricStatistics': shared,
        })


class ConcurrencyLimiter:
    """按操作名称分配信号量"""

    def __init__(self, list_metrics: int = 5, get_metric_data: int = 5, get_metric_statistics: int = 5,
                 semaphores=None):
        if semaphores is not None:
            self._semaphores = dict(semaphores)
        else:
            self._semaphores = {
                'ListMetrics': threading.Semaphore(list_metrics),
                'GetMetricData': threading.Semaphore(get_metric_data),
                'GetMetricStatistics': threading.Semaphore(get_metric_statistics),
            }

    def slot(self, operation: str) -> threading.Semaphore:
        return self._semaphores[operation]


class LimitedConcurrencyClient:
    """
    带并发上限的 CloudWatch 客户端装饰器

    每次调用前阻塞获取一个名额，调用结束（无论成功或异常）后释放
    """

    def __init__(self, client: CloudWatchClient, limiter: ConcurrencyLimiter):
        self.client = client
        self.limiter = limiter

    def list_metrics(self, namespace: str, metric: MetricConfig, recently_active_only: bool,
                     on_page: PageHandler) -> None:
        with self.limiter.slot('ListMetrics'):
            self.client.list_metrics(namespace, metric, recently_active_only, on_page)

    def get_metric_data(self, queries: List[CloudwatchData], namespace: str, start_time: datetime,
                        end_time: datetime) -> List[MetricDataResult]:
        with self.limiter.slot('GetMetricData'):
            return self.client.get_metric_data(queries, namespace, start_time, end_time)

    def get_metric_statistics(self, dimensions: List[Dimension], namespace: str,
                              metric: MetricConfig) -> List[Datapoint]:
        with self.limiter.slot('GetMetricStatistics'):
            return self.client.get_metric_statistics(dimensions, namespace, metric)
