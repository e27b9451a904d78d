# -*- coding: utf-8 -*-
"""
Prometheus Collector 实现模块

功能：
- 接收每个采集周期的结果
- 更新 CloudWatch 指标值和 exporter 自身指标
- 提供指标数据供 /metrics 端点使用
"""

import math
import logging
from typing import Dict, List, Optional, Set, Tuple
from prometheus_client import Gauge, Counter, Histogram, CollectorRegistry, REGISTRY, generate_latest

from collector.scrape_result import ScrapeResult
from model.model import CloudwatchData, Dimension, Tag

logger = logging.getLogger(__name__)


class MetricCollector:
    """
    CloudWatch 指标收集器

    功能：
    - 管理采集结果
    - 更新 Prometheus 指标
    - 提供指标数据供 /metrics 端点使用
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        """
        初始化指标收集器

        Args:
            registry: Prometheus 注册表（测试时传入独立的 CollectorRegistry）
        """
        self.registry = registry

        # CloudWatch 指标值，每个采集周期刷新
        self.metric_value = Gauge(
            'cloudwatch_metric_value',
            'Latest CloudWatch metric value',
            ['namespace', 'metric_name', 'statistic', 'region', 'resource', 'dimensions', 'tags'],
            registry=registry
        )

        # Exporter 自身指标
        self.scrape_errors_total = Counter(
            'cloudwatch_exporter_scrape_errors_total',
            'Total number of scrape errors',
            ['namespace', 'stage'],
            registry=registry
        )

        self.scrape_duration_seconds = Histogram(
            'cloudwatch_exporter_scrape_duration_seconds',
            'Duration of a full collection cycle in seconds',
            buckets=[1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
            registry=registry
        )

        # 最近一个周期的采集结果和已导出的标签组合
        self.results: List[ScrapeResult] = []
        self._exported: Set[Tuple[str, ...]] = set()

    def add_result(self, result: ScrapeResult):
        """
        添加一次 (job, region) 采集结果

        Args:
            result: 采集结果
        """
        self.results.append(result)
        self._exported.update(self._export(result))

    def _export(self, result: ScrapeResult) -> Set[Tuple[str, ...]]:
        """写入一个结果的指标值，返回写入的标签组合"""
        for error in result.errors:
            self.scrape_errors_total.labels(namespace=result.namespace, stage=error.stage).inc()

        exported = set()
        if result.is_failed():
            return exported

        for data in result.data:
            value = _value_of(data)
            if value is None:
                continue

            labels = (
                data.namespace,
                data.metric_name,
                data.processing_params.statistic,
                result.region,
                data.resource_name,
                _format_dimensions(data.dimensions),
                _format_tags(data.tags)
            )
            self.metric_value.labels(*labels).set(value)
            exported.add(labels)

        return exported

    def collect_all(self, results: List[ScrapeResult], duration: Optional[float] = None):
        """
        用一个采集周期的结果替换当前指标

        先原地更新本周期的序列，再删除本周期未出现的序列，
        /metrics 在刷新期间始终能看到完整的序列集合

        Args:
            results: 采集结果列表
            duration: 采集周期耗时（秒）
        """
        exported = set()
        for result in results:
            exported.update(self._export(result))

        # 上一周期存在、本周期消失的资源不再导出
        for labels in self._exported - exported:
            self.metric_value.remove(*labels)

        self._exported = exported
        self.results = list(results)

        if duration is not None:
            self.scrape_duration_seconds.observe(duration)

        logger.info(f"指标已更新: {self.get_summary()}")

    def get_metrics(self) -> str:
        """
        获取 Prometheus 格式的指标数据

        Returns:
            Prometheus text format 字符串
        """
        return generate_latest(self.registry).decode('utf-8')

    def get_summary(self) -> Dict:
        """
        获取采集汇总信息

        Returns:
            汇总信息字典
        """
        by_namespace = {}
        for result in self.results:
            counts = by_namespace.setdefault(result.namespace, {'success': 0, 'partial': 0, 'failed': 0})
            counts[result.status.value] += 1

        return {
            'total': len(self.results),
            'success': sum(1 for r in self.results if r.is_success()),
            'failed': sum(1 for r in self.results if r.is_failed()),
            'series': sum(len(r.data) for r in self.results),
            'by_namespace': by_namespace
        }


def _value_of(data: CloudwatchData) -> Optional[float]:
    """
    取导出值

    没有数据时：nil_to_zero 导出 0，否则导出 NaN；
    结果为空（请求整体降级）时不导出
    """
    if data.result is None:
        return None
    if data.result.has_data():
        return data.result.datapoint
    return 0.0 if data.nil_to_zero else math.nan


def _format_dimensions(dimensions: List[Dimension]) -> str:
    return ','.join(f"{d.name}={d.value}" for d in dimensions)


def _format_tags(tags: List[Tag]) -> str:
    return ','.join(f"{t.key}={t.value}" for t in tags)
