# -*- coding: utf-8 -*-
"""
采集周期实现模块

功能：
- 按 (job, region) 并发执行资源发现、指标发现、指标取值
- 将结果交给 MetricCollector 更新 Prometheus 指标
- 可以被定时任务调用，也可以被主流程调用
"""

import time
import logging
from typing import List, Optional
from datetime import datetime, timedelta, timezone
from concurrent.futures import ThreadPoolExecutor, as_completed
from botocore.exceptions import ClientError, BotoCoreError

from collector.collector import MetricCollector
from collector.scrape_result import ScrapeResult
from config.loader import JobsConfig
from model.model import (
    CloudwatchData,
    GetMetricDataProcessingParams,
    Job,
    Metric,
    MetricConfig,
    MetricDataResult,
    StaticJob,
    TaggedResource,
)
from provider.aws.factory import ClientFactory
from tagging.errors import TaggingError

logger = logging.getLogger(__name__)


class Scraper:
    """
    采集周期执行器

    职责：
    1. 展开 (job, region) 任务并在线程池中执行
    2. 单个任务失败只记录到结果中，不影响其它任务
    3. 周期结束后一次性刷新 Prometheus 指标
    """

    def __init__(
        self,
        factory: ClientFactory,
        collector: MetricCollector,
        max_workers: int = 3,
        metrics_per_query: int = 500
    ):
        """
        初始化采集周期执行器

        Args:
            factory: 按区域缓存的客户端工厂
            collector: 指标收集器
            max_workers: 并发采集线程数
            metrics_per_query: 单次 GetMetricData 最多查询数
        """
        self.factory = factory
        self.collector = collector
        self.max_workers = max_workers
        self.metrics_per_query = metrics_per_query

    def scrape(self, config: JobsConfig) -> List[ScrapeResult]:
        """
        执行一个完整的采集周期

        Args:
            config: 采集任务配置

        Returns:
            每个 (job, region) 一个采集结果
        """
        start_time = time.time()

        tasks = []
        for job in config.jobs:
            for region in job.regions:
                tasks.append((self.scrape_job, job, job.type, region))
        for static_job in config.static:
            for region in static_job.regions:
                tasks.append((self.scrape_static_job, static_job, static_job.namespace, region))

        logger.info(f"[采集] 开始采集周期: {len(tasks)} 个任务, {self.max_workers} 个并发线程")

        results: List[ScrapeResult] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_task = {
                executor.submit(func, job, region): (namespace, region)
                for func, job, namespace, region in tasks
            }

            completed = 0
            for future in as_completed(future_to_task):
                namespace, region = future_to_task[future]
                completed += 1
                try:
                    results.append(future.result())
                    logger.info(f"[采集] {namespace} ({region}) 采集完成 ({completed}/{len(tasks)})")
                except Exception as e:
                    logger.error(f"[采集] {namespace} ({region}) 采集异常: {e}", exc_info=True)
                    failed = ScrapeResult(namespace=namespace, region=region)
                    failed.fail('unexpected', str(e))
                    results.append(failed)

        duration = time.time() - start_time
        self.collector.collect_all(results, duration)
        logger.info(f"[采集] 采集周期完成，耗时 {duration:.2f} 秒")

        return results

    def scrape_job(self, job: Job, region: str) -> ScrapeResult:
        """
        采集一个资源发现任务在一个区域内的指标

        资源发现失败时整个任务失败；单个指标的 ListMetrics 失败只跳过该指标
        """
        result = ScrapeResult(namespace=job.type, region=region)

        try:
            resources = self.factory.get_tagging_client(region).get_resources(job, region)
        except TaggingError as e:
            logger.error(f"[采集] {job.type} ({region}) 资源发现失败: {e}")
            result.fail(e.stage, str(e))
            return result

        logger.debug(f"[采集] {job.type} ({region}) 发现 {len(resources)} 个资源")

        cloudwatch = self.factory.get_cloudwatch_client(region)
        for metric_config in job.metrics:
            metrics: List[Metric] = []
            try:
                cloudwatch.list_metrics(
                    job.type,
                    metric_config,
                    job.recently_active_only,
                    lambda page, last_page: metrics.extend(page)
                )
            except (ClientError, BotoCoreError) as e:
                result.add_error('ListMetrics', str(e))
                continue

            requests = build_metric_requests(job, metric_config, metrics, resources)
            self._fetch_metric_data(cloudwatch, job.type, metric_config, requests)
            result.data.extend(requests)

        return result

    def scrape_static_job(self, static_job: StaticJob, region: str) -> ScrapeResult:
        """采集一个固定维度任务在一个区域内的指标"""
        result = ScrapeResult(namespace=static_job.namespace, region=region)
        cloudwatch = self.factory.get_cloudwatch_client(region)

        for metric_config in static_job.metrics:
            datapoints = cloudwatch.get_metric_statistics(
                static_job.dimensions, static_job.namespace, metric_config
            )
            # 按时间倒序，第一个是最新的时间桶
            latest = datapoints[0] if datapoints else None

            for statistic in metric_config.statistics:
                query_id = f"{static_job.name}_{statistic}"
                result.data.append(CloudwatchData(
                    metric_name=metric_config.name,
                    namespace=static_job.namespace,
                    dimensions=list(static_job.dimensions),
                    processing_params=GetMetricDataProcessingParams(
                        query_id=query_id,
                        period=metric_config.period,
                        length=metric_config.length,
                        delay=metric_config.delay,
                        statistic=statistic
                    ),
                    resource_name=static_job.name,
                    nil_to_zero=metric_config.nil_to_zero,
                    result=MetricDataResult(
                        query_id=query_id,
                        datapoint=latest.get(statistic) if latest else None,
                        timestamp=latest.timestamp if latest else None
                    )
                ))

        return result

    def _fetch_metric_data(self, cloudwatch, namespace: str, metric_config: MetricConfig,
                           requests: List[CloudwatchData]):
        """分批调用 GetMetricData，并把结果写回请求单元"""
        if not requests:
            return

        end_time = datetime.now(timezone.utc) - timedelta(seconds=metric_config.delay)
        start_time = end_time - timedelta(seconds=metric_config.length)

        for offset in range(0, len(requests), self.metrics_per_query):
            batch = requests[offset:offset + self.metrics_per_query]
            results = cloudwatch.get_metric_data(batch, namespace, start_time, end_time)
            by_id = {r.query_id: r for r in results}
            for data in batch:
                data.result = by_id.get(data.processing_params.query_id)


def build_metric_requests(
    job: Job,
    metric_config: MetricConfig,
    metrics: List[Metric],
    resources: List[TaggedResource]
) -> List[CloudwatchData]:
    """
    为发现的指标生成 GetMetricData 请求单元

    每个 (指标, 统计方法) 一个请求单元。配置了 dimension_name_requirements 时，
    只保留维度名集合与之完全相同的指标；配置了 search_tags 时，
    无法关联到资源的指标被丢弃（对应的资源已被标签过滤掉）。

    Args:
        job: 资源发现任务
        metric_config: 指标配置
        metrics: ListMetrics 发现的指标
        resources: 资源发现结果

    Returns:
        请求单元列表，query_id 在列表内唯一
    """
    requests = []
    for metric in metrics:
        if not matches_dimension_requirements(metric, metric_config.dimension_name_requirements):
            logger.debug(f"丢弃维度不符合要求的指标: {metric.namespace}/{metric.metric_name} {metric.dimensions}")
            continue

        resource = associate_resource(metric, resources)
        if resource is None and job.search_tags:
            logger.debug(f"丢弃未关联资源的指标: {metric.namespace}/{metric.metric_name} {metric.dimensions}")
            continue

        for statistic in metric_config.statistics:
            requests.append(CloudwatchData(
                metric_name=metric.metric_name,
                namespace=metric.namespace,
                dimensions=list(metric.dimensions),
                processing_params=GetMetricDataProcessingParams(
                    query_id=f"id_{len(requests)}",
                    period=metric_config.period,
                    length=metric_config.length,
                    delay=metric_config.delay,
                    statistic=statistic
                ),
                resource_name=resource.arn if resource else "",
                tags=resource.metric_tags(job.exported_tags_on_metrics) if resource else [],
                nil_to_zero=metric_config.nil_to_zero
            ))

    return requests


def associate_resource(metric: Metric, resources: List[TaggedResource]) -> Optional[TaggedResource]:
    """
    按维度值查找指标对应的资源

    维度值等于资源 ARN，或是 ARN 的最后一段（以 '/' 或 ':' 分隔）时视为关联，
    例如 InstanceId=i-123 关联 arn:aws:ec2:...:instance/i-123
    """
    for dimension in metric.dimensions:
        if not dimension.value:
            continue
        for resource in resources:
            arn = resource.arn
            if (arn == dimension.value
                    or arn.endswith('/' + dimension.value)
                    or arn.endswith(':' + dimension.value)):
                return resource
    return None


def matches_dimension_requirements(metric: Metric, required_names: List[str]) -> bool:
    """维度名集合与要求完全相同时返回 True，没有要求时总是 True"""
    if not required_names:
        return True
    return {d.name for d in metric.dimensions} == set(required_names)
