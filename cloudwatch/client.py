# -*- coding: utf-8 -*-
"""
AWS CloudWatch 指标客户端模块

功能：
- ListMetrics：分页发现指标描述
- GetMetricData：批量获取多个指标的最新值
- GetMetricStatistics：获取单个指标的统计数据
"""

import boto3
import logging
from typing import Callable, Dict, List, Optional, Tuple
from datetime import datetime, timedelta, timezone
from botocore.exceptions import ClientError, BotoCoreError

from cloudwatch.errors import MetricDataDegraded, StatisticsDegraded
from model.model import (
    CloudwatchData,
    Datapoint,
    Dimension,
    Metric,
    MetricConfig,
    MetricDataResult,
)
from promutil.counters import (
    API_CALLS,
    API_ERRORS,
    GET_METRIC_DATA_METRICS,
    GET_METRIC_DATA_REQUESTS,
    GET_METRIC_STATISTICS_REQUESTS,
    is_percentile,
)

logger = logging.getLogger(__name__)

# 只发现最近 3 小时内有数据的指标（ISO 8601 时长，API 唯一支持的取值）
RECENTLY_ACTIVE_WINDOW = 'PT3H'

# on_page(metrics, last_page)，返回 False 时提前结束分页
PageHandler = Callable[[List[Metric], bool], Optional[bool]]


class CloudWatchClient:
    """
    CloudWatch 指标客户端

    功能：
    - 调用 ListMetrics / GetMetricData / GetMetricStatistics
    - 将 API 响应转换为领域模型
    - 记录调用次数和错误次数

    除 boto3 客户端外不持有可变状态，可被多个线程并发调用
    """

    def __init__(self, region: str = 'us-east-1', access_key: str = None, secret_key: str = None, client=None):
        """
        初始化 CloudWatch 客户端

        Args:
            region: AWS 区域
            access_key: AWS Access Key（可选，如果提供则使用指定凭证）
            secret_key: AWS Secret Key（可选，如果提供则使用指定凭证）
            client: 已创建的 boto3 cloudwatch 客户端（可选）
        """
        self.region = region
        if client is not None:
            self.client = client
            return

        try:
            if access_key and secret_key:
                session = boto3.Session(
                    aws_access_key_id=access_key,
                    aws_secret_access_key=secret_key
                )
                self.client = session.client('cloudwatch', region_name=region)
                logger.debug(f"CloudWatch 客户端初始化成功（使用指定凭证），区域: {region}")
            else:
                self.client = boto3.client('cloudwatch', region_name=region)
                logger.debug(f"CloudWatch 客户端初始化成功（使用默认凭证链），区域: {region}")
        except Exception as e:
            logger.error(f"初始化 CloudWatch 客户端失败: {e}")
            raise

    def list_metrics(
        self,
        namespace: str,
        metric: MetricConfig,
        recently_active_only: bool,
        on_page: PageHandler
    ) -> None:
        """
        分页列出指标描述

        Args:
            namespace: 命名空间（如 'AWS/EC2'）
            metric: 指标配置（按名称过滤，维度名要求由调用方检查）
            recently_active_only: 是否只发现最近 3 小时内活跃的指标
            on_page: 每页回调一次，参数为 (指标列表, 是否最后一页)

        Raises:
            ClientError / BotoCoreError: API 调用失败，分页立即终止，不重试
        """
        params = {
            'Namespace': namespace,
            'MetricName': metric.name,
        }
        if recently_active_only:
            params['RecentlyActive'] = RECENTLY_ACTIVE_WINDOW

        logger.debug(f"ListMetrics 请求: {params}")

        try:
            paginator = self.client.get_paginator('list_metrics')
            for page in paginator.paginate(**params):
                API_CALLS.labels(operation='ListMetrics').inc()

                metrics_page = _to_model_metrics(page.get('Metrics', []))
                last_page = not page.get('NextToken')

                logger.debug(f"ListMetrics 响应: {len(metrics_page)} 个指标, last_page={last_page}")

                if on_page(metrics_page, last_page) is False:
                    logger.debug(f"ListMetrics 提前结束分页 ({namespace}/{metric.name})")
                    break

        except (ClientError, BotoCoreError) as e:
            API_ERRORS.labels(operation='ListMetrics').inc()
            logger.error(f"ListMetrics 失败 {namespace}/{metric.name}: {e}")
            raise

    def get_metric_data(
        self,
        queries: List[CloudwatchData],
        namespace: str,
        start_time: datetime,
        end_time: datetime
    ) -> List[MetricDataResult]:
        """
        批量获取指标数据

        所有查询在一次分页请求中提交，超过 API 单次查询上限时由调用方负责拆分。

        Args:
            queries: 请求单元列表，每个包含唯一的 query_id
            namespace: 命名空间
            start_time: 窗口开始时间（包含）
            end_time: 窗口结束时间（不包含）

        Returns:
            按请求顺序排列的结果列表，每个 query_id 一个；没有数据的查询
            datapoint 和 timestamp 均为 None。API 失败时返回空列表。
        """
        metric_data_queries = []
        for data in queries:
            params = data.processing_params
            metric_data_queries.append({
                'Id': params.query_id,
                'MetricStat': {
                    'Metric': {
                        'Namespace': namespace,
                        'MetricName': data.metric_name,
                        'Dimensions': _to_cloudwatch_dimensions(data.dimensions),
                    },
                    'Period': params.period,
                    'Stat': params.statistic,
                },
                'ReturnData': True,
            })

        request = {
            'MetricDataQueries': metric_data_queries,
            'StartTime': start_time,
            'EndTime': end_time,
            'ScanBy': 'TimestampDescending',
        }

        GET_METRIC_DATA_METRICS.inc(len(metric_data_queries))
        logger.debug(f"GetMetricData 请求: {len(metric_data_queries)} 个查询, namespace={namespace}, "
                     f"window=[{start_time}, {end_time})")

        raw_results = []
        try:
            paginator = self.client.get_paginator('get_metric_data')
            for page in paginator.paginate(**request):
                GET_METRIC_DATA_REQUESTS.inc()
                API_CALLS.labels(operation='GetMetricData').inc()
                raw_results.extend(page.get('MetricDataResults', []))
        except (ClientError, BotoCoreError) as e:
            API_ERRORS.labels(operation='GetMetricData').inc()
            logger.error(str(MetricDataDegraded(namespace, e)))
            return []

        logger.debug(f"GetMetricData 响应: {len(raw_results)} 个结果")

        return _to_metric_data_results(queries, raw_results)

    def get_metric_statistics(
        self,
        dimensions: List[Dimension],
        namespace: str,
        metric: MetricConfig
    ) -> List[Datapoint]:
        """
        获取单个指标的统计数据

        Args:
            dimensions: 指标维度
            namespace: 命名空间
            metric: 指标配置（统计方法、周期、窗口长度、延迟）

        Returns:
            每个时间桶一个 Datapoint（按时间倒序），API 失败时返回空列表
        """
        request = _build_get_metric_statistics_request(dimensions, namespace, metric)

        logger.debug(f"GetMetricStatistics 请求: {request}")

        GET_METRIC_STATISTICS_REQUESTS.inc()
        API_CALLS.labels(operation='GetMetricStatistics').inc()

        try:
            response = self.client.get_metric_statistics(**request)
        except (ClientError, BotoCoreError) as e:
            API_ERRORS.labels(operation='GetMetricStatistics').inc()
            logger.error(str(StatisticsDegraded(namespace, e)))
            return []

        datapoints = response.get('Datapoints', [])
        logger.debug(f"GetMetricStatistics 响应: {namespace}/{metric.name} 共 {len(datapoints)} 个数据点")

        return _to_model_datapoints(datapoints)


def _build_get_metric_statistics_request(
    dimensions: List[Dimension],
    namespace: str,
    metric: MetricConfig
) -> Dict:
    """构建 GetMetricStatistics 请求参数（标准统计和百分位分开传）"""
    now = datetime.now(timezone.utc)
    end_time = now - timedelta(seconds=metric.delay)
    start_time = now - timedelta(seconds=metric.length + metric.delay)

    statistics = [s for s in metric.statistics if not is_percentile(s)]
    extended_statistics = [s for s in metric.statistics if is_percentile(s)]

    request = {
        'Namespace': namespace,
        'MetricName': metric.name,
        'Dimensions': _to_cloudwatch_dimensions(dimensions),
        'StartTime': start_time,
        'EndTime': end_time,
        'Period': metric.period,
    }
    # 空列表不能传给 API
    if statistics:
        request['Statistics'] = statistics
    if extended_statistics:
        request['ExtendedStatistics'] = extended_statistics
    return request


def _to_model_metrics(cloudwatch_metrics: List[Dict]) -> List[Metric]:
    return [
        Metric(
            metric_name=m['MetricName'],
            namespace=m['Namespace'],
            dimensions=[Dimension(name=d['Name'], value=d['Value']) for d in m.get('Dimensions', [])]
        )
        for m in cloudwatch_metrics
    ]


def _to_cloudwatch_dimensions(dimensions: List[Dimension]) -> List[Dict[str, str]]:
    return [{'Name': d.name, 'Value': d.value} for d in dimensions]


def _to_metric_data_results(queries: List[CloudwatchData], raw_results: List[Dict]) -> List[MetricDataResult]:
    """
    将 GetMetricData 结果映射为每个 query_id 的最新值

    同一 query_id 的数据点可能分布在多页中，先合并再按时间戳取最新，
    不依赖 API 返回顺序。
    """
    points_by_id: Dict[str, List[Tuple[datetime, float]]] = {}
    for result in raw_results:
        points = points_by_id.setdefault(result['Id'], [])
        points.extend(zip(result.get('Timestamps', []), result.get('Values', [])))

    output = []
    for data in queries:
        query_id = data.processing_params.query_id
        mapped = MetricDataResult(query_id=query_id)

        points = points_by_id.get(query_id)
        if points:
            timestamp, value = max(points, key=lambda p: p[0])
            mapped.datapoint = value
            mapped.timestamp = timestamp
        output.append(mapped)

    return output


def _to_model_datapoints(cloudwatch_datapoints: List[Dict]) -> List[Datapoint]:
    datapoints = [
        Datapoint(
            timestamp=dp.get('Timestamp'),
            average=dp.get('Average'),
            minimum=dp.get('Minimum'),
            maximum=dp.get('Maximum'),
            sum=dp.get('Sum'),
            sample_count=dp.get('SampleCount'),
            extended_statistics=dict(dp.get('ExtendedStatistics', {}))
        )
        for dp in cloudwatch_datapoints
    ]
    # API 不保证顺序
    datapoints.sort(key=lambda dp: dp.timestamp, reverse=True)
    return datapoints
