# -*- coding: utf-8 -*-
"""
API 调用计数指标

功能：
- 定义 CloudWatch / Tagging / 扩展 API 的调用次数和错误次数计数器
- 由客户端层在每次（每页）调用时递增
"""

import re
from prometheus_client import Counter

# 百分位统计（扩展统计），如 p50、p99.9、p100
PERCENTILE = re.compile(r'^p(\d{1,2}(\.\d{0,2})?|100)$')

API_CALLS = Counter(
    'api_calls_total',
    'Number of calls made to the CloudWatch and Tagging APIs',
    ['operation']
)

API_ERRORS = Counter(
    'api_errors_total',
    'Number of failed calls made to the CloudWatch and Tagging APIs',
    ['operation']
)

GET_METRIC_DATA_METRICS = Counter(
    'get_metric_data_metrics_total',
    'Number of metrics requested through GetMetricData'
)

GET_METRIC_DATA_REQUESTS = Counter(
    'get_metric_data_requests_total',
    'Number of GetMetricData pages fetched'
)

GET_METRIC_STATISTICS_REQUESTS = Counter(
    'get_metric_statistics_requests_total',
    'Number of GetMetricStatistics calls'
)

RESOURCE_TAGGING_REQUESTS = Counter(
    'resource_tagging_requests_total',
    'Number of Resource Groups Tagging API pages fetched'
)

# 扩展钩子调用的辅助 API（AutoScaling、EC2、DMS 等）
EXTENSION_API_REQUESTS = Counter(
    'extension_api_requests_total',
    'Number of calls made to per-service APIs by discovery extensions',
    ['api']
)


def is_percentile(statistic: str) -> bool:
    """判断统计方法是否为百分位（需要走 ExtendedStatistics）"""
    return PERCENTILE.match(statistic) is not None
