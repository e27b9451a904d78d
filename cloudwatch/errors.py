# -*- coding: utf-8 -*-
"""
CloudWatch 客户端错误定义

指标数据路径上的错误不向上抛出：客户端记录日志、递增错误计数并返回空结果，
这里的异常只用于构造日志内容。
"""


class CloudWatchError(Exception):
    """CloudWatch 客户端错误基类"""

    stage = 'CloudWatch'

    def __init__(self, namespace: str, cause: Exception):
        self.namespace = namespace
        self.cause = cause
        super().__init__(f"{self.stage} 失败 (namespace: {namespace}): {cause}")


class MetricDataDegraded(CloudWatchError):
    """GetMetricData 调用失败，结果降级为空"""
    stage = 'GetMetricData'


class StatisticsDegraded(CloudWatchError):
    """GetMetricStatistics 调用失败，结果降级为空"""
    stage = 'GetMetricStatistics'
