# -*- coding: utf-8 -*-
"""
配置验证模块

功能：
- 验证采集任务配置的完整性和正确性
- 检查服务是否支持、区域是否配置、统计方法是否有效
"""

from typing import List, Optional, Tuple

from config.loader import JobsConfig
from config.services import get_service
from model.model import MetricConfig
from promutil.counters import is_percentile

VALID_STATISTICS = ['Average', 'Minimum', 'Maximum', 'Sum', 'SampleCount']


def validate_config(config: JobsConfig) -> Tuple[bool, str]:
    """
    验证配置对象

    Args:
        config: JobsConfig 对象

    Returns:
        (is_valid, error_message) 元组，验证通过时 error_message 为空字符串
    """
    if not config.jobs and not config.static:
        return False, "discovery.jobs 和 static 不能同时为空"

    for idx, job in enumerate(config.jobs):
        prefix = f"discovery.jobs[{idx}] ({job.type})"

        if get_service(job.type) is None:
            return False, f"{prefix}: 不支持的服务"

        if not job.regions:
            return False, f"{prefix}: regions 不能为空"

        error = _validate_metrics(job.metrics)
        if error:
            return False, f"{prefix}: {error}"

    for idx, static_job in enumerate(config.static):
        prefix = f"static[{idx}] ({static_job.name})"

        if not static_job.regions:
            return False, f"{prefix}: regions 不能为空"

        if not static_job.metrics:
            return False, f"{prefix}: metrics 不能为空"

        error = _validate_metrics(static_job.metrics)
        if error:
            return False, f"{prefix}: {error}"

    return True, ""


def _validate_metrics(metrics: List[MetricConfig]) -> Optional[str]:
    for metric in metrics:
        for statistic in metric.statistics:
            if statistic not in VALID_STATISTICS and not is_percentile(statistic):
                return f"指标 {metric.name} 的统计方法无效: {statistic}"

        if metric.length < metric.period:
            return f"指标 {metric.name} 的 length 不能小于 period"

    return None
