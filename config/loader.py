# -*- coding: utf-8 -*-
"""
采集任务配置加载模块

功能：
- 从 YAML 文件加载资源发现任务（Job）和指标配置（MetricConfig）
- 服务别名统一转换为命名空间
- 读取失败时给出明确错误（带出错位置）
"""

import re
import yaml
import os
from typing import List
from dataclasses import dataclass, field

from config.services import get_service
from model.model import Dimension, Job, MetricConfig, SearchTag, StaticJob

DEFAULT_PERIOD = 300
DEFAULT_LENGTH = 300
DEFAULT_DELAY = 0


@dataclass
class JobsConfig:
    """采集任务配置的根数据结构"""
    jobs: List[Job] = field(default_factory=list)
    static: List[StaticJob] = field(default_factory=list)


def load_jobs_config(config_path: str) -> JobsConfig:
    """
    从 YAML 文件加载采集任务配置

    Args:
        config_path: 配置文件路径（如 'config/jobs.yaml'）

    Returns:
        JobsConfig 对象

    Raises:
        FileNotFoundError: 文件不存在
        yaml.YAMLError: YAML 解析错误
        ValueError: 配置格式错误
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"采集任务配置文件不存在: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except IOError as e:
        raise IOError(f"无法读取采集任务配置文件 {config_path}: {e}")

    return parse_jobs_config(content)


def parse_jobs_config(content: str) -> JobsConfig:
    """
    解析 YAML 文本

    Args:
        content: YAML 文本

    Returns:
        JobsConfig 对象
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"YAML 解析失败: {e}")

    if data is None:
        raise ValueError("采集任务配置文件为空")

    if not isinstance(data, dict) or ('discovery' not in data and 'static' not in data):
        raise ValueError("配置格式错误: 缺少 'discovery' 或 'static'")

    discovery = data.get('discovery') or {}
    if not isinstance(discovery, dict):
        raise ValueError("配置格式错误: 'discovery' 必须是字典类型")

    jobs_data = discovery.get('jobs', []) or []
    if not isinstance(jobs_data, list):
        raise ValueError("配置格式错误: 'discovery.jobs' 必须是列表类型")

    jobs = []
    for idx, job_dict in enumerate(jobs_data):
        try:
            jobs.append(_parse_job(job_dict))
        except (KeyError, ValueError) as e:
            raise ValueError(f"配置格式错误: 'discovery.jobs[{idx}]': {e}")

    static_data = data.get('static', []) or []
    if not isinstance(static_data, list):
        raise ValueError("配置格式错误: 'static' 必须是列表类型")

    static_jobs = []
    for idx, static_dict in enumerate(static_data):
        try:
            static_jobs.append(_parse_static_job(static_dict))
        except (KeyError, ValueError) as e:
            raise ValueError(f"配置格式错误: 'static[{idx}]': {e}")

    return JobsConfig(jobs=jobs, static=static_jobs)


def _parse_job(job_dict: dict) -> Job:
    """
    解析单个采集任务

    Raises:
        KeyError: 缺少必填字段
        ValueError: 字段值无效
    """
    if not isinstance(job_dict, dict):
        raise ValueError("job 必须是字典类型")

    if 'type' not in job_dict:
        raise KeyError("缺少必填字段: type")

    job_type = job_dict['type']
    if not isinstance(job_type, str) or not job_type.strip():
        raise ValueError("type 必须是非空字符串")

    # 别名（如 "ec2"）转换为命名空间（如 "AWS/EC2"）
    svc = get_service(job_type.strip())
    namespace = svc.namespace if svc else job_type.strip()

    regions = _parse_string_list(job_dict, 'regions')
    exported_tags = _parse_string_list(job_dict, 'exported_tags_on_metrics')
    dimension_requirements = _parse_string_list(job_dict, 'dimension_name_requirements')

    search_tags = []
    for tag_idx, tag_dict in enumerate(job_dict.get('search_tags', []) or []):
        if not isinstance(tag_dict, dict) or 'key' not in tag_dict or 'value' not in tag_dict:
            raise ValueError(f"search_tags[{tag_idx}] 必须包含 key 和 value")
        try:
            search_tags.append(SearchTag(key=str(tag_dict['key']), value=str(tag_dict['value'])))
        except re.error as e:
            raise ValueError(f"search_tags[{tag_idx}].value 不是有效的正则表达式: {e}")

    recently_active_only = job_dict.get('recently_active_only', False)
    if not isinstance(recently_active_only, bool):
        raise ValueError("recently_active_only 必须是布尔值")

    # job 级别的默认值，指标未配置时继承
    defaults = {
        'period': job_dict.get('period', DEFAULT_PERIOD),
        'length': job_dict.get('length', DEFAULT_LENGTH),
        'delay': job_dict.get('delay', DEFAULT_DELAY),
    }

    metrics = []
    for metric_idx, metric_dict in enumerate(job_dict.get('metrics', []) or []):
        try:
            metrics.append(_parse_metric(metric_dict, defaults, dimension_requirements))
        except (KeyError, ValueError) as e:
            raise ValueError(f"metrics[{metric_idx}]: {e}")

    return Job(
        type=namespace,
        regions=regions,
        search_tags=search_tags,
        metrics=metrics,
        recently_active_only=recently_active_only,
        exported_tags_on_metrics=exported_tags,
        dimension_name_requirements=dimension_requirements
    )


def _parse_static_job(static_dict: dict) -> StaticJob:
    """解析单个固定维度采集任务"""
    if not isinstance(static_dict, dict):
        raise ValueError("static 任务必须是字典类型")

    for required in ['name', 'namespace']:
        if required not in static_dict:
            raise KeyError(f"缺少必填字段: {required}")

    namespace = str(static_dict['namespace']).strip()
    svc = get_service(namespace)
    if svc:
        namespace = svc.namespace

    dimensions = []
    for dim_idx, dim_dict in enumerate(static_dict.get('dimensions', []) or []):
        if not isinstance(dim_dict, dict) or 'name' not in dim_dict or 'value' not in dim_dict:
            raise ValueError(f"dimensions[{dim_idx}] 必须包含 name 和 value")
        dimensions.append(Dimension(name=str(dim_dict['name']), value=str(dim_dict['value'])))

    defaults = {
        'period': static_dict.get('period', DEFAULT_PERIOD),
        'length': static_dict.get('length', DEFAULT_LENGTH),
        'delay': static_dict.get('delay', DEFAULT_DELAY),
    }

    metrics = []
    for metric_idx, metric_dict in enumerate(static_dict.get('metrics', []) or []):
        try:
            metrics.append(_parse_metric(metric_dict, defaults, []))
        except (KeyError, ValueError) as e:
            raise ValueError(f"metrics[{metric_idx}]: {e}")

    return StaticJob(
        name=str(static_dict['name']),
        namespace=namespace,
        regions=_parse_string_list(static_dict, 'regions'),
        dimensions=dimensions,
        metrics=metrics
    )


def _parse_metric(metric_dict: dict, defaults: dict, dimension_requirements: List[str]) -> MetricConfig:
    """解析单个指标配置"""
    if not isinstance(metric_dict, dict):
        raise ValueError("metric 必须是字典类型")

    for required in ['name', 'statistics']:
        if required not in metric_dict:
            raise KeyError(f"缺少必填字段: {required}")

    name = metric_dict['name']
    if not isinstance(name, str) or not name.strip():
        raise ValueError("name 必须是非空字符串")

    statistics = metric_dict['statistics']
    if not isinstance(statistics, list) or not statistics:
        raise ValueError("statistics 必须是非空列表")

    values = {}
    for key in ['period', 'length', 'delay']:
        value = metric_dict.get(key, defaults[key])
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ValueError(f"{key} 必须是非负整数")
        values[key] = value

    if values['period'] == 0:
        raise ValueError("period 必须是正整数")

    return MetricConfig(
        name=name.strip(),
        statistics=[str(s) for s in statistics],
        period=values['period'],
        length=values['length'],
        delay=values['delay'],
        nil_to_zero=bool(metric_dict.get('nil_to_zero', False)),
        dimension_name_requirements=list(dimension_requirements)
    )


def _parse_string_list(data: dict, key: str) -> List[str]:
    value = data.get(key, []) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{key} 必须是字符串列表")
    return value
