# -*- coding: utf-8 -*-
"""
进程级配置

功能：
- 从环境变量读取并发数、端口、采集间隔、配置文件路径、凭证
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """进程级配置"""
    config_path: str = 'config/jobs.yaml'
    metrics_port: int = 8000
    scrape_interval: int = 300              # 采集间隔（秒）
    collection_max_workers: int = 3         # (job, region) 并发采集线程数
    tagging_api_concurrency: int = 5        # 同时进行中的 get_resources 上限
    cloudwatch_concurrency: int = 5         # 同时进行中的 CloudWatch 调用上限
    cloudwatch_per_api_limit: bool = False  # CloudWatch 是否按 API 分别限制
    metrics_per_query: int = 500            # 单次 GetMetricData 最多查询数（API 上限）
    access_key: Optional[str] = None
    secret_key: Optional[str] = None


def load_settings() -> Settings:
    """
    从环境变量加载配置

    Raises:
        ValueError: 数值型环境变量无法解析或不为正数
    """
    return Settings(
        config_path=os.getenv('CONFIG_PATH', 'config/jobs.yaml'),
        metrics_port=_positive_int('METRICS_PORT', 8000),
        scrape_interval=_positive_int('SCRAPE_INTERVAL', 300),
        collection_max_workers=_positive_int('COLLECTION_MAX_WORKERS', 3),
        tagging_api_concurrency=_positive_int('TAGGING_API_CONCURRENCY', 5),
        cloudwatch_concurrency=_positive_int('CLOUDWATCH_CONCURRENCY', 5),
        cloudwatch_per_api_limit=os.getenv('CLOUDWATCH_PER_API_LIMIT', 'false').lower() == 'true',
        metrics_per_query=_positive_int('METRICS_PER_QUERY', 500),
        access_key=os.getenv('AWS_ACCESS_KEY_ID') or None,
        secret_key=os.getenv('AWS_SECRET_ACCESS_KEY') or None
    )


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"环境变量 {name} 必须是整数: {raw}")
    if value <= 0:
        raise ValueError(f"环境变量 {name} 必须是正整数: {raw}")
    return value
