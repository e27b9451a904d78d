# -*- coding: utf-8 -*-
"""
CloudWatch Exporter 主入口

功能：
- 加载进程配置和采集任务配置
- 启动定时采集任务
- 启动 Flask HTTP 服务器（/metrics、/health）
"""

import sys
import logging
from typing import Optional
from flask import Flask
from prometheus_client import CONTENT_TYPE_LATEST

from collector.collector import MetricCollector
from collector.scraper import Scraper
from config.loader import JobsConfig, load_jobs_config
from config.settings import load_settings
from config.validator import validate_config
from provider.aws.factory import ClientFactory
from scheduler.scheduler import ScrapeScheduler

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# 设置特定模块的日志级别
logging.getLogger('werkzeug').setLevel(logging.WARNING)  # 减少 Flask 日志
logging.getLogger('botocore').setLevel(logging.WARNING)

# 创建 Flask 应用
app = Flask(__name__)

# 全局对象（在 main 函数中初始化）
metric_collector: Optional[MetricCollector] = None
scheduler: Optional[ScrapeScheduler] = None


@app.route('/metrics')
def metrics():
    """
    Prometheus metrics 端点

    返回 CloudWatch 指标和 exporter 自身指标
    格式：Prometheus text format
    """
    if metric_collector is None:
        return "# Exporter not initialized\n", 200, {'Content-Type': CONTENT_TYPE_LATEST}

    return metric_collector.get_metrics(), 200, {'Content-Type': CONTENT_TYPE_LATEST}


@app.route('/health')
def health():
    """
    健康检查端点

    返回 exporter 的健康状态
    """
    status = {'status': 'healthy'}

    if scheduler:
        status['scheduler'] = scheduler.get_status()

    if metric_collector:
        status['last_scrape'] = metric_collector.get_summary()

    return status, 200


def load_config(config_path: str) -> JobsConfig:
    """
    加载并验证采集任务配置，失败时退出进程

    Args:
        config_path: 配置文件路径
    """
    try:
        logger.info(f"正在加载采集任务配置: {config_path}")
        config = load_jobs_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"加载采集任务配置失败: {e}")
        sys.exit(1)

    is_valid, message = validate_config(config)
    if not is_valid:
        logger.error(f"采集任务配置无效: {message}")
        sys.exit(1)

    logger.info(f"采集任务配置加载成功: {len(config.jobs)} 个发现任务, {len(config.static)} 个固定任务")
    for job in config.jobs:
        logger.info(f"  - {job.type}: regions={job.regions}, metrics={[m.name for m in job.metrics]}")
    for static_job in config.static:
        logger.info(f"  - {static_job.namespace} ({static_job.name}): regions={static_job.regions}")

    return config


def main():
    """
    主函数：启动 Flask 服务器

    功能：
    1. 读取环境变量配置
    2. 加载采集任务配置
    3. 启动定时采集
    4. 启动 HTTP 服务器
    """
    logger.info("Starting CloudWatch Exporter...")

    try:
        settings = load_settings()
    except ValueError as e:
        logger.error(f"环境变量配置错误: {e}")
        sys.exit(1)

    config = load_config(settings.config_path)

    global metric_collector, scheduler
    metric_collector = MetricCollector()
    scraper = Scraper(
        factory=ClientFactory(settings),
        collector=metric_collector,
        max_workers=settings.collection_max_workers,
        metrics_per_query=settings.metrics_per_query
    )

    scheduler = ScrapeScheduler(
        collect_func=lambda: scraper.scrape(config),
        interval=settings.scrape_interval
    )
    scheduler.start()
    logger.info("定时任务已启动，将在后台自动刷新数据")

    port = settings.metrics_port
    logger.info(f"Starting HTTP server on port {port}")
    logger.info(f"访问 http://localhost:{port}/metrics 查看指标")
    logger.info(f"访问 http://localhost:{port}/health 查看健康状态")
    app.run(host='0.0.0.0', port=port, debug=False)


if __name__ == '__main__':
    main()
