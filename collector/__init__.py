# -*- coding: utf-8 -*-
"""
Prometheus Collector 模块

功能：
- 按采集任务执行资源发现和 CloudWatch 指标取值
- 暴露 Prometheus 格式的指标
"""

from .collector import MetricCollector
from .scrape_result import ScrapeError, ScrapeResult, ScrapeStatus
from .scraper import Scraper

__all__ = ['MetricCollector', 'ScrapeError', 'ScrapeResult', 'ScrapeStatus', 'Scraper']
