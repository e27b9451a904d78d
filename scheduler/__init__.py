# -*- coding: utf-8 -*-
"""
定时任务模块

功能：
- 根据 SCRAPE_INTERVAL 定时执行采集周期
- 在后台线程中运行，不阻塞主程序
"""

from scheduler.scheduler import ScrapeScheduler

__all__ = ['ScrapeScheduler']
