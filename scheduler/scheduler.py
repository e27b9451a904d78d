# -*- coding: utf-8 -*-
"""
定时任务实现模块

功能：
- 定时调用采集函数刷新数据
- 不直接操作 Prometheus metrics
- 只负责"什么时候刷新"
"""

import threading
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ScrapeScheduler:
    """
    采集周期定时调度器

    职责：
    1. 在后台线程中每 interval 秒调用一次采集函数
    2. 采集函数抛出的异常只记录日志，不退出线程
    3. stop() 会打断等待，无需等满一个间隔
    """

    def __init__(self, collect_func: Callable[[], None], interval: int = 300, run_immediately: bool = True):
        """
        初始化定时任务调度器

        Args:
            collect_func: 执行一个采集周期的函数
            interval: 采集间隔（秒），默认 300
            run_immediately: 启动后是否立即执行一次
        """
        self.collect_func = collect_func
        self.interval = interval
        self.run_immediately = run_immediately

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._runs = 0

        logger.info(f"ScrapeScheduler 初始化完成: interval={interval}s")

    def start(self):
        """启动后台采集线程"""
        if self.is_running():
            logger.warning("定时任务已在运行")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._refresh_loop,
            name="ScrapeRefreshThread",
            daemon=True
        )
        self._thread.start()
        logger.info("定时任务调度器已启动")

    def stop(self, timeout: float = 5):
        """停止定时任务，最多等待 timeout 秒"""
        if not self.is_running():
            return

        logger.info("停止定时任务调度器...")
        self._stop_event.set()
        self._thread.join(timeout=timeout)
        logger.info("定时任务调度器已停止")

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _refresh_loop(self):
        logger.info(f"[Scheduler] 刷新循环启动，间隔: {self.interval} 秒")

        if not self.run_immediately:
            self._stop_event.wait(self.interval)

        while not self._stop_event.is_set():
            try:
                logger.info("[Scheduler] scrape triggered")
                self.collect_func()
                logger.info("[Scheduler] scrape completed")
            except Exception as e:
                # 捕获异常，打印日志，不退出线程
                logger.error(f"[Scheduler] 采集异常: {e}", exc_info=True)
            finally:
                self._runs += 1

            self._stop_event.wait(self.interval)

        logger.info("[Scheduler] 刷新循环已退出")

    def get_status(self) -> dict:
        """
        获取定时任务状态

        Returns:
            状态信息字典
        """
        return {
            'running': self.is_running(),
            'interval': self.interval,
            'runs': self._runs
        }
