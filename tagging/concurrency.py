# -*- coding: utf-8 -*-
"""
资源发现并发限制

同一实例内同时进行中的 get_resources 调用不超过 max_concurrency 个。
获取名额时阻塞等待、不保证公平，也不响应调用方取消；调用结束后
（无论成功或异常）一定释放名额。
"""

import threading
from typing import List

from model.model import Job, TaggedResource
from tagging.client import Client


class LimitedConcurrencyClient(Client):
    """带并发上限的资源发现客户端装饰器"""

    def __init__(self, client: Client, max_concurrency: int):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency 必须是正整数: {max_concurrency}")
        self.client = client
        self.max_concurrency = max_concurrency
        self._sem = threading.Semaphore(max_concurrency)

    def get_resources(self, job: Job, region: str) -> List[TaggedResource]:
        with self._sem:
            return self.client.get_resources(job, region)
