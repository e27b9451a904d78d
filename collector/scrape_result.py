# -*- coding: utf-8 -*-
"""
采集结果数据结构

功能：
- 定义一次 (job, region) 采集的状态和失败阶段
- 统一管理采集得到的指标数据
"""

from dataclasses import dataclass, field
from typing import List
from enum import Enum

from model.model import CloudwatchData


class ScrapeStatus(Enum):
    """采集状态"""
    SUCCESS = "success"    # 全部阶段成功
    PARTIAL = "partial"    # 部分指标失败，其余指标有数据
    FAILED = "failed"      # 资源发现失败，没有任何数据


@dataclass
class ScrapeError:
    """单个阶段的失败记录"""
    stage: str                      # 失败阶段，如 'get_resources'、'list_metrics'
    message: str


@dataclass
class ScrapeResult:
    """一次 (job, region) 采集的结果"""
    namespace: str
    region: str
    status: ScrapeStatus = ScrapeStatus.SUCCESS
    data: List[CloudwatchData] = field(default_factory=list)
    errors: List[ScrapeError] = field(default_factory=list)

    def add_error(self, stage: str, message: str):
        """记录失败阶段，已有数据时状态降级为 PARTIAL"""
        self.errors.append(ScrapeError(stage=stage, message=message))
        if self.status == ScrapeStatus.SUCCESS:
            self.status = ScrapeStatus.PARTIAL

    def fail(self, stage: str, message: str):
        """记录致命失败，丢弃已有数据"""
        self.errors.append(ScrapeError(stage=stage, message=message))
        self.status = ScrapeStatus.FAILED
        self.data = []

    def is_success(self) -> bool:
        """判断是否成功"""
        return self.status == ScrapeStatus.SUCCESS

    def is_failed(self) -> bool:
        """判断是否失败"""
        return self.status == ScrapeStatus.FAILED
