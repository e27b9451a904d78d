# -*- coding: utf-8 -*-
"""
领域模型定义

功能：
- 定义指标发现、指标数据、资源发现使用的数据结构
- 每个采集周期重新创建，不跨周期持久化
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Pattern


@dataclass
class Dimension:
    """指标维度"""
    name: str
    value: str


@dataclass
class Tag:
    """资源标签"""
    key: str
    value: str


@dataclass
class SearchTag:
    """
    资源过滤标签

    value 是正则表达式，资源标签值中能搜索到即视为匹配
    """
    key: str
    value: str
    _pattern: Optional[Pattern] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        self._pattern = re.compile(self.value)

    def matches(self, tag: Tag) -> bool:
        """判断资源标签是否满足该过滤条件"""
        return tag.key == self.key and self._pattern.search(tag.value) is not None


@dataclass
class MetricConfig:
    """单个指标的采集配置"""
    name: str                                   # 指标名称，如 "CPUUtilization"
    statistics: List[str]                       # 统计方法，如 ["Average", "p99"]
    period: int = 300                           # 聚合周期（秒）
    length: int = 300                           # 查询窗口长度（秒）
    delay: int = 0                              # 窗口结束时间相对当前的延迟（秒）
    nil_to_zero: bool = False                   # 无数据时是否导出 0（否则导出 NaN）
    dimension_name_requirements: List[str] = field(default_factory=list)  # 指标必须包含的维度名


@dataclass
class Metric:
    """ListMetrics 发现的指标描述"""
    metric_name: str
    namespace: str
    dimensions: List[Dimension] = field(default_factory=list)


@dataclass
class GetMetricDataProcessingParams:
    """GetMetricData 查询参数"""
    query_id: str
    period: int
    length: int
    delay: int
    statistic: str


@dataclass
class MetricDataResult:
    """
    GetMetricData 单个查询结果

    datapoint 和 timestamp 为 None 表示该查询没有返回数据
    """
    query_id: str
    datapoint: Optional[float] = None
    timestamp: Optional[datetime] = None

    def has_data(self) -> bool:
        return self.datapoint is not None


@dataclass
class CloudwatchData:
    """一个 GetMetricData 请求单元"""
    metric_name: str
    namespace: str
    dimensions: List[Dimension]
    processing_params: GetMetricDataProcessingParams
    resource_name: str = ""                     # 关联资源的 ARN（未关联时为空）
    tags: List[Tag] = field(default_factory=list)
    nil_to_zero: bool = False
    result: Optional[MetricDataResult] = None   # 采集完成后填充


@dataclass
class Datapoint:
    """GetMetricStatistics 返回的单个时间桶"""
    timestamp: Optional[datetime] = None
    average: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    sum: Optional[float] = None
    sample_count: Optional[float] = None
    extended_statistics: Dict[str, float] = field(default_factory=dict)

    def get(self, statistic: str) -> Optional[float]:
        """按统计方法名称取值（标准统计或百分位）"""
        standard = {
            'Average': self.average,
            'Minimum': self.minimum,
            'Maximum': self.maximum,
            'Sum': self.sum,
            'SampleCount': self.sample_count,
        }
        if statistic in standard:
            return standard[statistic]
        return self.extended_statistics.get(statistic)


@dataclass
class TaggedResource:
    """
    通过 Tagging API 或扩展钩子发现的资源

    ARN 在 (namespace, region) 内唯一标识一个资源实例
    """
    arn: str
    namespace: str
    region: str
    tags: List[Tag] = field(default_factory=list)

    def filter_through_tags(self, search_tags: List[SearchTag]) -> bool:
        """
        判断资源是否满足所有过滤标签

        Args:
            search_tags: 过滤标签列表，为空时匹配所有资源

        Returns:
            每个过滤标签都被资源的某个标签匹配时返回 True
        """
        if not search_tags:
            return True

        for search_tag in search_tags:
            if not any(search_tag.matches(tag) for tag in self.tags):
                return False
        return True

    def metric_tags(self, exported_keys: List[str]) -> List[Tag]:
        """
        返回需要作为指标标签导出的资源标签

        资源没有的 key 以空值返回，保证同一 job 下标签集合一致
        """
        if not exported_keys:
            return []

        existing = {tag.key: tag.value for tag in self.tags}
        return [Tag(key=key, value=existing.get(key, '')) for key in exported_keys]


@dataclass
class Job:
    """资源发现任务（由配置加载生成，采集周期内只读）"""
    type: str                                   # 命名空间，如 "AWS/EC2"
    regions: List[str] = field(default_factory=list)
    search_tags: List[SearchTag] = field(default_factory=list)
    metrics: List[MetricConfig] = field(default_factory=list)
    recently_active_only: bool = False
    exported_tags_on_metrics: List[str] = field(default_factory=list)
    dimension_name_requirements: List[str] = field(default_factory=list)


@dataclass
class StaticJob:
    """固定维度的采集任务，不做资源发现，通过 GetMetricStatistics 取值"""
    name: str
    namespace: str
    regions: List[str] = field(default_factory=list)
    dimensions: List[Dimension] = field(default_factory=list)
    metrics: List[MetricConfig] = field(default_factory=list)
