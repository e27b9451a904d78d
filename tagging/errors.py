# -*- coding: utf-8 -*-
"""
资源发现错误定义

资源发现路径上的错误对当次 get_resources 调用是致命的：不返回部分结果，
错误中带有失败阶段和命名空间，调度方据此把该 (job, region) 标记为失败。
"""


class TaggingError(Exception):
    """资源发现错误基类"""

    stage = 'discovery'

    def __init__(self, namespace: str, message: str):
        self.namespace = namespace
        super().__init__(f"[{self.stage}] {namespace}: {message}")


class UnsupportedNamespaceError(TaggingError):
    """job.type 不是支持的服务"""
    stage = 'lookup'

    def __init__(self, namespace: str):
        super().__init__(namespace, "不支持的命名空间")


class DiscoveryAbortedError(TaggingError):
    """Tagging API 分页失败"""
    stage = 'GetResources'

    def __init__(self, namespace: str, region: str, cause: Exception):
        self.region = region
        self.cause = cause
        super().__init__(namespace, f"Tagging API 分页失败 (region: {region}): {cause}")


class ExtensionResourceError(TaggingError):
    """扩展 ResourceFunc 执行失败"""
    stage = 'ResourceFunc'

    def __init__(self, namespace: str, cause: Exception):
        self.cause = cause
        super().__init__(namespace, f"扩展资源发现失败: {cause}")


class ExtensionFilterError(TaggingError):
    """扩展 FilterFunc 执行失败"""
    stage = 'FilterFunc'

    def __init__(self, namespace: str, cause: Exception):
        self.cause = cause
        super().__init__(namespace, f"扩展资源过滤失败: {cause}")


class ExpectedResourcesNotFoundError(TaggingError):
    """配置了资源发现但结果为空，通常意味着配置错误"""
    stage = 'post-check'

    def __init__(self, namespace: str, region: str):
        self.region = region
        super().__init__(namespace, f"expected to discover resources but none were found (region: {region})")
