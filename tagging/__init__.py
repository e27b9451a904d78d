# -*- coding: utf-8 -*-
"""
资源发现模块

功能：
- 通过 Resource Groups Tagging API 和按服务注册的扩展钩子发现资源
- 并发限制装饰器
"""

from .client import Client, TaggingClient
from .concurrency import LimitedConcurrencyClient
from .errors import (
    DiscoveryAbortedError,
    ExpectedResourcesNotFoundError,
    ExtensionFilterError,
    ExtensionResourceError,
    TaggingError,
    UnsupportedNamespaceError,
)

__all__ = [
    'Client',
    'TaggingClient',
    'LimitedConcurrencyClient',
    'TaggingError',
    'DiscoveryAbortedError',
    'ExpectedResourcesNotFoundError',
    'ExtensionFilterError',
    'ExtensionResourceError',
    'UnsupportedNamespaceError',
]
