# -*- coding: utf-8 -*-
"""
AWS Provider 模块

功能：
- 按区域创建并缓存 CloudWatch 客户端和资源发现客户端
"""

from .factory import ClientFactory

__all__ = ['ClientFactory']
