# -*- coding: utf-8 -*-
"""
Prometheus 工具模块

功能：
- 客户端层使用的 API 调用计数器
- 统计方法辅助判断
"""
