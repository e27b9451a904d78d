# -*- coding: utf-8 -*-
import boto3
import pytest
from prometheus_client import REGISTRY


@pytest.fixture
def boto_client():
    """创建不需要真实凭证的 boto3 客户端（配合 Stubber 使用）"""
    def _make(service_name, region='us-east-1'):
        return boto3.client(
            service_name,
            region_name=region,
            aws_access_key_id='testing',
            aws_secret_access_key='testing'
        )
    return _make


@pytest.fixture
def sample_value():
    """读取默认注册表中的样本值，不存在时返回 0"""
    def _get(name, labels=None):
        value = REGISTRY.get_sample_value(name, labels or {})
        return value if value is not None else 0.0
    return _get
