# -*- coding: utf-8 -*-
"""
Storage Gateway API 客户端模块

功能：
- 封装 ListGateways / ListTagsForResource 调用
- Tagging API 无法返回网关标签，需要逐个查询
"""

import boto3
import logging
from typing import List, Dict
from botocore.exceptions import ClientError

from promutil.counters import EXTENSION_API_REQUESTS

logger = logging.getLogger(__name__)


class StorageGatewayClient:
    """Storage Gateway API 客户端"""

    def __init__(self, region: str = 'us-east-1', access_key: str = None, secret_key: str = None, client=None):
        self.region = region
        if client is not None:
            self.client = client
            return

        try:
            if access_key and secret_key:
                session = boto3.Session(
                    aws_access_key_id=access_key,
                    aws_secret_access_key=secret_key
                )
                self.client = session.client('storagegateway', region_name=region)
            else:
                self.client = boto3.client('storagegateway', region_name=region)
            logger.debug(f"Storage Gateway 客户端初始化成功，区域: {region}")
        except Exception as e:
            logger.error(f"初始化 Storage Gateway 客户端失败: {e}")
            raise

    def list_gateways(self) -> List[Dict[str, str]]:
        """
        列出网关

        Returns:
            网关列表，每个包含 GatewayId, GatewayARN, GatewayName 字段
        """
        try:
            gateways = []

            paginator = self.client.get_paginator('list_gateways')

            for page in paginator.paginate():
                EXTENSION_API_REQUESTS.labels(api='storagegateway').inc()
                for gateway in page.get('Gateways', []):
                    gateways.append({
                        'GatewayId': gateway.get('GatewayId', ''),
                        'GatewayARN': gateway.get('GatewayARN', ''),
                        'GatewayName': gateway.get('GatewayName', '')
                    })

            logger.debug(f"获取到 {len(gateways)} 个 Storage Gateway")
            return gateways

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.error(f"ListGateways 失败: {error_code} - {error_message}")
            raise
        except Exception as e:
            logger.error(f"ListGateways 失败: {e}")
            raise

    def list_tags_for_resource(self, resource_arn: str) -> List[Dict[str, str]]:
        """
        获取资源标签

        Args:
            resource_arn: 网关 ARN

        Returns:
            标签列表，每个包含 Key, Value 字段
        """
        try:
            tags = []

            paginator = self.client.get_paginator('list_tags_for_resource')

            for page in paginator.paginate(ResourceARN=resource_arn):
                EXTENSION_API_REQUESTS.labels(api='storagegateway').inc()
                tags.extend(page.get('Tags', []))

            return tags

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.error(f"ListTagsForResource 失败 (arn: {resource_arn}): {error_code} - {error_message}")
            raise
        except Exception as e:
            logger.error(f"ListTagsForResource 失败 (arn: {resource_arn}): {e}")
            raise
