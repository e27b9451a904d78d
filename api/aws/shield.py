# -*- coding: utf-8 -*-
"""
Shield Advanced API 客户端模块

功能：
- 封装 ListProtections 调用
- 返回防护 ARN 和被防护资源 ARN

Shield 是全局服务，客户端固定使用 us-east-1
"""

import boto3
import logging
from typing import List, Dict
from botocore.exceptions import ClientError

from promutil.counters import EXTENSION_API_REQUESTS

logger = logging.getLogger(__name__)

SHIELD_REGION = 'us-east-1'


class ShieldClient:
    """Shield API 客户端"""

    def __init__(self, access_key: str = None, secret_key: str = None, client=None):
        if client is not None:
            self.client = client
            return

        try:
            if access_key and secret_key:
                session = boto3.Session(
                    aws_access_key_id=access_key,
                    aws_secret_access_key=secret_key
                )
                self.client = session.client('shield', region_name=SHIELD_REGION)
            else:
                self.client = boto3.client('shield', region_name=SHIELD_REGION)
            logger.debug("Shield 客户端初始化成功")
        except Exception as e:
            logger.error(f"初始化 Shield 客户端失败: {e}")
            raise

    def list_protections(self) -> List[Dict[str, str]]:
        """
        列出 Shield 防护

        Returns:
            防护列表，每个包含 ProtectionArn, ResourceArn 字段
        """
        try:
            protections = []

            paginator = self.client.get_paginator('list_protections')

            for page in paginator.paginate():
                EXTENSION_API_REQUESTS.labels(api='shield').inc()
                for protection in page.get('Protections', []):
                    protections.append({
                        'ProtectionArn': protection.get('ProtectionArn', ''),
                        'ResourceArn': protection.get('ResourceArn', '')
                    })

            logger.debug(f"获取到 {len(protections)} 个 Shield 防护")
            return protections

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.error(f"ListProtections 失败: {error_code} - {error_message}")
            raise
        except Exception as e:
            logger.error(f"ListProtections 失败: {e}")
            raise
