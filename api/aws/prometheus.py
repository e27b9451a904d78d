# -*- coding: utf-8 -*-
"""
Amazon Managed Service for Prometheus API 客户端模块

功能：
- 封装 ListWorkspaces 调用
- 返回工作区 ARN 和标签
"""

import boto3
import logging
from typing import List, Dict, Any
from botocore.exceptions import ClientError

from promutil.counters import EXTENSION_API_REQUESTS

logger = logging.getLogger(__name__)


class PrometheusServiceClient:
    """AMP API 客户端"""

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
                self.client = session.client('amp', region_name=region)
            else:
                self.client = boto3.client('amp', region_name=region)
            logger.debug(f"AMP 客户端初始化成功，区域: {region}")
        except Exception as e:
            logger.error(f"初始化 AMP 客户端失败: {e}")
            raise

    def list_workspaces(self) -> List[Dict[str, Any]]:
        """
        列出 Prometheus 工作区

        Returns:
            工作区列表，每个包含 arn, workspaceId, tags（字典）字段
        """
        try:
            workspaces = []

            paginator = self.client.get_paginator('list_workspaces')

            for page in paginator.paginate():
                EXTENSION_API_REQUESTS.labels(api='amp').inc()
                for workspace in page.get('workspaces', []):
                    workspaces.append({
                        'arn': workspace.get('arn', ''),
                        'workspaceId': workspace.get('workspaceId', ''),
                        'tags': dict(workspace.get('tags', {}))
                    })

            logger.debug(f"获取到 {len(workspaces)} 个 Prometheus 工作区")
            return workspaces

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.error(f"ListWorkspaces 失败: {error_code} - {error_message}")
            raise
        except Exception as e:
            logger.error(f"ListWorkspaces 失败: {e}")
            raise
