# -*- coding: utf-8 -*-
"""
API Gateway 客户端模块

功能：
- 封装 REST API（apigateway GetRestApis）和 HTTP/WebSocket API（apigatewayv2 GetApis）调用
- 返回 API 的 ID 和名称，用于把 Tagging API 返回的 ARN 映射到 CloudWatch 维度
"""

import boto3
import logging
from typing import List, Dict
from botocore.exceptions import ClientError

from promutil.counters import EXTENSION_API_REQUESTS

logger = logging.getLogger(__name__)


class APIGatewayClient:
    """
    API Gateway 客户端

    同时持有 apigateway（REST）和 apigatewayv2（HTTP/WebSocket）两个 boto3 客户端
    """

    def __init__(self, region: str = 'us-east-1', access_key: str = None, secret_key: str = None,
                 client=None, client_v2=None):
        """
        初始化 API Gateway 客户端

        Args:
            region: AWS 区域
            access_key: AWS Access Key（可选）
            secret_key: AWS Secret Key（可选）
            client: 已创建的 boto3 apigateway 客户端（可选）
            client_v2: 已创建的 boto3 apigatewayv2 客户端（可选）
        """
        self.region = region
        if client is not None and client_v2 is not None:
            self.client = client
            self.client_v2 = client_v2
            return

        try:
            if access_key and secret_key:
                session = boto3.Session(
                    aws_access_key_id=access_key,
                    aws_secret_access_key=secret_key
                )
            else:
                session = boto3.Session()
            self.client = client or session.client('apigateway', region_name=region)
            self.client_v2 = client_v2 or session.client('apigatewayv2', region_name=region)
            logger.debug(f"API Gateway 客户端初始化成功，区域: {region}")
        except Exception as e:
            logger.error(f"初始化 API Gateway 客户端失败: {e}")
            raise

    def get_rest_apis(self) -> List[Dict[str, str]]:
        """
        列出 REST API

        Returns:
            REST API 列表，每个包含 id, name 字段
        """
        try:
            apis = []

            paginator = self.client.get_paginator('get_rest_apis')

            for page in paginator.paginate(PaginationConfig={'PageSize': 500}):
                EXTENSION_API_REQUESTS.labels(api='apigateway').inc()
                for item in page.get('items', []):
                    apis.append({'id': item.get('id', ''), 'name': item.get('name', '')})

            logger.debug(f"获取到 {len(apis)} 个 REST API")
            return apis

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.error(f"GetRestApis 失败: {error_code} - {error_message}")
            raise
        except Exception as e:
            logger.error(f"GetRestApis 失败: {e}")
            raise

    def get_apis(self) -> List[Dict[str, str]]:
        """
        列出 HTTP/WebSocket API（apigatewayv2）

        Returns:
            API 列表，每个包含 id, name, protocol 字段
        """
        try:
            apis = []

            paginator = self.client_v2.get_paginator('get_apis')

            for page in paginator.paginate():
                EXTENSION_API_REQUESTS.labels(api='apigatewayv2').inc()
                for item in page.get('Items', []):
                    apis.append({
                        'id': item.get('ApiId', ''),
                        'name': item.get('Name', ''),
                        'protocol': item.get('ProtocolType', '')
                    })

            logger.debug(f"获取到 {len(apis)} 个 HTTP/WebSocket API")
            return apis

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.error(f"GetApis 失败: {error_code} - {error_message}")
            raise
        except Exception as e:
            logger.error(f"GetApis 失败: {e}")
            raise
