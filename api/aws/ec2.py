# -*- coding: utf-8 -*-
"""
EC2 API 客户端模块

功能：
- 封装 EC2 API 调用（DescribeSpotFleetRequests, DescribeTransitGatewayAttachments）
- 返回带标签的资源数据供扩展钩子发现资源
"""

import boto3
import logging
from typing import List, Dict, Any
from botocore.exceptions import ClientError

from promutil.counters import EXTENSION_API_REQUESTS

logger = logging.getLogger(__name__)


class EC2Client:
    """
    EC2 API 客户端

    功能：
    - 调用 EC2 Describe API 获取资源信息
    - 分页拉取全部结果
    - 返回标准化的资源数据
    """

    def __init__(self, region: str = 'us-east-1', access_key: str = None, secret_key: str = None, client=None):
        """
        初始化 EC2 客户端

        Args:
            region: AWS 区域
            access_key: AWS Access Key（可选，如果提供则使用指定凭证）
            secret_key: AWS Secret Key（可选，如果提供则使用指定凭证）
            client: 已创建的 boto3 ec2 客户端（可选）
        """
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
                self.client = session.client('ec2', region_name=region)
                logger.debug(f"EC2 客户端初始化成功（使用指定凭证），区域: {region}")
            else:
                self.client = boto3.client('ec2', region_name=region)
                logger.debug(f"EC2 客户端初始化成功（使用默认凭证链），区域: {region}")
        except Exception as e:
            logger.error(f"初始化 EC2 客户端失败: {e}")
            raise

    def describe_spot_fleet_requests(self) -> List[Dict[str, Any]]:
        """
        描述 Spot Fleet 请求

        Returns:
            Spot Fleet 列表，每个包含 SpotFleetRequestId, State, Tags 字段
        """
        try:
            requests = []

            paginator = self.client.get_paginator('describe_spot_fleet_requests')

            for page in paginator.paginate():
                EXTENSION_API_REQUESTS.labels(api='ec2').inc()
                for config in page.get('SpotFleetRequestConfigs', []):
                    requests.append({
                        'SpotFleetRequestId': config.get('SpotFleetRequestId', ''),
                        'State': config.get('SpotFleetRequestState', ''),
                        'Tags': config.get('Tags', [])
                    })

            logger.debug(f"获取到 {len(requests)} 个 Spot Fleet 请求")
            return requests

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.error(f"DescribeSpotFleetRequests 失败: {error_code} - {error_message}")
            raise
        except Exception as e:
            logger.error(f"DescribeSpotFleetRequests 失败: {e}")
            raise

    def describe_transit_gateway_attachments(self) -> List[Dict[str, Any]]:
        """
        描述 Transit Gateway 挂载

        Returns:
            挂载列表，每个包含 TransitGatewayId, TransitGatewayAttachmentId, Tags 字段
        """
        try:
            attachments = []

            paginator = self.client.get_paginator('describe_transit_gateway_attachments')

            for page in paginator.paginate():
                EXTENSION_API_REQUESTS.labels(api='ec2').inc()
                for attachment in page.get('TransitGatewayAttachments', []):
                    attachments.append({
                        'TransitGatewayId': attachment.get('TransitGatewayId', ''),
                        'TransitGatewayAttachmentId': attachment.get('TransitGatewayAttachmentId', ''),
                        'State': attachment.get('State', ''),
                        'Tags': attachment.get('Tags', [])
                    })

            logger.debug(f"获取到 {len(attachments)} 个 Transit Gateway 挂载")
            return attachments

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.error(f"DescribeTransitGatewayAttachments 失败: {error_code} - {error_message}")
            raise
        except Exception as e:
            logger.error(f"DescribeTransitGatewayAttachments 失败: {e}")
            raise
