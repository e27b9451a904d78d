# -*- coding: utf-8 -*-
"""
Auto Scaling API 客户端模块

功能：
- 封装 DescribeAutoScalingGroups 调用
- 返回 Auto Scaling 组的 ARN 和标签
"""

import boto3
import logging
from typing import List, Dict, Any
from botocore.exceptions import ClientError

from promutil.counters import EXTENSION_API_REQUESTS

logger = logging.getLogger(__name__)


class AutoScalingClient:
    """Auto Scaling API 客户端"""

    def __init__(self, region: str = 'us-east-1', access_key: str = None, secret_key: str = None, client=None):
        """
        初始化 Auto Scaling 客户端

        Args:
            region: AWS 区域
            access_key: AWS Access Key（可选）
            secret_key: AWS Secret Key（可选）
            client: 已创建的 boto3 autoscaling 客户端（可选）
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
                self.client = session.client('autoscaling', region_name=region)
            else:
                self.client = boto3.client('autoscaling', region_name=region)
            logger.debug(f"Auto Scaling 客户端初始化成功，区域: {region}")
        except Exception as e:
            logger.error(f"初始化 Auto Scaling 客户端失败: {e}")
            raise

    def describe_auto_scaling_groups(self) -> List[Dict[str, Any]]:
        """
        描述 Auto Scaling 组

        Returns:
            Auto Scaling 组列表，每个包含 AutoScalingGroupARN, AutoScalingGroupName, Tags 字段
        """
        try:
            groups = []

            paginator = self.client.get_paginator('describe_auto_scaling_groups')

            for page in paginator.paginate():
                EXTENSION_API_REQUESTS.labels(api='autoscaling').inc()
                for group in page.get('AutoScalingGroups', []):
                    groups.append({
                        'AutoScalingGroupARN': group.get('AutoScalingGroupARN', ''),
                        'AutoScalingGroupName': group.get('AutoScalingGroupName', ''),
                        'Tags': [
                            {'Key': t.get('Key', ''), 'Value': t.get('Value', '')}
                            for t in group.get('Tags', [])
                        ]
                    })

            logger.debug(f"获取到 {len(groups)} 个 Auto Scaling 组")
            return groups

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.error(f"DescribeAutoScalingGroups 失败: {error_code} - {error_message}")
            raise
        except Exception as e:
            logger.error(f"DescribeAutoScalingGroups 失败: {e}")
            raise
