# -*- coding: utf-8 -*-
"""
Database Migration Service API 客户端模块

功能：
- 封装 DescribeReplicationInstances / DescribeReplicationTasks 调用
- 返回复制实例标识符，用于补全 DMS 资源 ARN
"""

import boto3
import logging
from typing import List, Dict
from botocore.exceptions import ClientError

from promutil.counters import EXTENSION_API_REQUESTS

logger = logging.getLogger(__name__)


class DMSClient:
    """DMS API 客户端"""

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
                self.client = session.client('dms', region_name=region)
            else:
                self.client = boto3.client('dms', region_name=region)
            logger.debug(f"DMS 客户端初始化成功，区域: {region}")
        except Exception as e:
            logger.error(f"初始化 DMS 客户端失败: {e}")
            raise

    def describe_replication_instances(self) -> List[Dict[str, str]]:
        """
        描述复制实例

        Returns:
            复制实例列表，每个包含 ReplicationInstanceArn, ReplicationInstanceIdentifier 字段
        """
        try:
            instances = []

            paginator = self.client.get_paginator('describe_replication_instances')

            for page in paginator.paginate():
                EXTENSION_API_REQUESTS.labels(api='dms').inc()
                for instance in page.get('ReplicationInstances', []):
                    instances.append({
                        'ReplicationInstanceArn': instance.get('ReplicationInstanceArn', ''),
                        'ReplicationInstanceIdentifier': instance.get('ReplicationInstanceIdentifier', '')
                    })

            logger.debug(f"获取到 {len(instances)} 个 DMS 复制实例")
            return instances

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.error(f"DescribeReplicationInstances 失败: {error_code} - {error_message}")
            raise
        except Exception as e:
            logger.error(f"DescribeReplicationInstances 失败: {e}")
            raise

    def describe_replication_tasks(self) -> List[Dict[str, str]]:
        """
        描述复制任务

        Returns:
            复制任务列表，每个包含 ReplicationTaskArn, ReplicationInstanceArn 字段
        """
        try:
            tasks = []

            paginator = self.client.get_paginator('describe_replication_tasks')

            # 不需要任务设置，减少响应体积
            for page in paginator.paginate(WithoutSettings=True):
                EXTENSION_API_REQUESTS.labels(api='dms').inc()
                for task in page.get('ReplicationTasks', []):
                    tasks.append({
                        'ReplicationTaskArn': task.get('ReplicationTaskArn', ''),
                        'ReplicationInstanceArn': task.get('ReplicationInstanceArn', '')
                    })

            logger.debug(f"获取到 {len(tasks)} 个 DMS 复制任务")
            return tasks

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.error(f"DescribeReplicationTasks 失败: {error_code} - {error_message}")
            raise
        except Exception as e:
            logger.error(f"DescribeReplicationTasks 失败: {e}")
            raise
