# -*- coding: utf-8 -*-
"""
AWS 客户端工厂

功能：
- 按区域创建 CloudWatch 客户端和资源发现客户端（含各服务 API 客户端）
- 每个区域只创建一次并复用，并发限制装饰器因此在同一区域内共享
"""

import boto3
import logging
import threading
from typing import Dict

from api.aws.apigateway import APIGatewayClient
from api.aws.autoscaling import AutoScalingClient
from api.aws.dms import DMSClient
from api.aws.ec2 import EC2Client
from api.aws.prometheus import PrometheusServiceClient
from api.aws.shield import ShieldClient
from api.aws.storagegateway import StorageGatewayClient
from cloudwatch.client import CloudWatchClient
from cloudwatch.concurrency import ConcurrencyConfig, LimitedConcurrencyClient as LimitedCloudWatchClient
from config.settings import Settings
from tagging.client import Client, TaggingClient
from tagging.concurrency import LimitedConcurrencyClient

logger = logging.getLogger(__name__)


class ClientFactory:
    """
    按区域缓存的客户端工厂

    boto3 客户端是线程安全的，缓存后可被多个采集线程共用
    """

    def __init__(self, settings: Settings):
        """
        初始化客户端工厂

        Args:
            settings: 进程级配置（凭证、并发上限）
        """
        self.settings = settings
        self._cloudwatch_config = ConcurrencyConfig(
            single_limit=settings.cloudwatch_concurrency,
            per_api_limit_enabled=settings.cloudwatch_per_api_limit,
            list_metrics=settings.cloudwatch_concurrency,
            get_metric_data=settings.cloudwatch_concurrency,
            get_metric_statistics=settings.cloudwatch_concurrency
        )
        self._cloudwatch_clients: Dict[str, LimitedCloudWatchClient] = {}
        self._tagging_clients: Dict[str, Client] = {}
        self._lock = threading.Lock()

    def get_cloudwatch_client(self, region: str) -> LimitedCloudWatchClient:
        """获取区域的 CloudWatch 客户端（带并发限制）"""
        with self._lock:
            if region not in self._cloudwatch_clients:
                client = CloudWatchClient(
                    region=region,
                    access_key=self.settings.access_key,
                    secret_key=self.settings.secret_key
                )
                self._cloudwatch_clients[region] = LimitedCloudWatchClient(
                    client, self._cloudwatch_config.new_limiter()
                )
                logger.info(f"创建 CloudWatch 客户端，区域: {region}")
            return self._cloudwatch_clients[region]

    def get_tagging_client(self, region: str) -> Client:
        """获取区域的资源发现客户端（带并发限制）"""
        with self._lock:
            if region not in self._tagging_clients:
                self._tagging_clients[region] = LimitedConcurrencyClient(
                    self._create_tagging_client(region),
                    self.settings.tagging_api_concurrency
                )
                logger.info(f"创建资源发现客户端，区域: {region}")
            return self._tagging_clients[region]

    def _create_tagging_client(self, region: str) -> TaggingClient:
        access_key = self.settings.access_key
        secret_key = self.settings.secret_key

        if access_key and secret_key:
            session = boto3.Session(
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key
            )
        else:
            session = boto3.Session()

        return TaggingClient(
            tagging_api=session.client('resourcegroupstaggingapi', region_name=region),
            ec2=EC2Client(region, access_key, secret_key),
            autoscaling=AutoScalingClient(region, access_key, secret_key),
            apigateway=APIGatewayClient(region, access_key, secret_key),
            dms=DMSClient(region, access_key, secret_key),
            prometheus=PrometheusServiceClient(region, access_key, secret_key),
            storagegateway=StorageGatewayClient(region, access_key, secret_key),
            shield=ShieldClient(access_key, secret_key)
        )
