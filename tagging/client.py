# -*- coding: utf-8 -*-
"""
资源发现客户端模块

功能：
- 通过 Resource Groups Tagging API 按资源类型分页发现资源
- 按命名空间调用扩展钩子（ResourceFunc / FilterFunc）
- 按 job 的 search tags 过滤资源
"""

import logging
from abc import ABC, abstractmethod
from typing import List
from botocore.exceptions import ClientError, BotoCoreError

from config.services import get_service
from model.model import Job, Tag, TaggedResource
from promutil.counters import API_CALLS, API_ERRORS, RESOURCE_TAGGING_REQUESTS
from tagging.errors import (
    DiscoveryAbortedError,
    ExpectedResourcesNotFoundError,
    ExtensionFilterError,
    ExtensionResourceError,
    UnsupportedNamespaceError,
)
from tagging.filters import get_service_filter

logger = logging.getLogger(__name__)

# API 文档允许的最大值
RESOURCES_PER_PAGE = 100


class Client(ABC):
    """
    资源发现接口

    调度方只依赖该接口，不关心是否经过并发限制
    """

    @abstractmethod
    def get_resources(self, job: Job, region: str) -> List[TaggedResource]:
        """
        发现 job 在指定区域内的资源

        Args:
            job: 资源发现任务
            region: AWS 区域

        Returns:
            TaggedResource 列表

        Raises:
            TaggingError: 发现失败或预期有资源但结果为空
        """
        pass


class TaggingClient(Client):
    """
    资源发现客户端

    功能：
    - 通用发现：Tagging API 分页 + search tags 过滤
    - 扩展发现：注册表中的 ResourceFunc / FilterFunc
    - 后置检查：预期有资源但结果为空时报错

    除注入的 API 客户端外不持有可变状态，可被多个线程并发调用
    """

    def __init__(self, tagging_api, ec2=None, autoscaling=None, apigateway=None, dms=None,
                 prometheus=None, storagegateway=None, shield=None):
        """
        初始化资源发现客户端

        Args:
            tagging_api: boto3 resourcegroupstaggingapi 客户端
            ec2: api.aws.ec2.EC2Client（EC2Spot、TransitGateway 扩展使用）
            autoscaling: api.aws.autoscaling.AutoScalingClient
            apigateway: api.aws.apigateway.APIGatewayClient
            dms: api.aws.dms.DMSClient
            prometheus: api.aws.prometheus.PrometheusServiceClient
            storagegateway: api.aws.storagegateway.StorageGatewayClient
            shield: api.aws.shield.ShieldClient
        """
        self.tagging_api = tagging_api
        self.ec2 = ec2
        self.autoscaling = autoscaling
        self.apigateway = apigateway
        self.dms = dms
        self.prometheus = prometheus
        self.storagegateway = storagegateway
        self.shield = shield

    def get_resources(self, job: Job, region: str) -> List[TaggedResource]:
        svc = get_service(job.type)
        if svc is None:
            raise UnsupportedNamespaceError(job.type)

        resources: List[TaggedResource] = []
        should_have_discovered_resources = False

        # 1. 通用发现
        if svc.resource_filters:
            should_have_discovered_resources = True
            resources.extend(self._discover_tagged_resources(job, region, svc.resource_filters))
            logger.debug(f"GetResources 分页完成 ({svc.namespace}, {region}): 共 {len(resources)} 个资源")

        ext = get_service_filter(svc.namespace)

        # 2. 扩展发现
        if ext.has_resource_func():
            should_have_discovered_resources = True
            try:
                new_resources = ext.resource_func(self, job, region)
            except Exception as e:
                logger.error(f"ResourceFunc 执行失败 ({svc.namespace}, {region}): {e}")
                raise ExtensionResourceError(svc.namespace, e) from e
            resources.extend(new_resources)
            logger.debug(f"ResourceFunc 完成 ({svc.namespace}, {region}): 共 {len(resources)} 个资源")

        # 3. 扩展过滤（替换结果集）
        if ext.has_filter_func():
            try:
                resources = ext.filter_func(self, resources)
            except Exception as e:
                logger.error(f"FilterFunc 执行失败 ({svc.namespace}, {region}): {e}")
                raise ExtensionFilterError(svc.namespace, e) from e
            logger.debug(f"FilterFunc 完成 ({svc.namespace}, {region}): 共 {len(resources)} 个资源")

        if should_have_discovered_resources and not resources:
            raise ExpectedResourcesNotFoundError(svc.namespace, region)

        return resources

    def _discover_tagged_resources(self, job: Job, region: str, resource_filters: List[str]) -> List[TaggedResource]:
        """
        通过 Tagging API 分页发现资源并按 search tags 过滤

        Raises:
            DiscoveryAbortedError: 任意一页调用失败
        """
        resources = []
        try:
            paginator = self.tagging_api.get_paginator('get_resources')
            pages = paginator.paginate(
                ResourceTypeFilters=resource_filters,
                ResourcesPerPage=RESOURCES_PER_PAGE
            )
            for page_num, page in enumerate(pages, 1):
                RESOURCE_TAGGING_REQUESTS.inc()
                API_CALLS.labels(operation='GetResources').inc()

                for mapping in page.get('ResourceTagMappingList', []):
                    resource = TaggedResource(
                        arn=mapping.get('ResourceARN', ''),
                        namespace=job.type,
                        region=region,
                        tags=[Tag(key=t['Key'], value=t['Value']) for t in mapping.get('Tags', [])]
                    )

                    if resource.filter_through_tags(job.search_tags):
                        resources.append(resource)
                    else:
                        logger.debug(f"资源标签不匹配 search tags，跳过: {resource.arn}")

                logger.debug(f"GetResources 第 {page_num} 页 ({job.type}, {region}): 累计 {len(resources)} 个资源")

        except (ClientError, BotoCoreError) as e:
            API_ERRORS.labels(operation='GetResources').inc()
            logger.error(f"GetResources 失败 ({job.type}, {region}): {e}")
            raise DiscoveryAbortedError(job.type, region, e) from e

        return resources
