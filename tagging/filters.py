# -*- coding: utf-8 -*-
"""
按命名空间注册的资源发现扩展

功能：
- ResourceFunc：发现 Tagging API 无法枚举（或标签需要其它 API 获取）的资源
- FilterFunc：对已发现的资源做 Tagging 标签匹配以外的过滤/转换

注册表在导入时构建一次，之后只读，可在线程间共享。
钩子签名：
    resource_func(client, job, region) -> List[TaggedResource]
    filter_func(client, resources) -> List[TaggedResource]
其中 client 是 TaggingClient，钩子通过它访问各服务 API 客户端。
"""

import logging
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional

from model.model import Job, Tag, TaggedResource

logger = logging.getLogger(__name__)

ResourceFunc = Callable[..., List[TaggedResource]]
FilterFunc = Callable[..., List[TaggedResource]]


@dataclass(frozen=True)
class ServiceFilter:
    """单个命名空间的扩展钩子"""
    resource_func: Optional[ResourceFunc] = None
    filter_func: Optional[FilterFunc] = None

    def has_resource_func(self) -> bool:
        return self.resource_func is not None

    def has_filter_func(self) -> bool:
        return self.filter_func is not None


def _to_tags(aws_tags: List[Dict[str, str]]) -> List[Tag]:
    return [Tag(key=t.get('Key', ''), value=t.get('Value', '')) for t in aws_tags]


def _keep_matching(resources: List[TaggedResource], job: Job) -> List[TaggedResource]:
    matched = []
    for resource in resources:
        if resource.filter_through_tags(job.search_tags):
            matched.append(resource)
        else:
            logger.debug(f"资源标签不匹配，跳过: {resource.arn}")
    return matched


def _filter_api_gateway(client, resources: List[TaggedResource]) -> List[TaggedResource]:
    """
    只保留仍然存在的 API，并把 REST API ARN 中的 ID 替换为名称

    CloudWatch 中 REST API 的维度是 ApiName，HTTP/WebSocket API 的维度是 ApiId
    """
    rest_apis = client.apigateway.get_rest_apis()
    http_apis = client.apigateway.get_apis()

    output = []
    for resource in resources:
        for api in rest_apis:
            if resource.arn.endswith('/restapis/' + api['id']):
                output.append(replace(resource, arn=resource.arn.replace(api['id'], api['name'])))
                rest_apis.remove(api)
                break
        for api in http_apis:
            if resource.arn.endswith('/apis/' + api['id']):
                output.append(resource)
                http_apis.remove(api)
                break
    return output


def _discover_auto_scaling_groups(client, job: Job, region: str) -> List[TaggedResource]:
    resources = [
        TaggedResource(
            arn=group['AutoScalingGroupARN'],
            namespace=job.type,
            region=region,
            tags=_to_tags(group['Tags'])
        )
        for group in client.autoscaling.describe_auto_scaling_groups()
    ]
    return _keep_matching(resources, job)


def _filter_dms(client, resources: List[TaggedResource]) -> List[TaggedResource]:
    """在复制实例和复制任务的 ARN 后追加复制实例标识符"""
    if not resources:
        return resources

    identifiers = {
        instance['ReplicationInstanceArn']: instance['ReplicationInstanceIdentifier']
        for instance in client.dms.describe_replication_instances()
    }
    for task in client.dms.describe_replication_tasks():
        identifier = identifiers.get(task['ReplicationInstanceArn'])
        if identifier is not None:
            identifiers[task['ReplicationTaskArn']] = identifier

    output = []
    for resource in resources:
        identifier = identifiers.get(resource.arn)
        if identifier is not None:
            output.append(replace(resource, arn=f"{resource.arn}/{identifier}"))
        else:
            output.append(resource)
    return output


def _discover_spot_fleets(client, job: Job, region: str) -> List[TaggedResource]:
    resources = [
        TaggedResource(
            arn=request['SpotFleetRequestId'],
            namespace=job.type,
            region=region,
            tags=_to_tags(request['Tags'])
        )
        for request in client.ec2.describe_spot_fleet_requests()
    ]
    return _keep_matching(resources, job)


def _discover_prometheus_workspaces(client, job: Job, region: str) -> List[TaggedResource]:
    resources = [
        TaggedResource(
            arn=workspace['arn'],
            namespace=job.type,
            region=region,
            tags=[Tag(key=k, value=v) for k, v in workspace['tags'].items()]
        )
        for workspace in client.prometheus.list_workspaces()
    ]
    return _keep_matching(resources, job)


def _discover_storage_gateways(client, job: Job, region: str) -> List[TaggedResource]:
    resources = []
    for gateway in client.storagegateway.list_gateways():
        tags = client.storagegateway.list_tags_for_resource(gateway['GatewayARN'])
        resources.append(TaggedResource(
            arn=f"{gateway['GatewayId']}/{gateway['GatewayName']}",
            namespace=job.type,
            region=region,
            tags=_to_tags(tags)
        ))
    return _keep_matching(resources, job)


def _discover_transit_gateway_attachments(client, job: Job, region: str) -> List[TaggedResource]:
    resources = [
        TaggedResource(
            arn=f"{attachment['TransitGatewayId']}/{attachment['TransitGatewayAttachmentId']}",
            namespace=job.type,
            region=region,
            tags=_to_tags(attachment['Tags'])
        )
        for attachment in client.ec2.describe_transit_gateway_attachments()
    ]
    return _keep_matching(resources, job)


def _discover_shield_protections(client, job: Job, region: str) -> List[TaggedResource]:
    """
    Shield 防护是全局的：只保留被防护资源位于当前区域的防护，
    全局资源（ARN 中无区域，如 CloudFront）只在 us-east-1 返回
    """
    resources = []
    for protection in client.shield.list_protections():
        parts = protection['ResourceArn'].split(':', 5)
        if len(parts) != 6 or parts[0] != 'arn':
            logger.debug(f"无法解析被防护资源 ARN，跳过: {protection['ResourceArn']}")
            continue

        resource_region = parts[3]
        if resource_region == region or (resource_region == '' and region == 'us-east-1'):
            resources.append(TaggedResource(
                arn=protection['ResourceArn'],
                namespace=job.type,
                region=region,
                tags=[Tag(key='ProtectionArn', value=protection['ProtectionArn'])]
            ))
    return resources


SERVICE_FILTERS: Mapping[str, ServiceFilter] = MappingProxyType({
    'AWS/ApiGateway': ServiceFilter(filter_func=_filter_api_gateway),
    'AWS/AutoScaling': ServiceFilter(resource_func=_discover_auto_scaling_groups),
    'AWS/DDoSProtection': ServiceFilter(resource_func=_discover_shield_protections),
    'AWS/DMS': ServiceFilter(filter_func=_filter_dms),
    'AWS/EC2Spot': ServiceFilter(resource_func=_discover_spot_fleets),
    'AWS/Prometheus': ServiceFilter(resource_func=_discover_prometheus_workspaces),
    'AWS/StorageGateway': ServiceFilter(resource_func=_discover_storage_gateways),
    'AWS/TransitGateway': ServiceFilter(resource_func=_discover_transit_gateway_attachments),
})

_NO_FILTER = ServiceFilter()


def get_service_filter(namespace: str) -> ServiceFilter:
    """
    查找命名空间的扩展钩子

    Returns:
        ServiceFilter，未注册的命名空间返回不含钩子的空实例
    """
    return SERVICE_FILTERS.get(namespace, _NO_FILTER)
