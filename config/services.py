# -*- coding: utf-8 -*-
"""
支持的 AWS 服务定义

功能：
- 定义每个命名空间的别名和 Tagging API 资源类型过滤条件
- 没有资源类型过滤条件的服务只能通过扩展钩子发现资源（或不需要资源）
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ServiceConfig:
    """单个服务的描述"""
    namespace: str                                           # CloudWatch 命名空间，如 "AWS/EC2"
    alias: str                                               # 简称，如 "ec2"
    resource_filters: List[str] = field(default_factory=list)  # Tagging API ResourceTypeFilters


SUPPORTED_SERVICES: List[ServiceConfig] = [
    ServiceConfig('AWS/ApiGateway', 'apigateway', ['apigateway']),
    ServiceConfig('AWS/ApplicationELB', 'alb', [
        'elasticloadbalancing:loadbalancer/app',
        'elasticloadbalancing:targetgroup',
    ]),
    ServiceConfig('AWS/AutoScaling', 'asg'),
    ServiceConfig('AWS/DDoSProtection', 'shield', ['shield:protection']),
    ServiceConfig('AWS/DMS', 'dms', ['dms:rep']),
    ServiceConfig('AWS/DynamoDB', 'dynamodb', ['dynamodb:table']),
    ServiceConfig('AWS/EBS', 'ebs', ['ec2:volume']),
    ServiceConfig('AWS/EC2', 'ec2', ['ec2:instance']),
    ServiceConfig('AWS/EC2Spot', 'ec2Spot'),
    ServiceConfig('AWS/ECS', 'ecs-svc', ['ecs:cluster', 'ecs:service']),
    ServiceConfig('AWS/ElastiCache', 'ec', ['elasticache:cluster']),
    ServiceConfig('AWS/Lambda', 'lambda', ['lambda:function']),
    ServiceConfig('AWS/NetworkELB', 'nlb', [
        'elasticloadbalancing:loadbalancer/net',
        'elasticloadbalancing:targetgroup',
    ]),
    ServiceConfig('AWS/Prometheus', 'amp'),
    ServiceConfig('AWS/RDS', 'rds', ['rds:db', 'rds:cluster']),
    ServiceConfig('AWS/S3', 's3', ['s3']),
    ServiceConfig('AWS/SNS', 'sns', ['sns']),
    ServiceConfig('AWS/SQS', 'sqs', ['sqs']),
    ServiceConfig('AWS/StorageGateway', 'sgw'),
    ServiceConfig('AWS/TransitGateway', 'tgw', ['ec2:transit-gateway']),
    ServiceConfig('AWS/Usage', 'usage'),
]

_BY_NAMESPACE: Dict[str, ServiceConfig] = {svc.namespace: svc for svc in SUPPORTED_SERVICES}
_BY_ALIAS: Dict[str, ServiceConfig] = {svc.alias: svc for svc in SUPPORTED_SERVICES}


def get_service(namespace: str) -> Optional[ServiceConfig]:
    """
    按命名空间或别名查找服务

    Args:
        namespace: 命名空间（如 "AWS/EC2"）或别名（如 "ec2"）

    Returns:
        ServiceConfig，不支持的服务返回 None
    """
    return _BY_NAMESPACE.get(namespace) or _BY_ALIAS.get(namespace)
