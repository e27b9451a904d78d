# -*- coding: utf-8 -*-
from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from api.aws.apigateway import APIGatewayClient
from api.aws.autoscaling import AutoScalingClient
from api.aws.ec2 import EC2Client
from api.aws.shield import ShieldClient
from api.aws.storagegateway import StorageGatewayClient

GATEWAY_ARN = 'arn:aws:storagegateway:us-east-1:123456789012:gateway/sgw-12A3456B'


def test_transit_gateway_attachments(boto_client, sample_value):
    client = boto_client('ec2')
    before = sample_value('extension_api_requests_total', {'api': 'ec2'})

    with Stubber(client) as stubber:
        stubber.add_response('describe_transit_gateway_attachments', {
            'TransitGatewayAttachments': [{
                'TransitGatewayAttachmentId': 'tgw-attach-1',
                'TransitGatewayId': 'tgw-1',
                'State': 'available',
                'Tags': [{'Key': 'env', 'Value': 'prod'}],
            }],
        })
        attachments = EC2Client(client=client).describe_transit_gateway_attachments()

    assert attachments == [{
        'TransitGatewayId': 'tgw-1',
        'TransitGatewayAttachmentId': 'tgw-attach-1',
        'State': 'available',
        'Tags': [{'Key': 'env', 'Value': 'prod'}],
    }]
    assert sample_value('extension_api_requests_total', {'api': 'ec2'}) - before == 1


def test_spot_fleet_error_is_reraised(boto_client):
    client = boto_client('ec2')

    with Stubber(client) as stubber:
        stubber.add_client_error('describe_spot_fleet_requests', service_error_code='UnauthorizedOperation')
        with pytest.raises(ClientError):
            EC2Client(client=client).describe_spot_fleet_requests()


def test_storage_gateway_tags_follow_marker(boto_client):
    client = boto_client('storagegateway')

    with Stubber(client) as stubber:
        stubber.add_response(
            'list_tags_for_resource',
            {'ResourceARN': GATEWAY_ARN, 'Marker': 'm1', 'Tags': [{'Key': 'env', 'Value': 'prod'}]},
            {'ResourceARN': GATEWAY_ARN}
        )
        stubber.add_response(
            'list_tags_for_resource',
            {'ResourceARN': GATEWAY_ARN, 'Tags': [{'Key': 'team', 'Value': 'storage'}]},
            {'ResourceARN': GATEWAY_ARN, 'Marker': 'm1'}
        )
        tags = StorageGatewayClient(client=client).list_tags_for_resource(GATEWAY_ARN)
        stubber.assert_no_pending_responses()

    assert tags == [{'Key': 'env', 'Value': 'prod'}, {'Key': 'team', 'Value': 'storage'}]


def test_http_apis_follow_next_token(boto_client):
    rest_client = boto_client('apigateway')
    v2_client = boto_client('apigatewayv2')

    with Stubber(v2_client) as stubber:
        stubber.add_response('get_apis', {
            'Items': [{'ApiId': 'a1', 'Name': 'chat', 'ProtocolType': 'WEBSOCKET',
                       'RouteSelectionExpression': '$request.body.action'}],
            'NextToken': 'n1',
        }, {})
        stubber.add_response('get_apis', {
            'Items': [{'ApiId': 'a2', 'Name': 'orders', 'ProtocolType': 'HTTP',
                       'RouteSelectionExpression': '$request.method $request.path'}],
        }, {'NextToken': 'n1'})
        apis = APIGatewayClient(client=rest_client, client_v2=v2_client).get_apis()

    assert apis == [
        {'id': 'a1', 'name': 'chat', 'protocol': 'WEBSOCKET'},
        {'id': 'a2', 'name': 'orders', 'protocol': 'HTTP'},
    ]


def test_rest_apis(boto_client):
    rest_client = boto_client('apigateway')
    v2_client = boto_client('apigatewayv2')

    with Stubber(rest_client) as stubber:
        stubber.add_response('get_rest_apis', {'items': [{'id': 'r1', 'name': 'orders'}]})
        apis = APIGatewayClient(client=rest_client, client_v2=v2_client).get_rest_apis()

    assert apis == [{'id': 'r1', 'name': 'orders'}]


def test_shield_protections(boto_client):
    client = boto_client('shield')

    with Stubber(client) as stubber:
        stubber.add_response('list_protections', {'Protections': [{
            'Id': 'p1',
            'Name': 'web',
            'ResourceArn': 'arn:aws:elasticloadbalancing:us-east-1:123:loadbalancer/app/web/1',
            'ProtectionArn': 'arn:aws:shield::123:protection/p1',
        }]})
        protections = ShieldClient(client=client).list_protections()

    assert protections == [{
        'ProtectionArn': 'arn:aws:shield::123:protection/p1',
        'ResourceArn': 'arn:aws:elasticloadbalancing:us-east-1:123:loadbalancer/app/web/1',
    }]


def _auto_scaling_group(index):
    return {
        'AutoScalingGroupName': f'asg-{index}',
        'AutoScalingGroupARN': f'arn:aws:autoscaling:us-east-1:123456789012:autoScalingGroup:{index}:autoScalingGroupName/asg-{index}',
        'MinSize': 0,
        'MaxSize': 1,
        'DesiredCapacity': 0,
        'DefaultCooldown': 300,
        'AvailabilityZones': ['us-east-1a'],
        'HealthCheckType': 'EC2',
        'CreatedTime': datetime(2024, 1, 1, tzinfo=timezone.utc),
        'Tags': [],
    }


def test_auto_scaling_groups_read_every_page(boto_client):
    client = boto_client('autoscaling')
    pages = 101

    with Stubber(client) as stubber:
        for index in range(pages):
            response = {'AutoScalingGroups': [_auto_scaling_group(index)]}
            if index < pages - 1:
                response['NextToken'] = f'page-{index + 1}'
            stubber.add_response('describe_auto_scaling_groups', response)
        groups = AutoScalingClient(client=client).describe_auto_scaling_groups()
        stubber.assert_no_pending_responses()

    assert len(groups) == pages
    assert groups[-1]['AutoScalingGroupName'] == f'asg-{pages - 1}'
