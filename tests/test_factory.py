# -*- coding: utf-8 -*-
from cloudwatch.concurrency import LimitedConcurrencyClient as LimitedCloudWatchClient
from config.settings import Settings
from provider.aws.factory import ClientFactory
from tagging.client import TaggingClient
from tagging.concurrency import LimitedConcurrencyClient


def _factory():
    return ClientFactory(Settings(access_key='testing', secret_key='testing', tagging_api_concurrency=2))


def test_cloudwatch_clients_are_cached_per_region():
    factory = _factory()

    us_east = factory.get_cloudwatch_client('us-east-1')

    assert isinstance(us_east, LimitedCloudWatchClient)
    assert factory.get_cloudwatch_client('us-east-1') is us_east
    assert factory.get_cloudwatch_client('eu-west-1') is not us_east
    assert us_east.client.region == 'us-east-1'


def test_tagging_client_is_limited_and_wired_to_service_apis():
    factory = _factory()

    client = factory.get_tagging_client('eu-west-1')

    assert isinstance(client, LimitedConcurrencyClient)
    assert client.max_concurrency == 2
    assert factory.get_tagging_client('eu-west-1') is client

    inner = client.client
    assert isinstance(inner, TaggingClient)
    assert inner.tagging_api.meta.region_name == 'eu-west-1'
    assert inner.ec2.region == 'eu-west-1'
    # Shield 只在 us-east-1 提供
    assert inner.shield.client.meta.region_name == 'us-east-1'
