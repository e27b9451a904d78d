# -*- coding: utf-8 -*-
import threading

from prometheus_client import CollectorRegistry

from collector.collector import MetricCollector
from collector.scrape_result import ScrapeResult, ScrapeStatus
from model.model import CloudwatchData, Dimension, GetMetricDataProcessingParams, MetricDataResult
from scheduler.scheduler import ScrapeScheduler


def _data(instance_id, value, statistic='Average'):
    return CloudwatchData(
        metric_name='CPUUtilization',
        namespace='AWS/EC2',
        dimensions=[Dimension(name='InstanceId', value=instance_id)],
        processing_params=GetMetricDataProcessingParams(
            query_id='id_0', period=300, length=300, delay=0, statistic=statistic
        ),
        result=MetricDataResult(query_id='id_0', datapoint=value)
    )


def _labels(instance_id):
    return {
        'namespace': 'AWS/EC2', 'metric_name': 'CPUUtilization', 'statistic': 'Average',
        'region': 'us-east-1', 'resource': '', 'dimensions': f'InstanceId={instance_id}', 'tags': '',
    }


class TestMetricCollector:

    def test_series_from_previous_cycle_are_removed(self):
        collector = MetricCollector(registry=CollectorRegistry())

        collector.collect_all([ScrapeResult('AWS/EC2', 'us-east-1', data=[_data('i-1', 1.0), _data('i-2', 2.0)])])
        collector.collect_all([ScrapeResult('AWS/EC2', 'us-east-1', data=[_data('i-2', 3.0)])])

        assert collector.registry.get_sample_value('cloudwatch_metric_value', _labels('i-1')) is None
        assert collector.registry.get_sample_value('cloudwatch_metric_value', _labels('i-2')) == 3.0

    def test_existing_series_stay_visible_while_refreshing(self):
        collector = MetricCollector(registry=CollectorRegistry())
        collector.collect_all([ScrapeResult('AWS/EC2', 'us-east-1', data=[_data('i-1', 1.0)])])

        export = collector._export
        visible = []

        def export_and_scrape(result):
            exported = export(result)
            visible.append('dimensions="InstanceId=i-1"' in collector.get_metrics())
            return exported

        collector._export = export_and_scrape
        collector.collect_all([
            ScrapeResult('AWS/EC2', 'eu-west-1', data=[_data('i-2', 2.0)]),
            ScrapeResult('AWS/EC2', 'us-east-1', data=[_data('i-1', 5.0)]),
        ])

        assert visible == [True, True]
        assert collector.registry.get_sample_value('cloudwatch_metric_value', _labels('i-1')) == 5.0

    def test_degraded_request_is_not_exported(self):
        collector = MetricCollector(registry=CollectorRegistry())
        data = _data('i-1', 1.0)
        data.result = None

        collector.collect_all([ScrapeResult('AWS/EC2', 'us-east-1', data=[data])])

        assert collector.registry.get_sample_value('cloudwatch_metric_value', _labels('i-1')) is None

    def test_failed_result_counts_errors_and_exports_nothing(self):
        collector = MetricCollector(registry=CollectorRegistry())
        result = ScrapeResult('AWS/EC2', 'us-east-1', data=[_data('i-1', 1.0)])
        result.fail('GetResources', 'throttled')

        collector.collect_all([result], duration=1.5)

        assert result.data == []
        assert collector.registry.get_sample_value(
            'cloudwatch_exporter_scrape_errors_total', {'namespace': 'AWS/EC2', 'stage': 'GetResources'}
        ) == 1.0
        assert collector.registry.get_sample_value('cloudwatch_exporter_scrape_duration_seconds_count') == 1.0

    def test_summary(self):
        collector = MetricCollector(registry=CollectorRegistry())
        partial = ScrapeResult('AWS/EC2', 'eu-west-1', data=[_data('i-3', 1.0)])
        partial.add_error('ListMetrics', 'denied')

        collector.collect_all([
            ScrapeResult('AWS/EC2', 'us-east-1', data=[_data('i-1', 1.0), _data('i-2', 2.0)]),
            partial,
        ])

        assert partial.status == ScrapeStatus.PARTIAL
        summary = collector.get_summary()
        assert summary['total'] == 2
        assert summary['success'] == 1
        assert summary['series'] == 3
        assert summary['by_namespace']['AWS/EC2'] == {'success': 1, 'partial': 1, 'failed': 0}

    def test_text_exposition(self):
        collector = MetricCollector(registry=CollectorRegistry())
        collector.collect_all([ScrapeResult('AWS/EC2', 'us-east-1', data=[_data('i-1', 4.0)])])

        text = collector.get_metrics()

        assert 'cloudwatch_metric_value{' in text
        assert 'dimensions="InstanceId=i-1"' in text


class TestScrapeScheduler:

    def test_runs_immediately_and_survives_errors(self):
        done = threading.Event()
        calls = []

        def collect():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError('first run fails')
            done.set()

        scheduler = ScrapeScheduler(collect, interval=0.01)
        scheduler.start()
        try:
            assert done.wait(timeout=5)
            assert scheduler.get_status()['running'] is True
        finally:
            scheduler.stop()

        assert len(calls) >= 2
        assert scheduler.get_status()['running'] is False

    def test_stop_interrupts_the_wait(self):
        ran = threading.Event()
        scheduler = ScrapeScheduler(ran.set, interval=3600)
        scheduler.start()
        assert ran.wait(timeout=5)

        scheduler.stop(timeout=5)

        assert not scheduler.is_running()
        assert scheduler.get_status()['runs'] == 1
