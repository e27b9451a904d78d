# -*- coding: utf-8 -*-
import textwrap

import pytest

from config.loader import JobsConfig, load_jobs_config, parse_jobs_config
from config.settings import load_settings
from config.validator import validate_config
from model.model import Dimension, Job, MetricConfig, StaticJob

JOBS_YAML = textwrap.dedent("""
    discovery:
      jobs:
        - type: ec2
          regions: [us-east-1, eu-west-1]
          period: 60
          length: 600
          search_tags:
            - key: env
              value: ^prod
          exported_tags_on_metrics: [team]
          dimension_name_requirements: [InstanceId]
          recently_active_only: true
          metrics:
            - name: CPUUtilization
              statistics: [Average, p99]
            - name: NetworkIn
              statistics: [Sum]
              period: 300
              delay: 120
              nil_to_zero: true
    static:
      - name: billing
        namespace: AWS/Billing
        regions: [us-east-1]
        dimensions:
          - name: Currency
            value: USD
        metrics:
          - name: EstimatedCharges
            statistics: [Maximum]
""")


class TestLoader:

    def test_parse_discovery_job(self):
        config = parse_jobs_config(JOBS_YAML)

        job = config.jobs[0]
        assert job.type == 'AWS/EC2'
        assert job.regions == ['us-east-1', 'eu-west-1']
        assert job.search_tags[0].key == 'env'
        assert job.search_tags[0].value == '^prod'
        assert job.exported_tags_on_metrics == ['team']
        assert job.recently_active_only is True

    def test_metric_inherits_job_defaults(self):
        job = parse_jobs_config(JOBS_YAML).jobs[0]

        cpu, network = job.metrics
        assert (cpu.period, cpu.length, cpu.delay) == (60, 600, 0)
        assert cpu.statistics == ['Average', 'p99']
        assert cpu.dimension_name_requirements == ['InstanceId']
        assert cpu.nil_to_zero is False
        assert (network.period, network.length, network.delay) == (300, 600, 120)
        assert network.nil_to_zero is True

    def test_parse_static_job(self):
        static_job = parse_jobs_config(JOBS_YAML).static[0]

        assert static_job.name == 'billing'
        assert static_job.namespace == 'AWS/Billing'
        assert static_job.dimensions == [Dimension(name='Currency', value='USD')]
        assert static_job.metrics[0].period == 300

    def test_missing_statistics_names_the_failing_path(self):
        content = textwrap.dedent("""
            discovery:
              jobs:
                - type: AWS/EC2
                  regions: [us-east-1]
                  metrics:
                    - name: CPUUtilization
                      statistics: [Average]
                    - name: NetworkIn
        """)
        with pytest.raises(ValueError) as exc_info:
            parse_jobs_config(content)

        assert 'discovery.jobs[0]' in str(exc_info.value)
        assert 'metrics[1]' in str(exc_info.value)
        assert 'statistics' in str(exc_info.value)

    def test_invalid_search_tag_pattern(self):
        content = textwrap.dedent("""
            discovery:
              jobs:
                - type: AWS/EC2
                  regions: [us-east-1]
                  search_tags:
                    - key: env
                      value: "(prod"
        """)
        with pytest.raises(ValueError) as exc_info:
            parse_jobs_config(content)

        assert 'search_tags[0]' in str(exc_info.value)

    def test_negative_period_is_rejected(self):
        content = textwrap.dedent("""
            discovery:
              jobs:
                - type: AWS/EC2
                  regions: [us-east-1]
                  metrics:
                    - name: CPUUtilization
                      statistics: [Average]
                      period: -1
        """)
        with pytest.raises(ValueError):
            parse_jobs_config(content)

    def test_missing_top_level_section(self):
        with pytest.raises(ValueError):
            parse_jobs_config("other: {}\n")

    def test_empty_file(self):
        with pytest.raises(ValueError):
            parse_jobs_config("")

    def test_load_from_file(self, tmp_path):
        path = tmp_path / 'jobs.yaml'
        path.write_text(JOBS_YAML, encoding='utf-8')

        config = load_jobs_config(str(path))

        assert len(config.jobs) == 1
        assert len(config.static) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_jobs_config(str(tmp_path / 'missing.yaml'))


def _job(**kwargs):
    defaults = {
        'type': 'AWS/EC2',
        'regions': ['us-east-1'],
        'metrics': [MetricConfig(name='CPUUtilization', statistics=['Average'])],
    }
    defaults.update(kwargs)
    return Job(**defaults)


class TestValidator:

    def test_valid_config(self):
        assert validate_config(parse_jobs_config(JOBS_YAML)) == (True, "")

    def test_empty_config(self):
        is_valid, message = validate_config(JobsConfig())
        assert not is_valid
        assert 'static' in message

    def test_unsupported_service(self):
        is_valid, message = validate_config(JobsConfig(jobs=[_job(type='AWS/Nope')]))
        assert not is_valid
        assert '不支持的服务' in message

    def test_regions_required(self):
        is_valid, message = validate_config(JobsConfig(jobs=[_job(regions=[])]))
        assert not is_valid
        assert 'regions' in message

    @pytest.mark.parametrize('statistic', ['Average', 'SampleCount', 'p50', 'p99.9', 'p100'])
    def test_valid_statistics(self, statistic):
        metric = MetricConfig(name='Latency', statistics=[statistic])
        assert validate_config(JobsConfig(jobs=[_job(metrics=[metric])]))[0]

    @pytest.mark.parametrize('statistic', ['Avg', 'p101', 'p', 'tm99'])
    def test_invalid_statistics(self, statistic):
        metric = MetricConfig(name='Latency', statistics=[statistic])
        is_valid, message = validate_config(JobsConfig(jobs=[_job(metrics=[metric])]))
        assert not is_valid
        assert statistic in message

    def test_length_shorter_than_period(self):
        metric = MetricConfig(name='CPUUtilization', statistics=['Average'], period=600, length=300)
        is_valid, message = validate_config(JobsConfig(jobs=[_job(metrics=[metric])]))
        assert not is_valid
        assert 'length' in message

    def test_static_job_requires_metrics(self):
        static_job = StaticJob(name='billing', namespace='AWS/Billing', regions=['us-east-1'])
        is_valid, message = validate_config(JobsConfig(static=[static_job]))
        assert not is_valid
        assert 'static[0]' in message


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ['CONFIG_PATH', 'METRICS_PORT', 'SCRAPE_INTERVAL', 'COLLECTION_MAX_WORKERS',
                     'TAGGING_API_CONCURRENCY', 'CLOUDWATCH_CONCURRENCY', 'CLOUDWATCH_PER_API_LIMIT',
                     'METRICS_PER_QUERY', 'AWS_ACCESS_KEY_ID', 'AWS_SECRET_ACCESS_KEY']:
            monkeypatch.delenv(name, raising=False)

        settings = load_settings()

        assert settings.config_path == 'config/jobs.yaml'
        assert settings.metrics_port == 8000
        assert settings.scrape_interval == 300
        assert settings.collection_max_workers == 3
        assert settings.tagging_api_concurrency == 5
        assert settings.cloudwatch_concurrency == 5
        assert settings.cloudwatch_per_api_limit is False
        assert settings.access_key is None

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv('TAGGING_API_CONCURRENCY', '2')
        monkeypatch.setenv('CLOUDWATCH_PER_API_LIMIT', 'true')
        monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'AKIA')
        monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'secret')

        settings = load_settings()

        assert settings.tagging_api_concurrency == 2
        assert settings.cloudwatch_per_api_limit is True
        assert settings.access_key == 'AKIA'
        assert settings.secret_key == 'secret'

    @pytest.mark.parametrize('raw', ['zero', '0', '-3'])
    def test_invalid_numbers(self, monkeypatch, raw):
        monkeypatch.setenv('SCRAPE_INTERVAL', raw)
        with pytest.raises(ValueError) as exc_info:
            load_settings()
        assert 'SCRAPE_INTERVAL' in str(exc_info.value)
