"""Shared fixtures: environment configuration files written to a temp directory."""

import copy

import pytest
import yaml
import aws_cdk as cdk
from aws_cdk.assertions import Template

from helper.config import Config
from stacks.nlb_service import NlbFargateServiceStack

BASE_CONFIG = {
    'AppName': 'nlb-fargate',
    'RegionName': 'us-east-1',
    'Environment': 'test',
    'VpcId': 'vpc-0a1b2c3d4e5f67890',
    'PublicSubnetIds': ['subnet-0a1b2c3d4e5f00001', 'subnet-0a1b2c3d4e5f00002'],
    'PrivateSubnetIds': ['subnet-0a1b2c3d4e5f00003', 'subnet-0a1b2c3d4e5f00004'],
    'ContainerImage': 'public.ecr.aws/nginx/nginx:stable',
    'ContainerPort': 8080,
    'DesiredCount': 2,
    'Cpu': 256,
    'Memory': 512,
    'EnableNlbSecurityGroup': False,
    'AllowedIngressCidrs': ['0.0.0.0/0'],
    'AssignPublicIp': False,
    'HealthCheck': {
        'IntervalSeconds': 30,
        'HealthyThresholdCount': 3,
        'UnhealthyThresholdCount': 3,
    },
    'ScheduledTask': {
        'Enabled': True,
        'ScheduleExpression': 'rate(15 minutes)',
        'TaskCount': 1,
    },
    'AuthorizerStateBackend': {
        'Bucket': 'nlb-fargate-terraform-state',
        'Key': 'api-gateway-authorizer/terraform.tfstate',
        'Region': 'us-east-1',
        'LockTable': 'nlb-fargate-terraform-locks',
        'Encrypt': True,
    },
}


@pytest.fixture
def config_factory(tmp_path):
    """Build a Config from BASE_CONFIG with overrides; a value of None drops the key."""
    def _make(**overrides):
        data = copy.deepcopy(BASE_CONFIG)
        for key, value in overrides.items():
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value
        with open(tmp_path / 'test.yaml', 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f)
        return Config('test', config_dir=str(tmp_path))
    return _make


@pytest.fixture
def synth_service(config_factory):
    """Synthesize the service stack; returns (stack, template)."""
    def _synth(**overrides):
        app = cdk.App()
        stack = NlbFargateServiceStack(app, "test-service", config=config_factory(**overrides))
        return stack, Template.from_stack(stack)
    return _synth
