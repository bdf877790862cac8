"""
Unit tests for environment configuration loading and AppName validation.
"""

from pathlib import Path

import pytest

from helper.config import AppNameValidationError, Config, DEFAULT_HEALTH_CHECK


class TestConfigLoading:
    """Test YAML loading and key access."""

    def test_loads_environment_file(self, config_factory):
        conf = config_factory()

        assert conf.environment == 'test'
        assert conf.get('AppName') == 'nlb-fargate'
        assert conf.get('PrivateSubnetIds') == ['subnet-0a1b2c3d4e5f00003', 'subnet-0a1b2c3d4e5f00004']

    def test_get_missing_key_raises(self, config_factory):
        conf = config_factory(ListenerPort=None)

        with pytest.raises(KeyError):
            conf.get('ListenerPort')

    def test_get_optional_default(self, config_factory):
        conf = config_factory(ListenerPort=None)

        assert conf.get_optional('ListenerPort', 8080) == 8080
        assert conf.get_optional('ContainerPort', 1) == 8080

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config('missing', config_dir=str(tmp_path))

    def test_repository_development_config(self):
        """Test the checked-in development configuration loads."""
        conf = Config('development', config_dir=str(Path(__file__).resolve().parent.parent / 'config'))

        assert conf.get_validated_app_name() == 'nlb-fargate'
        assert conf.get('ContainerPort') == 80


class TestSectionDefaults:
    """Test section getters merge over defaults."""

    def test_health_check_partial_override(self, config_factory):
        conf = config_factory(HealthCheck={'IntervalSeconds': 10})

        assert conf.get_health_check_config() == {**DEFAULT_HEALTH_CHECK, 'IntervalSeconds': 10}

    def test_health_check_absent(self, config_factory):
        conf = config_factory(HealthCheck=None)

        assert conf.get_health_check_config() == DEFAULT_HEALTH_CHECK

    def test_scheduled_task_defaults(self, config_factory):
        conf = config_factory(ScheduledTask=None)

        assert conf.get_scheduled_task_config() == {
            'Enabled': True,
            'ScheduleExpression': 'rate(1 hour)',
            'TaskCount': 1
        }
        assert conf.is_scheduled_task_enabled()

    def test_scheduled_task_disabled(self, config_factory):
        conf = config_factory(ScheduledTask={'Enabled': False})

        assert not conf.is_scheduled_task_enabled()

    def test_security_group_toggle_defaults_off(self, config_factory):
        assert not config_factory(EnableNlbSecurityGroup=None).is_nlb_security_group_enabled()
        assert config_factory(EnableNlbSecurityGroup=True).is_nlb_security_group_enabled()

    def test_allowed_cidrs_default_open(self, config_factory):
        assert config_factory(AllowedIngressCidrs=None).get_allowed_ingress_cidrs() == ['0.0.0.0/0']

    def test_state_backend_section(self, config_factory):
        assert config_factory().get_state_backend_config()['LockTable'] == 'nlb-fargate-terraform-locks'
        assert config_factory(AuthorizerStateBackend=None).get_state_backend_config() is None


class TestAppNameValidation:
    """Test AppName naming constraints."""

    @pytest.mark.parametrize("app_name", ["svc", "nlb-fargate", "a1-b2-c3", "a" * 28])
    def test_valid_names(self, config_factory, app_name):
        assert config_factory(AppName=app_name).get_validated_app_name() == app_name

    @pytest.mark.parametrize("app_name", [
        "ab",
        "a" * 29,
        "Nlb-Fargate",
        "1service",
        "service-",
        "nlb--fargate",
        "nlb_fargate",
        "internal-api",
    ])
    def test_invalid_names(self, config_factory, app_name):
        with pytest.raises(AppNameValidationError):
            config_factory(AppName=app_name)

    def test_missing_name(self, config_factory):
        with pytest.raises(AppNameValidationError):
            config_factory(AppName=None)

    def test_non_string_name(self, config_factory):
        with pytest.raises(AppNameValidationError):
            config_factory(AppName=12345)
