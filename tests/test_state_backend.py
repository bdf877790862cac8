"""
Unit tests for the authorizer remote state backend coordinates and stack.
"""

import pytest
import aws_cdk as cdk
from aws_cdk.assertions import Template

from stacks.common.exceptions import StackConfigurationError, ValidationError
from stacks.state_backend import AuthorizerStateBackendStack, RemoteStateBackend

SECTION = {
    'Bucket': 'nlb-fargate-terraform-state',
    'Key': 'api-gateway-authorizer/terraform.tfstate',
    'Region': 'us-east-1',
    'LockTable': 'nlb-fargate-terraform-locks',
    'Encrypt': True,
}


class TestRemoteStateBackend:
    """Test building and checking backend coordinates."""

    def test_from_config(self):
        backend = RemoteStateBackend.from_config(SECTION)

        assert backend == RemoteStateBackend(
            bucket='nlb-fargate-terraform-state',
            key='api-gateway-authorizer/terraform.tfstate',
            region='us-east-1',
            lock_table='nlb-fargate-terraform-locks',
            encrypt=True
        )

    def test_encrypt_defaults_on(self):
        section = {k: v for k, v in SECTION.items() if k != 'Encrypt'}

        assert RemoteStateBackend.from_config(section).encrypt is True

    def test_missing_section(self):
        with pytest.raises(StackConfigurationError) as exc_info:
            RemoteStateBackend.from_config(None)
        assert exc_info.value.config_key == 'AuthorizerStateBackend'

    def test_missing_key(self):
        section = {k: v for k, v in SECTION.items() if k != 'LockTable'}

        with pytest.raises(StackConfigurationError) as exc_info:
            RemoteStateBackend.from_config(section)
        assert exc_info.value.config_key == 'AuthorizerStateBackend.LockTable'

    def test_backend_config_mapping(self):
        backend = RemoteStateBackend.from_config({**SECTION, 'Encrypt': False})

        assert backend.as_backend_config() == {
            "bucket": "nlb-fargate-terraform-state",
            "key": "api-gateway-authorizer/terraform.tfstate",
            "region": "us-east-1",
            "dynamodb_table": "nlb-fargate-terraform-locks",
            "encrypt": "false"
        }

    def test_validate_accepts_coordinates(self):
        RemoteStateBackend.from_config(SECTION).validate()

    @pytest.mark.parametrize("field,value", [
        ('bucket', 'Invalid_Bucket'),
        ('key', '/absolute/terraform.tfstate'),
        ('key', 'folder/'),
        ('region', 'useast1'),
        ('lock_table', 'ab'),
        ('lock_table', 'bad table'),
    ])
    def test_validate_rejects(self, field, value):
        backend = RemoteStateBackend(**{
            'bucket': SECTION['Bucket'],
            'key': SECTION['Key'],
            'region': SECTION['Region'],
            'lock_table': SECTION['LockTable'],
            field: value
        })

        with pytest.raises(ValidationError):
            backend.validate()


class TestAuthorizerStateBackendStack:
    """Test the published parameters and outputs."""

    @pytest.fixture
    def template(self, config_factory):
        app = cdk.App()
        stack = AuthorizerStateBackendStack(app, "test-authorizer-state", config=config_factory())
        return Template.from_stack(stack)

    def test_publishes_parameters(self, template):
        template.resource_count_is("AWS::SSM::Parameter", 5)

        expected = {
            "bucket": "nlb-fargate-terraform-state",
            "key": "api-gateway-authorizer/terraform.tfstate",
            "region": "us-east-1",
            "dynamodb_table": "nlb-fargate-terraform-locks",
            "encrypt": "true"
        }
        for name, value in expected.items():
            template.has_resource_properties("AWS::SSM::Parameter", {
                "Name": f"/nlb-fargate/authorizer-state/{name}",
                "Type": "String",
                "Value": value
            })

    def test_outputs(self, template):
        template.has_output("StateBucket", {
            "Value": "nlb-fargate-terraform-state",
            "Export": {"Name": "nlb-fargate-StateBucket"}
        })
        template.has_output("StateLockTable", {"Value": "nlb-fargate-terraform-locks"})

    def test_does_not_create_bucket_or_table(self, template):
        template.resource_count_is("AWS::S3::Bucket", 0)
        template.resource_count_is("AWS::DynamoDB::Table", 0)

    def test_missing_section_fails(self, config_factory):
        app = cdk.App()

        with pytest.raises(StackConfigurationError):
            AuthorizerStateBackendStack(
                app, "test-authorizer-state", config=config_factory(AuthorizerStateBackend=None)
            )

    def test_explicit_backend(self, config_factory):
        app = cdk.App()
        backend = RemoteStateBackend.from_config({**SECTION, 'Key': 'authorizer/prod.tfstate'})
        stack = AuthorizerStateBackendStack(
            app, "test-authorizer-state", config=config_factory(), backend=backend
        )

        Template.from_stack(stack).has_resource_properties("AWS::SSM::Parameter", {
            "Name": "/nlb-fargate/authorizer-state/key",
            "Value": "authorizer/prod.tfstate"
        })
