"""
Authorizer State Backend Stack.

Publishes where the API gateway authorizer module keeps its remote state, so
the module's backend initialization can read the coordinates from SSM
Parameter Store instead of hard-coding them.
"""

import logging
from typing import Dict, Optional

import aws_cdk as cdk
from aws_cdk import aws_ssm as ssm
from constructs import Construct

from helper.config import Config
from stacks.common.base import BaseStack
from stacks.common.constants import STATE_BACKEND_PARAMETER_PREFIX
from stacks.common.exceptions import ResourceCreationError
from .backend import RemoteStateBackend

logger = logging.getLogger(__name__)

OUTPUT_NAMES = {
    "bucket": "StateBucket",
    "key": "StateKey",
    "region": "StateRegion",
    "dynamodb_table": "StateLockTable",
    "encrypt": "StateEncrypt"
}


class AuthorizerStateBackendStack(BaseStack):
    """Stack exposing the authorizer module's remote state coordinates."""

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 backend: Optional[RemoteStateBackend] = None,
                 **kwargs) -> None:
        """
        Initialize the state backend stack.

        Args:
            scope: CDK scope
            construct_id: Stack ID
            config: Configuration object
            backend: Coordinates to publish; read from AuthorizerStateBackend when omitted
            **kwargs: Additional stack arguments

        Raises:
            StackConfigurationError: If the backend section is missing or incomplete
            ValidationError: If a coordinate is malformed
        """
        super().__init__(scope, construct_id, config, **kwargs)

        self.app_name = config.get_validated_app_name()
        self.backend = backend or RemoteStateBackend.from_config(config.get_state_backend_config())
        self.backend.validate()

        self.parameter_prefix = f"/{self.app_name}/{STATE_BACKEND_PARAMETER_PREFIX}"
        self.parameters = self._publish_parameters()
        self._create_outputs()

        self.add_common_tags(self, {"Component": "authorizer-state"})

    def _publish_parameters(self) -> Dict[str, ssm.StringParameter]:
        parameters = {}
        try:
            for name, value in self.backend.as_backend_config().items():
                parameters[name] = ssm.StringParameter(
                    self,
                    f"state-{name.replace('_', '-')}-parameter",
                    parameter_name=f"{self.parameter_prefix}/{name}",
                    string_value=value,
                    description=f"Authorizer remote state backend {name}",
                    tier=ssm.ParameterTier.STANDARD
                )
        except Exception as e:
            raise ResourceCreationError(
                f"Failed to publish state backend parameters: {str(e)}",
                resource_type="SSMParameter"
            ) from e

        logger.info(f"Published {len(parameters)} state backend parameters under {self.parameter_prefix}")
        return parameters

    def _create_outputs(self) -> None:
        for name, value in self.backend.as_backend_config().items():
            cdk.CfnOutput(
                self,
                OUTPUT_NAMES[name],
                value=value,
                description=f"Authorizer remote state {name}",
                export_name=f"{self.app_name}-{OUTPUT_NAMES[name]}"
            )
