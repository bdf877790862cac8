"""
CDK Stack modules for the NLB fronted Fargate service.

- nlb_service: load balancer, security groups, roles, ECS service and scheduled task
- state_backend: remote state coordinates for the API gateway authorizer module
- common: base stacks, mixins, validators and exceptions shared by both
"""

from .nlb_service import NlbFargateServiceStack
from .state_backend import AuthorizerStateBackendStack, RemoteStateBackend

# Import common components
from .common import (
    BaseStack,
    FargateServiceStack,
    StackConfigurationError,
    ResourceCreationError,
    ValidationError,
    TopologyValidationError,
    ConfigValidator,
    AWSResourceValidator
)

__all__ = [
    # Stack classes
    "NlbFargateServiceStack",
    "AuthorizerStateBackendStack",
    "RemoteStateBackend",

    # Base classes
    "BaseStack",
    "FargateServiceStack",

    # Exceptions
    "StackConfigurationError",
    "ResourceCreationError",
    "ValidationError",
    "TopologyValidationError",

    # Validators
    "ConfigValidator",
    "AWSResourceValidator"
]
