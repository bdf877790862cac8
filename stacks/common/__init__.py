"""
Common CDK stack components and utilities.

Base stacks, mixins, validators, exceptions and the shared task network
configuration used by the service stacks.
"""

# Import base classes
from .base import BaseStack, FargateServiceStack

# Import mixins
from .mixins import (
    IAMPolicyMixin,
    SecurityGroupMixin,
    NetworkLoadBalancerMixin,
    ScheduledTaskMixin
)

# Import exceptions
from .exceptions import (
    StackConfigurationError,
    ResourceCreationError,
    ValidationError,
    TopologyValidationError
)

# Import validators
from .validators import (
    ConfigValidator,
    AWSResourceValidator
)

from .network import AwsVpcNetworkConfiguration, IngressRule

__all__ = [
    # Base classes
    "BaseStack",
    "FargateServiceStack",

    # Mixins
    "IAMPolicyMixin",
    "SecurityGroupMixin",
    "NetworkLoadBalancerMixin",
    "ScheduledTaskMixin",

    # Exceptions
    "StackConfigurationError",
    "ResourceCreationError",
    "ValidationError",
    "TopologyValidationError",

    # Validators
    "ConfigValidator",
    "AWSResourceValidator",

    "AwsVpcNetworkConfiguration",
    "IngressRule"
]
