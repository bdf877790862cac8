"""Mixin classes for CDK stacks."""

from .iam import IAMPolicyMixin
from .security import SecurityGroupMixin
from .network_load_balancer import NetworkLoadBalancerMixin
from .scheduled_task import ScheduledTaskMixin

__all__ = [
    "IAMPolicyMixin",
    "SecurityGroupMixin",
    "NetworkLoadBalancerMixin",
    "ScheduledTaskMixin"
]
