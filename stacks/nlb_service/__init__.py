"""Fargate service behind a network load balancer."""

from .stack import NlbFargateServiceStack
from .topology import IngressRule, ServiceTopology, TopologyValidator

__all__ = [
    "NlbFargateServiceStack",
    "IngressRule",
    "ServiceTopology",
    "TopologyValidator"
]
