"""Network value types shared by the service, its security groups and scheduled tasks."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from aws_cdk import aws_ecs as ecs, aws_events as events


@dataclass(frozen=True)
class AwsVpcNetworkConfiguration:
    """
    awsvpc placement for Fargate tasks.

    One instance is rendered into both the service and the event target so the
    two launch paths always share subnets and security groups.
    """

    subnets: Tuple[str, ...]
    security_groups: Tuple[str, ...] = field(default_factory=tuple)
    assign_public_ip: bool = False

    @classmethod
    def create(cls,
               subnets: List[str],
               security_groups: List[str],
               assign_public_ip: bool = False) -> "AwsVpcNetworkConfiguration":
        return cls(tuple(subnets), tuple(security_groups), bool(assign_public_ip))

    @property
    def assign_public_ip_value(self) -> str:
        return "ENABLED" if self.assign_public_ip else "DISABLED"

    def to_service_property(self) -> ecs.CfnService.NetworkConfigurationProperty:
        return ecs.CfnService.NetworkConfigurationProperty(
            awsvpc_configuration=ecs.CfnService.AwsVpcConfigurationProperty(
                subnets=list(self.subnets),
                security_groups=list(self.security_groups),
                assign_public_ip=self.assign_public_ip_value
            )
        )

    def to_events_property(self) -> events.CfnRule.NetworkConfigurationProperty:
        return events.CfnRule.NetworkConfigurationProperty(
            aws_vpc_configuration=events.CfnRule.AwsVpcConfigurationProperty(
                subnets=list(self.subnets),
                security_groups=list(self.security_groups),
                assign_public_ip=self.assign_public_ip_value
            )
        )


@dataclass(frozen=True)
class IngressRule:
    """A single TCP ingress rule on a security group."""

    port: int
    source_security_group_id: Optional[str] = None
    cidr: Optional[str] = None
