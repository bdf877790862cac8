"""Network load balancer mixin for CDK stacks."""

from typing import Any, Dict, List, Optional

from aws_cdk import aws_elasticloadbalancingv2 as elbv2

from ..constants import (
    DEFAULT_HEALTH_CHECK_INTERVAL,
    DEFAULT_HEALTHY_THRESHOLD_COUNT,
    DEFAULT_NLB_SUFFIX,
    DEFAULT_TARGET_GROUP_SUFFIX,
    DEFAULT_UNHEALTHY_THRESHOLD_COUNT,
    ELB_NAME_MAX_LENGTH,
    NLB_PROTOCOL_TCP,
    NLB_SCHEME_INTERNET_FACING,
    NLB_TYPE,
    TARGET_TYPE_IP,
)
from ..validators import AWSResourceValidator, ConfigValidator


class NetworkLoadBalancerMixin:
    """
    Mixin class declaring a layer-4 load balancer in front of IP targets.

    Resources are declared at the CloudFormation level and take existing
    VPC and subnet ids as given.
    """

    def create_network_load_balancer(self,
                                     name: str,
                                     subnet_ids: List[str],
                                     security_group_ids: Optional[List[str]] = None,
                                     cross_zone: bool = True) -> elbv2.CfnLoadBalancer:
        """
        Create an internet-facing network load balancer.

        Args:
            name: Name prefix for the load balancer
            subnet_ids: Subnets the load balancer nodes are placed in
            security_group_ids: Security groups to attach at creation, or None
            cross_zone: Whether cross-zone load balancing is enabled

        Returns:
            The created load balancer
        """
        lb_name = f"{name}-{DEFAULT_NLB_SUFFIX}"
        ConfigValidator.validate_resource_name(lb_name, max_length=ELB_NAME_MAX_LENGTH)
        AWSResourceValidator.validate_subnet_ids(subnet_ids, parameter_name="load_balancer_subnets")

        # NLB security groups can only be set at creation; an NLB created
        # without them can never have them added.
        return elbv2.CfnLoadBalancer(
            self,
            f"{name}-nlb",
            name=lb_name,
            type=NLB_TYPE,
            scheme=NLB_SCHEME_INTERNET_FACING,
            subnets=list(subnet_ids),
            security_groups=list(security_group_ids) if security_group_ids else None,
            load_balancer_attributes=[
                elbv2.CfnLoadBalancer.LoadBalancerAttributeProperty(
                    key="load_balancing.cross_zone.enabled",
                    value=str(cross_zone).lower()
                )
            ]
        )

    def create_ip_target_group(self,
                               name: str,
                               vpc_id: str,
                               port: int,
                               interval_seconds: int = DEFAULT_HEALTH_CHECK_INTERVAL,
                               healthy_threshold_count: int = DEFAULT_HEALTHY_THRESHOLD_COUNT,
                               unhealthy_threshold_count: int = DEFAULT_UNHEALTHY_THRESHOLD_COUNT
                               ) -> elbv2.CfnTargetGroup:
        """
        Create a TCP target group for IP targets with a TCP health check.

        Membership is left to the ECS service, which registers and
        deregisters task IPs itself.

        Args:
            name: Name prefix for the target group
            vpc_id: VPC the targets live in
            port: Port targets receive traffic on
            interval_seconds: Health check interval
            healthy_threshold_count: Consecutive successes before healthy
            unhealthy_threshold_count: Consecutive failures before unhealthy

        Returns:
            The created target group
        """
        tg_name = f"{name}-{DEFAULT_TARGET_GROUP_SUFFIX}"
        ConfigValidator.validate_resource_name(tg_name, max_length=ELB_NAME_MAX_LENGTH)
        ConfigValidator.validate_port_range(port)
        ConfigValidator.validate_health_check(
            interval_seconds, healthy_threshold_count, unhealthy_threshold_count
        )
        AWSResourceValidator.validate_vpc_id(vpc_id)

        return elbv2.CfnTargetGroup(
            self,
            f"{name}-target-group",
            name=tg_name,
            port=port,
            protocol=NLB_PROTOCOL_TCP,
            target_type=TARGET_TYPE_IP,
            vpc_id=vpc_id,
            health_check_enabled=True,
            health_check_protocol=NLB_PROTOCOL_TCP,
            health_check_interval_seconds=interval_seconds,
            healthy_threshold_count=healthy_threshold_count,
            unhealthy_threshold_count=unhealthy_threshold_count
        )

    def create_tcp_listener(self,
                            name: str,
                            load_balancer: elbv2.CfnLoadBalancer,
                            port: int,
                            target_group: elbv2.CfnTargetGroup) -> elbv2.CfnListener:
        """
        Create a TCP listener that forwards everything to one target group.

        Args:
            name: Name prefix for the listener
            load_balancer: Load balancer the listener belongs to
            port: Public listener port
            target_group: Target group receiving forwarded traffic

        Returns:
            The created listener
        """
        ConfigValidator.validate_port_range(port, parameter_name="listener_port")

        return elbv2.CfnListener(
            self,
            f"{name}-listener",
            load_balancer_arn=load_balancer.ref,
            port=port,
            protocol=NLB_PROTOCOL_TCP,
            default_actions=[
                elbv2.CfnListener.ActionProperty(
                    type="forward",
                    target_group_arn=target_group.ref
                )
            ]
        )

    def create_network_edge(self,
                            name: str,
                            vpc_id: str,
                            subnet_ids: List[str],
                            listener_port: int,
                            target_port: int,
                            health_check: Dict[str, int],
                            security_group_ids: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Create the load balancer, target group and listener together.

        Returns:
            Dictionary with "load_balancer", "target_group", "listener" and
            "listener_target_group_arn" (the ARN the listener forwards to)
        """
        load_balancer = self.create_network_load_balancer(
            name, subnet_ids, security_group_ids
        )

        target_group = self.create_ip_target_group(
            name,
            vpc_id,
            target_port,
            interval_seconds=health_check['IntervalSeconds'],
            healthy_threshold_count=health_check['HealthyThresholdCount'],
            unhealthy_threshold_count=health_check['UnhealthyThresholdCount']
        )

        listener = self.create_tcp_listener(name, load_balancer, listener_port, target_group)

        return {
            "load_balancer": load_balancer,
            "target_group": target_group,
            "listener": listener,
            "listener_target_group_arn": target_group.ref
        }
