"""
Network load balancer fronted Fargate service stack.

Declares the load balancer, security groups, roles, ECS cluster, task
definition, service and the scheduled run of the same task, all from one
environment configuration file.
"""

import logging
from typing import Any, Dict

import aws_cdk as cdk
from constructs import Construct

from helper.config import Config
from stacks.common.base import FargateServiceStack
from stacks.common.constants import (
    DEFAULT_CONTAINER_PORT,
    DEFAULT_CPU,
    DEFAULT_DESIRED_COUNT,
    DEFAULT_LOG_RETENTION_DAYS,
    DEFAULT_MEMORY,
)
from .topology import ServiceTopology, TopologyValidator

logger = logging.getLogger(__name__)


class NlbFargateServiceStack(FargateServiceStack):
    """
    Stack for a Fargate service behind an internet-facing network load balancer.

    Exposes the created resources as attributes for cross-stack references
    and tests:
        load_balancer, target_group, listener, cluster, task_definition,
        ecs_service, service_security_group, nlb_security_group,
        execution_role, events_role, schedule_rule, topology
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        """
        Initialize the service stack.

        Args:
            scope: CDK scope
            construct_id: Unique identifier for this construct
            config: Configuration object
            **kwargs: Additional keyword arguments for Stack

        Raises:
            StackConfigurationError: If a required key is missing
            ValidationError: If a value or the resulting topology is invalid
        """
        super().__init__(scope, construct_id, config, **kwargs)

        self.app_name = config.get_validated_app_name()
        logger.info(f"Creating NLB Fargate service stack for {self.app_name}")

        container_port = self.get_optional_config('ContainerPort', DEFAULT_CONTAINER_PORT)
        scheduled_task = config.get_scheduled_task_config()

        resources = self.create_nlb_fargate_service(
            service_name=self.app_name,
            container_image=self.get_required_config('ContainerImage'),
            container_port=container_port,
            listener_port=self.get_optional_config('ListenerPort', container_port),
            public_subnet_ids=self.get_required_config('PublicSubnetIds'),
            private_subnet_ids=self.get_required_config('PrivateSubnetIds'),
            desired_count=self.get_optional_config('DesiredCount', DEFAULT_DESIRED_COUNT),
            cpu=self.get_optional_config('Cpu', DEFAULT_CPU),
            memory=self.get_optional_config('Memory', DEFAULT_MEMORY),
            enable_nlb_security_group=config.is_nlb_security_group_enabled(),
            allowed_cidrs=config.get_allowed_ingress_cidrs(),
            assign_public_ip=bool(self.get_optional_config('AssignPublicIp', False)),
            health_check=config.get_health_check_config(),
            schedule=scheduled_task,
            container_insights=bool(self.get_optional_config('ContainerInsights', False)),
            log_retention_days=self.get_optional_config('LogRetentionDays', DEFAULT_LOG_RETENTION_DAYS)
        )

        self.load_balancer = resources["load_balancer"]
        self.target_group = resources["target_group"]
        self.listener = resources["listener"]
        self.cluster = resources["cluster"]
        self.task_definition = resources["task_definition"]
        self.ecs_service = resources["ecs_service"]
        self.service_security_group = resources["service_security_group"]
        self.nlb_security_group = resources["nlb_security_group"]
        self.execution_role = resources["execution_role"]
        self.events_role = resources["events_role"]
        self.schedule_rule = resources["schedule_rule"]
        self.network_configuration = resources["network_configuration"]

        self.topology = self._build_topology(resources, container_port)
        TopologyValidator.validate(self.topology)

        self._create_outputs()

    def _build_topology(self, resources: Dict[str, Any], container_port: int) -> ServiceTopology:
        """Record the wiring the mixins declared, for the invariant checks."""
        nlb_sg = resources["nlb_security_group"]
        nlb_sg_id = nlb_sg.security_group_id if nlb_sg is not None else None

        service_binding = resources["service_load_balancer"]

        return ServiceTopology(
            container_port=container_port,
            target_group_port=resources["target_group"].port,
            listener_port=resources["listener"].port,
            listener_target_group=resources["listener_target_group_arn"],
            target_group=resources["target_group"].ref,
            service_target_group=service_binding.target_group_arn,
            service_container_port=service_binding.container_port,
            service_network=resources["network_configuration"],
            launch_type=resources["ecs_service"].launch_type,
            target_type=resources["target_group"].target_type,
            nlb_security_group_enabled=self.config.is_nlb_security_group_enabled(),
            nlb_security_group_id=nlb_sg_id,
            load_balancer_security_group_ids=list(resources["load_balancer"].security_groups or []),
            service_ingress=self.declared_ingress_rules(resources["service_security_group"]),
            load_balancer_ingress=self.declared_ingress_rules(nlb_sg),
            scheduled_network=(
                resources["network_configuration"] if resources["schedule_rule"] is not None else None
            )
        )

    def _create_outputs(self) -> None:
        """Create CloudFormation outputs for the service."""
        cdk.CfnOutput(
            self,
            "NlbDnsName",
            value=self.load_balancer.attr_dns_name,
            description="Public DNS name of the network load balancer",
            export_name=f"{self.app_name}-NlbDnsName"
        )

        cdk.CfnOutput(
            self,
            "ClusterName",
            value=self.cluster.cluster_name,
            description="ECS cluster name",
            export_name=f"{self.app_name}-ClusterName"
        )

        cdk.CfnOutput(
            self,
            "ServiceName",
            value=self.ecs_service.attr_name,
            description="ECS service name",
            export_name=f"{self.app_name}-ServiceName"
        )

        cdk.CfnOutput(
            self,
            "TaskDefinitionArn",
            value=self.task_definition.task_definition_arn,
            description="Current task definition revision",
            export_name=f"{self.app_name}-TaskDefinitionArn"
        )

        cdk.CfnOutput(
            self,
            "TargetGroupArn",
            value=self.target_group.ref,
            description="Target group the service registers into",
            export_name=f"{self.app_name}-TargetGroupArn"
        )
