"""
Base classes and common patterns for CDK stacks.

BaseStack carries configuration access, tagging and log groups.
FargateServiceStack composes the mixins into a complete load-balanced
Fargate service with an optional scheduled run of the same task.
"""

import logging
from typing import Any, Dict, List, Optional

import aws_cdk as cdk
from aws_cdk import (
    aws_ec2 as ec2,
    aws_ecs as ecs,
    aws_elasticloadbalancingv2 as elbv2,
    aws_iam as iam,
    aws_logs as logs,
    custom_resources as cr,
    Stack
)
from constructs import Construct

from helper.config import Config
from .constants import (
    DEFAULT_CPU,
    DEFAULT_DESIRED_COUNT,
    DEFAULT_ECS_CLUSTER_SUFFIX,
    DEFAULT_ECS_SERVICE_SUFFIX,
    DEFAULT_HEALTH_CHECK_GRACE_PERIOD,
    DEFAULT_HEALTH_CHECK_INTERVAL,
    DEFAULT_HEALTHY_THRESHOLD_COUNT,
    DEFAULT_LOG_RETENTION_DAYS,
    DEFAULT_MAXIMUM_PERCENT,
    DEFAULT_MEMORY,
    DEFAULT_MINIMUM_HEALTHY_PERCENT,
    DEFAULT_SCHEDULE_EXPRESSION,
    DEFAULT_SCHEDULED_TASK_COUNT,
    DEFAULT_UNHEALTHY_THRESHOLD_COUNT,
    LAUNCH_TYPE_FARGATE,
    OPEN_IPV4_CIDR,
)
from .exceptions import ResourceCreationError, StackConfigurationError, ValidationError
from .mixins import IAMPolicyMixin, NetworkLoadBalancerMixin, ScheduledTaskMixin, SecurityGroupMixin
from .network import AwsVpcNetworkConfiguration
from .validators import AWSResourceValidator, ConfigValidator

logger = logging.getLogger(__name__)

RETENTION_MAPPING = {
    1: logs.RetentionDays.ONE_DAY,
    3: logs.RetentionDays.THREE_DAYS,
    5: logs.RetentionDays.FIVE_DAYS,
    7: logs.RetentionDays.ONE_WEEK,
    14: logs.RetentionDays.TWO_WEEKS,
    30: logs.RetentionDays.ONE_MONTH,
    60: logs.RetentionDays.TWO_MONTHS,
    90: logs.RetentionDays.THREE_MONTHS,
    120: logs.RetentionDays.FOUR_MONTHS,
    150: logs.RetentionDays.FIVE_MONTHS,
    180: logs.RetentionDays.SIX_MONTHS,
    365: logs.RetentionDays.ONE_YEAR,
    400: logs.RetentionDays.THIRTEEN_MONTHS,
    545: logs.RetentionDays.EIGHTEEN_MONTHS,
    731: logs.RetentionDays.TWO_YEARS,
    1827: logs.RetentionDays.FIVE_YEARS,
    3653: logs.RetentionDays.TEN_YEARS
}


class BaseStack(Stack):
    """
    Base stack class with common functionality and validation.

    This class provides:
    - Configuration validation
    - Configuration access with typed errors
    - Common tags
    - Standardized log groups
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        """
        Initialize the base stack.

        Args:
            scope: CDK scope
            construct_id: Unique identifier for this construct
            config: Configuration object
            **kwargs: Additional keyword arguments for Stack

        Raises:
            StackConfigurationError: If configuration is invalid
        """
        super().__init__(scope, construct_id, **kwargs)
        self.config = config
        self._validate_config()

    def _validate_config(self) -> None:
        if not isinstance(self.config, Config):
            raise StackConfigurationError(
                "Configuration must be a Config instance",
                config_key="config"
            )

    def get_required_config(self, key: str) -> Any:
        """
        Get a required configuration value with validation.

        Raises:
            StackConfigurationError: If key is missing or empty
        """
        try:
            value = self.config.get(key)
        except KeyError:
            value = None

        if value is None:
            raise StackConfigurationError(
                f"Required configuration key '{key}' is missing",
                config_key=key
            )
        return value

    def get_optional_config(self, key: str, default_value: Any = None) -> Any:
        """
        Get an optional configuration value.

        Args:
            key: Configuration key to retrieve
            default_value: Default value if key is not found or null

        Returns:
            The configuration value or default
        """
        try:
            value = self.config.get(key)
        except KeyError:
            return default_value
        return default_value if value is None else value

    def add_common_tags(self, resource: Any, additional_tags: Dict[str, str] = None) -> None:
        """
        Add common tags to a resource and everything below it.

        Args:
            resource: The construct to tag
            additional_tags: Additional tags to add
        """
        common_tags = {
            "Environment": self.get_optional_config("Environment", "unknown"),
            "Application": self.get_optional_config("AppName", "default-app"),
            "ManagedBy": "CDK"
        }

        if additional_tags:
            common_tags.update(additional_tags)

        for key, value in common_tags.items():
            cdk.Tags.of(resource).add(key, str(value))

    def create_log_group(self,
                         name: str,
                         retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
                         removal_policy: cdk.RemovalPolicy = cdk.RemovalPolicy.DESTROY) -> logs.LogGroup:
        """
        Create a log group named /ecs/{name}.

        Unknown retention values fall back to one month.

        Raises:
            ResourceCreationError: If log group creation fails
        """
        try:
            ConfigValidator.validate_resource_name(name)
        except ValidationError as e:
            raise ResourceCreationError(
                f"Failed to create log group '{name}': {e.message}",
                resource_type="LogGroup"
            ) from e

        if retention_days not in RETENTION_MAPPING:
            logger.warning(f"Unsupported log retention {retention_days} days for {name}, using 30")

        return logs.LogGroup(
            self,
            f"{name}-log-group",
            log_group_name=f"/ecs/{name}",
            retention=RETENTION_MAPPING.get(retention_days, logs.RetentionDays.ONE_MONTH),
            removal_policy=removal_policy
        )


class FargateServiceStack(BaseStack, NetworkLoadBalancerMixin, SecurityGroupMixin,
                          IAMPolicyMixin, ScheduledTaskMixin):
    """
    Base class for a Fargate service behind a network load balancer.

    The VPC and subnets already exist and are referenced by id.
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 vpc_id: Optional[str] = None,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, config, **kwargs)

        self.vpc_id = vpc_id or self.get_required_config('VpcId')
        AWSResourceValidator.validate_vpc_id(self.vpc_id)
        self.vpc = ec2.Vpc.from_vpc_attributes(
            self,
            "imported-vpc",
            vpc_id=self.vpc_id,
            availability_zones=self.availability_zones
        )

    def create_nlb_fargate_service(self,
                                   service_name: str,
                                   container_image: str,
                                   container_port: int,
                                   public_subnet_ids: List[str],
                                   private_subnet_ids: List[str],
                                   listener_port: Optional[int] = None,
                                   desired_count: int = DEFAULT_DESIRED_COUNT,
                                   cpu: int = DEFAULT_CPU,
                                   memory: int = DEFAULT_MEMORY,
                                   enable_nlb_security_group: bool = False,
                                   allowed_cidrs: Optional[List[str]] = None,
                                   assign_public_ip: bool = False,
                                   health_check: Optional[Dict[str, int]] = None,
                                   schedule: Optional[Dict[str, Any]] = None,
                                   container_insights: bool = False,
                                   log_retention_days: int = DEFAULT_LOG_RETENTION_DAYS) -> Dict[str, Any]:
        """
        Create a complete Fargate service fronted by a network load balancer.

        Args:
            service_name: Name prefix for every resource
            container_image: Registry image reference
            container_port: Port the container listens on
            public_subnet_ids: Subnets for the load balancer
            private_subnet_ids: Subnets for the tasks
            listener_port: Public listener port (defaults to container_port)
            desired_count: Replica count applied when the service is first created
            cpu: Fargate CPU units
            memory: Fargate memory in MiB
            enable_nlb_security_group: Attach a security group to the load balancer
                and trust only it from the tasks
            allowed_cidrs: Client CIDRs admitted by the load balancer security group
            assign_public_ip: Give task ENIs a public IP
            health_check: Target group health check settings
            schedule: Scheduled task settings (Enabled, ScheduleExpression, TaskCount)
            container_insights: Enable Container Insights on the cluster
            log_retention_days: Container log retention

        Returns:
            Dictionary containing all created resources

        Raises:
            ValidationError: If an input is invalid
            ResourceCreationError: If a resource can't be declared
        """
        listener_port = listener_port or container_port
        allowed_cidrs = allowed_cidrs or [OPEN_IPV4_CIDR]
        health_check = health_check or {}
        schedule = schedule or {}

        try:
            ConfigValidator.validate_resource_name(service_name)
            ConfigValidator.validate_port_range(container_port, parameter_name="container_port")
            ConfigValidator.validate_port_range(listener_port, parameter_name="listener_port")
            ConfigValidator.validate_desired_count(desired_count)
            ConfigValidator.validate_fargate_task_size(cpu, memory)
            AWSResourceValidator.validate_subnet_ids(public_subnet_ids, parameter_name="public_subnet_ids")
            AWSResourceValidator.validate_subnet_ids(private_subnet_ids, parameter_name="private_subnet_ids")
            for cidr in allowed_cidrs:
                ConfigValidator.validate_cidr_block(cidr)

            scheduled_task_count = schedule.get('TaskCount', DEFAULT_SCHEDULED_TASK_COUNT)
            if schedule.get('Enabled'):
                ConfigValidator.validate_task_count(scheduled_task_count, parameter_name="scheduled_task_count")

            # Security boundary
            nlb_security_group = None
            if enable_nlb_security_group:
                nlb_security_group = self.create_load_balancer_security_group(
                    service_name, self.vpc, listener_port, allowed_cidrs
                )
            elif allowed_cidrs != [OPEN_IPV4_CIDR]:
                logger.warning(
                    f"{service_name}: client CIDRs {allowed_cidrs} only apply to the load balancer "
                    f"security group; without it the service admits {OPEN_IPV4_CIDR}"
                )

            service_security_group = self.create_service_security_group(
                service_name,
                self.vpc,
                container_port,
                source_security_group=nlb_security_group
            )

            # Network edge
            edge = self.create_network_edge(
                service_name,
                self.vpc_id,
                public_subnet_ids,
                listener_port,
                container_port,
                health_check={
                    'IntervalSeconds': health_check.get('IntervalSeconds', DEFAULT_HEALTH_CHECK_INTERVAL),
                    'HealthyThresholdCount': health_check.get('HealthyThresholdCount', DEFAULT_HEALTHY_THRESHOLD_COUNT),
                    'UnhealthyThresholdCount': health_check.get('UnhealthyThresholdCount', DEFAULT_UNHEALTHY_THRESHOLD_COUNT)
                },
                security_group_ids=[nlb_security_group.security_group_id] if nlb_security_group else None
            )

            # Identity
            execution_role = self.create_task_execution_role(service_name)

            # Compute placement
            cluster = ecs.Cluster(
                self,
                f"{service_name}-ecs-cluster",
                vpc=self.vpc,
                cluster_name=f"{service_name}-{DEFAULT_ECS_CLUSTER_SUFFIX}",
                container_insights_v2=(
                    ecs.ContainerInsights.ENABLED if container_insights else ecs.ContainerInsights.DISABLED
                )
            )

            log_group = self.create_log_group(service_name, log_retention_days)

            task_definition = self._create_task_definition(service_name, cpu, memory, execution_role)
            container = self._add_container_to_task(
                task_definition, service_name, container_image, container_port, log_group
            )

            network_configuration = AwsVpcNetworkConfiguration.create(
                subnets=private_subnet_ids,
                security_groups=[service_security_group.security_group_id],
                assign_public_ip=assign_public_ip
            )

            service_load_balancer = ecs.CfnService.LoadBalancerProperty(
                container_name=container.container_name,
                container_port=container_port,
                target_group_arn=edge["target_group"].ref
            )

            ecs_service = self._create_ecs_service(
                service_name,
                cluster,
                task_definition,
                service_load_balancer,
                network_configuration,
                edge["listener"]
            )

            desired_count_seed = self._seed_desired_count(
                service_name, cluster, ecs_service, desired_count
            )

            # Scheduler
            resources: Dict[str, Any] = {
                "cluster": cluster,
                "task_definition": task_definition,
                "container": container,
                "log_group": log_group,
                "execution_role": execution_role,
                "ecs_service": ecs_service,
                "service_load_balancer": service_load_balancer,
                "desired_count_seed": desired_count_seed,
                "service_security_group": service_security_group,
                "nlb_security_group": nlb_security_group,
                "network_configuration": network_configuration,
                "schedule_rule": None,
                "events_role": None,
                **edge
            }

            if schedule.get('Enabled'):
                resources.update(self._create_scheduled_run(
                    service_name, cluster, task_definition, execution_role,
                    network_configuration,
                    schedule.get('ScheduleExpression', DEFAULT_SCHEDULE_EXPRESSION),
                    scheduled_task_count
                ))

            self.add_common_tags(self, {
                "ServiceName": service_name,
                "ServiceType": "Fargate"
            })

            logger.info(
                f"Declared {service_name}: listener {listener_port} -> target port {container_port}, "
                f"nlb security group {'enabled' if nlb_security_group else 'disabled'}, "
                f"schedule {'enabled' if resources['schedule_rule'] is not None else 'disabled'}"
            )

            return resources

        except (ValidationError, StackConfigurationError):
            raise
        except Exception as e:
            raise ResourceCreationError(
                f"Failed to create NLB Fargate service '{service_name}': {str(e)}",
                resource_type="NlbFargateService"
            ) from e

    def _create_task_definition(self,
                                service_name: str,
                                cpu: int,
                                memory: int,
                                execution_role: iam.Role) -> ecs.FargateTaskDefinition:
        """Create the Fargate task definition; any field change registers a new revision."""
        return ecs.FargateTaskDefinition(
            self,
            f"{service_name}-task-definition",
            family=service_name,
            cpu=cpu,
            memory_limit_mib=memory,
            execution_role=execution_role,
            runtime_platform=ecs.RuntimePlatform(
                cpu_architecture=ecs.CpuArchitecture.X86_64,
                operating_system_family=ecs.OperatingSystemFamily.LINUX
            )
        )

    def _add_container_to_task(self,
                               task_definition: ecs.FargateTaskDefinition,
                               service_name: str,
                               container_image: str,
                               port: int,
                               log_group: logs.LogGroup) -> ecs.ContainerDefinition:
        """Add the application container to the task definition."""
        return task_definition.add_container(
            f"{service_name}-container",
            container_name=service_name,
            image=ecs.ContainerImage.from_registry(container_image),
            essential=True,
            logging=ecs.LogDrivers.aws_logs(
                log_group=log_group,
                stream_prefix=service_name,
                mode=ecs.AwsLogDriverMode.NON_BLOCKING
            ),
            port_mappings=[ecs.PortMapping(
                container_port=port,
                protocol=ecs.Protocol.TCP
            )]
        )

    def _create_ecs_service(self,
                            service_name: str,
                            cluster: ecs.Cluster,
                            task_definition: ecs.FargateTaskDefinition,
                            load_balancer_binding: ecs.CfnService.LoadBalancerProperty,
                            network_configuration: AwsVpcNetworkConfiguration,
                            listener: elbv2.CfnListener) -> ecs.CfnService:
        """
        Create the ECS service bound to the load balancer target group.

        DesiredCount is left off the resource: CloudFormation starts new
        services at one task and leaves the running count alone on updates,
        so manual scaling is never reverted by a deployment.
        """
        ecs_service = ecs.CfnService(
            self,
            f"{service_name}-ecs-service",
            service_name=f"{service_name}-{DEFAULT_ECS_SERVICE_SUFFIX}",
            cluster=cluster.cluster_arn,
            task_definition=task_definition.task_definition_arn,
            launch_type=LAUNCH_TYPE_FARGATE,
            deployment_controller=ecs.CfnService.DeploymentControllerProperty(
                type="ECS"
            ),
            deployment_configuration=ecs.CfnService.DeploymentConfigurationProperty(
                minimum_healthy_percent=DEFAULT_MINIMUM_HEALTHY_PERCENT,
                maximum_percent=DEFAULT_MAXIMUM_PERCENT,
                deployment_circuit_breaker=ecs.CfnService.DeploymentCircuitBreakerProperty(
                    enable=True,
                    rollback=True
                )
            ),
            network_configuration=network_configuration.to_service_property(),
            load_balancers=[load_balancer_binding],
            health_check_grace_period_seconds=DEFAULT_HEALTH_CHECK_GRACE_PERIOD,
            propagate_tags="SERVICE"
        )

        # The target group must be attached to a load balancer before a
        # service can register into it.
        ecs_service.add_dependency(listener)

        return ecs_service

    def _seed_desired_count(self,
                            service_name: str,
                            cluster: ecs.Cluster,
                            ecs_service: ecs.CfnService,
                            desired_count: int) -> cr.AwsCustomResource:
        """
        Apply the configured desired count once, right after the service is created.

        Only onCreate is defined, so later changes to desired_count update this
        custom resource without calling ECS.
        """
        seed = cr.AwsCustomResource(
            self,
            f"{service_name}-desired-count-seed",
            on_create=cr.AwsSdkCall(
                service="ECS",
                action="updateService",
                parameters={
                    "cluster": cluster.cluster_name,
                    "service": ecs_service.attr_name,
                    "desiredCount": desired_count
                },
                physical_resource_id=cr.PhysicalResourceId.of(f"{service_name}-desired-count-seed")
            ),
            policy=cr.AwsCustomResourcePolicy.from_statements([
                self.update_service_policy_statement([ecs_service.ref])
            ]),
            install_latest_aws_sdk=False
        )
        seed.node.add_dependency(ecs_service)
        return seed

    def _create_scheduled_run(self,
                              service_name: str,
                              cluster: ecs.Cluster,
                              task_definition: ecs.FargateTaskDefinition,
                              execution_role: iam.Role,
                              network_configuration: AwsVpcNetworkConfiguration,
                              schedule_expression: str,
                              task_count: int) -> Dict[str, Any]:
        """Create the events role and the rule that runs the task on a schedule."""
        events_role = self.create_events_invoke_role(service_name)
        self.add_run_task_permissions(
            events_role,
            task_definition_family=task_definition.family,
            cluster_arn=cluster.cluster_arn,
            pass_role_arns=[execution_role.role_arn, task_definition.task_role.role_arn]
        )

        rule = self.create_scheduled_task(
            service_name,
            cluster_arn=cluster.cluster_arn,
            task_definition_arn=task_definition.task_definition_arn,
            role_arn=events_role.role_arn,
            schedule_expression=schedule_expression,
            network_configuration=network_configuration,
            task_count=task_count
        )

        return {
            "schedule_rule": rule,
            "events_role": events_role
        }
