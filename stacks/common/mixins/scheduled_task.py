"""Scheduled ECS task mixin for CDK stacks."""

from aws_cdk import aws_events as events

from ..constants import DEFAULT_SCHEDULE_RULE_SUFFIX, LAUNCH_TYPE_FARGATE
from ..network import AwsVpcNetworkConfiguration
from ..validators import ConfigValidator


class ScheduledTaskMixin:
    """
    Mixin class for running an ECS task definition on a fixed schedule.

    The event target launches an ad-hoc task next to the service, using the
    same task definition and network placement.
    """

    def create_scheduled_task(self,
                              name: str,
                              cluster_arn: str,
                              task_definition_arn: str,
                              role_arn: str,
                              schedule_expression: str,
                              network_configuration: AwsVpcNetworkConfiguration,
                              task_count: int = 1,
                              enabled: bool = True) -> events.CfnRule:
        """
        Create an EventBridge rule that runs a Fargate task.

        Args:
            name: Name prefix for the rule
            cluster_arn: Cluster the task is launched on
            task_definition_arn: Task definition revision to run
            role_arn: Role EventBridge assumes to call ecs:RunTask
            schedule_expression: ``rate(...)`` or ``cron(...)`` expression
            network_configuration: awsvpc placement for the task
            task_count: Number of tasks launched per invocation
            enabled: Rule state

        Returns:
            The created rule
        """
        ConfigValidator.validate_resource_name(f"{name}-{DEFAULT_SCHEDULE_RULE_SUFFIX}", max_length=64)
        ConfigValidator.validate_schedule_expression(schedule_expression)
        ConfigValidator.validate_task_count(task_count)

        return events.CfnRule(
            self,
            f"{name}-schedule-rule",
            name=f"{name}-{DEFAULT_SCHEDULE_RULE_SUFFIX}",
            description=f"Runs {name} on {schedule_expression}",
            schedule_expression=schedule_expression,
            state="ENABLED" if enabled else "DISABLED",
            targets=[
                events.CfnRule.TargetProperty(
                    id=f"{name}-scheduled-task",
                    arn=cluster_arn,
                    role_arn=role_arn,
                    ecs_parameters=events.CfnRule.EcsParametersProperty(
                        task_definition_arn=task_definition_arn,
                        task_count=task_count,
                        launch_type=LAUNCH_TYPE_FARGATE,
                        platform_version="LATEST",
                        network_configuration=network_configuration.to_events_property()
                    )
                )
            ]
        )
