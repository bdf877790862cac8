"""IAM policy mixin for CDK stacks."""

from typing import List, Optional

import aws_cdk
from aws_cdk import aws_iam as iam

from ..constants import (
    DEFAULT_EVENTS_ROLE_SUFFIX,
    DEFAULT_EXECUTION_ROLE_SUFFIX,
    ECS_TASK_EXECUTION_MANAGED_POLICY,
    ECS_TASKS_SERVICE_PRINCIPAL,
    EVENTS_SERVICE_PRINCIPAL,
)


class IAMPolicyMixin:
    """
    Mixin class providing the roles used by ECS tasks and their scheduler.

    Each role trusts exactly one service principal.
    """

    def create_task_execution_role(self, role_name: str) -> iam.Role:
        """
        Create an ECS task execution role.

        The role is assumed by the ECS agent, not the application, to pull
        images and write container logs.

        Args:
            role_name: Name prefix for the IAM role

        Returns:
            The created IAM role
        """
        role = iam.Role(
            self,
            f"{role_name}-execution-role",
            role_name=f"{role_name}-{DEFAULT_EXECUTION_ROLE_SUFFIX}",
            assumed_by=iam.ServicePrincipal(ECS_TASKS_SERVICE_PRINCIPAL),
            description=f"ECS task execution role for {role_name}",
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    ECS_TASK_EXECUTION_MANAGED_POLICY
                )
            ]
        )

        return role

    def create_events_invoke_role(self, role_name: str) -> iam.Role:
        """
        Create the role EventBridge assumes to launch scheduled tasks.

        Args:
            role_name: Name prefix for the IAM role

        Returns:
            The created IAM role (permissions are added separately)
        """
        return iam.Role(
            self,
            f"{role_name}-events-role",
            role_name=f"{role_name}-{DEFAULT_EVENTS_ROLE_SUFFIX}",
            assumed_by=iam.ServicePrincipal(EVENTS_SERVICE_PRINCIPAL),
            description=f"EventBridge role that runs scheduled {role_name} tasks"
        )

    def add_run_task_permissions(self,
                                 role: iam.Role,
                                 task_definition_family: str,
                                 cluster_arn: str,
                                 pass_role_arns: List[str]) -> None:
        """
        Allow a role to run any revision of a task definition family on one cluster.

        Args:
            role: The IAM role to add permissions to
            task_definition_family: Task definition family name
            cluster_arn: Cluster the tasks must be launched on
            pass_role_arns: Roles the task definition references (execution/task role)
        """
        family_arn = (
            f"arn:{aws_cdk.Aws.PARTITION}:ecs:{aws_cdk.Aws.REGION}:{aws_cdk.Aws.ACCOUNT_ID}:"
            f"task-definition/{task_definition_family}:*"
        )

        role.add_to_policy(iam.PolicyStatement(
            effect=iam.Effect.ALLOW,
            resources=[family_arn],
            actions=["ecs:RunTask"],
            conditions={
                "ArnEquals": {"ecs:cluster": cluster_arn}
            }
        ))

        role.add_to_policy(iam.PolicyStatement(
            effect=iam.Effect.ALLOW,
            resources=pass_role_arns,
            actions=["iam:PassRole"],
            conditions={
                "StringLike": {"iam:PassedToService": ECS_TASKS_SERVICE_PRINCIPAL}
            }
        ))

    def update_service_policy_statement(self, service_arns: Optional[List[str]] = None) -> iam.PolicyStatement:
        """Statement allowing the desired count of specific ECS services to be changed."""
        return iam.PolicyStatement(
            effect=iam.Effect.ALLOW,
            resources=service_arns or ["*"],
            actions=["ecs:UpdateService"]
        )
