"""Validation utilities for CDK stacks."""

import re
from typing import Any, List

from .constants import (
    FARGATE_TASK_SIZES,
    LAUNCH_TYPE_TARGET_TYPES,
    MAX_HEALTH_CHECK_INTERVAL,
    MAX_SCHEDULED_TASK_COUNT,
    MAX_THRESHOLD_COUNT,
    MIN_HEALTH_CHECK_INTERVAL,
    MIN_SCHEDULED_TASK_COUNT,
    MIN_THRESHOLD_COUNT,
)
from .exceptions import ValidationError

RATE_EXPRESSION = re.compile(r'^rate\((?P<value>[1-9][0-9]*) (?P<unit>minutes?|hours?|days?)\)$')
CRON_EXPRESSION = re.compile(r'^cron\((\S+ ){5}\S+\)$')


def _is_token(value: Any) -> bool:
    """CDK tokens (CloudFormation references) can't be validated at synth time."""
    return isinstance(value, str) and ('${Token[' in value or '${' in value)


class ConfigValidator:
    """Utility class for validating configuration parameters."""

    @staticmethod
    def validate_port_range(port: int, parameter_name: str = "port") -> None:
        """
        Validate that port number is within valid range.

        Raises:
            ValidationError: If port is outside valid range
        """
        if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
            raise ValidationError(
                f"Port must be an integer between 1 and 65535, got {port}",
                parameter_name=parameter_name,
                provided_value=str(port)
            )

    @staticmethod
    def validate_cidr_block(cidr: str) -> None:
        """
        Validate IPv4 CIDR block format.

        Raises:
            ValidationError: If CIDR format is invalid
        """
        cidr_pattern = re.compile(
            r'^((25[0-5]|2[0-4][0-9]|1[0-9]{2}|[1-9]?[0-9])\.){3}'
            r'(25[0-5]|2[0-4][0-9]|1[0-9]{2}|[1-9]?[0-9])/([0-9]|[1-2][0-9]|3[0-2])$'
        )
        if not isinstance(cidr, str) or not cidr_pattern.match(cidr):
            raise ValidationError(
                f"Invalid CIDR block format: {cidr}",
                parameter_name="cidr",
                provided_value=str(cidr)
            )

    @staticmethod
    def validate_resource_name(name: str, max_length: int = 63) -> None:
        """
        Validate AWS resource name format.

        Args:
            name: Resource name to validate
            max_length: Maximum allowed length

        Raises:
            ValidationError: If name format is invalid
        """
        if _is_token(name):
            return

        if not name:
            raise ValidationError(
                "Resource name cannot be empty",
                parameter_name="name",
                provided_value=name
            )

        if len(name) > max_length:
            raise ValidationError(
                f"Resource name too long (max {max_length}): {name}",
                parameter_name="name",
                provided_value=name
            )

        if not re.match(r'^[a-zA-Z0-9-_]+$', name):
            raise ValidationError(
                f"Invalid resource name format: {name}. "
                f"Only alphanumeric characters, hyphens, and underscores allowed",
                parameter_name="name",
                provided_value=name
            )

    @staticmethod
    def validate_desired_count(desired_count: int) -> None:
        if isinstance(desired_count, bool) or not isinstance(desired_count, int) or desired_count < 0:
            raise ValidationError(
                f"Desired count must be a non-negative integer, got {desired_count}",
                parameter_name="desired_count",
                provided_value=str(desired_count)
            )

    @staticmethod
    def validate_task_count(task_count: int, parameter_name: str = "task_count") -> None:
        """
        Validate the number of tasks a scheduled rule launches per invocation.

        Raises:
            ValidationError: If the count is not an integer between 1 and 10
        """
        if (isinstance(task_count, bool) or not isinstance(task_count, int)
                or not MIN_SCHEDULED_TASK_COUNT <= task_count <= MAX_SCHEDULED_TASK_COUNT):
            raise ValidationError(
                f"Task count must be an integer between {MIN_SCHEDULED_TASK_COUNT} and "
                f"{MAX_SCHEDULED_TASK_COUNT}, got {task_count}",
                parameter_name=parameter_name,
                provided_value=str(task_count)
            )

    @staticmethod
    def validate_fargate_task_size(cpu: int, memory: int) -> None:
        """
        Validate a Fargate CPU/memory combination.

        Raises:
            ValidationError: If the pair is not a supported Fargate task size
        """
        if cpu not in FARGATE_TASK_SIZES:
            raise ValidationError(
                f"Unsupported Fargate CPU value {cpu}. "
                f"Valid values: {sorted(FARGATE_TASK_SIZES)}",
                parameter_name="cpu",
                provided_value=str(cpu)
            )

        if memory not in FARGATE_TASK_SIZES[cpu]:
            raise ValidationError(
                f"Memory {memory} MiB is not valid for {cpu} CPU units. "
                f"Valid values: {FARGATE_TASK_SIZES[cpu]}",
                parameter_name="memory",
                provided_value=str(memory)
            )

    @staticmethod
    def validate_schedule_expression(expression: str) -> None:
        """
        Validate an EventBridge schedule expression.

        Accepts ``rate(N unit)`` (singular unit when N is 1) and six-field ``cron(...)``.

        Raises:
            ValidationError: If the expression is malformed
        """
        if not isinstance(expression, str):
            raise ValidationError(
                "Schedule expression must be a string",
                parameter_name="schedule_expression",
                provided_value=str(expression)
            )

        rate = RATE_EXPRESSION.match(expression)
        if rate:
            value = int(rate.group('value'))
            plural = rate.group('unit').endswith('s')
            if (value == 1) == plural:
                raise ValidationError(
                    f"Schedule expression '{expression}' must use a singular unit for 1 "
                    f"and a plural unit otherwise",
                    parameter_name="schedule_expression",
                    provided_value=expression
                )
            return

        if CRON_EXPRESSION.match(expression):
            return

        raise ValidationError(
            f"Invalid schedule expression: {expression}. "
            f"Expected 'rate(<value> <unit>)' or 'cron(<six fields>)'",
            parameter_name="schedule_expression",
            provided_value=expression
        )

    @staticmethod
    def validate_health_check(interval: int, healthy_threshold: int, unhealthy_threshold: int) -> None:
        """
        Validate network target group health check settings.

        Raises:
            ValidationError: If any setting is outside what NLB target groups accept
        """
        if (isinstance(interval, bool) or not isinstance(interval, int)
                or not MIN_HEALTH_CHECK_INTERVAL <= interval <= MAX_HEALTH_CHECK_INTERVAL):
            raise ValidationError(
                f"Health check interval must be between {MIN_HEALTH_CHECK_INTERVAL} and "
                f"{MAX_HEALTH_CHECK_INTERVAL} seconds, got {interval}",
                parameter_name="health_check_interval",
                provided_value=str(interval)
            )

        for name, value in (("healthy_threshold_count", healthy_threshold),
                            ("unhealthy_threshold_count", unhealthy_threshold)):
            if not MIN_THRESHOLD_COUNT <= value <= MAX_THRESHOLD_COUNT:
                raise ValidationError(
                    f"{name} must be between {MIN_THRESHOLD_COUNT} and {MAX_THRESHOLD_COUNT}, got {value}",
                    parameter_name=name,
                    provided_value=str(value)
                )


class AWSResourceValidator:
    """Utility class for validating AWS resource parameters."""

    @staticmethod
    def validate_vpc_id(vpc_id: str) -> None:
        if _is_token(vpc_id):
            return
        if not isinstance(vpc_id, str) or not re.match(r'^vpc-[0-9a-f]{8}([0-9a-f]{9})?$', vpc_id):
            raise ValidationError(
                f"Invalid VPC id: {vpc_id}",
                parameter_name="vpc_id",
                provided_value=str(vpc_id)
            )

    @staticmethod
    def validate_subnet_ids(subnet_ids: List[str],
                            min_count: int = 1,
                            parameter_name: str = "subnets") -> None:
        """
        Validate a list of subnet ids.

        Args:
            subnet_ids: Subnet ids to validate
            min_count: Minimum number of subnets required
            parameter_name: Name reported on failure

        Raises:
            ValidationError: If subnets are invalid
        """
        if not subnet_ids:
            raise ValidationError(
                "At least one subnet is required",
                parameter_name=parameter_name,
                provided_value="[]"
            )

        if len(subnet_ids) < min_count:
            raise ValidationError(
                f"At least {min_count} subnets required, got {len(subnet_ids)}",
                parameter_name=parameter_name,
                provided_value=str(len(subnet_ids))
            )

        if len(set(subnet_ids)) != len(subnet_ids):
            raise ValidationError(
                f"Duplicate subnet ids: {subnet_ids}",
                parameter_name=parameter_name,
                provided_value=str(subnet_ids)
            )

        for subnet_id in subnet_ids:
            if _is_token(subnet_id):
                continue
            if not isinstance(subnet_id, str) or not re.match(r'^subnet-[0-9a-f]{8}([0-9a-f]{9})?$', subnet_id):
                raise ValidationError(
                    f"Invalid subnet id: {subnet_id}",
                    parameter_name=parameter_name,
                    provided_value=str(subnet_id)
                )

    @staticmethod
    def validate_s3_bucket_name(bucket: str) -> None:
        """
        Validate an S3 bucket name (general purpose bucket rules).

        Raises:
            ValidationError: If the name breaks S3 naming rules
        """
        if not isinstance(bucket, str) or not re.match(r'^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$', bucket):
            raise ValidationError(
                f"Invalid S3 bucket name: {bucket}",
                parameter_name="bucket",
                provided_value=str(bucket)
            )

        if '..' in bucket or re.match(r'^\d+\.\d+\.\d+\.\d+$', bucket) or bucket.startswith('xn--'):
            raise ValidationError(
                f"Invalid S3 bucket name: {bucket}",
                parameter_name="bucket",
                provided_value=bucket
            )

    @staticmethod
    def validate_target_type_for_launch_type(target_type: str, launch_type: str) -> None:
        """
        Validate that a target group's target type matches how tasks register.

        Raises:
            ValidationError: If the launch type is unknown or the target type doesn't match
        """
        expected = LAUNCH_TYPE_TARGET_TYPES.get(launch_type)
        if expected is None:
            raise ValidationError(
                f"Unknown launch type: {launch_type}",
                parameter_name="launch_type",
                provided_value=str(launch_type)
            )

        if target_type != expected:
            raise ValidationError(
                f"Target type '{target_type}' is not valid for launch type {launch_type}; "
                f"expected '{expected}'",
                parameter_name="target_type",
                provided_value=str(target_type)
            )
