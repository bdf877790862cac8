"""
Constants used across CDK stacks.
"""

# Task Size (Fargate CPU units / MiB)
DEFAULT_CPU = 256
DEFAULT_MEMORY = 512
DEFAULT_DESIRED_COUNT = 1

# Valid Fargate memory sizes per CPU value
FARGATE_TASK_SIZES = {
    256: [512, 1024, 2048],
    512: list(range(1024, 4096 + 1, 1024)),
    1024: list(range(2048, 8192 + 1, 1024)),
    2048: list(range(4096, 16384 + 1, 1024)),
    4096: list(range(8192, 30720 + 1, 1024)),
    8192: list(range(16384, 61440 + 1, 4096)),
    16384: list(range(32768, 122880 + 1, 8192)),
}

# Port Configuration
DEFAULT_CONTAINER_PORT = 80

# Launch Type / Target Type
LAUNCH_TYPE_FARGATE = "FARGATE"
LAUNCH_TYPE_EC2 = "EC2"
TARGET_TYPE_IP = "ip"
TARGET_TYPE_INSTANCE = "instance"
# Target type each launch type registers with (awsvpc tasks get their own ENI)
LAUNCH_TYPE_TARGET_TYPES = {
    LAUNCH_TYPE_FARGATE: TARGET_TYPE_IP,
    LAUNCH_TYPE_EC2: TARGET_TYPE_INSTANCE,
}

# Network Load Balancer
NLB_TYPE = "network"
NLB_SCHEME_INTERNET_FACING = "internet-facing"
NLB_PROTOCOL_TCP = "TCP"
ELB_NAME_MAX_LENGTH = 32

# Health Check Configuration for Target Groups
DEFAULT_HEALTHY_THRESHOLD_COUNT = 3
DEFAULT_UNHEALTHY_THRESHOLD_COUNT = 3
DEFAULT_HEALTH_CHECK_INTERVAL = 30
# NLB target groups accept 2-10 for both thresholds and a 5-300 second interval
MIN_THRESHOLD_COUNT = 2
MAX_THRESHOLD_COUNT = 10
MIN_HEALTH_CHECK_INTERVAL = 5
MAX_HEALTH_CHECK_INTERVAL = 300

# ECS Deployment Configuration
DEFAULT_MINIMUM_HEALTHY_PERCENT = 100
DEFAULT_MAXIMUM_PERCENT = 200
DEFAULT_HEALTH_CHECK_GRACE_PERIOD = 60

# Logging
DEFAULT_LOG_RETENTION_DAYS = 30

# Scheduler
DEFAULT_SCHEDULE_EXPRESSION = "rate(1 hour)"
DEFAULT_SCHEDULED_TASK_COUNT = 1
# EventBridge ECS targets launch 1-10 tasks per invocation
MIN_SCHEDULED_TASK_COUNT = 1
MAX_SCHEDULED_TASK_COUNT = 10

# Open CIDR used when the load balancer has no security group
OPEN_IPV4_CIDR = "0.0.0.0/0"

# Resource name suffixes
DEFAULT_NLB_SUFFIX = "nlb"
DEFAULT_TARGET_GROUP_SUFFIX = "tg"
DEFAULT_ECS_CLUSTER_SUFFIX = "cluster"
DEFAULT_ECS_SERVICE_SUFFIX = "service"
DEFAULT_EXECUTION_ROLE_SUFFIX = "execution-role"
DEFAULT_EVENTS_ROLE_SUFFIX = "events-role"
DEFAULT_SCHEDULE_RULE_SUFFIX = "schedule"

# Managed policies and service principals
ECS_TASK_EXECUTION_MANAGED_POLICY = "service-role/AmazonECSTaskExecutionRolePolicy"
ECS_TASKS_SERVICE_PRINCIPAL = "ecs-tasks.amazonaws.com"
EVENTS_SERVICE_PRINCIPAL = "events.amazonaws.com"

# Remote state parameter prefix (under /{AppName}/)
STATE_BACKEND_PARAMETER_PREFIX = "authorizer-state"
