#!/usr/bin/env python3

import os

import aws_cdk as cdk
from cdk_nag import AwsSolutionsChecks, NagSuppressions

from helper import config
from helper.logging_config import setup_logging
from stacks import AuthorizerStateBackendStack, NlbFargateServiceStack

setup_logging()

app = cdk.App()

conf = config.Config(app.node.try_get_context('environment') or 'development')

# AppName prefixes every stack and resource name
app_name = conf.get_validated_app_name()

env = {
    "region": conf.get('RegionName'),
    "account": os.environ.get('CDK_DEFAULT_ACCOUNT')
}

service_stack = NlbFargateServiceStack(app, f"{app_name}-service",
                                       config=conf,
                                       env=env,
                                       description=f"Fargate service {app_name} behind a network load balancer"
                                       )

state_backend_stack = None
if conf.get_state_backend_config():
    state_backend_stack = AuthorizerStateBackendStack(app, f"{app_name}-authorizer-state",
                                                      config=conf,
                                                      env=env,
                                                      description=f"Remote state coordinates of the {app_name} API gateway authorizer"
                                                      )

for stack in (service_stack, state_backend_stack):
    if stack is not None:
        cdk.Tags.of(stack).add("Project", app_name)

# Apply CDK Nag AwsSolutions checks with: cdk synth -c nag=true
if str(app.node.try_get_context('nag')).lower() == 'true':
    cdk.Aspects.of(app).add(AwsSolutionsChecks())

NagSuppressions.add_stack_suppressions(service_stack, [
    {"id": "AwsSolutions-IAM4", "reason": "ECS task execution role uses the AWS managed AmazonECSTaskExecutionRolePolicy",
     "appliesTo": ["Policy::arn:<AWS::Partition>:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy"]},
    {"id": "AwsSolutions-IAM4", "reason": "Desired count custom resource Lambda uses the AWS managed Lambda execution role",
     "appliesTo": ["Policy::arn:<AWS::Partition>:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"]},
    {"id": "AwsSolutions-IAM5", "reason": "Scheduler may run any revision of the service's task definition family",
     "appliesTo": [{"regex": "/^Resource::arn:<AWS::Partition>:ecs:<AWS::Region>:<AWS::AccountId>:task-definition\\/.*:\\*$/"}]},
    {"id": "AwsSolutions-EC23", "reason": "Public network load balancer; without its security group the tasks are open on the container port"},
    {"id": "AwsSolutions-ELB2", "reason": "Access logging is not configured for the TCP load balancer"},
    {"id": "AwsSolutions-ECS4", "reason": "Container Insights is controlled by the ContainerInsights setting"},
    {"id": "AwsSolutions-L1", "reason": "Custom resource Lambda runtime is managed by the CDK"},
    {"id": "CdkNagValidationFailure", "reason": "Security group rules use intrinsic functions which cannot be validated at synth time"}
])

app.synth()
