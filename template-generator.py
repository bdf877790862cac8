#!/usr/bin/env python3
"""
Synthesize the service stack without deploying it.

Writes the template to cdk.out/<AppName>-service.template.json. When a
template from an earlier run is already there, logs which resources the new
one would add, remove or modify, so a change can be reviewed before
`cdk deploy`.
"""
import os
import json
import boto3
import sys
from aws_cdk import App, Environment
from botocore.exceptions import BotoCoreError, ClientError

from helper.config import Config
from helper.logging_config import configure_debug_logging, get_logger
from helper.template_diff import diff_templates, summarize_changes
from stacks.nlb_service import NlbFargateServiceStack

logger = get_logger(__name__)

OUTPUT_DIR = "cdk.out"


def resolve_account_id() -> str:
    """Account from STS, falling back to CDK_DEFAULT_ACCOUNT when there are no credentials."""
    try:
        sts = boto3.client('sts')
        return sts.get_caller_identity()['Account']
    except (BotoCoreError, ClientError) as e:
        logger.debug(f"STS lookup failed, using CDK_DEFAULT_ACCOUNT: {e}")
        return os.environ.get("CDK_DEFAULT_ACCOUNT", "123456789012")


def load_previous_template(path: str):
    if not os.path.exists(path):
        return None
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def main():
    """Generate the template and log the difference from the previous one."""
    if "--debug" in sys.argv:
        configure_debug_logging()

    logger.info("Generating service template...")

    account_id = resolve_account_id()

    # Create app
    app = App(outdir=os.path.join(OUTPUT_DIR, "template-generator"))

    environment = app.node.try_get_context("environment") or os.environ.get("ENVIRONMENT", "development")
    conf = Config(environment=environment)

    app_name = conf.get_validated_app_name()
    region = conf.get_optional('RegionName') or os.environ.get("CDK_DEFAULT_REGION", "us-east-1")

    service_stack = NlbFargateServiceStack(
        app,
        f"{app_name}-service",
        config=conf,
        env=Environment(account=account_id, region=region),
    )

    # Synthesize
    assembly = app.synth()

    template_artifact = assembly.get_stack_by_name(service_stack.stack_name)
    template_path = template_artifact.template_full_path

    if not os.path.exists(template_path):
        logger.error(f"Template not found at {template_path}")
        return False

    with open(template_path, 'r', encoding='utf-8') as f:
        template_content = json.load(f)

    output_path = os.path.join(OUTPUT_DIR, f"{app_name}-service.template.json")
    previous = load_previous_template(output_path)

    if previous is None:
        logger.info("No previous template found, every resource is new")
    else:
        changes = diff_templates(previous, template_content)
        if not changes:
            logger.info("No changes from the previous template")
        else:
            summary = summarize_changes(changes)
            logger.info(
                f"Changes: {summary['ADD']} to add, {summary['MODIFY']} to modify, "
                f"{summary['REMOVE']} to remove"
            )
            for change in changes:
                logger.info(f"  {change}")

    os.makedirs(OUTPUT_DIR, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(template_content, f, indent=2)

    logger.info(f"Template generated: {output_path}")
    logger.debug(f"  Stack name: {service_stack.stack_name}")
    logger.debug(f"  Template size: {len(json.dumps(template_content))} bytes")

    # List resources for reference
    if 'Resources' in template_content:
        resource_types = {}
        for resource in template_content['Resources'].values():
            rtype = resource.get('Type', 'Unknown')
            resource_types[rtype] = resource_types.get(rtype, 0) + 1

        logger.debug(f"  Total resources: {len(template_content['Resources'])}")
        for rtype, count in sorted(resource_types.items()):
            logger.debug(f"    - {rtype}: {count}")

    return True


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
