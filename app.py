#!/usr/bin/env python3
"""AWS CDK entrypoint for provisioning Nexus on ECS Fargate.

The stack is deployed to the account and region the CDK CLI resolves by
default. Pick a deployment environment with ``cdk synth -c env=prod``; it is
embedded in physical resource names.
"""
import os

import aws_cdk as cdk
from aws_cdk import Environment

import common.constants as constants
from nexus_fargate.nexus_fargate_stack import NexusFargateStack

app = cdk.App()

env = Environment(
    account=os.getenv("CDK_DEFAULT_ACCOUNT"),
    region=os.getenv("CDK_DEFAULT_REGION"),
)

NexusFargateStack(
    app,
    "NexusFargateStack",
    deploy_env=app.node.try_get_context("env") or constants.DEFAULT_ENV,
    env=env,
)

app.synth()
