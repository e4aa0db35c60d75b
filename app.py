#!/usr/bin/env python3
"""AWS CDK entrypoint for the VyOS site-to-site VPN sandbox.

Each environment gets a Transit Gateway stack in Tokyo and a VyOS customer
gateway stack in Osaka, both bound to the account and regions of the
environment config.
"""
import os

import aws_cdk as cdk
from aws_cdk import Environment, Tags
from aws_lambda_powertools import Logger

import common.constants as constants
from environments.dev import DEV_CONFIG
from environments.prod import PROD_CONFIG
from environments.schema import Config, check_cidr_isolation
from tgw_for_vpn.tgw_for_vpn_stack import TgwForVpnStack
from vyos_for_cgw.vyos_for_cgw_stack import VyosForCgwStack

logger = Logger(
    service=constants.SERVICE_NAME,
    level=os.getenv("LOG_LEVEL", constants.DEFAULT_LOG_LEVEL).upper(),
)

ENVIRONMENTS = (("Dev", DEV_CONFIG), ("Prod", PROD_CONFIG))


def build_environment_stacks(
    app: cdk.App, prefix: str, config: Config
) -> tuple[TgwForVpnStack, VyosForCgwStack]:
    tgw_stack = TgwForVpnStack(
        app,
        f"{prefix}-TgwForVpnStack",
        config=config,
        env=Environment(account=config.aws.account, region=config.aws.regions.tokyo),
    )
    vyos_stack = VyosForCgwStack(
        app,
        f"{prefix}-VyosForCgwStack",
        config=config,
        env=Environment(account=config.aws.account, region=config.aws.regions.osaka),
    )
    for stack in (tgw_stack, vyos_stack):
        Tags.of(stack).add("Project", config.project.name)
        logger.info(
            "Declared stack",
            stack=stack.stack_name,
            region=stack.region,
            project=config.project.name,
        )

    if config.on_prem_route_pending:
        logger.warning(
            "Route to the on-premises network is pending a VPN attachment",
            stack=tgw_stack.stack_name,
            destination_cidr=config.network.osaka.vpc.cidr,
        )
    return tgw_stack, vyos_stack


def build_app(app: cdk.App) -> cdk.App:
    check_cidr_isolation(*(config for _, config in ENVIRONMENTS))
    for prefix, config in ENVIRONMENTS:
        build_environment_stacks(app, prefix, config)
    return app


if __name__ == "__main__":
    build_app(cdk.App()).synth()
