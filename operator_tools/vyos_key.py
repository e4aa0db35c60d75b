"""Fetch the VyOS router private key created by the customer gateway stack.

The key pair's private material is stored by EC2 in SSM Parameter Store under
``/ec2/keypair/<key-pair-id>``; the stack exposes that name as the
``VyOSPrivateKeyParameter`` output.

Usage:
    python -m operator_tools.vyos_key --stack-name Dev-VyosForCgwStack \
        --region ap-northeast-3 --output vyos.pem
"""
import argparse
import os
import sys
from typing import Any, Optional, Sequence

import boto3
from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.parameters import SSMProvider
from botocore.exceptions import ClientError

import common.constants as constants

logger = Logger(
    service=f"{constants.SERVICE_NAME}-vyos-key",
    level=os.getenv("LOG_LEVEL", constants.DEFAULT_LOG_LEVEL).upper(),
)

PRIVATE_KEY_FILE_MODE = 0o600


class StackOutputNotFoundError(LookupError):
    """Raised when a deployed stack does not expose the requested output."""


def get_stack_output(stack_name: str, output_key: str, cloudformation_client: Any) -> str:
    response = cloudformation_client.describe_stacks(StackName=stack_name)
    stacks = response.get("Stacks", [])
    if not stacks:
        raise StackOutputNotFoundError(f"Stack {stack_name} was not found")

    for output in stacks[0].get("Outputs", []):
        if output.get("OutputKey") == output_key:
            return output["OutputValue"]
    raise StackOutputNotFoundError(f"Stack {stack_name} has no output {output_key}")


def fetch_vyos_private_key(
    stack_name: str,
    region: str,
    cloudformation_client: Optional[Any] = None,
    ssm_client: Optional[Any] = None,
) -> str:
    cloudformation_client = cloudformation_client or boto3.client(
        "cloudformation", region_name=region
    )
    ssm_client = ssm_client or boto3.client("ssm", region_name=region)

    parameter_name = get_stack_output(
        stack_name, constants.VYOS_PRIVATE_KEY_OUTPUT, cloudformation_client
    )
    logger.info("Resolved private key parameter", parameter=parameter_name)
    return SSMProvider(boto3_client=ssm_client).get(parameter_name, decrypt=True)


def write_private_key(path: str, key_material: str) -> None:
    """Write the PEM readable by the owner only, as ssh requires."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, PRIVATE_KEY_FILE_MODE)
    with os.fdopen(fd, "w") as file:
        file.write(key_material if key_material.endswith("\n") else f"{key_material}\n")
    os.chmod(path, PRIVATE_KEY_FILE_MODE)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--stack-name", required=True, help="VyosForCgwStack name")
    parser.add_argument("--region", required=True, help="Region the stack is deployed in")
    parser.add_argument("--output", default="vyos.pem", help="Destination PEM file")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        key_material = fetch_vyos_private_key(args.stack_name, args.region)
    except ClientError as e:
        error_info = (e.response or {}).get("Error", {})
        logger.exception(
            "AWS request failed while fetching the VyOS private key",
            error_code=error_info.get("Code", "UnknownError"),
            stack=args.stack_name,
        )
        return 1
    except StackOutputNotFoundError:
        logger.exception("VyOS private key parameter is not exposed", stack=args.stack_name)
        return 1

    write_private_key(args.output, key_material)
    logger.info("Wrote VyOS private key", path=args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
