import pytest
from aws_cdk import aws_ec2 as ec2

from common.instance_types import (
    InstanceTypeSpec,
    InvalidInstanceTypeError,
    parse_instance_type,
)

VALID_INSTANCE_TYPES = [
    ("t3.medium", ec2.InstanceClass.T3, ec2.InstanceSize.MEDIUM),
    ("t3.micro", ec2.InstanceClass.T3, ec2.InstanceSize.MICRO),
    ("t3.small", ec2.InstanceClass.T3, ec2.InstanceSize.SMALL),
    ("M5.2xlarge", ec2.InstanceClass.M5, ec2.InstanceSize.XLARGE2),
    ("c5.xlarge", ec2.InstanceClass.C5, ec2.InstanceSize.XLARGE),
]

INVALID_INSTANCE_TYPES = [
    "t3medium",
    "t3.",
    ".medium",
    "",
    "zz9.medium",
    "t3.gigantic",
]


@pytest.mark.parametrize("value,instance_class,instance_size", VALID_INSTANCE_TYPES)
def test_parse_instance_type(
    value: str, instance_class: ec2.InstanceClass, instance_size: ec2.InstanceSize
):
    parsed = parse_instance_type(value)

    assert parsed == InstanceTypeSpec(
        instance_class=instance_class, instance_size=instance_size
    )


def test_parse_yields_class_and_size_tokens():
    parsed = parse_instance_type("t3.medium")

    assert parsed.instance_class.name == "T3"
    assert parsed.instance_size.name == "MEDIUM"
    assert parsed.to_instance_type().to_string() == "t3.medium"


@pytest.mark.parametrize("value", INVALID_INSTANCE_TYPES)
def test_malformed_instance_type_rejected(value: str):
    with pytest.raises(InvalidInstanceTypeError):
        parse_instance_type(value)


def test_invalid_instance_type_is_value_error():
    with pytest.raises(ValueError, match="'<class>.<size>'"):
        parse_instance_type("t3medium")


def test_non_string_rejected():
    with pytest.raises(InvalidInstanceTypeError):
        parse_instance_type(None)
