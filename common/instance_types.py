"""Parsing of EC2 instance type strings such as ``t3.medium``.

CDK exposes instance classes and sizes as enumerations whose member names do
not always match the API spelling (``2xlarge`` is ``XLARGE2``), so the string
form used in configuration is parsed here once and validated before any
resource is declared.
"""
import re

from attrs import define, field
from attrs.validators import instance_of
from aws_cdk import aws_ec2 as ec2

_MULTIPLIED_SIZE = re.compile(r"^(\d+)XLARGE$")


class InvalidInstanceTypeError(ValueError):
    """Raised when an instance type string cannot be mapped to CDK enums."""


@define(slots=True, frozen=True)
class InstanceTypeSpec:
    instance_class: ec2.InstanceClass = field(validator=instance_of(ec2.InstanceClass))
    instance_size: ec2.InstanceSize = field(validator=instance_of(ec2.InstanceSize))

    def to_instance_type(self) -> ec2.InstanceType:
        return ec2.InstanceType.of(self.instance_class, self.instance_size)


def _size_member_name(size_token: str) -> str:
    name = size_token.upper().replace("-", "_")
    multiplied = _MULTIPLIED_SIZE.match(name)
    if multiplied:
        return f"XLARGE{multiplied.group(1)}"
    return name


def parse_instance_type(value: str) -> InstanceTypeSpec:
    """Parse ``<class>.<size>`` into typed CDK enumerations.

    Examples:
        - ``t3.medium`` -> (InstanceClass.T3, InstanceSize.MEDIUM)
        - ``m5.2xlarge`` -> (InstanceClass.M5, InstanceSize.XLARGE2)

    Raises:
        InvalidInstanceTypeError: the delimiter is missing, a token is empty,
            or the class or size is unknown to CDK.
    """
    if not isinstance(value, str):
        raise InvalidInstanceTypeError(f"Instance type must be a string, got {value!r}")

    class_token, delimiter, size_token = value.strip().partition(".")
    if not delimiter or not class_token or not size_token:
        raise InvalidInstanceTypeError(
            f"Instance type {value!r} is not in the '<class>.<size>' form"
        )

    try:
        instance_class = ec2.InstanceClass[class_token.upper()]
    except KeyError as e:
        raise InvalidInstanceTypeError(
            f"Unknown instance class {class_token!r} in {value!r}"
        ) from e
    try:
        instance_size = ec2.InstanceSize[_size_member_name(size_token)]
    except KeyError as e:
        raise InvalidInstanceTypeError(
            f"Unknown instance size {size_token!r} in {value!r}"
        ) from e

    return InstanceTypeSpec(instance_class=instance_class, instance_size=instance_size)


def validate_instance_type(instance, attribute, value) -> None:
    """attrs validator rejecting instance type strings that do not parse."""
    parse_instance_type(value)
