"""
Schema for the per-environment configuration records.

Every record is a frozen attrs class. Values are validated when the record is
built so that a malformed instance type or CIDR fails at import time instead
of surfacing as a lookup error inside a stack, or as a provisioning conflict
from CloudFormation.
"""
from itertools import combinations
from typing import Iterable, Optional

from attrs import define, field
from attrs.validators import instance_of, matches_re, optional
from netaddr import AddrFormatError, IPNetwork, IPSet

import common.constants as constants
from common.instance_types import validate_instance_type


class InvalidCidrError(ValueError):
    """Raised when a CIDR block does not parse or is not a network address."""


class OverlappingCidrError(ValueError):
    """Raised when two networks that must be routable to each other overlap."""


def _validate_cidr(instance, attribute, value: str) -> None:
    try:
        network = IPNetwork(value)
    except (AddrFormatError, ValueError, TypeError) as e:
        raise InvalidCidrError(f"{attribute.name} {value!r} is not a valid CIDR") from e
    if network.version != 4:
        raise InvalidCidrError(f"{attribute.name} {value!r} is not an IPv4 CIDR")
    if str(network.cidr) != value:
        raise InvalidCidrError(
            f"{attribute.name} {value!r} is not a network address, expected {network.cidr}"
        )


def _validate_asn(instance, attribute, value: int) -> None:
    if not any(low <= value <= high for low, high in constants.TGW_ASN_RANGES):
        raise ValueError(
            f"{attribute.name} {value} is outside the private ASN ranges {constants.TGW_ASN_RANGES}"
        )


@define(slots=True, frozen=True, kw_only=True)
class ProjectConfig:
    name: str = field(validator=matches_re(r"^[a-zA-Z][a-zA-Z0-9-]*$"))


@define(slots=True, frozen=True, kw_only=True)
class RegionsConfig:
    tokyo: str = field(validator=instance_of(str))
    osaka: str = field(validator=instance_of(str))


@define(slots=True, frozen=True, kw_only=True)
class AwsConfig:
    account: str = field(validator=matches_re(r"^\d{12}$"))
    regions: RegionsConfig = field(validator=instance_of(RegionsConfig))


@define(slots=True, frozen=True, kw_only=True)
class Ec2Config:
    vyos_ami_id: str = field(validator=matches_re(r"^ami-[0-9a-f]+$"))
    vyos_instance_type: str = field(validator=validate_instance_type)
    test_instance_ami_id: str = field(validator=matches_re(r"^ami-[0-9a-f]+$"))
    test_instance_type: str = field(validator=validate_instance_type)
    on_prem_test_ami_id: str = field(validator=matches_re(r"^ami-[0-9a-f]+$"))
    on_prem_test_instance_type: str = field(validator=validate_instance_type)


@define(slots=True, frozen=True, kw_only=True)
class VpcConfig:
    cidr: str = field(validator=[instance_of(str), _validate_cidr])


@define(slots=True, frozen=True, kw_only=True)
class TokyoNetworkConfig:
    vpc1: VpcConfig = field(validator=instance_of(VpcConfig))
    vpc2: VpcConfig = field(validator=instance_of(VpcConfig))


@define(slots=True, frozen=True, kw_only=True)
class OsakaNetworkConfig:
    vpc: VpcConfig = field(validator=instance_of(VpcConfig))


@define(slots=True, frozen=True, kw_only=True)
class NetworkConfig:
    tokyo: TokyoNetworkConfig = field(validator=instance_of(TokyoNetworkConfig))
    osaka: OsakaNetworkConfig = field(validator=instance_of(OsakaNetworkConfig))

    def __attrs_post_init__(self) -> None:
        overlaps = find_overlapping_cidrs(self.named_cidrs().items())
        if overlaps:
            raise OverlappingCidrError(_describe_overlaps(overlaps))

    def named_cidrs(self) -> dict[str, str]:
        return {
            "tokyo.vpc1": self.tokyo.vpc1.cidr,
            "tokyo.vpc2": self.tokyo.vpc2.cidr,
            "osaka.vpc": self.osaka.vpc.cidr,
        }


@define(slots=True, frozen=True, kw_only=True)
class TransitGatewayConfig:
    asn: int = field(validator=[instance_of(int), _validate_asn])
    # Attachment ID of the Site-to-Site VPN once it exists. While None the
    # static route to the on-premises network is pending.
    vpn_attachment_id: Optional[str] = field(
        validator=optional(matches_re(r"^tgw-attach-[0-9a-f]+$"))
    )


@define(slots=True, frozen=True, kw_only=True)
class Config:
    project: ProjectConfig = field(validator=instance_of(ProjectConfig))
    aws: AwsConfig = field(validator=instance_of(AwsConfig))
    ec2: Ec2Config = field(validator=instance_of(Ec2Config))
    network: NetworkConfig = field(validator=instance_of(NetworkConfig))
    transit_gateway: TransitGatewayConfig = field(
        validator=instance_of(TransitGatewayConfig)
    )

    @property
    def on_prem_route_pending(self) -> bool:
        return self.transit_gateway.vpn_attachment_id is None


def find_overlapping_cidrs(
    named_cidrs: Iterable[tuple[str, str]],
) -> list[tuple[str, str]]:
    """Return the pairs of names whose CIDR blocks share at least one address."""
    return [
        (left, right)
        for (left, left_cidr), (right, right_cidr) in combinations(named_cidrs, 2)
        if not IPSet([left_cidr]).isdisjoint(IPSet([right_cidr]))
    ]


def check_cidr_isolation(*configs: Config) -> None:
    """Fail if any network of one environment overlaps a network of another."""
    named_cidrs = [
        (f"{config.project.name}.{name}", cidr)
        for config in configs
        for name, cidr in config.network.named_cidrs().items()
    ]
    overlaps = find_overlapping_cidrs(named_cidrs)
    if overlaps:
        raise OverlappingCidrError(_describe_overlaps(overlaps))


def _describe_overlaps(overlaps: list[tuple[str, str]]) -> str:
    pairs = ", ".join(f"{left} <-> {right}" for left, right in overlaps)
    return f"Overlapping CIDR blocks: {pairs}"
