import pytest
from attrs import evolve
from netaddr import IPNetwork

from environments.dev import DEV_CONFIG
from environments.prod import PROD_CONFIG
from environments.schema import (
    Config,
    Ec2Config,
    InvalidCidrError,
    NetworkConfig,
    OsakaNetworkConfig,
    OverlappingCidrError,
    TokyoNetworkConfig,
    TransitGatewayConfig,
    VpcConfig,
    check_cidr_isolation,
    find_overlapping_cidrs,
)
from common.instance_types import InvalidInstanceTypeError
from stack_test_helpers import config

EXPECTED_NETWORKS = [
    (DEV_CONFIG, "172.16.0.0/16", "172.17.0.0/16", "172.20.0.0/16"),
    (PROD_CONFIG, "10.0.0.0/16", "10.1.0.0/16", "192.168.0.0/16"),
]


@pytest.mark.parametrize(
    "env_config,vpc1,vpc2,osaka", EXPECTED_NETWORKS, ids=["dev", "prod"]
)
def test_network_literals(env_config: Config, vpc1: str, vpc2: str, osaka: str):
    assert env_config.network.tokyo.vpc1.cidr == vpc1
    assert env_config.network.tokyo.vpc2.cidr == vpc2
    assert env_config.network.osaka.vpc.cidr == osaka


def test_dev_config_literals():
    assert DEV_CONFIG.project.name == "vyos-sample-dev"
    assert DEV_CONFIG.aws.account == "123456789012"
    assert DEV_CONFIG.ec2.vyos_instance_type == "t3.medium"
    assert DEV_CONFIG.transit_gateway.asn == 64513


def test_prod_config_literals():
    assert PROD_CONFIG.project.name == "vyos-sample"
    assert PROD_CONFIG.ec2.vyos_instance_type == "t3.small"
    assert PROD_CONFIG.transit_gateway.asn == 64512


def test_regions(config: Config):
    assert config.aws.regions.tokyo == "ap-northeast-1"
    assert config.aws.regions.osaka == "ap-northeast-3"
    assert config.aws.regions.tokyo != config.aws.regions.osaka


def test_every_cidr_is_a_network_prefix(config: Config):
    for cidr in config.network.named_cidrs().values():
        assert str(IPNetwork(cidr).cidr) == cidr


def test_no_overlap_within_environment(config: Config):
    assert find_overlapping_cidrs(config.network.named_cidrs().items()) == []


def test_no_overlap_across_environments():
    check_cidr_isolation(DEV_CONFIG, PROD_CONFIG)


def test_on_prem_route_pending_by_default(config: Config):
    assert config.transit_gateway.vpn_attachment_id is None
    assert config.on_prem_route_pending is True


def test_overlap_across_environments_rejected():
    clashing = evolve(PROD_CONFIG, network=DEV_CONFIG.network)

    with pytest.raises(OverlappingCidrError, match="vyos-sample-dev.tokyo.vpc1"):
        check_cidr_isolation(DEV_CONFIG, clashing)


def test_overlapping_networks_rejected():
    with pytest.raises(OverlappingCidrError, match="tokyo.vpc1 <-> tokyo.vpc2"):
        NetworkConfig(
            tokyo=TokyoNetworkConfig(
                vpc1=VpcConfig(cidr="10.0.0.0/16"),
                vpc2=VpcConfig(cidr="10.0.128.0/17"),
            ),
            osaka=OsakaNetworkConfig(vpc=VpcConfig(cidr="192.168.0.0/16")),
        )


@pytest.mark.parametrize("cidr", ["10.0.0.1/16", "10.0.0.0/33", "not-a-cidr"])
def test_invalid_cidr_rejected(cidr: str):
    with pytest.raises(InvalidCidrError):
        VpcConfig(cidr=cidr)


@pytest.mark.parametrize("cidr", ["fd00::/8", "2001:db8::/32"])
def test_ipv6_cidr_rejected(cidr: str):
    with pytest.raises(InvalidCidrError, match="not an IPv4 CIDR"):
        VpcConfig(cidr=cidr)


def test_malformed_instance_type_rejected_before_stack_construction():
    with pytest.raises(InvalidInstanceTypeError):
        evolve(DEV_CONFIG.ec2, test_instance_type="t3micro")


def test_ec2_config_requires_every_field():
    with pytest.raises(TypeError):
        Ec2Config(vyos_ami_id="ami-05a998030d78b5358", vyos_instance_type="t3.medium")


@pytest.mark.parametrize("asn", [100, 65535, 4294967295])
def test_public_or_reserved_asn_rejected(asn: int):
    with pytest.raises(ValueError):
        TransitGatewayConfig(asn=asn, vpn_attachment_id=None)


def test_vpn_attachment_id_format():
    with pytest.raises(ValueError):
        TransitGatewayConfig(asn=64512, vpn_attachment_id="vpn-123")


def test_config_is_frozen():
    with pytest.raises(AttributeError):
        DEV_CONFIG.project = None
