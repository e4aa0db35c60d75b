from environments.schema import (
    AwsConfig,
    Config,
    Ec2Config,
    NetworkConfig,
    OsakaNetworkConfig,
    ProjectConfig,
    RegionsConfig,
    TokyoNetworkConfig,
    TransitGatewayConfig,
    VpcConfig,
)

DEV_CONFIG = Config(
    project=ProjectConfig(name="vyos-sample-dev"),
    aws=AwsConfig(
        account="123456789012",
        regions=RegionsConfig(tokyo="ap-northeast-1", osaka="ap-northeast-3"),
    ),
    ec2=Ec2Config(
        vyos_ami_id="ami-05a998030d78b5358",  # VyOS 1.4.3-20250710100701
        vyos_instance_type="t3.medium",
        test_instance_ami_id="ami-0bc8f29a8fc3184aa",  # Amazon Linux 2023 in ap-northeast-1
        test_instance_type="t3.micro",
        on_prem_test_ami_id="ami-0facc8a2f7b924479",  # Amazon Linux 2023 in ap-northeast-3
        on_prem_test_instance_type="t3.micro",
    ),
    network=NetworkConfig(
        tokyo=TokyoNetworkConfig(
            vpc1=VpcConfig(cidr="172.16.0.0/16"),
            vpc2=VpcConfig(cidr="172.17.0.0/16"),
        ),
        osaka=OsakaNetworkConfig(vpc=VpcConfig(cidr="172.20.0.0/16")),
    ),
    transit_gateway=TransitGatewayConfig(asn=64513, vpn_attachment_id=None),
)
