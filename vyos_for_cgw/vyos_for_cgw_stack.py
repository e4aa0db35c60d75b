from aws_cdk import CfnOutput, Stack, aws_ec2 as ec2
from constructs import Construct

import common.constants as constants
from common.stack_context import StackContext
from environments.schema import Config


class VyosForCgwStack(Stack):
    """Simulated on-premises site in Osaka with a VyOS customer gateway."""

    def __init__(
        self, scope: Construct, construct_id: str, config: Config, **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)
        self.config = config
        self.context = StackContext(scope=self, project_name=config.project.name)
        self.on_prem_cidr = config.network.osaka.vpc.cidr

        # Key pair for the VyOS router only, the private key lands in SSM
        self.vyos_key_pair = ec2.KeyPair(
            self,
            "VyOSKeyPair",
            key_pair_name=self.context.build_resource_name(
                constants.VYOS_KEY_PAIR_NAME_SUFFIX
            ),
            type=ec2.KeyPairType.RSA,
            format=ec2.KeyPairFormat.PEM,
        )
        self.on_prem_ssm_role = self.context.build_ssm_role(
            "OnPremSSMRole", constants.ON_PREM_SSM_ROLE_NAME_SUFFIX
        )

        self.vpc = self._build_vpc()

        self.vyos_sg = self._build_vyos_sg()
        self.vyos_router = self._build_vyos_router()
        self.vyos_eip = self._build_vyos_eip()

        self.vpc_endpoint_sg = self._build_vpc_endpoint_sg()
        self.context.add_management_endpoints(
            self.vpc,
            ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_ISOLATED),
            self.vpc_endpoint_sg,
        )

        self.on_prem_sg = self._build_on_prem_sg()
        self.on_prem_server = self._build_on_prem_server()

        self._build_outputs()

    # Resource creation

    def _build_vpc(self) -> ec2.Vpc:
        return ec2.Vpc(
            self,
            "OnPremVPC",
            ip_addresses=ec2.IpAddresses.cidr(self.on_prem_cidr),
            availability_zones=[
                self.context.build_availability_zone(
                    self.config.aws.regions.osaka, constants.OSAKA_AZ_SUFFIX
                )
            ],
            nat_gateways=0,
            enable_dns_hostnames=True,
            enable_dns_support=True,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name=constants.PUBLIC_SUBNET_GROUP,
                    subnet_type=ec2.SubnetType.PUBLIC,
                    cidr_mask=constants.CIDR_MASK,
                ),
                ec2.SubnetConfiguration(
                    name=constants.PRIVATE_SUBNET_GROUP,
                    subnet_type=ec2.SubnetType.PRIVATE_ISOLATED,
                    cidr_mask=constants.CIDR_MASK,
                ),
            ],
        )

    def _build_vyos_sg(self) -> ec2.SecurityGroup:
        vyos_sg = ec2.SecurityGroup(
            self,
            "VyOSSecurityGroup",
            vpc=self.vpc,
            description="Security group for VyOS router",
            allow_all_outbound=True,
        )
        vyos_sg.add_ingress_rule(
            peer=ec2.Peer.ipv4(self.on_prem_cidr),
            connection=ec2.Port.all_icmp(),
            description="Allow ICMP from Osaka VPC",
        )
        return vyos_sg

    def _build_vyos_router(self) -> ec2.Instance:
        ec2_config = self.config.ec2
        return ec2.Instance(
            self,
            "VyOSRouter",
            vpc=self.vpc,
            vpc_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PUBLIC),
            instance_type=self.context.build_instance_type(
                ec2_config.vyos_instance_type
            ),
            machine_image=self.context.build_machine_image(
                self.config.aws.regions.osaka, ec2_config.vyos_ami_id
            ),
            security_group=self.vyos_sg,
            user_data=ec2.UserData.for_linux(),
            key_pair=self.vyos_key_pair,
            # Forwards traffic that is not addressed to the router itself
            source_dest_check=False,
        )

    def _build_vyos_eip(self) -> ec2.CfnEIP:
        vyos_eip = ec2.CfnEIP(
            self,
            "VyOSEIP",
            domain="vpc",
            tags=self.context.build_name_tags(constants.VYOS_EIP_NAME_SUFFIX),
        )
        ec2.CfnEIPAssociation(
            self,
            "VyOSEIPAssociation",
            allocation_id=vyos_eip.attr_allocation_id,
            instance_id=self.vyos_router.instance_id,
        )
        return vyos_eip

    def _build_vpc_endpoint_sg(self) -> ec2.SecurityGroup:
        vpc_endpoint_sg = ec2.SecurityGroup(
            self,
            "VPCEndpointSG",
            vpc=self.vpc,
            description="Security group for VPC endpoints",
            allow_all_outbound=False,
        )
        vpc_endpoint_sg.add_ingress_rule(
            peer=ec2.Peer.ipv4(self.on_prem_cidr),
            connection=ec2.Port.tcp(constants.HTTPS_PORT),
            description="Allow HTTPS from VPC",
        )
        return vpc_endpoint_sg

    def _build_on_prem_sg(self) -> ec2.SecurityGroup:
        tokyo = self.config.network.tokyo
        on_prem_sg = ec2.SecurityGroup(
            self,
            "OnPremSecurityGroup",
            vpc=self.vpc,
            description="Security group for on-premises test server",
            allow_all_outbound=True,
        )
        for cidr, description in (
            (tokyo.vpc1.cidr, "Allow ICMP from Tokyo VPC1 via VPN"),
            (tokyo.vpc2.cidr, "Allow ICMP from Tokyo VPC2 via VPN"),
            (self.on_prem_cidr, "Allow ICMP from on-premises network"),
        ):
            on_prem_sg.add_ingress_rule(
                peer=ec2.Peer.ipv4(cidr),
                connection=ec2.Port.all_icmp(),
                description=description,
            )
        return on_prem_sg

    def _build_on_prem_server(self) -> ec2.Instance:
        """On-premises test server, private subnet only."""
        ec2_config = self.config.ec2
        return ec2.Instance(
            self,
            "OnPremServer",
            vpc=self.vpc,
            vpc_subnets=ec2.SubnetSelection(
                subnet_type=ec2.SubnetType.PRIVATE_ISOLATED
            ),
            instance_type=self.context.build_instance_type(
                ec2_config.on_prem_test_instance_type
            ),
            machine_image=self.context.build_machine_image(
                self.config.aws.regions.osaka, ec2_config.on_prem_test_ami_id
            ),
            security_group=self.on_prem_sg,
            user_data=ec2.UserData.for_linux(),
            role=self.on_prem_ssm_role,
        )

    def _build_outputs(self) -> None:
        CfnOutput(
            self,
            "VyOSRouterEIP",
            value=self.vyos_eip.attr_public_ip,
            description="VyOS Router Elastic IP",
        )
        CfnOutput(
            self,
            "VyOSRouterId",
            value=self.vyos_router.instance_id,
            description="VyOS Router Instance ID",
        )
        CfnOutput(
            self,
            "OnPremServerId",
            value=self.on_prem_server.instance_id,
            description="On-premises Test Server Instance ID",
        )
        CfnOutput(
            self, "OnPremVPCId", value=self.vpc.vpc_id, description="On-premises VPC ID"
        )
        CfnOutput(
            self,
            "OnPremServerPrivateIP",
            value=self.on_prem_server.instance_private_ip,
            description="On-premises Server Private IP",
        )
        CfnOutput(
            self,
            "VyOSKeyPairId",
            value=self.vyos_key_pair.key_pair_name,
            description="Key Pair Name for VyOS Router",
        )
        CfnOutput(
            self,
            constants.VYOS_PRIVATE_KEY_OUTPUT,
            value=f"{constants.KEY_PAIR_PARAMETER_PREFIX}{self.vyos_key_pair.key_pair_id}",
            description="Systems Manager parameter name for VyOS private key",
        )
