from aws_cdk import (
    Annotations,
    CfnOutput,
    Stack,
    aws_ec2 as ec2,
)
from constructs import Construct

import common.constants as constants
from common.stack_context import StackContext
from environments.schema import Config


class TgwForVpnStack(Stack):
    """Two Tokyo VPCs joined by a Transit Gateway with a single route table."""

    def __init__(
        self, scope: Construct, construct_id: str, config: Config, **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)
        self.config = config
        self.context = StackContext(scope=self, project_name=config.project.name)
        network = config.network

        self.ec2_ssm_role = self.context.build_ssm_role(
            "EC2SSMRole", constants.EC2_SSM_ROLE_NAME_SUFFIX
        )

        self.vpc1 = self._build_vpc("VPC1", network.tokyo.vpc1.cidr)
        self.vpc2 = self._build_vpc("VPC2", network.tokyo.vpc2.cidr)

        # Endpoint SGs only accept HTTPS from the test instances of their VPC
        self.vpc_endpoint_sg1, self.test_sg1 = self._build_security_groups(self.vpc1, 1)
        self.vpc_endpoint_sg2, self.test_sg2 = self._build_security_groups(self.vpc2, 2)
        ec2_subnets = ec2.SubnetSelection(subnet_group_name=constants.EC2_SUBNET_GROUP)
        self.context.add_management_endpoints(
            self.vpc1, ec2_subnets, self.vpc_endpoint_sg1
        )
        self.context.add_management_endpoints(
            self.vpc2, ec2_subnets, self.vpc_endpoint_sg2, id_suffix="2"
        )

        # Transit Gateway with a unified route table shared by both attachments
        self.transit_gateway = self._build_transit_gateway()
        self.unified_route_table = ec2.CfnTransitGatewayRouteTable(
            self,
            "UnifiedRouteTable",
            transit_gateway_id=self.transit_gateway.ref,
            tags=self.context.build_name_tags(
                constants.UNIFIED_ROUTE_TABLE_NAME_SUFFIX
            ),
        )
        self.tgw_attachment1 = self._attach_vpc(1, self.vpc1)
        self.tgw_attachment2 = self._attach_vpc(2, self.vpc2)

        # Static routes for VPC-to-VPC communication
        self._add_static_route(
            "VPC1Route", network.tokyo.vpc1.cidr, self.tgw_attachment1.ref
        )
        self._add_static_route(
            "VPC2Route", network.tokyo.vpc2.cidr, self.tgw_attachment2.ref
        )
        self.on_prem_route = self._add_on_prem_route()

        # ICMP from both Tokyo VPCs and from Osaka on-premises via VPN
        for test_sg in (self.test_sg1, self.test_sg2):
            self._allow_icmp_from_sandbox(test_sg)

        self.test_instance1 = self._build_test_instance(
            "TestInstance1", self.vpc1, self.test_sg1
        )
        self.test_instance2 = self._build_test_instance(
            "TestInstance2", self.vpc2, self.test_sg2
        )

        self._build_outputs()

    # Resource creation

    def _build_vpc(self, construct_id: str, cidr: str) -> ec2.Vpc:
        return ec2.Vpc(
            self,
            construct_id,
            ip_addresses=ec2.IpAddresses.cidr(cidr),
            availability_zones=[
                self.context.build_availability_zone(
                    self.config.aws.regions.tokyo, constants.TOKYO_AZ_SUFFIX
                )
            ],
            create_internet_gateway=False,
            nat_gateways=0,
            enable_dns_hostnames=True,
            enable_dns_support=True,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name=constants.EC2_SUBNET_GROUP,
                    subnet_type=ec2.SubnetType.PRIVATE_ISOLATED,
                    cidr_mask=constants.CIDR_MASK,
                ),
                ec2.SubnetConfiguration(
                    name=constants.TGW_ATTACHMENT_SUBNET_GROUP,
                    subnet_type=ec2.SubnetType.PRIVATE_ISOLATED,
                    cidr_mask=constants.CIDR_MASK,
                ),
            ],
        )

    def _build_security_groups(
        self, vpc: ec2.Vpc, index: int
    ) -> tuple[ec2.SecurityGroup, ec2.SecurityGroup]:
        vpc_label = f"VPC{index}"
        vpc_endpoint_sg = ec2.SecurityGroup(
            self,
            f"VPCEndpointSG{index}",
            vpc=vpc,
            description=f"Security group for VPC endpoints in {vpc_label}",
            allow_all_outbound=False,
        )
        test_sg = ec2.SecurityGroup(
            self,
            f"TestSecurityGroup{index}",
            vpc=vpc,
            description=f"Security group for test instances in {vpc_label}",
            allow_all_outbound=True,
        )
        vpc_endpoint_sg.add_ingress_rule(
            peer=test_sg,
            connection=ec2.Port.tcp(constants.HTTPS_PORT),
            description=f"Allow HTTPS from test instances in {vpc_label}",
        )
        return vpc_endpoint_sg, test_sg

    def _build_transit_gateway(self) -> ec2.CfnTransitGateway:
        return ec2.CfnTransitGateway(
            self,
            "TransitGateway",
            description="Tokyo region TGW for Site-to-Site VPN testing",
            amazon_side_asn=self.config.transit_gateway.asn,
            default_route_table_association=constants.TGW_DISABLE,
            default_route_table_propagation=constants.TGW_DISABLE,
            tags=self.context.build_name_tags(constants.TGW_NAME_SUFFIX),
        )

    def _attach_vpc(
        self, index: int, vpc: ec2.Vpc
    ) -> ec2.CfnTransitGatewayVpcAttachment:
        """Attach the VPC, then associate and propagate it on the unified table."""
        vpc_label = f"VPC{index}"
        attachment = ec2.CfnTransitGatewayVpcAttachment(
            self,
            f"TGWAttachment{index}",
            transit_gateway_id=self.transit_gateway.ref,
            vpc_id=vpc.vpc_id,
            subnet_ids=vpc.select_subnets(
                subnet_group_name=constants.TGW_ATTACHMENT_SUBNET_GROUP
            ).subnet_ids,
            tags=self.context.build_name_tags(f"vpc{index}-tgw-attachment"),
        )
        ec2.CfnTransitGatewayRouteTableAssociation(
            self,
            f"{vpc_label}RouteTableAssociation",
            transit_gateway_attachment_id=attachment.ref,
            transit_gateway_route_table_id=self.unified_route_table.ref,
        )
        ec2.CfnTransitGatewayRouteTablePropagation(
            self,
            f"{vpc_label}RouteTablePropagation",
            transit_gateway_attachment_id=attachment.ref,
            transit_gateway_route_table_id=self.unified_route_table.ref,
        )
        return attachment

    def _add_static_route(
        self, construct_id: str, destination_cidr: str, attachment_id: str
    ) -> ec2.CfnTransitGatewayRoute:
        return ec2.CfnTransitGatewayRoute(
            self,
            construct_id,
            transit_gateway_route_table_id=self.unified_route_table.ref,
            destination_cidr_block=destination_cidr,
            transit_gateway_attachment_id=attachment_id,
        )

    def _add_on_prem_route(self) -> ec2.CfnTransitGatewayRoute | None:
        """Route the Osaka network through the VPN attachment once it exists."""
        on_prem_cidr = self.config.network.osaka.vpc.cidr
        vpn_attachment_id = self.config.transit_gateway.vpn_attachment_id
        if vpn_attachment_id is None:
            Annotations.of(self).add_info(
                f"Route to {on_prem_cidr} is pending a VPN attachment. After the "
                "Site-to-Site VPN is attached run: aws ec2 create-transit-gateway-route "
                "--transit-gateway-route-table-id <UnifiedRouteTableId> "
                f"--destination-cidr-block {on_prem_cidr} "
                "--transit-gateway-attachment-id <vpn-attachment-id>, or set "
                "transit_gateway.vpn_attachment_id in the environment config."
            )
            return None
        return self._add_static_route("OnPremRoute", on_prem_cidr, vpn_attachment_id)

    def _allow_icmp_from_sandbox(self, test_sg: ec2.SecurityGroup) -> None:
        network = self.config.network
        for cidr, description in (
            (network.tokyo.vpc1.cidr, "Allow ICMP from VPC1"),
            (network.tokyo.vpc2.cidr, "Allow ICMP from VPC2"),
            (network.osaka.vpc.cidr, "Allow ICMP from Osaka via VPN"),
        ):
            test_sg.add_ingress_rule(
                peer=ec2.Peer.ipv4(cidr),
                connection=ec2.Port.all_icmp(),
                description=description,
            )

    def _build_test_instance(
        self, construct_id: str, vpc: ec2.Vpc, security_group: ec2.SecurityGroup
    ) -> ec2.Instance:
        ec2_config = self.config.ec2
        return ec2.Instance(
            self,
            construct_id,
            vpc=vpc,
            vpc_subnets=ec2.SubnetSelection(
                subnet_group_name=constants.EC2_SUBNET_GROUP
            ),
            instance_type=self.context.build_instance_type(
                ec2_config.test_instance_type
            ),
            machine_image=self.context.build_machine_image(
                self.config.aws.regions.tokyo, ec2_config.test_instance_ami_id
            ),
            security_group=security_group,
            user_data=ec2.UserData.for_linux(),
            role=self.ec2_ssm_role,
        )

    def _build_outputs(self) -> None:
        CfnOutput(
            self, "TGWId", value=self.transit_gateway.ref, description="Transit Gateway ID"
        )
        CfnOutput(
            self,
            "UnifiedRouteTableId",
            value=self.unified_route_table.ref,
            description="Transit Gateway route table shared by all attachments",
        )
        CfnOutput(self, "VPC1Id", value=self.vpc1.vpc_id, description="VPC1 ID")
        CfnOutput(self, "VPC2Id", value=self.vpc2.vpc_id, description="VPC2 ID")
        CfnOutput(
            self,
            "TestInstance1Id",
            value=self.test_instance1.instance_id,
            description="Test Instance 1 ID",
        )
        CfnOutput(
            self,
            "TestInstance2Id",
            value=self.test_instance2.instance_id,
            description="Test Instance 2 ID",
        )
