from attrs import define, field
from attrs.validators import instance_of
from aws_cdk import CfnTag, Stack, aws_ec2 as ec2, aws_iam as iam

import common.constants as constants
from common.instance_types import parse_instance_type


@define(slots=True, frozen=True)
class StackContext:
    scope: Stack
    project_name: str = field(
        validator=instance_of(str),
        metadata={"description": "Project name prefix (vyos-sample, vyos-sample-dev)"},
    )

    @property
    def aws_account_id(self) -> str:
        return Stack.of(self.scope).account

    @property
    def aws_region(self) -> str:
        return Stack.of(self.scope).region

    # ---------- naming ----------
    def build_resource_name(self, suffix: str) -> str:
        """Build a project scoped physical name.

        Examples:
            - vyos-sample-dev-tokyo-tgw
            - vyos-sample-EC2SSMRole
        """
        return f"{self.project_name}-{suffix}"

    def build_name_tags(self, suffix: str) -> list[CfnTag]:
        return [CfnTag(key="Name", value=self.build_resource_name(suffix))]

    # ---------- compute ----------
    def build_ssm_role(self, construct_id: str, role_name_suffix: str) -> iam.Role:
        """Role letting an instance register with Systems Manager."""
        return iam.Role(
            self.scope,
            construct_id,
            assumed_by=iam.ServicePrincipal(constants.EC2_SERVICE_PRINCIPAL),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    constants.SSM_MANAGED_POLICY
                ),
            ],
            role_name=self.build_resource_name(role_name_suffix),
        )

    @staticmethod
    def build_machine_image(region: str, ami_id: str) -> ec2.IMachineImage:
        return ec2.GenericLinuxImage({region: ami_id})

    @staticmethod
    def build_instance_type(instance_type: str) -> ec2.InstanceType:
        return parse_instance_type(instance_type).to_instance_type()

    @staticmethod
    def build_availability_zone(region: str, az_suffix: str) -> str:
        return f"{region}{az_suffix}"

    # ---------- endpoints ----------
    def add_management_endpoints(
        self,
        vpc: ec2.Vpc,
        subnets: ec2.SubnetSelection,
        security_group: ec2.ISecurityGroup,
        id_suffix: str = "",
    ) -> list[ec2.InterfaceVpcEndpoint]:
        """Add the SSM interface endpoints used for Session Manager access."""
        return [
            vpc.add_interface_endpoint(
                f"{name}VPCEndpoint{id_suffix}",
                service=service,
                subnets=subnets,
                security_groups=[security_group],
                private_dns_enabled=True,
            )
            for name, service in constants.MANAGEMENT_ENDPOINT_SERVICES
        ]
