from aws_cdk import aws_ec2 as ec2

SERVICE_NAME = "vyos-sample"  # Logger service name
DEFAULT_LOG_LEVEL = "INFO"

# Naming convention components
TGW_NAME_SUFFIX = "tokyo-tgw"
UNIFIED_ROUTE_TABLE_NAME_SUFFIX = "unified-route-table"
VYOS_KEY_PAIR_NAME_SUFFIX = "vyos-key-pair"
VYOS_EIP_NAME_SUFFIX = "vyos-router-eip"
EC2_SSM_ROLE_NAME_SUFFIX = "EC2SSMRole"
ON_PREM_SSM_ROLE_NAME_SUFFIX = "OnPremSSMRole"

# Subnet layout
CIDR_MASK = 24
EC2_SUBNET_GROUP = "EC2"
TGW_ATTACHMENT_SUBNET_GROUP = "TGW-Attachment"
PUBLIC_SUBNET_GROUP = "Public"
PRIVATE_SUBNET_GROUP = "Private"
TOKYO_AZ_SUFFIX = "c"
OSAKA_AZ_SUFFIX = "a"

# Transit Gateway
TGW_DISABLE = "disable"
TGW_ASN_RANGES = ((64512, 65534), (4200000000, 4294967294))

# IAM
EC2_SERVICE_PRINCIPAL = "ec2.amazonaws.com"
SSM_MANAGED_POLICY = "AmazonSSMManagedInstanceCore"

# Security groups
ANY_IPV4_CIDR = "0.0.0.0/0"
HTTPS_PORT = 443

MANAGEMENT_ENDPOINT_SERVICES = (
    ("SSM", ec2.InterfaceVpcEndpointAwsService.SSM),
    ("SSMMessages", ec2.InterfaceVpcEndpointAwsService.SSM_MESSAGES),
)

# Outputs
VYOS_PRIVATE_KEY_OUTPUT = "VyOSPrivateKeyParameter"
KEY_PAIR_PARAMETER_PREFIX = "/ec2/keypair/"
