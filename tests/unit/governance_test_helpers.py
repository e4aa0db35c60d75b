from enum import Enum


def resource_governance_doc_ref(resource: str) -> str:
    return f"DESIGN.md#{resource}-governance"


class AWSService(str, Enum):
    Security_Group = "security-group"
    Subnet = "subnet"
