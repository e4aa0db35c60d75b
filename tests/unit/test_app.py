import pytest
from attrs import evolve
from aws_cdk import App, Stack
from aws_cdk.assertions import Match, Template

import app as cdk_app
from environments.dev import DEV_CONFIG
from environments.prod import PROD_CONFIG
from environments.schema import Config, OverlappingCidrError, ProjectConfig
from governance_checks import assert_no_overlapping_subnets
from stack_test_helpers import (
    build_tgw_template,
    build_vyos_template,
    config,
    find_resources_by_type,
)

STACKS = [
    ("Dev-TgwForVpnStack", DEV_CONFIG.aws.regions.tokyo),
    ("Dev-VyosForCgwStack", DEV_CONFIG.aws.regions.osaka),
    ("Prod-TgwForVpnStack", PROD_CONFIG.aws.regions.tokyo),
    ("Prod-VyosForCgwStack", PROD_CONFIG.aws.regions.osaka),
]


@pytest.fixture(scope="module")
def app() -> App:
    return cdk_app.build_app(App())


def test_app_declares_four_stacks(app: App):
    stack_ids = sorted(child.node.id for child in app.node.children if isinstance(child, Stack))

    assert stack_ids == sorted(stack_id for stack_id, _ in STACKS)


@pytest.mark.parametrize("stack_id,region", STACKS)
def test_stacks_bound_to_account_and_region(app: App, stack_id: str, region: str):
    stack = app.node.find_child(stack_id)

    assert stack.account == "123456789012"
    assert stack.region == region


@pytest.mark.parametrize("stack_id,region", STACKS)
def test_stacks_tagged_with_project(app: App, stack_id: str, region: str):
    stack = app.node.find_child(stack_id)
    expected = DEV_CONFIG.project.name if stack_id.startswith("Dev") else PROD_CONFIG.project.name

    Template.from_stack(stack).has_resource_properties(
        "AWS::EC2::VPC",
        {"Tags": Match.array_with([{"Key": "Project", "Value": expected}])},
    )


def test_overlapping_environments_rejected(monkeypatch):
    copy = evolve(DEV_CONFIG, project=ProjectConfig(name="vyos-sample-copy"))
    monkeypatch.setattr(cdk_app, "ENVIRONMENTS", (("Dev", DEV_CONFIG), ("Copy", copy)))

    with pytest.raises(OverlappingCidrError):
        cdk_app.build_app(App())


# ------------------- Whole-plan structural checks -------------------


def test_plan_has_no_overlapping_subnets(config: Config):
    assert_no_overlapping_subnets(build_tgw_template(config), build_vyos_template(config))


def test_plan_has_four_instances(config: Config):
    instances = [
        find_resources_by_type(template, "AWS::EC2::Instance")
        for template in (build_tgw_template(config), build_vyos_template(config))
    ]

    assert sum(len(resources) for resources in instances) == 4
