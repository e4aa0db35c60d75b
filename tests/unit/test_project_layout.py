import re
from pathlib import Path

import pytest

from governance_test_helpers import AWSService, resource_governance_doc_ref

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _markdown_anchors(path: Path) -> set[str]:
    anchors = set()
    for line in path.read_text().splitlines():
        heading = re.match(r"^#+\s+(.*)$", line)
        if heading:
            slug = re.sub(r"[^a-z0-9 -]", "", heading.group(1).lower())
            anchors.add(slug.replace(" ", "-"))
    return anchors


@pytest.mark.parametrize("service", list(AWSService), ids=lambda service: service.value)
def test_governance_doc_ref_resolves(service: AWSService):
    doc, anchor = resource_governance_doc_ref(service.value).split("#")

    assert anchor in _markdown_anchors(PROJECT_ROOT / doc)


def test_distribution_installs_only_project_packages():
    tomllib = pytest.importorskip("tomllib")
    with open(PROJECT_ROOT / "pyproject.toml", "rb") as f:
        setuptools_config = tomllib.load(f)["tool"]["setuptools"]

    assert "py-modules" not in setuptools_config
    assert "app" not in setuptools_config["packages"]["find"]["include"]
