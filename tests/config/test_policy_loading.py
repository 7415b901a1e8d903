from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from autoconf.config import InvalidPolicyError, load_policy, parse_policy
from autoconf.domain.model import Multiplicity

if TYPE_CHECKING:
    from pathlib import Path

TOML_POLICY = """
[policy]
filter = "(service.factoryPid=com.example.Producer)"
multiplicity = "ONE_LAZY"
targetPid = "com.example.Consumer"
factory = false
targetLocation = "bundle:consumer"
configuration = [
    "a=bla",
    "pids={array:service.pid}",
]
"""


def test_load_toml_policy_with_camel_case_names(tmp_path: Path) -> None:
    path = tmp_path / "policy.toml"
    path.write_text(TOML_POLICY)

    policy = load_policy(path)

    assert policy.filter == "(service.factoryPid=com.example.Producer)"
    assert policy.multiplicity is Multiplicity.SHARED_LAZY
    assert policy.target_identity == "com.example.Consumer"
    assert not policy.is_template
    assert policy.target_scope == "bundle:consumer"
    assert policy.property_templates == ("a=bla", "pids={array:service.pid}")


def test_load_json_policy_with_snake_case_names(tmp_path: Path) -> None:
    path = tmp_path / "policy.json"
    path.write_text(
        json.dumps(
            {
                "filter": "(kind=producer)",
                "multiplicity": "shared_eager",
                "target_identity": "target",
                "property_templates": "a=1\n\n  b={kind}  \n",
            }
        )
    )

    policy = load_policy(path)

    assert policy.multiplicity is Multiplicity.SHARED_EAGER
    assert policy.is_template
    assert policy.target_scope is None
    assert policy.property_templates == ("a=1", "b={kind}")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("ONE_FOR_EACH", Multiplicity.PER_TRIGGER),
        ("one_eager", Multiplicity.SHARED_EAGER),
        ("PER_TRIGGER", Multiplicity.PER_TRIGGER),
        (" shared_lazy ", Multiplicity.SHARED_LAZY),
    ],
)
def test_multiplicity_names(value: str, expected: Multiplicity) -> None:
    policy = parse_policy({"filter": "(a=b)", "targetIdentity": "t", "multiplicity": value})

    assert policy.multiplicity is expected


def test_blank_scope_is_none() -> None:
    policy = parse_policy({"filter": "(a=b)", "target_identity": "t", "target_scope": "  "})

    assert policy.target_scope is None


@pytest.mark.parametrize(
    "payload",
    [
        {"target_identity": "t"},
        {"filter": "(a=b)"},
        {"filter": "", "target_identity": "t"},
        {"filter": "(a=b)", "target_identity": "t", "multiplicity": "sometimes"},
    ],
)
def test_invalid_documents_raise(payload: dict[str, object]) -> None:
    with pytest.raises(InvalidPolicyError):
        parse_policy(payload)


def test_unreadable_files_raise(tmp_path: Path) -> None:
    broken = tmp_path / "policy.toml"
    broken.write_text("filter = ")
    unsupported = tmp_path / "policy.yaml"
    unsupported.write_text("filter: x")
    not_a_mapping = tmp_path / "policy.json"
    not_a_mapping.write_text("[]")

    for path in (broken, unsupported, not_a_mapping, tmp_path / "missing.json"):
        with pytest.raises(InvalidPolicyError):
            load_policy(path)


def test_errors_name_the_offending_file(tmp_path: Path) -> None:
    path = tmp_path / "policy.json"
    path.write_text(json.dumps({"filter": "(a=b)"}))

    with pytest.raises(InvalidPolicyError) as exc:
        load_policy(path)

    assert exc.value.source == str(path)
    assert "target_identity" in exc.value.reason
