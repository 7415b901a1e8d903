"""Policy documents supplied by the hosting environment.

Documents are TOML or JSON mappings. Both the snake_case field names and the
camelCase names used by OSGi auto-configuration policies are accepted::

    filter = "(service.factoryPid=com.example.Producer)"
    multiplicity = "ONE_FOR_EACH"
    targetPid = "com.example.Consumer"
    factory = true
    configuration = ["a=bla", "b=created for {service.pid}"]

A TOML document may also nest the fields under a ``[policy]`` table.
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Final, cast

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from autoconf.domain.model import Multiplicity, Policy

from .errors import InvalidPolicyError

if TYPE_CHECKING:
    from os import PathLike

_MULTIPLICITY_ALIASES: Final[dict[str, Multiplicity]] = {
    "ONE_FOR_EACH": Multiplicity.PER_TRIGGER,
    "ONE_LAZY": Multiplicity.SHARED_LAZY,
    "ONE_EAGER": Multiplicity.SHARED_EAGER,
}


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class PolicyDocument(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    filter: str = Field(min_length=1)
    multiplicity: Multiplicity = Multiplicity.PER_TRIGGER
    target_identity: str = Field(
        min_length=1,
        validation_alias=AliasChoices("target_identity", "targetIdentity", "targetPid"),
    )
    is_template: bool = Field(
        default=True,
        validation_alias=AliasChoices("is_template", "isTemplate", "factory"),
    )
    target_scope: str | None = Field(
        default=None,
        validation_alias=AliasChoices("target_scope", "targetScope", "targetLocation"),
    )
    property_templates: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices(
            "property_templates", "propertyTemplates", "configuration"
        ),
    )

    @field_validator("multiplicity", mode="before")
    @classmethod
    def _normalize_multiplicity(cls, value: object) -> object:
        if isinstance(value, str):
            text = value.strip()
            alias = _MULTIPLICITY_ALIASES.get(text.upper())
            return alias if alias is not None else text.lower()
        return value

    @field_validator("property_templates", mode="before")
    @classmethod
    def _split_template_block(cls, value: object) -> object:
        if isinstance(value, str):
            return tuple(line.strip() for line in value.splitlines() if line.strip())
        return value

    _normalize_scope = field_validator("target_scope", mode="before")(_blank_to_none)

    def to_policy(self) -> Policy:
        return Policy(
            filter=self.filter,
            multiplicity=self.multiplicity,
            target_identity=self.target_identity,
            is_template=self.is_template,
            target_scope=self.target_scope,
            property_templates=self.property_templates,
        )


def parse_policy(payload: Mapping[str, object], *, source: str = "document") -> Policy:
    """Validate a policy mapping and return the domain ``Policy``."""

    nested = payload.get("policy")
    if isinstance(nested, Mapping):
        payload = cast(Mapping[str, object], nested)
    try:
        return PolicyDocument.model_validate(payload).to_policy()
    except ValidationError as exc:
        raise InvalidPolicyError(source, str(exc)) from exc


def load_policy(path: str | PathLike[str]) -> Policy:
    """Read a ``.toml`` or ``.json`` policy document."""

    policy_path = Path(path)
    suffix = policy_path.suffix.lower()
    try:
        if suffix == ".toml":
            with policy_path.open("rb") as handle:
                payload: object = tomllib.load(handle)
        elif suffix == ".json":
            with policy_path.open(encoding="utf-8") as handle:
                payload = json.load(handle)
        else:
            reason = f"unsupported file type '{suffix}'"
            raise InvalidPolicyError(str(policy_path), reason)
    except (OSError, tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise InvalidPolicyError(str(policy_path), f"unable to read: {exc}") from exc

    if not isinstance(payload, Mapping):
        raise InvalidPolicyError(str(policy_path), "expected a mapping at the top level")
    return parse_policy(cast(Mapping[str, object], payload), source=str(policy_path))
