from __future__ import annotations

from typing import TYPE_CHECKING

from autoconf.domain.model import Multiplicity, Policy, Trigger

if TYPE_CHECKING:
    from autoconf.adapters.registry import InMemoryTriggerRegistry
    from autoconf.domain.model import AttributeValue

PRODUCER_FILTER = "(service.factoryPid=com.example.Producer)"
CONSUMER_PID = "com.example.Consumer"


def make_trigger(trigger_id: str, **attributes: AttributeValue) -> Trigger:
    return Trigger(trigger_id=trigger_id, attributes=attributes)


def make_policy(
    multiplicity: Multiplicity = Multiplicity.PER_TRIGGER,
    *,
    templates: tuple[str, ...] = ("a=bla", "b=created for {service.pid}"),
    filter_expr: str = PRODUCER_FILTER,
    target_identity: str = CONSUMER_PID,
    is_template: bool = True,
    target_scope: str | None = None,
) -> Policy:
    return Policy(
        filter=filter_expr,
        target_identity=target_identity,
        multiplicity=multiplicity,
        is_template=is_template,
        target_scope=target_scope,
        property_templates=templates,
    )


def register_producers(
    registry: InMemoryTriggerRegistry, count: int, *, start: int = 1
) -> list[str]:
    """Register ``count`` matching producer triggers and return their ids."""

    trigger_ids: list[str] = []
    for index in range(start, start + count):
        trigger_id = f"producer-{index}"
        registry.register(
            trigger_id,
            {"service.factoryPid": "com.example.Producer", "service.pid": f"P{index}"},
        )
        trigger_ids.append(trigger_id)
    return trigger_ids
