"""Immutable reconciliation policy."""

from __future__ import annotations

from dataclasses import dataclass, field

from autoconf.domain.model.enums import Multiplicity


@dataclass(frozen=True, slots=True, kw_only=True)
class Policy:
    """Configuration snapshot driving one reconciler.

    ``filter`` is opaque to the core and only compared for equality. A new
    policy always replaces the previous one as a whole.
    """

    filter: str
    target_identity: str
    multiplicity: Multiplicity = Multiplicity.PER_TRIGGER
    is_template: bool = True
    target_scope: str | None = None
    property_templates: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.target_scope is not None and not self.target_scope.strip():
            object.__setattr__(self, "target_scope", None)
        if not isinstance(self.property_templates, tuple):
            object.__setattr__(self, "property_templates", tuple(self.property_templates))

    def same_target(self, other: Policy) -> bool:
        """Return whether ``other`` produces records of the same kind."""

        return (
            self.target_identity == other.target_identity
            and self.target_scope == other.target_scope
            and self.is_template == other.is_template
        )
