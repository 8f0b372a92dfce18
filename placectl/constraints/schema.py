from __future__ import annotations

from dataclasses import dataclass, field

from ..models import IN, LabelConstraint, RuleGroup


DEFAULT_SCOPE_PATTERNS = ("keyspace-{keyspace}-", "keyspace-id-{keyspace}-")


@dataclass(frozen=True)
class Policy:
    """Literals the checker and rewriter work against.

    Source rules belong to `source_group` and keep write-role stores out of
    their placement with `exclusion_key notIn [exclusion_value]`. Derived
    rules land in `target_group` and pin one replica to write-role stores of
    the engine tier.
    """

    source_group: str = "tiflash"
    exclusion_key: str = "engine_role"
    exclusion_value: str = "write"
    target_group: str = "enable_s3_wn_region"
    target_index: int = 1
    target_count: int = 1
    write_constraint: LabelConstraint = field(
        default_factory=lambda: LabelConstraint(key="engine_role", op=IN, values=("write",))
    )
    engine_constraint: LabelConstraint = field(
        default_factory=lambda: LabelConstraint(key="engine", op=IN, values=("tiflash",))
    )
    scope_patterns: tuple[str, ...] = DEFAULT_SCOPE_PATTERNS

    @property
    def groups(self) -> dict[str, RuleGroup]:
        """Source and target group descriptors, for lookup_group(). No pipeline reads them."""
        return {
            self.source_group: RuleGroup(id=self.source_group),
            self.target_group: RuleGroup(id=self.target_group, index=self.target_index),
        }

    def scope_markers(self, keyspace: str) -> tuple[str, ...]:
        # Plain substitution: other braces in a pattern are literal text.
        return tuple(p.replace("{keyspace}", keyspace) for p in self.scope_patterns)


DEFAULT_POLICY = Policy()
