"""Immutable per-run validation context.

Everything a run needs from the catalog (compiled rules, brands, lookup
tables) plus the engine configuration, loaded once when the run starts.
Workers only read from it, so concurrent runs never share mutable state.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from loguru import logger

from .config.schemas import EngineConfig
from .enrichers.lookup_resolver import LookupResolver
from .exceptions import RuleConfigurationError
from .models.lookup import LookupEntry
from .models.quality import RuleFault
from .models.rules import FieldRule
from .validators.rule_evaluator import CompiledRule, compile_rule


@dataclass(frozen=True)
class ValidationContext:
    """Read-only snapshot of rules, brands and lookups for one run.

    Attributes:
        rules: Compiled active rules in `sort_order`
        brand_names: Active brand names
        resolver: Lookup resolver over active entries
        config: Engine configuration in effect for the run
        rule_faults: Rules skipped for the whole run because their
            configuration could not be compiled
    """

    rules: tuple[CompiledRule, ...]
    brand_names: frozenset[str]
    resolver: LookupResolver
    config: EngineConfig = field(default_factory=EngineConfig)
    rule_faults: tuple[RuleFault, ...] = ()

    def lookup_targets(self, category: str) -> frozenset[str]:
        return self.resolver.targets(category)


def build_context(
    rules: Iterable[FieldRule],
    brand_names: Iterable[str],
    lookup_entries: Iterable[LookupEntry],
    config: EngineConfig | None = None,
) -> ValidationContext:
    """Compile rules and index lookups into a ValidationContext.

    Rules whose configuration is malformed are left out and reported as
    rule faults instead of failing the run.
    """
    config = config or EngineConfig()
    compiled: list[CompiledRule] = []
    faults: list[RuleFault] = []

    for rule in sorted(rules, key=lambda r: r.sort_order):
        if not rule.is_active:
            continue
        try:
            compiled.append(compile_rule(rule, config.validation))
        except RuleConfigurationError as e:
            logger.warning(f"Skipping rule {rule.id} for this run: {e.message}")
            faults.append(RuleFault(rule_id=rule.id, field=rule.field_name, reason=e.message))

    return ValidationContext(
        rules=tuple(compiled),
        brand_names=frozenset(name.strip() for name in brand_names),
        resolver=LookupResolver(lookup_entries),
        config=config,
        rule_faults=tuple(faults),
    )
