from __future__ import annotations

from typing import Dict, Iterable, Type

from .rule import Ruleset


class UnknownRulesetError(ValueError):
    pass


class RulesetRegistry:
    def __init__(self):
        self._rulesets: Dict[str, Type[Ruleset]] = {}

    def register(self, ruleset_cls: Type[Ruleset]) -> None:
        brand_id = getattr(ruleset_cls, "brand_id", None)
        if not brand_id:
            raise ValueError("Ruleset class missing brand_id")
        if brand_id in self._rulesets:
            raise ValueError(f"Duplicate brand_id registered: {brand_id}")
        self._rulesets[brand_id] = ruleset_cls

    def create(self, brand_id: str) -> Ruleset:
        return self.get(brand_id)()

    def get(self, brand_id: str) -> Type[Ruleset]:
        key = (brand_id or "").strip().lower()
        if key not in self._rulesets:
            raise UnknownRulesetError(f"Unknown brand ruleset '{brand_id}'")
        return self._rulesets[key]

    def ids(self) -> Iterable[str]:
        return self._rulesets.keys()


registry = RulesetRegistry()


def register_ruleset(ruleset_cls: Type[Ruleset]) -> Type[Ruleset]:
    registry.register(ruleset_cls)
    return ruleset_cls
