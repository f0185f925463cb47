from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel, Field

from .config import PointRule, SectionRule
from .registry import registry

# Ensure built-in rulesets are imported/registered when generating a catalog.
from . import rulesets as _builtin_rulesets  # noqa: F401


class RulesetCatalogEntry(BaseModel):
    brand_id: str
    brand_name: str
    description: str = ""
    sheet: str
    requires_reference: bool = False
    reference_file: str = ""

    module: str
    class_name: str

    rule_schema: Dict[str, Any] = Field(default_factory=dict)


def build_catalog() -> List[RulesetCatalogEntry]:
    rule_schema = {
        "point": PointRule.model_json_schema(),
        "section": SectionRule.model_json_schema(),
    }
    entries: List[RulesetCatalogEntry] = []
    for brand_id in registry.ids():
        ruleset_cls = registry.get(brand_id)
        entries.append(
            RulesetCatalogEntry(
                brand_id=brand_id,
                brand_name=getattr(ruleset_cls, "brand_name", brand_id),
                description=getattr(ruleset_cls, "description", ""),
                sheet=ruleset_cls.sheet.describe(),
                requires_reference=bool(getattr(ruleset_cls, "requires_reference", False)),
                reference_file=getattr(ruleset_cls, "reference_file", ""),
                module=getattr(ruleset_cls, "__module__", ""),
                class_name=getattr(ruleset_cls, "__name__", ""),
                rule_schema=rule_schema,
            )
        )

    entries.sort(key=lambda e: e.brand_id)
    return entries


def _dump_json(catalog: list[dict[str, Any]]) -> str:
    return json.dumps(catalog, indent=2, sort_keys=True)


def _dump_yaml(catalog: list[dict[str, Any]]) -> str:
    return yaml.safe_dump(catalog, sort_keys=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="List the registered brand rulesets.")
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    parser.add_argument(
        "--no-schema",
        action="store_true",
        help="Omit the rule JSON schema from each entry.",
    )
    args = parser.parse_args(argv)

    exclude = {"rule_schema"} if args.no_schema else None
    catalog = [e.model_dump(mode="json", exclude=exclude) for e in build_catalog()]
    if args.format == "json":
        print(_dump_json(catalog))
    else:
        print(_dump_yaml(catalog))


if __name__ == "__main__":
    main()
