"""
Catalog Provider - loads offerings, menus, composition rules and add-ons.

Reads the seed CSVs with pandas and hands the engine read-only PricingFacts:
- offerings.csv: packages, party-box tiers, catering plates, bowls, meal boxes
- menu_items.csv: selectable items per menu, with premium deltas
- section_rules.csv: fixed composition and base plate allowances
- add_ons.csv: per-unit add-ons, scoped to an offering kind
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from ..engine.errors import MissingCatalogReference
from ..engine.models import AddOn, MenuItem, PricingFacts, PricingMode, SectionRule

logger = logging.getLogger(__name__)

OFFERINGS_FILE = 'offerings.csv'
MENU_ITEMS_FILE = 'menu_items.csv'
SECTION_RULES_FILE = 'section_rules.csv'
ADD_ONS_FILE = 'add_ons.csv'

KINDS = ('package', 'party_box', 'catering', 'bowl', 'meal_box')


def _read_csv(path: Path) -> pd.DataFrame:
    """Read a catalog CSV as strings; blank cells become empty strings."""
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    for col in df.columns:
        df[col] = df[col].str.strip()
    return df


def _opt_int(value) -> Optional[int]:
    if value is None or str(value).strip() == '':
        return None
    return int(float(value))


def _opt_str(value) -> Optional[str]:
    if value is None or str(value).strip() == '':
        return None
    return str(value).strip()


def _flag(value, default: bool = False) -> bool:
    if value is None or str(value).strip() == '':
        return default
    return str(value).strip().lower() in ('true', '1', 'yes', 'y')


class Catalog:
    """
    In-memory catalog keyed by (kind, ref).

    Inactive offerings, items and add-ons are loaded for reporting but are
    never returned by get().
    """

    def __init__(
        self,
        offerings: pd.DataFrame,
        menu_items: pd.DataFrame,
        section_rules: pd.DataFrame,
        add_ons: pd.DataFrame,
        source: Optional[Path] = None,
    ):
        self.offerings = offerings
        self.menu_items = menu_items
        self.section_rules = section_rules
        self.add_ons = add_ons
        self.source = source
        self._facts: dict[tuple[str, str], PricingFacts] = {}
        self._build()

    @classmethod
    def load(cls, catalog_dir: Path) -> 'Catalog':
        """Load all four CSVs from a directory."""
        catalog_dir = Path(catalog_dir)
        catalog = cls(
            offerings=_read_csv(catalog_dir / OFFERINGS_FILE),
            menu_items=_read_csv(catalog_dir / MENU_ITEMS_FILE),
            section_rules=_read_csv(catalog_dir / SECTION_RULES_FILE),
            add_ons=_read_csv(catalog_dir / ADD_ONS_FILE),
            source=catalog_dir,
        )
        logger.info("Loaded catalog from %s: %d offerings", catalog_dir, len(catalog._facts))
        return catalog

    def _menu(self, menu: Optional[str]) -> dict:
        if not menu:
            return {}
        rows = self.menu_items[
            (self.menu_items['menu'] == menu) & self.menu_items['is_active'].map(lambda v: _flag(v, True))
        ]
        items = {}
        for row in rows.to_dict('records'):
            items[row['id']] = MenuItem(
                id=row['id'],
                name=row['name'],
                section=row['section'],
                premium_delta=_opt_int(row.get('premium_delta')) or 0,
                extra_price=_opt_int(row.get('extra_price')),
                group=_opt_str(row.get('group')),
            )
        return items

    def _rules(self, rules: Optional[str]) -> dict:
        if not rules:
            return {}
        result = {}
        for row in self.section_rules[self.section_rules['rules'] == rules].to_dict('records'):
            result[row['section']] = SectionRule(
                section=row['section'],
                required=_opt_int(row.get('required')),
                included=_opt_int(row.get('included')),
                extra_price=_opt_int(row.get('extra_price')) or 0,
            )
        return result

    def _add_ons(self, kind: str) -> dict:
        rows = self.add_ons[
            (self.add_ons['kind'] == kind) & self.add_ons['is_active'].map(lambda v: _flag(v, True))
        ]
        return {
            row['id']: AddOn(id=row['id'], title=row['title'], price_per_unit=int(row['price_per_unit']))
            for row in rows.to_dict('records')
        }

    def _build(self):
        add_ons_by_kind = {kind: self._add_ons(kind) for kind in self.offerings['kind'].unique()}
        for row in self.offerings.to_dict('records'):
            if not _flag(row.get('is_active'), True):
                continue
            facts = PricingFacts(
                ref=row['id'],
                kind=row['kind'],
                title=row['title'],
                pricing_mode=PricingMode(row['pricing_mode']),
                base_price=_opt_int(row.get('base_price')) or 0,
                per_unit=_opt_int(row.get('per_unit')) or 0,
                min_qty=_opt_int(row.get('min_qty')) or 0,
                unit_noun=_opt_str(row.get('unit_noun')) or 'units',
                items=self._menu(_opt_str(row.get('menu'))),
                add_ons=add_ons_by_kind.get(row['kind'], {}),
                section_rules=self._rules(_opt_str(row.get('rules'))),
                requires_selection=_flag(row.get('requires_selection')),
                discount_eligible=_flag(row.get('discount_eligible')),
                advance_pct=_opt_int(row.get('advance_pct')),
                tax_rate=_opt_str(row.get('tax_rate')),
                flat_delivery_fee=_opt_int(row.get('flat_delivery_fee')),
                free_delivery_qty=_opt_int(row.get('free_delivery_qty')),
            )
            self._facts[(facts.kind, facts.ref)] = facts

    def get(self, kind: str, ref: str) -> PricingFacts:
        """Facts for an active offering; MissingCatalogReference otherwise."""
        if kind not in KINDS:
            raise MissingCatalogReference("offering kind", kind, field="kind")
        facts = self._facts.get((kind, ref))
        if facts is None:
            raise MissingCatalogReference(kind.replace('_', ' '), ref, field="ref")
        return facts

    def list(self, kind: str) -> list[PricingFacts]:
        """Active offerings of one kind, in file order."""
        if kind not in KINDS:
            raise MissingCatalogReference("offering kind", kind, field="kind")
        return [facts for (k, _), facts in self._facts.items() if k == kind]

    def validate(self) -> dict:
        """
        Check the catalog for data problems without raising.

        Returns:
            Report dictionary with status, counts, warnings and errors
        """
        report = {
            "timestamp": datetime.now().isoformat(),
            "status": "pending",
            "source": str(self.source) if self.source else None,
            "metrics": {},
            "warnings": [],
            "errors": [],
        }

        for kind in KINDS:
            report["metrics"][f"{kind}_count"] = len(self.list(kind))
        report["metrics"]["menu_item_count"] = len(self.menu_items)
        report["metrics"]["add_on_count"] = len(self.add_ons)
        report["metrics"]["inactive_offerings"] = int((~self.offerings['is_active'].map(lambda v: _flag(v, True))).sum())

        duplicates = self.offerings[self.offerings.duplicated(['kind', 'id'], keep=False)]
        for row in duplicates.to_dict('records'):
            report["errors"].append(f"Duplicate offering {row['kind']}/{row['id']}")

        menus = set(self.menu_items['menu'])
        rule_sets = set(self.section_rules['rules'])
        for row in self.offerings.to_dict('records'):
            name = f"{row['kind']}/{row['id']}"
            for col in ('base_price', 'per_unit', 'min_qty'):
                value = _opt_int(row.get(col))
                if value is not None and value < 0:
                    report["warnings"].append(f"{name}: negative {col}")
            menu = _opt_str(row.get('menu'))
            if menu and menu not in menus:
                report["errors"].append(f"{name}: unknown menu '{menu}'")
            rules = _opt_str(row.get('rules'))
            if rules and rules not in rule_sets:
                report["errors"].append(f"{name}: unknown rule set '{rules}'")

        # Every section a rule names must be a section or group some item of the menu uses
        for row in self.offerings.to_dict('records'):
            menu = _opt_str(row.get('menu'))
            rules = _opt_str(row.get('rules'))
            if not menu or not rules:
                continue
            items = self.menu_items[self.menu_items['menu'] == menu]
            known = set(items['section']) | {g for g in items['group'] if g}
            for section in self.section_rules[self.section_rules['rules'] == rules]['section']:
                if section not in known:
                    report["warnings"].append(f"{rules}: section '{section}' has no items in menu '{menu}'")

        for row in self.menu_items.to_dict('records'):
            delta = _opt_int(row.get('premium_delta'))
            if delta is not None and delta < 0:
                report["warnings"].append(f"{row['menu']}/{row['id']}: negative premium_delta")

        report["warnings"] = list(dict.fromkeys(report["warnings"]))
        report["status"] = "failed" if report["errors"] else "success"
        return report
