"""Immutable configuration supplied at process start: formulas and bosses."""

from .bosses import Boss, BossCatalog, catalog_from_records, load_boss_catalog
from .formulas import FormulaTable, load_formulas

__all__ = [
    "Boss",
    "BossCatalog",
    "FormulaTable",
    "catalog_from_records",
    "load_boss_catalog",
    "load_formulas",
]
