# recipe_matcher/services/units.py
"""
Unit/quantity normalizer.

Canonicalizes pantry quantities into comparable base units (g, ml, piece, cm).
Used for display and validation only; ingredient matching never looks at units.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from recipe_matcher.errors import InvalidInputError

UNIT_TYPES = ("weight", "volume", "count", "length")


@dataclass(frozen=True)
class Unit:
    name: str
    symbol: str
    type: str
    base_multiplier: float
    base_unit: str


def _u(name: str, symbol: str, type_: str, mult: float, base: str) -> Unit:
    return Unit(name=name, symbol=symbol, type=type_, base_multiplier=mult, base_unit=base)


UNITS: Dict[str, Unit] = {
    # weight (base: grams)
    "mg": _u("milligram", "mg", "weight", 0.001, "g"),
    "g": _u("gram", "g", "weight", 1, "g"),
    "kg": _u("kilogram", "kg", "weight", 1000, "g"),
    "oz": _u("ounce", "oz", "weight", 28.3495, "g"),
    "lb": _u("pound", "lb", "weight", 453.592, "g"),
    "ton": _u("ton", "ton", "weight", 1000000, "g"),
    # volume (base: milliliters)
    "ml": _u("milliliter", "ml", "volume", 1, "ml"),
    "l": _u("liter", "l", "volume", 1000, "ml"),
    "dl": _u("deciliter", "dl", "volume", 100, "ml"),
    "fl oz": _u("fluid ounce", "fl oz", "volume", 29.5735, "ml"),
    "cup": _u("cup", "cup", "volume", 236.588, "ml"),
    "pint": _u("pint", "pint", "volume", 473.176, "ml"),
    "quart": _u("quart", "quart", "volume", 946.353, "ml"),
    "gallon": _u("gallon", "gallon", "volume", 3785.41, "ml"),
    # count (base: piece)
    "piece": _u("piece", "piece", "count", 1, "piece"),
    "each": _u("each", "each", "count", 1, "piece"),
    "item": _u("item", "item", "count", 1, "piece"),
    # length (base: centimeters)
    "mm": _u("millimeter", "mm", "length", 0.1, "cm"),
    "cm": _u("centimeter", "cm", "length", 1, "cm"),
    "m": _u("meter", "m", "length", 100, "cm"),
    "in": _u("inch", "in", "length", 2.54, "cm"),
    "ft": _u("foot", "ft", "length", 30.48, "cm"),
    "yd": _u("yard", "yd", "length", 91.44, "cm"),
}

# keyword -> unit type; first hit wins, everything else is counted
_WEIGHT_WORDS = ("flour", "sugar", "salt", "butter", "cheese", "meat", "chicken", "beef", "pork")
_VOLUME_WORDS = ("milk", "oil", "vinegar", "juice", "broth", "sauce")


def get_unit(symbol: Optional[str]) -> Optional[Unit]:
    if not symbol:
        return None
    return UNITS.get(symbol.strip().lower())


def get_units_by_type(unit_type: str) -> List[Unit]:
    return [u for u in UNITS.values() if u.type == unit_type]


def get_unit_type(symbol: Optional[str]) -> Optional[str]:
    unit = get_unit(symbol)
    return unit.type if unit else None


def convert_unit(value: float, from_unit: str, to_unit: str) -> Optional[float]:
    """Convert between units of the same type; None across types or for unknown units."""
    src = get_unit(from_unit)
    dst = get_unit(to_unit)
    if not src or not dst or src.type != dst.type:
        return None
    return value * src.base_multiplier / dst.base_multiplier


def are_units_compatible(unit1: str, unit2: str) -> bool:
    u1 = get_unit(unit1)
    u2 = get_unit(unit2)
    return bool(u1 and u2 and u1.type == u2.type)


def to_base_quantity(value: float, unit: str) -> Tuple[float, str]:
    """Return (value, base_unit) for a known unit; raise InvalidInputError otherwise."""
    u = get_unit(unit)
    if u is None:
        raise InvalidInputError(f"Unknown unit: {unit!r}")
    return value * u.base_multiplier, u.base_unit


def common_units_for_ingredient(ingredient_name: str) -> List[Unit]:
    name = (ingredient_name or "").lower()
    if any(w in name for w in _WEIGHT_WORDS):
        return get_units_by_type("weight")
    if any(w in name for w in _VOLUME_WORDS):
        return get_units_by_type("volume")
    return get_units_by_type("count")


def validate_unit_for_ingredient(ingredient_name: str, unit: str) -> bool:
    symbol = (unit or "").strip().lower()
    return any(u.symbol == symbol for u in common_units_for_ingredient(ingredient_name))
