"""Unit conversion for dosage and lab values.

Each known unit belongs to a family and carries a factor relative to the
family's base unit. Conversion only succeeds within a family.
"""

from dataclasses import dataclass


# Unit aliases -> (family, factor relative to the family base unit)
UNIT_TABLE: dict[str, tuple[str, float]] = {
    # Mass, base mg
    "mg": ("mass", 1.0),
    "milligram": ("mass", 1.0),
    "milligrams": ("mass", 1.0),
    "g": ("mass", 1000.0),
    "gm": ("mass", 1000.0),
    "gram": ("mass", 1000.0),
    "grams": ("mass", 1000.0),
    "mcg": ("mass", 0.001),
    "ug": ("mass", 0.001),
    "µg": ("mass", 0.001),
    "μg": ("mass", 0.001),
    "microgram": ("mass", 0.001),
    "micrograms": ("mass", 0.001),
    "kg": ("mass", 1_000_000.0),

    # Volume, base ml
    "ml": ("volume", 1.0),
    "cc": ("volume", 1.0),
    "l": ("volume", 1000.0),
    "liter": ("volume", 1000.0),
    "litre": ("volume", 1000.0),

    # International units
    "iu": ("units", 1.0),
    "u": ("units", 1.0),
    "unit": ("units", 1.0),
    "units": ("units", 1.0),

    # Milliequivalents
    "meq": ("meq", 1.0),

    # Millimoles
    "mmol": ("mmol", 1.0),
}

UNKNOWN_UNIT = "unknown_unit"
INCOMPATIBLE_UNITS = "incompatible_units"


@dataclass
class ConversionResult:
    """Outcome of a unit conversion.

    ``value`` is only meaningful when ``success`` is True. On failure
    ``error`` is UNKNOWN_UNIT or INCOMPATIBLE_UNITS.
    """
    success: bool
    value: float | None = None
    error: str | None = None
    message: str | None = None


def normalize_unit(unit: str | None) -> str:
    """Lower-case and strip a unit string."""
    if not unit:
        return ""
    return unit.strip().lower()


def unit_family(unit: str | None) -> str | None:
    """Return the family of a unit, or None if the unit is not known."""
    entry = UNIT_TABLE.get(normalize_unit(unit))
    return entry[0] if entry else None


def convert_units(value: float, from_unit: str, to_unit: str) -> ConversionResult:
    """Convert a value between two units of the same family.

    Identical unit strings (ignoring case) always succeed, even when the
    unit is not in the table.

    Args:
        value: Quantity expressed in from_unit
        from_unit: Source unit
        to_unit: Target unit

    Returns:
        ConversionResult with the converted value or an error code
    """
    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)

    if source == target:
        return ConversionResult(success=True, value=value)

    source_entry = UNIT_TABLE.get(source)
    target_entry = UNIT_TABLE.get(target)

    if source_entry is None or target_entry is None:
        unknown = from_unit if source_entry is None else to_unit
        return ConversionResult(
            success=False,
            error=UNKNOWN_UNIT,
            message=f"Unknown unit: {unknown}",
        )

    source_family, source_factor = source_entry
    target_family, target_factor = target_entry

    if source_family != target_family:
        return ConversionResult(
            success=False,
            error=INCOMPATIBLE_UNITS,
            message=f"Cannot compare different units: {from_unit} vs {to_unit}",
        )

    return ConversionResult(success=True, value=value * source_factor / target_factor)
