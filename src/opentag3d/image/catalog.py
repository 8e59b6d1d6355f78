"""
OpenTag3D Field Catalog
=======================

The complete, frozen table of fields an OpenTag3D tag can hold.

The addresses and sizes below are part of the on-tag format: tags that are
already in circulation depend on them byte for byte, so nothing here is
computed from neighbouring fields. The table is checked once at import
time (see validate_catalog) and is never modified afterwards.

Core fields are listed first, then extended fields. Within each group the
order is the definition order, which here also happens to be address
order.

Usage
-----
    >>> from opentag3d.image.catalog import get_field, active_fields
    >>> get_field("diameter").address
    82
    >>> len(active_fields(TagType.NTAG213))
    13
"""

from difflib import get_close_matches
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union

from opentag3d.errors import CatalogError, UnknownFieldError
from opentag3d.image.fields import (
    CORE_END,
    CORE_START,
    EXTENDED_END,
    EXTENDED_START,
    FIXED_KIND_SIZES,
    RESERVED_END,
    RESERVED_START,
    ColorField,
    DateField,
    FieldDefinition,
    IntegerField,
    Region,
    ScaledIntegerField,
    StringField,
    TagType,
    TimeField,
    format_address,
)

CORE = Region.CORE
EXT = Region.EXTENDED


# =============================================================================
# Field Table
# =============================================================================

FIELDS: tuple[FieldDefinition, ...] = (
    # -- Core region (0x10 - 0x9F) ---------------------------------------------
    StringField("tagFormat", "Tag Format", 0x10, 2, CORE, note='Always "OT"'),
    ScaledIntegerField(
        "tagVersion", "Tag Version (e.g. 1.000)", 0x12, 2, CORE,
        note="Stored as integer ×1000", scale=1000,
    ),
    StringField("manufacturer", "Filament Manufacturer", 0x14, 16, CORE),
    StringField("baseMaterial", "Base Material Name", 0x24, 5, CORE),
    StringField("materialMods", "Material Modifiers", 0x29, 5, CORE),
    StringField("colorName", "Color Name", 0x2E, 32, CORE),
    ColorField(
        "colorRGBA", "Color Hex RGBA [R,G,B,A]", 0x4E, 4, CORE,
        note="sRGB; 4 separate bytes",
    ),
    ScaledIntegerField(
        "diameter", "Diameter Target (mm)", 0x52, 2, CORE,
        note="Stored in µm (×1000)", scale=1000,
    ),
    IntegerField("weightNom", "Weight Nominal (g)", 0x54, 2, CORE),
    ScaledIntegerField(
        "printTemp", "Print Temp (°C)", 0x56, 1, CORE,
        note="Stored as °C/5 (divide by 5)", scale=0.2,
    ),
    ScaledIntegerField(
        "bedTemp", "Bed Temp (°C)", 0x57, 1, CORE,
        note="Stored as °C/5 (divide by 5)", scale=0.2,
    ),
    ScaledIntegerField("density", "Density (g/cm³)", 0x58, 2, CORE, scale=1000),
    # 0x5A - 0x6C reserved
    StringField(
        "dataUrl", "Online Data URL (ASCII, no protocol)", 0x6D, 32, CORE,
        note="e.g. pfil.us?i=8078-RQSR", ascii_only=True,
    ),

    # -- Extended region (0xA0 - 0x1FF) ----------------------------------------
    StringField("serial", "Serial / Batch ID", 0xA0, 16, EXT),
    DateField("mfgDate", "Manufacture Date (YYYY-MM-DD)", 0xB0, 4, EXT),
    TimeField("mfgTime", "Manufacture Time (HH:MM:SS UTC)", 0xB4, 3, EXT),
    IntegerField("coreDia", "Spool Core Diameter (mm)", 0xB7, 1, EXT),
    IntegerField("mfiTemp", "MFI Temp (°C)", 0xB8, 1, EXT),
    IntegerField("mfiLoad", "MFI Load (×100 g)", 0xB9, 1, EXT),
    IntegerField("mfiValue", "MFI Value (×10 g/10min)", 0xBA, 1, EXT),
    IntegerField("tolerance", "Tolerance (µm, measured)", 0xBB, 1, EXT),
    IntegerField("spoolEmpty", "Empty Spool Weight (g)", 0xBC, 2, EXT),
    IntegerField("filWeight", "Filament Weight (measured, g)", 0xBE, 2, EXT),
    IntegerField("filLen", "Filament Length (m)", 0xC0, 2, EXT),
    IntegerField("td", "TD (Transmission Distance, µm)", 0xC2, 2, EXT),
    IntegerField("maxDryTemp", "Max Dry Temp (°C)", 0xC4, 1, EXT),
    IntegerField("dryTime", "Dry Time (hours)", 0xC5, 1, EXT),
    IntegerField("minPrintTemp", "Min Print Temp (°C)", 0xC6, 1, EXT),
    IntegerField("maxPrintTemp", "Max Print Temp (°C)", 0xC7, 1, EXT),
    IntegerField("vMin", "Vol. Speed Min (×10 mm³/s)", 0xC8, 1, EXT),
    IntegerField("vMax", "Vol. Speed Max (×10 mm³/s)", 0xC9, 1, EXT),
    IntegerField("vRec", "Vol. Speed Rec (×10 mm³/s)", 0xCA, 1, EXT),
)

_FIELDS_BY_KEY: dict[str, FieldDefinition] = {f.key: f for f in FIELDS}


# Example spool used by `ot3d template`; extended values start out unset.
# Read-only; copy with dict(DEFAULT_VALUES) to edit.
DEFAULT_VALUES: Mapping[str, Union[str, int, float, None]] = MappingProxyType({
    "tagFormat": "OT",
    "tagVersion": "1.000",
    "manufacturer": "Polar Filament",
    "baseMaterial": "PLA",
    "materialMods": "CF",
    "colorName": "Blue",
    "colorRGBA": "255,166,77,255",
    "diameter": 1.75,
    "weightNom": 1000,
    "printTemp": 210,
    "bedTemp": 60,
    "density": 1.24,
    "dataUrl": "pfil.us?i=8078-RQSR",
    **{f.key: None for f in FIELDS if f.region is EXT},
})


# =============================================================================
# Lookup Functions
# =============================================================================

def core_fields() -> tuple[FieldDefinition, ...]:
    """Return all core-region fields in definition order."""
    return tuple(f for f in FIELDS if f.region is CORE)


def extended_fields() -> tuple[FieldDefinition, ...]:
    """Return all extended-region fields in definition order."""
    return tuple(f for f in FIELDS if f.region is EXT)


def all_fields() -> tuple[FieldDefinition, ...]:
    """Return core fields followed by extended fields."""
    return core_fields() + extended_fields()


def active_fields(tag_type: TagType) -> tuple[FieldDefinition, ...]:
    """
    Return the fields that are encoded for a given tag type.

    The smallest tag (NTAG213) only holds the core region; larger tags
    get the full catalog.
    """
    if tag_type.is_minimal:
        return core_fields()
    return all_fields()


def get_field(key: str) -> FieldDefinition:
    """
    Look up a field definition by key.

    Args:
        key: The field key, e.g. "diameter"

    Returns:
        The field definition

    Raises:
        UnknownFieldError: If no field has this key. The error carries a
            suggestion when the key looks like a typo of a known one.
    """
    try:
        return _FIELDS_BY_KEY[key]
    except KeyError:
        similar = get_close_matches(key, _FIELDS_BY_KEY.keys(), n=3)
        hint = None
        if similar:
            hint = "did you mean " + ", ".join(f"'{s}'" for s in similar) + "?"
        raise UnknownFieldError(key, hint) from None


def is_known_field(key: str) -> bool:
    """Check whether a key belongs to the catalog."""
    return key in _FIELDS_BY_KEY


def find_field_at(address: int) -> Optional[FieldDefinition]:
    """Return the field covering a byte address, or None."""
    for f in FIELDS:
        if f.covers(address):
            return f
    return None


# =============================================================================
# Layout Validation
# =============================================================================

def validate_catalog(fields: Iterable[FieldDefinition]) -> list[str]:
    """
    Check a field table for layout problems.

    Checks performed:
    - keys are unique
    - no two fields share a byte
    - every field lies inside 0x10 - 0x1FF
    - core fields end by 0x9F, extended fields start at 0xA0 or later
    - no core field touches the reserved range 0x5A - 0x6C
    - fixed-width kinds (color, date, time) have their required size
    - scaled fields have a positive scale

    Args:
        fields: The field definitions to check

    Returns:
        A list of problem descriptions (empty when the table is sound)
    """
    fields = list(fields)
    problems = []
    seen_keys: set[str] = set()

    for f in fields:
        if f.key in seen_keys:
            problems.append(f"duplicate key '{f.key}'")
        seen_keys.add(f.key)

        if f.size <= 0:
            problems.append(f"{f.key} has non-positive size {f.size}")
            continue

        if f.address < CORE_START or f.end_address > EXTENDED_END:
            problems.append(
                f"{f.key} at {format_address(f.address)} lies outside "
                f"{format_address(CORE_START)}-{format_address(EXTENDED_END)}"
            )

        if f.region is CORE:
            if f.end_address > CORE_END:
                problems.append(
                    f"core field {f.key} ends at {format_address(f.end_address)}, "
                    f"past {format_address(CORE_END)}"
                )
            if f.address <= RESERVED_END and RESERVED_START <= f.end_address:
                problems.append(
                    f"{f.key} intrudes into reserved range "
                    f"{format_address(RESERVED_START)}-{format_address(RESERVED_END)}"
                )
        elif f.address < EXTENDED_START:
            problems.append(
                f"extended field {f.key} starts at {format_address(f.address)}, "
                f"before {format_address(EXTENDED_START)}"
            )

        required = FIXED_KIND_SIZES.get(f.kind)
        if required is not None and f.size != required:
            problems.append(f"{f.key} must be {required} bytes, not {f.size}")

        if isinstance(f, ScaledIntegerField) and not f.scale > 0:
            problems.append(f"{f.key} has non-positive scale {f.scale}")

    # Pairwise range check; the table is a few dozen entries
    for i, a in enumerate(fields):
        for b in fields[i + 1:]:
            if a.size > 0 and b.size > 0 and a.overlaps(b):
                problems.append(
                    f"{a.key} ({format_address(a.address)}, {a.size} bytes) overlaps "
                    f"{b.key} ({format_address(b.address)}, {b.size} bytes)"
                )

    return problems


def _check_catalog() -> None:
    problems = validate_catalog(FIELDS)
    if problems:
        raise CatalogError(problems)


_check_catalog()
