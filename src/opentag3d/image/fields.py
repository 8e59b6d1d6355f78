"""
Tag Layout Definitions
======================

This module defines the fixed memory layout of an OpenTag3D tag and the
data structures that describe individual fields within it.

Memory Layout Overview
----------------------
NTAG user memory is addressed in bytes. The OpenTag3D layout starts at
address 0x10 and is split into two regions:

    0x10 - 0x9F   Core region (fits every supported tag, including NTAG213)
    0x5A - 0x6C     reserved inside the core region, never written
    0x6D - 0x8C     online data URL (ASCII, no protocol prefix)
    0xA0 - 0x1FF  Extended region (NTAG215 and NTAG216 only)

All multi-byte integers are unsigned big-endian. Strings are UTF-8 and
zero-padded on the right. Bytes the encoder knows nothing about in the
extended region are filled with 0xFF ("unset").

Tag Types
---------
- **NTAG213**: 144 bytes usable from 0x10 (core region only)
- **NTAG215**: 504 bytes usable from 0x10
- **NTAG216**: 888 bytes usable from 0x10

Field Kinds
-----------
Each field is one of a closed set of kinds, each with its own variant
class so that kind-specific settings (the scale of a scaled integer, the
ASCII restriction of a string) only exist where they make sense:

- StringField         UTF-8 text, truncated or zero-padded
- IntegerField        unsigned whole number
- ScaledIntegerField  decimal value stored as value * scale
- ColorField          four bytes R, G, B, A
- DateField           2-byte year, month, day
- TimeField           hour, minute, second

Reference
---------
- NTAG213/215/216 datasheet: https://www.nxp.com/docs/en/data-sheet/NTAG213_215_216.pdf
- OpenTag3D: https://opentag3d.info

Copyright (c) 2026 OpenTag3D Contributors
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from opentag3d.errors import TagTypeError


# =============================================================================
# Layout Constants
# =============================================================================

# First byte of the OpenTag3D layout; every image starts here
START_ADDRESS = 0x10

# Core region (inclusive), present on all supported tags
CORE_START = 0x10
CORE_END = 0x9F

# Extended region (inclusive), only on higher-capacity tags
EXTENDED_START = 0xA0
EXTENDED_END = 0x1FF

# Reserved core sub-range, not used by any field
RESERVED_START = 0x5A
RESERVED_END = 0x6C

# Byte used for "no known value"
UNSET_BYTE = 0xFF

# Highest address reported for an image that has no writes
EMPTY_HIGHEST_ADDRESS = START_ADDRESS - 1


# =============================================================================
# Enumeration Types
# =============================================================================

class TagType(Enum):
    """
    Supported NFC tag types.

    The value is the tag's name as printed on datasheets and used in
    output file names. Capacities are the number of user bytes available
    starting at address 0x10.
    """
    NTAG213 = "NTAG213"
    NTAG215 = "NTAG215"
    NTAG216 = "NTAG216"

    @property
    def capacity(self) -> int:
        """Usable bytes from START_ADDRESS."""
        return TAG_CAPACITY[self]

    @property
    def is_minimal(self) -> bool:
        """True for the smallest tier, which only holds the core region."""
        return self.capacity == min(TAG_CAPACITY.values())

    @classmethod
    def from_name(cls, name: "str | TagType") -> "TagType":
        """
        Look up a tag type by name, case-insensitively.

        Args:
            name: Tag type name such as "ntag215", or a TagType

        Returns:
            The matching TagType

        Raises:
            TagTypeError: If the name is not a supported tag type
        """
        if isinstance(name, TagType):
            return name
        try:
            return cls(name.strip().upper())
        except ValueError:
            raise TagTypeError(name) from None

    @classmethod
    def smallest_for(cls, span: int) -> "TagType | None":
        """Return the smallest tag type that can hold `span` bytes."""
        for tag_type in sorted(cls, key=lambda t: t.capacity):
            if span <= tag_type.capacity:
                return tag_type
        return None

    def __str__(self) -> str:
        return self.value


# Declared byte capacity of each tag type, counted from START_ADDRESS
TAG_CAPACITY: dict[TagType, int] = {
    TagType.NTAG213: 144,
    TagType.NTAG215: 504,
    TagType.NTAG216: 888,
}


class Region(Enum):
    """Memory region a field lives in."""
    CORE = "core"
    EXTENDED = "extended"


class FieldKind(Enum):
    """Closed set of field value kinds."""
    STRING = "string"
    INTEGER = "integer"
    SCALED_INTEGER = "scaledInteger"
    COLOR_RGBA = "colorRGBA"
    DATE_YMD = "dateYMD"
    TIME_HMS = "timeHMS"


# =============================================================================
# Field Definitions
# =============================================================================

@dataclass(frozen=True)
class FieldDefinition:
    """
    Base class for all catalog fields.

    A field definition is a fixed description of where a value lives on
    the tag and how many bytes it occupies. Definitions are created once
    in the catalog and never modified.

    Attributes:
        key: Stable identifier used in value maps and reports
        label: Human-readable name used in diagnostics and reports
        address: Absolute byte offset on the tag
        size: Number of bytes the field occupies
        region: Core or extended region
        note: Optional hint about units or storage
    """
    key: str
    label: str
    address: int
    size: int
    region: Region
    note: str = ""

    # Set by each variant
    kind: ClassVar[FieldKind]

    @property
    def end_address(self) -> int:
        """Last byte covered by this field (inclusive)."""
        return self.address + self.size - 1

    def covers(self, address: int) -> bool:
        """Check whether a byte address falls inside this field."""
        return self.address <= address <= self.end_address

    def overlaps(self, other: "FieldDefinition") -> bool:
        """Check whether two fields share at least one byte."""
        return self.address <= other.end_address and other.address <= self.end_address


@dataclass(frozen=True)
class StringField(FieldDefinition):
    """
    UTF-8 text, truncated to `size` bytes and zero-padded.

    Attributes:
        ascii_only: Reject any character outside 7-bit ASCII. Fields with
            this flag also have a leading http:// or https:// stripped.
    """
    ascii_only: bool = False

    kind: ClassVar[FieldKind] = FieldKind.STRING


@dataclass(frozen=True)
class IntegerField(FieldDefinition):
    """Unsigned big-endian whole number."""

    kind: ClassVar[FieldKind] = FieldKind.INTEGER


@dataclass(frozen=True)
class ScaledIntegerField(FieldDefinition):
    """
    Decimal value stored as an unsigned integer after scaling.

    Attributes:
        scale: Multiplier applied before storage. 1000 stores micrometres
            from millimetres; 0.2 stores degrees divided by five.
    """
    scale: float = 1.0

    kind: ClassVar[FieldKind] = FieldKind.SCALED_INTEGER


@dataclass(frozen=True)
class ColorField(FieldDefinition):
    """sRGB color as four separate bytes R, G, B, A."""

    kind: ClassVar[FieldKind] = FieldKind.COLOR_RGBA


@dataclass(frozen=True)
class DateField(FieldDefinition):
    """Calendar date as 2-byte year, 1-byte month, 1-byte day."""

    kind: ClassVar[FieldKind] = FieldKind.DATE_YMD


@dataclass(frozen=True)
class TimeField(FieldDefinition):
    """Time of day (UTC) as hour, minute and second bytes."""

    kind: ClassVar[FieldKind] = FieldKind.TIME_HMS


# Byte width each fixed-width kind requires
FIXED_KIND_SIZES: dict[FieldKind, int] = {
    FieldKind.COLOR_RGBA: 4,
    FieldKind.DATE_YMD: 4,
    FieldKind.TIME_HMS: 3,
}


# =============================================================================
# Writes
# =============================================================================

@dataclass(frozen=True)
class Write:
    """
    The resolved bytes of one field.

    Attributes:
        address: Absolute address of the first byte
        data: Bytes to place at `address`
        field: The field definition that produced them
    """
    address: int
    data: bytes
    field: FieldDefinition

    @property
    def end_address(self) -> int:
        """Last byte touched by this write (inclusive)."""
        return self.address + len(self.data) - 1


def format_address(address: int, width: int = 2) -> str:
    """
    Format an address as 0x-prefixed uppercase hex.

    Example:
        >>> format_address(0x6D)
        '0x6D'
        >>> format_address(0x1FF)
        '0x1FF'
    """
    return f"0x{address:0{width}X}"
