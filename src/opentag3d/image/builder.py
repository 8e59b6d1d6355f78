"""
Tag Image Builder
=================

This module assembles field values into a contiguous OpenTag3D memory
image and validates it against the capacity of the selected tag.

Assembly
--------
For every field of the active set (core only for NTAG213, the full catalog
otherwise), in catalog order:

1. the value is encoded by its kind's codec (see codecs.py)
2. the resulting write is recorded and every byte it covers is claimed in
   an address -> field occupancy map; claiming a byte that already belongs
   to another field yields an overlap diagnostic, and the later field wins
3. the highest address touched so far is tracked

The image then spans 0x10 to the highest address. It starts zeroed, with
any extended-region bytes (0xA0 and above) pre-filled with 0xFF, and the
writes are applied on top in catalog order.

Nothing in this module aborts an encode because of a bad value. Problems
are collected as diagnostics next to a best-effort image.

Usage
-----
One-shot encoding:

    >>> from opentag3d.image import encode_tag, TagType
    >>> result = encode_tag({"tagFormat": "OT", "diameter": 1.75}, TagType.NTAG213)
    >>> result.image[:2]
    b'OT'

Collecting values first:

    >>> builder = TagImageBuilder(tag_type=TagType.NTAG215)
    >>> builder.set_value("manufacturer", "Polar Filament")
    >>> builder.set_value("serial", None)     # explicitly unknown
    >>> result = builder.build()
    >>> result.diagnostics
    []

Copyright (c) 2026 OpenTag3D Contributors
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union
import logging

from opentag3d.image.catalog import active_fields, get_field, is_known_field
from opentag3d.image.codecs import MISSING, LogicalValue, encode_value
from opentag3d.image.fields import (
    EMPTY_HIGHEST_ADDRESS,
    EXTENDED_START,
    START_ADDRESS,
    UNSET_BYTE,
    FieldDefinition,
    TagType,
    Write,
    format_address,
)

# Logger for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Encode Result
# =============================================================================

@dataclass(frozen=True)
class EncodeResult:
    """
    Everything produced by one encode.

    Attributes:
        tag_type: The tag type the image was built for
        image: Image bytes from START_ADDRESS to highest_address inclusive
        writes: Field writes in catalog order
        diagnostics: Human-readable problems, in the order they were found
        highest_address: Last address of the image, or 0x0F when empty
    """
    tag_type: TagType
    image: bytes
    writes: tuple[Write, ...]
    diagnostics: tuple[str, ...]
    highest_address: int = EMPTY_HIGHEST_ADDRESS

    @property
    def start_address(self) -> int:
        return START_ADDRESS

    @property
    def span(self) -> int:
        """Number of bytes from START_ADDRESS to highest_address."""
        return self.highest_address - START_ADDRESS + 1

    @property
    def is_empty(self) -> bool:
        return len(self.image) == 0

    @property
    def ok(self) -> bool:
        """True when no diagnostics were raised."""
        return not self.diagnostics

    @property
    def fits(self) -> bool:
        """True when the image fits the tag type's capacity."""
        return self.span <= self.tag_type.capacity

    def byte_at(self, address: int) -> Optional[int]:
        """Return the image byte at an absolute address, or None outside it."""
        offset = address - START_ADDRESS
        if 0 <= offset < len(self.image):
            return self.image[offset]
        return None

    def slice(self, address: int, size: int) -> bytes:
        """Return `size` image bytes starting at an absolute address."""
        offset = address - START_ADDRESS
        return self.image[offset:offset + size]


# =============================================================================
# Capacity Validation
# =============================================================================

def check_capacity(tag_type: TagType, highest_address: int) -> Optional[str]:
    """
    Compare the image span with the tag's declared capacity.

    Args:
        tag_type: The selected tag type
        highest_address: Last address written

    Returns:
        A diagnostic when the span exceeds the capacity, else None
    """
    span = highest_address - START_ADDRESS + 1
    if span > tag_type.capacity:
        return (
            f"Selected fields require {span} bytes from {format_address(START_ADDRESS)}, "
            f"which exceeds {tag_type} capacity of {tag_type.capacity}"
        )
    return None


# =============================================================================
# Layout Assembly
# =============================================================================

def _claim(
    write: Write,
    occupancy: dict[int, str],
    diagnostics: list[str],
) -> None:
    """Mark the bytes of a write as owned, reporting any byte already taken."""
    f = write.field
    for address in range(write.address, write.address + len(write.data)):
        owner = occupancy.get(address)
        if owner is not None and owner != f.key:
            message = (
                f"{f.label} overlaps {owner} at {format_address(address)} "
                f"(size {f.size})"
            )
            logger.warning(message)
            diagnostics.append(message)
        occupancy[address] = f.key


def _render(writes: Iterable[Write], highest_address: int) -> bytes:
    """Lay writes out over a zeroed buffer with the extended pre-fill."""
    length = highest_address - START_ADDRESS + 1
    buffer = bytearray(length)

    # Extended bytes we know nothing about are marked unset
    prefill_from = max(EXTENDED_START, START_ADDRESS) - START_ADDRESS
    if prefill_from < length:
        buffer[prefill_from:] = bytes([UNSET_BYTE]) * (length - prefill_from)

    for write in writes:
        offset = write.address - START_ADDRESS
        buffer[offset:offset + len(write.data)] = write.data

    return bytes(buffer)


def assemble(
    values: Mapping[str, Any],
    fields: Iterable[FieldDefinition],
    tag_type: TagType,
) -> EncodeResult:
    """
    Encode values over an explicit field set.

    This is the layout engine behind encode_tag(). It takes the field set
    as an argument so that layouts other than the active catalog subset
    (for example a deliberately overlapping one) can be exercised.

    Args:
        values: Field key -> logical value (None means "unset")
        fields: Field definitions, in the order they should be written
        tag_type: Tag type used for the capacity check

    Returns:
        An EncodeResult; never raises because of bad values
    """
    diagnostics: list[str] = []
    writes: list[Write] = []
    occupancy: dict[int, str] = {}
    highest = EMPTY_HIGHEST_ADDRESS

    for f in fields:
        result = encode_value(f, values.get(f.key, MISSING))
        if result.diagnostic:
            diagnostics.append(result.diagnostic)
        if result.skipped:
            continue

        write = Write(address=f.address, data=result.data, field=f)
        _claim(write, occupancy, diagnostics)
        writes.append(write)
        highest = max(highest, write.end_address)

    if not writes:
        logger.debug("No fields produced a write; image is empty")
        return EncodeResult(
            tag_type=tag_type,
            image=b"",
            writes=(),
            diagnostics=tuple(diagnostics),
            highest_address=EMPTY_HIGHEST_ADDRESS,
        )

    capacity_problem = check_capacity(tag_type, highest)
    if capacity_problem:
        logger.warning(capacity_problem)
        diagnostics.append(capacity_problem)

    image = _render(writes, highest)
    logger.debug(
        f"Built {tag_type} image: {len(writes)} fields, "
        f"{format_address(START_ADDRESS)}-{format_address(highest)} ({len(image)} bytes)"
    )

    return EncodeResult(
        tag_type=tag_type,
        image=image,
        writes=tuple(writes),
        diagnostics=tuple(diagnostics),
        highest_address=highest,
    )


def encode_tag(
    values: Mapping[str, Any],
    tag_type: Union[TagType, str] = TagType.NTAG213,
) -> EncodeResult:
    """
    Encode a value map into a tag image.

    The active field set follows the tag type: NTAG213 gets the core
    fields only, larger tags get the whole catalog. Keys that are not in
    the catalog are ignored (and logged).

    Args:
        values: Field key -> logical value (None means "unset")
        tag_type: A TagType or its name

    Returns:
        The EncodeResult

    Raises:
        TagTypeError: If tag_type is a name that is not a supported type
    """
    tag_type = TagType.from_name(tag_type)

    unknown = sorted(k for k in values if not is_known_field(k))
    if unknown:
        logger.warning(f"Ignoring unknown field(s): {', '.join(unknown)}")

    return assemble(values, active_fields(tag_type), tag_type)


# =============================================================================
# Builder
# =============================================================================

@dataclass
class TagImageBuilder:
    """
    Collects field values and builds tag images from them.

    Every build() encodes a snapshot of the collected values, so a builder
    can be edited and rebuilt freely; nothing carries over between builds.

    Attributes:
        tag_type: Tag type to build for

    Example:
        >>> builder = TagImageBuilder(tag_type=TagType.NTAG215)
        >>> builder.set_values({"tagFormat": "OT", "tagVersion": "1.000"})
        >>> builder.build_to_file("spool.bin")  # strings absent -> zero-filled
        160
    """
    tag_type: TagType = TagType.NTAG213

    # Collected values, keyed by field key
    _values: dict[str, LogicalValue] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self.tag_type = TagType.from_name(self.tag_type)

    def set_value(self, key: str, value: LogicalValue) -> "TagImageBuilder":
        """
        Set the value of one field.

        Args:
            key: Field key from the catalog
            value: Logical value, or None to mark the field as unset

        Returns:
            Self for method chaining

        Raises:
            UnknownFieldError: If the key is not in the catalog
        """
        get_field(key)
        self._values[key] = value
        return self

    def set_values(self, values: Mapping[str, LogicalValue]) -> "TagImageBuilder":
        """Set several fields at once; every key must be in the catalog."""
        for key, value in values.items():
            self.set_value(key, value)
        return self

    def clear_value(self, key: str) -> "TagImageBuilder":
        """Forget a field's value so it is treated as absent."""
        get_field(key)
        self._values.pop(key, None)
        return self

    def get_values(self) -> dict[str, LogicalValue]:
        """Return a copy of the collected values."""
        return dict(self._values)

    def build(self) -> EncodeResult:
        """Encode the collected values for the builder's tag type."""
        return encode_tag(dict(self._values), self.tag_type)

    def build_to_file(self, filepath: Union[str, Path]) -> int:
        """
        Build the image and write it to disk.

        Args:
            filepath: Output file path

        Returns:
            Number of bytes written
        """
        result = self.build()
        Path(filepath).write_bytes(result.image)
        return len(result.image)
