"""
Field Value Codecs
==================

Encoders turn a logical (human-entered) value into the exact bytes of one
field; decoders do the reverse.

Encoders never raise on bad input. Each returns a CodecResult, which is
either the encoded bytes or a skip, optionally with a diagnostic message:

    Outcome                         data        diagnostic
    ------------------------------  ----------  -----------------------
    value encoded                   size bytes  None
    value encoded but clamped       size bytes  "... does not fit ..."
    value rejected                  None        "... must be YYYY-MM-DD"
    value absent / invalid integer  None        None

Unset Values
------------
None is the explicit "unset/unknown" marker. It fills the whole field
with 0xFF without consulting the kind's encoder. A key that is missing
from the value map is different: strings encode as empty text (all zero
bytes) and every other kind is simply not written.

Encoding Rules
--------------
- string: UTF-8, silently truncated to the field size, zero-padded.
  ASCII-only fields drop a leading http:// or https:// first and reject
  any remaining non-ASCII character. Lone surrogates become U+FFFD.
- integer: non-negative finite number, floored, unsigned big-endian.
  Anything else counts as absent.
- scaledInteger: value * scale, rounded half up, clamped into
  [0, 256**size - 1] with a diagnostic when clamping was needed. A
  product too large for a float is out of range, not an error.
- colorRGBA: four comma/space separated integers, each clamped to 0-255.
- dateYMD: "YYYY-MM-DD" as year (2 bytes), month, day.
- timeHMS: "HH:MM:SS" as hour, minute, second, each clamped.

Dispatch
--------
ENCODERS and DECODERS map every FieldKind to its function. A check at
import time makes sure no kind is left without one.

Copyright (c) 2026 OpenTag3D Contributors
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union
import logging
import math
import re

from opentag3d.image.fields import (
    UNSET_BYTE,
    FieldDefinition,
    FieldKind,
    ScaledIntegerField,
    StringField,
)

# Logger for this module
logger = logging.getLogger(__name__)


class _Missing:
    """Marker for a key that is absent from the value map."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()

LogicalValue = Union[str, int, float, None]


# =============================================================================
# Codec Result
# =============================================================================

@dataclass(frozen=True)
class CodecResult:
    """
    Outcome of encoding one field.

    Attributes:
        data: The encoded bytes, or None when nothing should be written
        diagnostic: A problem worth reporting, if any
    """
    data: Optional[bytes] = None
    diagnostic: Optional[str] = None

    @property
    def skipped(self) -> bool:
        """True when the field produces no write."""
        return self.data is None

    @classmethod
    def ok(cls, data: bytes, diagnostic: Optional[str] = None) -> "CodecResult":
        return cls(data=bytes(data), diagnostic=diagnostic)

    @classmethod
    def skip(cls, diagnostic: Optional[str] = None) -> "CodecResult":
        return cls(data=None, diagnostic=diagnostic)


# =============================================================================
# Value Helpers
# =============================================================================

PROTOCOL_PREFIX = re.compile(r"^https?://", re.IGNORECASE)
COLOR_SEPARATOR = re.compile(r"[,\s]+")
LEADING_INTEGER = re.compile(r"^\s*([+-]?[0-9]+)")
DATE_PATTERN = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
TIME_PATTERN = re.compile(r"([0-9]{2}):([0-9]{2}):([0-9]{2})")
LONE_SURROGATE = re.compile("[\ud800-\udfff]")


def as_text(value: Any) -> str:
    """
    Render a logical value as text.

    Whole floats lose their ".0" so that a numeric 1000 entered as 1000.0
    still reads as "1000".
    """
    if value is None or value is MISSING:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def as_number(value: Any) -> Optional[Union[int, float]]:
    """
    Parse a logical value as a finite number.

    Python ints are returned unchanged, so integers too large for a float
    stay exact.

    Returns:
        The number, or None for empty, unparsable or non-finite input
    """
    if value is None or value is MISSING:
        return None
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        number = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def round_half_up(number: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(number + 0.5)


def scale_value(number: Union[int, float], scale: float) -> Union[int, float]:
    """
    Multiply by a field's scale and round half up.

    Returns:
        The scaled integer, or +/-inf when the product does not fit a float
    """
    try:
        product = number * scale
    except OverflowError:
        # Huge int times a fractional scale
        return math.inf if number > 0 else -math.inf
    if isinstance(product, int):
        return product
    if not math.isfinite(product):
        return product
    return round_half_up(product)


def clamp(number: int, low: int, high: int) -> int:
    return max(low, min(high, number))


def pack_unsigned(number: int, size: int) -> bytes:
    """
    Pack a non-negative integer as big-endian in exactly `size` bytes.

    Bits above size*8 are dropped.
    """
    mask = (1 << (8 * size)) - 1
    return (number & mask).to_bytes(size, "big")


def unset_bytes(field: FieldDefinition) -> bytes:
    """The 0xFF fill used for an explicitly unset field."""
    return bytes([UNSET_BYTE]) * field.size


# =============================================================================
# Encoders
# =============================================================================

def encode_string(field: StringField, value: Any) -> CodecResult:
    text = as_text(value)

    if field.ascii_only:
        text = PROTOCOL_PREFIX.sub("", text, count=1)
        if not text.isascii():
            return CodecResult.skip(
                f"{field.label}: Non-ASCII character detected in an ASCII-only field"
            )

    # Lone surrogates cannot be encoded; each becomes U+FFFD
    text = LONE_SURROGATE.sub("\ufffd", text)
    encoded = text.encode("utf-8")[:field.size]
    return CodecResult.ok(encoded.ljust(field.size, b"\x00"))


def encode_integer(field: FieldDefinition, value: Any) -> CodecResult:
    number = as_number(value)
    if number is None or number < 0:
        return CodecResult.skip()

    whole = math.floor(number)
    if whole >= 256 ** field.size:
        logger.debug(f"{field.key}: value truncated to {field.size} byte(s)")
    return CodecResult.ok(pack_unsigned(whole, field.size))


def encode_scaled_integer(field: ScaledIntegerField, value: Any) -> CodecResult:
    number = as_number(value)
    if number is None:
        return CodecResult.skip()

    scaled = scale_value(number, field.scale)
    max_value = 256 ** field.size - 1
    diagnostic = None
    if scaled < 0 or scaled > max_value:
        diagnostic = (
            f"{field.label} scaled value {scaled} does not fit in {field.size} byte(s)"
        )
        scaled = 0 if scaled < 0 else max_value
    return CodecResult.ok(pack_unsigned(scaled, field.size), diagnostic)


def _leading_int(token: str) -> int:
    match = LEADING_INTEGER.match(token)
    return int(match.group(1)) if match else 0


def encode_color(field: FieldDefinition, value: Any) -> CodecResult:
    text = as_text(value).strip()
    if not text:
        return CodecResult.skip()

    parts = [p for p in COLOR_SEPARATOR.split(text) if p]
    if len(parts) != 4:
        return CodecResult.skip(
            f"{field.label} must be 4 integers (e.g., 255,166,77,255)"
        )

    return CodecResult.ok(bytes(clamp(_leading_int(p), 0, 255) for p in parts))


def encode_date(field: FieldDefinition, value: Any) -> CodecResult:
    text = as_text(value).strip()
    if not text:
        return CodecResult.skip()

    match = DATE_PATTERN.fullmatch(text)
    if not match:
        return CodecResult.skip(f"{field.label} must be YYYY-MM-DD")

    year, month, day = (int(g) for g in match.groups())
    # No calendar check beyond the ranges; Feb 30 is accepted
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        return CodecResult.skip(f"{field.label} has an invalid date")

    return CodecResult.ok(pack_unsigned(year, 2) + bytes([month, day]))


def encode_time(field: FieldDefinition, value: Any) -> CodecResult:
    text = as_text(value).strip()
    if not text:
        return CodecResult.skip()

    match = TIME_PATTERN.fullmatch(text)
    if not match:
        return CodecResult.skip(f"{field.label} must be HH:MM:SS")

    hours, minutes, seconds = (int(g) for g in match.groups())
    return CodecResult.ok(bytes([
        clamp(hours, 0, 23),
        clamp(minutes, 0, 59),
        clamp(seconds, 0, 59),
    ]))


ENCODERS: dict[FieldKind, Callable[[Any, Any], CodecResult]] = {
    FieldKind.STRING: encode_string,
    FieldKind.INTEGER: encode_integer,
    FieldKind.SCALED_INTEGER: encode_scaled_integer,
    FieldKind.COLOR_RGBA: encode_color,
    FieldKind.DATE_YMD: encode_date,
    FieldKind.TIME_HMS: encode_time,
}


def encode_value(field: FieldDefinition, value: Any = MISSING) -> CodecResult:
    """
    Encode one field's logical value.

    This is the single entry point used by the layout assembler. It
    applies the unset rule and the absent-key rule before dispatching to
    the kind's encoder.

    Args:
        field: The field definition
        value: The logical value, None for "unset", or MISSING when the key
            was not supplied at all

    Returns:
        A CodecResult; never raises for bad values

    Example:
        >>> encode_value(get_field("diameter"), 1.75).data.hex()
        '06d6'
    """
    if value is None:
        return CodecResult.ok(unset_bytes(field))

    if value is MISSING:
        if field.kind is not FieldKind.STRING:
            return CodecResult.skip()
        value = ""

    result = ENCODERS[field.kind](field, value)
    if result.skipped:
        logger.debug(f"{field.key}: skipped ({result.diagnostic or 'no value'})")
    return result


# =============================================================================
# Decoders
# =============================================================================

def decode_string(field: FieldDefinition, data: bytes) -> str:
    return data.rstrip(b"\x00").decode("utf-8", errors="replace")


def decode_integer(field: FieldDefinition, data: bytes) -> int:
    return int.from_bytes(data, "big")


def scale_precision(scale: float) -> int:
    """Decimal places a scale factor can represent (1000 -> 3, 0.2 -> 0)."""
    if scale <= 1:
        return 0
    return max(0, math.ceil(math.log10(scale) - 1e-9))


def decode_scaled_integer(field: ScaledIntegerField, data: bytes) -> Union[int, float]:
    raw = int.from_bytes(data, "big")
    digits = scale_precision(field.scale)
    value = round(raw / field.scale, digits)
    if digits == 0:
        return int(value)
    return value


def decode_color(field: FieldDefinition, data: bytes) -> str:
    return ",".join(str(b) for b in data)


def decode_date(field: FieldDefinition, data: bytes) -> str:
    year = int.from_bytes(data[0:2], "big")
    return f"{year:04d}-{data[2]:02d}-{data[3]:02d}"


def decode_time(field: FieldDefinition, data: bytes) -> str:
    return f"{data[0]:02d}:{data[1]:02d}:{data[2]:02d}"


DECODERS: dict[FieldKind, Callable[[Any, bytes], LogicalValue]] = {
    FieldKind.STRING: decode_string,
    FieldKind.INTEGER: decode_integer,
    FieldKind.SCALED_INTEGER: decode_scaled_integer,
    FieldKind.COLOR_RGBA: decode_color,
    FieldKind.DATE_YMD: decode_date,
    FieldKind.TIME_HMS: decode_time,
}


def is_unset(data: bytes) -> bool:
    """True when every byte carries the unset marker."""
    return len(data) > 0 and all(b == UNSET_BYTE for b in data)


def decode_value(field: FieldDefinition, data: bytes) -> LogicalValue:
    """
    Decode a field's bytes back to a logical value.

    A range made only of 0xFF decodes as None. This is ambiguous for
    fields where 0xFF...FF is also a legal value (a 1-byte integer of 255,
    an opaque white color); the tag format has no way to tell them apart.

    Args:
        field: The field definition
        data: Exactly field.size bytes

    Returns:
        The decoded value, or None for an unset field

    Raises:
        ValueError: If `data` has the wrong length
    """
    if len(data) != field.size:
        raise ValueError(
            f"{field.key} expects {field.size} bytes, got {len(data)}"
        )
    if is_unset(data):
        return None
    return DECODERS[field.kind](field, data)


def _check_dispatch() -> None:
    missing = [k.value for k in FieldKind if k not in ENCODERS or k not in DECODERS]
    if missing:
        raise RuntimeError(f"No codec registered for kind(s): {', '.join(missing)}")


_check_dispatch()
