"""
OpenTag3D Tag Image Handling
============================

This package turns filament attributes into the raw NTAG memory image
defined by the OpenTag3D layout, and back.

This module provides:
- **Field catalog**: the fixed address map of every field
- **Codecs**: per-kind encoders and decoders
- **encode_tag / TagImageBuilder**: build images with diagnostics
- **Reports**: JSON and CSV address maps, hex preview, file names
- **TagImageParser**: decode an existing image

Quick Start
-----------
    >>> from opentag3d.image import encode_tag, render_json, TagType
    >>> result = encode_tag({"tagFormat": "OT", "tagVersion": "1.000"}, TagType.NTAG213)
    >>> result.image[:4].hex().upper()
    '4F5403E8'
    >>> print(render_json(result))
"""

from opentag3d.image.fields import (
    # Constants
    START_ADDRESS,
    CORE_START,
    CORE_END,
    EXTENDED_START,
    EXTENDED_END,
    RESERVED_START,
    RESERVED_END,
    UNSET_BYTE,
    TAG_CAPACITY,
    # Enums
    TagType,
    Region,
    FieldKind,
    # Field definitions
    FieldDefinition,
    StringField,
    IntegerField,
    ScaledIntegerField,
    ColorField,
    DateField,
    TimeField,
    Write,
    format_address,
)

from opentag3d.image.catalog import (
    FIELDS,
    DEFAULT_VALUES,
    core_fields,
    extended_fields,
    all_fields,
    active_fields,
    get_field,
    is_known_field,
    find_field_at,
    validate_catalog,
)

from opentag3d.image.codecs import (
    MISSING,
    CodecResult,
    encode_value,
    decode_value,
    ENCODERS,
    DECODERS,
)

from opentag3d.image.builder import (
    EncodeResult,
    TagImageBuilder,
    assemble,
    encode_tag,
    check_capacity,
)

from opentag3d.image.report import (
    ReportEntry,
    build_entries,
    build_map,
    render_json,
    render_csv,
    hex_dump,
    binary_filename,
    json_filename,
    csv_filename,
    write_artifacts,
)

from opentag3d.image.parser import TagImageParser

__all__ = [
    # Constants
    "START_ADDRESS",
    "CORE_START",
    "CORE_END",
    "EXTENDED_START",
    "EXTENDED_END",
    "RESERVED_START",
    "RESERVED_END",
    "UNSET_BYTE",
    "TAG_CAPACITY",
    # Enums
    "TagType",
    "Region",
    "FieldKind",
    # Field definitions
    "FieldDefinition",
    "StringField",
    "IntegerField",
    "ScaledIntegerField",
    "ColorField",
    "DateField",
    "TimeField",
    "Write",
    "format_address",
    # Catalog
    "FIELDS",
    "DEFAULT_VALUES",
    "core_fields",
    "extended_fields",
    "all_fields",
    "active_fields",
    "get_field",
    "is_known_field",
    "find_field_at",
    "validate_catalog",
    # Codecs
    "MISSING",
    "CodecResult",
    "encode_value",
    "decode_value",
    "ENCODERS",
    "DECODERS",
    # Builder
    "EncodeResult",
    "TagImageBuilder",
    "assemble",
    "encode_tag",
    "check_capacity",
    # Reports
    "ReportEntry",
    "build_entries",
    "build_map",
    "render_json",
    "render_csv",
    "hex_dump",
    "binary_filename",
    "json_filename",
    "csv_filename",
    "write_artifacts",
    # Parser
    "TagImageParser",
]
