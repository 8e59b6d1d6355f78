"""
OpenTag3D - NFC Tag Image Toolkit
=================================

This package builds the raw memory image of an OpenTag3D filament tag for
NXP NTAG213, NTAG215 and NTAG216 chips, together with JSON and CSV maps of
what was written where.

OpenTag3D stores filament data (manufacturer, material, color, diameter,
print temperatures, manufacturing metadata) at fixed byte addresses so
that any reader can interpret a spool tag without a database lookup.

Main Components
---------------
- **image**: Field catalog, codecs, image builder, reports and parser
- **cli**: The `ot3d` command-line tool
- **config**: Defaults for the command-line tool

Quick Start
-----------
Encode a spool:
    >>> from opentag3d import encode_tag, TagType
    >>> result = encode_tag({
    ...     "tagFormat": "OT",
    ...     "tagVersion": "1.000",
    ...     "manufacturer": "Polar Filament",
    ...     "diameter": 1.75,
    ... }, TagType.NTAG213)
    >>> result.diagnostics
    ()
    >>> len(result.image)
    125

Write the image and its maps:
    >>> from opentag3d import write_artifacts
    >>> write_artifacts(result, "out/")

Or use the command-line tool:
    $ ot3d template -t NTAG215 > spool.json
    $ ot3d encode spool.json -t NTAG215 -o out/
    $ ot3d decode out/opentag3d_NTAG215_0x10-0xCA.bin

Reference
---------
- OpenTag3D: https://opentag3d.info
- NTAG213/215/216 datasheet: https://www.nxp.com/docs/en/data-sheet/NTAG213_215_216.pdf

Copyright (c) 2026 OpenTag3D Contributors
"""

__version__ = "1.0.0"
__author__ = "OpenTag3D Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from opentag3d.errors import (
    OpenTag3DError,
    CatalogError,
    UnknownFieldError,
    TagTypeError,
    ImageFormatError,
    ValuesFileError,
)

from opentag3d.image import (
    TagType,
    FieldKind,
    Region,
    FieldDefinition,
    FIELDS,
    DEFAULT_VALUES,
    core_fields,
    extended_fields,
    all_fields,
    active_fields,
    get_field,
    EncodeResult,
    TagImageBuilder,
    encode_tag,
    render_json,
    render_csv,
    hex_dump,
    write_artifacts,
    TagImageParser,
)

from opentag3d.config import EncoderConfig

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Exception hierarchy
    "OpenTag3DError",
    "CatalogError",
    "UnknownFieldError",
    "TagTypeError",
    "ImageFormatError",
    "ValuesFileError",
    # Layout
    "TagType",
    "FieldKind",
    "Region",
    "FieldDefinition",
    "FIELDS",
    "DEFAULT_VALUES",
    "core_fields",
    "extended_fields",
    "all_fields",
    "active_fields",
    "get_field",
    # Encoding
    "EncodeResult",
    "TagImageBuilder",
    "encode_tag",
    # Reports
    "render_json",
    "render_csv",
    "hex_dump",
    "write_artifacts",
    # Parsing
    "TagImageParser",
    # Configuration
    "EncoderConfig",
]
