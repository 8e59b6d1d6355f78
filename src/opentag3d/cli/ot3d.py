"""
ot3d - OpenTag3D Tag Image Command-Line Interface
=================================================

This module implements the command-line interface for the OpenTag3D tag
image builder. It encodes filament values into NTAG memory images and
inspects existing images.

Commands
--------
- **encode**: Build a binary image plus JSON and CSV address maps
- **dump**: Print the hex preview of the image a values file produces
- **fields**: List the field catalog
- **template**: Print an example values file
- **decode**: Decode a binary image back into values

Values Files
------------
A values file is a JSON object mapping field keys to strings, numbers,
or null. null marks a field as explicitly unknown and fills it with 0xFF;
leaving a key out means "no value".

    {
      "tagFormat": "OT",
      "tagVersion": "1.000",
      "diameter": 1.75,
      "serial": null
    }

Usage Examples
--------------
Start from the example spool:
    $ ot3d template -t NTAG215 > spool.json

Build the image and maps:
    $ ot3d encode spool.json -t NTAG215 -o out/

Fail on any diagnostic (for CI):
    $ ot3d encode spool.json --strict

Inspect an image:
    $ ot3d decode out/opentag3d_NTAG215_0x10-0xCA.bin

Copyright (c) 2026 OpenTag3D Contributors
"""

import json
import logging
from pathlib import Path
from typing import Optional

import click

from opentag3d import __version__
from opentag3d.cli.errors import fail, handle_cli_exception
from opentag3d.config import EncoderConfig
from opentag3d.errors import TagTypeError, ValuesFileError
from opentag3d.image import (
    DEFAULT_VALUES,
    START_ADDRESS,
    EncodeResult,
    TagImageParser,
    TagType,
    active_fields,
    all_fields,
    encode_tag,
    format_address,
    hex_dump,
    write_artifacts,
)


# =============================================================================
# Tag Type Parameter Type
# =============================================================================

class TagTypeChoice(click.ParamType):
    """
    Click parameter type for tag type selection.

    Accepts: NTAG213, NTAG215, NTAG216 (case-insensitive)
    """
    name = "tag_type"

    def convert(self, value, param: Optional[click.Parameter],
                ctx: Optional[click.Context]) -> TagType:
        """Convert string to TagType."""
        if isinstance(value, TagType):
            return value
        try:
            return TagType.from_name(value)
        except TagTypeError as e:
            self.fail(str(e), param, ctx)


TAG_TYPE = TagTypeChoice()


# =============================================================================
# Helpers
# =============================================================================

def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def load_values(path: Path) -> dict:
    """
    Read a values file.

    Args:
        path: JSON file holding an object of field key -> value

    Returns:
        The value map

    Raises:
        ValuesFileError: If the file is not UTF-8 JSON, is not an object,
            or holds a value that is not a string, number or null
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise ValuesFileError("not UTF-8 text", str(path)) from e
    except ValueError as e:
        # JSONDecodeError, or an integer past the digit limit
        raise ValuesFileError(f"invalid JSON ({e})", str(path)) from e

    if not isinstance(data, dict):
        raise ValuesFileError("expected a JSON object of field values", str(path))

    for key, value in data.items():
        if isinstance(value, bool) or not isinstance(value, (str, int, float, type(None))):
            raise ValuesFileError(
                f"value of '{key}' must be a string, number or null, "
                f"not {type(value).__name__}",
                str(path),
            )
    return data


def echo_diagnostics(result: EncodeResult) -> None:
    for message in result.diagnostics:
        click.echo(f"Warning: {message}", err=True)


def describe_span(result: EncodeResult) -> str:
    return (
        f"{format_address(result.start_address)}-{format_address(result.highest_address)} "
        f"({result.span} of {result.tag_type.capacity} bytes)"
    )


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.version_option(__version__, "--version", "-V", prog_name="ot3d")
def main() -> None:
    """
    OpenTag3D tag image builder for NTAG213/215/216.

    Encode filament data into raw NFC tag memory and inspect images.

    \b
    Commands:
      encode    Build .bin image plus JSON/CSV maps
      dump      Print hex preview of an encoded image
      fields    List the field catalog
      template  Print an example values file
      decode    Decode a .bin image into values

    \b
    Examples:
      ot3d template -t NTAG215 > spool.json
      ot3d encode spool.json -t NTAG215 -o out/
      ot3d decode out/opentag3d_NTAG215_0x10-0xCA.bin
    """
    pass


# =============================================================================
# Encode Command
# =============================================================================

@main.command("encode")
@click.argument(
    "values_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-t", "--type",
    "tag_type",
    type=TAG_TYPE,
    default=None,
    help="Tag type: NTAG213, NTAG215, NTAG216 (default: NTAG213)",
)
@click.option(
    "-o", "--output",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory (default: current directory)",
)
@click.option(
    "--prefix",
    default=None,
    help="File name prefix (default: opentag3d)",
)
@click.option(
    "--strict/--no-strict",
    default=None,
    help="Exit with an error when any diagnostic is raised",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
def cmd_encode(
    values_file: Path,
    tag_type: Optional[TagType],
    output: Optional[Path],
    prefix: Optional[str],
    strict: Optional[bool],
    verbose: bool,
) -> None:
    """
    Encode a values file into a tag image and address maps.

    VALUES_FILE is a JSON object of field key -> value. Three files are
    written: the binary image and its JSON and CSV maps.

    \b
    Examples:
      ot3d encode spool.json
      ot3d encode spool.json -t NTAG215 -o out/
      ot3d encode spool.json --strict
    """
    setup_logging(verbose)
    config = EncoderConfig.from_env()
    tag_type = tag_type or config.default_tag_type
    output = output or config.output_dir
    prefix = prefix or config.filename_prefix
    strict = config.strict if strict is None else strict

    try:
        values = load_values(values_file)
        result = encode_tag(values, tag_type)
        echo_diagnostics(result)

        if result.is_empty:
            fail("No field produced any bytes; nothing written")

        paths = write_artifacts(result, output, prefix)

        if verbose:
            click.echo(f"Encoded {len(result.writes)} fields for {result.tag_type}")
            click.echo(f"  Span: {describe_span(result)}")
            for path in paths:
                click.echo(f"  Wrote {path}")
        else:
            click.echo(f"Created {paths[0]} ({len(result.image)} bytes)")

        if strict and result.diagnostics:
            fail(f"{len(result.diagnostics)} diagnostic(s) in strict mode")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Encoding")


# =============================================================================
# Dump Command
# =============================================================================

@main.command("dump")
@click.argument(
    "values_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-t", "--type",
    "tag_type",
    type=TAG_TYPE,
    default=None,
    help="Tag type: NTAG213, NTAG215, NTAG216 (default: NTAG213)",
)
def cmd_dump(values_file: Path, tag_type: Optional[TagType]) -> None:
    """
    Print the hex preview of the image a values file produces.

    \b
    Example:
      ot3d dump spool.json -t NTAG215

    \b
    Output format:
      0x10: 4F 54 03 E8 50 6F 6C 61 72 20 46 69 6C 61 6D 65
      0x20: 6E 74 00 00 50 4C 41 00 00 43 46 00 00 00 42 6C
    """
    tag_type = tag_type or EncoderConfig.from_env().default_tag_type

    try:
        result = encode_tag(load_values(values_file), tag_type)
        echo_diagnostics(result)

        if result.is_empty:
            click.echo("(empty image)")
            return

        click.echo(f"Hex preview ({result.tag_type}, {describe_span(result)}):")
        for line in hex_dump(result):
            click.echo(line)

    except Exception as e:
        handle_cli_exception(e)


# =============================================================================
# Fields Command
# =============================================================================

@main.command("fields")
@click.option(
    "-t", "--type",
    "tag_type",
    type=TAG_TYPE,
    default=None,
    help="Only list fields encoded for this tag type",
)
def cmd_fields(tag_type: Optional[TagType]) -> None:
    """
    List the OpenTag3D field catalog.

    \b
    Example:
      ot3d fields -t NTAG213
    """
    fields = active_fields(tag_type) if tag_type else all_fields()

    click.echo(f"{'Addr':<6} {'Size':>4} {'Region':<9} {'Kind':<14} {'Key':<13} Label")
    click.echo("-" * 78)
    for f in fields:
        click.echo(
            f"{format_address(f.address):<6} {f.size:>4} {f.region.value:<9} "
            f"{f.kind.value:<14} {f.key:<13} {f.label}"
        )


# =============================================================================
# Template Command
# =============================================================================

@main.command("template")
@click.option(
    "-t", "--type",
    "tag_type",
    type=TAG_TYPE,
    default=None,
    help="Only include fields encoded for this tag type (default: all)",
)
def cmd_template(tag_type: Optional[TagType]) -> None:
    """
    Print an example values file (the Polar Filament PLA spool).

    \b
    Example:
      ot3d template -t NTAG215 > spool.json
    """
    keys = [f.key for f in (active_fields(tag_type) if tag_type else all_fields())]
    values = {key: DEFAULT_VALUES.get(key) for key in keys}
    click.echo(json.dumps(values, indent=2, ensure_ascii=False))


# =============================================================================
# Decode Command
# =============================================================================

@main.command("decode")
@click.argument(
    "image_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print the decoded values as a JSON values file",
)
def cmd_decode(image_file: Path, as_json: bool) -> None:
    """
    Decode a binary tag image into field values.

    The image must start at address 0x10, as written by `ot3d encode`.

    \b
    Examples:
      ot3d decode spool.bin
      ot3d decode spool.bin --json > spool.json
    """
    try:
        parser = TagImageParser.from_file(image_file)
        values = parser.decode_all()

        if as_json:
            click.echo(json.dumps(values, indent=2, ensure_ascii=False))
            return

        hint = parser.tag_type_hint()
        click.echo(f"Image: {image_file}")
        click.echo(
            f"Span:  {format_address(START_ADDRESS)}-{format_address(parser.highest_address)} "
            f"({len(parser.data)} bytes, fits {hint})"
        )
        click.echo("-" * 40)
        for key, value in values.items():
            shown = "(unset)" if value is None else repr(value)
            click.echo(f"{key:<13} {shown}")

    except Exception as e:
        handle_cli_exception(e, error_type="Decode")


if __name__ == "__main__":
    main()
