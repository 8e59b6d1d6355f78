"""
Address Map Reports
===================

Human-readable companions to a tag image: what was written where.

Formats
-------
JSON map:

    {
      "from": "0x10",
      "to": "0x8C",
      "tagType": "NTAG213",
      "entries": [
        {"address": "0x10", "key": "tagFormat", "label": "Tag Format",
         "size": 2, "dataHex": "4F54"},
        ...
      ]
    }

CSV map (key and label are quoted):

    address,key,label,size,dataHex
    0x10,"tagFormat","Tag Format",2,4F54

Entries are sorted by address. The module also names the downloadable
files and renders the 16-bytes-per-line hex preview.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Union
import json
import logging

from opentag3d.image.builder import EncodeResult
from opentag3d.image.fields import START_ADDRESS, Write, format_address

# Logger for this module
logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "opentag3d"

CSV_HEADER = "address,key,label,size,dataHex"

# Bytes per line in the hex preview
DUMP_WIDTH = 16


# =============================================================================
# Entries
# =============================================================================

@dataclass(frozen=True)
class ReportEntry:
    """One row of the address map."""
    address: str
    key: str
    label: str
    size: int
    data_hex: str

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "key": self.key,
            "label": self.label,
            "size": self.size,
            "dataHex": self.data_hex,
        }

    def to_csv_row(self) -> str:
        # Text columns are quoted with JSON string rules
        return ",".join([
            self.address,
            json.dumps(self.key, ensure_ascii=False),
            json.dumps(self.label, ensure_ascii=False),
            str(self.size),
            self.data_hex,
        ])


def build_entries(writes: Iterable[Write]) -> list[ReportEntry]:
    """
    Turn writes into address-sorted report entries.

    The sort is stable, so two writes at the same address keep their
    catalog order.
    """
    return [
        ReportEntry(
            address=format_address(w.address),
            key=w.field.key,
            label=w.field.label,
            size=len(w.data),
            data_hex=w.data.hex().upper(),
        )
        for w in sorted(writes, key=lambda w: w.address)
    ]


# =============================================================================
# Renderers
# =============================================================================

def build_map(result: EncodeResult) -> dict:
    """Return the JSON map as a plain dictionary."""
    return {
        "from": format_address(START_ADDRESS),
        "to": format_address(result.highest_address),
        "tagType": str(result.tag_type),
        "entries": [e.to_dict() for e in build_entries(result.writes)],
    }


def render_json(result: EncodeResult) -> str:
    """Serialize the address map as indented JSON."""
    return json.dumps(build_map(result), indent=2, ensure_ascii=False)


def render_csv(result: EncodeResult) -> str:
    """
    Serialize the address map as CSV.

    Returns an empty string when nothing was written.
    """
    if not result.writes:
        return ""
    rows = [CSV_HEADER]
    rows.extend(e.to_csv_row() for e in build_entries(result.writes))
    return "\n".join(rows)


def hex_dump(result: EncodeResult, width: int = DUMP_WIDTH) -> list[str]:
    """
    Render the image as hex lines, each prefixed with its address.

    Example:
        >>> hex_dump(result)[0]
        '0x10: 4F 54 03 E8 50 6F 6C 61 72 20 46 69 6C 61 6D 65'
    """
    lines = []
    for offset in range(0, len(result.image), width):
        chunk = result.image[offset:offset + width]
        data = " ".join(f"{b:02X}" for b in chunk)
        lines.append(f"{format_address(START_ADDRESS + offset)}: {data}")
    return lines


# =============================================================================
# File Names and Output
# =============================================================================

def binary_filename(result: EncodeResult, prefix: str = DEFAULT_PREFIX) -> str:
    """e.g. opentag3d_NTAG213_0x10-0x8C.bin"""
    return (
        f"{prefix}_{result.tag_type}_"
        f"{format_address(START_ADDRESS)}-{format_address(result.highest_address)}.bin"
    )


def json_filename(result: EncodeResult, prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}_{result.tag_type}_map.json"


def csv_filename(result: EncodeResult, prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}_{result.tag_type}_map.csv"


def write_artifacts(
    result: EncodeResult,
    directory: Union[str, Path],
    prefix: str = DEFAULT_PREFIX,
) -> list[Path]:
    """
    Write the binary image, JSON map and CSV map into a directory.

    Nothing is written for an empty image.

    Args:
        result: The encode result
        directory: Output directory (created if needed)
        prefix: File name prefix

    Returns:
        Paths of the files written, binary first
    """
    if result.is_empty:
        logger.info("Image is empty; no files written")
        return []

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    bin_path = directory / binary_filename(result, prefix)
    json_path = directory / json_filename(result, prefix)
    csv_path = directory / csv_filename(result, prefix)

    bin_path.write_bytes(result.image)
    json_path.write_text(render_json(result), encoding="utf-8")
    csv_path.write_text(render_csv(result), encoding="utf-8")

    logger.info(f"Wrote {bin_path} ({len(result.image)} bytes)")
    return [bin_path, json_path, csv_path]
