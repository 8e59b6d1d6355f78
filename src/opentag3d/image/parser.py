"""
Tag Image Parser
================

Reads a binary OpenTag3D image back into logical field values.

Images are expected in the form the encoder writes them: the first byte
is address 0x10 and the image runs contiguously up to the last populated
address. Only fields that lie completely inside the image are decoded.

Usage
-----
    >>> from opentag3d.image import TagImageParser
    >>> parser = TagImageParser.from_file("opentag3d_NTAG215_0x10-0xCA.bin")
    >>> parser.decode_field("diameter")
    1.75
    >>> parser.decode_all()["manufacturer"]
    'Polar Filament'

Unset Fields
------------
A field whose bytes are all 0xFF decodes as None. See codecs.decode_value
for the ambiguity this creates for some integer and color values.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union
import logging

from opentag3d.errors import ImageFormatError
from opentag3d.image.catalog import FIELDS, get_field
from opentag3d.image.codecs import LogicalValue, decode_value
from opentag3d.image.fields import (
    EXTENDED_END,
    START_ADDRESS,
    FieldDefinition,
    TagType,
    format_address,
)

# Logger for this module
logger = logging.getLogger(__name__)

# Longest image the layout can produce
MAX_IMAGE_LENGTH = EXTENDED_END - START_ADDRESS + 1


@dataclass
class TagImageParser:
    """
    Decodes field values from a tag image.

    Attributes:
        data: Image bytes, starting at address 0x10
    """
    data: bytes

    def __post_init__(self) -> None:
        self.data = bytes(self.data)
        if not self.data:
            raise ImageFormatError("Image is empty")
        if len(self.data) > MAX_IMAGE_LENGTH:
            raise ImageFormatError(
                f"Image is {len(self.data)} bytes; the layout ends at "
                f"{format_address(EXTENDED_END)} ({MAX_IMAGE_LENGTH} bytes from "
                f"{format_address(START_ADDRESS)})"
            )
        logger.debug(
            f"Parsing image {format_address(START_ADDRESS)}-"
            f"{format_address(self.highest_address)}"
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "TagImageParser":
        return cls(data)

    @classmethod
    def from_file(cls, filepath: Union[str, Path]) -> "TagImageParser":
        """
        Read an image from disk.

        Raises:
            ImageFormatError: If the file is empty or too long
            FileNotFoundError: If the file does not exist
        """
        return cls(Path(filepath).read_bytes())

    @property
    def highest_address(self) -> int:
        return START_ADDRESS + len(self.data) - 1

    def contains(self, f: FieldDefinition) -> bool:
        """True when every byte of the field lies inside the image."""
        return f.address >= START_ADDRESS and f.end_address <= self.highest_address

    def field_bytes(self, f: FieldDefinition) -> Optional[bytes]:
        """Return the raw bytes of a field, or None if the image is too short."""
        if not self.contains(f):
            return None
        offset = f.address - START_ADDRESS
        return self.data[offset:offset + f.size]

    def iter_fields(self) -> Iterator[FieldDefinition]:
        """Yield the catalog fields that lie completely inside the image."""
        return (f for f in FIELDS if self.contains(f))

    def decode_field(self, key: str) -> LogicalValue:
        """
        Decode one field.

        Args:
            key: Field key from the catalog

        Returns:
            The logical value, or None when the field is unset

        Raises:
            UnknownFieldError: If the key is not in the catalog
            KeyError: If the field is not inside the image
        """
        f = get_field(key)
        data = self.field_bytes(f)
        if data is None:
            raise KeyError(
                f"{key} ({format_address(f.address)}) lies outside the image"
            )
        return decode_value(f, data)

    def decode_all(self) -> dict[str, LogicalValue]:
        """Decode every field the image covers, in catalog order."""
        return {f.key: decode_value(f, self.field_bytes(f)) for f in self.iter_fields()}

    def tag_type_hint(self) -> Optional[TagType]:
        """Smallest tag type that can hold this image."""
        return TagType.smallest_for(len(self.data))
