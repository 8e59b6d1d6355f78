"""
Image Parser Unit Tests
=======================

Tests for reading encoded images back into field values.
"""

import pytest

from opentag3d.image import DEFAULT_VALUES, TagImageParser, TagType, encode_tag
from opentag3d.errors import ImageFormatError, UnknownFieldError


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def full_values() -> dict:
    values = dict(DEFAULT_VALUES)
    values.update({
        "serial": "SN-0001",
        "mfgDate": "2025-03-14",
        "mfgTime": "08:30:00",
        "coreDia": 52,
        "filLen": 330,
        "td": 1500,
    })
    return values


@pytest.fixture
def full_image(full_values) -> bytes:
    return encode_tag(full_values, TagType.NTAG215).image


# =============================================================================
# Parser Tests
# =============================================================================

class TestTagImageParser:
    """Tests for TagImageParser."""

    def test_round_trip_core(self, full_image):
        parser = TagImageParser.from_bytes(full_image)
        assert parser.decode_field("tagFormat") == "OT"
        assert parser.decode_field("tagVersion") == 1.0
        assert parser.decode_field("manufacturer") == "Polar Filament"
        assert parser.decode_field("baseMaterial") == "PLA"
        assert parser.decode_field("colorRGBA") == "255,166,77,255"
        assert parser.decode_field("diameter") == 1.75
        assert parser.decode_field("weightNom") == 1000
        assert parser.decode_field("printTemp") == 210
        assert parser.decode_field("bedTemp") == 60
        assert parser.decode_field("density") == 1.24
        assert parser.decode_field("dataUrl") == "pfil.us?i=8078-RQSR"

    def test_round_trip_extended(self, full_image):
        values = TagImageParser.from_bytes(full_image).decode_all()
        assert values["serial"] == "SN-0001"
        assert values["mfgDate"] == "2025-03-14"
        assert values["mfgTime"] == "08:30:00"
        assert values["coreDia"] == 52
        assert values["filLen"] == 330
        assert values["td"] == 1500

    def test_unset_fields_are_none(self, full_image):
        values = TagImageParser.from_bytes(full_image).decode_all()
        assert values["mfiTemp"] is None
        assert values["vRec"] is None

    def test_decode_all_catalog_order(self, full_image):
        keys = list(TagImageParser.from_bytes(full_image).decode_all())
        assert keys[0] == "tagFormat"
        assert keys[-1] == "vRec"
        assert len(keys) == 32

    def test_core_only_image(self):
        image = encode_tag(DEFAULT_VALUES, TagType.NTAG213).image
        parser = TagImageParser.from_bytes(image)
        values = parser.decode_all()
        assert "serial" not in values
        assert len(values) == 13
        with pytest.raises(KeyError):
            parser.decode_field("serial")

    def test_unknown_key(self, full_image):
        with pytest.raises(UnknownFieldError):
            TagImageParser.from_bytes(full_image).decode_field("nickname")

    def test_partial_field_not_decoded(self):
        # Image stops inside manufacturer (0x14 - 0x23)
        parser = TagImageParser.from_bytes(b"OT\x03\xE8Polar")
        assert list(parser.decode_all()) == ["tagFormat", "tagVersion"]

    def test_tag_type_hint(self, full_image):
        assert TagImageParser.from_bytes(full_image).tag_type_hint() is TagType.NTAG215
        core = encode_tag(DEFAULT_VALUES, TagType.NTAG213).image
        assert TagImageParser.from_bytes(core).tag_type_hint() is TagType.NTAG213

    def test_highest_address(self, full_image):
        assert TagImageParser.from_bytes(full_image).highest_address == 0xCA

    def test_empty_image(self):
        with pytest.raises(ImageFormatError):
            TagImageParser.from_bytes(b"")

    def test_image_too_long(self):
        TagImageParser.from_bytes(bytes(496))
        with pytest.raises(ImageFormatError):
            TagImageParser.from_bytes(bytes(497))

    def test_from_file(self, tmp_path, full_image):
        path = tmp_path / "spool.bin"
        path.write_bytes(full_image)
        assert TagImageParser.from_file(path).decode_field("serial") == "SN-0001"

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            TagImageParser.from_file(tmp_path / "missing.bin")
