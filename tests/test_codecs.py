"""
Codec Unit Tests
================

Tests for the per-kind encoders and decoders.

Test Categories
---------------
1. Unset and absent values
2. Strings (truncation, padding, ASCII-only URLs)
3. Plain and scaled integers
4. Colors, dates and times
5. Decoding and encode/decode inversion
"""

import math

import pytest

from opentag3d.image import (
    MISSING,
    FIELDS,
    Region,
    ScaledIntegerField,
    decode_value,
    encode_value,
    get_field,
)
from opentag3d.image.codecs import (
    CodecResult,
    as_number,
    as_text,
    pack_unsigned,
    round_half_up,
    scale_precision,
)


def encoded_hex(key: str, value) -> str:
    """Encode a catalog field and return its bytes as uppercase hex."""
    result = encode_value(get_field(key), value)
    assert result.data is not None, result.diagnostic
    return result.data.hex().upper()


# =============================================================================
# Unset / Absent Tests
# =============================================================================

class TestUnsetAndAbsent:
    """Tests for None (unset) versus a missing key (absent)."""

    @pytest.mark.parametrize("f", FIELDS, ids=lambda f: f.key)
    def test_none_fills_with_ff(self, f):
        """An explicit None yields exactly size bytes of 0xFF for every kind."""
        result = encode_value(f, None)
        assert result.data == b"\xFF" * f.size
        assert result.diagnostic is None

    def test_absent_string_is_empty_text(self):
        result = encode_value(get_field("manufacturer"), MISSING)
        assert result.data == bytes(16)

    @pytest.mark.parametrize("key", ["weightNom", "diameter", "colorRGBA", "mfgDate", "mfgTime"])
    def test_absent_non_string_is_skipped(self, key):
        result = encode_value(get_field(key), MISSING)
        assert result.skipped
        assert result.diagnostic is None

    def test_default_value_is_missing(self):
        assert encode_value(get_field("coreDia")).skipped


# =============================================================================
# String Tests
# =============================================================================

class TestStringCodec:
    """Tests for the string encoder."""

    def test_exact_fit(self):
        assert encode_value(get_field("tagFormat"), "OT").data == b"OT"

    def test_zero_padding(self):
        assert encode_value(get_field("baseMaterial"), "PLA").data == b"PLA\x00\x00"

    def test_silent_truncation(self):
        result = encode_value(get_field("manufacturer"), "A" * 20)
        assert result.data == b"A" * 16
        assert result.diagnostic is None

    def test_utf8_allowed_in_regular_fields(self):
        result = encode_value(get_field("colorName"), "Grün")
        assert result.data == "Grün".encode("utf-8").ljust(32, b"\x00")

    def test_lone_surrogate_replaced(self):
        # json.loads('"\\ud800"') yields an unpaired surrogate
        result = encode_value(get_field("manufacturer"), "A\ud800B")
        assert result.data == "A\ufffdB".encode("utf-8").ljust(16, b"\x00")
        assert result.diagnostic is None

    def test_number_rendered_as_text(self):
        assert encode_value(get_field("serial"), 1234.0).data == b"1234".ljust(16, b"\x00")

    def test_url_protocol_stripped(self):
        result = encode_value(get_field("dataUrl"), "https://pfil.us?i=8078-RQSR")
        assert result.data == b"pfil.us?i=8078-RQSR".ljust(32, b"\x00")

    @pytest.mark.parametrize("url", ["http://pfil.us", "HTTPS://pfil.us", "HtTp://pfil.us"])
    def test_url_protocol_case_insensitive(self, url):
        result = encode_value(get_field("dataUrl"), url)
        assert result.data == b"pfil.us".ljust(32, b"\x00")

    def test_url_protocol_only_leading(self):
        result = encode_value(get_field("dataUrl"), "a.io?u=https://b")
        assert result.data.rstrip(b"\x00") == b"a.io?u=https://b"

    def test_url_non_ascii_rejected(self):
        result = encode_value(get_field("dataUrl"), "https://pfil.us/grün")
        assert result.skipped
        assert result.diagnostic == (
            "Online Data URL (ASCII, no protocol): "
            "Non-ASCII character detected in an ASCII-only field"
        )


# =============================================================================
# Integer Tests
# =============================================================================

class TestIntegerCodec:
    """Tests for the plain integer encoder."""

    def test_big_endian(self):
        assert encoded_hex("weightNom", 1000) == "03E8"

    def test_numeric_string(self):
        assert encoded_hex("weightNom", " 1000 ") == "03E8"

    def test_floors_fractions(self):
        assert encoded_hex("weightNom", 12.9) == "000C"

    def test_zero(self):
        assert encoded_hex("coreDia", 0) == "00"

    @pytest.mark.parametrize("value", [-1, "-5", "abc", "", "   ", math.inf, math.nan, "inf"])
    def test_invalid_is_absent_without_diagnostic(self, value):
        result = encode_value(get_field("weightNom"), value)
        assert result.skipped
        assert result.diagnostic is None

    def test_high_bits_dropped(self):
        # 300 = 0x12C does not fit one byte
        assert encoded_hex("coreDia", 300) == "2C"

    def test_int_too_large_for_float(self):
        # Low 16 bits of 10**400 are zero; 2**70 + 5 keeps only the 5
        assert encoded_hex("weightNom", 10**400) == "0000"
        assert encoded_hex("weightNom", 2**70 + 5) == "0005"


class TestScaledIntegerCodec:
    """Tests for the scaled integer encoder."""

    def test_tag_version(self):
        assert encoded_hex("tagVersion", "1.000") == "03E8"

    def test_diameter_micrometres(self):
        # 1.75 mm -> 1750 um
        assert encoded_hex("diameter", 1.75) == "06D6"

    def test_temperature_divided_by_five(self):
        assert encoded_hex("printTemp", 210) == "2A"
        assert encoded_hex("bedTemp", 60) == "0C"

    def test_density(self):
        assert encoded_hex("density", 1.24) == "04D8"

    def test_round_half_up(self):
        f = ScaledIntegerField("x", "X", 0xA0, 1, Region.EXTENDED, scale=1)
        assert encode_value(f, 2.5).data == bytes([3])
        assert encode_value(f, 2.4).data == bytes([2])

    def test_too_large_is_clamped_with_diagnostic(self):
        result = encode_value(get_field("printTemp"), 1300)
        assert result.data == bytes([0xFF])
        assert result.diagnostic == "Print Temp (°C) scaled value 260 does not fit in 1 byte(s)"

    def test_negative_is_clamped_with_diagnostic(self):
        result = encode_value(get_field("diameter"), -1)
        assert result.data == bytes(2)
        assert "scaled value -1000" in result.diagnostic

    @pytest.mark.parametrize("value,expected", [(1e308, b"\xFF\xFF"), (-1e308, b"\x00\x00")])
    def test_float_overflow_is_clamped(self, value, expected):
        # 1e308 * 1000 is not a finite float
        result = encode_value(get_field("diameter"), value)
        assert result.data == expected
        assert result.diagnostic.startswith("Diameter Target (mm) scaled value ")
        assert result.diagnostic.endswith("inf does not fit in 2 byte(s)")

    def test_huge_int_is_clamped(self):
        assert encoded_hex("diameter", 10**400) == "FFFF"
        # 10**400 * 0.2 cannot be computed as a float
        result = encode_value(get_field("printTemp"), 10**400)
        assert result.data == b"\xFF"
        assert result.diagnostic == "Print Temp (°C) scaled value inf does not fit in 1 byte(s)"

    @pytest.mark.parametrize("value", ["", "abc", math.inf])
    def test_unparsable_is_absent(self, value):
        result = encode_value(get_field("diameter"), value)
        assert result.skipped
        assert result.diagnostic is None


# =============================================================================
# Color / Date / Time Tests
# =============================================================================

class TestColorCodec:
    """Tests for the RGBA encoder."""

    def test_comma_separated(self):
        assert encoded_hex("colorRGBA", "255,166,77,255") == "FFA64DFF"

    def test_whitespace_separated(self):
        assert encoded_hex("colorRGBA", " 10 20  30\t40 ") == "0A141E28"

    def test_mixed_separators(self):
        assert encoded_hex("colorRGBA", "1, 2, 3, 4") == "01020304"

    def test_tokens_clamped_and_non_numeric_zero(self):
        assert encoded_hex("colorRGBA", "300,-5,abc,7") == "FF000007"

    def test_leading_integer_used(self):
        assert encoded_hex("colorRGBA", "12.7,0,0,0") == "0C000000"

    @pytest.mark.parametrize("value", ["1,2,3", "1,2,3,4,5"])
    def test_wrong_token_count(self, value):
        result = encode_value(get_field("colorRGBA"), value)
        assert result.skipped
        assert result.diagnostic == "Color Hex RGBA [R,G,B,A] must be 4 integers (e.g., 255,166,77,255)"

    def test_empty_is_absent(self):
        result = encode_value(get_field("colorRGBA"), "  ")
        assert result.skipped
        assert result.diagnostic is None


class TestDateCodec:
    """Tests for the YYYY-MM-DD encoder."""

    def test_encode(self):
        assert encoded_hex("mfgDate", "2025-03-14") == "07E9030E"

    def test_no_calendar_validation(self):
        assert encoded_hex("mfgDate", "2025-02-30") == "07E9021E"

    @pytest.mark.parametrize("value", ["2025-13-01", "2025-00-10", "2025-01-32", "2025-01-00"])
    def test_out_of_range(self, value):
        result = encode_value(get_field("mfgDate"), value)
        assert result.skipped
        assert result.diagnostic == "Manufacture Date (YYYY-MM-DD) has an invalid date"

    @pytest.mark.parametrize("value", ["2025-3-14", "14/03/2025", "2025-03-14T00:00", "20250314"])
    def test_malformed(self, value):
        result = encode_value(get_field("mfgDate"), value)
        assert result.skipped
        assert result.diagnostic == "Manufacture Date (YYYY-MM-DD) must be YYYY-MM-DD"

    def test_surrounding_whitespace_ignored(self):
        assert encoded_hex("mfgDate", " 2024-12-31 ") == "07E80C1F"


class TestTimeCodec:
    """Tests for the HH:MM:SS encoder."""

    def test_encode(self):
        assert encoded_hex("mfgTime", "12:34:56") == "0C2238"

    def test_components_clamped(self):
        assert encoded_hex("mfgTime", "25:61:99") == "173B3B"

    @pytest.mark.parametrize("value", ["1:02:03", "12:34", "12-34-56"])
    def test_malformed(self, value):
        result = encode_value(get_field("mfgTime"), value)
        assert result.skipped
        assert result.diagnostic == "Manufacture Time (HH:MM:SS UTC) must be HH:MM:SS"


# =============================================================================
# Decoder Tests
# =============================================================================

class TestDecoders:
    """Tests for decode_value and encode/decode inversion."""

    @pytest.mark.parametrize("key,value", [
        ("weightNom", 1000),
        ("spoolEmpty", 0),
        ("td", 65534),
        ("tagVersion", 1.0),
        ("diameter", 1.75),
        ("diameter", 2.85),
        ("density", 1.24),
        ("printTemp", 210),
        ("bedTemp", 60),
        ("mfgDate", "2025-03-14"),
        ("mfgTime", "08:30:00"),
        ("colorRGBA", "255,166,77,128"),
        ("manufacturer", "Polar Filament"),
        ("dataUrl", "pfil.us?i=8078-RQSR"),
    ])
    def test_round_trip(self, key, value):
        f = get_field(key)
        assert decode_value(f, encode_value(f, value).data) == value

    def test_temperature_rounds_to_scale(self):
        f = get_field("printTemp")
        # 212 / 5 = 42.4 stores 42, which reads back as 210
        assert decode_value(f, encode_value(f, 212).data) == 210

    def test_unset_decodes_as_none(self):
        f = get_field("serial")
        assert decode_value(f, encode_value(f, None).data) is None

    def test_wrong_length(self):
        with pytest.raises(ValueError):
            decode_value(get_field("diameter"), b"\x06")


# =============================================================================
# Helper Tests
# =============================================================================

class TestHelpers:
    """Tests for the small value helpers."""

    def test_as_text(self):
        assert as_text(1000.0) == "1000"
        assert as_text(1.75) == "1.75"
        assert as_text(MISSING) == ""
        assert as_text(True) == "true"

    def test_as_number(self):
        assert as_number("1.5") == 1.5
        assert as_number(3) == 3.0
        assert as_number("") is None
        assert as_number("x") is None
        assert as_number(math.nan) is None
        assert as_number(10**400) == 10**400

    def test_round_half_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(1.5) == 2
        assert round_half_up(-2.5) == -2

    def test_pack_unsigned(self):
        assert pack_unsigned(0x03E8, 2) == b"\x03\xE8"
        assert pack_unsigned(0x1FF, 1) == b"\xFF"

    def test_scale_precision(self):
        assert scale_precision(1000) == 3
        assert scale_precision(10) == 1
        assert scale_precision(1) == 0
        assert scale_precision(0.2) == 0

    def test_codec_result(self):
        assert CodecResult.skip().skipped
        assert not CodecResult.ok(b"\x00").skipped
