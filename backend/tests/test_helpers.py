"""
Tests des helpers purs: téléphone VN, codes métier, liens Google Drive
"""

import re

import pytest

from config import normalize_phone_vn, generate_code
from services.google_drive import parse_file_url, parse_multiple, extract_file_id, thumbnail_url

DRIVE_ID = "1AbCdEfGhIjKlMnOpQrStUvWxYz012345"


class TestPhoneNormalization:

    @pytest.mark.parametrize("raw, expected", [
        ("0901234567", "0901234567"),
        ("090 123 4567", "0901234567"),
        ("090.123.4567", "0901234567"),
        ("+84 901 234 567", "0901234567"),
        ("84901234567", "0901234567"),
        ("0084901234567", "0901234567"),
        ("02838123456", "02838123456"),
    ])
    def test_valid_numbers(self, raw, expected):
        status, normalized = normalize_phone_vn(raw)
        assert status == "valid"
        assert normalized == expected

    @pytest.mark.parametrize("raw", [
        "",
        "   ",
        "abc",
        "12345",
        "901234567",
        "090123456789",
        "0000000000",
    ])
    def test_invalid_numbers(self, raw):
        status, message = normalize_phone_vn(raw)
        assert status == "invalid"
        assert message


class TestGenerateCode:

    def test_prefix_and_shape(self):
        code = generate_code("DH")
        assert re.match(r"^DH[0-9A-Z]+$", code)
        assert len(code) > 6

    def test_codes_differ(self):
        assert len({generate_code("KH") for _ in range(50)}) > 1


class TestGoogleDrive:

    @pytest.mark.parametrize("raw", [
        f"https://drive.google.com/file/d/{DRIVE_ID}/view?usp=sharing",
        f"https://lh3.googleusercontent.com/d/{DRIVE_ID}",
        f"https://drive.google.com/open?id={DRIVE_ID}",
        f"https://drive.google.com/uc?export=download&id={DRIVE_ID}",
        DRIVE_ID,
        f"  {DRIVE_ID}\u200b ",
        f"https%3A%2F%2Fdrive.google.com%2Ffile%2Fd%2F{DRIVE_ID}%2Fview",
    ])
    def test_extracts_id(self, raw):
        assert extract_file_id(raw) == DRIVE_ID

    @pytest.mark.parametrize("raw", ["", "hello", "https://example.com/image.png", "short_id"])
    def test_rejects_unknown(self, raw):
        assert parse_file_url(raw) is None

    def test_urls(self):
        parsed = parse_file_url(DRIVE_ID)
        assert parsed["thumbnail_url"] == f"https://drive.google.com/thumbnail?id={DRIVE_ID}&sz=w400"
        assert parsed["view_url"] == f"https://drive.google.com/file/d/{DRIVE_ID}/view"

    def test_thumbnail_size(self):
        assert thumbnail_url("abc", size=1200).endswith("sz=w1200")

    def test_parse_multiple_skips_invalid(self):
        parsed = parse_multiple([DRIVE_ID, "nope", f"https://drive.google.com/file/d/{DRIVE_ID}/view"])
        assert [p["file_id"] for p in parsed] == [DRIVE_ID, DRIVE_ID]
