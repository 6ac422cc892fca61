"""Tests for registration request parsing and validation."""

import pytest

from fakes import make_registration, make_remix
from manna_art.catalog.schemas import IPType
from manna_art.errors import ValidationError
from manna_art.registration.requests import (
    MISSING_FIELDS,
    parse_license_fee,
    parse_revenue_share,
)


class TestLicenseFee:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, 0),
            ("", 0),
            ("  ", 0),
            ("0", 0),
            ("1", 1_000_000),
            ("0.5", 500_000),
            ("12.345678", 12_345_678),
            ("0.0000019", 1),
            ("0.0000001", 0),
            ("1000000000", 1_000_000_000_000_000),
        ],
    )
    def test_converts_to_micro_units(self, raw, expected):
        assert parse_license_fee(raw) == expected

    @pytest.mark.parametrize(
        "raw", ["-1", "abc", "NaN", "Infinity", "1e999999", "1000000000.01"]
    )
    def test_rejects_invalid(self, raw):
        with pytest.raises(ValidationError):
            parse_license_fee(raw)


class TestRevenueShare:
    def test_default(self):
        assert parse_revenue_share(None, 10) == 10
        assert parse_revenue_share("", 0) == 0

    def test_truncates(self):
        assert parse_revenue_share("12.9", 0) == 12

    @pytest.mark.parametrize(
        "raw", ["-5", "101", "100.5", "-0.5", "diez", "1e999999", "1e5000000"]
    )
    def test_rejects_out_of_range(self, raw):
        with pytest.raises(ValidationError):
            parse_revenue_share(raw, 0)


class TestRegistrationRequest:
    def test_valid_form(self):
        request = make_registration(title="  Amanecer  ", ip_type="IMAGE")

        assert request.title == "Amanecer"
        assert request.ip_type is IPType.IMAGE
        assert request.license_fee == 0
        assert request.commercial_rev_share == 0

    @pytest.mark.parametrize(
        "missing", ["email", "title", "description", "ip_type", "wallet_address"]
    )
    def test_missing_field(self, missing):
        with pytest.raises(ValidationError) as exc_info:
            make_registration(**{missing: None})
        assert exc_info.value.message == MISSING_FIELDS

    def test_missing_file(self):
        with pytest.raises(ValidationError, match=MISSING_FIELDS):
            make_registration(file=None)

    def test_empty_file(self):
        with pytest.raises(ValidationError):
            make_registration(file=b"")

    def test_invalid_ip_type(self):
        with pytest.raises(ValidationError, match="ipType"):
            make_registration(ip_type="painting")

    def test_3d_ip_type(self):
        assert make_registration(ip_type="3d").ip_type is IPType.MODEL_3D

    def test_default_content_type(self):
        assert make_registration(content_type=None).content_type == "application/octet-stream"


class TestRemixRequest:
    def test_email_is_optional(self):
        request = make_remix(email=None)
        assert request.email is None
        assert request.parent_ip_id == "0xP"

    def test_default_rev_share(self):
        assert make_remix().commercial_rev_share == 10

    def test_missing_parent(self):
        with pytest.raises(ValidationError, match=MISSING_FIELDS):
            make_remix(parent_ip_id="")
