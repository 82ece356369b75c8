"""
Tests for the gateway's keyed-digest protocol.

Tests cover:
- Known-answer digests for both directions
- Field order, separator stability and amount formatting
- Tamper sensitivity
- Legacy (5 UDF) layout acceptance
"""

import hashlib
from decimal import Decimal

import pytest

from payments import hashing
from payments.state_machines import HashLayout

FORWARD_LITERAL = "K1|TXN1|100.00|Order|John|j@x.com|||||||||||S1"
FORWARD_DIGEST = (
    "874ff3c9dc6ad028cdfc20765ccab668b20bff3d0b9b7ce3afdd3f6fbcad1684"
    "7cd7ede9f162807a56594cf56df0b7f5e604822d0494c230fce7d8cdd5084f80"
)
REVERSE_DIGEST = (
    "fea45e6ae550bdb13114ea9646cf51ef54b26369499dba7a0cc2c3ee16996566"
    "e30eb48449de389d7134cb590a6d5e3fb3573bc53dad0c11c30638aa0233bc1a"
)


def _forward(**overrides):
    fields = dict(
        key="K1",
        txnid="TXN1",
        amount="100.00",
        productinfo="Order",
        firstname="John",
        email="j@x.com",
        udfs=(),
        salt="S1",
    )
    fields.update(overrides)
    return hashing.build_forward_digest(**fields)


def _reverse_fields(**overrides):
    fields = dict(
        salt="S1",
        status="success",
        udfs=(),
        email="j@x.com",
        firstname="John",
        productinfo="Order",
        amount="100.00",
        txnid="TXN1",
        key="K1",
    )
    fields.update(overrides)
    return fields


# =============================================================================
# Forward Digest
# =============================================================================


class TestForwardDigest:
    def test_known_answer(self):
        """All-empty UDFs keep their separators: 16 pipes from email to salt."""
        assert FORWARD_LITERAL.count("|") == 16
        assert hashlib.sha512(FORWARD_LITERAL.encode()).hexdigest() == FORWARD_DIGEST
        assert _forward() == FORWARD_DIGEST

    def test_is_lowercase_hex_of_128_chars(self):
        digest = _forward()

        assert len(digest) == 128
        assert digest == digest.lower()
        int(digest, 16)

    def test_is_deterministic(self):
        assert _forward(udfs=("M123", "ORD-9")) == _forward(udfs=("M123", "ORD-9"))

    def test_amount_is_formatted_with_two_decimals(self):
        """100, "100" and Decimal("100.0") hash like "100.00"."""
        assert _forward(amount=100) == FORWARD_DIGEST
        assert _forward(amount="100") == FORWARD_DIGEST
        assert _forward(amount=Decimal("100.0")) == FORWARD_DIGEST

    def test_none_fields_hash_as_empty(self):
        assert _forward(udfs=[None] * 10) == FORWARD_DIGEST

    @pytest.mark.parametrize(
        "field, value",
        [
            ("key", "K2"),
            ("txnid", "TXN2"),
            ("amount", "100.01"),
            ("productinfo", "Order2"),
            ("firstname", "Jane"),
            ("email", "k@x.com"),
            ("salt", "S2"),
        ],
    )
    def test_any_field_change_changes_digest(self, field, value):
        assert _forward(**{field: value}) != FORWARD_DIGEST

    def test_udf_position_matters(self):
        """A value in udf1 must not hash like the same value in udf2."""
        assert _forward(udfs=("A",)) != _forward(udfs=("", "A"))

    def test_too_many_udfs_rejected(self):
        with pytest.raises(ValueError, match="at most 10"):
            _forward(udfs=["x"] * 11)


# =============================================================================
# Reverse Digest
# =============================================================================


class TestReverseDigest:
    def test_known_answer(self):
        literal = "S1|success|||||||||||j@x.com|John|Order|100.00|TXN1|K1"
        assert hashlib.sha512(literal.encode()).hexdigest() == REVERSE_DIGEST
        assert hashing.build_reverse_digest(**_reverse_fields()) == REVERSE_DIGEST

    def test_udfs_are_reversed(self):
        udfs = ("u1", "u2", "u3", "u4", "u5", "u6", "u7", "u8", "u9", "u10")
        literal = "S1|success|u10|u9|u8|u7|u6|u5|u4|u3|u2|u1|j@x.com|John|Order|100.00|TXN1|K1"

        digest = hashing.build_reverse_digest(**_reverse_fields(udfs=udfs))

        assert digest == hashlib.sha512(literal.encode()).hexdigest()

    def test_status_is_part_of_digest(self):
        assert hashing.build_reverse_digest(**_reverse_fields(status="failure")) != REVERSE_DIGEST


# =============================================================================
# Legacy Layout
# =============================================================================


class TestLegacyLayout:
    def test_legacy_forward_literal(self):
        literal = "K1|TXN1|100.00|Order|John|j@x.com|M1|ORD||||||||S1"

        digest = hashing.build_legacy_forward_digest(
            "K1", "TXN1", "100.00", "Order", "John", "j@x.com", udfs=("M1", "ORD"), salt="S1"
        )

        assert digest == hashlib.sha512(literal.encode()).hexdigest()

    def test_legacy_reverse_literal(self):
        literal = "S1|success|||||||ORD|M1|j@x.com|John|Order|100.00|TXN1|K1"

        digest = hashing.build_legacy_reverse_digest(**_reverse_fields(udfs=("M1", "ORD")))

        assert digest == hashlib.sha512(literal.encode()).hexdigest()

    def test_legacy_differs_from_standard_when_udfs_empty(self):
        literal = "S1|success|||||||||j@x.com|John|Order|100.00|TXN1|K1"

        digest = hashing.build_legacy_reverse_digest(**_reverse_fields())

        assert digest == hashlib.sha512(literal.encode()).hexdigest()
        assert digest != REVERSE_DIGEST

    def test_legacy_rejects_more_than_five_udfs(self):
        with pytest.raises(ValueError):
            hashing.build_legacy_reverse_digest(**_reverse_fields(udfs=["x"] * 6))


# =============================================================================
# Verification
# =============================================================================


class TestVerify:
    def test_case_insensitive(self):
        assert hashing.verify(REVERSE_DIGEST.upper(), REVERSE_DIGEST)

    @pytest.mark.parametrize("candidate", ["", None, "abc"])
    def test_empty_or_wrong_never_verifies(self, candidate):
        assert not hashing.verify(candidate, REVERSE_DIGEST)

    def test_standard_layout_accepted(self):
        fields = _reverse_fields(udfs=("M1", "ORD"))
        candidate = hashing.build_reverse_digest(**fields)

        assert hashing.verify_reverse_digest(candidate, **fields) == HashLayout.STANDARD

    def test_legacy_layout_accepted(self):
        fields = _reverse_fields(udfs=("M1", "ORD"))
        candidate = hashing.build_legacy_reverse_digest(**fields)

        assert hashing.verify_reverse_digest(candidate, **fields) == HashLayout.LEGACY

    def test_legacy_not_tried_when_upper_udfs_set(self):
        """udf6..udf10 cannot be represented in the legacy layout."""
        fields = _reverse_fields(udfs=("M1", "", "", "", "", "u6"))
        candidate = hashing.build_legacy_reverse_digest(**_reverse_fields(udfs=("M1",)))

        assert hashing.verify_reverse_digest(candidate, **fields) is None

    def test_tampered_amount_rejected(self):
        candidate = hashing.build_reverse_digest(**_reverse_fields())

        assert hashing.verify_reverse_digest(candidate, **_reverse_fields(amount="1.00")) is None

    def test_wrong_salt_rejected(self):
        candidate = hashing.build_reverse_digest(**_reverse_fields(salt="other"))

        assert hashing.verify_reverse_digest(candidate, **_reverse_fields()) is None


class TestFormatAmount:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, ""),
            ("", ""),
            ("100", "100.00"),
            ("99.5", "99.50"),
            (Decimal("10.005"), "10.01"),
            (0, "0.00"),
            ("abc", "abc"),
            ("1e30", "1e30"),
            ("1E+40", "1E+40"),
        ],
    )
    def test_format(self, value, expected):
        assert hashing.format_amount(value) == expected
