"""
Keyed digests for the gateway's request/response signing protocol.

The gateway signs with SHA-512 over pipe-joined fields in a fixed order.
The protocol is positional: every slot keeps its separator even when empty,
so a missing ``|`` shifts every later field and the digest no longer
matches. Nothing in this module touches the database or the network.

Wire formats (canonical, 10 UDF slots):
    forward: key|txnid|amount|productinfo|firstname|email|udf1|...|udf10|salt
    reverse: salt|status|udf10|...|udf1|email|firstname|productinfo|amount|txnid|key

Legacy layout (5 UDF slots), still accepted when verifying callbacks:
    forward: key|txnid|amount|productinfo|firstname|email|udf1|...|udf5|||||salt
    reverse: salt|status||||udf5|...|udf1|email|firstname|productinfo|amount|txnid|key

Usage:
    from payments import hashing

    digest = hashing.build_forward_digest(
        key="K1", txnid="TXN1", amount="100", productinfo="Order",
        firstname="John", email="j@x.com", udfs=("M123", "ORD-9"), salt="S1",
    )

    layout = hashing.verify_reverse_digest(
        payload["hash"], salt=salt, status=payload["status"], ...
    )
    if layout is None:
        ...  # record HASH_MISMATCH
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from payments.state_machines import HashLayout

SEPARATOR = "|"
UDF_SLOTS = 10
LEGACY_UDF_SLOTS = 5

# Empty slots the legacy layouts keep between the UDFs and the next field
_LEGACY_FORWARD_PADDING = 4
_LEGACY_REVERSE_PADDING = 3

_TWO_PLACES = Decimal("0.01")

Udfs = tuple[str, ...]


def normalize_udfs(udfs: Iterable[str | None] | None = None, slots: int = UDF_SLOTS) -> Udfs:
    """
    Return exactly ``slots`` UDF strings, padding with empty strings.

    None becomes "" so absent and empty slots hash identically.

    Raises:
        ValueError: More values than slots (a caller bug, not a payload issue)
    """
    values = ["" if value is None else str(value) for value in (udfs or ())]
    if len(values) > slots:
        raise ValueError(f"Expected at most {slots} UDF values, got {len(values)}")
    return tuple(values + [""] * (slots - len(values)))


def format_amount(amount: Decimal | str | int | float | None) -> str:
    """
    Render an amount the way the gateway hashes it: two fraction digits.

    ``100`` → ``"100.00"``, ``"99.5"`` → ``"99.50"``, None → ``""``. A value
    that is not a number is returned stripped and unchanged, so the digest
    simply fails to match instead of raising.
    """
    if amount is None:
        return ""
    text = str(amount).strip()
    if not text:
        return ""
    try:
        value = Decimal(text)
    except InvalidOperation:
        return text
    if not value.is_finite():
        return text
    try:
        return f"{value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP):f}"
    except InvalidOperation:
        return text


def _digest(fields: Sequence[str | None]) -> str:
    payload = SEPARATOR.join("" if value is None else str(value) for value in fields)
    return hashlib.sha512(payload.encode("utf-8")).hexdigest()


# =============================================================================
# Canonical layout
# =============================================================================


def build_forward_digest(
    key: str | None,
    txnid: str | None,
    amount: Decimal | str | None,
    productinfo: str | None,
    firstname: str | None,
    email: str | None,
    udfs: Iterable[str | None] | None = None,
    salt: str | None = None,
) -> str:
    """
    Digest authorizing an outbound initiation request.

    Returns:
        128-character lowercase hex SHA-512 of
        ``key|txnid|amount|productinfo|firstname|email|udf1..udf10|salt``
    """
    return _digest(
        [key, txnid, format_amount(amount), productinfo, firstname, email]
        + list(normalize_udfs(udfs))
        + [salt]
    )


def build_reverse_digest(
    salt: str | None,
    status: str | None,
    udfs: Iterable[str | None] | None,
    email: str | None,
    firstname: str | None,
    productinfo: str | None,
    amount: Decimal | str | None,
    txnid: str | None,
    key: str | None,
) -> str:
    """
    Digest the gateway puts on its callbacks.

    ``udfs`` is given in natural order (udf1 first); the digest uses them
    in reverse, ``salt|status|udf10..udf1|email|firstname|productinfo|amount|txnid|key``.
    """
    return _digest(
        [salt, status]
        + list(reversed(normalize_udfs(udfs)))
        + [email, firstname, productinfo, format_amount(amount), txnid, key]
    )


# =============================================================================
# Legacy layout
# =============================================================================


def build_legacy_forward_digest(
    key: str | None,
    txnid: str | None,
    amount: Decimal | str | None,
    productinfo: str | None,
    firstname: str | None,
    email: str | None,
    udfs: Iterable[str | None] | None = None,
    salt: str | None = None,
) -> str:
    """Forward digest in the 5-slot layout (udf1..udf5 then four empty fields)."""
    return _digest(
        [key, txnid, format_amount(amount), productinfo, firstname, email]
        + list(normalize_udfs(udfs, LEGACY_UDF_SLOTS))
        + [""] * _LEGACY_FORWARD_PADDING
        + [salt]
    )


def build_legacy_reverse_digest(
    salt: str | None,
    status: str | None,
    udfs: Iterable[str | None] | None,
    email: str | None,
    firstname: str | None,
    productinfo: str | None,
    amount: Decimal | str | None,
    txnid: str | None,
    key: str | None,
) -> str:
    """
    Reverse digest in the 5-slot layout.

    Three empty fields then udf5..udf1: eight slots between status and
    email. With no UDFs set this is the historical all-empty form.
    """
    return _digest(
        [salt, status]
        + [""] * _LEGACY_REVERSE_PADDING
        + list(reversed(normalize_udfs(udfs, LEGACY_UDF_SLOTS)))
        + [email, firstname, productinfo, format_amount(amount), txnid, key]
    )


# =============================================================================
# Verification
# =============================================================================


def verify(candidate: str | None, expected: str | None) -> bool:
    """
    Case-insensitive digest comparison in constant time.

    Empty or missing digests never verify.
    """
    if not candidate or not expected:
        return False
    return hmac.compare_digest(
        candidate.strip().lower().encode("utf-8"),
        expected.strip().lower().encode("utf-8"),
    )


def verify_reverse_digest(
    candidate: str | None,
    *,
    salt: str | None,
    status: str | None,
    udfs: Iterable[str | None] | None,
    email: str | None,
    firstname: str | None,
    productinfo: str | None,
    amount: Decimal | str | None,
    txnid: str | None,
    key: str | None,
) -> HashLayout | None:
    """
    Authenticate a callback against both reverse layouts.

    The canonical layout is tried first. The legacy layout is only tried
    when the callback carries nothing beyond udf5, because it cannot
    represent udf6..udf10.

    Returns:
        The HashLayout that matched, or None for a hash mismatch
    """
    udf_values = normalize_udfs(udfs)
    fields = dict(
        salt=salt,
        status=status,
        email=email,
        firstname=firstname,
        productinfo=productinfo,
        amount=amount,
        txnid=txnid,
        key=key,
    )

    if verify(candidate, build_reverse_digest(udfs=udf_values, **fields)):
        return HashLayout.STANDARD

    if not any(udf_values[LEGACY_UDF_SLOTS:]) and verify(
        candidate,
        build_legacy_reverse_digest(udfs=udf_values[:LEGACY_UDF_SLOTS], **fields),
    ):
        return HashLayout.LEGACY

    return None
