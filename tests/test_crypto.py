from datetime import datetime, timezone
from hashlib import md5

import pytest

from wwsvc.common.crypto import SignedEnvelope, http_date, sign

TS = "Sun, 18 Oct 2026 12:00:00 GMT"


def test_sign_is_deterministic():
    """Same inputs always produce the same hash."""
    assert sign("s3cr3t", "tkt-123", TS) == sign("s3cr3t", "tkt-123", TS)


def test_sign_matches_md5_over_concatenation():
    expected = md5(("s3cr3t" + "tkt-123" + TS).encode("cp1252")).hexdigest()
    assert sign("s3cr3t", "tkt-123", TS) == expected


@pytest.mark.parametrize(
    "args",
    [
        ("S3cr3t", "tkt-123", TS),
        ("s3cr3t", "tkt-124", TS),
        ("s3cr3t", "tkt-123", "Sun, 18 Oct 2026 12:00:01 GMT"),
    ],
)
def test_sign_changes_with_each_input(args):
    assert sign(*args) != sign("s3cr3t", "tkt-123", TS)


def test_sign_without_ticket_omits_it():
    """An absent ticket contributes nothing, it is not rendered as 'None'."""
    assert sign("s3cr3t", None, TS) == sign("s3cr3t", "", TS)
    assert sign("s3cr3t", None, TS) != sign("s3cr3t", "None", TS)


def test_sign_is_lowercase_hex():
    signature = sign("s3cr3t", "tkt-123", TS)
    assert len(signature) == 32
    assert signature == signature.lower()
    int(signature, 16)


def test_sign_uses_cp1252_for_umlauts():
    expected = md5(("gehe1m-ä" + TS).encode("cp1252")).hexdigest()
    assert sign("gehe1m-ä", None, TS) == expected


def test_http_date_format():
    moment = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)
    assert http_date(moment) == TS


def test_http_date_assumes_utc_for_naive_datetimes():
    assert http_date(datetime(2026, 10, 18, 12, 0, 0)) == TS


def test_envelope_headers_with_ticket():
    moment = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)
    envelope = SignedEnvelope.create("s3cr3t", "tkt-123", 1, request_id=7, now=moment)

    assert envelope.timestamp == TS
    assert envelope.signature == sign("s3cr3t", "tkt-123", TS)
    assert envelope.as_headers() == {
        "WWSVC-TS": TS,
        "WWSVC-HASH": envelope.signature,
        "WWSVC-REQID": "7",
    }


def test_envelope_headers_without_ticket_skip_request_id():
    envelope = SignedEnvelope.create("s3cr3t", None, 1)
    headers = envelope.as_headers()

    assert "WWSVC-REQID" not in headers
    assert headers["WWSVC-HASH"] == sign("s3cr3t", None, headers["WWSVC-TS"])
