"""Request signing for the WEBSERVICES pass protocol.

The server recomputes the hash from its own copy of the secret, the service
pass and the ``WWSVC-TS`` header, so the concatenation order, the cp1252
encoding and the lowercase hex rendering are all part of the wire contract.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime

from cryptography.hazmat.primitives import hashes

SIGNATURE_ENCODING = "cp1252"


def http_date(now: datetime | None = None) -> str:
    """Format a moment as an IMF-fixdate, e.g. ``Sun, 18 Oct 2026 12:00:00 GMT``."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return format_datetime(now.astimezone(timezone.utc), usegmt=True)


def sign(secret: str, ticket: str | None, timestamp: str) -> str:
    """Compute the request hash over secret, service pass and timestamp.

    An absent ticket contributes nothing to the hashed material.
    """
    material = secret + (ticket or "") + timestamp
    digest = hashes.Hash(hashes.MD5())
    digest.update(material.encode(SIGNATURE_ENCODING, errors="xmlcharrefreplace"))
    return digest.finalize().hex()


@dataclass(frozen=True)
class SignedEnvelope:
    """Authentication material for exactly one outgoing request."""

    timestamp: str
    signature: str
    revision: int
    request_id: int = 0
    ticket: str | None = None

    @classmethod
    def create(
        cls,
        secret: str,
        ticket: str | None,
        revision: int,
        request_id: int = 0,
        now: datetime | None = None,
    ) -> SignedEnvelope:
        """Capture a fresh timestamp and sign it."""
        timestamp = http_date(now)
        return cls(
            timestamp=timestamp,
            signature=sign(secret, ticket, timestamp),
            revision=revision,
            request_id=request_id,
            ticket=ticket,
        )

    def as_headers(self) -> dict[str, str]:
        headers = {
            "WWSVC-TS": self.timestamp,
            "WWSVC-HASH": self.signature,
        }
        if self.ticket is not None:
            headers["WWSVC-REQID"] = str(self.request_id)
        return headers
