"""
AWS SigV4 header derivation for Cost Explorer requests.

This module turns a set of request arguments and one UTC instant into the
complete header set AWS accepts for the request. The computation is pure: the
clock is read once per call (or the instant is passed in), and nothing is
cached between calls.

Usage:
    from cloubil.auth import SigV4Signer
    from cloubil.operations import COST_AND_USAGE

    signer = SigV4Signer(COST_AND_USAGE)
    headers = signer.compute_headers(args)
    httpx.post(COST_AND_USAGE.url, headers=headers.as_http_headers(), content=args.payload_bytes)

    # Frozen time for reproducible signatures
    headers = signer.compute_headers(args, now=datetime.datetime(2023, 1, 1, tzinfo=datetime.timezone.utc))
"""

import datetime
import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from ..operations import AWSArgs, COST_AND_USAGE, SupportedOperation
from .errors import (
    ClockError,
    SigningPrimitiveError,
    UnsupportedServiceError,
)

logger = logging.getLogger(__name__)

ALGORITHM = "AWS4-HMAC-SHA256"
AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
DATE_STAMP_FORMAT = "%Y%m%d"
SCOPE_TERMINATOR = "aws4_request"

# Fixed order, shared by the canonical-headers block and the SignedHeaders list
SIGNED_HEADERS = ("content-length", "content-type", "host", "x-amz-date")
SECURITY_TOKEN_HEADER = "x-amz-security-token"

Clock = Callable[[], datetime.datetime]


def utc_now() -> datetime.datetime:
    """Default clock: the current instant in UTC."""
    return datetime.datetime.now(datetime.timezone.utc)


# ---------------------------------------------------------------------------
# Hash/HMAC primitive
# ---------------------------------------------------------------------------

def hmac_sha256(key: bytes, message: bytes) -> bytes:
    """Create HMAC-SHA256 signature."""
    try:
        return hmac.new(key, message, hashlib.sha256).digest()
    except TypeError as e:
        raise SigningPrimitiveError(f"HMAC-SHA256 input must be bytes: {e}", stage="hmac", cause=e) from e


def sha256(message: bytes) -> bytes:
    try:
        return hashlib.sha256(message).digest()
    except TypeError as e:
        raise SigningPrimitiveError(f"SHA-256 input must be bytes: {e}", stage="hash", cause=e) from e


def sha256_hex(message: bytes) -> str:
    return sha256(message).hex()


# ---------------------------------------------------------------------------
# Timestamp
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SigningTimestamp:
    """One UTC instant rendered in both formats SigV4 needs."""
    instant: datetime.datetime

    @classmethod
    def from_datetime(cls, now: datetime.datetime) -> "SigningTimestamp":
        """
        Validate and normalize an instant to UTC.

        Args:
            now: A timezone-aware datetime

        Returns:
            SigningTimestamp for the same instant in UTC

        Raises:
            ClockError: If ``now`` is not a datetime or carries no timezone
        """
        if not isinstance(now, datetime.datetime):
            raise ClockError(f"Clock returned {type(now).__name__}, expected datetime")
        if now.tzinfo is None or now.utcoffset() is None:
            raise ClockError("Clock returned a naive datetime; signing requires an aware UTC instant")
        return cls(instant=now.astimezone(datetime.timezone.utc))

    @property
    def amz_date(self) -> str:
        return self.instant.strftime(AMZ_DATE_FORMAT)

    @property
    def date_stamp(self) -> str:
        return self.instant.strftime(DATE_STAMP_FORMAT)


# ---------------------------------------------------------------------------
# Signing key derivation chain
# ---------------------------------------------------------------------------

def get_signature_key(secret_key: str, date_stamp: str, region: str, service: str) -> bytes:
    """
    Derive the signing key for SigV4.

    Each step feeds its raw digest into the next; nothing is hex-encoded
    until the final signature.

    Args:
        secret_key: The secret access key
        date_stamp: Date in YYYYMMDD format
        region: AWS region
        service: AWS service id

    Returns:
        32-byte signing key scoped to date, region and service
    """
    k_date = hmac_sha256(f"AWS4{secret_key}".encode("utf-8"), date_stamp.encode("utf-8"))
    k_region = hmac_sha256(k_date, region.encode("utf-8"))
    k_service = hmac_sha256(k_region, service.encode("utf-8"))
    return hmac_sha256(k_service, SCOPE_TERMINATOR.encode("utf-8"))


# ---------------------------------------------------------------------------
# Canonical request
# ---------------------------------------------------------------------------

def canonical_headers(headers: Sequence[tuple[str, str]]) -> str:
    """Render ``name:value\\n`` for each header, in the order given."""
    return "".join(f"{name.lower()}:{value}\n" for name, value in headers)


def signed_header_names(headers: Sequence[tuple[str, str]]) -> str:
    """Semicolon-joined lowercase header names, in the order given."""
    return ";".join(name.lower() for name, _ in headers)


def build_canonical_request(
    method: str,
    canonical_uri: str,
    headers: Sequence[tuple[str, str]],
    payload: bytes,
    canonical_querystring: str = "",
) -> str:
    """
    Create the canonical request string for SigV4.

    The header block and the signed-header list are both rendered from
    ``headers`` so they always agree in content and order.

    Args:
        method: HTTP method
        canonical_uri: Already-normalized request path
        headers: Ordered (name, value) pairs to sign
        payload: Raw request body
        canonical_querystring: Canonical query string (empty for POST bodies)

    Returns:
        Canonical request string
    """
    return "\n".join([
        method,
        canonical_uri,
        canonical_querystring,
        canonical_headers(headers),
        signed_header_names(headers),
        sha256_hex(payload),
    ])


# ---------------------------------------------------------------------------
# String to sign, signature, authorization
# ---------------------------------------------------------------------------

def credential_scope(date_stamp: str, region: str, service: str) -> str:
    return f"{date_stamp}/{region}/{service}/{SCOPE_TERMINATOR}"


def build_string_to_sign(amz_date: str, scope: str, canonical_request: str) -> str:
    return "\n".join([
        ALGORITHM,
        amz_date,
        scope,
        sha256_hex(canonical_request.encode("utf-8")),
    ])


def compute_signature(signing_key: bytes, string_to_sign: str) -> str:
    return hmac_sha256(signing_key, string_to_sign.encode("utf-8")).hex()


def build_authorization(access_key: str, scope: str, signed_headers: str, signature: str) -> str:
    return (
        f"{ALGORITHM} "
        f"Credential={access_key}/{scope}, "
        f"SignedHeaders={signed_headers}, "
        f"Signature={signature}"
    )


# ---------------------------------------------------------------------------
# Header assembly
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DerivedHeaders:
    """The complete header set for one signed request."""
    accept: str
    authorization: str
    content_length: int
    content_type: str
    host: str
    amz_date: str
    amz_target: str
    security_token: Optional[str] = field(default=None, repr=False)

    def as_http_headers(self) -> dict[str, str]:
        """Headers keyed by their wire names."""
        headers = {
            "Accept": self.accept,
            "Authorization": self.authorization,
            "Content-Length": str(self.content_length),
            "Content-Type": self.content_type,
            "Host": self.host,
            "X-Amz-Date": self.amz_date,
            "X-Amz-Target": self.amz_target,
        }
        if self.security_token:
            headers["X-Amz-Security-Token"] = self.security_token
        return headers


class SigV4Signer:
    """
    AWS Signature Version 4 header deriver for one supported operation.

    The signer holds only immutable configuration, so one instance can be
    shared across threads.

    Attributes:
        operation: The operation whose service id, target and content type are used
        clock: Time source consulted once per call when no instant is passed
    """

    def __init__(self, operation: SupportedOperation = COST_AND_USAGE, clock: Optional[Clock] = None):
        self.operation = operation
        self.clock = clock or utc_now

    @property
    def supported_services(self) -> tuple[str, ...]:
        return (self.operation.service,)

    def _read_clock(self) -> datetime.datetime:
        try:
            return self.clock()
        except ClockError:
            raise
        except Exception as e:
            raise ClockError(f"Time source failed: {e}") from e

    def compute_headers(self, args: AWSArgs, now: Optional[datetime.datetime] = None) -> DerivedHeaders:
        """
        Derive the signed header set for ``args``.

        Args:
            args: Request arguments
            now: Instant to sign at; the clock is read once when omitted

        Returns:
            DerivedHeaders ready for the HTTP transport

        Raises:
            UnsupportedServiceError: If ``args.service`` is not the operation's service
            ClockError: If the instant is unusable
            SigningPrimitiveError: If hashing fails
        """
        if args.service not in self.supported_services:
            raise UnsupportedServiceError(args.service, self.supported_services)

        timestamp = SigningTimestamp.from_datetime(self._read_clock() if now is None else now)
        amz_date = timestamp.amz_date
        date_stamp = timestamp.date_stamp

        payload = args.payload_bytes
        content_length = len(payload)

        headers = list(zip(
            SIGNED_HEADERS,
            (str(content_length), self.operation.content_type, args.host, amz_date),
        ))
        if args.session_token:
            # Sorts after x-amz-date, so the list stays in canonical order
            headers.append((SECURITY_TOKEN_HEADER, args.session_token))
        signed_headers = signed_header_names(headers)

        canonical_request = build_canonical_request(
            method=args.method,
            canonical_uri=args.canonical_uri,
            headers=headers,
            payload=payload,
        )

        scope = credential_scope(date_stamp, args.region, args.service)
        string_to_sign = build_string_to_sign(amz_date, scope, canonical_request)

        signing_key = get_signature_key(args.secret_access_key, date_stamp, args.region, args.service)
        signature = compute_signature(signing_key, string_to_sign)

        logger.debug("Signed %s request for scope %s at %s", args.method, scope, amz_date)

        return DerivedHeaders(
            accept=self.operation.accept,
            authorization=build_authorization(args.access_key, scope, signed_headers, signature),
            content_length=content_length,
            content_type=self.operation.content_type,
            host=args.host,
            amz_date=amz_date,
            amz_target=self.operation.target,
            security_token=args.session_token or None,
        )


def compute_headers(
    args: AWSArgs,
    now: datetime.datetime,
    operation: SupportedOperation = COST_AND_USAGE,
) -> DerivedHeaders:
    """
    Convenience function to derive headers at a given instant.

    Args:
        args: Request arguments
        now: Timezone-aware instant to sign at
        operation: Operation the request targets

    Returns:
        DerivedHeaders for the request
    """
    return SigV4Signer(operation).compute_headers(args, now=now)
