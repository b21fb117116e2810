"""
Request arguments and supported operations for cloud billing queries.

An operation is plain configuration data: the service id the signer accepts,
the target header value and the fixed request shape. Adding an operation means
adding a ``SupportedOperation`` instance; the signing algorithm does not change.

Usage:
    from cloubil.operations import AWSArgs, COST_AND_USAGE

    args = AWSArgs(
        access_key="AKIDEXAMPLE",
        secret_access_key="...",
        service=COST_AND_USAGE.service,
        method=COST_AND_USAGE.method,
        region=COST_AND_USAGE.region,
        host=COST_AND_USAGE.host,
        canonical_uri=COST_AND_USAGE.canonical_uri,
        payload='{"TimePeriod": ...}',
    )
"""

from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union


@dataclass(frozen=True)
class SupportedOperation:
    """A single API call the signer is allowed to produce headers for."""
    name: str
    service: str
    target: str
    method: str = "POST"
    region: str = "us-east-1"
    host: str = ""
    canonical_uri: str = "/"
    content_type: str = "application/x-amz-json-1.1"
    accept: str = "*/*"

    @property
    def url(self) -> str:
        return f"https://{self.host}{self.canonical_uri}"


# Cost Explorer is a global service served only from us-east-1
COST_AND_USAGE = SupportedOperation(
    name="GetCostAndUsage",
    service="ce",
    target="AWSInsightsIndexService.GetCostAndUsage",
    region="us-east-1",
    host="ce.us-east-1.amazonaws.com",
)


@dataclass(frozen=True)
class AWSArgs:
    """Arguments needed to sign one request to AWS."""
    provider: ClassVar[str] = "aws"

    access_key: str
    secret_access_key: str = field(repr=False)
    service: str
    method: str
    region: str
    host: str
    canonical_uri: str
    payload: Union[str, bytes] = ""
    # Set for temporary credentials; sent and signed as x-amz-security-token
    session_token: Optional[str] = field(default=None, repr=False)

    @property
    def payload_bytes(self) -> bytes:
        """The exact bytes that are hashed and transmitted."""
        if isinstance(self.payload, bytes):
            return self.payload
        return self.payload.encode("utf-8")

    @classmethod
    def for_operation(
        cls,
        operation: SupportedOperation,
        access_key: str,
        secret_access_key: str,
        payload: Union[str, bytes] = "",
        session_token: Optional[str] = None,
    ) -> "AWSArgs":
        """Build arguments whose request shape comes from ``operation``."""
        return cls(
            access_key=access_key,
            secret_access_key=secret_access_key,
            service=operation.service,
            method=operation.method,
            region=operation.region,
            host=operation.host,
            canonical_uri=operation.canonical_uri,
            payload=payload,
            session_token=session_token,
        )


# Tagged variant over supported providers; each member carries a ``provider`` tag
CloudArgs = Union[AWSArgs]
