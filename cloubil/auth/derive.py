"""Provider dispatch for header derivation."""

import datetime
from typing import Optional

from ..operations import AWSArgs, CloudArgs, COST_AND_USAGE, SupportedOperation
from .errors import UnsupportedProviderError
from .sigv4 import DerivedHeaders, SigV4Signer


def derive_headers(
    args: CloudArgs,
    now: Optional[datetime.datetime] = None,
    operation: SupportedOperation = COST_AND_USAGE,
) -> DerivedHeaders:
    """
    Derive signed headers for any supported provider's arguments.

    Args:
        args: Provider-specific request arguments
        now: Instant to sign at; the UTC clock is read when omitted
        operation: Operation the request targets

    Returns:
        DerivedHeaders for the request

    Raises:
        UnsupportedProviderError: If ``args`` belongs to no known provider
    """
    if isinstance(args, AWSArgs):
        return SigV4Signer(operation).compute_headers(args, now=now)
    raise UnsupportedProviderError(type(args).__name__)
