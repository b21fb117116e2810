"""
Authentication utilities for cloubil.

This package provides AWS SigV4 header derivation and the credential
sources that feed it.
"""

from .credentials import (
    AWSCredentials,
    CredentialsError,
    get_aws_credentials,
    load_credentials_file,
    resolve_credentials,
)
from .derive import derive_headers
from .errors import (
    ClockError,
    SigningError,
    SigningPrimitiveError,
    UnsupportedProviderError,
    UnsupportedServiceError,
)
from .sigv4 import (
    DerivedHeaders,
    SigningTimestamp,
    SigV4Signer,
    compute_headers,
    get_signature_key,
    utc_now,
)

__all__ = [
    "AWSCredentials",
    "CredentialsError",
    "get_aws_credentials",
    "load_credentials_file",
    "resolve_credentials",
    "derive_headers",
    "ClockError",
    "SigningError",
    "SigningPrimitiveError",
    "UnsupportedProviderError",
    "UnsupportedServiceError",
    "DerivedHeaders",
    "SigningTimestamp",
    "SigV4Signer",
    "compute_headers",
    "get_signature_key",
    "utc_now",
]
