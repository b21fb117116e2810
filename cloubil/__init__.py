"""cloubil - AWS Cost Explorer billing reports over SigV4-signed requests."""

__version__ = "0.1.0"

from .auth import (
    AWSCredentials,
    DerivedHeaders,
    SigV4Signer,
    SigningError,
    compute_headers,
    derive_headers,
    resolve_credentials,
)
from .billing import BillingPeriodError, billing_for_period
from .cost_client import CostExplorerClient, CostQueryResponse
from .operations import AWSArgs, CloudArgs, COST_AND_USAGE, SupportedOperation
from .response import CostReport, extract_amortized_cost, parse_cost_report

__all__ = [
    # Signing
    "AWSCredentials",
    "DerivedHeaders",
    "SigV4Signer",
    "SigningError",
    "compute_headers",
    "derive_headers",
    "resolve_credentials",
    # Request arguments
    "AWSArgs",
    "CloudArgs",
    "COST_AND_USAGE",
    "SupportedOperation",
    "BillingPeriodError",
    "billing_for_period",
    # Cost Explorer
    "CostExplorerClient",
    "CostQueryResponse",
    "CostReport",
    "extract_amortized_cost",
    "parse_cost_report",
]
