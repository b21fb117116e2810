"""
Cost Explorer client with SigV4 header derivation.

This module signs a GetCostAndUsage request with ``SigV4Signer`` and sends it
with httpx. The signer never touches the network; this client never touches
the signing algorithm.

Usage:
    from cloubil.cost_client import CostExplorerClient

    client = CostExplorerClient(credentials)
    response = client.get_cost_and_usage("2023-01-01", "2023-02-01")
    if response.success:
        print(response.report.amount)
"""

import datetime
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .auth import AWSCredentials, SigV4Signer
from .auth.sigv4 import Clock
from .billing import billing_for_period
from .operations import AWSArgs, COST_AND_USAGE, SupportedOperation
from .response import CostReport, parse_cost_report
from .tracing import add_cost_query_span_attributes, get_tracer

logger = logging.getLogger(__name__)


@dataclass
class CostQueryResponse:
    """Response from a Cost Explorer query."""
    success: bool
    status_code: int = 0
    report: Optional[CostReport] = None
    error: Optional[str] = None
    error_type: Optional[str] = None


class CostExplorerClient:
    """
    Client for the Cost Explorer GetCostAndUsage API.

    Attributes:
        credentials: Credentials used to sign requests
        operation: Operation configuration (host, target, content type)
        signer: SigV4 header deriver for ``operation``
    """

    def __init__(
        self,
        credentials: AWSCredentials,
        operation: SupportedOperation = COST_AND_USAGE,
        timeout_seconds: float = 30.0,
        clock: Optional[Clock] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the Cost Explorer client.

        Args:
            credentials: AWS credentials
            operation: Operation to invoke
            timeout_seconds: Request timeout
            clock: Time source for signing (UTC now by default)
            transport: Optional httpx transport, mainly for tests
        """
        self.credentials = credentials
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        self.signer = SigV4Signer(operation, clock=clock)
        self._transport = transport

    def send(self, args: AWSArgs, now: Optional[datetime.datetime] = None) -> httpx.Response:
        """
        Sign ``args`` and POST its payload.

        Signing errors propagate to the caller; transport errors are raised
        as ``httpx.RequestError``.
        """
        headers = self.signer.compute_headers(args, now=now)
        url = f"https://{args.host}{args.canonical_uri}"

        with httpx.Client(timeout=self.timeout_seconds, transport=self._transport) as client:
            return client.post(
                url,
                headers=headers.as_http_headers(),
                content=args.payload_bytes,
            )

    def get_cost_and_usage(
        self,
        start: str,
        end: str,
        metric: str = "AmortizedCost",
        now: Optional[datetime.datetime] = None,
    ) -> CostQueryResponse:
        """
        Query the cost for a billing period.

        Args:
            start: First day of the period (YYYY-MM-DD)
            end: Exclusive end of the period (YYYY-MM-DD)
            metric: Cost metric to request
            now: Instant to sign at (clock is read when omitted)

        Returns:
            CostQueryResponse with the parsed report or the error
        """
        args = billing_for_period(start, end, self.credentials, operation=self.operation, metric=metric)

        with get_tracer().start_as_current_span("cost_explorer.get_cost_and_usage") as span:
            add_cost_query_span_attributes(
                span,
                operation=self.operation.name,
                region=args.region,
                period_start=start,
                period_end=end,
            )

            try:
                response = self.send(args, now=now)
            except httpx.RequestError as e:
                span.set_attribute("error.type", "request_error")
                span.record_exception(e)
                logger.error("Cost Explorer request failed: %s", e)
                return CostQueryResponse(
                    success=False,
                    error=f"Cost Explorer request failed: {e}",
                    error_type=type(e).__name__,
                )

            span.set_attribute("http.status_code", response.status_code)

            if response.status_code != 200:
                error_type, message = _aws_error(response)
                span.set_attribute("error.type", error_type)
                logger.error("Cost Explorer returned %s: %s", response.status_code, message)
                return CostQueryResponse(
                    success=False,
                    status_code=response.status_code,
                    error=message,
                    error_type=error_type,
                )

            report = parse_cost_report(response.content, metric=metric)
            add_cost_query_span_attributes(span, amount=report.amount)

            return CostQueryResponse(
                success=True,
                status_code=response.status_code,
                report=report,
            )


def _aws_error(response: httpx.Response) -> tuple[str, str]:
    """Extract the AWS JSON error type and message, if present."""
    try:
        data = response.json()
    except ValueError:
        data = None

    if not isinstance(data, dict):
        return "HTTPError", f"HTTP {response.status_code}: {response.text[:200]}"

    # __type looks like "com.amazon.coral.service#AccessDeniedException"
    error_type = str(data.get("__type", "HTTPError")).rsplit("#", 1)[-1]
    message = data.get("message") or data.get("Message") or f"HTTP {response.status_code}"
    return error_type, str(message)
