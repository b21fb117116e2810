"""Request arguments for Cost Explorer billing-period queries."""

import datetime
import json

from .auth.credentials import AWSCredentials
from .operations import AWSArgs, COST_AND_USAGE, SupportedOperation

DATE_FORMAT = "%Y-%m-%d"


class BillingPeriodError(ValueError):
    """Raised when a billing period is not a valid YYYY-MM-DD range."""


def parse_period_date(value: str) -> datetime.date:
    try:
        parsed = datetime.datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError) as e:
        raise BillingPeriodError(f"Invalid date '{value}', expected YYYY-MM-DD") from e
    # strptime accepts unpadded fields such as 2023-1-1
    if parsed.strftime(DATE_FORMAT) != value:
        raise BillingPeriodError(f"Invalid date '{value}', expected YYYY-MM-DD")
    return parsed


def build_billing_payload(
    start: str,
    end: str,
    granularity: str = "MONTHLY",
    metric: str = "AmortizedCost",
) -> str:
    """
    Serialize a GetCostAndUsage request body.

    Cost Explorer treats ``End`` as exclusive, so ``start`` must be strictly
    before ``end``. Keys are sorted and separators compact so the same period
    always yields the same bytes.

    Args:
        start: First day of the period (YYYY-MM-DD)
        end: Day after the last day of the period (YYYY-MM-DD)
        granularity: DAILY, MONTHLY or HOURLY
        metric: Cost metric to request

    Returns:
        JSON request body

    Raises:
        BillingPeriodError: If either date is malformed or the range is empty
    """
    start_date = parse_period_date(start)
    end_date = parse_period_date(end)
    if start_date >= end_date:
        raise BillingPeriodError(f"Start date {start} must be before end date {end}")

    body = {
        "TimePeriod": {
            "Start": start_date.strftime(DATE_FORMAT),
            "End": end_date.strftime(DATE_FORMAT),
        },
        "Granularity": granularity,
        "Metrics": [metric],
    }
    return json.dumps(body, sort_keys=True, separators=(",", ":"))


def billing_for_period(
    start: str,
    end: str,
    credentials: AWSCredentials,
    operation: SupportedOperation = COST_AND_USAGE,
    granularity: str = "MONTHLY",
    metric: str = "AmortizedCost",
) -> AWSArgs:
    """
    Construct signing arguments for a billing query.

    Args:
        start: First day of the period (YYYY-MM-DD)
        end: Exclusive end of the period (YYYY-MM-DD)
        credentials: Credentials to sign with
        operation: Operation the request targets
        granularity: Cost Explorer granularity
        metric: Cost metric to request

    Returns:
        AWSArgs for the request
    """
    return AWSArgs.for_operation(
        operation,
        access_key=credentials.access_key,
        secret_access_key=credentials.secret_key,
        session_token=credentials.session_token,
        payload=build_billing_payload(start, end, granularity=granularity, metric=metric),
    )
