"""Interpretation of GetCostAndUsage responses."""

import json
import logging
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

MISSING_AMOUNT = "n/a"


class MetricValue(BaseModel):
    model_config = ConfigDict(extra="ignore")

    amount: Optional[str] = Field(default=None, alias="Amount")
    unit: Optional[str] = Field(default=None, alias="Unit")


class DateInterval(BaseModel):
    model_config = ConfigDict(extra="ignore")

    start: str = Field(alias="Start")
    end: str = Field(alias="End")


class ResultByTime(BaseModel):
    model_config = ConfigDict(extra="ignore")

    time_period: Optional[DateInterval] = Field(default=None, alias="TimePeriod")
    total: dict[str, MetricValue] = Field(default_factory=dict, alias="Total")
    estimated: bool = Field(default=False, alias="Estimated")


class CostReport(BaseModel):
    """Cost figure extracted for the queried period."""
    metric: str
    amount: str = MISSING_AMOUNT
    unit: Optional[str] = None
    periods: list[tuple[str, str, str]] = Field(default_factory=list)

    @property
    def is_available(self) -> bool:
        return self.amount != MISSING_AMOUNT


def _load(body: Union[str, bytes, dict[str, Any]]) -> Optional[dict[str, Any]]:
    if isinstance(body, dict):
        return body
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        logger.warning("Cost Explorer response is not valid JSON")
        return None
    return data if isinstance(data, dict) else None


def _headline(first: Any, metric: str) -> Optional[MetricValue]:
    if not isinstance(first, dict) or not isinstance(first.get("Total"), dict):
        return None
    raw = first["Total"].get(metric)
    if raw is None:
        return None
    try:
        value = MetricValue.model_validate(raw)
    except ValidationError as e:
        logger.warning("Unexpected %s total in first period: %s", metric, e)
        return None
    return value if value.amount is not None else None


def parse_cost_report(
    body: Union[str, bytes, dict[str, Any]],
    metric: str = "AmortizedCost",
) -> CostReport:
    """
    Build a CostReport from a GetCostAndUsage response body.

    The headline amount is the first period's total for ``metric`` and is read
    on its own, so a malformed later period never hides it. Periods that do not
    validate are skipped from ``periods``. Any missing or malformed headline
    yields the ``n/a`` placeholder rather than an error.

    Args:
        body: Response body as text, bytes or already-decoded JSON
        metric: Metric name to read from each period's ``Total``

    Returns:
        CostReport for the response
    """
    data = _load(body)
    if data is None:
        return CostReport(metric=metric)

    results = data.get("ResultsByTime")
    if not isinstance(results, list):
        logger.warning("Cost Explorer response has no ResultsByTime list")
        return CostReport(metric=metric)

    periods = []
    for index, item in enumerate(results):
        try:
            result = ResultByTime.model_validate(item)
        except ValidationError as e:
            logger.warning("Skipping malformed period %d: %s", index, e)
            continue
        value = result.total.get(metric)
        if result.time_period and value and value.amount is not None:
            periods.append((result.time_period.start, result.time_period.end, value.amount))

    first = _headline(results[0], metric) if results else None
    if first is None:
        return CostReport(metric=metric, periods=periods)

    return CostReport(metric=metric, amount=first.amount, unit=first.unit, periods=periods)


def extract_amortized_cost(body: Union[str, bytes, dict[str, Any]]) -> str:
    """Return ``ResultsByTime[0].Total.AmortizedCost.Amount`` or ``n/a``."""
    return parse_cost_report(body, metric="AmortizedCost").amount
