"""Tests for GetCostAndUsage response interpretation."""

import json

import pytest

from cloubil.response import CostReport, extract_amortized_cost, parse_cost_report


class TestExtractAmortizedCost:
    """Tests for extract_amortized_cost."""

    def test_amount_from_first_period(self, cost_explorer_body):
        assert extract_amortized_cost(json.dumps(cost_explorer_body)) == "123.4567"

    def test_accepts_bytes_and_dict(self, cost_explorer_body):
        assert extract_amortized_cost(json.dumps(cost_explorer_body).encode()) == "123.4567"
        assert extract_amortized_cost(cost_explorer_body) == "123.4567"

    @pytest.mark.parametrize("body", [
        "",
        "not json",
        "[]",
        "{}",
        '{"ResultsByTime": []}',
        '{"ResultsByTime": [{"Total": {}}]}',
        '{"ResultsByTime": [{"Total": {"AmortizedCost": {"Unit": "USD"}}}]}',
        '{"ResultsByTime": [{"Total": {"AmortizedCost": {"Amount": 12.5}}}]}',
        '{"ResultsByTime": "oops"}',
    ])
    def test_missing_or_malformed_yields_placeholder(self, body):
        """Test that any missing or malformed field yields n/a."""
        assert extract_amortized_cost(body) == "n/a"


class TestParseCostReport:
    """Tests for parse_cost_report."""

    def test_multiple_periods(self):
        body = {
            "ResultsByTime": [
                {
                    "TimePeriod": {"Start": "2023-01-01", "End": "2023-02-01"},
                    "Total": {"AmortizedCost": {"Amount": "10.00", "Unit": "USD"}},
                },
                {
                    "TimePeriod": {"Start": "2023-02-01", "End": "2023-03-01"},
                    "Total": {"AmortizedCost": {"Amount": "12.50", "Unit": "USD"}},
                    "Estimated": True,
                },
            ]
        }

        report = parse_cost_report(body)

        assert report == CostReport(
            metric="AmortizedCost",
            amount="10.00",
            unit="USD",
            periods=[
                ("2023-01-01", "2023-02-01", "10.00"),
                ("2023-02-01", "2023-03-01", "12.50"),
            ],
        )
        assert report.is_available

    def test_other_metric(self):
        body = {"ResultsByTime": [{"Total": {"UnblendedCost": {"Amount": "3.21", "Unit": "USD"}}}]}

        assert parse_cost_report(body, metric="UnblendedCost").amount == "3.21"
        assert parse_cost_report(body).amount == "n/a"

    def test_placeholder_report_is_not_available(self):
        report = parse_cost_report("{}")

        assert report.amount == "n/a"
        assert report.unit is None
        assert not report.is_available

    def test_malformed_later_period_keeps_headline(self):
        """Test that a bad second period does not hide the first period's amount."""
        body = {
            "ResultsByTime": [
                {"Total": {"AmortizedCost": {"Amount": "12.34"}}},
                {"TimePeriod": {"Start": "2023-02-01"}},
            ]
        }

        assert extract_amortized_cost(body) == "12.34"

    def test_malformed_period_skipped_from_breakdown(self):
        body = {
            "ResultsByTime": [
                {
                    "TimePeriod": {"Start": "2023-01-01", "End": "2023-02-01"},
                    "Total": {"AmortizedCost": {"Amount": "10.00", "Unit": "USD"}},
                },
                {"TimePeriod": {"Start": "2023-02-01"}, "Total": "oops"},
                {
                    "TimePeriod": {"Start": "2023-03-01", "End": "2023-04-01"},
                    "Total": {"AmortizedCost": {"Amount": "7.00", "Unit": "USD"}},
                },
            ]
        }

        report = parse_cost_report(body)

        assert report.amount == "10.00"
        assert report.periods == [
            ("2023-01-01", "2023-02-01", "10.00"),
            ("2023-03-01", "2023-04-01", "7.00"),
        ]

    def test_malformed_first_period_yields_placeholder(self):
        body = {
            "ResultsByTime": [
                {"Total": {"AmortizedCost": "12.34"}},
                {"Total": {"AmortizedCost": {"Amount": "5.00"}}},
            ]
        }

        assert extract_amortized_cost(body) == "n/a"
