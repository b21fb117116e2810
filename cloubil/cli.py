"""
Command-line entry point for cloubil.

Usage:
    cloubil --start 2023-01-01 --end 2023-02-01
    cloubil --start 2023-01-01 --end 2023-02-01 --config ~/.cloubil/config.json
    cloubil --start 2023-01-01 --end 2023-02-01 --profile billing --verbose

Authentication:
    Credentials are read from the cloubil config file when it exists,
    otherwise from the standard AWS chain:
    - Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY)
    - AWS credentials file (~/.aws/credentials)
    - AWS profile (--profile option)

    Required IAM permissions:
    - ce:GetCostAndUsage
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from . import __version__
from .auth import CredentialsError, SigningError, resolve_credentials
from .billing import BillingPeriodError
from .config import config
from .cost_client import CostExplorerClient
from .tracing import init_tracing, traced

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloubil",
        description="Report the amortized AWS cost for a billing period",
    )
    parser.add_argument(
        "--start",
        required=True,
        help="The start date for billing period in the format YYYY-mm-dd",
    )
    parser.add_argument(
        "--end",
        required=True,
        help="The end date (exclusive) for billing period in the format YYYY-mm-dd",
    )
    parser.add_argument(
        "--config",
        default=config.credentials_path,
        help="Credentials file (default: from CLOUBIL_CONFIG env var or ~/.cloubil/config.json)",
    )
    parser.add_argument(
        "--profile",
        default=config.aws_profile or None,
        help="AWS profile used when the credentials file does not exist",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=config.timeout_seconds,
        help="Request timeout in seconds (default: from CLOUBIL_TIMEOUT_SECONDS env var or 30)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


@traced(name="cloubil.resolve_credentials")
def _load_credentials(config_path: str, profile_name: Optional[str]):
    return resolve_credentials(config_path, profile_name)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    init_tracing(otlp_endpoint=config.otel_endpoint or None, enable_console_export=config.otel_console_export)

    try:
        credentials = _load_credentials(args.config, args.profile)
        client = CostExplorerClient(credentials, timeout_seconds=args.timeout)
        response = client.get_cost_and_usage(args.start, args.end)
    except CredentialsError as e:
        logger.error("Credentials error: %s", e)
        return 1
    except BillingPeriodError as e:
        logger.error("Invalid billing period: %s", e)
        return 1
    except SigningError as e:
        logger.error("Signing failed at stage '%s': %s", e.stage, e.message)
        return 1

    if not response.success:
        logger.error("Cost query failed (%s): %s", response.error_type, response.error)
        return 1

    print(f"Total cost in queried period is ${response.report.amount}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
