"""Configuration for cloubil."""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class CloubilConfig:
    """Configuration for the billing client."""

    # Credentials file; the AWS chain is used when it does not exist
    credentials_path: str = "~/.cloubil/config.json"
    aws_profile: str = ""

    # HTTP configuration; kept as text so the CLI reports a bad value
    timeout_seconds: str = "30.0"

    log_level: str = "INFO"

    # OpenTelemetry configuration
    otel_endpoint: str = ""
    otel_console_export: bool = False

    @classmethod
    def from_env(cls) -> "CloubilConfig":
        """Load configuration from environment variables."""
        return cls(
            credentials_path=os.getenv("CLOUBIL_CONFIG", cls.credentials_path),
            aws_profile=os.getenv("AWS_PROFILE", ""),
            timeout_seconds=os.getenv("CLOUBIL_TIMEOUT_SECONDS", cls.timeout_seconds),
            log_level=os.getenv("CLOUBIL_LOG_LEVEL", cls.log_level).upper(),
            otel_endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", ""),
            otel_console_export=os.getenv("OTEL_CONSOLE_EXPORT", "").lower() == "true",
        )


# Global config instance
config = CloubilConfig.from_env()
