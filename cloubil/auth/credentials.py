"""
Credential sources for signing Cost Explorer requests.

Credentials come either from the cloubil JSON config file
(``~/.cloubil/config.json`` by default)::

    {"access_key": "AKIA...", "secret_access_key": "..."}

or from the standard AWS chain through a boto3 session (environment
variables, ``~/.aws/credentials``, instance roles, named profiles).
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import boto3
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIALS_PATH = Path("~/.cloubil/config.json")


class CredentialsError(ValueError):
    """Raised when no usable credentials can be obtained."""


@dataclass
class AWSCredentials:
    """AWS credentials for SigV4 signing."""
    access_key: str
    secret_key: str = field(repr=False)
    session_token: Optional[str] = field(default=None, repr=False)


class CredentialsFile(BaseModel):
    """Schema of the cloubil credentials file."""
    access_key: str
    secret_access_key: str


def load_credentials_file(path: Union[str, Path] = DEFAULT_CREDENTIALS_PATH) -> AWSCredentials:
    """
    Read credentials from a cloubil JSON config file.

    Args:
        path: Path to the config file (``~`` is expanded)

    Returns:
        AWSCredentials read from the file

    Raises:
        CredentialsError: If the file is missing, unreadable or malformed
    """
    config_path = Path(path).expanduser()
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise CredentialsError(f"Cannot open config file {config_path}: {e}") from e

    try:
        parsed = CredentialsFile.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        raise CredentialsError(f"Invalid config file {config_path}: {e}") from e

    logger.debug("Loaded credentials for %s from %s", parsed.access_key, config_path)
    return AWSCredentials(access_key=parsed.access_key, secret_key=parsed.secret_access_key)


def get_aws_credentials(profile_name: Optional[str] = None) -> AWSCredentials:
    """
    Get AWS credentials from the environment or profile.

    Args:
        profile_name: Optional AWS profile name to use

    Returns:
        AWSCredentials object with access key, secret key, and optional session token

    Raises:
        CredentialsError: If credentials cannot be obtained
    """
    try:
        if profile_name:
            session = boto3.Session(profile_name=profile_name)
        else:
            session = boto3.Session()

        credentials = session.get_credentials()
        if credentials is None:
            raise CredentialsError("No AWS credentials found")

        frozen_credentials = credentials.get_frozen_credentials()

        return AWSCredentials(
            access_key=frozen_credentials.access_key,
            secret_key=frozen_credentials.secret_key,
            session_token=frozen_credentials.token,
        )
    except CredentialsError:
        raise
    except Exception as e:
        raise CredentialsError(f"Failed to get AWS credentials: {e}") from e


def resolve_credentials(
    config_path: Optional[Union[str, Path]] = None,
    profile_name: Optional[str] = None,
) -> AWSCredentials:
    """
    Resolve credentials, preferring the cloubil config file.

    The boto3 chain is consulted only when the config file does not exist.
    A config file that exists but is malformed is an error, not a fallback.

    Args:
        config_path: Path to the cloubil config file (default location if None)
        profile_name: AWS profile for the boto3 fallback

    Returns:
        AWSCredentials
    """
    path = Path(config_path or DEFAULT_CREDENTIALS_PATH).expanduser()
    if path.exists():
        return load_credentials_file(path)

    logger.info("Config file %s not found, using the AWS credential chain", path)
    return get_aws_credentials(profile_name)
