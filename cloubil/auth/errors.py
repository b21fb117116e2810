"""Exceptions raised while deriving SigV4 headers."""

from typing import Iterable, Optional


class SigningError(Exception):
    """Base class for signing failures.

    Attributes:
        stage: Name of the pipeline stage that failed
    """

    def __init__(self, message: str, stage: str):
        self.stage = stage
        self.message = message
        super().__init__(f"[{stage}] {message}")


class UnsupportedServiceError(SigningError):
    """Raised when a request targets a service the signer is not configured for."""

    def __init__(self, service: str, supported: Iterable[str]):
        self.service = service
        self.supported = tuple(supported)
        super().__init__(
            f"Service '{service}' is not supported (supported: {', '.join(self.supported)})",
            stage="validate",
        )


class UnsupportedProviderError(SigningError):
    """Raised when request arguments belong to no known cloud provider."""

    def __init__(self, args_type: str):
        self.args_type = args_type
        super().__init__(f"No header deriver for {args_type}", stage="dispatch")


class SigningPrimitiveError(SigningError):
    """Raised when the hash or HMAC primitive cannot process its input."""

    def __init__(self, message: str, stage: str = "hmac", cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(message, stage=stage)


class ClockError(SigningError):
    """Raised when the time source cannot provide a usable UTC instant."""

    def __init__(self, message: str):
        super().__init__(message, stage="clock")
