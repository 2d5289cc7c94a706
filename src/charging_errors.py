"""
Error taxonomy for the Wallbox spot-price charger.

Collaborator errors propagate unmodified up to the coordinator, which aborts
the cycle. Nothing inside the engine retries.
"""

from typing import Optional


class ChargingEngineError(Exception):
    """Base class for all errors raised by the charging engine."""


class ConfigurationError(ChargingEngineError):
    """Invalid configuration, e.g. an unresolvable timezone identifier."""


class PriceSourceUnavailable(ChargingEngineError):
    """Prices could not be read from cache nor fetched, or failed to parse."""


class PriceNotFound(ChargingEngineError):
    """The requested hour is absent from an otherwise valid price series."""

    def __init__(self, timestamp: int):
        super().__init__(f"{timestamp} : price not found")
        self.timestamp = timestamp


class ControlActionFailed(ChargingEngineError):
    """The charger API returned a non-success response."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        if status_code is not None:
            message = f"{message}: invalid response {status_code} {body}"
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class BlobStoreError(ChargingEngineError):
    """Blob store fault unrelated to a missing entry."""


class BlobNotFound(BlobStoreError):
    """The requested key does not exist in the blob store."""

    def __init__(self, key: str):
        super().__init__(f"{key} - blob does not exist")
        self.key = key


class LeaseUnavailable(BlobStoreError):
    """Another invocation currently holds the lease."""
