"""
Failure taxonomy for rate lookups and refreshes.

Each error carries an http_status hint so an outer HTTP surface can map it
without knowing the domain.
"""


class PricingError(Exception):
    """Base class for every failure surfaced by the proxy."""

    http_status = 500


class InvalidCombination(PricingError):
    """Request parameters do not name a catalog combination."""

    http_status = 400


class UpstreamUnavailable(PricingError):
    """Upstream answered with a non-success response or the transport failed."""

    http_status = 502


class UpstreamTimeout(PricingError):
    """Upstream did not answer within the per-call timeout."""

    http_status = 504


class UpstreamContractViolation(PricingError):
    """Upstream answered successfully but the payload is unusable."""

    http_status = 502


class QuotaExceeded(PricingError):
    """The daily upstream call budget is exhausted."""

    http_status = 503

    def __init__(self, message: str, usage: int | None = None):
        super().__init__(message)
        self.usage = usage


class QuotaNotSupported(QuotaExceeded):
    """
    The cache store cannot increment atomically.

    Signals misconfiguration rather than exhaustion: with such a store the
    budget can never be enforced, so every consume() fails.
    """
