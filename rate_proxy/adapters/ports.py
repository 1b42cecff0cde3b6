from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence

from rate_proxy.domain.catalog import CombinationKey


@dataclass
class UpstreamResponse:
    """Outcome of one upstream pricing call."""

    success: bool
    payload: Any = None        # parsed JSON body, expected {"rates": [...]}
    error: str | None = None   # upstream error message on failure


class RateGateway(ABC):
    """
    Port: how we ask the upstream pricing API for rates.

    The lookup and refresh logic depend ONLY on this interface.
    Implementations raise UpstreamTimeout when the call exceeds its timeout
    and UpstreamUnavailable when the transport fails; any HTTP answer,
    successful or not, comes back as an UpstreamResponse.
    """

    @abstractmethod
    def single(self, key: CombinationKey, timeout: float) -> UpstreamResponse:
        """Fetch the rate for exactly one combination."""
        ...

    @abstractmethod
    def batch(self, keys: Sequence[CombinationKey], timeout: float) -> UpstreamResponse:
        """Fetch rates for every given combination in one round trip."""
        ...
