from typing import Any, Sequence

from rate_proxy.domain.catalog import CombinationKey
from rate_proxy.domain.errors import UpstreamTimeout

from .ports import RateGateway, UpstreamResponse


class SimulatorRateGateway(RateGateway):
    """
    In-memory fake of the pricing API. No mocking framework needed.

    By default it answers every requested combination with the injected
    rate, or 10000 when none was injected.

    Test helpers:
        inject_rate()       set the raw rate (any JSON value) for a key
        fail_with()         next calls answer success=False with this error
        time_out()          next calls raise UpstreamTimeout
        raise_on_call()     next calls raise the given exception
        override_payload()  next calls answer success=True with this exact payload
        calls               list of ("single"|"batch", keys, timeout) tuples
    """

    DEFAULT_RATE = 10000

    def __init__(self):
        self._rates: dict[CombinationKey, Any] = {}
        self._error: str | None = None
        self._exception: Exception | None = None
        self._payload: Any = None
        self._payload_set = False
        self.calls: list[tuple[str, list[CombinationKey], float]] = []

    def inject_rate(self, key: CombinationKey, rate: Any) -> None:
        self._rates[key] = rate

    def fail_with(self, error: str) -> None:
        self._error = error

    def time_out(self) -> None:
        self._exception = UpstreamTimeout("Pricing service timed out")

    def raise_on_call(self, exc: Exception) -> None:
        self._exception = exc

    def override_payload(self, payload: Any) -> None:
        self._payload = payload
        self._payload_set = True

    def reset(self) -> None:
        """Clear failure modes; injected rates and recorded calls are kept."""
        self._error = None
        self._exception = None
        self._payload = None
        self._payload_set = False

    def single(self, key: CombinationKey, timeout: float) -> UpstreamResponse:
        return self._answer("single", [key], timeout)

    def batch(self, keys: Sequence[CombinationKey], timeout: float) -> UpstreamResponse:
        return self._answer("batch", list(keys), timeout)

    def _answer(self, kind: str, keys: list[CombinationKey], timeout: float) -> UpstreamResponse:
        self.calls.append((kind, keys, timeout))
        if self._exception is not None:
            raise self._exception
        if self._error is not None:
            return UpstreamResponse(success=False, payload={"error": self._error}, error=self._error)
        if self._payload_set:
            return UpstreamResponse(success=True, payload=self._payload)
        rates = [
            {**k.as_attributes(), "rate": self._rates.get(k, self.DEFAULT_RATE)}
            for k in keys
        ]
        return UpstreamResponse(success=True, payload={"rates": rates})
