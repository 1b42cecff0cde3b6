import logging
from typing import Sequence

import requests

from rate_proxy.domain.catalog import CombinationKey
from rate_proxy.domain.errors import UpstreamTimeout, UpstreamUnavailable

from .ports import RateGateway, UpstreamResponse

log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080"


class RateApiClient(RateGateway):
    """Adapter: real pricing API over HTTP."""

    def __init__(self, token: str, base_url: str = DEFAULT_BASE_URL):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.session.headers.update(
            {
                "token": token,
                "Content-Type": "application/json",
            }
        )

    def single(self, key: CombinationKey, timeout: float) -> UpstreamResponse:
        return self._post_pricing([key], timeout)

    def batch(self, keys: Sequence[CombinationKey], timeout: float) -> UpstreamResponse:
        return self._post_pricing(keys, timeout)

    def _post_pricing(self, keys: Sequence[CombinationKey], timeout: float) -> UpstreamResponse:
        url = f"{self.base_url}/pricing"
        body = {"attributes": [k.as_attributes() for k in keys]}
        try:
            resp = self.session.post(url, json=body, timeout=timeout)
        except requests.Timeout as exc:
            raise UpstreamTimeout(f"Pricing service timed out after {timeout}s") from exc
        except requests.RequestException as exc:
            raise UpstreamUnavailable(f"Pricing service unavailable: {exc}") from exc

        log.debug("POST %s attributes=%d status=%d", url, len(keys), resp.status_code)

        try:
            payload = resp.json()
        except ValueError:
            payload = None

        if not resp.ok:
            return UpstreamResponse(success=False, payload=payload, error=_error_message(payload, resp))
        return UpstreamResponse(success=True, payload=payload)

    def close(self) -> None:
        self.session.close()


def _error_message(payload, resp: requests.Response) -> str:
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return f"HTTP {resp.status_code}"
