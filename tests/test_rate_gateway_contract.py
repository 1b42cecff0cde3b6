"""
Adapter contract tests for RateGateway: both simulator and real.

The same contract is verified against:
  - SimulatorRateGateway  (always runs, no credentials needed)
  - RateApiClient         (skipped if RATE_API_URL / RATE_API_TOKEN are not set)
"""

import os

import pytest

from rate_proxy.adapters.rate_api_client import RateApiClient
from rate_proxy.adapters.simulator_rate_api import SimulatorRateGateway
from rate_proxy.domain.catalog import CombinationKey
from rate_proxy.domain.errors import UpstreamTimeout
from tests.contracts.rate_gateway_contract import RateGatewayContract

# ---------------------------------------------------------------------------
# Simulator: always runs
# ---------------------------------------------------------------------------

KEY = CombinationKey("Summer", "FloatingPointResort", "SingletonRoom")


class TestSimulatorRateGatewayContract(RateGatewayContract):

    def create_gateway(self):
        return SimulatorRateGateway()

    def test_injected_rate_returned(self):
        gw = SimulatorRateGateway()
        gw.inject_rate(KEY, "15000")
        response = gw.single(KEY, timeout=5)
        assert response.payload == {"rates": [{**KEY.as_attributes(), "rate": "15000"}]}

    def test_failure_mode(self):
        gw = SimulatorRateGateway()
        gw.fail_with("server error")
        response = gw.single(KEY, timeout=5)
        assert not response.success
        assert response.error == "server error"

    def test_timeout_mode(self):
        gw = SimulatorRateGateway()
        gw.time_out()
        with pytest.raises(UpstreamTimeout):
            gw.batch([KEY], timeout=20)

    def test_calls_recorded_with_timeout(self):
        gw = SimulatorRateGateway()
        gw.single(KEY, timeout=5)
        assert gw.calls == [("single", [KEY], 5)]

    def test_reset_clears_failure_modes(self):
        gw = SimulatorRateGateway()
        gw.fail_with("boom")
        gw.reset()
        assert gw.single(KEY, timeout=5).success


# ---------------------------------------------------------------------------
# Real pricing API: skipped without credentials
# ---------------------------------------------------------------------------

API_URL = os.environ.get("RATE_API_URL", "")
API_TOKEN = os.environ.get("RATE_API_TOKEN", "")

CREDS_AVAILABLE = bool(API_URL) and bool(API_TOKEN)


@pytest.mark.skipif(
    not CREDS_AVAILABLE,
    reason="RATE_API_URL or RATE_API_TOKEN not set",
)
class TestRateApiClientContract(RateGatewayContract):

    def create_gateway(self):
        return RateApiClient(token=API_TOKEN, base_url=API_URL)
