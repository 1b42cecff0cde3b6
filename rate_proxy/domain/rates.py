"""
Validation of upstream rate payloads.

The upstream answers {"rates": [{period, hotel, room, rate}, ...]} where
rate may be a number or a numeric string.  Each tuple is classified into a
tagged outcome instead of raising, so a batch can keep the good entries and
count the rest.
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Literal

from rate_proxy.domain.catalog import CombinationKey, in_catalog

_NUMERIC = re.compile(r"-?\d+(\.\d+)?")


@dataclass(frozen=True)
class RateOutcome:
    status: Literal[
        "valid",         # key in catalog, rate numeric
        "malformed",     # not a mapping, or fields missing / outside the catalog
        "invalid_rate",  # rate missing or not numeric
    ]
    key: CombinationKey | None = None
    rate: float | None = None


def normalize_rate(raw: Any) -> float | None:
    """Return the rate as a float, or None if it is not numeric.

    bool is rejected even though it subclasses int; so are NaN and infinity.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else None
    if isinstance(raw, str) and _NUMERIC.fullmatch(raw):
        return float(raw)
    return None


def classify(entry: Any) -> RateOutcome:
    if not isinstance(entry, dict):
        return RateOutcome("malformed")

    fields = (entry.get("period"), entry.get("hotel"), entry.get("room"))
    if not all(isinstance(f, str) for f in fields):
        return RateOutcome("malformed")

    key = CombinationKey(*fields)
    if not in_catalog(key):
        return RateOutcome("malformed", key=key)

    rate = normalize_rate(entry.get("rate"))
    if rate is None:
        return RateOutcome("invalid_rate", key=key)

    return RateOutcome("valid", key=key, rate=rate)


def extract_rates(payload: Any) -> list | None:
    """Return the rates list, or None if the payload has the wrong shape."""
    if not isinstance(payload, dict):
        return None
    rates = payload.get("rates")
    return rates if isinstance(rates, list) else None
