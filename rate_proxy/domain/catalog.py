"""
Combination catalog: the fixed (period, hotel, room) address space.

Every rate we cache or ask upstream for is keyed by one of these triples.
Anything outside the catalog is an invalid request, never a cache miss.
"""

from dataclasses import dataclass
from itertools import product

from rate_proxy.domain.errors import InvalidCombination

PERIODS = ("Summer", "Autumn", "Winter", "Spring")
HOTELS = ("FloatingPointResort", "GitawayHotel", "RecursionRetreat")
ROOMS = ("SingletonRoom", "BooleanTwin", "RestfulKing")

_KEY_PREFIX = "pricing:rate:v1"


@dataclass(frozen=True)
class CombinationKey:
    period: str
    hotel: str
    room: str

    @property
    def cache_key(self) -> str:
        return f"{_KEY_PREFIX}:period={self.period}:hotel={self.hotel}:room={self.room}"

    def as_attributes(self) -> dict[str, str]:
        """Shape used in the upstream request body."""
        return {"period": self.period, "hotel": self.hotel, "room": self.room}

    def matches(self, entry: dict) -> bool:
        return (
            entry.get("period") == self.period
            and entry.get("hotel") == self.hotel
            and entry.get("room") == self.room
        )


CATALOG: tuple[CombinationKey, ...] = tuple(
    CombinationKey(period, hotel, room)
    for period, hotel, room in product(PERIODS, HOTELS, ROOMS)
)

_CATALOG_SET = frozenset(CATALOG)


def in_catalog(key: CombinationKey) -> bool:
    return key in _CATALOG_SET


def parse_combination(
    period: str | None,
    hotel: str | None,
    room: str | None,
) -> CombinationKey:
    """
    Turn raw request parameters into a CombinationKey.

    Raises InvalidCombination when a parameter is missing or blank, or when
    a value is not part of its enumerated set.
    """
    raw = {"period": period, "hotel": hotel, "room": room}
    missing = [name for name, value in raw.items() if not value or not value.strip()]
    if missing:
        raise InvalidCombination(f"Missing required parameters: {', '.join(missing)}")

    allowed = {"period": PERIODS, "hotel": HOTELS, "room": ROOMS}
    for name, value in raw.items():
        if value not in allowed[name]:
            raise InvalidCombination(
                f"Invalid {name}: {value!r}. Must be one of: {', '.join(allowed[name])}"
            )

    return CombinationKey(period, hotel, room)  # type: ignore[arg-type]
