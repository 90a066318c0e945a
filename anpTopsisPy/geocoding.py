"""
Reverse-geocoding cache for report coordinates.

Looking up the street name of a report is slow and rate-limited, so results
are cached per rounded coordinate for a limited time. The cache is an
explicit object with an injectable clock; the lookup service itself is any
callable `service(lat, lng) -> GeocodingResult` supplied by the host.
"""
from __future__ import annotations
import time
import warnings
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional, Tuple
from .config import configure_parameters
from .exceptions import InvalidInputError


@dataclass(frozen=True)
class GeocodingResult:
    street_name: str
    lat: float
    lng: float
    confidence: float
    source: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GeocodingResult':
        return cls(
            street_name=data['street_name'],
            lat=float(data['lat']),
            lng=float(data['lng']),
            confidence=float(data['confidence']),
            source=data['source']
        )


class GeocodingCache:
    """
    A time-limited cache of geocoding results keyed by coordinates rounded to
    `precision` decimal places (5 places is roughly one metre).

    Args:
        ttl_seconds: Lifetime of an entry. Defaults to `GEOCODING_CACHE_TTL` (24 h).
        clock: Returns the current time in seconds; `time.time` by default.
        precision: Decimal places kept in the cache key.
    """
    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
        precision: int = 5
    ):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else configure_parameters.GEOCODING_CACHE_TTL
        if self.ttl_seconds <= 0:
            raise InvalidInputError("Cache TTL must be positive.")
        self.clock = clock
        self.precision = precision
        self._entries: Dict[Tuple[float, float], Tuple[GeocodingResult, float]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"GeocodingCache(entries={len(self)}, ttl={self.ttl_seconds:g}s)"

    def _key(self, lat: float, lng: float) -> Tuple[float, float]:
        return (round(float(lat), self.precision), round(float(lng), self.precision))

    def get(self, lat: float, lng: float) -> Optional[GeocodingResult]:
        """Returns the cached result, or None if absent or expired (expired entries are evicted)."""
        key = self._key(lat, lng)
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        result, expires_at = entry
        if self.clock() >= expires_at:
            del self._entries[key]
            self.misses += 1
            return None

        self.hits += 1
        return result

    def put(self, lat: float, lng: float, result: GeocodingResult):
        self._entries[self._key(lat, lng)] = (result, self.clock() + self.ttl_seconds)

    def clear(self):
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Serializes the live entries so the host can persist them."""
        return {
            "ttlSeconds": self.ttl_seconds,
            "precision": self.precision,
            "entries": [
                {"lat": key[0], "lng": key[1], "result": result.to_dict(), "expiresAt": expires_at}
                for key, (result, expires_at) in self._entries.items()
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], clock: Callable[[], float] = time.time) -> 'GeocodingCache':
        """Restores a cache; entries that have already expired are dropped."""
        cache = cls(ttl_seconds=data.get('ttlSeconds'), clock=clock, precision=data.get('precision', 5))
        now = clock()
        for entry in data.get('entries', []):
            if entry['expiresAt'] <= now:
                continue
            key = cache._key(entry['lat'], entry['lng'])
            cache._entries[key] = (GeocodingResult.from_dict(entry['result']), float(entry['expiresAt']))
        return cache


class CachedGeocoder:
    """
    Wraps a geocoding service with a GeocodingCache.

    A failing service never propagates its exception: the caller gets a
    fallback result with confidence 0, which is not cached so the next
    lookup retries the service.
    """
    def __init__(
        self,
        service: Callable[[float, float], GeocodingResult],
        cache: Optional[GeocodingCache] = None,
        fallback_name: str = "Unknown road"
    ):
        self.service = service
        self.cache = cache if cache is not None else GeocodingCache()
        self.fallback_name = fallback_name

    def __call__(self, lat: float, lng: float) -> GeocodingResult:
        return self.lookup(lat, lng)

    def lookup(self, lat: float, lng: float) -> GeocodingResult:
        cached = self.cache.get(lat, lng)
        if cached is not None:
            return cached

        try:
            result = self.service(lat, lng)
        except Exception as e:
            warnings.warn(f"Geocoding failed for ({lat}, {lng}): {e}. Using fallback street name.")
            return GeocodingResult(
                street_name=self.fallback_name,
                lat=float(lat),
                lng=float(lng),
                confidence=0.0,
                source="fallback"
            )

        self.cache.put(lat, lng, result)
        return result
