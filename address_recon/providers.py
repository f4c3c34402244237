from __future__ import annotations
import http.client
import json
import logging
import os
import threading
import time
import urllib.error
import urllib.parse
import urllib.request
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from .config import Config
from .models import Coordinates, ProviderState
from .utils import valid_coordinates

logger = logging.getLogger(__name__)

WINDOW_DAILY = "daily"
WINDOW_MONTHLY = "monthly"


class ProviderAdapter:
    """One external geocoding backend behind a uniform ``geocode`` / ``has_quota`` contract.

    Counted providers (``quota_limit`` set) track requests per daily or monthly
    window; rate-limited providers (``min_interval`` only) space requests out
    in wall-clock time. Backend failures come back as ``None``.
    """

    name = "provider"
    api_key_env: Optional[str] = None

    def __init__(
        self,
        api_key: Optional[str] = None,
        quota_limit: Optional[int] = None,
        window: Optional[str] = None,
        min_interval: float = 0.0,
        timeout: float = 10.0,
        user_agent: str = "AddressVerificationTool/1.0",
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], date] = date.today,
    ) -> None:
        if api_key is None and self.api_key_env:
            api_key = os.getenv(self.api_key_env, "")
        self.api_key = api_key or ""
        self.window = window
        self.min_interval = float(min_interval or 0.0)
        self.timeout = float(timeout)
        self.user_agent = user_agent
        self._clock = clock
        self._today = today
        self.state = ProviderState(
            name=self.name,
            counter_window_start=today(),
            quota_limit=int(quota_limit) if quota_limit is not None else None,
        )

    # ---- quota bookkeeping ----

    def has_quota(self) -> bool:
        st = self.state
        if st.quota_limit is not None:
            self._reset_window_if_needed()
            return st.request_counter < st.quota_limit
        return self._interval_remaining() <= 0.0

    def _reset_window_if_needed(self) -> None:
        st = self.state
        today = self._today()
        start = st.counter_window_start
        if start is None:
            st.counter_window_start = today
            return
        if self.window == WINDOW_MONTHLY:
            expired = (today.year, today.month) != (start.year, start.month)
        else:
            expired = today != start
        if expired:
            logger.info("%s quota window rolled over, counter reset (was %d)", self.name, st.request_counter)
            st.request_counter = 0
            st.counter_window_start = today

    def _interval_remaining(self) -> float:
        last = self.state.last_request_timestamp
        if last is None or self.min_interval <= 0:
            return 0.0
        return self.min_interval - (self._clock() - last)

    # ---- request ----

    def geocode(
        self,
        address: str,
        hint: Optional[str] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Optional[Coordinates]:
        wait = self._interval_remaining()
        if wait > 0:
            waiter = cancel if cancel is not None else threading.Event()
            if waiter.wait(wait):
                logger.debug("%s: cancelled while waiting for rate limit", self.name)
                return None

        self.state.request_counter += 1
        self.state.last_request_timestamp = self._clock()

        query = f"{hint} {address}" if hint else address
        url, headers = self.build_request(query)

        try:
            data = self._fetch_json(url, headers)
        except urllib.error.HTTPError as exc:
            logger.warning("%s API error: %s %s", self.name, exc.code, exc.reason)
            return None
        except (urllib.error.URLError, http.client.HTTPException, TimeoutError, OSError) as exc:
            logger.warning("%s request failed: %s", self.name, exc)
            return None
        except ValueError as exc:
            logger.warning("%s returned an unparsable body: %s", self.name, exc)
            return None

        try:
            coords = self.parse_response(data)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.warning("%s response missing coordinates: %s", self.name, exc)
            return None
        if coords is None:
            logger.debug("%s: no results for %r", self.name, query)
            return None
        return valid_coordinates(*coords)

    def build_request(self, query: str) -> Tuple[str, Dict[str, str]]:
        raise NotImplementedError

    def parse_response(self, data: Any) -> Optional[Tuple[Any, Any]]:
        raise NotImplementedError

    def _fetch_json(self, url: str, headers: Dict[str, str]) -> Any:
        req = urllib.request.Request(url, method="GET")
        for k, v in headers.items():
            req.add_header(k, v)
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:
            status = getattr(resp, "status", 200)
            if status < 200 or status >= 300:
                raise urllib.error.HTTPError(url, status, "non-success status", resp.headers, None)
            out = resp.read().decode("utf-8")
        return json.loads(out)


class NominatimProvider(ProviderAdapter):
    """OpenStreetMap Nominatim; free but at most one request per ~1.5 s."""

    name = "nominatim"
    base_url = "https://nominatim.openstreetmap.org/search"

    def build_request(self, query: str) -> Tuple[str, Dict[str, str]]:
        params = urllib.parse.urlencode({"q": query, "format": "json", "addressdetails": 1, "limit": 1})
        return f"{self.base_url}?{params}", {"User-Agent": self.user_agent}

    def parse_response(self, data: Any) -> Optional[Tuple[Any, Any]]:
        if not data:
            return None
        return data[0]["lat"], data[0]["lon"]


class GeoapifyProvider(ProviderAdapter):
    name = "geoapify"
    api_key_env = "GEOAPIFY_API_KEY"
    base_url = "https://api.geoapify.com/v1/geocode/search"

    def build_request(self, query: str) -> Tuple[str, Dict[str, str]]:
        params = urllib.parse.urlencode({"text": query, "format": "json", "apiKey": self.api_key})
        return f"{self.base_url}?{params}", {}

    def parse_response(self, data: Any) -> Optional[Tuple[Any, Any]]:
        results = (data or {}).get("results") or []
        if not results:
            return None
        return results[0]["lat"], results[0]["lon"]


class MapTilerProvider(ProviderAdapter):
    name = "maptiler"
    api_key_env = "MAPTILER_API_KEY"
    base_url = "https://api.maptiler.com/geocoding"

    def build_request(self, query: str) -> Tuple[str, Dict[str, str]]:
        encoded = urllib.parse.quote(query, safe="")
        params = urllib.parse.urlencode({"key": self.api_key})
        return f"{self.base_url}/{encoded}.json?{params}", {}

    def parse_response(self, data: Any) -> Optional[Tuple[Any, Any]]:
        features = (data or {}).get("features") or []
        if not features:
            return None
        # GeoJSON order is [lon, lat]
        center = features[0]["center"]
        return center[1], center[0]


class GeocodioProvider(ProviderAdapter):
    name = "geocodio"
    api_key_env = "GEOCODIO_API_KEY"
    base_url = "https://api.geocod.io/v1.7/geocode"

    def build_request(self, query: str) -> Tuple[str, Dict[str, str]]:
        params = urllib.parse.urlencode({"q": query, "api_key": self.api_key})
        return f"{self.base_url}?{params}", {}

    def parse_response(self, data: Any) -> Optional[Tuple[Any, Any]]:
        results = (data or {}).get("results") or []
        if not results:
            return None
        loc = results[0]["location"]
        return loc["lat"], loc["lng"]


class RadarProvider(ProviderAdapter):
    name = "radar"
    api_key_env = "RADAR_API_KEY"
    base_url = "https://api.radar.io/v1/geocode/forward"

    def build_request(self, query: str) -> Tuple[str, Dict[str, str]]:
        params = urllib.parse.urlencode({"query": query})
        return f"{self.base_url}?{params}", {"Authorization": self.api_key}

    def parse_response(self, data: Any) -> Optional[Tuple[Any, Any]]:
        addresses = (data or {}).get("addresses") or []
        if not addresses:
            return None
        return addresses[0]["latitude"], addresses[0]["longitude"]


PROVIDER_CLASSES: Dict[str, Type[ProviderAdapter]] = {
    cls.name: cls
    for cls in (NominatimProvider, GeoapifyProvider, MapTilerProvider, GeocodioProvider, RadarProvider)
}


def build_providers(cfg: Config) -> List[ProviderAdapter]:
    """Instantiate the configured providers in order, skipping disabled or keyless ones."""
    out: List[ProviderAdapter] = []
    for entry in cfg.providers:
        name = str(entry.get("name", "")).lower()
        if not entry.get("enabled", True):
            continue
        cls = PROVIDER_CLASSES.get(name)
        if cls is None:
            logger.warning("Unknown geocoding provider in config: %s", name)
            continue
        if cls.api_key_env and not os.getenv(cls.api_key_env, ""):
            logger.info("Skipping %s: %s is not set", name, cls.api_key_env)
            continue
        out.append(
            cls(
                quota_limit=entry.get("quota_limit"),
                window=entry.get("window"),
                min_interval=float(entry.get("min_interval") or 0.0),
                timeout=cfg.request_timeout,
                user_agent=cfg.user_agent,
            )
        )
    return out
