from __future__ import annotations
import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .business_types import get_business_type_hints
from .models import Coordinates, GeocodeProgress
from .providers import ProviderAdapter

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[GeocodeProgress], None]


class ProviderRegistry:
    """Ordered providers plus the shared rotation cursor.

    ``last_used_index`` only moves on a successful geocode, so consecutive
    lookups start from the provider after the last one that worked.
    """

    def __init__(self, providers: Iterable[ProviderAdapter]):
        self.providers: List[ProviderAdapter] = list(providers)
        self.last_used_index = -1
        self.lock = threading.RLock()

    def __len__(self) -> int:
        return len(self.providers)

    def rotation_order(self) -> List[int]:
        n = len(self.providers)
        if n == 0:
            return []
        start = (self.last_used_index + 1) % n
        return [(start + k) % n for k in range(n)]

    def mark_success(self, index: int) -> None:
        with self.lock:
            self.last_used_index = index

    def states(self) -> List[Dict[str, object]]:
        with self.lock:
            return [
                {
                    "index": i,
                    "name": p.name,
                    "request_counter": p.state.request_counter,
                    "quota_limit": p.state.quota_limit,
                    "has_quota": p.has_quota(),
                    "last_used": i == self.last_used_index,
                }
                for i, p in enumerate(self.providers)
            ]


class GeocodingOrchestrator:
    """Fail over across providers, retry with business hints, geocode in batches."""

    def __init__(self, registry: ProviderRegistry, progress_every: int = 10):
        self.registry = registry
        self.progress_every = max(1, int(progress_every))

    def geocode_address(self, address: str, cancel: Optional[threading.Event] = None) -> Optional[Coordinates]:
        return self._rotate(address, hint=None, cancel=cancel)

    def enhanced_geocode(
        self,
        address: str,
        business_name: Optional[str] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Optional[Coordinates]:
        result = self.geocode_address(address, cancel=cancel)
        if result is not None or not business_name:
            return result

        for hint in get_business_type_hints(business_name):
            if _cancelled(cancel):
                return None
            logger.debug("Retrying %r with business hint %r", address, hint)
            result = self._rotate(address, hint=hint, cancel=cancel)
            if result is not None:
                return result

        if _cancelled(cancel):
            return None
        return self._rotate(f"{business_name} {address}", hint=None, cancel=cancel)

    def batch_geocode(
        self,
        addresses: Sequence[str],
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Dict[str, Coordinates]:
        """Sequential lookups keyed by input string; progress every N addresses and at the end."""
        results: Dict[str, Coordinates] = {}
        todo = list(addresses)
        total = len(todo)
        succeeded = 0
        processed = 0

        for address in todo:
            if _cancelled(cancel):
                logger.info("Batch geocoding cancelled after %d of %d addresses", processed, total)
                break
            coords = self.geocode_address(address, cancel=cancel)
            processed += 1
            if coords is not None:
                results[address] = coords
                succeeded += 1

            if processed % self.progress_every == 0 or processed == total:
                self._report(GeocodeProgress(processed, total, succeeded), progress)

        return results

    def _rotate(self, address: str, hint: Optional[str], cancel: Optional[threading.Event]) -> Optional[Coordinates]:
        # one full cycle; the lock keeps "pick next provider" and the cursor update together
        with self.registry.lock:
            for idx in self.registry.rotation_order():
                if _cancelled(cancel):
                    return None
                provider = self.registry.providers[idx]
                if not provider.has_quota():
                    logger.debug("%s has no quota left, skipping", provider.name)
                    continue
                try:
                    logger.debug("Trying geocoding with %s", provider.name)
                    result = provider.geocode(address, hint=hint, cancel=cancel)
                except Exception:
                    logger.exception("Error with %s provider", provider.name)
                    continue
                if result is not None:
                    self.registry.mark_success(idx)
                    logger.info("Successfully geocoded with %s", provider.name)
                    return result

        logger.warning("All geocoding providers failed or exceeded quota for %r", address)
        return None

    def _report(self, p: GeocodeProgress, callback: Optional[ProgressCallback]) -> None:
        logger.info("Processed %d of %d addresses (%d successful)", p.processed, p.total, p.succeeded)
        if callback is not None:
            callback(p)


def _cancelled(cancel: Optional[threading.Event]) -> bool:
    return cancel is not None and cancel.is_set()
