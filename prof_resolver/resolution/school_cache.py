"""Sticky school cache: the school most recently resolved for a page domain.

The cache is shared, mutable and deliberately unlocked. Concurrent
resolutions that both write race and the last write wins; a reader may get a
binding that a newer resolution is about to replace. Staleness is made
observable instead of prevented: every write bumps a generation counter and
entries can expire after a TTL.
"""

import time
from collections import OrderedDict
from typing import Any, Callable, Optional

from pydantic import BaseModel

from prof_resolver.utils.logger import get_logger


# Cache key used when a manual override arrives without a page domain
MANUAL_OVERRIDE_DOMAIN = "manual-override"


class CachedSchool(BaseModel):
    """One domain -> school binding.

    Attributes:
        school_id: Directory school ID
        school_name: Directory school name
        domain: Normalized domain the binding was made for
        generation: Cache generation at write time
        stored_at: Clock reading at write time
    """

    school_id: str
    school_name: str
    domain: str
    generation: int
    stored_at: float


def cache_key(domain: Optional[str]) -> str:
    """Normalize a domain for lookup; an empty domain maps to the override sentinel."""
    key = (domain or "").strip().lower().rstrip(".")
    return key or MANUAL_OVERRIDE_DOMAIN


class SchoolContextCache:
    """Mapping from page domain to resolved school.

    With max_entries=1 (the default) it behaves as a single slot: at most one
    binding is active and every successful resolution overwrites it.
    """

    def __init__(
        self,
        max_entries: int = 1,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries <= 0:
            raise ValueError("max_entries must be greater than 0")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[str, CachedSchool]" = OrderedDict()
        self.generation = 0
        self.logger: Any = get_logger(
            correlation_id="school-cache",
            phase="resolution",
            component="school_cache",
        )

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, entry: CachedSchool) -> bool:
        if self.ttl_seconds is None:
            return False
        return self._clock() - entry.stored_at > self.ttl_seconds

    def lookup(self, domain: Optional[str]) -> Optional[CachedSchool]:
        """Return the live binding for a domain, dropping it if expired."""
        key = cache_key(domain)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry):
            self.logger.info(
                "Cached school expired",
                domain=key,
                school_name=entry.school_name,
                generation=entry.generation,
            )
            del self._entries[key]
            return None
        return entry

    def bind(self, domain: Optional[str], school_id: str, school_name: str) -> CachedSchool:
        """Store a binding for a domain, evicting the oldest beyond max_entries."""
        key = cache_key(domain)
        self.generation += 1
        entry = CachedSchool(
            school_id=school_id,
            school_name=school_name,
            domain=key,
            generation=self.generation,
            stored_at=self._clock(),
        )
        self._entries.pop(key, None)
        self._entries[key] = entry
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

        self.logger.info(
            "School bound to domain",
            domain=key,
            school_id=school_id,
            school_name=school_name,
            generation=self.generation,
        )
        return entry

    def is_current(self, entry: CachedSchool) -> bool:
        """True if no write has happened since this entry was stored."""
        return entry.generation == self.generation

    def clear(self) -> None:
        self._entries.clear()
