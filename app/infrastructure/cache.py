"""
Read-through cache in front of a status data store.

Activity and progress record lookups are cached per project code with a
TTL. Writing a project's status invalidates that project's entries.
"""
import logging
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable, Dict, List, Optional

from app.domain.entities import Activity, ProgressRecord, Project, ProjectStatus
from app.domain.services.status_store import StatusDataStore

logger = logging.getLogger(__name__)

# Default TTL in seconds
DEFAULT_TTL_SECONDS = 300  # 5 minutes
MAX_MEMORY_ENTRIES = 500


class CachedStatusStore:
    """StatusDataStore decorator caching the two list lookups."""

    def __init__(
        self,
        store: StatusDataStore,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_entries: int = MAX_MEMORY_ENTRIES,
        clock: Callable[[], datetime] = None,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._memory: Dict[tuple, dict] = {}  # (kind, code) -> {value, expires_at}
        self._codes_by_id: Dict[int, str] = {}
        self._lock = Lock()
        self._stats = {"hits": 0, "misses": 0, "evictions": 0, "invalidations": 0}

    # -------------------------------------------------------------------------
    # Cached reads
    # -------------------------------------------------------------------------

    def _read_through(self, kind: str, code: str, loader: Callable[[str], list]) -> list:
        key = (kind, code)
        now = self._clock()

        with self._lock:
            entry = self._memory.get(key)
            if entry and entry["expires_at"] > now:
                self._stats["hits"] += 1
                return list(entry["value"])
            elif entry:
                # Expired
                del self._memory[key]
            self._stats["misses"] += 1

        value = loader(code)

        with self._lock:
            self._memory[key] = {
                "value": list(value),
                "expires_at": now + timedelta(seconds=self.ttl_seconds),
            }
            self._enforce_memory_limit()
        return list(value)

    def list_activities(self, project_code: str) -> List[Activity]:
        return self._read_through("activities", project_code, self.store.list_activities)

    def list_progress_records(self, project_code: str) -> List[ProgressRecord]:
        return self._read_through("records", project_code, self.store.list_progress_records)

    # -------------------------------------------------------------------------
    # Pass-through
    # -------------------------------------------------------------------------

    def get_project(self, project_id: int) -> Project:
        project = self.store.get_project(project_id)
        with self._lock:
            self._codes_by_id.pop(project.id, None)
            self._codes_by_id[project.id] = project.code
            # Drop the least recently fetched projects past the entry limit
            while len(self._codes_by_id) > self.max_entries:
                del self._codes_by_id[next(iter(self._codes_by_id))]
        return project

    def list_project_ids(self, *args, **kwargs) -> List[int]:
        return self.store.list_project_ids(*args, **kwargs)

    def update_project_status(
        self,
        project_id: int,
        status: ProjectStatus,
        confidence: Optional[int],
        reason: str,
        timestamp: datetime,
        kpi_added: Optional[bool] = None,
        source: str = "automatic",
    ) -> None:
        try:
            self.store.update_project_status(
                project_id, status, confidence, reason, timestamp,
                kpi_added=kpi_added, source=source,
            )
        finally:
            with self._lock:
                code = self._codes_by_id.get(project_id)
            if code is None:
                self.clear()
            else:
                self.invalidate(code)

    def __getattr__(self, name):
        # Remaining store operations (summaries, audit reads) are not cached
        if name == "store":
            raise AttributeError(name)
        return getattr(self.store, name)

    # -------------------------------------------------------------------------
    # Invalidation
    # -------------------------------------------------------------------------

    def invalidate(self, project_code: str) -> None:
        """Drop cached lookups for one project."""
        with self._lock:
            for kind in ("activities", "records"):
                if self._memory.pop((kind, project_code), None) is not None:
                    self._stats["invalidations"] += 1

    def clear(self) -> None:
        """Drop every cached lookup."""
        with self._lock:
            self._stats["invalidations"] += len(self._memory)
            self._memory.clear()
            self._codes_by_id.clear()
        logger.debug("Status store cache cleared")

    def _enforce_memory_limit(self) -> None:
        """Evict soonest-expiring entries over the limit. Caller holds the lock."""
        overflow = len(self._memory) - self.max_entries
        if overflow <= 0:
            return
        for key, _ in sorted(self._memory.items(), key=lambda kv: kv[1]["expires_at"])[:overflow]:
            del self._memory[key]
            self._stats["evictions"] += 1

    @property
    def stats(self) -> dict:
        with self._lock:
            return {
                **self._stats,
                "size": len(self._memory),
                "tracked_projects": len(self._codes_by_id),
            }
