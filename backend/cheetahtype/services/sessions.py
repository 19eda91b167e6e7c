import threading
import time
import uuid
from typing import Callable, Dict, Optional, Tuple


class SessionAnalyticsStore:
    """Short-lived per-session character counters with explicit eviction.

    Entries expire ``ttl_seconds`` after their last write; expired entries
    are purged on every access. One store belongs to one app instance.
    """

    def __init__(self, ttl_seconds: float = 1800, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[float, Optional[str], dict]] = {}

    def _purge(self, now: float) -> None:
        expired = [sid for sid, (deadline, _, _) in self._entries.items() if deadline <= now]
        for sid in expired:
            del self._entries[sid]

    def put(self, character_data: dict, session_id: Optional[str] = None,
            owner: Optional[str] = None) -> Optional[str]:
        """Store counters; returns None when ``session_id`` belongs to another owner."""
        session_id = session_id or uuid.uuid4().hex
        with self._lock:
            now = self._clock()
            self._purge(now)
            existing = self._entries.get(session_id)
            if existing is not None and existing[1] is not None and existing[1] != owner:
                return None
            self._entries[session_id] = (now + self.ttl_seconds, owner, dict(character_data))
        return session_id

    def get(self, session_id: str, owner: Optional[str] = None) -> Optional[dict]:
        """Stored counters, or None when missing, expired or owned by someone else."""
        with self._lock:
            self._purge(self._clock())
            entry = self._entries.get(session_id)
        if entry is None:
            return None
        _, entry_owner, data = entry
        if entry_owner is not None and entry_owner != owner:
            return None
        return data

    def evict(self, session_id: str, owner: Optional[str] = None) -> bool:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None or (entry[1] is not None and entry[1] != owner):
                return False
            del self._entries[session_id]
            return True

    def __len__(self):
        with self._lock:
            self._purge(self._clock())
            return len(self._entries)
