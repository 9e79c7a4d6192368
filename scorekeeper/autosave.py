import logging
import threading
from typing import Optional, Tuple

from scorekeeper.config import SAVE_DEBOUNCE_SECONDS
from scorekeeper.models import MatchRecord
from scorekeeper.storage import MatchDataStore

logger = logging.getLogger(__name__)


class PointLogAutosaver:
    """
    Fire-and-forget persistence for one video's point log.

    - save_now: new points are written immediately
    - schedule: edits are written after a quiet period
    The most recent record always wins; failures are logged and never
    reach the scoring code.

    Every record gets a sequence number when it is handed over. Writes
    are serialized and a record older than the last one written (or
    than the last cancel) is dropped, so a slow debounced flush can
    never land on top of a newer save or a reset.
    """

    def __init__(
        self,
        store: MatchDataStore,
        video_id: str,
        debounce_seconds: float = SAVE_DEBOUNCE_SECONDS,
    ):
        self.store = store
        self.video_id = video_id
        self.debounce_seconds = debounce_seconds

        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Tuple[int, MatchRecord]] = None
        self._seq = 0
        self._written_seq = 0
        self.last_updated: Optional[str] = None

    def save_now(self, record: MatchRecord):
        with self._lock:
            self._cancel_timer()
            self._pending = None
            seq = self._next_seq()
        self._write(seq, record)

    def schedule(self, record: MatchRecord):
        with self._lock:
            self._cancel_timer()
            self._pending = (self._next_seq(), record)
            self._timer = threading.Timer(self.debounce_seconds, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self):
        with self._lock:
            self._cancel_timer()
            pending = self._pending
            self._pending = None

        if pending is not None:
            self._write(*pending)

    def cancel(self):
        """
        Drop the pending record. Waits for a write in progress, and any
        record handed over before this call is discarded.
        """
        with self._lock:
            self._cancel_timer()
            self._pending = None
            seq = self._next_seq()

        with self._write_lock:
            self._written_seq = max(self._written_seq, seq)

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _write(self, seq: int, record: MatchRecord):
        with self._write_lock:
            if seq <= self._written_seq:
                logger.debug("Dropping stale point log %d for video %s", seq, self.video_id)
                return

            try:
                stored = self.store.save(self.video_id, record)
            except (OSError, ValueError):
                logger.exception("Failed to save point log for video %s", self.video_id)
                return

            self._written_seq = seq
            self.last_updated = stored.last_updated
