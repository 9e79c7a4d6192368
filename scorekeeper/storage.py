import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from scorekeeper.config import MATCH_DATA_PATH
from scorekeeper.models import MatchRecord

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class MatchDataStore:
    """
    JSON file holding the point log of every video, keyed by video id.

    save() fully overwrites a video's entry (last write wins) and
    stamps a fresh lastUpdated.
    """

    def __init__(self, path: Path = MATCH_DATA_PATH, clock: Callable[[], str] = utc_now_iso):
        self.path = Path(path)
        self._clock = clock
        self._lock = threading.Lock()

    # ---------------------------------------------------------
    # File IO
    # ---------------------------------------------------------

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}

        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Match data file must hold an object: {self.path}")

        return data

    def _write_all(self, data: Dict[str, Any]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

        tmp_path.replace(self.path)

    # ---------------------------------------------------------
    # Public API
    # ---------------------------------------------------------

    def get(self, video_id: str) -> MatchRecord:
        with self._lock:
            data = self._read_all()

        entry = data.get(video_id)
        if entry is None:
            return MatchRecord(points=[], last_updated=None)

        return MatchRecord.from_dict(entry)

    def save(self, video_id: str, record: MatchRecord) -> MatchRecord:
        with self._lock:
            data = self._read_all()

            stored = MatchRecord(
                points=list(record.points),
                match_config=record.match_config,
                is_configured=record.is_configured,
                player_names=record.player_names,
                last_updated=self._clock(),
            )
            data[video_id] = stored.to_dict()
            self._write_all(data)

        logger.debug("Saved %d points for video %s", len(stored.points), video_id)
        return stored

    def reset(self, video_id: str) -> Optional[str]:
        """Clear points, config and names. Returns the new lastUpdated."""
        with self._lock:
            data = self._read_all()

            if video_id not in data:
                return None

            last_updated = self._clock()
            data[video_id] = MatchRecord(points=[], last_updated=last_updated).to_dict()
            self._write_all(data)

        logger.info("Reset point log for video %s", video_id)
        return last_updated

    def delete(self, video_id: str) -> bool:
        with self._lock:
            data = self._read_all()

            if video_id not in data:
                return False

            del data[video_id]
            self._write_all(data)

        logger.info("Deleted point log for video %s", video_id)
        return True
