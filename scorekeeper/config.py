import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.environ.get("SCOREKEEPER_DATA_DIR", PROJECT_ROOT / "data"))
MATCH_DATA_PATH = DATA_DIR / "match_data.json"

SCHEMA_VERSION = 1

MATCH_TYPES = ("match", "tiebreak")
DEFAULT_TIEBREAK_POINTS = 7
TIEBREAK_POINT_OPTIONS = (7, 10)

# Edits to recorded points are persisted after this quiet period
SAVE_DEBOUNCE_SECONDS = 2.0

DEFAULT_PLAYER_NAMES = ("Player 1", "Player 2")
