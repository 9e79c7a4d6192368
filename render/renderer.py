import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

from scorekeeper.annotations import display_name
from scorekeeper.config import DEFAULT_PLAYER_NAMES
from scorekeeper.models import MatchState, TimelineEntry
from scorekeeper.score_rules import format_game_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetCell:
    score: int
    won: bool
    tiebreak: Optional[int] = None


@dataclass(frozen=True)
class ScoreboardRow:
    name: str
    serving: bool
    sets: Tuple[SetCell, ...]
    cells: Tuple[str, ...]


def _player_row(state: MatchState, num: int) -> ScoreboardRow:
    player = state.player(num)
    opponent = state.player(2 if num == 1 else 1)
    config = state.config
    name = display_name(player, DEFAULT_PLAYER_NAMES[num - 1])

    if config.type == "tiebreak":
        # Once decided, show the final tiebreak score instead of 0-0
        decided = (
            player.completed_sets
            and player.current_game == 0
            and opponent.current_game == 0
        )
        value = player.completed_sets[-1].score if decided else player.current_game
        return ScoreboardRow(name=name, serving=player.is_serving, sets=(), cells=(str(value),))

    # tiebreak_score is stored on the opponent's result, so a player's own
    # tiebreak points come from the other side of the same set
    sets = tuple(
        SetCell(score=own.score, won=own.won_set, tiebreak=theirs.tiebreak_score)
        for own, theirs in zip(player.completed_sets, opponent.completed_sets)
    )

    if config.in_tiebreak:
        game = str(player.current_game)
    else:
        game = format_game_score(player.current_game, opponent.current_game)

    return ScoreboardRow(
        name=name,
        serving=player.is_serving,
        sets=sets,
        cells=(str(player.current_set), game),
    )


def scoreboard_rows(state: MatchState) -> List[ScoreboardRow]:
    return [_player_row(state, 1), _player_row(state, 2)]


class ScoreboardRenderer:
    """
    Cuts the timeline's points out of the source video into one file.

    Each point is captioned with the scoreboard as it stood before the
    point was played.
    """

    def __init__(
        self,
        input_path: str,
        output_path: str,
        timeline: List[TimelineEntry],
        include_scoreboard: bool = True,
    ):
        self.input_path = input_path
        self.output_path = output_path
        self.timeline = timeline
        self.include_scoreboard = include_scoreboard

        if not self.timeline:
            raise ValueError("Timeline cannot be empty")

        for entry in self.timeline:
            if entry.point.start_time is None or entry.point.end_time is None:
                raise ValueError(f"Point {entry.index} has no start/end time")

    def render(self, progress=None) -> int:
        """
        Write the output video. Returns the number of frames written.
        progress is an optional callable invoked once per finished point.
        """
        cap = cv2.VideoCapture(self.input_path)

        if not cap.isOpened():
            raise RuntimeError("Cannot open input video")

        fps = cap.get(cv2.CAP_PROP_FPS) or 30.0
        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

        fourcc = cv2.VideoWriter_fourcc(*"mp4v")
        out = cv2.VideoWriter(self.output_path, fourcc, fps, (width, height))

        written = 0
        try:
            for entry in self.timeline:
                written += self._write_point(cap, out, entry, fps)
                if progress is not None:
                    progress(entry)
        finally:
            cap.release()
            out.release()

        logger.info("Exported %d points (%d frames) to %s", len(self.timeline), written, self.output_path)
        return written

    def _write_point(self, cap, out, entry: TimelineEntry, fps: float) -> int:
        start = entry.point.start_time
        end = entry.point.end_time

        cap.set(cv2.CAP_PROP_POS_MSEC, start * 1000.0)
        frame_index = int(round(start * fps))
        written = 0

        while True:
            current_time = frame_index / fps
            if current_time > end:
                break

            ret, frame = cap.read()
            if not ret:
                break

            if self.include_scoreboard:
                self.draw_scoreboard(frame, entry.before)

            out.write(frame)
            written += 1
            frame_index += 1

        return written

    # ----------------------------------------------------
    # DRAWING
    # ----------------------------------------------------

    def draw_scoreboard(self, frame: np.ndarray, state: MatchState):
        height, width = frame.shape[:2]
        rows = scoreboard_rows(state)

        cell_width = 44
        name_width = 170
        row_height = 36
        margin = 10
        padding = 8

        columns = max(len(r.sets) + len(r.cells) for r in rows)
        board_width = name_width + columns * cell_width + 2 * padding
        board_height = len(rows) * row_height + 2 * padding

        # bottom-left corner
        x1 = margin
        y2 = height - margin
        x2 = min(width - 1, x1 + board_width)
        y1 = max(0, y2 - board_height)

        overlay = frame.copy()
        cv2.rectangle(overlay, (x1, y1), (x2, y2), (0, 0, 0), -1)
        alpha = 0.75
        cv2.addWeighted(overlay, alpha, frame, 1 - alpha, 0, frame)

        font = cv2.FONT_HERSHEY_SIMPLEX
        white = (255, 255, 255)
        grey = (180, 180, 180)
        green = (129, 185, 16)

        for i, row in enumerate(rows):
            baseline = y1 + padding + (i + 1) * row_height - 12

            cv2.putText(frame, row.name[:16], (x1 + padding, baseline), font, 0.55, white, 1)

            if row.serving:
                cv2.circle(frame, (x1 + name_width - 12, baseline - 5), 4, green, -1)

            x = x1 + padding + name_width
            for cell in row.sets:
                thickness = 2 if cell.won else 1
                cv2.putText(frame, str(cell.score), (x, baseline), font, 0.6, white, thickness)
                if cell.tiebreak is not None:
                    cv2.putText(frame, str(cell.tiebreak), (x + 14, baseline - 10), font, 0.35, grey, 1)
                x += cell_width

            for text in row.cells:
                cv2.putText(frame, text, (x, baseline), font, 0.6, white, 2)
                x += cell_width
