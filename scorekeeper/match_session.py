import bisect
import logging
from dataclasses import replace
from enum import Enum
from typing import List, Optional, Tuple

from scorekeeper.autosave import PointLogAutosaver
from scorekeeper.config import DEFAULT_TIEBREAK_POINTS
from scorekeeper.engine import apply_point, initial_state, is_decided, validate_config
from scorekeeper.exceptions import (
    ConfigurationError,
    InvalidStateError,
    InvalidWinnerError,
    TemporalError,
)
from scorekeeper.models import MatchConfig, MatchRecord, MatchState, Player, Point
from scorekeeper.timeline import replay_points, score_at_time, validate_point_log

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    NOT_CONFIGURED = "not_configured"
    CONFIGURED = "configured"
    IN_POINT = "in_point"
    SET_COMPLETE = "set_complete"
    MATCH_COMPLETE = "match_complete"


class MatchSession:
    """
    Live scoring for one video.

    Responsibilities:
    - Hold current Player / MatchConfig state
    - Apply one point at a time through engine.apply_point
    - Keep the point log chronological, with snapshots and dividers
    - Hand every change to the autosaver

    Every operation either completes or raises without mutating state.
    """

    def __init__(self, autosaver: Optional[PointLogAutosaver] = None):
        self._autosaver = autosaver
        self._clear()

    def _clear(self):
        self._names: Tuple[str, str] = ("", "")
        self._state = initial_state(MatchConfig())
        self._configured = False
        self._scoring_started = False
        self._points: List[Point] = []
        self._current_point: Optional[Point] = None

    # ---------------------------------------------------------
    # Read-only views
    # ---------------------------------------------------------

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def player1(self) -> Player:
        return self._state.player1

    @property
    def player2(self) -> Player:
        return self._state.player2

    @property
    def match_config(self) -> MatchConfig:
        return self._state.config

    @property
    def points(self) -> List[Point]:
        return list(self._points)

    @property
    def current_point(self) -> Optional[Point]:
        return self._current_point

    @property
    def scoring_started(self) -> bool:
        return self._scoring_started

    @property
    def phase(self) -> Phase:
        if not self._configured or self.match_config.first_server is None:
            return Phase.NOT_CONFIGURED
        if is_decided(self._state):
            return Phase.MATCH_COMPLETE
        if self._current_point is not None:
            return Phase.IN_POINT
        if self._points and self._points[-1].divider == "set":
            return Phase.SET_COMPLETE
        return Phase.CONFIGURED

    def _initial_config(self) -> MatchConfig:
        return replace(self.match_config, in_tiebreak=False)

    # ---------------------------------------------------------
    # Setup
    # ---------------------------------------------------------

    def configure(
        self,
        match_type: str = "match",
        tiebreak_points: int = DEFAULT_TIEBREAK_POINTS,
        no_ad: bool = False,
    ):
        if self._scoring_started:
            raise InvalidStateError("Match config cannot change once scoring has started")

        config = replace(
            self.match_config,
            type=match_type,
            tiebreak_points=tiebreak_points,
            no_ad=no_ad,
            in_tiebreak=False,
        )
        validate_config(config)

        self._state = replace(self._state, config=config)
        self._configured = True

    def set_first_server(self, player: int):
        if player not in (1, 2):
            raise ConfigurationError(f"Invalid first server: {player}")

        if self._points or self._current_point is not None:
            raise InvalidStateError("First server cannot change after the first point")

        self._state = MatchState(
            player1=replace(self.player1, is_serving=player == 1),
            player2=replace(self.player2, is_serving=player == 2),
            config=replace(self.match_config, first_server=player),
        )

    def set_player_name(self, player: int, name: str):
        if player not in (1, 2):
            raise ValueError(f"Invalid player: {player}")

        self._state = self._state.with_player(player, replace(self._state.player(player), name=name))
        names = list(self._names)
        names[player - 1] = name
        self._names = (names[0], names[1])
        self._schedule_save()

    def start_scoring(self):
        if not self._configured:
            raise ConfigurationError("Match type must be configured before scoring")
        if self.match_config.first_server is None:
            raise ConfigurationError("First server must be selected before scoring")

        self._scoring_started = True

    # ---------------------------------------------------------
    # Live scoring
    # ---------------------------------------------------------

    def start_point(self, video_time: float):
        self.start_scoring()

        if self._state.serving() is None:
            if is_decided(self._state):
                raise InvalidStateError("Tiebreak is already decided")
            raise ConfigurationError("No server selected")

        if self._time_in_recorded_point(video_time):
            raise TemporalError(f"{video_time} falls inside a recorded point")

        self._current_point = Point(start_time=float(video_time))

    def cancel_point(self):
        self._current_point = None

    def record_point_winner(self, winner: int, video_time: float) -> Point:
        if self._current_point is None or self._current_point.start_time is None:
            raise InvalidStateError("No point in progress")

        if winner not in (1, 2):
            raise InvalidWinnerError(f"Invalid winner: {winner}")

        start_time = self._current_point.start_time
        end_time = float(video_time)

        if end_time <= start_time:
            raise TemporalError("End time must be after start time")

        if self._overlaps_recorded_point(start_time, end_time):
            raise TemporalError("Cannot record point within existing point range")

        point = Point(start_time=start_time, end_time=end_time, winner=winner)
        index = self._insertion_index(start_time)

        if index == len(self._points):
            result = apply_point(self._state, winner)
            point = replace(point, score_state=result.state.snapshot(), divider=result.divider)
            self._points.append(point)
            self._state = result.state
        else:
            # Inserted before later points: re-score the whole log
            self._rescore(self._points[:index] + [point] + self._points[index:])
            point = self._points[index]

        self._current_point = None

        logger.debug(
            "Point %d to player %d (%.2f-%.2f) divider=%s",
            index, winner, start_time, end_time, point.divider,
        )
        self._save_now()
        return point

    # ---------------------------------------------------------
    # Editing recorded points
    # ---------------------------------------------------------

    def edit_point(
        self,
        index: int,
        start_time: Optional[float] = None,
        end_time: Optional[float] = None,
        winner: Optional[int] = None,
    ) -> Point:
        original = self._get_point(index)

        new_start = original.start_time if start_time is None else float(start_time)
        new_end = original.end_time if end_time is None else float(end_time)
        new_winner = original.winner if winner is None else winner

        if new_winner not in (1, 2):
            raise InvalidWinnerError(f"Invalid winner: {new_winner}")

        if new_end <= new_start:
            raise TemporalError("End time must be after start time")

        others = self._points[:index] + self._points[index + 1:]
        if any(p.overlaps(new_start, new_end) for p in others):
            raise TemporalError("Edited point overlaps another point")

        edited = Point(start_time=new_start, end_time=new_end, winner=new_winner)
        points = sorted(others + [edited], key=lambda p: p.start_time)

        self._rescore(points)
        self._schedule_save()
        return self._points[points.index(edited)]

    def delete_point(self, index: int):
        self._get_point(index)

        self._rescore(self._points[:index] + self._points[index + 1:])
        self._schedule_save()

    def reset(self):
        self._clear()
        if self._autosaver is not None:
            self._autosaver.cancel()
            self._autosaver.store.reset(self._autosaver.video_id)

    # ---------------------------------------------------------
    # Queries
    # ---------------------------------------------------------

    def score_at(self, video_time: float) -> MatchState:
        return score_at_time(self._points, self._initial_config(), video_time, self._names)

    def to_record(self) -> MatchRecord:
        return MatchRecord(
            points=list(self._points),
            match_config=self._initial_config(),
            is_configured=self._configured,
            player_names=self._names,
        )

    @classmethod
    def from_record(
        cls,
        record: MatchRecord,
        autosaver: Optional[PointLogAutosaver] = None,
    ) -> "MatchSession":
        """Restore a session by replaying a stored point log."""
        problems = validate_point_log(record.points)
        if problems:
            raise TemporalError("Stored point log is invalid:\n" + "\n".join(problems))

        session = cls(autosaver=autosaver)

        if record.player_names is not None:
            session._names = record.player_names

        config = MatchConfig()
        if record.match_config is not None:
            config = replace(record.match_config, in_tiebreak=False)
            validate_config(config)
            session._configured = record.is_configured or bool(record.points)

        session._state = initial_state(config, session._names)

        if record.points:
            session._rescore(list(record.points))
            session._scoring_started = True

        return session

    # ---------------------------------------------------------
    # Internals
    # ---------------------------------------------------------

    def _get_point(self, index: int) -> Point:
        if index < 0 or index >= len(self._points):
            raise IndexError(f"Point index out of range: {index}")
        return self._points[index]

    def _time_in_recorded_point(self, time: float) -> bool:
        return any(p.contains(time) for p in self._points)

    def _overlaps_recorded_point(self, start: float, end: float) -> bool:
        return any(p.overlaps(start, end) for p in self._points)

    def _insertion_index(self, start_time: float) -> int:
        starts = [p.start_time for p in self._points]
        return bisect.bisect_right(starts, start_time)

    def _rescore(self, points: List[Point]):
        config = self._initial_config()
        results = replay_points(points, config, self._names)

        self._points = [
            replace(point, score_state=result.state.snapshot(), divider=result.divider)
            for point, result in zip(points, results)
        ]
        self._state = results[-1].state if results else initial_state(config, self._names)

    def _save_now(self):
        if self._autosaver is not None:
            self._autosaver.save_now(self.to_record())

    def _schedule_save(self):
        if self._autosaver is not None:
            self._autosaver.schedule(self.to_record())
