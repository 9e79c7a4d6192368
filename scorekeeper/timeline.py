import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from scorekeeper.engine import apply_point, initial_state
from scorekeeper.exceptions import ConfigurationError, ReplayDivergenceError, ScoringError
from scorekeeper.models import (
    MatchConfig,
    MatchState,
    Point,
    PointResult,
    TimelineEntry,
)

logger = logging.getLogger(__name__)


def _start(initial_config: MatchConfig, player_names: Optional[Tuple[str, str]]) -> MatchState:
    return initial_state(initial_config, player_names or ("", ""))


def replay_points(
    points: Sequence[Point],
    initial_config: MatchConfig,
    player_names: Optional[Tuple[str, str]] = None,
) -> List[PointResult]:
    """
    Replays a point log from scratch.
    Returns the result after each point, in log order.
    Does NOT mutate external state.
    """
    state = _start(initial_config, player_names)

    if points and state.config.first_server is None:
        raise ConfigurationError("Cannot replay points without a first server")

    results: List[PointResult] = []

    for index, point in enumerate(points):
        if point.winner not in (1, 2):
            raise ReplayDivergenceError(index, f"invalid winner {point.winner!r}")

        try:
            result = apply_point(state, point.winner)
        except ScoringError as e:
            raise ReplayDivergenceError(index, str(e)) from e

        results.append(result)
        state = result.state

    logger.debug("Replayed %d points", len(results))
    return results


def recalculate_score_from_points(
    points: Sequence[Point],
    initial_config: MatchConfig,
    player_names: Optional[Tuple[str, str]] = None,
) -> MatchState:
    results = replay_points(points, initial_config, player_names)
    if not results:
        return _start(initial_config, player_names)
    return results[-1].state


def annotate_points(
    points: Sequence[Point],
    initial_config: MatchConfig,
    player_names: Optional[Tuple[str, str]] = None,
) -> List[Point]:
    """Points with score_state and divider regenerated from replay."""
    results = replay_points(points, initial_config, player_names)

    return [
        replace(point, score_state=result.state.snapshot(), divider=result.divider)
        for point, result in zip(points, results)
    ]


def state_before_point(
    points: Sequence[Point],
    index: int,
    initial_config: MatchConfig,
    player_names: Optional[Tuple[str, str]] = None,
    use_snapshots: bool = False,
) -> MatchState:
    """
    Scoreboard right before points[index] was played.

    With use_snapshots, the previous point's stored score_state is used
    when present instead of replaying points[:index].
    """
    if index < 0 or index > len(points):
        raise IndexError(f"Point index out of range: {index}")

    if index == 0:
        return _start(initial_config, player_names)

    previous = points[index - 1].score_state
    if use_snapshots and previous is not None:
        start = _start(initial_config, player_names)
        return MatchState(
            player1=previous.player1,
            player2=previous.player2,
            config=replace(start.config, in_tiebreak=previous.in_tiebreak),
        )

    return recalculate_score_from_points(points[:index], initial_config, player_names)


def score_at_time(
    points: Sequence[Point],
    initial_config: MatchConfig,
    video_time: float,
    player_names: Optional[Tuple[str, str]] = None,
) -> MatchState:
    """Scoreboard at a video position: every point finished by then counts."""
    finished = [
        p for p in points
        if p.end_time is not None and p.end_time <= video_time
    ]
    return recalculate_score_from_points(finished, initial_config, player_names)


def build_match_timeline(
    points: Sequence[Point],
    initial_config: MatchConfig,
    player_names: Optional[Tuple[str, str]] = None,
) -> List[TimelineEntry]:
    """
    Pairs every point with the scoreboard before and after it.
    The export renderer captions each clip with the before state.
    """
    results = replay_points(points, initial_config, player_names)

    timeline: List[TimelineEntry] = []
    before = _start(initial_config, player_names)

    for index, (point, result) in enumerate(zip(points, results)):
        timeline.append(
            TimelineEntry(
                index=index,
                point=point,
                before=before,
                after=result.state,
                divider=result.divider,
            )
        )
        before = result.state

    return timeline


def validate_point_log(points: Sequence[Point]) -> List[str]:
    """
    Return list of problems (empty == valid).
    Checks times only; winners are checked by replay.
    """
    problems: List[str] = []

    for i, p in enumerate(points):
        if p.start_time is None or p.end_time is None:
            problems.append(f"points[{i}]: start_time and end_time are required")
            continue
        if p.start_time < 0:
            problems.append(f"points[{i}]: start_time < 0")
        if p.end_time <= p.start_time:
            problems.append(f"points[{i}]: end_time must be > start_time")

    timed = [(i, p) for i, p in enumerate(points) if p.start_time is not None and p.end_time is not None]
    for (i, prev), (j, cur) in zip(timed, timed[1:]):
        if cur.start_time < prev.start_time:
            problems.append(f"points[{j}]: start_time not in chronological order")
        elif cur.start_time <= prev.end_time:
            problems.append(f"points[{j}]: overlaps points[{i}]")

    return problems
