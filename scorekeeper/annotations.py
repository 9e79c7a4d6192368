from typing import List, Optional, Sequence, Tuple

from scorekeeper.config import DEFAULT_PLAYER_NAMES
from scorekeeper.models import MatchConfig, Player, Point

ORDINALS = ("first", "second", "third", "fourth", "fifth")


def format_time(seconds: float) -> str:
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


def display_name(player: Player, default: str) -> str:
    return player.name.strip() or default


def ordinal(index: int) -> str:
    if 0 <= index < len(ORDINALS):
        return ORDINALS[index]
    return f"{index + 1}th"


def _names(names: Optional[Tuple[str, str]]) -> Tuple[str, str]:
    names = names or ("", "")
    return (
        names[0].strip() or DEFAULT_PLAYER_NAMES[0],
        names[1].strip() or DEFAULT_PLAYER_NAMES[1],
    )


def describe_point(point: Point, names: Optional[Tuple[str, str]] = None) -> str:
    """e.g. "0:12 - 0:31  Point to Player 1" """
    p1, p2 = _names(names)
    who = p1 if point.winner == 1 else p2
    return f"{format_time(point.start_time or 0)} - {format_time(point.end_time or 0)}  Point to {who}"


def describe_divider(
    points: Sequence[Point],
    index: int,
    config: MatchConfig,
    names: Optional[Tuple[str, str]] = None,
) -> List[str]:
    """
    Section-break lines shown under points[index] in the point list.
    Empty when the point crossed no boundary.
    """
    point = points[index]
    state = point.score_state
    if point.divider is None or state is None:
        return []

    p1, p2 = _names(names)
    winner_name = p1 if point.winner == 1 else p2
    winner_key = "player1" if point.winner == 1 else "player2"
    loser_key = "player2" if point.winner == 1 else "player1"

    if point.divider == "set":
        set_index = len(state.player1.completed_sets) - 1
        winner_score = getattr(state, winner_key).completed_sets[set_index].score
        loser_score = getattr(state, loser_key).completed_sets[set_index].score
        unit = "set" if config.type == "match" else "tiebreak"
        return [
            f"{winner_name} takes the {ordinal(set_index)} {unit}",
            f"{winner_score}-{loser_score}",
        ]

    if point.divider == "tiebreak":
        tiebreak_index = len(state.player1.completed_sets) - 1
        winner_score = getattr(state, winner_key).completed_sets[tiebreak_index].score
        loser_score = getattr(state, loser_key).completed_sets[tiebreak_index].score
        previous_wins = sum(1 for p in points[:index] if p.divider == "tiebreak")
        return [
            f"{winner_name} wins the {ordinal(previous_wins)} tiebreak",
            f"{winner_score}-{loser_score}",
        ]

    if point.divider == "tiebreak-start":
        server = p1 if state.player1.is_serving else p2
        set_index = len(state.player1.completed_sets)
        return [f"{server} starts the {ordinal(set_index)} set tiebreak"]

    # "game" dividers only appear in logs saved by older clients
    server_is_p2 = state.player2.is_serving
    server = p2 if server_is_p2 else p1
    p1_games, p2_games = state.player1.current_set, state.player2.current_set
    if server_is_p2:
        games = f"{p2_games}-{p1_games}"
    else:
        games = f"{p1_games}-{p2_games}"
    return [f"{server} to serve", games]
