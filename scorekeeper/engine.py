"""
Single point transition shared by live scoring and replay.

Both MatchSession and the replay functions in timeline.py go through
apply_point, so a replayed log always lands on the state the live
session held after the same point.
"""
from dataclasses import replace
from typing import Optional, Tuple

from scorekeeper.config import MATCH_TYPES, TIEBREAK_POINT_OPTIONS
from scorekeeper.exceptions import ConfigurationError, InvalidStateError, InvalidWinnerError
from scorekeeper.models import (
    Divider,
    MatchConfig,
    MatchState,
    Player,
    PointResult,
    SetResult,
    other_player,
)
from scorekeeper.rotation import calculate_server
from scorekeeper.score_rules import (
    is_tiebreak_won,
    score_regular_point,
    should_change_server,
    switch_server,
)


# =========================================================
# SETUP
# =========================================================

def validate_config(config: MatchConfig):
    if config.type not in MATCH_TYPES:
        raise ConfigurationError(f"Invalid match type: {config.type}")

    if config.tiebreak_points not in TIEBREAK_POINT_OPTIONS:
        raise ConfigurationError(
            f"tiebreak_points must be one of {TIEBREAK_POINT_OPTIONS}"
        )

    if config.first_server is not None and config.first_server not in (1, 2):
        raise ConfigurationError(f"Invalid first server: {config.first_server}")


def initial_state(config: MatchConfig, player_names: Tuple[str, str] = ("", "")) -> MatchState:
    validate_config(config)

    return MatchState(
        player1=Player(name=player_names[0], is_serving=config.first_server == 1),
        player2=Player(name=player_names[1], is_serving=config.first_server == 2),
        config=replace(config, in_tiebreak=False),
    )


def is_decided(state: MatchState) -> bool:
    """A standalone tiebreak accepts no points once it has a result."""
    return state.config.type == "tiebreak" and len(state.player1.completed_sets) > 0


# =========================================================
# TRANSITION
# =========================================================

def apply_point(state: MatchState, winner: int) -> PointResult:
    if winner not in (1, 2):
        raise InvalidWinnerError(f"Invalid winner: {winner}")

    config = state.config
    validate_config(config)

    if config.first_server is None:
        raise ConfigurationError("First server must be selected before scoring")

    if is_decided(state):
        raise InvalidStateError("Tiebreak is already decided")

    if config.type == "tiebreak" or config.in_tiebreak:
        new_state = score_tiebreak_point(state, winner)
    else:
        new_state = score_regular_point(state, winner)

    return PointResult(state=new_state, divider=derive_divider(new_state))


def score_tiebreak_point(state: MatchState, winner: int) -> MatchState:
    winning = state.player(winner)
    losing = state.player(other_player(winner))

    new_score = winning.current_game + 1
    advanced = state.with_player(winner, replace(winning, current_game=new_score))

    if is_tiebreak_won(new_score, losing.current_game, state.config.tiebreak_points):
        return award_tiebreak(state, advanced, winner)

    total_points = state.player1.current_game + state.player2.current_game + 1
    if should_change_server(total_points):
        return switch_server(advanced)

    return advanced


def award_tiebreak(before: MatchState, advanced: MatchState, winner: int) -> MatchState:
    """
    Close a tiebreak.

    In a match, each player's SetResult.tiebreak_score is the OPPONENT's
    tiebreak points: a 7-5 tiebreak stores 5 for the winner and 7 for the
    loser. Clients that stored a player's own count need the two swapped.

    before is the state ahead of the winning point and drives the next
    server; advanced already includes the winning point.
    """
    p1_points = advanced.player1.current_game
    p2_points = advanced.player2.current_game

    if advanced.config.type == "match":
        next_server = calculate_server(
            before.config, before.player1, before.player2, tiebreak_won=True
        )

        def close(player: Player, num: int, opponent_points: int) -> Player:
            won = winner == num
            return replace(
                player,
                completed_sets=player.completed_sets + (
                    SetResult(score=7 if won else 6, won_set=won, tiebreak_score=opponent_points),
                ),
                current_set=0,
                current_game=0,
                is_serving=next_server == num,
            )

        return MatchState(
            player1=close(advanced.player1, 1, p2_points),
            player2=close(advanced.player2, 2, p1_points),
            config=replace(advanced.config, in_tiebreak=False),
        )

    def finish(player: Player, num: int) -> Player:
        return replace(
            player,
            completed_sets=player.completed_sets + (
                SetResult(score=player.current_game, won_set=winner == num),
            ),
            current_set=0,
            current_game=0,
            is_serving=False,
        )

    return replace(
        advanced,
        player1=finish(advanced.player1, 1),
        player2=finish(advanced.player2, 2),
    )


# =========================================================
# DIVIDERS
# =========================================================

def derive_divider(state: MatchState) -> Optional[Divider]:
    """
    Boundary crossed by the point that produced state.

    Plain game wins are not marked; only set, tiebreak and
    tiebreak-start boundaries split the point list.
    """
    p1, p2 = state.player1, state.player2

    if p1.current_game != 0 or p2.current_game != 0:
        return None

    if state.config.type == "tiebreak":
        return "tiebreak"

    if p1.current_set == 0 and p2.current_set == 0:
        return "set"

    if state.config.in_tiebreak and p1.current_set == 6 and p2.current_set == 6:
        return "tiebreak-start"

    return None
