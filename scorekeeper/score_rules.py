from dataclasses import replace

from scorekeeper.models import MatchState, Player, SetResult, other_player


GAME_SCORE_LABELS = ("0", "15", "30", "40", "Ad")

DEUCE = 3
ADVANTAGE = 4


# =========================================================
# DISPLAY
# =========================================================

def format_game_score(score: int, other_score: int) -> str:
    """
    Tennis label for a game score.

    Returns "" when the opponent holds the advantage, so the
    scoreboard only shows "Ad" on one side.
    """
    if other_score == ADVANTAGE:
        return ""
    if 0 <= score < len(GAME_SCORE_LABELS):
        return GAME_SCORE_LABELS[score]
    return ""


# =========================================================
# TIEBREAK ARITHMETIC
# =========================================================

def is_tiebreak_won(winning_score: int, losing_score: int, target_points: int) -> bool:
    return winning_score >= target_points and winning_score - losing_score >= 2


def should_change_server(total_points: int) -> bool:
    # Serve changes after the first point, then every two points
    if total_points == 1:
        return True
    return total_points > 1 and total_points % 2 == 1


def get_total_games_won(player: Player) -> int:
    return sum(s.score for s in player.completed_sets) + player.current_set


# =========================================================
# STATE HELPERS
# =========================================================

def switch_server(state: MatchState) -> MatchState:
    return replace(
        state,
        player1=replace(state.player1, is_serving=not state.player1.is_serving),
        player2=replace(state.player2, is_serving=not state.player2.is_serving),
    )


def reset_game(state: MatchState) -> MatchState:
    return replace(
        state,
        player1=replace(state.player1, current_game=0),
        player2=replace(state.player2, current_game=0),
    )


# =========================================================
# REGULAR GAME
# =========================================================

def score_regular_point(state: MatchState, winner: int) -> MatchState:
    winning = state.player(winner)
    losing = state.player(other_player(winner))

    if winning.current_game == DEUCE and losing.current_game == DEUCE:
        if state.config.no_ad:
            return award_game(state, winner)
        return state.with_player(winner, replace(winning, current_game=ADVANTAGE))

    if winning.current_game == ADVANTAGE:
        return award_game(state, winner)

    if losing.current_game == ADVANTAGE:
        # Back to deuce
        return replace(
            state,
            player1=replace(state.player1, current_game=DEUCE),
            player2=replace(state.player2, current_game=DEUCE),
        )

    if winning.current_game < DEUCE:
        return state.with_player(winner, replace(winning, current_game=winning.current_game + 1))

    # Winner at 40, loser below 40
    return award_game(state, winner)


def award_game(state: MatchState, winner: int) -> MatchState:
    loser = other_player(winner)
    games = state.player(winner).current_set + 1
    opponent_games = state.player(loser).current_set

    state = switch_server(reset_game(state))
    state = state.with_player(winner, replace(state.player(winner), current_set=games))

    if (games == 6 and opponent_games <= 4) or (games == 7 and opponent_games == 5):
        return award_set(state, winner)

    if games == 6 and opponent_games == 6:
        return start_tiebreak(state)

    return state


def award_set(state: MatchState, winner: int) -> MatchState:
    def close(player: Player, won: bool) -> Player:
        return replace(
            player,
            completed_sets=player.completed_sets + (SetResult(score=player.current_set, won_set=won),),
            current_set=0,
            current_game=0,
        )

    return replace(
        state,
        player1=close(state.player1, winner == 1),
        player2=close(state.player2, winner == 2),
    )


def start_tiebreak(state: MatchState) -> MatchState:
    # Set score stays at 6-6 until the tiebreak is decided
    state = reset_game(state)
    return replace(state, config=replace(state.config, in_tiebreak=True))
