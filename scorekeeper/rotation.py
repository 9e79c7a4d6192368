from scorekeeper.exceptions import ConfigurationError
from scorekeeper.models import MatchConfig, Player, other_player
from scorekeeper.score_rules import get_total_games_won


def _tiebreak_server(total_points: int, first: int, second: int) -> int:
    # 1-then-every-2 rotation, back to the first server every 4 points
    if total_points % 4 in (0, 3):
        return first
    return second


def calculate_server(
    config: MatchConfig,
    player1: Player,
    player2: Player,
    tiebreak_won: bool = False,
) -> int:
    """
    Return the player (1 or 2) due to serve next.

    Regular games alternate on the parity of total games played. A set
    tiebreak starts with whoever would serve the next game, and a
    finished tiebreak counts as one extra game for parity (pass the
    state from before the tiebreak-winning point with tiebreak_won=True).
    """
    first_server = config.first_server
    if first_server not in (1, 2):
        raise ConfigurationError("First server must be selected before scoring")

    second_server = other_player(first_server)

    if config.type == "tiebreak":
        total_points = player1.current_game + player2.current_game
        return _tiebreak_server(total_points, first_server, second_server)

    total_games = get_total_games_won(player1) + get_total_games_won(player2)

    if config.in_tiebreak and not tiebreak_won:
        tiebreak_first = first_server if total_games % 2 == 0 else second_server
        total_points = player1.current_game + player2.current_game
        return _tiebreak_server(total_points, tiebreak_first, other_player(tiebreak_first))

    parity = total_games + (1 if tiebreak_won else 0)
    return first_server if parity % 2 == 0 else second_server
