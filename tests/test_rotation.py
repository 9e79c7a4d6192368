import pytest

from scorekeeper.exceptions import ConfigurationError
from scorekeeper.models import MatchConfig, Player, SetResult
from scorekeeper.rotation import calculate_server


def players(p1_points=0, p2_points=0, p1_games=0, p2_games=0, sets=()):
    p1_sets = tuple(SetResult(score=a, won_set=a > b) for a, b in sets)
    p2_sets = tuple(SetResult(score=b, won_set=b > a) for a, b in sets)
    return (
        Player(completed_sets=p1_sets, current_set=p1_games, current_game=p1_points),
        Player(completed_sets=p2_sets, current_set=p2_games, current_game=p2_points),
    )


# ---------------------------------------------------------
# Guard
# ---------------------------------------------------------

def test_requires_first_server():
    p1, p2 = players()

    with pytest.raises(ConfigurationError):
        calculate_server(MatchConfig(type="match"), p1, p2)


# ---------------------------------------------------------
# Standalone tiebreak
# ---------------------------------------------------------

def test_tiebreak_rotation_sequence_first_server_1():
    config = MatchConfig(type="tiebreak", tiebreak_points=7, first_server=1)

    servers = []
    for total in range(7):
        p1, p2 = players(p1_points=total)
        servers.append(calculate_server(config, p1, p2))

    assert servers == [1, 2, 2, 1, 1, 2, 2]


def test_tiebreak_rotation_sequence_first_server_2():
    config = MatchConfig(type="tiebreak", tiebreak_points=10, first_server=2)

    servers = []
    for total in range(8):
        p1, p2 = players(p1_points=total // 2, p2_points=total - total // 2)
        servers.append(calculate_server(config, p1, p2))

    assert servers == [2, 1, 1, 2, 2, 1, 1, 2]


# ---------------------------------------------------------
# Regular games
# ---------------------------------------------------------

@pytest.mark.parametrize("p1_games, p2_games, expected", [
    (0, 0, 1),
    (1, 0, 2),
    (1, 1, 1),
    (3, 2, 2),
    (5, 5, 1),
])
def test_regular_game_parity(p1_games, p2_games, expected):
    config = MatchConfig(type="match", first_server=1)
    p1, p2 = players(p1_games=p1_games, p2_games=p2_games)

    assert calculate_server(config, p1, p2) == expected


def test_completed_sets_count_towards_parity():
    config = MatchConfig(type="match", first_server=2)
    p1, p2 = players(p1_games=1, sets=[(6, 3)])

    # 10 games played -> first server again
    assert calculate_server(config, p1, p2) == 2


# ---------------------------------------------------------
# Set tiebreak
# ---------------------------------------------------------

def test_set_tiebreak_starts_with_next_game_server():
    config = MatchConfig(type="match", first_server=1, in_tiebreak=True)

    # 12 games played in the first set: player 1 is due
    p1, p2 = players(p1_games=6, p2_games=6)
    assert calculate_server(config, p1, p2) == 1

    # 9 earlier games flip the parity
    p1, p2 = players(p1_games=6, p2_games=6, sets=[(6, 3)])
    assert calculate_server(config, p1, p2) == 2


def test_set_tiebreak_point_rotation():
    config = MatchConfig(type="match", first_server=2, in_tiebreak=True)

    servers = []
    for total in range(6):
        p1, p2 = players(p1_points=total, p1_games=6, p2_games=6)
        servers.append(calculate_server(config, p1, p2))

    assert servers == [2, 1, 1, 2, 2, 1]


def test_after_tiebreak_receiver_serves_next_set():
    config = MatchConfig(type="match", first_server=1, in_tiebreak=True)
    p1, p2 = players(p1_points=6, p2_points=5, p1_games=6, p2_games=6)

    # Player 1 opened the tiebreak, so player 2 opens the next set
    assert calculate_server(config, p1, p2, tiebreak_won=True) == 2
