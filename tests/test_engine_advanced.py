import random

import pytest

from scorekeeper.engine import apply_point, initial_state, is_decided
from scorekeeper.models import MatchConfig
from scorekeeper.rotation import calculate_server


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------

def random_config(rng):
    return MatchConfig(
        type=rng.choice(["match", "tiebreak"]),
        tiebreak_points=rng.choice([7, 10]),
        no_ad=rng.choice([True, False]),
        first_server=rng.choice([1, 2]),
    )


def random_states(seed, length=200):
    rng = random.Random(seed)
    config = random_config(rng)
    state = initial_state(config)
    states = [state]

    for _ in range(rng.randint(0, length)):
        if is_decided(state):
            break
        # Skewed winners reach sets and tiebreaks more often
        winner = 1 if rng.random() < rng.choice([0.5, 0.65]) else 2
        state = apply_point(state, winner).state
        states.append(state)

    return states


SEEDS = list(range(40))


# ---------------------------------------------------------
# Serving invariants
# ---------------------------------------------------------

@pytest.mark.parametrize("seed", SEEDS)
def test_exactly_one_server_until_decided(seed):
    for state in random_states(seed):
        if is_decided(state):
            assert state.serving() is None
            assert not state.player1.is_serving and not state.player2.is_serving
        else:
            assert state.player1.is_serving != state.player2.is_serving


@pytest.mark.parametrize("seed", SEEDS)
def test_live_server_matches_rotation_calculator(seed):
    for state in random_states(seed):
        if is_decided(state):
            continue
        assert state.serving() == calculate_server(state.config, state.player1, state.player2)


# ---------------------------------------------------------
# Set invariants
# ---------------------------------------------------------

@pytest.mark.parametrize("seed", SEEDS)
def test_completed_sets_in_lockstep(seed):
    for state in random_states(seed):
        p1_sets = state.player1.completed_sets
        p2_sets = state.player2.completed_sets

        assert len(p1_sets) == len(p2_sets)
        for a, b in zip(p1_sets, p2_sets):
            assert a.won_set != b.won_set


@pytest.mark.parametrize("seed", SEEDS)
def test_scores_stay_in_range(seed):
    for state in random_states(seed):
        for player in (state.player1, state.player2):
            if not (state.config.type == "tiebreak" or state.config.in_tiebreak):
                assert 0 <= player.current_game <= 4
                assert 0 <= player.current_set <= 6
            for s in player.completed_sets:
                if state.config.type == "match":
                    assert s.score <= 7


@pytest.mark.parametrize("seed", SEEDS)
def test_set_scores_are_legal(seed):
    final = random_states(seed)[-1]
    if final.config.type != "match":
        return

    for a, b in zip(final.player1.completed_sets, final.player2.completed_sets):
        winner, loser = (a, b) if a.won_set else (b, a)
        assert (winner.score, loser.score) in {
            (6, 0), (6, 1), (6, 2), (6, 3), (6, 4), (7, 5), (7, 6)
        }
        if winner.score == 7 and loser.score == 6:
            assert winner.tiebreak_score is not None
            assert loser.tiebreak_score is not None
        else:
            assert winner.tiebreak_score is None


# ---------------------------------------------------------
# Determinism
# ---------------------------------------------------------

def test_same_winners_same_states():
    rng = random.Random(7)
    winners = [rng.choice([1, 2]) for _ in range(150)]
    config = MatchConfig(type="match", first_server=2)

    def run():
        state = initial_state(config)
        out = []
        for w in winners:
            state = apply_point(state, w).state
            out.append(state)
        return out

    assert run() == run()


def test_long_match_keeps_playing_sets():
    state = initial_state(MatchConfig(type="match", first_server=1))

    # Four sets won to love
    for _ in range(4 * 24):
        state = apply_point(state, 1).state

    assert len(state.player1.completed_sets) == 4
    assert all(s.won_set for s in state.player1.completed_sets)
