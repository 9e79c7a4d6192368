import numpy as np
import pytest

from render.renderer import ScoreboardRenderer, SetCell, scoreboard_rows
from scorekeeper.engine import apply_point, initial_state
from scorekeeper.models import MatchConfig, MatchRecord, MatchState, Player, Point, SetResult
from scorekeeper.storage import MatchDataStore
from scorekeeper.timeline import build_match_timeline
from scripts.export_highlights import main, parse_indices


def play(state, winners):
    for w in winners:
        state = apply_point(state, w).state
    return state


MATCH = MatchConfig(type="match", first_server=1)


# ----------------------------------------------------
# Scoreboard rows
# ----------------------------------------------------

def test_rows_at_start():
    rows = scoreboard_rows(initial_state(MATCH, ("Navratilova", "")))

    assert rows[0].name == "Navratilova"
    assert rows[1].name == "Player 2"
    assert rows[0].serving is True
    assert rows[1].serving is False
    assert rows[0].sets == ()
    assert rows[0].cells == ("0", "0")


def test_rows_show_advantage():
    state = play(initial_state(MATCH), [1, 2, 1, 2, 1, 2, 2])

    rows = scoreboard_rows(state)

    assert rows[0].cells == ("0", "")
    assert rows[1].cells == ("0", "Ad")


def test_rows_show_tiebreak_points_in_match():
    state = initial_state(MATCH)
    for game in range(12):
        state = play(state, [1 if game % 2 == 0 else 2] * 4)
    state = play(state, [1, 1, 1, 1, 1, 2])

    rows = scoreboard_rows(state)

    assert rows[0].cells == ("6", "5")
    assert rows[1].cells == ("6", "1")


def test_rows_show_completed_sets():
    state = MatchState(
        player1=Player(completed_sets=(SetResult(7, True, 4), SetResult(3, False))),
        player2=Player(completed_sets=(SetResult(6, False, 7), SetResult(6, True)), is_serving=True),
        config=MatchConfig(first_server=2),
    )

    rows = scoreboard_rows(state)

    # Each cell shows the player's own tiebreak points
    assert rows[0].sets == (SetCell(7, True, 7), SetCell(3, False))
    assert rows[1].sets == (SetCell(6, False, 4), SetCell(6, True))
    assert rows[1].serving is True


def test_rows_show_own_tiebreak_points_after_set_tiebreak():
    state = initial_state(MATCH)
    for game in range(12):
        state = play(state, [1 if game % 2 == 0 else 2] * 4)
    state = play(state, [1, 2] * 5 + [1, 1])

    rows = scoreboard_rows(state)

    assert rows[0].sets == (SetCell(7, True, 7),)
    assert rows[1].sets == (SetCell(6, False, 5),)


def test_rows_standalone_tiebreak():
    config = MatchConfig(type="tiebreak", first_server=1)
    state = play(initial_state(config), [1, 2, 2])

    assert [r.cells for r in scoreboard_rows(state)] == [("1",), ("2",)]

    decided = play(state, [2] * 5)
    assert [r.cells for r in scoreboard_rows(decided)] == [("1",), ("7",)]
    assert not any(r.serving for r in scoreboard_rows(decided))


# ----------------------------------------------------
# Drawing
# ----------------------------------------------------

def test_draw_scoreboard_paints_bottom_left():
    frame = np.zeros((360, 640, 3), dtype=np.uint8)
    state = play(initial_state(MATCH, ("Evert", "Austin")), [1] * 30)

    timeline = build_match_timeline([Point(start_time=0.0, end_time=2.0, winner=1)], MATCH)
    renderer = ScoreboardRenderer("in.mp4", "out.mp4", timeline=timeline)

    renderer.draw_scoreboard(frame, state)

    assert frame[200:, :320].any()
    assert not frame[:100, 400:].any()


def test_renderer_rejects_empty_timeline():
    with pytest.raises(ValueError):
        ScoreboardRenderer("in.mp4", "out.mp4", timeline=[])


# ----------------------------------------------------
# Point selection
# ----------------------------------------------------

@pytest.mark.parametrize("raw, count, expected", [
    (None, 3, [0, 1, 2]),
    ("", 2, [0, 1]),
    ("0,3,5-7", 10, [0, 3, 5, 6, 7]),
    ("4, 2,2", 5, [2, 4]),
])
def test_parse_indices(raw, count, expected):
    assert parse_indices(raw, count) == expected


def test_parse_indices_out_of_range():
    with pytest.raises(ValueError):
        parse_indices("1,9", 5)


# ----------------------------------------------------
# Export command
# ----------------------------------------------------

def export_args(tmp_path, video_id="v1"):
    return [
        "--video-id", video_id,
        "--video", str(tmp_path / "match.mp4"),
        "--out", str(tmp_path / "out" / "highlights.mp4"),
        "--data", str(tmp_path / "match_data.json"),
    ]


def test_export_without_points(tmp_path, capsys):
    assert main(export_args(tmp_path)) == 1
    assert "[WARN] No points stored" in capsys.readouterr().out


def test_export_without_first_server(tmp_path, capsys):
    store = MatchDataStore(tmp_path / "match_data.json")
    store.save("v1", MatchRecord(
        points=[Point(start_time=0.0, end_time=4.0, winner=1)],
        match_config=MatchConfig(type="match"),
        is_configured=True,
    ))

    assert main(export_args(tmp_path)) == 1
    assert "[WARN] Cannot replay points" in capsys.readouterr().out


def test_export_with_malformed_winner(tmp_path, capsys):
    store = MatchDataStore(tmp_path / "match_data.json")
    store.save("v1", MatchRecord(
        points=[Point(start_time=0.0, end_time=4.0, winner=1), Point(start_time=5.0, end_time=9.0, winner=3)],
        match_config=MatchConfig(type="match", first_server=1),
        is_configured=True,
    ))

    assert main(export_args(tmp_path)) == 1
    assert "Point 1 cannot be replayed" in capsys.readouterr().out


def test_export_with_bad_point_selection(tmp_path, capsys):
    store = MatchDataStore(tmp_path / "match_data.json")
    store.save("v1", MatchRecord(
        points=[Point(start_time=0.0, end_time=4.0, winner=1)],
        match_config=MatchConfig(type="match", first_server=1),
        is_configured=True,
    ))

    assert main(export_args(tmp_path) + ["--points", "0,4"]) == 1
    assert "out of range" in capsys.readouterr().out
