from scorekeeper.annotations import describe_divider, describe_point
from scorekeeper.match_session import MatchSession
from scorekeeper.score_rules import format_game_score
from scorekeeper.timeline import recalculate_score_from_points

session = MatchSession()
session.set_player_name(1, "Alcaraz")
session.set_player_name(2, "Sinner")
session.configure(match_type="match", tiebreak_points=7, no_ad=False)
session.set_first_server(1)

clock = 0.0


def play(winner):
    global clock
    session.start_point(clock + 1.0)
    session.record_point_winner(winner, clock + 8.0)
    clock += 10.0


# Set 1: holds of serve to 6-6, then a 7-5 tiebreak
for game in range(12):
    for _ in range(4):
        play(1 if game % 2 == 0 else 2)

for winner in [1, 2] * 5 + [1, 1]:
    play(winner)

# Set 2: a deuce game
for winner in [1, 2, 1, 2, 1, 2, 2, 1, 1, 1]:
    play(winner)

for i, point in enumerate(session.points):
    lines = describe_divider(session.points, i, session.match_config, ("Alcaraz", "Sinner"))
    if lines:
        print(describe_point(point, ("Alcaraz", "Sinner")))
        for line in lines:
            print("   ", line)

p1, p2 = session.player1, session.player2
print("\nSets:", [s.score for s in p1.completed_sets], [s.score for s in p2.completed_sets])
print("Games:", p1.current_set, "-", p2.current_set)
print("Points:", format_game_score(p1.current_game, p2.current_game), "-",
      format_game_score(p2.current_game, p1.current_game))

replayed = recalculate_score_from_points(
    session.points, session.to_record().match_config, ("Alcaraz", "Sinner")
)
print("\nReplay matches live:", replayed == session.state)
