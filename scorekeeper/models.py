from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Literal, Optional, Tuple

from scorekeeper.config import DEFAULT_TIEBREAK_POINTS, SCHEMA_VERSION


PlayerNum = Literal[1, 2]
MatchType = Literal["match", "tiebreak"]
Divider = Literal["game", "set", "tiebreak", "tiebreak-start"]

DIVIDERS = ("game", "set", "tiebreak", "tiebreak-start")


def other_player(player: int) -> int:
    return 2 if player == 1 else 1


@dataclass(frozen=True)
class SetResult:
    """
    One finished set as seen by one player.

    score is games won, or tiebreak points in tiebreak-only mode.
    tiebreak_score is the opponent's tiebreak points and is only set
    when a set inside a match was decided by a tiebreak.
    """
    score: int
    won_set: bool
    tiebreak_score: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"score": self.score, "wonSet": self.won_set}
        if self.tiebreak_score is not None:
            d["tiebreakScore"] = self.tiebreak_score
        return d

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "SetResult":
        tiebreak = d.get("tiebreakScore")
        return SetResult(
            score=int(d["score"]),
            won_set=bool(d["wonSet"]),
            tiebreak_score=(int(tiebreak) if tiebreak is not None else None),
        )


@dataclass(frozen=True)
class Player:
    """
    current_game: 0=love, 1=15, 2=30, 3=40, 4=advantage.
    Holds tiebreak points while a tiebreak is being played.
    """
    name: str = ""
    completed_sets: Tuple[SetResult, ...] = ()
    current_set: int = 0
    current_game: int = 0
    is_serving: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "completedSets": [s.to_dict() for s in self.completed_sets],
            "currentSet": self.current_set,
            "currentGame": self.current_game,
            "isServing": self.is_serving,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Player":
        return Player(
            name=str(d.get("name", "") or ""),
            completed_sets=tuple(SetResult.from_dict(s) for s in (d.get("completedSets") or [])),
            current_set=int(d.get("currentSet", 0)),
            current_game=int(d.get("currentGame", 0)),
            is_serving=bool(d.get("isServing", False)),
        )


@dataclass(frozen=True)
class MatchConfig:
    type: MatchType = "match"
    tiebreak_points: int = DEFAULT_TIEBREAK_POINTS
    no_ad: bool = False
    in_tiebreak: bool = False
    first_server: Optional[PlayerNum] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "tiebreakPoints": self.tiebreak_points,
            "noAd": self.no_ad,
            "inTiebreak": self.in_tiebreak,
            "firstServer": self.first_server,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "MatchConfig":
        first_server = d.get("firstServer")
        return MatchConfig(
            type=d.get("type") or "match",
            tiebreak_points=int(d.get("tiebreakPoints", DEFAULT_TIEBREAK_POINTS)),
            no_ad=bool(d.get("noAd", False)),
            in_tiebreak=bool(d.get("inTiebreak", False)),
            first_server=(int(first_server) if first_server is not None else None),  # type: ignore
        )


@dataclass(frozen=True)
class MatchState:
    player1: Player
    player2: Player
    config: MatchConfig

    def player(self, num: int) -> Player:
        return self.player1 if num == 1 else self.player2

    def with_player(self, num: int, player: Player) -> "MatchState":
        if num == 1:
            return replace(self, player1=player)
        return replace(self, player2=player)

    def serving(self) -> Optional[int]:
        if self.player1.is_serving:
            return 1
        if self.player2.is_serving:
            return 2
        return None

    def snapshot(self) -> "ScoreState":
        return ScoreState(
            player1=self.player1,
            player2=self.player2,
            in_tiebreak=self.config.in_tiebreak,
        )


@dataclass(frozen=True)
class ScoreState:
    """Scoreboard as it stood right after a point resolved."""
    player1: Player
    player2: Player
    in_tiebreak: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player1": self.player1.to_dict(),
            "player2": self.player2.to_dict(),
            "inTiebreak": self.in_tiebreak,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ScoreState":
        return ScoreState(
            player1=Player.from_dict(d["player1"]),
            player2=Player.from_dict(d["player2"]),
            in_tiebreak=bool(d.get("inTiebreak", False)),
        )


@dataclass(frozen=True)
class Point:
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    winner: Optional[PlayerNum] = None
    score_state: Optional[ScoreState] = None
    divider: Optional[Divider] = None

    def contains(self, time: float) -> bool:
        if self.start_time is None or self.end_time is None:
            return False
        return self.start_time <= time <= self.end_time

    def overlaps(self, start: float, end: float) -> bool:
        if self.start_time is None or self.end_time is None:
            return False
        return start <= self.end_time and self.start_time <= end

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "winner": self.winner,
        }
        if self.score_state is not None:
            d["scoreState"] = self.score_state.to_dict()
        if self.divider is not None:
            d["divider"] = self.divider
        return d

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Point":
        score_state = d.get("scoreState")
        divider = d.get("divider")
        if divider is not None and divider not in DIVIDERS:
            raise ValueError(f"Unknown divider: {divider}")
        return Point(
            start_time=(float(d["startTime"]) if d.get("startTime") is not None else None),
            end_time=(float(d["endTime"]) if d.get("endTime") is not None else None),
            # Winner is kept as stored; replay reports malformed values by index
            winner=d.get("winner"),
            score_state=(ScoreState.from_dict(score_state) if score_state else None),
            divider=divider,
        )


@dataclass
class MatchRecord:
    """
    Persisted point log for one video.

    The stored match config carries isConfigured instead of inTiebreak:
    replay always starts outside a tiebreak.
    """
    points: List[Point] = field(default_factory=list)
    match_config: Optional[MatchConfig] = None
    is_configured: bool = False
    player_names: Optional[Tuple[str, str]] = None
    last_updated: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "schemaVersion": SCHEMA_VERSION,
            "points": [p.to_dict() for p in self.points],
            "lastUpdated": self.last_updated,
        }
        if self.match_config is not None:
            cfg = self.match_config.to_dict()
            del cfg["inTiebreak"]
            cfg["isConfigured"] = self.is_configured
            d["matchConfig"] = cfg
        if self.player_names is not None:
            d["playerNames"] = {
                "player1": self.player_names[0],
                "player2": self.player_names[1],
            }
        return d

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "MatchRecord":
        # Entries written before versioning carry no schemaVersion
        version = d.get("schemaVersion", SCHEMA_VERSION)
        if version != SCHEMA_VERSION:
            raise ValueError(f"Unsupported schema version: {version}")

        points = d.get("points", []) or []
        if not isinstance(points, list):
            raise ValueError("points must be a list")

        cfg_raw = d.get("matchConfig")
        match_config = None
        is_configured = False
        if cfg_raw:
            match_config = replace(MatchConfig.from_dict(cfg_raw), in_tiebreak=False)
            is_configured = bool(cfg_raw.get("isConfigured", False))

        names_raw = d.get("playerNames")
        player_names = None
        if names_raw:
            player_names = (
                str(names_raw.get("player1", "") or ""),
                str(names_raw.get("player2", "") or ""),
            )

        return MatchRecord(
            points=[Point.from_dict(p) for p in points],
            match_config=match_config,
            is_configured=is_configured,
            player_names=player_names,
            last_updated=d.get("lastUpdated"),
        )


@dataclass(frozen=True)
class PointResult:
    state: MatchState
    divider: Optional[Divider] = None


@dataclass(frozen=True)
class TimelineEntry:
    """A recorded point with the scoreboard before and after it."""
    index: int
    point: Point
    before: MatchState
    after: MatchState
    divider: Optional[Divider] = None
