# scripts/export_highlights.py
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from render.renderer import ScoreboardRenderer
from scorekeeper.config import MATCH_DATA_PATH
from scorekeeper.exceptions import ScoringError
from scorekeeper.models import MatchConfig
from scorekeeper.storage import MatchDataStore
from scorekeeper.timeline import build_match_timeline


def parse_indices(raw: Optional[str], count: int) -> List[int]:
    """
    "0,3,5-8" -> [0, 3, 5, 6, 7, 8]. None selects every point.
    """
    if not raw:
        return list(range(count))

    indices: List[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            lo, hi = part.split("-", 1)
            indices.extend(range(int(lo), int(hi) + 1))
        else:
            indices.append(int(part))

    bad = [i for i in indices if i < 0 or i >= count]
    if bad:
        raise ValueError(f"Point indices out of range (0..{count - 1}): {bad}")

    return sorted(set(indices))


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(
        description="Export scored points of a match video as one highlight clip."
    )
    p.add_argument("--video-id", required=True, help="Key of the match in the point-log store")
    p.add_argument("--video", required=True, help="Path to the source video")
    p.add_argument("--out", required=True, help="Output mp4 path")
    p.add_argument("--data", default=str(MATCH_DATA_PATH), help="Point-log store (json)")
    p.add_argument("--points", default=None, help="Point indices, e.g. 0,3,5-8 (default: all)")
    p.add_argument("--no-scoreboard", action="store_true", help="Do not burn in the scoreboard")
    p.add_argument("--debug", action="store_true")

    args = p.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)

    store = MatchDataStore(Path(args.data))
    record = store.get(args.video_id)

    if not record.points:
        print(f"[WARN] No points stored for video {args.video_id}")
        return 1

    config = record.match_config or MatchConfig()

    # Replay the full log so every clip gets the score from before its point
    try:
        timeline = build_match_timeline(record.points, config, record.player_names)
    except ScoringError as e:
        print(f"[WARN] Cannot replay points for video {args.video_id}: {e}")
        return 1

    try:
        selected = parse_indices(args.points, len(timeline))
    except ValueError as e:
        print(f"[WARN] {e}")
        return 1

    timeline = [timeline[i] for i in selected]

    print(f"[INFO] Video: {args.video}  points={len(timeline)}/{len(record.points)}")

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    renderer = ScoreboardRenderer(
        input_path=args.video,
        output_path=str(out_path),
        timeline=timeline,
        include_scoreboard=not args.no_scoreboard,
    )

    with tqdm(total=len(timeline), desc="Exporting", unit="point") as bar:
        frames = renderer.render(progress=lambda _entry: bar.update(1))

    print(f"[INFO] Saved: {out_path}  frames={frames}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
