"""
Closed-loop pure-pursuit demo: YAML path -> Path.loop -> Holonomic2D.
Writes one CSV row per control step into artifacts/.

Usage:
  python -m scripts.run_path_demo --config configs/path_demo.yaml --sim-seconds 60
  python -m scripts.run_path_demo --auto        # drive through follow_path_automatically()
"""

from __future__ import annotations

import argparse
import csv
import os
import sys
from pathlib import Path as FsPath

# Make "src" imports work in dev without installing the package
ROOT = FsPath(__file__).resolve().parents[1]
sys.path.append(str(ROOT / "src"))
sys.path.append(str(ROOT))

from pursuit.config import load_path  # noqa: E402
from pursuit.types import WaypointTimeout  # noqa: E402
from sim.holonomic_2d import Holonomic2D, HolonomicParams  # noqa: E402

COLUMNS = [
    "t",
    "px",
    "py",
    "heading",
    "lateral",
    "longitudinal",
    "angular",
    "wp_index",
    "retracing",
    "finished",
]


class RecordingDrive:
    """Forwards commands to the robot and logs each one as a CSV row."""

    def __init__(self, robot: Holonomic2D, path, writer) -> None:
        self.robot = robot
        self.path = path
        self.w = writer

    def drive(self, lateral: float, longitudinal: float, angular: float) -> None:
        t = self.robot.clock()
        px, py, h = self.robot.state()
        self.w.writerow(
            [
                t,
                px,
                py,
                h,
                lateral,
                longitudinal,
                angular,
                self.path.current_index,
                int(self.path.is_retracing),
                int(self.path.is_finished()),
            ]
        )
        self.robot.drive(lateral, longitudinal, angular)

    def stop(self) -> None:
        self.robot.stop()


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Pure-pursuit path demo: YAML path -> Holonomic2D")
    ap.add_argument("--config", default=str(ROOT / "configs" / "path_demo.yaml"))
    ap.add_argument("--dt", type=float, default=0.02)
    ap.add_argument("--sim-seconds", type=float, default=60.0)
    ap.add_argument("--max-speed", type=float, default=1.0, help="m/s at full command")
    ap.add_argument("--max-turn-rate", type=float, default=2.0, help="rad/s at full command")
    ap.add_argument("--auto", action="store_true", help="use follow_path_automatically()")
    ap.add_argument("--csv-out", default="artifacts/path_run.csv")
    args = ap.parse_args(argv)

    os.makedirs(os.path.dirname(args.csv_out) or ".", exist_ok=True)

    robot = Holonomic2D(
        HolonomicParams(max_speed=args.max_speed, max_turn_rate=args.max_turn_rate, dt=args.dt)
    )
    actions_run: list[str] = []
    actions = {
        "pause": lambda: actions_run.append("pause"),
        "done": lambda: actions_run.append("done"),
    }
    path = load_path(args.config, actions=actions, clock=robot.clock)
    if not path.is_legal_path():
        print(f"Illegal path in {args.config}", file=sys.stderr)
        return 2

    with open(args.csv_out, "w", newline="") as f:
        w = csv.writer(f)
        w.writerow(COLUMNS)
        rec = RecordingDrive(robot, path, w)

        if args.auto:
            if path.cfg.path_timeout is None:
                path.set_path_timeout(args.sim_seconds)
            path.set_drive(rec)
            path.set_pose_source(robot)
            path.enable_auto_mode()
            path.init()
            outcome = path.follow_path_automatically()
            print(f"Automatic follow finished: {outcome.value}")
        else:
            path.init()
            while robot.clock() <= args.sim_seconds and not path.is_finished():
                result = path.loop(*robot.current_pose())
                if isinstance(result, WaypointTimeout):
                    print(f"Waypoint {result.index} timed out after {result.elapsed:.2f}s")
                    break
                rec.drive(*result.as_tuple())
            rec.stop()

    px, py, _ = robot.state()
    print(
        f"Sim finished at t={robot.clock():.2f}s pos=({px:.2f}, {py:.2f}) "
        f"finished={path.is_finished()} actions={actions_run}"
    )
    print(f"Wrote: {args.csv_out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
