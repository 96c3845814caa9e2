from __future__ import annotations

import argparse
import json
from pathlib import Path

import numpy as np
import pandas as pd

REQUIRED = [
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


def compute_kpis_df(df: pd.DataFrame) -> dict:
    missing = [c for c in REQUIRED if c not in df.columns]
    if missing:
        raise ValueError(f"missing columns: {missing}")
    if df.empty:
        raise ValueError("empty run log")

    t = df["t"].to_numpy(dtype=float)
    dt = float(np.median(np.diff(t))) if len(t) > 1 else 1.0
    sample_hz = 1.0 / dt if dt > 0 else float("nan")

    # Distance actually driven
    steps = np.hypot(np.diff(df["px"].to_numpy()), np.diff(df["py"].to_numpy()))
    distance = float(steps.sum()) if len(steps) else 0.0

    # Waypoint changes (count increments of wp_index)
    wp = df["wp_index"].astype(int).to_numpy()
    wp_prev = np.r_[wp[0], wp[:-1]]
    advances = int((wp > wp_prev).sum())

    finished = df["finished"].astype(int).to_numpy()
    retracing = df["retracing"].astype(int).to_numpy()
    finish_idx = np.flatnonzero(finished)
    cmd_mag = np.abs(df["lateral"]) + np.abs(df["longitudinal"])

    k = {
        "duration_s": float(t[-1] - t[0]),
        "sample_hz": sample_hz,
        "distance": distance,
        "waypoint_advances": advances,
        "final_wp_index": int(wp.max()),
        "finished": bool(len(finish_idx)),
        "time_to_finish_s": float(t[finish_idx[0]] - t[0]) if len(finish_idx) else None,
        "retrace_fraction": float(retracing.mean()),
        "avg_translation_cmd": float(cmd_mag.mean()),
        "max_turn_cmd": float(np.abs(df["angular"]).max()),
    }

    # Simple traffic-light rating
    if k["finished"] and k["retrace_fraction"] < 0.05:
        k["rating"] = "green"
    elif k["finished"]:
        k["rating"] = "yellow"
    else:
        k["rating"] = "red"
    return k


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Compute KPIs from a pure-pursuit path run CSV.")
    ap.add_argument("--csv", default="artifacts/path_run.csv", help="CSV from run_path_demo")
    ap.add_argument(
        "--json-out", default="artifacts/path_kpis.json", help="Where to write KPI JSON"
    )
    args = ap.parse_args(argv)

    df = pd.read_csv(args.csv)
    k = compute_kpis_df(df)

    Path(args.json_out).parent.mkdir(parents=True, exist_ok=True)
    with open(args.json_out, "w") as f:
        json.dump(k, f, indent=2)

    # Human-readable summary
    print("Path KPIs")
    print(
        f"- finished={k['finished']}  duration_s={k['duration_s']:.2f}  "
        f"sample_hz={k['sample_hz']:.1f}"
    )
    print(
        f"- distance={k['distance']:.2f}  advances={k['waypoint_advances']}  "
        f"retrace_fraction={k['retrace_fraction']:.3f}"
    )
    print(f"- rating={k['rating']}")
    print(f"Wrote JSON: {args.json_out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
