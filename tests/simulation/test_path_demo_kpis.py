import json
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def test_path_demo_finishes_and_reports_kpis(tmp_path):
    out_csv = tmp_path / "path_run.csv"
    subprocess.run(
        [
            sys.executable,
            "-m",
            "scripts.run_path_demo",
            "--sim-seconds",
            "60",
            "--dt",
            "0.02",
            "--csv-out",
            str(out_csv),
        ],
        check=True,
        cwd=ROOT,
    )
    assert out_csv.exists(), "demo did not produce CSV output"
    header = out_csv.read_text().splitlines()[0].split(",")
    for col in ["t", "px", "py", "heading", "lateral", "longitudinal", "wp_index", "finished"]:
        assert col in header, f"missing column: {col}"

    out = tmp_path / "kpis.json"
    subprocess.run(
        [
            sys.executable,
            "-m",
            "scripts.evaluation.path_kpi_report",
            "--csv",
            str(out_csv),
            "--json-out",
            str(out),
        ],
        check=True,
        cwd=ROOT,
    )

    data = json.loads(out.read_text())
    for key in ["duration_s", "distance", "waypoint_advances", "finished", "rating"]:
        assert key in data
    assert data["finished"] is True
    assert data["final_wp_index"] == 6
    assert data["distance"] > 15.0


def test_path_demo_auto_mode(tmp_path):
    out_csv = tmp_path / "path_run_auto.csv"
    proc = subprocess.run(
        [sys.executable, "-m", "scripts.run_path_demo", "--auto", "--csv-out", str(out_csv)],
        check=True,
        cwd=ROOT,
        capture_output=True,
        text=True,
    )
    assert "Automatic follow finished: finished" in proc.stdout
    assert "'pause'" in proc.stdout and "'done'" in proc.stdout
