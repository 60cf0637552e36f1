"""
Run history and metrics.
Each regeneration appends one row to <root>/reports/summary_history_<kind>.csv.
build_metrics() rolls the recent history of every kind into
<root>/reports/metrics.json for dashboards.
"""
import os
import glob
import json
from datetime import datetime, timezone

import pandas as pd

from channel_catalog.constants.catalogs import reports_dir
from channel_catalog.logger import get_logger

logger = get_logger("catalog.metrics")

HISTORY_KEEP = 14
METRICS_FILENAME = "metrics.json"

SUMMARY_COLUMNS = [
    "run_time",
    "kind",
    "processed",
    "skipped",
    "total",
    "added",
    "orphans",
    "duration_sec",
    "dry_run",
]


def summary_row(report):
    return {
        "run_time": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
        "kind": report["kind"],
        "processed": report["processed"],
        "skipped": report["skipped"],
        "total": report["total"],
        "added": len(report["added"]),
        "orphans": len(report["orphans"]),
        "duration_sec": report.get("duration_sec", 0),
        "dry_run": bool(report.get("dry_run")),
    }


def append_summary(root, report):
    """Appends the run summary to the kind's history CSV; returns its path."""
    out_dir = reports_dir(root)
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, f"summary_history_{report['kind']}.csv")
    df = pd.DataFrame([summary_row(report)], columns=SUMMARY_COLUMNS)
    df.to_csv(path, mode="a", header=not os.path.exists(path), index=False)
    logger.info("Wrote summary CSV %s", path)
    return path


def _gather_kind_summaries(root):
    files = glob.glob(os.path.join(reports_dir(root), "summary_history_*.csv"))
    out = {}
    for fn in sorted(files):
        kind = os.path.basename(fn).split("summary_history_")[-1].replace(".csv", "")
        try:
            df = pd.read_csv(fn)
        except (OSError, ValueError) as e:
            logger.error("Failed to parse %s: %s", fn, e)
            continue
        if df.empty:
            continue
        df = df.sort_values("run_time", kind="stable").tail(HISTORY_KEEP)
        series = []
        for _, r in df.iterrows():
            series.append({
                "run_time": r.get("run_time"),
                "processed": int(r.get("processed", 0)),
                "skipped": int(r.get("skipped", 0)),
                "total": int(r.get("total", 0)),
                "added": int(r.get("added", 0)),
                "orphans": int(r.get("orphans", 0)),
                "duration_sec": float(r.get("duration_sec", 0)),
            })
        out[kind] = {
            "latest_run": series[-1]["run_time"],
            "series": series,
            "summary": series[-1],
        }
    return out


def build_metrics(root):
    out_dir = reports_dir(root)
    os.makedirs(out_dir, exist_ok=True)
    out_path = os.path.join(out_dir, METRICS_FILENAME)

    kinds = _gather_kind_summaries(root)
    total_entries = sum(k["summary"]["total"] for k in kinds.values())
    total_skipped = sum(k["summary"]["skipped"] for k in kinds.values())
    payload = {
        "generated_at": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
        "global": {
            "kinds": len(kinds),
            "total_entries": total_entries,
            "total_skipped": total_skipped,
        },
        "kinds": kinds,
    }

    with open(out_path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)
    logger.info("✅ Metrics generated -> %s", out_path)
    return out_path
