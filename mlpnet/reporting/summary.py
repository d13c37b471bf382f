"""Condense a run's per-epoch metrics into ``summary.json``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Mapping

import numpy as np


def _read_records(path: Path) -> List[Mapping[str, object]]:
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


def _column(records: List[Mapping[str, object]], key: str) -> tuple[np.ndarray, np.ndarray]:
    rows = [r for r in records if isinstance(r.get(key), (int, float))]
    epochs = np.asarray([int(r["epoch"]) for r in rows], dtype=np.int64)
    values = np.asarray([float(r[key]) for r in rows], dtype=np.float64)
    return epochs, values


def _validation_summary(records: List[Mapping[str, object]]) -> Mapping[str, object] | None:
    epochs, losses = _column(records, "val_loss")
    if not losses.size:
        return None
    last = records[-1]
    finite = np.flatnonzero(np.isfinite(losses))
    best = None
    if finite.size:
        idx = finite[np.argmin(losses[finite])]
        best = {"epoch": int(epochs[idx]), "loss": float(losses[idx])}
    return {
        "best": best,
        "last_loss": float(losses[-1]),
        "last_mistakes": int(last.get("val_mistakes", 0)),
        "last_accuracy": float(last.get("val_accuracy", 0.0)),
    }


def summarize_run(
    records: List[Mapping[str, object]], *, stopped_early_at: int | None = None
) -> Mapping[str, object]:
    """Training-loss trend, best validation epoch and the stopping point."""

    _, train = _column(records, "train_loss")
    train_summary = None
    if train.size:
        train_summary = {
            "first": float(train[0]),
            "last": float(train[-1]),
            "min": float(np.min(train)),
            "decreased": bool(train[-1] < train[0]),
        }
    return {
        "version": 2,
        "epochs": len(records),
        "train_loss": train_summary,
        "validation": _validation_summary(records),
        "stopped_early_at": stopped_early_at,
    }


def write_summary(
    metrics_jsonl: str | Path,
    out_summary_json: str | Path,
    *,
    stopped_early_at: int | None = None,
) -> str:
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = summarize_run(
        _read_records(Path(metrics_jsonl)), stopped_early_at=stopped_early_at
    )
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["summarize_run", "write_summary"]
