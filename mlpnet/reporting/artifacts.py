"""Run artifacts: manifest, loss curve and weight exports."""

from __future__ import annotations

import json
import os
import platform
import subprocess
import time
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Tuple

import numpy as np


def git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
) -> str:
    """Write a manifest JSON file capturing reproducibility metadata."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "git_sha": git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": config,
        "dataset": dict(dataset_provenance),
        "environment": {
            "python": platform.python_version(),
            "numpy": np.__version__,
            "pid": os.getpid(),
        },
    }
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)


def write_losses(path: str | Path, losses: Iterable[Tuple[int, float]]) -> str:
    """Write ``epoch    loss`` lines, one per completed epoch."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        for epoch, loss in losses:
            handle.write(f"{epoch}    {loss}\n")
    return str(path)


def read_losses(path: str | Path) -> List[Tuple[int, float]]:
    losses: List[Tuple[int, float]] = []
    for line in Path(path).read_text().splitlines():
        fields = line.split()
        if not fields:
            continue
        losses.append((int(fields[0]), float(fields[1])))
    return losses


def write_weights(path: str | Path, state: Mapping[str, np.ndarray]) -> str:
    """Write ``W0``/``b0``/``W1``/... arrays as nested JSON lists."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {name: np.asarray(value).tolist() for name, value in state.items()}
    path.write_text(json.dumps(payload))
    return str(path)


def read_weights(path: str | Path) -> Dict[str, np.ndarray]:
    payload = json.loads(Path(path).read_text())
    return {name: np.asarray(value, dtype=np.float64) for name, value in payload.items()}


__all__ = [
    "git_sha",
    "read_losses",
    "read_weights",
    "write_losses",
    "write_manifest",
    "write_weights",
]
