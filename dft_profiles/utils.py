# dft_profiles/utils.py

import json
from pathlib import Path
from dataclasses import dataclass

import numpy as np


@dataclass
class ExecutionContext:
    input_file: Path | None = None
    input_data: str | None = None
    scratch_dir: Path | None = None
    plots_dir: Path | None = None


def create_unique_scratch_dir(base_name: str = "scratch", root=None) -> Path:
    """
    Create a unique scratch directory.

    Rules
    -----
    - If <root>/<base_name> does not exist → create it
    - Else create <root>/<base_name>_1, <root>/<base_name>_2, ...
    - Return Path to the created directory

    `root` defaults to the current working directory.
    """

    root = Path.cwd() if root is None else Path(root)
    base_path = root / base_name

    if not base_path.exists():
        base_path.mkdir(parents=True)
        return base_path

    i = 1
    while True:
        candidate = root / f"{base_name}_{i}"
        if not candidate.exists():
            candidate.mkdir()
            return candidate
        i += 1


def find_key_recursive(d, key):
    """Depth-first lookup of `key` in a nested dictionary, None if absent."""
    if not isinstance(d, dict):
        return None
    if key in d:
        return d[key]
    for v in d.values():
        if isinstance(v, dict):
            found = find_key_recursive(v, key)
            if found is not None:
                return found
    return None


def _to_builtin(value):
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, (np.floating, np.integer)):
        return value.item()
    if isinstance(value, dict):
        return {str(k): _to_builtin(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_builtin(v) for v in value]
    return value


def export_json(ctx, payload, filename):
    """
    Write `payload` (numpy arrays allowed) as JSON into ctx.scratch_dir.
    Returns the written path, or None when no context is available.
    """
    if ctx is None or getattr(ctx, "scratch_dir", None) is None:
        return None

    scratch_dir = Path(ctx.scratch_dir)
    scratch_dir.mkdir(parents=True, exist_ok=True)
    out_file = scratch_dir / filename
    with open(out_file, "w") as f:
        json.dump(_to_builtin(payload), f, indent=2)
    return out_file
