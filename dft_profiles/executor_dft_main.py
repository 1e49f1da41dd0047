# dft_profiles/executor_dft_main.py

import sys
import json
from pathlib import Path

from .utils import create_unique_scratch_dir, ExecutionContext
from .engines.one_d_profile import one_d_profile_executor as odp_exec


def parse_input_keywords(data_dict):
    """Task and profile keywords of a JSON configuration (lower case, None if absent)."""
    params = {"task": None, "profile": None}
    for key in params:
        value = data_dict.get(key)
        if value is not None:
            params[key] = str(value).strip().lower()
    return params


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    if len(argv) < 1:
        print("Usage: python3 -m dft_profiles.executor_dft_main <executor_input.json>")
        sys.exit(1)

    input_file = Path(argv[0])
    if not input_file.exists():
        raise FileNotFoundError(f"Missing input file: {input_file}")

    input_data = input_file.read_text()
    try:
        config = json.loads(input_data)
    except json.JSONDecodeError as e:
        raise ValueError(f"❌ Invalid JSON format in {input_file}: {e}")

    params = parse_input_keywords(config)
    task = params["task"]
    profile = params["profile"]

    if task != "inhomogeneous":
        raise ValueError(f"Invalid task: {task}. Only 'inhomogeneous' is supported.")
    if profile is None:
        raise ValueError("For task='inhomogeneous', a 'profile' must be specified.")
    if profile != "one_d":
        raise ValueError(f"Unsupported profile: {profile}. Only 'one_d' is implemented.")

    root = input_file.parent
    ctx = ExecutionContext(
        input_file=input_file,
        input_data=input_data,
        scratch_dir=create_unique_scratch_dir("scratch", root=root),
        plots_dir=create_unique_scratch_dir("plots", root=root),
    )

    result = odp_exec(ctx, config)

    print(f"✅ Execution completed for task={task}, profile={profile}")
    return result


if __name__ == "__main__":
    main()
