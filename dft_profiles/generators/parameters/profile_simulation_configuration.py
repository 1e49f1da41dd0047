# dft_profiles/generators/parameters/profile_simulation_configuration.py

from dft_profiles.utils import find_key_recursive, export_json


DEFAULT_PROFILE_PARAMETERS = {
    "alpha_mixing_max": 0.1,
    "alpha_mixing_min": 1e-3,
    "adaptive_mixing": False,
    "iteration_max": 1000,
    "tolerance": 1e-8,
    "log_period": 50,
    "temperature": 1.0,
    "convergence_metric": "max_relative",
    "divergence_window": 25,
    "divergence_ratio": 1e3,
    "time_limit": None,
}


def _to_bool(value):
    if isinstance(value, str):
        if value.strip().lower() in ("1", "true", "yes", "on"):
            return True
        if value.strip().lower() in ("0", "false", "no", "off"):
            return False
        raise ValueError(f"Cannot interpret {value!r} as a boolean.")
    return bool(value)


def profile_simulation_configuration(data_dict=None, ctx=None, export_json_file=False,
                                     filename="input_profile_parameters.json"):
    """
    Density profile iteration parameters, merged over the defaults.

    Reads the `profile_parameters` block (recursive search) of `data_dict`, e.g.
    {"profile_parameters": {"alpha_mixing_max": 0.05, "iteration_max": 5000, "tolerance": 1e-9}}.
    """

    profile_dict = dict(DEFAULT_PROFILE_PARAMETERS)

    supplied = find_key_recursive(data_dict, "profile_parameters") if data_dict is not None else None
    if supplied is not None and not isinstance(supplied, dict):
        raise ValueError("'profile_parameters' must be a dictionary of iteration parameters.")

    for key, val in (supplied or {}).items():
        if key not in DEFAULT_PROFILE_PARAMETERS:
            print(f"⚠️ Skipping unknown profile parameter: {key}")
            continue
        profile_dict[key] = val

    try:
        profile_dict["alpha_mixing_max"] = float(profile_dict["alpha_mixing_max"])
        profile_dict["alpha_mixing_min"] = float(profile_dict["alpha_mixing_min"])
        profile_dict["adaptive_mixing"] = _to_bool(profile_dict["adaptive_mixing"])
        profile_dict["iteration_max"] = int(float(profile_dict["iteration_max"]))
        profile_dict["tolerance"] = float(profile_dict["tolerance"])
        profile_dict["log_period"] = int(float(profile_dict["log_period"]))
        profile_dict["temperature"] = float(profile_dict["temperature"])
        profile_dict["convergence_metric"] = str(profile_dict["convergence_metric"]).lower()
        profile_dict["divergence_window"] = int(float(profile_dict["divergence_window"]))
        profile_dict["divergence_ratio"] = float(profile_dict["divergence_ratio"])
        if profile_dict["time_limit"] is not None:
            profile_dict["time_limit"] = float(profile_dict["time_limit"])
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid profile parameter: {e}")

    if not 0.0 < profile_dict["alpha_mixing_max"] <= 1.0:
        raise ValueError("alpha_mixing_max must lie in (0, 1].")
    if not 0.0 < profile_dict["alpha_mixing_min"] <= profile_dict["alpha_mixing_max"]:
        raise ValueError("alpha_mixing_min must lie in (0, alpha_mixing_max].")
    if profile_dict["iteration_max"] < 1:
        raise ValueError("iteration_max must be at least 1.")
    if profile_dict["tolerance"] <= 0.0:
        raise ValueError("tolerance must be positive.")
    if profile_dict["temperature"] <= 0.0:
        raise ValueError("temperature must be positive.")
    if profile_dict["log_period"] < 1:
        raise ValueError("log_period must be at least 1.")
    if profile_dict["divergence_window"] < 1:
        raise ValueError("divergence_window must be at least 1.")

    if export_json_file:
        out_file = export_json(ctx, {"profile_parameters": profile_dict}, filename)
        if out_file is not None:
            print(f"✅ Profile parameters exported to: {out_file}")

    return profile_dict
