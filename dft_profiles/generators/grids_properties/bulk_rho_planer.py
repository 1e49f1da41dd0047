import numpy as np


def bulk_rho_planer(bulk_state, grid):
    """Uniform profile: every segment at its bulk density on the whole grid."""
    n_points = len(grid["z"])
    return {s: np.full(n_points, float(rho)) for s, rho in bulk_state.items()}


def phase_profile_planer(phases, grid):
    """
    Step profile with one slab per phase along z.

    Parameters
    ----------
    phases : list of dict
        Each entry maps segment -> density of that phase. The box is split
        into equal slabs in the listed order; useful as a warm start for a
        free interface between coexisting phases.
    grid : dict
        Output of r_k_space_box().

    Returns
    -------
    dict
        segment -> ndarray
    """
    if not phases:
        raise ValueError("At least one phase must be given.")

    segments = list(phases[0].keys())
    for p, phase in enumerate(phases):
        if set(phase.keys()) != set(segments):
            raise ValueError(f"Phase {p} does not list the same segments as phase 0.")

    z = np.asarray(grid["z"], dtype=float)
    box_length = float(grid["box_length"])
    n_phases = len(phases)

    # Equal phase fractions
    boundaries = np.cumsum(np.ones(n_phases) / n_phases) * box_length
    boundaries[-1] = np.inf
    phase_indices = np.searchsorted(boundaries, z, side="right")

    profile = {}
    for s in segments:
        values = np.array([float(phase[s]) for phase in phases])
        profile[s] = values[phase_indices]
    return profile
