# dft_profiles/calculators/profile_observables/observables.py

import numpy as np
from scipy.integrate import simpson


def _periodic_integral(values, grid):
    """∫_0^L f(z) dz on the periodic grid (the first point closes the box)."""
    z = np.asarray(grid["z"], dtype=float)
    f = np.asarray(values, dtype=float)
    z_closed = np.append(z, float(grid["box_length"]))
    f_closed = np.append(f, f[0])
    return float(simpson(f_closed, x=z_closed))


def segment_numbers(profile, grid):
    """Number of segments per unit area, ∫ρ_α dz, for every segment."""
    return {s: _periodic_integral(rho, grid) for s, rho in profile.items()}


def adsorption(profile, bulk_state, grid):
    """Excess adsorption ∫(ρ_α - ρ_α^b) dz for every segment."""
    return {
        s: _periodic_integral(np.asarray(rho, dtype=float) - float(bulk_state[s]), grid)
        for s, rho in profile.items()
    }


def molecule_numbers(profile, graphs, grid):
    """
    Molecules per unit area. Every segment of a molecule carries the
    molecular density, so the segment integrals are averaged.
    """
    numbers = segment_numbers(profile, grid)
    return {
        graph.name: float(np.mean([numbers[s] for s in graph.segments]))
        for graph in graphs
    }
