# dft_profiles/calculators/one_d_profile_iterator/density_update.py

"""
Euler-Lagrange update of the segment densities.

    rho_a(z) = rho_a^b · exp[(β/m_a)(F^b_a - F_a(z) - V_a(z))] · Π_a' I_aa'(z)

One formula for spheres (m = 1, no bonds), homosegmented chains (m = m_i,
no bonds) and heterosegmented chains (m = 1, bonds). The exponent and the
bond product are added in log space and exponentiated once, so a vanishing
density (exp of a large negative number) floors to zero instead of
failing.
"""

import numpy as np

from dft_profiles.exceptions import NumericalError
from dft_profiles.calculators.bond_integrals.bond_integrals import bond_product


def log_boltzmann_factors(graphs, fields, bulk, external_potential, temperature=1.0):
    """
    (β/m_a)(F^b_a - F_a(z) - V_a(z)) for every segment.

    -inf (impenetrable wall) is accepted; NaN or +inf means the functional
    returned garbage and raises NumericalError.
    """
    beta = 1.0 / temperature
    factors = {}
    for graph in graphs:
        for segment in graph.segments:
            m = graph.weights[segment]
            with np.errstate(invalid="ignore", over="ignore"):
                exponent = (beta / m) * (
                    bulk[segment]
                    - np.asarray(fields[segment], dtype=float)
                    - np.asarray(external_potential[segment], dtype=float)
                )
            bad = np.isnan(exponent) | (exponent == np.inf)
            if np.any(bad):
                raise NumericalError(
                    f"Non-finite Euler-Lagrange exponent for segment '{segment}' "
                    f"at {int(np.count_nonzero(bad))} grid point(s)."
                )
            factors[segment] = exponent
    return factors


def density_update(graphs, bulk_state, log_factors, log_integrals):
    """
    Candidate profile from the factors and the log bond integrals.

    Parameters
    ----------
    graphs : list of BondGraph
    bulk_state : dict
        Segment -> bulk density.
    log_factors : dict
        Output of log_boltzmann_factors().
    log_integrals : dict
        (target, source) -> log I, merged over all molecules.

    Returns
    -------
    dict
        Segment -> new density array (freshly allocated).
    """
    profile = {}
    for graph in graphs:
        for segment in graph.segments:
            rho_b = float(bulk_state[segment])
            if rho_b == 0.0:
                profile[segment] = np.zeros_like(log_factors[segment])
                continue

            log_rho = np.log(rho_b) + log_factors[segment] + bond_product(graph, segment, log_integrals)
            with np.errstate(over="ignore", under="ignore"):
                rho = np.exp(log_rho)

            if not np.all(np.isfinite(rho)):
                raise NumericalError(f"Density of segment '{segment}' is not finite after the update.")
            profile[segment] = rho
    return profile
