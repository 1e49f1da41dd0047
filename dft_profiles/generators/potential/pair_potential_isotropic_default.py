# dft_profiles/generators/potential/pair_potential_isotropic_default.py

"""
Built-in potential shapes.

Every factory reads its parameters from the interaction dictionary and
returns V(r) acting on arrays. Impenetrable regions carry the finite
value HARD so that exp(-V) underflows to exactly zero.
"""

import numpy as np

from dft_profiles.generators.potential.pair_potential_isotropic_registry import (
    ISOTROPIC_PAIR_POTENTIAL_REGISTRY,
    register_isotropic_pair_potential,
)

EPS = 1e-4
HARD = 2e16


def zero_factory(p):
    return lambda r: np.zeros_like(np.asarray(r, dtype=float))


def hard_core_factory(p):
    """Step of height HARD below the contact distance sigma."""
    sigma = float(p.get("sigma", 1.0))

    def V(r):
        r = np.asarray(r, dtype=float)
        return np.where(r < sigma, HARD, 0.0)

    return V


def _power_law_pair(p, n, m, prefactor):
    sigma = float(p.get("sigma", 1.0))
    epsilon = float(p.get("epsilon", 1.0))
    cutoff = float(p.get("cutoff", np.inf))

    def V(r):
        r = np.asarray(r, dtype=float)
        with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
            x = sigma / r
            v = prefactor * epsilon * (x ** n - x ** m)
        return np.where(r > cutoff, 0.0, v)

    return V


def lj_factory(p):
    return _power_law_pair(p, 12, 6, 4.0)


def mie_factory(p):
    n = float(p.get("n", 12))
    m = float(p.get("m", 6))
    c = (n / (n - m)) * (n / m) ** (m / (n - m))
    local = dict(p)
    local.setdefault("cutoff", 5.0)
    return _power_law_pair(local, n, m, c)


def gaussian_factory(p):
    sigma = float(p.get("sigma", 1.0))
    epsilon = float(p.get("epsilon", 1.0))
    return lambda r: epsilon * np.exp(-(np.asarray(r, dtype=float) / sigma) ** 2)


def wca_factory(p):
    """
    Attractive part of Lennard-Jones in the WCA split: flat -epsilon inside
    the minimum at 2^(1/6) sigma, the full LJ tail up to the cutoff.
    """
    sigma = float(p.get("sigma", 1.0))
    epsilon = float(p.get("epsilon", 1.0))
    cutoff = float(p.get("cutoff", 5.0))
    r_min = 2 ** (1 / 6) * sigma

    def V(r):
        r = np.asarray(r, dtype=float)
        v = np.zeros_like(r)
        v[r < r_min] = -epsilon
        tail = (r >= r_min) & (r < cutoff)
        x = sigma / r[tail]
        v[tail] = 4 * epsilon * (x ** 12 - x ** 6)
        return v

    return V


def wall_9_3_factory(p):
    """Integrated 9-3 wall, epsilon [(2/15)(sigma/d)^9 - (sigma/d)^3]; hard at contact."""
    sigma = float(p.get("sigma", 1.0))
    epsilon = float(p.get("epsilon", 1.0))
    cutoff = float(p.get("cutoff", 5.0))

    def V(d):
        d = np.asarray(d, dtype=float)
        v = np.zeros_like(d)
        v[d <= EPS] = HARD
        active = (d > EPS) & (d < cutoff)
        x = sigma / d[active]
        v[active] = epsilon * ((2.0 / 15.0) * x ** 9 - x ** 3)
        return v

    return V


BUILTIN_POTENTIALS = {
    "zero": zero_factory,
    "zero_potential": zero_factory,
    "hard_core": hard_core_factory,
    "hard_sphere": hard_core_factory,
    "hc": hard_core_factory,
    "hard_wall": hard_core_factory,
    "lj": lj_factory,
    "lennard-jones": lj_factory,
    "mie": mie_factory,
    "gaussian": gaussian_factory,
    "gs": gaussian_factory,
    "wca": wca_factory,
    "wall_9_3": wall_9_3_factory,
    "lj_93": wall_9_3_factory,
}


def pair_potential_isotropic_default():
    """Register the built-in shapes (no-op when already registered)."""
    if "zero" in ISOTROPIC_PAIR_POTENTIAL_REGISTRY:
        return
    for name, factory in BUILTIN_POTENTIALS.items():
        register_isotropic_pair_potential(name, factory)
