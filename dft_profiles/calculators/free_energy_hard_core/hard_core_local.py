import numpy as np
import sympy as sp

from dft_profiles.calculators.total_free_energy.oracle import FunctionalOracle
from dft_profiles.generators.density_weights.convolution import convolve_planer


def carnahan_starling_symbolic(segments, diameters):
    """
    Symbolic Carnahan-Starling excess free-energy density (in units of kT),

        βf_ex = n (4η - 3η²) / (1 - η)²,   η = π/6 Σ_a n_a d_a³,  n = Σ_a n_a.

    Returns
    -------
    dict
        {
            "variables": [sympy.Symbol per segment],
            "eta": sympy.Expr,
            "expression": sympy.Expr,
            "derivatives": [sympy.Expr per segment]
        }
    """
    densities = [sp.symbols(f"n_{s}") for s in segments]
    eta = sp.pi / 6 * sum(n * sp.Float(diameters[s]) ** 3 for n, s in zip(densities, segments))
    n_total = sum(densities)
    phi = n_total * (4 * eta - 3 * eta ** 2) / (1 - eta) ** 2

    return {
        "variables": densities,
        "eta": eta,
        "expression": phi,
        "derivatives": [sp.diff(phi, n) for n in densities],
    }


class LocalHardCoreOracle(FunctionalOracle):
    """
    Hard-core repulsion in a (weighted) local density approximation.

    Without `smoothing_weights` the Carnahan-Starling derivative is taken at
    the local segment densities. With smoothing weights ω_a the free energy
    is ∫ f(n̄(z)) dz with n̄_a = ω_a * n_a, and the derivative is folded back,
    δF/δn_a = ω_a * ∂f/∂n̄_a.

    Packing fractions η >= 1 are unphysical; the derivative is returned as
    NaN there so that the solver stops with a NumericalError.
    """

    def __init__(self, segments, bulk_densities, diameters, chain_lengths=None,
                 temperature=1.0, smoothing_weights=None, convolve=convolve_planer):
        super().__init__(segments, bulk_densities, chain_lengths, temperature)

        missing = [s for s in self.segments if s not in diameters]
        if missing:
            raise ValueError(f"No hard-core diameter for segment(s): {', '.join(missing)}")
        self.diameters = {s: float(diameters[s]) for s in self.segments}
        self.smoothing_weights = smoothing_weights
        self.convolve = convolve

        symbolic = carnahan_starling_symbolic(self.segments, self.diameters)
        self.symbolic = symbolic
        variables = symbolic["variables"]
        self._eta_fn = sp.lambdify(variables, symbolic["eta"], "numpy")
        self._phi_fn = sp.lambdify(variables, symbolic["expression"], "numpy")
        self._dphi_fn = [sp.lambdify(variables, d, "numpy") for d in symbolic["derivatives"]]

    def _smooth(self, segment, field):
        if self.smoothing_weights is None:
            return field
        return self.convolve(field, self.smoothing_weights[segment])

    def free_energy_density(self, n_values):
        """βf_ex at the given segment densities (list ordered like `segments`)."""
        return self._phi_fn(*n_values)

    def evaluate(self, profile):
        n = self.segment_densities(profile)
        n_bar = [self._smooth(s, n[s]) for s in self.segments]

        eta = np.broadcast_to(self._eta_fn(*n_bar), np.shape(n_bar[0]))
        valid = eta < 1.0

        fields = {}
        for i, s in enumerate(self.segments):
            with np.errstate(divide="ignore", invalid="ignore"):
                dphi = np.broadcast_to(self._dphi_fn[i](*n_bar), np.shape(n_bar[0]))
            dphi = np.where(valid, dphi, np.nan)
            fields[s] = self.temperature * self.chain_lengths[s] * self._smooth(s, dphi)

        n_bulk = self.bulk_segment_densities()
        bulk_values = [n_bulk[s] for s in self.segments]
        if not float(self._eta_fn(*bulk_values)) < 1.0:
            raise ValueError("Bulk packing fraction of the hard-core fluid must be below 1.")
        bulk = {
            s: self.temperature * self.chain_lengths[s] * float(self._dphi_fn[i](*bulk_values))
            for i, s in enumerate(self.segments)
        }
        return fields, bulk
