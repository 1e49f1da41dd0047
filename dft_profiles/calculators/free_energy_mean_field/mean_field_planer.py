import numpy as np

from dft_profiles.calculators.total_free_energy.oracle import FunctionalOracle
from dft_profiles.generators.density_weights.convolution import convolve_planer


class MeanFieldPlanerOracle(FunctionalOracle):
    """
    Mean-field (random phase) functional on the planar grid,

        F_mf = 1/2 Σ_ab ∫∫ n_a(z) ū_ab(z - z') n_b(z') dz dz',

    so that

        δF_mf/δρ_a(z) = m_a Σ_b (ū_ab * n_b)(z),
        bulk:           m_a Σ_b ū_ab(k=0) n_b^b.

    `weights` maps (a, b) -> k-space planar weight ū_ab(k) as produced by
    mf_weights_planer(); missing pairs do not interact.
    """

    def __init__(self, segments, bulk_densities, weights, chain_lengths=None,
                 temperature=1.0, convolve=convolve_planer):
        super().__init__(segments, bulk_densities, chain_lengths, temperature)
        self.weights = dict(weights)
        self.convolve = convolve

        unknown = {s for pair in self.weights for s in pair} - set(self.segments)
        if unknown:
            raise ValueError(f"Mean-field weights refer to unknown segment(s): {', '.join(sorted(unknown))}")

    def evaluate(self, profile):
        n = self.segment_densities(profile)
        n_bulk = self.bulk_segment_densities()

        fields = {}
        bulk = {}
        for a in self.segments:
            field = np.zeros_like(n[a])
            bulk_value = 0.0
            for b in self.segments:
                w = self.weights.get((a, b))
                if w is None:
                    continue
                field = field + self.convolve(n[b], w)
                bulk_value += float(np.real(w[0])) * n_bulk[b]
            fields[a] = self.chain_lengths[a] * field
            bulk[a] = self.chain_lengths[a] * bulk_value
        return fields, bulk
