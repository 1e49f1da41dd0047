# dft_profiles/calculators/total_free_energy/oracle.py

import numpy as np


class FunctionalOracle:
    """
    Residual Helmholtz functional seen by the profile solver.

    `evaluate(profile)` returns `(fields, bulk)`:

        fields[segment] : ndarray, δF_res/δρ_segment(z) (energy units)
        bulk[segment]   : float, the same derivative in the bulk state

    Densities passed in are molecular/segment-site densities ρ_a; the
    contributions below work with segment number densities n_a = m_a ρ_a and
    return ∂F/∂ρ_a = m_a ∂F/∂n_a.
    """

    def __init__(self, segments, bulk_densities, chain_lengths=None, temperature=1.0):
        self.segments = [str(s) for s in segments]
        if not self.segments:
            raise ValueError("An oracle needs at least one segment.")
        missing = [s for s in self.segments if s not in bulk_densities]
        if missing:
            raise ValueError(f"No bulk density for segment(s): {', '.join(missing)}")
        self.bulk_densities = {s: float(bulk_densities[s]) for s in self.segments}
        self.chain_lengths = {s: float((chain_lengths or {}).get(s, 1.0)) for s in self.segments}
        self.temperature = float(temperature)

    @classmethod
    def from_graphs(cls, graphs, bulk_densities, temperature=1.0, **kwargs):
        segments = [s for graph in graphs for s in graph.segments]
        chain_lengths = {s: graph.weights[s] for graph in graphs for s in graph.segments}
        return cls(segments, bulk_densities, chain_lengths=chain_lengths, temperature=temperature, **kwargs)

    def segment_densities(self, profile):
        return {s: self.chain_lengths[s] * np.asarray(profile[s], dtype=float) for s in self.segments}

    def bulk_segment_densities(self):
        return {s: self.chain_lengths[s] * self.bulk_densities[s] for s in self.segments}

    def evaluate(self, profile):
        raise NotImplementedError
