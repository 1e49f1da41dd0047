import numpy as np

from dft_profiles.calculators.total_free_energy.oracle import FunctionalOracle


class IdealOracle(FunctionalOracle):
    """
    Ideal (non-interacting) fluid: the residual functional vanishes.

    With a zero external potential the uniform bulk profile is reproduced
    by the first Picard step.
    """

    def evaluate(self, profile):
        fields = {s: np.zeros_like(np.asarray(profile[s], dtype=float)) for s in self.segments}
        bulk = {s: 0.0 for s in self.segments}
        return fields, bulk
