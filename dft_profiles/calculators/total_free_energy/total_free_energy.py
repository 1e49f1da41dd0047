import numpy as np

from dft_profiles.utils import find_key_recursive
from dft_profiles.calculators.total_free_energy.oracle import FunctionalOracle
from dft_profiles.calculators.free_energy_ideal.ideal import IdealOracle
from dft_profiles.calculators.free_energy_mean_field.mean_field_planer import MeanFieldPlanerOracle
from dft_profiles.calculators.free_energy_hard_core.hard_core_local import LocalHardCoreOracle
from dft_profiles.generators.density_weights.bond_weights_planer import step_weight_planer
from dft_profiles.generators.density_weights.mf_weights_planer import mf_weights_planer


class CompositeOracle:
    """Sum of several residual functionals sharing the same segments."""

    def __init__(self, oracles):
        self.oracles = list(oracles)
        if not self.oracles:
            raise ValueError("CompositeOracle needs at least one contribution.")
        self.segments = list(self.oracles[0].segments)
        for oracle in self.oracles[1:]:
            if set(oracle.segments) != set(self.segments):
                raise ValueError("All contributions of a CompositeOracle must cover the same segments.")

    def evaluate(self, profile):
        fields = {s: 0.0 for s in self.segments}
        bulk = {s: 0.0 for s in self.segments}
        for oracle in self.oracles:
            f, b = oracle.evaluate(profile)
            for s in self.segments:
                fields[s] = fields[s] + f[s]
                bulk[s] += float(b[s])
        for s in self.segments:
            fields[s] = np.broadcast_to(fields[s], np.shape(profile[s])).astype(float)
        return fields, bulk


def _enabled(entry):
    if entry is None:
        return False
    if isinstance(entry, dict):
        return bool(entry.get("enabled", True))
    return bool(entry)


def _hard_core_diameters(entry, segments):
    diameters = entry.get("diameters", entry.get("diameter", 1.0))
    if isinstance(diameters, dict):
        return {s: float(diameters.get(s, diameters.get("default", 1.0))) for s in segments}
    return {s: float(diameters) for s in segments}


def total_free_energy(data_dict, graphs, bulk_state, grid, temperature=1.0, ctx=None):
    """
    Build the residual functional requested by the `functional` block.

        "functional": {
            "ideal": true,
            "hard_core": {"diameters": {"A": 1.0}, "smoothing": true},
            "mean_field": true
        }

    `mean_field` reads the pair interactions from the `mean_field` block
    (see mf_weights_planer). Without a `functional` block the fluid is ideal.

    Returns
    -------
    FunctionalOracle or CompositeOracle
    """
    functional = find_key_recursive(data_dict, "functional") or {"ideal": True}
    if not isinstance(functional, dict):
        raise TypeError("The 'functional' block must be a dictionary.")

    unknown = set(functional) - {"ideal", "hard_core", "mean_field"}
    for key in sorted(unknown):
        print(f"⚠️ Skipping unknown functional contribution '{key}'")

    contributions = []
    names = []

    if _enabled(functional.get("hard_core")):
        entry = functional["hard_core"] if isinstance(functional["hard_core"], dict) else {}
        segments = [s for graph in graphs for s in graph.segments]
        diameters = _hard_core_diameters(entry, segments)
        smoothing = None
        if entry.get("smoothing", False):
            smoothing = {s: step_weight_planer(grid, 0.5 * diameters[s]) for s in segments}
        contributions.append(
            LocalHardCoreOracle.from_graphs(
                graphs, bulk_state, temperature=temperature,
                diameters=diameters, smoothing_weights=smoothing,
            )
        )
        names.append("hard_core")

    if _enabled(functional.get("mean_field")):
        weights = mf_weights_planer(ctx, data_dict, grid, export_json_file=ctx is not None)
        contributions.append(
            MeanFieldPlanerOracle.from_graphs(graphs, bulk_state, temperature=temperature, weights=weights)
        )
        names.append("mean_field")

    if not contributions:
        contributions.append(IdealOracle.from_graphs(graphs, bulk_state, temperature=temperature))
        names.append("ideal")

    print(f"✅ Residual functional: {' + '.join(names)}")

    if len(contributions) == 1:
        return contributions[0]
    return CompositeOracle(contributions)
