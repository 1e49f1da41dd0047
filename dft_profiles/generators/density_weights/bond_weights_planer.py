# dft_profiles/generators/density_weights/bond_weights_planer.py

"""
Chain-connectivity weights in planar geometry.

A bond of length l is the normalized shell δ(r - l) / (4π l²). Projected on
the planar coordinate it becomes a flat step

    ω(z) = 1 / (2 l)   for |z| < l,

whose continuous transform is sin(k l) / (k l). The step is sampled on the
periodic grid (half weight on the edge points) and renormalized so that
ω̂(0) = 1 exactly; a uniform profile is then a fixed point of every bond
integral.
"""

import numpy as np
import matplotlib.pyplot as plt
from pathlib import Path

from dft_profiles.calculators.bond_integrals.bond_graph import bond_key
from dft_profiles.generators.density_weights.convolution import (
    minimum_image_distance,
    weight_to_k_space,
)
from dft_profiles.utils import export_json

EPSILON = 1e-10


def step_weight_planer(grid, half_width):
    """Normalized flat step of the given half width, in k-space (ω̂(0) = 1)."""
    z = np.asarray(grid["z"], dtype=float)
    dz = float(grid["dz"])
    box_length = float(grid["box_length"])

    if half_width <= 0.0:
        raise ValueError(f"half width must be positive, got {half_width}")
    if half_width >= 0.5 * box_length:
        raise ValueError(f"half width {half_width} does not fit into half of the box ({box_length}).")

    d = minimum_image_distance(z, 0.0, box_length)
    w = np.where(d < half_width - EPSILON, 1.0, 0.0)
    w[np.abs(d - half_width) <= 0.5 * dz + EPSILON] = 0.5

    norm = np.sum(w) * dz
    if norm <= 0.0:
        raise ValueError(f"half width {half_width} is not resolved by the grid spacing {dz}.")
    w = w / norm

    return weight_to_k_space(w, dz)


def chain_bond_weight_planer(grid, bond_length):
    """k-space chain kernel ω_chain for one bond length on the planar grid."""
    return step_weight_planer(grid, bond_length)


def bond_weights_planer(graphs, grid, ctx=None, export_json_file=False,
                        filename="supplied_data_weight_bond_k_space.json", plot=False):
    """
    Bond kernels of every bond of every molecule.

    Returns
    -------
    dict
        bond_key(a, b) -> complex k-space weight array.
    """
    weights = {}
    cache = {}
    for graph in graphs:
        for a, b in graph.bonds:
            key = bond_key(a, b)
            length = graph.bond_lengths[key]
            if length not in cache:
                cache[length] = chain_bond_weight_planer(grid, length)
            weights[key] = cache[length]

    if export_json_file and weights:
        payload = {
            "k": np.asarray(grid["k"]),
            "weights": {f"{a}|{b}": w.real for (a, b), w in weights.items()},
        }
        out_file = export_json(ctx, payload, filename)
        if out_file is not None:
            print(f"✅ Bond weight functions exported to {out_file}")

    if plot and weights and ctx is not None and getattr(ctx, "plots_dir", None) is not None:
        plot_dir = Path(ctx.plots_dir)
        plot_dir.mkdir(parents=True, exist_ok=True)
        k = np.fft.fftshift(np.asarray(grid["k"]))
        plt.figure(figsize=(7, 5))
        for (a, b), w in weights.items():
            plt.plot(k, np.fft.fftshift(w.real), label=f"ω {a}-{b}")
        plt.xlabel("k")
        plt.ylabel(r"$\hat\omega(k)$")
        plt.title("Chain bond weights")
        plt.grid(True, ls="--", alpha=0.5)
        plt.legend()
        plt.tight_layout()
        plt.savefig(plot_dir / "vis_weight_bond_k_space.png", dpi=300)
        plt.close()

    return weights
