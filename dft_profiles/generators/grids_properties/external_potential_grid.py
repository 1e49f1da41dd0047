# dft_profiles/generators/grids_properties/external_potential_grid.py

"""
External Potential Generator (Dictionary-Driven)

Computes the potential of planar walls on the periodic planar grid for
every segment. Wall-segment interactions use the isotropic pair-potential
registry with the wall distance as argument.
"""

import numpy as np
from pathlib import Path
import matplotlib.pyplot as plt

from dft_profiles.utils import find_key_recursive, export_json
from dft_profiles.generators.potential.pair_potential_isotropic import pair_potential_isotropic as ppi
from dft_profiles.generators.density_weights.convolution import minimum_image_distance


def external_potential_grid(
    ctx=None,
    data_dict=None,
    grid=None,
    graphs=None,
    export_json_file=True,
    filename="supplied_data_external_potential.json",
    plot=False
):
    """
    Compute external wall potentials for all segments on a planar grid.

    Parameters
    ----------
    ctx : object, optional
        Provides ctx.scratch_dir / ctx.plots_dir for exports.
    data_dict : dict
        May contain
        {
            "external": {
                "walls": [
                    {
                        "position": 0.0,
                        "interaction": {
                            "a": {"type": "hard_wall", "sigma": 0.5},
                            "default": {"type": "wall_9_3", "sigma": 1.0, "epsilon": 2.0}
                        }
                    }
                ]
            }
        }
    grid : dict
        Output of r_k_space_box().
    graphs : list of BondGraph
        Molecules; every segment receives a potential, scaled by its weight m.

    Returns
    -------
    dict
        segment -> ndarray, V_ext(z) per segment.
    """

    if grid is None:
        raise ValueError("grid must be provided")
    if not graphs:
        raise ValueError("graphs must be provided")

    z = np.asarray(grid["z"], dtype=float)
    box_length = float(grid["box_length"])

    weights = {s: graph.weights[s] for graph in graphs for s in graph.segments}
    external_potentials = {s: np.zeros_like(z) for s in weights}

    external = find_key_recursive(data_dict, "external") if data_dict is not None else None
    walls = (external or {}).get("walls", [])
    if isinstance(walls, dict):
        walls = [walls]

    for wi, wall in enumerate(walls):
        if "position" not in wall:
            raise KeyError(f"Wall {wi} has no 'position'.")
        interactions = wall.get("interaction", {})
        if not interactions:
            raise ValueError(f"Wall {wi} defines no interaction.")

        distance = minimum_image_distance(z, float(wall["position"]), box_length)

        for s in external_potentials:
            pot_dict = interactions.get(s, interactions.get("default"))
            if pot_dict is None:
                continue
            pot_fn = ppi(pot_dict)
            external_potentials[s] += pot_fn(distance)

    # molecule-level potential for homosegmented chains
    for s, m in weights.items():
        external_potentials[s] = m * external_potentials[s]

    if export_json_file:
        out_file = export_json(ctx, {"z": z, "external_potentials": external_potentials}, filename)
        if out_file is not None:
            print(f"✅ External potentials exported to {out_file}")

    if plot and ctx is not None and getattr(ctx, "plots_dir", None) is not None:
        plot_dir = Path(ctx.plots_dir)
        plot_dir.mkdir(parents=True, exist_ok=True)

        for s, v in external_potentials.items():
            plt.figure(figsize=(6, 4))
            plt.plot(z, v, c='blue')
            plt.title(f"External Potential for Segment '{s}'")
            plt.xlabel("z")
            plt.ylabel("Potential")
            plt.grid(True)
            plt.ylim(-10, 10)

            plot_file = plot_dir / f"external_potential_{s}.png"
            plt.savefig(plot_file, dpi=150)
            plt.close()
            print(f"✅ Plot saved: {plot_file}")

    return external_potentials
