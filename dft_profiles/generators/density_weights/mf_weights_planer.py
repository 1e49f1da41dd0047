# dft_profiles/generators/density_weights/mf_weights_planer.py

def planar_projection(potential_fn, distances, cutoff, breakpoints=()):
    """
    Planar projection of an isotropic pair potential,

        ū(z) = 2π ∫_{|z|}^{cutoff} u(r) r dr,

    evaluated with scipy.integrate.quad for every requested distance.
    """
    import numpy as np
    from scipy import integrate

    distances = np.abs(np.asarray(distances, dtype=float))
    values = np.zeros_like(distances)

    def integrand(r):
        return float(np.asarray(potential_fn(np.array([r])))[0]) * r

    cache = {}
    for i, d in enumerate(distances):
        if d >= cutoff:
            continue
        key = round(d, 12)
        if key not in cache:
            points = [p for p in breakpoints if d < p < cutoff] or None
            val, err = integrate.quad(integrand, d, cutoff, points=points, limit=200)
            cache[key] = 2.0 * np.pi * val
        values[i] = cache[key]

    return values


def mf_weights_planer(
    ctx=None,
    data_dict=None,
    grid=None,
    export_json_file=True,
    filename="supplied_data_weight_MF_k_space.json",
    plot=False,
):
    """
    Mean-field weights in k-space for the planar grid.

    - Reads the `mean_field` block (recursive search) of `data_dict`:
        {
            "mean_field": {
                "cutoff": 5.0,
                "interactions": {
                    "a|a": {"type": "wca", "sigma": 1.0, "epsilon": 1.0},
                    "a|b": {...}
                }
            }
        }
    - Projects every pair potential on the planar coordinate
    - Fourier transforms it on the periodic grid (weight_k[0] = ∫ u d³r)

    Returns
    -------
    dict
        (a, b) -> k-space weight, both orientations present.
    """
    import numpy as np
    import matplotlib.pyplot as plt
    from pathlib import Path

    from dft_profiles.utils import find_key_recursive, export_json
    from dft_profiles.generators.potential.pair_potential_isotropic import pair_potential_isotropic as ppi
    from dft_profiles.generators.density_weights.convolution import (
        minimum_image_distance,
        weight_to_k_space,
    )

    if data_dict is None:
        raise ValueError("data_dict must be provided")
    if grid is None:
        raise ValueError("grid must be provided")

    mean_field = find_key_recursive(data_dict, "mean_field")
    if not isinstance(mean_field, dict):
        raise KeyError("No 'mean_field' block found in the dictionary.")

    interactions = mean_field.get("interactions", {})
    if not interactions:
        raise ValueError("The 'mean_field' block defines no interactions.")

    z = np.asarray(grid["z"], dtype=float)
    dz = float(grid["dz"])
    box_length = float(grid["box_length"])
    cutoff = float(mean_field.get("cutoff", 0.5 * box_length))
    if cutoff > 0.5 * box_length:
        raise ValueError(f"Mean-field cutoff {cutoff} exceeds half of the box length {box_length}.")

    distances = minimum_image_distance(z, 0.0, box_length)

    weights = {}
    projections = {}
    for pair_key, pot_dict in interactions.items():
        a, b = parse_pair_key(pair_key)

        local = dict(pot_dict)
        local.setdefault("cutoff", cutoff)
        pot_fn = ppi(local)

        sigma = float(local.get("sigma", 1.0))
        u_z = planar_projection(
            pot_fn, distances, min(cutoff, float(local["cutoff"])),
            breakpoints=(sigma, 2 ** (1 / 6) * sigma),
        )
        w_k = weight_to_k_space(u_z, dz)

        weights[(a, b)] = w_k
        weights[(b, a)] = w_k
        projections[f"{a}|{b}"] = u_z

    if export_json_file:
        payload = {
            "z": z,
            "k": np.asarray(grid["k"]),
            "projected_potentials": projections,
            "weights_k_real": {f"{a}|{b}": w.real for (a, b), w in weights.items() if a <= b},
        }
        out_file = export_json(ctx, payload, filename)
        if out_file is not None:
            print(f"✅ Mean-field weight functions exported to {out_file}")

    if plot and ctx is not None and getattr(ctx, "plots_dir", None) is not None:
        plot_dir = Path(ctx.plots_dir)
        plot_dir.mkdir(parents=True, exist_ok=True)
        order = np.argsort(np.where(z <= 0.5 * box_length, z, z - box_length))
        z_signed = np.where(z <= 0.5 * box_length, z, z - box_length)[order]
        plt.figure(figsize=(7, 5))
        for tag, u_z in projections.items():
            plt.plot(z_signed, u_z[order], label=tag)
        plt.xlabel("z")
        plt.ylabel(r"$\bar u(z)$")
        plt.title("Planar mean-field potentials")
        plt.grid(True, ls="--", alpha=0.5)
        plt.legend()
        plt.tight_layout()
        plt.savefig(plot_dir / "vis_weight_MF_r_space.png", dpi=300)
        plt.close()

    return weights


def parse_pair_key(pair_key):
    """'a|b' or ('a', 'b') -> ('a', 'b')."""
    if isinstance(pair_key, (list, tuple)) and len(pair_key) == 2:
        return str(pair_key[0]), str(pair_key[1])
    if isinstance(pair_key, str) and "|" in pair_key:
        a, b = pair_key.split("|", 1)
        return a.strip(), b.strip()
    raise ValueError(f"Pair key must look like 'a|b', got {pair_key!r}")
