# dft_profiles/generators/grids_properties/k_and_r_space_box.py

"""
Real- and Reciprocal-Space Grid Generator (Dictionary-Driven)

Generates the periodic planar r-space and k-space grids used by the
one-dimensional profile solver. Recursively searches for
`space_confinement_parameters`. Outputs a dictionary and optionally
writes a JSON copy to `ctx.scratch_dir`.
"""

import numpy as np

from dft_profiles.utils import find_key_recursive, export_json


def r_k_space_box(
    ctx=None,
    data_dict=None,
    export_json_file=True,
    filename="supplied_data_r_k_space_box.json"
):
    """
    Generate planar r-space and k-space grids from a dictionary.

    Parameters
    ----------
    ctx : object, optional
        Provides `ctx.scratch_dir` for exporting JSON file.
    data_dict : dict
        Dictionary containing `space_confinement_parameters`.
    export_json_file : bool
        If True, export the result to a JSON file.
    filename : str
        Name of the JSON file if exported.

    Returns
    -------
    dict
        {
            "z": ndarray (N,),
            "k": ndarray (N,),
            "dz": float,
            "box_length": float,
            "box_points": int,
            "dimension": 1
        }
    """

    if data_dict is None:
        raise ValueError("A valid input dictionary must be provided.")

    params = find_key_recursive(data_dict, "space_confinement_parameters")
    if params is None:
        raise KeyError("Could not find 'space_confinement_parameters' in the dictionary.")

    box_length = params["box_properties"]["box_length"]
    box_points = params["box_properties"]["box_points"]
    dimension = int(params.get("space_properties", {}).get("dimension", 1))

    if dimension != 1:
        raise ValueError(f"Only planar (dimension 1) profiles are supported, got dimension {dimension}.")

    if isinstance(box_length, (list, tuple)):
        box_length = box_length[0]
    if isinstance(box_points, (list, tuple)):
        box_points = box_points[0]

    return planar_grid(
        float(box_length),
        int(float(box_points)),
        ctx=ctx,
        export_json_file=export_json_file,
        filename=filename,
    )


def planar_grid(box_length, box_points, ctx=None, export_json_file=False,
                filename="supplied_data_r_k_space_box.json"):
    """Periodic grid z_i = i*dz, dz = L/N, with the matching FFT wave vectors."""

    if box_length <= 0.0:
        raise ValueError(f"box_length must be positive, got {box_length}")
    if box_points < 4:
        raise ValueError(f"box_points must be at least 4, got {box_points}")

    dz = box_length / box_points
    z = np.arange(box_points) * dz
    k = np.fft.fftfreq(box_points, d=dz) * 2 * np.pi

    result = {
        "box_length": box_length,
        "box_points": box_points,
        "dimension": 1,
        "dz": dz,
        "z": z,
        "k": k,
    }

    if export_json_file:
        out_file = export_json(ctx, result, filename)
        if out_file is not None:
            print(f"✅ r- and k-space grids exported to {out_file}")

    return result
