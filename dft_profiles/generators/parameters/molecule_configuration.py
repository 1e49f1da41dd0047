# dft_profiles/generators/parameters/molecule_configuration.py

from dft_profiles.utils import find_key_recursive, export_json
from dft_profiles.calculators.bond_integrals.bond_graph import BondGraph, validate_graphs
from dft_profiles.generators.density_weights.mf_weights_planer import parse_pair_key


def molecule_configuration(data_dict, ctx=None, export_json_file=False,
                           filename="input_molecule_parameters.json"):
    """
    Build bond graphs and the bulk state from the `molecules` block.

    Example
    -------
    {
        "molecules": {
            "solvent": {"segments": ["s"], "bulk_density": 0.4},
            "polymer": {"segments": ["p"], "chain_length": 8, "bulk_density": 0.02},
            "dimer": {
                "segments": ["a", "b"],
                "bonds": [["a", "b"]],
                "bond_length": 1.0,
                "bulk_density": 0.1
            }
        },
        "bulk_densities": {"s": 0.35}      # optional per-segment override
    }

    Returns
    -------
    (list of BondGraph, dict)
        Validated graphs and segment -> bulk density.
    """

    if data_dict is None:
        raise ValueError("A valid input dictionary must be provided.")

    molecules = find_key_recursive(data_dict, "molecules")
    if not molecules:
        raise KeyError("Could not find 'molecules' in the dictionary.")

    graphs = []
    bulk_state = {}
    for name, spec in molecules.items():
        segments = spec.get("segments", [name])
        if isinstance(segments, str):
            segments = [segments]

        bonds = [tuple(b) for b in spec.get("bonds", [])]

        weights = {}
        chain_length = spec.get("chain_length")
        if chain_length is not None:
            if len(segments) != 1:
                raise ValueError(
                    f"'chain_length' is only allowed for single-segment molecules, "
                    f"'{name}' has {len(segments)} segments."
                )
            weights[segments[0]] = float(chain_length)

        bond_length = spec.get("bond_length", 1.0)
        bond_lengths = {}
        default_length = 1.0
        if isinstance(bond_length, dict):
            for pair_key, length in bond_length.items():
                bond_lengths[parse_pair_key(pair_key)] = float(length)
        else:
            default_length = float(bond_length)

        graph = BondGraph(
            name,
            segments,
            bonds=bonds,
            weights=weights,
            bond_lengths=bond_lengths,
            default_bond_length=default_length,
        )
        graphs.append(graph)

        density = spec.get("bulk_density")
        for s in graph.segments:
            if density is not None:
                bulk_state[s] = float(density)

    validate_graphs(graphs)

    overrides = find_key_recursive(data_dict, "bulk_densities") or {}
    known = {s for graph in graphs for s in graph.segments}
    for s, rho in overrides.items():
        if s not in known:
            raise KeyError(f"Bulk density given for unknown segment '{s}'.")
        bulk_state[s] = float(rho)

    missing = sorted(known - set(bulk_state))
    if missing:
        raise ValueError(f"No bulk density for segment(s): {', '.join(missing)}")

    if export_json_file:
        payload = {
            "molecules": {
                graph.name: {
                    "segments": graph.segments,
                    "bonds": [list(b) for b in graph.bonds],
                    "weights": graph.weights,
                    "bond_lengths": {f"{a}|{b}": l for (a, b), l in graph.bond_lengths.items()},
                }
                for graph in graphs
            },
            "bulk_densities": bulk_state,
        }
        out_file = export_json(ctx, payload, filename)
        if out_file is not None:
            print(f"✅ Molecule parameters exported to: {out_file}")

    return graphs, bulk_state
