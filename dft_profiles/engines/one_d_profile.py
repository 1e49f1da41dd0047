# density profile executor
# reads the configuration, builds every ingredient of the planar problem, iterates the profile and writes the results...


def one_d_profile_executor(ctx, config=None):
    """
    Planar (one-dimensional) density profile executor.

    Builds the grid, the molecules, the wall potentials and the residual
    functional from the configuration, runs the Picard solver and exports

        scratch/data_density_distribution_r_<segment>.txt
        scratch/one_d_profiles.json
        plots/vis_rho_distribution.png

    A run that hits the iteration cap or the time limit is reported with a
    warning and its last iterate is exported; any other failure aborts with
    exit status 1.
    """

    import sys
    import json
    import time
    from pathlib import Path

    import numpy as np
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    from dft_profiles.utils import find_key_recursive, export_json
    from dft_profiles.exceptions import ConvergenceFailure, SolveCancelled
    from dft_profiles.generators.grids_properties.k_and_r_space_box import r_k_space_box
    from dft_profiles.generators.grids_properties.external_potential_grid import external_potential_grid
    from dft_profiles.generators.grids_properties.bulk_rho_planer import bulk_rho_planer, phase_profile_planer
    from dft_profiles.generators.parameters.molecule_configuration import molecule_configuration
    from dft_profiles.generators.parameters.profile_simulation_configuration import profile_simulation_configuration
    from dft_profiles.generators.density_weights.bond_weights_planer import bond_weights_planer
    from dft_profiles.calculators.total_free_energy.total_free_energy import total_free_energy
    from dft_profiles.calculators.one_d_profile_iterator.damping import AdaptiveDamping, FixedDamping
    from dft_profiles.calculators.one_d_profile_iterator.picard_iterator import solve
    from dft_profiles.calculators.profile_observables.observables import adsorption, molecule_numbers

    def run_module(module_func, args=None, err_msg="Error running module"):
        """Safely run a module with arguments and error handling."""
        try:
            if args is None:
                return module_func()
            elif isinstance(args, (list, tuple)):
                return module_func(*args)
            else:
                return module_func(args)
        except Exception as e:
            print(f"{err_msg}: {e}")
            sys.exit(1)

    # --- Configuration ---
    if config is None:
        if ctx is None or getattr(ctx, "input_file", None) is None:
            raise ValueError("Either a configuration dictionary or ctx.input_file must be provided.")
        with open(Path(ctx.input_file), "r") as f:
            config = json.load(f)

    scratch = Path(ctx.scratch_dir) if ctx is not None and ctx.scratch_dir is not None else None
    plots = Path(ctx.plots_dir) if ctx is not None and ctx.plots_dir is not None else None

    # --- Step 1: grid, molecules, settings ---
    grid = run_module(r_k_space_box, [ctx, config], "Error exporting grids properties")
    graphs, bulk_state = run_module(molecule_configuration, [config, ctx, True], "Error building the molecules")
    settings = run_module(profile_simulation_configuration, [config, ctx, True], "Error exporting simulation profile parameters")
    temperature = settings["temperature"]

    # --- Step 2: potentials, weights and functional ---
    external = run_module(
        external_potential_grid, [ctx, config, grid, graphs, True, "supplied_data_external_potential.json", True],
        "Error wall potential value evaluation",
    )
    bond_weights = run_module(
        bond_weights_planer, [graphs, grid, ctx, True], "Error exporting bond weights",
    )
    oracle = run_module(
        total_free_energy, [config, graphs, bulk_state, grid, temperature, ctx],
        "Error building the residual free energy",
    )

    # --- Step 3: initial profile ---
    phases = find_key_recursive(config, "initial_phases")
    if phases:
        initial = run_module(phase_profile_planer, [phases, grid], "Error building the initial phases")
    else:
        initial = bulk_rho_planer(bulk_state, grid)

    if settings["adaptive_mixing"]:
        damping = AdaptiveDamping(settings["alpha_mixing_max"], settings["alpha_mixing_min"])
    else:
        damping = FixedDamping(settings["alpha_mixing_max"])

    deadline = None
    if settings["time_limit"] is not None:
        deadline = time.monotonic() + settings["time_limit"]

    # --- Step 4: iterate ---
    print("\n🧮 Iterating the one-d planar density profile...\n")
    try:
        result = solve(
            initial,
            bulk_state,
            external,
            graphs,
            oracle,
            damping=damping,
            tolerance=settings["tolerance"],
            max_iterations=settings["iteration_max"],
            temperature=temperature,
            grid=grid,
            bond_weights=bond_weights,
            metric=settings["convergence_metric"],
            divergence_window=settings["divergence_window"],
            divergence_ratio=settings["divergence_ratio"],
            deadline=deadline,
            log_period=settings["log_period"],
            ctx=ctx,
            verbose=True,
        )
    except (ConvergenceFailure, SolveCancelled) as e:
        print(f"⚠️ {e} The last iterate is exported.")
        result = e.result
    except Exception as e:
        print(f"Error while iterating one-d planar density profile: {e}")
        sys.exit(1)

    # --- Step 5: export ---
    z = np.asarray(grid["z"])
    segments = [s for graph in graphs for s in graph.segments]
    gamma = adsorption(result.profile, bulk_state, grid)
    numbers = molecule_numbers(result.profile, graphs, grid)

    if scratch is not None:
        scratch.mkdir(parents=True, exist_ok=True)
        for s in segments:
            file_name = scratch / f"data_density_distribution_r_{s}.txt"
            np.savetxt(file_name, np.column_stack((z, result.profile[s])))

    summary = {
        "z": z,
        "profile": result.profile,
        "bulk_densities": bulk_state,
        "residual": result.residual,
        "iterations": result.iterations,
        "state": result.state.value,
        "adsorption": gamma,
        "molecule_numbers": numbers,
    }
    out_file = export_json(ctx, summary, "one_d_profiles.json")
    if out_file is not None:
        print(f"✅ Density profiles exported to {out_file}")

    if plots is not None:
        plots.mkdir(parents=True, exist_ok=True)
        line_styles = ['-', '--', '-.', ':']
        colors = ['b', 'g', 'r', 'c', 'm', 'y', 'k']

        plt.figure(figsize=(12, 8), dpi=300)
        for i, s in enumerate(segments):
            style = line_styles[i % len(line_styles)]
            color = colors[i % len(colors)]
            plt.plot(z, result.profile[s], linestyle=style, color=color, label=f'Segment {s}')
        plt.xlabel('z')
        plt.ylabel('Density distribution')
        plt.title('Density distribution for different segments')
        plt.grid(True)
        plt.legend()
        plt.savefig(plots / 'vis_rho_distribution.png')
        plt.close()

    print(f"\n ✅ One-d profile executor finished in state '{result.state.value}' after {result.iterations} iteration(s).\n")

    return result
