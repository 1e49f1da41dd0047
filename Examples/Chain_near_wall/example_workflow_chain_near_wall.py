# Density profiles of a solvent, a homosegmented polymer and a three-segment
# surfactant next to a planar wall, run once through the executor and once
# through the solver API directly.

import json
from pathlib import Path

from dft_profiles.executor_dft_main import main
from dft_profiles.generators.grids_properties.k_and_r_space_box import r_k_space_box
from dft_profiles.generators.grids_properties.external_potential_grid import external_potential_grid
from dft_profiles.generators.parameters.molecule_configuration import molecule_configuration
from dft_profiles.calculators.total_free_energy.total_free_energy import total_free_energy
from dft_profiles.calculators.one_d_profile_iterator.damping import FixedDamping
from dft_profiles.calculators.one_d_profile_iterator.picard_iterator import solve
from dft_profiles.calculators.profile_observables.observables import adsorption

here = Path(__file__).parent
input_file = here / "input.json"

# 1) executor: writes scratch/ and plots/ next to the input file
main([str(input_file)])

# 2) the same problem through the API
config = json.loads(input_file.read_text())
grid = r_k_space_box(None, config, export_json_file=False)
graphs, bulk = molecule_configuration(config)
external = external_potential_grid(None, config, grid, graphs, export_json_file=False)
oracle = total_free_energy(config, graphs, bulk, grid)

result = solve(
    None, bulk, external, graphs, oracle,
    damping=FixedDamping(0.05),
    tolerance=1e-8,
    max_iterations=5000,
    grid=grid,
    log_period=100,
    verbose=True,
)

for segment, gamma in adsorption(result.profile, bulk, grid).items():
    print(f"Adsorption of {segment}: {gamma:.5f}")
