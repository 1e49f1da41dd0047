from .molecule_configuration import molecule_configuration
from .profile_simulation_configuration import profile_simulation_configuration, DEFAULT_PROFILE_PARAMETERS
