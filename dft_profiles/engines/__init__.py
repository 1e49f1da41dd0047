"""
Engines subpackage

Executors wiring a configuration dictionary to the calculators
and exporting the files to the scratch and plots directories.
"""


from .one_d_profile import one_d_profile_executor
