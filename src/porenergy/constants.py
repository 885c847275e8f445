"""
Unit system: distances in Angstrom, energies in Kelvin (energy / k_B),
charges in electron charges.
"""

# vacuum permittivity: 8.854187817e-12 C^2/(J m) converted with
# 1 m = 1e10 A, 1 e = 1.602176e-19 C, k_B = 1.3806488e-23 J/K
EPSILON_0 = 4.7622424954949676e-7  # e^2 / (A K)

# pairs closer than this are an overlap (0.01 A)
R_OVERLAP_SQUARED = 1.0e-4  # A^2
