import itertools
import logging

import numpy as np

from .constants import R_OVERLAP_SQUARED
from .pbc import _as_repfactors, nearest_image, wrap_fractional

logger = logging.getLogger(__name__)


def lennard_jones(r_squared, sigma_squared, epsilon):
    """
    12-6 Lennard-Jones energy (Kelvin) from squared distance(s) r_squared,
    squared sigma(s) and epsilon(s); all arguments broadcast.
    """
    ratio = (sigma_squared / r_squared) ** 3
    return 4.0 * epsilon * (ratio * ratio - ratio)


def vdw_energy(framework, molecule, ljforcefield, repfactors, r_overlap_squared=R_OVERLAP_SQUARED):
    """
    Van der Waals energy (Kelvin) of `molecule` with the framework supercell
    built from `repfactors` copies of the home cell.

    Every replica (nA, nB, nC) of every framework atom is paired with every
    molecule atom; the nearest image within the supercell is used.
    Returns np.inf as soon as any pair is closer than sqrt(r_overlap_squared).
    """
    r = _as_repfactors(repfactors)
    f_to_c = framework.box.f_to_c
    # molecule atoms in fractional coords of the home cell, wrapped into the supercell
    xf_molecule = wrap_fractional(framework.box.to_fractional(molecule.x), r)
    sigmas_squared, epsilons = ljforcefield.pair_table(molecule.atoms, framework.atoms)

    energy = 0.0
    for n in itertools.product(*(range(int(v)) for v in r)):
        # (n_molecule_atoms, n_framework_atoms, 3)
        dxf = xf_molecule[:, None, :] - (framework.xf[None, :, :] + np.asarray(n, float))
        dx = nearest_image(dxf, r) @ f_to_c.T
        r2 = np.sum(dx * dx, axis=-1)

        if np.any(r2 < r_overlap_squared):
            logger.debug("Overlap with framework replica %s (min r^2 = %.3g)", n, r2.min())
            return np.inf
        inside = r2 < ljforcefield.cutoffradius_squared
        if np.any(inside):
            energy += float(np.sum(lennard_jones(r2[inside], sigmas_squared[inside], epsilons[inside])))
    return energy


def vdw_energy_molecules(molecules, molecule_id, ljforcefield, sim_box, r_overlap_squared=R_OVERLAP_SQUARED):
    """
    Van der Waals energy (Kelvin) between molecules[molecule_id] and every
    other molecule, using the single-cell minimum image in `sim_box`.
    Returns np.inf on overlap.
    """
    molecule_id = range(len(molecules))[molecule_id]
    molecule = molecules[molecule_id]
    energy = 0.0
    for i, other in enumerate(molecules):
        if i == molecule_id or other.n_atoms == 0:
            continue
        dxf = sim_box.to_fractional(molecule.x[:, None, :] - other.x[None, :, :])
        dx = nearest_image(dxf, (1, 1, 1)) @ sim_box.f_to_c.T
        r2 = np.sum(dx * dx, axis=-1)

        if np.any(r2 < r_overlap_squared):
            logger.debug("Overlap between molecules %d and %d", molecule_id, i)
            return np.inf
        inside = r2 < ljforcefield.cutoffradius_squared
        if np.any(inside):
            sigmas_squared, epsilons = ljforcefield.pair_table(molecule.atoms, other.atoms)
            energy += float(np.sum(lennard_jones(r2[inside], sigmas_squared[inside], epsilons[inside])))
    return energy
