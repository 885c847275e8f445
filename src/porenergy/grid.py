import itertools
import logging

import numpy as np

from .vdw import vdw_energy

logger = logging.getLogger(__name__)


def unitcell_energy(framework, molecule, ljforcefield, repfactors, mesh=(50, 50, 50)):
    """
    Van der Waals energy map over the home unit cell.

    The molecule (its copy) is centered on every point of a fractional
    linspace(0, 1, mesh[j]) grid; `molecule` itself is left untouched.
    Returns energy (mesh[0], mesh[1], mesh[2]) in Kelvin, inf where the
    guest overlaps the framework.
    """
    mesh = tuple(int(n) for n in mesh)
    if len(mesh) != 3 or min(mesh) < 1:
        raise ValueError(f"mesh must be 3 positive integers, got {mesh}")
    axes = [np.linspace(0.0, 1.0, n) for n in mesh]
    energy = np.zeros(mesh)

    probe = molecule.copy()
    for i, j, k in itertools.product(*(range(n) for n in mesh)):
        xf = np.array([axes[0][i], axes[1][j], axes[2][k]])
        probe.translate_to(framework.box.to_cartesian(xf))
        energy[i, j, k] = vdw_energy(framework, probe, ljforcefield, repfactors)

    logger.debug("Energy map %s: %d overlapping points", mesh, int(np.sum(np.isinf(energy))))
    return energy
