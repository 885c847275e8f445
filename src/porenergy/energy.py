import logging

import numpy as np

from .box import check_repfactors, replication_factors
from .constants import R_OVERLAP_SQUARED
from .ewald import (
    KvectorCache,
    electrostatic_potential_energy,
    electrostatic_potential_energy_molecules,
)
from .vdw import vdw_energy, vdw_energy_molecules

logger = logging.getLogger(__name__)


class AdsorptionEnergy:
    """
    Guest energies in a fixed framework.

    Holds the read-only context shared by every evaluation: framework,
    Lennard-Jones force field, replication factors, simulation box and the
    cached Ewald k-vectors. Molecules are passed per call.

    repfactors: None picks the smallest supercell that fits the largest
        cutoff (LJ and, if given, Ewald real space).
    ewald: EwaldParams, or None to skip electrostatics.
    check_cutoff: raise ValueError if repfactors are too small for the cutoffs.
    """

    def __init__(
        self,
        framework,
        ljforcefield,
        repfactors=None,
        ewald=None,
        check_cutoff=True,
        r_overlap_squared=R_OVERLAP_SQUARED,
        kvector_cache=None,
    ):
        self.framework = framework
        self.ljforcefield = ljforcefield
        self.ewald = ewald
        self.r_overlap_squared = float(r_overlap_squared)

        cutoff = ljforcefield.cutoff_radius
        if ewald is not None:
            cutoff = max(cutoff, ewald.sr_cutoff_radius)
        if repfactors is None:
            repfactors = replication_factors(framework.box, cutoff)
        elif check_cutoff:
            check_repfactors(framework.box, repfactors, cutoff)
        self.repfactors = tuple(int(v) for v in repfactors)
        self.sim_box = framework.box.replicate(self.repfactors)

        self.kvectors = None
        self._charged = None
        if ewald is not None:
            if not framework.is_charge_neutral():
                logger.warning(
                    "Framework net charge is %.6f e; the Ewald sum omits k = 0, "
                    "so the potential carries an alpha-dependent offset.",
                    framework.net_charge,
                )
            cache = KvectorCache() if kvector_cache is None else kvector_cache
            self.kvectors = cache.get(self.sim_box, ewald.k_repfactors, ewald.alpha, ewald.epsilon0)
            self._charged = framework.charged_atoms()

        logger.info(
            "AdsorptionEnergy: %d framework atoms, repfactors %s, %s k-vectors",
            framework.n_atoms,
            self.repfactors,
            "no" if self.kvectors is None else len(self.kvectors),
        )

    def vdw(self, molecule):
        return vdw_energy(
            self.framework, molecule, self.ljforcefield, self.repfactors,
            r_overlap_squared=self.r_overlap_squared,
        )

    def electrostatic(self, molecule):
        if self.ewald is None or molecule.n_charges == 0 or self._charged.n_atoms == 0:
            return 0.0
        return electrostatic_potential_energy(
            self._charged,
            molecule,
            self.sim_box,
            self.repfactors,
            self.ewald.sr_cutoff_radius,
            self.kvectors,
            self.ewald.alpha,
            epsilon0=self.ewald.epsilon0,
            r_overlap_squared=self.r_overlap_squared,
        )

    def guest_host(self, molecule):
        """
        Returns {"vdw", "electrostatic", "total"} in Kelvin, inf everywhere
        when a Lennard-Jones site overlaps the framework.
        Raises ValueError when a point charge of the molecule sits on a
        framework charge without any Lennard-Jones overlap (e.g. a dummy
        charge site).
        """
        U_vdw = self.vdw(molecule)
        if np.isinf(U_vdw):
            return {"vdw": np.inf, "electrostatic": np.inf, "total": np.inf}
        U_es = self.electrostatic(molecule)
        return {"vdw": U_vdw, "electrostatic": U_es, "total": U_vdw + U_es}

    def guest_guest(self, molecules, molecule_id):
        """Same keys as guest_host for molecules[molecule_id] against the others."""
        U_vdw = vdw_energy_molecules(
            molecules, molecule_id, self.ljforcefield, self.sim_box,
            r_overlap_squared=self.r_overlap_squared,
        )
        if np.isinf(U_vdw):
            return {"vdw": np.inf, "electrostatic": np.inf, "total": np.inf}
        U_es = 0.0
        if self.ewald is not None:
            U_es = electrostatic_potential_energy_molecules(
                molecules,
                molecule_id,
                self.sim_box,
                self.ewald.sr_cutoff_radius,
                self.kvectors,
                self.ewald.alpha,
                epsilon0=self.ewald.epsilon0,
                r_overlap_squared=self.r_overlap_squared,
            )
        return {"vdw": U_vdw, "electrostatic": U_es, "total": U_vdw + U_es}
