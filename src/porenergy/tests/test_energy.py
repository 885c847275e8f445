import logging
import math

import numpy as np
import pytest
from porenergy.box import Box
from porenergy.config import EwaldParams
from porenergy.energy import AdsorptionEnergy
from porenergy.ewald import KvectorCache, electrostatic_potential_energy
from porenergy.forcefield import LennardJonesForceField
from porenergy.system import Framework, Molecule
from porenergy.vdw import vdw_energy, vdw_energy_molecules


def _setup():
    framework = Framework(Box.cubic(12.0), [[0.0, 0.0, 0.0], [0.5, 0.5, 0.5]], ["Na", "Cl"], [1.0, -1.0])
    ljff = LennardJonesForceField.from_mixing_rules(
        {"Na": 2.6, "Cl": 4.4, "X": 3.0}, {"Na": 50.0, "Cl": 120.0, "X": 80.0}, cutoff_radius=10.0
    )
    ewald = EwaldParams(alpha=0.3, sr_cutoff_radius=10.0, k_repfactors=(4, 4, 4))
    return framework, ljff, ewald


def _dipole(center):
    center = np.asarray(center, float)
    return Molecule(
        ["X", "X"],
        [center - [0.5, 0.0, 0.0], center + [0.5, 0.0, 0.0]],
        [0.3, -0.3],
        [center - [0.5, 0.0, 0.0], center + [0.5, 0.0, 0.0]],
    )


def test_repfactors_chosen_from_largest_cutoff():
    framework, ljff, ewald = _setup()
    model = AdsorptionEnergy(framework, ljff, ewald=ewald)
    assert model.repfactors == (2, 2, 2)
    assert model.sim_box.volume == pytest.approx(24.0**3)
    model = AdsorptionEnergy(framework, ljff, ewald=EwaldParams(0.25, 14.0, 4))
    assert model.repfactors == (3, 3, 3)


def test_too_small_supercell_rejected():
    framework, ljff, ewald = _setup()
    with pytest.raises(ValueError, match="too small"):
        AdsorptionEnergy(framework, ljff, repfactors=(1, 1, 1), ewald=ewald)
    model = AdsorptionEnergy(framework, ljff, repfactors=(1, 1, 1), ewald=ewald, check_cutoff=False)
    assert model.repfactors == (1, 1, 1)


def test_guest_host_terms():
    framework, ljff, ewald = _setup()
    model = AdsorptionEnergy(framework, ljff, ewald=ewald)
    molecule = _dipole([3.0, 2.5, 2.0])
    stats = model.guest_host(molecule)

    assert stats["vdw"] == pytest.approx(vdw_energy(framework, molecule, ljff, (2, 2, 2)))
    expected = electrostatic_potential_energy(
        framework, molecule, model.sim_box, (2, 2, 2), 10.0, model.kvectors, 0.3
    )
    assert stats["electrostatic"] == pytest.approx(expected)
    assert stats["total"] == pytest.approx(stats["vdw"] + stats["electrostatic"])
    assert np.isfinite(stats["total"])


def test_guest_host_overlap_skips_electrostatics():
    framework, ljff, ewald = _setup()
    model = AdsorptionEnergy(framework, ljff, ewald=ewald)
    # the positive end sits exactly on the cation: the Ewald term would be singular
    molecule = _dipole([0.5, 0.0, 0.0])
    stats = model.guest_host(molecule)
    assert stats == {"vdw": np.inf, "electrostatic": np.inf, "total": np.inf}


def test_no_ewald_means_no_electrostatics():
    framework, ljff, _ = _setup()
    model = AdsorptionEnergy(framework, ljff)
    assert model.kvectors is None
    stats = model.guest_host(_dipole([3.0, 2.5, 2.0]))
    assert stats["electrostatic"] == 0.0
    assert stats["total"] == stats["vdw"]


def test_guest_guest_terms():
    framework, ljff, ewald = _setup()
    model = AdsorptionEnergy(framework, ljff, ewald=ewald)
    molecules = [_dipole([3.0, 2.5, 2.0]), _dipole([3.0, 6.5, 2.0]), _dipole([9.0, 9.0, 9.0])]
    stats = model.guest_guest(molecules, 0)
    assert stats["vdw"] == pytest.approx(vdw_energy_molecules(molecules, 0, ljff, model.sim_box))
    assert stats["vdw"] < 0.0
    assert np.isfinite(stats["electrostatic"])
    assert stats["total"] == pytest.approx(stats["vdw"] + stats["electrostatic"])

    molecules.append(_dipole([3.0, 2.5, 2.0]))
    assert np.isinf(model.guest_guest(molecules, 0)["total"])


def test_shared_kvector_cache():
    framework, ljff, ewald = _setup()
    cache = KvectorCache()
    m1 = AdsorptionEnergy(framework, ljff, ewald=ewald, kvector_cache=cache)
    m2 = AdsorptionEnergy(framework, ljff, ewald=ewald, kvector_cache=cache)
    assert m1.kvectors is m2.kvectors
    assert len(cache) == 1


def test_charged_framework_warns(caplog):
    _, ljff, ewald = _setup()
    framework = Framework(Box.cubic(12.0), [[0.0, 0.0, 0.0]], ["Na"], [1.0])
    with caplog.at_level(logging.WARNING, logger="porenergy.energy"):
        AdsorptionEnergy(framework, ljff, ewald=ewald)
    assert "net charge" in caplog.text


def test_ewald_params_from_dict():
    params = EwaldParams.from_dict({"ewald_alpha": 0.25, "ewald_r_real": 10.0, "ewald_kmax": 4})
    assert params.alpha == 0.25
    assert params.sr_cutoff_radius == 10.0
    assert params.k_repfactors == (4, 4, 4)
    assert EwaldParams.from_dict({}) == EwaldParams()


@pytest.mark.parametrize(
    "kwargs",
    [dict(alpha=0.0), dict(sr_cutoff_radius=-1.0), dict(k_repfactors=(1, -1, 1)), dict(k_repfactors=(1, 1))],
)
def test_ewald_params_validation(kwargs):
    with pytest.raises(ValueError):
        EwaldParams(**kwargs)


def test_ewald_params_from_tolerance():
    params = EwaldParams.from_tolerance(12.0, Box.cubic(24.0), tolerance=1e-6)
    assert params.alpha == pytest.approx(math.sqrt(-math.log(1e-6)) / 12.0)
    assert params.k_repfactors == (9, 9, 9)


def test_guest_host_dummy_charge_on_framework_charge_raises():
    framework, ljff, ewald = _setup()
    model = AdsorptionEnergy(framework, ljff, ewald=ewald)
    # LJ sites well clear of the framework, charge-only site on the anion
    molecule = Molecule(["X", "X"], [[6.0, 6.0, 4.0], [6.0, 6.0, 8.0]], [-0.2], [[6.0, 6.0, 6.0]])
    assert np.isfinite(model.vdw(molecule))
    with pytest.raises(ValueError, match="point charge"):
        model.guest_host(molecule)
