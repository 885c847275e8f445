import math

import numpy as np
import pytest
from porenergy.box import Box, check_repfactors, replication_factors


def test_transforms_are_inverse():
    box = Box.from_lattice_parameters(10.0, 12.0, 9.0, 80.0, 95.0, 110.0)
    assert np.allclose(box.f_to_c @ box.c_to_f, np.eye(3))
    assert box.volume > 0.0
    xf = np.array([[0.1, 0.2, 0.3], [0.9, 0.5, 0.0]])
    assert np.allclose(box.to_fractional(box.to_cartesian(xf)), xf)


def test_reciprocal_lattice_is_dual():
    box = Box.from_lattice_parameters(10.0, 12.0, 9.0, 80.0, 95.0, 110.0)
    assert np.allclose(box.reciprocal_lattice.T @ box.f_to_c, 2.0 * math.pi * np.eye(3))


def test_cubic_box():
    box = Box.cubic(10.0)
    assert box.volume == pytest.approx(1000.0)
    assert np.allclose(box.perpendicular_widths, [10.0, 10.0, 10.0])
    assert np.allclose(box.c_to_f, 0.1 * np.eye(3))


def test_box_arrays_are_read_only():
    box = Box.cubic(10.0)
    with pytest.raises(ValueError):
        box.f_to_c[0, 0] = 1.0


@pytest.mark.parametrize(
    "f_to_c",
    [np.zeros((3, 3)), np.diag([1.0, 1.0, -1.0]), np.eye(2), np.diag([1.0, np.nan, 1.0])],
)
def test_malformed_box_fails_fast(f_to_c):
    with pytest.raises(ValueError):
        Box(f_to_c)


def test_degenerate_angles_fail():
    with pytest.raises(ValueError):
        Box.from_lattice_parameters(1.0, 1.0, 1.0, 60.0, 60.0, 150.0)
    with pytest.raises(ValueError):
        Box.from_lattice_parameters(-1.0, 1.0, 1.0)


def test_replicate():
    sim_box = Box.cubic(10.0).replicate((2, 3, 1))
    assert sim_box.volume == pytest.approx(6000.0)
    assert np.allclose(sim_box.perpendicular_widths, [20.0, 30.0, 10.0])


def test_replication_factors_orthorhombic():
    box = Box.orthorhombic(10.0, 20.0, 30.0)
    assert replication_factors(box, 12.5) == (3, 2, 1)
    check_repfactors(box, (3, 2, 1), 12.5)
    with pytest.raises(ValueError):
        check_repfactors(box, (2, 2, 1), 12.5)


def test_replication_factors_triclinic():
    box = Box.from_lattice_parameters(10.0, 10.0, 10.0, 90.0, 90.0, 60.0)
    assert np.allclose(box.perpendicular_widths, [10.0 * math.sqrt(0.75)] * 2 + [10.0])
    assert replication_factors(box, 5.0) == (2, 2, 1)


def test_check_repfactors_rejects_non_positive():
    with pytest.raises(ValueError):
        check_repfactors(Box.cubic(30.0), (0, 1, 1), 5.0)


def test_box_equality_follows_geometry():
    assert Box.cubic(10.0) == Box.cubic(10.0)
    assert hash(Box.cubic(10.0)) == hash(Box.cubic(10.0))
    assert Box.cubic(10.0) != Box.cubic(11.0)
    assert Box.cubic(10.0) != "cubic"
    assert len({Box.cubic(10.0), Box.cubic(10.0), Box.orthorhombic(10.0, 10.0, 12.0)}) == 2
