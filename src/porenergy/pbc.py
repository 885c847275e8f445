import numpy as np


def _as_repfactors(repfactors):
    """Return a float[3] array for the replication factors."""
    r = np.array([repfactors] * 3, float) if np.isscalar(repfactors) else np.asarray(repfactors, float)
    if r.shape != (3,):
        raise ValueError(f"repfactors must have 3 entries, got {r.shape}")
    return r


def nearest_image(dxf, repfactors=(1, 1, 1)):
    """
    Apply the nearest-image convention to fractional displacement(s) dxf
    inside a supercell made of repfactors[j] home cells along axis j.

    dxf: (3,) or (..., 3) fractional displacements
    Each axis is handled independently: if |dxf[j]| > repfactors[j] / 2,
    dxf[j] is shifted by -sign(dxf[j]) * repfactors[j].
    Returns the corrected copy; the input is not modified.
    """
    r = _as_repfactors(repfactors)
    dxf = np.asarray(dxf, float)
    return np.where(np.abs(dxf) > 0.5 * r, dxf - np.sign(dxf) * r, dxf)


def wrap_fractional(xf, repfactors=(1, 1, 1)):
    """
    Wrap fractional coordinates xf into [0, repfactors) in each dimension.
    np.mod can round a tiny negative value up to exactly repfactors; those
    entries are folded back to 0.
    """
    r = _as_repfactors(repfactors)
    xf = np.mod(np.asarray(xf, float), r)
    return np.where(xf >= r, xf - r, xf)
