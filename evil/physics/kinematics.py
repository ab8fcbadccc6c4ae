"""
# kinematics.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""
Kinematic transforms of four-momenta.

All functions take a four-vector ordered as (E, px, py, pz), or an array of
shape (N, 4) with the same column order, and return a float or an array of
length N respectively.

Unphysical input (E <= |pz|, E == 0, ...) is not masked here: rapidity then
comes out as NaN or +-inf and it is up to the caller to reject it.
"""
from typing import Sequence, Tuple, Union

import numpy as np

FourMomentum = Tuple[float, float, float, float]
ArrayLike = Union[Sequence[float], np.ndarray]

# Column indices
E, PX, PY, PZ = 0, 1, 2, 3


def _components(p: ArrayLike) -> np.ndarray:
    p = np.asarray(p, dtype=np.float64)
    if p.shape[-1] != 4:
        raise ValueError(f"Expected four-vector(s) with 4 components, got shape {p.shape}")
    return p


def pt2(p: ArrayLike) -> Union[float, np.ndarray]:
    """Transverse momentum squared, px^2 + py^2."""
    p = _components(p)
    return p[..., PX] * p[..., PX] + p[..., PY] * p[..., PY]


def pt(p: ArrayLike) -> Union[float, np.ndarray]:
    """Transverse momentum."""
    return np.sqrt(pt2(p))


def rapidity(p: ArrayLike) -> Union[float, np.ndarray]:
    """Rapidity y = atanh(pz / E)."""
    p = _components(p)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.arctanh(p[..., PZ] / p[..., E])


def azimuthal_angle(p: ArrayLike) -> Union[float, np.ndarray]:
    """Azimuthal angle atan2(py, px) in (-pi, pi]."""
    p = _components(p)
    return np.arctan2(p[..., PY], p[..., PX])


def invariant_mass(p: ArrayLike) -> Union[float, np.ndarray]:
    """Invariant mass, clipped at zero for (numerically) spacelike vectors."""
    p = _components(p)
    m2 = p[..., E] ** 2 - p[..., PX] ** 2 - p[..., PY] ** 2 - p[..., PZ] ** 2
    return np.sqrt(np.maximum(m2, 0.0))


def add(p: ArrayLike, q: ArrayLike) -> FourMomentum:
    """Component-wise sum of two four-vectors."""
    return (
        float(p[E]) + float(q[E]),
        float(p[PX]) + float(q[PX]),
        float(p[PY]) + float(q[PY]),
        float(p[PZ]) + float(q[PZ]),
    )


def from_pt_y_phi(pt: float, y: float, phi: float) -> FourMomentum:
    """Massless four-vector with the given transverse momentum, rapidity and angle."""
    return (
        float(pt * np.cosh(y)),
        float(pt * np.cos(phi)),
        float(pt * np.sin(phi)),
        float(pt * np.sinh(y)),
    )


def delta_phi(phi1: ArrayLike, phi2: ArrayLike) -> Union[float, np.ndarray]:
    """Difference phi1 - phi2 wrapped into (-pi, pi]."""
    d = np.asarray(phi1, dtype=np.float64) - np.asarray(phi2, dtype=np.float64)
    return np.pi - np.mod(np.pi - d, 2 * np.pi)


def delta_r2(y1: ArrayLike, phi1: ArrayLike, y2: ArrayLike, phi2: ArrayLike) -> Union[float, np.ndarray]:
    """Squared angular separation Delta y^2 + Delta phi^2 with periodic phi."""
    dy = np.asarray(y1, dtype=np.float64) - np.asarray(y2, dtype=np.float64)
    dphi = delta_phi(phi1, phi2)
    return dy * dy + dphi * dphi
