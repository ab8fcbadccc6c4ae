"""
# distance.py is a part of the EVIL package.
# Copyright (C) 2025 EVIL authors (see AUTHORS for details).
# EVIL is licensed under the GNU GPL v3 or later, see LICENSE for details.
# Please respect the MCnet Guidelines, see GUIDELINES for details.
"""
"""
Distance measures of the sequential recombination algorithms.

With Delta R^2 = Delta y^2 + Delta phi^2 (phi periodic) and radius R:

    kt:               d_ij = min(pt_i^2,  pt_j^2)  * Delta R^2 / R^2,   d_iB = pt_i^2
    anti-kt:          d_ij = min(pt_i^-2, pt_j^-2) * Delta R^2 / R^2,   d_iB = pt_i^-2
    Cambridge/Aachen: d_ij = Delta R^2 / R^2,                           d_iB = 1

The pair and beam functions operate on numpy arrays so that the clustering
engine can evaluate a whole row of distances at once.
"""
import enum
import functools
from typing import Callable

import attr
import numpy as np

from evil.clustering.pseudojet import PseudoJet
from evil.physics import kinematics


class JetAlgorithm(enum.Enum):
    ANTI_KT = "anti-kt"
    KT = "kt"
    CAMBRIDGE_AACHEN = "Cambridge/Aachen"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, value) -> "JetAlgorithm":
        """Parse an algorithm from its display name or a common short name."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "").replace("-", "").replace("/", "")
        try:
            return _ALGORITHM_ALIASES[key]
        except KeyError:
            raise ValueError(
                f"Unsupported algorithm '{value}'. Use one of {[str(a) for a in cls]}"
            ) from None


_ALGORITHM_ALIASES = {
    "antikt": JetAlgorithm.ANTI_KT,
    "kt": JetAlgorithm.KT,
    "ca": JetAlgorithm.CAMBRIDGE_AACHEN,
    "cambridgeaachen": JetAlgorithm.CAMBRIDGE_AACHEN,
    "cambridge": JetAlgorithm.CAMBRIDGE_AACHEN,
}


def kt_distance(pt2_i: np.ndarray, pt2_j: np.ndarray, delta_r2: np.ndarray, radius: float) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.minimum(pt2_i, pt2_j) * delta_r2 / (radius * radius)


def kt_beam_distance(pt2: np.ndarray) -> np.ndarray:
    return np.asarray(pt2, dtype=np.float64)


def anti_kt_distance(pt2_i: np.ndarray, pt2_j: np.ndarray, delta_r2: np.ndarray, radius: float) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.minimum(1.0 / pt2_i, 1.0 / pt2_j) * delta_r2 / (radius * radius)


def anti_kt_beam_distance(pt2: np.ndarray) -> np.ndarray:
    with np.errstate(divide="ignore"):
        return 1.0 / np.asarray(pt2, dtype=np.float64)


def cambridge_aachen_distance(pt2_i: np.ndarray, pt2_j: np.ndarray, delta_r2: np.ndarray, radius: float) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.zeros(np.broadcast(pt2_i, pt2_j).shape) + delta_r2 / (radius * radius)


def cambridge_aachen_beam_distance(pt2: np.ndarray) -> np.ndarray:
    return np.ones_like(np.asarray(pt2, dtype=np.float64))


_MEASURES = {
    JetAlgorithm.ANTI_KT: (anti_kt_distance, anti_kt_beam_distance),
    JetAlgorithm.KT: (kt_distance, kt_beam_distance),
    JetAlgorithm.CAMBRIDGE_AACHEN: (cambridge_aachen_distance, cambridge_aachen_beam_distance),
}


@attr.frozen
class DistanceMeasure:
    """Pair and beam distance of one algorithm at fixed radius.

    Attributes:
        algorithm: Algorithm the measure belongs to.
        radius: Jet radius R.
        pair_distance: Vectorised d_ij(pt2_i, pt2_j, delta_r2).
        beam_distance: Vectorised d_iB(pt2).
    """

    algorithm: JetAlgorithm
    radius: float
    pair_distance: Callable[[np.ndarray, np.ndarray, np.ndarray], np.ndarray]
    beam_distance: Callable[[np.ndarray], np.ndarray]

    def __call__(self, a: PseudoJet, b: PseudoJet) -> float:
        """Distance between two pseudojets."""
        dr2 = kinematics.delta_r2(a.rapidity, a.azimuthal_angle, b.rapidity, b.azimuthal_angle)
        return float(self.pair_distance(np.float64(a.pt2), np.float64(b.pt2), dr2))

    def beam(self, a: PseudoJet) -> float:
        """Distance between a pseudojet and the beam."""
        return float(self.beam_distance(np.float64(a.pt2)))


def distance_measure(algorithm, radius: float) -> DistanceMeasure:
    """Select the distance measure for an algorithm. Done once per clustering call."""
    algorithm = JetAlgorithm.from_name(algorithm)
    pair, beam = _MEASURES[algorithm]
    return DistanceMeasure(
        algorithm=algorithm,
        radius=float(radius),
        pair_distance=functools.partial(pair, radius=float(radius)),
        beam_distance=beam,
    )
